"""
MSON to System Runtime transformation.

Every entity of an MSON model becomes two parallel declarations in the
bundle: a schema that marks each field as property, link, collection or
method, and a model that gives each field its concrete type. Relationships
contribute inherited schemas and link/collection fields on both ends.
"""

import logging
import uuid
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from system_designer.config import BASE_COMPONENT, BUNDLE_MASTER, DEFAULT_BUNDLE_VERSION
from system_designer.schema import (
    MsonAttribute,
    MsonEntity,
    MsonModel,
    MsonRelationship,
    RuntimeBundle,
    RuntimeModel,
    RuntimeSchema,
    SchemaKind,
    as_mson_model,
)

logger = logging.getLogger(__name__)

PRIMITIVE_TYPES = frozenset({"string", "number", "boolean", "date", "any", "object", "array"})
STRUCTURAL_RELATIONSHIPS = frozenset({"association", "aggregation", "composition"})
INHERITANCE_RELATIONSHIPS = frozenset({"inheritance", "implementation"})
RETURN_KEY = "=>"
# Wire keys of a schema/model record; fields with these names are not emitted
RESERVED_FIELDS = frozenset({"_id", "_name", "_inherit"})


def generate_id(prefix: str = "") -> str:
    """
    Generate a unique identifier for a bundle object.

    Args:
        prefix: Optional prefix ("sys", "s", "m", ...).

    Returns:
        The prefix followed by 32 hex characters.
    """
    return f"{prefix}{uuid.uuid4().hex}"


def is_many(multiplicity: Optional[str]) -> bool:
    """A multiplicity is many-valued when it contains "*" or a ".." range."""
    value = multiplicity or "1"
    return "*" in value or ".." in value


def _far_end_multiplicity(relationship: MsonRelationship, entity_id: str) -> Optional[str]:
    if relationship.multiplicity is None:
        return None
    if relationship.from_ == entity_id:
        return relationship.multiplicity.to
    return relationship.multiplicity.from_


def classify_attribute(
    attribute: MsonAttribute,
    relationships: List[MsonRelationship],
    entity_id: str,
) -> SchemaKind:
    """
    Decide whether an attribute is a property, a link or a collection.

    Primitive-typed attributes are always properties. Any other type is a
    reference: the first association, aggregation or composition the owning
    entity takes part in decides between link and collection through the
    multiplicity on its far end. Without such a relationship the reference
    is a plain link.

    Args:
        attribute: The attribute to classify.
        relationships: All relationships of the model.
        entity_id: Id of the entity owning the attribute.

    Returns:
        "property", "link" or "collection".
    """
    if attribute.type.lower() in PRIMITIVE_TYPES:
        return "property"

    related = next(
        (
            rel for rel in relationships
            if rel.type in STRUCTURAL_RELATIONSHIPS and entity_id in (rel.from_, rel.to)
        ),
        None,
    )
    if related is None:
        return "link"

    return "collection" if is_many(_far_end_multiplicity(related, entity_id)) else "link"


determine_attribute_kind = classify_attribute


def _index_entities(entities: List[MsonEntity]) -> Dict[str, MsonEntity]:
    index: Dict[str, MsonEntity] = {}
    for entity in entities:
        index.setdefault(entity.id, entity)
    return index


def _drop_reserved(entity: MsonEntity, members: Dict[str, Any]) -> Dict[str, Any]:
    for name in RESERVED_FIELDS.intersection(members):
        logger.debug(f"Skipping field '{name}' on '{entity.name}': name is a reserved key")
    return {name: value for name, value in members.items() if name not in RESERVED_FIELDS}


def _resolve_name(index: Dict[str, MsonEntity], entity_id: str) -> Tuple[str, bool]:
    entity = index.get(entity_id)
    if entity is None:
        logger.debug(f"Unresolved entity reference '{entity_id}', using raw id as name")
        return entity_id, False
    return entity.name, True


def _inherited_names(
    entity: MsonEntity,
    relationships: List[MsonRelationship],
    index: Dict[str, MsonEntity],
) -> List[str]:
    inherited = [BASE_COMPONENT]
    for rel in relationships:
        if rel.from_ != entity.id or rel.type not in INHERITANCE_RELATIONSHIPS:
            continue
        name, _ = _resolve_name(index, rel.to)
        if name not in inherited:
            inherited.append(name)
    return inherited


def _relationship_fields(
    entity: MsonEntity,
    relationships: List[MsonRelationship],
    index: Dict[str, MsonEntity],
) -> Iterator[Tuple[str, str, bool, bool]]:
    """
    Yield (field name, other entity name, is collection, is forward) for every
    structural relationship touching the entity.

    Forward fields come from relationships the entity is the source of and
    use the relationship name when given. Reverse fields are named after the
    source entity. A relationship already emitted forward is not emitted
    again in reverse, so a self-reference yields a single field.
    """
    processed = set()

    for rel in relationships:
        if rel.id in processed or rel.type not in STRUCTURAL_RELATIONSHIPS:
            continue

        if rel.from_ == entity.id:
            many = is_many(rel.multiplicity.to if rel.multiplicity else None)
            target_name, resolved = _resolve_name(index, rel.to)
            default_name = target_name.lower() if resolved else target_name
            field_name = rel.name or (f"{default_name}s" if many else default_name)
            processed.add(rel.id)
            yield field_name, target_name, many, True

        if rel.to == entity.id and rel.id not in processed:
            many = is_many(rel.multiplicity.from_ if rel.multiplicity else None)
            source_name, resolved = _resolve_name(index, rel.from_)
            default_name = source_name.lower() if resolved else source_name
            field_name = f"{default_name}s" if many else default_name
            processed.add(rel.id)
            yield field_name, source_name, many, False


def entity_to_schema(
    entity: MsonEntity,
    relationships: List[MsonRelationship],
    entities: List[MsonEntity],
) -> RuntimeSchema:
    """
    Convert an MSON entity to a System Runtime schema.

    Args:
        entity: The entity to convert.
        relationships: All relationships in the model.
        entities: All entities in the model (for name lookup).

    Returns:
        Schema with the inheritance list and a kind marker per field.
    """
    index = _index_entities(entities)
    members: Dict[str, str] = {}

    for attr in entity.attributes:
        members[attr.name] = classify_attribute(attr, relationships, entity.id)

    for method in entity.methods:
        members[method.name] = "method"

    for field_name, _, many, forward in _relationship_fields(entity, relationships, index):
        # Reverse fields never replace an attribute, method or earlier field.
        if forward or field_name not in members:
            members[field_name] = "collection" if many else "link"

    return RuntimeSchema(
        id=generate_id("s"),
        name=entity.name,
        inherit=_inherited_names(entity, relationships, index),
        members=_drop_reserved(entity, members),
    )


def entity_to_model(
    entity: MsonEntity,
    relationships: List[MsonRelationship],
    entities: List[MsonEntity],
) -> RuntimeModel:
    """
    Convert an MSON entity to a System Runtime model override.

    Args:
        entity: The entity to convert.
        relationships: All relationships in the model.
        entities: All entities in the model (for name lookup).

    Returns:
        Model with a concrete type, [type] or method signature per field.
    """
    index = _index_entities(entities)
    members: Dict[str, Union[str, List[str], Dict[str, str]]] = {}

    for attr in entity.attributes:
        kind = classify_attribute(attr, relationships, entity.id)
        members[attr.name] = [attr.type] if kind == "collection" else attr.type

    for method in entity.methods:
        signature = {RETURN_KEY: method.returnType}
        # A parameter literally named "=>" replaces the return type.
        signature.update({param.name: param.type for param in method.parameters})
        members[method.name] = signature

    for field_name, other_name, many, forward in _relationship_fields(entity, relationships, index):
        if forward or field_name not in members:
            members[field_name] = [other_name] if many else other_name

    return RuntimeModel(
        id=generate_id("m"),
        name=entity.name,
        members=_drop_reserved(entity, members),
    )


def generate_bundle_metadata(model: MsonModel, version: Optional[str] = None) -> Dict[str, object]:
    """
    Build the top-level bundle fields for a model.

    Args:
        model: The MSON model.
        version: Bundle version; DEFAULT_BUNDLE_VERSION when omitted.

    Returns:
        Dictionary with _id, name, description, version and master.
    """
    return {
        "_id": generate_id("sys"),
        "name": model.name,
        "description": model.description or f"System Runtime bundle for {model.name}",
        "version": version or DEFAULT_BUNDLE_VERSION,
        "master": BUNDLE_MASTER,
    }


def mson_to_runtime_bundle(
    model: Union[MsonModel, Dict[str, object]],
    version: Optional[str] = None,
) -> RuntimeBundle:
    """
    Convert an MSON model to a complete System Runtime bundle.

    Relationship endpoints are not checked here: unknown ids fall back to
    the raw id as a name and are left for the bundle validator to flag.

    Args:
        model: The MSON model, parsed or as a dict.
        version: Bundle version; DEFAULT_BUNDLE_VERSION when omitted.

    Returns:
        Bundle with one schema and one model per entity and an empty
        component map per entity name.
    """
    model = as_mson_model(model)
    metadata = generate_bundle_metadata(model, version)

    schemas: Dict[str, RuntimeSchema] = {}
    models: Dict[str, RuntimeModel] = {}
    components: Dict[str, dict] = {}

    for entity in model.entities:
        schema = entity_to_schema(entity, model.relationships, model.entities)
        model_def = entity_to_model(entity, model.relationships, model.entities)
        schemas[schema.id] = schema
        models[model_def.id] = model_def
        components[entity.name] = {}
        logger.debug(f"Transformed entity '{entity.name}' ({len(schema.members)} fields)")

    logger.info(
        f"Built System Runtime bundle '{model.name}' v{metadata['version']}: "
        f"{len(model.entities)} entities, {len(model.relationships)} relationships"
    )

    return RuntimeBundle(
        **metadata,
        schemas=schemas,
        models=models,
        types={},
        behaviors={},
        components=components,
    )
