"""
Data types for MSON models and System Runtime bundles.

MSON models are the input side: entities, attributes, methods and
relationships as created by a caller. System Runtime bundles are the
output side: a schema (structure) and a model (type overlay) per entity,
plus optional custom types, behaviors and component instances.
"""

import json
from typing import Any, ClassVar, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

Visibility = Literal["public", "private", "protected"]
EntityType = Literal["class", "interface", "enum", "component", "actor"]
ModelType = Literal["class", "component", "deployment", "usecase"]
RelationshipType = Literal[
    "association",
    "inheritance",
    "implementation",
    "dependency",
    "aggregation",
    "composition",
]
SchemaKind = Literal["property", "link", "collection", "method"]
Severity = Literal["warning", "error"]


# ============================================================================
# MSON Model (input)
# ============================================================================

class MsonAttribute(BaseModel):
    name: str
    type: str
    visibility: Visibility = "public"
    isStatic: bool = False
    isReadOnly: bool = False


class MsonParameter(BaseModel):
    name: str
    type: str


class MsonMethod(BaseModel):
    name: str
    parameters: List[MsonParameter] = Field(default_factory=list)
    returnType: str = "void"
    visibility: Visibility = "public"
    isStatic: bool = False
    isAbstract: bool = False


class MsonEntity(BaseModel):
    id: str
    name: str
    type: EntityType
    attributes: List[MsonAttribute] = Field(default_factory=list)
    methods: List[MsonMethod] = Field(default_factory=list)
    stereotype: Optional[str] = None
    namespace: Optional[str] = None
    values: Optional[List[str]] = None


class MsonMultiplicity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None


class MsonRelationship(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    from_: str = Field(..., alias="from")
    to: str
    type: RelationshipType
    multiplicity: Optional[MsonMultiplicity] = None
    name: Optional[str] = None


class MsonModel(BaseModel):
    id: str
    name: str
    type: ModelType
    description: Optional[str] = None
    entities: List[MsonEntity] = Field(default_factory=list)
    relationships: List[MsonRelationship] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Dump using wire names ("from", not "from_") and without unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True)


def as_mson_model(model: Union[MsonModel, Dict[str, Any]]) -> MsonModel:
    """Accept either a parsed model or its JSON-compatible dict form."""
    if isinstance(model, MsonModel):
        return model
    return MsonModel.model_validate(model)


# ============================================================================
# System Runtime Bundle (output)
# ============================================================================

class _FlatRecord(BaseModel):
    """
    Base for records that carry fixed identity keys plus arbitrary
    dynamically-named fields.

    On the wire the dynamic fields sit next to ``_id``/``_name``; in Python
    they live in ``members`` so the fixed and open-ended parts stay separate.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    fixed_keys: ClassVar[Tuple[str, ...]] = ("_id", "_name")

    id: str = Field(..., alias="_id")
    name: str = Field(..., alias="_name")
    members: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _collect_members(cls, data: Any) -> Any:
        # Flat wire form is recognised by its "_id" key.
        if not isinstance(data, dict) or "_id" not in data:
            return data
        collected = {key: data[key] for key in cls.fixed_keys if key in data}
        collected["members"] = {
            key: value for key, value in data.items() if key not in cls.fixed_keys
        }
        return collected

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"_id": self.id, "_name": self.name}
        out.update(self.members)
        return out


class RuntimeSchema(_FlatRecord):
    """Structural declaration of one component: field name -> kind marker."""

    fixed_keys: ClassVar[Tuple[str, ...]] = ("_id", "_name", "_inherit")

    inherit: Optional[List[str]] = Field(None, alias="_inherit")

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"_id": self.id, "_name": self.name}
        if self.inherit is not None:
            out["_inherit"] = list(self.inherit)
        out.update(self.members)
        return out


class RuntimeModel(_FlatRecord):
    """Type overlay of one component: field name -> type, [type] or signature."""


class RuntimeType(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., alias="_id")
    name: str = Field(..., alias="_name")
    type: Union[List[str], Dict[str, str]]


class RuntimeBehavior(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., alias="_id")
    component: str
    state: str
    action: str
    useCoreAPI: bool = False
    core: bool = False


class RuntimeComponent(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="allow")

    id: str = Field(..., alias="_id")


class RuntimeBundle(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str = Field(..., alias="_id")
    name: str
    description: str = ""
    version: str
    master: bool = False
    schemas: Dict[str, RuntimeSchema]
    models: Dict[str, RuntimeModel]
    types: Dict[str, RuntimeType] = Field(default_factory=dict)
    behaviors: Dict[str, RuntimeBehavior] = Field(default_factory=dict)
    components: Dict[str, Dict[str, RuntimeComponent]] = Field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the JSON structure consumed by System Runtime."""
        return {
            "_id": self.id,
            "name": self.name,
            "description": self.description,
            "version": self.version,
            "master": self.master,
            "schemas": {key: schema.to_dict() for key, schema in self.schemas.items()},
            "models": {key: model.to_dict() for key, model in self.models.items()},
            "types": {key: t.model_dump(by_alias=True) for key, t in self.types.items()},
            "behaviors": {key: b.model_dump(by_alias=True) for key, b in self.behaviors.items()},
            "components": {
                component_type: {
                    key: instance.model_dump(by_alias=True)
                    for key, instance in instances.items()
                }
                for component_type, instances in self.components.items()
            },
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


# ============================================================================
# Validation results
# ============================================================================

class ValidationWarning(BaseModel):
    """A single finding produced by model or bundle validation."""

    message: str
    severity: Severity
    type: Optional[str] = None
    entityId: Optional[str] = None


class BundleValidationResult(BaseModel):
    isValid: bool
    warnings: List[ValidationWarning] = Field(default_factory=list)
    bundle: Optional[RuntimeBundle] = None

    @property
    def errors(self) -> List[ValidationWarning]:
        return [w for w in self.warnings if w.severity == "error"]

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "isValid": self.isValid,
            "warnings": [w.model_dump(exclude_none=True) for w in self.warnings],
        }
        if self.bundle is not None:
            out["bundle"] = self.bundle.to_dict()
        return out


class ModelValidationResult(BaseModel):
    isValid: bool
    warnings: List[ValidationWarning] = Field(default_factory=list)
    model: Optional[MsonModel] = None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "isValid": self.isValid,
            "warnings": [w.model_dump(exclude_none=True) for w in self.warnings],
        }
        if self.model is not None:
            out["model"] = self.model.to_dict()
        return out
