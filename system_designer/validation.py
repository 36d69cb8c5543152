"""
Validation for MSON models and System Runtime bundles.

Both validators work in two phases: a shape check through the pydantic
models in ``system_designer.schema`` that stops at the first failure, then
a set of semantic checks that all run and collect their findings as
ValidationWarning entries instead of raising.
"""

import json
import logging
import re
from collections import Counter
from typing import Any, Dict, List, Optional, Set

from pydantic import ValidationError

from system_designer.config import BASE_COMPONENT
from system_designer.schema import (
    BundleValidationResult,
    ModelValidationResult,
    MsonModel,
    RuntimeBundle,
    RuntimeSchema,
    ValidationWarning,
)
from system_designer.transform import RETURN_KEY, generate_id

logger = logging.getLogger(__name__)

SEMVER_PATTERN = re.compile(r"^\d+\.\d+\.\d+(-[a-zA-Z0-9.-]+)?(\+[a-zA-Z0-9.-]+)?$")


def _error(message: str) -> ValidationWarning:
    return ValidationWarning(message=message, severity="error")


def _load_candidate(candidate: Any) -> Any:
    if isinstance(candidate, (str, bytes)):
        return json.loads(candidate)
    if isinstance(candidate, RuntimeBundle):
        return candidate.to_dict()
    if isinstance(candidate, MsonModel):
        return candidate.to_dict()
    return candidate


# ============================================================================
# System Runtime Bundle Validation
# ============================================================================

def validate_version(version: str) -> bool:
    """Check that a version string follows semantic versioning."""
    return bool(SEMVER_PATTERN.match(version))


def is_valid_runtime_bundle(candidate: Any) -> bool:
    """Shape check only, without the semantic checks."""
    try:
        RuntimeBundle.model_validate(_load_candidate(candidate))
    except (ValidationError, ValueError):
        return False
    return True


def validate_runtime_bundle(candidate: Any) -> BundleValidationResult:
    """
    Validate a System Runtime bundle.

    Args:
        candidate: A RuntimeBundle, its dict form, or a JSON string.

    Returns:
        BundleValidationResult. ``bundle`` is set whenever the shape check
        passes, even if semantic checks report errors.
    """
    try:
        bundle = RuntimeBundle.model_validate(_load_candidate(candidate))
    except (ValidationError, ValueError) as e:
        logger.info(f"Bundle rejected by shape check: {e}")
        return BundleValidationResult(
            isValid=False,
            warnings=[_error(f"Bundle schema validation failed: {e}")],
        )

    warnings: List[ValidationWarning] = []
    _check_schema_references(bundle, warnings)
    _check_component_types(bundle, warnings)
    _check_behavior_references(bundle, warnings)
    _check_unique_ids(bundle, warnings)
    _check_inheritance_chains(bundle, warnings)
    _check_method_signatures(bundle, warnings)
    _check_version(bundle, warnings)

    error_count = sum(1 for w in warnings if w.severity == "error")
    logger.info(
        f"Validated bundle '{bundle.name}': {error_count} errors, "
        f"{len(warnings) - error_count} warnings"
    )

    return BundleValidationResult(isValid=error_count == 0, warnings=warnings, bundle=bundle)


def _schema_names(bundle: RuntimeBundle) -> Set[str]:
    return {schema.name for schema in bundle.schemas.values()}


def _check_schema_references(bundle: RuntimeBundle, warnings: List[ValidationWarning]) -> None:
    schema_names = _schema_names(bundle)
    for model in bundle.models.values():
        if model.name not in schema_names:
            warnings.append(_error(f'Model "{model.name}" references non-existent schema'))


def _check_component_types(bundle: RuntimeBundle, warnings: List[ValidationWarning]) -> None:
    schema_names = _schema_names(bundle)
    for component_type in bundle.components:
        if component_type not in schema_names:
            warnings.append(
                _error(f'Component type "{component_type}" has no corresponding schema')
            )


def _check_behavior_references(bundle: RuntimeBundle, warnings: List[ValidationWarning]) -> None:
    schema_names = _schema_names(bundle)
    for behavior in bundle.behaviors.values():
        # A behavior may belong to the system itself or to a component schema
        if behavior.component != bundle.id and behavior.component not in schema_names:
            warnings.append(
                _error(f'Behavior references non-existent component "{behavior.component}"')
            )


def _check_unique_ids(bundle: RuntimeBundle, warnings: List[ValidationWarning]) -> None:
    seen: Set[str] = {bundle.id}

    def check(kind: str, object_id: str) -> None:
        if object_id in seen:
            warnings.append(_error(f"Duplicate {kind} ID found: {object_id}"))
        seen.add(object_id)

    for schema in bundle.schemas.values():
        check("schema", schema.id)
    for model in bundle.models.values():
        check("model", model.id)
    for type_def in bundle.types.values():
        check("type", type_def.id)
    for behavior in bundle.behaviors.values():
        check("behavior", behavior.id)
    for instances in bundle.components.values():
        for instance in instances.values():
            check("component", instance.id)


def _has_inheritance_cycle(start: str, schemas_by_name: Dict[str, RuntimeSchema]) -> bool:
    """Depth-first walk of the parents of ``start``, tracking the current path."""
    on_path: Set[str] = set()
    done: Set[str] = set()

    def dfs(name: str) -> bool:
        if name in on_path:
            return True
        if name in done:
            return False
        on_path.add(name)
        schema = schemas_by_name.get(name)
        for parent in (schema.inherit or []) if schema else []:
            if parent == BASE_COMPONENT:
                continue
            if dfs(parent):
                return True
        on_path.remove(name)
        done.add(name)
        return False

    return dfs(start)


def _check_inheritance_chains(bundle: RuntimeBundle, warnings: List[ValidationWarning]) -> None:
    schemas_by_name: Dict[str, RuntimeSchema] = {}
    for schema in bundle.schemas.values():
        schemas_by_name.setdefault(schema.name, schema)

    for schema in bundle.schemas.values():
        if not schema.inherit:
            continue

        if _has_inheritance_cycle(schema.name, schemas_by_name):
            warnings.append(_error(f'Circular inheritance detected for schema "{schema.name}"'))

        for parent in schema.inherit:
            if parent != BASE_COMPONENT and parent not in schemas_by_name:
                warnings.append(
                    _error(f'Schema "{schema.name}" inherits from non-existent schema "{parent}"')
                )


def _check_method_signatures(bundle: RuntimeBundle, warnings: List[ValidationWarning]) -> None:
    for model in bundle.models.values():
        for field_name, value in model.members.items():
            if not isinstance(value, dict) or RETURN_KEY not in value:
                continue
            if not isinstance(value[RETURN_KEY], str):
                warnings.append(
                    _error(f'Method "{field_name}" in model "{model.name}" has invalid return type')
                )
            for param_name, param_type in value.items():
                if param_name != RETURN_KEY and not isinstance(param_type, str):
                    warnings.append(
                        _error(
                            f'Method "{field_name}" in model "{model.name}" has invalid '
                            f'parameter type for "{param_name}"'
                        )
                    )


def _check_version(bundle: RuntimeBundle, warnings: List[ValidationWarning]) -> None:
    if not validate_version(bundle.version):
        warnings.append(
            ValidationWarning(
                message=f'Bundle version "{bundle.version}" is not a semantic version',
                severity="warning",
            )
        )


# ============================================================================
# MSON Model Validation
# ============================================================================

def ensure_unique_ids(data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill in missing model, entity and relationship ids on raw model data.

    Args:
        data: Model data as received from a caller.

    Returns:
        A copy with every empty id replaced (entity_<n>, relationship_<n>).
        A positional id already used by the caller is skipped in favour of
        the next free number.
    """
    filled = dict(data)
    if not filled.get("id"):
        filled["id"] = generate_id("model_")
    filled["entities"] = _fill_ids(filled.get("entities") or [], "entity_")
    filled["relationships"] = _fill_ids(filled.get("relationships") or [], "relationship_")
    return filled


def _fill_ids(items: List[Any], prefix: str) -> List[Any]:
    # Non-dict items are left for the shape check to reject.
    taken = {item.get("id") for item in items if isinstance(item, dict) and item.get("id")}
    result = []
    counter = 0
    for position, item in enumerate(items, start=1):
        if not isinstance(item, dict) or item.get("id"):
            result.append(item)
            continue
        counter = max(counter, position)
        candidate = f"{prefix}{counter}"
        while candidate in taken:
            counter += 1
            candidate = f"{prefix}{counter}"
        taken.add(candidate)
        result.append({**item, "id": candidate})
    return result


def validate_mson_model(candidate: Any) -> ModelValidationResult:
    """
    Validate an MSON model for consistency and completeness.

    Dangling relationship endpoints and duplicate names or ids are reported
    as warnings only; the transformation tolerates them.

    Args:
        candidate: An MsonModel, its dict form, or a JSON string.

    Returns:
        ModelValidationResult with the parsed model when the shape is valid.
    """
    try:
        model = MsonModel.model_validate(_load_candidate(candidate))
    except (ValidationError, ValueError) as e:
        return ModelValidationResult(
            isValid=False,
            warnings=[_error(f"Model validation failed: {e}")],
        )

    warnings: List[ValidationWarning] = []
    entity_ids = {entity.id for entity in model.entities}

    for rel in model.relationships:
        for end, endpoint in (("from", rel.from_), ("to", rel.to)):
            if endpoint not in entity_ids:
                warnings.append(
                    ValidationWarning(
                        message=(
                            f"Relationship '{rel.id}' references non-existent "
                            f"'{end}' entity: {endpoint}"
                        ),
                        severity="warning",
                        type="orphaned_relationship",
                        entityId=rel.id,
                    )
                )

    for label, values in (
        ("entity name", [entity.name for entity in model.entities]),
        ("entity id", [entity.id for entity in model.entities]),
        ("relationship id", [rel.id for rel in model.relationships]),
    ):
        for value, count in Counter(values).items():
            if count > 1:
                warnings.append(
                    ValidationWarning(
                        message=f"Duplicate {label} detected: {value}",
                        severity="warning",
                        type=f"duplicate_{label.replace(' ', '_')}",
                    )
                )

    return ModelValidationResult(
        isValid=not any(w.severity == "error" for w in warnings),
        warnings=warnings,
        model=model,
    )


def summarize_warnings(warnings: List[ValidationWarning], limit: Optional[int] = None) -> str:
    """Human-readable list of findings, one per line."""
    if not warnings:
        return "No warnings detected."
    shown = warnings if limit is None else warnings[:limit]
    lines = [f"Warnings ({len(warnings)}):"]
    lines.extend(f"- [{w.severity}] {w.message}" for w in shown)
    if len(shown) < len(warnings):
        lines.append(f"- ... {len(warnings) - len(shown)} more")
    return "\n".join(lines)
