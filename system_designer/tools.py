"""
Tools for the System Designer model toolkit.

Implements model creation and validation, UML generation, System Designer
export and System Runtime bundle creation/validation as tools a caller
(or an agent) can invoke by name.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from langchain_core.tools import BaseTool, tool
from pydantic import ValidationError

from system_designer.config import DEFAULT_UML_FORMAT
from system_designer.exporters import render_uml
from system_designer.exporters.system_designer import export_to_system_designer as write_export
from system_designer.graph import run_bundle_workflow
from system_designer.schema import MsonModel
from system_designer.validation import (
    ensure_unique_ids,
    summarize_warnings,
    validate_mson_model as check_mson_model,
    validate_runtime_bundle,
)

logger = logging.getLogger(__name__)


def _error_result(message: str) -> Dict[str, Any]:
    return {"success": False, "message": message}


def _parse_model(model: Any) -> MsonModel:
    if isinstance(model, str):
        model = json.loads(model)
    return MsonModel.model_validate(model)


# ============================================================================
# MSON Model Tools
# ============================================================================

@tool
def create_mson_model(
    name: str,
    type: str,
    description: Optional[str] = None,
    entities: Optional[List[Dict[str, Any]]] = None,
    relationships: Optional[List[Dict[str, Any]]] = None,
    id: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create and validate an MSON model from structured data.

    Args:
        name: Name of the model.
        type: Model type (class, component, deployment, usecase).
        description: Optional description of the model.
        entities: Entities of the model; missing ids are generated.
        relationships: Relationships between entities; missing ids are generated.
        id: Optional model id; generated when omitted.

    Returns:
        Dictionary with the created model and any consistency warnings.
    """
    data: Dict[str, Any] = {
        "id": id,
        "name": name,
        "type": type,
        "entities": entities or [],
        "relationships": relationships or [],
    }
    if description is not None:
        data["description"] = description

    result = check_mson_model(ensure_unique_ids(data))
    if result.model is None:
        return _error_result(f"Validation Error: {result.warnings[0].message}")

    model = result.model
    logger.info(f"Created MSON model '{model.name}' ({len(model.entities)} entities)")
    return {
        "success": True,
        "message": (
            f"MSON model '{model.name}' created: {len(model.entities)} entities, "
            f"{len(model.relationships)} relationships"
        ),
        "model": model.to_dict(),
        "warnings": [w.model_dump(exclude_none=True) for w in result.warnings],
    }


@tool
def validate_mson_model(model: Any) -> Dict[str, Any]:
    """
    Validate an MSON model for consistency and completeness.

    Args:
        model: The MSON model (object or JSON string).

    Returns:
        Dictionary with isValid, warnings and a readable summary.
    """
    if not model:
        return _error_result("Model validation failed: No model provided")

    result = check_mson_model(model)
    if result.model is None:
        return {
            **_error_result(result.warnings[0].message),
            "isValid": False,
            "warnings": [w.model_dump(exclude_none=True) for w in result.warnings],
        }

    return {
        "success": True,
        "message": summarize_warnings(result.warnings),
        "isValid": result.isValid,
        "warnings": [w.model_dump(exclude_none=True) for w in result.warnings],
    }


@tool
def generate_uml_diagram(model: Any, format: str = DEFAULT_UML_FORMAT) -> Dict[str, Any]:
    """
    Generate UML diagram markup from an MSON model.

    Args:
        model: The MSON model (object or JSON string).
        format: Output format, "plantuml" or "mermaid".

    Returns:
        Dictionary with the diagram text.
    """
    if not model:
        return _error_result("UML generation failed: No model provided")

    try:
        parsed = _parse_model(model)
        diagram = render_uml(parsed, format)
    except (ValidationError, ValueError) as e:
        return _error_result(f"Cannot generate UML: {e}")

    return {
        "success": True,
        "message": f"UML diagram generated ({format}) for model '{parsed.name}'",
        "format": format,
        "diagram": diagram,
    }


@tool
def export_to_system_designer(model: Any, filePath: Optional[str] = None) -> Dict[str, Any]:
    """
    Export an MSON model to the System Designer application format.

    Args:
        model: The MSON model (object or JSON string).
        filePath: Optional file path for the exported model.

    Returns:
        Dictionary with the path of the written file.
    """
    if not model:
        return _error_result("Export failed: No model provided")

    try:
        parsed = _parse_model(model)
    except (ValidationError, ValueError) as e:
        return _error_result(f"Cannot export: Invalid model format\nError: {e}")

    try:
        path = write_export(parsed, filePath)
    except OSError as e:
        logger.error(f"Error exporting model {parsed.name}: {e}")
        return _error_result(f"Export failed: {e}")

    return {
        "success": True,
        "message": f"Model '{parsed.name}' exported to {path}",
        "filePath": str(path),
    }


# ============================================================================
# System Runtime Tools
# ============================================================================

@tool
def create_system_runtime_bundle(
    model: Any,
    version: Optional[str] = None,
    run_validation: bool = True,
) -> Dict[str, Any]:
    """
    Convert an MSON model to a complete System Runtime bundle.

    Args:
        model: The MSON model (object or JSON string).
        version: Optional semantic version for the bundle.
        run_validation: Also validate the resulting bundle.

    Returns:
        Dictionary with the bundle, its validation result and model warnings.
    """
    if not model:
        return _error_result("Model is required for System Runtime bundle creation")

    if isinstance(model, str):
        try:
            model = json.loads(model)
        except ValueError as e:
            return _error_result(f"Invalid JSON model: {e}")
    elif isinstance(model, MsonModel):
        model = model.to_dict()

    if not isinstance(model, dict):
        return _error_result("Model must be a JSON object")

    state = run_bundle_workflow(model, version=version, validate=run_validation)
    if state.get("errors"):
        return {
            **_error_result("; ".join(state["errors"])),
            "report": state.get("final_report", {}),
        }

    return {
        "success": True,
        "message": f"System Runtime bundle created for model '{model.get('name')}'",
        "bundle": state["bundle"],
        "validation": state.get("validation") or None,
        "modelWarnings": state.get("mson_warnings", []),
        "report": state.get("final_report", {}),
    }


@tool
def validate_system_runtime_bundle(bundle: Any) -> Dict[str, Any]:
    """
    Validate a System Runtime bundle: schema references, component types,
    behaviors, unique ids, inheritance chains and method signatures.

    Args:
        bundle: The bundle (object or JSON string).

    Returns:
        Dictionary with isValid and the list of warnings.
    """
    if not bundle:
        return _error_result("Bundle is required for validation")

    result = validate_runtime_bundle(bundle)
    message = (
        "System Runtime bundle is valid and ready for deployment."
        if result.isValid
        else "System Runtime bundle validation failed:\n" + summarize_warnings(result.warnings)
    )
    return {"success": True, "message": message, **result.to_dict()}


# ============================================================================
# Registry
# ============================================================================

AVAILABLE_TOOLS: List[BaseTool] = [
    create_mson_model,
    validate_mson_model,
    generate_uml_diagram,
    export_to_system_designer,
    create_system_runtime_bundle,
    validate_system_runtime_bundle,
]

TOOLS_BY_NAME: Dict[str, BaseTool] = {t.name: t for t in AVAILABLE_TOOLS}


def call_tool(name: str, arguments: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Invoke a tool by name.

    Raises:
        KeyError: If no tool with that name exists.
    """
    if name not in TOOLS_BY_NAME:
        raise KeyError(f"Unknown tool: {name}")
    logger.debug(f"Calling tool {name}")
    return TOOLS_BY_NAME[name].invoke(arguments or {})
