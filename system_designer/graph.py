"""
LangGraph workflow for building System Runtime bundles.

Runs model validation, bundle assembly and bundle validation as graph
nodes, with routing that skips assembly when the model is malformed.
"""

import logging
from typing import Any, Dict, List, Optional, Union

from langgraph.graph import END, StateGraph
from pydantic import BaseModel, Field

from system_designer.schema import MsonModel
from system_designer.transform import mson_to_runtime_bundle
from system_designer.validation import validate_mson_model, validate_runtime_bundle

logger = logging.getLogger(__name__)


# ============================================================================
# State Definition
# ============================================================================

class BundleWorkflowState(BaseModel):
    """
    Represents the state of the bundle workflow as it progresses through nodes.
    """

    # Input
    model: Dict[str, Any] = Field(description="Raw MSON model data")
    version: Optional[str] = Field(default=None, description="Bundle version")
    run_validation: bool = Field(default=True, description="Validate the assembled bundle")

    # Intermediate results
    mson_warnings: List[Dict[str, Any]] = Field(default_factory=list, description="Model findings")
    bundle: Dict[str, Any] = Field(default_factory=dict, description="Assembled bundle")
    validation: Dict[str, Any] = Field(default_factory=dict, description="Bundle validation result")

    # Final output
    final_report: Dict[str, Any] = Field(default_factory=dict, description="Summary report")

    # Execution tracking
    errors: List[str] = Field(default_factory=list, description="Errors encountered")


# ============================================================================
# Node Functions
# ============================================================================

def node_check_model(state: BundleWorkflowState) -> Dict[str, Any]:
    """Validate the MSON model shape and collect consistency warnings."""
    logger.info(f"[MODEL] Validating model '{state.model.get('name', '<unnamed>')}'")

    result = validate_mson_model(state.model)
    if result.model is None:
        messages = [w.message for w in result.warnings]
        logger.error(f"[MODEL] Model rejected: {messages}")
        return {"errors": state.errors + messages}

    warnings = [w.model_dump(exclude_none=True) for w in result.warnings]
    logger.info(f"[MODEL] Model accepted with {len(warnings)} warnings")
    return {"model": result.model.to_dict(), "mson_warnings": warnings}


def node_assemble(state: BundleWorkflowState) -> Dict[str, Any]:
    """Transform the validated model into a bundle."""
    logger.info("[BUNDLE] Assembling System Runtime bundle")
    bundle = mson_to_runtime_bundle(state.model, state.version)
    logger.info(f"[BUNDLE] Assembled {len(bundle.schemas)} schemas")
    return {"bundle": bundle.to_dict()}


def node_check_bundle(state: BundleWorkflowState) -> Dict[str, Any]:
    """Run the bundle validator over the assembled bundle."""
    logger.info("[VALIDATE] Validating assembled bundle")
    result = validate_runtime_bundle(state.bundle)
    return {
        "validation": {
            "isValid": result.isValid,
            "warnings": [w.model_dump(exclude_none=True) for w in result.warnings],
        }
    }


def node_report(state: BundleWorkflowState) -> Dict[str, Any]:
    """Assemble the final report."""
    logger.info("[REPORT] Assembling final report")

    if state.errors:
        status = "failed"
    elif state.validation and not state.validation.get("isValid", False):
        status = "invalid"
    else:
        status = "success"

    report = {
        "status": status,
        "errors": state.errors,
        "model_name": state.model.get("name"),
        "mson_warnings": len(state.mson_warnings),
        "schemas": len(state.bundle.get("schemas", {})),
        "models": len(state.bundle.get("models", {})),
        "validated": bool(state.validation),
        "is_valid": state.validation.get("isValid") if state.validation else None,
    }
    return {"final_report": report}


# ============================================================================
# Conditional Routing
# ============================================================================

def should_assemble(state: BundleWorkflowState) -> str:
    """Skip assembly when the model was rejected."""
    if state.errors:
        return "report"
    return "assemble"


def should_validate(state: BundleWorkflowState) -> str:
    if state.run_validation:
        return "check_bundle"
    return "report"


# ============================================================================
# Graph Construction
# ============================================================================

def build_workflow_graph() -> StateGraph:
    """
    Build the LangGraph workflow.

    Returns:
        StateGraph ready to be compiled.
    """
    graph = StateGraph(BundleWorkflowState)

    graph.add_node("check_model", node_check_model)
    graph.add_node("assemble", node_assemble)
    graph.add_node("check_bundle", node_check_bundle)
    graph.add_node("report", node_report)

    graph.set_entry_point("check_model")

    graph.add_conditional_edges(
        "check_model",
        should_assemble,
        {
            "assemble": "assemble",
            "report": "report",
        },
    )
    graph.add_conditional_edges(
        "assemble",
        should_validate,
        {
            "check_bundle": "check_bundle",
            "report": "report",
        },
    )
    graph.add_edge("check_bundle", "report")
    graph.add_edge("report", END)

    return graph


def get_compiled_graph():
    """Get the compiled workflow graph."""
    graph = build_workflow_graph()
    return graph.compile()


def run_bundle_workflow(
    model: Union[MsonModel, Dict[str, Any]],
    version: Optional[str] = None,
    validate: bool = True,
) -> Dict[str, Any]:
    """
    Run the bundle workflow end to end.

    Args:
        model: The MSON model, parsed or as a dict.
        version: Bundle version; the configured default when omitted.
        validate: Whether to validate the assembled bundle.

    Returns:
        Final workflow state as a dict (bundle, validation, final_report, ...).
    """
    if isinstance(model, MsonModel):
        model = model.to_dict()

    compiled = get_compiled_graph()
    return compiled.invoke({"model": model, "version": version, "run_validation": validate})
