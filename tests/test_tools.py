"""
Tests for the tool layer.

Every tool is invoked the way an agent would call it, through
``BaseTool.invoke`` with a dict of arguments.
"""

import json

import pytest

from system_designer.tools import (
    AVAILABLE_TOOLS,
    TOOLS_BY_NAME,
    call_tool,
    create_mson_model,
    create_system_runtime_bundle,
    export_to_system_designer,
    generate_uml_diagram,
    validate_mson_model,
    validate_system_runtime_bundle,
)


def make_model():
    return {
        "id": "zoo",
        "name": "Zoo",
        "type": "class",
        "entities": [
            {"id": "animal", "name": "Animal", "type": "class",
             "attributes": [{"name": "name", "type": "string"}]},
            {"id": "lion", "name": "Lion", "type": "class"},
        ],
        "relationships": [
            {"id": "r1", "from": "lion", "to": "animal", "type": "inheritance"},
        ],
    }


def test_registry():
    assert len(AVAILABLE_TOOLS) == 6
    assert set(TOOLS_BY_NAME) == {
        "create_mson_model",
        "validate_mson_model",
        "generate_uml_diagram",
        "export_to_system_designer",
        "create_system_runtime_bundle",
        "validate_system_runtime_bundle",
    }


# ============================================================================
# MSON model tools
# ============================================================================

def test_create_mson_model_generates_ids():
    result = create_mson_model.invoke({
        "name": "Zoo",
        "type": "class",
        "entities": [{"name": "Animal", "type": "class"}],
    })

    assert result["success"] is True
    assert result["model"]["id"].startswith("model_")
    assert result["model"]["entities"][0]["id"] == "entity_1"
    assert result["warnings"] == []


def test_create_mson_model_keeps_generated_ids_distinct():
    result = create_mson_model.invoke({
        "name": "Zoo",
        "type": "class",
        "entities": [
            {"name": "Animal", "type": "class"},
            {"id": "entity_1", "name": "Keeper", "type": "class"},
        ],
    })

    ids = [e["id"] for e in result["model"]["entities"]]
    assert len(set(ids)) == 2
    assert ids[1] == "entity_1"
    assert result["warnings"] == []


def test_create_mson_model_reports_validation_error():
    result = create_mson_model.invoke({
        "name": "Zoo",
        "type": "class",
        "entities": [{"name": "Animal", "type": "spaceship"}],
    })

    assert result["success"] is False
    assert result["message"].startswith("Validation Error")


def test_validate_mson_model_tool():
    model = make_model()
    model["relationships"].append({"id": "r2", "from": "lion", "to": "cage", "type": "association"})

    result = validate_mson_model.invoke({"model": model})

    assert result["success"] is True
    assert result["isValid"] is True
    assert len(result["warnings"]) == 1
    assert result["warnings"][0]["type"] == "orphaned_relationship"


def test_validate_mson_model_tool_accepts_json_string():
    result = validate_mson_model.invoke({"model": json.dumps(make_model())})
    assert result["isValid"] is True
    assert result["message"] == "No warnings detected."


def test_validate_mson_model_tool_without_model():
    result = validate_mson_model.invoke({"model": None})
    assert result["success"] is False


def test_generate_uml_diagram_tool():
    result = generate_uml_diagram.invoke({"model": make_model()})

    assert result["success"] is True
    assert result["format"] == "plantuml"
    assert "Lion <|-- Animal" in result["diagram"]


def test_generate_uml_diagram_tool_mermaid():
    result = generate_uml_diagram.invoke({"model": make_model(), "format": "mermaid"})
    assert "classDiagram" in result["diagram"]


def test_generate_uml_diagram_tool_bad_format():
    result = generate_uml_diagram.invoke({"model": make_model(), "format": "dot"})

    assert result["success"] is False
    assert "Unsupported format" in result["message"]


def test_export_tool(tmp_path):
    target = tmp_path / "zoo.json"

    result = export_to_system_designer.invoke({"model": make_model(), "filePath": str(target)})

    assert result["success"] is True
    assert result["filePath"] == str(target)
    assert target.exists()


def test_export_tool_invalid_model(tmp_path):
    result = export_to_system_designer.invoke({"model": {"name": "x"}, "filePath": str(tmp_path / "x.json")})

    assert result["success"] is False
    assert "Invalid model format" in result["message"]


# ============================================================================
# System Runtime tools
# ============================================================================

def test_create_system_runtime_bundle_tool():
    result = create_system_runtime_bundle.invoke({"model": make_model(), "version": "1.0.0"})

    assert result["success"] is True
    bundle = result["bundle"]
    assert bundle["version"] == "1.0.0"
    lion = next(s for s in bundle["schemas"].values() if s["_name"] == "Lion")
    assert lion["_inherit"] == ["_Component", "Animal"]
    assert result["validation"]["isValid"] is True
    assert result["modelWarnings"] == []


def test_create_system_runtime_bundle_tool_from_json_string():
    result = create_system_runtime_bundle.invoke({"model": json.dumps(make_model())})
    assert result["success"] is True


def test_create_system_runtime_bundle_tool_skip_validation():
    result = create_system_runtime_bundle.invoke({"model": make_model(), "run_validation": False})

    assert result["success"] is True
    assert result["validation"] is None


def test_create_system_runtime_bundle_tool_invalid_model():
    result = create_system_runtime_bundle.invoke({"model": {"name": "x"}})

    assert result["success"] is False
    assert result["report"]["status"] == "failed"


def test_create_system_runtime_bundle_tool_rejects_non_object():
    result = create_system_runtime_bundle.invoke({"model": "[1, 2]"})

    assert result["success"] is False
    assert result["message"] == "Model must be a JSON object"


def test_validate_system_runtime_bundle_tool():
    bundle = create_system_runtime_bundle.invoke({"model": make_model()})["bundle"]

    result = validate_system_runtime_bundle.invoke({"bundle": bundle})

    assert result["success"] is True
    assert result["isValid"] is True
    assert result["warnings"] == []
    assert result["bundle"]["name"] == "Zoo"


def test_validate_system_runtime_bundle_tool_reports_errors():
    bundle = create_system_runtime_bundle.invoke({"model": make_model()})["bundle"]
    bundle["components"]["Ghost"] = {}

    result = validate_system_runtime_bundle.invoke({"bundle": bundle})

    assert result["isValid"] is False
    assert "validation failed" in result["message"]


# ============================================================================
# call_tool
# ============================================================================

def test_call_tool_by_name():
    result = call_tool("validate_mson_model", {"model": make_model()})
    assert result["isValid"] is True


def test_call_tool_unknown_name():
    with pytest.raises(KeyError):
        call_tool("delete_everything")
