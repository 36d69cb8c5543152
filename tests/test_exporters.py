import json

import pytest

from system_designer.exporters import render_uml
from system_designer.exporters.mermaid import mson_to_mermaid
from system_designer.exporters.plantuml import mson_to_plantuml, write_plantuml
from system_designer.exporters.system_designer import (
    build_export_document,
    export_to_system_designer,
    sanitize_filename,
)


def make_model():
    return {
        "id": "library",
        "name": "Library System",
        "type": "class",
        "description": "Books and members",
        "entities": [
            {
                "id": "book",
                "name": "Book",
                "type": "class",
                "attributes": [
                    {"name": "title", "type": "string"},
                    {"name": "isbn", "type": "string", "visibility": "private", "isReadOnly": True},
                ],
                "methods": [
                    {"name": "checkout", "parameters": [{"name": "member", "type": "Member"}], "returnType": "boolean"},
                ],
            },
            {"id": "member", "name": "Member", "type": "class", "stereotype": "entity"},
            {"id": "loanable", "name": "Loanable", "type": "interface",
             "methods": [{"name": "lend", "isAbstract": True}]},
            {"id": "genre", "name": "Genre", "type": "enum", "values": ["FICTION", "SCIENCE"]},
        ],
        "relationships": [
            {"id": "r1", "from": "book", "to": "loanable", "type": "implementation"},
            {"id": "r2", "from": "member", "to": "book", "type": "aggregation",
             "multiplicity": {"from": "1", "to": "0..*"}, "name": "loans"},
            {"id": "r3", "from": "book", "to": "nowhere", "type": "association"},
        ],
    }


# ============================================================================
# PlantUML
# ============================================================================

def test_plantuml_output():
    text = mson_to_plantuml(make_model())
    lines = text.splitlines()

    assert lines[0] == "@startuml"
    assert lines[1] == "title Library System"
    assert lines[-1] == "@enduml"
    assert "note top of Book" in lines
    assert "class Book {" in lines
    assert "class Member <<entity>> {" in lines
    assert "interface Loanable {" in lines
    assert "enum Genre {" in lines
    assert "  FICTION" in lines
    assert "  +title: string" in lines
    assert "  -{readOnly} isbn: string" in lines
    assert "  +checkout(member: Member): boolean" in lines
    assert "  +{abstract} lend(): void" in lines


def test_plantuml_relationships():
    text = mson_to_plantuml(make_model())

    assert "Book <|.. Loanable" in text
    assert 'Member "1" o--> "0..*" Book : loans' in text
    assert "nowhere" not in text


def test_write_plantuml(tmp_path):
    path = write_plantuml(make_model(), tmp_path / "out" / "diagram.puml")

    assert path.exists()
    assert path.read_text().startswith("@startuml")


# ============================================================================
# Mermaid
# ============================================================================

def test_mermaid_output():
    text = mson_to_mermaid(make_model())
    lines = text.splitlines()

    assert lines[:4] == ["---", "title: Library System", "---", "classDiagram"]
    assert "    class Book {" in lines
    assert "        <<interface>>" in lines
    assert "        <<enumeration>>" in lines
    assert "        -string isbn" in lines
    assert "        +checkout(Member member) boolean" in lines
    assert "        +lend()* void" in lines
    assert '    Member "1" o-- "0..*" Book : loans' in lines
    assert "nowhere" not in text


def test_render_uml_dispatch():
    assert render_uml(make_model(), "plantuml").startswith("@startuml")
    assert "classDiagram" in render_uml(make_model(), "mermaid")


def test_render_uml_unsupported_format():
    with pytest.raises(ValueError, match="Unsupported format"):
        render_uml(make_model(), "graphviz")


# ============================================================================
# System Designer export
# ============================================================================

def test_sanitize_filename():
    assert sanitize_filename("Library System") == "Library_System"
    assert sanitize_filename("a/b:c") == "a_b_c"
    assert sanitize_filename("Plain123") == "Plain123"


def test_build_export_document():
    document = build_export_document(make_model())

    assert document["version"] == "1.0"
    assert document["type"] == "system_designer_model"
    assert document["metadata"]["name"] == "Library System"
    assert document["metadata"]["modelType"] == "class"
    assert document["metadata"]["description"] == "Books and members"
    assert document["metadata"]["exportedBy"] == "system-designer-mcp"
    assert document["model"]["relationships"][1]["from"] == "member"


def test_export_writes_json_file(tmp_path):
    target = tmp_path / "nested" / "library.json"

    path = export_to_system_designer(make_model(), target)

    assert path == target
    with open(path) as f:
        document = json.load(f)
    assert document["model"]["id"] == "library"
    assert len(document["model"]["entities"]) == 4


def test_export_default_path(tmp_path, monkeypatch):
    monkeypatch.setattr(
        "system_designer.exporters.system_designer.EXPORTS_DIR", tmp_path / "exports"
    )

    path = export_to_system_designer(make_model())

    assert path == tmp_path / "exports" / "Library_System_system_designer.json"
    assert path.exists()
