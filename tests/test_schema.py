"""
Tests for the MSON and System Runtime data types.
"""

import json

import pytest
from pydantic import ValidationError

from system_designer.schema import (
    MsonModel,
    MsonRelationship,
    RuntimeBundle,
    RuntimeModel,
    RuntimeSchema,
    as_mson_model,
)


def make_flat_bundle():
    return {
        "_id": "sys1",
        "name": "Shop",
        "description": "",
        "version": "1.0.0",
        "master": True,
        "schemas": {
            "s1": {"_id": "s1", "_name": "Order", "_inherit": ["_Component"], "total": "property"},
        },
        "models": {
            "m1": {"_id": "m1", "_name": "Order", "total": "number", "place": {"=>": "void"}},
        },
        "types": {},
        "behaviors": {},
        "components": {"Order": {"o1": {"_id": "o1", "total": 10}}},
    }


# ============================================================================
# MSON input types
# ============================================================================

def test_relationship_reads_from_alias():
    rel = MsonRelationship.model_validate(
        {"id": "r1", "from": "a", "to": "b", "type": "association", "multiplicity": {"from": "1", "to": "*"}}
    )

    assert rel.from_ == "a"
    assert rel.multiplicity.from_ == "1"
    assert rel.multiplicity.to == "*"


def test_model_to_dict_uses_wire_names():
    model = MsonModel.model_validate({
        "id": "m",
        "name": "M",
        "type": "class",
        "entities": [{"id": "a", "name": "A", "type": "class"}],
        "relationships": [{"id": "r1", "from": "a", "to": "a", "type": "association"}],
    })

    out = model.to_dict()

    assert out["relationships"][0]["from"] == "a"
    assert "from_" not in out["relationships"][0]
    assert "description" not in out


def test_model_defaults():
    model = MsonModel.model_validate({
        "id": "m",
        "name": "M",
        "type": "class",
        "entities": [{"id": "a", "name": "A", "type": "class", "methods": [{"name": "run"}]}],
    })

    entity = model.entities[0]
    assert entity.attributes == []
    assert entity.methods[0].returnType == "void"
    assert entity.methods[0].visibility == "public"
    assert model.relationships == []


def test_model_rejects_unknown_entity_type():
    with pytest.raises(ValidationError):
        MsonModel.model_validate({
            "id": "m",
            "name": "M",
            "type": "class",
            "entities": [{"id": "a", "name": "A", "type": "widget"}],
        })


def test_as_mson_model_passes_through_parsed_model():
    model = MsonModel(id="m", name="M", type="class")
    assert as_mson_model(model) is model
    assert as_mson_model({"id": "m", "name": "M", "type": "class"}).name == "M"


# ============================================================================
# Runtime records
# ============================================================================

def test_schema_flat_form_round_trip():
    wire = {"_id": "s1", "_name": "Person", "_inherit": ["_Component"], "name": "property", "friends": "collection"}

    schema = RuntimeSchema.model_validate(wire)

    assert schema.id == "s1"
    assert schema.name == "Person"
    assert schema.inherit == ["_Component"]
    assert schema.members == {"name": "property", "friends": "collection"}
    assert schema.to_dict() == wire


def test_schema_without_inherit_omits_key():
    schema = RuntimeSchema(id="s1", name="Thing", members={"x": "property"})
    assert schema.to_dict() == {"_id": "s1", "_name": "Thing", "x": "property"}


def test_model_flat_form_keeps_field_named_like_python_attribute():
    # "name" and "id" are regular fields on the wire, distinct from _name/_id
    model = RuntimeModel.model_validate({"_id": "m1", "_name": "Person", "name": "string", "id": "string"})

    assert model.name == "Person"
    assert model.members == {"name": "string", "id": "string"}


def test_schema_requires_name():
    with pytest.raises(ValidationError):
        RuntimeSchema.model_validate({"_id": "s1", "x": "property"})


def test_bundle_parses_flat_form():
    bundle = RuntimeBundle.model_validate(make_flat_bundle())

    assert bundle.id == "sys1"
    assert bundle.schemas["s1"].members == {"total": "property"}
    assert bundle.models["m1"].members["place"] == {"=>": "void"}
    assert bundle.components["Order"]["o1"].id == "o1"


def test_bundle_to_dict_round_trip():
    data = make_flat_bundle()
    assert RuntimeBundle.model_validate(data).to_dict() == data


def test_bundle_to_json():
    bundle = RuntimeBundle.model_validate(make_flat_bundle())
    assert json.loads(bundle.to_json())["_id"] == "sys1"


def test_bundle_requires_schemas_and_models():
    data = make_flat_bundle()
    del data["schemas"]

    with pytest.raises(ValidationError):
        RuntimeBundle.model_validate(data)
