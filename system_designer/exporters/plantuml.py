"""PlantUML export helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Union

from system_designer.schema import MsonEntity, MsonModel, as_mson_model

VISIBILITY_SYMBOLS = {
    "public": "+",
    "private": "-",
    "protected": "#",
}

RELATION_ARROWS = {
    "inheritance": "<|--",
    "implementation": "<|..",
    "association": "-->",
    "dependency": "..>",
    "aggregation": "o-->",
    "composition": "*-->",
}


def _entity_keyword(entity: MsonEntity) -> str:
    return entity.type if entity.type in ("interface", "enum") else "class"


def mson_to_plantuml(model: Union[MsonModel, Dict[str, Any]]) -> str:
    """Convert an MSON model into PlantUML class diagram text."""

    model = as_mson_model(model)
    lines: List[str] = ["@startuml", f"title {model.name}"]

    if model.description:
        anchor = model.entities[0].name if model.entities else "FirstEntity"
        lines.append(f"note top of {anchor}")
        lines.append(model.description)
        lines.append("end note")

    for entity in model.entities:
        header = f"{_entity_keyword(entity)} {entity.name}"
        if entity.stereotype:
            header += f" <<{entity.stereotype}>>"
        lines.append(header + " {")

        for value in entity.values or []:
            lines.append(f"  {value}")

        for attr in entity.attributes:
            visibility = VISIBILITY_SYMBOLS.get(attr.visibility, "+")
            static = "{static} " if attr.isStatic else ""
            read_only = "{readOnly} " if attr.isReadOnly else ""
            lines.append(f"  {visibility}{static}{read_only}{attr.name}: {attr.type}")

        for method in entity.methods:
            visibility = VISIBILITY_SYMBOLS.get(method.visibility, "+")
            static = "{static} " if method.isStatic else ""
            abstract = "{abstract} " if method.isAbstract else ""
            params = ", ".join(f"{p.name}: {p.type}" for p in method.parameters)
            lines.append(
                f"  {visibility}{static}{abstract}{method.name}({params}): {method.returnType}"
            )

        lines.append("}")

    names = {entity.id: entity.name for entity in model.entities}
    for rel in model.relationships:
        from_name = names.get(rel.from_)
        to_name = names.get(rel.to)
        if not from_name or not to_name:
            continue

        arrow = RELATION_ARROWS.get(rel.type, RELATION_ARROWS["association"])
        parts = [from_name]
        if rel.multiplicity and rel.multiplicity.from_:
            parts.append(f"\"{rel.multiplicity.from_}\"")
        parts.append(arrow)
        if rel.multiplicity and rel.multiplicity.to:
            parts.append(f"\"{rel.multiplicity.to}\"")
        parts.append(to_name)
        relation = " ".join(parts)
        if rel.name:
            relation += f" : {rel.name}"
        lines.append(relation)

    lines.append("@enduml")
    return "\n".join(lines)


def write_plantuml(model: Union[MsonModel, Dict[str, Any]], path: Path) -> Path:
    """Write PlantUML text to the provided path."""

    path.parent.mkdir(parents=True, exist_ok=True)
    plantuml_text = mson_to_plantuml(model)
    path.write_text(plantuml_text)
    return path
