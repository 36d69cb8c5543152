"""Mermaid class diagram export."""

from __future__ import annotations

from typing import Any, Dict, List, Union

from system_designer.exporters.plantuml import VISIBILITY_SYMBOLS
from system_designer.schema import MsonModel, as_mson_model

RELATION_ARROWS = {
    "inheritance": "<|--",
    "implementation": "<|..",
    "association": "-->",
    "dependency": "..>",
    "aggregation": "o--",
    "composition": "*--",
}

# Mermaid annotations for non-class entities
ANNOTATIONS = {
    "interface": "<<interface>>",
    "enum": "<<enumeration>>",
}


def mson_to_mermaid(model: Union[MsonModel, Dict[str, Any]]) -> str:
    """Convert an MSON model into a Mermaid classDiagram."""

    model = as_mson_model(model)
    lines: List[str] = [
        "---",
        f"title: {model.name}",
        "---",
        "classDiagram",
    ]

    for entity in model.entities:
        lines.append(f"    class {entity.name} {{")

        annotation = ANNOTATIONS.get(entity.type)
        if annotation:
            lines.append(f"        {annotation}")

        for value in entity.values or []:
            lines.append(f"        {value}")

        for attr in entity.attributes:
            visibility = VISIBILITY_SYMBOLS.get(attr.visibility, "+")
            static = "$" if attr.isStatic else ""
            lines.append(f"        {visibility}{attr.type} {attr.name}{static}")

        for method in entity.methods:
            visibility = VISIBILITY_SYMBOLS.get(method.visibility, "+")
            classifier = "*" if method.isAbstract else ("$" if method.isStatic else "")
            params = ", ".join(f"{p.type} {p.name}" for p in method.parameters)
            lines.append(
                f"        {visibility}{method.name}({params}){classifier} {method.returnType}"
            )

        lines.append("    }")

    names = {entity.id: entity.name for entity in model.entities}
    for rel in model.relationships:
        from_name = names.get(rel.from_)
        to_name = names.get(rel.to)
        if not from_name or not to_name:
            continue

        arrow = RELATION_ARROWS.get(rel.type, RELATION_ARROWS["association"])
        from_mult = f" \"{rel.multiplicity.from_}\"" if rel.multiplicity and rel.multiplicity.from_ else ""
        to_mult = f"\"{rel.multiplicity.to}\" " if rel.multiplicity and rel.multiplicity.to else ""
        relation = f"    {from_name}{from_mult} {arrow} {to_mult}{to_name}"
        if rel.name:
            relation += f" : {rel.name}"
        lines.append(relation)

    return "\n".join(lines)
