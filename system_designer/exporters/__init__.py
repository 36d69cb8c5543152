"""UML rendering and System Designer export for MSON models."""

from typing import Any, Dict, Union

from system_designer.exporters.mermaid import mson_to_mermaid
from system_designer.exporters.plantuml import mson_to_plantuml
from system_designer.schema import MsonModel

UML_RENDERERS = {
    "plantuml": mson_to_plantuml,
    "mermaid": mson_to_mermaid,
}


def render_uml(model: Union[MsonModel, Dict[str, Any]], fmt: str = "plantuml") -> str:
    """Render a model in the requested UML text format."""
    renderer = UML_RENDERERS.get(fmt)
    if renderer is None:
        raise ValueError(
            f"Unsupported format: {fmt}. Supported formats: {', '.join(UML_RENDERERS)}"
        )
    return renderer(model)
