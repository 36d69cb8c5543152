"""Export of MSON models in the System Designer application format."""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

from system_designer.config import EXPORTED_BY, EXPORTS_DIR, EXPORT_FORMAT_VERSION
from system_designer.schema import MsonModel, as_mson_model

logger = logging.getLogger(__name__)


def sanitize_filename(name: str) -> str:
    """Replace every non-alphanumeric character with an underscore."""
    return re.sub(r"[^a-zA-Z0-9]", "_", name)


def build_export_document(model: Union[MsonModel, Dict[str, Any]]) -> Dict[str, Any]:
    """
    Wrap a model in the System Designer export envelope.

    Args:
        model: The MSON model, parsed or as a dict.

    Returns:
        JSON-compatible export document.
    """
    model = as_mson_model(model)
    return {
        "version": EXPORT_FORMAT_VERSION,
        "type": "system_designer_model",
        "metadata": {
            "name": model.name,
            "modelType": model.type,
            "description": model.description or "",
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "exportedBy": EXPORTED_BY,
        },
        "model": model.to_dict(),
    }


def default_export_path(model: MsonModel) -> Path:
    return EXPORTS_DIR / f"{sanitize_filename(model.name)}_system_designer.json"


def export_to_system_designer(
    model: Union[MsonModel, Dict[str, Any]],
    file_path: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Write a model to disk in System Designer format.

    Args:
        model: The MSON model, parsed or as a dict.
        file_path: Target file; defaults to EXPORTS_DIR/<name>_system_designer.json.

    Returns:
        Path of the written file.
    """
    model = as_mson_model(model)
    path = Path(file_path) if file_path else default_export_path(model)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(build_export_document(model), f, indent=2)

    logger.info(f"Exported model '{model.name}' to {path}")
    return path
