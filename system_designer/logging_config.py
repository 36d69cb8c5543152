"""Logging setup driven by LOG_LEVEL / LOG_FORMAT."""

import json
import logging
from datetime import datetime, timezone
from typing import Optional

from system_designer.config import DEBUG_MODE, LOG_FILE, LOG_FORMAT, LOG_LEVEL


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Configure the root logger.

    Args:
        level: Log level name; defaults to LOG_LEVEL (DEBUG when DEBUG_MODE is on).
        fmt: "json" or "text"; defaults to LOG_FORMAT.
    """
    level_name = level or ("DEBUG" if DEBUG_MODE else LOG_LEVEL)
    fmt = fmt or LOG_FORMAT

    handler: logging.Handler
    if LOG_FILE:
        handler = logging.FileHandler(LOG_FILE)
    else:
        handler = logging.StreamHandler()

    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s")
        )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level_name.upper(), logging.INFO))
