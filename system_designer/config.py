"""
Configuration and constants for the System Designer model toolkit.

This module handles all environment variables and transformation defaults.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Project directories
PROJECT_ROOT = Path(__file__).parent.parent
PACKAGE_DIR = PROJECT_ROOT / "system_designer"

# Load local .env if present; values already in the environment win
_env_path = PROJECT_ROOT / ".env"
if _env_path.exists():
    load_dotenv(dotenv_path=str(_env_path), override=False)

# System Runtime bundle defaults
DEFAULT_BUNDLE_VERSION: str = os.getenv("DEFAULT_BUNDLE_VERSION", "0.0.1")
BASE_COMPONENT: str = os.getenv("BASE_COMPONENT", "_Component")
BUNDLE_MASTER: bool = os.getenv("BUNDLE_MASTER", "true").lower() == "true"

# System Designer export
EXPORTS_DIR: Path = Path(os.getenv("EXPORTS_DIR", str(PROJECT_ROOT / "exports")))
EXPORT_FORMAT_VERSION: str = "1.0"
EXPORTED_BY: str = os.getenv("EXPORTED_BY", "system-designer-mcp")

# UML rendering
DEFAULT_UML_FORMAT: str = os.getenv("DEFAULT_UML_FORMAT", "plantuml")  # "plantuml" or "mermaid"

# Logging
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT: str = os.getenv("LOG_FORMAT", "text")  # or "json"
LOG_FILE: Optional[str] = os.getenv("LOG_FILE", None)

# Debug mode
DEBUG_MODE: bool = os.getenv("DEBUG_MODE", "false").lower() == "true"
