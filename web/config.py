"""Centralized configuration for the configurator web app."""

import os
from pathlib import Path

# Determine project root (parent of 'web' directory)
_THIS_DIR = Path(__file__).parent
_PROJECT_ROOT = _THIS_DIR.parent

# Sheet CSV exports - use absolute path for consistent loading
DATA_DIR = os.getenv("CONFIGURATOR_DATA_DIR", str(_PROJECT_ROOT / "data"))

# Flask app settings (allow env overrides; default debug off for safety)
FLASK_HOST = os.getenv("FLASK_HOST", "0.0.0.0")
FLASK_PORT = int(os.getenv("FLASK_PORT", os.getenv("PORT", "5000")))
FLASK_DEBUG = os.getenv("FLASK_DEBUG", "False").lower() == "true"

# JSONL logs next to the app
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "True").lower() == "true"
