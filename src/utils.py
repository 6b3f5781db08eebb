"""
Shared utility functions for the stealth wallet.

Contains path helpers and settings loading used across packages.
"""

import json
import logging
import os
import sys
from pathlib import Path

# Overrides the data directory (tests, portable installs)
APP_DIR_ENV = "STEALTH_WALLET_HOME"


def get_app_dir() -> Path:
    """Get the application data directory."""
    override = os.environ.get(APP_DIR_ENV)
    if override:
        app_dir = Path(override)
    elif getattr(sys, 'frozen', False):
        # Running as compiled
        app_dir = Path(sys.executable).parent / "data"
    else:
        # Running as script
        app_dir = Path(__file__).parent.parent / "data"

    app_dir.mkdir(parents=True, exist_ok=True)
    return app_dir


def get_store_path() -> Path:
    """Get path to the default encrypted secret store."""
    return get_app_dir() / "stealth.store"


def get_settings_path() -> Path:
    """Get path to settings file."""
    return get_app_dir() / "settings.json"


def get_logs_dir() -> Path:
    """Get the logs directory."""
    logs_dir = get_app_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


def load_settings() -> dict:
    """Load settings from disk (empty dict if missing or unreadable)."""
    settings_path = get_settings_path()
    if settings_path.exists():
        try:
            with open(settings_path, 'r') as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
            logging.getLogger(__name__).warning("Ignoring settings file: not a JSON object")
        except (json.JSONDecodeError, OSError) as e:
            logging.getLogger(__name__).warning(f"Failed to load settings: {e}")
    return {}

