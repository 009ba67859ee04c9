from __future__ import annotations

"""
Checker Configuration Domain.

Default settings for the checker, the diagnostic sink and the reference
directory tree, plus loading of user overrides from a JSON file.
"""

import json
import logging
import os
from typing import Any, Dict

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
DIAGNOSTIC_SINKS = ("stderr", "stdout", "log")
VIOLATION_MODES = ("raise", "log")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def get_default_config() -> Dict[str, Any]:
    """
    Return the baseline configuration.

    Returns:
        Dict[str, Any]: Fresh dictionary with every known key.
    """
    return {
        "max_depth": None,
        "diagnostics": "stderr",
        "on_violation": "raise",
        "check_invariants": True,
        "log_level": "INFO",
    }


def load_config(file_path: str) -> Dict[str, Any]:
    """
    Load configuration overrides from a JSON file merged over the defaults.

    A missing or unreadable file is not fatal: the defaults are returned
    and a warning is logged.

    Args:
        file_path: Location of the JSON configuration file.

    Returns:
        Dict[str, Any]: Merged (not yet validated) configuration.
    """
    config = get_default_config()
    if not os.path.exists(file_path):
        logger.warning(f"Config file not found: {file_path}. Using defaults.")
        return config

    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Failed to load config from {file_path}: {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning(f"Config file {file_path} does not hold an object. Using defaults.")
        return config

    config.update(data)
    return config
