from __future__ import annotations

"""
Configuration Domain Management.

Handles the dict-based run configuration: defaults for every key, optional
persistent overrides stored as JSON in the user data directory, and the
merge of command-line overrides on top.
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from ostree_coswid.domain.constants import (
    DEFAULT_ENTITY_NAME,
    DEFAULT_REFERENCE,
    DEFAULT_SOFTWARE_NAME,
    DEFAULT_STORE_PATH,
    DEFAULT_TAG_ID,
)
from ostree_coswid.infra.fs import get_user_data_dir

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_FILE = os.path.join(get_user_data_dir(), "config.json")

STORE_TYPES = ("ostree", "checkout")

CONFIG_KEYS = (
    "store_path", "reference", "output_path", "store_type",
    "tag_id", "tag_version", "software_name", "software_version",
    "version_scheme", "entity_name", "entity_reg_id",
    "jobs", "sort_entries", "cbor_tagged", "log_level", "log_file",
)


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default run configuration.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Store access
        "store_path": DEFAULT_STORE_PATH,
        "reference": DEFAULT_REFERENCE,
        "store_type": "ostree",

        # Output
        "output_path": "-",
        "cbor_tagged": False,

        # Tag metadata
        "tag_id": DEFAULT_TAG_ID,
        "tag_version": 0,
        "software_name": DEFAULT_SOFTWARE_NAME,
        "software_version": "",
        "version_scheme": "",
        "entity_name": DEFAULT_ENTITY_NAME,
        "entity_reg_id": "",

        # Traversal
        "jobs": 1,
        "sort_entries": False,

        # Diagnostics
        "log_level": "INFO",
        "log_file": "",
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration overrides from disk on top of the defaults.

    A missing default file is not an error. An explicitly requested file
    that is missing or malformed is logged and ignored.

    Args:
        path: Optional explicit configuration file.

    Returns:
        Dict[str, Any]: Defaults merged with the file contents.
    """
    config = get_default_config()
    config_path = path or CONFIG_FILE

    if not os.path.exists(config_path):
        if path:
            logger.warning(f"Config file not found: {config_path}. Using defaults.")
        else:
            logger.debug("Config file not found. Returning defaults.")
        return config

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load config '{config_path}': {e}. Using defaults.")
        return config

    if not isinstance(data, dict):
        logger.warning("Corrupted config file. Resetting to defaults.")
        return config

    unknown = sorted(k for k in data if k not in CONFIG_KEYS)
    if unknown:
        logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")

    config.update({k: v for k, v in data.items() if k in CONFIG_KEYS})
    return config


def merge_overrides(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge non-None override values for known keys into ``base``.

    Args:
        base: The primary configuration dictionary.
        overrides: New values to inject.

    Returns:
        Dict[str, Any]: The merged configuration.
    """
    out = dict(base)
    for k in CONFIG_KEYS:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out
