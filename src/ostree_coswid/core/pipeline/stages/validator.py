from __future__ import annotations

"""
Configuration Validation Service.

Gatekeeper for the generation engine: coerces untrusted configuration
values (JSON file, CLI) into strictly typed parameters, fills missing keys
with defaults and reports every correction as a warning.
"""

import logging
from typing import Any, Dict, List, Tuple

from ostree_coswid.domain.config import STORE_TYPES, get_default_config
from ostree_coswid.domain.constants import VERSION_SCHEMES
from ostree_coswid.infra.logging.config import _LEVEL_MAP

logger = logging.getLogger(__name__)

# Upper bound for hashing threads
MAX_JOBS = 64


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a configuration dictionary.

    Args:
        config: Raw configuration data.
        strict: Raise on the first invalid value instead of falling back.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and
                                          the list of warnings.

    Raises:
        TypeError, ValueError: In strict mode, on invalid values.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    required_strings = [
        "store_path", "reference", "output_path", "tag_id",
        "software_name", "entity_name",
    ]
    optional_strings = [
        "software_version", "version_scheme", "entity_reg_id", "log_file",
    ]
    bool_fields = ["sort_entries", "cbor_tagged"]

    for field in required_strings:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in optional_strings:
        merged[field] = _as_str(merged.get(field), "", field, warnings, strict)

    for field in bool_fields:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    merged["tag_version"] = _as_int(
        merged.get("tag_version"), defaults["tag_version"], 0, None, "tag_version", warnings, strict
    )
    merged["jobs"] = _as_int(
        merged.get("jobs"), defaults["jobs"], 1, MAX_JOBS, "jobs", warnings, strict
    )

    merged["store_type"] = _as_choice(
        merged.get("store_type"), defaults["store_type"], STORE_TYPES, "store_type", warnings, strict
    )
    merged["log_level"] = _as_choice(
        str(merged.get("log_level") or "").upper(), defaults["log_level"],
        tuple(_LEVEL_MAP), "log_level", warnings, strict,
    )
    if merged["version_scheme"]:
        merged["version_scheme"] = _as_choice(
            merged["version_scheme"].lower(), "", tuple(VERSION_SCHEMES),
            "version_scheme", warnings, strict,
        )

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and strip string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce numeric and keyword inputs into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_int(
        value: Any,
        fallback: int,
        minimum: int,
        maximum: Any,
        field: str,
        warnings: List[str],
        strict: bool,
) -> int:
    """Coerce to an integer within [minimum, maximum]."""
    if value is None:
        return fallback

    number: Any = None
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    elif isinstance(value, str) and not strict:
        try:
            number = int(value.strip())
            warnings.append(f"Field '{field}' converted from '{value}' to {number}.")
        except ValueError:
            number = None

    if number is None:
        msg = f"Invalid field '{field}': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    if number < minimum or (maximum is not None and number > maximum):
        msg = f"Field '{field}' out of range: {number}."
        if strict:
            raise ValueError(msg)
        clamped = max(minimum, number if maximum is None else min(number, maximum))
        warnings.append(f"{msg} Clamped to {clamped}.")
        return clamped

    return number


def _as_choice(
        value: Any,
        fallback: str,
        choices: Tuple[str, ...],
        field: str,
        warnings: List[str],
        strict: bool,
) -> str:
    """Ensure a value is one of the allowed choices."""
    if value in choices:
        return value
    if value in (None, ""):
        return fallback

    msg = f"Invalid field '{field}': '{value}' is not one of {', '.join(choices)}."
    if strict:
        raise ValueError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback
