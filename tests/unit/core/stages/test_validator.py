from __future__ import annotations

"""
Unit tests for the Configuration Validation Service.

Verifies type coercion, range clamping, choice checking and strict mode.
"""

import pytest

from ostree_coswid.core.pipeline.stages.validator import MAX_JOBS, validate_config
from ostree_coswid.domain.config import get_default_config


def test_valid_config_passes_unchanged(mock_config_dict) -> None:
    cfg, warnings = validate_config(mock_config_dict)
    assert warnings == []
    assert cfg == mock_config_dict


def test_non_dict_falls_back_to_defaults() -> None:
    cfg, warnings = validate_config(None)
    assert cfg == get_default_config()
    assert len(warnings) == 1


def test_non_dict_strict_raises() -> None:
    with pytest.raises(TypeError):
        validate_config("nope", strict=True)


def test_missing_keys_are_filled(mock_config_dict) -> None:
    cfg, _ = validate_config({"reference": "custom"})
    assert cfg["reference"] == "custom"
    assert cfg["tag_id"] == get_default_config()["tag_id"]


def test_empty_required_string_uses_default(mock_config_dict) -> None:
    mock_config_dict["tag_id"] = "   "
    cfg, _ = validate_config(mock_config_dict)
    assert cfg["tag_id"] == get_default_config()["tag_id"]


def test_bool_coercion_from_strings(mock_config_dict) -> None:
    mock_config_dict["sort_entries"] = "yes"
    mock_config_dict["cbor_tagged"] = 0
    cfg, warnings = validate_config(mock_config_dict)
    assert cfg["sort_entries"] is True
    assert cfg["cbor_tagged"] is False
    assert len(warnings) == 2


@pytest.mark.parametrize("raw, expected", [(0, 1), (-3, 1), (MAX_JOBS + 10, MAX_JOBS), ("8", 8)])
def test_jobs_are_clamped(mock_config_dict, raw, expected) -> None:
    mock_config_dict["jobs"] = raw
    cfg, warnings = validate_config(mock_config_dict)
    assert cfg["jobs"] == expected
    assert warnings


def test_jobs_out_of_range_strict_raises(mock_config_dict) -> None:
    mock_config_dict["jobs"] = 0
    with pytest.raises(ValueError):
        validate_config(mock_config_dict, strict=True)


def test_invalid_store_type_falls_back(mock_config_dict) -> None:
    mock_config_dict["store_type"] = "git"
    cfg, warnings = validate_config(mock_config_dict)
    assert cfg["store_type"] == "ostree"
    assert any("store_type" in w for w in warnings)


def test_log_level_is_normalized(mock_config_dict) -> None:
    mock_config_dict["log_level"] = "debug"
    cfg, _ = validate_config(mock_config_dict)
    assert cfg["log_level"] == "DEBUG"


def test_version_scheme_is_checked(mock_config_dict) -> None:
    mock_config_dict["version_scheme"] = "SemVer"
    cfg, _ = validate_config(mock_config_dict)
    assert cfg["version_scheme"] == "semver"

    mock_config_dict["version_scheme"] = "roman"
    cfg, warnings = validate_config(mock_config_dict)
    assert cfg["version_scheme"] == ""
    assert warnings


def test_wrong_string_type_uses_fallback(mock_config_dict) -> None:
    mock_config_dict["software_name"] = 42
    cfg, warnings = validate_config(mock_config_dict)
    assert cfg["software_name"] == get_default_config()["software_name"]
    assert warnings
