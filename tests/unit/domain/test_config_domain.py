from __future__ import annotations

"""
Unit tests for the Config Domain.

Verifies:
1. Default configuration generation.
2. Resilience against missing and corrupted config files.
3. Loading from disk without touching real user data.
4. Merging of command-line overrides.
"""

import json
from unittest.mock import patch

import pytest

from ostree_coswid.domain.config import (
    CONFIG_KEYS,
    get_default_config,
    load_config,
    merge_overrides,
)
from ostree_coswid.domain.constants import (
    DEFAULT_ENTITY_NAME,
    DEFAULT_SOFTWARE_NAME,
    DEFAULT_TAG_ID,
)


@pytest.fixture
def mock_config_file(tmp_path):
    """
    Patch the module-level config file location.
    Prevents tests from reading/writing to the real OS user folder.
    """
    config_path = tmp_path / "ostree-coswid" / "config.json"
    with patch("ostree_coswid.domain.config.CONFIG_FILE", str(config_path)):
        yield config_path


def test_default_config_covers_every_key() -> None:
    cfg = get_default_config()
    assert set(cfg) == set(CONFIG_KEYS)
    assert cfg["tag_id"] == DEFAULT_TAG_ID
    assert cfg["software_name"] == DEFAULT_SOFTWARE_NAME
    assert cfg["entity_name"] == DEFAULT_ENTITY_NAME
    assert cfg["output_path"] == "-"
    assert cfg["jobs"] == 1
    assert cfg["sort_entries"] is False


def test_load_fresh_state_returns_defaults(mock_config_file) -> None:
    assert not mock_config_file.exists()
    assert load_config() == get_default_config()


def test_load_corrupted_file_returns_defaults(mock_config_file) -> None:
    mock_config_file.parent.mkdir(parents=True)
    mock_config_file.write_text("{ invalid json", encoding="utf-8")
    assert load_config() == get_default_config()


def test_load_non_dict_returns_defaults(mock_config_file) -> None:
    mock_config_file.parent.mkdir(parents=True)
    mock_config_file.write_text("[1, 2, 3]", encoding="utf-8")
    assert load_config() == get_default_config()


def test_load_ignores_unknown_keys(tmp_path) -> None:
    path = tmp_path / "custom.json"
    path.write_text(json.dumps({"jobs": 4, "bogus": True}), encoding="utf-8")

    cfg = load_config(str(path))

    assert cfg["jobs"] == 4
    assert "bogus" not in cfg


def test_explicit_missing_file_returns_defaults(tmp_path) -> None:
    assert load_config(str(tmp_path / "nope.json")) == get_default_config()


def test_merge_overrides_skips_none_and_unknown() -> None:
    base = get_default_config()
    merged = merge_overrides(base, {"reference": "abc", "jobs": None, "unknown": 1})

    assert merged["reference"] == "abc"
    assert merged["jobs"] == base["jobs"]
    assert "unknown" not in merged
    assert base["reference"] != "abc", "Base dictionary must not be mutated."


def test_load_default_file_applies_values(mock_config_file) -> None:
    mock_config_file.parent.mkdir(parents=True)
    mock_config_file.write_text(
        json.dumps({"software_version": "39.20231201.0", "sort_entries": True}),
        encoding="utf-8",
    )

    loaded = load_config()

    assert loaded["software_version"] == "39.20231201.0"
    assert loaded["sort_entries"] is True
    assert loaded["jobs"] == get_default_config()["jobs"]
