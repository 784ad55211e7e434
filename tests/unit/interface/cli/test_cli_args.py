from __future__ import annotations

"""
Unit tests for CLI Argument Definition and Mapping.
"""

import pytest

from ostree_coswid.interface.cli.args import args_to_overrides, build_parser


def test_positionals_are_optional() -> None:
    args = build_parser().parse_args([])
    overrides = args_to_overrides(args)
    assert overrides["store_path"] is None
    assert overrides["reference"] is None
    assert overrides["output_path"] is None


def test_positionals_map_to_config_keys() -> None:
    args = build_parser().parse_args(["./repo", "fedora/stable/x86_64/iot", "out.cbor"])
    overrides = args_to_overrides(args)
    assert overrides["store_path"] == "./repo"
    assert overrides["reference"] == "fedora/stable/x86_64/iot"
    assert overrides["output_path"] == "out.cbor"


def test_flags_only_override_when_set() -> None:
    overrides = args_to_overrides(build_parser().parse_args([]))
    assert "sort_entries" not in overrides
    assert "cbor_tagged" not in overrides
    assert "log_level" not in overrides

    overrides = args_to_overrides(build_parser().parse_args(["--sort", "--cbor-tag", "--debug"]))
    assert overrides["sort_entries"] is True
    assert overrides["cbor_tagged"] is True
    assert overrides["log_level"] == "DEBUG"


def test_metadata_options() -> None:
    args = build_parser().parse_args([
        "--tag-id", "org.example.{commit}",
        "--tag-version", "2",
        "--software-version", "39",
        "--version-scheme", "semver",
        "-j", "4",
        "--store-type", "checkout",
    ])
    overrides = args_to_overrides(args)
    assert overrides["tag_id"] == "org.example.{commit}"
    assert overrides["tag_version"] == 2
    assert overrides["software_version"] == "39"
    assert overrides["version_scheme"] == "semver"
    assert overrides["jobs"] == 4
    assert overrides["store_type"] == "checkout"


def test_invalid_store_type_exits() -> None:
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--store-type", "git"])
