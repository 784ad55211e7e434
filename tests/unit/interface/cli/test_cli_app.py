from __future__ import annotations

"""
Unit tests for the CLI Application Controller.

Runs ``main`` in-process with logging configuration stubbed out and
verifies exit codes and stream usage.
"""

import json
from pathlib import Path

import pytest

from ostree_coswid.core.pipeline.components.encoder import decode_tag
from ostree_coswid.interface.cli import app


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch) -> None:
    monkeypatch.setattr(app, "configure_logging", lambda *a, **k: None)


@pytest.fixture
def store_dir(tmp_path: Path) -> Path:
    main = tmp_path / "store" / "main"
    main.mkdir(parents=True)
    (main / "hello.txt").write_bytes(b"hi")
    return tmp_path / "store"


def _argv(store_dir: Path, reference: str, output: Path, *extra: str):
    return [str(store_dir), reference, str(output), "--store-type", "checkout", "--use-defaults", *extra]


def test_success_writes_tag(store_dir: Path, tmp_path: Path, capsys) -> None:
    output = tmp_path / "tag.cbor"
    code = app.main(_argv(store_dir, "main", output))

    assert code == 0
    tag = decode_tag(output.read_bytes())
    assert tag.root_directory.path_elements.file.fs_name == "hello.txt"
    assert "Files: 1" in capsys.readouterr().err


def test_missing_reference_exits_2(store_dir: Path, tmp_path: Path, capsys) -> None:
    output = tmp_path / "tag.cbor"
    code = app.main(_argv(store_dir, "nope", output))

    assert code == 2
    assert not output.exists()
    assert "ERROR:" in capsys.readouterr().err


def test_json_summary_on_stderr(store_dir: Path, tmp_path: Path, capsys) -> None:
    code = app.main(_argv(store_dir, "main", tmp_path / "t.cbor", "--json", "--dry-run"))

    assert code == 0
    summary = json.loads(capsys.readouterr().err)
    assert summary["dry_run"] is True
    assert summary["files"] == 1


def test_dump_config_prints_effective_config(store_dir: Path, tmp_path: Path, capsys) -> None:
    code = app.main(_argv(store_dir, "main", tmp_path / "t.cbor", "--dump-config", "-j", "3"))

    assert code == 0
    dumped = json.loads(capsys.readouterr().out)
    assert dumped["jobs"] == 3
    assert dumped["store_type"] == "checkout"
    assert not (tmp_path / "t.cbor").exists()
