from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Shared fixtures for configuration dictionaries and in-memory stores.
"""

import os
import sys
from typing import Any, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from ostree_coswid.infra.cancellation import CancellationToken  # noqa: E402
from ostree_coswid.infra.store import MemorySpecial, MemoryStore, MemorySymlink  # noqa: E402


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture
def mock_config_dict(tmp_path) -> Dict[str, Any]:
    """
    Return a valid, complete configuration dictionary for testing.

    Reflects the structure defined in 'ostree_coswid.domain.config',
    ensuring all keys expected by the pipeline are present.

    Returns:
        Dict[str, Any]: A sample configuration dictionary.
    """
    return {
        # Store access
        "store_path": str(tmp_path / "store"),
        "reference": "main",
        "store_type": "checkout",

        # Output
        "output_path": str(tmp_path / "out" / "tag.cbor"),
        "cbor_tagged": False,

        # Tag metadata
        "tag_id": "org.example.test",
        "tag_version": 0,
        "software_name": "Test OS",
        "software_version": "",
        "version_scheme": "",
        "entity_name": "Test Builder",
        "entity_reg_id": "",

        # Traversal
        "jobs": 1,
        "sort_entries": False,

        # Diagnostics
        "log_level": "INFO",
        "log_file": "",
    }


@pytest.fixture
def sample_tree() -> Dict[str, Any]:
    """
    Return a small snapshot tree.

    Structure:
    /
      etc/
        hosts        b"127.0.0.1 localhost\\n"
        os-release   b"NAME=Test\\n"
      usr/
        bin/
          sh         -> symlink
        lib/         (empty)
      README         b"hello"
      dev-null       special file
    """
    return {
        "etc": {
            "hosts": b"127.0.0.1 localhost\n",
            "os-release": b"NAME=Test\n",
        },
        "usr": {
            "bin": {"sh": MemorySymlink("/usr/bin/bash")},
            "lib": {},
        },
        "README": b"hello",
        "dev-null": MemorySpecial("character device"),
    }


@pytest.fixture
def memory_store(sample_tree) -> MemoryStore:
    """Single-reference in-memory store holding ``sample_tree`` under 'main'."""
    return MemoryStore.single(sample_tree, reference="main")


@pytest.fixture
def cancel() -> CancellationToken:
    """Fresh, untripped cancellation token."""
    return CancellationToken()
