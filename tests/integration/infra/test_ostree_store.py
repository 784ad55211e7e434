from __future__ import annotations

"""
Integration tests for the OSTree Repository Store.

Builds a throwaway archive repository with libostree and walks the
committed tree. Skipped when the GObject bindings or the OSTree typelib
are not installed.
"""

import hashlib
from pathlib import Path

import pytest

gi = pytest.importorskip("gi")
try:
    gi.require_version("OSTree", "1.0")
except ValueError:
    pytest.skip("OSTree typelib not available", allow_module_level=True)

from gi.repository import Gio, OSTree  # noqa: E402

from ostree_coswid.core.analysis.tree_walker import TreeWalker, walk_tree  # noqa: E402
from ostree_coswid.domain.errors import Cancelled, NotFound  # noqa: E402
from ostree_coswid.infra.cancellation import CancellationToken  # noqa: E402
from ostree_coswid.infra.store import open_store  # noqa: E402


@pytest.fixture
def repo_path(tmp_path: Path) -> Path:
    """Commit a small tree under the ref 'test' and return the repo path."""
    content = tmp_path / "content"
    (content / "etc").mkdir(parents=True)
    (content / "etc" / "hostname").write_bytes(b"iot\n")
    (content / "hello.txt").write_bytes(b"hi")

    path = tmp_path / "repo"
    repo = OSTree.Repo.new(Gio.File.new_for_path(str(path)))
    repo.create(OSTree.RepoMode.ARCHIVE, None)
    repo.prepare_transaction(None)
    mtree = OSTree.MutableTree.new()
    repo.write_directory_to_mtree(Gio.File.new_for_path(str(content)), mtree, None, None)
    _, root = repo.write_mtree(mtree, None)
    _, checksum = repo.write_commit(None, "test", None, None, root, None)
    repo.transaction_set_ref(None, "test", checksum)
    repo.commit_transaction(None)
    return path


def test_walk_committed_tree(repo_path: Path) -> None:
    cancel = CancellationToken()
    with open_store("ostree", str(repo_path), cancel) as store:
        resolved = store.resolve("test", cancel)
        root = walk_tree(store, resolved.root, cancel, sort_entries=True)

    assert len(resolved.commit_id) == 64
    assert root.path_elements.directory.fs_name == "etc"
    hello = root.path_elements.file
    assert hello.fs_name == "hello.txt"
    assert hello.hash.value == hashlib.sha256(b"hi").digest()


def test_unknown_ref_is_not_found(repo_path: Path) -> None:
    cancel = CancellationToken()
    with open_store("ostree", str(repo_path), cancel) as store:
        with pytest.raises(NotFound):
            store.resolve("missing", cancel)


def test_cancelled_read_is_located_at_file_path(repo_path: Path) -> None:
    cancel = CancellationToken()
    with open_store("ostree", str(repo_path), cancel) as store:
        root = store.resolve("test", cancel).root
        hello = next(c for c in store.enumerate(root, cancel) if c.name == "hello.txt")
        checksum = store.content_id_of(hello.handle)

        cancel.cancel()
        with pytest.raises(Cancelled) as exc_info:
            store.open_read_stream(checksum, cancel)
        assert exc_info.value.path is None

        walker = TreeWalker(store, cancel)
        with pytest.raises(Cancelled) as exc_info:
            walker.hash_file(hello, "/hello.txt")
        assert exc_info.value.path == "/hello.txt"
