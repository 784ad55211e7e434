from __future__ import annotations

"""
In-Memory Snapshot Store.

Holds one or more immutable trees built from nested dictionaries. Bytes
values are regular files, dict values are directories, and the marker
classes below stand for symbolic links and special files. Content is
addressed by the SHA-256 hex digest of its bytes, so identical files share
one blob. Enumeration yields children in dictionary insertion order.
"""

import hashlib
import io
from dataclasses import dataclass
from typing import Any, BinaryIO, Dict, Iterator, Mapping, Optional, Tuple

from ostree_coswid.domain.errors import MissingChecksum, NotFound, StoreIoError
from ostree_coswid.infra.cancellation import CancellationToken
from ostree_coswid.infra.store.base import (
    DirectoryChild,
    EntryKind,
    ResolvedCommit,
    TreeStore,
)


@dataclass(frozen=True)
class MemorySymlink:
    """Symbolic link placeholder."""

    target: str


@dataclass(frozen=True)
class MemorySpecial:
    """Device node, FIFO or socket placeholder."""

    description: str = "special"


@dataclass(frozen=True)
class MemoryNode:
    """Handle to an entry of an in-memory tree."""

    path: str
    value: Any


class MemoryStore(TreeStore):
    """
    Snapshot store backed by nested mappings.

    Args:
        refs: Reference name to tree mapping.
        commit_ids: Optional explicit commit identifiers per reference.
    """

    def __init__(
            self,
            refs: Mapping[str, Mapping[str, Any]],
            commit_ids: Optional[Mapping[str, str]] = None,
    ) -> None:
        self._refs = dict(refs)
        self._commit_ids = dict(commit_ids or {})
        self._blobs: Dict[str, bytes] = {}
        for tree in self._refs.values():
            self._index_blobs(tree)

    @classmethod
    def single(cls, tree: Mapping[str, Any], reference: str = "main") -> MemoryStore:
        """Build a store holding one tree under ``reference``."""
        return cls({reference: tree})

    # -------------------------------------------------------------------------
    # TreeStore API
    # -------------------------------------------------------------------------

    def resolve(self, reference: str, cancel: CancellationToken) -> ResolvedCommit:
        cancel.raise_if_cancelled()
        if reference not in self._refs:
            raise NotFound(f"Reference '{reference}' does not exist")
        commit_id = self._commit_ids.get(reference) or self._tree_digest(self._refs[reference])
        return ResolvedCommit(root=MemoryNode(path="", value=self._refs[reference]), commit_id=commit_id)

    def enumerate(self, handle: MemoryNode, cancel: CancellationToken) -> Iterator[DirectoryChild]:
        cancel.raise_if_cancelled(handle.path)
        if not isinstance(handle.value, Mapping):
            raise StoreIoError("Not a directory", path=handle.path)

        for name, value in handle.value.items():
            cancel.raise_if_cancelled(handle.path)
            child = MemoryNode(path=f"{handle.path}/{name}", value=value)
            yield DirectoryChild(name=name, kind=_classify(value), handle=child)

    def content_id_of(self, handle: MemoryNode) -> str:
        if not isinstance(handle.value, bytes):
            raise MissingChecksum("Entry has no content checksum", path=handle.path)
        return _blob_id(handle.value)

    def open_read_stream(self, content_id: str, cancel: CancellationToken) -> BinaryIO:
        cancel.raise_if_cancelled()
        try:
            return io.BytesIO(self._blobs[content_id])
        except KeyError:
            raise StoreIoError(f"No content object '{content_id}'") from None

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _index_blobs(self, tree: Mapping[str, Any]) -> None:
        for value in tree.values():
            if isinstance(value, bytes):
                self._blobs[_blob_id(value)] = value
            elif isinstance(value, Mapping):
                self._index_blobs(value)

    def _tree_digest(self, tree: Mapping[str, Any]) -> str:
        h = hashlib.sha256()
        for path, kind, blob in _flatten(tree, ""):
            h.update(f"{path}\0{kind}\0{blob}\n".encode("utf-8"))
        return h.hexdigest()


def _classify(value: Any) -> EntryKind:
    if isinstance(value, Mapping):
        return EntryKind.DIRECTORY
    if isinstance(value, bytes):
        return EntryKind.REGULAR_FILE
    if isinstance(value, MemorySymlink):
        return EntryKind.SYMBOLIC_LINK
    return EntryKind.OTHER


def _blob_id(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def _flatten(tree: Mapping[str, Any], prefix: str) -> Iterator[Tuple[str, str, str]]:
    for name, value in tree.items():
        path = f"{prefix}/{name}"
        kind = _classify(value)
        if kind is EntryKind.DIRECTORY:
            yield path, kind.value, ""
            yield from _flatten(value, path)
        elif kind is EntryKind.REGULAR_FILE:
            yield path, kind.value, _blob_id(value)
        else:
            yield path, kind.value, repr(value)
