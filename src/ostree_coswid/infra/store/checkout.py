from __future__ import annotations

"""
Checked-Out Tree Store.

Exposes a snapshot that has already been checked out to local disk (for
example with ``ostree checkout``) through the store capability. The store
location is a directory; a reference names a subdirectory relative to it
("." selects the location itself). Content is addressed by its
store-relative POSIX path ("/etc/hosts"). Symbolic links are classified, never followed.
"""

import hashlib
import logging
import os
import stat
from typing import BinaryIO, Iterator

from ostree_coswid.domain.errors import MissingChecksum, NotFound, StoreIoError
from ostree_coswid.infra.cancellation import CancellationToken
from ostree_coswid.infra.store.base import (
    DirectoryChild,
    EntryKind,
    ResolvedCommit,
    TreeStore,
)

logger = logging.getLogger(__name__)


class CheckoutStore(TreeStore):
    """
    Snapshot store over a directory on the local filesystem.

    Handles are absolute paths inside the store location.

    Args:
        location: Directory holding the checked-out trees.
    """

    def __init__(self, location: str) -> None:
        self._location = os.path.realpath(location)
        if not os.path.isdir(self._location):
            raise NotFound(f"Store location is not a directory: {location}")
        logger.debug(f"CheckoutStore opened at {self._location}")

    @property
    def location(self) -> str:
        return self._location

    # -------------------------------------------------------------------------
    # TreeStore API
    # -------------------------------------------------------------------------

    def resolve(self, reference: str, cancel: CancellationToken) -> ResolvedCommit:
        cancel.raise_if_cancelled()
        root = os.path.realpath(os.path.join(self._location, reference or "."))
        if not self._is_inside(root) or not os.path.isdir(root):
            raise NotFound(f"Reference '{reference}' does not exist in {self._location}")

        rel = self._relative(root)
        commit_id = hashlib.sha256(f"{self._location}\0{rel}".encode("utf-8")).hexdigest()
        return ResolvedCommit(root=root, commit_id=commit_id)

    def enumerate(self, handle: str, cancel: CancellationToken) -> Iterator[DirectoryChild]:
        cancel.raise_if_cancelled(self._relative(handle))
        try:
            with os.scandir(handle) as entries:
                for entry in entries:
                    cancel.raise_if_cancelled(self._relative(handle))
                    try:
                        kind = _classify(entry)
                    except OSError as e:
                        raise StoreIoError(
                            f"Cannot stat entry: {e}", path=self._relative(entry.path)
                        ) from e
                    yield DirectoryChild(name=entry.name, kind=kind, handle=entry.path)
        except OSError as e:
            raise StoreIoError(f"Cannot enumerate directory: {e}", path=self._relative(handle)) from e

    def content_id_of(self, handle: str) -> str:
        if not self._is_inside(handle):
            raise MissingChecksum("Entry lies outside the store", path=handle)
        return self._relative(handle)

    def open_read_stream(self, content_id: str, cancel: CancellationToken) -> BinaryIO:
        cancel.raise_if_cancelled(content_id)
        path = os.path.join(self._location, content_id.lstrip("/"))
        try:
            return open(path, "rb")
        except OSError as e:
            raise StoreIoError(f"Cannot open content '{content_id}': {e}", path=content_id) from e

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _is_inside(self, path: str) -> bool:
        try:
            return os.path.commonpath([self._location, os.path.abspath(path)]) == self._location
        except ValueError:
            return False

    def _relative(self, path: str) -> str:
        rel = os.path.relpath(path, self._location)
        if rel == ".":
            return ""
        return "/" + rel.replace(os.sep, "/")


def _classify(entry: os.DirEntry) -> EntryKind:
    """
    Map a directory entry to its store classification without following links.

    Raises:
        OSError: If the entry cannot be inspected.
    """
    if entry.is_symlink():
        return EntryKind.SYMBOLIC_LINK
    mode = entry.stat(follow_symlinks=False).st_mode

    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    if stat.S_ISREG(mode):
        return EntryKind.REGULAR_FILE
    return EntryKind.OTHER
