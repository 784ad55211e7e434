from __future__ import annotations

"""
Snapshot Tree Walker.

Visits a store directory depth-first in pre-order, recursing into
subdirectories and hashing every regular file. Symbolic links and special
files are observed but left out of the document. File hashing may be
fanned out to a thread pool; results are always re-joined in discovery
order before the directory entry is built. Any failure aborts the whole
walk and is re-raised with the path of the entry being processed.
"""

import logging
from concurrent.futures import Executor, Future
from typing import Any, Callable, Iterable, List, Optional

from ostree_coswid.core.analysis.document_builder import build_directory_entry
from ostree_coswid.core.services.hasher import hash_stream
from ostree_coswid.domain.constants import ROOT_DIRECTORY_NAME
from ostree_coswid.domain.coswid_models import DirectoryEntry, FileEntry
from ostree_coswid.domain.errors import CoswidError, with_path
from ostree_coswid.infra.cancellation import CancellationToken
from ostree_coswid.infra.store.base import DirectoryChild, EntryKind, TreeStore

logger = logging.getLogger(__name__)

SkipCallback = Callable[[str, EntryKind], None]


class TreeWalker:
    """
    Build DirectoryEntry documents from a TreeStore.

    Args:
        store: Read-only store capability, shared by every call.
        cancel: Run cancellation token, passed to every store call.
        executor: Optional pool used to hash files concurrently.
        sort_entries: Sort each directory's children by name before visiting.
        on_skip: Optional observer for entries left out of the document.
    """

    def __init__(
            self,
            store: TreeStore,
            cancel: CancellationToken,
            *,
            executor: Optional[Executor] = None,
            sort_entries: bool = False,
            on_skip: Optional[SkipCallback] = None,
    ) -> None:
        self.store = store
        self.cancel = cancel
        self.executor = executor
        self.sort_entries = sort_entries
        self.on_skip = on_skip

    def walk(self, root_handle: Any) -> DirectoryEntry:
        """Walk the tree below ``root_handle`` and return its root entry."""
        return self.walk_directory(root_handle, ROOT_DIRECTORY_NAME, "")

    def walk_directory(self, handle: Any, name: str, path: str) -> DirectoryEntry:
        """
        Recursively build the entry of one directory.

        Args:
            handle: Store handle of the directory.
            name: Basename of the directory.
            path: Store path of the directory, "" for the root.

        Returns:
            DirectoryEntry: Entry with collapsed file and directory children.

        Raises:
            CoswidError: Any store, hashing or cancellation failure, located
                at the innermost failing entry.
        """
        logger.debug(f"Walking directory '{path or '/'}'")
        directories: List[DirectoryEntry] = []
        pending_files: List[Future] = []
        files: List[FileEntry] = []

        try:
            for child in self._list_children(handle, path):
                child_path = f"{path}/{child.name}"

                if child.kind is EntryKind.DIRECTORY:
                    directories.append(self.walk_directory(child.handle, child.name, child_path))
                elif child.kind is EntryKind.REGULAR_FILE:
                    if self.executor is not None:
                        pending_files.append(
                            self.executor.submit(self.hash_file, child, child_path)
                        )
                    else:
                        files.append(self.hash_file(child, child_path))
                else:
                    logger.debug(f"Skipping {child.kind.value} entry '{child_path}'")
                    if self.on_skip is not None:
                        self.on_skip(child_path, child.kind)

            # Futures are joined in submission order, which is discovery order
            for future in pending_files:
                files.append(future.result())

        except CoswidError as exc:
            for future in pending_files:
                future.cancel()
            if exc.path is not None:
                raise
            raise with_path(exc, path) from exc

        return build_directory_entry(name, files, directories)

    def hash_file(self, child: DirectoryChild, path: str) -> FileEntry:
        """
        Resolve, open and hash one regular file.

        Args:
            child: Enumerated directory child classified as a regular file.
            path: Store path of the file.

        Returns:
            FileEntry: Entry named after the child with its SHA-256 hash.
        """
        try:
            content_id = self.store.content_id_of(child.handle)
            stream = self.store.open_read_stream(content_id, self.cancel)
            hash_entry = hash_stream(stream, self.cancel, path)
        except CoswidError as exc:
            if exc.path is not None:
                raise
            raise with_path(exc, path) from exc

        return FileEntry(fs_name=child.name, hash=hash_entry)

    def _list_children(self, handle: Any, path: str) -> Iterable[DirectoryChild]:
        children = self.store.enumerate(handle, self.cancel)
        if self.sort_entries:
            return sorted(children, key=lambda c: c.name)
        return children


def walk_tree(
        store: TreeStore,
        root_handle: Any,
        cancel: CancellationToken,
        **options: Any,
) -> DirectoryEntry:
    """Convenience wrapper: walk ``root_handle`` with a one-off TreeWalker."""
    return TreeWalker(store, cancel, **options).walk(root_handle)
