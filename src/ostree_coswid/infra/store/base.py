from __future__ import annotations

"""
Content-Addressed Store Abstraction.

Declares the read-only capability the tree walker consumes: resolving a
reference to a root directory, enumerating a directory's children with
their classification, obtaining a file's content identifier and opening a
byte stream for that content. The handle type is opaque to the walker;
each adapter accepts exactly the handles its own enumeration yields.
"""

import abc
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO, Iterator

from ostree_coswid.infra.cancellation import CancellationToken


class EntryKind(Enum):
    """Classification of a directory child as reported by the store."""

    DIRECTORY = "directory"
    REGULAR_FILE = "regular"
    SYMBOLIC_LINK = "symlink"
    OTHER = "other"


@dataclass(frozen=True)
class DirectoryChild:
    """
    One child of an enumerated directory.

    Attributes:
        name: Basename within the parent directory.
        kind: Store classification of the entry.
        handle: Adapter-specific handle, valid for further store calls.
    """
    name: str
    kind: EntryKind
    handle: Any


@dataclass(frozen=True)
class ResolvedCommit:
    """Root directory handle and commit identifier of a resolved reference."""

    root: Any
    commit_id: str


class TreeStore(abc.ABC):
    """
    Read-only access to an immutable snapshot store.

    Implementations must be safe to call from several threads at once;
    reads of independent content may run in parallel.
    """

    @abc.abstractmethod
    def resolve(self, reference: str, cancel: CancellationToken) -> ResolvedCommit:
        """
        Resolve a named reference.

        Raises:
            NotFound: If the reference does not exist.
        """

    @abc.abstractmethod
    def enumerate(self, handle: Any, cancel: CancellationToken) -> Iterator[DirectoryChild]:
        """
        Yield the direct children of a directory in store order.

        Raises:
            StoreIoError: On backing store failure.
            Cancelled: If the token trips during enumeration.
        """

    @abc.abstractmethod
    def content_id_of(self, handle: Any) -> str:
        """
        Return the content address of a regular file.

        Raises:
            MissingChecksum: If the store has no recorded identity for it.
        """

    @abc.abstractmethod
    def open_read_stream(self, content_id: str, cancel: CancellationToken) -> BinaryIO:
        """
        Open a binary stream over the content with the given address.

        Raises:
            StoreIoError: If the content cannot be opened.
        """

    def close(self) -> None:
        """Release store resources."""

    def __enter__(self) -> TreeStore:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
