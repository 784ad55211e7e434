from __future__ import annotations

"""
CoSWID Tag Data Models.

Provides the immutable entities of a concise software identity tag and the
one-or-many helpers that keep its container fields compact: a slot holding
zero values is absent, a slot holding one value stores it bare, and a slot
holding several stores them as an ordered list.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Sequence, TypeVar, Union

from ostree_coswid.domain.constants import FS_ROOT, HASH_ALG_SHA256

T = TypeVar("T")

OneOrMany = Union[T, List[T]]

# -----------------------------------------------------------------------------
# CARDINALITY HELPERS
# -----------------------------------------------------------------------------

def collapse(items: Sequence[T]) -> Optional[OneOrMany[T]]:
    """
    Collapse a sequence into the one-or-many representation.

    Args:
        items: Values in discovery order.

    Returns:
        None for an empty sequence, the bare element for a single one,
        otherwise a list preserving the input order.
    """
    if len(items) == 0:
        return None
    if len(items) == 1:
        return items[0]
    return list(items)


def expand(value: Optional[OneOrMany[T]]) -> List[T]:
    """Inverse view of collapse: always a list, possibly empty."""
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]

# -----------------------------------------------------------------------------
# ENUMERATIONS
# -----------------------------------------------------------------------------

class EntityRole(IntEnum):
    """Entity roles registered for CoSWID (RFC 9393, section 4.1)."""

    TAG_CREATOR = 1
    SOFTWARE_CREATOR = 2
    AGGREGATOR = 3
    DISTRIBUTOR = 4
    LICENSOR = 5
    MAINTAINER = 6

# -----------------------------------------------------------------------------
# STRUCTURAL COMPONENTS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class HashEntry:
    """
    Integrity value of a file.

    Attributes:
        alg_id: Named Information hash algorithm identifier.
        value: Raw digest bytes.
    """
    alg_id: int
    value: bytes

    @classmethod
    def sha256(cls, digest: bytes) -> HashEntry:
        return cls(alg_id=HASH_ALG_SHA256, value=digest)


@dataclass(frozen=True)
class FileEntry:
    """
    A regular file inside the walked tree.

    Attributes:
        fs_name: Basename within the parent directory.
        hash: Content hash of the full byte stream.
        root: Mount point the hash attests to.
        size: Optional size in bytes.
        file_version: Optional file version string.
    """
    fs_name: str
    hash: HashEntry
    root: str = FS_ROOT
    size: Optional[int] = None
    file_version: Optional[str] = None


@dataclass(frozen=True)
class PathElements:
    """Children of a directory, each slot collapsed by cardinality."""

    directory: Optional[OneOrMany["DirectoryEntry"]] = None
    file: Optional[OneOrMany[FileEntry]] = None


@dataclass(frozen=True)
class DirectoryEntry:
    """
    A directory inside the walked tree.

    Attributes:
        fs_name: Basename within the parent, empty for the tree root.
        root: Mount point the contained hashes attest to.
        path_elements: Collapsed file and subdirectory children.
    """
    fs_name: str
    root: str = FS_ROOT
    path_elements: PathElements = field(default_factory=PathElements)

    @property
    def files(self) -> List[FileEntry]:
        return expand(self.path_elements.file)

    @property
    def directories(self) -> List[DirectoryEntry]:
        return expand(self.path_elements.directory)


@dataclass(frozen=True)
class EntityEntry:
    """An organization or person together with the roles it plays for the tag."""

    entity_name: str
    role: OneOrMany[EntityRole] = EntityRole.TAG_CREATOR
    reg_id: Optional[str] = None
    thumbprint: Optional[HashEntry] = None


@dataclass(frozen=True)
class Payload:
    """Software footprint: the root directory of the walked tree."""

    directory: Optional[OneOrMany[DirectoryEntry]] = None


@dataclass(frozen=True)
class CoSWIDTag:
    """
    Top-level concise software identity tag.

    Attributes:
        tag_id: Globally unique tag identifier.
        software_name: Name of the described software.
        entity: Authoring entities of the tag.
        tag_version: Revision of the tag itself.
        corpus: Tag describes pre-installation media.
        patch: Tag describes a patch.
        supplemental: Tag supplements another tag.
        software_version: Optional version string of the software.
        version_scheme: Optional registered version scheme identifier.
        payload: Optional files and directories of the software.
    """
    tag_id: str
    software_name: str
    entity: OneOrMany[EntityEntry]
    tag_version: int = 0
    corpus: Optional[bool] = None
    patch: Optional[bool] = None
    supplemental: Optional[bool] = None
    software_version: Optional[str] = None
    version_scheme: Optional[int] = None
    payload: Optional[Payload] = None

    @property
    def root_directory(self) -> Optional[DirectoryEntry]:
        if self.payload is None:
            return None
        roots = expand(self.payload.directory)
        return roots[0] if roots else None


@dataclass
class TreeStats:
    """Counters gathered from a finished document."""

    files: int = 0
    directories: int = 0


def count_entries(root: DirectoryEntry) -> TreeStats:
    """Count files and directories below ``root``, the root included."""
    stats = TreeStats()
    pending = [root]
    while pending:
        current = pending.pop()
        stats.directories += 1
        stats.files += len(current.files)
        pending.extend(current.directories)
    return stats
