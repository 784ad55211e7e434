from __future__ import annotations

"""
Directory Document Builder.

Turns the file and subdirectory lists collected for one directory into a
DirectoryEntry, collapsing each list independently by cardinality.
"""

from typing import Sequence

from ostree_coswid.domain.constants import FS_ROOT
from ostree_coswid.domain.coswid_models import (
    DirectoryEntry,
    FileEntry,
    PathElements,
    collapse,
)


def build_directory_entry(
        name: str,
        files: Sequence[FileEntry],
        directories: Sequence[DirectoryEntry],
) -> DirectoryEntry:
    """
    Assemble a DirectoryEntry from its children in discovery order.

    A slot with no children is left absent, a single child is stored
    bare and several children are stored as a list. The path elements
    group itself is always present.

    Args:
        name: Basename of the directory, empty for the tree root.
        files: File entries of the direct children.
        directories: Directory entries of the direct children.

    Returns:
        DirectoryEntry: The populated, immutable directory entry.
    """
    path_elements = PathElements(
        directory=collapse(directories),
        file=collapse(files),
    )
    return DirectoryEntry(fs_name=name, root=FS_ROOT, path_elements=path_elements)
