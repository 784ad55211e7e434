from __future__ import annotations

"""
Generation Result Data Models.

Defines the result object handed from the generation engine to the
interface layer once a tag has been built and written.
"""

from dataclasses import dataclass, field
from typing import List

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class GenerationResult:
    """
    Summary of a completed tag generation run.

    Attributes:
        reference: Reference name that was resolved.
        commit_id: Commit identifier the reference resolved to.
        tag_id: Identifier of the emitted tag.
        output_path: Destination of the encoded bytes ("-" for stdout).
        files: Number of file entries in the document.
        directories: Number of directory entries, root included.
        skipped: Number of entries left out of the document.
        bytes_written: Size of the encoded tag.
        dry_run: Whether the output write was skipped.
        skipped_paths: Store paths of the entries left out.
    """
    reference: str
    commit_id: str
    tag_id: str
    output_path: str
    files: int
    directories: int
    skipped: int
    bytes_written: int
    dry_run: bool = False
    skipped_paths: List[str] = field(default_factory=list)
