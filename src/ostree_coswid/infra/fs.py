from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Provides user data directory resolution, path normalization and the
output sink used to persist encoded tags (a file path, or standard output
when the destination is "-").
"""

import contextlib
import os
import sys
from typing import BinaryIO, Iterator, Optional, Tuple

# -----------------------------------------------------------------------------
# GLOBAL CONSTANTS
# -----------------------------------------------------------------------------

APP_DIR_NAME = "ostree-coswid"
UNIX_APP_DIR_NAME = ".ostree_coswid"
STDOUT_SINK = "-"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Resolve the standard OS-specific directory for persistent application data.

    Standards:
    - Windows: %LOCALAPPDATA%/ostree-coswid
    - Linux/Mac: ~/.ostree_coswid

    The directory is not created; callers that write into it do so.

    Returns:
        str: Absolute path to the application data directory.
    """
    path: str = ""

    if os.name == "nt":
        base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
        if base:
            path = os.path.join(base, APP_DIR_NAME)

    if not path:
        home = os.path.expanduser("~")
        path = os.path.join(home, UNIX_APP_DIR_NAME)

    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def safe_mkdir(path: str) -> Tuple[bool, Optional[str]]:
    """
    Attempt to recursively create a directory structure safely.

    Args:
        path: Target directory path.

    Returns:
        Tuple[bool, Optional[str]]: (Success flag, Error message if applicable).
    """
    try:
        os.makedirs(path, exist_ok=True)
        return True, None
    except OSError as e:
        return False, str(e)

# -----------------------------------------------------------------------------
# OUTPUT SINK API
# -----------------------------------------------------------------------------

@contextlib.contextmanager
def open_output_sink(destination: str) -> Iterator[BinaryIO]:
    """
    Open a binary sink for the encoded tag.

    Standard output is flushed but never closed. File destinations get
    their parent directory created first and are written to a sibling
    ".part" file that replaces the destination only when the block exits
    cleanly; on failure the destination is left untouched.

    Args:
        destination: File path, or "-" for standard output.

    Yields:
        BinaryIO: Writable binary stream.

    Raises:
        OSError: If the destination cannot be opened.
    """
    if destination == STDOUT_SINK:
        stream = sys.stdout.buffer
        try:
            yield stream
        finally:
            stream.flush()
        return

    parent = os.path.dirname(os.path.abspath(destination))
    ok, err = safe_mkdir(parent)
    if not ok:
        raise OSError(f"Cannot create output directory '{parent}': {err}")

    partial = f"{destination}.part"
    try:
        with open(partial, "wb") as f:
            yield f
        os.replace(partial, destination)
    except BaseException:
        if os.path.exists(partial):
            os.unlink(partial)
        raise
