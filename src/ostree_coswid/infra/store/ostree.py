from __future__ import annotations

"""
OSTree Repository Store.

Reads commits straight out of an OSTree repository through the libostree
GObject bindings (PyGObject). References resolve with ``read_commit``,
directories are enumerated as Gio files without following symlinks, file
content ids are the OSTree object checksums, and content streams come from
``load_file``. GLib errors are translated into the generation error
hierarchy; the run's cancellation token drives a Gio.Cancellable.
"""

import io
import logging
import threading
import weakref
from typing import Any, BinaryIO, Iterator, Optional

import gi

gi.require_version("OSTree", "1.0")
from gi.repository import Gio, GLib, OSTree  # noqa: E402

from ostree_coswid.domain.errors import (  # noqa: E402
    Cancelled,
    CoswidError,
    MissingChecksum,
    NotFound,
    StoreIoError,
)
from ostree_coswid.infra.cancellation import CancellationToken  # noqa: E402
from ostree_coswid.infra.store.base import (  # noqa: E402
    DirectoryChild,
    EntryKind,
    ResolvedCommit,
    TreeStore,
)

logger = logging.getLogger(__name__)

_ENUMERATE_ATTRIBUTES = "standard::name,standard::type"

_KIND_MAP = {
    Gio.FileType.DIRECTORY: EntryKind.DIRECTORY,
    Gio.FileType.REGULAR: EntryKind.REGULAR_FILE,
    Gio.FileType.SYMBOLIC_LINK: EntryKind.SYMBOLIC_LINK,
}


class OSTreeStore(TreeStore):
    """
    Snapshot store over an on-disk OSTree repository.

    Args:
        location: Path of the repository (the directory holding ``objects/``).
        cancel: Token observed while opening the repository.
    """

    def __init__(self, location: str, cancel: CancellationToken) -> None:
        self._location = location
        self._lock = threading.Lock()
        self._cancellables: "weakref.WeakKeyDictionary[CancellationToken, Gio.Cancellable]" = (
            weakref.WeakKeyDictionary()
        )
        self._repo = OSTree.Repo.new(Gio.File.new_for_path(location))
        try:
            self._repo.open(self._cancellable(cancel))
        except GLib.Error as e:
            raise _translate(e, f"Failed to open ostree repository at '{location}'") from e
        logger.debug(f"OSTreeStore opened at {location}")

    # -------------------------------------------------------------------------
    # TreeStore API
    # -------------------------------------------------------------------------

    def resolve(self, reference: str, cancel: CancellationToken) -> ResolvedCommit:
        cancel.raise_if_cancelled()
        try:
            result = self._repo.read_commit(reference, self._cancellable(cancel))
        except GLib.Error as e:
            raise _translate(e, f"Failed to read commit for '{reference}'", not_found=True) from e
        root, commit_id = result[-2], result[-1]
        return ResolvedCommit(root=root, commit_id=str(commit_id))

    def enumerate(self, handle: Any, cancel: CancellationToken) -> Iterator[DirectoryChild]:
        path = _path_of(handle)
        cancellable = self._cancellable(cancel)
        cancel.raise_if_cancelled(path)
        try:
            enumerator = handle.enumerate_children(
                _ENUMERATE_ATTRIBUTES,
                Gio.FileQueryInfoFlags.NOFOLLOW_SYMLINKS,
                cancellable,
            )
        except GLib.Error as e:
            raise _translate(e, "Unable to enumerate children", path=path) from e

        try:
            while True:
                try:
                    info = enumerator.next_file(cancellable)
                except GLib.Error as e:
                    raise _translate(e, "Unable to get next file", path=path) from e
                if info is None:
                    break
                yield DirectoryChild(
                    name=info.get_name(),
                    kind=_KIND_MAP.get(info.get_file_type(), EntryKind.OTHER),
                    handle=enumerator.get_child(info),
                )
        finally:
            try:
                enumerator.close(None)
            except GLib.Error as e:
                logger.debug(f"Ignoring enumerator close failure at {path}: {e.message}")

    def content_id_of(self, handle: Any) -> str:
        get_checksum = getattr(handle, "get_checksum", None)
        checksum: Optional[str] = get_checksum() if get_checksum else None
        if not checksum:
            raise MissingChecksum("Repository file has no checksum", path=_path_of(handle))
        return checksum

    def open_read_stream(self, content_id: str, cancel: CancellationToken) -> BinaryIO:
        cancellable = self._cancellable(cancel)
        cancel.raise_if_cancelled()
        try:
            result = self._repo.load_file(content_id, cancellable)
        except GLib.Error as e:
            raise _translate(e, f"Failed to load content object '{content_id}'") from e
        stream = result[1]
        if stream is None:
            raise StoreIoError(f"Content object '{content_id}' has no data stream")
        return io.BufferedReader(_GioInputReader(stream, cancellable))

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _cancellable(self, cancel: CancellationToken) -> Gio.Cancellable:
        """Return the Gio.Cancellable bridged to ``cancel``, creating it once."""
        with self._lock:
            cancellable = self._cancellables.get(cancel)
            if cancellable is None:
                cancellable = Gio.Cancellable.new()
                self._cancellables[cancel] = cancellable
                register = True
            else:
                register = False
        if register:
            cancel.add_callback(cancellable.cancel)
        return cancellable


class _GioInputReader(io.RawIOBase):
    """Raw binary reader over a Gio.InputStream."""

    def __init__(self, stream: Gio.InputStream, cancellable: Gio.Cancellable) -> None:
        super().__init__()
        self._stream = stream
        self._cancellable = cancellable

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        try:
            data = self._stream.read_bytes(len(buffer), self._cancellable).get_data()
        except GLib.Error as e:
            if e.matches(Gio.io_error_quark(), Gio.IOErrorEnum.CANCELLED):
                raise Cancelled("Operation cancelled") from e
            raise OSError(e.message) from e
        n = len(data)
        buffer[:n] = data
        return n

    def close(self) -> None:
        if not self.closed:
            try:
                self._stream.close(None)
            except GLib.Error as e:
                logger.debug(f"Ignoring stream close failure: {e.message}")
        super().close()


def _path_of(handle: Any) -> str:
    get_path = getattr(handle, "get_path", None)
    path = get_path() if get_path else None
    return path or ""


def _translate(
        error: GLib.Error,
        message: str,
        *,
        path: Optional[str] = None,
        not_found: bool = False,
) -> CoswidError:
    """Map a GLib.Error onto the generation error hierarchy."""
    quark = Gio.io_error_quark()
    detail = f"{message}: {error.message}"
    if error.matches(quark, Gio.IOErrorEnum.CANCELLED):
        return Cancelled("Operation cancelled", path=path)
    if not_found and error.matches(quark, Gio.IOErrorEnum.NOT_FOUND):
        return NotFound(detail, path=path)
    return StoreIoError(detail, path=path)
