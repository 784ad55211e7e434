from __future__ import annotations

from .base import DirectoryChild, EntryKind, ResolvedCommit, TreeStore
from .checkout import CheckoutStore
from .memory import MemorySpecial, MemoryStore, MemorySymlink

from ostree_coswid.domain.errors import ConfigError
from ostree_coswid.infra.cancellation import CancellationToken


def open_store(store_type: str, location: str, cancel: CancellationToken) -> TreeStore:
    """
    Open the store adapter selected by ``store_type``.

    The OSTree adapter is imported on demand so that checkout stores work
    on hosts without the libostree GObject bindings.
    """
    if store_type == "checkout":
        return CheckoutStore(location)
    if store_type == "ostree":
        try:
            from .ostree import OSTreeStore
        except (ImportError, ValueError) as e:
            # ValueError: gi is present but the OSTree typelib is not
            raise ConfigError(
                "ostree store requires the 'ostree' extra (PyGObject) and the libostree typelib"
            ) from e
        return OSTreeStore(location, cancel)
    raise ConfigError(f"Unknown store type '{store_type}'")


__all__ = [
    "CheckoutStore",
    "DirectoryChild",
    "EntryKind",
    "MemorySpecial",
    "MemoryStore",
    "MemorySymlink",
    "ResolvedCommit",
    "TreeStore",
    "open_store",
]
