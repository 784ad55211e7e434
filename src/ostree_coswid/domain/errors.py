from __future__ import annotations

"""
Generation Error Hierarchy.

Every failure raised while resolving, walking, hashing, encoding or writing
a tag derives from CoswidError. Errors carry the store path of the entry
being processed when the failure happened; the original exception is kept
as the chained cause.
"""

from typing import List, Optional


class CoswidError(Exception):
    """Base class for all tag generation failures."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path is not None:
            return f"{self.message} (at '{self.path or '/'}')"
        return self.message


class ConfigError(CoswidError):
    """The effective configuration cannot drive a run."""


class NotFound(CoswidError):
    """A reference could not be resolved in the store."""


class StoreIoError(CoswidError):
    """Enumeration or read failure in the backing store."""


class HashIoError(StoreIoError):
    """A content stream failed partway through hashing."""


class OutputIoError(StoreIoError):
    """The encoded tag could not be written to its sink."""


class MissingChecksum(CoswidError):
    """The store holds no content identity for a regular file."""


class Cancelled(CoswidError):
    """The run's cancellation token was tripped."""


class SerializationError(CoswidError):
    """A constructed value cannot be represented in the wire schema."""


def with_path(error: CoswidError, path: str) -> CoswidError:
    """Build a new error of the same kind as ``error``, anchored at ``path``."""
    return type(error)(error.message, path=path)


def causal_chain(error: BaseException) -> List[str]:
    """Flatten an exception and its chained causes into display lines."""
    chain: List[str] = []
    seen = set()
    current: Optional[BaseException] = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        text = str(current) or type(current).__name__
        if not chain or chain[-1] != text:
            chain.append(text)
        current = current.__cause__ or current.__context__
    return chain
