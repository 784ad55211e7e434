from __future__ import annotations

"""
Streaming Content Hasher.

Computes the SHA-256 digest of a file's content by feeding its byte stream
through an incremental digest in bounded chunks, so memory use does not
depend on file size.
"""

import contextlib
import hashlib
import logging
from typing import BinaryIO

from ostree_coswid.domain.constants import HASH_CHUNK_SIZE
from ostree_coswid.domain.coswid_models import HashEntry
from ostree_coswid.domain.errors import HashIoError
from ostree_coswid.infra.cancellation import CancellationToken

logger = logging.getLogger(__name__)


def hash_stream(
        stream: BinaryIO,
        cancel: CancellationToken,
        path: str = "",
        chunk_size: int = HASH_CHUNK_SIZE,
) -> HashEntry:
    """
    Hash the full content of ``stream`` with SHA-256.

    The stream is always closed, whether hashing succeeds or not. A
    failed read discards the partial digest.

    Args:
        stream: Readable binary stream positioned at the start of the content.
        cancel: Run cancellation token, polled between chunks.
        path: Store path of the file, for error context.
        chunk_size: Maximum bytes read per call.

    Returns:
        HashEntry: SHA-256 algorithm id and 32-byte digest.

    Raises:
        HashIoError: If reading the stream fails.
        Cancelled: If the token trips while hashing.
    """
    digest = hashlib.sha256()
    with contextlib.closing(stream):
        while True:
            cancel.raise_if_cancelled(path)
            try:
                chunk = stream.read(chunk_size)
            except OSError as e:
                raise HashIoError(f"Read failed while hashing: {e}", path=path or None) from e
            if not chunk:
                break
            digest.update(chunk)

    return HashEntry.sha256(digest.digest())
