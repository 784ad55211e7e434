from __future__ import annotations

"""
Unit tests for the Streaming Content Hasher.

Verifies digest correctness across chunk boundaries, stream closing and
error translation.
"""

import hashlib
import io

import pytest

from ostree_coswid.core.services.hasher import hash_stream
from ostree_coswid.domain.constants import HASH_ALG_SHA256, SHA256_DIGEST_SIZE
from ostree_coswid.domain.errors import Cancelled, HashIoError
from ostree_coswid.infra.cancellation import CancellationToken


class _FailingStream(io.RawIOBase):
    """Stream that yields one chunk and then fails."""

    def __init__(self) -> None:
        super().__init__()
        self.calls = 0

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        self.calls += 1
        if self.calls == 1:
            return b"partial"
        raise OSError("device unplugged")


def test_hash_matches_hashlib(cancel: CancellationToken) -> None:
    entry = hash_stream(io.BytesIO(b"hi"), cancel)
    assert entry.alg_id == HASH_ALG_SHA256
    assert entry.value == hashlib.sha256(b"hi").digest()
    assert len(entry.value) == SHA256_DIGEST_SIZE


def test_empty_stream_hashes_empty_content(cancel: CancellationToken) -> None:
    entry = hash_stream(io.BytesIO(b""), cancel)
    assert entry.value.hex() == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"


def test_chunk_size_does_not_change_digest(cancel: CancellationToken) -> None:
    data = bytes(range(256)) * 1000
    small = hash_stream(io.BytesIO(data), cancel, chunk_size=7)
    large = hash_stream(io.BytesIO(data), cancel)
    assert small == large


def test_stream_is_closed(cancel: CancellationToken) -> None:
    stream = io.BytesIO(b"content")
    hash_stream(stream, cancel)
    assert stream.closed


def test_read_failure_raises_hash_io_error(cancel: CancellationToken) -> None:
    stream = _FailingStream()
    with pytest.raises(HashIoError) as exc_info:
        hash_stream(stream, cancel, path="/etc/hosts")

    assert exc_info.value.path == "/etc/hosts"
    assert isinstance(exc_info.value.__cause__, OSError)
    assert stream.closed


def test_cancelled_token_aborts_hashing() -> None:
    token = CancellationToken()
    token.cancel()
    stream = io.BytesIO(b"content")

    with pytest.raises(Cancelled):
        hash_stream(stream, token, path="/x")
    assert stream.closed
