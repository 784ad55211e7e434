from __future__ import annotations

"""
Unit tests for Cooperative Cancellation.
"""

import pytest

from ostree_coswid.domain.errors import Cancelled
from ostree_coswid.infra.cancellation import CancellationToken


def test_token_starts_untripped() -> None:
    token = CancellationToken()
    assert not token.is_cancelled
    token.raise_if_cancelled("/anything")


def test_cancel_runs_callbacks_once() -> None:
    token = CancellationToken()
    calls = []
    token.add_callback(lambda: calls.append("cb"))

    token.cancel()
    token.cancel()

    assert token.is_cancelled
    assert calls == ["cb"]


def test_callback_added_after_cancel_runs_immediately() -> None:
    token = CancellationToken()
    token.cancel()
    calls = []
    token.add_callback(lambda: calls.append("late"))
    assert calls == ["late"]


def test_raise_if_cancelled_carries_path() -> None:
    token = CancellationToken()
    token.cancel()
    with pytest.raises(Cancelled) as exc_info:
        token.raise_if_cancelled("/usr/lib")
    assert exc_info.value.path == "/usr/lib"


def test_child_follows_parent() -> None:
    parent = CancellationToken()
    child = parent.child()

    parent.cancel()

    assert child.is_cancelled


def test_child_cancel_leaves_parent_untouched() -> None:
    parent = CancellationToken()
    child = parent.child()

    child.cancel()

    assert child.is_cancelled
    assert not parent.is_cancelled
