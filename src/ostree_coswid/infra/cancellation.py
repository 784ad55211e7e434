from __future__ import annotations

"""
Cooperative Cancellation.

A CancellationToken is created once per run and passed explicitly through
every recursive and I/O call. Long-running operations poll it between
units of work; store adapters that drive native cancellables register a
callback to be notified when the token trips.
"""

import logging
import threading
from typing import Callable, List

from ostree_coswid.domain.errors import Cancelled

logger = logging.getLogger(__name__)


class CancellationToken:
    """Thread-safe, one-shot cancellation flag with callbacks."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._callbacks: List[Callable[[], None]] = []

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        """Trip the token and run registered callbacks exactly once."""
        with self._lock:
            if self._event.is_set():
                return
            self._event.set()
            callbacks = list(self._callbacks)
            self._callbacks.clear()

        logger.debug("Cancellation requested.")
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Register ``callback``; runs immediately if already cancelled."""
        with self._lock:
            if not self._event.is_set():
                self._callbacks.append(callback)
                return
        callback()

    def child(self) -> CancellationToken:
        """
        Create a token that trips when this one does but can also be
        cancelled on its own without affecting this token.
        """
        token = CancellationToken()
        self.add_callback(token.cancel)
        return token

    def raise_if_cancelled(self, path: str = "") -> None:
        """
        Raise Cancelled if the token has tripped.

        Args:
            path: Store path of the operation being aborted, for context.
        """
        if self._event.is_set():
            raise Cancelled("Operation cancelled", path=path or None)
