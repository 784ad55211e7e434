from __future__ import annotations

"""
Integration tests for Logging Infrastructure.

Verifies the asynchronous QueueListener architecture, idempotency
of configuration, and log file rotation logic.
"""

import logging
import time
from logging.handlers import QueueListener
from pathlib import Path

import pytest

from ostree_coswid.infra.logging import (
    _CONFIGURED_FLAG_ATTR,
    _HANDLER_TAG_ATTR,
    _QUEUE_LISTENER_ATTR,
    LoggingConfig,
    configure_logging,
    shutdown_logging,
)


@pytest.fixture(autouse=True)
def reset_logging() -> None:
    """Clean up root logger handlers before and after each test."""
    _reset()
    yield
    _reset()


def _reset() -> None:
    root = logging.getLogger()

    listener = getattr(root, _QUEUE_LISTENER_ATTR, None)
    if listener and isinstance(listener, QueueListener):
        listener.stop()
        setattr(root, _QUEUE_LISTENER_ATTR, None)

    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    if hasattr(root, _CONFIGURED_FLAG_ATTR):
        delattr(root, _CONFIGURED_FLAG_ATTR)


def test_logging_idempotency() -> None:
    """Multiple config calls do not duplicate handlers."""
    cfg = LoggingConfig(level="INFO", console=True)

    configure_logging(cfg)
    root = logging.getLogger()
    initial_handler_count = len(root.handlers)

    configure_logging(cfg)
    assert len(root.handlers) == initial_handler_count, "Handlers were duplicated."


def test_force_reconfigures_level() -> None:
    configure_logging(LoggingConfig(level="INFO"))
    configure_logging(LoggingConfig(level="DEBUG"), force=True)
    assert logging.getLogger().level == logging.DEBUG


def test_log_rotation(tmp_path: Path) -> None:
    """File rotation happens when the size limit is exceeded."""
    log_file = tmp_path / "test_rotate.log"
    cfg = LoggingConfig(
        level="DEBUG",
        console=False,
        log_file=str(log_file),
        max_bytes=100,
        backup_count=1,
    )

    configure_logging(cfg)
    logger = logging.getLogger("test_rotate")

    for _ in range(10):
        logger.debug("This is a long log message to trigger rotation." * 5)

    # Give time for the QueueListener to process
    time.sleep(0.5)

    backup_file = tmp_path / "test_rotate.log.1"
    assert log_file.exists()
    assert backup_file.exists(), "Rotation backup file was not created."


def test_queue_listener_architecture() -> None:
    """The root logger uses a QueueHandler-based architecture."""
    configure_logging(LoggingConfig(level="INFO", console=True))

    root = logging.getLogger()
    queue_handlers = [h for h in root.handlers if getattr(h, _HANDLER_TAG_ATTR, False)]

    assert len(queue_handlers) > 0
    assert getattr(root, _QUEUE_LISTENER_ATTR) is not None


def test_shutdown_stops_listener() -> None:
    configure_logging(LoggingConfig(level="INFO", console=True))
    shutdown_logging()
    assert getattr(logging.getLogger(), _QUEUE_LISTENER_ATTR, None) is None
