"""Tests for logging configuration."""

import logging

from sleep_tracker.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("sleep_tracker")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging()
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1


def test_configure_logging_keeps_records_local() -> None:
    logger = logging.getLogger("sleep_tracker")
    logger.handlers.clear()

    configure_logging()

    assert logger.propagate is False
    assert logger.level == logging.INFO
    assert logger.handlers[0].formatter._fmt == "%(levelname)s: %(name)s: %(message)s"
