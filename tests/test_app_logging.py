"""Tests for logging configuration."""

import logging

from nutrition_diary.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("nutrition_diary")
    logger.handlers.clear()

    configure_logging()
    first_count = len(logger.handlers)

    configure_logging(logging.DEBUG)
    second_count = len(logger.handlers)

    assert first_count == 1
    assert second_count == 1
    assert logger.level == logging.DEBUG


def test_configure_logging_accepts_level_names() -> None:
    configure_logging("warning")

    assert logging.getLogger("nutrition_diary").level == logging.WARNING
    configure_logging()
