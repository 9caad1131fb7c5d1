"""Tests for codetree.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from codetree.logging import configure_logging, get_logger


def test_get_logger_nests_under_codetree() -> None:
    assert get_logger().name == "codetree"
    assert get_logger("scanner").name == "codetree.scanner"


def test_configure_logging_does_not_stack_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"

    configure_logging(verbose=True, log_file=log_file)
    logger = configure_logging(verbose=False)

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert logger.propagate is False


def test_file_sink_receives_messages(tmp_path: Path) -> None:
    log_file = tmp_path / "run.log"
    logger = configure_logging(verbose=True, log_file=log_file)

    get_logger("test").debug("hello %s", "sink")
    for handler in logger.handlers:
        handler.flush()

    assert "hello sink" in log_file.read_text(encoding="utf-8")
    configure_logging()
