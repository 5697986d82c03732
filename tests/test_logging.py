"""Tests for commitgraph.logging."""

from __future__ import annotations

import logging
from pathlib import Path

from commitgraph.logging import configure_logging, get_logger


def test_get_logger_nests_under_package_logger() -> None:
    assert get_logger("assembler").name == "commitgraph.assembler"
    assert get_logger().name == "commitgraph"


def test_configure_logging_replaces_previous_handlers(tmp_path: Path) -> None:
    log_file = tmp_path / "graph.log"

    configure_logging(verbose=True, log_file=log_file)
    logger = configure_logging()

    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert not logger.propagate


def test_configure_logging_writes_file_sink(tmp_path: Path) -> None:
    log_file = tmp_path / "graph.log"

    logger = configure_logging(verbose=True, log_file=log_file)
    get_logger("layout").debug("placed %d chains", 2)
    for handler in logger.handlers:
        handler.flush()

    assert "DEBUG commitgraph.layout: placed 2 chains" in log_file.read_text(encoding="utf-8")
    configure_logging()
