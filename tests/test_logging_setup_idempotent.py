from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler

from cero.core.logging.setup import configure_logging


def test_configure_logging_is_idempotent(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CERO_LOG_TO_FILE", "off")

    logger = logging.getLogger("cero")
    logger.handlers = []

    configure_logging(tmp_path)
    first_count = len(logger.handlers)

    configure_logging(tmp_path)
    assert len(logger.handlers) == first_count


def test_file_logging_adds_rotating_handler_once(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CERO_LOG_TO_FILE", "on")
    monkeypatch.setenv("CERO_LOG_DIR", str(tmp_path / "logs"))

    logger = logging.getLogger("cero")
    logger.handlers = []

    configure_logging(tmp_path)
    configure_logging(tmp_path)

    file_handlers = [handler for handler in logger.handlers if isinstance(handler, RotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename == str(tmp_path / "logs" / "cero.log")

    for handler in file_handlers:
        handler.close()
    logger.handlers = []


def test_client_loggers_are_quieted(tmp_path, monkeypatch) -> None:
    monkeypatch.setenv("CERO_LOG_TO_FILE", "off")
    monkeypatch.delenv("CERO_CLIENT_LOG_LEVEL", raising=False)

    configure_logging(tmp_path)

    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("httpcore").level == logging.WARNING
