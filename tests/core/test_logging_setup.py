"""Tests for logging configuration."""

import logging
import re

from core.logging import LOG_FILE_NAME, UtcFormatter, configure_logging, get_logger


def test_get_logger_is_namespaced():
    assert get_logger("extractors.lockdown").name == "lockdown_export.extractors.lockdown"
    assert get_logger().name == "lockdown_export"


def test_console_only_by_default():
    logger = configure_logging(logging.INFO)
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)


def test_file_handler_when_log_dir_given(tmp_path):
    logger = configure_logging(logging.DEBUG, log_dir=tmp_path / "logs")
    get_logger("test").info("hello file")
    for handler in logger.handlers:
        handler.flush()

    content = (tmp_path / "logs" / LOG_FILE_NAME).read_text(encoding="utf-8")
    assert "INFO lockdown_export.test hello file" in content


def test_reconfigure_replaces_handlers(tmp_path):
    configure_logging(logging.DEBUG, log_dir=tmp_path)
    logger = configure_logging(logging.WARNING)
    assert len(logger.handlers) == 1


def test_utc_formatter_iso_timestamp():
    formatter = UtcFormatter(fmt="%(asctime)s %(message)s")
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    record.created = 0
    assert formatter.format(record) == "1970-01-01T00:00:00+00:00 msg"
    assert re.match(r"\d{4}-\d{2}-\d{2}T", formatter.formatTime(record, "%Y-%m-%dT%H"))
