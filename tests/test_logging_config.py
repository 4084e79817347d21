"""Tests for the logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

from portfolio_hub.config import Settings
from portfolio_hub.logging_config import InfoOnlyFilter, build_logging_config, configure_logging


def _record(level: int) -> logging.LogRecord:
    return logging.LogRecord("portfolio_hub.test", level, __file__, 1, "message", None, None)


def test_info_only_filter() -> None:
    only_info = InfoOnlyFilter()

    assert only_info.filter(_record(logging.INFO))
    assert not only_info.filter(_record(logging.DEBUG))
    assert not only_info.filter(_record(logging.WARNING))


def test_console_only_without_log_dir() -> None:
    config = build_logging_config(Settings(log_level="DEBUG"))

    assert list(config["handlers"]) == ["console"]
    assert config["loggers"]["portfolio_hub"]["level"] == "DEBUG"


def test_log_dir_adds_rotating_files(tmp_path: Path) -> None:
    log_dir = tmp_path / "logs"

    config = build_logging_config(Settings(log_dir=str(log_dir)))

    handlers = config["handlers"]
    assert log_dir.is_dir()
    assert set(handlers) == {"console", "info_file", "error_file"}
    assert handlers["info_file"]["backupCount"] == 30
    assert handlers["info_file"]["filters"] == ["info_only"]
    assert handlers["error_file"]["level"] == "WARNING"
    assert handlers["error_file"]["backupCount"] == 30


def test_files_split_info_from_warnings(tmp_path: Path) -> None:
    configure_logging(Settings(log_dir=str(tmp_path)))
    logger = logging.getLogger("portfolio_hub.services.example")

    logger.debug("hidden")
    logger.info("user created")
    logger.warning("login failed")
    for handler in logging.getLogger("portfolio_hub").handlers:
        handler.flush()

    info_log = (tmp_path / "info.log").read_text(encoding="utf-8")
    error_log = (tmp_path / "errors.log").read_text(encoding="utf-8")
    assert "[INFO] portfolio_hub.services.example: user created" in info_log
    assert "login failed" not in info_log
    assert "hidden" not in info_log
    assert "login failed" in error_log
    assert "user created" not in error_log

    for handler in logging.getLogger("portfolio_hub").handlers:
        handler.close()
