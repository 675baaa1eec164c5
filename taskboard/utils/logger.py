"""Structured logging setup (structlog over the stdlib logging module)"""

import logging
import sys
from collections import OrderedDict
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

import structlog

ROOT_LOGGER_NAME = "taskboard"

_KEY_ORDER = ["timestamp", "level", "logger", "event"]


def _enforce_key_order(_logger, _method_name, event_dict):
    ordered = OrderedDict()
    for key in _KEY_ORDER:
        if key in event_dict:
            ordered[key] = event_dict.pop(key)
    ordered.update(event_dict)
    return ordered


def setup_logger(
    log_level: str = "INFO",
    log_format: str = "json",
    file_path: Optional[str] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 5,
) -> None:
    """
    Configure structlog and the stdlib handlers behind it.

    Args:
        log_level: Level name for the root handlers (DEBUG, INFO, ...).
        log_format: "json" for machine-readable lines, anything else for the
            colourless console renderer.
        file_path: Optional log file; rotated at max_bytes.
        max_bytes: Rotation threshold for the file handler.
        backup_count: Number of rotated files to keep.
    """
    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    renderer = (
        structlog.processors.JSONRenderer()
        if log_format == "json"
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _enforce_key_order,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    for name in (ROOT_LOGGER_NAME, "web"):
        stdlib_logger = logging.getLogger(name)
        stdlib_logger.handlers.clear()
        stdlib_logger.setLevel(level)
        stdlib_logger.propagate = False

        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setFormatter(logging.Formatter("%(message)s"))
        stdlib_logger.addHandler(stream_handler)

        if file_path:
            Path(file_path).parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                filename=str(file_path),
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
            file_handler.setFormatter(logging.Formatter("%(message)s"))
            stdlib_logger.addHandler(file_handler)


def get_logger(name: str):
    """Return a structlog logger; call sites log events with keyword fields."""
    return structlog.get_logger(name)
