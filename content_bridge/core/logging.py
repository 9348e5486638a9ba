"""
Structured logging configuration.

Provides two formats:
  - **json**  (default): one JSON object per line for log shippers.
  - **console**: pipe-separated lines for local mapping work.

Usage:
    from content_bridge.core.logging import setup_logging, get_logger

    setup_logging()                   # call once at startup
    logger = get_logger(__name__)     # per-module logger
    logger.info("Page fetched", extra={"item_count": 20})

Traversal code binds the source name once with ``bind_source`` so every
line emitted while ingesting that source carries a ``source`` field.
"""

import logging
import sys
from collections.abc import MutableMapping
from contextvars import ContextVar
from typing import Any, Literal

from pythonjsonlogger import json as json_logger


LOG_FORMAT_CONSOLE = (
    "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
)

LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NOISY_LOGGERS = ("httpcore", "httpx", "uvicorn.access", "asyncio")

# Set by the HTTP request-context middleware for the duration of a request.
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def setup_logging(
    level: str = "INFO",
    log_format: Literal["json", "console"] = "json",
) -> None:
    """
    Configure the root logger for the whole process.

    Args:
        level:      Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_format: 'json' for structured JSON lines, 'console' for human-readable.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(level.upper())

    # Remove any pre-existing handlers to avoid duplicate log lines
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level.upper())

    if log_format == "json":
        formatter: logging.Formatter = _build_json_formatter()
    else:
        formatter = logging.Formatter(
            LOG_FORMAT_CONSOLE, datefmt=LOG_DATE_FORMAT)

    handler.setFormatter(formatter)
    handler.addFilter(RequestIdFilter())
    root_logger.addHandler(handler)

    for noisy in _NOISY_LOGGERS:
        logging.getLogger(noisy).setLevel(logging.WARNING)

    root_logger.info(
        "Logging initialised",
        extra={"log_level": level.upper(), "log_format": log_format},
    )


def get_logger(name: str) -> logging.Logger:
    """
    Return a named logger.

    Convention: call with ``get_logger(__name__)`` in each module.
    """
    return logging.getLogger(name)


class SourceLoggerAdapter(logging.LoggerAdapter):
    """Merge a fixed ``source`` field into the ``extra`` of every call."""

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def bind_source(logger: logging.Logger, source: str) -> SourceLoggerAdapter:
    """Return ``logger`` wrapped so each record is tagged with ``source``."""
    return SourceLoggerAdapter(logger, {"source": source})


# ─── Internal ─────────────────────────────────────────────────────────


def _build_json_formatter() -> json_logger.JsonFormatter:
    """Build a JSON log formatter with standard fields."""
    return json_logger.JsonFormatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt=LOG_DATE_FORMAT,
        rename_fields={
            "asctime": "timestamp",
            "levelname": "level",
            "name": "logger",
        },
    )


class RequestIdFilter(logging.Filter):
    """Inject the current request_id (if any) into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = request_id_ctx.get()
        if request_id is not None and not hasattr(record, "request_id"):
            record.request_id = request_id  # type: ignore[attr-defined]
        return True
