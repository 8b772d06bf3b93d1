"""Logging setup for iac-explain.

Every module logs under the ``iac_explain`` namespace, and only to stderr so
that reports written to stdout stay machine-readable. A record can carry
context fields, either bound once through :func:`get_logger_with_context` or
passed per call as ``extra={"context": {...}}``. The formatter appends them
to the line as ``key=value`` pairs.
"""

import logging
import sys
from typing import Any

ROOT_LOGGER = "iac_explain"

PLAIN_FORMAT = "%(levelname)s: %(message)s"
STRUCTURED_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class StructuredFormatter(logging.Formatter):
    """Formatter that appends a record's context fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        fields = getattr(record, "context", None)
        if not fields:
            return message
        return message + " " + " ".join(f"{key}={value}" for key, value in fields.items())


def configure_logging(
    level: str = "INFO",
    format_string: str | None = None,
    structured: bool = False,
) -> None:
    """Route iac-explain logs to stderr, replacing any earlier setup.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string
        structured: Prefix each line with a timestamp and the logger name
    """
    if format_string is None:
        format_string = STRUCTURED_FORMAT if structured else PLAIN_FORMAT

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter(format_string))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(getattr(logging, level.upper()))
    logger.handlers = [handler]
    logger.propagate = False


def get_logger(name: str) -> logging.Logger:
    """Get the logger for a module, prefixing the package namespace if missing."""
    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


class ContextLogger(logging.LoggerAdapter):
    """Adapter that stamps bound context fields onto every record.

    Fields passed per call through ``extra={"context": ...}`` are merged over
    the bound ones rather than replacing them.
    """

    def process(self, msg: str, kwargs: dict[str, Any]) -> tuple[str, dict[str, Any]]:
        extra = dict(kwargs.get("extra") or {})
        extra["context"] = {**self.extra, **extra.get("context", {})}
        kwargs["extra"] = extra
        return msg, kwargs

    def bind(self, **context: Any) -> "ContextLogger":
        """A new adapter carrying these fields on top of the current ones."""
        return ContextLogger(self.logger, {**self.extra, **context})


def get_logger_with_context(name: str, **context: Any) -> ContextLogger:
    """Get a module logger whose records all carry ``context``."""
    return ContextLogger(get_logger(name), context)
