"""
Statement Engine - Structured Logging

JSON-lines formatting and a single place to attach handlers to the
``statement_engine`` package logger. Library modules only call
``logging.getLogger(__name__)``; hosts call ``configure_logging`` once.
"""

import json
import logging
import sys
import traceback
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .config import Config, LogFormat, get_config

PACKAGE_LOGGER_NAME = "statement_engine"

SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# LogRecord attributes that are not user supplied ``extra`` values
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


@dataclass
class LogEvent:
    """Structured log event."""

    timestamp: float
    level: str
    message: str
    component: str
    service: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    exception: Optional[BaseException] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        result: Dict[str, Any] = {
            "timestamp": self.timestamp,
            "iso_timestamp": datetime.fromtimestamp(self.timestamp, timezone.utc).isoformat(),
            "level": self.level,
            "message": self.message,
            "component": self.component,
        }

        if self.service:
            result["service"] = self.service

        if self.metadata:
            result["metadata"] = self.metadata

        if self.exception is not None:
            result["exception"] = {
                "type": type(self.exception).__name__,
                "message": str(self.exception),
                "traceback": traceback.format_exception(
                    type(self.exception), self.exception, self.exception.__traceback__
                ),
            }

        return result

    def to_json(self) -> str:
        """Convert to JSON string."""
        return json.dumps(self.to_dict(), ensure_ascii=False, default=str)


class StructuredFormatter(logging.Formatter):
    """Formats log records as one JSON object per line."""

    def __init__(self, service_name: Optional[str] = None):
        super().__init__()
        self.service_name = service_name

    def format(self, record: logging.LogRecord) -> str:
        metadata = {
            key: value
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }

        event = LogEvent(
            timestamp=record.created,
            level=record.levelname,
            message=record.getMessage(),
            component=record.name,
            service=self.service_name,
            metadata=metadata,
            exception=record.exc_info[1] if record.exc_info else None,
        )
        return event.to_json()


_handler: Optional[logging.Handler] = None


def configure_logging(config: Optional[Config] = None) -> logging.Logger:
    """Attach the package handler according to ``config``.

    Calling again replaces the previously installed handler, so hosts can
    reconfigure at runtime.

    Raises:
        ConfigurationException: If the configuration does not validate
    """
    global _handler
    config = config or get_config()
    config.validate()

    pkg_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    if _handler is not None:
        pkg_logger.removeHandler(_handler)
        _handler.close()

    for existing in list(pkg_logger.handlers):
        if isinstance(existing, logging.NullHandler):
            pkg_logger.removeHandler(existing)

    if config.log_file:
        handler: logging.Handler = logging.FileHandler(config.log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)

    if config.log_format == LogFormat.STRUCTURED:
        handler.setFormatter(StructuredFormatter(service_name=config.service_name))
    else:
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))

    level = config.effective_log_level
    handler.setLevel(level)
    pkg_logger.setLevel(level)
    pkg_logger.addHandler(handler)
    pkg_logger.propagate = False

    _handler = handler
    return pkg_logger


def reset_logging() -> None:
    """Remove the package handler installed by ``configure_logging``."""
    global _handler
    pkg_logger = logging.getLogger(PACKAGE_LOGGER_NAME)

    if _handler is not None:
        pkg_logger.removeHandler(_handler)
        _handler.close()
        _handler = None

    pkg_logger.setLevel(logging.NOTSET)
    pkg_logger.propagate = True


def get_logger(name: str) -> logging.Logger:
    """Return a logger, keeping the package silent until it is configured."""
    pkg_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
    if _handler is None and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)
