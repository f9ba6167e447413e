"""
Statement Engine - Core Module

Configuration management, exception hierarchy and logging setup shared by
the protocol decoders.
"""

from .config import Config, Environment, LogFormat, LogLevel, get_config, set_config
from .exceptions import (
    StatementEngineException,
    ConfigurationException,
    MT940Exception,
    FormatError,
    UnknownFieldError,
    UnsupportedDateRangeError,
)
from .structured_logging import StructuredFormatter, configure_logging, get_logger, reset_logging

__all__ = [
    "Config",
    "Environment",
    "LogFormat",
    "LogLevel",
    "get_config",
    "set_config",
    "StatementEngineException",
    "ConfigurationException",
    "MT940Exception",
    "FormatError",
    "UnknownFieldError",
    "UnsupportedDateRangeError",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]
