"""
Statement Engine - Custom Exceptions

This module defines custom exception classes for the statement engine.
"""

from datetime import date
from typing import Any, Dict, Optional


class StatementEngineException(Exception):
    """Base exception for all statement engine errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "STATEMENT_ENGINE_ERROR"
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (Code: {self.error_code}, Context: {self.context})"
        return f"{self.message} (Code: {self.error_code})"


class ConfigurationException(StatementEngineException):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(
            message,
            error_code="CONFIG_ERROR",
            context={"config_key": config_key} if config_key else {},
        )


class MT940Exception(StatementEngineException):
    """Base class for MT940 decoding failures."""


class FormatError(MT940Exception):
    """A line or field content does not satisfy its grammar."""

    def __init__(
        self,
        message: str,
        line: Optional[str] = None,
        tag: Optional[str] = None,
    ):
        context: Dict[str, Any] = {}
        if tag:
            context["tag"] = tag
        if line is not None:
            context["line"] = line

        super().__init__(message, error_code="FORMAT_ERROR", context=context)
        self.line = line
        self.tag = tag


class UnknownFieldError(MT940Exception):
    """A field tag outside the supported MT940 set."""

    def __init__(self, tag: str, line: Optional[str] = None):
        super().__init__(
            f"Field {tag} is not implemented",
            error_code="UNKNOWN_FIELD",
            context={"tag": tag},
        )
        self.tag = tag
        self.line = line


class UnsupportedDateRangeError(MT940Exception):
    """An entry date resolves into a different year than its value date."""

    def __init__(self, value_date: date, raw_entry_date: str):
        super().__init__(
            "Value date and entry date are in different years",
            error_code="UNSUPPORTED_DATE_RANGE",
            context={
                "value_date": value_date.isoformat(),
                "entry_date": raw_entry_date,
            },
        )
        self.value_date = value_date
        self.raw_entry_date = raw_entry_date
