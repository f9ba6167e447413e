"""
Statement Engine

Decoder for SWIFT MT940 electronic bank statements.

    from statement_engine import parse

    for statement in parse(text):
        for line in statement.statement_lines:
            print(line.date, line.funds_code, line.amount)
"""

from statement_engine.core.exceptions import (
    StatementEngineException,
    MT940Exception,
    FormatError,
    UnknownFieldError,
    UnsupportedDateRangeError,
)
from statement_engine.protocols.mt940 import MT940Parser, Statement, parse

__version__ = "1.0.0"
__all__ = [
    "parse",
    "MT940Parser",
    "Statement",
    "StatementEngineException",
    "MT940Exception",
    "FormatError",
    "UnknownFieldError",
    "UnsupportedDateRangeError",
]
