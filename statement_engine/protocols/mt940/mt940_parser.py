"""
MT940 Message Parser

Parses MT940 Customer Statement Messages from raw text into statements of
typed field records.

Message layout:

    :20:STARTUMSE
    :25:10020030/1234567
    :28C:00001/001
    :60F:C230101EUR1234,56
    :61:2301010101D12,00NTRFNONREF//B123
    :86:166?00GUTSCHRIFT?20EREF+TESTREF
    :62F:C230101EUR1222,56
    -

A line holding only ``-`` separates statements. Line breaks not followed by
``:`` are soft wraps and are removed before fields are split.
"""

import re
import time
from types import MappingProxyType
from typing import Callable, List, Mapping, Optional

from prometheus_client import Counter, Histogram

from statement_engine.core.config import Config, get_config
from statement_engine.core.exceptions import (
    FormatError,
    MT940Exception,
    UnknownFieldError,
)
from statement_engine.core.structured_logging import get_logger
from statement_engine.protocols.mt940.mt940_fields import (
    MT940Field,
    parse_account_identification,
    parse_closing_balance,
    parse_future_valuta_balance,
    parse_information_to_account_owner,
    parse_job,
    parse_opening_balance,
    parse_reference,
    parse_statement_line,
    parse_statement_number,
    parse_valuta_balance,
)
from statement_engine.protocols.mt940.mt940_message import Statement

logger = get_logger(__name__)

# Metrics for MT940 decoding
MT940_STATEMENTS_PARSED = Counter(
    "statement_engine_mt940_statements_total",
    "Total MT940 statements decoded",
)

MT940_FIELDS_PARSED = Counter(
    "statement_engine_mt940_fields_total",
    "Total MT940 fields decoded",
    ["tag"],
)

MT940_PARSE_ERRORS = Counter(
    "statement_engine_mt940_errors_total",
    "MT940 decoding errors",
    ["error_type"],
)

MT940_PARSE_DURATION = Histogram(
    "statement_engine_mt940_parse_duration_seconds",
    "MT940 message decoding duration",
)

FieldParser = Callable[[Optional[str], str], MT940Field]

FIELD_PARSERS: Mapping[str, FieldParser] = MappingProxyType(
    {
        "20": parse_job,
        "21": parse_reference,
        "25": parse_account_identification,
        "28": parse_statement_number,
        "60": parse_opening_balance,
        "61": parse_statement_line,
        "62": parse_closing_balance,
        "64": parse_valuta_balance,
        "65": parse_future_valuta_balance,
        "86": parse_information_to_account_owner,
    }
)


class MT940Parser:
    """
    Parser for MT940 Customer Statement Messages.

    Handles:
    - Line ending normalization
    - Statement separation (``-`` lines)
    - Soft line-wrap unfolding
    - Tag dispatch to the field grammars

    Parsing is strict: any malformed line raises and no partial result is
    returned.
    """

    # Field pattern: :TAG[MODIFIER]:content
    FIELD_PATTERN = re.compile(r"^:(\d{2})([A-Za-z])?:(.*)$", re.DOTALL)

    # Statement separator: a line holding only "-"
    SEPARATOR_PATTERN = re.compile(r"^-\n", re.MULTILINE)

    # Line break not followed by a field opener
    SOFT_WRAP_PATTERN = re.compile(r"\n(?!:)")

    # Line break (plus indentation) before a field opener
    FIELD_BOUNDARY_PATTERN = re.compile(r"\n\s*(?=:)")

    def __init__(self, config: Optional[Config] = None):
        """
        Initialize parser.

        Args:
            config: Engine configuration; the process-wide one when omitted
        """
        self.config = config or get_config()

    def parse(self, text: str) -> List[Statement]:
        """
        Parse an MT940 message from raw text.

        Args:
            text: Raw MT940 message text

        Returns:
            Statements in source order

        Raises:
            FormatError: If a line or field content is malformed
            UnknownFieldError: If a field tag is not supported
            UnsupportedDateRangeError: If an entry date crosses a year boundary
        """
        start_time = time.perf_counter()

        try:
            statements = [
                self.parse_statement(lines) for lines in self.split_statements(text)
            ]
        except MT940Exception as e:
            self._record_error(e)
            logger.debug("MT940 decoding failed: %s", e)
            raise

        duration = time.perf_counter() - start_time
        if self.config.metrics_enabled:
            MT940_STATEMENTS_PARSED.inc(len(statements))
            MT940_PARSE_DURATION.observe(duration)

        logger.debug(
            "Decoded %d MT940 statement(s) in %.2f ms",
            len(statements),
            duration * 1000,
        )
        return statements

    def split_statements(self, text: str) -> List[List[str]]:
        """Split a message into statements and each statement into field lines."""
        normalized = text.replace("\r\n", "\n").replace("\r", "\n").strip()
        if normalized.endswith("-"):
            normalized += "\n"

        chunks = self.SEPARATOR_PATTERN.split(normalized)
        while chunks and not chunks[-1]:
            chunks.pop()

        return [self._split_lines(self.SOFT_WRAP_PATTERN.sub("", chunk)) for chunk in chunks]

    def _split_lines(self, chunk: str) -> List[str]:
        return [line for line in self.FIELD_BOUNDARY_PATTERN.split(chunk) if line]

    def parse_statement(self, lines: List[str]) -> Statement:
        """Dispatch every raw line of one statement."""
        return Statement(fields=tuple(self.parse_field(line) for line in lines))

    def parse_field(self, line: str) -> MT940Field:
        """
        Parse a single ``:TAG[MODIFIER]:content`` line.

        Raises:
            FormatError: If the line does not have the field shape
            UnknownFieldError: If the tag is not an MT940 field
        """
        match = self.FIELD_PATTERN.match(line)
        if not match:
            raise FormatError(f"Wrong line format: {line!r}", line=line)

        tag, modifier, content = match.groups()

        field_parser = FIELD_PARSERS.get(tag)
        if field_parser is None:
            raise UnknownFieldError(tag, line=line)

        record = field_parser(modifier, content)

        if self.config.metrics_enabled:
            MT940_FIELDS_PARSED.labels(tag=tag).inc()

        return record

    def _record_error(self, error: MT940Exception) -> None:
        if self.config.metrics_enabled:
            MT940_PARSE_ERRORS.labels(error_type=error.error_code).inc()


def parse_field(line: str) -> MT940Field:
    """Convenience function to dispatch a single field line."""
    parser = MT940Parser()
    try:
        return parser.parse_field(line)
    except MT940Exception as e:
        parser._record_error(e)
        raise


def parse(text: str, config: Optional[Config] = None) -> List[Statement]:
    """
    Convenience function to parse an MT940 message.

    Args:
        text: Raw MT940 message text
        config: Optional engine configuration

    Returns:
        Statements in source order
    """
    parser = MT940Parser(config=config)
    return parser.parse(text)
