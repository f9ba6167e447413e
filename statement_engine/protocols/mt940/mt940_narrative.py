"""
Structured Narrative Decoder (field 86)

Many banks, mostly German (DATEV/ZKA layout), put a repeating group
micro-format into field 86:

    <3-digit business transaction code><sep><2-digit sub-code><text><sep>...

The separator is the first non-digit character after the business
transaction code, usually ``?``. Example:

    166?00GUTSCHRIFT?109075?20EREF+TESTREF?21SVWZ+INVOICE 42?30DEUTDEFF?31123456

This decoding is bank specific; fields that do not follow the layout are
still readable through ``InformationToAccountOwner.narrative``.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from statement_engine.core.exceptions import FormatError
from statement_engine.core.structured_logging import get_logger
from statement_engine.protocols.mt940.mt940_codes import (
    NARRATIVE_ACCOUNT_HOLDER_CODES,
    NARRATIVE_DETAIL_CODES,
    NARRATIVE_SUBFIELD_TARGETS,
)

logger = get_logger(__name__)

CONTENT_PATTERN = re.compile(r"^(\d{3})(\d*)(\D.*)$", re.DOTALL)
LINE_BREAK_PATTERN = re.compile(r"\r?\n")


@dataclass(frozen=True)
class StatementLineInformation:
    """Decoded sub-fields of a structured field 86."""

    code: int
    transaction_description: Optional[str] = None  # ?00
    prima_nota: Optional[str] = None  # ?10
    details: str = ""  # ?20-?25
    account_identifier: Optional[str] = None  # ?26
    bank_code: Optional[str] = None  # ?30
    account_number: Optional[str] = None  # ?31
    account_holder: str = ""  # ?32-?33
    text_key_extension: Optional[str] = None  # ?34
    unrecognized_fields: Tuple[Tuple[str, str], ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "transaction_description": self.transaction_description,
            "prima_nota": self.prima_nota,
            "details": self.details,
            "account_identifier": self.account_identifier,
            "bank_code": self.bank_code,
            "account_number": self.account_number,
            "account_holder": self.account_holder,
            "text_key_extension": self.text_key_extension,
            "unrecognized_fields": [list(pair) for pair in self.unrecognized_fields],
        }


def parse_statement_line_information(content: str) -> StatementLineInformation:
    """
    Decode the structured sub-fields of a field 86 content.

    Raises:
        FormatError: If the content does not start with a 3-digit code
            followed by a separator.
    """
    unfolded = LINE_BREAK_PATTERN.sub("", content)

    match = CONTENT_PATTERN.match(unfolded)
    if not match:
        raise FormatError(
            "Narrative does not follow the structured sub-field layout",
            line=content,
            tag="86",
        )

    code = int(match.group(1))
    body = match.group(3)
    separator = re.escape(body[0])
    sub_field_pattern = re.compile(f"{separator}(\\d{{2}})([^{separator}]*)")

    values: Dict[str, Any] = {}
    details: List[str] = []
    account_holder: List[str] = []
    unrecognized: List[Tuple[str, str]] = []

    for sub_code, text in sub_field_pattern.findall(body):
        number = int(sub_code)

        if number in NARRATIVE_SUBFIELD_TARGETS:
            values[NARRATIVE_SUBFIELD_TARGETS[number]] = text
        elif number in NARRATIVE_DETAIL_CODES:
            details.append(text)
        elif number in NARRATIVE_ACCOUNT_HOLDER_CODES:
            account_holder.append(text)
        else:
            logger.debug("Unrecognized narrative sub-field %s: %r", sub_code, text)
            unrecognized.append((sub_code, text))

    return StatementLineInformation(
        code=code,
        details="\n".join(details),
        account_holder="\n".join(account_holder),
        unrecognized_fields=tuple(unrecognized),
        **values,
    )
