"""
MT940 Field Records and Parsers

One frozen record type per MT940 field and one parser function per grammar.
Parser functions take the field modifier and the raw content and either
return a fully populated record or raise FormatError.

Secondary decodings (structured narrative, legacy account and statement
number layouts) are computed on request only and cached per record.
"""

import re
import threading
import warnings
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Callable, ClassVar, Dict, Optional, Tuple, TypeVar

from statement_engine.core.exceptions import FormatError
from statement_engine.core.structured_logging import get_logger
from statement_engine.protocols.mt940.mt940_codes import (
    NO_DATE_SENTINELS,
    BalanceRole,
    BalanceType,
    FundsCode,
    MT940FieldTag,
    Sign,
    get_transaction_type_description,
)
from statement_engine.protocols.mt940.mt940_decoders import (
    parse_amount,
    parse_date,
    parse_entry_date,
)
from statement_engine.protocols.mt940.mt940_narrative import (
    StatementLineInformation,
    parse_statement_line_information,
)

logger = get_logger(__name__)

T = TypeVar("T")

AMOUNT = r"\d{1,12}(?:,\d{0,2})?"

ACCOUNT_IDENTIFIER_PATTERN = re.compile(r"(.{1,35})")
LEGACY_ACCOUNT_PATTERN = re.compile(r"^(.{8,11})/(\d{0,23})([A-Z]{3})?$")
STATEMENT_NUMBER_PATTERN = re.compile(r"^(\d{1,5})(?:/(\d{1,5}))?$")
LEGACY_STATEMENT_PATTERN = re.compile(r"^(0|(\d{5})/(\d{2,5}))$")
BALANCE_PATTERN = re.compile(rf"^([CD])(\w{{6}}|ALT|0)([A-Z]{{3}})({AMOUNT})$")
STATEMENT_LINE_PATTERN = re.compile(
    r"^(\d{6})"  # value date YYMMDD
    r"(\d{4})?"  # entry date MMDD
    r"(C|D|RC|RD)"  # funds code
    r"\D?"  # third character of the currency code
    rf"({AMOUNT})"
    r"([NF].{3})"  # transaction type identification code
    r"(NONREF|(?:(?!//).){0,16})"  # reference for the account owner
    r"(?:\Z|//)"
    r"(.*)",  # reference of the account servicing institution, details
    re.DOTALL,
)


class LazyView:
    """A value computed at most once, on first request, under a lock."""

    __slots__ = ("_lock", "_value", "_ready")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._value: Any = None
        self._ready = False

    def get(self, compute: Callable[[], T]) -> T:
        if self._ready:
            return self._value
        with self._lock:
            if not self._ready:
                self._value = compute()
                self._ready = True
        return self._value

    @property
    def ready(self) -> bool:
        return self._ready

    def __repr__(self) -> str:
        return f"LazyView(ready={self._ready})"


def _warn_deprecated(name: str) -> None:
    warnings.warn(f"{name} should be deprecated", DeprecationWarning, stacklevel=3)


@dataclass(frozen=True)
class MT940Field:
    """Common capabilities of every MT940 field record."""

    tag: ClassVar[str] = ""

    modifier: Optional[str]

    @property
    def field_tag(self) -> Optional[MT940FieldTag]:
        return MT940FieldTag.from_tag(self.tag)

    @property
    def field_name(self) -> str:
        field_tag = self.field_tag
        return field_tag.field_name if field_tag else self.tag

    def to_dict(self) -> Dict[str, Any]:
        return {"tag": self.tag, "modifier": self.modifier}


# 20
@dataclass(frozen=True)
class Job(MT940Field):
    """Transaction reference number."""

    tag: ClassVar[str] = "20"

    reference: str

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "reference": self.reference}


# 21
@dataclass(frozen=True)
class Reference(MT940Field):
    """Related reference."""

    tag: ClassVar[str] = "21"

    reference: str

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "reference": self.reference}


@dataclass(frozen=True)
class LegacyAccount:
    """Bank code / account number / currency reading of field 25."""

    bank_code: str
    account_number: str
    account_currency: Optional[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bank_code": self.bank_code,
            "account_number": self.account_number,
            "account_currency": self.account_currency,
        }


# 25
@dataclass(frozen=True)
class AccountIdentification(MT940Field):
    """
    Account identification, 35x free text (usually an IBAN).

    ``legacy_account()`` offers the older ``BANKCODE/ACCOUNT[CCY]`` reading;
    the field format itself prescribes no such structure.
    """

    tag: ClassVar[str] = "25"

    account_identifier: str
    content: str
    _legacy: LazyView = field(
        default_factory=LazyView, init=False, repr=False, compare=False
    )

    def legacy_account(self) -> LegacyAccount:
        """Decode the content as ``bank-code/account-number[currency]``."""
        _warn_deprecated("MT940 legacy account decoding")
        return self._legacy.get(lambda: _parse_legacy_account(self.content))

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "account_identifier": self.account_identifier}


def _parse_legacy_account(content: str) -> LegacyAccount:
    logger.warning("MT940 legacy account decoding should be deprecated")

    match = LEGACY_ACCOUNT_PATTERN.match(content)
    if not match:
        raise FormatError("Invalid legacy account layout", line=content, tag="25")

    bank_code, account_number, account_currency = match.groups()
    return LegacyAccount(bank_code, account_number, account_currency)


@dataclass(frozen=True)
class LegacyStatement:
    """Statement number / sheet reading of field 28."""

    number: int
    sheet: int

    def to_dict(self) -> Dict[str, Any]:
        return {"number": self.number, "sheet": self.sheet}


# 28
@dataclass(frozen=True)
class StatementNumber(MT940Field):
    """Statement number with optional sequence number, ``5n[/5n]``."""

    tag: ClassVar[str] = "28"

    number: str
    sequence: Optional[str]
    content: str
    _legacy: LazyView = field(
        default_factory=LazyView, init=False, repr=False, compare=False
    )

    def legacy_statement(self) -> LegacyStatement:
        """Decode the content as ``0`` or ``nnnnn/nn[nnn]``."""
        _warn_deprecated("MT940 legacy statement number decoding")
        return self._legacy.get(lambda: _parse_legacy_statement(self.content))

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "number": self.number, "sequence": self.sequence}


def _parse_legacy_statement(content: str) -> LegacyStatement:
    logger.warning("MT940 legacy statement number decoding should be deprecated")

    match = LEGACY_STATEMENT_PATTERN.match(content)
    if not match:
        raise FormatError("Invalid legacy statement number layout", line=content, tag="28")

    if match.group(1) == "0":
        return LegacyStatement(number=0, sheet=0)
    return LegacyStatement(number=int(match.group(2)), sheet=int(match.group(3)))


@dataclass(frozen=True)
class AccountBalance(MT940Field):
    """Balance shared by fields 60, 62, 64 and 65."""

    role: ClassVar[BalanceRole]

    balance_type: Optional[BalanceType]
    sign: Sign
    date: Optional[date]
    currency: str
    amount: Decimal

    @property
    def signed_amount(self) -> Decimal:
        return self.amount if self.sign == Sign.CREDIT else -self.amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            **super().to_dict(),
            "role": self.role.value,
            "balance_type": self.balance_type.value if self.balance_type else None,
            "sign": self.sign.value,
            "date": self.date.isoformat() if self.date else None,
            "currency": self.currency,
            "amount": str(self.amount),
        }


# 60
@dataclass(frozen=True)
class OpeningBalance(AccountBalance):
    tag: ClassVar[str] = "60"
    role: ClassVar[BalanceRole] = BalanceRole.OPENING


# 62
@dataclass(frozen=True)
class ClosingBalance(AccountBalance):
    tag: ClassVar[str] = "62"
    role: ClassVar[BalanceRole] = BalanceRole.CLOSING


# 64
@dataclass(frozen=True)
class ValutaBalance(AccountBalance):
    tag: ClassVar[str] = "64"
    role: ClassVar[BalanceRole] = BalanceRole.VALUTA


# 65
@dataclass(frozen=True)
class FutureValutaBalance(AccountBalance):
    tag: ClassVar[str] = "65"
    role: ClassVar[BalanceRole] = BalanceRole.FUTURE_VALUTA


# 61
@dataclass(frozen=True)
class StatementLine(MT940Field):
    """A single booked transaction."""

    tag: ClassVar[str] = "61"

    date: date
    entry_date: Optional[date]
    funds_code: FundsCode
    amount: Decimal
    swift_code: str
    reference: str
    transaction_description: str

    @property
    def value_date(self) -> date:
        return self.date

    @property
    def transaction_type_description(self) -> Optional[str]:
        return get_transaction_type_description(self.swift_code)

    @property
    def signed_amount(self) -> Decimal:
        """Amount with the booking direction applied (reversals flip the sign)."""
        if self.funds_code in (FundsCode.CREDIT, FundsCode.RETURN_DEBIT):
            return self.amount
        return -self.amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            **super().to_dict(),
            "value_date": self.date.isoformat(),
            "entry_date": self.entry_date.isoformat() if self.entry_date else None,
            "funds_code": self.funds_code.value,
            "amount": str(self.amount),
            "swift_code": self.swift_code,
            "reference": self.reference,
            "transaction_description": self.transaction_description,
        }


# 86
@dataclass(frozen=True)
class InformationToAccountOwner(MT940Field):
    """
    Free narrative attached to a statement line or to the whole statement.

    ``statement_line_information()`` decodes the bank specific structured
    sub-field layout on request.
    """

    tag: ClassVar[str] = "86"

    narrative: Tuple[str, ...]
    content: str
    _information: LazyView = field(
        default_factory=LazyView, init=False, repr=False, compare=False
    )

    def statement_line_information(self) -> StatementLineInformation:
        return self._information.get(
            lambda: parse_statement_line_information(self.content)
        )

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "narrative": list(self.narrative)}


# ---------------------------------------------------------------------------
# Parser functions
# ---------------------------------------------------------------------------


def parse_job(modifier: Optional[str], content: str) -> Job:
    return Job(modifier=modifier, reference=content)


def parse_reference(modifier: Optional[str], content: str) -> Reference:
    return Reference(modifier=modifier, reference=content)


def parse_account_identification(
    modifier: Optional[str], content: str
) -> AccountIdentification:
    match = ACCOUNT_IDENTIFIER_PATTERN.match(content)
    if not match:
        raise FormatError("Missing account identification", line=content, tag="25")

    return AccountIdentification(
        modifier=modifier,
        account_identifier=match.group(1),
        content=content,
    )


def parse_statement_number(modifier: Optional[str], content: str) -> StatementNumber:
    match = STATEMENT_NUMBER_PATTERN.match(content)
    if not match:
        raise FormatError("Invalid statement number", line=content, tag="28")

    return StatementNumber(
        modifier=modifier,
        number=match.group(1),
        sequence=match.group(2),
        content=content,
    )


def parse_balance(
    record_type: Callable[..., AccountBalance],
    modifier: Optional[str],
    content: str,
) -> AccountBalance:
    """
    Parse ``<C|D><YYMMDD|ALT|0><CCY><amount>`` into ``record_type``.

    Raises:
        FormatError: If the content does not match the balance layout or
            holds an impossible date.
    """
    tag = getattr(record_type, "tag", None)
    match = BALANCE_PATTERN.match(content)
    if not match:
        raise FormatError("Invalid balance", line=content, tag=tag)

    raw_sign, raw_date, currency, raw_amount = match.groups()
    balance_date = None if raw_date in NO_DATE_SENTINELS else parse_date(raw_date, tag)

    return record_type(
        modifier=modifier,
        balance_type=BalanceType.from_modifier(modifier),
        sign=Sign.from_code(raw_sign),
        date=balance_date,
        currency=currency,
        amount=parse_amount(raw_amount, tag),
    )


def parse_opening_balance(modifier: Optional[str], content: str) -> AccountBalance:
    return parse_balance(OpeningBalance, modifier, content)


def parse_closing_balance(modifier: Optional[str], content: str) -> AccountBalance:
    return parse_balance(ClosingBalance, modifier, content)


def parse_valuta_balance(modifier: Optional[str], content: str) -> AccountBalance:
    return parse_balance(ValutaBalance, modifier, content)


def parse_future_valuta_balance(modifier: Optional[str], content: str) -> AccountBalance:
    return parse_balance(FutureValutaBalance, modifier, content)


def parse_statement_line(modifier: Optional[str], content: str) -> StatementLine:
    """
    Parse a field 61 statement line.

    Raises:
        FormatError: If the content does not match the statement line layout.
        UnsupportedDateRangeError: If the entry date falls in another year
            than the value date.
    """
    match = STATEMENT_LINE_PATTERN.match(content)
    if not match:
        raise FormatError("Invalid statement line", line=content, tag="61")

    (
        raw_date,
        raw_entry_date,
        raw_funds_code,
        raw_amount,
        swift_code,
        reference,
        transaction_description,
    ) = match.groups()

    value_date = parse_date(raw_date, "61")
    entry_date = (
        parse_entry_date(raw_entry_date, value_date, "61") if raw_entry_date else None
    )

    return StatementLine(
        modifier=modifier,
        date=value_date,
        entry_date=entry_date,
        funds_code=FundsCode.from_code(raw_funds_code),
        amount=parse_amount(raw_amount, "61"),
        swift_code=swift_code,
        reference=reference,
        transaction_description=transaction_description,
    )


def parse_information_to_account_owner(
    modifier: Optional[str], content: str
) -> InformationToAccountOwner:
    narrative = tuple(
        line
        for line in (raw.strip() for raw in content.split("\n"))
        if line and line != "-"
    )
    return InformationToAccountOwner(
        modifier=modifier,
        narrative=narrative,
        content=content,
    )
