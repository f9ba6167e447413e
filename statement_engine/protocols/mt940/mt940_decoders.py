"""
MT940 Shared Decoders

Amount, date and entry date decoding used by every field parser.
"""

import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional

from statement_engine.core.exceptions import FormatError, UnsupportedDateRangeError

AMOUNT_PATTERN = re.compile(r"^\d{1,12}(?:,\d{0,2})?$")
DATE_PATTERN = re.compile(r"^(\d{2})(\d{2})(\d{2})$")
SHORT_DATE_PATTERN = re.compile(r"^(\d{2})(\d{2})$")

# Two digit years are read as 20YY
CENTURY = 2000

# An entry date is taken to cross the turn of the year when the adjacent-year
# reading lies within this many days of the value date while the same-year
# reading is more than half a year away
YEAR_BOUNDARY_WINDOW_DAYS = 31
HALF_YEAR_DAYS = 183

# Leap year used to tell an impossible MMDD from 29 February
LEAP_YEAR = 2000


def parse_amount(raw: str, tag: Optional[str] = None) -> Decimal:
    """
    Decode an MT940 amount such as ``1234,56``.

    The comma is the decimal separator. Digits are read literally, so
    ``008,00`` is ``Decimal("8.00")``.
    """
    if not AMOUNT_PATTERN.match(raw):
        raise FormatError(f"Invalid amount: {raw!r}", line=raw, tag=tag)

    try:
        return Decimal(raw.replace(",", "."))
    except InvalidOperation as e:
        raise FormatError(f"Invalid amount: {raw!r}", line=raw, tag=tag) from e


def parse_date(raw: str, tag: Optional[str] = None) -> date:
    """Decode a YYMMDD date with the century fixed at 20YY."""
    match = DATE_PATTERN.match(raw)
    if not match:
        raise FormatError(f"Invalid date: {raw!r}", line=raw, tag=tag)

    year, month, day = (int(part) for part in match.groups())
    try:
        return date(CENTURY + year, month, day)
    except ValueError as e:
        raise FormatError(f"Invalid calendar date: {raw!r}", line=raw, tag=tag) from e


def parse_entry_date(raw: str, value_date: date, tag: Optional[str] = None) -> date:
    """
    Resolve a MMDD entry date against its value date.

    The entry date takes the value date's year. UnsupportedDateRangeError is
    raised instead of rolling the year when that reading does not exist
    (29 February outside a leap year) or when the entry date evidently
    crosses the turn of the year: the adjacent-year reading lies within
    ``YEAR_BOUNDARY_WINDOW_DAYS`` of the value date while the same-year
    reading is more than ``HALF_YEAR_DAYS`` away.
    """
    match = SHORT_DATE_PATTERN.match(raw)
    if not match:
        raise FormatError(f"Invalid entry date: {raw!r}", line=raw, tag=tag)

    month, day = (int(part) for part in match.groups())

    try:
        date(LEAP_YEAR, month, day)
    except ValueError as e:
        raise FormatError(f"Invalid calendar entry date: {raw!r}", line=raw, tag=tag) from e

    try:
        entry_date = date(value_date.year, month, day)
    except ValueError:
        raise UnsupportedDateRangeError(value_date, raw) from None

    if abs((entry_date - value_date).days) <= HALF_YEAR_DAYS:
        return entry_date

    for year in (value_date.year - 1, value_date.year + 1):
        try:
            adjacent = date(year, month, day)
        except ValueError:
            continue
        if abs((adjacent - value_date).days) <= YEAR_BOUNDARY_WINDOW_DAYS:
            raise UnsupportedDateRangeError(value_date, raw)

    return entry_date
