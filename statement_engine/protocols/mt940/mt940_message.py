"""
MT940 Statement Structure

A statement is the ordered sequence of field records found between two
statement separators. Order follows the source text and is not checked
against the sequence prescribed by the standard.
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from statement_engine.protocols.mt940.mt940_fields import (
    AccountIdentification,
    ClosingBalance,
    InformationToAccountOwner,
    Job,
    MT940Field,
    OpeningBalance,
    StatementLine,
    StatementNumber,
)

F = TypeVar("F", bound=MT940Field)


@dataclass(frozen=True)
class Statement:
    """One MT940 statement: its field records in source order."""

    fields: Tuple[MT940Field, ...]

    def __len__(self) -> int:
        return len(self.fields)

    def __iter__(self) -> Iterator[MT940Field]:
        return iter(self.fields)

    def __getitem__(self, index: Union[int, slice]) -> Union[MT940Field, Tuple[MT940Field, ...]]:
        return self.fields[index]

    def fields_of_type(self, field_type: Type[F]) -> List[F]:
        """All records of the given type, in source order."""
        return [f for f in self.fields if isinstance(f, field_type)]

    def first_of_type(self, field_type: Type[F]) -> Optional[F]:
        """The first record of the given type, if any."""
        for f in self.fields:
            if isinstance(f, field_type):
                return f
        return None

    @property
    def job(self) -> Optional[Job]:
        return self.first_of_type(Job)

    @property
    def account_identification(self) -> Optional[AccountIdentification]:
        return self.first_of_type(AccountIdentification)

    @property
    def statement_number(self) -> Optional[StatementNumber]:
        return self.first_of_type(StatementNumber)

    @property
    def opening_balance(self) -> Optional[OpeningBalance]:
        return self.first_of_type(OpeningBalance)

    @property
    def closing_balance(self) -> Optional[ClosingBalance]:
        return self.first_of_type(ClosingBalance)

    @property
    def statement_lines(self) -> List[StatementLine]:
        return self.fields_of_type(StatementLine)

    @property
    def narratives(self) -> List[InformationToAccountOwner]:
        return self.fields_of_type(InformationToAccountOwner)

    def to_dict(self) -> Dict[str, Any]:
        return {"fields": [f.to_dict() for f in self.fields]}
