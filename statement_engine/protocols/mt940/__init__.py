"""
SWIFT MT940 Customer Statement Message Support

Decodes MT940 electronic bank statements into typed field records:
- :20:/:21: Transaction and related references
- :25: Account identification
- :28C: Statement number / sequence number
- :60a:/:62a:/:64:/:65: Opening, closing, available and forward balances
- :61: Statement lines
- :86: Information to account owner, with optional structured sub-fields

Supports:
- Statement separation and soft line-wrap unfolding
- Exact decimal amounts
- Lazily decoded legacy and bank specific views
"""

from statement_engine.protocols.mt940.mt940_codes import (
    MT940FieldTag,
    Sign,
    FundsCode,
    BalanceType,
    BalanceRole,
    TRANSACTION_TYPE_CODES,
    get_transaction_type_description,
)
from statement_engine.protocols.mt940.mt940_decoders import (
    parse_amount,
    parse_date,
    parse_entry_date,
)
from statement_engine.protocols.mt940.mt940_fields import (
    MT940Field,
    Job,
    Reference,
    AccountIdentification,
    LegacyAccount,
    StatementNumber,
    LegacyStatement,
    AccountBalance,
    OpeningBalance,
    ClosingBalance,
    ValutaBalance,
    FutureValutaBalance,
    StatementLine,
    InformationToAccountOwner,
)
from statement_engine.protocols.mt940.mt940_narrative import (
    StatementLineInformation,
    parse_statement_line_information,
)
from statement_engine.protocols.mt940.mt940_message import Statement
from statement_engine.protocols.mt940.mt940_parser import (
    FIELD_PARSERS,
    MT940Parser,
    parse,
    parse_field,
)

__all__ = [
    # Codes and enums
    "MT940FieldTag",
    "Sign",
    "FundsCode",
    "BalanceType",
    "BalanceRole",
    "TRANSACTION_TYPE_CODES",
    "get_transaction_type_description",
    # Shared decoders
    "parse_amount",
    "parse_date",
    "parse_entry_date",
    # Field records
    "MT940Field",
    "Job",
    "Reference",
    "AccountIdentification",
    "LegacyAccount",
    "StatementNumber",
    "LegacyStatement",
    "AccountBalance",
    "OpeningBalance",
    "ClosingBalance",
    "ValutaBalance",
    "FutureValutaBalance",
    "StatementLine",
    "InformationToAccountOwner",
    "StatementLineInformation",
    "parse_statement_line_information",
    # Statement and parser
    "Statement",
    "FIELD_PARSERS",
    "MT940Parser",
    "parse",
    "parse_field",
]
