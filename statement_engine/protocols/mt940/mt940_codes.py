"""
MT940 Codes and Constants

Defines:
- Field tags of the MT940 Customer Statement Message
- Balance sign, balance type and balance role codes
- Funds codes of the statement line (field 61)
- Transaction type identification codes
- Sub-field codes of the structured narrative (field 86)
"""

from enum import Enum
from typing import Dict, Optional


class MT940FieldTag(Enum):
    """Field tags supported in an MT940 message."""

    F20 = ("20", "Transaction Reference Number", "16x", True)
    F21 = ("21", "Related Reference", "16x", False)
    F25 = ("25", "Account Identification", "35x", True)
    F28 = ("28", "Statement Number/Sequence Number", "5n[/5n]", True)
    F60 = ("60", "Opening Balance", "1!a6!n3!a15d", True)
    F61 = ("61", "Statement Line", "6!n[4!n]2a[1!a]15d1!a3!c16x[//16x]", False)
    F62 = ("62", "Closing Balance (Booked Funds)", "1!a6!n3!a15d", True)
    F64 = ("64", "Closing Available Balance (Available Funds)", "1!a6!n3!a15d", False)
    F65 = ("65", "Forward Available Balance", "1!a6!n3!a15d", False)
    F86 = ("86", "Information to Account Owner", "6*65x", False)

    def __init__(self, tag: str, name: str, format: str, mandatory: bool):
        self._tag = tag
        self._name = name
        self._format = format
        self._mandatory = mandatory

    @property
    def tag(self) -> str:
        return self._tag

    @property
    def field_name(self) -> str:
        return self._name

    @property
    def format(self) -> str:
        return self._format

    @property
    def mandatory(self) -> bool:
        return self._mandatory

    @classmethod
    def from_tag(cls, tag: str) -> Optional["MT940FieldTag"]:
        """Look up a field tag by its two digit number."""
        for member in cls:
            if member.tag == tag:
                return member
        return None


class Sign(str, Enum):
    """Debit/credit mark of a balance."""

    CREDIT = "credit"
    DEBIT = "debit"

    @classmethod
    def from_code(cls, code: str) -> "Sign":
        return _SIGN_CODES[code]


_SIGN_CODES: Dict[str, Sign] = {
    "C": Sign.CREDIT,
    "D": Sign.DEBIT,
}


class FundsCode(str, Enum):
    """Debit/credit mark of a statement line, including reversals."""

    CREDIT = "credit"
    DEBIT = "debit"
    RETURN_CREDIT = "return_credit"
    RETURN_DEBIT = "return_debit"

    @classmethod
    def from_code(cls, code: str) -> "FundsCode":
        return _FUNDS_CODES[code]

    @property
    def is_reversal(self) -> bool:
        return self in (FundsCode.RETURN_CREDIT, FundsCode.RETURN_DEBIT)


_FUNDS_CODES: Dict[str, FundsCode] = {
    "C": FundsCode.CREDIT,
    "D": FundsCode.DEBIT,
    "RC": FundsCode.RETURN_CREDIT,
    "RD": FundsCode.RETURN_DEBIT,
}


class BalanceType(str, Enum):
    """Balance snapshot kind, taken from the field modifier."""

    START = "start"  # F
    INTERMEDIATE = "intermediate"  # M

    @classmethod
    def from_modifier(cls, modifier: Optional[str]) -> Optional["BalanceType"]:
        if modifier == "F":
            return cls.START
        if modifier == "M":
            return cls.INTERMEDIATE
        return None


class BalanceRole(str, Enum):
    """Semantic role of a balance field, taken from its tag."""

    OPENING = "opening"  # 60
    CLOSING = "closing"  # 62
    VALUTA = "valuta"  # 64
    FUTURE_VALUTA = "future_valuta"  # 65


# Balance date sentinels meaning "no posting date"
NO_DATE_SENTINELS = frozenset({"ALT", "0"})

# Transaction type identification codes (statement line, after N/F)
TRANSACTION_TYPE_CODES: Dict[str, str] = {
    "BNK": "Securities Related Item - Bank Fees",
    "BOE": "Bill of Exchange",
    "BRF": "Brokerage Fee",
    "CAR": "Securities Related Item - Corporate Actions Related",
    "CAS": "Securities Related Item - Cash in Lieu",
    "CHG": "Charges and Other Expenses",
    "CHK": "Cheques",
    "CLR": "Cash Letters/Cheques Remittance",
    "CMI": "Cash Management Item - No Detail",
    "CMN": "Cash Management Item - Notional Pooling",
    "CMP": "Compensation Claims",
    "CMS": "Cash Management Item - Sweeping",
    "CMT": "Cash Management Item - Topping",
    "CMZ": "Cash Management Item - Zero Balancing",
    "COL": "Collections",
    "COM": "Commission",
    "CPN": "Securities Related Item - Coupon Payments",
    "DCR": "Documentary Credit",
    "DDT": "Direct Debit Item",
    "DIS": "Securities Related Item - Gains Disbursement",
    "DIV": "Securities Related Item - Dividends",
    "EQA": "Equivalent Amount",
    "EXT": "Securities Related Item - External Transfer for Own Account",
    "FEX": "Foreign Exchange",
    "INT": "Interest",
    "LBX": "Lock Box",
    "LDP": "Loan Deposit",
    "MAR": "Securities Related Item - Margin Payments/Receipts",
    "MAT": "Securities Related Item - Maturity",
    "MGT": "Securities Related Item - Management Fees",
    "MSC": "Miscellaneous",
    "NWI": "Securities Related Item - New Issues Distribution",
    "ODC": "Overdraft Charge",
    "OPT": "Securities Related Item - Options",
    "PCH": "Securities Related Item - Purchase",
    "POP": "Securities Related Item - Pair-off Proceeds",
    "PRN": "Securities Related Item - Principal Pay-down/Pay-up",
    "REC": "Securities Related Item - Tax Reclaim",
    "RED": "Securities Related Item - Redemption/Withdrawal",
    "RIG": "Securities Related Item - Rights",
    "RTI": "Returned Item",
    "SAL": "Securities Related Item - Sale",
    "SEC": "Securities",
    "SLE": "Securities Related Item - Securities Lending Related",
    "STO": "Standing Order",
    "STP": "Securities Related Item - Stamp Duty",
    "SUB": "Securities Related Item - Subscription",
    "SWP": "Securities Related Item - SWAP Payment",
    "TAX": "Securities Related Item - Withholding Tax Payment",
    "TCK": "Travellers Cheques",
    "TCM": "Securities Related Item - Tripartite Collateral Management",
    "TRA": "Securities Related Item - Internal Transfer for Own Account",
    "TRF": "Transfer",
    "TRN": "Securities Related Item - Transaction Fee",
    "UWC": "Securities Related Item - Underwriting Commission",
    "VDA": "Value Date Adjustment",
    "WAR": "Securities Related Item - Warrant",
}


def get_transaction_type_description(swift_code: str) -> Optional[str]:
    """Describe a 4-character transaction type code such as ``NTRF``."""
    if len(swift_code) != 4:
        return None
    return TRANSACTION_TYPE_CODES.get(swift_code[1:].upper())


# Structured narrative (field 86) sub-field codes with a single target
NARRATIVE_SUBFIELD_TARGETS: Dict[int, str] = {
    0: "transaction_description",
    10: "prima_nota",
    26: "account_identifier",
    30: "bank_code",
    31: "account_number",
    34: "text_key_extension",
}

# Repeating sub-field codes, joined with newlines in order of appearance
NARRATIVE_DETAIL_CODES = range(20, 26)
NARRATIVE_ACCOUNT_HOLDER_CODES = range(32, 34)
