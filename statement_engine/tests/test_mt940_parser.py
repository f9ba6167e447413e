"""
Tests for MT940 message splitting and field dispatch
"""

import logging
from datetime import date
from decimal import Decimal

import pytest
from prometheus_client import REGISTRY

from statement_engine import parse
from statement_engine.core.config import Config
from statement_engine.core.exceptions import (
    FormatError,
    MT940Exception,
    UnknownFieldError,
    UnsupportedDateRangeError,
)
from statement_engine.protocols.mt940 import (
    FIELD_PARSERS,
    AccountIdentification,
    ClosingBalance,
    FutureValutaBalance,
    InformationToAccountOwner,
    Job,
    MT940Parser,
    OpeningBalance,
    Statement,
    StatementLine,
    StatementNumber,
    ValutaBalance,
    parse_field,
)
from statement_engine.protocols.mt940.mt940_codes import BalanceType, FundsCode
from statement_engine.protocols.mt940.mt940_fields import (
    parse_closing_balance,
    parse_future_valuta_balance,
    parse_opening_balance,
    parse_valuta_balance,
)


def _sample(name, labels=None):
    return REGISTRY.get_sample_value(name, labels or {}) or 0.0


class TestMT940Parser:
    """Tests for whole message decoding."""

    @pytest.fixture
    def parser(self, test_config):
        """Create parser instance."""
        return MT940Parser(config=test_config)

    def test_parse_sample_message(self, parser, sample_message):
        """Test decoding a two statement message."""
        statements = parser.parse(sample_message)

        assert len(statements) == 2
        assert all(isinstance(s, Statement) for s in statements)
        assert [type(f) for f in statements[0]] == [
            Job,
            AccountIdentification,
            StatementNumber,
            OpeningBalance,
            StatementLine,
            InformationToAccountOwner,
            ClosingBalance,
        ]
        assert len(statements[1]) == 9

    def test_statement_accessors(self, parser, sample_message):
        """Test typed access to the fields of a statement."""
        first, second = parser.parse(sample_message)

        assert first.job.reference == "STARTUMSE"
        assert first.account_identification.account_identifier == "10020030/1234567"
        assert first.statement_number.number == "00001"
        assert first.statement_number.sequence == "001"
        assert first.opening_balance.amount == Decimal("1234.56")
        assert first.opening_balance.balance_type == BalanceType.START
        assert first.closing_balance.amount == Decimal("1222.56")
        assert second.opening_balance.balance_type == BalanceType.INTERMEDIATE
        assert second.first_of_type(ValutaBalance).date == date(2023, 1, 3)
        assert second.first_of_type(FutureValutaBalance).date is None

    def test_statement_lines(self, parser, sample_message):
        """Test statement lines inside a message."""
        first, second = parser.parse(sample_message)

        (debit,) = first.statement_lines
        assert debit.date == date(2023, 1, 2)
        assert debit.entry_date == date(2023, 1, 2)
        assert debit.funds_code == FundsCode.DEBIT
        assert debit.amount == Decimal("12.00")
        assert debit.reference == "NONREF"
        assert debit.transaction_description == "B123"

        (credit,) = second.statement_lines
        assert credit.funds_code == FundsCode.CREDIT
        assert credit.reference == "REF123"
        assert credit.transaction_description == "desc"

    def test_structured_narrative(self, parser, sample_message):
        """Test that a wrapped structured narrative decodes on request."""
        first, second = parser.parse(sample_message)

        (narrative,) = first.narratives
        assert not narrative._information.ready

        info = narrative.statement_line_information()
        assert info.code == 166
        assert info.details == "EREF+TESTREF\nSVWZ+INVOICE 42"
        assert info.account_holder == "MAX MUSTER\nMANN"
        assert info.text_key_extension == "997"

        assert second.narratives[0].narrative == ("RENT JANUARY",)

    def test_crlf_and_lf_decode_equally(self, parser, sample_message, sample_message_crlf):
        """Test line ending normalization."""
        assert parser.parse(sample_message_crlf) == parser.parse(sample_message)
        assert parser.parse(sample_message.replace("\n", "\r")) == parser.parse(sample_message)

    def test_parse_is_deterministic(self, parser, sample_message):
        """Test that decoding the same text twice gives equal results."""
        first = parser.parse(sample_message)
        second = parser.parse(sample_message)

        assert first == second
        assert [s.to_dict() for s in first] == [s.to_dict() for s in second]

    def test_to_dict(self, parser, sample_message):
        """Test statement serialization."""
        first = parser.parse(sample_message)[0]

        data = first.to_dict()
        assert [f["tag"] for f in data["fields"]] == ["20", "25", "28", "60", "61", "86", "62"]
        assert data["fields"][3]["amount"] == "1234.56"


class TestStatementImmutability:
    """Tests that decoded statements cannot change after parsing."""

    def test_containers_are_tuples(self, test_config):
        """Test that statements, narratives and sub-field lists are tuples."""
        (statement,) = MT940Parser(config=test_config).parse(
            ":20:A\n:86:166?00GUT?99X\n:86:RENT\n-"
        )
        first, second = statement.narratives
        info = first.statement_line_information()

        assert isinstance(statement.fields, tuple)
        assert isinstance(statement[0:2], tuple)
        assert isinstance(second.narrative, tuple)
        assert isinstance(info.unrecognized_fields, tuple)
        assert info.unrecognized_fields == (("99", "X"),)

        with pytest.raises(AttributeError):
            statement.fields.append(first)
        with pytest.raises(AttributeError):
            info.unrecognized_fields.append(("77", "Y"))

        assert first.statement_line_information().unrecognized_fields == (("99", "X"),)

    def test_records_are_hashable(self, test_config, sample_message):
        """Test that decoded statements and views can be hashed."""
        first, second = MT940Parser(config=test_config).parse(sample_message)
        again, _ = MT940Parser(config=test_config).parse(sample_message)

        assert hash(first) == hash(again)
        assert len({first, second, again}) == 2
        assert hash(first.narratives[0].statement_line_information())


class TestStatementSplitting:
    """Tests for separators and soft line wraps."""

    @pytest.fixture
    def parser(self, test_config):
        return MT940Parser(config=test_config)

    def test_empty_message(self, parser):
        """Test that an empty message has no statements."""
        assert parser.parse("") == []
        assert parser.parse("  \n ") == []

    def test_without_trailing_separator(self, parser):
        """Test a single statement without closing separator."""
        statements = parser.parse(":20:STARTUMSE\n:25:DE89370400440532013000")

        assert len(statements) == 1
        assert statements[0].account_identification.account_identifier == (
            "DE89370400440532013000"
        )

    def test_trailing_separator_adds_no_statement(self, parser):
        """Test that a closing separator does not open another statement."""
        assert len(parser.parse(":20:A\n-")) == 1
        assert len(parser.parse(":20:A\n-\n")) == 1
        assert len(parser.parse(":20:A\r\n-\r\n")) == 1

    def test_interior_separators(self, parser):
        """Test that k separators between statements give k + 1 statements."""
        statements = parser.parse(":20:A\n-\n:20:B\n-\n:20:C")

        assert [s.job.reference for s in statements] == ["A", "B", "C"]

    def test_dash_inside_content_is_not_a_separator(self, parser):
        """Test that only a line holding a single dash separates statements."""
        statements = parser.parse(":20:A-B\n:86:TEXT -\n-")

        assert len(statements) == 1
        assert statements[0].job.reference == "A-B"

    def test_soft_wrap_is_unfolded(self, parser):
        """Test that wrapped lines are joined without separator."""
        (statement,) = parser.parse(":20:A\n:86:ABC\nDEF\n:61:230101C1,00NTRFREF//BANK\nREF\n-")

        assert statement.narratives[0].narrative == ("ABCDEF",)
        assert statement.statement_lines[0].transaction_description == "BANKREF"

    def test_split_statements(self, parser):
        """Test the raw line structure."""
        assert parser.split_statements(":20:A\n:25:B\nC\n-\n:20:D") == [
            [":20:A", ":25:BC"],
            [":20:D"],
        ]


class TestFieldDispatch:
    """Tests for single line dispatch."""

    def test_statement_number_with_modifier(self):
        """Test dispatching field 28C."""
        record = parse_field(":28C:00001/001")

        assert isinstance(record, StatementNumber)
        assert record.modifier == "C"
        assert record.number == "00001"
        assert record.sequence == "001"

    def test_balance_modifier(self):
        """Test dispatching field 60F."""
        record = parse_field(":60F:C230101EUR1234,56")

        assert isinstance(record, OpeningBalance)
        assert record.modifier == "F"

    def test_unknown_field(self):
        """Test a well formed line with an unsupported tag."""
        with pytest.raises(UnknownFieldError) as exc_info:
            parse_field(":99:foo")

        assert exc_info.value.tag == "99"
        assert "Field 99 is not implemented" in str(exc_info.value)

    @pytest.mark.parametrize("line", ["foo", ":2:X", ":20X", "20:X", ":ABC:X", ":20AB:X"])
    def test_wrong_line_format(self, line):
        """Test lines without the field shape."""
        with pytest.raises(FormatError) as exc_info:
            parse_field(line)

        assert "Wrong line format" in str(exc_info.value)
        assert exc_info.value.line == line

    def test_registry_is_read_only(self):
        """Test that the tag registry cannot be altered."""
        assert set(FIELD_PARSERS) == {"20", "21", "25", "28", "60", "61", "62", "64", "65", "86"}

        with pytest.raises(TypeError):
            FIELD_PARSERS["99"] = FIELD_PARSERS["20"]

    def test_balance_tags_use_named_parsers(self):
        """Test that each balance tag maps to its own record parser."""
        assert FIELD_PARSERS["60"] is parse_opening_balance
        assert FIELD_PARSERS["62"] is parse_closing_balance
        assert FIELD_PARSERS["64"] is parse_valuta_balance
        assert FIELD_PARSERS["65"] is parse_future_valuta_balance

        assert isinstance(parse_field(":62M:D230101EUR1,00"), ClosingBalance)
        assert isinstance(parse_field(":64:C230101EUR1,00"), ValutaBalance)
        assert isinstance(parse_field(":65:C230101EUR1,00"), FutureValutaBalance)


class TestParseErrors:
    """Tests for failure propagation."""

    def test_malformed_line_aborts_parse(self):
        """Test that no partial result is returned."""
        with pytest.raises(FormatError):
            parse("foo\n:20:A")

    def test_unknown_field_in_message(self):
        """Test unknown tags inside a message."""
        with pytest.raises(UnknownFieldError):
            parse(":20:A\n:99:foo\n-")

    def test_malformed_field_in_second_statement(self, sample_message):
        """Test that an error in any statement fails the whole parse."""
        broken = sample_message.replace(":61:230103C100,00", ":61:230103X100,00")

        with pytest.raises(FormatError) as exc_info:
            parse(broken)

        assert exc_info.value.tag == "61"

    def test_cross_year_entry_date(self):
        """Test entry date errors surfacing from a message."""
        with pytest.raises(UnsupportedDateRangeError):
            parse(":20:A\n:61:2312310101C1,00NTRFNONREF\n-")

    def test_errors_share_base_class(self):
        """Test that every decoding failure is an MT940Exception."""
        for text in ["foo", ":99:x", ":61:2312310101C1,00NTRFNONREF"]:
            with pytest.raises(MT940Exception):
                parse(text)


class TestParserMetrics:
    """Tests for Prometheus instrumentation."""

    def test_counts_statements_and_fields(self, sample_message):
        """Test success counters."""
        statements_before = _sample("statement_engine_mt940_statements_total")
        lines_before = _sample("statement_engine_mt940_fields_total", {"tag": "61"})

        parse(sample_message)

        assert _sample("statement_engine_mt940_statements_total") == statements_before + 2
        assert _sample("statement_engine_mt940_fields_total", {"tag": "61"}) == lines_before + 2

    def test_counts_errors(self):
        """Test error counter labelled by error code."""
        before = _sample("statement_engine_mt940_errors_total", {"error_type": "UNKNOWN_FIELD"})

        with pytest.raises(UnknownFieldError):
            parse(":99:foo")

        after = _sample("statement_engine_mt940_errors_total", {"error_type": "UNKNOWN_FIELD"})
        assert after == before + 1

    def test_single_field_dispatch_counts_errors(self):
        """Test that failures of the module level dispatcher are counted."""
        labels = {"error_type": "FORMAT_ERROR"}
        before = _sample("statement_engine_mt940_errors_total", labels)

        with pytest.raises(FormatError):
            parse_field("foo")
        with pytest.raises(FormatError):
            parse_field(":60F:X230101EUR1,00")

        assert _sample("statement_engine_mt940_errors_total", labels) == before + 2

    def test_metrics_disabled(self, sample_message):
        """Test that disabled metrics leave the counters untouched."""
        before = _sample("statement_engine_mt940_statements_total")

        MT940Parser(config=Config(metrics_enabled=False)).parse(sample_message)

        assert _sample("statement_engine_mt940_statements_total") == before


class TestParserLogging:
    """Tests for parser log records."""

    def test_debug_summary(self, caplog, sample_message):
        """Test the per message debug record."""
        with caplog.at_level(logging.DEBUG, logger="statement_engine"):
            parse(sample_message)

        assert any("Decoded 2 MT940 statement(s)" in r.getMessage() for r in caplog.records)

    def test_failure_is_logged(self, caplog):
        """Test the debug record on failure."""
        with caplog.at_level(logging.DEBUG, logger="statement_engine"):
            with pytest.raises(FormatError):
                parse("foo")

        assert any("MT940 decoding failed" in r.getMessage() for r in caplog.records)
