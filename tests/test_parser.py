import datetime

import pytest
from hypothesis import given
from hypothesis import strategies as st

from pyedifact import (
    DateTime,
    EdifactError,
    FieldTooLong,
    FieldTooShort,
    InterchangeHeader,
    InterchangeParticipant,
    InvalidDateTimeComponent,
    InvalidFixedWidthValue,
    Parser,
    RecipientReference,
    SyntaxIdentifier,
    UnexpectedLiteral,
    interchange_header,
)

from conftest import header_with


def _two_digits(first, last):
    return st.integers(first, last).map(lambda n: f"{n:02d}")


_LEVEL_A_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789 .,-()/="

_LEVEL_A_TEXT = st.text(
    alphabet=_LEVEL_A_ALPHABET,
    min_size=1,
    max_size=14,
)

_CONDITIONAL_FIELDS = (
    "recipient_reference_password",
    "application_reference",
    "processing_priority_code",
    "acknowledgement_request",
    "communication_agreement_id",
    "test_indicator",
)


class TestMandatoryElements:

    def test_minimal_header(self, minimal_header):
        header, remaining = interchange_header(minimal_header)

        assert header.syntax_identifier == SyntaxIdentifier("UNO", "C")
        assert header.syntax_version_number == 3
        assert header.sender == InterchangeParticipant("SENDER", "ZZ")
        assert header.recipient == InterchangeParticipant("RECEIVER", "ZZ")
        assert header.date_time == DateTime("94", "01", "01", "09", "50")
        assert header.interchange_control_reference == "1"
        for name in _CONDITIONAL_FIELDS:
            assert getattr(header, name) is None
        assert remaining == ""

    def test_remaining_after_terminator(self, minimal_header):
        _, remaining = interchange_header(f"{minimal_header}UNH+1'")
        assert remaining == "UNH+1'"

    @pytest.mark.parametrize("version", range(1, 10))
    def test_syntax_version_numbers(self, version):
        line = f"UNB+UNOC:{version}+SENDER:ZZ+RECEIVER:ZZ+940101:0950+1'"
        header, _ = interchange_header(line)
        assert header.syntax_version_number == version

    @pytest.mark.parametrize("version", ["", "33", "A", "3A", "?3"])
    def test_invalid_syntax_versions(self, version):
        line = f"UNB+UNOC:{version}+SENDER:ZZ+RECEIVER:ZZ+940101:0950+1'"
        with pytest.raises(EdifactError):
            interchange_header(line)

    @pytest.mark.parametrize("syntax", ["UNOA", "UNOB", "UNOD", "UNOY"])
    def test_syntax_identifiers(self, syntax):
        line = f"UNB+{syntax}:3+SENDER:ZZ+RECEIVER:ZZ+940101:0950+1'"
        header, _ = interchange_header(line)
        assert header.syntax_identifier.controlling_agency == "UNO"
        assert header.syntax_identifier.level == syntax[-1]

    def test_participant_without_qualifier(self):
        line = "UNB+UNOC:3+SENDER+RECEIVER+940101:0950+1'"
        header, _ = interchange_header(line)
        assert header.sender == InterchangeParticipant("SENDER")
        assert header.recipient.partner_identification is None

    def test_participant_routing_address(self):
        line = "UNB+UNOC:3+SENDER:ZZ:route123.addr+RECEIVER::ROUTE+940101:0950+1'"
        header, _ = interchange_header(line)
        assert header.sender == InterchangeParticipant(
            "SENDER", "ZZ", "route123.addr"
        )
        assert header.recipient == InterchangeParticipant(
            "RECEIVER", None, "ROUTE"
        )

    def test_empty_routing_address_fails(self):
        line = "UNB+UNOC:3+SENDER:ZZ:+RECEIVER:ZZ+940101:0950+1'"
        with pytest.raises(FieldTooShort):
            interchange_header(line)

    @pytest.mark.parametrize("c", list("ABCXYZ0123456789 .,-()/="))
    def test_level_a_identification(self, c):
        line = f"UNB+UNOC:3+{c}:ZZ+RECEIVER:ZZ+940101:0950+1'"
        header, _ = interchange_header(line)
        assert header.sender.identification == c

    @pytest.mark.parametrize("c", list('abcxyz!"%&*;<>'))
    def test_level_b_identification(self, c):
        line = f"UNB+UNOC:3+SENDER{c}TEST:ZZ+RECEIVER:ZZ+940101:0950+1'"
        header, _ = interchange_header(line)
        assert header.sender.identification == f"SENDER{c}TEST"

    @pytest.mark.parametrize("c", ["@", "#", "$", "_"])
    def test_characters_outside_level_b_fail(self, c):
        line = f"UNB+UNOC:3+SENDER{c}:ZZ+RECEIVER:ZZ+940101:0950+1'"
        with pytest.raises(UnexpectedLiteral):
            interchange_header(line)

    def test_escaped_characters(self):
        line = "UNB+UNOC:3+SEND?+ER:ZZ+RECEIVER?@:ZZ+940101:0950+1?'2'"
        header, remaining = interchange_header(line)
        assert header.sender.identification == "SEND+ER"
        assert header.recipient.identification == "RECEIVER@"
        assert header.interchange_control_reference == "1'2"
        assert remaining == ""

    def test_sender_identification_too_long(self):
        line = f"UNB+UNOC:3+{'A' * 36}:ZZ+RECEIVER:ZZ+940101:0950+1'"
        with pytest.raises(UnexpectedLiteral) as exc_info:
            interchange_header(line)
        assert exc_info.value.offset == 11 + 35

    def test_sender_identification_max_length(self):
        line = f"UNB+UNOC:3+{'A' * 35}:ZZ+RECEIVER:ZZ+940101:0950+1'"
        header, _ = interchange_header(line)
        assert header.sender.identification == "A" * 35

    def test_partner_identification_too_long(self):
        line = "UNB+UNOC:3+SENDER:AAAAA+RECEIVER:ZZ+940101:0950+1'"
        with pytest.raises(UnexpectedLiteral) as exc_info:
            interchange_header(line)
        assert exc_info.value.offset == 22

    def test_empty_sender_fails(self):
        line = "UNB+UNOC:3++RECEIVER:ZZ+940101:0950+1'"
        with pytest.raises(FieldTooShort) as exc_info:
            interchange_header(line)
        assert exc_info.value.offset == 11

    @pytest.mark.parametrize(
        "line",
        [
            "UNA+UNOC:3+SENDER:ZZ+RECEIVER:ZZ+940101:0950+1'",
            "UNB:UNOC:3+SENDER:ZZ+RECEIVER:ZZ+940101:0950+1'",
            "UNB+UNOC+3+SENDER:ZZ+RECEIVER:ZZ+940101:0950+1'",
            "UNB+UNOC:3:SENDER:ZZ+RECEIVER:ZZ+940101:0950+1'",
            "UN",
            "",
        ],
    )
    def test_missing_literals(self, line):
        with pytest.raises(UnexpectedLiteral):
            interchange_header(line)

    def test_missing_terminator(self, minimal_header):
        line = minimal_header[:-1]
        with pytest.raises(UnexpectedLiteral) as exc_info:
            interchange_header(line)
        assert exc_info.value.offset == len(line)

    def test_unexpected_character_before_terminator(self):
        with pytest.raises(UnexpectedLiteral) as exc_info:
            interchange_header(header_with(reference="1#"))
        assert exc_info.value.offset == 46


class TestDateTime:

    @pytest.mark.parametrize(
        "date_time, offset",
        [
            ("941301:0950", 35),   # month 13
            ("940132:0950", 37),   # day 32
            ("940100:0950", 37),   # day 00
            ("940101:2550", 40),   # hour 25
            ("940101:0960", 42),   # minute 60
            ("94010:0950", 37),    # too short
        ],
    )
    def test_out_of_range(self, date_time, offset):
        with pytest.raises(InvalidDateTimeComponent) as exc_info:
            interchange_header(header_with(date_time=date_time))
        assert exc_info.value.offset == offset

    def test_date_too_long(self):
        with pytest.raises(UnexpectedLiteral):
            interchange_header(header_with(date_time="9401011:0950"))

    def test_day_not_checked_against_month(self):
        header, _ = interchange_header(header_with(date_time="940230:0000"))
        assert header.date_time == DateTime("94", "02", "30", "00", "00")

    @given(
        _two_digits(0, 99),
        _two_digits(1, 12),
        _two_digits(1, 31),
        _two_digits(0, 23),
        _two_digits(0, 59),
    )
    def test_valid_date_times(self, year, month, day, hour, minutes):
        date_time = f"{year}{month}{day}:{hour}{minutes}"
        header, _ = interchange_header(header_with(date_time=date_time))
        assert header.date_time == DateTime(year, month, day, hour, minutes)

    @given(_two_digits(24, 99), _two_digits(0, 59))
    def test_invalid_hours(self, hour, minutes):
        with pytest.raises(InvalidDateTimeComponent):
            interchange_header(header_with(date_time=f"940101:{hour}{minutes}"))

    @given(_two_digits(0, 23), _two_digits(60, 99))
    def test_invalid_minutes(self, hour, minutes):
        with pytest.raises(InvalidDateTimeComponent):
            interchange_header(header_with(date_time=f"940101:{hour}{minutes}"))

    def test_to_datetime(self):
        date_time = DateTime("94", "01", "01", "09", "50")
        assert date_time.to_datetime(century=1900) == datetime.datetime(
            1994, 1, 1, 9, 50
        )
        assert date_time.to_datetime().year == 2094

    def test_to_datetime_rejects_nonexistent_day(self):
        with pytest.raises(ValueError):
            DateTime("94", "02", "30", "00", "00").to_datetime()


class TestControlReference:

    @given(_LEVEL_A_TEXT)
    def test_valid_references(self, reference):
        header, remaining = interchange_header(header_with(reference=reference))
        assert header.interchange_control_reference == reference
        assert remaining == ""

    def test_too_long_reference_is_capped(self):
        header, remaining = interchange_header(header_with(reference="A" * 15))
        assert header.interchange_control_reference == "A" * 14
        assert remaining == "A'"

    @given(
        st.text(alphabet=_LEVEL_A_ALPHABET, min_size=14, max_size=14),
        _LEVEL_A_TEXT,
    )
    def test_overflow_is_left_in_remainder(self, reference, overflow):
        line = header_with(reference=f"{reference}{overflow}")
        header, remaining = interchange_header(line)
        assert header.interchange_control_reference == reference
        assert remaining == f"{overflow}'"

    def test_strict_field_length(self):
        line = header_with(reference="A" * 15)
        with pytest.raises(FieldTooLong) as exc_info:
            interchange_header(line, strict_field_length=True)
        assert exc_info.value.offset == 45 + 14

    def test_strict_field_length_accepts_maximum(self):
        line = header_with(reference="A" * 14)
        header, _ = interchange_header(line, strict_field_length=True)
        assert header.interchange_control_reference == "A" * 14


class TestConditionalElements:

    def test_all_conditional_elements(self, full_header):
        header, remaining = interchange_header(full_header)
        assert header.recipient_reference_password == RecipientReference(
            "PASS", "PQ"
        )
        assert header.application_reference == "APPREF"
        assert header.processing_priority_code == "A"
        assert header.acknowledgement_request == 1
        assert header.communication_agreement_id == "AGREEMENT"
        assert header.test_indicator == "1"
        assert remaining == ""

    @pytest.mark.parametrize(
        "tail, expected",
        [
            ("+PASSWORD123", {
                "recipient_reference_password":
                    RecipientReference("PASSWORD123"),
            }),
            ("++APPREF", {"application_reference": "APPREF"}),
            ("+++A", {"processing_priority_code": "A"}),
            ("++++1", {"acknowledgement_request": 1}),
            ("+++++AGREEMENT", {"communication_agreement_id": "AGREEMENT"}),
            ("++++++1", {"test_indicator": "1"}),
            ("+PASS+APP", {
                "recipient_reference_password": RecipientReference("PASS"),
                "application_reference": "APP",
            }),
            ("++APP+A", {
                "application_reference": "APP",
                "processing_priority_code": "A",
            }),
            ("+PASS++A", {
                "recipient_reference_password": RecipientReference("PASS"),
                "processing_priority_code": "A",
            }),
            ("++++1+AGR", {
                "acknowledgement_request": 1,
                "communication_agreement_id": "AGR",
            }),
            ("+++", {}),
        ],
    )
    def test_present_and_omitted_elements(self, tail, expected):
        header, remaining = interchange_header(header_with(tail=tail))
        for name in _CONDITIONAL_FIELDS:
            assert getattr(header, name) == expected.get(name)
        assert remaining == ""

    @pytest.mark.parametrize("digit", range(10))
    def test_acknowledgement_request_digits(self, digit):
        header, _ = interchange_header(header_with(tail=f"++++{digit}"))
        assert header.acknowledgement_request == digit

    def test_level_b_conditional_values(self):
        line = header_with(tail="+Password123!+App Ref+++Agreement v2.1!")
        header, _ = interchange_header(line)
        assert header.recipient_reference_password.reference_password == (
            "Password123!"
        )
        assert header.application_reference == "App Ref"
        assert header.communication_agreement_id == "Agreement v2.1!"

    def test_communication_agreement_max_length(self):
        agreement = "A" * 35
        header, _ = interchange_header(header_with(tail=f"+++++{agreement}"))
        assert header.communication_agreement_id == agreement

    def test_too_long_recipient_reference_is_capped(self):
        header, remaining = interchange_header(header_with(tail="+" + "A" * 15))
        assert header.recipient_reference_password.reference_password == (
            "A" * 14
        )
        assert remaining == "A'"

    @pytest.mark.parametrize(
        "tail",
        [
            "+PASS:P",      # qualifier too short
            "+PASS:PQR",    # qualifier too long
            "+PASS:",       # qualifier missing after its separator
            "+++AB",        # priority code too long
            "++++12",       # acknowledgement request too long
            "++++A",        # acknowledgement request not a digit
            "++++++2",      # test indicator not 1
            "++++++11",
        ],
    )
    def test_invalid_fixed_width_values(self, tail):
        with pytest.raises(InvalidFixedWidthValue):
            interchange_header(header_with(tail=tail))

    def test_password_required_with_qualifier(self):
        with pytest.raises(FieldTooShort):
            interchange_header(header_with(tail="+:PQ"))

    def test_too_many_elements(self):
        with pytest.raises(UnexpectedLiteral):
            interchange_header(header_with(tail="++++++1+X"))


class TestToSegment:

    def test_minimal_header(self, minimal_header):
        header, _ = interchange_header(minimal_header)
        assert header.to_segment() == minimal_header

    def test_full_header(self, full_header):
        header, _ = interchange_header(full_header)
        assert header.to_segment() == full_header

    def test_omitted_elements_are_truncated(self):
        line = header_with(tail="++APP")
        header, _ = interchange_header(line)
        assert header.to_segment() == line

    def test_escapes_values(self):
        header = InterchangeHeader(
            syntax_identifier=SyntaxIdentifier("UNO", "C"),
            syntax_version_number=3,
            sender=InterchangeParticipant("SEND+ER", None, "R:1"),
            recipient=InterchangeParticipant("it's"),
            date_time=DateTime("94", "01", "01", "09", "50"),
            interchange_control_reference="1?",
            application_reference="a_b",
        )
        segment = header.to_segment()
        assert segment == (
            "UNB+UNOC:3+SEND?+ER::R?:1+it?'s+940101:0950+1??++a?_b'"
        )
        assert interchange_header(segment) == (header, "")


def test_parser_caches_evaluation(minimal_header):
    parser = Parser(minimal_header)
    assert parser.parse() is parser.parse()


def test_error_message_points_at_invalid_input():
    line = header_with(date_time="941301:0950")
    with pytest.raises(InvalidDateTimeComponent) as exc_info:
        interchange_header(line)
    message_lines = str(exc_info.value).split("\n")
    assert message_lines[0] == exc_info.value.reason
    assert message_lines[1] == "At offset 35:"
    assert message_lines[2] == line
    assert message_lines[3] == " " * 35 + "^^"
