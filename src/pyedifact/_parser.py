"""
Parse an Interchange Header (UNB) segment by calling `interchange_header`.

```python
header, remaining = interchange_header(
    "UNB+UNOC:3+SENDER:ZZ+RECEIVER:ZZ+940101:0950+1'"
)

assert header.sender.identification == "SENDER"
assert header.date_time.month == "01"
assert remaining == ""
```

The segment is always expressed in canonical delimiters.
Apply the service string advice first if the interchange declares others.
"""

import logging
from typing import (
    AbstractSet,
    Any,
    Callable,
    Container,
    Dict,
    Optional,
    Tuple,
    Type,
)

from pyedifact._charset import CharacterSet, match_logical_character
from pyedifact._edifact_error import (
    EdifactError,
    FieldTooLong,
    FieldTooShort,
    InvalidDateTimeComponent,
    InvalidFixedWidthValue,
    UnexpectedLiteral,
    describe_char,
)
from pyedifact._interchange_header import (
    DateTime,
    InterchangeHeader,
    InterchangeParticipant,
    RecipientReference,
    SyntaxIdentifier,
)
from pyedifact.syntax import (
    ACKNOWLEDGEMENT_REQUEST_BOUNDS,
    APPLICATION_REFERENCE_BOUNDS,
    COMMUNICATION_AGREEMENT_ID_BOUNDS,
    COMPONENT_DATA_ELEMENT_SEPARATOR,
    DATA_ELEMENT_SEPARATOR,
    DATE_TIME_COMPONENT_LENGTH,
    DAY_VALUES,
    DEFAULT_STRICT_FIELD_LENGTH,
    DIGIT_SET,
    EMPTY,
    HOUR_VALUES,
    INTERCHANGE_CONTROL_REFERENCE_BOUNDS,
    MINUTE_VALUES,
    MONTH_VALUES,
    PARTICIPANT_IDENTIFICATION_BOUNDS,
    PARTNER_IDENTIFICATION_BOUNDS,
    PROCESSING_PRIORITY_CODE_BOUNDS,
    REFERENCE_PASSWORD_BOUNDS,
    REFERENCE_PASSWORD_QUALIFIER_BOUNDS,
    ROUTING_ADDRESS_BOUNDS,
    SEGMENT_TERMINATOR,
    SYNTAX_IDENTIFIER_AGENCY_BOUNDS,
    SYNTAX_IDENTIFIER_LEVEL_BOUNDS,
    SYNTAX_VERSION_NUMBER_BOUNDS,
    TEST_INDICATOR,
    UNB_TAG,
    UPPER_CASE_SET,
    YEAR_VALUES,
    FieldBounds,
)


logger = logging.getLogger(__name__)

_ELEMENT_BOUNDARY_SET = frozenset(
    (DATA_ELEMENT_SEPARATOR, SEGMENT_TERMINATOR, EMPTY)
)
_COMPONENT_BOUNDARY_SET = _ELEMENT_BOUNDARY_SET.union(
    (COMPONENT_DATA_ELEMENT_SEPARATOR,)
)

# Characters allowed in every text field, whatever the syntax level
_TEXT_CHARACTER_SET = CharacterSet.LEVEL_B


def interchange_header(
    line: str,
    *,
    strict_field_length: bool = DEFAULT_STRICT_FIELD_LENGTH,
) -> Tuple[InterchangeHeader, str]:
    """
    Parses a UNB segment at the start of `line`.

    Returns the header and whatever follows the segment terminator.
    If the segment ends with a field that exceeded its maximum length
    (and `strict_field_length` is `False`), the overflow is returned
    as part of the remainder instead.
    Raises an `EdifactError` at the first offending offset otherwise.
    """

    parser = Parser(line, strict_field_length=strict_field_length)
    header, remaining = parser.parse()
    logger.debug(
        "Parsed interchange header with control reference %r, "
        "%d character(s) remaining",
        header.interchange_control_reference,
        len(remaining),
    )
    return header, remaining


class Parser:
    """Recursive descent parser for the UNB segment."""

    _text: str

    _index: int
    """Tracks the current index within `self._text`."""

    _overflow_index: Optional[int]
    """
    Index right after the most recent field that was capped at its maximum
    length while more matching characters followed. `None` if no field
    has been capped.
    """

    _strict_field_length: bool

    _evaluation: Optional[Tuple[InterchangeHeader, str]]
    """Cached result of parsing the input text."""

    def __init__(
        self,
        text: str,
        *,
        strict_field_length: bool = DEFAULT_STRICT_FIELD_LENGTH,
    ) -> None:
        self._text = text
        self._strict_field_length = strict_field_length
        self._index = 0
        self._overflow_index = None
        self._evaluation = None

    def parse(self) -> Tuple[InterchangeHeader, str]:
        if self._evaluation is None:
            self._evaluation = self._parse_interchange_header()
        return self._evaluation

    def _parse_interchange_header(self) -> Tuple[InterchangeHeader, str]:
        """Entry point to all of the internal parsing implementation."""

        self._consume_literal(UNB_TAG, "to start the interchange header")
        self._consume_literal(
            DATA_ELEMENT_SEPARATOR, f"after '{UNB_TAG}'"
        )
        syntax_identifier, syntax_version_number = (
            self._parse_syntax_identifier()
        )
        self._consume_element_separator("the syntax identifier")
        sender = self._parse_participant("interchange sender")
        self._consume_element_separator("the interchange sender")
        recipient = self._parse_participant("interchange recipient")
        self._consume_element_separator("the interchange recipient")
        date_time = self._parse_date_time()
        self._consume_element_separator("the date and time of preparation")
        control_reference = self._parse_bounded_field(
            "interchange control reference",
            _TEXT_CHARACTER_SET,
            INTERCHANGE_CONTROL_REFERENCE_BOUNDS,
        )
        conditional = self._parse_conditional_elements()

        header = InterchangeHeader(
            syntax_identifier=syntax_identifier,
            syntax_version_number=syntax_version_number,
            sender=sender,
            recipient=recipient,
            date_time=date_time,
            interchange_control_reference=control_reference,
            **conditional,
        )

        if self._peek() == SEGMENT_TERMINATOR:
            self._advance()
        elif self._overflow_index != self._index:
            raise self._make_error(
                UnexpectedLiteral,
                f"Expected '{SEGMENT_TERMINATOR}' to end the interchange "
                f"header, but got {describe_char(self._peek())}.",
            )
        return header, self._text[self._index:]

    # Input interface

    def _is_at_end(self) -> bool:
        return self._index >= len(self._text)

    def _peek(self) -> str:
        if self._is_at_end():
            return EMPTY
        return self._text[self._index]

    def _advance(self) -> None:
        self._index += 1

    def _get_range(self, start_index: int, end_index: int) -> str:
        """
        Returns the substring of the input text specified by the given indices.
        Silently truncates the output if `end_index` is out of bounds.
        """
        return self._text[start_index:end_index]

    # Error reporting

    def _make_error(
        self,
        error_type: Type[EdifactError],
        reason: str,
        *,
        start_index: Optional[int] = None,
        end_index: Optional[int] = None,
    ) -> EdifactError:
        """
        Args:
            error_type:
                The `EdifactError` subclass to instantiate.
            reason:
                Why the identified part is invalid, in sentence case.
            start_index:
                Start index (inclusive) of the part identified as invalid.
                If `None`, set to `self._index`.
            end_index:
                End index (exclusive) of the part identified as invalid.
                If `None`, set to `start_index + 1`.
        """

        if start_index is None:
            start_index = min(self._index, len(self._text))
        if end_index is None:
            end_index = start_index + 1
        return error_type(
            reason,
            segment=self._text,
            offset=start_index,
            length=max(end_index - start_index, 1),
        )

    # Literals

    def _consume_literal(self, literal: str, context: str) -> None:
        end_index = self._index + len(literal)
        found = self._get_range(self._index, end_index)
        if found != literal:
            raise self._make_error(
                UnexpectedLiteral,
                f"Expected '{literal}' {context}, "
                f"but got {describe_char(found)}.",
                end_index=end_index,
            )
        self._index = end_index

    def _consume_element_separator(self, after: str) -> None:
        self._consume_literal(DATA_ELEMENT_SEPARATOR, f"after {after}")

    def _consume_component_separator(self, after: str) -> None:
        self._consume_literal(
            COMPONENT_DATA_ELEMENT_SEPARATOR, f"after {after}"
        )

    # Fields

    def _parse_bounded_field(
        self,
        name: str,
        allowed: Container[str],
        bounds: FieldBounds,
    ) -> str:
        """
        Consumes between the minimum and maximum number of logical
        characters (an escape sequence counting as one) from `allowed`,
        stopping at the first character that does not match.

        A field longer than its maximum is capped, leaving the rest
        unconsumed, unless strict field length checking is enabled.
        """

        minimum, maximum = bounds
        start_index = self._index
        chars = []
        while len(chars) < maximum:
            match = match_logical_character(self._text, self._index, allowed)
            if match is None:
                break
            c, self._index = match
            chars.append(c)

        if len(chars) < minimum:
            raise self._make_error(
                FieldTooShort,
                f"Expected the {name} to have at least {minimum} "
                f"character(s), but got {len(chars)} before "
                f"{describe_char(self._peek())}.",
                start_index=start_index,
                end_index=max(self._index, start_index + 1),
            )

        if match_logical_character(self._text, self._index, allowed):
            if self._strict_field_length:
                raise self._make_error(
                    FieldTooLong,
                    f"Expected the {name} to have at most {maximum} "
                    "character(s).",
                )
            self._overflow_index = self._index

        return "".join(chars)

    def _parse_fixed_width_field(
        self,
        name: str,
        allowed: Container[str],
        bounds: FieldBounds,
    ) -> str:
        """Like `_parse_bounded_field` but never truncates."""

        minimum, maximum = bounds
        start_index = self._index
        chars = []
        while True:
            match = match_logical_character(self._text, self._index, allowed)
            if match is None:
                break
            c, self._index = match
            chars.append(c)

        if not (minimum <= len(chars) <= maximum):
            expected = (
                f"exactly {minimum}" if minimum == maximum
                else f"{minimum} to {maximum}"
            )
            raise self._make_error(
                InvalidFixedWidthValue,
                f"Expected the {name} to have {expected} character(s), "
                f"but got {len(chars)}.",
                start_index=start_index,
                end_index=max(self._index, start_index + 1),
            )
        return "".join(chars)

    def _consume_plain(
        self, name: str, allowed: AbstractSet[str], bounds: FieldBounds
    ) -> str:
        """
        Consumes exactly `bounds` characters from `allowed`.
        Escape sequences are not recognized.
        """

        minimum, maximum = bounds
        start_index = self._index
        while self._index - start_index < maximum and self._peek() in allowed:
            self._advance()
        if self._index - start_index < minimum:
            raise self._make_error(
                FieldTooShort,
                f"Expected the {name} to have {minimum} character(s), "
                f"but got {describe_char(self._peek())}.",
            )
        return self._get_range(start_index, self._index)

    def _is_empty_slot(self, boundary_set: AbstractSet[str]) -> bool:
        return self._peek() in boundary_set

    # Mandatory composite elements

    def _parse_syntax_identifier(self) -> Tuple[SyntaxIdentifier, int]:
        agency = self._consume_plain(
            "syntax identifier",
            UPPER_CASE_SET,
            SYNTAX_IDENTIFIER_AGENCY_BOUNDS,
        )
        level = self._consume_plain(
            "syntax level", UPPER_CASE_SET, SYNTAX_IDENTIFIER_LEVEL_BOUNDS
        )
        self._consume_component_separator("the syntax identifier")
        version = self._consume_plain(
            "syntax version number", DIGIT_SET, SYNTAX_VERSION_NUMBER_BOUNDS
        )
        return SyntaxIdentifier(agency, level), int(version)

    def _parse_participant(self, name: str) -> InterchangeParticipant:
        """
        Parses `identification[:[partner][:routing]]`.

        The partner identification may be left empty if a routing address
        follows. The routing address cannot be empty once its separator
        is given.
        """

        identification = self._parse_bounded_field(
            f"{name} identification",
            _TEXT_CHARACTER_SET,
            PARTICIPANT_IDENTIFICATION_BOUNDS,
        )
        partner_identification = None
        routing_address = None
        if self._peek() == COMPONENT_DATA_ELEMENT_SEPARATOR:
            self._advance()
            if not self._is_empty_slot(_COMPONENT_BOUNDARY_SET):
                partner_identification = self._parse_bounded_field(
                    f"{name} partner identification",
                    _TEXT_CHARACTER_SET,
                    PARTNER_IDENTIFICATION_BOUNDS,
                )
            if self._peek() == COMPONENT_DATA_ELEMENT_SEPARATOR:
                self._advance()
                routing_address = self._parse_bounded_field(
                    f"{name} routing address",
                    _TEXT_CHARACTER_SET,
                    ROUTING_ADDRESS_BOUNDS,
                )
        return InterchangeParticipant(
            identification, partner_identification, routing_address
        )

    def _parse_date_time(self) -> DateTime:
        """Parses `YYMMDD:HHMM`, checking each component against its table."""

        year = self._parse_date_time_component("year", YEAR_VALUES)
        month = self._parse_date_time_component("month", MONTH_VALUES)
        day = self._parse_date_time_component("day", DAY_VALUES)
        self._consume_component_separator("the date of preparation")
        hour = self._parse_date_time_component("hour", HOUR_VALUES)
        minutes = self._parse_date_time_component("minutes", MINUTE_VALUES)
        return DateTime(year, month, day, hour, minutes)

    def _parse_date_time_component(
        self, name: str, values: AbstractSet[str]
    ) -> str:
        start_index = self._index
        end_index = start_index + DATE_TIME_COMPONENT_LENGTH
        component = self._get_range(start_index, end_index)
        if component not in values:
            raise self._make_error(
                InvalidDateTimeComponent,
                f"Invalid {name} {component!r} in the date and time "
                f"of preparation. Expected {min(values)} to {max(values)}.",
                start_index=start_index,
                end_index=min(end_index, len(self._text) + 1),
            )
        self._index = end_index
        return component

    # Conditional elements

    def _parse_conditional_elements(self) -> Dict[str, Any]:
        """
        Parses the conditional elements that follow the interchange
        control reference, in their fixed order.

        Each one is only attempted if a data element separator precedes it,
        so the segment may be truncated after any of them. A slot left
        empty (`++`) is skipped. Absent elements are left out of the
        returned keyword arguments.
        """

        slots: Tuple[Tuple[str, Callable[[], Any]], ...] = (
            ("recipient_reference_password", self._parse_recipient_reference),
            ("application_reference", lambda: self._parse_bounded_field(
                "application reference",
                _TEXT_CHARACTER_SET,
                APPLICATION_REFERENCE_BOUNDS,
            )),
            ("processing_priority_code", lambda: self._parse_fixed_width_field(
                "processing priority code",
                _TEXT_CHARACTER_SET,
                PROCESSING_PRIORITY_CODE_BOUNDS,
            )),
            ("acknowledgement_request", self._parse_acknowledgement_request),
            ("communication_agreement_id", lambda: self._parse_bounded_field(
                "communication agreement identification",
                _TEXT_CHARACTER_SET,
                COMMUNICATION_AGREEMENT_ID_BOUNDS,
            )),
            ("test_indicator", self._parse_test_indicator),
        )

        elements: Dict[str, Any] = {}
        for name, parse_slot in slots:
            if self._peek() != DATA_ELEMENT_SEPARATOR:
                break
            self._advance()
            if self._is_empty_slot(_ELEMENT_BOUNDARY_SET):
                continue
            elements[name] = parse_slot()
        return elements

    def _parse_recipient_reference(self) -> RecipientReference:
        reference_password = self._parse_bounded_field(
            "recipient reference/password",
            _TEXT_CHARACTER_SET,
            REFERENCE_PASSWORD_BOUNDS,
        )
        qualifier = None
        if self._peek() == COMPONENT_DATA_ELEMENT_SEPARATOR:
            self._advance()
            qualifier = self._parse_fixed_width_field(
                "recipient reference/password qualifier",
                _TEXT_CHARACTER_SET,
                REFERENCE_PASSWORD_QUALIFIER_BOUNDS,
            )
        return RecipientReference(reference_password, qualifier)

    def _parse_acknowledgement_request(self) -> int:
        start_index = self._index
        value = self._parse_fixed_width_field(
            "acknowledgement request",
            _TEXT_CHARACTER_SET,
            ACKNOWLEDGEMENT_REQUEST_BOUNDS,
        )
        if value not in DIGIT_SET:
            raise self._make_error(
                InvalidFixedWidthValue,
                f"Expected the acknowledgement request to be a digit, "
                f"but got {value!r}.",
                start_index=start_index,
                end_index=self._index,
            )
        return int(value)

    def _parse_test_indicator(self) -> str:
        start_index = self._index
        value = self._parse_fixed_width_field(
            "test indicator", _TEXT_CHARACTER_SET, (len(TEST_INDICATOR),) * 2
        )
        if value != TEST_INDICATOR:
            raise self._make_error(
                InvalidFixedWidthValue,
                f"Expected the test indicator to be '{TEST_INDICATOR}', "
                f"but got {value!r}.",
                start_index=start_index,
                end_index=self._index,
            )
        return value
