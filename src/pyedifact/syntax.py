"""Shared constants of the UN/EDIFACT service segments UNA and UNB."""

import string
from types import MappingProxyType
from typing import FrozenSet, Literal, Mapping, Tuple


# General

EMPTY = ""
"""Returned by the parser when peeking past the end of the input."""

UNA_TAG = "UNA"
UNB_TAG = "UNB"
SEGMENT_TAG_LENGTH = 3


# Canonical delimiters

COMPONENT_DATA_ELEMENT_SEPARATOR = ":"
"""Not redefinable by the service string advice as far as UNB is concerned."""

DATA_ELEMENT_SEPARATOR = "+"
DECIMAL_NOTATION = "."
RELEASE_INDICATOR = "?"
SEGMENT_TERMINATOR = "'"

UNA_RESERVED_SPACE = " "
"""Position 8 of the UNA segment. Reserved for future use, always a space."""

UNA_SEGMENT_LENGTH = 9
"""`UNA` + component separator + 4 characters + the reserved space."""

DelimiterName = Literal[
    "data_element_separator",
    "decimal_notation",
    "release_indicator",
    "segment_terminator",
]

DELIMITER_NAMES: Tuple[DelimiterName, ...] = DelimiterName.__args__
"""In the order in which they appear in the UNA segment."""

CANONICAL_DELIMITERS: Mapping[DelimiterName, str] = MappingProxyType({
    "data_element_separator": DATA_ELEMENT_SEPARATOR,
    "decimal_notation": DECIMAL_NOTATION,
    "release_indicator": RELEASE_INDICATOR,
    "segment_terminator": SEGMENT_TERMINATOR,
})


# Character sets

DIGIT_SET = frozenset(string.digits)
UPPER_CASE_SET = frozenset(string.ascii_uppercase)

LEVEL_A_SET: FrozenSet[str] = UPPER_CASE_SET.union(
    DIGIT_SET,
    " .,-()/=",
)
"""
Level A character set: upper case letters, digits, space
and the symbols `. , - ( ) / =`.
"""

LEVEL_B_SET: FrozenSet[str] = LEVEL_A_SET.union(
    string.ascii_lowercase,
    '!"%&*;<>',
)
"""Level B is a superset of level A that adds lower case letters and `! " % & * ; < >`."""


# Date and time of preparation

def _two_digit_values(first: int, last: int) -> FrozenSet[str]:
    return frozenset(f"{n:02d}" for n in range(first, last + 1))


YEAR_VALUES = _two_digit_values(0, 99)
MONTH_VALUES = _two_digit_values(1, 12)
DAY_VALUES = _two_digit_values(1, 31)
"""Not checked against the month, so `0230` is accepted."""

HOUR_VALUES = _two_digit_values(0, 23)
MINUTE_VALUES = _two_digit_values(0, 59)

DATE_TIME_COMPONENT_LENGTH = 2

DEFAULT_CENTURY = 2000
"""Added to the two-digit year when converting to `datetime`."""


# UNB field lengths as (minimum, maximum)

FieldBounds = Tuple[int, int]

SYNTAX_IDENTIFIER_AGENCY_BOUNDS: FieldBounds = (3, 3)
SYNTAX_IDENTIFIER_LEVEL_BOUNDS: FieldBounds = (1, 1)
SYNTAX_VERSION_NUMBER_BOUNDS: FieldBounds = (1, 1)
PARTICIPANT_IDENTIFICATION_BOUNDS: FieldBounds = (1, 35)
PARTNER_IDENTIFICATION_BOUNDS: FieldBounds = (1, 4)
ROUTING_ADDRESS_BOUNDS: FieldBounds = (1, 14)
INTERCHANGE_CONTROL_REFERENCE_BOUNDS: FieldBounds = (1, 14)
REFERENCE_PASSWORD_BOUNDS: FieldBounds = (1, 14)
REFERENCE_PASSWORD_QUALIFIER_BOUNDS: FieldBounds = (2, 2)
APPLICATION_REFERENCE_BOUNDS: FieldBounds = (1, 35)
PROCESSING_PRIORITY_CODE_BOUNDS: FieldBounds = (1, 1)
ACKNOWLEDGEMENT_REQUEST_BOUNDS: FieldBounds = (1, 1)
COMMUNICATION_AGREEMENT_ID_BOUNDS: FieldBounds = (1, 35)

TEST_INDICATOR = "1"
"""The only value allowed for the test indicator."""

DEFAULT_STRICT_FIELD_LENGTH = False
"""
If `False`, a field longer than its maximum is capped and the overflow
is left unconsumed. If `True`, the overflow raises `FieldTooLong`.
"""
