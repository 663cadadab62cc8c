"""Values parsed from the Interchange Header (UNB) segment."""

import dataclasses
import datetime
from typing import List, Optional

from pyedifact._charset import is_level_b
from pyedifact.syntax import (
    COMPONENT_DATA_ELEMENT_SEPARATOR,
    DATA_ELEMENT_SEPARATOR,
    DEFAULT_CENTURY,
    RELEASE_INDICATOR,
    SEGMENT_TERMINATOR,
    UNB_TAG,
)


@dataclasses.dataclass(frozen=True)
class SyntaxIdentifier:
    controlling_agency: str
    """Three letters, such as `UNO`."""
    level: str
    """One letter, such as `C`."""


@dataclasses.dataclass(frozen=True)
class InterchangeParticipant:
    """The sender or the recipient of an interchange."""

    identification: str
    partner_identification: Optional[str] = None
    """Partner identification code qualifier."""
    routing_address: Optional[str] = None
    """Address for reverse routing."""


@dataclasses.dataclass(frozen=True)
class DateTime:
    """
    Date and time of preparation, each component kept as the two digits
    found in the segment. A day is only checked to be within 01 to 31,
    regardless of the month.
    """

    year: str
    month: str
    day: str
    hour: str
    minutes: str

    def to_datetime(self, century: int = DEFAULT_CENTURY) -> datetime.datetime:
        """
        Converts to a naive `datetime`, adding `century` to the year.

        Raises `ValueError` for a day that does not exist in its month
        (e.g. `0230`), since that is not rejected by the parser.
        """
        return datetime.datetime(
            century + int(self.year),
            int(self.month),
            int(self.day),
            int(self.hour),
            int(self.minutes),
        )


@dataclasses.dataclass(frozen=True)
class RecipientReference:
    """Recipient's reference or password, with its optional qualifier."""

    reference_password: str
    reference_password_qualifier: Optional[str] = None


@dataclasses.dataclass(frozen=True)
class InterchangeHeader:
    syntax_identifier: SyntaxIdentifier
    syntax_version_number: int
    sender: InterchangeParticipant
    recipient: InterchangeParticipant
    date_time: DateTime
    interchange_control_reference: str

    # Conditional elements, in the order they appear in the segment
    recipient_reference_password: Optional[RecipientReference] = None
    application_reference: Optional[str] = None
    processing_priority_code: Optional[str] = None
    acknowledgement_request: Optional[int] = None
    communication_agreement_id: Optional[str] = None
    test_indicator: Optional[str] = None

    def to_segment(self) -> str:
        """
        Renders the header as a UNB segment in canonical delimiters.

        Every character of a value outside the level B character set
        is escaped with the release indicator, so that the output
        can be parsed back into an equal header.
        Trailing conditional elements that are absent are truncated.
        """

        syntax_identifier = _join_components(
            f"{self.syntax_identifier.controlling_agency}"
            f"{self.syntax_identifier.level}",
            str(self.syntax_version_number),
        )
        date_time = _join_components(
            f"{self.date_time.year}{self.date_time.month}{self.date_time.day}",
            f"{self.date_time.hour}{self.date_time.minutes}",
        )
        elements = [
            UNB_TAG,
            syntax_identifier,
            _participant_to_element(self.sender),
            _participant_to_element(self.recipient),
            date_time,
            escape_value(self.interchange_control_reference),
        ]

        reference = self.recipient_reference_password
        conditional = [
            "" if reference is None else _join_components(
                escape_value(reference.reference_password),
                _optional_value(reference.reference_password_qualifier),
            ),
            _optional_value(self.application_reference),
            _optional_value(self.processing_priority_code),
            "" if self.acknowledgement_request is None
            else str(self.acknowledgement_request),
            _optional_value(self.communication_agreement_id),
            _optional_value(self.test_indicator),
        ]
        while conditional and conditional[-1] == "":
            conditional.pop()
        elements.extend(conditional)

        return f"{DATA_ELEMENT_SEPARATOR.join(elements)}{SEGMENT_TERMINATOR}"


def escape_value(value: str) -> str:
    """Prefixes each character outside the level B set with `?`."""
    return "".join(
        c if is_level_b(c) else f"{RELEASE_INDICATOR}{c}"
        for c in value
    )


def _optional_value(value: Optional[str]) -> str:
    return "" if value is None else escape_value(value)


def _join_components(*components: str) -> str:
    # Trailing empty components are truncated
    parts: List[str] = list(components)
    while len(parts) > 1 and parts[-1] == "":
        parts.pop()
    return COMPONENT_DATA_ELEMENT_SEPARATOR.join(parts)


def _participant_to_element(participant: InterchangeParticipant) -> str:
    return _join_components(
        escape_value(participant.identification),
        _optional_value(participant.partner_identification),
        _optional_value(participant.routing_address),
    )
