from enum import Enum
from typing import Optional


ERROR_POINTER_CHAR = "^"
ERROR_ELLIPSIS = "..."

MAX_ERROR_CONTEXT_LEN = 40
"""
The maximum number of characters around the invalid input
to include in the error message.

Segments are usually short enough to be shown whole.
If the part of the segment before the invalid input is longer than this,
then only the substring of this length adjacent to the invalid input
is included. The same applies to the part after the invalid input.
"""

_SPACE = " "


class EdifactErrorCategory(Enum):
    MALFORMED_ADVICE = "malformed advice"
    DUPLICATE_SEPARATOR = "duplicate separator"
    UNEXPECTED_LITERAL = "unexpected literal"
    FIELD_TOO_SHORT = "field too short"
    FIELD_TOO_LONG = "field too long"
    INVALID_DATE_TIME_COMPONENT = "invalid date time component"
    INVALID_FIXED_WIDTH_VALUE = "invalid fixed width value"

    def __str__(self) -> str:
        return self.value


class EdifactError(Exception):
    """Indicates a failure to parse a part of an EDIFACT segment."""

    category: EdifactErrorCategory = EdifactErrorCategory.UNEXPECTED_LITERAL
    """Overridden by each subclass."""

    def __init__(
        self,
        reason: str,
        *,
        segment: str,
        offset: int,
        length: int = 1,
    ) -> None:
        """
        Args:
            reason:
                Why the identified part is invalid.
                This should be a complete sentence.
            segment:
                The line containing the invalid part.
            offset:
                Start index (0-indexed within `segment`, inclusive)
                of the part identified as invalid. May equal
                `len(segment)` when the segment ended too early.
            length:
                Number of characters identified as invalid.
        """

        if not (0 <= offset <= len(segment)) or length < 1:
            raise ValueError(
                "Invalid location given for the invalid EDIFACT input. "
                f"offset={offset}, length={length}, "
                f"segment_length={len(segment)}"
            )
        super().__init__(
            _format_error_message(reason, segment, offset, length)
        )
        self.reason = reason
        self.segment = segment
        self.offset = offset
        self.length = length

    @property
    def error_category(self) -> EdifactErrorCategory:
        return self.category


class MalformedAdvice(EdifactError):
    """The UNA segment has the wrong length or does not start with `UNA`."""

    category = EdifactErrorCategory.MALFORMED_ADVICE


class DuplicateSeparator(EdifactError):
    """Two characters declared by the UNA segment are the same."""

    category = EdifactErrorCategory.DUPLICATE_SEPARATOR


class UnexpectedLiteral(EdifactError):
    """A fixed token (tag, separator or terminator) is missing."""

    category = EdifactErrorCategory.UNEXPECTED_LITERAL


class FieldTooShort(EdifactError):
    category = EdifactErrorCategory.FIELD_TOO_SHORT


class FieldTooLong(EdifactError):
    """Only raised when strict field length checking is enabled."""

    category = EdifactErrorCategory.FIELD_TOO_LONG


class InvalidDateTimeComponent(EdifactError):
    category = EdifactErrorCategory.INVALID_DATE_TIME_COMPONENT


class InvalidFixedWidthValue(EdifactError):
    category = EdifactErrorCategory.INVALID_FIXED_WIDTH_VALUE


def _format_error_message(
    reason: str, segment: str, offset: int, length: int
) -> str:
    """
    Formats the reason, followed by the segment and a pointer
    underneath the invalid part of it.
    """

    end_index = min(offset + length, len(segment) + 1)
    line = segment
    if MAX_ERROR_CONTEXT_LEN < len(line) - end_index:
        truncate_index = end_index + MAX_ERROR_CONTEXT_LEN
        line = f"{line[:truncate_index]}{ERROR_ELLIPSIS}"
    len_before_invalid = offset
    if MAX_ERROR_CONTEXT_LEN < len_before_invalid:
        truncate_index = len_before_invalid - MAX_ERROR_CONTEXT_LEN
        line = f"{ERROR_ELLIPSIS}{line[truncate_index:]}"
        len_before_invalid = MAX_ERROR_CONTEXT_LEN + len(ERROR_ELLIPSIS)

    return (
        f"{reason}\n"
        f"At offset {offset}:\n"
        f"{line}\n"
        f"{_SPACE * len_before_invalid}"
        f"{ERROR_POINTER_CHAR * (end_index - offset)}"
    )


def describe_char(c: Optional[str]) -> str:
    """Renders a peeked character for use in an error reason."""
    if not c:
        return "the end of the segment"
    return repr(c)
