"""
The Service String Advice (UNA) segment declares the delimiters
used by the rest of an interchange.

```python
advice = ServiceStringAdvice.parse("UNA:|.* '")

assert advice.data_element_separator == "|"
assert advice.release_indicator == "*"
```

Without a UNA segment, the canonical delimiters apply
(`ServiceStringAdvice.default()`).
"""

import dataclasses
import logging
from typing import Optional

from pyedifact._edifact_error import (
    DuplicateSeparator,
    EdifactError,
    MalformedAdvice,
)
from pyedifact.syntax import (
    CANONICAL_DELIMITERS,
    COMPONENT_DATA_ELEMENT_SEPARATOR,
    DATA_ELEMENT_SEPARATOR,
    DECIMAL_NOTATION,
    DELIMITER_NAMES,
    RELEASE_INDICATOR,
    SEGMENT_TAG_LENGTH,
    SEGMENT_TERMINATOR,
    UNA_RESERVED_SPACE,
    UNA_SEGMENT_LENGTH,
    UNA_TAG,
)


logger = logging.getLogger(__name__)

_COMPONENT_SEPARATOR_INDEX = SEGMENT_TAG_LENGTH
_RESERVED_SPACE_INDEX = UNA_SEGMENT_LENGTH - 2


@dataclasses.dataclass(frozen=True)
class ServiceStringAdvice:
    data_element_separator: str = DATA_ELEMENT_SEPARATOR
    decimal_notation: str = DECIMAL_NOTATION
    release_indicator: str = RELEASE_INDICATOR
    segment_terminator: str = SEGMENT_TERMINATOR

    def __post_init__(self) -> None:
        for name in DELIMITER_NAMES:
            value = getattr(self, name)
            if not (isinstance(value, str) and len(value) == 1):
                raise ValueError(
                    f"{name} must be a single character, but got {value!r}"
                )
        values = [getattr(self, name) for name in DELIMITER_NAMES]
        if len(set(values)) != len(values):
            raise ValueError(
                f"Delimiters must be pairwise distinct, but got {values!r}"
            )
        if COMPONENT_DATA_ELEMENT_SEPARATOR in values:
            raise ValueError(
                "Delimiters must differ from the component data element "
                f"separator '{COMPONENT_DATA_ELEMENT_SEPARATOR}', "
                f"but got {values!r}"
            )

    @classmethod
    def default(cls) -> "ServiceStringAdvice":
        return cls(**CANONICAL_DELIMITERS)

    @classmethod
    def parse(cls, line: str) -> "ServiceStringAdvice":
        """
        Parses a complete UNA segment of exactly nine characters.

        Raises `MalformedAdvice` if the segment has the wrong length,
        the wrong tag, a component separator other than `:`, or no space
        at the reserved position.
        Raises `DuplicateSeparator` if any two of the declared characters
        are the same, or if one of them is the component separator.
        """

        if not line.startswith(UNA_TAG):
            raise MalformedAdvice(
                f"Expected the segment to start with '{UNA_TAG}'.",
                segment=line,
                offset=0,
                length=min(SEGMENT_TAG_LENGTH, max(len(line), 1)),
            )
        if len(line) != UNA_SEGMENT_LENGTH:
            offset = min(len(line), UNA_SEGMENT_LENGTH)
            raise MalformedAdvice(
                f"Expected exactly {UNA_SEGMENT_LENGTH} characters "
                f"in the service string advice, but got {len(line)}.",
                segment=line,
                offset=offset,
                length=max(len(line) - offset, 1),
            )
        if line[_COMPONENT_SEPARATOR_INDEX] != COMPONENT_DATA_ELEMENT_SEPARATOR:
            raise MalformedAdvice(
                "Expected the component data element separator "
                f"'{COMPONENT_DATA_ELEMENT_SEPARATOR}', which cannot be "
                f"redefined, but got {line[_COMPONENT_SEPARATOR_INDEX]!r}.",
                segment=line,
                offset=_COMPONENT_SEPARATOR_INDEX,
            )
        if line[_RESERVED_SPACE_INDEX] != UNA_RESERVED_SPACE:
            raise MalformedAdvice(
                "Expected a space at the reserved position of the service "
                f"string advice, but got {line[_RESERVED_SPACE_INDEX]!r}.",
                segment=line,
                offset=_RESERVED_SPACE_INDEX,
            )

        # Index of each declared character
        declared = {
            "data_element_separator": 4,
            "decimal_notation": 5,
            "release_indicator": 6,
            "segment_terminator": 8,
        }
        seen = {
            COMPONENT_DATA_ELEMENT_SEPARATOR: "component_data_element_separator"
        }
        for name, index in declared.items():
            c = line[index]
            if c in seen:
                raise DuplicateSeparator(
                    f"The {name.replace('_', ' ')} {c!r} is already used "
                    f"as the {seen[c].replace('_', ' ')}. "
                    "All characters of the service string advice "
                    "must be distinct.",
                    segment=line,
                    offset=index,
                )
            seen[c] = name

        return cls(**{name: line[index] for name, index in declared.items()})

    def is_canonical(self) -> bool:
        return all(
            getattr(self, name) == value
            for name, value in CANONICAL_DELIMITERS.items()
        )

    def to_segment(self) -> str:
        """Renders the UNA segment that declares these delimiters."""
        return (
            f"{UNA_TAG}{COMPONENT_DATA_ELEMENT_SEPARATOR}"
            f"{self.data_element_separator}{self.decimal_notation}"
            f"{self.release_indicator}{UNA_RESERVED_SPACE}"
            f"{self.segment_terminator}"
        )


def parse_service_string_advice(line: str) -> Optional[ServiceStringAdvice]:
    """
    Parses a UNA segment, returning `None` instead of raising
    if it is malformed or declares the same character twice.
    Use `ServiceStringAdvice.parse()` to get the reason.
    """

    try:
        advice = ServiceStringAdvice.parse(line)
    except EdifactError as e:
        logger.debug("Rejected service string advice %r: %s", line, e.reason)
        return None
    logger.debug("Parsed service string advice %r: %s", line, advice)
    return advice
