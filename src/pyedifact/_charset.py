"""
Character classes allowed in EDIFACT data values,
and the escape-aware lookahead shared by every field parser.

A release indicator immediately followed by any character is read
as a single logical character whose value is the released character.
This is how a data value contains a delimiter, or any other character
outside its character set, without breaking the segment structure.
"""

from enum import Enum
from typing import Container, Optional, Tuple

from pyedifact.syntax import LEVEL_A_SET, LEVEL_B_SET, RELEASE_INDICATOR


class CharacterSet(Enum):
    LEVEL_A = LEVEL_A_SET
    LEVEL_B = LEVEL_B_SET

    def __contains__(self, c: object) -> bool:
        return c in self.value


def is_level_a(c: str) -> bool:
    return c in LEVEL_A_SET


def is_level_b(c: str) -> bool:
    return c in LEVEL_B_SET


def match_logical_character(
    text: str,
    index: int,
    allowed: Container[str],
    release_indicator: str = RELEASE_INDICATOR,
) -> Optional[Tuple[str, int]]:
    """
    Reads one logical character of `text` starting at `index`.
    `allowed` is usually a `CharacterSet`.

    Returns the logical character and the index right after it,
    or `None` if the character at `index` is neither in `allowed`
    nor the start of an escape sequence. A release indicator at the
    very end of `text` does not start an escape sequence.
    """

    if index >= len(text):
        return None
    c = text[index]
    if c == release_indicator:
        if index + 1 < len(text):
            return text[index + 1], index + 2
        return None
    if c in allowed:
        return c, index + 1
    return None
