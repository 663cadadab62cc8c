"""
Rewrite a line that uses the delimiters declared by a service string advice
into the canonical delimiters, so that it can be handed to the parser.

```python
advice = ServiceStringAdvice.parse("UNA:|.* '")
line = apply_service_advice("UNB|UNOC:3|MPM*| + 2.19'", advice)

assert line == "UNB+UNOC:3+MPM?| ?+ 2.19'"
```

Both approaches below are equivalent.
1. Call `apply_service_advice()`.
2. Instantiate a `ServiceAdviceCodec` and call its `rewrite()` method,
   which is convenient for rewriting every line of an interchange.
"""

import logging
from typing import FrozenSet, Mapping

from pyedifact._service_string_advice import ServiceStringAdvice
from pyedifact.syntax import (
    DATA_ELEMENT_SEPARATOR,
    DECIMAL_NOTATION,
    RELEASE_INDICATOR,
    SEGMENT_TERMINATOR,
)


logger = logging.getLogger(__name__)

_SPACE = " "


def apply_service_advice(line: str, advice: ServiceStringAdvice) -> str:
    """
    Rewrites `line` from the delimiters of `advice` into the canonical ones.
    Never raises, whatever the content of `line`.
    """
    return ServiceAdviceCodec(advice).rewrite(line)


class ServiceAdviceCodec:
    """
    Rewrites lines from custom delimiters into canonical delimiters.

    Each character is handled by the first of these rules that applies:
    1. The custom release indicator followed by any character is an
       escape sequence. The release indicator becomes `?` and the escaped
       character is kept as is.
    2. A custom data element separator, decimal notation or segment
       terminator becomes `+`, `.` or `'` respectively.
    3. A canonical `+`, `.`, `?` or `'` that is not used as a delimiter by
       the advice is data, so it is escaped with `?`.

    The line is scanned once from left to right, so the output of a rule
    is never rewritten again by another.

    If the release indicator is a space, a space only starts an escape
    sequence when a custom delimiter or another space follows it.
    Any other space is data, and a `?` is left as is.
    """

    _advice: ServiceStringAdvice

    _delimiters: Mapping[str, str]
    """Each custom delimiter mapped to its canonical counterpart."""

    _escaped: FrozenSet[str]
    """Canonical delimiters that are data under the advice."""

    _space_release_targets: FrozenSet[str]
    """Characters that a space release indicator can escape."""

    def __init__(self, advice: ServiceStringAdvice) -> None:
        self._advice = advice
        self._delimiters = {
            advice.data_element_separator: DATA_ELEMENT_SEPARATOR,
            advice.decimal_notation: DECIMAL_NOTATION,
            advice.segment_terminator: SEGMENT_TERMINATOR,
        }
        custom = frozenset(self._delimiters).union(
            (advice.release_indicator,)
        )
        canonical = frozenset(self._delimiters.values())
        if advice.release_indicator != _SPACE:
            canonical = canonical.union((RELEASE_INDICATOR,))
        self._escaped = canonical.difference(custom)
        self._space_release_targets = frozenset(self._delimiters).union(
            (_SPACE,)
        )
        logger.debug(
            "Rewriting with delimiters %r, escaping %r",
            self._delimiters,
            sorted(self._escaped),
        )

    @property
    def advice(self) -> ServiceStringAdvice:
        return self._advice

    def rewrite(self, line: str) -> str:
        if self._advice.is_canonical():
            return line

        release_indicator = self._advice.release_indicator
        pieces = []
        index = 0
        while index < len(line):
            c = line[index]
            if c == release_indicator and self._starts_escape(line, index):
                pieces.append(RELEASE_INDICATOR)
                pieces.append(line[index + 1])
                index += 2
                continue

            canonical = self._delimiters.get(c)
            if canonical is not None:
                pieces.append(canonical)
            elif c in self._escaped:
                pieces.append(f"{RELEASE_INDICATOR}{c}")
            elif c == release_indicator and c != _SPACE:
                # Release indicator at the end of the line
                pieces.append(RELEASE_INDICATOR)
            else:
                pieces.append(c)
            index += 1

        return "".join(pieces)

    def _starts_escape(self, line: str, index: int) -> bool:
        if index + 1 >= len(line):
            return False
        if self._advice.release_indicator == _SPACE:
            return line[index + 1] in self._space_release_targets
        return True
