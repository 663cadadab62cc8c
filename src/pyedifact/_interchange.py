"""
Read the start of an interchange: the optional UNA segment,
followed by the UNB segment.

```python
start = read_interchange_header(
    "UNA:|.? '\\nUNB|UNOC:3|SENDER:ZZ|RECEIVER:ZZ|940101:0950|1'\\n..."
)

assert start.service_string_advice.data_element_separator == "|"
assert start.header.recipient.identification == "RECEIVER"
```
"""

import dataclasses
import logging
from typing import Optional

from pyedifact._interchange_header import InterchangeHeader
from pyedifact._parser import interchange_header
from pyedifact._service_advice_codec import ServiceAdviceCodec
from pyedifact._service_string_advice import ServiceStringAdvice
from pyedifact.syntax import (
    DEFAULT_STRICT_FIELD_LENGTH,
    UNA_SEGMENT_LENGTH,
    UNA_TAG,
)


logger = logging.getLogger(__name__)

_LINE_BREAK_CHARS = "\r\n"


@dataclasses.dataclass(frozen=True)
class InterchangeStart:
    service_string_advice: Optional[ServiceStringAdvice]
    """`None` if the interchange has no UNA segment."""
    header: InterchangeHeader
    remaining: str
    """
    Everything after the UNB segment, rewritten into canonical delimiters.
    """


def read_interchange_header(
    text: str,
    *,
    strict_field_length: bool = DEFAULT_STRICT_FIELD_LENGTH,
) -> InterchangeStart:
    """
    Parses the UNA segment (if any) and the UNB segment at the start
    of `text`. Line breaks directly after the UNA segment are skipped.

    If there is a UNA segment, the rest of `text` is rewritten from
    the delimiters it declares into canonical delimiters before
    parsing the UNB segment.

    Raises an `EdifactError` if either segment is invalid.
    """

    advice = None
    rest = text
    if text.startswith(UNA_TAG):
        advice = ServiceStringAdvice.parse(text[:UNA_SEGMENT_LENGTH])
        logger.debug("Interchange declares delimiters %s", advice)
        rest = text[UNA_SEGMENT_LENGTH:].lstrip(_LINE_BREAK_CHARS)
        rest = ServiceAdviceCodec(advice).rewrite(rest)
    else:
        logger.debug("No service string advice, using canonical delimiters")

    header, remaining = interchange_header(
        rest, strict_field_length=strict_field_length
    )
    return InterchangeStart(
        service_string_advice=advice,
        header=header,
        remaining=remaining,
    )
