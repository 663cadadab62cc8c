"""
Python package for parsing the service segments at the start
of a UN/EDIFACT interchange.

The Service String Advice (UNA) declares the delimiters of an interchange.
Lines using those delimiters are rewritten into canonical delimiters
before the Interchange Header (UNB) is parsed.
"""

from pyedifact._charset import (
    CharacterSet,
    is_level_a,
    is_level_b,
    match_logical_character,
)
from pyedifact._edifact_error import (
    DuplicateSeparator,
    EdifactError,
    EdifactErrorCategory,
    FieldTooLong,
    FieldTooShort,
    InvalidDateTimeComponent,
    InvalidFixedWidthValue,
    MalformedAdvice,
    UnexpectedLiteral,
)
from pyedifact._interchange import InterchangeStart, read_interchange_header
from pyedifact._interchange_header import (
    DateTime,
    InterchangeHeader,
    InterchangeParticipant,
    RecipientReference,
    SyntaxIdentifier,
)
from pyedifact._parser import Parser, interchange_header
from pyedifact._service_advice_codec import (
    ServiceAdviceCodec,
    apply_service_advice,
)
from pyedifact._service_string_advice import (
    ServiceStringAdvice,
    parse_service_string_advice,
)
