import pytest

from pyedifact import ServiceStringAdvice


MINIMAL_HEADER = "UNB+UNOC:3+SENDER:ZZ+RECEIVER:ZZ+940101:0950+1'"

FULL_HEADER = (
    "UNB+UNOC:3+SENDER:ZZ+RECEIVER:ZZ+940101:0950+1"
    "+PASS:PQ+APPREF+A+1+AGREEMENT+1'"
)


def header_with(date_time="940101:0950", reference="1", tail=""):
    """Builds a canonical UNB segment around the given parts."""
    return (
        f"UNB+UNOC:3+SENDER:ZZ+RECEIVER:ZZ+{date_time}+{reference}{tail}'"
    )


@pytest.fixture
def minimal_header():
    return MINIMAL_HEADER


@pytest.fixture
def full_header():
    return FULL_HEADER


@pytest.fixture
def pipe_advice():
    return ServiceStringAdvice.parse("UNA:|.? '")


@pytest.fixture
def sample_interchange():
    return """UNA:|.* '
UNB|UNOC:3|SENDER:ZZ|RECEIVER:ZZ|940101:0950|1'
UNH|1|ORDERS:D:96A:UN'
BGM|220|ORDER123|9'
UNT|3|1'
UNZ|1|1'"""
