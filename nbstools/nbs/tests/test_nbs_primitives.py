import pytest

from nbstools.errors import InvalidFormat, InvalidString, StreamFailure
from nbstools.nbs.primitives import Bool, Int16, String, translate_errors


def test_that_integers_are_little_endian() -> None:
    assert Int16.build(-2) == b"\xfe\xff"
    assert Int16.parse(b"\x01\x02") == 0x0201


def test_that_strings_are_prefixed_with_their_length_in_bytes() -> None:
    assert String.build("é") == b"\x02\x00\x00\x00\xc3\xa9"


def test_that_a_zero_length_string_is_empty() -> None:
    assert String.parse(b"\x00\x00\x00\x00") == ""


def test_that_only_a_byte_of_one_is_true() -> None:
    assert Bool.parse(b"\x01") is True
    assert Bool.parse(b"\x00") is False
    assert Bool.parse(b"\x02") is False
    assert Bool.build(True) == b"\x01"
    assert Bool.build(False) == b"\x00"


def test_that_bad_utf8_is_reported_as_an_invalid_string() -> None:
    with pytest.raises(InvalidString):
        with translate_errors():
            String.parse(b"\x02\x00\x00\x00\xff\xfe")


def test_that_short_reads_are_reported_as_stream_failures() -> None:
    with pytest.raises(StreamFailure):
        with translate_errors():
            String.parse(b"\x05\x00\x00\x00abc")


def test_that_out_of_range_values_are_reported_as_invalid_format() -> None:
    with pytest.raises(InvalidFormat):
        with translate_errors():
            Int16.build(2 ** 15)
