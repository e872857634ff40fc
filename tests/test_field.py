import struct

import pytest

from amadeus.field import Field
from amadeus.utils import DecodeError
from amadeus.value import Value


SAMPLES = [
    Field("id", Value(5)),
    Field("ratio", Value(0.25)),
    Field("title", Value("Symphony")),
    Field("cover", Value(b"\x00\x01\xff")),
    Field("missing"),
    Field("", Value(-7)),
    Field("zażółć", Value("gęślą")),
]


@pytest.mark.parametrize("field", SAMPLES)
def test_round_trip(field):
    data = field.to_bytes()
    decoded, consumed = Field.from_bytes(data)
    assert decoded == field
    assert consumed == len(data)


@pytest.mark.parametrize("field", SAMPLES)
def test_trailing_bytes_are_not_consumed(field):
    data = field.to_bytes()
    decoded, consumed = Field.from_bytes(data + b"extra")
    assert decoded == field
    assert consumed == len(data)


def test_wire_layout():
    value_bytes = Value(5).to_bytes()
    expected = (
        b"F"
        + struct.pack("<I", 2 + 2 + len(value_bytes))
        + struct.pack("<H", 2)
        + b"id"
        + value_bytes
    )
    assert Field("id", Value(5)).to_bytes() == expected


def test_default_value_is_null():
    assert Field("x").value.is_null()


def test_to_string():
    assert Field("id", Value(5)).to_string() == "id:[i64{5}]"
    assert str(Field("n")) == "n:[NULL]"


def test_equality():
    assert Field("a", Value(1)) == Field("a", Value(1))
    assert Field("a", Value(1)) != Field("b", Value(1))
    assert Field("a", Value(1)) != Field("a", Value(2))


@pytest.mark.parametrize("data", [b"", b"X\x00\x00\x00\x00", b"F\x01"])
def test_from_bytes_rejects_bad_header(data):
    with pytest.raises(DecodeError):
        Field.from_bytes(data)


def test_from_bytes_rejects_truncated():
    data = Field("title", Value("Symphony")).to_bytes()
    with pytest.raises(DecodeError):
        Field.from_bytes(data[:-1])


def test_serialized_data_describes_components():
    field = Field("id", Value(5))
    text = Field.serialized_data(field.to_bytes())
    lines = text.splitlines()
    assert lines[0] == "0x46 [F]"
    assert lines[3].endswith("[id]")
    assert lines[4].endswith(f"[{Value(5).to_string()}]")
    assert len(lines) == 5


@pytest.mark.parametrize("data", [b"", b"Q", b"F\x00"])
def test_serialized_data_of_garbage(data):
    assert Field.serialized_data(data) == "?"