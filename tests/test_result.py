import pytest

from amadeus.result import Result
from amadeus.row import Row
from amadeus.utils import DecodeError
from amadeus.value import Value


def _sample() -> Result:
    result = Result()
    result.add(Row().add("id", 1).add("name", "first").add("score", 2.5))
    result.add(Row().add("id", 2).add("name", None).add("blob", b"\x00\xff"))
    result.add(Row())
    return result


def test_empty_result_wire_bytes():
    assert Result().to_bytes() == b"T\x02\x00\x00\x00\x00\x00"


def test_wire_layout_of_single_row():
    row = Row().add("a", 7)
    data = Result([row]).to_bytes()
    row_bytes = row.to_bytes()
    assert data[0:1] == b"T"
    assert int.from_bytes(data[1:5], "little") == 2 + len(row_bytes)
    assert int.from_bytes(data[5:7], "little") == 1
    assert data[7:] == row_bytes


def test_round_trip_plain():
    original = _sample()
    data = original.to_bytes()
    decoded, consumed = Result.from_bytes(data)
    assert decoded == original
    assert consumed == len(data)
    assert len(decoded) == 3


def test_round_trip_gzip():
    original = _sample()
    data = original.to_gzip_bytes()
    decoded, consumed = Result.from_gzip_bytes(data)
    assert decoded == original
    assert consumed == len(data)


def test_gzip_marker_and_size():
    data = _sample().to_gzip_bytes()
    assert data[0] == ord("T") | 0x80
    assert int.from_bytes(data[1:5], "little") == len(data) - 5


def test_from_bytes_accepts_compressed_data():
    original = _sample()
    decoded, consumed = Result.from_bytes(original.to_gzip_bytes())
    assert decoded == original
    assert consumed == len(original.to_gzip_bytes())


def test_from_bytes_ignores_trailing_data():
    original = _sample()
    data = original.to_bytes()
    decoded, consumed = Result.from_bytes(data + b"extra")
    assert decoded == original
    assert consumed == len(data)


def test_from_gzip_bytes_ignores_trailing_data():
    original = _sample()
    data = original.to_gzip_bytes()
    decoded, consumed = Result.from_gzip_bytes(bytearray(data) + b"tail")
    assert decoded == original
    assert consumed == len(data)


def test_from_bytes_empty_raises():
    with pytest.raises(DecodeError):
        Result.from_bytes(b"")


def test_from_gzip_bytes_empty_raises():
    with pytest.raises(DecodeError):
        Result.from_gzip_bytes(b"")


def test_from_bytes_wrong_marker_raises():
    data = bytearray(_sample().to_bytes())
    data[0] = ord("R")
    with pytest.raises(DecodeError):
        Result.from_bytes(data)


def test_from_gzip_bytes_wrong_letter_raises():
    data = bytearray(_sample().to_gzip_bytes())
    data[0] = ord("Q") | 0x80
    with pytest.raises(DecodeError):
        Result.from_gzip_bytes(data)


def test_from_gzip_bytes_rejects_plain_data():
    with pytest.raises(DecodeError):
        Result.from_gzip_bytes(_sample().to_bytes())


def test_truncated_plain_raises():
    data = _sample().to_bytes()
    with pytest.raises(DecodeError):
        Result.from_bytes(data[:-1])


def test_truncated_gzip_raises():
    data = _sample().to_gzip_bytes()
    with pytest.raises(DecodeError):
        Result.from_gzip_bytes(data[:-3])


def test_corrupt_gzip_payload_raises():
    payload = b"not gzip at all"
    data = bytes([ord("T") | 0x80]) + len(payload).to_bytes(4, "little") + payload
    with pytest.raises(DecodeError):
        Result.from_gzip_bytes(data)


def test_to_string_joins_rows_with_newline():
    result = Result().add(Row().add("a", 1)).add(Row().add("b", "x"))
    assert result.to_string() == "i64{1}\nstring{x}"
    assert str(result) == result.to_string()


def test_to_string_empty():
    assert Result().to_string() == ""


def test_add_returns_self_and_indexing():
    result = Result()
    first = Row().add("id", 1)
    second = Row().add("id", 2)
    assert result.add(first).add(second) is result
    assert result[0] == first
    assert result[1].get("id").value == Value(2)
    assert list(result) == [first, second]
    with pytest.raises(IndexError):
        result[2]


def test_emptiness():
    result = Result()
    assert not result
    assert len(result) == 0
    result.add(Row())
    assert result
    assert len(result) == 1


def test_equality_depends_on_rows():
    assert _sample() == _sample()
    shorter = Result(list(_sample())[:2])
    assert not (_sample() == shorter)
    other = Result().add(Row().add("id", 99))
    assert not (Result().add(Row().add("id", 1)) == other)


def test_too_many_rows_overflow():
    result = Result(Row() for _ in range(0x10000))
    with pytest.raises(OverflowError):
        result.to_bytes()
    with pytest.raises(OverflowError):
        result.to_gzip_bytes()