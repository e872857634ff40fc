import pytest

from amadeus.field import Field
from amadeus.row import Row
from amadeus.utils import DecodeError
from amadeus.value import Value


def _sample_row():
    return (
        Row()
        .add("id", 3)
        .add("title", "Requiem")
        .add("length", 12.5)
        .add("cover", b"\x01\x02")
        .add("note")
    )


def test_add_and_get():
    row = _sample_row()
    assert row.get("id") == Field("id", Value(3))
    assert row.get("title").value == Value("Requiem")
    assert row.get("note").value.is_null()
    assert row.get("absent") is None
    assert len(row) == 5


def test_add_accepts_value_objects():
    row = Row().add("id", Value(9))
    assert row.get("id").value == Value(9)


def test_add_replaces_same_name():
    row = Row().add("id", 1).add("id", 2)
    assert len(row) == 1
    assert row.get("id").value == Value(2)


def test_add_field_and_constructor():
    fields = [Field("a", Value(1)), Field("b", Value("x"))]
    row = Row(fields)
    assert list(row) == fields
    assert "a" in row
    assert "c" not in row


def test_split_is_parallel():
    row = _sample_row()
    names, values = row.split()
    assert len(names) == len(values) == len(row)
    for name, value in zip(names, values):
        assert row.get(name).value == value


def test_empty_row_split():
    assert Row().split() == ([], [])
    assert len(Row()) == 0


def test_round_trip():
    row = _sample_row()
    data = row.to_bytes()
    decoded, consumed = Row.from_bytes(data)
    assert decoded == row
    assert consumed == len(data)


def test_round_trip_ignores_trailing_bytes():
    row = _sample_row()
    data = row.to_bytes()
    decoded, consumed = Row.from_bytes(data + b"tail")
    assert decoded == row
    assert consumed == len(data)


def test_empty_row_wire_bytes():
    data = Row().to_bytes()
    assert data == b"R\x02\x00\x00\x00\x00\x00"
    decoded, consumed = Row.from_bytes(data)
    assert len(decoded) == 0
    assert consumed == len(data)


def test_to_bytes_starts_with_marker():
    assert _sample_row().to_bytes()[:1] == b"R"


def test_to_string_sorted_by_name():
    row = Row().add("b", "x").add("a", 1)
    assert row.to_string() == "i64{1},string{x}"


def test_to_string_of_empty_row():
    assert Row().to_string() == ""


def test_equality():
    assert Row().add("a", 1) == Row().add("a", 1)
    assert Row().add("a", 1) != Row().add("a", 2)
    assert Row().add("a", 1) != Row().add("b", 1)


@pytest.mark.parametrize("data", [b"", b"T\x00\x00\x00\x00", b"R\x00"])
def test_from_bytes_rejects_bad_header(data):
    with pytest.raises(DecodeError):
        Row.from_bytes(data)


def test_from_bytes_rejects_truncated():
    data = _sample_row().to_bytes()
    with pytest.raises(DecodeError):
        Row.from_bytes(data[:-3])


def test_serialized_data_lists_fields():
    row = Row().add("id", 3).add("title", "Requiem")
    text = Row.serialized_data(row.to_bytes())
    assert text.startswith("0x52 [R]\n")
    for item in row:
        assert Field.serialized_data(item.to_bytes()) in text


def test_serialized_data_of_short_input():
    assert Row.serialized_data(b"") == ""
    assert Row.serialized_data(b"R\x00") == ""