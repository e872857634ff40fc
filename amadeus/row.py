"""A database row: named fields and their binary serialization.

A serialized row is laid out as the marker ``R``, a little-endian unsigned
32-bit chunk size, a little-endian unsigned 16-bit field count and the
serialized fields. The chunk size counts everything after itself.
"""

from __future__ import annotations

import struct
from collections.abc import Iterable, Iterator
from typing import Any, Union

from amadeus.field import Field
from amadeus.utils import DecodeError, hex_bytes_as_str, join, read_u16, read_u32
from amadeus.value import Value

BytesLike = Union[bytes, bytearray, memoryview]

_MARKER = ord("R")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_HEADER_SIZE = 1 + _U32.size


class Row:
    """A mapping of column names to fields, one field per name."""

    __slots__ = ("_fields",)

    def __init__(self, fields: Iterable[Field] = ()) -> None:
        self._fields: dict[str, Field] = {}
        for item in fields:
            self.add_field(item)

    def add_field(self, field: Field) -> Row:
        """Store ``field``, replacing any field with the same name."""
        self._fields[field.name] = field
        return self

    def add(self, name: str, value: Any = None) -> Row:
        """Store a field named ``name``; ``value`` may be a Value or raw data."""
        if not isinstance(value, Value):
            value = Value(value)
        return self.add_field(Field(name, value))

    def get(self, name: str) -> Field | None:
        """Return the field called ``name``, or ``None``."""
        return self._fields.get(name)

    def split(self) -> tuple[list[str], list[Value]]:
        """Return the names and the values as two parallel lists."""
        names = list(self._fields)
        values = [item.value for item in self._fields.values()]
        return names, values

    def __len__(self) -> int:
        return len(self._fields)

    def __iter__(self) -> Iterator[Field]:
        return iter(self._fields.values())

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._fields == other._fields

    def __repr__(self) -> str:
        return f"Row({list(self._fields.values())!r})"

    def to_string(self) -> str:
        """Return the values' text forms ordered by field name, comma separated."""
        return join([self._fields[key].value.to_string() for key in sorted(self._fields)])

    def __str__(self) -> str:
        return self.to_string()

    def to_bytes(self) -> bytes:
        """Serialize the row: marker, chunk size, field count, fields."""
        if len(self._fields) > 0xFFFF:
            raise OverflowError("A row can hold at most 65535 fields.")
        body = b"".join(item.to_bytes() for item in self._fields.values())
        chunk_size = _U16.size + len(body)
        return b"".join(
            (b"R", _U32.pack(chunk_size), _U16.pack(len(self._fields)), body)
        )

    @classmethod
    def from_bytes(cls, data: BytesLike) -> tuple[Row, int]:
        """Decode a row from the start of ``data``.

        Returns the row and the number of bytes consumed. Raises
        :class:`DecodeError` when the data is not a complete row.
        """
        view = memoryview(data)
        if not view or view[0] != _MARKER:
            raise DecodeError("Data does not start with a row marker.")
        chunk_size = read_u32(view[1:])
        chunk = view[_HEADER_SIZE:]
        if len(chunk) < chunk_size:
            raise DecodeError(
                f"Row needs {chunk_size} bytes, only {len(chunk)} available."
            )
        chunk = chunk[:chunk_size]
        count = read_u16(chunk)
        rest = chunk[_U16.size:]
        consumed = _HEADER_SIZE + _U16.size
        row = cls()
        for _ in range(count):
            item, nbytes = Field.from_bytes(rest)
            row.add_field(item)
            rest = rest[nbytes:]
            consumed += nbytes
        return row, consumed

    @staticmethod
    def serialized_data(data: BytesLike) -> str:
        """Describe serialized row bytes, one component per line.

        Returns an empty string when the header is incomplete.
        """
        view = memoryview(data)
        if not view:
            return ""
        lines = [f"0x{view[0]:02x} [{chr(view[0])}]\n"]
        rest = view[1:]
        if len(rest) < _U32.size:
            return ""
        total_size = read_u32(rest)
        lines.append(f"{hex_bytes_as_str(rest[:_U32.size])} [{total_size}]\n")
        rest = rest[_U32.size:]
        if len(rest) < _U16.size:
            return "".join(lines)
        count = read_u16(rest)
        lines.append(f"{hex_bytes_as_str(rest[:_U16.size])} [{count}]\n")
        rest = rest[_U16.size:]
        for _ in range(count):
            try:
                _, nbytes = Field.from_bytes(rest)
            except DecodeError:
                lines.append("?\n")
                break
            lines.append(f"{Field.serialized_data(rest[:nbytes])} [{nbytes}]\n")
            rest = rest[nbytes:]
        return "".join(lines)