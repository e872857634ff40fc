"""A named value and its binary serialization.

A serialized field is laid out as the marker ``F``, a little-endian unsigned
32-bit chunk size, a little-endian unsigned 16-bit name size, the UTF-8 name
and the serialized :class:`~amadeus.value.Value`. The chunk size counts
everything after itself.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Union

from amadeus.utils import DecodeError, hex_bytes_as_str, read_u16, read_u32
from amadeus.value import Value

BytesLike = Union[bytes, bytearray, memoryview]

_MARKER = ord("F")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_HEADER_SIZE = 1 + _U32.size


@dataclass(frozen=True)
class Field:
    """A column name paired with its value."""

    name: str
    value: Value = field(default_factory=Value)

    def to_string(self) -> str:
        """Return text such as ``name:[i64{5}]``."""
        return f"{self.name}:[{self.value.to_string()}]"

    def __str__(self) -> str:
        return self.to_string()

    def to_bytes(self) -> bytes:
        """Serialize the field: marker, chunk size, name size, name, value."""
        name_bytes = self.name.encode("utf-8")
        if len(name_bytes) > 0xFFFF:
            raise OverflowError("Field name is longer than 65535 bytes.")
        value_bytes = self.value.to_bytes()
        chunk_size = _U16.size + len(name_bytes) + len(value_bytes)
        return b"".join(
            (
                b"F",
                _U32.pack(chunk_size),
                _U16.pack(len(name_bytes)),
                name_bytes,
                value_bytes,
            )
        )

    @classmethod
    def from_bytes(cls, data: BytesLike) -> tuple[Field, int]:
        """Decode a field from the start of ``data``.

        Returns the field and the number of bytes consumed. Raises
        :class:`DecodeError` when the data is not a complete field.
        """
        view = memoryview(data)
        if not view or view[0] != _MARKER:
            raise DecodeError("Data does not start with a field marker.")
        chunk_size = read_u32(view[1:])
        chunk = view[_HEADER_SIZE:]
        if len(chunk) < chunk_size:
            raise DecodeError(
                f"Field needs {chunk_size} bytes, only {len(chunk)} available."
            )
        chunk = chunk[:chunk_size]
        name_size = read_u16(chunk)
        name_end = _U16.size + name_size
        if len(chunk) < name_end:
            raise DecodeError("Field name runs past the end of the chunk.")
        try:
            name = bytes(chunk[_U16.size:name_end]).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Invalid field name: {exc}.") from exc
        value, nbytes = Value.from_bytes(chunk[name_end:])
        return cls(name, value), _HEADER_SIZE + name_end + nbytes

    @staticmethod
    def serialized_data(data: BytesLike) -> str:
        """Describe serialized field bytes, one component per line.

        Returns ``"?"`` when the bytes are not a complete field.
        """
        view = memoryview(data)
        if not view or view[0] != _MARKER:
            return "?"
        lines = [f"0x{view[0]:02x} [{chr(view[0])}]\n"]
        rest = view[1:]
        if len(rest) < _U32.size:
            return "?"
        chunk_size = read_u32(rest)
        lines.append(f"{hex_bytes_as_str(rest[:_U32.size])} [{chunk_size}]\n")
        rest = rest[_U32.size:]
        if len(rest) < _U16.size:
            return "?"
        name_size = read_u16(rest)
        lines.append(f"{hex_bytes_as_str(rest[:_U16.size])} [{name_size}]\n")
        rest = rest[_U16.size:]
        if len(rest) < name_size:
            return "?"
        name_view = rest[:name_size]
        name = bytes(name_view).decode("utf-8", errors="replace")
        lines.append(f"{hex_bytes_as_str(name_view)} [{name}]\n")
        rest = rest[name_size:]
        value_size = chunk_size - name_size - _U16.size
        if value_size < 0 or len(rest) < value_size:
            return "?"
        value_view = rest[:value_size]
        try:
            value, _ = Value.from_bytes(value_view)
        except DecodeError:
            return "?"
        lines.append(f"{hex_bytes_as_str(value_view)} [{value.to_string()}]\n")
        return "".join(lines)