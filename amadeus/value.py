"""A single database value and its binary serialization.

A serialized value is laid out as a one byte marker (``M``, ``I``, ``D``,
``S`` or ``V``), a little-endian unsigned 32-bit payload size and the
payload itself.
"""

from __future__ import annotations

import math
import numbers
import struct
from enum import IntEnum
from typing import Any, Union

from amadeus.utils import DecodeError, hex_bytes_as_str, read_u32

_I64 = struct.Struct("<q")
_F64 = struct.Struct("<d")
_U32 = struct.Struct("<I")
_HEADER_SIZE = 1 + _U32.size
_I64_MIN = -(2**63)
_I64_MAX = 2**63 - 1

BytesLike = Union[bytes, bytearray, memoryview]


class ValueKind(IntEnum):
    """The kind of data a :class:`Value` holds."""

    NULL = 0
    INTEGER = 1
    DOUBLE = 2
    STRING = 3
    VECTOR = 4

    @property
    def marker(self) -> str:
        """The one character marker used when serializing this kind."""
        return _MARKERS[self]


_MARKERS = {
    ValueKind.NULL: "M",
    ValueKind.INTEGER: "I",
    ValueKind.DOUBLE: "D",
    ValueKind.STRING: "S",
    ValueKind.VECTOR: "V",
}
_KIND_BY_MARKER = {ord(marker): kind for kind, marker in _MARKERS.items()}
_PYTHON_TYPES = {
    int: ValueKind.INTEGER,
    float: ValueKind.DOUBLE,
    str: ValueKind.STRING,
    bytes: ValueKind.VECTOR,
    type(None): ValueKind.NULL,
}


def _format_double(number: float) -> str:
    """Shortest round-trip text of a double, without a trailing ``.0``."""
    if math.isnan(number):
        return "nan"
    text = repr(number)
    if text.endswith(".0"):
        text = text[:-2]
    return text


class Value:
    """An immutable value: NULL, 64-bit integer, double, text or blob."""

    __slots__ = ("_data", "_kind")

    def __init__(self, data: Any = None) -> None:
        if data is None:
            kind, stored = ValueKind.NULL, None
        elif isinstance(data, numbers.Integral):
            stored = int(data)
            if not _I64_MIN <= stored <= _I64_MAX:
                raise OverflowError(f"Integer {stored} does not fit in 64 bits.")
            kind = ValueKind.INTEGER
        elif isinstance(data, numbers.Real):
            kind, stored = ValueKind.DOUBLE, float(data)
        elif isinstance(data, str):
            kind, stored = ValueKind.STRING, data
        elif isinstance(data, (bytes, bytearray, memoryview)):
            kind, stored = ValueKind.VECTOR, bytes(data)
        else:
            raise TypeError(f"Unsupported value type: {type(data).__name__}.")
        self._kind = kind
        self._data = stored

    @property
    def kind(self) -> ValueKind:
        """The kind of the contained data."""
        return self._kind

    @property
    def data(self) -> Any:
        """The contained Python object (``None`` for NULL)."""
        return self._data

    def is_null(self) -> bool:
        """Return True when the value holds nothing."""
        return self._kind is ValueKind.NULL

    def value_if(self, kind: ValueKind | type) -> Any:
        """Return the data if it is of ``kind``, otherwise ``None``.

        ``kind`` is a :class:`ValueKind` or one of ``int``, ``float``,
        ``str`` and ``bytes``.
        """
        if not isinstance(kind, ValueKind):
            try:
                kind = _PYTHON_TYPES[kind]
            except (KeyError, TypeError):
                raise TypeError(f"Unsupported kind: {kind!r}.") from None
        return self._data if self._kind is kind else None

    def _payload(self) -> bytes:
        if self._kind is ValueKind.INTEGER:
            return _I64.pack(self._data)
        if self._kind is ValueKind.DOUBLE:
            return _F64.pack(self._data)
        if self._kind is ValueKind.STRING:
            return self._data.encode("utf-8")
        if self._kind is ValueKind.VECTOR:
            return self._data
        return b""

    def to_bytes(self) -> bytes:
        """Serialize the value: marker, u32 payload size, payload."""
        payload = self._payload()
        return self._kind.marker.encode("ascii") + _U32.pack(len(payload)) + payload

    @staticmethod
    def _from_payload(kind: ValueKind, payload: BytesLike) -> Value:
        if kind is ValueKind.NULL:
            return Value()
        if kind is ValueKind.INTEGER:
            if len(payload) < _I64.size:
                raise DecodeError("Integer payload is shorter than 8 bytes.")
            return Value(_I64.unpack_from(payload)[0])
        if kind is ValueKind.DOUBLE:
            if len(payload) < _F64.size:
                raise DecodeError("Double payload is shorter than 8 bytes.")
            return Value(_F64.unpack_from(payload)[0])
        if kind is ValueKind.STRING:
            try:
                return Value(bytes(payload).decode("utf-8"))
            except UnicodeDecodeError as exc:
                raise DecodeError(f"Invalid text payload: {exc}.") from exc
        return Value(bytes(payload))

    @classmethod
    def from_bytes(cls, data: BytesLike) -> tuple[Value, int]:
        """Decode a value from the start of ``data``.

        Returns the value and the number of bytes consumed. Raises
        :class:`DecodeError` when the data is not a complete value.
        """
        view = memoryview(data)
        if not view:
            raise DecodeError("No data to decode a value from.")
        kind = _KIND_BY_MARKER.get(view[0])
        if kind is None:
            raise DecodeError(f"Unknown value marker 0x{view[0]:02x}.")
        size = read_u32(view[1:])
        end = _HEADER_SIZE + size
        if len(view) < end:
            raise DecodeError(
                f"Value needs {size} payload bytes, only {len(view) - _HEADER_SIZE} available."
            )
        value = cls._from_payload(kind, view[_HEADER_SIZE:end])
        return value, end

    @staticmethod
    def serialized_data(data: BytesLike) -> str:
        """Describe serialized value bytes, one component per line."""
        view = memoryview(data)
        if not view or view[0] not in _KIND_BY_MARKER:
            return ""
        marker = view[0]
        kind = _KIND_BY_MARKER[marker]
        lines = [f"0x{marker:02x}  [{chr(marker)}]\n"]
        rest = view[1:]
        if len(rest) < _U32.size:
            return "".join(lines)
        size = read_u32(rest)
        lines.append(f"{hex_bytes_as_str(rest[:_U32.size])}  [{size}]\n")
        rest = rest[_U32.size:]
        if len(rest) < size or kind is ValueKind.NULL:
            return "".join(lines)
        payload = rest[:size]
        try:
            value = Value._from_payload(kind, payload)
        except DecodeError:
            return "".join(lines)
        hex_text = hex_bytes_as_str(payload)
        if kind is ValueKind.VECTOR:
            lines.append(f"{hex_text}  [{hex_text}]\n")
        elif kind is ValueKind.DOUBLE:
            lines.append(f"{hex_text}  [{_format_double(value.data)}]\n")
        else:
            lines.append(f"{hex_text}  [{value.data}]\n")
        return "".join(lines)

    def to_string(self) -> str:
        """Return a readable text form such as ``i64{5}`` or ``NULL``."""
        if self._kind is ValueKind.INTEGER:
            return f"i64{{{self._data}}}"
        if self._kind is ValueKind.DOUBLE:
            return f"f64{{{_format_double(self._data)}}}"
        if self._kind is ValueKind.STRING:
            return f"string{{{self._data}}}"
        if self._kind is ValueKind.VECTOR:
            return f"blob{{{hex_bytes_as_str(self._data)}}}"
        return "NULL"

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Value({self._data!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return self._kind is other._kind and self._data == other._data

    def __hash__(self) -> int:
        return hash((self._kind, self._data))