"""An SQL command with its arguments and its binary serialization.

A plain serialized query is laid out as the marker ``Q``, a little-endian
unsigned 32-bit chunk size, a little-endian unsigned 16-bit command size, a
little-endian unsigned 16-bit argument count, the UTF-8 command and the
serialized arguments. The chunk size counts everything after itself.

A compressed query starts with the marker ``Q`` with its high bit set,
followed by a little-endian unsigned 32-bit size of the compressed data and
the gzip-compressed command size, argument count, command and arguments.
"""

from __future__ import annotations

import struct
import zlib
from typing import Any, Union

from amadeus.compression import compress, decompress
from amadeus.utils import DecodeError, read_u16, read_u32
from amadeus.value import Value

BytesLike = Union[bytes, bytearray, memoryview]

_MARKER = ord("Q")
_PACKED_FLAG = 0b1000_0000
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_COUNTS = struct.Struct("<HH")
_HEADER_SIZE = 1 + _U32.size


def _as_value(item: Any) -> Value:
    return item if isinstance(item, Value) else Value(item)


class Query:
    """An SQL command and the values bound to its ``?`` placeholders."""

    __slots__ = ("_cmd", "_values")

    def __init__(self, cmd: str = "", *args: Any) -> None:
        self._cmd = cmd
        self._values: list[Value] = [_as_value(item) for item in args]

    @property
    def cmd(self) -> str:
        """The SQL command text."""
        return self._cmd

    @property
    def values(self) -> tuple[Value, ...]:
        """The arguments in placeholder order."""
        return tuple(self._values)

    def add_arg(self, value: Any) -> Query:
        """Append an argument (a Value or raw data) and return the query."""
        self._values.append(_as_value(value))
        return self

    def valid(self) -> bool:
        """Return True when the placeholder count equals the argument count."""
        return self._cmd.count("?") == len(self._values)

    def to_string(self) -> str:
        """Return the command followed by one tab-indented line per argument."""
        return "".join([self._cmd, *(f"\n\t{value.to_string()}" for value in self._values)])

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"Query({self._cmd!r}, {self._values!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Query):
            return NotImplemented
        return self._cmd == other._cmd and self._values == other._values

    def _body(self) -> bytes:
        cmd_bytes = self._cmd.encode("utf-8")
        if len(cmd_bytes) > 0xFFFF:
            raise OverflowError("A command can be at most 65535 bytes long.")
        if len(self._values) > 0xFFFF:
            raise OverflowError("A query can hold at most 65535 arguments.")
        arguments = b"".join(value.to_bytes() for value in self._values)
        return _COUNTS.pack(len(cmd_bytes), len(self._values)) + cmd_bytes + arguments

    def to_bytes(self) -> bytes:
        """Serialize the query: marker, chunk size, sizes, command, arguments."""
        body = self._body()
        return b"".join((b"Q", _U32.pack(len(body)), body))

    def to_gzip_bytes(self) -> bytes:
        """Serialize the query with everything after the header gzip-compressed."""
        packed = compress(self._body())
        return b"".join(
            (bytes([_MARKER | _PACKED_FLAG]), _U32.pack(len(packed)), packed)
        )

    @classmethod
    def _decode_body(cls, body: BytesLike) -> Query:
        view = memoryview(body)
        cmd_size = read_u16(view)
        count = read_u16(view[_U16.size:])
        rest = view[_COUNTS.size:]
        if len(rest) < cmd_size:
            raise DecodeError("Query command runs past the end of the data.")
        try:
            cmd = bytes(rest[:cmd_size]).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError(f"Invalid query command: {exc}.") from exc
        rest = rest[cmd_size:]
        query = cls(cmd)
        for _ in range(count):
            value, nbytes = Value.from_bytes(rest)
            query.add_arg(value)
            rest = rest[nbytes:]
        return query

    @classmethod
    def from_bytes(cls, data: BytesLike) -> tuple[Query, int]:
        """Decode a query, plain or compressed, from the start of ``data``.

        Returns the query and the number of bytes consumed. Raises
        :class:`DecodeError` when the data is not a complete query.
        """
        view = memoryview(data)
        if not view:
            raise DecodeError("No data to decode a query from.")
        if view[0] & _PACKED_FLAG:
            return cls.from_gzip_bytes(view)
        if view[0] != _MARKER:
            raise DecodeError("Data does not start with a query marker.")
        chunk_size = read_u32(view[1:])
        end = _HEADER_SIZE + chunk_size
        if len(view) < end:
            raise DecodeError(
                f"Query needs {chunk_size} bytes, only {len(view) - _HEADER_SIZE} available."
            )
        return cls._decode_body(view[_HEADER_SIZE:end]), end

    @classmethod
    def from_gzip_bytes(cls, data: BytesLike) -> tuple[Query, int]:
        """Decode a compressed query from the start of ``data``.

        Returns the query and the number of bytes consumed. Raises
        :class:`DecodeError` when the data is not a complete compressed query.
        """
        view = memoryview(data)
        if not view:
            raise DecodeError("No data to decode a query from.")
        marker = view[0]
        if not marker & _PACKED_FLAG or marker & ~_PACKED_FLAG != _MARKER:
            raise DecodeError("Data does not start with a compressed query marker.")
        size = read_u32(view[1:])
        end = _HEADER_SIZE + size
        if len(view) < end:
            raise DecodeError(
                f"Query needs {size} compressed bytes, only {len(view) - _HEADER_SIZE} available."
            )
        try:
            body = decompress(view[_HEADER_SIZE:end])
        except (OSError, EOFError, zlib.error) as exc:
            raise DecodeError(f"Cannot decompress query: {exc}.") from exc
        return cls._decode_body(body), end