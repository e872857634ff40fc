"""A query result: an ordered list of rows and its binary serialization.

A plain serialized result is laid out as the marker ``T``, a little-endian
unsigned 32-bit chunk size, a little-endian unsigned 16-bit row count and
the serialized rows. The chunk size counts everything after itself.

A compressed result starts with the marker ``T`` with its high bit set,
followed by a little-endian unsigned 32-bit size of the compressed data and
the gzip-compressed row count and rows.
"""

from __future__ import annotations

import struct
import zlib
from collections.abc import Iterable, Iterator
from typing import Union, overload

from amadeus.compression import compress, decompress
from amadeus.row import Row
from amadeus.utils import DecodeError, join, read_u16, read_u32

BytesLike = Union[bytes, bytearray, memoryview]

_MARKER = ord("T")
_PACKED_FLAG = 0b1000_0000
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")
_HEADER_SIZE = 1 + _U32.size


class Result:
    """The rows returned by a query, in the order they were added."""

    __slots__ = ("_rows",)

    def __init__(self, rows: Iterable[Row] = ()) -> None:
        self._rows: list[Row] = list(rows)

    def add(self, row: Row) -> Result:
        """Append ``row`` and return the result itself."""
        self._rows.append(row)
        return self

    def __len__(self) -> int:
        return len(self._rows)

    def __bool__(self) -> bool:
        return bool(self._rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    @overload
    def __getitem__(self, index: int) -> Row: ...

    @overload
    def __getitem__(self, index: slice) -> list[Row]: ...

    def __getitem__(self, index: int | slice) -> Row | list[Row]:
        return self._rows[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Result):
            return NotImplemented
        return self._rows == other._rows

    def __repr__(self) -> str:
        return f"Result({self._rows!r})"

    def to_string(self) -> str:
        """Return the text form of every row, one row per line."""
        return join([row.to_string() for row in self._rows], "\n")

    def __str__(self) -> str:
        return self.to_string()

    def _body(self) -> bytes:
        if len(self._rows) > 0xFFFF:
            raise OverflowError("A result can hold at most 65535 rows.")
        rows = b"".join(row.to_bytes() for row in self._rows)
        return _U16.pack(len(self._rows)) + rows

    def to_bytes(self) -> bytes:
        """Serialize the result: marker, chunk size, row count, rows."""
        body = self._body()
        return b"".join((b"T", _U32.pack(len(body)), body))

    def to_gzip_bytes(self) -> bytes:
        """Serialize the result with its row count and rows gzip-compressed."""
        packed = compress(self._body())
        return b"".join(
            (bytes([_MARKER | _PACKED_FLAG]), _U32.pack(len(packed)), packed)
        )

    @classmethod
    def _decode_rows(cls, body: BytesLike) -> Result:
        count = read_u16(body)
        rest = memoryview(body)[_U16.size:]
        result = cls()
        for _ in range(count):
            row, nbytes = Row.from_bytes(rest)
            result.add(row)
            rest = rest[nbytes:]
        return result

    @classmethod
    def from_bytes(cls, data: BytesLike) -> tuple[Result, int]:
        """Decode a result, plain or compressed, from the start of ``data``.

        Returns the result and the number of bytes consumed. Raises
        :class:`DecodeError` when the data is not a complete result.
        """
        view = memoryview(data)
        if not view:
            raise DecodeError("No data to decode a result from.")
        if view[0] & _PACKED_FLAG:
            return cls.from_gzip_bytes(view)
        if view[0] != _MARKER:
            raise DecodeError("Data does not start with a result marker.")
        chunk_size = read_u32(view[1:])
        end = _HEADER_SIZE + chunk_size
        if len(view) < end:
            raise DecodeError(
                f"Result needs {chunk_size} bytes, only {len(view) - _HEADER_SIZE} available."
            )
        return cls._decode_rows(view[_HEADER_SIZE:end]), end

    @classmethod
    def from_gzip_bytes(cls, data: BytesLike) -> tuple[Result, int]:
        """Decode a compressed result from the start of ``data``.

        Returns the result and the number of bytes consumed. Raises
        :class:`DecodeError` when the data is not a complete compressed result.
        """
        view = memoryview(data)
        if not view:
            raise DecodeError("No data to decode a result from.")
        marker = view[0]
        if not marker & _PACKED_FLAG or marker & ~_PACKED_FLAG != _MARKER:
            raise DecodeError("Data does not start with a compressed result marker.")
        size = read_u32(view[1:])
        end = _HEADER_SIZE + size
        if len(view) < end:
            raise DecodeError(
                f"Result needs {size} compressed bytes, only {len(view) - _HEADER_SIZE} available."
            )
        try:
            body = decompress(view[_HEADER_SIZE:end])
        except (OSError, EOFError, zlib.error) as exc:
            raise DecodeError(f"Cannot decompress result: {exc}.") from exc
        return cls._decode_rows(body), end