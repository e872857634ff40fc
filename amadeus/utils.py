"""Small helpers shared by the serialization and database modules."""

from __future__ import annotations

import struct
from collections.abc import Iterable, Sequence

_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1
_DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"

_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


class DecodeError(ValueError):
    """Raised when a byte buffer is too short or malformed to decode."""


def join(data: Sequence[str], delimiter: str = ",", spacer: str | None = None) -> str:
    """Join strings with ``delimiter``, optionally followed by ``spacer``."""
    separator = delimiter + (spacer or "")
    return separator.join(data)


def hex_bytes_as_str(data: Iterable[int]) -> str:
    """Render bytes as comma separated ``0x..`` values."""
    return join([f"0x{byte & 0xFF:02x}" for byte in data], ",")


def to_int(text: str, base: int = 10) -> int:
    """Parse the leading integer of ``text`` in ``base``.

    Trailing characters after the number are ignored. Raises ``ValueError``
    when no number starts the text and ``OverflowError`` when it does not fit
    in a signed 32-bit integer.
    """
    if not 2 <= base <= 36:
        raise ValueError(f"Invalid base ({base}).")
    allowed = _DIGITS[:base]
    sign = 1
    rest = text
    if rest.startswith("-"):
        sign = -1
        rest = rest[1:]
    digits = []
    for char in rest:
        if char.lower() not in allowed:
            break
        digits.append(char)
    if not digits:
        raise ValueError(f"This is not a number ({text}).")
    value = sign * int("".join(digits), base)
    if not _INT32_MIN <= value <= _INT32_MAX:
        raise OverflowError(f"The number is too big ({text}).")
    return value


def _read(layout: struct.Struct, data: bytes | bytearray | memoryview) -> int:
    if len(data) < layout.size:
        raise DecodeError(
            f"Need {layout.size} bytes, only {len(data)} available."
        )
    (value,) = layout.unpack_from(data)
    return value


def read_u16(data: bytes | bytearray | memoryview) -> int:
    """Read a little-endian unsigned 16-bit integer from the start of ``data``."""
    return _read(_U16, data)


def read_u32(data: bytes | bytearray | memoryview) -> int:
    """Read a little-endian unsigned 32-bit integer from the start of ``data``."""
    return _read(_U32, data)