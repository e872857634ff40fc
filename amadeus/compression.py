"""Gzip compression of serialized payloads."""

from __future__ import annotations

import gzip


def compress(data: bytes | bytearray | memoryview) -> bytes:
    """Compress ``data`` with gzip, favouring speed."""
    return gzip.compress(bytes(data), compresslevel=1, mtime=0)


def decompress(data: bytes | bytearray | memoryview) -> bytes:
    """Decompress gzip ``data``."""
    return gzip.decompress(bytes(data))