"""Byte encodings and string hashing used by the extract and xx-hash commands.

WHY: Binary asset bodies cannot travel through JSON or a terminal as-is,
so ``extract --base64`` encodes them. Importers that mirror a package
into another engine key assets by a 64-bit xxHash of their path, printed
as a signed integer so it round-trips through 64-bit integer columns.

RULES:
- base64 uses the standard alphabet with padding
- xx_hash is xxHash64 with seed 0 over the UTF-8 bytes, as signed int64
"""

from __future__ import annotations

import base64

import xxhash

_UINT64_SPAN = 2 ** 64
_INT64_MAX = 2 ** 63 - 1


def base64_encode(buf: bytes) -> str:
    return base64.b64encode(buf).decode("ascii")


def to_signed_64(value: int) -> int:
    """Reinterpret an unsigned 64-bit integer as two's-complement signed."""
    return value - _UINT64_SPAN if value > _INT64_MAX else value


def xx_hash(text: str) -> int:
    return to_signed_64(xxhash.xxh64_intdigest(text.encode("utf-8"), seed=0))
