# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
drng.utils.bytes
================

Hex/bytes utilities plus **fixed-width** integer encodings.

Every value the core hands to a ledger is a fixed-width byte string, so the
helpers here are strict: an integer that does not fit its width is an error,
never silently truncated.

- :func:`to_hex` / :func:`from_hex` with strict validation.
- :func:`int_to_fixed` / :func:`int_from_be` big-endian conversions.
- :func:`byte_width` width in bytes of an integer bound (e.g. a modulus).
- :func:`xor_bytes` position-wise XOR of two equal-length strings.
- :func:`consteq` timing-safe equality (hmac.compare_digest).
"""

from __future__ import annotations

import hmac
import re
from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]

__all__ = [
    "to_hex",
    "from_hex",
    "as_bytes",
    "int_to_fixed",
    "int_from_be",
    "byte_width",
    "xor_bytes",
    "consteq",
]

_HEX_RE = re.compile(r"^(?:0x|0X)?[0-9a-fA-F]*$")


def from_hex(s: str) -> bytes:
    """
    Convert a hex string (with optional ``0x``) to bytes.

    Odd nibble counts are left-padded with a zero nibble, which matches how
    ledgers print integers.
    """
    if not isinstance(s, str):
        raise TypeError("from_hex expects a str")
    s = s.strip()
    if not _HEX_RE.match(s):
        raise ValueError("invalid hex string (characters or whitespace)")
    body = s[2:] if s.startswith(("0x", "0X")) else s
    if len(body) % 2:
        body = "0" + body
    return bytes.fromhex(body)


def to_hex(b: BytesLike, *, prefix: str = "0x") -> str:
    """Encode bytes as lowercase hex, ``0x``-prefixed by default."""
    return (prefix or "") + as_bytes(b).hex()


def as_bytes(x: BytesLike) -> bytes:
    """Normalize bytes-like to immutable :class:`bytes`."""
    if isinstance(x, bytes):
        return x
    if isinstance(x, (bytearray, memoryview)):
        return bytes(x)
    raise TypeError(f"expected bytes-like, got {type(x)!r}")


def int_to_fixed(i: int, width: int) -> bytes:
    """Big-endian encoding of a non-negative integer into exactly ``width`` bytes."""
    if i < 0:
        raise ValueError("only non-negative integers are supported")
    if i.bit_length() > width * 8:
        raise ValueError(f"integer does not fit in {width} bytes")
    return i.to_bytes(width, "big")


def int_from_be(data: BytesLike) -> int:
    return int.from_bytes(as_bytes(data), "big", signed=False)


def byte_width(bound: int) -> int:
    """Bytes needed to hold any value in ``[0, bound)``."""
    if bound <= 1:
        return 1
    return ((bound - 1).bit_length() + 7) // 8


def xor_bytes(a: BytesLike, b: BytesLike) -> bytes:
    aa, bb = as_bytes(a), as_bytes(b)
    if len(aa) != len(bb):
        raise ValueError(f"xor operands differ in length ({len(aa)} != {len(bb)})")
    return bytes(x ^ y for x, y in zip(aa, bb))


def consteq(a: BytesLike, b: BytesLike) -> bool:
    """Timing-safe equality for commitments and digests."""
    return hmac.compare_digest(as_bytes(a), as_bytes(b))
