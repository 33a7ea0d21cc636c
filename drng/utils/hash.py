# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
drng.utils.hash
===============

Hash helpers used for commitments and the final randomness value.

Two 256-bit functions are supported:

- ``keccak256``  Keccak-256 as used by EVM ledgers (pycryptodome's
                 :mod:`Crypto.Hash.keccak`). Default, because ledgers recompute
                 ``hash(seed)`` and ``hash(Y || seed)`` on-chain.
- ``sha3_256``   FIPS-202 SHA3-256 from :mod:`hashlib`.

Commitments are plain hashes of fixed-width values (no domain prefix): the
ledger side stores ``keccak256(seed)`` and must be able to recompute it.

Key pieces
----------
- :func:`keccak256`, :func:`sha3_256`: raw one-shot wrappers.
- :func:`get_hasher`: resolve a configured hash name to a callable.
- :func:`hash_concat`: hash the concatenation of several byte strings.
"""

from __future__ import annotations

from hashlib import sha3_256 as _sha3_256
from typing import Callable, Iterable

from Crypto.Hash import keccak as _keccak

from ..constants import HASH_KECCAK256, HASH_SHA3_256
from ..errors import InvalidParameterError

HashFn = Callable[[bytes], bytes]

__all__ = [
    "HashFn",
    "keccak256",
    "sha3_256",
    "get_hasher",
    "hash_concat",
]


def keccak256(data: bytes) -> bytes:
    """Return Keccak-256(data)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("keccak256 expects a bytes-like object")
    h = _keccak.new(digest_bits=256)
    h.update(bytes(data))
    return h.digest()


def sha3_256(data: bytes) -> bytes:
    """Return SHA3-256(data)."""
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError("sha3_256 expects a bytes-like object")
    return _sha3_256(bytes(data)).digest()


_HASHERS: dict[str, HashFn] = {
    HASH_KECCAK256: keccak256,
    HASH_SHA3_256: sha3_256,
}


def get_hasher(name: str) -> HashFn:
    """Resolve a hash name (``keccak256`` / ``sha3_256``) to its function."""
    try:
        return _HASHERS[name]
    except KeyError:
        raise InvalidParameterError(
            f"unsupported hash function {name!r}; expected one of {sorted(_HASHERS)}"
        ) from None


def hash_concat(parts: Iterable[bytes], name: str = HASH_KECCAK256) -> bytes:
    """Hash the concatenation of ``parts`` with the selected function."""
    buf = bytearray()
    for p in parts:
        if not isinstance(p, (bytes, bytearray, memoryview)):
            raise TypeError("all parts must be bytes-like")
        buf += bytes(p)
    return get_hasher(name)(bytes(buf))
