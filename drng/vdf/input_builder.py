"""
drng.vdf.input_builder
======================

Bridge between the seed protocol and the delay function:

  - the VDF *input* is derived from the published session commitment, so the
    delay computation can start before the seed itself is released;
  - the *proof digest* is a compact hash of the proof for ledgers that store
    a fixed-width summary instead of the full list.

Both are deterministic functions of their inputs, no ambient time or IO.

Typical usage
-------------
    x = vdf_input_from_commitment(commitment, params.modulus)
    res = PietrzakVDF(params).run(x)
    digest = proof_digest(res.proof)
"""

from __future__ import annotations

from typing import Iterable

from ..constants import DEFAULT_HASH, DIGEST_BYTES
from ..errors import InvalidParameterError
from ..utils.bytes import BytesLike, as_bytes, int_from_be
from ..utils.hash import get_hasher


def vdf_input_from_commitment(commitment: BytesLike, modulus: int) -> int:
    """``x = int(commitment) mod N`` (big-endian)."""
    c = as_bytes(commitment)
    if len(c) != DIGEST_BYTES:
        raise InvalidParameterError(f"commitment must be {DIGEST_BYTES} bytes (got {len(c)})")
    if modulus <= 3:
        raise InvalidParameterError("modulus must be > 3")
    return int_from_be(c) % modulus


def proof_encoding(proof: Iterable[int]) -> bytes:
    """
    Canonical byte encoding of a proof for hashing: the elements as lowercase
    unpadded hex, comma separated, UTF-8.
    """
    return ",".join(f"{mu:x}" for mu in proof).encode("utf-8")


def proof_digest(proof: Iterable[int], hash_fn: str = DEFAULT_HASH) -> bytes:
    """Hash of :func:`proof_encoding` (keccak256 by default, matching ledger tooling)."""
    return get_hasher(hash_fn)(proof_encoding(proof))


__all__ = [
    "vdf_input_from_commitment",
    "proof_encoding",
    "proof_digest",
]
