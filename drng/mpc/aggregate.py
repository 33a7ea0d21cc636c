# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Seed combiner for commit-reveal contributions.

Each node reveals a fixed-width random contribution whose hash it committed to
earlier. After every reveal has been checked against its commitment, the
contributions are XOR-folded into the combined seed.

XOR is commutative and associative, so the result does not depend on the order
in which reveals arrived. If at least one contribution is uniform and unknown
to the others, the fold is uniform too.

Unlike a digest fold, no hash is applied to the result: the ledger verifies
``hash(seed) == commitment`` on the raw combined value.

APIs
----
- xor_fold(contributions, width=32): bytes
- combine_contributions(reveals, width=32): (seed_bytes, seed_int)
"""

from __future__ import annotations

from typing import Iterable, Mapping, Tuple

from ..constants import SEED_BYTES
from ..errors import InvalidParameterError
from ..utils.bytes import BytesLike, as_bytes, xor_bytes


def xor_fold(contributions: Iterable[BytesLike], *, width: int = SEED_BYTES) -> bytes:
    """
    XOR all ``contributions`` together.

    Raises
    ------
    InvalidParameterError if no contributions are supplied or a contribution has
    the wrong width.
    """
    it = iter(contributions)
    try:
        acc = as_bytes(next(it))
    except StopIteration:
        raise InvalidParameterError("xor_fold requires at least one contribution") from None
    if len(acc) != width:
        raise InvalidParameterError(f"contribution must be {width} bytes (got {len(acc)})")

    for c in it:
        cb = as_bytes(c)
        if len(cb) != width:
            raise InvalidParameterError(f"contribution must be {width} bytes (got {len(cb)})")
        acc = xor_bytes(acc, cb)
    return acc


def combine_contributions(
    reveals: Mapping[int, BytesLike],
    *,
    width: int = SEED_BYTES,
) -> Tuple[bytes, int]:
    """
    Fold the revealed contributions of a session.

    Returns the seed as both fixed-width big-endian bytes and an integer.
    """
    # sorted() only makes failures reproducible; the fold itself is order-free
    seed = xor_fold((reveals[k] for k in sorted(reveals)), width=width)
    return seed, int.from_bytes(seed, "big")


__all__ = ["xor_fold", "combine_contributions"]
