# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
drng.entropy
============

The randomness capability the core depends on but does not implement.

Per-node contributions and polynomial coefficients must come from a
cryptographically secure generator. Rather than reaching for a process-wide
default, components take an :class:`EntropySource` explicitly; callers pass
:class:`SystemEntropy` in production and a seeded source in tests.

    src = SystemEntropy()
    contribution = src.random_bytes(32)
    coeff = random_below(src, field.p)
"""

from __future__ import annotations

import secrets
from typing import Protocol


class EntropySource(Protocol):
    """Minimal entropy source protocol."""

    def random_bytes(self, n: int) -> bytes:  # pragma: no cover - protocol
        """Return exactly n bytes of entropy, or raise on failure."""
        ...


class SystemEntropy:
    """Operating-system CSPRNG (:func:`secrets.token_bytes`)."""

    def random_bytes(self, n: int) -> bytes:
        if n < 0:
            raise ValueError("n must be non-negative")
        return secrets.token_bytes(n)

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return "SystemEntropy()"


def random_below(source: EntropySource, bound: int) -> int:
    """
    Uniform integer in ``[0, bound)`` by rejection sampling.

    Draws the minimal number of bytes, masks down to the bit length of
    ``bound - 1`` and retries on overshoot, so the result carries no modulo
    bias.
    """
    if bound <= 0:
        raise ValueError("bound must be positive")
    if bound == 1:
        return 0
    bits = (bound - 1).bit_length()
    nbytes = (bits + 7) // 8
    mask = (1 << bits) - 1
    while True:
        raw = source.random_bytes(nbytes)
        if len(raw) != nbytes:
            raise ValueError(f"entropy source returned {len(raw)} bytes, expected {nbytes}")
        candidate = int.from_bytes(raw, "big") & mask
        if candidate < bound:
            return candidate


__all__ = ["EntropySource", "SystemEntropy", "random_below"]
