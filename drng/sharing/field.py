# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Prime-field arithmetic for the secret-sharing layer.

All operations work over GF(P) for an injectable prime ``P``. Operands are
reduced into ``[0, P)`` before use, and negative intermediate results (from
subtraction) wrap to their positive representative.

The field is a small immutable object rather than module-level state, so a
deployment can pick its own prime without touching process-wide globals:

    F = PrimeField(MERSENNE_521)
    F.div(F.sub(3, 5), 7)

Division by the additive identity is undefined and raises
:class:`~drng.errors.InvalidOperandError`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from ..constants import DEFAULT_FIELD_PRIME
from ..errors import InvalidOperandError, InvalidParameterError

FieldElement = int


@dataclass(frozen=True)
class PrimeField:
    """GF(P) arithmetic. ``P`` must be an odd prime; primality is the caller's promise."""

    p: int = DEFAULT_FIELD_PRIME

    def __post_init__(self) -> None:
        if not isinstance(self.p, int) or self.p < 3 or self.p % 2 == 0:
            raise InvalidParameterError(f"field order must be an odd prime >= 3 (got {self.p!r})")

    # ---- basic ops ----

    def reduce(self, a: int) -> FieldElement:
        """Map any integer to its representative in ``[0, P)``."""
        return a % self.p

    def contains(self, a: int) -> bool:
        return 0 <= a < self.p

    def add(self, a: int, b: int) -> FieldElement:
        return (self.reduce(a) + self.reduce(b)) % self.p

    def sub(self, a: int, b: int) -> FieldElement:
        return (self.reduce(a) - self.reduce(b)) % self.p

    def neg(self, a: int) -> FieldElement:
        return (-self.reduce(a)) % self.p

    def mul(self, a: int, b: int) -> FieldElement:
        return (self.reduce(a) * self.reduce(b)) % self.p

    def pow(self, base: int, exp: int) -> FieldElement:
        """Right-to-left square-and-multiply: scan ``exp`` from its low bit upward."""
        if exp < 0:
            raise InvalidOperandError("negative exponents are not supported; use inv()")
        result = 1 % self.p
        b = self.reduce(base)
        e = exp
        while e > 0:
            if e & 1:
                result = (result * b) % self.p
            b = (b * b) % self.p
            e >>= 1
        return result

    def inv(self, a: int) -> FieldElement:
        """Multiplicative inverse via Fermat's little theorem: ``a^(P-2) mod P``."""
        ar = self.reduce(a)
        if ar == 0:
            raise InvalidOperandError("zero has no multiplicative inverse")
        return self.pow(ar, self.p - 2)

    def div(self, a: int, b: int) -> FieldElement:
        """``a / b`` as ``a * b^-1``."""
        return self.mul(a, self.inv(b))

    # ---- polynomials ----

    def eval_poly(self, coeffs: Sequence[int], x: int) -> FieldElement:
        """
        Evaluate a polynomial at ``x`` with Horner's rule.

        ``coeffs`` is lowest degree first: ``coeffs[0]`` is the constant term.
        """
        acc = 0
        xr = self.reduce(x)
        for c in reversed(coeffs):
            acc = (acc * xr + self.reduce(c)) % self.p
        return acc


__all__ = ["FieldElement", "PrimeField"]
