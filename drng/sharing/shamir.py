# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Shamir secret sharing over a prime field.

A secret ``s`` becomes the constant term of a random polynomial of degree
``t - 1``; share ``i`` is the polynomial evaluated at ``x = i``. Any ``t``
shares determine the polynomial (and so ``s``) by Lagrange interpolation at
``x = 0``; fewer than ``t`` reveal nothing about ``s``.

APIs
----
- split(secret, n, t, *, rng, field)            -> list[Share]
- reconstruct(shares, threshold, *, field)      -> int
- lagrange_coefficient_at_zero(xs, i, *, field) -> int
- evaluate_polynomial(coeffs, x, *, field)      -> int

Coefficients are drawn from the injected :class:`~drng.entropy.EntropySource`
on every call; nothing is cached across sessions.
"""

from __future__ import annotations

from typing import Sequence

from ..entropy import EntropySource, random_below
from ..errors import (
    DuplicateShareError,
    InsufficientParticipationError,
    InvalidOperandError,
)
from ..types.core import Share
from ..types.state import validate_threshold
from .field import PrimeField

_DEFAULT_FIELD = PrimeField()


def evaluate_polynomial(coeffs: Sequence[int], x: int, *, field: PrimeField = _DEFAULT_FIELD) -> int:
    """Evaluate ``coeffs`` (constant term first) at ``x`` in ``field``."""
    return field.eval_poly(coeffs, x)


def split(
    secret: int,
    n: int,
    t: int,
    *,
    rng: EntropySource,
    field: PrimeField = _DEFAULT_FIELD,
) -> list[Share]:
    """
    Split ``secret`` into ``n`` shares, any ``t`` of which reconstruct it.

    Raises:
        InvalidParameterError: if ``t < 1`` or ``t > n``.
        InvalidOperandError: if ``secret`` is not in ``[0, P)``; reducing it
            silently would make reconstruction return a different value.
    """
    validate_threshold(n, t)
    if not isinstance(secret, int) or not field.contains(secret):
        raise InvalidOperandError("secret must be a field element in [0, P)")

    coeffs = [secret] + [random_below(rng, field.p) for _ in range(t - 1)]
    return [Share(x=i, y=field.eval_poly(coeffs, i)) for i in range(1, n + 1)]


def lagrange_coefficient_at_zero(xs: Sequence[int], i: int, *, field: PrimeField = _DEFAULT_FIELD) -> int:
    """
    Basis coefficient for point ``xs[i]`` evaluated at zero:

        ∏_{j≠i} (0 − x_j) / (x_i − x_j)
    """
    num = 1
    den = 1
    xi = xs[i]
    for j, xj in enumerate(xs):
        if j == i:
            continue
        num = field.mul(num, field.sub(0, xj))
        den = field.mul(den, field.sub(xi, xj))
    return field.div(num, den)


def reconstruct(
    shares: Sequence[Share],
    threshold: int,
    *,
    field: PrimeField = _DEFAULT_FIELD,
) -> int:
    """
    Recover the secret from at least ``threshold`` shares.

    Exactly the first ``threshold`` shares are interpolated; extra shares are
    checked for duplicate x values but otherwise ignored.

    Raises:
        InsufficientParticipationError: fewer than ``threshold`` shares.
        DuplicateShareError: two shares share an x value.
    """
    if threshold < 1:
        raise InsufficientParticipationError(have=len(shares), need=1)
    if len(shares) < threshold:
        raise InsufficientParticipationError(have=len(shares), need=threshold)

    # x values are compared as field elements: x and x + P are the same point.
    seen: set[int] = set()
    for s in shares:
        key = field.reduce(s.x)
        if key == 0:
            raise InvalidOperandError(f"share x={s.x} is zero in the field")
        if key in seen:
            raise DuplicateShareError(x=s.x)
        seen.add(key)

    use = shares[:threshold]
    xs = [s.x for s in use]
    secret = 0
    for i, s in enumerate(use):
        coeff = lagrange_coefficient_at_zero(xs, i, field=field)
        secret = field.add(secret, field.mul(s.y, coeff))
    return secret


__all__ = [
    "split",
    "reconstruct",
    "lagrange_coefficient_at_zero",
    "evaluate_polynomial",
]
