"""
drng.sharing
============

Finite-field arithmetic and Shamir secret sharing.

    from drng.sharing import PrimeField, split, reconstruct
    shares = split(secret, 5, 3, rng=SystemEntropy())
    assert reconstruct(shares[1:4], 3) == secret
"""

from __future__ import annotations

from .field import FieldElement, PrimeField
from .shamir import (
    evaluate_polynomial,
    lagrange_coefficient_at_zero,
    reconstruct,
    split,
)

__all__ = [
    "FieldElement",
    "PrimeField",
    "split",
    "reconstruct",
    "lagrange_coefficient_at_zero",
    "evaluate_polynomial",
]
