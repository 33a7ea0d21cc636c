# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
drng constants.

This module centralizes:
- Field orders available to the secret-sharing layer
- Fixed widths of the values handed to ledgers (contributions, seeds, digests)
- VDF defaults (time parameter, Fiat-Shamir challenge width)
- Default threshold layout for a session

Networks override operational knobs via :class:`drng.config.DrngConfig`; code
that needs stable compile-time defaults imports from here.
"""

from __future__ import annotations

# -----------------------------
# Finite field orders
# -----------------------------
# Mersenne prime 2^521 - 1. Larger than any 32-byte seed, so every combined
# seed is a field element and reconstruction is exact.
MERSENNE_521: int = (1 << 521) - 1

# secp256k1 group order. Smaller than 2^256: seeds at or above it cannot be
# shared in this field.
SECP256K1_ORDER: int = int(
    "FFFFFFFFFFFFFFFFFFFFFFFFFFFFFFFEBAAEDCE6AF48A03BBFD25E8CD0364141", 16
)

DEFAULT_FIELD_PRIME: int = MERSENNE_521

# -----------------------------
# Fixed widths (bytes)
# -----------------------------
SEED_BYTES: int = 32          # per-node contribution and combined seed
DIGEST_BYTES: int = 32        # commitments, final randomness

# -----------------------------
# Hash functions
# -----------------------------
HASH_KECCAK256: str = "keccak256"   # EVM ledgers recompute with keccak256
HASH_SHA3_256: str = "sha3_256"
SUPPORTED_HASHES: tuple[str, ...] = (HASH_KECCAK256, HASH_SHA3_256)
DEFAULT_HASH: str = HASH_KECCAK256

# -----------------------------
# Session layout
# -----------------------------
DEFAULT_NODES: int = 5
DEFAULT_THRESHOLD: int = 3
DEFAULT_PHASE_TIMEOUT_S: float = 30.0

# -----------------------------
# VDF defaults
# -----------------------------
DEFAULT_VDF_ITERATIONS: int = 1 << 13   # 8192 squarings
CHALLENGE_BITS: int = 128               # Fiat-Shamir challenge truncation
VDF_RECOMMENDED_MODULUS_BITS: int = 2048

__all__ = [
    "MERSENNE_521",
    "SECP256K1_ORDER",
    "DEFAULT_FIELD_PRIME",
    "SEED_BYTES",
    "DIGEST_BYTES",
    "HASH_KECCAK256",
    "HASH_SHA3_256",
    "SUPPORTED_HASHES",
    "DEFAULT_HASH",
    "DEFAULT_NODES",
    "DEFAULT_THRESHOLD",
    "DEFAULT_PHASE_TIMEOUT_S",
    "DEFAULT_VDF_ITERATIONS",
    "CHALLENGE_BITS",
    "VDF_RECOMMENDED_MODULUS_BITS",
]
