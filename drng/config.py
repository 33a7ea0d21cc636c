"""
Randomness core configuration.

This file defines typed configuration objects and helpers for:
- Session layout (node count, threshold, contribution width)
- Hash selection for commitments and the final randomness
- Field order used by secret sharing
- VDF parameters (Pietrzak; demo / rsa2048 / custom modulus)
- Barrier timeout for commit and reveal phases

It provides:
- Dataclass-based configs with validation
- Loading from environment variables (prefix configurable)
- Loading from a JSON or YAML file
"""

from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional

import yaml

from .constants import (
    CHALLENGE_BITS,
    DEFAULT_FIELD_PRIME,
    DEFAULT_HASH,
    DEFAULT_NODES,
    DEFAULT_PHASE_TIMEOUT_S,
    DEFAULT_THRESHOLD,
    DEFAULT_VDF_ITERATIONS,
    SEED_BYTES,
    SUPPORTED_HASHES,
)
from .errors import InvalidParameterError
from .types.state import validate_threshold

VDF_PROFILES = ("demo", "rsa2048", "custom")

# -------------------------
# Sub-configs
# -------------------------


@dataclass
class VDFConfig:
    """
    Parameters for the delay step of each session.

    profile: "demo" (insecure, published factorization), "rsa2048" (RSA
             Factoring Challenge number) or "custom" (modulus_hex required)
    iterations: time parameter T, a power of two >= 2. Nodes should target a
                wall-clock delay from local benchmarks.
    modulus_hex: RSA modulus for the "custom" profile
    challenge_bits: Fiat-Shamir challenge width
    """

    profile: str = "demo"
    iterations: int = DEFAULT_VDF_ITERATIONS
    modulus_hex: Optional[str] = None
    challenge_bits: int = CHALLENGE_BITS

    def validate(self) -> None:
        if self.profile not in VDF_PROFILES:
            raise InvalidParameterError(
                f"Unsupported VDF profile: {self.profile} (expected one of {VDF_PROFILES})"
            )
        if self.profile == "custom" and not self.modulus_hex:
            raise InvalidParameterError("modulus_hex is required for the custom VDF profile")
        if self.modulus_hex is not None:
            try:
                n = int(self.modulus_hex, 16)
            except ValueError as e:
                raise InvalidParameterError(f"modulus_hex is not hex: {self.modulus_hex!r}") from e
            if n <= 3 or n % 2 == 0:
                raise InvalidParameterError("modulus must be odd and > 3")
        if self.iterations < 2 or self.iterations & (self.iterations - 1):
            raise InvalidParameterError("iterations must be a power of two >= 2")
        if not (8 <= self.challenge_bits <= 256):
            raise InvalidParameterError("challenge_bits must be between 8 and 256")


# -------------------------
# Top-level config
# -------------------------


@dataclass
class DrngConfig:
    """
    Session layout:
      - nodes: participants per session (n)
      - threshold: shares needed to reconstruct the seed (t, 1 <= t <= n)
      - seed_bytes: width of each contribution and of the combined seed

    Hashing / field:
      - hash_fn: keccak256 (ledger compatible, default) or sha3_256
      - field_prime_hex: prime field order for Shamir sharing (hex)

    Timing:
      - phase_timeout_s: barrier deadline for the commit and reveal phases

    Safety:
      - require_production_modulus: refuse VDF moduli with a known factorization

    VDF: nested sub-config
    """

    nodes: int = DEFAULT_NODES
    threshold: int = DEFAULT_THRESHOLD
    seed_bytes: int = SEED_BYTES
    hash_fn: str = DEFAULT_HASH
    field_prime_hex: str = hex(DEFAULT_FIELD_PRIME)
    phase_timeout_s: float = DEFAULT_PHASE_TIMEOUT_S
    require_production_modulus: bool = False

    vdf: VDFConfig = field(default_factory=VDFConfig)

    @property
    def field_prime(self) -> int:
        return int(self.field_prime_hex, 16)

    def validate(self) -> None:
        validate_threshold(self.nodes, self.threshold)
        if self.seed_bytes <= 0:
            raise InvalidParameterError("seed_bytes must be > 0")
        if self.hash_fn not in SUPPORTED_HASHES:
            raise InvalidParameterError(f"Unsupported hash: {self.hash_fn}")
        try:
            p = self.field_prime
        except ValueError as e:
            raise InvalidParameterError(f"field_prime_hex is not hex: {self.field_prime_hex!r}") from e
        if p.bit_length() <= self.seed_bytes * 8:
            raise InvalidParameterError(
                f"field prime ({p.bit_length()} bits) must exceed the seed width "
                f"({self.seed_bytes * 8} bits)"
            )
        if self.phase_timeout_s <= 0:
            raise InvalidParameterError("phase_timeout_s must be > 0")
        if self.require_production_modulus and self.vdf.profile == "demo":
            raise InvalidParameterError(
                "demo VDF modulus has a published factorization; "
                "choose rsa2048 or a custom modulus"
            )

        # Sub-configs
        self.vdf.validate()

    # -------------------------
    # Serialization helpers
    # -------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, sort_keys=True)

    # -------------------------
    # Loaders
    # -------------------------

    @staticmethod
    def from_env(prefix: str = "DRNG_") -> "DrngConfig":
        """
        Load configuration from environment variables. All variables are optional.

        Supported keys (examples):
          - DRNG_NODES=5
          - DRNG_THRESHOLD=3
          - DRNG_SEED_BYTES=32
          - DRNG_HASH=keccak256
          - DRNG_FIELD_PRIME_HEX=0x1fff...
          - DRNG_PHASE_TIMEOUT_S=30
          - DRNG_REQUIRE_PRODUCTION_MODULUS=true

          - DRNG_VDF_PROFILE=rsa2048
          - DRNG_VDF_ITERATIONS=8192
          - DRNG_VDF_MODULUS_HEX=c7970ceedcc3b0754490201a7aa613cd...
          - DRNG_VDF_CHALLENGE_BITS=128
        """

        def _get(name: str, cast: Any, default: Any) -> Any:
            key = prefix + name
            raw = os.getenv(key)
            if raw is None:
                return default
            try:
                if cast is bool:
                    return raw.lower() in {"1", "true", "yes", "on"}
                return cast(raw)
            except ValueError as e:
                raise InvalidParameterError(f"Invalid value for {key}: {raw!r}") from e

        cfg = DrngConfig(
            nodes=_get("NODES", int, DEFAULT_NODES),
            threshold=_get("THRESHOLD", int, DEFAULT_THRESHOLD),
            seed_bytes=_get("SEED_BYTES", int, SEED_BYTES),
            hash_fn=_get("HASH", str, DEFAULT_HASH),
            field_prime_hex=_get("FIELD_PRIME_HEX", str, hex(DEFAULT_FIELD_PRIME)),
            phase_timeout_s=_get("PHASE_TIMEOUT_S", float, DEFAULT_PHASE_TIMEOUT_S),
            require_production_modulus=_get("REQUIRE_PRODUCTION_MODULUS", bool, False),
            vdf=VDFConfig(
                profile=_get("VDF_PROFILE", str, "demo"),
                iterations=_get("VDF_ITERATIONS", int, DEFAULT_VDF_ITERATIONS),
                modulus_hex=_get("VDF_MODULUS_HEX", str, None),
                challenge_bits=_get("VDF_CHALLENGE_BITS", int, CHALLENGE_BITS),
            ),
        )
        cfg.validate()
        return cfg

    @staticmethod
    def from_file(path: str) -> "DrngConfig":
        """
        Load configuration from a JSON or YAML file. Keys mirror the dataclass
        structure. Example (YAML):

            nodes: 7
            threshold: 4
            hash_fn: keccak256
            phase_timeout_s: 10
            vdf:
              profile: rsa2048
              iterations: 1048576
        """
        text = _read_text(path)
        data = _parse_json_or_yaml(text, path)
        return DrngConfig.from_dict(data)

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "DrngConfig":
        data = dict(data or {})
        vdf_d = dict(data.pop("vdf", None) or {})

        known = {"nodes", "threshold", "seed_bytes", "hash_fn", "field_prime_hex",
                 "phase_timeout_s", "require_production_modulus"}
        unknown = set(data) - known
        unknown_vdf = set(vdf_d) - {"profile", "iterations", "modulus_hex", "challenge_bits"}
        if unknown or unknown_vdf:
            raise InvalidParameterError(
                f"Unknown config keys: {sorted(unknown | {f'vdf.{k}' for k in unknown_vdf})}"
            )

        cfg = DrngConfig(
            nodes=data.get("nodes", DEFAULT_NODES),
            threshold=data.get("threshold", DEFAULT_THRESHOLD),
            seed_bytes=data.get("seed_bytes", SEED_BYTES),
            hash_fn=data.get("hash_fn", DEFAULT_HASH),
            field_prime_hex=data.get("field_prime_hex", hex(DEFAULT_FIELD_PRIME)),
            phase_timeout_s=data.get("phase_timeout_s", DEFAULT_PHASE_TIMEOUT_S),
            require_production_modulus=data.get("require_production_modulus", False),
            vdf=VDFConfig(
                profile=vdf_d.get("profile", "demo"),
                iterations=vdf_d.get("iterations", DEFAULT_VDF_ITERATIONS),
                modulus_hex=vdf_d.get("modulus_hex"),
                challenge_bits=vdf_d.get("challenge_bits", CHALLENGE_BITS),
            ),
        )
        cfg.validate()
        return cfg


# -------------------------
# Utilities
# -------------------------


def _read_text(path: str) -> str:
    with open(path, "r", encoding="utf-8") as f:
        return f.read()


def _parse_json_or_yaml(text: str, path_hint: str) -> Dict[str, Any]:
    # First try JSON
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise InvalidParameterError(
                f"Failed to parse {path_hint!r} as JSON or YAML: {e}"
            ) from e
    if not isinstance(data, dict):
        raise InvalidParameterError(f"{path_hint!r} must contain a mapping at the top level")
    return data


# A handy default instance for quick use in REPL/tests.
DEFAULT: DrngConfig = DrngConfig()


__all__ = [
    "VDFConfig",
    "DrngConfig",
    "VDF_PROFILES",
    "DEFAULT",
]
