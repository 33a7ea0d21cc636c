from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, NewType, Tuple

from ..utils.bytes import byte_width, int_to_fixed, to_hex

"""
Core typed primitives for the randomness core.

These are intentionally minimal and free of heavy dependencies so they can be
shared across submodules (secret sharing, coordinator, VDF, binder, CLI and
tests).

Types provided:
  • SessionId      — integer-typed identifier for a randomness session
  • NodeId         — 1-based node index within a session
  • Share          — one Shamir share (x, y)
  • VDFProof       — ordered Pietrzak halving values
  • VDFResult      — output + proof for one VDF input
  • SessionOutput  — everything a ledger persists for a finished session
"""

# ---- Simple newtypes ---------------------------------------------------------

SessionId = NewType("SessionId", int)
NodeId = int

_HASH32 = 32


def _require_len(name: str, b: bytes, n: int) -> None:
    if len(b) != n:
        raise ValueError(f"{name} must be exactly {n} bytes (got {len(b)})")


def _require_nonneg(name: str, v: int) -> None:
    if v < 0:
        raise ValueError(f"{name} must be non-negative (got {v})")


# ---- Secret sharing ----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Share:
    """
    One point on the sharing polynomial.

    Fields:
      x — evaluation index, a positive integer (node index 1..n)
      y — polynomial value at x, a field element
    """

    x: int
    y: int

    def __post_init__(self) -> None:  # type: ignore[override]
        if not isinstance(self.x, int) or not isinstance(self.y, int):
            raise TypeError("share coordinates must be int")
        if self.x <= 0:
            raise ValueError(f"share x must be positive (got {self.x})")
        _require_nonneg("share y", self.y)

    def __repr__(self) -> str:
        # y is secret material; keep it out of logs and tracebacks.
        return f"Share(x={self.x}, y=<redacted>)"


# ---- VDF ---------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class VDFProof:
    """
    Ordered Pietrzak proof: element ``i`` is the halfway value μ of halving
    step ``i``. Verification replays challenges in exactly this order.
    """

    elements: Tuple[int, ...]

    def __post_init__(self) -> None:  # type: ignore[override]
        if not isinstance(self.elements, tuple):
            object.__setattr__(self, "elements", tuple(self.elements))
        for i, mu in enumerate(self.elements):
            if not isinstance(mu, int):
                raise TypeError(f"proof element {i} must be int")
            _require_nonneg(f"proof element {i}", mu)

    def __len__(self) -> int:
        return len(self.elements)

    def __iter__(self) -> Iterator[int]:
        return iter(self.elements)

    def __getitem__(self, i: int) -> int:
        return self.elements[i]

    def replace(self, index: int, value: int) -> "VDFProof":
        """Return a copy with one element swapped (handy for tamper tests)."""
        items = list(self.elements)
        items[index] = value
        return VDFProof(tuple(items))

    def to_hex_list(self, modulus: int) -> list[str]:
        """Fixed-width hex rendering, one entry per element (modulus width)."""
        width = byte_width(modulus)
        return [to_hex(int_to_fixed(mu, width)) for mu in self.elements]


@dataclass(frozen=True, slots=True)
class VDFResult:
    """
    A VDF evaluation result for input ``x``.

    Fields:
      x           — VDF input (already reduced mod N)
      y           — output x^(2^T) mod N
      proof       — Pietrzak proof
      iterations  — time parameter T used
      modulus     — modulus N used
    """

    x: int
    y: int
    proof: VDFProof
    iterations: int
    modulus: int

    def __post_init__(self) -> None:  # type: ignore[override]
        _require_nonneg("x", self.x)
        _require_nonneg("y", self.y)
        if self.iterations < 2:
            raise ValueError("iterations must be >= 2")


# ---- Session output ----------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SessionOutput:
    """
    Values a finished session hands to external collaborators.

    Fields:
      session_id        — session identifier
      commitment        — hash(seed), published before the seed is revealed (32 bytes)
      seed              — reconstructed combined seed (seed_bytes wide, 32 by default)
      vdf_output        — Y as modulus-width big-endian bytes
      proof             — ordered VDF proof
      proof_digest      — hash summary of the proof for compact storage (32 bytes)
      final_randomness  — hash(vdf_output || seed) (32 bytes)
      modulus           — VDF modulus N the proof was produced under
      iterations        — VDF time parameter T
    """

    session_id: SessionId
    commitment: bytes
    seed: bytes
    vdf_output: bytes
    proof: VDFProof
    proof_digest: bytes
    final_randomness: bytes
    modulus: int
    iterations: int
    extra: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:  # type: ignore[override]
        _require_nonneg("session_id", int(self.session_id))
        _require_len("commitment", self.commitment, _HASH32)
        if not self.seed:
            raise ValueError("seed must be non-empty")
        _require_len("proof_digest", self.proof_digest, _HASH32)
        _require_len("final_randomness", self.final_randomness, _HASH32)
        _require_len("vdf_output", self.vdf_output, byte_width(self.modulus))

    def as_ledger_dict(self) -> Dict[str, object]:
        """Plain values (fixed-width 0x-hex) suitable for on-ledger storage."""
        out: Dict[str, object] = {
            "sessionId": int(self.session_id),
            "commitment": to_hex(self.commitment),
            "seed": to_hex(self.seed),
            "vdfOutput": to_hex(self.vdf_output),
            "vdfProof": self.proof.to_hex_list(self.modulus),
            "proofDigest": to_hex(self.proof_digest),
            "finalRandomness": to_hex(self.final_randomness),
            "iterations": self.iterations,
            "modulusBits": self.modulus.bit_length(),
        }
        out.update(self.extra)
        return out


__all__ = [
    "SessionId",
    "NodeId",
    "Share",
    "VDFProof",
    "VDFResult",
    "SessionOutput",
]
