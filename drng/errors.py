# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
drng errors.

A small, typed hierarchy of exceptions raised by the randomness core
(field arithmetic → secret sharing → commit/reveal session → VDF → binding).
Callers can catch the base :class:`DrngError` to handle every protocol error,
or catch the category classes for more granular control:

- :class:`ProtocolIntegrityError`   fatal; the session must be restarted with
                                    fresh commitments
- :class:`InsufficientParticipationError`
                                    fatal for one reconstruction attempt only
- :class:`InvalidProofError`        raised by the session binder; the VDF
                                    verifier itself returns ``False``
- :class:`InvalidParameterError`    bad construction-time parameters
- :class:`InvalidOperandError`      undefined field operation (e.g. 1/0)
- :class:`PhaseViolationError`      operation attempted in the wrong phase
- :class:`NodeUnavailableError`     a node did not answer within its phase

The errors are lightweight and serialization-friendly: they carry hex
commitments and indices, never secret material. They are plain (non-frozen,
identity-compared) dataclasses, since ``__traceback__`` and ``__context__``
are assigned on them while they propagate.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class DrngError(Exception):
    """Base class for all drng errors."""
    pass


# ---------------------------------------------------------------------------
# Parameters & arithmetic
# ---------------------------------------------------------------------------


class InvalidParameterError(DrngError, ValueError):
    """
    Raised for malformed construction-time parameters: non-power-of-two T,
    malformed modulus, threshold > node count, threshold < 1, and so on.
    """
    pass


class InvalidOperandError(DrngError, ArithmeticError):
    """Raised when a field operation is undefined (division by zero)."""
    pass


# ---------------------------------------------------------------------------
# Protocol integrity (fatal for the session)
# ---------------------------------------------------------------------------


class ProtocolIntegrityError(DrngError):
    """A participant or input broke the commit-reveal guarantees."""
    pass


@dataclass(eq=False)
class CommitmentMismatchError(ProtocolIntegrityError):
    """
    Raised when a node's revealed contribution does not hash to its earlier
    commitment.

    Attributes:
        session_id: Session in which the mismatch was observed.
        node_id: Index of the lying node.
        expected_commitment_hex: Commitment recorded during the commit phase.
        got_commitment_hex: Hash of the value that was revealed.
    """
    session_id: int
    node_id: int
    expected_commitment_hex: str
    got_commitment_hex: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return (
            f"CommitmentMismatch: session={self.session_id} node={self.node_id} "
            f"expected={self.expected_commitment_hex} got={self.got_commitment_hex}"
        )


@dataclass(eq=False)
class CommitmentReusedError(ProtocolIntegrityError):
    """
    Raised when a commitment value is recorded twice within one session,
    either by the same node or by two different nodes.
    """
    session_id: int
    node_id: int
    commitment_hex: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return (
            f"CommitmentReused: session={self.session_id} node={self.node_id} "
            f"commitment={self.commitment_hex}"
        )


@dataclass(eq=False)
class ContributionReusedError(ProtocolIntegrityError):
    """Raised when a node is asked to generate its contribution a second time."""
    node_id: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"ContributionReused: node={self.node_id} already generated its contribution"


@dataclass(eq=False)
class DuplicateShareError(ProtocolIntegrityError):
    """Raised when two shares supplied to reconstruction carry the same x value."""
    x: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"DuplicateShare: x={self.x} supplied more than once"


@dataclass(eq=False)
class SeedCommitmentMismatchError(ProtocolIntegrityError):
    """
    Raised by the session binder when the revealed seed does not hash to the
    published session commitment (seed tampering).
    """
    expected_commitment_hex: str
    got_commitment_hex: str

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return (
            f"SeedCommitmentMismatch: expected={self.expected_commitment_hex} "
            f"got={self.got_commitment_hex}"
        )


# ---------------------------------------------------------------------------
# Participation, proofs, phases
# ---------------------------------------------------------------------------


@dataclass(eq=False)
class InsufficientParticipationError(DrngError):
    """
    Raised when fewer than ``need`` distinct shares are supplied to
    reconstruction. The session itself stays usable.
    """
    have: int
    need: int

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return f"InsufficientParticipation: have={self.have} need={self.need}"


@dataclass(eq=False)
class InvalidProofError(DrngError):
    """
    Raised by the session binder when the VDF output/proof pair fails
    verification (delay-proof tampering).

    Attributes:
        session_id: Session the proof belongs to (None when unknown).
        reason: Short explanation such as 'verify-failed' or 'modulus-mismatch'.
    """
    session_id: Optional[int] = None
    reason: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        return (
            f"InvalidProof: session={self.session_id}"
            + (f" reason={self.reason}" if self.reason else "")
        )


@dataclass(eq=False)
class PhaseViolationError(DrngError):
    """
    Raised when an operation is attempted outside the phase that permits it
    (phase skipped, reveal before commit, late commitment, action on an
    aborted session).
    """
    current: str
    attempted: str
    detail: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        base = f"PhaseViolation: current={self.current} attempted={self.attempted}"
        return f"{base} detail={self.detail}" if self.detail else base


@dataclass(eq=False)
class NodeUnavailableError(DrngError):
    """Raised when a node fails to answer within its phase; aborts the session."""
    node_id: int
    phase: str
    reason: Optional[str] = None

    def __str__(self) -> str:  # pragma: no cover - trivial formatting
        base = f"NodeUnavailable: node={self.node_id} phase={self.phase}"
        return f"{base} reason={self.reason}" if self.reason else base


__all__ = [
    "DrngError",
    "InvalidParameterError",
    "InvalidOperandError",
    "ProtocolIntegrityError",
    "CommitmentMismatchError",
    "CommitmentReusedError",
    "ContributionReusedError",
    "DuplicateShareError",
    "SeedCommitmentMismatchError",
    "InsufficientParticipationError",
    "InvalidProofError",
    "PhaseViolationError",
    "NodeUnavailableError",
]
