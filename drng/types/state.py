from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Mapping, Optional

from ..errors import InvalidParameterError, PhaseViolationError
from .core import NodeId, SessionId


class SessionPhase(str, Enum):
    """Lifecycle phases of a randomness session, in protocol order."""

    INIT = "init"
    COMMITTED = "committed"
    REVEALED = "revealed"
    COMBINED = "combined"
    SHARED = "shared"
    RECONSTRUCTABLE = "reconstructable"
    ABORTED = "aborted"


_P = SessionPhase

# Allowed transitions. Anything not listed is a phase violation; ABORTED is
# terminal. RECONSTRUCTABLE loops onto itself so the seed can be rebuilt from
# several subsets.
TRANSITIONS: Mapping[SessionPhase, FrozenSet[SessionPhase]] = {
    _P.INIT: frozenset({_P.COMMITTED, _P.ABORTED}),
    _P.COMMITTED: frozenset({_P.REVEALED, _P.ABORTED}),
    _P.REVEALED: frozenset({_P.COMBINED, _P.ABORTED}),
    _P.COMBINED: frozenset({_P.SHARED, _P.ABORTED}),
    _P.SHARED: frozenset({_P.RECONSTRUCTABLE, _P.ABORTED}),
    _P.RECONSTRUCTABLE: frozenset({_P.RECONSTRUCTABLE, _P.ABORTED}),
    _P.ABORTED: frozenset(),
}


@dataclass(slots=True)
class SessionState:
    """
    Coordinator-held session snapshot.

    Tracks:
      • session_id / n / threshold — fixed at creation
      • phase                      — current lifecycle phase
      • commitments                — node → commitment recorded in the commit phase
      • reveals                    — node → contribution accepted in the reveal phase
      • combined_seed              — XOR-fold of all contributions (None until COMBINED)
      • share_indices              — node → x of the share it was handed
      • commitment                 — hash(combined seed), the session commitment
      • commitment_published       — set once the commitment has been handed out
      • abort_reason               — why the session ended in ABORTED

    Only :func:`advance` and :func:`abort` change ``phase``.
    """

    session_id: SessionId
    n: int
    threshold: int
    phase: SessionPhase = SessionPhase.INIT
    commitments: Dict[NodeId, bytes] = field(default_factory=dict)
    reveals: Dict[NodeId, bytes] = field(default_factory=dict)
    combined_seed: Optional[int] = None
    share_indices: Dict[NodeId, int] = field(default_factory=dict)
    commitment: Optional[bytes] = None
    commitment_published: bool = False
    abort_reason: Optional[str] = None

    def __post_init__(self) -> None:
        validate_threshold(self.n, self.threshold)
        if int(self.session_id) < 0:
            raise InvalidParameterError("session_id must be non-negative")

    @property
    def is_terminal(self) -> bool:
        return self.phase is SessionPhase.ABORTED

    def summary(self) -> Dict[str, object]:
        """Non-secret view for logging and CLI output."""
        return {
            "sessionId": int(self.session_id),
            "phase": self.phase.value,
            "n": self.n,
            "threshold": self.threshold,
            "commitments": len(self.commitments),
            "reveals": len(self.reveals),
            "sharesDistributed": len(self.share_indices),
            "commitment": self.commitment.hex() if self.commitment else None,
            "commitmentPublished": self.commitment_published,
            "abortReason": self.abort_reason,
        }


def validate_threshold(n: int, threshold: int) -> None:
    if not isinstance(n, int) or n < 1:
        raise InvalidParameterError(f"node count must be >= 1 (got {n!r})")
    if not isinstance(threshold, int) or threshold < 1:
        raise InvalidParameterError(f"threshold must be >= 1 (got {threshold!r})")
    if threshold > n:
        raise InvalidParameterError(f"threshold {threshold} exceeds node count {n}")


def can_advance(state: SessionState, target: SessionPhase) -> bool:
    return target in TRANSITIONS[state.phase]


def advance(state: SessionState, target: SessionPhase) -> None:
    """Move ``state`` to ``target`` or raise :class:`PhaseViolationError`."""
    if not can_advance(state, target):
        raise PhaseViolationError(
            current=state.phase.value,
            attempted=target.value,
            detail=state.abort_reason if state.is_terminal else None,
        )
    state.phase = target


def abort(state: SessionState, reason: str) -> None:
    """Terminate the session. Aborting an aborted session is a phase violation."""
    advance(state, SessionPhase.ABORTED)
    state.abort_reason = reason


def require_phase(state: SessionState, action: str, *allowed: SessionPhase) -> None:
    """Guard an operation that is only legal in ``allowed`` phases."""
    if state.phase not in allowed:
        raise PhaseViolationError(
            current=state.phase.value,
            attempted=action,
            detail=state.abort_reason if state.is_terminal else None,
        )


__all__ = [
    "SessionPhase",
    "TRANSITIONS",
    "SessionState",
    "validate_threshold",
    "can_advance",
    "advance",
    "abort",
    "require_phase",
]
