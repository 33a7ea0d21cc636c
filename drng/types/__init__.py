"""
drng — types package

Typed primitives and dataclasses used across the randomness core:

  • core   — SessionId, NodeId, Share, VDFProof, VDFResult, SessionOutput
  • state  — SessionPhase, TRANSITIONS, SessionState and its transition functions

Commonly used symbols are re-exported here:
    from drng.types import Share, SessionPhase, VDFProof
"""

from __future__ import annotations

from .core import NodeId, SessionId, SessionOutput, Share, VDFProof, VDFResult
from .state import TRANSITIONS, SessionPhase, SessionState

__all__ = [
    "SessionId",
    "NodeId",
    "Share",
    "VDFProof",
    "VDFResult",
    "SessionOutput",
    "SessionPhase",
    "SessionState",
    "TRANSITIONS",
]
