"""
drng.mpc
========

Threshold commit-reveal seed generation:

  • node         — MPCNode: one participant's contribution and share
  • aggregate    — XOR-fold combiner for revealed contributions
  • coordinator  — MPCCoordinator: the session state machine

    from drng.mpc import MPCCoordinator
    coord = MPCCoordinator.from_config(cfg, entropy=SystemEntropy(), session_id=SessionId(1))
"""

from __future__ import annotations

from .aggregate import combine_contributions, xor_fold
from .coordinator import MPCCoordinator
from .node import MPCNode, default_identity

__all__ = [
    "MPCNode",
    "MPCCoordinator",
    "xor_fold",
    "combine_contributions",
    "default_identity",
]
