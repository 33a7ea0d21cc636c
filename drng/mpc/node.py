# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
A single participant in a randomness session.

Lifecycle (one node object per session):

    node = MPCNode(3, session_id=SessionId(7), entropy=SystemEntropy())
    c = node.generate_contribution()   # 32 random bytes, returns hash(contribution)
    node.mark_committed()              # coordinator recorded c
    v = node.reveal()                  # contribution; hash(v) == c
    node.store_share(share)            # exactly one share, x == index
    node.get_share()

The contribution is generated once. Asking for a second one is a protocol
integrity error, since a node that could re-roll its value after seeing the
others' commitments could bias the seed.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..constants import DEFAULT_HASH, SEED_BYTES
from ..entropy import EntropySource
from ..errors import (
    ContributionReusedError,
    InvalidParameterError,
    NodeUnavailableError,
    PhaseViolationError,
)
from ..types.core import NodeId, SessionId, Share
from ..utils.hash import HashFn, get_hasher

logger = logging.getLogger(__name__)


def default_identity(session_id: int, index: int, hasher: HashFn) -> bytes:
    """Deterministic placeholder identity: hash(session_id_u64 || index_u32)."""
    return hasher(int(session_id).to_bytes(8, "big") + int(index).to_bytes(4, "big"))


class MPCNode:
    """
    Holds one node's secret contribution and, after distribution, its share.

    ``identity`` is opaque authentication material for transport layers; it
    never enters the seed. ``available=False`` models a node that refuses to
    answer: every protocol call then raises :class:`NodeUnavailableError`.
    """

    __slots__ = (
        "index",
        "session_id",
        "identity",
        "available",
        "_entropy",
        "_hash",
        "_seed_bytes",
        "_contribution",
        "_commitment",
        "_committed",
        "_share",
    )

    def __init__(
        self,
        index: NodeId,
        *,
        entropy: EntropySource,
        session_id: SessionId = SessionId(0),
        hash_fn: str = DEFAULT_HASH,
        seed_bytes: int = SEED_BYTES,
        identity: Optional[bytes] = None,
        available: bool = True,
    ) -> None:
        if not isinstance(index, int) or index < 1:
            raise InvalidParameterError(f"node index must be a positive integer (got {index!r})")
        if seed_bytes < 1:
            raise InvalidParameterError("seed_bytes must be positive")
        self.index = index
        self.session_id = session_id
        self._hash = get_hasher(hash_fn)
        self.identity = identity if identity is not None else default_identity(session_id, index, self._hash)
        self.available = available
        self._entropy = entropy
        self._seed_bytes = seed_bytes
        self._contribution: Optional[bytes] = None
        self._commitment: Optional[bytes] = None
        self._committed = False
        self._share: Optional[Share] = None

    # ---- helpers ----

    def _require_available(self, phase: str) -> None:
        if not self.available:
            raise NodeUnavailableError(node_id=self.index, phase=phase, reason="node offline")

    @property
    def commitment(self) -> Optional[bytes]:
        return self._commitment

    @property
    def is_committed(self) -> bool:
        return self._committed

    # ---- commit phase ----

    def generate_contribution(self) -> bytes:
        """Sample the contribution and return its commitment. Callable once."""
        self._require_available("commit")
        if self._contribution is not None:
            raise ContributionReusedError(node_id=self.index)

        value = self._entropy.random_bytes(self._seed_bytes)
        if len(value) != self._seed_bytes:
            raise InvalidParameterError(
                f"entropy source returned {len(value)} bytes, expected {self._seed_bytes}"
            )
        self._contribution = value
        self._commitment = self._hash(value)
        logger.debug(
            "node %d committed session=%s commitment=%s",
            self.index, self.session_id, self._commitment.hex(),
        )
        return self._commitment

    def mark_committed(self) -> None:
        """Record that the coordinator accepted this node's commitment."""
        if self._commitment is None:
            raise PhaseViolationError(current="init", attempted="mark_committed")
        self._committed = True

    # ---- reveal phase ----

    def reveal(self) -> bytes:
        """Return the contribution. Only legal once the commitment was recorded."""
        self._require_available("reveal")
        if not self._committed or self._contribution is None:
            raise PhaseViolationError(
                current="init" if self._contribution is None else "generated",
                attempted="reveal",
                detail=f"node {self.index} has no recorded commitment",
            )
        return self._contribution

    # ---- share phase ----

    def store_share(self, share: Share) -> None:
        self._require_available("share")
        if self._share is not None:
            raise PhaseViolationError(
                current="shared",
                attempted="store_share",
                detail=f"node {self.index} already holds a share",
            )
        if share.x != self.index:
            raise InvalidParameterError(
                f"share x={share.x} does not match node index {self.index}"
            )
        self._share = share

    def get_share(self) -> Share:
        self._require_available("reconstruct")
        if self._share is None:
            raise PhaseViolationError(
                current="unshared",
                attempted="get_share",
                detail=f"node {self.index} holds no share",
            )
        return self._share

    def __repr__(self) -> str:
        return (
            f"MPCNode(index={self.index}, session_id={self.session_id}, "
            f"committed={self._committed}, has_share={self._share is not None}, "
            f"available={self.available})"
        )


__all__ = ["MPCNode", "default_identity"]
