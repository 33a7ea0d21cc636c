# Copyright (c) Animica.
# SPDX-License-Identifier: MIT
"""
Session coordinator for threshold commit-reveal seed generation.

The coordinator is a barrier between phases: no transition happens until
every node of the phase answered, or the phase timeout elapsed (which aborts
the session). Phases advance strictly in order:

    INIT → COMMITTED → REVEALED → COMBINED → SHARED → RECONSTRUCTABLE
      └──────────┴──────────┴──────────┴────────┴───────────┴──→ ABORTED

Typical usage
-------------
    coord = MPCCoordinator(nodes, threshold=3, entropy=SystemEntropy())
    coord.collect_commitments(SessionId(42))
    coord.collect_reveals()
    coord.combine_seed()
    coord.distribute_shares_to_nodes()
    commitment = coord.publish_commitment()     # goes on-ledger first
    seed = coord.reconstruct_seed([1, 3, 5])    # then the seed is released

Notes
-----
- Share values are never retained here; only which x went to which node.
- Late commitments/reveals are rejected with PhaseViolationError, never merged.
- Protocol integrity failures abort the whole session. Callers start a new
  session with fresh nodes; nothing is retried.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Dict, Iterable, List, NoReturn, Optional, Sequence

from ..config import DrngConfig
from ..constants import DEFAULT_HASH, DEFAULT_PHASE_TIMEOUT_S, DIGEST_BYTES, SEED_BYTES
from ..entropy import EntropySource
from ..errors import (
    CommitmentMismatchError,
    CommitmentReusedError,
    DrngError,
    InsufficientParticipationError,
    InvalidParameterError,
    NodeUnavailableError,
    PhaseViolationError,
    ProtocolIntegrityError,
    SeedCommitmentMismatchError,
)
from ..metrics import METRICS, Metrics
from ..sharing import PrimeField, reconstruct, split
from ..types.core import NodeId, SessionId, Share
from ..types.state import SessionPhase, SessionState, abort, advance, require_phase
from ..utils.bytes import consteq, int_to_fixed, to_hex
from ..utils.hash import get_hasher
from .aggregate import combine_contributions
from .node import MPCNode

logger = logging.getLogger(__name__)

_P = SessionPhase
_COMMITMENT_READABLE = (_P.COMBINED, _P.SHARED, _P.RECONSTRUCTABLE)
_NODE_COMMITMENTS_READABLE = (_P.COMMITTED, _P.REVEALED) + _COMMITMENT_READABLE


class MPCCoordinator:
    """
    Drives one session over a fixed set of nodes indexed ``1..n``.

    Args:
        nodes: participants; their indices must be exactly ``1..len(nodes)``.
        threshold: shares needed to reconstruct the seed.
        entropy: randomness for the sharing polynomial.
        session_id: initial session id (rebindable until the first commitment).
        field: prime field for Shamir sharing; must exceed the seed width.
        hash_fn: commitment hash name.
        seed_bytes: contribution / seed width.
        phase_timeout_s: barrier deadline for the commit and reveal phases.
        clock: monotonic clock, injectable for tests.
        metrics: Prometheus instruments.
    """

    def __init__(
        self,
        nodes: Sequence[MPCNode],
        threshold: int,
        *,
        entropy: EntropySource,
        session_id: SessionId = SessionId(0),
        field: Optional[PrimeField] = None,
        hash_fn: str = DEFAULT_HASH,
        seed_bytes: int = SEED_BYTES,
        phase_timeout_s: float = DEFAULT_PHASE_TIMEOUT_S,
        clock: Callable[[], float] = time.monotonic,
        metrics: Metrics = METRICS,
    ) -> None:
        ordered = sorted(nodes, key=lambda nd: nd.index)
        indices = [nd.index for nd in ordered]
        if indices != list(range(1, len(ordered) + 1)):
            raise InvalidParameterError(
                f"node indices must be exactly 1..{len(ordered)} without duplicates (got {indices})"
            )
        self.field = field if field is not None else PrimeField()
        if self.field.p.bit_length() <= seed_bytes * 8:
            raise InvalidParameterError(
                f"field prime ({self.field.p.bit_length()} bits) cannot hold a "
                f"{seed_bytes}-byte seed"
            )
        if phase_timeout_s <= 0:
            raise InvalidParameterError("phase_timeout_s must be > 0")

        self.state = SessionState(session_id=session_id, n=len(ordered), threshold=threshold)
        self._nodes: Dict[NodeId, MPCNode] = {nd.index: nd for nd in ordered}
        self._entropy = entropy
        self._hash = get_hasher(hash_fn)
        self._seed_bytes = seed_bytes
        self.phase_timeout_s = phase_timeout_s
        self._clock = clock
        self._metrics = metrics

    @classmethod
    def from_config(
        cls,
        config: DrngConfig,
        *,
        entropy: EntropySource,
        session_id: SessionId = SessionId(0),
        clock: Callable[[], float] = time.monotonic,
        metrics: Metrics = METRICS,
    ) -> "MPCCoordinator":
        """Build a coordinator plus ``config.nodes`` fresh nodes."""
        config.validate()
        nodes = [
            MPCNode(
                i,
                entropy=entropy,
                session_id=session_id,
                hash_fn=config.hash_fn,
                seed_bytes=config.seed_bytes,
            )
            for i in range(1, config.nodes + 1)
        ]
        return cls(
            nodes,
            config.threshold,
            entropy=entropy,
            session_id=session_id,
            field=PrimeField(config.field_prime),
            hash_fn=config.hash_fn,
            seed_bytes=config.seed_bytes,
            phase_timeout_s=config.phase_timeout_s,
            clock=clock,
            metrics=metrics,
        )

    # ---- read-only views ----

    @property
    def phase(self) -> SessionPhase:
        return self.state.phase

    @property
    def session_id(self) -> SessionId:
        return self.state.session_id

    @property
    def threshold(self) -> int:
        return self.state.threshold

    @property
    def nodes(self) -> List[MPCNode]:
        return [self._nodes[i] for i in sorted(self._nodes)]

    def node(self, node_id: NodeId) -> MPCNode:
        try:
            return self._nodes[node_id]
        except KeyError:
            raise InvalidParameterError(f"unknown node id {node_id!r}") from None

    def summary(self) -> Dict[str, object]:
        return self.state.summary()

    # ---- failure handling ----

    def _fail(self, exc: DrngError, reason: str) -> NoReturn:
        """Abort the session and raise ``exc``."""
        if not self.state.is_terminal:
            self.abort(reason)
        raise exc

    def _session_commitment(self, attempted: str) -> bytes:
        commitment = self.state.commitment
        if commitment is None:
            raise PhaseViolationError(
                current=self.state.phase.value,
                attempted=attempted,
                detail="no session commitment recorded",
            )
        return commitment

    def _check_deadline(self, started: float, node_id: NodeId, phase: str) -> None:
        elapsed = self._clock() - started
        if elapsed > self.phase_timeout_s:
            if phase == "commit":
                self._metrics.record_commit("unavailable")
            else:
                self._metrics.record_reveal("unavailable")
            self._fail(
                NodeUnavailableError(node_id=node_id, phase=phase, reason="phase timeout"),
                f"{phase} phase timed out after {elapsed:.3f}s at node {node_id}",
            )

    # ---- commit phase ----

    def collect_commitments(self, session_id: Optional[SessionId] = None) -> Dict[NodeId, bytes]:
        """
        Ask every node for its commitment and advance to COMMITTED.

        Aborts on an unavailable node, a phase timeout or a reused commitment.
        """
        require_phase(self.state, "collect_commitments", _P.INIT)
        if session_id is not None and session_id != self.state.session_id:
            if self.state.commitments:
                raise InvalidParameterError(
                    f"coordinator is bound to session {self.state.session_id}; "
                    f"cannot switch to {session_id}"
                )
            self.state.session_id = session_id

        logger.info(
            "session %s: collecting commitments from %d nodes (t=%d)",
            self.state.session_id, self.state.n, self.state.threshold,
        )
        started = self._clock()
        for node in self.nodes:
            if node.index in self.state.commitments:
                continue
            try:
                commitment = node.generate_contribution()
            except NodeUnavailableError as e:
                self._metrics.record_commit("unavailable")
                self._fail(e, f"node {node.index} unavailable in commit phase")
            except ProtocolIntegrityError as e:
                self._fail(e, f"node {node.index} broke commit integrity: {e}")
            self._check_deadline(started, node.index, "commit")
            self.record_commitment(node.index, commitment)

        advance(self.state, _P.COMMITTED)
        logger.info("session %s: phase -> %s", self.state.session_id, self.state.phase.value)
        return dict(self.state.commitments)

    def record_commitment(self, node_id: NodeId, commitment: bytes) -> None:
        """Record one commitment. Only legal while the session is in INIT."""
        if self.state.phase is not _P.INIT:
            self._metrics.record_commit("late")
            logger.debug(
                "session %s: late commitment from node %s rejected (phase=%s)",
                self.state.session_id, node_id, self.state.phase.value,
            )
            raise PhaseViolationError(
                current=self.state.phase.value,
                attempted="record_commitment",
                detail=f"late commitment from node {node_id}",
            )
        node = self.node(node_id)
        commitment = bytes(commitment)
        if len(commitment) != DIGEST_BYTES:
            raise InvalidParameterError(
                f"commitment must be {DIGEST_BYTES} bytes (got {len(commitment)})"
            )
        if node_id in self.state.commitments or commitment in self.state.commitments.values():
            self._metrics.record_commit("reused")
            self._fail(
                CommitmentReusedError(
                    session_id=int(self.state.session_id),
                    node_id=node_id,
                    commitment_hex=to_hex(commitment),
                ),
                f"commitment reused by node {node_id}",
            )

        self.state.commitments[node_id] = commitment
        if node.commitment is not None:
            node.mark_committed()
        self._metrics.record_commit("accepted")
        logger.debug(
            "session %s: commitment from node %s = %s",
            self.state.session_id, node_id, commitment.hex(),
        )

    def node_commitments(self) -> Dict[NodeId, bytes]:
        """Per-node commitments; readable once the commit phase closed."""
        require_phase(self.state, "node_commitments", *_NODE_COMMITMENTS_READABLE)
        return dict(self.state.commitments)

    # ---- reveal phase ----

    def collect_reveals(self) -> None:
        """Collect and check every node's reveal, then advance to REVEALED."""
        require_phase(self.state, "collect_reveals", _P.COMMITTED)
        started = self._clock()
        for node in self.nodes:
            if node.index in self.state.reveals:
                continue
            try:
                value = node.reveal()
            except NodeUnavailableError as e:
                self._metrics.record_reveal("unavailable")
                self._fail(e, f"node {node.index} unavailable in reveal phase")
            self._check_deadline(started, node.index, "reveal")
            self.record_reveal(node.index, value)

        advance(self.state, _P.REVEALED)
        logger.info("session %s: phase -> %s", self.state.session_id, self.state.phase.value)

    def record_reveal(self, node_id: NodeId, value: bytes) -> None:
        """
        Check one reveal against its commitment. A mismatch aborts the whole
        session; only legal while the session is in COMMITTED.
        """
        if self.state.phase is not _P.COMMITTED:
            self._metrics.record_reveal("late")
            raise PhaseViolationError(
                current=self.state.phase.value,
                attempted="record_reveal",
                detail=f"reveal from node {node_id} outside the reveal phase",
            )
        self.node(node_id)
        if node_id in self.state.reveals:
            raise PhaseViolationError(
                current=self.state.phase.value,
                attempted="record_reveal",
                detail=f"node {node_id} already revealed",
            )

        value = bytes(value)
        expected = self.state.commitments[node_id]
        got = self._hash(value)
        if len(value) != self._seed_bytes or not consteq(expected, got):
            self._metrics.record_reveal("mismatch")
            logger.warning(
                "session %s: node %s reveal does not match its commitment",
                self.state.session_id, node_id,
            )
            self._fail(
                CommitmentMismatchError(
                    session_id=int(self.state.session_id),
                    node_id=node_id,
                    expected_commitment_hex=to_hex(expected),
                    got_commitment_hex=to_hex(got),
                ),
                f"commitment mismatch from node {node_id}",
            )
        self.state.reveals[node_id] = value
        self._metrics.record_reveal("accepted")

    # ---- combine / share ----

    def combine_seed(self) -> bytes:
        """
        XOR-fold all contributions into the combined seed and advance to
        COMBINED. Returns the session commitment ``hash(seed)``; the seed
        itself stays inside the coordinator.
        """
        require_phase(self.state, "combine_seed", _P.REVEALED)
        seed_bytes, seed_int = combine_contributions(self.state.reveals, width=self._seed_bytes)
        self.state.combined_seed = seed_int
        self.state.commitment = self._hash(seed_bytes)
        advance(self.state, _P.COMBINED)
        logger.info(
            "session %s: seed combined from %d contributions, commitment=%s",
            self.state.session_id, len(self.state.reveals), self.state.commitment.hex(),
        )
        return self.state.commitment

    def distribute_shares_to_nodes(self) -> Dict[NodeId, int]:
        """
        Split the combined seed and hand share ``i`` to node ``i``. Advances
        to SHARED. Returns node → share x (never the share values).
        """
        require_phase(self.state, "distribute_shares_to_nodes", _P.COMBINED)
        seed = self.state.combined_seed
        if seed is None:
            raise PhaseViolationError(
                current=self.state.phase.value,
                attempted="distribute_shares_to_nodes",
                detail="no combined seed recorded",
            )
        shares = split(
            seed,
            self.state.n,
            self.state.threshold,
            rng=self._entropy,
            field=self.field,
        )
        for node, share in zip(self.nodes, shares):
            try:
                node.store_share(share)
            except NodeUnavailableError:
                logger.warning(
                    "session %s: node %s unavailable for share distribution",
                    self.state.session_id, node.index,
                )
                continue
            self.state.share_indices[node.index] = share.x
        del shares

        if len(self.state.share_indices) < self.state.threshold:
            self._fail(
                InsufficientParticipationError(
                    have=len(self.state.share_indices), need=self.state.threshold
                ),
                "too few nodes accepted a share",
            )
        advance(self.state, _P.SHARED)
        logger.info(
            "session %s: phase -> %s (%d shares held)",
            self.state.session_id, self.state.phase.value, len(self.state.share_indices),
        )
        return dict(self.state.share_indices)

    # ---- commitment publication ----

    def publish_commitment(self) -> bytes:
        """Return ``hash(seed)`` and mark it published. Must precede seed release."""
        require_phase(self.state, "publish_commitment", *_COMMITMENT_READABLE)
        commitment = self._session_commitment("publish_commitment")
        if not self.state.commitment_published:
            self.state.commitment_published = True
            logger.info("session %s: commitment published %s", self.state.session_id, commitment.hex())
        return commitment

    def get_commitment(self) -> bytes:
        """
        The session commitment ``hash(seed)``.

        It only exists once the seed is combined, so it is readable from COMBINED
        on. In COMMITTED and REVEALED only the per-node commitments exist; read
        those through :meth:`node_commitments`.
        """
        if self.state.phase in (_P.COMMITTED, _P.REVEALED):
            raise PhaseViolationError(
                current=self.state.phase.value,
                attempted="get_commitment",
                detail="session commitment exists from COMBINED on; use node_commitments()",
            )
        require_phase(self.state, "get_commitment", *_COMMITMENT_READABLE)
        return self._session_commitment("get_commitment")

    # ---- reconstruction ----

    def reconstruct_seed(self, node_ids: Iterable[NodeId]) -> bytes:
        """
        Rebuild the seed from the shares held by ``node_ids``.

        Duplicate ids count once. Fewer than ``t`` distinct responsive nodes
        raise :class:`InsufficientParticipationError` and leave the session
        usable. The result is checked against the published commitment.

        Returns:
            The seed as ``seed_bytes`` big-endian bytes.
        """
        require_phase(self.state, "reconstruct_seed", _P.SHARED, _P.RECONSTRUCTABLE)
        if not self.state.commitment_published:
            raise PhaseViolationError(
                current=self.state.phase.value,
                attempted="reconstruct_seed",
                detail="session commitment must be published before the seed is released",
            )

        distinct: List[NodeId] = []
        for nid in node_ids:
            self.node(nid)
            if nid not in distinct:
                distinct.append(nid)

        shares: List[Share] = []
        for nid in distinct:
            try:
                shares.append(self._nodes[nid].get_share())
            except (NodeUnavailableError, PhaseViolationError) as e:
                logger.debug("session %s: no share from node %s: %s", self.state.session_id, nid, e)

        t = self.state.threshold
        if len(shares) < t:
            self._metrics.record_reconstruction("insufficient")
            raise InsufficientParticipationError(have=len(shares), need=t)

        seed_int = reconstruct(shares, t, field=self.field)
        commitment = self._session_commitment("reconstruct_seed")
        if seed_int.bit_length() > self._seed_bytes * 8:
            got = b""
        else:
            got = self._hash(int_to_fixed(seed_int, self._seed_bytes))
        if seed_int != self.state.combined_seed or not consteq(got, commitment):
            self._metrics.record_reconstruction("mismatch")
            self._fail(
                SeedCommitmentMismatchError(
                    expected_commitment_hex=to_hex(commitment),
                    got_commitment_hex=to_hex(got),
                ),
                "reconstructed seed does not match the session commitment",
            )

        advance(self.state, _P.RECONSTRUCTABLE)
        self._metrics.record_reconstruction("ok")
        logger.info(
            "session %s: seed reconstructed from nodes %s",
            self.state.session_id, sorted(s.x for s in shares[:t]),
        )
        return int_to_fixed(seed_int, self._seed_bytes)

    # ---- abort ----

    def abort(self, reason: str) -> None:
        """Move the session to ABORTED. No further transitions are possible."""
        abort(self.state, reason)
        self._metrics.record_session("aborted")
        logger.warning("session %s aborted: %s", self.state.session_id, reason)


__all__ = ["MPCCoordinator"]
