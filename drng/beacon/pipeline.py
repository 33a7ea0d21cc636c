"""
End-to-end driver for one randomness session.

Order of operations:

    commit → reveal → combine → share → publish commitment
                                              │
                         ┌────────────────────┴────────────────────┐
                         ▼                                         ▼
           VDF on x = int(commitment) mod N           threshold seed reconstruction
             (background worker)                        (t of n nodes)
                         └────────────────────┬────────────────────┘
                                              ▼
                                 bind: final = hash(Y || seed)

The delay computation starts as soon as the commitment is public and runs while
the seed is reconstructed.

:meth:`DrngSession.run` resumes from the coordinator's current phase. Too few
shares for reconstruction only fails that attempt: the session stays in
SHARED, the VDF job keeps running, and ``run`` may be called again with a
different node set. Any other failure discards the VDF job and re-raises;
nothing is retried.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from ..config import DrngConfig
from ..entropy import EntropySource, SystemEntropy
from ..errors import InsufficientParticipationError
from ..metrics import METRICS, Metrics
from ..mpc.coordinator import MPCCoordinator
from ..types.core import NodeId, SessionId, SessionOutput
from ..types.state import SessionPhase
from ..vdf.input_builder import vdf_input_from_commitment
from ..vdf.params import params_from_config
from ..vdf.pietrzak import PietrzakVDF
from ..vdf.worker import VDFWorker
from .finalize import bind_session

logger = logging.getLogger(__name__)

_P = SessionPhase


class DrngSession:
    """
    One session over ``config.nodes`` fresh in-process nodes.

    Args:
        config: validated on construction.
        session_id: identifier bound into node identities and the output.
        entropy: CSPRNG for contributions and sharing polynomials.
        worker: optional shared VDF worker, never shut down here. Without
            one, the session owns a worker that lives until the session
            completes, fails for good, or :meth:`close` is called.
        clock: monotonic clock for the phase barrier.
    """

    def __init__(
        self,
        config: Optional[DrngConfig] = None,
        *,
        session_id: SessionId = SessionId(0),
        entropy: Optional[EntropySource] = None,
        worker: Optional[VDFWorker] = None,
        clock: Callable[[], float] = time.monotonic,
        metrics: Metrics = METRICS,
    ) -> None:
        self.config = config if config is not None else DrngConfig()
        self.config.validate()
        self.session_id = session_id
        self._metrics = metrics
        self.params = params_from_config(
            self.config.vdf, require_production=self.config.require_production_modulus
        )
        self.vdf = PietrzakVDF(self.params, metrics=metrics)
        self.coordinator = MPCCoordinator.from_config(
            self.config,
            entropy=entropy if entropy is not None else SystemEntropy(),
            session_id=session_id,
            clock=clock,
            metrics=metrics,
        )
        self._shared_worker = worker
        self._owned_worker: Optional[VDFWorker] = None
        self._vdf_submitted = False
        self.output: Optional[SessionOutput] = None

    @property
    def vdf_pending(self) -> bool:
        """True while a VDF job for this session is submitted and not yet collected."""
        return self._vdf_submitted

    def _worker(self) -> VDFWorker:
        if self._shared_worker is not None:
            return self._shared_worker
        if self._owned_worker is None:
            self._owned_worker = VDFWorker(self.vdf)
        return self._owned_worker

    def _advance_protocol(self) -> bytes:
        """Drive the coordinator up to SHARED from wherever it stands; return the commitment."""
        coord = self.coordinator
        if coord.phase is _P.INIT:
            coord.collect_commitments(self.session_id)
        if coord.phase is _P.COMMITTED:
            coord.collect_reveals()
        if coord.phase is _P.REVEALED:
            coord.combine_seed()
        if coord.phase is _P.COMBINED:
            coord.distribute_shares_to_nodes()
        return coord.publish_commitment()

    def run(
        self,
        reconstruct_with: Optional[Sequence[NodeId]] = None,
        *,
        vdf_timeout: Optional[float] = None,
    ) -> SessionOutput:
        """
        Execute (or resume) the session and return the bound output.

        ``reconstruct_with`` selects the nodes whose shares rebuild the seed;
        defaults to the ``t`` lowest indices. On
        :class:`InsufficientParticipationError` the session can be resumed by
        calling ``run`` again with another node set.
        """
        if self.output is not None:
            return self.output

        coord = self.coordinator
        sid = self.session_id
        worker = self._worker()
        try:
            commitment = self._advance_protocol()

            if not self._vdf_submitted:
                worker.submit(sid, vdf_input_from_commitment(commitment, self.vdf.N))
                self._vdf_submitted = True

            ids = list(reconstruct_with) if reconstruct_with is not None else [
                nd.index for nd in coord.nodes[: coord.threshold]
            ]
            seed = coord.reconstruct_seed(ids)
            res = worker.result(sid, timeout=vdf_timeout)
            self._vdf_submitted = False

            out = bind_session(
                commitment,
                seed,
                res.y,
                res.proof,
                self.vdf,
                session_id=sid,
                hash_fn=self.config.hash_fn,
                metrics=self._metrics,
            )
        except InsufficientParticipationError:
            logger.info(
                "session %s: reconstruction attempt lacked shares; session and VDF job kept",
                sid,
            )
            raise
        except Exception:
            self.close()
            raise

        self._release_worker()
        self._metrics.record_session("completed")
        logger.info(
            "session %s complete: n=%d t=%d T=%d",
            sid, self.config.nodes, self.config.threshold, self.vdf.T,
        )
        self.output = out
        return out

    def _release_worker(self) -> None:
        if self._owned_worker is not None:
            self._owned_worker.shutdown(wait=False)
            self._owned_worker = None

    def close(self) -> None:
        """Drop any pending VDF job and release an owned worker."""
        if self._vdf_submitted:
            self._worker().discard(self.session_id)
            self._vdf_submitted = False
        self._release_worker()

    def __enter__(self) -> "DrngSession":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


def run_session(
    config: Optional[DrngConfig] = None,
    *,
    session_id: SessionId = SessionId(0),
    entropy: Optional[EntropySource] = None,
    reconstruct_with: Optional[Sequence[NodeId]] = None,
) -> SessionOutput:
    """Convenience wrapper: build a :class:`DrngSession` and run it."""
    with DrngSession(config, session_id=session_id, entropy=entropy) as session:
        return session.run(reconstruct_with)


__all__ = ["DrngSession", "run_session"]
