"""
Off-thread VDF evaluation.

Sequential squaring is the slow step of a session, so it runs on a
``concurrent.futures`` executor while the caller carries on with the seed
protocol. One job per session id. If the session aborts, :meth:`VDFWorker.discard`
drops the job: a pending job is cancelled, a running one finishes in the
background and its result is thrown away. A discarded result is never handed
out.

    with VDFWorker(PietrzakVDF(params)) as w:
        w.submit(sid, x)
        ...
        res = w.result(sid, timeout=60)
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..errors import InvalidParameterError, PhaseViolationError
from ..types.core import SessionId, VDFResult
from .pietrzak import PietrzakVDF

logger = logging.getLogger(__name__)


@dataclass
class VDFJob:
    session_id: SessionId
    x: int
    future: "Future[VDFResult]"
    discarded: bool = False


class VDFWorker:
    """
    Runs :meth:`PietrzakVDF.run` jobs keyed by session id.

    Args:
        vdf: bound VDF instance.
        max_workers: size of the owned thread pool (ignored with ``executor``).
        executor: external executor; not shut down by :meth:`shutdown`.
    """

    def __init__(
        self,
        vdf: PietrzakVDF,
        *,
        max_workers: int = 1,
        executor: Optional[Executor] = None,
    ) -> None:
        self.vdf = vdf
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max(1, int(max_workers)), thread_name_prefix="drng-vdf"
        )
        self._jobs: Dict[SessionId, VDFJob] = {}
        self._lock = threading.Lock()

    # ---- job control ----

    def submit(self, session_id: SessionId, x: int) -> "Future[VDFResult]":
        with self._lock:
            if session_id in self._jobs:
                raise InvalidParameterError(f"VDF job for session {session_id} already submitted")
            fut = self._executor.submit(self.vdf.run, x)
            job = VDFJob(session_id=session_id, x=x, future=fut)
            self._jobs[session_id] = job
        logger.debug("session %s: VDF job submitted (T=%d)", session_id, self.vdf.T)
        return fut

    def result(self, session_id: SessionId, timeout: Optional[float] = None) -> VDFResult:
        """
        Wait for and return the job result. The job is removed once its future
        has finished, whether it produced a result or raised; after a timeout
        it stays and can be waited on again.

        Raises:
            PhaseViolationError: the job was discarded or never submitted.
            concurrent.futures.TimeoutError: ``timeout`` elapsed.
            Any exception raised by the evaluation itself.
        """
        with self._lock:
            job = self._jobs.get(session_id)
        if job is None:
            raise PhaseViolationError(
                current="idle", attempted="vdf_result", detail=f"no VDF job for session {session_id}"
            )
        if job.discarded:
            raise PhaseViolationError(
                current="discarded", attempted="vdf_result",
                detail=f"VDF job for session {session_id} was discarded",
            )
        try:
            res = job.future.result(timeout=timeout)
        finally:
            if job.future.done():
                with self._lock:
                    if self._jobs.get(session_id) is job:
                        del self._jobs[session_id]
        # discard() may have raced with completion
        if job.discarded:
            raise PhaseViolationError(
                current="discarded", attempted="vdf_result",
                detail=f"VDF job for session {session_id} was discarded",
            )
        return res

    def discard(self, session_id: SessionId) -> bool:
        """Drop the job for ``session_id``. Returns False if there was none."""
        with self._lock:
            job = self._jobs.pop(session_id, None)
            if job is None:
                return False
            job.discarded = True
        if job.future.cancel():
            logger.info("session %s: pending VDF job cancelled", session_id)
        else:
            job.future.add_done_callback(
                lambda _f: logger.debug("session %s: discarded VDF result dropped", session_id)
            )
            logger.info("session %s: running VDF job discarded", session_id)
        return True

    def pending(self) -> List[SessionId]:
        with self._lock:
            return [sid for sid, job in self._jobs.items() if not job.future.done()]

    # ---- lifecycle ----

    def shutdown(self, wait: bool = True) -> None:
        with self._lock:
            sids = list(self._jobs)
        for sid in sids:
            self.discard(sid)
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self) -> "VDFWorker":
        return self

    def __exit__(self, *exc) -> None:
        self.shutdown(wait=True)


__all__ = ["VDFJob", "VDFWorker"]
