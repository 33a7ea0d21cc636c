"""
Prometheus metrics for the randomness core.

This module defines counters and histograms for the session pipeline:
  • sessions         — finished sessions per outcome
  • commits          — node commitments per outcome
  • reveals          — node reveals per outcome
  • reconstructions  — threshold reconstruction attempts per outcome
  • vdf_eval_seconds   — time spent in sequential evaluation + proving
  • vdf_verify_seconds — time spent verifying VDF proofs

Design notes
------------
- Label cardinality is intentionally low. We only expose an `outcome` label with a
  small, finite vocabulary.
- No per-session or per-node labels; session ids are unbounded.

Usage
-----
    from drng.metrics import METRICS

    METRICS.record_commit("accepted")
    METRICS.record_reveal("mismatch")
    with METRICS.vdf_verify_timer():
        verify(...)

If you need a custom Prometheus registry or different namespace/subsystem, construct
your own `Metrics` instance.
"""

from __future__ import annotations

from contextlib import contextmanager
from time import perf_counter
from typing import Iterable

from prometheus_client import REGISTRY, Counter, Histogram

# --------- Vocabularies (kept small for bounded cardinality) ---------

_SESSION_OUTCOMES = (
    "completed",    # final randomness produced and bound
    "aborted",      # coordinator moved the session to ABORTED
    "rejected",     # binder refused the seed or the proof
)

_COMMIT_OUTCOMES = (
    "accepted",     # commitment recorded
    "late",         # arrived after the commit phase closed
    "reused",       # commitment value already seen in the session
    "unavailable",  # node did not answer within the phase
)

_REVEAL_OUTCOMES = (
    "accepted",     # reveal hashed to the recorded commitment
    "late",         # arrived after the reveal phase closed
    "mismatch",     # hash mismatch vs commitment
    "unavailable",  # node did not answer within the phase
)

_RECONSTRUCT_OUTCOMES = (
    "ok",
    "insufficient",  # below threshold
    "mismatch",      # result differed from the combined seed
)

# --------- Default histogram buckets ---------

# Sequential evaluation: 10ms up to 10 minutes.
_VDF_EVAL_BUCKETS = (
    0.01, 0.05, 0.1, 0.5,
    1.0, 5.0, 10.0, 30.0,
    60.0, 120.0, 300.0, 600.0,
)

# Verification is O(log T): fine-grained sub-100ms up to 10s.
_VDF_VERIFY_BUCKETS = (
    0.001, 0.005, 0.01, 0.025, 0.05,
    0.1, 0.25, 0.5,
    1.0, 2.5, 5.0, 10.0,
)


def _pick(outcome: str, allowed: tuple[str, ...], fallback: str) -> str:
    return outcome if outcome in allowed else fallback


class Metrics:
    """
    Container for all drng Prometheus instruments.

    Args:
        namespace: Prometheus metric namespace (prefix).
        subsystem: Prometheus metric subsystem (inserted between namespace and name).
        registry:  Prometheus registry to register the metrics with.
    """

    def __init__(
        self,
        *,
        namespace: str = "drng",
        subsystem: str = "core",
        registry=REGISTRY,
        eval_buckets: Iterable[float] = _VDF_EVAL_BUCKETS,
        verify_buckets: Iterable[float] = _VDF_VERIFY_BUCKETS,
    ) -> None:
        def _counter(name: str, doc: str) -> Counter:
            return Counter(
                name,
                doc,
                labelnames=("outcome",),
                namespace=namespace,
                subsystem=subsystem,
                registry=registry,
            )

        self.sessions_total = _counter(
            "sessions_total", "Number of sessions finished, labeled by outcome."
        )
        self.commits_total = _counter(
            "commits_total", "Number of node commitments processed, labeled by outcome."
        )
        self.reveals_total = _counter(
            "reveals_total", "Number of node reveals processed, labeled by outcome."
        )
        self.reconstructions_total = _counter(
            "reconstructions_total", "Threshold reconstruction attempts, labeled by outcome."
        )

        self.vdf_eval_seconds = Histogram(
            "vdf_eval_seconds",
            "Time spent evaluating and proving the VDF (seconds).",
            buckets=tuple(eval_buckets),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )
        self.vdf_verify_seconds = Histogram(
            "vdf_verify_seconds",
            "Time spent verifying VDF proofs (seconds).",
            buckets=tuple(verify_buckets),
            namespace=namespace,
            subsystem=subsystem,
            registry=registry,
        )

    # ----- Recording helpers -------------------------------------------------

    def record_session(self, outcome: str) -> None:
        self.sessions_total.labels(outcome=_pick(outcome, _SESSION_OUTCOMES, "aborted")).inc()

    def record_commit(self, outcome: str) -> None:
        self.commits_total.labels(outcome=_pick(outcome, _COMMIT_OUTCOMES, "unavailable")).inc()

    def record_reveal(self, outcome: str) -> None:
        self.reveals_total.labels(outcome=_pick(outcome, _REVEAL_OUTCOMES, "unavailable")).inc()

    def record_reconstruction(self, outcome: str) -> None:
        self.reconstructions_total.labels(
            outcome=_pick(outcome, _RECONSTRUCT_OUTCOMES, "mismatch")
        ).inc()

    # ----- Context managers --------------------------------------------------

    @contextmanager
    def vdf_eval_timer(self):
        """Time a sequential evaluation/proving block."""
        start = perf_counter()
        try:
            yield
        finally:
            self.vdf_eval_seconds.observe(perf_counter() - start)

    @contextmanager
    def vdf_verify_timer(self):
        """
        Time a VDF verification block.

            with METRICS.vdf_verify_timer():
                verify(...)
        """
        start = perf_counter()
        try:
            yield
        finally:
            self.vdf_verify_seconds.observe(perf_counter() - start)


# Singleton used by most components
METRICS = Metrics()

__all__ = [
    "Metrics",
    "METRICS",
]
