from __future__ import annotations

import random
from typing import Callable, List

import pytest
from prometheus_client import CollectorRegistry

from drng.config import DrngConfig, VDFConfig
from drng.metrics import Metrics
from drng.mpc import MPCCoordinator, MPCNode
from drng.types.core import SessionId
from drng.vdf.params import VDFParams, get_params
from drng.vdf.pietrzak import PietrzakVDF

SMALL_T = 64


class SeededEntropy:
    """Deterministic entropy for reproducible tests (NOT cryptographic)."""

    def __init__(self, seed: int = 0) -> None:
        self._rng = random.Random(seed)

    def random_bytes(self, n: int) -> bytes:
        return self._rng.getrandbits(8 * n).to_bytes(n, "big") if n else b""


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def entropy() -> SeededEntropy:
    return SeededEntropy(1234)


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def metrics(registry: CollectorRegistry) -> Metrics:
    return Metrics(registry=registry)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def small_params() -> VDFParams:
    return get_params("demo", iterations=SMALL_T)


@pytest.fixture
def small_vdf(small_params: VDFParams, metrics: Metrics) -> PietrzakVDF:
    return PietrzakVDF(small_params, metrics=metrics)


@pytest.fixture
def small_config() -> DrngConfig:
    return DrngConfig(nodes=5, threshold=3, vdf=VDFConfig(profile="demo", iterations=SMALL_T))


@pytest.fixture
def make_nodes(entropy: SeededEntropy) -> Callable[..., List[MPCNode]]:
    def _make(n: int = 5, session_id: int = 7) -> List[MPCNode]:
        return [MPCNode(i, entropy=entropy, session_id=SessionId(session_id)) for i in range(1, n + 1)]

    return _make


@pytest.fixture
def make_coordinator(
    make_nodes: Callable[..., List[MPCNode]],
    entropy: SeededEntropy,
    metrics: Metrics,
    clock: FakeClock,
) -> Callable[..., MPCCoordinator]:
    def _make(n: int = 5, t: int = 3, **kw) -> MPCCoordinator:
        nodes = kw.pop("nodes", None) or make_nodes(n)
        return MPCCoordinator(
            nodes,
            t,
            entropy=entropy,
            session_id=SessionId(7),
            clock=clock,
            metrics=metrics,
            **kw,
        )

    return _make
