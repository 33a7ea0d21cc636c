from __future__ import annotations

import pytest

from drng.errors import (
    ContributionReusedError,
    InvalidParameterError,
    NodeUnavailableError,
    PhaseViolationError,
)
from drng.mpc.node import MPCNode, default_identity
from drng.types.core import SessionId, Share
from drng.utils.hash import keccak256, sha3_256

from .conftest import SeededEntropy


def _node(index: int = 1, **kw) -> MPCNode:
    return MPCNode(index, entropy=kw.pop("entropy", SeededEntropy(index)), session_id=SessionId(9), **kw)


def test_commitment_is_hash_of_contribution():
    n = _node()
    c = n.generate_contribution()
    n.mark_committed()
    v = n.reveal()
    assert len(v) == 32
    assert c == keccak256(v)
    assert n.commitment == c


def test_sha3_commitments_when_configured():
    n = _node(hash_fn="sha3_256")
    c = n.generate_contribution()
    n.mark_committed()
    assert c == sha3_256(n.reveal())


def test_contribution_generated_once():
    n = _node()
    n.generate_contribution()
    with pytest.raises(ContributionReusedError) as ei:
        n.generate_contribution()
    assert ei.value.node_id == 1


def test_reveal_before_commit_recorded_is_phase_violation():
    n = _node()
    with pytest.raises(PhaseViolationError):
        n.reveal()
    n.generate_contribution()
    with pytest.raises(PhaseViolationError):
        n.reveal()


def test_mark_committed_requires_contribution():
    with pytest.raises(PhaseViolationError):
        _node().mark_committed()


def test_single_share_per_session():
    n = _node(2)
    n.store_share(Share(x=2, y=11))
    assert n.get_share() == Share(x=2, y=11)
    with pytest.raises(PhaseViolationError):
        n.store_share(Share(x=2, y=12))


def test_share_index_must_match_node():
    with pytest.raises(InvalidParameterError):
        _node(2).store_share(Share(x=3, y=1))


def test_get_share_before_distribution():
    with pytest.raises(PhaseViolationError):
        _node().get_share()


def test_unavailable_node_refuses_everything():
    n = _node(4, available=False)
    with pytest.raises(NodeUnavailableError) as ei:
        n.generate_contribution()
    assert ei.value.node_id == 4 and ei.value.phase == "commit"
    with pytest.raises(NodeUnavailableError):
        n.store_share(Share(x=4, y=1))


def test_default_identity_is_deterministic_and_distinct():
    a = _node(1)
    b = _node(2)
    assert a.identity == default_identity(9, 1, keccak256)
    assert a.identity != b.identity
    assert _node(1, identity=b"custom").identity == b"custom"


def test_identity_does_not_enter_contribution():
    a = MPCNode(1, entropy=SeededEntropy(5), identity=b"x")
    b = MPCNode(1, entropy=SeededEntropy(5), identity=b"y")
    assert a.generate_contribution() == b.generate_contribution()


@pytest.mark.parametrize("index", [0, -1])
def test_index_must_be_positive(index):
    with pytest.raises(InvalidParameterError):
        MPCNode(index, entropy=SeededEntropy())


def test_short_entropy_rejected():
    class Short:
        def random_bytes(self, n: int) -> bytes:
            return b"\x00" * (n - 1)

    with pytest.raises(InvalidParameterError):
        MPCNode(1, entropy=Short()).generate_contribution()
