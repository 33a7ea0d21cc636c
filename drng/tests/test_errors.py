from __future__ import annotations

from contextlib import contextmanager

import pytest

from drng.errors import (
    CommitmentMismatchError,
    CommitmentReusedError,
    ContributionReusedError,
    DrngError,
    DuplicateShareError,
    InsufficientParticipationError,
    InvalidProofError,
    NodeUnavailableError,
    PhaseViolationError,
    ProtocolIntegrityError,
    SeedCommitmentMismatchError,
)

ERRORS = [
    CommitmentMismatchError(session_id=1, node_id=2, expected_commitment_hex="0xaa", got_commitment_hex="0xbb"),
    CommitmentReusedError(session_id=1, node_id=2, commitment_hex="0xaa"),
    ContributionReusedError(node_id=3),
    DuplicateShareError(x=4),
    SeedCommitmentMismatchError(expected_commitment_hex="0xaa", got_commitment_hex="0xbb"),
    InsufficientParticipationError(have=2, need=3),
    InvalidProofError(session_id=5, reason="verify-failed"),
    PhaseViolationError(current="init", attempted="combine_seed"),
    NodeUnavailableError(node_id=1, phase="commit", reason="phase timeout"),
]


@contextmanager
def _passthrough():
    yield


@pytest.mark.parametrize("err", ERRORS, ids=lambda e: type(e).__name__)
def test_error_leaves_generator_context_manager_intact(err):
    with pytest.raises(type(err)) as ei:
        with _passthrough():
            raise err
    assert ei.value is err
    assert ei.value.__traceback__ is not None


@pytest.mark.parametrize("err", ERRORS, ids=lambda e: type(e).__name__)
def test_error_leaves_metrics_timers_intact(err, metrics, registry):
    with pytest.raises(type(err)):
        with metrics.vdf_eval_timer():
            raise err
    with pytest.raises(type(err)):
        with metrics.vdf_verify_timer():
            raise err
    assert registry.get_sample_value("drng_core_vdf_eval_seconds_count") == 1
    assert registry.get_sample_value("drng_core_vdf_verify_seconds_count") == 1


def test_chained_cause_is_kept():
    with pytest.raises(InvalidProofError) as ei:
        try:
            raise ValueError("bad element")
        except ValueError as e:
            raise InvalidProofError(reason="malformed-proof") from e
    assert isinstance(ei.value.__cause__, ValueError)


def test_hierarchy():
    for err in ERRORS:
        assert isinstance(err, DrngError)
    assert isinstance(ERRORS[0], ProtocolIntegrityError)
    assert isinstance(ERRORS[4], ProtocolIntegrityError)
    assert not isinstance(ERRORS[5], ProtocolIntegrityError)


def test_errors_are_hashable_and_compared_by_identity():
    a = DuplicateShareError(x=1)
    b = DuplicateShareError(x=1)
    assert a != b
    assert len({a, b}) == 2
    assert "x=1" in str(a)
