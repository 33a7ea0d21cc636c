from __future__ import annotations

import pytest

from drng.errors import InvalidParameterError, InvalidProofError, SeedCommitmentMismatchError
from drng.beacon.finalize import bind_session, final_randomness
from drng.types.core import SessionId
from drng.utils.bytes import int_to_fixed
from drng.utils.hash import keccak256, sha3_256
from drng.vdf.input_builder import proof_digest, proof_encoding, vdf_input_from_commitment

SEED = bytes(range(32))
COMMITMENT = keccak256(SEED)


def test_vdf_input_is_commitment_mod_n():
    assert vdf_input_from_commitment(COMMITMENT, 1000003) == int.from_bytes(COMMITMENT, "big") % 1000003
    with pytest.raises(InvalidParameterError):
        vdf_input_from_commitment(COMMITMENT[:31], 1000003)
    with pytest.raises(InvalidParameterError):
        vdf_input_from_commitment(COMMITMENT, 3)


def test_proof_encoding_and_digest():
    proof = [0xABC, 0x1, 0x0]
    assert proof_encoding(proof) == b"abc,1,0"
    assert proof_digest(proof) == keccak256(b"abc,1,0")
    assert proof_digest(proof, "sha3_256") == sha3_256(b"abc,1,0")


def test_final_randomness_hash_selection():
    y = b"\x01\x02"
    assert final_randomness(y, SEED) == keccak256(y + SEED)
    assert final_randomness(bytearray(y), memoryview(SEED), "sha3_256") == sha3_256(y + SEED)
    with pytest.raises(InvalidParameterError):
        final_randomness(y, SEED, "md5")


@pytest.fixture
def evaluated(small_vdf):
    x = vdf_input_from_commitment(COMMITMENT, small_vdf.N)
    return small_vdf.run(x)


def test_bind_produces_checked_output(small_vdf, evaluated):
    out = bind_session(COMMITMENT, SEED, evaluated.y, evaluated.proof, small_vdf, session_id=SessionId(4))
    width = small_vdf.params.modulus_bytes
    assert out.vdf_output == int_to_fixed(evaluated.y, width)
    assert out.final_randomness == keccak256(out.vdf_output + SEED)
    assert out.final_randomness == final_randomness(out.vdf_output, SEED)
    assert out.proof_digest == proof_digest(evaluated.proof)
    assert (out.modulus, out.iterations) == (small_vdf.N, small_vdf.T)


def test_bind_is_deterministic(small_vdf, evaluated):
    a = bind_session(COMMITMENT, SEED, evaluated.y, evaluated.proof, small_vdf)
    b = bind_session(COMMITMENT, SEED, evaluated.y, list(evaluated.proof), small_vdf)
    assert a == b


def test_y_as_bytes(small_vdf, evaluated):
    y_bytes = int_to_fixed(evaluated.y, small_vdf.params.modulus_bytes)
    a = bind_session(COMMITMENT, SEED, evaluated.y, evaluated.proof, small_vdf)
    b = bind_session(COMMITMENT, SEED, y_bytes, evaluated.proof, small_vdf)
    assert a.final_randomness == b.final_randomness


def test_seed_tamper_rejected(small_vdf, evaluated, metrics, registry):
    bad = bytes([SEED[0] ^ 0xFF]) + SEED[1:]
    with pytest.raises(SeedCommitmentMismatchError):
        bind_session(COMMITMENT, bad, evaluated.y, evaluated.proof, small_vdf, metrics=metrics)
    assert registry.get_sample_value("drng_core_sessions_total", {"outcome": "rejected"}) == 1


def test_proof_tamper_rejected(small_vdf, evaluated):
    with pytest.raises(InvalidProofError) as ei:
        bind_session(
            COMMITMENT, SEED, evaluated.y, evaluated.proof.replace(2, 12345), small_vdf,
            session_id=SessionId(8),
        )
    assert ei.value.reason == "verify-failed"
    assert ei.value.session_id == 8


def test_output_tamper_rejected(small_vdf, evaluated):
    with pytest.raises(InvalidProofError):
        bind_session(COMMITMENT, SEED, evaluated.y ^ 1, evaluated.proof, small_vdf)


def test_malformed_proof(small_vdf, evaluated):
    with pytest.raises(InvalidProofError) as ei:
        bind_session(COMMITMENT, SEED, evaluated.y, [-1] * 6, small_vdf)
    assert ei.value.reason.startswith("malformed-proof")


def test_proof_for_another_commitment_rejected(small_vdf):
    other_seed = b"\x01" * 32
    other = keccak256(other_seed)
    res = small_vdf.run(vdf_input_from_commitment(other, small_vdf.N))
    with pytest.raises(InvalidProofError):
        bind_session(COMMITMENT, SEED, res.y, res.proof, small_vdf)


def test_bad_inputs(small_vdf, evaluated):
    with pytest.raises(InvalidParameterError):
        bind_session(COMMITMENT[:16], SEED, evaluated.y, evaluated.proof, small_vdf)
    with pytest.raises(InvalidParameterError):
        bind_session(COMMITMENT, b"", evaluated.y, evaluated.proof, small_vdf)


def test_ledger_dict_is_fixed_width(small_vdf, evaluated):
    out = bind_session(COMMITMENT, SEED, evaluated.y, evaluated.proof, small_vdf, session_id=SessionId(11))
    d = out.as_ledger_dict()
    width = small_vdf.params.modulus_bytes
    assert d["sessionId"] == 11
    assert len(d["commitment"]) == 2 + 64
    assert len(d["seed"]) == 2 + 64
    assert len(d["vdfOutput"]) == 2 + 2 * width
    assert all(len(h) == 2 + 2 * width for h in d["vdfProof"])
    assert len(d["vdfProof"]) == small_vdf.params.proof_length
    assert d["modulusBits"] == 1025
