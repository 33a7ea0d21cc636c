"""
Bind a finished seed session to its VDF evaluation and produce the final
randomness.

Acceptance rules (checked in this order):

1. ``hash(seed) == commitment``, otherwise the seed was tampered with after the
   commitment went public (:class:`SeedCommitmentMismatchError`).
2. ``verify(int(commitment) mod N, Y, proof)``, otherwise the delay proof is
   forged or belongs to another input (:class:`InvalidProofError`).

Only then is ``final_randomness = hash(Y_bytes || seed_bytes)`` computed, where
``Y_bytes`` is ``Y`` in fixed modulus-width big-endian form. The binder is a
pure function of its inputs: calling it twice yields identical outputs.
"""

from __future__ import annotations

import logging
from typing import Sequence, Union

from ..constants import DEFAULT_HASH, DIGEST_BYTES
from ..errors import InvalidParameterError, InvalidProofError, SeedCommitmentMismatchError
from ..metrics import METRICS, Metrics
from ..types.core import SessionId, SessionOutput, VDFProof
from ..utils.bytes import BytesLike, as_bytes, consteq, int_from_be, int_to_fixed, to_hex
from ..utils.hash import get_hasher, hash_concat
from ..vdf.input_builder import proof_digest, vdf_input_from_commitment
from ..vdf.pietrzak import PietrzakVDF

logger = logging.getLogger(__name__)


def final_randomness(y_bytes: BytesLike, seed: BytesLike, hash_fn: str = DEFAULT_HASH) -> bytes:
    """hash(Y_bytes || seed)."""
    return hash_concat([as_bytes(y_bytes), as_bytes(seed)], hash_fn)


def bind_session(
    commitment: BytesLike,
    seed: BytesLike,
    y: Union[int, BytesLike],
    proof: Union[VDFProof, Sequence[int]],
    vdf: PietrzakVDF,
    *,
    session_id: SessionId = SessionId(0),
    hash_fn: str = DEFAULT_HASH,
    metrics: Metrics = METRICS,
) -> SessionOutput:
    """
    Check seed and delay proof against the commitment, then derive the final
    randomness.

    ``y`` may be an int or its big-endian bytes.
    """
    commitment = as_bytes(commitment)
    seed = as_bytes(seed)
    if len(commitment) != DIGEST_BYTES:
        raise InvalidParameterError(f"commitment must be {DIGEST_BYTES} bytes")
    if not seed:
        raise InvalidParameterError("seed must be non-empty")

    got = get_hasher(hash_fn)(seed)
    if not consteq(got, commitment):
        metrics.record_session("rejected")
        logger.warning("session %s: seed does not hash to the published commitment", session_id)
        raise SeedCommitmentMismatchError(
            expected_commitment_hex=to_hex(commitment),
            got_commitment_hex=to_hex(got),
        )

    y_int = y if isinstance(y, int) else int_from_be(y)
    if not isinstance(proof, VDFProof):
        try:
            proof = VDFProof(tuple(proof))
        except (TypeError, ValueError) as e:
            metrics.record_session("rejected")
            raise InvalidProofError(session_id=int(session_id), reason=f"malformed-proof: {e}") from e

    x = vdf_input_from_commitment(commitment, vdf.N)
    if not vdf.verify(x, y_int, proof):
        metrics.record_session("rejected")
        logger.warning("session %s: VDF proof rejected", session_id)
        raise InvalidProofError(session_id=int(session_id), reason="verify-failed")

    y_bytes = int_to_fixed(y_int, vdf.params.modulus_bytes)
    out = SessionOutput(
        session_id=session_id,
        commitment=commitment,
        seed=seed,
        vdf_output=y_bytes,
        proof=proof,
        proof_digest=proof_digest(proof, hash_fn),
        final_randomness=final_randomness(y_bytes, seed, hash_fn),
        modulus=vdf.N,
        iterations=vdf.T,
    )
    logger.info(
        "session %s: bound, final randomness %s",
        session_id, out.final_randomness.hex(),
    )
    return out


__all__ = ["final_randomness", "bind_session"]
