"""
drng.vdf.pietrzak
=================

Pietrzak verifiable delay function over an RSA group.

Evaluation is ``T`` sequential squarings, ``y = x^(2^T) mod N``. The proof is
the non-interactive (Fiat-Shamir) form of Pietrzak's halving protocol: for
``τ = T, T/2, ..., 2`` the prover publishes the midpoint
``μ = x^(2^(τ/2))``, both sides derive a challenge ``r`` from
``(x, y, μ, N)`` and fold the claim ``y = x^(2^τ)`` into the half-size
claim

    x' = x^r · μ,   y' = μ^r · y,   τ' = τ / 2

until ``τ = 1``, where the verifier checks ``x'^2 == y'`` directly. The proof
therefore has ``log2(T)`` elements and verification costs ``O(log T)``
exponentiations with ``challenge_bits``-sized exponents.

Key functions
-------------
- :func:`evaluate`:   y = x^(2^T) mod N by repeated squaring
- :func:`prove`:      halving proof for (x, y)
- :func:`verify`:     replay the halving; never raises on a bad proof
- :func:`challenge`:  Fiat-Shamir challenge
- :class:`PietrzakVDF`: wrapper bound to :class:`~drng.vdf.params.VDFParams`

Challenge encoding
------------------
``r`` is the leading ``challenge_bits`` of SHA-256 over the ASCII string
``"{x:x}:{y:x}:{μ:x}:{N:x}"`` (lowercase hex, no prefix, no padding), so
proofs interoperate with existing verifier tooling.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Sequence

from ..constants import CHALLENGE_BITS
from ..metrics import METRICS, Metrics
from ..types.core import VDFProof, VDFResult
from .params import VDFParams

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

def challenge(x: int, y: int, mu: int, N: int, bits: int = CHALLENGE_BITS) -> int:
    """Fiat-Shamir challenge r = leading ``bits`` of SHA-256("x:y:μ:N")."""
    data = f"{x:x}:{y:x}:{mu:x}:{N:x}".encode("ascii")
    digest = hashlib.sha256(data).digest()
    return int.from_bytes(digest, "big") >> (256 - bits)


def _square_times(v: int, k: int, N: int) -> int:
    for _ in range(k):
        v = (v * v) % N
    return v


def evaluate(x: int, T: int, N: int) -> int:
    """
    Compute y = x^(2^T) mod N via repeated squaring. O(T) squarings.

    No shortcut exists without the factorization of N.
    """
    return _square_times(x % N, T, N)


def prove(x: int, y: int, T: int, N: int, *, challenge_bits: int = CHALLENGE_BITS) -> VDFProof:
    """
    Produce the halving proof for ``y = x^(2^T) mod N``.

    ``T`` must be a power of two; the proof has exactly ``log2(T)`` elements.
    """
    cur_x, cur_y = x % N, y % N
    tau = T
    elements: list[int] = []
    while tau >= 2:
        half = tau // 2
        mu = _square_times(cur_x, half, N)
        elements.append(mu)
        r = challenge(cur_x, cur_y, mu, N, challenge_bits)
        cur_x = (pow(cur_x, r, N) * mu) % N
        cur_y = (pow(mu, r, N) * cur_y) % N
        tau = half
    return VDFProof(tuple(elements))


def verify(
    x: int,
    y: int,
    proof: Sequence[int],
    T: int,
    N: int,
    *,
    challenge_bits: int = CHALLENGE_BITS,
) -> bool:
    """
    Check that ``proof`` shows ``y = x^(2^T) mod N``.

    Returns ``False`` for a wrong-length proof, any element outside
    ``[0, N)``, an output outside ``[0, N)`` or a failed final check.
    """
    try:
        elements = list(proof)
    except TypeError:
        return False
    if T < 2 or T & (T - 1):
        return False
    if len(elements) != T.bit_length() - 1:
        return False
    if not isinstance(y, int) or not (0 <= y < N):
        return False

    cur_x, cur_y = x % N, y
    for mu in elements:
        if not isinstance(mu, int) or not (0 <= mu < N):
            return False
        r = challenge(cur_x, cur_y, mu, N, challenge_bits)
        cur_x = (pow(cur_x, r, N) * mu) % N
        cur_y = (pow(mu, r, N) * cur_y) % N

    return (cur_x * cur_x) % N == cur_y


# ---------------------------------------------------------------------------
# Wrapper
# ---------------------------------------------------------------------------

class PietrzakVDF:
    """
    VDF bound to one parameter set.

        vdf = PietrzakVDF(get_params("demo", iterations=1024))
        res = vdf.run(x)
        assert vdf.verify(res.x, res.y, res.proof)
    """

    __slots__ = ("params", "_metrics")

    def __init__(self, params: VDFParams, *, metrics: Metrics = METRICS) -> None:
        params.validate()
        self.params = params
        self._metrics = metrics
        if params.factorization_known:
            logger.warning(
                "VDF profile %r uses a modulus with a published factorization; "
                "outputs are NOT delay-secure",
                params.name,
            )

    @property
    def N(self) -> int:
        return self.params.modulus

    @property
    def T(self) -> int:
        return self.params.iterations

    def evaluate(self, x: int) -> int:
        return evaluate(x, self.T, self.N)

    def prove(self, x: int, y: int) -> VDFProof:
        return prove(x, y, self.T, self.N, challenge_bits=self.params.challenge_bits)

    def verify(self, x: int, y: int, proof: Sequence[int]) -> bool:
        with self._metrics.vdf_verify_timer():
            ok = verify(x, y, proof, self.T, self.N, challenge_bits=self.params.challenge_bits)
        if not ok:
            logger.debug("VDF proof rejected (T=%d, %d-bit N)", self.T, self.params.modulus_bits)
        return ok

    def run(self, x: int) -> VDFResult:
        """Evaluate and prove in one go."""
        x = x % self.N
        with self._metrics.vdf_eval_timer():
            y = self.evaluate(x)
            proof = self.prove(x, y)
        logger.debug("VDF evaluated: T=%d proof_len=%d", self.T, len(proof))
        return VDFResult(x=x, y=y, proof=proof, iterations=self.T, modulus=self.N)

    def __repr__(self) -> str:
        return f"PietrzakVDF(profile={self.params.name!r}, T={self.T}, bits={self.params.modulus_bits})"


__all__ = [
    "challenge",
    "evaluate",
    "prove",
    "verify",
    "PietrzakVDF",
]
