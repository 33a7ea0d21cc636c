"""
drng.vdf
--------

Pietrzak verifiable delay function.

Modules:
- params:         VDFParams and the built-in demo / rsa2048 profiles
- pietrzak:       evaluate / prove / verify and the PietrzakVDF wrapper
- input_builder:  commitment → VDF input, proof digest
- worker:         off-thread evaluation with drop-on-abort

Convenience re-exports are provided below.
"""

from __future__ import annotations

from .input_builder import proof_digest, proof_encoding, vdf_input_from_commitment
from .params import DEMO, RSA2048, VDFParams, get_params, params_from_config
from .pietrzak import PietrzakVDF, challenge, evaluate, prove, verify
from .worker import VDFWorker

__all__ = [
    "VDFParams",
    "DEMO",
    "RSA2048",
    "get_params",
    "params_from_config",
    "PietrzakVDF",
    "challenge",
    "evaluate",
    "prove",
    "verify",
    "vdf_input_from_commitment",
    "proof_digest",
    "proof_encoding",
    "VDFWorker",
]
