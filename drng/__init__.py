"""
drng: distributed randomness core.

Threshold commit-reveal seed generation (Shamir secret sharing over a prime
field) combined with a Pietrzak verifiable delay function. The package is a
pure computation and protocol-state library: ledgers, relays and wallets are
external collaborators that persist and move the values produced here.

Only light, stable exports are surfaced here to avoid import cycles.
"""

from __future__ import annotations

from .version import __version__

__all__ = ["__version__"]
