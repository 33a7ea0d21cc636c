"""
drng.vdf.params
===============

Profiles and helpers for configuring the Pietrzak VDF (time-delay) parameters.

What lives here
---------------
- A frozen :class:`VDFParams` dataclass capturing the RSA modulus ``N``, the
  time parameter ``T`` (number of sequential squarings) and the Fiat-Shamir
  challenge width.
- Two built-in profiles:
    * ``demo``     product of the primes ``2^512 + 75`` and ``2^512 + 145``.
                   Fast, but its factorization is public, so anyone can
                   shortcut the delay. Local runs and tests only.
    * ``rsa2048``  the RSA Factoring Challenge number RSA-2048, whose
                   factorization is unknown.
- :func:`get_params` / :func:`from_dict` / :func:`params_from_config` to
  resolve profiles with overrides.

Notes
-----
- ``T`` must be a power of two ``>= 2`` so the halving proof terminates at
  ``T = 1`` with exactly ``log2(T)`` proof elements.
- The factorization is never held here; ``factorization_known`` is metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Dict, Optional

from ..config import VDFConfig
from ..constants import (
    CHALLENGE_BITS,
    DEFAULT_VDF_ITERATIONS,
    VDF_RECOMMENDED_MODULUS_BITS,
)
from ..errors import InvalidParameterError
from ..utils.bytes import byte_width


def is_power_of_two(n: int) -> bool:
    return isinstance(n, int) and n >= 1 and (n & (n - 1)) == 0


@dataclass(frozen=True)
class VDFParams:
    """Container for VDF configuration."""
    name: str
    modulus: int
    iterations: int = DEFAULT_VDF_ITERATIONS
    challenge_bits: int = CHALLENGE_BITS
    factorization_known: bool = False
    description: str = ""

    def __post_init__(self) -> None:
        self.validate()

    @property
    def modulus_bits(self) -> int:
        return self.modulus.bit_length()

    @property
    def modulus_bytes(self) -> int:
        """Fixed width of group elements (Y and proof values) in bytes."""
        return byte_width(self.modulus)

    @property
    def proof_length(self) -> int:
        return self.iterations.bit_length() - 1

    @property
    def is_production_safe(self) -> bool:
        return not self.factorization_known and self.modulus_bits >= VDF_RECOMMENDED_MODULUS_BITS

    def validate(self) -> None:
        """Basic sanity checks to catch obvious misconfigurations early."""
        if not isinstance(self.modulus, int) or self.modulus <= 3 or self.modulus % 2 == 0:
            raise InvalidParameterError("VDF modulus must be an odd integer > 3")
        if not is_power_of_two(self.iterations) or self.iterations < 2:
            raise InvalidParameterError(
                f"VDF iterations must be a power of two >= 2 (got {self.iterations!r})"
            )
        if not (8 <= self.challenge_bits <= 256):
            raise InvalidParameterError("challenge_bits must be between 8 and 256")

    def with_iterations(self, iterations: int) -> "VDFParams":
        return replace(self, iterations=iterations)


# ---------------------------------------------------------------------------
# Built-in moduli
# ---------------------------------------------------------------------------

# (2^512 + 75) * (2^512 + 145). Both factors are published. DO NOT USE IN PRODUCTION.
_DEMO_P = (1 << 512) + 75
_DEMO_Q = (1 << 512) + 145
_DEMO_MODULUS = _DEMO_P * _DEMO_Q
del _DEMO_P, _DEMO_Q

# RSA-2048 from the RSA Factoring Challenge (decimal).
_RSA2048_MODULUS = int(
    "25195908475657893494027183240048398571429282126204032027777137836043"
    "66202070759555626401852588078440691829064124951508218929855914917618"
    "45028084891200728449926873928072877767359714183472702618963750149718"
    "24691165077613379859095700097330459748808428401797429100642458691817"
    "19511874612151517265463228221686998754918242243363725908514186546204"
    "35767984233871847744479207399342365848238242811981638150106748104516"
    "60377306056201619676256133844143603833904414952634432190114657544454"
    "17842402092461651572335077870774981712577246796292638635637328991215"
    "48314381678998850404453640235273819513786365643912120103971228221207"
    "20357"
)


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

DEMO = VDFParams(
    name="demo",
    modulus=_DEMO_MODULUS,
    iterations=DEFAULT_VDF_ITERATIONS,
    factorization_known=True,
    description="1025-bit modulus with a public factorization; local runs only.",
)

RSA2048 = VDFParams(
    name="rsa2048",
    modulus=_RSA2048_MODULUS,
    iterations=DEFAULT_VDF_ITERATIONS,
    description="RSA-2048 challenge number (factorization unknown).",
)

DEFAULT_PROFILES: Dict[str, VDFParams] = {
    DEMO.name: DEMO,
    RSA2048.name: RSA2048,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def profile_names() -> list[str]:
    """Return available profile names."""
    return sorted(DEFAULT_PROFILES.keys())


def get_params(
    profile: str = DEMO.name,
    *,
    iterations: Optional[int] = None,
    modulus_hex: Optional[str] = None,
    challenge_bits: Optional[int] = None,
    require_production: bool = False,
) -> VDFParams:
    """
    Resolve a profile by name and apply overrides.

    ``profile="custom"`` requires ``modulus_hex``; a custom modulus is assumed
    to have an unknown factorization.
    """
    if profile == "custom":
        if not modulus_hex:
            raise InvalidParameterError("custom VDF profile requires modulus_hex")
        base = VDFParams(name="custom", modulus=_parse_modulus(modulus_hex))
    else:
        try:
            base = DEFAULT_PROFILES[profile]
        except KeyError:
            raise InvalidParameterError(
                f"unknown VDF profile {profile!r}; expected one of {profile_names()} or 'custom'"
            ) from None
        if modulus_hex:
            base = replace(base, name="custom", modulus=_parse_modulus(modulus_hex),
                           factorization_known=False, description="")

    params = replace(
        base,
        iterations=base.iterations if iterations is None else int(iterations),
        challenge_bits=base.challenge_bits if challenge_bits is None else int(challenge_bits),
    )
    if require_production and not params.is_production_safe:
        raise InvalidParameterError(
            f"VDF profile {params.name!r} is not production safe "
            f"({params.modulus_bits}-bit modulus, factorization_known={params.factorization_known})"
        )
    return params


def from_dict(d: dict) -> VDFParams:
    """
    Construct :class:`VDFParams` from a plain dict (e.g., parsed YAML/JSON)
    with keys ``profile``, ``iterations``, ``modulus_hex``, ``challenge_bits``.
    """
    return get_params(
        d.get("profile", d.get("name", DEMO.name)),
        iterations=d.get("iterations"),
        modulus_hex=d.get("modulus_hex"),
        challenge_bits=d.get("challenge_bits"),
    )


def params_from_config(cfg: VDFConfig, *, require_production: bool = False) -> VDFParams:
    return get_params(
        cfg.profile,
        iterations=cfg.iterations,
        modulus_hex=cfg.modulus_hex,
        challenge_bits=cfg.challenge_bits,
        require_production=require_production,
    )


def _parse_modulus(modulus_hex: str) -> int:
    s = modulus_hex.strip()
    if s.startswith(("0x", "0X")):
        s = s[2:]
    try:
        return int(s, 16)
    except ValueError as e:
        raise InvalidParameterError(f"modulus_hex is not hex: {modulus_hex!r}") from e


__all__ = [
    "VDFParams",
    "DEMO",
    "RSA2048",
    "DEFAULT_PROFILES",
    "is_power_of_two",
    "profile_names",
    "get_params",
    "from_dict",
    "params_from_config",
]
