"""
drng.tests
----------
Test package initializer for the randomness core.

Notes:
- Tests use the demo VDF modulus (public factorization) and small time
  parameters; they MUST NOT be read as production parameters.
- Hypothesis profiles: HYPOTHESIS_PROFILE=dev|ci (default "ci" when the CI env
  var is set, "dev" otherwise).
"""

from __future__ import annotations

import os

from hypothesis import HealthCheck, settings

settings.register_profile(
    "dev",
    max_examples=50,
    deadline=None,
    suppress_health_check=(HealthCheck.too_slow,),
)
settings.register_profile(
    "ci",
    max_examples=150,
    deadline=None,
    derandomize=True,
    suppress_health_check=(HealthCheck.too_slow,),
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if os.getenv("CI") else "dev"))

__all__: tuple[str, ...] = ()
