"""
drng.beacon
-----------

Session binding and the end-to-end driver.

- finalize: bind_session / final_randomness
- pipeline: DrngSession / run_session
"""

from __future__ import annotations

from .finalize import bind_session, final_randomness
from .pipeline import DrngSession, run_session

__all__ = ["bind_session", "final_randomness", "DrngSession", "run_session"]
