from __future__ import annotations

"""Randomness helpers for seeding the question selector."""

import os
import random
from typing import Optional


def seed_from_env(var: str = "SEED") -> Optional[int]:
    """Return the integer in ``$SEED`` if set and valid."""
    seed = os.environ.get(var)
    if seed is None:
        return None
    try:
        return int(seed)
    except ValueError:
        print(f"WARNING: Ignoring non-integer {var}={seed!r}.")
        return None


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Generator for one quiz session; seeded from ``$SEED`` when no seed is given."""
    if seed is None:
        seed = seed_from_env()
    return random.Random(seed)
