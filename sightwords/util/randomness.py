from __future__ import annotations

"""Randomness helpers for word selection and seeding."""

import os
import random
from typing import Optional

import numpy as np


def env_seed() -> Optional[int]:
    seed = os.environ.get("SEED")
    if seed is None:
        return None
    try:
        return int(seed)
    except ValueError:
        return None


def seed_if_needed() -> None:
    """Seed RNGs if SEED env var is set."""
    s = env_seed()
    if s is None:
        return
    random.seed(s)
    np.random.seed(s)


def make_rng(seed: Optional[int] = None) -> random.Random:
    """Independent RNG for question building; falls back to SEED, then OS entropy."""
    if seed is None:
        seed = env_seed()
    return random.Random(seed)
