# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# rng.py
# -----------------------------------------------------------------------------
# Purpose:
#   Seeded random source injected into the simulation context.
#
# Design notes:
#   - Each simulation owns its own random.Random so several runs can share a
#     process without touching the module-level generator.
#   - Anything exposing uniform_real/uniform_int/exponential can stand in
#     (tests swap in deterministic stubs).
#
# Usage:
#   rng = RandomSource(seed=42)
#   env = Env(rng=rng)
# -----------------------------------------------------------------------------

from __future__ import annotations
import random
from typing import Optional


class RandomSource:
    """Uniform reals, inclusive uniform integers and exponential samples."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._r = random.Random(seed)

    def uniform_real(self, lo: float, hi: float) -> float:
        return self._r.uniform(lo, hi)

    def uniform_int(self, lo: int, hi: int) -> int:
        # both bounds inclusive
        return self._r.randint(lo, hi)

    def exponential(self, mean: float) -> float:
        """Exponential draw parameterised by its mean (not its rate)."""
        return self._r.expovariate(1.0 / mean)
