"""Shared fixtures: deterministic random sources and a small config."""

from __future__ import annotations
import itertools

import pytest


class StubRng:
    """Deterministic stand-in for RandomSource.

    ``reals``, ``ints`` and ``gaps`` are cycled; every call is recorded so
    tests can check the parameters the model asked for.
    """

    def __init__(self, reals=(1.0,), ints=None, gaps=(1.0,)):
        self._reals = itertools.cycle(reals)
        self._ints = itertools.cycle(ints) if ints else None
        self._gaps = itertools.cycle(gaps)
        self.calls = []

    def uniform_real(self, lo, hi):
        self.calls.append(("uniform_real", lo, hi))
        return next(self._reals)

    def uniform_int(self, lo, hi):
        self.calls.append(("uniform_int", lo, hi))
        return next(self._ints) if self._ints else lo

    def exponential(self, mean):
        self.calls.append(("exponential", mean))
        return next(self._gaps)


@pytest.fixture
def stub_rng():
    return StubRng


@pytest.fixture
def small_cfg():
    return {
        "sim": {"seed": 7, "end_time": 600.0},
        "shop": {"arrival_interval": 8.0, "items_min": 1, "items_max": 25, "lead_in": 0.1},
        "balancer": {"strategy": "round_robin"},
        "cashiers": {"count": 3, "item_time_min": 0.5, "item_time_max": 2.0},
    }
