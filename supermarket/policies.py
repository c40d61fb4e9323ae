# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Dispatch strategies used by the balancer to pick a cashier, plus the
#   balancing-efficiency figure reported at the end of a run.
#
# Design notes:
#   - Keep pure functions to ease testing (state -> decision).
#   - shortest_queue looks at the balancer's own assignment counters; the
#     balancer is never told about service completions, so these counters
#     only grow. shortest_live_queue is the opt-in variant that reads the
#     cashiers' actual load instead.
#   - Ties always go to the lowest index.
#
# Usage:
#   from supermarket.policies import normalize_strategy, shortest_queue
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Sequence

from .errors import ConfigurationError

ROUND_ROBIN = "round_robin"
SHORTEST_QUEUE = "shortest_queue"
RANDOM = "random"
SHORTEST_LIVE_QUEUE = "shortest_live_queue"

STRATEGIES = (ROUND_ROBIN, SHORTEST_QUEUE, RANDOM, SHORTEST_LIVE_QUEUE)

LABELS = {
    ROUND_ROBIN: "Round Robin",
    SHORTEST_QUEUE: "Shortest Queue",
    RANDOM: "Random",
    SHORTEST_LIVE_QUEUE: "Shortest Live Queue",
}

# Integer codes used by older configs: 0 round robin, 1 shortest queue, 2 random
_CODES = {0: ROUND_ROBIN, 1: SHORTEST_QUEUE, 2: RANDOM}


def normalize_strategy(name) -> str:
    """Map a configured strategy (name, CamelCase alias or int code) to its key."""
    if isinstance(name, bool):
        raise ConfigurationError(f"unknown dispatch strategy: {name!r}")
    if isinstance(name, int):
        if name in _CODES:
            return _CODES[name]
        raise ConfigurationError(f"unknown dispatch strategy code: {name}")
    if not isinstance(name, str):
        raise ConfigurationError(f"unknown dispatch strategy: {name!r}")
    key = name.strip()
    if key.isdigit():
        return normalize_strategy(int(key))
    flat = key.replace("_", "").replace("-", "").replace(" ", "").lower()
    for strategy in STRATEGIES:
        if strategy.replace("_", "") == flat:
            return strategy
    raise ConfigurationError(f"unknown dispatch strategy: {name!r}")


def first_minimum(values: Sequence[int]) -> int:
    """Index of the smallest value; the first one wins on ties."""
    best = 0
    for i in range(1, len(values)):
        if values[i] < values[best]:
            best = i
    return best


def round_robin(counter: int, n: int) -> int:
    return counter % n


def shortest_queue(assigned: Sequence[int]) -> int:
    return first_minimum(assigned)


def random_pick(rng, n: int) -> int:
    return rng.uniform_int(0, n - 1)


def shortest_live_queue(cashiers) -> int:
    return first_minimum([c.load() for c in cashiers])


def balancing_efficiency(counts: Sequence[int]) -> float:
    """min/max of the per-cashier assignment counts, as a percentage.

    Returns 100 when nothing has been assigned yet (max is 0).
    """
    if not counts:
        return 100.0
    hi = max(counts)
    if hi <= 0:
        return 100.0
    return min(counts) / hi * 100.0
