# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# network.py
# -----------------------------------------------------------------------------
# Purpose:
#   Balancer and network wiring. Receives every customer from the shop, picks
#   one cashier with the configured strategy and hands the customer over in
#   the same event (no transfer delay).
#
# Design notes:
#   - The strategy is fixed for the whole run.
#   - assigned / queue_lengths are the balancer's own bookkeeping; cashiers
#     never report completions back, so both only grow. They are reported
#     separately because they are separate figures in the end-of-run summary.
#
# Usage:
#   balancer = Balancer("shortest_queue", cashiers)
#   shop = Shop(balancer, arrival_interval=5.0)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import Any, Dict, List, Sequence

from .entities import Customer
from .errors import ConfigurationError
from . import policies

log = logging.getLogger(__name__)


class Balancer:
    def __init__(self, strategy, cashiers: Sequence[Any]):
        if not cashiers:
            raise ConfigurationError("balancer needs at least one cashier")
        self.strategy = policies.normalize_strategy(strategy)
        self.label = policies.LABELS[self.strategy]
        self.cashiers = list(cashiers)
        self.n = len(self.cashiers)
        self.rr_counter = 0
        self.assigned: List[int] = [0] * self.n
        self.queue_lengths: List[int] = [0] * self.n
        self.forwarded = 0
        log.info("Balancer initialized with %d cashiers and strategy: %s", self.n, self.label)

    def select(self, env) -> int:
        if self.strategy == policies.ROUND_ROBIN:
            idx = policies.round_robin(self.rr_counter, self.n)
            self.rr_counter += 1
        elif self.strategy == policies.SHORTEST_QUEUE:
            idx = policies.shortest_queue(self.queue_lengths)
        elif self.strategy == policies.RANDOM:
            idx = policies.random_pick(env.rng, self.n)
        elif self.strategy == policies.SHORTEST_LIVE_QUEUE:
            idx = policies.shortest_live_queue(self.cashiers)
        else:
            raise ConfigurationError(f"unknown dispatch strategy: {self.strategy!r}")
        return idx

    def route(self, env, customer: Customer) -> int:
        idx = self.select(env)
        customer.cashier = idx
        self.queue_lengths[idx] += 1
        self.assigned[idx] += 1
        self.forwarded += 1
        log.debug("Balancer forwards customer %d to cashier %d (strategy: %s)",
                  customer.cid, idx, self.label)
        env.note("note_routing", idx, self.label, env.t)
        self.cashiers[idx].arrive(env, customer)
        return idx

    def balancing_efficiency(self) -> float:
        return policies.balancing_efficiency(self.assigned)

    def summary(self) -> Dict[str, Any]:
        return {
            "strategy": self.strategy,
            "customers_forwarded": self.forwarded,
            "assignments": list(self.assigned),
            "final_queue_lengths": list(self.queue_lengths),
            "balancing_efficiency": self.balancing_efficiency(),
        }
