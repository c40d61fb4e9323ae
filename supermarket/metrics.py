# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Collect and summarize KPIs: queue lengths, waits, service and idle times,
#   routing decisions and the end-of-run scalars per cashier / balancer / shop.
#
# Design notes:
#   - Keep side-effect methods (note_*) for instrumentation from the model;
#     the model reaches them through env.note so a run without metrics works.
#   - Samples are (t, value) vectors keyed by cashier index.
#   - Summaries return JSON-serializable dicts for easy tabulation.
#
# Usage:
#   M = Metrics(); env = Env(rng, metrics=M); ...; M.summary(env.t)
# -----------------------------------------------------------------------------

from __future__ import annotations
from collections import defaultdict
from typing import Any, Dict, List, Sequence, Tuple

Sample = Tuple[float, float]

class Metrics:
    def __init__(self):
        self.queue_length: Dict[int, List[Sample]] = defaultdict(list)
        self.waits: Dict[int, List[Sample]] = defaultdict(list)
        self.service_times: Dict[int, List[Sample]] = defaultdict(list)
        self.idle_times: Dict[int, List[Sample]] = defaultdict(list)
        self.sojourn_times: Dict[int, List[Sample]] = defaultdict(list)
        self.routing: List[Tuple[float, int, str]] = []
        self.inter_arrivals: List[Sample] = []
        self.customers_generated = 0
        self.departures = 0
        self.shop = None
        self.balancer = None
        self.cashiers: Sequence[Any] = ()

    def attach(self, shop, balancer, cashiers: Sequence[Any]):
        """Attach the model components whose end-of-run scalars we report."""
        self.shop = shop
        self.balancer = balancer
        self.cashiers = cashiers

    # -- samples --------------------------------------------------------------
    def note_queue_length(self, idx: int, length: int, t: float):
        self.queue_length[idx].append((t, length))

    def note_wait(self, idx: int, wait: float, t: float):
        self.waits[idx].append((t, wait))

    def note_service_time(self, idx: int, st: float, t: float):
        self.service_times[idx].append((t, st))

    def note_idle_time(self, idx: int, idle: float, t: float):
        self.idle_times[idx].append((t, idle))

    def note_routing(self, idx: int, strategy: str, t: float):
        self.routing.append((t, idx, strategy))

    def note_customer_generated(self, customer, t: float):
        self.customers_generated += 1

    def note_inter_arrival(self, gap: float, t: float):
        self.inter_arrivals.append((t, gap))

    def note_departure(self, idx: int, customer, t: float):
        self.departures += 1
        sojourn = t - customer.arrival_time
        self.sojourn_times[idx].append((t, sojourn))

    # -- derived --------------------------------------------------------------
    def time_avg_queue_length(self, idx: int, t_end: float) -> float:
        """Time-weighted mean of the queue-length vector over [0, t_end]."""
        samples = self.queue_length.get(idx, [])
        if t_end <= 0 or not samples:
            return 0.0
        area = 0.0
        prev_t, prev_len = 0.0, 0
        for t, length in samples:
            area += prev_len * (t - prev_t)
            prev_t, prev_len = t, length
        area += prev_len * (t_end - prev_t)
        return area / t_end

    @staticmethod
    def _values(vectors: Dict[int, List[Sample]]) -> List[float]:
        return [v for samples in vectors.values() for _, v in samples]

    def summary(self, t_end: float) -> Dict[str, Any]:
        cashiers = []
        for c in self.cashiers:
            row = c.summary(t_end)
            row["avg_queue_length"] = self.time_avg_queue_length(c.index, t_end)
            cashiers.append(row)
        waits = self._values(self.waits)
        sojourns = self._values(self.sojourn_times)
        served = sum(c.served for c in self.cashiers)
        mean_util = (
            sum(row["utilization_rate"] for row in cashiers) / len(cashiers)
            if cashiers else 0.0
        )
        gaps = [g for _, g in self.inter_arrivals]
        shop: Dict[str, Any] = self.shop.summary() if self.shop is not None else {
            "customers_generated": self.customers_generated,
        }
        shop["mean_inter_arrival_time"] = sum(gaps) / len(gaps) if gaps else 0.0
        return {
            "elapsed": t_end,
            "cashiers": cashiers,
            "balancer": self.balancer.summary() if self.balancer is not None else {},
            "shop": shop,
            "customers_served": served,
            "customers_departed": self.departures,
            "avg_waiting_time": sum(waits) / len(waits) if waits else 0.0,
            "max_waiting_time": max(waits) if waits else 0.0,
            "avg_sojourn_time": sum(sojourns) / len(sojourns) if sojourns else 0.0,
            "throughput": self.departures / t_end if t_end > 0 else 0.0,
            "mean_utilization": mean_util,
        }
