# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# arrivals.py
# -----------------------------------------------------------------------------
# Purpose:
#   Generate exogenous arrivals: a Poisson stream of customers, each with a
#   basket size drawn uniformly from [items_min, items_max].
#
# Design notes:
#   - Arrivals are generated one at a time: every ARRIVAL event creates a
#     customer and schedules the next ARRIVAL, so the stream never ends on
#     its own; the run's end time bounds it.
#   - The first arrival is placed lead_in after start so no customer shows up
#     at exactly t=0.
#
# Usage:
#   shop = Shop(balancer, arrival_interval=5.0)
#   shop.start(env)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import Any, Dict, Optional

from .entities import Customer
from .errors import ConfigurationError
from .queues import Env, Event, EventKind

log = logging.getLogger(__name__)


class Shop:
    """Customer source feeding the balancer.

    Parameters
    ----------
    balancer : object
        Anything with ``route(env, customer)``.
    arrival_interval : float
        Mean of the exponential inter-arrival time, > 0.
    items_min, items_max : int
        Inclusive bounds of the basket size.
    lead_in : float
        Delay before the first arrival, > 0.
    """
    def __init__(self, balancer, arrival_interval: float, items_min: int = 1,
                 items_max: int = 25, lead_in: float = 0.1):
        if arrival_interval is None or not arrival_interval > 0:
            raise ConfigurationError(f"arrival_interval must be > 0, got {arrival_interval!r}")
        for name, bound in (("items_min", items_min), ("items_max", items_max)):
            if isinstance(bound, bool) or not isinstance(bound, int):
                raise ConfigurationError(f"{name} must be an integer, got {bound!r}")
        if items_min < 1 or items_max < items_min:
            raise ConfigurationError(f"invalid basket size bounds [{items_min}, {items_max}]")
        if not lead_in > 0:
            raise ConfigurationError(f"lead_in must be > 0, got {lead_in!r}")
        self.balancer = balancer
        self.arrival_interval = float(arrival_interval)
        self.items_min = items_min
        self.items_max = items_max
        self.lead_in = float(lead_in)
        self.next_cid = 1
        self.generated = 0
        self._next: Optional[Event] = None

    def start(self, env: Env) -> Event:
        log.info("Shop started: mean arrival interval %.3f, first customer at t=%.3f",
                 self.arrival_interval, env.t + self.lead_in)
        self._next = env.schedule(env.t + self.lead_in, EventKind.ARRIVAL, {"shop": self})
        return self._next

    def stop(self, env: Env) -> bool:
        """Cancel the pending arrival so the FEL can drain."""
        ev, self._next = self._next, None
        return env.cancel(ev) if ev is not None else False

    def make_customer(self, env: Env) -> Customer:
        customer = Customer(
            cid=self.next_cid,
            items=env.rng.uniform_int(self.items_min, self.items_max),
            arrival_time=env.t,
        )
        self.next_cid += 1
        self.generated += 1
        return customer

    def on_arrival(self, env: Env):
        customer = self.make_customer(env)
        log.debug("Shop generates customer %d with %d items at t=%.3f",
                  customer.cid, customer.items, env.t)
        env.note("note_customer_generated", customer, env.t)
        self.balancer.route(env, customer)
        gap = env.rng.exponential(self.arrival_interval)
        env.note("note_inter_arrival", gap, env.t)
        self._next = env.schedule(env.t + gap, EventKind.ARRIVAL, {"shop": self})

    def summary(self) -> Dict[str, Any]:
        return {"customers_generated": self.generated}
