# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# queues.py
# -----------------------------------------------------------------------------
# Purpose:
#   Discrete-event primitives: Event, EventKind, Env (clock + FEL + context)
#   and the Cashier, a single-channel FIFO server with busy/idle accounting.
#
# Design notes:
#   - FEL entries are ordered by (t, seq); seq is assigned by Env.schedule so
#     simultaneous events fire in the order they were scheduled.
#   - Cancellation is lazy: a cancelled event stays in the heap and is dropped
#     when it reaches the head, without touching the clock.
#   - Env is the explicit simulation context: process models receive it on
#     every callback and reach the random source (env.rng) and the metrics
#     sink (env.M) through it. There is no module-level state.
#   - Service time is one Uniform(lo, hi) draw per basket item, summed.
#
# Usage:
#   from supermarket.queues import Env, EventKind, Cashier
# -----------------------------------------------------------------------------

from __future__ import annotations
import heapq, itertools, logging, math
from collections import deque
from enum import Enum
from typing import Any, Deque, Dict, List, Optional, Tuple

from .entities import Customer
from .errors import ConfigurationError, InvalidScheduleError, UnknownEventError
from .rng import RandomSource

log = logging.getLogger(__name__)

PENDING, CANCELLED, FIRED = "pending", "cancelled", "fired"


class EventKind(str, Enum):
    ARRIVAL = "arrival"                        # data: {"shop": Shop}
    SERVICE_COMPLETION = "service_completion"  # data: {"server": Cashier}
    TIMER = "timer"                            # data: {"callback": fn(env)}


class Event:
    """Future Event List entry; also the handle returned by Env.schedule."""
    __slots__ = ("t", "seq", "kind", "data", "state", "owner")
    def __init__(self, t: float, seq: int, kind: EventKind, data: dict, owner: "Env"):
        self.t = t; self.seq = seq; self.kind = kind; self.data = data
        self.state = PENDING; self.owner = owner
    def __lt__(self, other: "Event"):
        return (self.t, self.seq) < (other.t, other.seq)
    @property
    def pending(self) -> bool:
        return self.state == PENDING
    def __repr__(self):
        return f"Event(t={self.t:.4f}, seq={self.seq}, kind={self.kind.value}, state={self.state})"


class Env:
    """Simulation context holding the clock, the FEL, the rng and metrics.

    Attributes
    ----------
    t : float
        Simulation clock. Only ever moves forward, to the time of the event
        being executed or to the end time passed to run_until.
    FEL : list[Event]
        Min-heap of scheduled events keyed by (t, seq).
    rng : object
        Random source with uniform_real/uniform_int/exponential.
    M : object or None
        Statistics sink receiving note_* calls; None disables sampling.
    """
    def __init__(self, rng=None, metrics=None):
        self.t: float = 0.0
        self.FEL: List[Event] = []
        self.rng = rng if rng is not None else RandomSource()
        self.M = metrics
        self.events_processed: int = 0
        self._seq = itertools.count()
        self._live: int = 0

    # -- scheduling ---------------------------------------------------------
    def schedule(self, t: float, kind: EventKind, data: Optional[dict] = None) -> Event:
        if math.isnan(t) or t < self.t:
            raise InvalidScheduleError(f"cannot schedule {kind.value} at t={t} (now={self.t})")
        ev = Event(t, next(self._seq), kind, data or {}, self)
        heapq.heappush(self.FEL, ev)
        self._live += 1
        return ev

    def schedule_in(self, delay: float, kind: EventKind, data: Optional[dict] = None) -> Event:
        return self.schedule(self.t + delay, kind, data)

    def cancel(self, ev: Event, strict: bool = False) -> bool:
        """Cancel a pending event.

        Returns True if the event was pending. Cancelling a fired, already
        cancelled or foreign event is a no-op unless ``strict`` is set, in
        which case UnknownEventError is raised.
        """
        if ev is None or ev.owner is not self or ev.state != PENDING:
            if strict:
                raise UnknownEventError(f"{ev!r} is not pending in this environment")
            return False
        ev.state = CANCELLED
        self._live -= 1
        return True

    @property
    def pending(self) -> int:
        return self._live

    def peek(self) -> Optional[Event]:
        # Drop cancelled events sitting at the head
        while self.FEL and self.FEL[0].state == CANCELLED:
            heapq.heappop(self.FEL)
        return self.FEL[0] if self.FEL else None

    # -- execution ----------------------------------------------------------
    def step(self) -> bool:
        ev = self.peek()
        if ev is None:
            return False
        heapq.heappop(self.FEL)
        self.t = ev.t
        ev.state = FIRED
        self._live -= 1
        self.events_processed += 1
        self._dispatch(ev)
        return True

    def run_until(self, T_end: Optional[float] = None):
        """Execute events in (t, seq) order.

        Events due exactly at T_end still fire; the first event past T_end
        stays in the FEL and the clock is set to T_end. Without T_end the
        loop runs until the FEL is empty.
        """
        if T_end is not None and (math.isnan(T_end) or T_end < self.t):
            raise InvalidScheduleError(f"invalid end time {T_end} (now={self.t})")
        while True:
            ev = self.peek()
            if ev is None or (T_end is not None and ev.t > T_end):
                break
            self.step()
        if T_end is not None:
            self.t = T_end

    def _dispatch(self, ev: Event):
        kind, data = ev.kind, ev.data
        if kind is EventKind.ARRIVAL:
            data["shop"].on_arrival(self)
        elif kind is EventKind.SERVICE_COMPLETION:
            data["server"].on_service_completion(self)
        elif kind is EventKind.TIMER:
            data["callback"](self)
        else:
            raise ValueError(f"unhandled event kind {kind!r}")

    def note(self, hook: str, *args):
        """Forward a sample to the metrics sink if one is attached."""
        if self.M is not None:
            getattr(self.M, hook)(*args)


class Cashier:
    """Single-channel FIFO server with its own queue.

    Parameters
    ----------
    index : int
        Position in the cashier pool; also the balancer's output index.
    item_time : (float, float)
        Bounds of the per-item Uniform service draw.

    Notes
    -----
    - ``busy`` is True exactly while ``current`` holds a customer.
    - ``current`` is never part of ``queue``.
    - Idle time is accumulated when service resumes, and once more by
      finish() for an idle stretch still open at the end of the run.
    """
    def __init__(self, index: int, item_time: Tuple[float, float] = (0.5, 2.0)):
        lo, hi = item_time
        if not (0 < lo <= hi):
            raise ConfigurationError(f"cashier {index}: invalid per-item time bounds {item_time}")
        self.index = index
        self.name = f"cashier{index}"
        self.item_time = (float(lo), float(hi))
        self.queue: Deque[Customer] = deque()
        self.current: Optional[Customer] = None
        self.busy: bool = False
        self.idle_since: float = 0.0
        self.total_service_time: float = 0.0
        self.total_idle_time: float = 0.0
        self.total_wait_time: float = 0.0
        self.served: int = 0
        self.items_processed: int = 0

    def start(self, env: Env):
        """Open the first idle interval at the current clock."""
        self.idle_since = env.t
        env.note("note_queue_length", self.index, 0, env.t)

    def arrive(self, env: Env, customer: Customer):
        log.debug("%s received customer %d with %d items", self.name, customer.cid, customer.items)
        self.queue.append(customer)
        env.note("note_queue_length", self.index, len(self.queue), env.t)
        if not self.busy:
            self._serve_next(env)

    def draw_service(self, env: Env, customer: Customer) -> float:
        lo, hi = self.item_time
        return sum(env.rng.uniform_real(lo, hi) for _ in range(customer.items))

    def begin_service(self, env: Env, customer: Customer):
        if not self.busy:
            idle = env.t - self.idle_since
            self.total_idle_time += idle
            env.note("note_idle_time", self.index, idle, env.t)
        self.busy = True
        self.current = customer
        st = self.draw_service(env, customer)
        wait = customer.start_service(env.t, st)
        env.note("note_wait", self.index, wait, env.t)
        env.note("note_service_time", self.index, st, env.t)
        self.served += 1
        self.total_service_time += st
        self.total_wait_time += wait
        self.items_processed += customer.items
        env.schedule(env.t + st, EventKind.SERVICE_COMPLETION, {"server": self})
        log.debug("%s starts customer %d at t=%.3f (service %.3f, waited %.3f)",
                  self.name, customer.cid, env.t, st, wait)

    def on_service_completion(self, env: Env):
        done = self.current
        self.current = None
        if done is not None:
            log.debug("%s finished customer %d at t=%.3f (waited %.3f)",
                      self.name, done.cid, env.t, done.waiting_time)
            env.note("note_departure", self.index, done, env.t)
        if self.queue:
            self._serve_next(env)
        else:
            self.busy = False
            self.idle_since = env.t

    def _serve_next(self, env: Env):
        customer = self.queue.popleft()
        env.note("note_queue_length", self.index, len(self.queue), env.t)
        self.begin_service(env, customer)

    def finish(self, env: Env):
        """Close an idle interval still open at the end of the run."""
        if not self.busy:
            self.total_idle_time += env.t - self.idle_since
            self.idle_since = env.t

    # -- derived metrics ------------------------------------------------------
    def load(self) -> int:
        """Customers waiting plus the one in service."""
        return len(self.queue) + (1 if self.busy else 0)

    def utilization(self, elapsed: float) -> float:
        return self.total_service_time / elapsed if elapsed > 0 else 0.0

    def idle_rate(self, elapsed: float) -> float:
        return self.total_idle_time / elapsed if elapsed > 0 else 0.0

    def average_service_time(self) -> float:
        return self.total_service_time / self.served if self.served else 0.0

    def average_waiting_time(self) -> float:
        return self.total_wait_time / self.served if self.served else 0.0

    def summary(self, elapsed: float) -> Dict[str, Any]:
        return {
            "cashier": self.index,
            "customers_served": self.served,
            "total_items_processed": self.items_processed,
            "total_service_time": self.total_service_time,
            "total_idle_time": self.total_idle_time,
            "utilization_rate": self.utilization(elapsed) * 100.0,
            "idle_rate": self.idle_rate(elapsed) * 100.0,
            "average_service_time": self.average_service_time(),
            "average_waiting_time": self.average_waiting_time(),
            "queue_length_at_end": len(self.queue),
        }
