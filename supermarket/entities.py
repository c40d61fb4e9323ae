# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   Entity definition for the checkout DES: the Customer flowing from the
#   shop floor through the balancer to one cashier.
#
# Design notes:
#   - Timing fields stay None until the serving cashier fills them in.
#   - A customer has exactly one owner at a time (shop -> balancer -> one
#     cashier queue -> that cashier's service slot).
#
# Usage:
#   from supermarket.entities import Customer
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

@dataclass
class Customer:
    cid: int                                    # sequential, starts at 1
    items: int                                  # basket size, >= 1
    arrival_time: float
    cashier: Optional[int] = None               # set by the balancer
    service_start_time: Optional[float] = None
    waiting_time: Optional[float] = None        # service_start_time - arrival_time
    service_time: Optional[float] = None

    def start_service(self, now: float, service_time: float) -> float:
        """Stamp service start and return the recorded waiting time."""
        self.service_start_time = now
        self.service_time = service_time
        self.waiting_time = now - self.arrival_time
        return self.waiting_time

    def departure_time(self) -> Optional[float]:
        if self.service_start_time is None or self.service_time is None:
            return None
        return self.service_start_time + self.service_time

    def sojourn_time(self) -> Optional[float]:
        dep = self.departure_time()
        return None if dep is None else dep - self.arrival_time
