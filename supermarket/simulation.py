# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Simulate a single replication: validate the config, build cashiers,
#   balancer and shop around one Env, run the event loop to the end time,
#   close open idle intervals and return metrics.
#
# Design notes:
#   - Everything a run needs lives on the Simulation object, so several
#     independent runs can coexist in one process.
#   - Replications and confidence intervals live outside, in experiments/.
#
# Usage:
#   from supermarket.simulation import run_once
#   results = run_once(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .arrivals import Shop
from .errors import ConfigurationError
from .metrics import Metrics
from .network import Balancer
from .queues import Cashier, Env
from .rng import RandomSource
from .stations import config_section, make_cashiers
from . import policies

log = logging.getLogger(__name__)


def validate_cfg(cfg: Dict) -> Dict:
    """Check the run-level settings; component constructors check the rest."""
    if not isinstance(cfg, dict):
        raise ConfigurationError("config must be a mapping")
    end_time = config_section(cfg, "sim").get("end_time")
    if isinstance(end_time, bool) or not isinstance(end_time, (int, float)) or not end_time > 0:
        raise ConfigurationError(f"sim.end_time must be a number > 0, got {end_time!r}")
    interval = config_section(cfg, "shop").get("arrival_interval")
    if isinstance(interval, bool) or not isinstance(interval, (int, float)) or not interval > 0:
        raise ConfigurationError(f"shop.arrival_interval must be a number > 0, got {interval!r}")
    config_section(cfg, "cashiers")
    policies.normalize_strategy(config_section(cfg, "balancer").get("strategy", policies.ROUND_ROBIN))
    return cfg


@dataclass
class Simulation:
    env: Env
    shop: Shop
    balancer: Balancer
    cashiers: List[Cashier]
    metrics: Metrics
    end_time: float

    def run(self) -> Dict[str, Any]:
        log.info("Simulation started: %d cashiers, strategy %s, end time %.1f",
                 len(self.cashiers), self.balancer.label, self.end_time)
        for c in self.cashiers:
            c.start(self.env)
        self.shop.start(self.env)
        self.env.run_until(self.end_time)
        for c in self.cashiers:
            c.finish(self.env)
        log.info("Simulation finished at t=%.1f after %d events",
                 self.env.t, self.env.events_processed)
        return self.metrics.summary(self.env.t)


def build_simulation(cfg: Dict, rng: Optional[Any] = None) -> Simulation:
    """Wire one replication. ``rng`` overrides the seeded RandomSource."""
    validate_cfg(cfg)
    sim_cfg = config_section(cfg, "sim")
    shop_cfg = config_section(cfg, "shop")
    if rng is None:
        rng = RandomSource(sim_cfg.get("seed", 0))

    cashiers = make_cashiers(cfg)
    balancer = Balancer(config_section(cfg, "balancer").get("strategy", policies.ROUND_ROBIN), cashiers)
    shop = Shop(
        balancer,
        arrival_interval=shop_cfg["arrival_interval"],
        items_min=shop_cfg.get("items_min", 1),
        items_max=shop_cfg.get("items_max", 25),
        lead_in=shop_cfg.get("lead_in", 0.1),
    )
    M = Metrics()
    M.attach(shop, balancer, cashiers)
    env = Env(rng=rng, metrics=M)
    return Simulation(env, shop, balancer, cashiers, M, float(sim_cfg["end_time"]))


def run_once(cfg: Dict, rng: Optional[Any] = None) -> Dict[str, Any]:
    return build_simulation(cfg, rng).run()
