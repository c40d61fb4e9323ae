# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   Build the cashier pool from config.
#
# Design notes:
#   - All cashiers share the same per-item service bounds; each keeps its
#     own queue and counters.
#
# Usage:
#   from supermarket.stations import make_cashiers
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import List

from .errors import ConfigurationError
from .queues import Cashier

def config_section(cfg: dict, name: str) -> dict:
    """Return ``cfg[name]``; a missing section reads as {}."""
    if name not in cfg:
        return {}
    section = cfg[name]
    if not isinstance(section, dict):
        raise ConfigurationError(f"{name} section must be a mapping, got {section!r}")
    return section

def make_cashiers(cfg: dict) -> List[Cashier]:
    """
    Create the cashier pool from the ``cashiers`` section of the config.

    Parameters
    ----------
    cfg : dict
        Parsed YAML config with 'cashiers': {count, item_time_min, item_time_max}.

    Returns
    -------
    list[Cashier]
        Cashiers indexed 0..count-1.
    """
    c_cfg = config_section(cfg, "cashiers")
    count = c_cfg.get("count")
    if isinstance(count, bool) or not isinstance(count, int) or count < 1:
        raise ConfigurationError(f"cashiers.count must be an integer >= 1, got {count!r}")
    item_time = (c_cfg.get("item_time_min", 0.5), c_cfg.get("item_time_max", 2.0))
    return [Cashier(i, item_time=item_time) for i in range(count)]
