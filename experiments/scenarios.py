"""
experiments/scenarios.py

Holds scenario definitions (decision variables) to sweep during experiments:
one scenario per dispatch strategy and cashier count. Each scenario only
carries the config keys it overrides.
"""

from __future__ import annotations

STRATEGIES = ("round_robin", "shortest_queue", "random", "shortest_live_queue")
CASHIER_COUNTS = (2, 3, 4)

def _scenario(strategy: str, count: int) -> dict:
    return {
        "name": f"{strategy}_{count}",
        "overrides": {
            "balancer": {"strategy": strategy},
            "cashiers": {"count": count},
        },
    }

SCENARIOS = [_scenario(s, n) for n in CASHIER_COUNTS for s in STRATEGIES]

# Heavier traffic against the same three-cashier front end
RUSH_HOUR = {
    "name": "rush_hour_shortest_queue_3",
    "overrides": {
        "shop": {"arrival_interval": 6.0},
        "balancer": {"strategy": "shortest_queue"},
        "cashiers": {"count": 3},
    },
}

SCENARIOS.append(RUSH_HOUR)
