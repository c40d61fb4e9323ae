"""
experiments/run_experiments.py

Experiment harness that loads the baseline config, applies scenario overrides,
runs multiple replications per scenario, and reports KPIs with confidence
intervals. Optional paired comparisons use common random numbers (the same
seed per replication on both sides).
"""

from __future__ import annotations
import argparse, copy, logging, math, os
from statistics import mean, stdev
from typing import Callable, Dict, List, Optional

import yaml
from scipy.stats import t

from experiments.scenarios import SCENARIOS
from supermarket.simulation import run_once
from supermarket.stations import config_section

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CFG = os.path.join(ROOT, "config", "baseline.yaml")

log = logging.getLogger(__name__)

def load_cfg(path: Optional[str] = None) -> Dict:
    with open(path or DEFAULT_CFG, "r") as f:
        return yaml.safe_load(f) or {}

def apply_overrides(cfg: Dict, overrides: Dict) -> Dict:
    """Apply scenario overrides (recursive merge) on top of the base config."""
    new = copy.deepcopy(cfg)

    def _merge(dst: Dict, src: Dict):
        for key, val in src.items():
            if isinstance(val, dict) and isinstance(dst.get(key), dict):
                _merge(dst[key], val)
            else:
                dst[key] = copy.deepcopy(val)

    _merge(new, overrides)
    return new

def _tcrit(alpha: float, df: int) -> float:
    return float(t.ppf(1 - alpha / 2.0, df))

def mean_ci(values: List[float], confidence_level: float) -> tuple[float, float]:
    """Return (mean, half-width) using a Student t critical value."""
    if not values:
        return 0.0, 0.0
    mu = mean(values)
    n = len(values)
    if n < 2:
        return mu, 0.0
    level = min(max(confidence_level, 0.0), 0.999999)
    half = _tcrit(1.0 - level, n - 1) * (stdev(values) / math.sqrt(n))
    return mu, half

def series(results: List[Dict], extractor: Callable[[Dict], float]) -> List[float]:
    """Collect a numeric series from each replication result."""
    return [float(extractor(res)) for res in results]

def run_replications(cfg: Dict, replications: int, base_seed: int) -> List[Dict]:
    results = []
    for rep in range(replications):
        run_cfg = copy.deepcopy(cfg)
        run_cfg.setdefault("sim", {})["seed"] = base_seed + rep
        results.append(run_once(run_cfg))
    return results

def bonferroni_comparisons(pairs: List) -> int:
    """Number of comparisons C sharing the family-wise alpha (at least 1)."""
    return max(1, len(pairs))

def run_crn(cfg: Dict, sc_a: Dict, sc_b: Dict, replications: int, base_seed: int,
            confidence: float, C: float = 1.0) -> tuple[float, float]:
    """
    Common-random-number comparison of average waiting time between two
    scenarios. Returns (mean difference, half-width); the interval uses a
    Bonferroni-adjusted alpha when C comparisons are made together.
    """
    res_a = run_replications(apply_overrides(cfg, sc_a["overrides"]), replications, base_seed)
    res_b = run_replications(apply_overrides(cfg, sc_b["overrides"]), replications, base_seed)
    diffs = [b["avg_waiting_time"] - a["avg_waiting_time"] for a, b in zip(res_a, res_b)]
    mean_diff = mean(diffs)
    sd_diff = stdev(diffs) if len(diffs) > 1 else 0.0
    level = min(max(confidence, 0.0), 0.999999)
    alpha = (1.0 - level) / max(C, 1.0)
    half = _tcrit(alpha, len(diffs) - 1) * sd_diff / math.sqrt(len(diffs)) if len(diffs) > 1 else 0.0
    print(f"CRN paired waiting-time comparison ({sc_b['name']} - {sc_a['name']}):")
    print("  Replication | Seed | Wait A | Wait B | Difference")
    for idx, (a, b) in enumerate(zip(res_a, res_b), start=1):
        seed = base_seed + idx - 1
        wa, wb = a["avg_waiting_time"], b["avg_waiting_time"]
        print(f"    {idx:2d}        | {seed:4d} | {wa:7.2f} | {wb:7.2f} | {wb - wa:+.2f}")
    print(f"  Mean difference: {mean_diff:+.2f} s")
    print(f"  {level*100:.1f}% CI of mean diff: {mean_diff - half:+.2f} to {mean_diff + half:+.2f} s")
    return mean_diff, half

def report_scenario(name: str, results: List[Dict], confidence: float, seeds: tuple[int, int]):
    level_pct = confidence * 100.0
    wait = mean_ci(series(results, lambda r: r["avg_waiting_time"]), confidence)
    max_wait = mean_ci(series(results, lambda r: r["max_waiting_time"]), confidence)
    sojourn = mean_ci(series(results, lambda r: r["avg_sojourn_time"]), confidence)
    util = mean_ci(series(results, lambda r: r["mean_utilization"]), confidence)
    served = mean_ci(series(results, lambda r: r["customers_served"]), confidence)
    eff = mean_ci(series(results, lambda r: r["balancer"]["balancing_efficiency"]), confidence)
    n_cashiers = len(results[0]["cashiers"]) if results else 0
    per_cashier = [
        round(mean(r["cashiers"][i]["utilization_rate"] for r in results), 1)
        for i in range(n_cashiers)
    ]
    print(f"Scenario: {name} (replications={len(results)}, {level_pct:.1f}% CI, seeds {seeds[0]}-{seeds[1]})")
    print(f"  Customers served: {served[0]:.1f} ± {served[1]:.1f}")
    print(f"  Avg waiting time: {wait[0]:.2f} ± {wait[1]:.2f} s")
    print(f"  Max waiting time: {max_wait[0]:.2f} ± {max_wait[1]:.2f} s")
    print(f"  Avg time in system: {sojourn[0]:.2f} ± {sojourn[1]:.2f} s")
    print(f"  Mean utilization: {util[0]:.1f}% ± {util[1]:.1f}%")
    print(f"  Balancing efficiency: {eff[0]:.1f}% ± {eff[1]:.1f}%")
    print(f"  Utilization per cashier (mean %): {per_cashier}")
    print("-")

def main(argv: Optional[List[str]] = None):
    """Entry point: drive all scenarios, replications, and report KPIs."""
    parser = argparse.ArgumentParser(description="Run supermarket checkout scenarios.")
    parser.add_argument("--config", default=None, help="YAML config (default: config/baseline.yaml)")
    parser.add_argument("--replications", type=int, default=None)
    parser.add_argument("--verbose", action="store_true", help="log every simulation event")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    cfg = load_cfg(args.config)
    exp_cfg = config_section(cfg, "experiments")
    replications = max(1, int(args.replications or exp_cfg.get("replications", 1)))
    confidence = float(exp_cfg.get("confidence_level", 0.95))
    default_seed = config_section(cfg, "sim").get("seed", 0)

    for sc in SCENARIOS:
        sc_cfg = apply_overrides(cfg, sc["overrides"])
        seed = config_section(sc_cfg, "sim").get("seed", default_seed)
        results = run_replications(sc_cfg, replications, seed)
        report_scenario(sc["name"], results, confidence, (seed, seed + replications - 1))

    crn_pairs = exp_cfg.get("crn_compare") or []
    if crn_pairs:
        sc_index = {s["name"]: s for s in SCENARIOS}
        C = bonferroni_comparisons(crn_pairs)
        for pair in crn_pairs:
            if len(pair) != 2:
                log.warning("skipping CRN entry (needs 2 names): %s", pair)
                continue
            sc_a, sc_b = sc_index.get(pair[0]), sc_index.get(pair[1])
            if sc_a and sc_b:
                print(f"\nCRN & Bonferroni comparison: {sc_a['name']} vs {sc_b['name']} (replications={replications}, seeds shared)")
                run_crn(cfg, sc_a, sc_b, replications, default_seed, confidence, C)
            else:
                log.warning("CRN pair not found: %s", pair)

if __name__ == "__main__":
    main()
