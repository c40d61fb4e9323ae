"""End-to-end runs: wiring, determinism and config validation."""

from __future__ import annotations
import copy

import pytest

from supermarket.errors import ConfigurationError
from supermarket.simulation import build_simulation, run_once, validate_cfg


class TestScriptedRun:
    """Gaps of 10 s, 2-item baskets at 1 s per item, two cashiers."""

    @pytest.fixture
    def result(self, small_cfg, stub_rng):
        cfg = copy.deepcopy(small_cfg)
        cfg["sim"]["end_time"] = 35.0
        cfg["cashiers"]["count"] = 2
        rng = stub_rng(reals=(1.0,), ints=(2,), gaps=(10.0,))
        return run_once(cfg, rng=rng)

    def test_customers(self, result):
        # arrivals at 0.1, 10.1, 20.1, 30.1
        assert result["shop"]["customers_generated"] == 4
        assert result["customers_served"] == 4
        assert result["customers_departed"] == 4
        assert result["avg_waiting_time"] == 0.0
        assert result["avg_sojourn_time"] == pytest.approx(2.0)

    def test_balancer(self, result):
        assert result["balancer"]["assignments"] == [2, 2]
        assert result["balancer"]["balancing_efficiency"] == 100.0

    def test_cashier_accounting(self, result):
        c0, c1 = result["cashiers"]
        assert c0["customers_served"] == 2
        assert c0["total_service_time"] == pytest.approx(4.0)
        # idle 0..0.1, 2.1..20.1, 22.1..35
        assert c0["total_idle_time"] == pytest.approx(0.1 + 18.0 + 12.9)
        # idle 0..10.1, 12.1..30.1, 32.1..35
        assert c1["total_idle_time"] == pytest.approx(10.1 + 18.0 + 2.9)
        assert c0["utilization_rate"] == pytest.approx(4.0 / 35.0 * 100.0)
        assert result["elapsed"] == 35.0


class TestSeededRuns:

    def test_same_seed_same_result(self, small_cfg):
        assert run_once(copy.deepcopy(small_cfg)) == run_once(copy.deepcopy(small_cfg))

    def test_different_seed_different_result(self, small_cfg):
        other = copy.deepcopy(small_cfg)
        other["sim"]["seed"] = small_cfg["sim"]["seed"] + 1
        assert run_once(small_cfg)["avg_waiting_time"] != run_once(other)["avg_waiting_time"]

    def test_independent_simulations_interleaved(self, small_cfg):
        a = build_simulation(copy.deepcopy(small_cfg))
        b = build_simulation(copy.deepcopy(small_cfg))
        for sim in (a, b):
            for c in sim.cashiers:
                c.start(sim.env)
            sim.shop.start(sim.env)
        # alternate single steps between the two runs
        while a.env.peek() is not None and a.env.peek().t <= 300.0:
            a.env.step()
            if b.env.peek() is not None and b.env.peek().t <= 300.0:
                b.env.step()
        b.env.run_until(300.0)
        a.env.run_until(300.0)
        assert a.metrics.summary(300.0) == b.metrics.summary(300.0)

    @pytest.mark.parametrize("strategy", ["round_robin", "shortest_queue", "random", "shortest_live_queue"])
    def test_every_strategy_runs(self, small_cfg, strategy):
        cfg = copy.deepcopy(small_cfg)
        cfg["balancer"]["strategy"] = strategy
        result = run_once(cfg)
        bal = result["balancer"]
        assert bal["customers_forwarded"] == result["shop"]["customers_generated"] > 0
        assert sum(bal["assignments"]) == bal["customers_forwarded"]
        assert 0.0 <= bal["balancing_efficiency"] <= 100.0
        for row in result["cashiers"]:
            assert row["total_idle_time"] >= 0.0
            assert 0.0 <= row["idle_rate"] <= 100.0
            assert row["queue_length_at_end"] >= 0

    def test_served_never_exceeds_generated(self, small_cfg):
        cfg = copy.deepcopy(small_cfg)
        cfg["shop"]["arrival_interval"] = 2.0  # overloaded front end
        result = run_once(cfg)
        waiting = sum(row["queue_length_at_end"] for row in result["cashiers"])
        assert result["customers_served"] + waiting == result["shop"]["customers_generated"]
        assert waiting > 0

    def test_clock_ends_at_end_time(self, small_cfg):
        sim = build_simulation(small_cfg)
        sim.run()
        assert sim.env.t == small_cfg["sim"]["end_time"]


class TestValidation:

    def test_accepts_small_cfg(self, small_cfg):
        assert validate_cfg(small_cfg) is small_cfg

    @pytest.mark.parametrize("section, key, value", [
        ("cashiers", "count", 0),
        ("cashiers", "count", -2),
        ("cashiers", "count", 1.5),
        ("shop", "arrival_interval", 0.0),
        ("shop", "arrival_interval", -3.0),
        ("balancer", "strategy", "fastest_cashier"),
        ("sim", "end_time", 0),
        ("sim", "end_time", None),
        ("cashiers", "item_time_min", 0.0),
        ("shop", "items_min", 0),
    ])
    def test_rejected_before_run(self, small_cfg, section, key, value):
        cfg = copy.deepcopy(small_cfg)
        cfg[section][key] = value
        with pytest.raises(ConfigurationError):
            build_simulation(cfg)

    def test_missing_cashier_count(self, small_cfg):
        cfg = copy.deepcopy(small_cfg)
        del cfg["cashiers"]["count"]
        with pytest.raises(ConfigurationError):
            build_simulation(cfg)

    def test_not_a_mapping(self):
        with pytest.raises(ConfigurationError):
            validate_cfg(["sim"])

    @pytest.mark.parametrize("section", ["sim", "shop", "balancer", "cashiers"])
    def test_null_section_rejected(self, small_cfg, section):
        cfg = copy.deepcopy(small_cfg)
        cfg[section] = None
        with pytest.raises(ConfigurationError):
            build_simulation(cfg)

    def test_non_mapping_section_rejected(self, small_cfg):
        cfg = copy.deepcopy(small_cfg)
        cfg["shop"] = [8.0]
        with pytest.raises(ConfigurationError):
            build_simulation(cfg)

    def test_missing_balancer_defaults_to_round_robin(self, small_cfg):
        cfg = copy.deepcopy(small_cfg)
        del cfg["balancer"]
        assert build_simulation(cfg).balancer.strategy == "round_robin"
