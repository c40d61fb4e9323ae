"""Shop: arrival stream, basket sizes and configuration checks."""

from __future__ import annotations

import pytest

from supermarket.arrivals import Shop
from supermarket.errors import ConfigurationError
from supermarket.metrics import Metrics
from supermarket.queues import Env


class RecordingBalancer:
    def __init__(self):
        self.routed = []

    def route(self, env, customer):
        self.routed.append((env.t, customer))
        return 0


class TestArrivalStream:

    def test_first_arrival_after_lead_in(self, stub_rng):
        env = Env(rng=stub_rng())
        shop = Shop(RecordingBalancer(), arrival_interval=5.0)
        ev = shop.start(env)
        assert ev.t == pytest.approx(0.1)
        assert ev.t > env.t

    def test_arrivals_follow_drawn_gaps(self, stub_rng):
        rng = stub_rng(ints=(4, 25, 1), gaps=(2.0, 3.0))
        env = Env(rng=rng)
        balancer = RecordingBalancer()
        shop = Shop(balancer, arrival_interval=5.0)
        shop.start(env)
        env.run_until(5.2)
        times = [t for t, _ in balancer.routed]
        assert times == pytest.approx([0.1, 2.1, 5.1])
        customers = [c for _, c in balancer.routed]
        assert [c.cid for c in customers] == [1, 2, 3]
        assert [c.items for c in customers] == [4, 25, 1]
        assert [c.arrival_time for c in customers] == pytest.approx(times)
        assert shop.generated == 3

    def test_draw_parameters(self, stub_rng):
        rng = stub_rng()
        env = Env(rng=rng)
        shop = Shop(RecordingBalancer(), arrival_interval=7.5, items_min=1, items_max=25)
        shop.start(env)
        env.run_until(0.1)
        assert ("uniform_int", 1, 25) in rng.calls
        assert ("exponential", 7.5) in rng.calls

    def test_samples(self, stub_rng):
        M = Metrics()
        env = Env(rng=stub_rng(gaps=(1.5,)), metrics=M)
        shop = Shop(RecordingBalancer(), arrival_interval=2.0)
        shop.start(env)
        env.run_until(3.5)
        assert M.customers_generated == 3
        assert [g for _, g in M.inter_arrivals] == [1.5, 1.5, 1.5]

    def test_stop_cancels_pending_arrival(self, stub_rng):
        env = Env(rng=stub_rng())
        balancer = RecordingBalancer()
        shop = Shop(balancer, arrival_interval=5.0)
        shop.start(env)
        env.run_until(2.0)
        assert shop.stop(env) is True
        env.run_until()
        assert len(balancer.routed) == 2
        assert env.pending == 0
        assert shop.stop(env) is False

    def test_seeded_items_in_range(self):
        env = Env()
        balancer = RecordingBalancer()
        shop = Shop(balancer, arrival_interval=1.0)
        shop.start(env)
        env.run_until(300.0)
        assert balancer.routed
        assert all(1 <= c.items <= 25 for _, c in balancer.routed)


class TestConfiguration:

    @pytest.mark.parametrize("interval", [0, 0.0, -1.0, None])
    def test_non_positive_interval(self, interval):
        with pytest.raises(ConfigurationError):
            Shop(RecordingBalancer(), arrival_interval=interval)

    @pytest.mark.parametrize("lo, hi", [(0, 25), (5, 4), (-1, 3)])
    def test_basket_bounds(self, lo, hi):
        with pytest.raises(ConfigurationError):
            Shop(RecordingBalancer(), arrival_interval=1.0, items_min=lo, items_max=hi)

    @pytest.mark.parametrize("lo, hi", [(1, 2.5), (1.5, 4), (True, 3), (1, "9")])
    def test_basket_bounds_must_be_integers(self, lo, hi):
        with pytest.raises(ConfigurationError):
            Shop(RecordingBalancer(), arrival_interval=1.0, items_min=lo, items_max=hi)

    def test_lead_in_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            Shop(RecordingBalancer(), arrival_interval=1.0, lead_in=0.0)
