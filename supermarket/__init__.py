"""
supermarket package initializer.

This package contains the discrete-event engine, the checkout primitives
(shop, balancer, cashiers), dispatch policies and metric collection used by
the supermarket checkout simulation.
"""
__all__ = [
    "entities", "errors", "queues", "stations", "network",
    "arrivals", "policies", "metrics", "rng", "simulation",
]
