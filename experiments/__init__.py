"""Experiment harness: scenario sweeps and replication statistics."""
