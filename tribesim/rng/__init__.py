"""Injected randomness for the engine."""

from tribesim.rng.seeded_rng import RngFn, SeededRng

__all__ = ["RngFn", "SeededRng"]
