"""MediTrade: simulated crypto trading backend."""

__version__ = "0.1.0"
