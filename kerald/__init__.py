"""Lightweight distributed messaging framework: broker startup state, topic model and command."""

__version__ = "0.1.0"
__all__ = ["broker", "cli", "topic"]