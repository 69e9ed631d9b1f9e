"""Utility helpers."""

from .profiling import elapsed_ms, timed

__all__ = ["elapsed_ms", "timed"]
