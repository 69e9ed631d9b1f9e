"""Memory pressure monitoring."""

from .monitor import (
    MemoryMonitor,
    MemoryRecommendation,
    estimate_surface_memory,
    estimate_surface_memory_mb,
)
from .probe import FALLBACK_MEMORY, read_system_memory

__all__ = [
    "FALLBACK_MEMORY",
    "MemoryMonitor",
    "MemoryRecommendation",
    "estimate_surface_memory",
    "estimate_surface_memory_mb",
    "read_system_memory",
]
