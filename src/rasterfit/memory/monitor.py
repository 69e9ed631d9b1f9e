"""MemoryMonitor - pressure estimation, pool eviction and strategy hints."""

import gc
import time
from collections.abc import Callable
from enum import StrEnum
from typing import TYPE_CHECKING

from loguru import logger

from ..common.schemas import MemoryInfo
from .probe import MB, MemoryProbe, read_system_memory

if TYPE_CHECKING:
    from ..surfaces.pool import SurfacePool

OPTIMIZE_PRESSURE = 0.8
RECOMMEND_PRESSURE = 0.7
WARN_PRESSURE = 0.9
PROJECTED_LIMIT_RATIO = 0.9
OPTIMIZE_INTERVAL_S = 5.0

BYTES_PER_PIXEL = 4
PROCESSING_OVERHEAD = 2


class MemoryRecommendation(StrEnum):
    DIRECT = "direct"
    CHUNKED = "chunked"
    TILED = "tiled"
    MEMORY_EFFICIENT = "memory-efficient"


def estimate_surface_memory(width: int, height: int) -> int:
    """Bytes needed to process a width x height surface (RGBA x overhead)."""
    return width * height * BYTES_PER_PIXEL * PROCESSING_OVERHEAD


def estimate_surface_memory_mb(width: int, height: int) -> float:
    return round(estimate_surface_memory(width, height) / MB, 2)


class MemoryMonitor:
    """Tracks memory pressure and reclaims pooled surfaces when it is high.

    State (last optimization time, counters) lives on the instance; create one
    per engine, or call ``reset()`` between test cases.

    Args:
        pool: Pool cleared when pressure is high
        probe: Callable returning current MemoryInfo (defaults to psutil)
        clock: Monotonic clock in seconds, injectable for tests
    """

    def __init__(
        self,
        pool: "SurfacePool | None" = None,
        probe: MemoryProbe = read_system_memory,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.pool: "SurfacePool | None" = pool
        self.probe: MemoryProbe = probe
        self.clock: Callable[[], float] = clock
        self.last_optimization_time: float | None = None
        self.optimization_count: int = 0

    def get_memory_info(self) -> MemoryInfo:
        return self.probe()

    def get_pressure(self) -> float:
        """0..1 ratio of used memory to the limit."""
        return self.get_memory_info().pressure

    async def check_and_optimize(self) -> bool:
        """Clear the pool if pressure is high; rate-limited to once per 5 s.

        Returns:
            True if an optimization ran
        """
        info = self.get_memory_info()
        if info.pressure <= OPTIMIZE_PRESSURE:
            return False

        now = self.clock()
        if (
            self.last_optimization_time is not None
            and now - self.last_optimization_time < OPTIMIZE_INTERVAL_S
        ):
            return False

        self.last_optimization_time = now
        self.optimization_count += 1

        if self.pool is not None:
            self.pool.clear()
            logger.debug("[MemoryMonitor] Surface pool cleared due to memory pressure")

        collected = gc.collect()
        logger.debug(f"[MemoryMonitor] Garbage collection reclaimed {collected} objects")

        if info.pressure > WARN_PRESSURE:
            logger.warning(
                f"[MemoryMonitor] High memory pressure: {round(info.pressure * 100)}% "
                + f"({info.used_mb:.0f}MB / {info.limit_mb:.0f}MB)"
            )
        return True

    def can_process_large_image(self, estimated_usage_mb: float) -> bool:
        """True if projected usage stays under 90% of the limit."""
        info = self.get_memory_info()
        projected = (info.used_mb + estimated_usage_mb) / info.limit_mb
        return projected < PROJECTED_LIMIT_RATIO

    def recommend_strategy(self, width: int, height: int) -> MemoryRecommendation:
        estimated_mb = estimate_surface_memory_mb(width, height)
        if self.get_pressure() > RECOMMEND_PRESSURE or not self.can_process_large_image(
            estimated_mb
        ):
            return MemoryRecommendation.MEMORY_EFFICIENT

        pixel_count = width * height
        if pixel_count > 16_000_000:
            return MemoryRecommendation.TILED
        elif pixel_count > 4_000_000:
            return MemoryRecommendation.CHUNKED
        else:
            return MemoryRecommendation.DIRECT

    def get_optimization_stats(self) -> dict[str, object]:
        return {
            "optimization_count": self.optimization_count,
            "last_optimization_time": self.last_optimization_time,
            "memory_info": self.get_memory_info().model_dump(),
        }

    def reset(self) -> None:
        self.optimization_count = 0
        self.last_optimization_time = None
