"""SurfacePool - reusable scratch surfaces with pressure-triggered eviction."""

import math
import threading
import warnings
from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger

from ..common.errors import PoolExhaustionWarning, SurfaceAllocationError
from ..common.schemas import PoolStats
from ..memory.probe import MB, read_system_memory
from .surface import Surface

# Surfaces larger than this are never retained.
MAX_POOLED_AREA = 2048 * 2048
MEMORY_THRESHOLD_BYTES = 256 * MB
EVICTION_PERCENT = 30


def optimal_pool_size(available_memory_mb: float) -> int:
    """Slot count for the available-memory tier."""
    if available_memory_mb >= 1024:
        return 15
    if available_memory_mb >= 512:
        return 12
    if available_memory_mb >= 256:
        return 10
    return 8


class SurfacePool:
    """Pool of idle surfaces.

    Ownership rules:
    - The pool exclusively owns idle surfaces (``in_use`` is False)
    - A caller exclusively owns an acquired surface until it calls ``release``

    Acquire/release are serialized by a lock so the pool can be shared by jobs
    running on worker threads.

    Example:
        pool = SurfacePool()
        with pool.lease(640, 480) as surface:
            surface.image.paste(...)
    """

    def __init__(
        self,
        available_memory_mb: float | None = None,
        memory_threshold_bytes: int = MEMORY_THRESHOLD_BYTES,
        max_pooled_area: int = MAX_POOLED_AREA,
    ):
        if available_memory_mb is None:
            available_memory_mb = read_system_memory().available_mb
        self.max_pool_size: int = optimal_pool_size(available_memory_mb)
        self.memory_threshold_bytes: int = memory_threshold_bytes
        self.max_pooled_area: int = max_pooled_area

        self._pool: list[Surface] = []
        self._lock: threading.Lock = threading.Lock()
        self._reset_counters()

    def _reset_counters(self) -> None:
        self.total_created: int = 0
        self.total_acquired: int = 0
        self.total_released: int = 0
        self.pool_hits: int = 0
        self.eviction_count: int = 0

    def __len__(self) -> int:
        return len(self._pool)

    # ------------------------------------------------------------------
    # Acquire / release
    # ------------------------------------------------------------------

    def acquire(self, width: int | None = None, height: int | None = None) -> Surface:
        """Return an idle surface (LIFO) or create one, reset to a clean state."""
        with self._lock:
            self.total_acquired += 1
            self._check_memory_pressure()

            if self._pool:
                surface = self._pool.pop()
                if width and height:
                    try:
                        surface.set_size(width, height)
                    except SurfaceAllocationError:
                        surface.dispose()
                        raise
                self.pool_hits += 1
            else:
                surface = Surface(width, height) if width and height else Surface()
                self.total_created += 1

            surface.reset()
            surface.in_use = True
            return surface

    def release(self, surface: Surface) -> None:
        """Return a surface to the pool, or dispose it when it cannot be retained."""
        with self._lock:
            if not surface.in_use:
                logger.warning(f"[SurfacePool] Ignoring release of idle surface {surface!r}")
                return

            self.total_released += 1
            surface.in_use = False

            if surface.disposed:
                logger.debug(f"[SurfacePool] Dropping disposed surface {surface!r}")
                return

            if (
                len(self._pool) < self.max_pool_size
                and surface.area <= self.max_pooled_area
            ):
                surface.reset()
                self._pool.append(surface)
                return

            if surface.area > self.max_pooled_area:
                logger.debug(
                    f"[SurfacePool] Disposing oversize surface {surface.width}x{surface.height}"
                )
            else:
                warnings.warn(
                    f"Surface pool full ({len(self._pool)}/{self.max_pool_size}); disposing surface",
                    PoolExhaustionWarning,
                    stacklevel=3,
                )
            surface.dispose()

    @contextmanager
    def lease(self, width: int | None = None, height: int | None = None) -> Iterator[Surface]:
        """Acquire a surface for the duration of a ``with`` block."""
        surface = self.acquire(width, height)
        try:
            yield surface
        finally:
            self.release(surface)

    # ------------------------------------------------------------------
    # Memory management
    # ------------------------------------------------------------------

    def _check_memory_pressure(self) -> None:
        if self._estimated_bytes() > self.memory_threshold_bytes:
            target = math.ceil(len(self._pool) * EVICTION_PERCENT / 100)
            self._evict_oldest(target)
            self.eviction_count += 1
            logger.debug(f"[SurfacePool] Memory pressure: evicted {target} surfaces")

    def check_memory_pressure(self) -> None:
        """Evict ~30% of idle surfaces (oldest first) if retained memory exceeds the threshold."""
        with self._lock:
            self._check_memory_pressure()

    def _evict_oldest(self, count: int) -> None:
        for _ in range(min(count, len(self._pool))):
            self._pool.pop(0).dispose()

    def set_max_pool_size(self, size: int) -> None:
        """Change the cap, immediately disposing idle surfaces above it."""
        if size < 0:
            raise ValueError(f"max pool size must be non-negative, got {size}")
        with self._lock:
            self.max_pool_size = size
            self._evict_oldest(len(self._pool) - size)

    def clear(self) -> None:
        """Dispose every idle surface and reset statistics."""
        with self._lock:
            for surface in self._pool:
                surface.dispose()
            self._pool = []
            self._reset_counters()

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def _estimated_bytes(self) -> int:
        return sum(surface.size_bytes for surface in self._pool)

    def estimated_memory_usage(self) -> int:
        """Bytes retained by idle surfaces."""
        with self._lock:
            return self._estimated_bytes()

    def _hit_ratio(self) -> float:
        return self.pool_hits / self.total_acquired if self.total_acquired > 0 else 0.0

    def complexity(self) -> float:
        """0-1 diagnostic score; never used for correctness decisions."""
        memory_ratio = self._estimated_bytes() / self.memory_threshold_bytes
        utilization = len(self._pool) / self.max_pool_size if self.max_pool_size > 0 else 1.0
        score = memory_ratio * 0.5 + utilization * 0.3 + (1 - self._hit_ratio()) * 0.2
        return min(1.0, score)

    def stats(self) -> PoolStats:
        with self._lock:
            return PoolStats(
                size=len(self._pool),
                max_size=self.max_pool_size,
                total_created=self.total_created,
                total_acquired=self.total_acquired,
                total_released=self.total_released,
                pool_hits=self.pool_hits,
                hit_ratio=round(self._hit_ratio(), 2),
                memory_usage_mb=round(self._estimated_bytes() / MB, 2),
                eviction_count=self.eviction_count,
                complexity=round(self.complexity(), 2),
            )

    def log_stats(self) -> None:
        stats = self.stats()
        logger.info(
            f"[SurfacePool] size={stats.size}/{stats.max_size} "
            f"hit_ratio={stats.hit_ratio * 100:.1f}% "
            f"memory={stats.memory_usage_mb}MB "
            f"created={stats.total_created} complexity={stats.complexity}"
        )
