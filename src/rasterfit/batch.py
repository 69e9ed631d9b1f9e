"""BatchScheduler - windowed concurrent execution of resize jobs."""

import asyncio
from collections.abc import Awaitable, Callable, Iterable, Sequence
from functools import partial
from typing import TYPE_CHECKING, TypeVar

from PIL import Image
from loguru import logger

from .common.config import PerformanceProfile, ProfileName, get_performance_config
from .common.errors import JobTimeoutError
from .common.schemas import ResizeRequest
from .memory.monitor import MemoryMonitor
from .strategies.base import ProcessingResult

if TYPE_CHECKING:
    from .engine import ResizeEngine

T = TypeVar("T")

Job = Callable[[], Awaitable[T]]
BatchProgressCallback = Callable[[int, int], None]


class BatchScheduler:
    """Runs jobs in fixed-size windows.

    Jobs inside a window overlap; the next window starts only after the
    previous one settled. Memory is checked (and the pool possibly cleared)
    before every window. Results are index-aligned with the input; the first
    failure rejects the whole batch.

    Args:
        monitor: Memory monitor consulted before each window
        profile: Profile name or explicit PerformanceProfile
        on_progress: Called with (completed, total) as jobs finish
    """

    def __init__(
        self,
        monitor: MemoryMonitor,
        profile: ProfileName | PerformanceProfile = "balanced",
        on_progress: BatchProgressCallback | None = None,
    ):
        self.monitor: MemoryMonitor = monitor
        self.profile: PerformanceProfile = (
            profile if isinstance(profile, PerformanceProfile) else get_performance_config(profile)
        )
        self.on_progress: BatchProgressCallback | None = on_progress

    @classmethod
    def for_engine(
        cls,
        engine: "ResizeEngine",
        profile: ProfileName | PerformanceProfile = "balanced",
        on_progress: BatchProgressCallback | None = None,
    ) -> "BatchScheduler":
        return cls(engine.monitor, profile, on_progress)

    async def process_all(
        self,
        jobs: Sequence[Job[T]],
        concurrency: int | None = None,
        timeout_ms: float | None = None,
    ) -> list[T]:
        """Run ``jobs`` (zero-argument callables returning awaitables).

        Args:
            jobs: Jobs to run, in order
            concurrency: Window size (defaults to the profile's)
            timeout_ms: Per-job budget in milliseconds (defaults to the profile's)

        Returns:
            Results in input order

        Raises:
            ValueError: If concurrency < 1
            JobTimeoutError: If a job exceeds its budget
            Exception: The first error raised by any job
        """
        window_size = concurrency if concurrency is not None else self.profile.concurrency
        if window_size < 1:
            raise ValueError(f"concurrency must be >= 1, got {window_size}")
        budget_ms = timeout_ms if timeout_ms is not None else self.profile.timeout * 1000

        total = len(jobs)
        completed = 0
        results: list[T] = []

        async def run_job(index: int, job: Job[T]) -> T:
            nonlocal completed
            try:
                result = await asyncio.wait_for(job(), timeout=budget_ms / 1000)
            except TimeoutError as exc:
                raise JobTimeoutError(index, budget_ms) from exc
            completed += 1
            if self.on_progress:
                self.on_progress(completed, total)
            return result

        for start in range(0, total, window_size):
            window = jobs[start : start + window_size]
            if await self.monitor.check_and_optimize():
                logger.debug(f"[BatchScheduler] Memory optimized before window at job {start}")
            window_results = await asyncio.gather(
                *(run_job(start + offset, job) for offset, job in enumerate(window))
            )
            results.extend(window_results)

        return results


async def resize_all(
    engine: "ResizeEngine",
    items: Iterable[tuple[Image.Image, ResizeRequest]],
    profile: ProfileName | PerformanceProfile = "balanced",
    on_progress: BatchProgressCallback | None = None,
    concurrency: int | None = None,
    timeout_ms: float | None = None,
) -> list[ProcessingResult]:
    """Resize many (source, request) pairs through one engine."""
    jobs = [partial(engine.resize, source, request) for source, request in items]
    scheduler = BatchScheduler.for_engine(engine, profile, on_progress)
    return await scheduler.process_all(jobs, concurrency=concurrency, timeout_ms=timeout_ms)
