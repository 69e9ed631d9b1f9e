"""Timing helpers for resize strategies."""

import time
from collections.abc import Callable
from functools import wraps
from typing import ParamSpec, TypeVar

from loguru import logger

P = ParamSpec("P")
R = TypeVar("R")


def elapsed_ms(start: float) -> float:
    """Milliseconds since ``start`` (a ``time.perf_counter()`` reading)."""
    return round((time.perf_counter() - start) * 1000, 2)


def timed(func: Callable[P, R]) -> Callable[P, R]:
    """Log a call's duration and outcome at DEBUG level.

    When the first argument has a ``strategy`` attribute (an executor's
    ``run``), the strategy is added to the message. The elapsed time is also
    bound to the record as ``elapsed_ms`` so sinks can filter on it.

    Usage:
        @timed
        def run(self, source, layout, request, progress=None):
            ...

    Logs e.g. ``[PROFILE] TiledExecutor.run [tiled] done in 12.4ms``.
    """

    @wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        start = time.perf_counter()
        outcome = "failed"
        try:
            result = func(*args, **kwargs)
            outcome = "done"
            return result
        finally:
            ms = elapsed_ms(start)
            strategy = getattr(args[0], "strategy", None) if args else None
            tag = f" [{strategy}]" if strategy is not None else ""
            logger.bind(elapsed_ms=ms).debug(
                f"[PROFILE] {func.__qualname__}{tag} {outcome} in {ms:.1f}ms"
            )

    return wrapper
