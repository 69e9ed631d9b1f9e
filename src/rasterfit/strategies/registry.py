"""Strategy -> executor factory."""

from typing import assert_never

from ..common.schemas import Strategy
from ..layout.calculator import LayoutCalculator
from ..surfaces.pool import SurfacePool
from .base import StrategyExecutor
from .chunked import ChunkedExecutor
from .direct import DirectExecutor
from .stepped import SteppedExecutor
from .tiled import TiledExecutor


def create_executor(
    strategy: Strategy,
    pool: SurfacePool,
    calculator: LayoutCalculator | None = None,
) -> StrategyExecutor:
    match strategy:
        case Strategy.DIRECT:
            return DirectExecutor(pool, calculator)
        case Strategy.STEPPED:
            return SteppedExecutor(pool, calculator)
        case Strategy.CHUNKED:
            return ChunkedExecutor(pool, calculator)
        case Strategy.TILED:
            return TiledExecutor(pool, calculator)
        case _:
            assert_never(strategy)
