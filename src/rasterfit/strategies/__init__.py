"""Strategy selection and the four resize executors."""

from .base import ProcessingResult, ProgressCallback, StrategyExecutor, split_axis
from .chunked import ChunkedExecutor, band_rows
from .direct import DirectExecutor
from .registry import create_executor
from .selector import (
    analyze_image,
    recommended_chunk_size,
    scale_ratio_for,
    select_strategy,
    validate_processing,
)
from .stepped import SteppedExecutor, plan_steps
from .tiled import TiledExecutor

__all__ = [
    "ChunkedExecutor",
    "DirectExecutor",
    "ProcessingResult",
    "ProgressCallback",
    "SteppedExecutor",
    "StrategyExecutor",
    "TiledExecutor",
    "analyze_image",
    "band_rows",
    "create_executor",
    "plan_steps",
    "recommended_chunk_size",
    "scale_ratio_for",
    "select_strategy",
    "split_axis",
    "validate_processing",
]
