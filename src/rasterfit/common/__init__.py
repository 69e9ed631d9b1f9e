"""Common module - schemas, configuration and errors."""

from .config import PerformanceProfile, StrategyThresholds, get_performance_config
from .errors import (
    InvalidBackgroundError,
    JobTimeoutError,
    LayoutError,
    PoolExhaustionWarning,
    ResizeEngineError,
    StrategyExecutionError,
    SurfaceAllocationError,
)
from .schemas import (
    Dimensions,
    FitMode,
    LayoutResult,
    Padding,
    Point,
    PoolStats,
    Priority,
    RenderQuality,
    ResizeRequest,
    Strategy,
)

__all__ = [
    "Dimensions",
    "FitMode",
    "InvalidBackgroundError",
    "JobTimeoutError",
    "LayoutError",
    "LayoutResult",
    "Padding",
    "PerformanceProfile",
    "Point",
    "PoolExhaustionWarning",
    "PoolStats",
    "Priority",
    "RenderQuality",
    "ResizeEngineError",
    "ResizeRequest",
    "Strategy",
    "StrategyExecutionError",
    "StrategyThresholds",
    "SurfaceAllocationError",
    "get_performance_config",
]
