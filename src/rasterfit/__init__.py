"""rasterfit - adaptive raster resizing with pooled surfaces and memory-aware strategies."""

from .batch import BatchScheduler, resize_all
from .common.config import (
    PerformanceProfile,
    StrategyThresholds,
    get_performance_config,
)
from .common.errors import (
    InvalidBackgroundError,
    JobTimeoutError,
    LayoutError,
    PoolExhaustionWarning,
    ResizeEngineError,
    StrategyExecutionError,
    SurfaceAllocationError,
)
from .common.schemas import (
    Dimensions,
    FitMode,
    LayoutResult,
    Padding,
    Priority,
    RenderQuality,
    ResizeRequest,
    Strategy,
)
from .engine import ResizeEngine
from .layout import LayoutCalculator, compute_layout
from .memory import MemoryMonitor
from .rendering import Renderer
from .strategies import ProcessingResult, select_strategy, validate_processing
from .surfaces import Surface, SurfacePool

__version__ = "0.1.0"

__all__ = [
    "BatchScheduler",
    "Dimensions",
    "FitMode",
    "InvalidBackgroundError",
    "JobTimeoutError",
    "LayoutCalculator",
    "LayoutError",
    "LayoutResult",
    "MemoryMonitor",
    "Padding",
    "PerformanceProfile",
    "PoolExhaustionWarning",
    "Priority",
    "ProcessingResult",
    "RenderQuality",
    "Renderer",
    "ResizeEngine",
    "ResizeEngineError",
    "ResizeRequest",
    "Strategy",
    "StrategyExecutionError",
    "StrategyThresholds",
    "Surface",
    "SurfaceAllocationError",
    "SurfacePool",
    "__version__",
    "compute_layout",
    "get_performance_config",
    "resize_all",
    "select_strategy",
    "validate_processing",
]
