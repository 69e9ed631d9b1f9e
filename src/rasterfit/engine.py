"""ResizeEngine - analyse, select a strategy, execute, fall back."""

import asyncio
from collections.abc import Callable

from PIL import Image
from loguru import logger

from .common.config import StrategyThresholds
from .common.errors import StrategyExecutionError
from .common.schemas import (
    Dimensions,
    ImageAnalysis,
    Priority,
    RenderQuality,
    ResizeRequest,
    Strategy,
)
from .layout.calculator import LayoutCalculator
from .memory.monitor import MemoryMonitor
from .rendering.renderer import parse_background, validate_layout
from .strategies.base import ProcessingResult
from .strategies.direct import DirectExecutor
from .strategies.registry import create_executor
from .strategies.selector import analyze_image, scale_ratio_for, select_strategy
from .surfaces.pool import SurfacePool

# (stage, percent, message); stages are analyzing, processing, finalizing, completed.
StageCallback = Callable[[str, int, str], None]
MemoryWarningCallback = Callable[[str], None]

PROCESSING_START = 40
PROCESSING_SPAN = 40


class ResizeEngine:
    """Entry point for single resizes.

    Each engine owns its pool and monitor unless they are injected, so tests
    and independent callers never share hidden state.

    Example:
        engine = ResizeEngine()
        result = engine.resize_sync(image, ResizeRequest(width=800, height=600, fit="contain"))
        png = result.output_surface.encode()
        engine.pool.release(result.output_surface)
    """

    def __init__(
        self,
        pool: SurfacePool | None = None,
        monitor: MemoryMonitor | None = None,
        thresholds: StrategyThresholds | None = None,
    ):
        self.pool: SurfacePool = pool or SurfacePool()
        self.monitor: MemoryMonitor = monitor or MemoryMonitor(self.pool)
        self.thresholds: StrategyThresholds = thresholds or StrategyThresholds()
        self.calculator: LayoutCalculator = LayoutCalculator()

    def choose_strategy(
        self,
        source: Dimensions,
        request: ResizeRequest,
        analysis: ImageAnalysis | None = None,
    ) -> Strategy:
        analysis = analysis or analyze_image(source.width, source.height)
        ratio = scale_ratio_for(source, request) if request.priority == Priority.QUALITY else None
        return select_strategy(
            analysis.pixel_count,
            analysis.estimated_memory_mb,
            request.priority,
            self.thresholds,
            ratio,
        )

    def resize_sync(
        self,
        source: Image.Image,
        request: ResizeRequest | None = None,
        *,
        on_progress: StageCallback | None = None,
        on_memory_warning: MemoryWarningCallback | None = None,
        force_strategy: Strategy | None = None,
        quality: RenderQuality | None = None,
    ) -> ProcessingResult:
        """Resize ``source`` according to ``request``.

        The source image is never modified. Geometry and background are
        validated before any surface is acquired.

        Raises:
            LayoutError: If the request produces invalid geometry
            InvalidBackgroundError: If the background colour cannot be parsed
            StrategyExecutionError: If direct execution (or the direct fallback) fails
        """
        request = request or ResizeRequest()
        if quality is not None:
            request = request.model_copy(update={"quality": quality})

        def report(stage: str, percent: int, message: str) -> None:
            if on_progress:
                on_progress(stage, percent, message)

        dims = Dimensions(width=source.width, height=source.height)
        validate_layout(self.calculator.compute(dims, request))
        _ = parse_background(request.background)

        report("analyzing", 10, "Analyzing image...")
        analysis = analyze_image(dims.width, dims.height)
        strategy = force_strategy or self.choose_strategy(dims, request, analysis)
        report("analyzing", 20, f"Optimization strategy: {strategy}")

        if analysis.estimated_memory_mb > self.thresholds.memory_warning_threshold:
            message = (
                f"Memory usage may increase up to {round(analysis.estimated_memory_mb)}MB "
                + "due to large image processing."
            )
            logger.warning(f"[ResizeEngine] {message}")
            if on_memory_warning:
                on_memory_warning(message)

        def step_progress(done: int, total: int) -> None:
            percent = PROCESSING_START + round(PROCESSING_SPAN * done / total)
            report("processing", percent, f"Processing {strategy} ({done}/{total})")

        report("processing", PROCESSING_START, f"Processing with {strategy} strategy...")
        try:
            result = create_executor(strategy, self.pool, self.calculator).execute(
                source, request, step_progress
            )
        except StrategyExecutionError as exc:
            if strategy == Strategy.DIRECT:
                raise
            logger.warning(
                f"[ResizeEngine] {strategy} processing failed, switching to direct: {exc}"
            )
            report("processing", 50, "Changing processing method...")
            fallback = request.model_copy(
                update={"priority": Priority.BALANCED, "quality": RenderQuality.MEDIUM}
            )
            result = DirectExecutor(self.pool, self.calculator).execute(source, fallback)

        report("finalizing", 90, "Finalizing...")
        is_high_res = analysis.pixel_count > self.thresholds.high_res_pixel_threshold
        if is_high_res and result.strategy_used != Strategy.DIRECT:
            result = result.model_copy(
                update={
                    "user_message": "High-resolution image processed memory-efficiently. "
                    + f"({result.strategy_used} applied)"
                }
            )

        logger.debug(
            f"[ResizeEngine] {dims.width}x{dims.height} -> "
            + f"{result.output_surface.width}x{result.output_surface.height} "
            + f"via {result.strategy_used} in {result.processing_time_ms}ms"
        )
        report("completed", 100, "Processing complete")
        return result

    async def resize(
        self,
        source: Image.Image,
        request: ResizeRequest | None = None,
        *,
        on_progress: StageCallback | None = None,
        on_memory_warning: MemoryWarningCallback | None = None,
        force_strategy: Strategy | None = None,
        quality: RenderQuality | None = None,
    ) -> ProcessingResult:
        """Async variant of ``resize_sync`` running on a worker thread.

        Callbacks are invoked from that worker thread.
        """
        return await asyncio.to_thread(
            self.resize_sync,
            source,
            request,
            on_progress=on_progress,
            on_memory_warning=on_memory_warning,
            force_strategy=force_strategy,
            quality=quality,
        )
