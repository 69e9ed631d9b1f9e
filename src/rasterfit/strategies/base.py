"""StrategyExecutor - Abstract base class for resize strategies."""

import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import ClassVar

from PIL import Image
from pydantic import BaseModel, ConfigDict

from ..common.errors import InvalidBackgroundError, LayoutError, StrategyExecutionError
from ..common.schemas import Dimensions, LayoutResult, ResizeRequest, Strategy
from ..layout.calculator import LayoutCalculator
from ..memory.probe import MB
from ..rendering.renderer import Renderer, parse_background, resampling_source, validate_layout
from ..surfaces.pool import SurfacePool
from ..surfaces.surface import Surface
from ..utils.profiling import elapsed_ms

# (done, total) units of work inside one strategy run.
ProgressCallback = Callable[[int, int], None]

Span = tuple[int, int]

# Integer destination span paired with the fractional source span it samples.
Band = tuple[Span, tuple[float, float]]


class ProcessingResult(BaseModel):
    """Outcome of one resize.

    The caller owns ``output_surface`` and should hand it back to the pool
    (``pool.release``) once the pixels have been consumed.
    """

    output_surface: Surface
    strategy_used: Strategy
    processing_time_ms: float
    peak_memory_mb: float
    user_message: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(arbitrary_types_allowed=True)


def split_axis(source_length: int, step: int, target_length: int) -> list[Band]:
    """Cut one axis into bands of ``step`` source pixels.

    Each entry pairs the integer destination span with the exact (fractional)
    source span that maps onto it, so adjacent bands meet without seams.
    Bands that shrink to zero destination pixels are dropped.
    """
    ratio = source_length / target_length
    spans: list[Band] = []
    for start in range(0, source_length, step):
        end = min(source_length, start + step)
        d0 = round(start / ratio)
        d1 = round(end / ratio)
        if d1 > d0:
            spans.append(((d0, d1), (d0 * ratio, d1 * ratio)))
    return spans


class StrategyExecutor(ABC):
    """
    Template-method base for the four resize strategies.

    - Layout and background are validated before any surface is acquired
    - run() owns surface handling and returns the output plus peak bytes
    - Internal failures surface as StrategyExecutionError
    """

    def __init__(self, pool: SurfacePool, calculator: LayoutCalculator | None = None):
        self.pool: SurfacePool = pool
        self.renderer: Renderer = Renderer(pool)
        self.calculator: LayoutCalculator = calculator or LayoutCalculator()

    @property
    @abstractmethod
    def strategy(self) -> Strategy: ...

    @abstractmethod
    def run(
        self,
        source: Image.Image,
        layout: LayoutResult,
        request: ResizeRequest,
        progress: ProgressCallback | None = None,
    ) -> tuple[Surface, int]:
        """
        Resize ``source`` into a new surface described by ``layout``.

        - Must release every intermediate surface it acquires
        - Returns the output surface and the peak bytes it held at once
        """
        ...

    def execute(
        self,
        source: Image.Image,
        request: ResizeRequest,
        progress: ProgressCallback | None = None,
    ) -> ProcessingResult:
        layout = self.calculator.compute(
            Dimensions(width=source.width, height=source.height), request
        )
        validate_layout(layout)
        _ = parse_background(request.background)

        start = time.perf_counter()
        try:
            surface, peak_bytes = self.run(resampling_source(source), layout, request, progress)

        except (LayoutError, InvalidBackgroundError):
            raise

        except Exception as exc:
            raise StrategyExecutionError(self.strategy, str(exc)) from exc

        return ProcessingResult(
            output_surface=surface,
            strategy_used=self.strategy,
            processing_time_ms=elapsed_ms(start),
            peak_memory_mb=round(peak_bytes / MB, 2),
        )

    def prepare_canvas(self, layout: LayoutResult, request: ResizeRequest) -> Surface:
        """Acquire the shared output surface with the request's fill and filter."""
        return self.renderer.prepare_canvas(
            layout,
            parse_background(request.background),
            request.render_quality,
            request.smoothing,
        )
