"""Stepped strategy - progressive halving before the final render."""

from typing import override

from PIL import Image

from ..common.schemas import Dimensions, FitMode, LayoutResult, ResizeRequest, Strategy
from ..surfaces.surface import Surface
from ..utils.profiling import timed
from .base import ProgressCallback, StrategyExecutor

# Stop halving once the image is within this factor of the target.
STEP_FACTOR = 2


def plan_steps(source: Dimensions, target: Dimensions) -> list[Dimensions]:
    """Intermediate sizes, each half the previous, never below the target.

    Example:
        plan_steps(Dimensions(width=4000, height=4000), Dimensions(width=500, height=500))
        -> [2000x2000, 1000x1000]
    """
    steps: list[Dimensions] = []
    width, height = source.width, source.height
    while width > target.width * STEP_FACTOR or height > target.height * STEP_FACTOR:
        width = max(target.width, width // 2)
        height = max(target.height, height // 2)
        steps.append(Dimensions(width=width, height=height))
    return steps


class SteppedExecutor(StrategyExecutor):
    """Downscales through pooled intermediates to limit aliasing.

    Each step is a plain render pass (fill layout, transparent background);
    only the last pass applies the real layout with padding and background.
    """

    @property
    @override
    def strategy(self) -> Strategy:
        return Strategy.STEPPED

    @timed
    @override
    def run(
        self,
        source: Image.Image,
        layout: LayoutResult,
        request: ResizeRequest,
        progress: ProgressCallback | None = None,
    ) -> tuple[Surface, int]:
        quality, smoothing = request.render_quality, request.smoothing
        steps = plan_steps(Dimensions(width=source.width, height=source.height), layout.image_size)
        total = len(steps) + 1

        current = source
        intermediate: Surface | None = None
        peak_bytes = 0
        try:
            for index, size in enumerate(steps, start=1):
                step_layout = self.calculator.compute(
                    Dimensions(width=current.width, height=current.height),
                    ResizeRequest(width=size.width, height=size.height, fit=FitMode.FILL),
                )
                step_surface = self.renderer.render(
                    current, step_layout, quality=quality, smoothing=smoothing
                )
                held = step_surface.size_bytes + (intermediate.size_bytes if intermediate else 0)
                peak_bytes = max(peak_bytes, held)

                if intermediate is not None:
                    self.pool.release(intermediate)
                intermediate = step_surface
                current = step_surface.image

                if progress:
                    progress(index, total)

            output = self.renderer.render(
                current,
                layout,
                background=request.background,
                quality=quality,
                smoothing=smoothing,
            )
            held = output.size_bytes + (intermediate.size_bytes if intermediate else 0)
            peak_bytes = max(peak_bytes, held)
        finally:
            if intermediate is not None:
                self.pool.release(intermediate)

        if progress:
            progress(total, total)
        return output, peak_bytes
