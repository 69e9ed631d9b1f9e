"""Direct strategy - one render pass at full source resolution."""

from typing import override

from PIL import Image

from ..common.schemas import LayoutResult, ResizeRequest, Strategy
from ..surfaces.surface import Surface
from ..utils.profiling import timed
from .base import ProgressCallback, StrategyExecutor


class DirectExecutor(StrategyExecutor):
    """Delegates to the renderer: the whole source scaled with a single blit."""

    @property
    @override
    def strategy(self) -> Strategy:
        return Strategy.DIRECT

    @timed
    @override
    def run(
        self,
        source: Image.Image,
        layout: LayoutResult,
        request: ResizeRequest,
        progress: ProgressCallback | None = None,
    ) -> tuple[Surface, int]:
        surface = self.renderer.render(
            source,
            layout,
            background=request.background,
            quality=request.render_quality,
            smoothing=request.smoothing,
        )
        if progress:
            progress(1, 1)

        # Output canvas plus the resampled region Pillow builds before compositing.
        peak_bytes = surface.size_bytes + layout.image_size.pixel_count * 4
        return surface, peak_bytes
