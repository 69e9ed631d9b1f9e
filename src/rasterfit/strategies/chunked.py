"""Chunked strategy - horizontal bands into one shared output surface."""

from typing import override

from PIL import Image

from ..common.schemas import LayoutResult, ResizeRequest, Strategy
from ..layout.calculator import LayoutCalculator
from ..memory.monitor import BYTES_PER_PIXEL, PROCESSING_OVERHEAD
from ..rendering.renderer import blit, image_box
from ..surfaces.pool import SurfacePool
from ..surfaces.surface import Surface
from ..utils.profiling import timed
from .base import ProgressCallback, StrategyExecutor, split_axis
from .selector import CHUNK_MEMORY_BYTES


def band_rows(source_width: int, budget_bytes: int = CHUNK_MEMORY_BYTES) -> int:
    """Source rows per band so one band stays under ``budget_bytes``."""
    return max(1, budget_bytes // (source_width * BYTES_PER_PIXEL * PROCESSING_OVERHEAD))


class ChunkedExecutor(StrategyExecutor):
    """Resizes the source band by band.

    Each band is scaled into a leased scratch surface and composited at its
    destination rows, so only one band's pixels are resampled at a time.
    """

    def __init__(
        self,
        pool: SurfacePool,
        calculator: LayoutCalculator | None = None,
        chunk_memory_bytes: int = CHUNK_MEMORY_BYTES,
    ):
        super().__init__(pool, calculator)
        self.chunk_memory_bytes: int = chunk_memory_bytes

    @property
    @override
    def strategy(self) -> Strategy:
        return Strategy.CHUNKED

    @timed
    @override
    def run(
        self,
        source: Image.Image,
        layout: LayoutResult,
        request: ResizeRequest,
        progress: ProgressCallback | None = None,
    ) -> tuple[Surface, int]:
        x0, y0, _, _ = image_box(layout)
        target_w, target_h = layout.image_size.as_tuple()
        bands = split_axis(
            source.height, band_rows(source.width, self.chunk_memory_bytes), target_h
        )

        canvas = self.prepare_canvas(layout, request)
        peak_bytes = canvas.size_bytes
        try:
            for index, ((d0, d1), (s0, s1)) in enumerate(bands, start=1):
                with self.pool.lease(target_w, d1 - d0) as band:
                    band.resample = canvas.resample
                    blit(band, source, (0, 0, target_w, d1 - d0), (0, s0, source.width, s1))
                    canvas.image.alpha_composite(band.image, (x0, y0 + d0))
                    peak_bytes = max(peak_bytes, canvas.size_bytes + band.size_bytes * 2)

                if progress:
                    progress(index, len(bands))
        except Exception:
            self.pool.release(canvas)
            raise

        return canvas, peak_bytes
