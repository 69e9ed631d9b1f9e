"""Tiled strategy - a bounded tile grid into one shared output surface."""

from typing import override

from PIL import Image

from ..common.schemas import LayoutResult, ResizeRequest, Strategy
from ..layout.calculator import LayoutCalculator
from ..rendering.renderer import blit, image_box
from ..surfaces.pool import SurfacePool
from ..surfaces.surface import Surface
from ..utils.profiling import timed
from .base import ProgressCallback, StrategyExecutor, split_axis
from .selector import recommended_chunk_size


class TiledExecutor(StrategyExecutor):
    """Resizes the source tile by tile.

    Peak memory is the output canvas plus one tile, whatever the source size.

    Args:
        tile_size: Source tile edge in pixels (defaults to the recommended chunk size)
    """

    def __init__(
        self,
        pool: SurfacePool,
        calculator: LayoutCalculator | None = None,
        tile_size: int | None = None,
    ):
        super().__init__(pool, calculator)
        self.tile_size: int = tile_size or recommended_chunk_size()

    @property
    @override
    def strategy(self) -> Strategy:
        return Strategy.TILED

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
        columns = split_axis(source.width, self.tile_size, layout.image_size.width)
        rows = split_axis(source.height, self.tile_size, layout.image_size.height)
        total = len(columns) * len(rows)

        canvas = self.prepare_canvas(layout, request)
        peak_bytes = canvas.size_bytes
        done = 0
        try:
            for (dy0, dy1), (sy0, sy1) in rows:
                for (dx0, dx1), (sx0, sx1) in columns:
                    tile_w, tile_h = dx1 - dx0, dy1 - dy0
                    with self.pool.lease(tile_w, tile_h) as tile:
                        tile.resample = canvas.resample
                        blit(tile, source, (0, 0, tile_w, tile_h), (sx0, sy0, sx1, sy1))
                        canvas.image.alpha_composite(tile.image, (x0 + dx0, y0 + dy0))
                        peak_bytes = max(peak_bytes, canvas.size_bytes + tile.size_bytes * 2)

                    done += 1
                    if progress:
                        progress(done, total)
        except Exception:
            self.pool.release(canvas)
            raise

        return canvas, peak_bytes
