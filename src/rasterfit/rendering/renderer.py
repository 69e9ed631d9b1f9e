"""Single-blit renderer: places the whole source into the layout rectangle."""

import math

from PIL import Image, ImageColor
from loguru import logger

from ..common.errors import InvalidBackgroundError, LayoutError
from ..common.schemas import LayoutResult, RenderQuality
from ..surfaces.pool import SurfacePool
from ..surfaces.surface import Surface

# Canvases above this area may exhaust memory on small hosts.
LARGE_CANVAS_AREA = 16384 * 16384

TRANSPARENT_BACKGROUNDS = ("", "transparent")

# Pillow resamples these modes with NEAREST whatever filter is requested.
NEAREST_ONLY_MODES = ("1", "P", "PA")

Box = tuple[int, int, int, int]
SourceBox = tuple[float, float, float, float]


def resolve_resample(quality: RenderQuality, smoothing: bool | None = None) -> Image.Resampling:
    """Map quality (and an optional smoothing override) to a Pillow filter.

    An explicit ``smoothing`` value always wins over the quality default.
    """
    enabled = smoothing if smoothing is not None else quality != RenderQuality.LOW
    if not enabled:
        return Image.Resampling.NEAREST
    if quality == RenderQuality.HIGH:
        return Image.Resampling.LANCZOS
    return Image.Resampling.BILINEAR


def parse_background(background: str | None) -> tuple[int, int, int, int] | None:
    """Parse a CSS-like colour; None for transparent/empty."""
    if background is None or background.strip().lower() in TRANSPARENT_BACKGROUNDS:
        return None
    try:
        return ImageColor.getcolor(background.strip(), "RGBA")  # type: ignore[return-value]
    except ValueError as exc:
        raise InvalidBackgroundError(f"Unrecognised background colour: {background!r}") from exc


def resampling_source(image: Image.Image) -> Image.Image:
    """Return ``image`` unchanged unless its mode can only be resampled with NEAREST.

    Other modes are resampled as they are; ``blit`` converts each resampled
    region to RGBA, so no full-resolution copy is made.
    """
    if image.mode in NEAREST_ONLY_MODES:
        return image.convert("RGBA")
    return image


def blit(
    dest: Surface,
    source: Image.Image,
    dest_box: Box,
    source_box: SourceBox | None = None,
) -> None:
    """Copy ``source_box`` of ``source`` scaled into ``dest_box`` of ``dest``.

    This is the one copy primitive: the region is resampled with the surface's
    filter and composited at the integer-rounded destination.
    """
    x0, y0, x1, y1 = (int(round(v)) for v in dest_box)
    width, height = x1 - x0, y1 - y0
    if width <= 0 or height <= 0:
        return

    box = source_box if source_box is not None else (0, 0, source.width, source.height)
    region = source.resize((width, height), dest.resample, box=box)
    if region.mode != "RGBA":
        region = region.convert("RGBA")
    dest.image.alpha_composite(region, (x0, y0))


class Renderer:
    """Renders a layout onto a pooled surface with exactly one blit."""

    def __init__(self, pool: SurfacePool):
        self.pool: SurfacePool = pool

    def render(
        self,
        source: Image.Image,
        layout: LayoutResult,
        background: str | None = "transparent",
        quality: RenderQuality = RenderQuality.HIGH,
        smoothing: bool | None = None,
    ) -> Surface:
        """Render ``source`` into a new surface sized to ``layout.canvas_size``.

        The source image is never mutated. The caller owns the returned surface
        and should hand it back with ``pool.release`` when finished.

        Raises:
            LayoutError: If the layout has non-positive sizes
            InvalidBackgroundError: If the background colour cannot be parsed
            SurfaceAllocationError: If Pillow refuses to allocate the canvas
        """
        validate_layout(layout)
        fill = parse_background(background)

        surface = self.prepare_canvas(layout, fill, quality, smoothing)
        try:
            blit(surface, source, image_box(layout))
        except Exception:
            self.pool.release(surface)
            raise
        return surface

    def prepare_canvas(
        self,
        layout: LayoutResult,
        fill: tuple[int, int, int, int] | None,
        quality: RenderQuality,
        smoothing: bool | None = None,
    ) -> Surface:
        """Acquire a canvas-sized surface with background and filter applied."""
        surface = self.pool.acquire(layout.canvas_size.width, layout.canvas_size.height)
        surface.resample = resolve_resample(quality, smoothing)
        if fill is not None:
            surface.fill(fill)
        return surface


def image_box(layout: LayoutResult) -> Box:
    """Destination rectangle of the image inside the canvas, integer-rounded."""
    x = int(round(layout.position.x))
    y = int(round(layout.position.y))
    return (x, y, x + layout.image_size.width, y + layout.image_size.height)


def validate_layout(layout: LayoutResult) -> None:
    canvas, image = layout.canvas_size, layout.image_size
    if canvas.width <= 0 or canvas.height <= 0:
        raise LayoutError(
            f"Invalid canvas size: {canvas.width}x{canvas.height}. Both dimensions must be > 0."
        )
    if image.width <= 0 or image.height <= 0:
        raise LayoutError(
            f"Invalid image size: {image.width}x{image.height}. Both dimensions must be > 0."
        )
    if not (math.isfinite(layout.position.x) and math.isfinite(layout.position.y)):
        raise LayoutError(
            f"Invalid position: ({layout.position.x}, {layout.position.y}). Must be finite."
        )
    if canvas.pixel_count > LARGE_CANVAS_AREA:
        logger.warning(
            f"[Renderer] Large canvas size ({canvas.width}x{canvas.height}). "
            + "This may cause memory issues on some hosts."
        )
