"""Owned raster surface wrapping a Pillow RGBA image."""

from io import BytesIO
from typing import override

from PIL import Image

from ..common.errors import SurfaceAllocationError

SURFACE_MODE = "RGBA"
TRANSPARENT = (0, 0, 0, 0)

DEFAULT_RESAMPLE = Image.Resampling.BILINEAR


def allocate_image(width: int, height: int) -> Image.Image:
    """Create a transparent RGBA image, mapping Pillow refusals to SurfaceAllocationError."""
    if width < 0 or height < 0:
        raise SurfaceAllocationError(width, height, "negative dimensions")
    try:
        return Image.new(SURFACE_MODE, (width, height), TRANSPARENT)
    except (MemoryError, ValueError, Image.DecompressionBombError) as exc:
        raise SurfaceAllocationError(width, height, str(exc)) from exc


class Surface:
    """A 2D pixel buffer with drawing state and an explicit lifecycle.

    State:
    - ``in_use``: True while a caller owns the surface; idle surfaces belong to the pool
    - ``disposed``: True once ``dispose()`` released the buffer (dimensions become 0)
    """

    def __init__(self, width: int = 0, height: int = 0):
        self._image: Image.Image | None = allocate_image(width, height)
        self.in_use: bool = False
        self.disposed: bool = False
        self.resample: Image.Resampling = DEFAULT_RESAMPLE

    @property
    def image(self) -> Image.Image:
        if self._image is None:
            raise RuntimeError("Surface has been disposed")
        return self._image

    @property
    def width(self) -> int:
        return self._image.width if self._image is not None else 0

    @property
    def height(self) -> int:
        return self._image.height if self._image is not None else 0

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def size_bytes(self) -> int:
        return self.area * 4

    def set_size(self, width: int, height: int) -> None:
        """Resize the buffer; content is discarded as with a canvas resize."""
        if self.disposed:
            raise RuntimeError("Surface has been disposed")
        if (width, height) == (self.width, self.height):
            return
        new_image = allocate_image(width, height)
        if self._image is not None:
            self._image.close()
        self._image = new_image

    def reset(self) -> None:
        """Clear content and restore default drawing state."""
        if self._image is not None and self.area > 0:
            self._image.paste(TRANSPARENT, (0, 0, self.width, self.height))
        self.resample = DEFAULT_RESAMPLE

    def fill(self, color: tuple[int, int, int, int]) -> None:
        self.image.paste(color, (0, 0, self.width, self.height))

    def dispose(self) -> None:
        """Release the pixel buffer. Safe to call more than once."""
        if self._image is not None:
            self._image.close()
            self._image = None
        self.disposed = True

    def encode(self, format: str = "PNG", **save_kwargs: object) -> bytes:
        """Encode the surface into a compressed artifact held in memory."""
        image = self.image
        if format.upper() in ("JPG", "JPEG"):
            image = image.convert("RGB")
            format = "JPEG"
        buffer = BytesIO()
        image.save(buffer, format=format, **save_kwargs)
        return buffer.getvalue()

    def detach(self) -> Image.Image:
        """Return a standalone copy of the pixels, independent of pool reuse."""
        return self.image.copy()

    @override
    def __repr__(self) -> str:
        state = "disposed" if self.disposed else ("in-use" if self.in_use else "free")
        return f"Surface({self.width}x{self.height}, {state})"
