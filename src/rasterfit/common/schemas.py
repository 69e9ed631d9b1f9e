"""Pydantic schemas for resize requests, layouts and results."""

import math
from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ─────────────────────────────────────────────────────────────
# Enumerations (closed sets)
# ─────────────────────────────────────────────────────────────


class FitMode(StrEnum):
    """Policy for mapping the source aspect ratio onto a target box."""

    COVER = "cover"
    CONTAIN = "contain"
    FILL = "fill"
    MAX_FIT = "maxFit"
    MIN_FIT = "minFit"


class Strategy(StrEnum):
    """Execution plan used to resize one image."""

    DIRECT = "direct"
    STEPPED = "stepped"
    CHUNKED = "chunked"
    TILED = "tiled"


class Priority(StrEnum):
    SPEED = "speed"
    BALANCED = "balanced"
    QUALITY = "quality"


class RenderQuality(StrEnum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @classmethod
    def from_priority(cls, priority: Priority) -> "RenderQuality":
        if priority == Priority.SPEED:
            return RenderQuality.LOW
        elif priority == Priority.QUALITY:
            return RenderQuality.HIGH
        else:
            return RenderQuality.MEDIUM


# ─────────────────────────────────────────────────────────────
# Geometry
# ─────────────────────────────────────────────────────────────


class Dimensions(BaseModel):
    width: int = Field(..., ge=0)
    height: int = Field(..., ge=0)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def pixel_count(self) -> int:
        return self.width * self.height

    def as_tuple(self) -> tuple[int, int]:
        return (self.width, self.height)


class Point(BaseModel):
    x: float
    y: float

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class Padding(BaseModel):
    """Additive inset around the resized image.

    Unspecified sides default to 0. Values must be non-negative.
    """

    top: int = Field(default=0, ge=0)
    right: int = Field(default=0, ge=0)
    bottom: int = Field(default=0, ge=0)
    left: int = Field(default=0, ge=0)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @field_validator("top", "right", "bottom", "left", mode="before")
    @classmethod
    def round_fractional(cls, v: object) -> object:
        """Fractional sides round to the nearest pixel, as scalar padding does."""
        if isinstance(v, float) and math.isfinite(v) and v >= 0:
            return int(round(v))
        return v

    @property
    def horizontal(self) -> int:
        return self.left + self.right

    @property
    def vertical(self) -> int:
        return self.top + self.bottom


PaddingLike = int | Padding | dict[str, int] | None


# ─────────────────────────────────────────────────────────────
# Request / layout
# ─────────────────────────────────────────────────────────────


class ResizeRequest(BaseModel):
    """Parameters for a single resize call.

    Attributes:
        width: Target width in pixels (None = derived or source width)
        height: Target height in pixels (None = derived or source height)
        fit: Fit mode
        padding: Scalar (all sides) or partial per-side padding
        background: CSS-like colour, or "transparent"/"" for no fill
        without_enlargement: Never scale above 1
        without_reduction: Never scale below 1
        priority: Speed/quality trade-off used for strategy selection
        quality: Explicit render quality (None = derived from priority)
        smoothing: Explicit smoothing override (None = derived from quality)
    """

    width: int | None = Field(default=None, gt=0)
    height: int | None = Field(default=None, gt=0)
    fit: FitMode = FitMode.COVER
    padding: Padding = Field(default_factory=Padding)
    background: str = "transparent"
    without_enlargement: bool = False
    without_reduction: bool = False
    priority: Priority = Priority.BALANCED
    quality: RenderQuality | None = None
    smoothing: bool | None = None

    @field_validator("padding", mode="before")
    @classmethod
    def coerce_padding(cls, v: object) -> object:
        """Accept a scalar padding value as shorthand for all four sides."""
        if v is None:
            return Padding()
        if isinstance(v, bool):
            raise ValueError("padding must be a number or a per-side mapping")
        if isinstance(v, int | float):
            if v < 0:
                raise ValueError("padding must be non-negative")
            side = int(round(v))
            return Padding(top=side, right=side, bottom=side, left=side)
        return v

    @property
    def render_quality(self) -> RenderQuality:
        if self.quality is not None:
            return self.quality
        return RenderQuality.from_priority(self.priority)


class LayoutResult(BaseModel):
    """Output geometry computed by the layout calculator.

    Invariant: canvas_size == round(image_size) + padding on each axis, and
    position == (padding.left, padding.top).
    """

    canvas_size: Dimensions
    image_size: Dimensions
    position: Point
    scale_x: float = 1.0
    scale_y: float = 1.0

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


# ─────────────────────────────────────────────────────────────
# Stats / analysis
# ─────────────────────────────────────────────────────────────


class PoolStats(BaseModel):
    size: int
    max_size: int
    total_created: int
    total_acquired: int
    total_released: int
    pool_hits: int
    hit_ratio: float
    memory_usage_mb: float
    eviction_count: int
    complexity: float


class MemoryInfo(BaseModel):
    pressure: float = Field(..., ge=0.0, le=1.0)
    used_mb: float
    limit_mb: float
    available_mb: float


class ImageAnalysis(BaseModel):
    width: int
    height: int
    pixel_count: int
    estimated_memory_mb: float
    recommended_chunk_size: int
    complexity: str


class ProcessingValidation(BaseModel):
    """Dry-run assessment of a resize request."""

    can_process: bool
    warnings: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    estimated_memory_mb: float
    suggested_strategy: Strategy
