"""Tunable thresholds and batch performance profiles."""

from typing import Literal

from pydantic import BaseModel, Field


class StrategyThresholds(BaseModel):
    """Thresholds consulted by strategy selection.

    Attributes:
        high_res_pixel_threshold: Pixel count above which an image is high-resolution
        memory_warning_threshold: Estimated MB above which a memory warning is emitted
        auto_tile_threshold: Estimated MB above which chunked/tiled is forced
        time_warning_threshold: Estimated seconds above which a time warning is emitted
    """

    high_res_pixel_threshold: int = Field(default=8_000_000, gt=0)
    memory_warning_threshold: float = Field(default=200.0, gt=0)
    auto_tile_threshold: float = Field(default=300.0, gt=0)
    time_warning_threshold: float = Field(default=10.0, gt=0)


ProfileName = Literal["fast", "balanced", "quality"]


class PerformanceProfile(BaseModel):
    """Batch execution settings.

    Attributes:
        concurrency: Jobs per concurrent window
        timeout: Per-job budget in seconds
        memory_limit_mb: Soft memory budget for one job
    """

    concurrency: int = Field(default=2, ge=1)
    timeout: float = Field(default=30.0, gt=0)
    memory_limit_mb: int = Field(default=256, gt=0)


RESIZE_PROFILES: dict[str, PerformanceProfile] = {
    "fast": PerformanceProfile(concurrency=4, timeout=15, memory_limit_mb=128),
    "balanced": PerformanceProfile(concurrency=2, timeout=30, memory_limit_mb=256),
    "quality": PerformanceProfile(concurrency=1, timeout=60, memory_limit_mb=512),
}


def get_performance_config(
    profile: ProfileName = "balanced",
    **overrides: object,
) -> PerformanceProfile:
    """Return a profile with keyword overrides applied.

    Raises:
        KeyError: If the profile name is unknown
        pydantic.ValidationError: If an override is out of range
    """
    base = RESIZE_PROFILES[profile]
    return PerformanceProfile.model_validate({**base.model_dump(), **overrides})
