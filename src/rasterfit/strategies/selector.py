"""Strategy selection - a pure classification of a resize request."""

import math
from typing import assert_never

from ..common.config import StrategyThresholds
from ..common.schemas import (
    Dimensions,
    ImageAnalysis,
    Priority,
    ProcessingValidation,
    ResizeRequest,
    Strategy,
)
from ..layout.calculator import LayoutCalculator
from ..memory.monitor import estimate_surface_memory_mb

TILED_PIXEL_THRESHOLD = 16_000_000

# A target/source ratio below this counts as a substantial shrink.
STEPPED_SCALE_RATIO = 0.5

# Per-chunk memory budget used to derive the recommended chunk edge.
CHUNK_MEMORY_BYTES = 16 * 1024 * 1024
MIN_CHUNK_SIZE = 512
MAX_CHUNK_SIZE = 2048

# Rough throughput used only for time warnings.
PIXELS_PER_SECOND = 20_000_000

DEFAULT_THRESHOLDS = StrategyThresholds()


def _memory_driven(pixel_count: int) -> Strategy:
    return Strategy.TILED if pixel_count > TILED_PIXEL_THRESHOLD else Strategy.CHUNKED


def select_strategy(
    pixel_count: int,
    estimated_memory_mb: float,
    priority: Priority = Priority.BALANCED,
    thresholds: StrategyThresholds = DEFAULT_THRESHOLDS,
    scale_ratio: float | None = None,
) -> Strategy:
    """Classify a request into one of the four strategies.

    Pure: identical arguments always produce the identical decision.

    Args:
        pixel_count: Source pixel count
        estimated_memory_mb: Estimated processing memory for the source
        priority: Speed/quality preference
        thresholds: Selection thresholds
        scale_ratio: Smallest target/source ratio, used by the quality priority

    Returns:
        Selected Strategy
    """
    if pixel_count <= thresholds.high_res_pixel_threshold:
        return Strategy.DIRECT

    # Memory bound wins over any priority.
    if estimated_memory_mb > thresholds.auto_tile_threshold:
        return _memory_driven(pixel_count)

    match priority:
        case Priority.SPEED:
            return Strategy.DIRECT

        case Priority.QUALITY:
            if estimated_memory_mb > thresholds.memory_warning_threshold:
                return Strategy.TILED
            if scale_ratio is not None and scale_ratio < STEPPED_SCALE_RATIO:
                return Strategy.STEPPED
            return _memory_driven(pixel_count)

        case Priority.BALANCED:
            return _memory_driven(pixel_count)

        case _:
            assert_never(priority)


def recommended_chunk_size(budget_bytes: int = CHUNK_MEMORY_BYTES) -> int:
    """Power-of-two tile edge in [512, 2048] for a per-chunk memory budget."""
    theoretical = math.isqrt(budget_bytes // 4)
    size = max(MIN_CHUNK_SIZE, min(MAX_CHUNK_SIZE, theoretical))
    power = 2 ** round(math.log2(size))
    return max(MIN_CHUNK_SIZE, min(MAX_CHUNK_SIZE, power))


def analyze_image(width: int, height: int) -> ImageAnalysis:
    pixel_count = width * height
    megapixels = pixel_count / (1024 * 1024)
    if megapixels > 16:
        complexity = "extreme"
    elif megapixels > 8:
        complexity = "high"
    elif megapixels >= 2:
        complexity = "medium"
    else:
        complexity = "low"

    return ImageAnalysis(
        width=width,
        height=height,
        pixel_count=pixel_count,
        estimated_memory_mb=estimate_surface_memory_mb(width, height),
        recommended_chunk_size=recommended_chunk_size(),
        complexity=complexity,
    )


def scale_ratio_for(source: Dimensions, request: ResizeRequest) -> float:
    """Smallest image/source ratio the layout would apply."""
    layout = LayoutCalculator().compute(source, request)
    return min(
        layout.image_size.width / source.width,
        layout.image_size.height / source.height,
    )


def validate_processing(
    source: Dimensions,
    request: ResizeRequest,
    thresholds: StrategyThresholds = DEFAULT_THRESHOLDS,
) -> ProcessingValidation:
    """Assess a request without executing it.

    Raises:
        LayoutError: If the request produces invalid geometry
    """
    analysis = analyze_image(source.width, source.height)
    strategy = select_strategy(
        analysis.pixel_count,
        analysis.estimated_memory_mb,
        request.priority,
        thresholds,
        scale_ratio_for(source, request),
    )

    warnings: list[str] = []
    recommendations: list[str] = []

    if analysis.estimated_memory_mb > thresholds.memory_warning_threshold:
        warnings.append(f"High memory usage expected: {round(analysis.estimated_memory_mb)}MB")
        recommendations.append("To reduce memory usage, resize to a smaller size.")

    estimated_seconds = analysis.pixel_count / PIXELS_PER_SECOND
    if strategy == Strategy.STEPPED:
        estimated_seconds *= 1.5
    elif strategy == Strategy.TILED:
        estimated_seconds *= 2.0
    if estimated_seconds > thresholds.time_warning_threshold:
        warnings.append(f"Long processing time expected: {round(estimated_seconds)} seconds")
        recommendations.append('For faster processing, set priority to "speed".')

    if analysis.pixel_count > thresholds.high_res_pixel_threshold:
        recommendations.append(
            "This is a high-resolution image. Automatic optimization will be applied."
        )

    return ProcessingValidation(
        can_process=analysis.estimated_memory_mb <= 1024,
        warnings=warnings,
        recommendations=recommendations,
        estimated_memory_mb=analysis.estimated_memory_mb,
        suggested_strategy=strategy,
    )
