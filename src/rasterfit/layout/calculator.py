"""Pure layout computation: source size + request -> output geometry."""

import math
from collections.abc import Callable, Mapping

from pydantic import ValidationError

from ..common.errors import LayoutError
from ..common.schemas import (
    Dimensions,
    FitMode,
    LayoutResult,
    Padding,
    PaddingLike,
    Point,
    ResizeRequest,
)


def normalize_padding(padding: PaddingLike | float = None) -> Padding:
    """Normalize scalar, partial or missing padding into a full Padding.

    Examples:
        normalize_padding(20)           -> Padding(20, 20, 20, 20)
        normalize_padding({"top": 10})  -> Padding(top=10, right=0, bottom=0, left=0)
        normalize_padding(None)         -> Padding(0, 0, 0, 0)

    Raises:
        LayoutError: If any side is negative or the value has an unsupported type
    """
    if padding is None:
        return Padding()
    if isinstance(padding, Padding):
        return padding
    if isinstance(padding, bool):
        raise LayoutError(f"Unsupported padding value: {padding!r}")
    if isinstance(padding, int | float):
        if not math.isfinite(padding) or padding < 0:
            raise LayoutError(f"Padding must be a finite non-negative number, got {padding}")
        side = int(round(padding))
        return Padding(top=side, right=side, bottom=side, left=side)
    if isinstance(padding, Mapping):
        sides = {key: padding.get(key, 0) for key in ("top", "right", "bottom", "left")}
        for key, value in sides.items():
            if isinstance(value, int | float) and value < 0:
                raise LayoutError(f"Padding '{key}' must be non-negative, got {value}")
        try:
            return Padding.model_validate(sides)
        except ValidationError as exc:
            raise LayoutError(f"Invalid padding {sides!r}: {exc.errors()[0]['msg']}") from exc
    raise LayoutError(f"Unsupported padding value: {padding!r}")


class LayoutCalculator:
    """Stateless calculator for the five fit modes.

    Padding is a strictly additive inset: the canvas is the rounded image size
    plus padding and the image is placed at (padding.left, padding.top).
    """

    def compute(self, source: Dimensions, request: ResizeRequest) -> LayoutResult:
        if source.width <= 0 or source.height <= 0:
            raise LayoutError(f"Invalid source size: {source.width}x{source.height}")

        scale_x, scale_y = self._scale_factors(source, request)
        scale_x, scale_y = self._apply_constraints(scale_x, scale_y, request)

        raw_w = source.width * scale_x
        raw_h = source.height * scale_y
        if not (math.isfinite(raw_w) and math.isfinite(raw_h)):
            raise LayoutError(f"Non-finite image size: {raw_w}x{raw_h}")

        image_w = round(raw_w)
        image_h = round(raw_h)
        if image_w <= 0 or image_h <= 0:
            raise LayoutError(
                f"Invalid image size: {image_w}x{image_h}. Both dimensions must be > 0."
            )

        padding = request.padding
        canvas = Dimensions(
            width=image_w + padding.horizontal,
            height=image_h + padding.vertical,
        )
        position = Point(x=padding.left, y=padding.top)

        return LayoutResult(
            canvas_size=canvas,
            image_size=Dimensions(width=image_w, height=image_h),
            position=position,
            scale_x=scale_x,
            scale_y=scale_y,
        )

    # ------------------------------------------------------------------
    # Scale derivation
    # ------------------------------------------------------------------

    def _scale_factors(self, source: Dimensions, request: ResizeRequest) -> tuple[float, float]:
        target_w = request.width
        target_h = request.height
        ratio_x = target_w / source.width if target_w is not None else None
        ratio_y = target_h / source.height if target_h is not None else None

        match request.fit:
            case FitMode.FILL:
                # Aspect ratio is not preserved; a missing axis keeps source size.
                return (
                    ratio_x if ratio_x is not None else 1.0,
                    ratio_y if ratio_y is not None else 1.0,
                )

            case FitMode.COVER:
                scale = self._combine(ratio_x, ratio_y, max)

            case FitMode.CONTAIN:
                scale = self._combine(ratio_x, ratio_y, min)

            case FitMode.MAX_FIT:
                scale = min(1.0, self._combine(ratio_x, ratio_y, min))

            case FitMode.MIN_FIT:
                scale = max(1.0, self._combine(ratio_x, ratio_y, min))

        return scale, scale

    @staticmethod
    def _combine(
        ratio_x: float | None,
        ratio_y: float | None,
        pick: Callable[[float, float], float],
    ) -> float:
        """Pick between axis ratios; a single ratio derives the other axis."""
        if ratio_x is not None and ratio_y is not None:
            return pick(ratio_x, ratio_y)
        if ratio_x is not None:
            return ratio_x
        if ratio_y is not None:
            return ratio_y
        return 1.0

    @staticmethod
    def _apply_constraints(
        scale_x: float, scale_y: float, request: ResizeRequest
    ) -> tuple[float, float]:
        if request.without_enlargement:
            scale_x = min(scale_x, 1.0)
            scale_y = min(scale_y, 1.0)
        if request.without_reduction:
            scale_x = max(scale_x, 1.0)
            scale_y = max(scale_y, 1.0)
        return scale_x, scale_y


_default_calculator = LayoutCalculator()


def compute_layout(source: Dimensions, request: ResizeRequest) -> LayoutResult:
    """Module-level shortcut for LayoutCalculator().compute()."""
    return _default_calculator.compute(source, request)
