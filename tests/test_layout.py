"""Unit tests for layout computation.

Covers padding normalization, the five fit modes, enlargement/reduction
constraints and geometry validation.
"""

import pytest
from pydantic import ValidationError

from rasterfit.common.errors import LayoutError
from rasterfit.common.schemas import Dimensions, FitMode, Padding, Point, ResizeRequest
from rasterfit.layout.calculator import LayoutCalculator, compute_layout, normalize_padding

SOURCE = Dimensions(width=300, height=200)

# ============================================================================
# PADDING NORMALIZATION
# ============================================================================


def test_normalize_padding_scalar():
    """A scalar applies to all four sides."""
    assert normalize_padding(20) == Padding(top=20, right=20, bottom=20, left=20)


def test_normalize_padding_partial_mapping():
    """Unspecified sides default to zero."""
    assert normalize_padding({"top": 10}) == Padding(top=10, right=0, bottom=0, left=0)


def test_normalize_padding_none():
    assert normalize_padding(None) == Padding()


def test_normalize_padding_rejects_negative():
    with pytest.raises(LayoutError):
        _ = normalize_padding(-5)

    with pytest.raises(LayoutError):
        _ = normalize_padding({"left": -1})


def test_normalize_padding_rejects_non_finite_and_bool():
    with pytest.raises(LayoutError):
        _ = normalize_padding(float("inf"))

    with pytest.raises(LayoutError):
        _ = normalize_padding(True)


def test_normalize_padding_rounds_fractional_sides():
    """Mapping sides round like a scalar does."""
    assert normalize_padding({"top": 2.6, "left": 3.4}) == Padding(top=3, left=3)
    assert normalize_padding(2.6) == normalize_padding({s: 2.6 for s in Padding.model_fields})


def test_normalize_padding_mapping_errors_are_layout_errors():
    with pytest.raises(LayoutError):
        _ = normalize_padding({"top": "wide"})

    with pytest.raises(LayoutError):
        _ = normalize_padding({"bottom": float("inf")})


def test_request_rounds_fractional_mapping_padding():
    assert ResizeRequest(padding={"top": 2.6}).padding == Padding(top=3)


def test_request_coerces_scalar_padding():
    request = ResizeRequest(padding=8)
    assert request.padding == Padding(top=8, right=8, bottom=8, left=8)


def test_request_rejects_negative_padding():
    with pytest.raises(ValidationError):
        _ = ResizeRequest(padding=-1)

    with pytest.raises(ValidationError):
        _ = ResizeRequest(padding={"top": -3})


# ============================================================================
# CONCRETE SCENARIOS
# ============================================================================


def test_contain_with_scalar_padding():
    """300x200 contain into 300x200 with padding 20."""
    layout = compute_layout(
        SOURCE, ResizeRequest(width=300, height=200, fit=FitMode.CONTAIN, padding=20)
    )

    assert layout.image_size == Dimensions(width=300, height=200)
    assert layout.canvas_size == Dimensions(width=340, height=240)
    assert layout.position == Point(x=20, y=20)


def test_contain_with_asymmetric_padding():
    """1000x500 contain into 400x300 scales by 0.4 and pads top/bottom only."""
    layout = compute_layout(
        Dimensions(width=1000, height=500),
        ResizeRequest(
            width=400,
            height=300,
            fit=FitMode.CONTAIN,
            padding={"top": 10, "bottom": 30, "left": 0, "right": 0},
        ),
    )

    assert layout.scale_x == pytest.approx(0.4)
    assert layout.image_size == Dimensions(width=400, height=200)
    assert layout.canvas_size == Dimensions(width=400, height=240)
    assert layout.position == Point(x=0, y=10)


# ============================================================================
# FIT MODES
# ============================================================================


def test_cover_scales_to_larger_ratio_without_cropping():
    """Cover keeps the whole source: the canvas grows past the target box."""
    layout = compute_layout(
        Dimensions(width=400, height=200), ResizeRequest(width=100, height=100, fit=FitMode.COVER)
    )

    assert layout.image_size == Dimensions(width=200, height=100)
    assert layout.canvas_size == Dimensions(width=200, height=100)
    assert layout.position == Point(x=0, y=0)


def test_contain_uses_smaller_ratio():
    layout = compute_layout(SOURCE, ResizeRequest(width=150, height=150, fit=FitMode.CONTAIN))
    assert layout.image_size == Dimensions(width=150, height=100)


def test_fill_ignores_aspect_ratio():
    layout = compute_layout(SOURCE, ResizeRequest(width=100, height=100, fit=FitMode.FILL))

    assert layout.image_size == Dimensions(width=100, height=100)
    assert layout.scale_x == pytest.approx(1 / 3)
    assert layout.scale_y == pytest.approx(0.5)


def test_fill_identity():
    """Fill to the source size with no padding is the identity layout."""
    layout = compute_layout(SOURCE, ResizeRequest(width=300, height=200, fit=FitMode.FILL))

    assert layout.image_size == SOURCE
    assert layout.canvas_size == SOURCE
    assert layout.position == Point(x=0, y=0)


def test_fill_missing_dimension_keeps_source_axis():
    layout = compute_layout(SOURCE, ResizeRequest(width=150, fit=FitMode.FILL))
    assert layout.image_size == Dimensions(width=150, height=200)


def test_max_fit_never_enlarges():
    layout = compute_layout(SOURCE, ResizeRequest(width=600, height=900, fit=FitMode.MAX_FIT))
    assert layout.image_size == SOURCE


def test_max_fit_shrinks_like_contain():
    layout = compute_layout(SOURCE, ResizeRequest(width=150, height=150, fit=FitMode.MAX_FIT))
    assert layout.image_size == Dimensions(width=150, height=100)


def test_min_fit_never_shrinks():
    layout = compute_layout(SOURCE, ResizeRequest(width=30, height=20, fit=FitMode.MIN_FIT))
    assert layout.image_size == SOURCE


def test_min_fit_enlarges_by_smaller_ratio():
    """minFit picks the contain ratio before clamping: min(2.0, 1.5) -> 1.5."""
    layout = compute_layout(SOURCE, ResizeRequest(width=600, height=300, fit=FitMode.MIN_FIT))
    assert layout.image_size == Dimensions(width=450, height=300)


def test_min_fit_mixed_ratios_keep_source_size():
    layout = compute_layout(SOURCE, ResizeRequest(width=600, height=100, fit=FitMode.MIN_FIT))
    assert layout.image_size == SOURCE


def test_single_dimension_derives_the_other():
    layout = compute_layout(SOURCE, ResizeRequest(width=150, fit=FitMode.CONTAIN))
    assert layout.image_size == Dimensions(width=150, height=100)

    layout = compute_layout(SOURCE, ResizeRequest(height=100, fit=FitMode.COVER))
    assert layout.image_size == Dimensions(width=150, height=100)


def test_no_target_keeps_source_size():
    for fit in FitMode:
        layout = compute_layout(SOURCE, ResizeRequest(fit=fit))
        assert layout.image_size == SOURCE


# ============================================================================
# CONSTRAINTS
# ============================================================================


def test_without_enlargement_caps_scale():
    layout = compute_layout(
        SOURCE,
        ResizeRequest(width=600, height=400, fit=FitMode.CONTAIN, without_enlargement=True),
    )
    assert layout.image_size == SOURCE


def test_without_reduction_floors_scale():
    layout = compute_layout(
        SOURCE,
        ResizeRequest(width=30, height=20, fit=FitMode.FILL, without_reduction=True),
    )
    assert layout.image_size == SOURCE


# ============================================================================
# INVARIANTS
# ============================================================================


@pytest.mark.parametrize("fit", list(FitMode))
@pytest.mark.parametrize(
    "padding",
    [0, 7, {"top": 3}, {"left": 11, "right": 2}, {"top": 1, "right": 2, "bottom": 3, "left": 4}],
)
def test_canvas_is_image_plus_padding(fit: FitMode, padding):
    """Padding is an additive inset for every fit mode."""
    request = ResizeRequest(width=123, height=77, fit=fit, padding=padding)
    layout = LayoutCalculator().compute(Dimensions(width=640, height=480), request)
    pad = request.padding

    assert layout.canvas_size.width == layout.image_size.width + pad.left + pad.right
    assert layout.canvas_size.height == layout.image_size.height + pad.top + pad.bottom
    assert layout.position == Point(x=pad.left, y=pad.top)


def test_layout_is_stateless():
    calculator = LayoutCalculator()
    request = ResizeRequest(width=120, height=90, fit=FitMode.CONTAIN, padding=5)

    assert calculator.compute(SOURCE, request) == calculator.compute(SOURCE, request)


# ============================================================================
# VALIDATION
# ============================================================================


def test_zero_source_raises():
    with pytest.raises(LayoutError):
        _ = compute_layout(Dimensions(width=0, height=100), ResizeRequest(width=10, height=10))


def test_image_rounding_to_zero_raises():
    """A 1000x1 source contained into width 10 collapses to 0 rows."""
    with pytest.raises(LayoutError, match="Invalid image size"):
        _ = compute_layout(
            Dimensions(width=1000, height=1), ResizeRequest(width=10, fit=FitMode.CONTAIN)
        )


def test_request_rejects_non_positive_target():
    with pytest.raises(ValidationError):
        _ = ResizeRequest(width=0)
