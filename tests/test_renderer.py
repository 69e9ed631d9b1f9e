"""Unit tests for the single-blit renderer."""

from unittest.mock import patch

import pytest
from PIL import Image

from rasterfit.common.errors import InvalidBackgroundError, LayoutError
from rasterfit.common.schemas import (
    Dimensions,
    FitMode,
    LayoutResult,
    Point,
    RenderQuality,
    ResizeRequest,
)
from rasterfit.layout.calculator import compute_layout
from rasterfit.rendering import renderer as renderer_module
from rasterfit.rendering.renderer import (
    Renderer,
    blit,
    parse_background,
    resampling_source,
    resolve_resample,
)
from rasterfit.surfaces.pool import SurfacePool
from rasterfit.surfaces.surface import Surface

# ============================================================================
# QUALITY / BACKGROUND PARSING
# ============================================================================


@pytest.mark.parametrize(
    ("quality", "smoothing", "expected"),
    [
        (RenderQuality.LOW, None, Image.Resampling.NEAREST),
        (RenderQuality.MEDIUM, None, Image.Resampling.BILINEAR),
        (RenderQuality.HIGH, None, Image.Resampling.LANCZOS),
        (RenderQuality.HIGH, False, Image.Resampling.NEAREST),
        (RenderQuality.LOW, True, Image.Resampling.BILINEAR),
    ],
)
def test_resolve_resample(quality, smoothing, expected):
    assert resolve_resample(quality, smoothing) == expected


def test_parse_background():
    assert parse_background("transparent") is None
    assert parse_background("") is None
    assert parse_background(None) is None
    assert parse_background("#ff0000") == (255, 0, 0, 255)
    assert parse_background("white") == (255, 255, 255, 255)


def test_parse_background_rejects_garbage():
    with pytest.raises(InvalidBackgroundError):
        _ = parse_background("not-a-colour")


# ============================================================================
# BLIT
# ============================================================================


def test_blit_scales_into_box():
    dest = Surface(10, 10)
    source = Image.new("RGB", (4, 4), (0, 0, 255))

    blit(dest, source, (2, 2, 6, 6))

    assert dest.image.getpixel((3, 3)) == (0, 0, 255, 255)
    assert dest.image.getpixel((0, 0)) == (0, 0, 0, 0)
    assert dest.image.getpixel((7, 7)) == (0, 0, 0, 0)


def test_blit_skips_empty_box():
    dest = Surface(4, 4)
    blit(dest, Image.new("RGBA", (2, 2), (255, 0, 0, 255)), (1, 1, 1, 3))

    assert dest.image.getpixel((1, 1)) == (0, 0, 0, 0)


@pytest.mark.parametrize("mode", ["1", "P"])
def test_resampling_source_converts_nearest_only_modes(mode: str):
    image = Image.new(mode, (8, 4))

    converted = resampling_source(image)

    assert converted.mode == "RGBA"
    assert converted.size == (8, 4)


@pytest.mark.parametrize("mode", ["RGB", "RGBA", "L"])
def test_resampling_source_keeps_other_modes(mode: str):
    image = Image.new(mode, (8, 4))
    assert resampling_source(image) is image


# ============================================================================
# RENDER
# ============================================================================


def test_render_places_image_inside_padding(pool: SurfacePool, solid_red: Image.Image):
    layout = compute_layout(
        Dimensions(width=64, height=32),
        ResizeRequest(width=32, height=16, fit=FitMode.CONTAIN, padding=4),
    )

    surface = Renderer(pool).render(
        solid_red, layout, background="#00ff00", quality=RenderQuality.MEDIUM
    )

    assert (surface.width, surface.height) == (40, 24)
    assert surface.image.getpixel((1, 1)) == (0, 255, 0, 255)
    assert surface.image.getpixel((4, 4)) == (255, 0, 0, 255)
    assert surface.image.getpixel((35, 19)) == (255, 0, 0, 255)
    assert surface.image.getpixel((36, 20)) == (0, 255, 0, 255)


def test_render_transparent_background(pool: SurfacePool, solid_red: Image.Image):
    layout = compute_layout(
        Dimensions(width=64, height=32),
        ResizeRequest(width=64, height=32, fit=FitMode.FILL, padding={"left": 3}),
    )

    surface = Renderer(pool).render(solid_red, layout)

    assert surface.image.getpixel((0, 10)) == (0, 0, 0, 0)
    assert surface.image.getpixel((3, 10)) == (255, 0, 0, 255)


def test_render_uses_exactly_one_blit(pool: SurfacePool, sample_image: Image.Image):
    layout = compute_layout(
        Dimensions(width=300, height=200), ResizeRequest(width=150, fit=FitMode.CONTAIN)
    )

    with patch.object(renderer_module, "blit", wraps=renderer_module.blit) as spy:
        _ = Renderer(pool).render(sample_image, layout)

    spy.assert_called_once()
    _, _, dest_box = spy.call_args.args
    assert dest_box == (0, 0, 150, 100)


def test_render_does_not_mutate_source(pool: SurfacePool, sample_image: Image.Image):
    before = sample_image.tobytes()
    layout = compute_layout(
        Dimensions(width=300, height=200), ResizeRequest(width=90, height=60, padding=5)
    )

    _ = Renderer(pool).render(sample_image, layout, background="black")

    assert sample_image.tobytes() == before
    assert sample_image.size == (300, 200)


def test_render_rejects_bad_background_before_acquire(pool: SurfacePool, solid_red):
    layout = compute_layout(Dimensions(width=64, height=32), ResizeRequest(width=32))

    with pytest.raises(InvalidBackgroundError):
        _ = Renderer(pool).render(solid_red, layout, background="nope")

    assert pool.stats().total_acquired == 0


def test_render_rejects_invalid_layout(pool: SurfacePool, solid_red):
    layout = LayoutResult(
        canvas_size=Dimensions(width=0, height=10),
        image_size=Dimensions(width=0, height=10),
        position=Point(x=0, y=0),
    )

    with pytest.raises(LayoutError):
        _ = Renderer(pool).render(solid_red, layout)

    assert pool.stats().total_acquired == 0


def test_render_releases_surface_on_failure(pool: SurfacePool, solid_red):
    layout = compute_layout(Dimensions(width=64, height=32), ResizeRequest(width=32))

    with patch.object(renderer_module, "blit", side_effect=RuntimeError("draw failed")):
        with pytest.raises(RuntimeError):
            _ = Renderer(pool).render(solid_red, layout)

    stats = pool.stats()
    assert stats.total_acquired == 1
    assert stats.total_released == 1
