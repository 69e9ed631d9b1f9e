"""Test configuration and fixtures for rasterfit.

This module provides:
- Fake memory probe and clock so monitor behaviour is deterministic
- Function-scoped pool, monitor and engine instances (no shared state)
- Small synthetic source images
"""

import pytest
from PIL import Image, ImageDraw

from rasterfit.common.schemas import MemoryInfo
from rasterfit.engine import ResizeEngine
from rasterfit.memory.monitor import MemoryMonitor
from rasterfit.surfaces.pool import SurfacePool

# ============================================================================
# Fakes
# ============================================================================


class FakeProbe:
    """Memory probe returning a settable pressure against a 1000 MB limit."""

    def __init__(self, pressure: float = 0.3, limit_mb: float = 1000.0):
        self.pressure: float = pressure
        self.limit_mb: float = limit_mb
        self.calls: int = 0

    def __call__(self) -> MemoryInfo:
        self.calls += 1
        used = self.limit_mb * self.pressure
        return MemoryInfo(
            pressure=self.pressure,
            used_mb=used,
            limit_mb=self.limit_mb,
            available_mb=self.limit_mb - used,
        )


class FakeClock:
    """Monotonic clock advanced by hand."""

    def __init__(self, now: float = 1000.0):
        self.now: float = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================================================
# Function-Scoped Fixtures (Run Per Test)
# ============================================================================


@pytest.fixture
def pool() -> SurfacePool:
    """Pool sized for the 1024 MB tier (15 slots)."""
    return SurfacePool(available_memory_mb=1024)


@pytest.fixture
def probe() -> FakeProbe:
    return FakeProbe()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def monitor(pool: SurfacePool, probe: FakeProbe, clock: FakeClock) -> MemoryMonitor:
    return MemoryMonitor(pool, probe=probe, clock=clock)


@pytest.fixture
def engine(pool: SurfacePool, monitor: MemoryMonitor) -> ResizeEngine:
    return ResizeEngine(pool=pool, monitor=monitor)


def make_pattern_image(width: int, height: int, mode: str = "RGB") -> Image.Image:
    """Opaque image with a grid and a centred ellipse."""
    img = Image.new(mode, (width, height), color=(73, 109, 137, 255)[: len(mode)])
    draw = ImageDraw.Draw(img)
    step = max(4, width // 10)
    for x in range(0, width, step):
        draw.line([(x, 0), (x, height)], fill=(255, 255, 255, 255)[: len(mode)], width=1)
    draw.ellipse(
        [width // 4, height // 4, 3 * width // 4, 3 * height // 4],
        fill=(200, 100, 100, 255)[: len(mode)],
    )
    return img


@pytest.fixture
def sample_image() -> Image.Image:
    """300x200 opaque RGB image."""
    return make_pattern_image(300, 200)


@pytest.fixture
def solid_red() -> Image.Image:
    """64x32 solid opaque red RGBA image."""
    return Image.new("RGBA", (64, 32), (255, 0, 0, 255))
