"""Raster surfaces and the surface pool."""

from .pool import SurfacePool, optimal_pool_size
from .surface import Surface

__all__ = ["Surface", "SurfacePool", "optimal_pool_size"]
