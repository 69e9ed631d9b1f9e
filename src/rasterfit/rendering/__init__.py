"""Rendering of computed layouts onto pooled surfaces."""

from .renderer import Renderer, blit, parse_background, resolve_resample

__all__ = ["Renderer", "blit", "parse_background", "resolve_resample"]
