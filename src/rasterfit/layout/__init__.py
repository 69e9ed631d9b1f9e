"""Layout computation for the five fit modes."""

from .calculator import LayoutCalculator, compute_layout, normalize_padding

__all__ = ["LayoutCalculator", "compute_layout", "normalize_padding"]
