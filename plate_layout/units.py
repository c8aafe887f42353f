"""Physical unit conversions for on-screen plates."""

from __future__ import annotations

CSS_DPI = 96
POINTS_PER_INCH = 72


def pt_to_px(pt: float, dpi: float = CSS_DPI) -> float:
    return pt * dpi / POINTS_PER_INCH


def in_to_px(inches: float, dpi: float = CSS_DPI) -> float:
    return inches * dpi
