"""Shared helpers for plate text fitting."""

from __future__ import annotations

import math
from typing import Callable

from reportlab.pdfbase.pdfmetrics import stringWidth

from fonts import resolve_font_name

MeasureFn = Callable[[str, float, str], float]

MIN_FONT_PX = 1.0


def string_width_measure(text: str, size_px: float, font_family: str) -> float:
    """Measure ``text`` with ReportLab metrics for the resolved family."""

    return stringWidth(text, resolve_font_name(font_family), size_px)


def fit_font_size(
    text: str,
    start_size_px: float,
    font_family: str,
    max_width_px: float,
    measure: MeasureFn = string_width_measure,
) -> float:
    """Return the size at which ``text`` fits ``max_width_px``.

    Never grows the text.  When it overflows, the size drops by
    ``max(0.5, ceil(overflow / 50))`` per step until it fits or reaches
    the 1 px floor.
    """

    size = max(MIN_FONT_PX, start_size_px)
    width = measure(text, size, font_family)
    if width <= max_width_px:
        return size

    while width > max_width_px and size > MIN_FONT_PX:
        size -= max(0.5, math.ceil((width - max_width_px) / 50))
        width = measure(text, max(size, MIN_FONT_PX), font_family)
    return max(MIN_FONT_PX, size)
