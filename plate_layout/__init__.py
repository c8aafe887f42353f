"""Plate layout engine for nameplate previews."""

from .engine import (
    CANVAS_PADDING_PX,
    INNER_PADDING_PX,
    LINE_GAP_RATIO,
    block_height,
    corner_radius,
    layout_plate,
    plate_canvas_geometry,
)
from .raster import MAX_DEVICE_PIXEL_RATIO, draw_plate, render_plate, render_plate_png
from .units import in_to_px, pt_to_px
from .utils import fit_font_size, string_width_measure

__all__ = [
    "CANVAS_PADDING_PX",
    "INNER_PADDING_PX",
    "LINE_GAP_RATIO",
    "MAX_DEVICE_PIXEL_RATIO",
    "block_height",
    "corner_radius",
    "draw_plate",
    "fit_font_size",
    "in_to_px",
    "layout_plate",
    "plate_canvas_geometry",
    "pt_to_px",
    "render_plate",
    "render_plate_png",
    "string_width_measure",
]
