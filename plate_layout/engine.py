"""Plate geometry and centred multi-line text layout."""

from __future__ import annotations

from domain_types import CornerStyle, LabelTemplate, MIN_DIMENSION_IN
from label_types import CanvasGeometry, PlacedLine, PlateRect, RenderedPlate

from .units import CSS_DPI, in_to_px, pt_to_px
from .utils import MeasureFn, fit_font_size, string_width_measure

INNER_PADDING_PX = 12
LINE_GAP_RATIO = 0.22
CANVAS_PADDING_PX = 48
ROUNDED_RADIUS_RATIO = 0.06

MIN_PREVIEW_WIDTH = 360
MIN_INNER_WIDTH = 200
MIN_INNER_HEIGHT = 260
INNER_ASPECT = 0.7


def corner_radius(template: LabelTemplate, rect: PlateRect) -> float:
    if template.corner_style is CornerStyle.ROUNDED:
        return min(rect.width, rect.height) * ROUNDED_RADIUS_RATIO
    return 0.0


def plate_canvas_geometry(
    template: LabelTemplate,
    container_width: float | None = None,
    padding: float = CANVAS_PADDING_PX,
    dpi: float = CSS_DPI,
) -> CanvasGeometry:
    """Size the preview surface for ``template``.

    Without a container the plate is drawn at its physical size.  With one,
    the plate is scaled to fill the container width while keeping the
    preview no taller than 70% of its inner width (with minimums).
    """

    plate_w = in_to_px(max(MIN_DIMENSION_IN, template.width_inches), dpi)
    plate_h = in_to_px(max(MIN_DIMENSION_IN, template.height_inches), dpi)

    scale = 1.0
    if container_width is not None:
        avail_w = max(MIN_PREVIEW_WIDTH, container_width)
        inner_w = max(MIN_INNER_WIDTH, avail_w - padding * 2)
        inner_h = max(MIN_INNER_HEIGHT, inner_w * INNER_ASPECT)
        scale = min(inner_w / plate_w, inner_h / plate_h)

    plate_w *= scale
    plate_h *= scale
    width = plate_w + padding * 2
    height = plate_h + padding * 2
    plate = PlateRect(
        x=(width - plate_w) / 2.0,
        y=(height - plate_h) / 2.0,
        width=plate_w,
        height=plate_h,
    )
    return CanvasGeometry(width=width, height=height, plate=plate, scale=scale)


def layout_plate(
    template: LabelTemplate,
    rect: PlateRect,
    inner_padding_px: float = INNER_PADDING_PX,
    line_gap_ratio: float = LINE_GAP_RATIO,
    measure: MeasureFn = string_width_measure,
) -> RenderedPlate:
    """Fit and centre the template's visible lines inside ``rect``."""

    if rect.width <= 0 or rect.height <= 0:
        raise ValueError("Plate rectangle must have positive dimensions.")

    lines = template.visible_lines
    max_width = max(1.0, rect.width - inner_padding_px * 2)
    family = template.font_family

    sizes = [
        fit_font_size(
            line.text,
            pt_to_px(line.font_size_pt),
            family,
            max_width,
            measure,
        )
        for line in lines
    ]

    placed: list[PlacedLine] = []
    if sizes:
        # Spacing follows the first line's size for every gap.
        gap = sizes[0] * line_gap_ratio
        total_height = sum(sizes) + (len(sizes) - 1) * gap
        y = rect.y + (rect.height - total_height) / 2.0 + sizes[0] / 2.0
        for line, size in zip(lines, sizes):
            placed.append(
                PlacedLine(
                    text=line.text,
                    font_size_px=size,
                    center_x=rect.center_x,
                    center_y=y,
                )
            )
            y += size + gap

    palette = template.palette
    return RenderedPlate(
        rect=rect,
        radius=corner_radius(template, rect),
        background=palette.bg,
        foreground=palette.fg,
        font_family=family,
        lines=tuple(placed),
    )


def block_height(plate: RenderedPlate, line_gap_ratio: float = LINE_GAP_RATIO) -> float:
    """Total height occupied by the text block of ``plate``."""

    sizes = plate.font_sizes
    if not sizes:
        return 0.0
    return sum(sizes) + (len(sizes) - 1) * sizes[0] * line_gap_ratio
