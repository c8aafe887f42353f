"""Draw laid-out plates with ReportLab and rasterise them to PNG."""

from __future__ import annotations

from io import BytesIO

import fitz
from reportlab.lib.colors import HexColor
from reportlab.pdfbase.pdfmetrics import getAscentDescent
from reportlab.pdfgen import canvas

from domain_types import LabelTemplate
from fonts import resolve_font_name
from label_types import CanvasGeometry, RenderedPlate

from .engine import (
    CANVAS_PADDING_PX,
    INNER_PADDING_PX,
    LINE_GAP_RATIO,
    layout_plate,
    plate_canvas_geometry,
)
from .utils import MeasureFn, string_width_measure

MAX_DEVICE_PIXEL_RATIO = 3.0


def render_plate(
    template: LabelTemplate,
    *,
    container_width: float | None = None,
    padding: float = CANVAS_PADDING_PX,
    inner_padding_px: float = INNER_PADDING_PX,
    line_gap_ratio: float = LINE_GAP_RATIO,
    measure: MeasureFn = string_width_measure,
) -> tuple[CanvasGeometry, RenderedPlate]:
    """Return the preview surface and the plate laid out on it."""

    geometry = plate_canvas_geometry(template, container_width, padding)
    plate = layout_plate(
        template,
        geometry.plate,
        inner_padding_px=inner_padding_px,
        line_gap_ratio=line_gap_ratio,
        measure=measure,
    )
    return geometry, plate


def render_plate_png(
    template: LabelTemplate,
    *,
    container_width: float | None = None,
    device_pixel_ratio: float = 1.0,
    padding: float = CANVAS_PADDING_PX,
) -> bytes:
    """Return PNG bytes of the plate preview at ``device_pixel_ratio``."""

    geometry, plate = render_plate(
        template,
        container_width=container_width,
        padding=padding,
    )

    buffer = BytesIO()
    canvas_obj = canvas.Canvas(buffer, pagesize=(geometry.width, geometry.height))
    draw_plate(canvas_obj, plate, geometry.height)
    canvas_obj.showPage()
    canvas_obj.save()

    dpr = min(max(device_pixel_ratio, 0.1), MAX_DEVICE_PIXEL_RATIO)
    pdf_bytes = buffer.getvalue()
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        page = doc.load_page(0)
        pix = page.get_pixmap(matrix=fitz.Matrix(dpr, dpr), alpha=False)
        return pix.tobytes("png")


def draw_plate(
    canvas_obj: canvas.Canvas,
    plate: RenderedPlate,
    surface_height: float,
) -> None:
    """Paint ``plate`` onto a canvas whose origin is bottom-left."""

    rect = plate.rect
    bottom = surface_height - rect.y - rect.height

    canvas_obj.saveState()
    canvas_obj.setFillColor(HexColor(plate.background))
    if plate.radius > 0:
        canvas_obj.roundRect(
            rect.x, bottom, rect.width, rect.height, plate.radius, stroke=0, fill=1
        )
    else:
        canvas_obj.rect(rect.x, bottom, rect.width, rect.height, stroke=0, fill=1)

    font_name = resolve_font_name(plate.font_family)
    canvas_obj.setFillColor(HexColor(plate.foreground))
    for line in plate.lines:
        ascent, descent = getAscentDescent(font_name, line.font_size_px)
        # center_y is the middle of the glyph box, measured from the top
        baseline = surface_height - (line.center_y + (ascent + descent) / 2.0)
        canvas_obj.setFont(font_name, line.font_size_px)
        canvas_obj.drawCentredString(line.center_x, baseline, line.text)
    canvas_obj.restoreState()
