"""Render the submission summary as a paginated PDF table."""

from __future__ import annotations

import logging
from datetime import datetime
from io import BytesIO
from typing import Sequence

from PIL import Image
from reportlab.lib.colors import HexColor, black
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import getAscent, stringWidth
from reportlab.pdfgen import canvas

from fonts import FontSettings
from label_types import SummaryHeader, SummaryItem
from plate_layout.utils import fit_font_size

logger = logging.getLogger(__name__)

PAGE_SIZE = letter
PAGE_W, PAGE_H = PAGE_SIZE
MARGIN = 40

COLUMN_WIDTHS = (110, 220, 140, 60)
TABLE_W = sum(COLUMN_WIDTHS)
ROW_HEIGHT = 80
ROW_GAP = 6
CELL_PAD = 6
IMAGE_INSET = 8

HEADER_HEIGHT = 74
FOOTER_HEIGHT = 20

TABLE_TOP = MARGIN + HEADER_HEIGHT
PAGE_BOTTOM = PAGE_H - MARGIN - FOOTER_HEIGHT

DEFAULT_TITLE = "Saved Labels Summary"

TITLE_FONT = FontSettings("Helvetica-Bold", 16)
META_FONT = FontSettings("Helvetica", 10)
COLUMN_FONT = FontSettings("Helvetica-Bold", 11)
SIZE_TOP_FONT = FontSettings("Helvetica-Bold", 11)
BODY_FONT = FontSettings("Helvetica", 10)
QTY_FONT = FontSettings("Helvetica-Bold", 12)
PLACEHOLDER_FONT = FontSettings("Helvetica-Oblique", 9)
FOOTER_FONT = FontSettings("Helvetica", 8)

ROW_FRAME_COLOR = HexColor("#cccccc")
PLACEHOLDER_FILL = HexColor("#666666")
PLACEHOLDER_TEXT = HexColor("#777777")


def paginate_rows(
    row_count: int,
    row_height: float,
    usable_height: float,
    row_gap: float = 0.0,
) -> list[list[int]]:
    """Greedily assign row indices to pages.

    A row moves to a new page when ``y + row_height`` would pass
    ``usable_height``; rows never split.  A row taller than the page still
    gets a page of its own.  There is always at least one page.
    """

    pages: list[list[int]] = [[]]
    y = 0.0
    for index in range(row_count):
        if pages[-1] and y + row_height > usable_height:
            pages.append([])
            y = 0.0
        pages[-1].append(index)
        y += row_height + row_gap
    return pages


def summary_page_count(item_count: int) -> int:
    return len(
        paginate_rows(item_count, ROW_HEIGHT, PAGE_BOTTOM - TABLE_TOP, ROW_GAP)
    )


def render_summary(
    title: str | None,
    reference_id: str,
    created_at: datetime | str | None,
    items: Sequence[SummaryItem],
) -> bytes:
    """Return the complete summary PDF for ``items``."""

    header = SummaryHeader(
        title=title or DEFAULT_TITLE,
        reference_id=reference_id,
        created_at=created_at,
    )
    pages = paginate_rows(len(items), ROW_HEIGHT, PAGE_BOTTOM - TABLE_TOP, ROW_GAP)
    total = len(pages)

    buffer = BytesIO()
    canvas_obj = canvas.Canvas(buffer, pagesize=PAGE_SIZE)
    canvas_obj.setTitle(header.title)

    for page_number, row_indices in enumerate(pages, start=1):
        _draw_page_header(canvas_obj, header, page_number)
        _draw_table_header(canvas_obj)
        y = TABLE_TOP
        for index in row_indices:
            _draw_item_row(canvas_obj, items[index], y)
            y += ROW_HEIGHT + ROW_GAP
        _draw_footer(canvas_obj, header, page_number, total)
        canvas_obj.showPage()

    canvas_obj.save()
    logger.debug("Rendered summary for %s: %d rows on %d pages", reference_id, len(items), total)
    return buffer.getvalue()


def _pdf_y(top: float) -> float:
    return PAGE_H - top


def _draw_text(
    canvas_obj: canvas.Canvas,
    text: str,
    x: float,
    top: float,
    font: FontSettings,
    width: float | None = None,
    align: str = "left",
) -> None:
    """Draw ``text`` with its ascender at ``top``, shrinking it to ``width``."""

    size = font.size
    if width is not None and text:
        size = fit_font_size(
            text,
            font.size,
            font.font_name,
            width,
            lambda t, s, f: stringWidth(t, f, s),
        )
    baseline = _pdf_y(top + getAscent(font.font_name, size))
    canvas_obj.setFont(font.font_name, size)
    if align == "center" and width is not None:
        canvas_obj.drawCentredString(x + width / 2.0, baseline, text)
    elif align == "right" and width is not None:
        canvas_obj.drawRightString(x + width, baseline, text)
    else:
        canvas_obj.drawString(x, baseline, text)


def _draw_page_header(
    canvas_obj: canvas.Canvas,
    header: SummaryHeader,
    page_number: int,
) -> None:
    usable = PAGE_W - 2 * MARGIN
    _draw_text(canvas_obj, header.title, MARGIN, MARGIN, TITLE_FONT, usable, "center")

    meta_top = MARGIN + TITLE_FONT.size + 8
    _draw_text(
        canvas_obj,
        f"Reference ID: {header.reference_id or '-'}",
        MARGIN,
        meta_top,
        META_FONT,
        usable / 2,
    )
    _draw_text(
        canvas_obj,
        f"{header.timestamp} | Page {page_number}",
        MARGIN + usable / 2,
        meta_top,
        META_FONT,
        usable / 2,
        "right",
    )


def _draw_table_header(canvas_obj: canvas.Canvas) -> None:
    preview_w, size_w, font_w, qty_w = COLUMN_WIDTHS
    top = TABLE_TOP - 28
    x = MARGIN
    _draw_text(canvas_obj, "Preview", x, top, COLUMN_FONT, preview_w)
    _draw_text(canvas_obj, "Size/Name", x + preview_w, top, COLUMN_FONT, size_w)
    _draw_text(canvas_obj, "Font", x + preview_w + size_w, top, COLUMN_FONT, font_w)
    _draw_text(
        canvas_obj, "Qty", x + preview_w + size_w + font_w, top, COLUMN_FONT, qty_w, "center"
    )

    rule_y = _pdf_y(TABLE_TOP - 10)
    canvas_obj.setStrokeColor(black)
    canvas_obj.line(MARGIN, rule_y, MARGIN + TABLE_W, rule_y)


def _load_preview(data: bytes | None) -> ImageReader | None:
    if not data:
        return None
    try:
        # Decode the whole image up front; a truncated body only fails on load.
        image = Image.open(BytesIO(data))
        image.load()
        reader = ImageReader(image)
    except Exception as exc:
        logger.warning("Preview image could not be decoded (%s); using placeholder", exc)
        return None
    return reader


def _draw_item_row(canvas_obj: canvas.Canvas, item: SummaryItem, top: float) -> None:
    preview_w, size_w, font_w, qty_w = COLUMN_WIDTHS
    preview_x = MARGIN
    size_x = preview_x + preview_w
    font_x = size_x + size_w
    qty_x = font_x + font_w

    canvas_obj.saveState()
    canvas_obj.setStrokeColor(ROW_FRAME_COLOR)
    canvas_obj.rect(MARGIN, _pdf_y(top + ROW_HEIGHT), TABLE_W, ROW_HEIGHT, stroke=1, fill=0)
    canvas_obj.restoreState()

    box_x = preview_x + IMAGE_INSET
    box_w = preview_w - 2 * IMAGE_INSET
    box_h = ROW_HEIGHT - 2 * IMAGE_INSET
    box_bottom = _pdf_y(top + IMAGE_INSET + box_h)

    reader = _load_preview(item.preview_image)
    if reader is not None:
        canvas_obj.drawImage(
            reader,
            box_x,
            box_bottom,
            width=box_w,
            height=box_h,
            preserveAspectRatio=True,
            anchor="c",
            mask="auto",
        )
    else:
        canvas_obj.saveState()
        canvas_obj.setFillColor(PLACEHOLDER_FILL)
        canvas_obj.setFillAlpha(0.08)
        canvas_obj.rect(box_x, box_bottom, box_w, box_h, stroke=0, fill=1)
        canvas_obj.restoreState()
        canvas_obj.saveState()
        canvas_obj.setFillColor(PLACEHOLDER_TEXT)
        _draw_text(
            canvas_obj,
            "Preview unavailable",
            box_x + 4,
            top + ROW_HEIGHT / 2 - 6,
            PLACEHOLDER_FONT,
            box_w - 8,
            "center",
        )
        canvas_obj.restoreState()

    text_w = size_w - 2 * CELL_PAD
    _draw_text(canvas_obj, item.size_top, size_x + CELL_PAD, top + 8, SIZE_TOP_FONT, text_w)
    _draw_text(canvas_obj, item.size_bottom, size_x + CELL_PAD, top + 26, BODY_FONT, text_w)
    _draw_text(
        canvas_obj, item.font_label, font_x + CELL_PAD, top + 14, BODY_FONT, font_w - 2 * CELL_PAD
    )
    _draw_text(canvas_obj, str(item.qty), qty_x, top + 14, QTY_FONT, qty_w, "center")


def _draw_footer(
    canvas_obj: canvas.Canvas,
    header: SummaryHeader,
    page_number: int,
    total: int,
) -> None:
    parts = [f"Reference ID: {header.reference_id or '-'}"]
    if header.timestamp:
        parts.append(header.timestamp)
    parts.append(f"Page {page_number} of {total}")
    _draw_text(
        canvas_obj,
        "  ·  ".join(parts),
        MARGIN,
        PAGE_H - MARGIN - FOOTER_FONT.size,
        FOOTER_FONT,
        PAGE_W - 2 * MARGIN,
        "center",
    )
