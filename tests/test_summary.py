import unittest
from datetime import datetime

import fitz

from domain_types import LabelTemplate, TextLine
from label_types import SummaryItem
from plate_layout import render_plate_png
from summary_generation import (
    PAGE_BOTTOM,
    ROW_GAP,
    ROW_HEIGHT,
    TABLE_TOP,
    paginate_rows,
    render_summary,
    summary_page_count,
)


def _item(idx: int, preview: bytes | None = None) -> SummaryItem:
    return SummaryItem(
        size_top=f"Label {idx}",
        size_bottom="1.50 × 5.00 in",
        font_label="Calibri",
        qty=idx,
        preview_image=preview,
    )


def _page_texts(pdf_bytes: bytes) -> list[str]:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [page.get_text() for page in doc]


class PaginateRowsTests(unittest.TestCase):
    def test_greedy_fixed_rows(self) -> None:
        pages = paginate_rows(25, 80, 700)
        self.assertEqual([len(p) for p in pages], [8, 8, 8, 1])

    def test_rows_are_kept_in_order_and_whole(self) -> None:
        pages = paginate_rows(30, ROW_HEIGHT, PAGE_BOTTOM - TABLE_TOP, ROW_GAP)
        flattened = [idx for page in pages for idx in page]
        self.assertEqual(flattened, list(range(30)))
        for page in pages:
            bottom = (len(page) - 1) * (ROW_HEIGHT + ROW_GAP) + ROW_HEIGHT
            self.assertLessEqual(bottom, PAGE_BOTTOM - TABLE_TOP)

    def test_gap_counts_towards_capacity(self) -> None:
        self.assertEqual([len(p) for p in paginate_rows(5, 10, 35, row_gap=5)], [2, 2, 1])

    def test_no_rows_still_has_a_page(self) -> None:
        self.assertEqual(paginate_rows(0, 80, 700), [[]])

    def test_oversized_row_gets_own_page(self) -> None:
        self.assertEqual(paginate_rows(2, 900, 700), [[0], [1]])


class RenderSummaryTests(unittest.TestCase):
    def test_single_page_header_and_footer(self) -> None:
        pdf = render_summary(
            "Order Summary",
            "REF-42",
            datetime(2024, 5, 1, 12, 30),
            [_item(1), _item(2)],
        )
        self.assertTrue(pdf.startswith(b"%PDF"))
        texts = _page_texts(pdf)
        self.assertEqual(len(texts), 1)
        self.assertIn("Order Summary", texts[0])
        self.assertIn("Reference ID: REF-42", texts[0])
        self.assertIn("2024-05-01 12:30:00 | Page 1", texts[0])
        self.assertIn("Page 1 of 1", texts[0])
        self.assertIn("Size/Name", texts[0])
        self.assertIn("Label 2", texts[0])

    def test_default_title(self) -> None:
        texts = _page_texts(render_summary(None, "R", "yesterday", [_item(1)]))
        self.assertIn("Saved Labels Summary", texts[0])
        self.assertIn("yesterday", texts[0])

    def test_many_items_span_pages(self) -> None:
        items = [_item(i) for i in range(25)]
        texts = _page_texts(render_summary(None, "REF", None, items))
        expected = summary_page_count(25)
        self.assertGreater(expected, 1)
        self.assertEqual(len(texts), expected)
        for number, text in enumerate(texts, start=1):
            self.assertIn(f"Page {number} of {expected}", text)
            self.assertIn("Preview", text)
        joined = "\n".join(texts)
        for i in range(25):
            self.assertEqual(joined.count(f"Label {i}\n"), 1)

    def test_invalid_preview_uses_placeholder(self) -> None:
        pdf = render_summary(None, "REF", None, [_item(1, b"definitely not a png")])
        self.assertIn("Preview unavailable", _page_texts(pdf)[0])

    def test_truncated_preview_uses_placeholder(self) -> None:
        png = render_plate_png(LabelTemplate(lines=(TextLine("JOHN DOE", 22),)))
        truncated = png[: len(png) // 2]
        items = [_item(1, truncated), _item(2, png)]
        pdf = render_summary(None, "REF", None, items)
        text = _page_texts(pdf)[0]
        self.assertEqual(text.count("Preview unavailable"), 1)
        self.assertIn("Label 2", text)
        with fitz.open(stream=pdf, filetype="pdf") as doc:
            self.assertEqual(len(doc[0].get_images()), 1)

    def test_valid_preview_is_embedded(self) -> None:
        png = render_plate_png(LabelTemplate(lines=(TextLine("JOHN DOE", 22),)))
        pdf = render_summary(None, "REF", None, [_item(1, png)])
        self.assertNotIn("Preview unavailable", _page_texts(pdf)[0])
        with fitz.open(stream=pdf, filetype="pdf") as doc:
            self.assertEqual(len(doc[0].get_images()), 1)


if __name__ == "__main__":
    unittest.main()
