import unittest
from unittest.mock import MagicMock, patch

import fitz

from data_model.errors import LayoutError
from pdf.extractor import extract_pages


def fake_document(page_dicts, height=842.0):
    pages = []
    for page_dict in page_dicts:
        page = MagicMock()
        page.get_text.return_value = page_dict
        page.rect.height = height
        pages.append(page)
    doc = MagicMock()
    doc.__iter__.return_value = iter(pages)
    return doc


LINES_PAGE = {
    "blocks": [
        {"type": 0, "lines": [
            {"dir": (1.0, 0.0), "spans": [{"text": "議案第1号 "}, {"text": "条例案"}]},
            {"dir": (0.0, 1.0), "spans": [{"text": "飯 島"}]},
            {"dir": (1.0, 0.0), "spans": [{"text": "  "}]},
        ]},
        {"type": 1, "image": b""},
    ],
}

COORDS_PAGE = {
    "blocks": [
        {"type": 0, "lines": [
            {"dir": (1.0, 0.0), "spans": [
                {"text": "3番 飯島英規", "origin": (100.4, 100.0), "bbox": (100.4, 90.0, 180.0, 102.0)},
                {"text": " ", "origin": (185.0, 100.0), "bbox": (185.0, 90.0, 188.0, 102.0)},
            ]},
        ]},
    ],
}


class ExtractPagesTests(unittest.TestCase):
    def test_line_mode_splits_vertical_lines(self):
        doc = fake_document([LINES_PAGE])
        with patch("pdf.extractor.fitz.open", return_value=doc) as open_:
            pages = extract_pages(b"%PDF-", mode="lines")
        open_.assert_called_once_with(stream=b"%PDF-", filetype="pdf")
        self.assertEqual([f.content for f in pages[0]], ["議案第1号 条例案", "飯", "島"])
        self.assertTrue(all(not f.has_position for f in pages[0]))
        doc.close.assert_called_once()

    def test_coordinate_mode_uses_pdf_user_space(self):
        doc = fake_document([COORDS_PAGE])
        with patch("pdf.extractor.fitz.open", return_value=doc):
            pages = extract_pages(b"%PDF-", mode="coords")
        self.assertEqual(len(pages[0]), 1)
        fragment = pages[0][0]
        self.assertEqual((fragment.content, fragment.x, fragment.y), ("3番 飯島英規", 100, 742))

    def test_pages_kept_separate(self):
        doc = fake_document([LINES_PAGE, {"blocks": []}])
        with patch("pdf.extractor.fitz.open", return_value=doc):
            pages = extract_pages(b"%PDF-")
        self.assertEqual(len(pages), 2)
        self.assertEqual(pages[1], [])

    def test_unreadable_page_becomes_layout_error(self):
        doc = fake_document([LINES_PAGE, LINES_PAGE])
        pages = list(doc.__iter__.return_value)
        pages[1].get_text.side_effect = RuntimeError("code=4: cannot parse page tree")
        doc.__iter__.return_value = iter(pages)
        with patch("pdf.extractor.fitz.open", return_value=doc):
            with self.assertRaises(LayoutError) as ctx:
                extract_pages(b"%PDF-", doc_id="r7-4-teireikai")
        self.assertEqual(ctx.exception.doc_id, "r7-4-teireikai")
        self.assertIn("strony 2", str(ctx.exception))
        doc.close.assert_called_once()

    def test_broken_pdf(self):
        with patch("pdf.extractor.fitz.open", side_effect=fitz.FileDataError("broken")):
            with self.assertRaises(LayoutError) as ctx:
                extract_pages(b"not a pdf", doc_id="r7-4-teireikai")
        self.assertEqual(ctx.exception.doc_id, "r7-4-teireikai")


if __name__ == "__main__":
    unittest.main()
