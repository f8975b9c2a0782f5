"""
pdf/extractor.py — granica biblioteki: bajty PDF → fragmenty tekstu.

Architektura:
  bytes → fitz.open(stream=…) → strony → page.get_text("dict")
  → tryb "lines":  jeden fragment na linię; linie pisane pionowo
                   rozbijane na jeden fragment na glif
  → tryb "coords": jeden fragment na span, x = origin.x,
                   y = wysokość strony − origin.y (przestrzeń PDF, y w górę)

PDF złożony wyłącznie z obrazów daje pustą listę fragmentów — decyzja
o błędzie (LayoutError) należy do potoku, nie do ekstraktora.

Kluczowe funkcje publiczne:
  extract_pages(data, mode) -> list[list[TextFragment]]
"""

from __future__ import annotations

import fitz  # PyMuPDF

from data_model.errors import LayoutError
from data_model.layout import TextFragment
from pdf.families import ExtractionMode
from pdf.text_cleaner import is_blank


def extract_pages(
    data: bytes, mode: ExtractionMode = "lines", doc_id: str = ""
) -> list[list[TextFragment]]:
    """
    Otwiera PDF z pamięci i zwraca fragmenty tekstu strona po stronie.

    Args:
        data: Zawartość pliku PDF.
        mode: "lines" (strumień linii) lub "coords" (fragmenty z x/y).

    Raises:
        LayoutError: dane nie są poprawnym plikiem PDF albo MuPDF nie
                     potrafi odczytać którejś strony.
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except fitz.FileDataError as e:
        raise LayoutError(f"nie można otworzyć PDF: {e}", doc_id=doc_id) from e
    try:
        pages: list[list[TextFragment]] = []
        for number, page in enumerate(doc, 1):
            try:
                page_dict = page.get_text("dict", flags=fitz.TEXT_PRESERVE_WHITESPACE)
            except (RuntimeError, ValueError) as e:
                raise LayoutError(f"błąd odczytu strony {number}: {e}", doc_id=doc_id) from e
            if mode == "coords":
                pages.append(_coordinate_fragments(page_dict, page.rect.height))
            else:
                pages.append(_line_fragments(page_dict))
        return pages
    finally:
        doc.close()


def _line_fragments(page_dict: dict) -> list[TextFragment]:
    out: list[TextFragment] = []
    for block in page_dict.get("blocks", []):
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            text = "".join(s.get("text", "") for s in line.get("spans", []))
            if _is_vertical(line):
                out.extend(TextFragment(content=ch) for ch in text if not is_blank(ch))
            elif not is_blank(text):
                out.append(TextFragment(content=text))
    return out


def _coordinate_fragments(page_dict: dict, page_height: float) -> list[TextFragment]:
    out: list[TextFragment] = []
    for block in page_dict.get("blocks", []):
        if block.get("type") != 0:
            continue
        for line in block.get("lines", []):
            for span in line.get("spans", []):
                text = span.get("text", "")
                if not text.strip():
                    continue
                ox, oy = span.get("origin", span["bbox"][:2])
                out.append(TextFragment(
                    content=text,
                    x=round(ox),
                    y=round(page_height - oy),
                ))
    return out


def _is_vertical(line: dict) -> bool:
    """Linia pisana pionowo: wektor kierunku bliżej osi y niż x."""
    dx, dy = line.get("dir", (1.0, 0.0))
    return abs(dy) > abs(dx)
