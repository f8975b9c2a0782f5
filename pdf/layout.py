"""
pdf/layout.py — rekonstrukcja wierszy tabeli z fragmentów tekstu.

Tryb współrzędnych:
  fragmenty → sort (y malejąco = góra strony, potem x rosnąco)
  → nowy wiersz, gdy |y − y_odniesienia| > tolerancja
Tryb strumienia linii (brak współrzędnych):
  każda niepusta linia źródłowa = jeden wiersz z jednym fragmentem

Wiersze bez treści (tylko białe znaki ASCII) są odrzucane.
"""

from __future__ import annotations

import logging
from typing import Iterable

from data_model.layout import Row, TextFragment
from pdf.text_cleaner import is_blank

log = logging.getLogger(__name__)

DEFAULT_Y_TOLERANCE = 5


def reconstruct_rows(
    fragments: Iterable[TextFragment],
    tolerance: int = DEFAULT_Y_TOLERANCE,
) -> list[Row]:
    """
    Grupuje fragmenty jednej strony (lub całego dokumentu) w wiersze.

    Tryb wybierany jest po fragmentach: jeśli wszystkie niepuste fragmenty
    mają pozycję → grupowanie po y, w przeciwnym razie strumień linii.
    """
    items = [f for f in fragments if not is_blank(f.content)]
    if not items:
        return []
    if all(f.has_position for f in items):
        return _group_by_position(items, tolerance)
    return [Row(fragments=(f,)) for f in items]


def _group_by_position(items: list[TextFragment], tolerance: int) -> list[Row]:
    ordered = sorted(items, key=lambda f: (-f.y, f.x))  # type: ignore[operator]

    rows: list[Row] = []
    current: list[TextFragment] = [ordered[0]]
    current_y = ordered[0].y

    for frag in ordered[1:]:
        if abs(frag.y - current_y) <= tolerance:  # type: ignore[operator]
            current.append(frag)
        else:
            rows.append(_make_row(current))
            current = [frag]
            current_y = frag.y
    rows.append(_make_row(current))

    log.debug("Zgrupowano %d fragmentów w %d wierszy", len(items), len(rows))
    return rows


def _make_row(frags: list[TextFragment]) -> Row:
    # Fragmenty z tolerancją y mogą przyjść spoza kolejności x
    return Row(fragments=tuple(sorted(frags, key=lambda f: f.x)))  # type: ignore[arg-type]


def reconstruct_pages(
    pages: Iterable[Iterable[TextFragment]],
    tolerance: int = DEFAULT_Y_TOLERANCE,
) -> list[Row]:
    """Rekonstruuje każdą stronę osobno i skleja wiersze w kolejności stron."""
    rows: list[Row] = []
    for page in pages:
        rows.extend(reconstruct_rows(page, tolerance))
    return rows
