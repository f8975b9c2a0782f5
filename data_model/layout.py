"""
data_model/layout.py — surowe fragmenty tekstu PDF i wiersze tabeli.

TextFragment — jednostka tekstu z ekstrakcji (opcjonalnie z pozycją x/y
    w przestrzeni PDF: y rośnie ku górze strony).
Row          — fragmenty uznane za leżące na tej samej wysokości,
    uporządkowane od lewej do prawej.
ColumnRole   — semantyczna rola kolumny przypisywana fragmentom.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ColumnRole(StrEnum):
    ORDER             = "order"
    MEMBER_NAME_BLOCK = "member_name_block"
    ITEM_TITLE        = "item_title"
    DETAIL            = "detail"
    RESPONDENT        = "respondent"
    VOTE_AREA         = "vote_area"
    UNCLASSIFIED      = "unclassified"


@dataclass(frozen=True, slots=True)
class TextFragment:
    content: str
    x: int | None = None   # brak w trybie strumienia linii
    y: int | None = None

    @property
    def has_position(self) -> bool:
        return self.x is not None and self.y is not None


@dataclass(frozen=True, slots=True)
class Row:
    fragments: tuple[TextFragment, ...]

    @property
    def text(self) -> str:
        """Treść wiersza: fragmenty sklejone bez separatora (kolejność x)."""
        return "".join(f.content for f in self.fragments)

    @property
    def y(self) -> int | None:
        return self.fragments[0].y if self.fragments else None
