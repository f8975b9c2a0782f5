"""
pdf/text_cleaner.py — normalizacja tekstu wyciągniętego z PDF.

Co robimy:
  - Cyfry pełnej szerokości → ASCII ("第１２号" → "第12号")
  - Usuwanie wyłącznie białych znaków ASCII (spacja ideograficzna U+3000
    jest w pionowych blokach nazwisk znaczącym separatorem — zostaje!)
  - Rozpoznawanie pojedynczych znaków pionowych (ideogram CJK / U+3000 / hiragana)

Uwaga: str.strip() w Pythonie usuwa też U+3000; tu zawsze używamy
strip_ascii() tam, gdzie separator nazwiska musi przetrwać.
"""

from __future__ import annotations

import re

IDEOGRAPHIC_SPACE = "　"

_ASCII_WS = " \t\r\n"
_ASCII_WS_RE = re.compile(r"[ \t\r\n]")
_FULLWIDTH_DIGITS = str.maketrans("０１２３４５６７８９", "0123456789")
_ALL_WS_RE = re.compile(r"\s+")


def to_half(text: str) -> str:
    """Zamienia cyfry pełnej szerokości na ASCII."""
    return text.translate(_FULLWIDTH_DIGITS)


def strip_ascii(text: str) -> str:
    return text.strip(_ASCII_WS)


def remove_ascii_ws(text: str) -> str:
    return _ASCII_WS_RE.sub("", text)


def remove_all_ws(text: str) -> str:
    """Usuwa wszystkie białe znaki, łącznie z U+3000 (tytuły, numery projektów)."""
    return _ALL_WS_RE.sub("", text)


def is_cjk(ch: str) -> bool:
    code = ord(ch)
    return 0x4E00 <= code <= 0x9FFF or 0x3400 <= code <= 0x4DBF


def is_hiragana(ch: str) -> bool:
    return 0x3040 <= ord(ch) <= 0x309F


def vertical_char(text: str, allow_hiragana: bool = False) -> str | None:
    """
    Zwraca znak, jeśli wiersz jest pojedynczym znakiem pionowego bloku.

    Dopuszczalne: ideogram CJK, U+3000, opcjonalnie hiragana.
    """
    stripped = remove_ascii_ws(text)
    if len(stripped) != 1:
        return None
    if is_cjk(stripped) or stripped == IDEOGRAPHIC_SPACE:
        return stripped
    if allow_hiragana and is_hiragana(stripped):
        return stripped
    return None


def is_blank(text: str) -> bool:
    """Pusty po usunięciu białych znaków ASCII (U+3000 nie jest pusty)."""
    return not strip_ascii(text)
