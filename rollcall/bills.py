"""
rollcall/bills.py — parser tabeli głosowań (maszyna stanów po wierszach).

Stany:
  SEEKING_BILL      → szukamy wiersza z numerem projektu
  COLLECTING_VOTES  → zbieramy symbole głosów, kontynuacje tytułu, wynik

Przejście SEEKING_BILL → COLLECTING_VOTES: wiersz pasuje do wzorca numeru.
Koniec zbierania: kolejny numer projektu, nagłówek bloku nazwisk / legendy
/ daty (terminators), podpis kategorii (captions), początek pionowego
bloku nazwisk albo limit skanowania (scan_cap).

Rozstrzyganie w wierszu z tytułem i symbolami: pierwszeństwo mają symbole
(najdłuższy ciąg symboli), tekst przed nimi to tytuł, tekst po nich —
kandydat na wynik.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum, auto

from data_model.layout import ColumnRole
from data_model.records import VoteValue
from pdf.columns import ClassifiedRow
from pdf.families import BillGrammar
from pdf.text_cleaner import remove_all_ws, strip_ascii, to_half, vertical_char
from rollcall.lexicon import RollCallLexicon

log = logging.getLogger(__name__)


@dataclass(slots=True)
class BillBlock:
    bill_number: str
    title_parts: list[str] = field(default_factory=list)
    symbols: list[VoteValue] = field(default_factory=list)
    outcome: str = ""
    speaker_position: int | None = None   # indeks członka wskazany znacznikiem w wierszu

    @property
    def title(self) -> str:
        return remove_all_ws("".join(self.title_parts))


class _State(Enum):
    SEEKING_BILL = auto()
    COLLECTING_VOTES = auto()


# ---------------------------------------------------------------------------
# Analiza pojedynczego tekstu
# ---------------------------------------------------------------------------

def _symbol_run_re(lexicon: RollCallLexicon) -> re.Pattern[str]:
    return re.compile(rf"(?:{lexicon.symbol_class}\s*)+")


def _speaker_marker_re(lexicon: RollCallLexicon) -> re.Pattern[str]:
    return re.compile(r"\s*".join(re.escape(ch) for ch in lexicon.speaker_marker))


def split_votes(text: str, lexicon: RollCallLexicon) -> tuple[str, list[VoteValue], str]:
    """
    Dzieli tekst na (tytuł przed symbolami, symbole, reszta po symbolach).

    Wybierany jest najdłuższy ciąg symboli (przy remisie — ostatni), żeby
    pojedynczy "欠" w tytule nie został policzony jako głos.
    """
    best: re.Match[str] | None = None
    best_count = 0
    for m in _symbol_run_re(lexicon).finditer(text):
        count = sum(1 for ch in m.group() if ch in lexicon.vote_symbols)
        if count >= best_count:
            best, best_count = m, count
    if best is None:
        return text, [], ""
    symbols = [lexicon.vote_symbols[ch] for ch in best.group() if ch in lexicon.vote_symbols]
    return text[:best.start()], symbols, text[best.end():]


def find_outcome(text: str, lexicon: RollCallLexicon, whole: bool = False) -> str:
    """
    Wynik głosowania wg priorytetowej listy fraz.

    whole=True: cały wiersz (bez białych znaków) musi być frazą wyniku —
    tak rozpoznajemy samodzielny wiersz wyniku, nie fragment tytułu.
    """
    compact = remove_all_ws(text)
    if not compact:
        return ""
    for phrase in lexicon.outcomes:
        if whole:
            if phrase.pattern.fullmatch(compact):
                return phrase.label
        elif phrase.pattern.search(compact):
            return phrase.label
    return ""


# ---------------------------------------------------------------------------
# Maszyna stanów
# ---------------------------------------------------------------------------

class BillTableParser:
    """
    Parser bloków projektów dla jednej rodziny dokumentu.

    Użycie:
      blocks = BillTableParser(grammar, lexicon).parse(classified_rows)
    """

    def __init__(self, grammar: BillGrammar, lexicon: RollCallLexicon) -> None:
        self.grammar = grammar
        self.lexicon = lexicon
        self._marker_re = _speaker_marker_re(lexicon)

    def parse(self, rows: list[ClassifiedRow]) -> list[BillBlock]:
        blocks: list[BillBlock] = []
        state = _State.SEEKING_BILL
        current: BillBlock | None = None
        scanned = 0

        for i, crow in enumerate(rows):
            text = strip_ascii(to_half(crow.row.text))
            bill = self.lexicon.bill_pattern.search(text)

            if state is _State.COLLECTING_VOTES:
                if bill is None and scanned < self.grammar.scan_cap and not self._ends_block(rows, i, text):
                    self._consume_row(current, text)  # type: ignore[arg-type]
                    scanned += 1
                    continue
                state = _State.SEEKING_BILL

            if bill is not None:
                current = BillBlock(bill_number=remove_all_ws(bill.group()))
                blocks.append(current)
                self._consume_bill_row(current, text[bill.end():])
                state = _State.COLLECTING_VOTES
                scanned = 0

        log.debug("Znaleziono %d bloków projektów", len(blocks))
        return blocks

    # -- warunki końca bloku --------------------------------------------------

    def _ends_block(self, rows: list[ClassifiedRow], i: int, text: str) -> bool:
        if self.grammar.terminators.match(text):
            return True
        if self.grammar.captions.match(text) and self.lexicon.speaker_marker not in text:
            return True
        return self._starts_vertical_block(rows, i)

    @staticmethod
    def _starts_vertical_block(rows: list[ClassifiedRow], i: int) -> bool:
        """Pojedynczy ideogram, po którym następuje kolejny znak pionowy."""
        if ColumnRole.MEMBER_NAME_BLOCK not in rows[i].roles or i + 1 >= len(rows):
            return False
        here = vertical_char(rows[i].row.text)
        after = vertical_char(rows[i + 1].row.text)
        return here is not None and here != "　" and after is not None

    # -- konsumpcja wierszy ---------------------------------------------------

    def _consume_bill_row(self, block: BillBlock, rest: str) -> None:
        if self._consume_marker(block, rest):
            return
        title, symbols, tail = split_votes(rest, self.lexicon)
        if symbols:
            if strip_ascii(title):
                block.title_parts.append(strip_ascii(title))
            block.symbols.extend(symbols)
            block.outcome = find_outcome(tail, self.lexicon)
            return
        title = strip_ascii(rest)
        if title and not self.grammar.title_reject.match(title):
            block.title_parts.append(title)

    def _consume_row(self, block: BillBlock, text: str) -> None:
        if not text:
            return
        if self._consume_marker(block, text):
            return

        title, symbols, tail = split_votes(text, self.lexicon)
        if symbols:
            if strip_ascii(title) and self._accepts_title(block, strip_ascii(title)):
                block.title_parts.append(strip_ascii(title))
            block.symbols.extend(symbols)
            block.outcome = block.outcome or find_outcome(tail, self.lexicon)
            return

        outcome = find_outcome(text, self.lexicon, whole=True)
        if outcome:
            block.outcome = block.outcome or outcome
            return

        if self._accepts_title(block, text):
            block.title_parts.append(text)

    def _accepts_title(self, block: BillBlock, text: str) -> bool:
        if block.symbols and not (self.grammar.continuation_title and block.title_parts):
            return False
        if len(text) <= 1 or not text.strip():
            return False
        if re.match(self.lexicon.symbol_class, text):
            return False
        return not self.grammar.continuation_reject.match(text)

    def _consume_marker(self, block: BillBlock, text: str) -> bool:
        """
        Znacznik przewodniczącego w wierszu głosów: liczba symboli przed nim
        wyznacza pozycję przewodniczącego w kolejności członków.
        """
        m = self._marker_re.search(text)
        if m is None:
            return False
        _, before, _ = split_votes(text[:m.start()], self.lexicon)
        _, after, tail = split_votes(text[m.end():], self.lexicon)
        if before or after:
            block.speaker_position = len(block.symbols) + len(before)
            block.symbols.extend(before)
            block.symbols.extend(after)
        block.outcome = block.outcome or find_outcome(tail, self.lexicon)
        return True
