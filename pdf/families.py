"""
pdf/families.py — znane rodziny układów dokumentów.

Każda DocumentFamily niesie:
  - mode        : tryb ekstrakcji ("lines" = strumień linii, "coords" = współrzędne)
  - columns     : tabela kolumn (ColumnRangeTable / LineRuleTable)
  - grammar     : gramatyka bloku projektu (tylko arkusze głosowań)

Rodzina wybierana jest raz, na początku przetwarzania dokumentu
(select_rollcall_family), a nie wykrywana ponownie w parserach.

Rodziny:
  ROLLCALL_INLINE  — od roku budżetowego 2020 (令和2年): tytuł w wierszu numeru
  ROLLCALL_LEGACY  — 平成28年–令和元年: tytuły wydrukowane po danych głosowania
  QUESTION_NOTICE  — tabela zawiadomień o pytaniach (kolumny wg x)
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Literal

from data_model.layout import ColumnRole, Row
from pdf.columns import ColumnRange, ColumnRangeTable, ColumnTable, LineRule, LineRuleTable
from pdf.text_cleaner import remove_ascii_ws, strip_ascii, to_half

log = logging.getLogger(__name__)

ExtractionMode = Literal["lines", "coords"]

# Pierwszy rok budżetowy układu z tytułem w wierszu numeru projektu.
INLINE_LAYOUT_SINCE = 2020


@dataclass(frozen=True, slots=True)
class BillGrammar:
    """
    Gramatyka bloku projektu w arkuszu głosowań.

    - continuation_title: kolejne wiersze bez symboli mogą kontynuować tytuł
    - backfill_titles:    późniejszy blok bez głosów uzupełnia pusty tytuł
    - title_reject:       prefiksy odrzucające tekst jako tytuł w wierszu numeru
    - continuation_reject:prefiksy odrzucające wiersz jako kontynuację tytułu
    - terminators:        nagłówki kończące blok (blok nazwisk, legenda, data)
    - captions:           podpisy sekcji kategorii (市長提出 itd.)
    - scan_cap:           maks. liczba wierszy skanowanych w jednym bloku
    """
    continuation_title: bool
    backfill_titles: bool
    title_reject: re.Pattern[str]
    continuation_reject: re.Pattern[str]
    terminators: re.Pattern[str]
    captions: re.Pattern[str]
    scan_cap: int = 80


@dataclass(frozen=True, slots=True)
class DocumentFamily:
    name: str
    mode: ExtractionMode
    columns: ColumnTable
    grammar: BillGrammar | None = None
    y_tolerance: int = 5


# ---------------------------------------------------------------------------
# Arkusze głosowań: strumień linii
# ---------------------------------------------------------------------------

_VERTICAL_CHAR = r"[ \t]*[\u3400-\u4dbf\u4e00-\u9fff\u3000\u3040-\u309f][ \t]*"

ROLLCALL_LINES = LineRuleTable(
    rules=(
        LineRule(re.compile(_VERTICAL_CHAR), ColumnRole.MEMBER_NAME_BLOCK),
    ),
    default=ColumnRole.VOTE_AREA,
)

_TERMINATORS = re.compile(
    r"^(議員氏名|議案番号|[○〇][：:]賛成|結\s*果|令和\s*\d|平成\s*\d)"
)
_CAPTIONS = re.compile(r"^(市\s*長\s*提\s*出|議\s*員\s*提\s*出|委\s*員\s*会\s*提\s*出)")

ROLLCALL_INLINE = DocumentFamily(
    name="rollcall-inline",
    mode="lines",
    columns=ROLLCALL_LINES,
    grammar=BillGrammar(
        continuation_title=True,
        backfill_titles=False,
        title_reject=re.compile(r"^(市|議|委|○|×|〇|結|令和|平成|議員|議案番号)"),
        continuation_reject=re.compile(r"^(市|議|委|○|〇)"),
        terminators=_TERMINATORS,
        captions=_CAPTIONS,
    ),
)

ROLLCALL_LEGACY = DocumentFamily(
    name="rollcall-legacy",
    mode="lines",
    columns=ROLLCALL_LINES,
    grammar=BillGrammar(
        continuation_title=False,
        backfill_titles=True,
        title_reject=re.compile(r"^(市|議|委|○|×|〇|結|令和|平成|議員|議案番号)"),
        continuation_reject=re.compile(r"^(市|議|委|○|〇)"),
        terminators=_TERMINATORS,
        captions=_CAPTIONS,
    ),
)

# ---------------------------------------------------------------------------
# Zawiadomienia o pytaniach: współrzędne
# ---------------------------------------------------------------------------

QUESTION_NOTICE = DocumentFamily(
    name="question-notice",
    mode="coords",
    columns=ColumnRangeTable(
        ranges=(
            ColumnRange(0, 75, ColumnRole.ORDER),
            ColumnRange(75, 190, ColumnRole.ITEM_TITLE),
            ColumnRange(190, 480, ColumnRole.DETAIL),
            ColumnRange(480, 2000, ColumnRole.RESPONDENT),
        ),
    ),
)


# ---------------------------------------------------------------------------
# Wybór rodziny
# ---------------------------------------------------------------------------

_ERA_RE = re.compile(r"(令和|平成)(\d+|元)年")
_ERA_OFFSET = {"令和": 2018, "平成": 1988}


def fiscal_year(session: str) -> int | None:
    """"令和2年第1回定例会" → 2020, "平成30年…" → 2018, "令和元年…" → 2019."""
    m = _ERA_RE.search(to_half(session))
    if not m:
        return None
    year = 1 if m.group(2) == "元" else int(m.group(2))
    return _ERA_OFFSET[m.group(1)] + year


def select_rollcall_family(
    session: str | None,
    rows: list[Row],
    bill_pattern: re.Pattern[str],
) -> DocumentFamily:
    """
    Wybiera rodzinę arkusza głosowań dokładnie raz na dokument.

    Priorytet:
      1. rok z nazwy sesji (era japońska)
      2. kształt pierwszego wiersza z numerem projektu: tekst tytułu
         za numerem → układ inline, sam numer → legacy
      3. domyślnie układ inline
    """
    year = fiscal_year(session) if session else None
    if year is not None:
        family = ROLLCALL_INLINE if year >= INLINE_LAYOUT_SINCE else ROLLCALL_LEGACY
        log.debug("Rodzina %s z roku sesji %d", family.name, year)
        return family

    for row in rows:
        text = strip_ascii(to_half(row.text))
        m = bill_pattern.search(text)
        if not m:
            continue
        rest = remove_ascii_ws(text[m.end():])
        family = ROLLCALL_INLINE if rest else ROLLCALL_LEGACY
        log.debug("Rodzina %s z pierwszego wiersza projektu", family.name)
        return family

    return ROLLCALL_INLINE
