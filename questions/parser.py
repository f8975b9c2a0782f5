"""
questions/parser.py — rekonstrukcja zawiadomień o pytaniach ogólnych (一般質問).

Architektura:
  strony fragmentów z x/y → reconstruct_pages() → wiersze
  → classify_rows(QUESTION_NOTICE.columns) → order | item_title | detail | respondent
  → QuestionFolder.feed() wiersz po wierszu → list[MemberQuestion]

Reguły składania:
  - "N番 氏名" w kolumnie tytułu (bez treści w kolumnie szczegółów) → nowy członek
  - numerowany tytuł        → nowy punkt (QuestionItem)
  - tytuł bez numeru        → dopisany do tytułu bieżącego punktu (zawinięty wiersz)
  - numerowany szczegół     → nowy element details
  - szczegół bez numeru     → dopisany do ostatniego elementu details
Kontynuacje sklejane są bez separatora (tekst japoński).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Iterable

from data_model.errors import LayoutError
from data_model.layout import ColumnRole, TextFragment
from data_model.records import MemberQuestion, QuestionItem, QuestionsDocument, utc_timestamp
from pdf.columns import ClassifiedRow, classify_rows
from pdf.families import QUESTION_NOTICE, DocumentFamily
from pdf.layout import reconstruct_pages
from pdf.text_cleaner import remove_all_ws, to_half

log = logging.getLogger(__name__)

MEMBER_NAME_RE = re.compile(r"^(\d+)番\s*(.+)")
# Etykieta numeru: "1", "(1)", "（1）", "1."; najwyżej dwie cyfry, żeby
# "2025年度…" nie zostało potraktowane jako punkt nr 2025.
NUMBERED_RE = re.compile(r"^[(（]?(\d{1,2})[)）.．]?\s*(?!\d)(.*)$")
UNKNOWN_TITLE = "(不明)"


@dataclass(frozen=True, slots=True)
class NoticeHeaderRules:
    """Wiersze nagłówka tabeli i stopki pomijane przed składaniem."""
    phrases: tuple[str, ...] = (
        "一般質問通告一覧表",
        "議員1人の持ち時間",
        "議員１人の持ち時間",
        "質問・答弁は",
    )
    title_header: re.Pattern[str] = re.compile(r"^(議席番号|件\s*名$)")
    detail_header: re.Pattern[str] = re.compile(r"^質問項目")
    whole_header: re.Pattern[str] = re.compile(r"^(答弁を|求める者|件\s+名|順|序)$")

    def is_header(self, row: ClassifiedRow) -> bool:
        joined = "".join(row.text(r) for r in (
            ColumnRole.ORDER, ColumnRole.ITEM_TITLE, ColumnRole.DETAIL, ColumnRole.RESPONDENT
        )).strip()
        if not joined:
            return True
        if any(p in joined for p in self.phrases):
            return True
        if self.title_header.match(row.text(ColumnRole.ITEM_TITLE).strip()):
            return True
        if self.detail_header.match(row.text(ColumnRole.DETAIL).strip()):
            return True
        return bool(self.whole_header.match(joined))


DEFAULT_HEADER_RULES = NoticeHeaderRules()


class QuestionFolder:
    """Składa sklasyfikowane wiersze w hierarchię członek → punkt → szczegóły."""

    def __init__(self, doc_id: str = "") -> None:
        self.doc_id = doc_id
        self.members: list[MemberQuestion] = []
        self._member: MemberQuestion | None = None
        self._item: QuestionItem | None = None

    def feed(self, row: ClassifiedRow) -> None:
        title = to_half(row.text(ColumnRole.ITEM_TITLE).strip())
        detail = to_half(row.text(ColumnRole.DETAIL).strip())

        member = MEMBER_NAME_RE.match(title)
        if member and not detail:
            self._start_member(member.group(2), row.text(ColumnRole.ORDER))
            return
        current = self._member
        if current is None:
            return

        if title:
            self._feed_title(current, title)
        if detail:
            self._feed_detail(current, detail)

    def finish(self) -> list[MemberQuestion]:
        for m in self.members:
            for item in m.items:
                item.details = [d for d in item.details if d]
        return self.members

    # -----------------------------------------------------------------------

    def _start_member(self, name: str, order_text: str) -> None:
        order_text = to_half(order_text).strip()
        if order_text.isdigit() and int(order_text) > 0:
            order = int(order_text)
        else:
            order = (self.members[-1].order if self.members else 0) + 1
        self._member = MemberQuestion(member_name=remove_all_ws(name), order=order)
        self.members.append(self._member)
        self._item = None

    def _new_item(self, member: MemberQuestion, title: str) -> QuestionItem:
        item = QuestionItem(title=title)
        member.items.append(item)
        self._item = item
        return item

    def _feed_title(self, member: MemberQuestion, title: str) -> None:
        numbered = NUMBERED_RE.match(title)
        if numbered:
            self._new_item(member, numbered.group(2).strip())
        elif self._item is not None:
            self._item.title += title
        else:
            log.warning("[%s] tytuł bez numeru przed pierwszym punktem: %r", self.doc_id, title)
            self._new_item(member, title)

    def _feed_detail(self, member: MemberQuestion, detail: str) -> None:
        item = self._item
        if item is None:
            log.warning("[%s] szczegół bez punktu, tworzę %s: %r", self.doc_id, UNKNOWN_TITLE, detail)
            item = self._new_item(member, UNKNOWN_TITLE)

        numbered = NUMBERED_RE.match(detail)
        if numbered:
            item.details.append(numbered.group(2).strip())
        elif item.details:
            item.details[-1] += detail
        else:
            item.details.append(detail)


def fold_questions(
    rows: Iterable[ClassifiedRow],
    header_rules: NoticeHeaderRules = DEFAULT_HEADER_RULES,
    doc_id: str = "",
) -> list[MemberQuestion]:
    folder = QuestionFolder(doc_id=doc_id)
    for row in rows:
        if header_rules.is_header(row):
            continue
        folder.feed(row)
    return folder.finish()


def parse_question_document(
    pages: Iterable[Iterable[TextFragment]],
    *,
    session: str = "",
    session_slug: str = "",
    source_url: str = "",
    pdf_url: str = "",
    doc_id: str = "",
    scraped_at: str | None = None,
    family: DocumentFamily = QUESTION_NOTICE,
) -> QuestionsDocument:
    """
    Rekonstruuje zawiadomienie o pytaniach z fragmentów z współrzędnymi.

    Raises:
        LayoutError: brak wierszy (np. PDF złożony z samych obrazów).
    """
    doc_id = doc_id or session_slug or pdf_url
    rows = reconstruct_pages(pages, tolerance=family.y_tolerance)
    if not rows:
        raise LayoutError("brak wierszy tekstu (PDF bez warstwy tekstowej?)", doc_id=doc_id)

    questions = fold_questions(classify_rows(rows, family.columns), doc_id=doc_id)
    log.info("[%s] %d członków z pytaniami", doc_id, len(questions))

    return QuestionsDocument(
        session=session,
        session_slug=session_slug,
        source_url=source_url,
        pdf_url=pdf_url,
        scraped_at=scraped_at or utc_timestamp(),
        questions=questions,
    )
