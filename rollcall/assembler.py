"""
rollcall/assembler.py — składanie rekordów głosowań i potok dokumentu.

Architektura:
  strony fragmentów → reconstruct_pages() → wiersze
  → select_rollcall_family() (raz na dokument) → classify_rows()
  → extract_members() → BillTableParser.parse() → resolve_speaker()
  → assemble_bill() dla każdego bloku → VotingDocument

Polityka błędów:
  LayoutError, NameExtractionError      — przerywają dokument (zero rekordów)
  BillParseError, CountMismatchError    — projekt pominięty, licznik pominięć logowany
  SpeakerUnresolvedWarning              — rekordy oznaczone, ostrzeżenie w dokumencie

Kluczowe funkcje publiczne:
  parse_rollcall_document(pages, …) -> VotingDocument
  parse_rollcall_text(text, …)      -> VotingDocument
"""

from __future__ import annotations

import logging
import warnings
from typing import Iterable

from data_model.errors import (
    BillParseError,
    CountMismatchError,
    LayoutError,
    NameExtractionError,
    ReconstructionError,
    SpeakerUnresolvedWarning,
)
from data_model.layout import TextFragment
from data_model.records import BillRecord, Member, VoteEntry, VoteValue, VotingDocument, utc_timestamp
from pdf.columns import classify_rows
from pdf.families import BillGrammar, select_rollcall_family
from pdf.layout import reconstruct_pages
from rollcall.bills import BillBlock, BillTableParser
from rollcall.lexicon import DEFAULT_LEXICON, RollCallLexicon
from rollcall.names import extract_members
from rollcall.speaker import SpeakerContext, SpeakerResolution, resolve_speaker

log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Składanie jednego projektu
# ---------------------------------------------------------------------------

def assemble_bill(
    block: BillBlock,
    members: list[Member],
    speaker: SpeakerResolution,
    doc_id: str = "",
) -> BillRecord:
    """
    Przypisuje symbole głosów członkom w kolejności dokumentu.

    - n−1 symboli i znany przewodniczący → przewodniczący dostaje 議長
      na swojej pozycji, reszta symboli po kolei
    - n symboli → przypisanie jeden do jednego
    - n−1 symboli, przewodniczący nieznany, ale pominięty w danych →
      pierwsze n−1 osób, rekord oznaczony speaker_unresolved
    - cokolwiek innego → CountMismatchError (bez przycinania i dopełniania)
    """
    n = len(members)
    symbols = block.symbols
    if not symbols:
        raise BillParseError(f"{block.bill_number}: brak symboli głosów", doc_id=doc_id)

    if speaker.member is not None and len(symbols) == n - 1:
        remaining = iter(symbols)
        votes = tuple(
            VoteEntry(m.full_name, VoteValue.PRESIDING if m == speaker.member else next(remaining))
            for m in members
        )
        return BillRecord(block.bill_number, block.title, block.outcome, votes)

    if len(symbols) == n:
        votes = tuple(VoteEntry(m.full_name, v) for m, v in zip(members, symbols))
        return BillRecord(block.bill_number, block.title, block.outcome, votes)

    if speaker.implicit_exclusion and len(symbols) == n - 1:
        votes = tuple(VoteEntry(m.full_name, v) for m, v in zip(members, symbols))
        return BillRecord(
            block.bill_number, block.title, block.outcome, votes, speaker_unresolved=True
        )

    raise CountMismatchError(
        f"{block.bill_number}: {len(symbols)} głosów, oczekiwano {n - 1} lub {n}",
        doc_id=doc_id,
    )


def _backfill_titles(
    blocks: list[BillBlock],
    grammar: BillGrammar,
    doc_id: str,
) -> tuple[list[BillBlock], list[ReconstructionError]]:
    """
    Rozdziela bloki na te z głosami i błędy; w układzie legacy blok bez
    głosów o numerze już przegłosowanego projektu uzupełnia jego pusty tytuł.
    """
    voted: dict[str, BillBlock] = {}
    kept: list[BillBlock] = []
    errors: list[ReconstructionError] = []
    for block in blocks:
        if block.symbols:
            voted.setdefault(block.bill_number, block)
            kept.append(block)
            continue
        target = voted.get(block.bill_number)
        if grammar.backfill_titles and target is not None and not target.title and block.title:
            target.title_parts = list(block.title_parts)
            continue
        errors.append(BillParseError(f"{block.bill_number}: brak symboli głosów", doc_id=doc_id))
    return kept, errors


# ---------------------------------------------------------------------------
# Potok dokumentu
# ---------------------------------------------------------------------------

def parse_rollcall_document(
    pages: Iterable[Iterable[TextFragment]],
    *,
    session: str = "",
    session_slug: str = "",
    source_url: str = "",
    lexicon: RollCallLexicon = DEFAULT_LEXICON,
    roster: frozenset[str] | None = None,
    doc_id: str = "",
    scraped_at: str | None = None,
) -> VotingDocument:
    """
    Rekonstruuje arkusz głosowań z fragmentów tekstu (strona po stronie).

    Raises:
        LayoutError:         brak wierszy (np. PDF złożony z samych obrazów).
        NameExtractionError: brak listy członków albo lista nie pasuje
                             do żadnego projektu.
    """
    doc_id = doc_id or session_slug or source_url
    rows = reconstruct_pages(pages)
    if not rows:
        raise LayoutError("brak wierszy tekstu (PDF bez warstwy tekstowej?)", doc_id=doc_id)

    family = select_rollcall_family(session, rows, lexicon.bill_pattern)
    grammar = family.grammar
    if grammar is None:
        raise LayoutError(f"rodzina {family.name} nie opisuje tabeli projektów", doc_id=doc_id)
    classified = classify_rows(rows, family.columns)

    members = extract_members(rows, lexicon, roster=roster, doc_id=doc_id)
    log.info("[%s] %d członków: %s…", doc_id, len(members),
             ", ".join(m.full_name for m in members[:3]))

    blocks = BillTableParser(grammar, lexicon).parse(classified)
    voted, failures = _backfill_titles(blocks, grammar, doc_id)

    n = len(members)
    if voted and not any(len(b.symbols) in (n - 1, n) for b in voted):
        raise NameExtractionError(
            f"{n} członków nie pasuje do liczby głosów żadnego projektu", doc_id=doc_id
        )

    speaker = resolve_speaker(SpeakerContext(rows, members, voted, lexicon))

    doc = VotingDocument(
        session=session,
        session_slug=session_slug,
        source_url=source_url,
        scraped_at=scraped_at or utc_timestamp(),
    )
    for block in voted:
        try:
            doc.records.append(assemble_bill(block, members, speaker, doc_id=doc_id))
        except (BillParseError, CountMismatchError) as e:
            failures.append(e)

    for e in failures:
        log.warning("%s", e)
        doc.warnings.append(f"{e.code}: {e.message}")
    if failures:
        log.warning("[%s] pominięto %d projektów", doc_id, len(failures))

    if any(r.speaker_unresolved for r in doc.records):
        message = f"przewodniczący nieustalony ({speaker.method})"
        warnings.warn(SpeakerUnresolvedWarning(f"[{doc_id}] {message}"), stacklevel=2)
        doc.warnings.append(f"{SpeakerUnresolvedWarning.code}: {message}")

    return doc


def parse_rollcall_text(text: str, **kwargs) -> VotingDocument:
    """Wariant dla gotowego tekstu (strumień linii, np. z innego ekstraktora)."""
    fragments = [TextFragment(content=line) for line in text.split("\n")]
    return parse_rollcall_document([fragments], **kwargs)
