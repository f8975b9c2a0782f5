"""
kpl/_sink.py — zapis wyników: pliki JSON i (opcjonalnie) baza PostgreSQL.

  --out json   data/<rodzaj>/<slug>.json   (domyślnie)
  --out db     upsert do vote_entry / question_item
  --out both   oba naraz

Błąd zapisu jednego dokumentu nie przerywa zapisu pozostałych (save_results).
"""

from __future__ import annotations

import argparse
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Any, Callable, TypeVar

import psycopg2
import psycopg2.extras

from data_model.records import QuestionsDocument, VotingDocument
from kpl._batch import BatchResult

log = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def add_output_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--out",
        choices=["json", "db", "both"],
        default="json",
        help="Miejsce zapisu wyników (domyślnie: json).",
    )


def wants_json(args: argparse.Namespace) -> bool:
    return args.out in ("json", "both")


def wants_db(args: argparse.Namespace) -> bool:
    return args.out in ("db", "both")


# ---------------------------------------------------------------------------
# JSON
# ---------------------------------------------------------------------------

def write_json(data: Any, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, ensure_ascii=False, indent=2) + "\n", encoding="utf-8")


def has_records(path: Path) -> bool:
    """Czy istniejący plik głosowań ma niepustą listę records (polityka pomijania)."""
    if not path.exists():
        return False
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        return False
    return bool(data.get("records"))


# ---------------------------------------------------------------------------
# Baza danych
# ---------------------------------------------------------------------------

_UPSERT_VOTES_SQL = """
    INSERT INTO vote_entry
        (session_slug, bill_number, vote_seq, member_name, vote, bill_title, result,
         speaker_unresolved, session, source_url, scraped_at)
    VALUES %s
    ON CONFLICT (session_slug, bill_number, vote_seq, member_name) DO UPDATE SET
        vote               = EXCLUDED.vote,
        bill_title         = EXCLUDED.bill_title,
        result             = EXCLUDED.result,
        speaker_unresolved = EXCLUDED.speaker_unresolved,
        session            = EXCLUDED.session,
        source_url         = EXCLUDED.source_url,
        scraped_at         = EXCLUDED.scraped_at
"""

_UPSERT_QUESTIONS_SQL = """
    INSERT INTO question_item
        (session_slug, member_name, item_no, member_order, title, details,
         session, pdf_url, scraped_at)
    VALUES %s
    ON CONFLICT (session_slug, member_name, item_no) DO UPDATE SET
        member_order = EXCLUDED.member_order,
        title        = EXCLUDED.title,
        details      = EXCLUDED.details,
        session      = EXCLUDED.session,
        pdf_url      = EXCLUDED.pdf_url,
        scraped_at   = EXCLUDED.scraped_at
"""

# Długość klucza głównego (pierwsze kolumny wiersza).
_VOTES_KEY = 4
_QUESTIONS_KEY = 3


def voting_rows(doc: VotingDocument) -> list[tuple]:
    """
    Wiersze vote_entry. Kolejne głosowania nad tym samym numerem projektu
    (np. poprawka, potem projekt) dostają vote_seq 1, 2, …
    """
    seen: Counter[str] = Counter()
    rows: list[tuple] = []
    for record in doc.records:
        seen[record.bill_number] += 1
        for vote in record.votes:
            rows.append((
                doc.session_slug,
                record.bill_number,
                seen[record.bill_number],
                vote.member_name,
                str(vote.vote),
                record.title,
                record.outcome,
                record.speaker_unresolved,
                doc.session,
                doc.source_url,
                doc.scraped_at,
            ))
    return _unique(rows, _VOTES_KEY)


def question_rows(doc: QuestionsDocument) -> list[tuple]:
    """Wiersze question_item; item_no numerowany per członek w całym dokumencie."""
    item_no: Counter[str] = Counter()
    rows: list[tuple] = []
    for q in doc.questions:
        for item in q.items:
            item_no[q.member_name] += 1
            rows.append((
                doc.session_slug,
                q.member_name,
                item_no[q.member_name],
                q.order,
                item.title,
                list(item.details),
                doc.session,
                doc.pdf_url,
                doc.scraped_at,
            ))
    return _unique(rows, _QUESTIONS_KEY)


def _unique(rows: list[tuple], key_len: int) -> list[tuple]:
    """Jeden wiersz na klucz (ostatni wygrywa); ON CONFLICT nie zniesie duplikatu w jednym INSERT."""
    by_key: dict[tuple, tuple] = {}
    for row in rows:
        by_key[row[:key_len]] = row
    return list(by_key.values())


def upsert(conn, doc: VotingDocument | QuestionsDocument) -> int:
    """Zapisuje dokument w jednej transakcji; zwraca liczbę wierszy."""
    if isinstance(doc, VotingDocument):
        sql, rows = _UPSERT_VOTES_SQL, voting_rows(doc)
    else:
        sql, rows = _UPSERT_QUESTIONS_SQL, question_rows(doc)
    if not rows:
        return 0
    with conn, conn.cursor() as cur:
        psycopg2.extras.execute_values(cur, sql, rows)
    return len(rows)


# ---------------------------------------------------------------------------
# Zapis wyników przebiegu
# ---------------------------------------------------------------------------

def save_results(
    result: BatchResult[T, R],
    save: Callable[[T, R], None],
    *,
    label: Callable[[T], str],
) -> None:
    """
    Zapisuje gotowe dokumenty jeden po drugim. Błąd zapisu (plik, baza)
    przenosi dokument z `done` do `failed`; kolejne dokumenty są zapisywane dalej.
    """
    saved: list[tuple[T, R]] = []
    for item, doc in result.done:
        try:
            save(item, doc)
        except (OSError, psycopg2.Error) as e:
            log.error("%s: zapis nieudany: %s", label(item), e)
            result.failed.append((item, f"zapis: {e}"))
        else:
            saved.append((item, doc))
    result.done = saved
