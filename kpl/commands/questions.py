"""Komenda: kpl questions — zawiadomienia o pytaniach ogólnych (indeks WWW → data/questions)."""

from __future__ import annotations

import argparse
import logging

import requests
from rich.console import Console

from data_model.records import QuestionsDocument
from kpl._batch import run_batch
from kpl._settings import Settings
from kpl._sink import add_output_args, save_results, upsert, wants_db, wants_json, write_json
from pdf.extractor import extract_pages
from questions import parse_question_document
from scraper.http import Fetcher, Throttle
from scraper.question_index import PdfEntry, get_pdf_links, get_year_page_links
from scraper.sessions import session_to_slug

console = Console()
log = logging.getLogger(__name__)


def discover(fetcher: Fetcher, index_url: str) -> list[PdfEntry]:
    """Zbiera PDF-y ze wszystkich stron rocznych; błędna strona roczna jest pomijana."""
    entries: list[PdfEntry] = []
    for year in get_year_page_links(fetcher, index_url):
        try:
            found = get_pdf_links(fetcher, year.url)
        except requests.RequestException as e:
            log.error("Strona roczna %s: %s", year.label, e)
            continue
        log.info("%s: %d PDF", year.label, len(found))
        entries.extend(found)
    return entries


def make_worker(fetcher: Fetcher):
    def process(entry: PdfEntry) -> QuestionsDocument:
        slug = session_to_slug(entry.session)
        data = fetcher.fetch_bytes(entry.pdf_url)
        pages = extract_pages(data, mode="coords", doc_id=slug)
        return parse_question_document(
            pages,
            session=entry.session,
            session_slug=slug,
            source_url=entry.page_url,
            pdf_url=entry.pdf_url,
            doc_id=slug,
        )
    return process


def run(args: argparse.Namespace) -> None:
    settings: Settings = args.settings
    fetcher = Fetcher(settings.user_agent, Throttle(settings.request_interval_ms))

    try:
        entries = discover(fetcher, args.index_url or settings.questions_index_url)
    except requests.RequestException as e:
        console.print(f"[red]Błąd pobierania indeksu:[/red] {e}")
        raise SystemExit(1)

    if args.session:
        entries = [e for e in entries if session_to_slug(e.session) in args.session]
    console.print(f"Zawiadomienia o pytaniach: [bold]{len(entries)}[/bold] PDF")
    if not entries:
        return

    result = run_batch(
        entries,
        make_worker(fetcher),
        label=lambda e: e.session,
        workers=args.workers or settings.workers,
        console=console,
        description="Pytania",
    )

    conn = None
    if wants_db(args) and result.done:
        from kpl._db import get_connection
        try:
            conn = get_connection()
        except Exception as e:
            console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
            raise SystemExit(1)

    def save(_: PdfEntry, doc: QuestionsDocument) -> None:
        if wants_json(args):
            write_json(doc.to_dict(), settings.questions_dir / f"{doc.session_slug}.json")
        if conn is not None:
            upsert(conn, doc)

    result.done.sort(key=lambda d: d[1].session_slug)
    try:
        save_results(result, save, label=lambda e: e.session)
    finally:
        if conn is not None:
            conn.close()

    total = 0
    for _, doc in result.done:
        total += len(doc.questions)
        console.print(f"  [cyan]{doc.session_slug}[/cyan]  {len(doc.questions)} członków")

    for entry, message in result.failed:
        console.print(f"  [red]{entry.session}:[/red] {message}")
    console.print(
        f"[green]Gotowe[/green] — {len(result.done)} plików, {total} członków z pytaniami"
        + (f", [yellow]{len(result.failed)} błędów[/yellow]" if result.failed else "")
    )


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "questions",
        help="Rekonstruuje zawiadomienia o pytaniach ogólnych z PDF.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Pobiera indeks zawiadomień (KPL_QUESTIONS_INDEX_URL), strony roczne i PDF-y,
odtwarza tabelę (członek → tematy → punkty szczegółowe) z współrzędnych
tekstu i zapisuje data/questions/<slug>.json.

Przykłady:
  kpl questions
  kpl questions --session r7-4-teireikai
  kpl questions --out db
        """,
    )
    p.add_argument(
        "--session", "-s",
        action="append",
        metavar="SLUG",
        help="Przetwarzaj tylko podaną sesję (można powtórzyć).",
    )
    p.add_argument(
        "--index-url",
        metavar="URL",
        help="Adres strony indeksu (domyślnie: KPL_QUESTIONS_INDEX_URL).",
    )
    p.add_argument(
        "--workers", "-w",
        type=int,
        metavar="N",
        help="Liczba wątków (domyślnie: KPL_WORKERS).",
    )
    add_output_args(p)
    p.set_defaults(func=run)
