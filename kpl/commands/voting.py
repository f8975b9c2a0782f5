"""Komenda: kpl voting — rekonstrukcja arkuszy głosowań imiennych (data/sessions → data/voting)."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from data_model.records import VotingDocument
from kpl._batch import run_batch
from kpl._settings import Settings
from kpl._sink import (
    add_output_args,
    has_records,
    save_results,
    upsert,
    wants_db,
    wants_json,
    write_json,
)
from pdf.extractor import extract_pages
from rollcall import DEFAULT_LEXICON, RollCallLexicon, load_lexicon, parse_rollcall_document
from scraper.http import Fetcher, Throttle
from scraper.sessions import VotingSource, load_roster, load_voting_sources

console = Console()


# ---------------------------------------------------------------------------
# Wybór dokumentów
# ---------------------------------------------------------------------------

def select_sources(
    sources: list[VotingSource],
    out_dir: Path,
    *,
    only: list[str] | None = None,
    force: bool = False,
) -> tuple[list[VotingSource], list[VotingSource]]:
    """Zwraca (do przetworzenia, pominięte — istniejący wynik z rekordami)."""
    if only:
        sources = [s for s in sources if s.slug in only]
    todo: list[VotingSource] = []
    skipped: list[VotingSource] = []
    for s in sources:
        if not force and has_records(out_dir / f"{s.slug}.json"):
            skipped.append(s)
        else:
            todo.append(s)
    return todo, skipped


# ---------------------------------------------------------------------------
# Przetwarzanie jednego dokumentu
# ---------------------------------------------------------------------------

def make_worker(fetcher: Fetcher, lexicon: RollCallLexicon, roster: frozenset[str]):
    def process(source: VotingSource) -> VotingDocument:
        data = fetcher.fetch_bytes(source.pdf_url)
        pages = extract_pages(data, mode="lines", doc_id=source.slug)
        return parse_rollcall_document(
            pages,
            session=source.session,
            session_slug=source.slug,
            source_url=source.pdf_url,
            lexicon=lexicon,
            roster=roster or None,
            doc_id=source.slug,
        )
    return process


def _show_summary(done: list[tuple[VotingSource, VotingDocument]], failed: list[tuple[VotingSource, str]]) -> None:
    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", show_header=True)
    table.add_column("SESJA", style="cyan", no_wrap=True)
    table.add_column("PROJEKTY", justify="right")
    table.add_column("GŁOSY", justify="right")
    table.add_column("OSTRZEŻENIA", style="yellow", max_width=60)

    for source, doc in sorted(done, key=lambda d: d[0].slug):
        table.add_row(
            source.slug,
            str(len(doc.records)),
            str(sum(len(r.votes) for r in doc.records)),
            "; ".join(doc.warnings)[:200] or "-",
        )
    for source, message in sorted(failed, key=lambda f: f[0].slug):
        table.add_row(source.slug, "[red]—[/red]", "[red]—[/red]", f"[red]{message[:200]}[/red]")

    console.print(table)


# ---------------------------------------------------------------------------
# Główna logika komendy
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> None:
    settings: Settings = args.settings

    if not settings.sessions_dir.exists():
        console.print(f"[red]Brak katalogu sesji:[/red] {settings.sessions_dir}")
        raise SystemExit(1)

    lexicon = load_lexicon(args.lexicon) if args.lexicon else DEFAULT_LEXICON
    roster = load_roster(settings.roster_path)
    sources = load_voting_sources(settings.sessions_dir)
    todo, skipped = select_sources(sources, settings.voting_dir, only=args.session, force=args.force)

    console.print(
        f"Arkusze głosowań: [bold]{len(todo)}[/bold] do przetworzenia, "
        f"[dim]{len(skipped)} pominiętych (istnieją; --force nadpisuje)[/dim]"
    )
    if not todo:
        return

    fetcher = Fetcher(settings.user_agent, Throttle(settings.request_interval_ms))
    result = run_batch(
        todo,
        make_worker(fetcher, lexicon, roster),
        label=lambda s: s.slug,
        workers=args.workers or settings.workers,
        console=console,
        description="Głosowania",
    )

    conn = None
    if wants_db(args) and result.done:
        from kpl._db import get_connection
        try:
            conn = get_connection()
        except Exception as e:
            console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
            raise SystemExit(1)

    def save(source: VotingSource, doc: VotingDocument) -> None:
        if wants_json(args):
            write_json(doc.to_dict(), settings.voting_dir / f"{source.slug}.json")
        if conn is not None:
            upsert(conn, doc)

    try:
        save_results(result, save, label=lambda s: s.slug)
    finally:
        if conn is not None:
            conn.close()

    _show_summary(result.done, result.failed)
    status = "[green]Gotowe[/green]" if not result.failed else f"[yellow]Gotowe z {len(result.failed)} błędami[/yellow]"
    console.print(f"{status} — zapisano {len(result.done)} dokumentów")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "voting",
        help="Rekonstruuje arkusze głosowań imiennych z PDF.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Dla każdego pliku data/sessions/*.json z polem votingRecordPdfUrl pobiera PDF,
odtwarza listę członków, projekty i głosy, i zapisuje data/voting/<slug>.json.

Istniejące wyniki z niepustą listą records są pomijane (chyba że --force).
Błędy pojedynczych dokumentów są raportowane; przebieg jest kontynuowany.

Przykłady:
  kpl voting
  kpl voting --session r7-4-teireikai --force
  kpl voting --workers 8 --out both
  kpl voting --lexicon extra-names.json
        """,
    )
    p.add_argument(
        "--session", "-s",
        action="append",
        metavar="SLUG",
        help="Przetwarzaj tylko podaną sesję (można powtórzyć).",
    )
    p.add_argument(
        "--force", "-f",
        action="store_true",
        help="Nadpisz istniejące wyniki.",
    )
    p.add_argument(
        "--lexicon",
        metavar="PLIK",
        help="Plik JSON z dodatkowymi nazwiskami (familyNames).",
    )
    p.add_argument(
        "--workers", "-w",
        type=int,
        metavar="N",
        help="Liczba wątków (domyślnie: KPL_WORKERS).",
    )
    add_output_args(p)
    p.set_defaults(func=run)
