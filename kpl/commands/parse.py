"""Komenda: kpl parse — rekonstrukcja lokalnego pliku PDF z podglądem w terminalu."""

from __future__ import annotations

import argparse
from pathlib import Path

from rich import box
from rich.console import Console
from rich.table import Table

from data_model.errors import ReconstructionError
from data_model.records import QuestionsDocument, VotingDocument
from kpl._sink import write_json
from pdf.extractor import extract_pages
from questions import parse_question_document
from rollcall import DEFAULT_LEXICON, load_lexicon, parse_rollcall_document
from scraper.sessions import session_to_slug

console = Console()


# ---------------------------------------------------------------------------
# Wyświetlanie w terminalu
# ---------------------------------------------------------------------------

def _show_voting(doc: VotingDocument) -> None:
    if not doc.records:
        console.print("[yellow]Brak rekordów.[/yellow]")
        return

    members = [v.member_name for v in doc.records[0].votes]
    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", row_styles=["", "dim"])
    table.add_column("PROJEKT", style="bold cyan", no_wrap=True)
    table.add_column("TYTUŁ", max_width=40)
    table.add_column("WYNIK", no_wrap=True)
    table.add_column("賛/反/他", justify="right", no_wrap=True)

    for r in doc.records:
        values = [str(v.vote) for v in r.votes]
        yes, no = values.count("賛成"), values.count("反対")
        flag = " [yellow]?[/yellow]" if r.speaker_unresolved else ""
        table.add_row(
            r.bill_number, r.title[:80], r.outcome or "-",
            f"{yes}/{no}/{len(values) - yes - no}{flag}",
        )

    console.print()
    console.print(f"  [dim]{len(members)} członków: {', '.join(members)}[/dim]")
    console.print(table)
    for w in doc.warnings:
        console.print(f"  [yellow]{w}[/yellow]")


def _show_questions(doc: QuestionsDocument) -> None:
    if not doc.questions:
        console.print("[yellow]Brak pytań.[/yellow]")
        return

    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", row_styles=["", "dim"])
    table.add_column("#", justify="right", no_wrap=True, style="dim")
    table.add_column("CZŁONEK", style="bold cyan", no_wrap=True)
    table.add_column("TEMAT", max_width=40)
    table.add_column("PUNKTY", justify="right")

    for q in doc.questions:
        for i, item in enumerate(q.items):
            table.add_row(
                str(q.order) if i == 0 else "",
                q.member_name if i == 0 else "",
                item.title,
                str(len(item.details)),
            )
    console.print()
    console.print(table)


# ---------------------------------------------------------------------------
# Główna logika komendy
# ---------------------------------------------------------------------------

def run(args: argparse.Namespace) -> None:
    pdf_path = Path(args.pdf_file)
    if not pdf_path.exists():
        console.print(f"[red]Plik nie istnieje:[/red] {pdf_path}")
        raise SystemExit(1)
    if pdf_path.suffix.lower() != ".pdf":
        console.print(f"[red]Oczekiwano pliku .pdf, otrzymano:[/red] {pdf_path.suffix}")
        raise SystemExit(1)

    session = args.session or ""
    slug = session_to_slug(session) if session else pdf_path.stem
    console.print(f"Parsowanie [bold]{pdf_path}[/bold] ({args.kind}, slug=[cyan]{slug}[/cyan]) …")

    data = pdf_path.read_bytes()
    try:
        if args.kind == "voting":
            lexicon = load_lexicon(args.lexicon) if args.lexicon else DEFAULT_LEXICON
            doc = parse_rollcall_document(
                extract_pages(data, mode="lines", doc_id=slug),
                session=session, session_slug=slug, source_url=str(pdf_path),
                lexicon=lexicon, doc_id=slug,
            )
            _show_voting(doc)
        else:
            doc = parse_question_document(
                extract_pages(data, mode="coords", doc_id=slug),
                session=session, session_slug=slug, source_url=str(pdf_path),
                pdf_url=str(pdf_path), doc_id=slug,
            )
            _show_questions(doc)
    except ReconstructionError as e:
        console.print(f"[red]Błąd rekonstrukcji:[/red] {e}")
        raise SystemExit(1)

    if args.json:
        json_path = Path(args.json)
        write_json(doc.to_dict(), json_path)
        console.print(f"[green]JSON:[/green] {json_path}")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "parse",
        help="Rekonstruuje lokalny PDF (głosowania lub pytania) i pokazuje wynik.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Uruchamia potok rekonstrukcji na pliku lokalnym, bez pobierania z sieci.
Nazwa sesji (--session) wybiera rodzinę układu arkusza głosowań
(od 令和2年 tytuł w linii numeru projektu).

Przykłady:
  kpl parse hyoketsu.pdf --kind voting --session 令和7年第4回定例会
  kpl parse shitsumon.pdf --kind questions --json out.json
        """,
    )
    p.add_argument("pdf_file", metavar="PLIK_PDF", help="Ścieżka do pliku PDF.")
    p.add_argument(
        "--kind", "-k",
        choices=["voting", "questions"],
        default="voting",
        help="Rodzaj dokumentu (domyślnie: voting).",
    )
    p.add_argument("--session", metavar="NAZWA", help="Nazwa sesji, np. 令和7年第4回定例会.")
    p.add_argument("--lexicon", metavar="PLIK", help="Plik JSON z dodatkowymi nazwiskami.")
    p.add_argument("--json", metavar="PLIK", help="Zapisz wynik do pliku JSON.")
    p.set_defaults(func=run)
