"""Komenda: kpl analyze — macierz zgodności głosowań (data/voting → data/voting-analysis.json)."""

from __future__ import annotations

import argparse
import json

from rich import box
from rich.console import Console
from rich.table import Table

from analysis.agreement import analyse_voting, load_voting_documents
from kpl._settings import Settings
from kpl._sink import write_json

console = Console()


def _show_profiles(analysis: dict, top: int) -> None:
    table = Table(box=box.SIMPLE_HEAD, header_style="bold white", show_header=True)
    table.add_column("CZŁONEK", style="cyan", no_wrap=True)
    table.add_column("FRAKCJA", style="dim")
    table.add_column("GŁOSY", justify="right")
    table.add_column("反対", justify="right")
    table.add_column("UDZIAŁ", justify="right")
    for p in analysis["dissenterProfiles"][:top]:
        table.add_row(
            p["memberName"], p["faction"], str(p["totalVotes"]),
            str(p["oppositionCount"]), f"{p['oppositionRate'] * 100:.1f}%",
        )
    console.print(table)


def run(args: argparse.Namespace) -> None:
    settings: Settings = args.settings
    if not settings.voting_dir.exists():
        console.print(f"[red]Brak katalogu głosowań:[/red] {settings.voting_dir}")
        raise SystemExit(1)

    documents = load_voting_documents(settings.voting_dir)
    council = None
    if settings.roster_path.exists():
        council = json.loads(settings.roster_path.read_text(encoding="utf-8"))

    analysis = analyse_voting(documents, council)
    out_path = settings.data_dir / "voting-analysis.json"
    write_json(analysis, out_path)

    meta = analysis["meta"]
    console.print(
        f"Projekty: [bold]{meta['totalBills']}[/bold], podzielone: {meta['splitBills']}, "
        f"wykluczone: {meta['excludedBills']}, członkowie: {len(analysis['agreementMatrix']['members'])}"
    )
    if args.top:
        _show_profiles(analysis, args.top)
    console.print(f"[green]JSON:[/green] {out_path}")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "analyze",
        help="Liczy macierz zgodności i profile sprzeciwu z plików głosowań.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Czyta data/voting/*.json (i data/council-members.json dla frakcji),
pomija rekordy z nieustalonym przewodniczącym i zapisuje
data/voting-analysis.json.

Przykład:
  kpl analyze --top 10
        """,
    )
    p.add_argument(
        "--top",
        type=int,
        default=10,
        metavar="N",
        help="Pokaż N członków z najwyższym udziałem głosów 反対 (0 = nie pokazuj).",
    )
    p.set_defaults(func=run)
