"""
kpl — narzędzie CLI dla Kiryu Public Log.

Użycie:
  kpl [--data-dir DIR] [--verbose] <komenda> [opcje]

Komendy:
  voting        Rekonstruuje arkusze głosowań imiennych (data/voting).
  questions     Rekonstruuje zawiadomienia o pytaniach ogólnych (data/questions).
  parse         Rekonstruuje lokalny PDF i pokazuje wynik w terminalu.
  analyze       Liczy macierz zgodności głosowań (data/voting-analysis.json).
  apply-schema  Aplikuje db/schema.sql do bazy danych (idempotentne).
"""

from __future__ import annotations

import argparse
import logging
import sys

# Windows: terminal może używać cp1252, więc wymuszamy UTF-8, żeby japońskie
# nazwiska i polskie teksty pomocy były wypisywane poprawnie.
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
if hasattr(sys.stderr, "reconfigure"):
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

from rich.logging import RichHandler

from kpl._settings import get_settings
from kpl.commands import analyze as cmd_analyze
from kpl.commands import apply_schema as cmd_apply_schema
from kpl.commands import parse as cmd_parse
from kpl.commands import questions as cmd_questions
from kpl.commands import voting as cmd_voting


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=verbose)],
        force=True,
    )
    # SpeakerUnresolvedWarning trafia do logu zamiast na stderr
    logging.captureWarnings(True)
    for noisy in ("urllib3", "charset_normalizer"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kpl",
        description="Kiryu Public Log — rekonstrukcja dokumentów rady miejskiej.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version="kpl 0.1.0"
    )
    parser.add_argument(
        "--data-dir",
        metavar="DIR",
        help="Katalog danych (domyślnie: KPL_DATA_DIR lub ./data).",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Logowanie na poziomie DEBUG.",
    )

    subparsers = parser.add_subparsers(
        title="komendy",
        metavar="<komenda>",
        dest="command",
    )
    subparsers.required = True

    cmd_voting.add_parser(subparsers)
    cmd_questions.add_parser(subparsers)
    cmd_parse.add_parser(subparsers)
    cmd_analyze.add_parser(subparsers)
    cmd_apply_schema.add_parser(subparsers)

    return parser


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    configure_logging(args.verbose)
    args.settings = get_settings(args.data_dir)
    args.func(args)


if __name__ == "__main__":
    main()
