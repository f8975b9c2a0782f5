"""Komenda: kpl apply-schema — tworzy tabele vote_entry i question_item (db/schema.sql)."""

from __future__ import annotations

import argparse
import pathlib
import re

import psycopg2
from rich.console import Console

from kpl._db import get_connection

console = Console()

ROOT        = pathlib.Path(__file__).resolve().parent.parent.parent
SCHEMA_PATH = ROOT / "db" / "schema.sql"

_TABLE_RE = re.compile(r"CREATE TABLE IF NOT EXISTS (\w+)")


def schema_tables(sql: str) -> list[str]:
    return _TABLE_RE.findall(sql)


def run(args: argparse.Namespace) -> None:
    if not SCHEMA_PATH.exists():
        console.print(f"[red]Brak pliku schematu:[/red] {SCHEMA_PATH}")
        raise SystemExit(1)
    sql = SCHEMA_PATH.read_text(encoding="utf-8")

    try:
        conn = get_connection()
    except psycopg2.Error as e:
        console.print(f"[red]Błąd połączenia z bazą:[/red] {e}")
        raise SystemExit(1)

    # Schemat bez typów i bloków DO: cały plik w jednej transakcji.
    try:
        with conn, conn.cursor() as cur:
            cur.execute(sql)
    except psycopg2.Error as e:
        console.print(f"[red]Błąd wykonania schematu:[/red] {e}")
        raise SystemExit(1)
    finally:
        conn.close()

    console.print(f"[green]Schemat zastosowany:[/green] {', '.join(schema_tables(sql))}")


def add_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    p = subparsers.add_parser(
        "apply-schema",
        help="Tworzy tabele wyników w bazie PostgreSQL (idempotentne).",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Tworzy tabele vote_entry i question_item w bazie wskazanej przez PGHOST,
PGPORT, PGDATABASE, PGUSER, PGPASSWORD. Plik wykonywany jest w jednej
transakcji; IF NOT EXISTS pozwala uruchamiać go wielokrotnie.

Przykład:
  kpl apply-schema
        """,
    )
    p.set_defaults(func=run)
