"""Połączenie z bazą PostgreSQL (opcjonalny zapis --out db) — konfiguracja przez zmienne PG*."""

from __future__ import annotations

import os

import psycopg2
import psycopg2.extensions

from kpl import _settings  # noqa: F401  (ładuje .env)


def get_connection() -> psycopg2.extensions.connection:
    return psycopg2.connect(
        host             = os.getenv("PGHOST",     "localhost"),
        port             = int(os.getenv("PGPORT", "5432")),
        dbname           = os.getenv("PGDATABASE", "kiryu_public_log"),
        user             = os.getenv("PGUSER",     "kiryu"),
        password         = os.getenv("PGPASSWORD", "kiryu"),
        connect_timeout  = int(os.getenv("PGCONNECT_TIMEOUT", "10")),
        application_name = "kpl",
    )
