"""
Konfiguracja kpl — zmienne środowiskowe, opcjonalnie z pliku .env
w katalogu głównym projektu.

  KPL_DATA_DIR             katalog danych (domyślnie: data)
  KPL_REQUEST_INTERVAL_MS  odstęp między pobraniami (domyślnie: 1000)
  KPL_USER_AGENT           nagłówek User-Agent
  KPL_WORKERS              liczba wątków parsowania (domyślnie: 4)
  KPL_QUESTIONS_INDEX_URL  strona indeksu zawiadomień o pytaniach
"""

from __future__ import annotations

import os
import pathlib
from dataclasses import dataclass

from dotenv import load_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent
load_dotenv(ROOT / ".env")

DEFAULT_USER_AGENT = "KiryuPublicLog/1.0 (+https://kiryu.co)"
DEFAULT_QUESTIONS_INDEX_URL = "https://www.city.kiryu.lg.jp/shigikai/honkaigi/shitsusmon/index.html"


@dataclass(frozen=True, slots=True)
class Settings:
    data_dir: pathlib.Path
    request_interval_ms: int
    user_agent: str
    workers: int
    questions_index_url: str

    @property
    def sessions_dir(self) -> pathlib.Path:
        return self.data_dir / "sessions"

    @property
    def voting_dir(self) -> pathlib.Path:
        return self.data_dir / "voting"

    @property
    def questions_dir(self) -> pathlib.Path:
        return self.data_dir / "questions"

    @property
    def roster_path(self) -> pathlib.Path:
        return self.data_dir / "council-members.json"


def get_settings(data_dir: str | None = None) -> Settings:
    """Ustawienia ze środowiska; data_dir (np. z --data-dir) ma pierwszeństwo."""
    return Settings(
        data_dir            = pathlib.Path(data_dir or os.getenv("KPL_DATA_DIR", "data")),
        request_interval_ms = int(os.getenv("KPL_REQUEST_INTERVAL_MS", "1000")),
        user_agent          = os.getenv("KPL_USER_AGENT", DEFAULT_USER_AGENT),
        workers             = int(os.getenv("KPL_WORKERS", "4")),
        questions_index_url = os.getenv("KPL_QUESTIONS_INDEX_URL", DEFAULT_QUESTIONS_INDEX_URL),
    )
