"""
scraper/sessions.py — źródła dokumentów i spis członków z katalogu danych.

  data/sessions/*.json        → VotingSource (session, votingRecordPdfUrl)
  data/council-members.json   → spis nazwisk (officers + members)
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from pdf.text_cleaner import to_half
from rollcall.names import normalise_roster_name

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class VotingSource:
    slug: str
    session: str
    pdf_url: str


def session_to_slug(session: str) -> str:
    """
    Nazwa sesji → slug pliku.

    "令和7年第4回定例会" → "r7-4-teireikai", "令和元年第1回臨時会" → "r1-1-rinjikai"
    """
    session = to_half(session)
    if "令和元年" in session:
        era, year = "r", "1"
    elif m := re.search(r"(令和|平成)(\d+)年", session):
        era, year = ("r" if m.group(1) == "令和" else "h"), m.group(2)
    else:
        return re.sub(r"\s+", "-", session)

    num = m.group(1) if (m := re.search(r"第(\d+)回", session)) else "0"
    kind = "rinjikai" if "臨時会" in session else "teireikai"
    return f"{era}{year}-{num}-{kind}"


def load_voting_sources(sessions_dir: Path) -> list[VotingSource]:
    sources: list[VotingSource] = []
    for path in sorted(sessions_dir.glob("*.json")):
        data = json.loads(path.read_text(encoding="utf-8"))
        url = data.get("votingRecordPdfUrl")
        if url:
            sources.append(VotingSource(slug=path.stem, session=data.get("session", ""), pdf_url=url))
    return sources


def load_roster(path: Path) -> frozenset[str]:
    """Spis członków jako zbiór nazw "nazwisko　imię"; pusty, gdy brak pliku."""
    if not path.exists():
        log.info("Brak spisu członków: %s", path)
        return frozenset()
    data = json.loads(path.read_text(encoding="utf-8"))
    names: set[str] = set()
    for entry in [*data.get("officers", []), *data.get("members", [])]:
        name = normalise_roster_name(entry.get("name", ""))
        if name:
            names.add(name)
    return frozenset(names)
