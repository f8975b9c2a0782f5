"""
analysis/agreement.py — macierz zgodności głosowań i profile sprzeciwu.

Wejście: słowniki VotingDocument.to_dict() (pliki data/voting/*.json)
oraz opcjonalnie spis członków z frakcjami (data/council-members.json).

Zasady:
  - liczą się tylko głosy 賛成 / 反対; 欠席, 議長, 退席 są pomijane
  - rekordy ze speakerUnresolved nie wchodzą do żadnej statystyki
    (kolejność głosów nie jest pewna)
  - nazwiska normalizowane przez usunięcie białych znaków (także U+3000)
  - wartości macierzy: 1.0 na przekątnej, −1 gdy para nie ma wspólnych
    głosów, w pozostałych przypadkach udział zgodnych głosów (3 miejsca)

Kluczowe funkcje publiczne:
  load_voting_documents(voting_dir) -> list[dict]
  analyse_voting(documents, council=None) -> dict
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from itertools import combinations
from pathlib import Path
from typing import Any

from data_model.records import VoteValue, utc_timestamp

log = logging.getLogger(__name__)

NO_FACTION = "無会派"
FACTION_ORDER = (
    "一心会",
    "そうぞう未来",
    "政策研究会",
    "公明クラブ",
    "クラブ21",
    "日本共産党議員団",
    NO_FACTION,
)
_CAST = (VoteValue.YES.value, VoteValue.NO.value)
_NO_SEAT = 999


def normalise_name(name: str) -> str:
    return re.sub(r"[\s　]+", "", name)


def _rate(part: int, total: int) -> float:
    return round(part / total, 3)


@dataclass(slots=True)
class _Bill:
    session_slug: str
    bill_number: str
    votes: dict[str, str] = field(default_factory=dict)   # nazwisko → 賛成/反対

    @property
    def is_split(self) -> bool:
        values = set(self.votes.values())
        return len(values) == 2


# ---------------------------------------------------------------------------
# Wejście
# ---------------------------------------------------------------------------

def load_voting_documents(voting_dir: Path) -> list[dict[str, Any]]:
    """Wczytuje pliki *.json w kolejności nazw; pliki bez rekordów są pomijane."""
    documents = []
    for path in sorted(voting_dir.glob("*.json")):
        data = json.loads(path.read_text(encoding="utf-8"))
        if data.get("records"):
            documents.append(data)
    return documents


def _council_maps(council: dict[str, Any] | None) -> tuple[dict[str, str], dict[str, int]]:
    factions: dict[str, str] = {}
    seats: dict[str, int] = {}
    if not council:
        return factions, seats
    for m in [*council.get("officers", []), *council.get("members", [])]:
        name = normalise_name(m.get("name", ""))
        factions[name] = m.get("faction") or NO_FACTION
        seat = m.get("seatNumber")
        seats[name] = seat if seat is not None else _NO_SEAT
    return factions, seats


def _faction_key(faction: str) -> int:
    return FACTION_ORDER.index(faction) if faction in FACTION_ORDER else len(FACTION_ORDER)


# ---------------------------------------------------------------------------
# Obliczenia
# ---------------------------------------------------------------------------

def _collect_bills(documents: list[dict[str, Any]]) -> tuple[list[_Bill], int]:
    bills: list[_Bill] = []
    excluded = 0
    for doc in documents:
        for record in doc.get("records", []):
            if record.get("speakerUnresolved"):
                excluded += 1
                continue
            bill = _Bill(doc.get("sessionSlug", ""), record.get("billNumber", ""))
            for v in record.get("votes", []):
                if v.get("vote") in _CAST:
                    bill.votes.setdefault(normalise_name(v["memberName"]), v["vote"])
            bills.append(bill)
    return bills, excluded


def agreement_matrix(bills: list[_Bill], members: list[str]) -> list[list[float]]:
    index = {name: i for i, name in enumerate(members)}
    n = len(members)
    agree = [[0] * n for _ in range(n)]
    total = [[0] * n for _ in range(n)]

    for bill in bills:
        voted = [m for m in bill.votes if m in index]
        for a, b in combinations(voted, 2):
            i, j = index[a], index[b]
            total[i][j] += 1
            total[j][i] += 1
            if bill.votes[a] == bill.votes[b]:
                agree[i][j] += 1
                agree[j][i] += 1

    matrix: list[list[float]] = []
    for i in range(n):
        row: list[float] = []
        for j in range(n):
            if i == j:
                row.append(1.0)
            elif total[i][j]:
                row.append(_rate(agree[i][j], total[i][j]))
            else:
                row.append(-1)
        matrix.append(row)
    return matrix


def faction_cohesion(
    bills: list[_Bill], members: list[str], factions: dict[str, str]
) -> list[dict[str, Any]]:
    grouped: dict[str, list[str]] = {}
    for name in members:
        grouped.setdefault(factions.get(name, NO_FACTION), []).append(name)

    result = []
    for faction, names in grouped.items():
        unanimous = split = 0
        if len(names) >= 2:
            for bill in bills:
                cast = [bill.votes[m] for m in names if m in bill.votes]
                if len(cast) < 2:
                    continue
                if len(set(cast)) == 1:
                    unanimous += 1
                else:
                    split += 1
        total = unanimous + split
        result.append({
            "faction": faction,
            "memberCount": len(names),
            "cohesionRate": _rate(unanimous, total) if total else 1.0,
            "splitBillCount": split,
            "totalBillCount": total,
        })
    result.sort(key=lambda f: _faction_key(f["faction"]))
    return result


def dissenter_profiles(
    bills: list[_Bill], members: list[str], factions: dict[str, str]
) -> list[dict[str, Any]]:
    profiles = []
    for name in members:
        cast = [bill.votes[name] for bill in bills if name in bill.votes]
        opposition = cast.count(VoteValue.NO.value)
        profiles.append({
            "memberName": name,
            "faction": factions.get(name, NO_FACTION),
            "totalVotes": len(cast),
            "oppositionCount": opposition,
            "oppositionRate": _rate(opposition, len(cast)) if cast else 0,
        })
    # sortowanie stabilne: przy równych wskaźnikach zostaje kolejność członków
    profiles.sort(key=lambda p: -p["oppositionRate"])
    return profiles


def _session_range(documents: list[dict[str, Any]]) -> str:
    ordered = sorted(documents, key=lambda d: d.get("sessionSlug", ""))
    if not ordered:
        return ""
    return f"{ordered[0].get('session', '')}〜{ordered[-1].get('session', '')}"


def analyse_voting(
    documents: list[dict[str, Any]],
    council: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """Buduje kompletny wynik analizy (kształt pliku voting-analysis.json)."""
    factions, seats = _council_maps(council)
    bills, excluded = _collect_bills(documents)
    if excluded:
        log.info("Pominięto %d rekordów z nieustalonym przewodniczącym", excluded)

    names = {name for bill in bills for name in bill.votes}
    members = sorted(
        names,
        key=lambda m: (_faction_key(factions.get(m, NO_FACTION)), seats.get(m, _NO_SEAT), m),
    )
    split_bills = sum(1 for bill in bills if bill.is_split)
    log.info("%d projektów, %d podzielonych, %d członków", len(bills), split_bills, len(members))

    return {
        "meta": {
            "generatedAt": utc_timestamp(),
            "totalBills": len(bills),
            "splitBills": split_bills,
            "excludedBills": excluded,
            "sessionRange": _session_range(documents),
        },
        "agreementMatrix": {
            "members": members,
            "factions": [factions.get(m, NO_FACTION) for m in members],
            "matrix": agreement_matrix(bills, members),
        },
        "factionCohesion": faction_cohesion(bills, members, factions),
        "dissenterProfiles": dissenter_profiles(bills, members, factions),
    }
