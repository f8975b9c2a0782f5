"""
data_model/records.py — rekordy wyjściowe rekonstrukcji dokumentów.

Arkusz głosowań (roll-call):
  Member → VoteEntry → BillRecord → VotingDocument
Zawiadomienie o pytaniach ogólnych:
  QuestionItem → MemberQuestion → QuestionsDocument

Kształty JSON (to_dict) są stabilne i walidowane przez zewnętrzną warstwę
schematów: klucze camelCase, wartości głosów po japońsku.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any

# Separator nazwiska i imienia w pełnej nazwie członka (spacja ideograficzna).
NAME_SEPARATOR = "　"


def utc_timestamp() -> str:
    """Znacznik czasu ISO 8601 z milisekundami i sufiksem Z (jak scrapedAt)."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class VoteValue(StrEnum):
    YES        = "賛成"
    NO         = "反対"
    ABSENT     = "欠席"
    PRESIDING  = "議長"
    LEFT_EARLY = "退席"


# ---------------------------------------------------------------------------
# Arkusz głosowań
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Member:
    """
    Członek rady odtworzony z pionowego bloku nazwisk.

    - family_name: nazwisko (1–3 znaki)
    - given_name:  imię (1–4 znaki)
    - position:    0-based pozycja w kolejności dokumentu
    """
    family_name: str
    given_name: str
    position: int = 0

    @property
    def full_name(self) -> str:
        return f"{self.family_name}{NAME_SEPARATOR}{self.given_name}"


@dataclass(frozen=True, slots=True)
class VoteEntry:
    member_name: str
    vote: VoteValue

    def to_dict(self) -> dict[str, Any]:
        return {"memberName": self.member_name, "vote": str(self.vote)}


@dataclass(frozen=True, slots=True)
class BillRecord:
    bill_number: str       # np. "議案第12号"
    title: str
    outcome: str           # "" gdy nie wykryto
    votes: tuple[VoteEntry, ...]
    speaker_unresolved: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "billNumber": self.bill_number,
            "billTitle": self.title,
            "result": self.outcome,
            "votes": [v.to_dict() for v in self.votes],
        }
        if self.speaker_unresolved:
            data["speakerUnresolved"] = True
        return data


@dataclass(slots=True)
class VotingDocument:
    session: str
    session_slug: str
    source_url: str
    scraped_at: str
    records: list[BillRecord] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "sessionSlug": self.session_slug,
            "sourceUrl": self.source_url,
            "scrapedAt": self.scraped_at,
            "records": [r.to_dict() for r in self.records],
            "warnings": list(self.warnings),
        }


# ---------------------------------------------------------------------------
# Pytania ogólne
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class QuestionItem:
    title: str
    details: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"title": self.title, "details": list(self.details)}


@dataclass(slots=True)
class MemberQuestion:
    member_name: str
    order: int             # kolejność wystąpienia zadeklarowana w dokumencie (1-based)
    items: list[QuestionItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "memberName": self.member_name,
            "order": self.order,
            "items": [i.to_dict() for i in self.items],
        }


@dataclass(slots=True)
class QuestionsDocument:
    session: str
    session_slug: str
    source_url: str
    pdf_url: str
    scraped_at: str
    questions: list[MemberQuestion] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session": self.session,
            "sessionSlug": self.session_slug,
            "sourceUrl": self.source_url,
            "pdfUrl": self.pdf_url,
            "scrapedAt": self.scraped_at,
            "questions": [q.to_dict() for q in self.questions],
        }
