"""
data_model/errors.py — taksonomia błędów rekonstrukcji dokumentu.

Błędy dokumentu (przerywają cały dokument, zero rekordów):
  LayoutError, NameExtractionError
Błędy projektu uchwały (projekt pomijany, reszta dokumentu leci dalej):
  BillParseError, CountMismatchError
Ostrzeżenie (nie blokuje wyniku, zapisywane w rekordzie):
  SpeakerUnresolvedWarning
"""

from __future__ import annotations

from enum import StrEnum


class IssueCode(StrEnum):
    LAYOUT              = "E_LAYOUT"
    NAME_EXTRACTION     = "E_NAME_EXTRACTION"
    BILL_PARSE          = "E_BILL_PARSE"
    COUNT_MISMATCH      = "E_COUNT_MISMATCH"
    SPEAKER_UNRESOLVED  = "W_SPEAKER_UNRESOLVED"


class ReconstructionError(Exception):
    """Bazowy błąd rekonstrukcji; zawsze niesie identyfikator dokumentu."""

    code: IssueCode = IssueCode.LAYOUT

    def __init__(self, message: str, doc_id: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.doc_id = doc_id

    def __str__(self) -> str:
        prefix = f"[{self.doc_id}] " if self.doc_id else ""
        return f"{prefix}{self.code}: {self.message}"


class LayoutError(ReconstructionError):
    """Z niepustego (lub pustego: PDF-obraz) wejścia nie powstał żaden wiersz."""
    code = IssueCode.LAYOUT


class NameExtractionError(ReconstructionError):
    """Mniej niż dwa segmenty nazwisk albo lista członków nie pasuje do dokumentu."""
    code = IssueCode.NAME_EXTRACTION


class BillParseError(ReconstructionError):
    code = IssueCode.BILL_PARSE


class CountMismatchError(ReconstructionError):
    code = IssueCode.COUNT_MISMATCH


class SpeakerUnresolvedWarning(UserWarning):
    """Tożsamość przewodniczącego nieznana, ale liczba głosów spójna."""
    code = IssueCode.SPEAKER_UNRESOLVED
