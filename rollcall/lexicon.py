"""
rollcall/lexicon.py — stałe literalne arkuszy głosowań jako dane.

RollCallLexicon zbiera wszystko, co w arkuszu jest słownikiem, a nie logiką:
  - słownik nazwisk (1-, 2-, 3-znakowe) do rozstrzygania granic imię/nazwisko
  - wzorce numerów projektów (議案, 報告, 請願, 陳情, 発議案, 議第N号議案, 諮問)
  - priorytetowa lista fraz wyniku głosowania
  - symbole głosów z wariantami pełnej/połówkowej szerokości
  - frazy resztkowe usuwane z sekwencji nazwisk (kolejność ma znaczenie)
  - znaczniki nagłówka bloku nazwisk i przewodniczącego
  - limity skanowania

Leksykon przekazywany jest jawnie do każdego komponentu; DEFAULT_LEXICON
to wariant dla rady miasta Kiryu. load_lexicon() pozwala rozszerzyć
słownik nazwisk z pliku JSON.
"""

from __future__ import annotations

import dataclasses
import json
import re
from dataclasses import dataclass
from pathlib import Path

from data_model.records import VoteValue


@dataclass(frozen=True, slots=True)
class OutcomePhrase:
    pattern: re.Pattern[str]
    label: str


@dataclass(frozen=True, slots=True)
class RollCallLexicon:
    family_names_1: frozenset[str]
    family_names_2: frozenset[str]
    family_names_3: frozenset[str]
    bill_pattern: re.Pattern[str]
    outcomes: tuple[OutcomePhrase, ...]
    vote_symbols: dict[str, VoteValue]
    residual_removals: tuple[tuple[re.Pattern[str], str], ...]
    name_headers: tuple[str, ...]         # początek bloku nazwisk
    legend_markers: tuple[str, ...]       # zapasowy początek (legenda symboli)
    speaker_marker: str
    name_lookback: int = 5
    name_scan_cap: int = 250
    speaker_window: int = 20

    @property
    def symbol_class(self) -> str:
        """Klasa znaków regex dla wszystkich symboli głosów."""
        return "[" + "".join(re.escape(s) for s in self.vote_symbols) + "]"

    def family_names(self, length: int) -> frozenset[str]:
        return {1: self.family_names_1, 2: self.family_names_2, 3: self.family_names_3}.get(
            length, frozenset()
        )


_BILL_PATTERN = re.compile(
    r"発議案第\s*\d+\s*号"
    r"|議案第\s*\d+\s*号"
    r"|報告第\s*\d+\s*号"
    r"|請願第\s*\d+\s*号"
    r"|陳情第\s*\d+\s*号"
    r"|議第\s*\d+\s*号議案"
    r"|諮問第\s*\d+\s*号"
)

DEFAULT_LEXICON = RollCallLexicon(
    family_names_1=frozenset({"辻"}),
    family_names_2=frozenset({
        "飯島", "歌代", "渡辺", "関口", "小島", "園田", "北川", "工藤",
        "丹羽", "人見", "近藤", "新井", "岡部", "福島", "佐藤", "周藤",
        "小滝", "伏木", "森山", "周東", "田島", "石渡",
    }),
    family_names_3=frozenset({"久保田", "河原井", "山之内"}),
    bill_pattern=_BILL_PATTERN,
    outcomes=(
        OutcomePhrase(re.compile(r"原案可決"), "原案可決"),
        OutcomePhrase(re.compile(r"修正可決"), "修正可決"),
        OutcomePhrase(re.compile(r"原案否決"), "原案否決"),
        OutcomePhrase(re.compile(r"同\s*意"), "同意"),
        OutcomePhrase(re.compile(r"不採択"), "不採択"),
        OutcomePhrase(re.compile(r"採択"), "採択"),
        OutcomePhrase(re.compile(r"異議ない旨\s*(?:回答)?(?:することに決定)?"), "異議ない旨回答することに決定"),
        OutcomePhrase(re.compile(r"認\s*定"), "認定"),
        OutcomePhrase(re.compile(r"承\s*認"), "承認"),
    ),
    vote_symbols={
        "○": VoteValue.YES, "〇": VoteValue.YES, "◯": VoteValue.YES,
        "×": VoteValue.NO, "✕": VoteValue.NO, "✖": VoteValue.NO,
        "欠": VoteValue.ABSENT,
        "△": VoteValue.LEFT_EARLY, "退": VoteValue.LEFT_EARLY,
    },
    residual_removals=(
        (re.compile(r"[　]*議[　]*長[　]*の[　]*た[　]*め[　]*採[　]*決[　]*に[　]*加[　]*わ[　]*ら[　]*ず[　]*"), ""),
        (re.compile(r"市長提出"), ""),
        (re.compile(r"市　長　提　出"), ""),
        (re.compile(r"議員提出"), ""),
        (re.compile(r"委員会提出"), ""),
        (re.compile(r"[ぁ-ん]"), ""),
        (re.compile(r"議長$"), ""),
        (re.compile(r"^議長"), ""),
        (re.compile(r"議採決加"), ""),
        (re.compile(r"^提　出"), ""),
        (re.compile(r"^提出"), ""),
    ),
    name_headers=("議員氏名",),
    legend_markers=("○：賛成", "○:賛成", "〇：賛成", "〇:賛成"),
    speaker_marker="議長のため採決に加わらず",
)


def load_lexicon(path: str | Path, base: RollCallLexicon = DEFAULT_LEXICON) -> RollCallLexicon:
    """
    Rozszerza słownik nazwisk o wpisy z pliku JSON.

    Format pliku:
      {"familyNames": {"1": ["辻"], "2": ["飯島"], "3": ["久保田"]}}
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    extra = raw.get("familyNames", {})
    return dataclasses.replace(
        base,
        family_names_1=base.family_names_1 | frozenset(extra.get("1", [])),
        family_names_2=base.family_names_2 | frozenset(extra.get("2", [])),
        family_names_3=base.family_names_3 | frozenset(extra.get("3", [])),
    )
