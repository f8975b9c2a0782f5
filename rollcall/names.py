"""
rollcall/names.py — dekoder pionowych bloków nazwisk.

Blok nazwisk w arkuszu głosowań jest drukowany pionowo: ekstrakcja daje
jeden ideogram (albo spację ideograficzną U+3000) na wiersz. Sklejona
sekwencja ma kształt:

  nazwisko1 　 imię1 nazwisko2 　 imię2 … nazwiskoN 　 imięN

czyli U+3000 oddziela nazwisko od imienia, a granica imię/nazwisko
kolejnej osoby NIE jest oznaczona. Rozstrzyga ją słownik nazwisk.

Kroki:
  1. collect_name_chars()   — znaki od nagłówka bloku do następnego nagłówka
  2. clean_name_sequence()  — usunięcie fraz resztkowych (lista z leksykonu)
  3. repair_separators()    — wstawienie U+3000 po 3-znakowych nazwiskach,
                              które zgubiły separator w wąskiej kolumnie
  4. decode_members()       — podział segmentów strategiami długości nazwiska

Kluczowe funkcje publiczne:
  extract_members(rows, lexicon, roster, doc_id) -> list[Member]
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Iterable

from data_model.errors import NameExtractionError
from data_model.layout import Row
from data_model.records import NAME_SEPARATOR, Member
from pdf.text_cleaner import is_cjk, vertical_char
from rollcall.lexicon import RollCallLexicon

log = logging.getLogger(__name__)

# Strategia długości nazwiska: (segment, leksykon) → długość lub None (brak trafienia)
FamilyLengthStrategy = Callable[[str, RollCallLexicon], "int | None"]

_GIVEN_MIN, _GIVEN_MAX = 1, 4
_FALLBACK_LENGTHS = (2, 1, 3)


# ---------------------------------------------------------------------------
# 1–3. Sekwencja znaków
# ---------------------------------------------------------------------------

def find_name_block_start(rows: list[Row], lexicon: RollCallLexicon) -> int:
    """Indeks wiersza z nagłówkiem bloku nazwisk (lub legendą); -1 gdy brak."""
    for markers in (lexicon.name_headers, lexicon.legend_markers):
        for i, row in enumerate(rows):
            if any(m in row.text for m in markers):
                return i
    return -1


def collect_name_chars(rows: list[Row], lexicon: RollCallLexicon) -> str:
    start = find_name_block_start(rows, lexicon)
    if start == -1:
        return ""

    first = max(0, start - lexicon.name_lookback)
    last = min(len(rows), start + lexicon.name_scan_cap)

    chars: list[str] = []
    seen_cjk = False
    for i in range(first, last):
        text = rows[i].text
        # Blok kończy się na kolejnym nagłówku (druga strona / druga tabela)
        if i > start and any(h in text for h in lexicon.name_headers):
            break
        ch = vertical_char(text, allow_hiragana=True)
        if ch is None:
            continue
        if is_cjk(ch):
            seen_cjk = True
        if seen_cjk:
            chars.append(ch)
    return "".join(chars)


def clean_name_sequence(chars: str, lexicon: RollCallLexicon) -> str:
    for pattern, repl in lexicon.residual_removals:
        chars = pattern.sub(repl, chars)
    return chars


def repair_separators(chars: str, lexicon: RollCallLexicon) -> str:
    """"久保田裕一" → "久保田　裕一" dla każdego znanego 3-znakowego nazwiska."""
    for family in sorted(lexicon.family_names_3):
        chars = re.sub(re.escape(family) + f"(?!{NAME_SEPARATOR})", family + NAME_SEPARATOR, chars)
    return chars


def split_segments(chars: str) -> list[str]:
    """Podział po U+3000; kolejne separatory zwijane, puste segmenty pomijane."""
    return [s for s in chars.split(NAME_SEPARATOR) if s]


# ---------------------------------------------------------------------------
# 4. Strategie długości nazwiska w segmencie "imię_poprzednie + nazwisko_następne"
# ---------------------------------------------------------------------------

def _known_suffix(length: int) -> FamilyLengthStrategy:
    def _match(segment: str, lexicon: RollCallLexicon) -> int | None:
        if len(segment) <= length:
            return None
        # przed nazwiskiem musi zostać co najmniej jeden znak imienia
        if segment[-length:] in lexicon.family_names(length):
            return length
        return None
    _match.__name__ = f"known_{length}char_family"
    return _match


def _default_two(segment: str, lexicon: RollCallLexicon) -> int | None:
    return 2


FAMILY_LENGTH_STRATEGIES: tuple[FamilyLengthStrategy, ...] = (
    _known_suffix(3),
    _known_suffix(1),
    _known_suffix(2),
    _default_two,
)


def family_length(
    segment: str,
    lexicon: RollCallLexicon,
    strategies: Iterable[FamilyLengthStrategy] = FAMILY_LENGTH_STRATEGIES,
) -> int:
    """
    Długość nazwiska na końcu segmentu wewnętrznego.

    Strategie testowane w kolejności; jeśli wynik daje imię spoza 1–4
    znaków, szukamy pierwszej poprawnej długości z (2, 1, 3).
    """
    length = 2
    for strategy in strategies:
        found = strategy(segment, lexicon)
        if found is not None:
            length = found
            break

    if not _GIVEN_MIN <= len(segment) - length <= _GIVEN_MAX:
        for alt in _FALLBACK_LENGTHS:
            if _GIVEN_MIN <= len(segment) - alt <= _GIVEN_MAX:
                return alt
    return length


def decode_members(chars: str, lexicon: RollCallLexicon, doc_id: str = "") -> list[Member]:
    """
    Dzieli oczyszczoną sekwencję na członków w kolejności dokumentu.

    Raises:
        NameExtractionError: mniej niż dwa segmenty.
    """
    segments = split_segments(repair_separators(chars, lexicon))
    if len(segments) < 2:
        raise NameExtractionError(
            f"za mało segmentów nazwisk ({len(segments)})", doc_id=doc_id
        )

    names: list[tuple[str, str]] = []
    prev_family = segments[0]
    for i, segment in enumerate(segments[1:], start=1):
        if i == len(segments) - 1:
            names.append((prev_family, segment))
            break
        cut = len(segment) - family_length(segment, lexicon)
        given, family = segment[:cut], segment[cut:]
        if given:
            names.append((prev_family, given))
        prev_family = family

    return _dedupe(names)


def _dedupe(names: list[tuple[str, str]]) -> list[Member]:
    """Nazwiska mogą wystąpić dwa razy (PDF wielostronicowy) — zostaje pierwsze."""
    seen: set[tuple[str, str]] = set()
    members: list[Member] = []
    for family, given in names:
        if (family, given) in seen:
            continue
        seen.add((family, given))
        members.append(Member(family_name=family, given_name=given, position=len(members)))
    return members


def parse_single_name(chars: Iterable[str]) -> tuple[str, str] | None:
    """
    Jedno nazwisko z pionowego ciągu znaków, np. ['飯','島','　','英','規'].

    Zwraca (nazwisko, imię) lub None, gdy brakuje którejkolwiek części.
    """
    family: list[str] = []
    given: list[str] = []
    separated = False
    for ch in chars:
        if not ch:
            continue
        if ch == NAME_SEPARATOR:
            if family:
                separated = True
        elif separated:
            given.append(ch)
        else:
            family.append(ch)
    if family and given:
        return "".join(family), "".join(given)
    return None


# ---------------------------------------------------------------------------
# Weryfikacja krzyżowa ze spisem członków
# ---------------------------------------------------------------------------

def normalise_roster_name(name: str) -> str | None:
    """"飯島 英規" / "飯島　英規" → "飯島　英規"; None gdy brak podziału."""
    parts = name.split()
    if len(parts) < 2:
        return None
    return parts[0] + NAME_SEPARATOR + "".join(parts[1:])


def reconcile_with_roster(members: list[Member], roster: frozenset[str]) -> list[Member]:
    """
    Poprawia granicę imię/nazwisko między sąsiadami, gdy przesunięcie jej
    daje dwie osoby ze spisu, a obecny podział — nie.
    """
    fixed = list(members)
    for i in range(len(fixed) - 1):
        a, b = fixed[i], fixed[i + 1]
        if a.full_name in roster and b.full_name in roster:
            continue
        joined = a.given_name + b.family_name
        for cut in range(1, len(joined)):
            new_a = Member(a.family_name, joined[:cut], a.position)
            new_b = Member(joined[cut:], b.given_name, b.position)
            if new_a.full_name in roster and new_b.full_name in roster:
                log.info("Korekta podziału wg spisu: %s / %s", new_a.full_name, new_b.full_name)
                fixed[i], fixed[i + 1] = new_a, new_b
                break
    return fixed


def extract_members(
    rows: list[Row],
    lexicon: RollCallLexicon,
    roster: frozenset[str] | None = None,
    doc_id: str = "",
) -> list[Member]:
    """
    Pełny dekoder: wiersze dokumentu → uporządkowana lista członków.

    Raises:
        NameExtractionError: brak bloku nazwisk lub mniej niż dwa segmenty.
    """
    chars = clean_name_sequence(collect_name_chars(rows, lexicon), lexicon)
    if not chars:
        raise NameExtractionError("nie znaleziono pionowego bloku nazwisk", doc_id=doc_id)

    members = decode_members(chars, lexicon, doc_id=doc_id)

    if roster:
        members = reconcile_with_roster(members, roster)
        unknown = [m.full_name for m in members if m.full_name not in roster]
        if unknown:
            log.warning("[%s] %d nazwisk spoza spisu: %s", doc_id, len(unknown), ", ".join(unknown))
    return members
