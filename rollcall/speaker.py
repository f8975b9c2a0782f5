"""
rollcall/speaker.py — ustalenie przewodniczącego (議長), który nie głosuje.

Strategie (SPEAKER_STRATEGIES) są testowane w kolejności; każda zwraca
członka albo None ("brak trafienia"):
  1. vertical_marker      — znacznik "議長のため採決に加わらず" jako ciąg
                            jednoznakowych wierszy; nazwisko to ciąg znaków
                            pionowych tuż przed lub tuż po znaczniku
  2. spaced_vertical_marker — j.w., ale glify przeplecione spacjami U+3000
  3. inline_marker_position — znacznik w wierszu głosów; liczba symboli
                            przed nim wskazuje pozycję członka

Gdy żadna strategia nie trafi, a większość projektów ma dokładnie
(liczba_członków − 1) symboli, przewodniczący jest po prostu nieobecny
w danych głosowania — tożsamość pozostaje nieznana (implicit_exclusion),
a rekordy są oznaczane jako speaker-unresolved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from data_model.layout import Row
from data_model.records import Member
from pdf.text_cleaner import IDEOGRAPHIC_SPACE, remove_ascii_ws, vertical_char
from rollcall.bills import BillBlock
from rollcall.lexicon import RollCallLexicon
from rollcall.names import parse_single_name

log = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SpeakerContext:
    rows: list[Row]
    members: list[Member]
    blocks: list[BillBlock]
    lexicon: RollCallLexicon


@dataclass(frozen=True, slots=True)
class SpeakerResolution:
    member: Member | None
    method: str
    implicit_exclusion: bool = False   # przewodniczący pominięty w danych, tożsamość nieznana

    @property
    def unresolved(self) -> bool:
        return self.member is None


SpeakerStrategy = Callable[[SpeakerContext], "Member | None"]


# ---------------------------------------------------------------------------
# Pomocnicze
# ---------------------------------------------------------------------------

def _name_run(rows: list[Row], start: int, step: int, limit: int) -> list[str]:
    """Ciąg pionowych znaków (ideogram / U+3000) od start w kierunku step."""
    chars: list[str] = []
    i = start
    while 0 <= i < len(rows) and len(chars) < limit:
        ch = vertical_char(rows[i].text)
        if ch is None:
            break
        chars.append(ch)
        i += step
    if step < 0:
        chars.reverse()
    return chars


def _match_member(chars: list[str], members: list[Member], from_end: bool) -> Member | None:
    """
    Najkrótszy fragment ciągu przylegający do znacznika, który parsuje się
    do "nazwisko + U+3000 + imię" zgodnego z odkodowanym członkiem.

    Blok nazwisk jest ciągły (kolejne osoby bez wiersza przerwy), więc ciąg
    przy znaczniku zwykle obejmuje kilka nazwisk; parsowanie całego ciągu
    nie trafiłoby nigdy. Dopasowanie jest ograniczone do listy członków:
    sąsiedni fragment spoza listy daje None.
    """
    by_name = {(m.family_name, m.given_name): m for m in members}
    for size in range(3, len(chars) + 1):
        window = chars[-size:] if from_end else chars[:size]
        parsed = parse_single_name(window)
        if parsed is not None and parsed in by_name:
            return by_name[parsed]
    return None


def _adjacent_member(ctx: SpeakerContext, first: int, after_last: int) -> Member | None:
    """Nazwisko tuż nad znacznikiem, a jeśli nie pasuje — tuż pod nim."""
    window = ctx.lexicon.speaker_window
    above = _name_run(ctx.rows, first - 1, -1, window)
    below = _name_run(ctx.rows, after_last, 1, window)
    for chars, from_end in ((above, True), (below, False)):
        member = _match_member(chars, ctx.members, from_end)
        if member is not None:
            return member
    return None


# ---------------------------------------------------------------------------
# Strategie
# ---------------------------------------------------------------------------

def vertical_marker(ctx: SpeakerContext) -> Member | None:
    marker = ctx.lexicon.speaker_marker
    rows = ctx.rows
    for i in range(len(rows) - len(marker) + 1):
        if all(ch in rows[i + j].text for j, ch in enumerate(marker)):
            return _adjacent_member(ctx, i, i + len(marker))
    return None


def spaced_vertical_marker(ctx: SpeakerContext) -> Member | None:
    marker = ctx.lexicon.speaker_marker
    head, lead = marker[0], marker[1:7]
    last_glyph = marker[-1]
    rows = ctx.rows

    for i, row in enumerate(rows):
        if vertical_char(row.text) != head:
            continue
        following: list[str] = []
        for j in range(i + 1, min(len(rows), i + 1 + ctx.lexicon.speaker_window)):
            t = remove_ascii_ws(rows[j].text)
            if t in ("", IDEOGRAPHIC_SPACE):
                continue
            following.append(t)
            if len(following) >= len(lead):
                break
        if not "".join(following).startswith(lead):
            continue

        end = i + 1
        while end < len(rows) and remove_ascii_ws(rows[end].text) != last_glyph:
            end += 1
        return _adjacent_member(ctx, i, end + 1)
    return None


def inline_marker_position(ctx: SpeakerContext) -> Member | None:
    for block in ctx.blocks:
        pos = block.speaker_position
        if pos is not None and 0 <= pos < len(ctx.members):
            return ctx.members[pos]
    return None


SPEAKER_STRATEGIES: tuple[SpeakerStrategy, ...] = (
    vertical_marker,
    spaced_vertical_marker,
    inline_marker_position,
)


def resolve_speaker(
    ctx: SpeakerContext,
    strategies: tuple[SpeakerStrategy, ...] = SPEAKER_STRATEGIES,
) -> SpeakerResolution:
    for strategy in strategies:
        member = strategy(ctx)
        if member is not None:
            log.info("Przewodniczący: %s (%s)", member.full_name, strategy.__name__)
            return SpeakerResolution(member=member, method=strategy.__name__)

    expected = len(ctx.members) - 1
    voted = [b for b in ctx.blocks if b.symbols]
    matching = sum(1 for b in voted if len(b.symbols) == expected)
    if voted and matching > len(voted) / 2:
        log.info("Przewodniczący nieustalony; %d/%d projektów ma %d głosów", matching, len(voted), expected)
        return SpeakerResolution(member=None, method="vote_count", implicit_exclusion=True)

    log.info("Przewodniczący nieustalony; liczby głosów niespójne")
    return SpeakerResolution(member=None, method="none")
