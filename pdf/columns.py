"""
pdf/columns.py — klasyfikacja fragmentów wiersza do ról kolumn.

Każda rodzina dokumentów dostarcza tabelę jako DANE:
  - ColumnRangeTable: lista przedziałów [min_x, max_x) → rola (tryb współrzędnych)
  - LineRuleTable:    lista reguł (regex kształtu linii) → rola (strumień linii)

Klasyfikacja zależy wyłącznie od pozycji (lub kształtu linii) i tabeli;
interpretacja treści należy do parserów piętro wyżej. Fragmenty bez roli
trafiają do UNCLASSIFIED — są pomijane, ale logowane jako informacja
o pokryciu.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Protocol

from data_model.layout import ColumnRole, Row, TextFragment

log = logging.getLogger(__name__)


class ColumnTable(Protocol):
    def role_of(self, fragment: TextFragment) -> ColumnRole:
        ...


@dataclass(frozen=True, slots=True)
class ColumnRange:
    min_x: int
    max_x: int       # wyłącznie
    role: ColumnRole


@dataclass(frozen=True, slots=True)
class ColumnRangeTable:
    ranges: tuple[ColumnRange, ...]

    def role_of(self, fragment: TextFragment) -> ColumnRole:
        if fragment.x is None:
            return ColumnRole.UNCLASSIFIED
        for r in self.ranges:
            if r.min_x <= fragment.x < r.max_x:
                return r.role
        return ColumnRole.UNCLASSIFIED


@dataclass(frozen=True, slots=True)
class LineRule:
    pattern: re.Pattern[str]
    role: ColumnRole


@dataclass(frozen=True, slots=True)
class LineRuleTable:
    """Reguły testowane w kolejności; pierwsza pasująca wygrywa."""
    rules: tuple[LineRule, ...]
    default: ColumnRole = ColumnRole.UNCLASSIFIED

    def role_of(self, fragment: TextFragment) -> ColumnRole:
        for rule in self.rules:
            if rule.pattern.fullmatch(fragment.content):
                return rule.role
        return self.default


@dataclass(slots=True)
class ClassifiedRow:
    """Wiersz z fragmentami pogrupowanymi po rolach (kolejność x zachowana)."""
    row: Row
    cells: dict[ColumnRole, list[str]] = field(default_factory=dict)

    def text(self, role: ColumnRole) -> str:
        return "".join(self.cells.get(role, []))

    @property
    def roles(self) -> set[ColumnRole]:
        return set(self.cells)


def classify_row(row: Row, table: ColumnTable) -> ClassifiedRow:
    out = ClassifiedRow(row=row)
    for frag in row.fragments:
        role = table.role_of(frag)
        if role is ColumnRole.UNCLASSIFIED:
            log.debug("Fragment poza kolumnami (x=%s): %r", frag.x, frag.content)
            continue
        out.cells.setdefault(role, []).append(frag.content)
    return out


def classify_rows(rows: list[Row], table: ColumnTable) -> list[ClassifiedRow]:
    classified = [classify_row(r, table) for r in rows]
    total = sum(len(r.fragments) for r in rows)
    kept = sum(len(v) for c in classified for v in c.cells.values())
    if kept < total:
        log.info("Pokrycie kolumn: %d/%d fragmentów sklasyfikowanych", kept, total)
    return classified
