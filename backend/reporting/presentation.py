"""Display ordering of the report tree."""

from __future__ import annotations

from collections.abc import Collection, Iterator
from typing import NamedTuple

from reporting.rows import FinancialRow, iter_rows


class DisplayRow(NamedTuple):
    row: FinancialRow
    depth: int
    has_children: bool
    expanded: bool


class FlattenedRows:
    """Pre-order view of the tree that only descends into expanded rows.

    Lazy and restartable: each iteration walks the tree afresh.
    """

    def __init__(self, rows: list[FinancialRow], expanded_ids: Collection[str]):
        self._rows = rows
        self._expanded = frozenset(expanded_ids)

    def __iter__(self) -> Iterator[DisplayRow]:
        return self._walk(self._rows, 0)

    def _walk(self, rows: list[FinancialRow], depth: int) -> Iterator[DisplayRow]:
        for row in rows:
            has_children = bool(row.children)
            expanded = row.id in self._expanded
            yield DisplayRow(row, depth, has_children, expanded)
            if has_children and expanded:
                yield from self._walk(row.children, depth + 1)


def flatten(rows: list[FinancialRow], expanded_ids: Collection[str]) -> FlattenedRows:
    return FlattenedRows(rows, expanded_ids)


def toggle_expanded(expanded_ids: Collection[str], row_id: str) -> frozenset[str]:
    current = frozenset(expanded_ids)
    return current - {row_id} if row_id in current else current | {row_id}


def expand_all(rows: list[FinancialRow]) -> frozenset[str]:
    return frozenset(row.id for row in iter_rows(rows) if row.children)


def quarter_labels(fiscal_year: str) -> list[str]:
    return [
        f"Q1 (Jan-Mar {fiscal_year})",
        f"Q2 (Apr-Jun {fiscal_year})",
        f"Q3 (Jul-Sep {fiscal_year})",
        f"Q4 (Oct-Dec {fiscal_year})",
    ]


def format_amount(value: float | None) -> str:
    """Thousands grouping, up to three decimals, blank when not entered."""
    if value is None:
        return ""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return "0" if text in ("-0", "") else text
