"""Hierarchical line-item model for the quarterly execution report.

Models are pydantic v2 and serialise with the camelCase names used by the
browser client and by stored drafts (``isCategory``, ``cumulativeBalance``,
``tableData`` ...).  Either spelling is accepted on input.

Rows are frozen: every change builds a new tree.
"""

from __future__ import annotations

from collections import Counter
from typing import Callable, Iterable, Iterator

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

QUARTERS: tuple[str, ...] = ("q1", "q2", "q3", "q4")


class FinancialRow(BaseModel):
    """One node of the report tree.

    ``q1..q4`` are ``None`` when nothing was entered; that is not the same
    as zero.  ``cumulative_balance`` is derived and never entered.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    title: str
    is_category: bool = False
    is_editable: bool = True
    q1: float | None = None
    q2: float | None = None
    q3: float | None = None
    q4: float | None = None
    cumulative_balance: float | None = None
    comments: str | None = None
    children: list[FinancialRow] | None = None

    @property
    def accepts_input(self) -> bool:
        """Leaf values can be written only on editable, non-category rows."""
        return self.is_editable and not self.is_category

    def quarter_values(self) -> tuple[float | None, ...]:
        return tuple(getattr(self, q) for q in QUARTERS)


class ReportMetadata(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    health_center: str | None = None
    district: str | None = None
    project: str | None = None
    reporting_period: str | None = None
    fiscal_year: str | None = None


class FinancialReportData(BaseModel):
    """Payload handed to the permanent-save collaborator."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    table_data: list[FinancialRow] = Field(default_factory=list)
    metadata: ReportMetadata = Field(default_factory=ReportMetadata)


class DraftRecord(BaseModel):
    """Serialized snapshot of in-progress edits; ``timestamp`` is epoch millis."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    form_data: list[FinancialRow]
    timestamp: int


# ── Tree helpers ────────────────────────────────────────────────────────────

def iter_rows(rows: Iterable[FinancialRow]) -> Iterator[FinancialRow]:
    """Pre-order walk over every row, ignoring expansion state."""
    for row in rows:
        yield row
        if row.children:
            yield from iter_rows(row.children)


def find_row(rows: Iterable[FinancialRow], row_id: str) -> FinancialRow | None:
    for row in iter_rows(rows):
        if row.id == row_id:
            return row
    return None


def duplicate_ids(rows: Iterable[FinancialRow]) -> list[str]:
    counts = Counter(row.id for row in iter_rows(rows))
    return sorted(rid for rid, n in counts.items() if n > 1)


def ensure_unique_ids(rows: Iterable[FinancialRow]) -> None:
    """Raise ``ValueError`` if any id appears twice anywhere in the tree."""
    dupes = duplicate_ids(rows)
    if dupes:
        raise ValueError(f"Row ids must be unique across the report tree; duplicated: {dupes}")


def replace_row(
    rows: list[FinancialRow],
    row_id: str,
    updater: Callable[[FinancialRow], FinancialRow],
) -> list[FinancialRow]:
    """Return a new tree with ``updater`` applied to the row with ``row_id``.

    Subtrees that do not contain the row are reused as-is.
    """
    out: list[FinancialRow] = []
    for row in rows:
        if row.id == row_id:
            out.append(updater(row))
        elif row.children:
            new_children = replace_row(row.children, row_id, updater)
            if any(a is not b for a, b in zip(new_children, row.children)):
                out.append(row.model_copy(update={"children": new_children}))
            else:
                out.append(row)
        else:
            out.append(row)
    return out
