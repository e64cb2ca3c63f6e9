"""Rollup of quarterly values into category rows.

Post-order: a category only aggregates children whose own totals are
already final, so nesting depth does not matter.  Category quarters are
always populated (absent children count as 0); leaf quarters are never
touched.
"""

from __future__ import annotations

from reporting.rows import QUARTERS, FinancialRow


def _balance(values: tuple[float | None, ...]) -> float:
    return float(sum(v for v in values if v is not None))


def _total_row(row: FinancialRow) -> FinancialRow:
    children = [_total_row(child) for child in row.children] if row.children is not None else None

    if not row.is_category:
        update: dict = {"cumulative_balance": _balance(row.quarter_values())}
        if children is not None:
            update["children"] = children
        return row.model_copy(update=update)

    sums = {q: 0.0 for q in QUARTERS}
    for child in children or ():
        for q in QUARTERS:
            value = getattr(child, q)
            if value is not None:
                sums[q] += value

    return row.model_copy(update={
        **sums,
        "cumulative_balance": _balance(tuple(sums.values())),
        "children": children,
    })


def calculate_hierarchical_totals(rows: list[FinancialRow]) -> list[FinancialRow]:
    """Return a new tree with category subtotals and every row's cumulative balance.

    The input is never mutated, and applying the function to its own output
    gives the same tree back.
    """
    return [_total_row(row) for row in rows]
