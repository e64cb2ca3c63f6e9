"""Empty report templates for a fiscal year.

Ids are built from fixed category codes and line positions, never from the
fiscal year, so the same year always yields the same tree and drafts saved
against one template line up with a freshly built one.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from reporting.config import (
    ACTIVITY_CATEGORIES,
    HEALTH_CENTER_ACTIVITIES,
    HOSPITAL_ACTIVITIES,
    Activity,
)
from reporting.rows import FinancialRow, ensure_unique_ids


def _brought_forward_label(fiscal_year: str) -> str:
    year = str(fiscal_year).strip()
    if year.isdigit():
        return f"Balance brought forward from FY {int(year) - 1}"
    return f"Balance brought forward (before FY {year})"


def _receipts(fiscal_year: str) -> FinancialRow:
    return FinancialRow(
        id="receipts",
        title="A. Receipts",
        is_category=True,
        children=[
            FinancialRow(id="receipts-other-incomes", title="Other Incomes"),
            FinancialRow(id="receipts-transfers", title="Transfers from SPIU/RBC"),
            FinancialRow(
                id="receipts-brought-forward",
                title=_brought_forward_label(fiscal_year),
                is_editable=False,
            ),
        ],
    )


def _activity_title(item: Activity) -> str:
    return f"{item.activity} ({item.type_of_activity})"


def _expenditures(catalog: Mapping[str, Sequence[Activity]]) -> FinancialRow:
    known = {label for _, label in ACTIVITY_CATEGORIES}
    unknown = sorted(set(catalog) - known)
    if unknown:
        raise ValueError(f"Unknown activity categories in catalog: {unknown}")

    categories: list[FinancialRow] = []
    for code, label in ACTIVITY_CATEGORIES:
        activities = catalog.get(label)
        if not activities:
            raise ValueError(f"Activity category '{label}' has no activities")
        lines: list[FinancialRow] = []
        for pos, item in enumerate(activities, start=1):
            if not item.activity or not item.type_of_activity:
                raise ValueError(f"Activity #{pos} in '{label}' is missing its name or type")
            lines.append(FinancialRow(id=f"expenditures-{code}-{pos}", title=_activity_title(item)))
        categories.append(FinancialRow(
            id=f"expenditures-{code}",
            title=label,
            is_category=True,
            children=lines,
        ))

    return FinancialRow(
        id="expenditures",
        title="B. Expenditures",
        is_category=True,
        children=categories,
    )


def build_template(
    fiscal_year: str,
    catalog: Mapping[str, Sequence[Activity]],
) -> list[FinancialRow]:
    """Receipts block plus one expenditure category per catalog category."""
    rows = [_receipts(fiscal_year), _expenditures(catalog)]
    ensure_unique_ids(rows)
    return rows


def generate_empty_template(fiscal_year: str) -> list[FinancialRow]:
    """The facility-independent starting tree: all quarters absent, no totals."""
    return build_template(fiscal_year, HEALTH_CENTER_ACTIVITIES)


def generate_facility_template(fiscal_year: str, *, hospital: bool) -> list[FinancialRow]:
    """Same shape as the empty template, filled from the facility's catalog."""
    catalog = HOSPITAL_ACTIVITIES if hospital else HEALTH_CENTER_ACTIVITIES
    return build_template(fiscal_year, catalog)
