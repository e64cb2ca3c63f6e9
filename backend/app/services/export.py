"""Excel export of a report tree (pandas frame + openpyxl workbook)."""

from __future__ import annotations

import logging
from io import BytesIO

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from app.config import EXPORT_COLUMNS, EXPORT_INDENT
from reporting.presentation import expand_all, flatten, quarter_labels
from reporting.rows import QUARTERS, FinancialRow

_log = logging.getLogger(__name__)

_NUMERIC_COLUMNS = (*QUARTERS, "cumulative_balance")


def reporting_frame(rows: list[FinancialRow]) -> pd.DataFrame:
    """One record per row of the fully expanded tree, in display order."""
    records = [
        {
            "depth": item.depth,
            "id": item.row.id,
            "title": item.row.title,
            "is_category": item.row.is_category,
            **{q: getattr(item.row, q) for q in QUARTERS},
            "cumulative_balance": item.row.cumulative_balance,
            "comments": item.row.comments,
        }
        for item in flatten(rows, expand_all(rows))
    ]
    columns = ["depth", "id", "title", "is_category", *QUARTERS, "cumulative_balance", "comments"]
    df = pd.DataFrame.from_records(records, columns=columns)
    df[list(_NUMERIC_COLUMNS)] = df[list(_NUMERIC_COLUMNS)].astype(float)
    return df


def _sanitize_sheet_name(name: str) -> str:
    """Excel sheet names: max 31 chars, no special chars."""
    for ch in "[]:*?/\\":
        name = name.replace(ch, "_")
    return name[:31] or "Sheet"


def write_report_workbook(rows: list[FinancialRow], fiscal_year: str, title: str = "Execution Report") -> BytesIO:
    df = reporting_frame(rows)
    headers = dict(zip(QUARTERS, quarter_labels(fiscal_year)))

    wb = Workbook()
    ws = wb.active
    ws.title = _sanitize_sheet_name(title)

    for ci, (header, col) in enumerate(EXPORT_COLUMNS, start=1):
        ws.cell(row=1, column=ci, value=headers.get(col, header)).font = Font(bold=True)

    for ri, record in enumerate(df.itertuples(index=False), start=2):
        bold = bool(record.is_category)
        for ci, (_, col) in enumerate(EXPORT_COLUMNS, start=1):
            val = getattr(record, col)
            if col == "title":
                val = EXPORT_INDENT * int(record.depth) + str(val)
            elif col in _NUMERIC_COLUMNS:
                if pd.isna(val):
                    continue
                val = float(val)
            elif val is None or (isinstance(val, float) and pd.isna(val)):
                continue
            cell = ws.cell(row=ri, column=ci, value=val)
            if col in _NUMERIC_COLUMNS:
                cell.number_format = "#,##0"
            if bold:
                cell.font = Font(bold=True)

    ws.column_dimensions["A"].width = 80
    for ci in range(2, len(EXPORT_COLUMNS) + 1):
        ws.column_dimensions[get_column_letter(ci)].width = 20
    ws.freeze_panes = "B2"

    buf = BytesIO()
    wb.save(buf)
    buf.seek(0)
    _log.info("Exported %d report rows", len(df))
    return buf
