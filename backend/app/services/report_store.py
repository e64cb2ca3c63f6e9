"""File-backed permanent storage for submitted reports.

This is the save collaborator handed to each coordinator: one JSON file
per facility/period key, overwritten on every permanent save.
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import HTTPException
from pydantic import ValidationError

from reporting.drafts import derive_key
from reporting.errors import SaveFailed
from reporting.rows import FinancialReportData

_log = logging.getLogger(__name__)


def _report_path(directory: Path, key: str) -> Path:
    return Path(directory) / f"{quote(key, safe='')}.json"


def save_report(directory: Path, report: FinancialReportData) -> Path:
    meta = report.metadata
    key = derive_key(meta.health_center, meta.reporting_period)
    path = _report_path(directory, key)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(report.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    except OSError as exc:
        raise SaveFailed(f"Could not write report {key}: {exc}") from exc
    _log.info("Saved report %s (%d top-level rows)", key, len(report.table_data))
    return path


def load_report(directory: Path, key: str) -> FinancialReportData | None:
    path = _report_path(directory, key)
    if not path.exists():
        return None
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        _log.warning("Saved report %s is unreadable: %s", key, exc)
        raise HTTPException(status_code=500, detail=f"Could not read saved report for {key}")
    try:
        return FinancialReportData.model_validate_json(raw)
    except ValidationError as exc:
        raise HTTPException(status_code=500, detail=f"Corrupted saved report for {key}: {exc.error_count()} error(s)")
