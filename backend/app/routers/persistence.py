"""Draft, permanent save, navigation guard, notification, export and saved-report routes."""

from __future__ import annotations

from datetime import date

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

import app.state as state
from app.schemas import (
    DraftResponse,
    LeaveRequest,
    LeaveResponse,
    NotificationOut,
    NotificationsResponse,
    PersistResponse,
)
from app.services.export import write_report_workbook
from app.services.report_store import load_report
from app.session import EditingSession, _get_session
from reporting.config import LEAVE_CONFIRMATION_MESSAGE
from reporting.drafts import derive_key
from reporting.errors import DraftLoadError
from reporting.rows import FinancialReportData

router = APIRouter()


def _last_error(session: EditingSession, fallback: str) -> str:
    latest = session.notifications.last("error")
    return latest.title if latest is not None else fallback


# ── Drafts ──────────────────────────────────────────────────────────────────

@router.post("/api/sessions/{session_id}/draft", response_model=PersistResponse)
async def save_draft(session_id: str) -> PersistResponse:
    session = _get_session(session_id)
    coord = session.coordinator
    if coord.read_only:
        raise HTTPException(status_code=409, detail="Read-only reports have no drafts")
    if not coord.save_draft():
        raise HTTPException(status_code=507, detail=_last_error(session, "Failed to save draft"))
    return PersistResponse(session_id=session_id, state=coord.state.value, draft_key=coord.draft_key)


@router.get("/api/sessions/{session_id}/draft", response_model=DraftResponse)
async def get_draft(session_id: str) -> DraftResponse:
    coord = _get_session(session_id).coordinator
    key = coord.draft_key
    try:
        record = coord.store.load(key)
    except DraftLoadError as exc:
        raise HTTPException(status_code=500, detail=str(exc))
    if record is None:
        raise HTTPException(status_code=404, detail="No draft stored for this facility and period")
    return DraftResponse(
        session_id=session_id,
        draft_key=key,
        timestamp=record.timestamp,
        form_data=record.form_data,
    )


# ── Permanent save ──────────────────────────────────────────────────────────

@router.post("/api/sessions/{session_id}/save", response_model=PersistResponse)
async def save_report(session_id: str) -> PersistResponse:
    session = _get_session(session_id)
    coord = session.coordinator
    if coord.read_only:
        raise HTTPException(status_code=409, detail="Report is read-only")
    if not coord.save():
        raise HTTPException(status_code=502, detail=_last_error(session, "Save failed"))
    return PersistResponse(session_id=session_id, state=coord.state.value, draft_key=coord.draft_key)


# ── Navigation guard ────────────────────────────────────────────────────────

@router.post("/api/sessions/{session_id}/leave", response_model=LeaveResponse)
async def request_leave(session_id: str, req: LeaveRequest) -> LeaveResponse:
    coord = _get_session(session_id).coordinator
    asked: list[str] = []

    def _confirm(message: str) -> bool:
        asked.append(message)
        return req.confirmed

    allowed = coord.request_leave(_confirm, target=req.target)
    return LeaveResponse(
        session_id=session_id,
        allowed=allowed,
        requires_confirmation=bool(asked),
        message=asked[0] if asked else None,
        state=coord.state.value,
    )


@router.get("/api/sessions/{session_id}/leave", response_model=LeaveResponse)
async def leave_status(session_id: str) -> LeaveResponse:
    coord = _get_session(session_id).coordinator
    guarded = coord.requires_leave_confirmation
    return LeaveResponse(
        session_id=session_id,
        allowed=not guarded,
        requires_confirmation=guarded,
        message=LEAVE_CONFIRMATION_MESSAGE if guarded else None,
        state=coord.state.value,
    )


# ── Notifications ───────────────────────────────────────────────────────────

@router.get("/api/sessions/{session_id}/notifications", response_model=NotificationsResponse)
async def drain_notifications(session_id: str) -> NotificationsResponse:
    session = _get_session(session_id)
    return NotificationsResponse(
        session_id=session_id,
        notifications=[
            NotificationOut(level=n.level, title=n.title, description=n.description)
            for n in session.notifications.drain()
        ],
    )


# ── Export & saved reports ──────────────────────────────────────────────────

@router.get("/api/sessions/{session_id}/export")
async def export_report(session_id: str):
    """Export the fully expanded report as an Excel (.xlsx) file."""
    coord = _get_session(session_id).coordinator
    buf = write_report_workbook(coord.rows, coord.fiscal_year)
    today = date.today().isoformat()
    filename = f"execution_report_{session_id[:8]}_{today}.xlsx"
    return StreamingResponse(
        buf,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/api/reports", response_model=FinancialReportData)
async def get_saved_report(
    health_center: str | None = None,
    reporting_period: str | None = None,
) -> FinancialReportData:
    report = load_report(state.REPORTS_DIR, derive_key(health_center, reporting_period))
    if report is None:
        raise HTTPException(status_code=404, detail="No saved report for this facility and period")
    return report
