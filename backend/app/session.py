"""Editing-session registry: create, look up, summarise and close sessions."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone

from fastapi import HTTPException

import app.state as state
from app.schemas import MetadataModel, SelectionModel, SessionCreateRequest, SessionSummary
from app.services.report_store import load_report, save_report
from reporting.coordinator import EditCoordinator, Selection
from reporting.drafts import DraftStore, FileDraftMedium, derive_key
from reporting.notifications import NotificationLog
from reporting.presentation import quarter_labels
from reporting.rows import FinancialRow, ReportMetadata
from reporting.scheduling import AsyncioScheduler
from reporting.template import generate_empty_template, generate_facility_template


@dataclass
class EditingSession:
    session_id: str
    created_at: str
    coordinator: EditCoordinator
    notifications: NotificationLog
    expanded_row_ids: frozenset[str] = field(default_factory=frozenset)
    draft_restored: bool = False


# ── Storage ─────────────────────────────────────────────────────────────────

def _draft_store() -> DraftStore:
    return DraftStore(FileDraftMedium(state.DRAFTS_DIR))


# ── Session lifecycle ───────────────────────────────────────────────────────

def _initial_rows(req: SessionCreateRequest) -> list[FinancialRow]:
    saved = load_report(state.REPORTS_DIR, derive_key(req.health_center, req.reporting_period))
    if saved is not None:
        return saved.table_data
    if req.facility_type is None:
        return generate_empty_template(req.fiscal_year)
    return generate_facility_template(req.fiscal_year, hospital=req.facility_type == "hospital")


def _create_session(req: SessionCreateRequest) -> EditingSession:
    """Build and open a coordinator; must run on the event loop (autosave timer)."""
    notifications = NotificationLog()
    coordinator = EditCoordinator(
        _initial_rows(req),
        fiscal_year=req.fiscal_year,
        store=_draft_store(),
        save_report=lambda report: save_report(state.REPORTS_DIR, report),
        scheduler=AsyncioScheduler(),
        notify=notifications,
        selection=Selection(req.health_center, req.reporting_period, req.is_hospital_mode),
        report_metadata=ReportMetadata(
            health_center=req.health_center,
            district=req.district,
            project=req.project,
            reporting_period=req.reporting_period,
            fiscal_year=req.fiscal_year,
        ),
        read_only=req.read_only,
        current_route=req.route,
    )
    session = EditingSession(
        session_id=str(uuid.uuid4()),
        created_at=datetime.now(timezone.utc).isoformat(),
        coordinator=coordinator,
        notifications=notifications,
        expanded_row_ids=frozenset(req.expanded_row_ids),
    )
    session.draft_restored = coordinator.open()
    state._SESSIONS[session.session_id] = session
    return session


def _get_session(session_id: str) -> EditingSession:
    session = state._SESSIONS.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found. Create it first via POST /api/sessions")
    return session


def _close_session(session_id: str) -> None:
    session = state._SESSIONS.pop(session_id, None)
    if session is not None:
        session.coordinator.close()


def _close_all_sessions() -> None:
    for session_id in list(state._SESSIONS):
        _close_session(session_id)


def _summary(session: EditingSession) -> SessionSummary:
    coord = session.coordinator
    sel = coord.selection
    return SessionSummary(
        session_id=session.session_id,
        created_at=session.created_at,
        state=coord.state.value,
        is_dirty=coord.is_dirty,
        read_only=coord.read_only,
        form_visible=coord.form_visible,
        draft_key=coord.draft_key,
        draft_restored=session.draft_restored,
        autosave_pending=coord.autosave_pending,
        requires_leave_confirmation=coord.requires_leave_confirmation,
        fiscal_year=coord.fiscal_year,
        quarter_labels=quarter_labels(coord.fiscal_year),
        selection=SelectionModel(
            health_center=sel.health_center,
            reporting_period=sel.reporting_period,
            is_hospital_mode=sel.is_hospital_mode,
        ),
        report_metadata=MetadataModel(**coord.report_metadata.model_dump()),
    )
