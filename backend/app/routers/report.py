"""Session, row display, edit, expansion and selection routes."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from app.schemas import (
    DisplayRowOut,
    EditRequest,
    EditResponse,
    ExpansionResponse,
    RowsResponse,
    SelectionModel,
    SessionCreateRequest,
    SessionSummary,
)
from app.session import _close_session, _create_session, _get_session, _summary
from reporting.coordinator import Selection
from reporting.presentation import flatten, format_amount, quarter_labels, toggle_expanded
from reporting.rows import QUARTERS, find_row

router = APIRouter()


# ── Sessions ────────────────────────────────────────────────────────────────

@router.post("/api/sessions", response_model=SessionSummary)
async def create_session(req: SessionCreateRequest) -> SessionSummary:
    try:
        session = _create_session(req)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return _summary(session)


@router.get("/api/sessions/{session_id}", response_model=SessionSummary)
async def get_session(session_id: str) -> SessionSummary:
    return _summary(_get_session(session_id))


@router.delete("/api/sessions/{session_id}")
async def close_session(session_id: str) -> dict[str, str]:
    _get_session(session_id)
    _close_session(session_id)
    return {"status": "ok"}


# ── Rows ────────────────────────────────────────────────────────────────────

@router.get("/api/sessions/{session_id}/rows", response_model=RowsResponse)
async def get_rows(session_id: str) -> RowsResponse:
    session = _get_session(session_id)
    coord = session.coordinator
    rows = [
        DisplayRowOut(
            id=item.row.id,
            title=item.row.title,
            depth=item.depth,
            is_category=item.row.is_category,
            is_editable=item.row.is_editable,
            has_children=item.has_children,
            expanded=item.expanded,
            q1=item.row.q1,
            q2=item.row.q2,
            q3=item.row.q3,
            q4=item.row.q4,
            cumulative_balance=item.row.cumulative_balance,
            comments=item.row.comments,
            formatted={
                field: format_amount(getattr(item.row, field))
                for field in (*QUARTERS, "cumulative_balance")
            },
        )
        for item in flatten(coord.rows, session.expanded_row_ids)
    ]
    return RowsResponse(
        session_id=session_id,
        state=coord.state.value,
        quarter_labels=quarter_labels(coord.fiscal_year),
        rows=rows,
    )


@router.post("/api/sessions/{session_id}/rows/{row_id}/toggle", response_model=ExpansionResponse)
async def toggle_row(session_id: str, row_id: str) -> ExpansionResponse:
    session = _get_session(session_id)
    session.expanded_row_ids = toggle_expanded(session.expanded_row_ids, row_id)
    return ExpansionResponse(
        session_id=session_id,
        row_id=row_id,
        expanded=row_id in session.expanded_row_ids,
        expanded_row_ids=sorted(session.expanded_row_ids),
    )


@router.patch("/api/sessions/{session_id}/rows/{row_id}", response_model=EditResponse)
async def edit_row(session_id: str, row_id: str, req: EditRequest) -> EditResponse:
    session = _get_session(session_id)
    coord = session.coordinator

    if req.field == "comments":
        if req.value is not None and not isinstance(req.value, str):
            raise HTTPException(status_code=400, detail="comments must be text")
        result = coord.edit_comment(row_id, req.value)
    else:
        result = coord.edit_value(row_id, req.field, req.value)

    if not result.applied and result.reason is not None:
        status = 404 if result.reason.startswith("unknown row") else 409
        raise HTTPException(status_code=status, detail=result.reason)

    return EditResponse(
        session_id=session_id,
        row_id=row_id,
        outcome=result.outcome.value,
        state=coord.state.value,
        autosave_pending=coord.autosave_pending,
        row=find_row(coord.rows, row_id),
    )


# ── Selection ───────────────────────────────────────────────────────────────

@router.put("/api/sessions/{session_id}/selection", response_model=SessionSummary)
async def update_selection(session_id: str, req: SelectionModel) -> SessionSummary:
    session = _get_session(session_id)
    session.coordinator.update_selection(
        Selection(req.health_center, req.reporting_period, req.is_hospital_mode),
    )
    return _summary(session)


@router.post("/api/sessions/{session_id}/selection/complete", response_model=SessionSummary)
async def complete_selection(session_id: str) -> SessionSummary:
    session = _get_session(session_id)
    if not session.coordinator.complete_selection():
        raise HTTPException(status_code=400, detail="Select a health center and reporting period first")
    return _summary(session)
