"""Pydantic models defining the REST contract between frontend and backend."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from reporting.rows import FinancialRow


# ── Session ─────────────────────────────────────────────────────────────────

class SelectionModel(BaseModel):
    health_center: str | None = None
    reporting_period: str | None = None
    is_hospital_mode: bool = False


class MetadataModel(BaseModel):
    """Report title fields; snake_case like the rest of the session envelope."""

    health_center: str | None = None
    district: str | None = None
    project: str | None = None
    reporting_period: str | None = None
    fiscal_year: str | None = None


class SessionCreateRequest(BaseModel):
    fiscal_year: str
    health_center: str | None = None
    reporting_period: str | None = None
    is_hospital_mode: bool = False
    # None keeps the facility-independent template.
    facility_type: Literal["hospital", "health_center"] | None = None
    read_only: bool = False
    district: str | None = None
    project: str | None = None
    expanded_row_ids: list[str] = Field(default_factory=list)
    route: str | None = None


class SessionSummary(BaseModel):
    session_id: str
    created_at: str
    state: Literal["clean", "dirty"]
    is_dirty: bool
    read_only: bool
    form_visible: bool
    draft_key: str
    draft_restored: bool = False
    autosave_pending: bool = False
    requires_leave_confirmation: bool = False
    fiscal_year: str
    quarter_labels: list[str]
    selection: SelectionModel
    report_metadata: MetadataModel


# ── Rows ────────────────────────────────────────────────────────────────────

class DisplayRowOut(BaseModel):
    id: str
    title: str
    depth: int
    is_category: bool
    is_editable: bool
    has_children: bool
    expanded: bool
    q1: float | None = None
    q2: float | None = None
    q3: float | None = None
    q4: float | None = None
    cumulative_balance: float | None = None
    comments: str | None = None
    formatted: dict[str, str] = Field(default_factory=dict)


class RowsResponse(BaseModel):
    session_id: str
    state: Literal["clean", "dirty"]
    quarter_labels: list[str]
    rows: list[DisplayRowOut]


class EditRequest(BaseModel):
    field: Literal["q1", "q2", "q3", "q4", "comments"]
    value: str | float | None = None


class EditResponse(BaseModel):
    session_id: str
    row_id: str
    outcome: Literal["applied", "unchanged"]
    state: Literal["clean", "dirty"]
    autosave_pending: bool
    row: FinancialRow


class ExpansionResponse(BaseModel):
    session_id: str
    row_id: str
    expanded: bool
    expanded_row_ids: list[str]


# ── Persistence & navigation ────────────────────────────────────────────────

class PersistResponse(BaseModel):
    session_id: str
    status: Literal["ok"] = "ok"
    state: Literal["clean", "dirty"]
    draft_key: str


class DraftResponse(BaseModel):
    session_id: str
    draft_key: str
    timestamp: int
    form_data: list[FinancialRow]


class LeaveRequest(BaseModel):
    # None models a browser unload.
    target: str | None = None
    confirmed: bool = False


class LeaveResponse(BaseModel):
    session_id: str
    allowed: bool
    requires_confirmation: bool
    message: str | None = None
    state: Literal["clean", "dirty"]


class NotificationOut(BaseModel):
    level: Literal["success", "info", "error"]
    title: str
    description: str = ""


class NotificationsResponse(BaseModel):
    session_id: str
    notifications: list[NotificationOut]
