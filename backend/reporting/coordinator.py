"""
Edit/dirty coordinator for one editing session of a financial report.

=== STATES ===
  CLEAN  no edits since the last permanent save (or since opening)
  DIRTY  accepted edits exist that have not been permanently saved

=== TRANSITIONS ===
  edit (editable leaf, value actually changed)   CLEAN/DIRTY -> DIRTY, autosave re-armed
  autosave timer / "save draft"                  DIRTY -> DIRTY, tree written to the draft store
  "save permanently" succeeds                    DIRTY -> CLEAN, draft removed
  "save permanently" fails                       DIRTY -> DIRTY, draft kept

Rejected edits (category row, read-only row, read-only session, unparseable
input) change nothing.  A read-only session never becomes dirty, never
arms the timer and never reads or writes drafts.

The coordinator is single-threaded: edits, timer callbacks and saves must
all run on the same event loop.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable
from urllib.parse import urlsplit

from reporting.config import AUTOSAVE_DELAY_SECONDS, LEAVE_CONFIRMATION_MESSAGE
from reporting.drafts import DraftStore, derive_key
from reporting.errors import DraftLoadError, StorageError
from reporting.notifications import Notification
from reporting.rows import (
    QUARTERS,
    FinancialReportData,
    FinancialRow,
    ReportMetadata,
    ensure_unique_ids,
    find_row,
    replace_row,
)
from reporting.scheduling import AutosaveTimer, Scheduler
from reporting.totals import calculate_hierarchical_totals

_log = logging.getLogger(__name__)


class EditState(str, Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


class EditOutcome(str, Enum):
    APPLIED = "applied"
    UNCHANGED = "unchanged"
    REJECTED = "rejected"


@dataclass(frozen=True)
class EditResult:
    outcome: EditOutcome
    reason: str | None = None

    @property
    def applied(self) -> bool:
        return self.outcome is EditOutcome.APPLIED


@dataclass(frozen=True)
class Selection:
    """Facility/period picked by the user outside the report table."""

    health_center: str | None = None
    reporting_period: str | None = None
    is_hospital_mode: bool = False

    @property
    def is_complete(self) -> bool:
        # Hospitals report for themselves, so no health centre is needed.
        has_center = self.is_hospital_mode or bool(self.health_center)
        return has_center and bool(self.reporting_period)


# Plain decimals only: optional sign, ASCII digits, optional fraction.
_AMOUNT_RE = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)", re.ASCII)


def parse_amount(raw: Any) -> float | None:
    """Numeric input from a cell; ``None`` or blank clears the value.

    Raises ``ValueError`` for anything that is not a finite number.
    """
    if raw is None:
        return None
    if isinstance(raw, bool):
        raise ValueError("booleans are not amounts")
    if isinstance(raw, (int, float)):
        try:
            value = float(raw)
        except OverflowError as exc:
            raise ValueError("amount is too large to represent") from exc
    else:
        text = str(raw).strip()
        if not text:
            return None
        if not _AMOUNT_RE.fullmatch(text):
            raise ValueError(f"{text!r} is not a plain decimal number")
        value = float(text)
    if not math.isfinite(value):
        raise ValueError("amount is not a finite number")
    return value


def _route_path(route: str) -> str:
    return urlsplit(route).path.rstrip("/") or "/"


class EditCoordinator:
    """Owns the live report tree for one editing session."""

    def __init__(
        self,
        rows: list[FinancialRow],
        *,
        fiscal_year: str,
        store: DraftStore,
        save_report: Callable[[FinancialReportData], None],
        scheduler: Scheduler,
        notify: Callable[[Notification], None] | None = None,
        selection: Selection | None = None,
        report_metadata: ReportMetadata | None = None,
        read_only: bool = False,
        current_route: str | None = None,
        autosave_delay: float = AUTOSAVE_DELAY_SECONDS,
    ):
        ensure_unique_ids(rows)
        self._rows = calculate_hierarchical_totals(rows)
        self.fiscal_year = fiscal_year
        self.store = store
        self._save_report = save_report
        self._notify = notify if notify is not None else (lambda _n: None)
        self.selection = selection or Selection()
        self.report_metadata = report_metadata or ReportMetadata()
        self.read_only = read_only
        self.current_route = current_route
        self.state = EditState.CLEAN
        # Read-only reports have nothing to configure, so they are shown at once.
        self.form_visible = read_only
        self._closed = False
        self._timer = AutosaveTimer(scheduler, autosave_delay, self._autosave)

    # ── Read access ───────────────────────────────────────────────────────

    @property
    def rows(self) -> list[FinancialRow]:
        return list(self._rows)

    @property
    def is_dirty(self) -> bool:
        return self.state is EditState.DIRTY

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def autosave_pending(self) -> bool:
        return self._timer.pending

    @property
    def draft_key(self) -> str:
        return derive_key(self.selection.health_center, self.selection.reporting_period)

    def build_report(self) -> FinancialReportData:
        return FinancialReportData(
            table_data=list(self._rows),
            metadata=ReportMetadata(
                health_center=self.selection.health_center,
                district=self.report_metadata.district,
                project=self.report_metadata.project,
                reporting_period=self.selection.reporting_period,
                fiscal_year=self.fiscal_year,
            ),
        )

    # ── Lifecycle ─────────────────────────────────────────────────────────

    def open(self) -> bool:
        """Restore the draft for the active key, if one exists.

        Returns True when the tree was replaced by a draft.
        """
        if self.read_only or self._closed:
            return False
        key = self.draft_key
        try:
            record = self.store.load(key)
            if record is None:
                return False
            ensure_unique_ids(record.form_data)
        except (DraftLoadError, ValueError) as exc:
            _log.warning("Draft %s could not be restored: %s", key, exc)
            self._notify(Notification("error", "Failed to load draft", "An error occurred while loading saved data"))
            return False

        self._rows = calculate_hierarchical_totals(record.form_data)
        _log.info("Restored draft %s saved at %d", key, record.timestamp)
        return True

    def close(self) -> None:
        """Tear down the session; no timer may write after this."""
        self._timer.cancel()
        self._closed = True

    # ── Edits ─────────────────────────────────────────────────────────────

    def _reject(self, row_id: str, reason: str) -> EditResult:
        _log.debug("Edit on %s rejected: %s", row_id, reason)
        return EditResult(EditOutcome.REJECTED, reason)

    def _check_target(self, row_id: str) -> FinancialRow | str:
        if self._closed:
            return "session is closed"
        if self.read_only:
            return "report is read-only"
        row = find_row(self._rows, row_id)
        if row is None:
            return f"unknown row '{row_id}'"
        if row.is_category:
            return "category rows are computed from their children"
        if not row.is_editable:
            return "row is not editable"
        return row

    def _apply(self, row_id: str, update: dict[str, Any]) -> EditResult:
        updated = replace_row(self._rows, row_id, lambda r: r.model_copy(update=update))
        self._rows = calculate_hierarchical_totals(updated)
        self.state = EditState.DIRTY
        self._timer.reschedule()
        return EditResult(EditOutcome.APPLIED)

    def edit_value(self, row_id: str, field: str, raw: Any) -> EditResult:
        if field not in QUARTERS:
            return self._reject(row_id, f"unknown field '{field}'")
        target = self._check_target(row_id)
        if isinstance(target, str):
            return self._reject(row_id, target)
        try:
            value = parse_amount(raw)
        except ValueError:
            return self._reject(row_id, f"{field} value is not a number")
        if getattr(target, field) == value:
            return EditResult(EditOutcome.UNCHANGED)
        return self._apply(row_id, {field: value})

    def edit_comment(self, row_id: str, text: str | None) -> EditResult:
        target = self._check_target(row_id)
        if isinstance(target, str):
            return self._reject(row_id, target)
        comment = text or None
        if target.comments == comment:
            return EditResult(EditOutcome.UNCHANGED)
        return self._apply(row_id, {"comments": comment})

    # ── Persistence ───────────────────────────────────────────────────────

    def _write_draft(self) -> bool:
        try:
            self.store.save(self.draft_key, list(self._rows))
        except StorageError as exc:
            _log.warning("Draft write failed: %s", exc)
            self._notify(Notification("error", "Failed to save draft", "An error occurred while saving"))
            return False
        return True

    def _autosave(self) -> None:
        if self._closed or self.read_only or not self.is_dirty:
            return
        if self._write_draft():
            self._notify(Notification(
                "info", "Autosaved", "Your changes have been automatically saved as a draft",
            ))

    def save_draft(self) -> bool:
        """Write the current tree to the draft store now; dirtiness is kept."""
        if self.read_only or self._closed:
            return False
        if not self._write_draft():
            return False
        self._notify(Notification("success", "Draft saved", "Your changes have been saved as a draft"))
        return True

    def save(self) -> bool:
        """Hand the report to the save collaborator; CLEAN only on success."""
        if self.read_only or self._closed:
            return False
        key = self.draft_key
        try:
            self._save_report(self.build_report())
        except Exception:
            _log.exception("Permanent save failed for %s", key)
            self._notify(Notification("error", "Save failed", "Could not save your financial report"))
            return False

        self.state = EditState.CLEAN
        self._timer.cancel()
        try:
            self.store.remove(key)
        except StorageError as exc:
            _log.warning("Saved report but could not remove draft %s: %s", key, exc)
            self._notify(Notification("error", "Failed to remove draft", str(exc)))
        self._notify(Notification("success", "Saved successfully", "Your financial report has been saved"))
        return True

    # ── Navigation & selection ────────────────────────────────────────────

    @property
    def requires_leave_confirmation(self) -> bool:
        return self.is_dirty and not self.read_only and not self._closed

    def _is_current_route(self, target: str) -> bool:
        if self.current_route is None:
            return False
        current = _route_path(self.current_route)
        path = _route_path(target)
        return path == current or path.startswith(current.rstrip("/") + "/")

    def request_leave(self, confirm: Callable[[str], bool], target: str | None = None) -> bool:
        """Ask before leaving with unsaved edits.

        ``target=None`` is a browser unload; routes at or under the current
        one are not guarded.  Confirming writes the draft but keeps DIRTY.
        """
        if not self.requires_leave_confirmation:
            return True
        if target is not None and self._is_current_route(target):
            return True
        if not confirm(LEAVE_CONFIRMATION_MESSAGE):
            return False
        self._write_draft()
        return True

    def update_selection(self, selection: Selection) -> None:
        """Track the external pickers; an incomplete selection hides the form.

        The tree itself is left untouched.
        """
        self.selection = selection
        if not self.read_only and not selection.is_complete and self.form_visible:
            self.form_visible = False

    def complete_selection(self) -> bool:
        """The user's "continue" action; never triggered automatically."""
        if self.read_only or self.selection.is_complete:
            self.form_visible = True
        return self.form_visible
