"""Shared pytest fixtures for engine and API integration tests.

Provides:
- test_client: session-scoped FastAPI TestClient with lifespan handling
- isolated data dirs: drafts/reports written under tmp_path for every test
- scheduler / clock: manual time sources for autosave and draft expiry
- store / coordinator_factory: a DraftStore over memory and a coordinator builder
"""

from __future__ import annotations

from typing import Callable

import pytest
from starlette.testclient import TestClient

import app.state as state
from app.main import app
from reporting.coordinator import EditCoordinator, Selection
from reporting.drafts import DraftStore, MemoryDraftMedium
from reporting.notifications import NotificationLog
from reporting.rows import FinancialReportData, FinancialRow


# ── Manual time ────────────────────────────────────────────────────────────

class _ManualHandle:
    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Scheduler whose time only moves when a test calls ``advance``."""

    def __init__(self) -> None:
        self.now = 0.0
        self._pending: list[tuple[float, Callable[[], None], _ManualHandle]] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle()
        self._pending.append((self.now + delay, callback, handle))
        return handle

    @property
    def live(self) -> int:
        return sum(1 for _, _, h in self._pending if not h.cancelled)

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (p for p in self._pending if p[0] <= self.now and not p[2].cancelled),
            key=lambda p: p[0],
        )
        self._pending = [p for p in self._pending if p not in due and not p[2].cancelled]
        for _, callback, _ in due:
            callback()


class FakeClock:
    """Epoch-millis clock for DraftStore."""

    def __init__(self, start_ms: int = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture()
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def medium() -> MemoryDraftMedium:
    return MemoryDraftMedium()


@pytest.fixture()
def store(medium: MemoryDraftMedium, clock: FakeClock) -> DraftStore:
    return DraftStore(medium, clock=clock)


# ── Trees ──────────────────────────────────────────────────────────────────

@pytest.fixture()
def small_tree() -> list[FinancialRow]:
    """Two categories, one nested, with a read-only leaf and partial quarters."""
    return [
        FinancialRow(
            id="cat1",
            title="Category 1",
            is_category=True,
            children=[
                FinancialRow(id="a1", title="Line a1", q1=100, q2=200),
                FinancialRow(id="a2", title="Line a2", q3=50),
                FinancialRow(id="ro", title="Read-only line", is_editable=False),
            ],
        ),
        FinancialRow(
            id="cat2",
            title="Category 2",
            is_category=True,
            children=[
                FinancialRow(
                    id="sub",
                    title="Sub-category",
                    is_category=True,
                    children=[FinancialRow(id="b1", title="Line b1", q4=10)],
                ),
                FinancialRow(id="b2", title="Line b2"),
            ],
        ),
    ]


# ── Coordinator ────────────────────────────────────────────────────────────

class RecordingSaver:
    """Save collaborator that records payloads and can be told to fail."""

    def __init__(self) -> None:
        self.saved: list[FinancialReportData] = []
        self.fail = False

    def __call__(self, report: FinancialReportData) -> None:
        if self.fail:
            raise ConnectionError("save endpoint unreachable")
        self.saved.append(report)


@pytest.fixture()
def saver() -> RecordingSaver:
    return RecordingSaver()


@pytest.fixture()
def notifications() -> NotificationLog:
    return NotificationLog()


@pytest.fixture()
def coordinator_factory(small_tree, store, saver, scheduler, notifications):
    def _make(**overrides) -> EditCoordinator:
        kwargs = dict(
            fiscal_year="2024",
            store=store,
            save_report=saver,
            scheduler=scheduler,
            notify=notifications,
            selection=Selection("Kigali HC", "Q1", False),
        )
        kwargs.update(overrides)
        rows = kwargs.pop("rows", small_tree)
        return EditCoordinator(rows, **kwargs)

    return _make


# ── API ────────────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def isolated_data_dirs(tmp_path, monkeypatch):
    """Point drafts and saved reports at a per-test directory."""
    drafts = tmp_path / "data" / "drafts"
    reports = tmp_path / "data" / "reports"
    drafts.mkdir(parents=True)
    reports.mkdir(parents=True)
    monkeypatch.setattr(state, "DRAFTS_DIR", drafts)
    monkeypatch.setattr(state, "REPORTS_DIR", reports)
    return drafts, reports


@pytest.fixture(scope="session")
def test_client():
    """Session-scoped TestClient; triggers app lifespan (closes sessions on exit)."""
    with TestClient(app) as client:
        yield client


@pytest.fixture()
def create_session(test_client: TestClient):
    """POST /api/sessions with sensible defaults; sessions are closed on teardown."""
    created: list[str] = []

    def _create(**overrides) -> dict:
        body = {
            "fiscal_year": "2024",
            "health_center": "Kigali HC",
            "reporting_period": "Q1",
            "district": "Gasabo",
            "project": "HIV",
        }
        body.update(overrides)
        resp = test_client.post("/api/sessions", json=body)
        assert resp.status_code == 200, resp.text
        data = resp.json()
        created.append(data["session_id"])
        return data

    yield _create
    for sid in created:
        test_client.delete(f"/api/sessions/{sid}")
