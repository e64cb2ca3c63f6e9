"""
Execution Reporting backend – FastAPI service for quarterly financial execution reports.

=== ROLE IN THE SYSTEM ===
The browser client renders the report table; this service owns the live
report tree for each editing session.  Every edit is applied here, category
subtotals and cumulative balances are recomputed here, and drafts and saved
reports are persisted here.

=== WHAT IT DOES ===
1. EDITING SESSIONS: one session per open report (facility + reporting period),
   seeded from the last saved report, a restored draft, or an empty template.
2. EDITS: quarterly values and comments on editable line items; category rows
   are always derived and reject direct writes.
3. DRAFTS: debounced autosave (30 s after the latest edit) plus manual
   "save draft", kept for 24 hours per facility/period key.
4. PERMANENT SAVE: writes the report and clears the draft.
5. NAVIGATION GUARD, NOTIFICATIONS and EXCEL EXPORT for the client.

=== KEY FILES IT READS/WRITES ===
  <REPORTING_DATA_DIR or backend/data>/
    drafts/<draft key>.json    – DraftRecord {formData, timestamp}
    reports/<draft key>.json   – FinancialReportData {tableData, metadata}
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import CORS_ORIGINS
from app.routers.persistence import router as persistence_router
from app.routers.report import router as report_router
from app.session import _close_all_sessions


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Cancel every pending autosave before the event loop goes away."""
    yield
    _close_all_sessions()


app = FastAPI(lifespan=_lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(report_router)
app.include_router(persistence_router)
