"""
Global mutable state shared across the application.

All modules access these via ``import app.state as state`` and then
``state._SESSIONS``, ``state.DRAFTS_DIR``, etc. so that rebinding in
tests or in the lifespan function is visible everywhere.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

# Live editing sessions (EditingSession objects keyed by session id).
# In-memory only: the tree belongs to the session, drafts are on disk.
_SESSIONS: dict[str, Any] = {}

# Disk paths
BASE_DIR = Path(__file__).resolve().parent.parent  # /backend/

# REPORTING_DATA_DIR points the service at a persistent data root; when it
# is unset we fall back to the repo-local backend/data/ directory.
_data_root = os.environ.get("REPORTING_DATA_DIR")
DATA_DIR = Path(_data_root) if _data_root else BASE_DIR / "data"
DRAFTS_DIR = DATA_DIR / "drafts"
REPORTS_DIR = DATA_DIR / "reports"
DRAFTS_DIR.mkdir(parents=True, exist_ok=True)
REPORTS_DIR.mkdir(parents=True, exist_ok=True)
