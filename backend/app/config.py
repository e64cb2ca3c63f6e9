"""Web-layer constants."""

from __future__ import annotations

import os

# Local frontend dev servers.
CORS_ORIGINS: list[str] = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]
CORS_ORIGINS += [
    origin.strip()
    for origin in os.environ.get("REPORTING_CORS_ORIGINS", "").split(",")
    if origin.strip()
]

# Excel export: (header, DataFrame column). Quarter headers are replaced
# by the fiscal-year labels at export time.
EXPORT_COLUMNS: list[tuple[str, str]] = [
    ("Activity/Line Item", "title"),
    ("Q1", "q1"),
    ("Q2", "q2"),
    ("Q3", "q3"),
    ("Q4", "q4"),
    ("Cumulative Balance", "cumulative_balance"),
    ("Comment", "comments"),
]

EXPORT_INDENT = "    "
