"""
Execution Reporting backend – standalone server entry point.

Development normally runs ``uvicorn app.main:app --reload`` from backend/.
This module is what the ``execution-reporting-serve`` script starts.

Startup:
  1. Host and port come from the command line (port 0 picks a free one).
  2. "PORT:{port}" is printed to stdout (flushed) so a wrapping shell or
     desktop launcher knows where to poll /api/health.
  3. uvicorn serves the FastAPI app on a single worker: editing sessions
     and their autosave timers live in that one process.

Environment variables read at import time:
  REPORTING_DATA_DIR     – root for drafts/ and reports/
  REPORTING_CORS_ORIGINS – extra comma-separated CORS origins
"""

from __future__ import annotations

import argparse
import logging
import socket

from app.main import app as _fastapi_app


def _find_free_port(host: str) -> int:
    """Bind to port 0, let the OS assign a free port, return it."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((host, 0))
        return s.getsockname()[1]


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Serve the quarterly execution report API."
    )
    parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to listen on. 0 picks a free port.",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Log level for the service and uvicorn.",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    port = args.port or _find_free_port(args.host)
    print(f"PORT:{port}", flush=True)

    import uvicorn

    uvicorn.run(
        _fastapi_app,
        host=args.host,
        port=port,
        workers=1,
        loop="asyncio",
        log_level=args.log_level,
    )


if __name__ == "__main__":
    main()
