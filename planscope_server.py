"""Planscope backend server.

Mounts the scope router under a single FastAPI application. The record
snapshot is loaded from ``data/scope/snapshot.json`` (or the path in
``SNAPSHOT_PATH`` passed to ``create_app``) at startup; if it is missing
or invalid the server still starts, and the health endpoint reports why
scope requests are unavailable.

Usage::

    # Development (auto-reload)
    uvicorn planscope_server:app --reload --port 8430

    # Or run directly
    python planscope_server.py
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planscope import __version__
from planscope.core.records import RecordStore
from planscope.server import configure, router as scope_router
from shared.hardening import ErrorFormatter, InputValidator

logger = logging.getLogger("planscope")

DEFAULT_SNAPSHOT_PATH = Path("data/scope/snapshot.json")

# ---------------------------------------------------------------------------
# CORS -- allow local selector UI origins
# ---------------------------------------------------------------------------

_ALLOWED_ORIGINS = [
    "http://localhost:5173",   # Vite dev server
    "http://localhost:8430",   # Self (for Swagger UI)
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8430",
]


def _load_snapshot(app: FastAPI, snapshot_path: Path) -> None:
    """Load the record snapshot and hand it to the scope router.

    Failures are recorded on ``app.state.snapshot_status`` rather than
    raised, so the server can come up and report the problem.
    """
    status: dict[str, Any] = {"loaded": False, "path": str(snapshot_path), "error": None}
    app.state.snapshot_status = status

    if not snapshot_path.is_file():
        status["error"] = "Snapshot file not found."
        logger.warning("No snapshot at %s; scope endpoints will return 503", snapshot_path)
        return

    try:
        data = InputValidator().load_snapshot_file(snapshot_path)
        configure(RecordStore.from_dict(data))
    except Exception as exc:
        friendly = ErrorFormatter().format_snapshot_error(exc)
        status["error"] = friendly.message
        status["error_code"] = friendly.error_code
        logger.warning("Snapshot %s failed to load: %s", snapshot_path, exc)
        return

    status["loaded"] = True
    logger.info("Snapshot loaded from %s", snapshot_path)


def create_app(snapshot_path: str | Path = DEFAULT_SNAPSHOT_PATH) -> FastAPI:
    """Build the Planscope FastAPI application.

    Args:
        snapshot_path: JSON snapshot of the work-plan tables.

    Returns:
        Configured FastAPI app with the scope router at ``/api/scope``.
    """
    app = FastAPI(
        title="Planscope API",
        description=(
            "Report scoping for work-plan hierarchies: pruned, "
            "T/TA-annotated trees for report generation."
        ),
        version=__version__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=_ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/api/health")
    async def unified_health() -> dict[str, Any]:
        """Return overall health and the snapshot load status."""
        snapshot = app.state.snapshot_status
        return {
            "status": "ok" if snapshot["loaded"] else "degraded",
            "version": __version__,
            "snapshot": snapshot,
        }

    _load_snapshot(app, Path(snapshot_path))
    app.include_router(scope_router, prefix="/api/scope", tags=["scope"])
    logger.info("Scope router mounted at /api/scope/")
    return app


app = create_app()


def run_server(host: str = "127.0.0.1", port: int = 8430) -> None:
    """Start the Planscope server via uvicorn.

    Args:
        host: Bind address. Defaults to localhost.
        port: Port number. Defaults to 8430.
    """
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    run_server()
