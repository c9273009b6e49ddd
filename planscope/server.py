"""FastAPI router for Planscope report scoping.

Exposes REST endpoints for building report scope trees, listing valid
bottom levels, searching top-level records, previewing T/TA sessions,
converting between the full and compact wire formats, and preparing
Report Request payloads. Designed to be mounted at /api/scope/ by the
parent application.

All endpoint functions are synchronous because building a tree is a
pure in-memory pass over the loaded snapshot.
"""

from __future__ import annotations

import logging
from typing import Any, Literal

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel, Field

from planscope.core.config import FieldConfig
from planscope.core.levels import parse_level
from planscope.core.records import RecordStore
from planscope.exporters.base import ExporterRegistry
from planscope.exporters.compact import CompactCodec
from planscope.exporters.json_export import from_full_dict, to_full_dict
from planscope.exporters.report_request import ReportRequest
from planscope.hierarchy.builder import HierarchyBuilder
from planscope.hierarchy.filters import DateRange, session_date
from planscope.hierarchy.tree import HierarchyNode
from planscope.selection.options import (
    bottom_level_options,
    preview_sessions,
    relevant_activity_ids,
    search_records,
    source_has_goals,
)
from shared.hardening import ErrorFormatter, InputValidator, ValidationError

logger = logging.getLogger(__name__)

_validator = InputValidator()
_formatter = ErrorFormatter()

# ===================================================================
# Pydantic request / response models
# ===================================================================


class ScopeSelection(BaseModel):
    """A top-level record selection with an optional date range."""

    top_level: str = Field(..., min_length=1, max_length=50)
    top_level_id: str = Field(..., min_length=1, max_length=200)
    start_date: str | None = None
    end_date: str | None = None


class HierarchyRequest(ScopeSelection):
    """Request body for building a report scope tree."""

    bottom_level: str = Field(..., min_length=1, max_length=50)
    format: Literal["json", "compact", "markdown"] = "json"


class EncodeRequest(BaseModel):
    """Request body carrying a full-form tree."""

    hierarchy: dict[str, Any] | None = None


class DecodeRequest(BaseModel):
    """Request body carrying a compact-form tree."""

    compact: dict[str, Any] | None = None


# ===================================================================
# Shared state
# ===================================================================

_state: dict[str, Any] = {
    "store": None,
    "config": None,
}


def configure(store: RecordStore, config: FieldConfig | None = None) -> None:
    """Inject the record snapshot and field configuration.

    Must be called before the router handles any scope requests.

    Args:
        store: Loaded record snapshot.
        config: Field configuration; defaults to the snapshot's own.
    """
    _state["store"] = store
    _state["config"] = config or store.config
    logger.info("Scope router configured with %r", store)


def get_store() -> RecordStore:
    """Return the configured RecordStore, raising 503 if not configured.

    Raises:
        HTTPException: 503 if ``configure()`` has not been called.
    """
    store = _state.get("store")
    if store is None:
        raise HTTPException(
            status_code=503,
            detail="Record snapshot not loaded. Call configure() first.",
        )
    return store


def get_config() -> FieldConfig:
    """Return the active FieldConfig."""
    return _state.get("config") or get_store().config


def _date_range(start: str | None, end: str | None) -> DateRange:
    """Validate request dates, raising 422 with a friendly error body."""
    try:
        start_date, end_date = _validator.validate_date_range(start, end)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=_formatter.format_request_error(exc).to_dict(),
        ) from exc
    return DateRange(start=start_date, end=end_date)


def _build(request: HierarchyRequest, date_range: DateRange) -> HierarchyNode | None:
    builder = HierarchyBuilder(get_config())
    return builder.build(
        request.top_level,
        request.top_level_id,
        request.bottom_level,
        get_store(),
        date_range,
    )


# ===================================================================
# Router
# ===================================================================

router = APIRouter()


@router.get("/health")
def health() -> dict[str, Any]:
    """Return scope service health status."""
    store = _state.get("store")
    return {
        "status": "ok" if store is not None else "not_configured",
        "snapshot": repr(store) if store is not None else None,
        "formats": ExporterRegistry.available_exporters(),
    }


@router.post("/hierarchy")
def build_hierarchy(request: HierarchyRequest) -> dict[str, Any]:
    """Build the report scope tree for a selection.

    A selection whose record no longer exists (or whose level is
    unknown) yields ``found: false`` and a null hierarchy.
    """
    date_range = _date_range(request.start_date, request.end_date)
    root = _build(request, date_range)
    if request.format == "json":
        rendered: Any = to_full_dict(root)
    elif request.format == "compact":
        rendered = CompactCodec.encode(root)
    else:
        rendered = ExporterRegistry.render(root, request.format) if root is not None else None

    return {"found": root is not None, "format": request.format, "hierarchy": rendered}


@router.get("/levels/{top_level}/options")
def level_options(
    top_level: str,
    top_level_id: str | None = Query(default=None, max_length=200),
) -> dict[str, Any]:
    """List the bottom levels available for a top level.

    When a workplan source id is given, the goal level is offered only
    if the source has goals.
    """
    if parse_level(top_level) is None:
        raise HTTPException(status_code=404, detail=f"Unknown level: {top_level}")

    has_goals = True
    if top_level_id and top_level == "workplanSource":
        has_goals = source_has_goals(get_store(), get_config(), top_level_id)

    return {
        "top_level": top_level,
        "options": [o.to_dict() for o in bottom_level_options(top_level, has_goals)],
    }


@router.get("/records/{level}")
def search(
    level: str,
    q: str = Query(default="", max_length=1_000),
    limit: int = Query(default=50, ge=1, le=500),
) -> dict[str, Any]:
    """Search records of a level by display name."""
    if parse_level(level) is None:
        raise HTTPException(status_code=404, detail=f"Unknown level: {level}")

    term = _validator.sanitize_string(q)
    options = search_records(get_store(), level, term, limit=limit)
    return {"level": level, "query": term, "records": [o.to_dict() for o in options]}


@router.post("/sessions/preview")
def sessions_preview(request: ScopeSelection) -> dict[str, Any]:
    """Preview the T/TA sessions covered by a selection."""
    date_range = _date_range(request.start_date, request.end_date)
    store = get_store()
    config = get_config()

    activity_ids = relevant_activity_ids(
        store, config, request.top_level, request.top_level_id, date_range
    )
    sessions = preview_sessions(store, config, activity_ids, date_range)

    def describe(session) -> dict[str, Any]:
        when = session_date(session, config)
        return {
            "id": session.id,
            "date": when.isoformat() if when else None,
            "summary": session.get_cell_value_as_string(config.tta_summary_field_id),
        }

    return {
        "activity_ids": activity_ids,
        "sessions": [describe(s) for s in sessions],
    }


@router.post("/compact/encode")
def compact_encode(request: EncodeRequest) -> dict[str, Any]:
    """Convert a full-form tree to compact form."""
    try:
        node = from_full_dict(request.hierarchy)
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(
            status_code=422,
            detail=_formatter.format_codec_error(exc).to_dict(),
        ) from exc
    return {"compact": CompactCodec.encode(node)}


@router.post("/compact/decode")
def compact_decode(request: DecodeRequest) -> dict[str, Any]:
    """Restore a full-form tree from compact form (identity fields null)."""
    try:
        node = CompactCodec.decode(request.compact)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise HTTPException(
            status_code=422,
            detail=_formatter.format_codec_error(exc).to_dict(),
        ) from exc
    return {"hierarchy": to_full_dict(node)}


@router.post("/report-request")
def report_request(request: HierarchyRequest) -> dict[str, Any]:
    """Prepare the Report Request field values for a selection.

    Raises:
        HTTPException: 404 when the selected record no longer exists, so
            the caller can send the user back to re-select.
    """
    date_range = _date_range(request.start_date, request.end_date)
    root = _build(request, date_range)
    if root is None:
        raise HTTPException(
            status_code=404,
            detail="The selected record no longer exists. Please select again.",
        )

    return {"fields": ReportRequest(root, date_range).to_fields()}
