"""
Pytest configuration and fixtures for Planscope tests.

The sample snapshot holds three work plans:

- ``src1`` "Regional Health Plan": source -> goals -> objectives -> activities
- ``src2`` "Literacy Workplan": no goals; objective linked straight to the source
- ``src3`` "FY24 Board Plan": Board Plan activities with status and comments
"""

from __future__ import annotations

import copy
import json
from pathlib import Path
from typing import Any

import pytest

from planscope.core.config import FieldConfig
from planscope.core.records import RecordStore

FIELDS: dict[str, str] = {
    "goals_link_field_id": "fld_goal_source",
    "objectives_link_field_id": "fld_obj_goal",
    "objectives_to_sources_link_field_id": "fld_obj_source",
    "activities_link_field_id": "fld_act_obj",
    "activities_start_date_field_id": "fld_act_start",
    "activities_end_date_field_id": "fld_act_end",
    "tta_sessions_link_field_id": "fld_tta_act",
    "tta_date_field_id": "fld_tta_date",
    "tta_summary_field_id": "fld_tta_summary",
    "activity_comments_field_id": "fld_act_comments",
    "activity_status_field_id": "fld_act_status",
}


def _link(*ids: str) -> list[dict[str, str]]:
    return [{"id": record_id, "name": record_id} for record_id in ids]


def _activity(
    record_id: str,
    name: str,
    objective_id: str,
    start: str | None = None,
    end: str | None = None,
    **extra: Any,
) -> dict[str, Any]:
    fields: dict[str, Any] = {"fld_act_obj": _link(objective_id)}
    if start:
        fields["fld_act_start"] = start
    if end:
        fields["fld_act_end"] = end
    fields.update(extra)
    return {"id": record_id, "name": name, "fields": fields}


def _session(record_id: str, summary: str, date: str | None, *activity_ids: str) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "fld_tta_act": _link(*activity_ids),
        "fld_tta_summary": summary,
    }
    if date:
        fields["fld_tta_date"] = date
    return {"id": record_id, "name": record_id.upper(), "fields": fields}


SNAPSHOT: dict[str, Any] = {
    "tables": {
        "workplan_sources": {
            "id": "tbl_sources",
            "name": "Workplan Sources",
            "records": [
                {"id": "src1", "name": "Regional Health Plan"},
                {"id": "src2", "name": "Literacy Workplan"},
                {"id": "src3", "name": "FY24 Board Plan"},
            ],
        },
        "goals": {
            "id": "tbl_goals",
            "name": "Goals",
            "primary_field_id": "fld_goal_name",
            "records": [
                {"id": "g1", "name": "Improve access", "fields": {"fld_goal_source": _link("src1")}},
                {
                    "id": "g2",
                    "fields": {
                        "fld_goal_name": "Expand outreach",
                        "fld_goal_source": _link("src1"),
                    },
                },
                {"id": "g3", "name": "Board governance", "fields": {"fld_goal_source": _link("src3")}},
            ],
        },
        "objectives": {
            "id": "tbl_objectives",
            "name": "Objectives",
            "records": [
                {"id": "o1", "name": "Open clinics", "fields": {"fld_obj_goal": _link("g1")}},
                {"id": "o2", "name": "Train staff", "fields": {"fld_obj_goal": _link("g1")}},
                {"id": "o3", "name": "Community events", "fields": {"fld_obj_goal": _link("g2")}},
                {"id": "o4", "name": "Reading circles", "fields": {"fld_obj_source": _link("src2")}},
                {"id": "o5", "name": "Policy review", "fields": {"fld_obj_goal": _link("g3")}},
            ],
        },
        "activities": {
            "id": "tbl_activities",
            "name": "Activities",
            "records": [
                _activity("a1", "Clinic survey", "o1", "2024-01-01", "2024-03-31"),
                _activity("a2", "Clinic launch", "o1", "2024-06-01", "2024-08-31"),
                _activity("a3", "Staff workshop", "o2", "2024-02-01", "2024-02-28"),
                _activity("a4", "Fair booth", "o3"),
                _activity("a5", "Library visits", "o4", "2024-01-15", "2024-12-31"),
                _activity(
                    "a6",
                    "Draft policy",
                    "o5",
                    "2024-01-01",
                    "2024-06-30",
                    fld_act_status={"id": "sel1", "name": "In progress"},
                    fld_act_comments="Drafting with counsel",
                ),
                _activity("a7", "Board retreat", "o5", "2024-09-01", "2024-09-02"),
            ],
        },
        "tta_sessions": {
            "id": "tbl_sessions",
            "name": "T/TA Sessions",
            "records": [
                _session("s1", "Survey kickoff", "2024-02-10", "a1"),
                _session("s2", "Survey design", "2024-01-05", "a1", "a3"),
                _session("s3", "Launch prep", "2024-07-01", "a2"),
                _session("s4", "Workshop delivered", "2024-02-15", "a3"),
                _session("s5", "Undated follow-up", None, "a1"),
                _session("s6", "Reading circle pilot", "2024-03-01", "a5"),
                _session("s7", "Board session", "2024-04-01", "a6"),
            ],
        },
    },
    "fields": FIELDS,
}


@pytest.fixture
def snapshot_data() -> dict[str, Any]:
    """A fresh copy of the sample snapshot dictionary."""
    return copy.deepcopy(SNAPSHOT)


@pytest.fixture
def field_config() -> FieldConfig:
    """Field configuration matching the sample snapshot."""
    return FieldConfig(**FIELDS)


@pytest.fixture
def store(snapshot_data: dict[str, Any]) -> RecordStore:
    """Sample record store."""
    return RecordStore.from_dict(snapshot_data)


@pytest.fixture
def snapshot_file(tmp_path: Path, snapshot_data: dict[str, Any]) -> Path:
    """The sample snapshot written to a temporary JSON file."""
    path = tmp_path / "snapshot.json"
    path.write_text(json.dumps(snapshot_data), encoding="utf-8")
    return path


@pytest.fixture
def same_day_store(snapshot_data: dict[str, Any]) -> RecordStore:
    """Sample store with two timestamped sessions for a4 on 2024-02-01.

    The afternoon session is stored before the morning one.
    """
    snapshot_data["tables"]["tta_sessions"]["records"].extend(
        [
            _session("late", "Afternoon debrief", "2024-02-01T15:00:00Z", "a4"),
            _session("early", "Morning setup", "2024-02-01T09:00:00Z", "a4"),
        ]
    )
    return RecordStore.from_dict(snapshot_data)
