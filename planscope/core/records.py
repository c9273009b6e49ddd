"""
Record store data structures.

Read-only, in-memory view of the five work-plan tables the report
scoper consumes. Collections are fetched once by the caller and handed
over whole; nothing here re-queries the host platform.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from planscope.core.config import FieldConfig
from planscope.core.levels import HierarchyLevel


@dataclass
class Record:
    """
    A single row from a host-platform table.

    Field values are kept as the platform returns them:
    - link fields are lists of ``{"id": ..., "name": ...}`` dicts (or bare ids)
    - single selects are ``{"name": ...}`` dicts
    - dates are ISO strings
    """

    id: str
    name: str | None = None
    fields: dict[str, Any] = field(default_factory=dict)

    def get_cell_value(self, field_id: str | None) -> Any:
        """Return the raw value of a field, or None if unset or unconfigured."""
        if not field_id:
            return None
        return self.fields.get(field_id)

    def get_cell_value_as_string(self, field_id: str | None) -> str:
        """Return a field rendered as display text."""
        return _cell_to_string(self.get_cell_value(field_id))

    def linked_ids(self, field_id: str | None) -> list[str]:
        """Return the ids of records linked through a link field."""
        value = self.get_cell_value(field_id)
        if not isinstance(value, list):
            return []

        ids = []
        for link in value:
            if isinstance(link, dict):
                if link.get("id"):
                    ids.append(link["id"])
            elif isinstance(link, str):
                ids.append(link)
        return ids

    def is_linked_to(self, field_id: str | None, record_id: str) -> bool:
        """Check whether a link field contains the given record id."""
        return record_id in self.linked_ids(field_id)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"id": self.id, "name": self.name, "fields": self.fields}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Record:
        """Deserialize from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name"),
            fields=dict(data.get("fields") or {}),
        )


def _cell_to_string(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "checked" if value else ""
    if isinstance(value, dict):
        return str(value.get("name") or value.get("id") or "")
    if isinstance(value, list):
        return ", ".join(part for part in (_cell_to_string(v) for v in value) if part)
    return str(value)


@dataclass
class RecordTable:
    """A host-platform table: identity, primary field, and its records."""

    id: str
    name: str = ""
    primary_field_id: str | None = None
    records: list[Record] = field(default_factory=list)

    def find(self, record_id: str) -> Record | None:
        """Find a record by id."""
        for record in self.records:
            if record.id == record_id:
                return record
        return None

    def linked_to(self, field_id: str | None, parent_id: str) -> list[Record]:
        """
        Get records whose link field contains ``parent_id``.

        Table order is preserved. A missing field id yields no records.
        """
        if not field_id:
            return []
        return [r for r in self.records if r.is_linked_to(field_id, parent_id)]

    def __len__(self) -> int:
        return len(self.records)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "primary_field_id": self.primary_field_id,
            "records": [r.to_dict() for r in self.records],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecordTable:
        """Deserialize from dictionary."""
        return cls(
            id=data["id"],
            name=data.get("name", ""),
            primary_field_id=data.get("primary_field_id"),
            records=[Record.from_dict(r) for r in data.get("records", [])],
        )


_TABLE_KEYS = {
    "workplan_sources": HierarchyLevel.WORKPLAN_SOURCE,
    "goals": HierarchyLevel.GOAL,
    "objectives": HierarchyLevel.OBJECTIVE,
    "activities": HierarchyLevel.ACTIVITY,
}


@dataclass
class RecordStore:
    """
    Snapshot of the five work-plan collections.

    This is the data source the hierarchy builder reads from. It may
    optionally carry the FieldConfig that describes its link and date
    fields, so a single snapshot file is enough to build reports.
    """

    workplan_sources: RecordTable
    goals: RecordTable
    objectives: RecordTable
    activities: RecordTable
    tta_sessions: RecordTable
    config: FieldConfig = field(default_factory=FieldConfig)

    def table_for(self, level: HierarchyLevel) -> RecordTable:
        """Get the table holding records of a hierarchy level."""
        for key, table_level in _TABLE_KEYS.items():
            if table_level is level:
                return getattr(self, key)
        raise KeyError(level)

    def find(self, level: HierarchyLevel, record_id: str) -> Record | None:
        """Find a record of the given level by id."""
        return self.table_for(level).find(record_id)

    def to_dict(self) -> dict[str, Any]:
        """Serialize the whole snapshot."""
        tables = {key: getattr(self, key).to_dict() for key in _TABLE_KEYS}
        tables["tta_sessions"] = self.tta_sessions.to_dict()
        return {"tables": tables, "fields": self.config.to_dict()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RecordStore:
        """
        Build a store from a snapshot dictionary.

        Expected shape::

            {"tables": {"workplan_sources": {...}, "goals": {...},
                        "objectives": {...}, "activities": {...},
                        "tta_sessions": {...}},
             "fields": {...}}

        Missing tables become empty tables.
        """
        tables = data.get("tables", {})

        def table(key: str) -> RecordTable:
            if key in tables:
                return RecordTable.from_dict(tables[key])
            return RecordTable(id=key, name=key)

        return cls(
            workplan_sources=table("workplan_sources"),
            goals=table("goals"),
            objectives=table("objectives"),
            activities=table("activities"),
            tta_sessions=table("tta_sessions"),
            config=FieldConfig.from_dict(data.get("fields") or {}),
        )

    @classmethod
    def load(cls, path: str | Path) -> RecordStore:
        """Load a snapshot from a JSON file."""
        with open(path, encoding="utf-8") as f:
            return cls.from_dict(json.load(f))

    def __repr__(self) -> str:
        return (
            f"<RecordStore sources={len(self.workplan_sources)} "
            f"goals={len(self.goals)} objectives={len(self.objectives)} "
            f"activities={len(self.activities)} sessions={len(self.tta_sessions)}>"
        )
