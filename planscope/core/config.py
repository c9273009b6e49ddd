"""Field configuration for the report scoper.

The host platform identifies fields by environment-specific ids. Rather
than baking those ids into the builder, every id the builder reads is
carried by a ``FieldConfig`` passed in at call time.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

# camelCase aliases accepted in snapshot files and API payloads.
_CAMEL_ALIASES: dict[str, str] = {
    "goalsLinkFieldId": "goals_link_field_id",
    "objectivesLinkFieldId": "objectives_link_field_id",
    "objectivesToSourcesLinkFieldId": "objectives_to_sources_link_field_id",
    "activitiesLinkFieldId": "activities_link_field_id",
    "activitiesStartDateFieldId": "activities_start_date_field_id",
    "activitiesEndDateFieldId": "activities_end_date_field_id",
    "ttaSessionsLinkFieldId": "tta_sessions_link_field_id",
    "ttaDateFieldId": "tta_date_field_id",
    "ttaSummaryFieldId": "tta_summary_field_id",
    "activityCommentsFieldId": "activity_comments_field_id",
    "activityStatusFieldId": "activity_status_field_id",
}

_HIERARCHY_OPTIONS = (
    "goals_link_field_id",
    "objectives_link_field_id",
    "objectives_to_sources_link_field_id",
    "activities_link_field_id",
)
_NORMAL_OPTIONS = (
    "tta_sessions_link_field_id",
    "tta_date_field_id",
    "tta_summary_field_id",
)
_BOARD_PLAN_OPTIONS = (
    "activity_comments_field_id",
    "activity_status_field_id",
)


@dataclass
class FieldConfig:
    """Field ids the hierarchy builder reads.

    Attributes:
        goals_link_field_id: Goal field linking to its workplan source.
        objectives_link_field_id: Objective field linking to its goal.
        objectives_to_sources_link_field_id: Objective field linking
            directly to a workplan source (skip-level path).
        activities_link_field_id: Activity field linking to its objective.
        activities_start_date_field_id: Activity start date.
        activities_end_date_field_id: Activity end date.
        tta_sessions_link_field_id: Session field linking to activities.
            Required for the normal (non Board Plan) path.
        tta_date_field_id: Session date. Required for the normal path.
        tta_summary_field_id: Session summary text. Required for the
            normal path.
        activity_comments_field_id: Activity comments. Required for the
            Board Plan path.
        activity_status_field_id: Activity status. Required for the
            Board Plan path.
    """

    goals_link_field_id: str | None = None
    objectives_link_field_id: str | None = None
    objectives_to_sources_link_field_id: str | None = None
    activities_link_field_id: str | None = None
    activities_start_date_field_id: str | None = None
    activities_end_date_field_id: str | None = None
    tta_sessions_link_field_id: str | None = None
    tta_date_field_id: str | None = None
    tta_summary_field_id: str | None = None
    activity_comments_field_id: str | None = None
    activity_status_field_id: str | None = None

    def missing_options(self, board_plan: bool) -> list[str]:
        """List unset options needed by the Board Plan or normal path."""
        required = _HIERARCHY_OPTIONS + (
            _BOARD_PLAN_OPTIONS if board_plan else _NORMAL_OPTIONS
        )
        return [name for name in required if not getattr(self, name)]

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary (snake_case keys)."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FieldConfig:
        """Deserialize from dictionary.

        Accepts snake_case option names or their camelCase aliases.
        Unknown keys are ignored.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_ALIASES.get(key, key)
            if name in known:
                values[name] = value
        return cls(**values)
