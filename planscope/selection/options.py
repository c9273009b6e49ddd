"""Selection helpers for choosing a report scope.

Backs the scope picker: which bottom levels make sense for a selection,
fuzzy record search for the top-level record, and a preview of the T/TA
sessions a selection would cover.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from planscope.core.config import FieldConfig
from planscope.core.levels import HierarchyLevel, levels_from, parse_level
from planscope.core.records import Record, RecordStore
from planscope.hierarchy.filters import (
    DateRange,
    activity_in_range,
    record_name,
    session_in_range,
    session_sort_key,
)

SCORE_EXACT = 1000
SCORE_PREFIX = 500
SCORE_SUBSTRING = 100
SCORE_SUBSEQUENCE = 10


@dataclass
class LevelOption:
    """A bottom-level choice offered for a selection."""

    value: str
    label: str

    def to_dict(self) -> dict[str, str]:
        """Serialize to dictionary."""
        return {"value": self.value, "label": self.label}


@dataclass
class RecordOption:
    """A searchable top-level record with its match score."""

    value: str
    label: str
    score: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary."""
        return {"value": self.value, "label": self.label, "score": self.score}


def bottom_level_options(top_level: HierarchyLevel | str, has_goals: bool = True) -> list[LevelOption]:
    """
    Get the bottom levels a user may pick for a top level.

    A workplan source offers its descendant levels (goal is dropped when the
    source has no goals); other levels also offer stopping at themselves.
    """
    top = parse_level(top_level)
    if top is None:
        return []

    if top is HierarchyLevel.WORKPLAN_SOURCE:
        levels = levels_from(HierarchyLevel.GOAL)
        if not has_goals:
            levels = levels_from(HierarchyLevel.OBJECTIVE)
        return [LevelOption(level.value, level.label) for level in levels]

    options = [LevelOption(top.value, f"{top.label} only")]
    options.extend(LevelOption(level.value, level.label) for level in levels_from(top)[1:])
    return options


def source_has_goals(store: RecordStore, config: FieldConfig, source_id: str) -> bool:
    """Check whether any goal links to a workplan source."""
    return bool(store.goals.linked_to(config.goals_link_field_id, source_id))


def fuzzy_score(term: str, target: str) -> int:
    """
    Score how well a search term matches a label (case-insensitive).

    Exact match beats prefix, prefix beats substring, and substring beats
    an in-order character subsequence. No match scores 0.
    """
    needle = term.lower()
    haystack = target.lower()

    if haystack == needle:
        return SCORE_EXACT
    if haystack.startswith(needle):
        return SCORE_PREFIX
    if needle in haystack:
        return SCORE_SUBSTRING

    position = 0
    for char in haystack:
        if position < len(needle) and char == needle[position]:
            position += 1
    if position == len(needle):
        return SCORE_SUBSEQUENCE
    return 0


def search_records(
    store: RecordStore,
    level: HierarchyLevel | str,
    term: str = "",
    limit: int | None = None,
) -> list[RecordOption]:
    """
    Search the records of a level by display name.

    With no term every record is returned in table order with score 0.
    Otherwise non-matching records are dropped and the rest sorted by
    score, highest first (ties keep table order).
    """
    parsed = parse_level(level)
    if parsed is None:
        return []

    table = store.table_for(parsed)
    options = [
        RecordOption(value=record.id, label=record_name(record, table))
        for record in table.records
    ]

    if term:
        for option in options:
            option.score = fuzzy_score(term, option.label)
        options = sorted(
            (o for o in options if o.score > 0),
            key=lambda o: o.score,
            reverse=True,
        )

    if limit is not None:
        options = options[:limit]
    return options


def relevant_activity_ids(
    store: RecordStore,
    config: FieldConfig,
    top_level: HierarchyLevel | str,
    top_level_id: str,
    date_range: DateRange | None = None,
) -> list[str]:
    """
    Get the ids of activities beneath a selection.

    A workplan source reaches activities through its goals and through
    objectives linked to it directly. Activities outside the date range
    are left out.
    """
    top = parse_level(top_level)
    if top is None:
        return []

    if top is HierarchyLevel.ACTIVITY:
        record = store.activities.find(top_level_id)
        if record is None or not activity_in_range(record, date_range, config):
            return []
        return [record.id]

    objective_ids: list[str] = []
    if top is HierarchyLevel.OBJECTIVE:
        objective_ids = [top_level_id]
    else:
        if top is HierarchyLevel.GOAL:
            goal_ids = [top_level_id]
        else:
            goal_ids = [
                g.id for g in store.goals.linked_to(config.goals_link_field_id, top_level_id)
            ]
        for goal_id in goal_ids:
            objective_ids.extend(
                o.id for o in store.objectives.linked_to(config.objectives_link_field_id, goal_id)
            )
        if top is HierarchyLevel.WORKPLAN_SOURCE:
            objective_ids.extend(
                o.id
                for o in store.objectives.linked_to(
                    config.objectives_to_sources_link_field_id, top_level_id
                )
            )

    activity_ids: list[str] = []
    for objective_id in dict.fromkeys(objective_ids):
        for activity in store.activities.linked_to(config.activities_link_field_id, objective_id):
            if activity.id not in activity_ids and activity_in_range(activity, date_range, config):
                activity_ids.append(activity.id)
    return activity_ids


def preview_sessions(
    store: RecordStore,
    config: FieldConfig,
    activity_ids: list[str],
    date_range: DateRange | None = None,
) -> list[Record]:
    """
    Get the T/TA sessions linked to any of the given activities.

    Sessions are date-filtered and returned oldest first; undated
    sessions sort last.
    """
    wanted = set(activity_ids)
    sessions = [
        session
        for session in store.tta_sessions.records
        if wanted.intersection(session.linked_ids(config.tta_sessions_link_field_id))
        and session_in_range(session, date_range, config)
    ]
    return sorted(sessions, key=lambda session: session_sort_key(session, config))
