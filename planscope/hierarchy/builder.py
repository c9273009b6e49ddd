"""
Report scope builder.

Builds the pruned, T/TA-annotated hierarchy tree for one report request
from a RecordStore snapshot.
"""

from __future__ import annotations

import logging
from typing import Any

from planscope.core.config import FieldConfig
from planscope.core.levels import HierarchyLevel, is_at_or_below, parse_level
from planscope.core.records import Record, RecordStore
from planscope.hierarchy.filters import (
    DateRange,
    activity_in_range,
    is_board_plan_name,
    record_name,
    session_in_range,
    session_sort_key,
)
from planscope.hierarchy.rollup import roll_up
from planscope.hierarchy.tree import (
    ActivityNode,
    BoardPlanActivityNode,
    GoalNode,
    HierarchyNode,
    ObjectiveNode,
    TTASessionRef,
    WorkplanSourceNode,
)

logger = logging.getLogger(__name__)


class HierarchyBuilder:
    """
    Builds report scope trees from a record snapshot.

    Strategy:
    1. Resolve the selected record; a missing record gives None
    2. Decide once whether the selection belongs to a Board Plan
    3. Walk link fields down to activities, always fetching activities
       (date-filtered) since they feed rollup
    4. Roll activity data up onto the bottom level and prune below it
    """

    def __init__(self, config: FieldConfig | None = None) -> None:
        self.config = config

    def build(
        self,
        top_level: HierarchyLevel | str,
        top_level_id: str,
        bottom_level: HierarchyLevel | str,
        store: RecordStore,
        date_range: DateRange | None = None,
    ) -> HierarchyNode | None:
        """Build the report scope tree for a selection.

        Args:
            top_level: Level of the selected record.
            top_level_id: Id of the selected record.
            bottom_level: Deepest level shown structurally.
            store: Record snapshot to read from.
            date_range: Optional filter for activities and sessions.

        Returns:
            Root node of the pruned tree, or None when the selection is
            unknown or the record no longer exists.
        """
        top = parse_level(top_level)
        bottom = parse_level(bottom_level)
        if top is None:
            logger.warning("Unknown top level %r", top_level)
            return None
        if bottom is None:
            logger.warning("Unknown bottom level %r", bottom_level)
            return None
        if not is_at_or_below(bottom, top):
            logger.warning(
                "Bottom level %s is above top level %s; using %s",
                bottom.value,
                top.value,
                top.value,
            )
            bottom = top

        config = self.config or store.config
        date_range = date_range or DateRange()

        record = store.find(top, top_level_id)
        if record is None:
            logger.info("Selected %s %s no longer exists", top.value, top_level_id)
            return None

        board_plan = find_board_plan_source(top, top_level_id, store, config) is not None
        missing = config.missing_options(board_plan)
        if missing:
            logger.warning("Field configuration incomplete: %s", ", ".join(missing))

        walk = _Walk(store, config, date_range, board_plan)

        if top is HierarchyLevel.ACTIVITY:
            if not activity_in_range(record, date_range, config):
                logger.debug("Activity %s is outside %s", record.id, date_range)
                return None
            return walk.activity(record)

        root = walk.node(top, record)
        logger.debug(
            "Built %s %s with %d descendants (board_plan=%s)",
            top.value,
            record.id,
            root.descendant_count,
            board_plan,
        )

        if bottom is not HierarchyLevel.ACTIVITY and not root.find_all(bottom):
            logger.warning(
                "No %s nodes under %s %s; tree left unpruned",
                bottom.value,
                top.value,
                record.id,
            )

        return roll_up(root, bottom, board_plan)


class _Walk:
    """One descent over the store for a single build."""

    def __init__(
        self,
        store: RecordStore,
        config: FieldConfig,
        date_range: DateRange,
        board_plan: bool,
    ) -> None:
        self.store = store
        self.config = config
        self.date_range = date_range
        self.board_plan = board_plan

    def node(self, level: HierarchyLevel, record: Record) -> HierarchyNode:
        if level is HierarchyLevel.WORKPLAN_SOURCE:
            return self.workplan_source(record)
        if level is HierarchyLevel.GOAL:
            return self.goal(record)
        if level is HierarchyLevel.OBJECTIVE:
            return self.objective(record)
        return self.activity(record)

    def _identity(self, level: HierarchyLevel, record: Record) -> dict[str, Any]:
        table = self.store.table_for(level)
        return {
            "table_id": table.id,
            "record_id": record.id,
            "record_name": record_name(record, table),
        }

    def workplan_source(self, record: Record) -> WorkplanSourceNode:
        goals = self.store.goals.linked_to(self.config.goals_link_field_id, record.id)
        if goals:
            children: list[HierarchyNode] = [self.goal(goal) for goal in goals]
        else:
            # Skip-level path: objectives hang directly off the source.
            objectives = self.store.objectives.linked_to(
                self.config.objectives_to_sources_link_field_id, record.id
            )
            children = [self.objective(objective) for objective in objectives]

        return WorkplanSourceNode(
            **self._identity(HierarchyLevel.WORKPLAN_SOURCE, record),
            children=tuple(children),
        )

    def goal(self, record: Record) -> GoalNode:
        objectives = self.store.objectives.linked_to(
            self.config.objectives_link_field_id, record.id
        )
        return GoalNode(
            **self._identity(HierarchyLevel.GOAL, record),
            children=tuple(self.objective(objective) for objective in objectives),
        )

    def objective(self, record: Record) -> ObjectiveNode:
        activities = [
            activity
            for activity in self.store.activities.linked_to(
                self.config.activities_link_field_id, record.id
            )
            if activity_in_range(activity, self.date_range, self.config)
        ]
        return ObjectiveNode(
            **self._identity(HierarchyLevel.OBJECTIVE, record),
            children=tuple(self.activity(activity) for activity in activities),
        )

    def activity(self, record: Record) -> ActivityNode:
        identity = self._identity(HierarchyLevel.ACTIVITY, record)
        if self.board_plan:
            return BoardPlanActivityNode(
                **identity,
                activity_comments=record.get_cell_value_as_string(
                    self.config.activity_comments_field_id
                ),
                activity_status=record.get_cell_value_as_string(
                    self.config.activity_status_field_id
                ),
            )
        return ActivityNode(**identity, tta_sessions=self.sessions_for(record.id))

    def sessions_for(self, record_id: str) -> tuple[TTASessionRef, ...]:
        """Sessions linked to a record, date-filtered, oldest first.

        Undated sessions (only possible with no active range) sort last.
        """
        sessions = [
            session
            for session in self.store.tta_sessions.linked_to(
                self.config.tta_sessions_link_field_id, record_id
            )
            if session_in_range(session, self.date_range, self.config)
        ]
        sessions.sort(key=lambda session: session_sort_key(session, self.config))
        return tuple(
            TTASessionRef(
                id=session.id,
                summary=session.get_cell_value_as_string(self.config.tta_summary_field_id),
            )
            for session in sessions
        )


def find_board_plan_source(
    level: HierarchyLevel | str,
    record_id: str,
    store: RecordStore,
    config: FieldConfig,
) -> str | None:
    """
    Find the Board Plan workplan source above a record.

    Walks the record's ancestry (through goals and, for objectives, the
    direct source link as well) and returns the id of the first workplan
    source whose name contains "board plan", or None.
    """
    level = parse_level(level)
    if level is None:
        return None

    for source_id in _ancestor_source_ids(level, record_id, store, config):
        source = store.workplan_sources.find(source_id)
        if source is not None and is_board_plan_name(
            record_name(source, store.workplan_sources)
        ):
            return source_id
    return None


def _ancestor_source_ids(
    level: HierarchyLevel,
    record_id: str,
    store: RecordStore,
    config: FieldConfig,
) -> list[str]:
    if level is HierarchyLevel.WORKPLAN_SOURCE:
        return [record_id]

    record = store.find(level, record_id)
    if record is None:
        return []

    if level is HierarchyLevel.GOAL:
        return record.linked_ids(config.goals_link_field_id)

    if level is HierarchyLevel.OBJECTIVE:
        source_ids = record.linked_ids(config.objectives_to_sources_link_field_id)
        for goal_id in record.linked_ids(config.objectives_link_field_id):
            source_ids.extend(
                _ancestor_source_ids(HierarchyLevel.GOAL, goal_id, store, config)
            )
        return source_ids

    source_ids = []
    for objective_id in record.linked_ids(config.activities_link_field_id):
        source_ids.extend(
            _ancestor_source_ids(HierarchyLevel.OBJECTIVE, objective_id, store, config)
        )
    return source_ids


def build_hierarchy(
    top_level: HierarchyLevel | str,
    top_level_id: str,
    bottom_level: HierarchyLevel | str,
    store: RecordStore,
    date_range: DateRange | None = None,
    config: FieldConfig | None = None,
) -> HierarchyNode | None:
    """Build a report scope tree; see ``HierarchyBuilder.build``."""
    return HierarchyBuilder(config).build(
        top_level, top_level_id, bottom_level, store, date_range
    )
