"""Tests for HierarchyBuilder against the sample snapshot."""

from __future__ import annotations

import logging
from datetime import date

import pytest

from planscope.core.config import FieldConfig
from planscope.core.levels import HierarchyLevel
from planscope.hierarchy.builder import (
    HierarchyBuilder,
    build_hierarchy,
    find_board_plan_source,
)
from planscope.hierarchy.filters import DateRange
from planscope.hierarchy.tree import (
    ActivityDetail,
    ActivityNode,
    BoardPlanActivityNode,
    GoalNode,
    ObjectiveNode,
    WorkplanSourceNode,
)

Q1 = DateRange(start=date(2024, 1, 1), end=date(2024, 3, 31))


def _ids(nodes) -> list[str]:
    return [node.record_id for node in nodes]


def _session_ids(node) -> list[str]:
    return [session.id for session in node.tta_sessions]


# ===================================================================
# Full trees
# ===================================================================


class TestFullTree:
    """Trees built down to the activity level."""

    def test_structure_follows_links(self, store):
        root = build_hierarchy("workplanSource", "src1", "activity", store)
        assert isinstance(root, WorkplanSourceNode)
        assert _ids(root.children) == ["g1", "g2"]
        assert _ids(root.children[0].children) == ["o1", "o2"]
        assert _ids(root.children[0].children[0].children) == ["a1", "a2"]

    def test_identity_fields(self, store):
        root = build_hierarchy("workplanSource", "src1", "activity", store)
        assert root.table_id == "tbl_sources"
        assert root.record_name == "Regional Health Plan"
        goal = root.children[1]
        assert goal.table_id == "tbl_goals"
        assert goal.record_name == "Expand outreach"

    def test_activity_sessions_sorted_undated_last(self, store):
        root = build_hierarchy("objective", "o1", "activity", store)
        a1 = root.children[0]
        assert _session_ids(a1) == ["s2", "s1", "s5"]
        assert a1.tta_sessions[0].summary == "Survey design"

    def test_only_activities_carry_sessions(self, store):
        root = build_hierarchy("workplanSource", "src1", "activity", store)
        for node in root.iter_nodes():
            if not isinstance(node, ActivityNode):
                assert node.tta_sessions == ()

    def test_shared_session_listed_under_each_activity(self, store):
        # s2 links to both a1 and a3, and appears under each.
        root = build_hierarchy("goal", "g1", "activity", store)
        a1 = root.children[0].children[0]
        a3 = root.children[1].children[0]
        assert "s2" in _session_ids(a1)
        assert "s2" in _session_ids(a3)

    def test_same_day_sessions_in_time_order(self, same_day_store):
        root = build_hierarchy("activity", "a4", "activity", same_day_store)
        assert _session_ids(root) == ["early", "late"]

    def test_same_day_order_survives_rollup(self, same_day_store):
        root = build_hierarchy("goal", "g2", "goal", same_day_store)
        assert _session_ids(root) == ["early", "late"]

    def test_builder_uses_store_config_by_default(self, store):
        assert HierarchyBuilder().build("goal", "g1", "activity", store) is not None

    def test_explicit_config_wins(self, store):
        root = HierarchyBuilder(FieldConfig()).build("goal", "g1", "activity", store)
        assert root.children == ()


# ===================================================================
# Bottom level and rollup
# ===================================================================


class TestBottomLevel:
    """Pruning at the requested bottom level."""

    def test_goal_bottom_rolls_up_sessions(self, store):
        root = build_hierarchy("workplanSource", "src1", "goal", store)
        g1, g2 = root.children
        assert g1.is_leaf and g2.is_leaf
        assert _session_ids(g1) == ["s2", "s1", "s5", "s3", "s4"]
        assert g2.tta_sessions == ()

    def test_bottom_equal_to_top(self, store):
        root = build_hierarchy("goal", "g1", "goal", store)
        assert isinstance(root, GoalNode)
        assert root.is_leaf
        assert len(root.tta_sessions) == 5

    def test_no_nodes_below_bottom_level(self, store):
        root = build_hierarchy("workplanSource", "src1", "objective", store)
        assert root.find_all(HierarchyLevel.ACTIVITY) == []
        assert all(o.is_leaf for o in root.find_all(HierarchyLevel.OBJECTIVE))

    def test_bottom_above_top_is_clamped(self, store, caplog):
        with caplog.at_level(logging.WARNING, logger="planscope.hierarchy.builder"):
            root = build_hierarchy("objective", "o1", "goal", store)
        assert isinstance(root, ObjectiveNode)
        assert root.is_leaf
        assert _session_ids(root) == ["s2", "s1", "s5", "s3"]
        assert "above top level" in caplog.text

    def test_unknown_bottom_level(self, store):
        assert build_hierarchy("goal", "g1", "task", store) is None


# ===================================================================
# Date range
# ===================================================================


class TestDateRange:
    """Activity and session filtering."""

    def test_activities_filtered_by_overlap(self, store):
        root = build_hierarchy("workplanSource", "src1", "activity", store, Q1)
        assert _ids(root.find_all(HierarchyLevel.ACTIVITY)) == ["a1", "a3"]

    def test_undated_activity_dropped_when_range_set(self, store):
        root = build_hierarchy("goal", "g2", "activity", store, Q1)
        assert root.children[0].children == ()

    def test_undated_activity_kept_without_range(self, store):
        root = build_hierarchy("goal", "g2", "activity", store)
        assert _ids(root.children[0].children) == ["a4"]

    def test_sessions_filtered_by_date(self, store):
        root = build_hierarchy("activity", "a1", "activity", store, Q1)
        assert _session_ids(root) == ["s2", "s1"]

    def test_rollup_respects_range(self, store):
        root = build_hierarchy("workplanSource", "src1", "goal", store, Q1)
        assert _session_ids(root.children[0]) == ["s2", "s1", "s4"]

    def test_branches_kept_when_empty(self, store):
        root = build_hierarchy("workplanSource", "src1", "objective", store, Q1)
        assert _ids(root.find_all(HierarchyLevel.OBJECTIVE)) == ["o1", "o2", "o3"]


# ===================================================================
# Skip-level sources
# ===================================================================


class TestSkipLevel:
    """Sources without goals link objectives directly."""

    def test_objectives_under_source(self, store):
        root = build_hierarchy("workplanSource", "src2", "activity", store)
        assert root.find_all(HierarchyLevel.GOAL) == []
        assert _ids(root.children) == ["o4"]
        assert _ids(root.children[0].children) == ["a5"]

    def test_objective_bottom(self, store):
        root = build_hierarchy("workplanSource", "src2", "objective", store)
        assert _session_ids(root.children[0]) == ["s6"]

    def test_goal_bottom_leaves_tree_unpruned(self, store, caplog):
        with caplog.at_level(logging.WARNING, logger="planscope.hierarchy.builder"):
            root = build_hierarchy("workplanSource", "src2", "goal", store)
        assert _ids(root.find_all(HierarchyLevel.ACTIVITY)) == ["a5"]
        assert "No goal nodes" in caplog.text


# ===================================================================
# Board Plan
# ===================================================================


class TestBoardPlan:
    """Sources named "Board Plan" carry status and comments."""

    def test_leaves_are_board_plan_activities(self, store):
        root = build_hierarchy("workplanSource", "src3", "activity", store)
        leaves = root.find_all(HierarchyLevel.ACTIVITY)
        assert all(isinstance(leaf, BoardPlanActivityNode) for leaf in leaves)
        draft = leaves[0]
        assert draft.activity_status == "In progress"
        assert draft.activity_comments == "Drafting with counsel"
        assert draft.tta_sessions == ()

    def test_blank_fields_are_empty_strings(self, store):
        root = build_hierarchy("objective", "o5", "activity", store)
        retreat = root.children[1]
        assert retreat.activity_status == ""
        assert retreat.activity_comments == ""

    def test_objective_bottom_rolls_up_details(self, store):
        root = build_hierarchy("workplanSource", "src3", "objective", store)
        objective = root.children[0].children[0]
        assert objective.is_leaf
        assert objective.activity_details == (
            ActivityDetail("Draft policy", "Drafting with counsel", "In progress"),
        )
        assert objective.tta_sessions == ()

    def test_detected_from_activity_ancestry(self, store):
        root = build_hierarchy("activity", "a6", "activity", store)
        assert isinstance(root, BoardPlanActivityNode)

    def test_not_board_plan(self, store):
        root = build_hierarchy("activity", "a1", "activity", store)
        assert type(root) is ActivityNode

    @pytest.mark.parametrize(
        "level, record_id, expected",
        [
            ("workplanSource", "src3", "src3"),
            ("goal", "g3", "src3"),
            ("objective", "o5", "src3"),
            ("activity", "a7", "src3"),
            ("objective", "o4", None),
            ("goal", "missing", None),
            ("bogus", "src3", None),
        ],
    )
    def test_find_board_plan_source(self, store, field_config, level, record_id, expected):
        assert find_board_plan_source(level, record_id, store, field_config) == expected


# ===================================================================
# Missing selections
# ===================================================================


class TestMissingSelection:
    """Deleted records and unknown levels give None, not errors."""

    def test_missing_record(self, store):
        assert build_hierarchy("goal", "deleted", "activity", store) is None

    def test_unknown_top_level(self, store):
        assert build_hierarchy("program", "g1", "activity", store) is None

    def test_activity_outside_range(self, store):
        assert build_hierarchy("activity", "a2", "activity", store, Q1) is None

    def test_activity_top_is_single_leaf(self, store):
        root = build_hierarchy("activity", "a2", "activity", store)
        assert root.is_leaf
        assert _session_ids(root) == ["s3"]

    def test_incomplete_config_logs_warning(self, store, caplog):
        config = FieldConfig(
            goals_link_field_id="fld_goal_source",
            objectives_link_field_id="fld_obj_goal",
            activities_link_field_id="fld_act_obj",
        )
        with caplog.at_level(logging.WARNING, logger="planscope.hierarchy.builder"):
            root = build_hierarchy("goal", "g1", "activity", store, config=config)
        assert "tta_date_field_id" in caplog.text
        assert root.children[0].children[0].tta_sessions == ()


# ===================================================================
# Repeat builds
# ===================================================================


class TestRepeatBuild:
    """The same selection over the same snapshot builds the same tree."""

    @pytest.mark.parametrize(
        "top, record_id, bottom",
        [
            ("workplanSource", "src1", "goal"),
            ("workplanSource", "src1", "objective"),
            ("workplanSource", "src3", "objective"),
            ("goal", "g3", "goal"),
        ],
    )
    def test_repeat_build_is_identical(self, store, top, record_id, bottom):
        first = build_hierarchy(top, record_id, bottom, store, Q1)
        second = build_hierarchy(top, record_id, bottom, store, Q1)
        assert first is not None
        assert first == second
        assert first.to_dict() == second.to_dict()
