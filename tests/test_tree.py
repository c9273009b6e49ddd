"""Tests for report scope tree nodes and the full wire format."""

from __future__ import annotations

import dataclasses

import pytest

from planscope.core.levels import HierarchyLevel
from planscope.hierarchy.tree import (
    ActivityDetail,
    ActivityNode,
    BoardPlanActivityNode,
    GoalNode,
    HierarchyNode,
    ObjectiveNode,
    TTASessionRef,
    WorkplanSourceNode,
)


# ===================================================================
# Helpers
# ===================================================================


def _make_simple_tree() -> WorkplanSourceNode:
    """Source -> goal -> objective -> two activities."""
    a1 = ActivityNode(
        table_id="tbl_activities",
        record_id="a1",
        record_name="Clinic survey",
        tta_sessions=(TTASessionRef("s1", "Kickoff"),),
    )
    a2 = ActivityNode(table_id="tbl_activities", record_id="a2", record_name="Clinic launch")
    objective = ObjectiveNode(
        table_id="tbl_objectives", record_id="o1", record_name="Open clinics", children=(a1, a2)
    )
    goal = GoalNode(
        table_id="tbl_goals", record_id="g1", record_name="Improve access", children=(objective,)
    )
    return WorkplanSourceNode(
        table_id="tbl_sources", record_id="src1", record_name="Regional Health Plan", children=(goal,)
    )


# ===================================================================
# Node structure
# ===================================================================


class TestHierarchyNode:
    """Tests for node properties and traversal."""

    def test_type_follows_variant(self):
        tree = _make_simple_tree()
        assert tree.type == "workplanSource"
        assert tree.children[0].type == "goal"
        assert tree.find_all(HierarchyLevel.ACTIVITY)[0].type == "activity"

    def test_board_plan_leaf_is_activity(self):
        leaf = BoardPlanActivityNode(table_id="t", record_id="a", record_name="A")
        assert leaf.level is HierarchyLevel.ACTIVITY
        assert isinstance(leaf, ActivityNode)

    def test_is_leaf(self):
        tree = _make_simple_tree()
        assert not tree.is_leaf
        assert tree.find_all(HierarchyLevel.ACTIVITY)[0].is_leaf

    def test_descendant_count(self):
        assert _make_simple_tree().descendant_count == 4

    def test_depth(self):
        assert _make_simple_tree().depth == 4

    def test_iter_nodes_is_preorder(self):
        ids = [node.record_id for node in _make_simple_tree().iter_nodes()]
        assert ids == ["src1", "g1", "o1", "a1", "a2"]

    def test_nodes_are_immutable(self):
        tree = _make_simple_tree()
        with pytest.raises(dataclasses.FrozenInstanceError):
            tree.record_name = "Changed"

    def test_with_children_returns_copy(self):
        tree = _make_simple_tree()
        pruned = tree.with_children(())
        assert pruned.is_leaf
        assert not tree.is_leaf
        assert pruned.record_id == tree.record_id

    def test_repr(self):
        text = repr(_make_simple_tree())
        assert text.startswith("<WorkplanSourceNode src1")
        assert "children=1" in text


# ===================================================================
# Wire format
# ===================================================================


class TestWireFormat:
    """Tests for to_dict / from_dict."""

    def test_to_dict_keys(self):
        data = _make_simple_tree().to_dict()
        assert list(data) == ["tableId", "recordId", "type", "recordName", "ttaSessions", "children"]

    def test_activity_sessions_serialized(self):
        data = _make_simple_tree().to_dict()
        activity = data["children"][0]["children"][0]["children"][0]
        assert activity["ttaSessions"] == [{"id": "s1", "summary": "Kickoff"}]

    def test_board_plan_leaf_fields(self):
        leaf = BoardPlanActivityNode(
            table_id="t",
            record_id="a",
            record_name="Draft policy",
            activity_status="In progress",
            activity_comments="With counsel",
        )
        data = leaf.to_dict()
        assert data["activityStatus"] == "In progress"
        assert data["activityComments"] == "With counsel"
        assert data["ttaSessions"] == []

    def test_activity_details_only_when_set(self):
        plain = ObjectiveNode(table_id="t", record_id="o", record_name="O")
        assert "activityDetails" not in plain.to_dict()

        detailed = dataclasses.replace(
            plain, activity_details=(ActivityDetail("Draft policy", "With counsel", "Done"),)
        )
        assert detailed.to_dict()["activityDetails"] == [
            {"recordName": "Draft policy", "comments": "With counsel", "status": "Done"}
        ]

    def test_roundtrip(self):
        tree = _make_simple_tree()
        assert HierarchyNode.from_dict(tree.to_dict()) == tree

    def test_roundtrip_board_plan(self):
        leaf = BoardPlanActivityNode(table_id="t", record_id="a", record_name="A")
        objective = ObjectiveNode(
            table_id="t2",
            record_id="o",
            record_name="O",
            activity_details=(ActivityDetail("A", "", "Done"),),
            children=(leaf,),
        )
        restored = HierarchyNode.from_dict(objective.to_dict())
        assert restored == objective
        assert isinstance(restored.children[0], BoardPlanActivityNode)

    def test_from_dict_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown node type"):
            HierarchyNode.from_dict({"type": "task", "recordName": "x"})

    def test_from_dict_tolerates_missing_lists(self):
        node = HierarchyNode.from_dict({"type": "goal", "recordName": "G"})
        assert isinstance(node, GoalNode)
        assert node.children == ()
        assert node.tta_sessions == ()
        assert node.activity_details is None

    def test_from_dict_empty_details_same_as_absent(self):
        node = HierarchyNode.from_dict(
            {"type": "objective", "recordName": "O", "activityDetails": []}
        )
        assert node.activity_details is None
        assert node == ObjectiveNode(table_id=None, record_id=None, record_name="O")
        assert "activityDetails" not in node.to_dict()
