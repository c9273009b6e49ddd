"""
Rollup of activity data onto bottom-level nodes.

When a report stops above the activity level, the activities beneath
each bottom-level node are summarized onto that node and the subtree is
discarded. Everything here is a pure fold: input trees are never
modified, new nodes are returned.
"""

from __future__ import annotations

from dataclasses import replace

from planscope.core.levels import HierarchyLevel
from planscope.hierarchy.tree import (
    ActivityDetail,
    ActivityNode,
    BoardPlanActivityNode,
    BranchNode,
    HierarchyNode,
    TTASessionRef,
)


def collect_sessions(node: HierarchyNode) -> tuple[TTASessionRef, ...]:
    """
    Collect the T/TA sessions of every activity in a subtree.

    Sessions are deduplicated by id; the first occurrence in pre-order
    wins, so each activity's chronological order is kept.
    """
    collected: dict[str | None, TTASessionRef] = {}
    for descendant in node.iter_nodes():
        if isinstance(descendant, ActivityNode):
            for session in descendant.tta_sessions:
                collected.setdefault(session.id, session)
    return tuple(collected.values())


def collect_activity_details(node: HierarchyNode) -> tuple[ActivityDetail, ...]:
    """Collect status and comments of Board Plan activities in a subtree.

    Activities with neither comments nor status are skipped.
    """
    return tuple(
        ActivityDetail(
            record_name=descendant.record_name,
            comments=descendant.activity_comments,
            status=descendant.activity_status,
        )
        for descendant in node.iter_nodes()
        if isinstance(descendant, BoardPlanActivityNode)
        and (descendant.activity_comments or descendant.activity_status)
    )


def summarize(node: HierarchyNode, board_plan: bool) -> HierarchyNode:
    """
    Roll a node's activity data onto it and drop its subtree.

    Board Plan reports get ``activity_details`` (left as None when there is
    nothing to report); all others get the deduplicated sessions.
    """
    if isinstance(node, ActivityNode):
        return node.with_children(())

    if board_plan and isinstance(node, BranchNode):
        details = collect_activity_details(node)
        return replace(node, activity_details=details or None, children=())

    return replace(node, tta_sessions=collect_sessions(node), children=())


def roll_up(
    node: HierarchyNode,
    bottom_level: HierarchyLevel,
    board_plan: bool = False,
) -> HierarchyNode:
    """
    Apply rollup and bottom-level pruning to a tree.

    Every node of type ``bottom_level`` receives its descendants' data and
    loses its children. Nodes above the bottom level are rebuilt around
    their rolled-up children and carry nothing of their own. With
    ``bottom_level`` set to activity the tree is returned as is.
    """
    if bottom_level is HierarchyLevel.ACTIVITY:
        return node

    if node.level is bottom_level:
        return summarize(node, board_plan)

    if isinstance(node, ActivityNode):
        return node

    return node.with_children(
        tuple(roll_up(child, bottom_level, board_plan) for child in node.children)
    )
