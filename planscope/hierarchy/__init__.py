"""
Hierarchy module - builds and shapes report scope trees.

Walks the work-plan link fields from a selected record, filters by date,
and rolls activity data up onto the chosen bottom level.
"""

from planscope.hierarchy.builder import (
    HierarchyBuilder,
    build_hierarchy,
    find_board_plan_source,
)
from planscope.hierarchy.filters import DateRange
from planscope.hierarchy.rollup import roll_up
from planscope.hierarchy.tree import (
    ActivityDetail,
    ActivityNode,
    BoardPlanActivityNode,
    BranchNode,
    GoalNode,
    HierarchyNode,
    ObjectiveNode,
    TTASessionRef,
    WorkplanSourceNode,
)

__all__ = [
    "ActivityDetail",
    "ActivityNode",
    "BoardPlanActivityNode",
    "BranchNode",
    "DateRange",
    "GoalNode",
    "HierarchyBuilder",
    "HierarchyNode",
    "ObjectiveNode",
    "TTASessionRef",
    "WorkplanSourceNode",
    "build_hierarchy",
    "find_board_plan_source",
    "roll_up",
]
