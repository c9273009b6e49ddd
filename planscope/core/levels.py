"""Hierarchy levels and their ordering."""

from __future__ import annotations

from enum import Enum
from typing import Any


class HierarchyLevel(str, Enum):
    """The four work-plan record kinds, shallowest first.

    Attributes:
        WORKPLAN_SOURCE: Root of a work plan.
        GOAL: Child of a workplan source.
        OBJECTIVE: Child of a goal, or of a source that has no goals.
        ACTIVITY: Leaf; carries dates and linked T/TA sessions.
    """

    WORKPLAN_SOURCE = "workplanSource"
    GOAL = "goal"
    OBJECTIVE = "objective"
    ACTIVITY = "activity"

    @property
    def depth(self) -> int:
        """Position in the hierarchy (workplanSource = 0)."""
        return _ORDER.index(self)

    @property
    def label(self) -> str:
        """Human-readable label."""
        return _LABELS[self]


_ORDER = [
    HierarchyLevel.WORKPLAN_SOURCE,
    HierarchyLevel.GOAL,
    HierarchyLevel.OBJECTIVE,
    HierarchyLevel.ACTIVITY,
]

_LABELS = {
    HierarchyLevel.WORKPLAN_SOURCE: "Workplan Source",
    HierarchyLevel.GOAL: "Goal",
    HierarchyLevel.OBJECTIVE: "Objective",
    HierarchyLevel.ACTIVITY: "Activity",
}


def parse_level(value: Any) -> HierarchyLevel | None:
    """Coerce a wire value to a HierarchyLevel; unknown values give None."""
    if isinstance(value, HierarchyLevel):
        return value
    try:
        return HierarchyLevel(value)
    except ValueError:
        return None


def is_at_or_below(candidate: HierarchyLevel, top: HierarchyLevel) -> bool:
    """Check whether ``candidate`` is ``top`` or one of its descendant levels."""
    return candidate.depth >= top.depth


def levels_from(top: HierarchyLevel) -> list[HierarchyLevel]:
    """Get ``top`` and every level beneath it, shallowest first."""
    return _ORDER[top.depth:]
