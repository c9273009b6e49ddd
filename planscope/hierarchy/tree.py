"""
Hierarchy tree data structures.

A report scope is a tree of immutable nodes, one variant per record
kind. The variant decides which optional report fields are legal:

- ``WorkplanSourceNode`` / ``GoalNode`` / ``ObjectiveNode`` may carry
  rolled-up ``activity_details`` when they sit at a Board Plan bottom level
- ``ActivityNode`` carries T/TA sessions
- ``BoardPlanActivityNode`` carries activity status and comments instead

``to_dict``/``from_dict`` implement the full wire format consumed by the
report generator.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from typing import Any, ClassVar

from planscope.core.levels import HierarchyLevel, parse_level


@dataclass(frozen=True)
class TTASessionRef:
    """A T/TA session summary attached to a node.

    Attributes:
        id: Session record id, or None after a compact round trip.
        summary: Summary text prepared for the report generator.
    """

    id: str | None
    summary: str

    def to_dict(self) -> dict[str, Any]:
        """Serialize to wire dictionary."""
        return {"id": self.id, "summary": self.summary}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TTASessionRef:
        """Deserialize from wire dictionary."""
        return cls(id=data.get("id"), summary=data.get("summary", ""))


@dataclass(frozen=True)
class ActivityDetail:
    """Status and comments of one Board Plan activity, rolled up to an ancestor."""

    record_name: str
    comments: str = ""
    status: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialize to wire dictionary."""
        return {
            "recordName": self.record_name,
            "comments": self.comments,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ActivityDetail:
        """Deserialize from wire dictionary."""
        return cls(
            record_name=data.get("recordName", ""),
            comments=data.get("comments", ""),
            status=data.get("status", ""),
        )


@dataclass(frozen=True)
class HierarchyNode:
    """
    A node in the report scope tree.

    Nodes are never mutated once built; rollup and pruning produce new
    nodes with ``dataclasses.replace``.
    """

    level: ClassVar[HierarchyLevel]

    table_id: str | None
    record_id: str | None
    record_name: str
    tta_sessions: tuple[TTASessionRef, ...] = ()
    children: tuple[HierarchyNode, ...] = ()

    @property
    def type(self) -> str:
        """Wire name of this node's level."""
        return self.level.value

    @property
    def is_leaf(self) -> bool:
        """Check if this node has no children."""
        return len(self.children) == 0

    @property
    def descendant_count(self) -> int:
        """Count all descendants (children, grandchildren, etc.)."""
        return sum(1 + child.descendant_count for child in self.children)

    @property
    def depth(self) -> int:
        """Height of the subtree rooted here (a leaf has depth 1)."""
        if not self.children:
            return 1
        return 1 + max(child.depth for child in self.children)

    def iter_nodes(self) -> Iterator[HierarchyNode]:
        """Yield this node and all descendants (pre-order)."""
        yield self
        for child in self.children:
            yield from child.iter_nodes()

    def find_all(self, level: HierarchyLevel) -> list[HierarchyNode]:
        """Get every node of a level in this subtree (pre-order)."""
        return [node for node in self.iter_nodes() if node.level is level]

    def with_children(self, children: tuple[HierarchyNode, ...]) -> HierarchyNode:
        """Return a copy with different children."""
        return replace(self, children=tuple(children))

    def _extra_fields(self) -> dict[str, Any]:
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to the full wire format (recursively)."""
        result: dict[str, Any] = {
            "tableId": self.table_id,
            "recordId": self.record_id,
            "type": self.type,
            "recordName": self.record_name,
            "ttaSessions": [s.to_dict() for s in self.tta_sessions],
        }
        result.update(self._extra_fields())
        result["children"] = [child.to_dict() for child in self.children]
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> HierarchyNode:
        """
        Reconstruct a node tree from the full wire format.

        The variant is chosen from ``type``; activities carrying
        ``activityStatus`` or ``activityComments`` become Board Plan leaves.

        Raises:
            ValueError: If ``type`` is not a known hierarchy level.
        """
        level = parse_level(data.get("type"))
        if level is None:
            raise ValueError(f"Unknown node type: {data.get('type')!r}")

        common: dict[str, Any] = {
            "table_id": data.get("tableId"),
            "record_id": data.get("recordId"),
            "record_name": data.get("recordName", ""),
            "tta_sessions": tuple(
                TTASessionRef.from_dict(s) for s in data.get("ttaSessions") or []
            ),
            "children": tuple(
                HierarchyNode.from_dict(child) for child in data.get("children") or []
            ),
        }

        if level is HierarchyLevel.ACTIVITY:
            if "activityStatus" in data or "activityComments" in data:
                return BoardPlanActivityNode(
                    **common,
                    activity_status=data.get("activityStatus", ""),
                    activity_comments=data.get("activityComments", ""),
                )
            return ActivityNode(**common)

        # An empty list means nothing rolled up, same as an absent key.
        details = data.get("activityDetails")
        return BRANCH_NODE_TYPES[level](
            **common,
            activity_details=(
                tuple(ActivityDetail.from_dict(d) for d in details) if details else None
            ),
        )

    def __repr__(self) -> str:
        """String representation for debugging."""
        name_preview = self.record_name[:40]
        return (
            f"<{type(self).__name__} {self.record_id} '{name_preview}' "
            f"sessions={len(self.tta_sessions)} children={len(self.children)}>"
        )


@dataclass(frozen=True, repr=False)
class BranchNode(HierarchyNode):
    """A non-activity node; may hold rolled-up Board Plan activity details."""

    activity_details: tuple[ActivityDetail, ...] | None = None

    def _extra_fields(self) -> dict[str, Any]:
        if self.activity_details is None:
            return {}
        return {"activityDetails": [d.to_dict() for d in self.activity_details]}


@dataclass(frozen=True, repr=False)
class WorkplanSourceNode(BranchNode):
    level: ClassVar[HierarchyLevel] = HierarchyLevel.WORKPLAN_SOURCE


@dataclass(frozen=True, repr=False)
class GoalNode(BranchNode):
    level: ClassVar[HierarchyLevel] = HierarchyLevel.GOAL


@dataclass(frozen=True, repr=False)
class ObjectiveNode(BranchNode):
    level: ClassVar[HierarchyLevel] = HierarchyLevel.OBJECTIVE


@dataclass(frozen=True, repr=False)
class ActivityNode(HierarchyNode):
    """An activity leaf carrying its date-filtered T/TA sessions."""

    level: ClassVar[HierarchyLevel] = HierarchyLevel.ACTIVITY


@dataclass(frozen=True, repr=False)
class BoardPlanActivityNode(ActivityNode):
    """An activity leaf of a Board Plan report: status and comments, no sessions."""

    activity_status: str = ""
    activity_comments: str = ""

    def _extra_fields(self) -> dict[str, Any]:
        return {
            "activityComments": self.activity_comments,
            "activityStatus": self.activity_status,
        }


BRANCH_NODE_TYPES: dict[HierarchyLevel, type[BranchNode]] = {
    HierarchyLevel.WORKPLAN_SOURCE: WorkplanSourceNode,
    HierarchyLevel.GOAL: GoalNode,
    HierarchyLevel.OBJECTIVE: ObjectiveNode,
}
