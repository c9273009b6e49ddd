"""
Compact wire format for report scope trees.

Drops identity fields (table, record and session ids) and shortens keys
so a tree fits comfortably in a single text field:

    type -> t, recordName -> n, children -> c,
    ttaSessions -> tta (summaries only), activityDetails -> ad ({n, c, s}),
    activityComments -> ac, activityStatus -> as

``decode(encode(x))`` equals ``x`` with every ``table_id``, ``record_id``
and session ``id`` set to None.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar

from planscope.core.levels import HierarchyLevel, parse_level
from planscope.exporters.base import BaseExporter, ExporterRegistry
from planscope.hierarchy.tree import (
    BRANCH_NODE_TYPES,
    ActivityDetail,
    ActivityNode,
    BoardPlanActivityNode,
    BranchNode,
    HierarchyNode,
    TTASessionRef,
)


class CompactCodec:
    """Encode and decode the compact wire format."""

    @staticmethod
    def encode(node: HierarchyNode | None) -> dict[str, Any] | None:
        """
        Convert a tree to compact form.

        Empty session and detail lists are omitted. Board Plan leaf
        fields are kept whenever the node carries them, even if blank.
        """
        if node is None:
            return None

        compact: dict[str, Any] = {"t": node.type, "n": node.record_name}

        if node.tta_sessions:
            compact["tta"] = [s.summary for s in node.tta_sessions]

        if isinstance(node, BranchNode) and node.activity_details:
            compact["ad"] = [
                {"n": d.record_name, "c": d.comments, "s": d.status}
                for d in node.activity_details
            ]

        if isinstance(node, BoardPlanActivityNode):
            compact["ac"] = node.activity_comments
            compact["as"] = node.activity_status

        compact["c"] = [CompactCodec.encode(child) for child in node.children]
        return compact

    @staticmethod
    def decode(compact: dict[str, Any] | None) -> HierarchyNode | None:
        """
        Restore a tree from compact form.

        Identity fields come back as None.

        Raises:
            ValueError: If a node's ``t`` is not a known hierarchy level.
        """
        if compact is None:
            return None

        level = parse_level(compact.get("t"))
        if level is None:
            raise ValueError(f"Unknown compact node type: {compact.get('t')!r}")

        common: dict[str, Any] = {
            "table_id": None,
            "record_id": None,
            "record_name": compact.get("n", ""),
            "tta_sessions": tuple(
                TTASessionRef(id=None, summary=summary) for summary in compact.get("tta", [])
            ),
            "children": tuple(CompactCodec.decode(child) for child in compact.get("c", [])),
        }

        if level is HierarchyLevel.ACTIVITY:
            if "ac" in compact or "as" in compact:
                return BoardPlanActivityNode(
                    **common,
                    activity_comments=compact.get("ac", ""),
                    activity_status=compact.get("as", ""),
                )
            return ActivityNode(**common)

        details = None
        if compact.get("ad"):
            details = tuple(
                ActivityDetail(record_name=d.get("n", ""), comments=d.get("c", ""), status=d.get("s", ""))
                for d in compact["ad"]
            )
        return BRANCH_NODE_TYPES[level](**common, activity_details=details)

    @staticmethod
    def dumps(node: HierarchyNode | None) -> str:
        """Encode a tree to compact JSON text."""
        return json.dumps(
            CompactCodec.encode(node), separators=(",", ":"), ensure_ascii=False
        )

    @staticmethod
    def loads(text: str) -> HierarchyNode | None:
        """Decode a tree from compact JSON text."""
        return CompactCodec.decode(json.loads(text))


@ExporterRegistry.register
class CompactJSONExporter(BaseExporter):
    """Export a tree as compact JSON."""

    EXPORTER_NAME: ClassVar[str] = "compact"
    FILE_EXTENSION: ClassVar[str] = ".json"

    def render(self, node: HierarchyNode | None) -> str:
        """Render compact JSON."""
        return CompactCodec.dumps(node)
