"""
Full-form JSON exporter.

Writes the tree exactly as the report generator reads it; a missing
selection is written as ``null``.
"""

from __future__ import annotations

import json
from typing import Any, ClassVar

from planscope.exporters.base import BaseExporter, ExporterRegistry
from planscope.hierarchy.tree import HierarchyNode


def to_full_dict(node: HierarchyNode | None) -> dict[str, Any] | None:
    """Convert a tree to the full wire form (None stays None)."""
    return node.to_dict() if node is not None else None


def from_full_dict(data: dict[str, Any] | None) -> HierarchyNode | None:
    """Restore a tree from the full wire form (None stays None)."""
    return HierarchyNode.from_dict(data) if data is not None else None


@ExporterRegistry.register
class JSONExporter(BaseExporter):
    """Export a tree as indented full-form JSON."""

    EXPORTER_NAME: ClassVar[str] = "json"
    FILE_EXTENSION: ClassVar[str] = ".json"

    def __init__(self, indent: int | None = 2) -> None:
        self.indent = indent

    def render(self, node: HierarchyNode | None) -> str:
        """Render full-form JSON."""
        return json.dumps(to_full_dict(node), indent=self.indent, ensure_ascii=False)
