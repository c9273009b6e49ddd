"""
Markdown outline exporter.

Renders the tree the way the report generator walks it: nesting depth
maps 1:1 to heading level (root is ``#``), and whatever a node carries
is listed as bullets beneath its heading.
"""

from __future__ import annotations

from typing import ClassVar

from planscope.exporters.base import BaseExporter, ExporterRegistry
from planscope.hierarchy.tree import BoardPlanActivityNode, BranchNode, HierarchyNode

MAX_HEADING_LEVEL = 6


def render_outline(node: HierarchyNode | None) -> str:
    """Render a tree as a markdown outline; None renders as an empty string."""
    if node is None:
        return ""
    lines: list[str] = []
    _render(node, 1, lines)
    return "\n".join(lines).rstrip() + "\n"


def _render(node: HierarchyNode, depth: int, lines: list[str]) -> None:
    hashes = "#" * min(depth, MAX_HEADING_LEVEL)
    lines.append(f"{hashes} {node.level.label}: {node.record_name}")
    lines.append("")

    bullets = _bullets(node)
    if bullets:
        lines.extend(f"- {bullet}" for bullet in bullets)
        lines.append("")

    for child in node.children:
        _render(child, depth + 1, lines)


def _bullets(node: HierarchyNode) -> list[str]:
    if isinstance(node, BoardPlanActivityNode):
        return [
            f"Status: {node.activity_status or 'Not set'}",
            f"Comments: {node.activity_comments or 'None'}",
        ]

    bullets = [_single_line(s.summary) for s in node.tta_sessions if s.summary]
    if isinstance(node, BranchNode) and node.activity_details:
        for detail in node.activity_details:
            status = detail.status or "Not set"
            text = f"{detail.record_name} ({status})"
            if detail.comments:
                text += f": {_single_line(detail.comments)}"
            bullets.append(text)
    return bullets


def _single_line(text: str) -> str:
    return " ".join(text.split())


@ExporterRegistry.register
class MarkdownExporter(BaseExporter):
    """Export a tree as a markdown outline."""

    EXPORTER_NAME: ClassVar[str] = "markdown"
    FILE_EXTENSION: ClassVar[str] = ".md"

    def render(self, node: HierarchyNode | None) -> str:
        """Render the markdown outline."""
        return render_outline(node)
