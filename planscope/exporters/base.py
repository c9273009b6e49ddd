"""
Base exporter class and registry.

Exporters render a report scope tree into one of the output formats
(full JSON, compact JSON, markdown outline) and register themselves
with the ExporterRegistry by name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import ClassVar

from planscope.hierarchy.tree import HierarchyNode


class BaseExporter(ABC):
    """
    Abstract base class for report scope exporters.

    A None tree (selected record no longer exists) must render to a
    value the consumer can tell apart from an empty tree.
    """

    EXPORTER_NAME: ClassVar[str] = "base"
    FILE_EXTENSION: ClassVar[str] = ""

    @abstractmethod
    def render(self, node: HierarchyNode | None) -> str:
        """
        Render a tree to text.

        Args:
            node: Root of the tree, or None

        Returns:
            Rendered text
        """

    def export(self, node: HierarchyNode | None, path: Path) -> Path:
        """
        Render a tree and write it to a file.

        Args:
            node: Root of the tree, or None
            path: Output file path

        Returns:
            Path to exported file
        """
        path = self._ensure_extension(Path(path))
        with open(path, "w", encoding="utf-8") as f:
            f.write(self.render(node))
        return path

    def _ensure_extension(self, path: Path) -> Path:
        """Ensure the path has the correct extension."""
        if path.suffix.lower() != self.FILE_EXTENSION.lower():
            return path.with_suffix(self.FILE_EXTENSION)
        return path


class ExporterRegistry:
    """Registry of available exporters."""

    _exporters: ClassVar[dict[str, type[BaseExporter]]] = {}

    @classmethod
    def register(cls, exporter_class: type[BaseExporter]) -> type[BaseExporter]:
        """Register an exporter class."""
        cls._exporters[exporter_class.EXPORTER_NAME] = exporter_class
        return exporter_class

    @classmethod
    def get_exporter(cls, name: str) -> BaseExporter | None:
        """Get an exporter by name."""
        exporter_class = cls._exporters.get(name)
        if exporter_class:
            return exporter_class()
        return None

    @classmethod
    def available_exporters(cls) -> list[str]:
        """Get list of available exporter names."""
        return list(cls._exporters.keys())

    @classmethod
    def render(cls, node: HierarchyNode | None, format: str) -> str:
        """Render a tree using the specified format."""
        exporter = cls.get_exporter(format)
        if exporter is None:
            available = ", ".join(cls.available_exporters())
            raise ValueError(f"Unknown export format: {format}. Available: {available}")
        return exporter.render(node)
