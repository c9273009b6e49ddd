"""Export formats for report scope trees."""

from planscope.exporters.base import BaseExporter, ExporterRegistry
from planscope.exporters.compact import CompactCodec, CompactJSONExporter
from planscope.exporters.json_export import JSONExporter, from_full_dict, to_full_dict
from planscope.exporters.markdown import MarkdownExporter, render_outline
from planscope.exporters.report_request import ReportRequest, ReportStatus

__all__ = [
    "BaseExporter",
    "CompactCodec",
    "CompactJSONExporter",
    "ExporterRegistry",
    "JSONExporter",
    "MarkdownExporter",
    "ReportRequest",
    "ReportStatus",
    "from_full_dict",
    "render_outline",
    "to_full_dict",
]
