"""Report Request payloads.

A report request is the record the summarization job picks up: the
serialized tree plus the date range, created with status "New". Creating
the record and polling it are the host platform's business; this module
only prepares the field values.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from planscope.exporters.json_export import to_full_dict
from planscope.hierarchy.filters import DateRange
from planscope.hierarchy.tree import HierarchyNode

HIERARCHY_FIELD = "Hierarchical Records"
START_DATE_FIELD = "Start Date"
END_DATE_FIELD = "End Date"
STATUS_FIELD = "Status"


class ReportStatus(str, Enum):
    """Lifecycle status of a report request."""

    NEW = "New"
    READY = "Ready"
    ERROR = "Error"


@dataclass
class ReportRequest:
    """A report request about to be created.

    Attributes:
        hierarchy: Built tree, or None when the selection no longer exists.
        date_range: Range the tree was filtered with.
        status: Initial status.
    """

    hierarchy: HierarchyNode | None
    date_range: DateRange
    status: ReportStatus = ReportStatus.NEW

    def to_fields(self) -> dict[str, Any]:
        """Field values for the Report Requests table."""
        dates = self.date_range.to_dict()
        return {
            HIERARCHY_FIELD: json.dumps(to_full_dict(self.hierarchy), ensure_ascii=False),
            START_DATE_FIELD: dates["start_date"] or "",
            END_DATE_FIELD: dates["end_date"] or "",
            STATUS_FIELD: {"name": self.status.value},
        }
