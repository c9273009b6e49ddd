"""Date-range and naming rules shared by the hierarchy builder.

Activities and T/TA sessions are filtered differently:

- an activity passes when its [start, end] span overlaps the range, and is
  dropped outright if either of its dates is missing while a range is set
- a session passes when its single date falls inside the range
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any

from planscope.core.config import FieldConfig
from planscope.core.records import Record, RecordTable

BOARD_PLAN_MARKER = "board plan"
UNKNOWN_NAME = "Unknown"

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class DateRange:
    """An optional [start, end] date filter; either bound may be open.

    Args:
        start: Inclusive lower bound, or None.
        end: Inclusive upper bound, or None.
    """

    start: date | None = None
    end: date | None = None

    @property
    def is_active(self) -> bool:
        """True when at least one bound is set."""
        return self.start is not None or self.end is not None

    def contains(self, value: date) -> bool:
        """Check a single date against both bounds."""
        if self.start is not None and value < self.start:
            return False
        if self.end is not None and value > self.end:
            return False
        return True

    def overlaps(self, start: date, end: date) -> bool:
        """Check whether the span [start, end] overlaps this range."""
        if self.start is not None and end < self.start:
            return False
        if self.end is not None and start > self.end:
            return False
        return True

    @classmethod
    def from_strings(cls, start: str | None = None, end: str | None = None) -> DateRange:
        """Build a range from ISO strings; blank strings mean an open bound."""
        return cls(start=parse_date(start), end=parse_date(end))

    def to_dict(self) -> dict[str, str | None]:
        """Serialize to ISO strings."""
        return {
            "start_date": self.start.isoformat() if self.start else None,
            "end_date": self.end.isoformat() if self.end else None,
        }


def parse_timestamp(value: Any) -> datetime | None:
    """Parse a platform date value to an aware UTC datetime.

    Accepts ``date``/``datetime`` objects and ISO date or datetime strings
    (a trailing ``Z`` is allowed). Naive datetimes are taken as UTC and
    plain dates sit at midnight. Anything unparseable is treated as missing.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    if isinstance(value, date):
        return _midnight(value)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        if "T" in text or " " in text:
            return _as_utc(datetime.fromisoformat(text))
        return _midnight(date.fromisoformat(text))
    except ValueError:
        return None


def parse_date(value: Any) -> date | None:
    """Parse a platform date value to its UTC calendar date."""
    when = parse_timestamp(value)
    return when.date() if when is not None else None


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _midnight(value: date) -> datetime:
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def activity_in_range(record: Record, date_range: DateRange | None, config: FieldConfig) -> bool:
    """
    Check whether an activity's span overlaps the date range.

    With no active range every activity passes. Otherwise both the start
    and end dates must be present and the spans must overlap.
    """
    if date_range is None or not date_range.is_active:
        return True

    start = parse_date(record.get_cell_value(config.activities_start_date_field_id))
    end = parse_date(record.get_cell_value(config.activities_end_date_field_id))
    if start is None or end is None:
        return False

    return date_range.overlaps(start, end)


def session_date(record: Record, config: FieldConfig) -> date | None:
    """Get a T/TA session's date, or None if absent or unconfigured."""
    return parse_date(record.get_cell_value(config.tta_date_field_id))


def session_sort_key(record: Record, config: FieldConfig) -> tuple[bool, datetime]:
    """Sort key putting T/TA sessions in time order; undated sessions last.

    Dates are compared at full timestamp precision, so two sessions on the
    same day keep their time order.
    """
    when = parse_timestamp(record.get_cell_value(config.tta_date_field_id))
    return (when is None, when or _EARLIEST)


def session_in_range(record: Record, date_range: DateRange | None, config: FieldConfig) -> bool:
    """Check whether a T/TA session's date falls inside the date range."""
    if date_range is None or not date_range.is_active:
        return True

    when = session_date(record, config)
    if when is None:
        return False
    return date_range.contains(when)


def record_name(record: Record, table: RecordTable) -> str:
    """
    Resolve a record's display name.

    Order: stored name, then the primary field as text, then "Unknown".
    """
    if record.name:
        return record.name
    return record.get_cell_value_as_string(table.primary_field_id) or UNKNOWN_NAME


def is_board_plan_name(name: str | None) -> bool:
    """Check whether a workplan source name marks a Board Plan."""
    return BOARD_PLAN_MARKER in (name or "").lower()
