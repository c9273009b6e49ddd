"""Scope selection helpers: level options, record search, session preview."""

from planscope.selection.options import (
    LevelOption,
    RecordOption,
    bottom_level_options,
    fuzzy_score,
    preview_sessions,
    relevant_activity_ids,
    search_records,
    source_has_goals,
)

__all__ = [
    "LevelOption",
    "RecordOption",
    "bottom_level_options",
    "fuzzy_score",
    "preview_sessions",
    "relevant_activity_ids",
    "search_records",
    "source_has_goals",
]
