"""
Core module - the data source and configuration the report scoper reads.
"""

from planscope.core.config import FieldConfig
from planscope.core.levels import HierarchyLevel, parse_level
from planscope.core.records import Record, RecordStore, RecordTable

__all__ = [
    "FieldConfig",
    "HierarchyLevel",
    "parse_level",
    "Record",
    "RecordStore",
    "RecordTable",
]
