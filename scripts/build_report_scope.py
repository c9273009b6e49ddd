"""
Build a report scope tree from a snapshot file and print it.

Usage:
    python scripts/build_report_scope.py SNAPSHOT TOP_LEVEL TOP_LEVEL_ID BOTTOM_LEVEL
        [START_DATE] [END_DATE] [FORMAT]

FORMAT is one of the registered exporters (json, compact, markdown);
default json. Dates are ISO (YYYY-MM-DD); pass "" to leave a bound open.

Example:
    python scripts/build_report_scope.py data/scope/snapshot.json \\
        workplanSource rec123 goal 2024-01-01 2024-06-30 markdown
"""

import logging
import sys
from pathlib import Path

# Force UTF-8 for Windows
if sys.platform == "win32":
    sys.stdout.reconfigure(encoding="utf-8")

from planscope.core.records import RecordStore
from planscope.exporters import ExporterRegistry
from planscope.hierarchy import DateRange, HierarchyBuilder
from shared.hardening import ErrorFormatter, InputValidator, ValidationError


def main(argv: list[str]) -> int:
    if len(argv) < 4:
        print(__doc__)
        return 2

    snapshot_path, top_level, top_level_id, bottom_level = argv[:4]
    start = argv[4] if len(argv) > 4 else None
    end = argv[5] if len(argv) > 5 else None
    fmt = argv[6] if len(argv) > 6 else "json"

    if fmt not in ExporterRegistry.available_exporters():
        print(f"Error: unknown format {fmt!r}")
        print(f"Available: {', '.join(ExporterRegistry.available_exporters())}")
        return 2

    validator = InputValidator()
    try:
        store = RecordStore.from_dict(validator.load_snapshot_file(Path(snapshot_path)))
        start_date, end_date = validator.validate_date_range(start, end)
    except ValidationError as exc:
        error = ErrorFormatter().format_request_error(exc)
        print(f"Error [{error.error_code}]: {error.message}")
        print(f"  {error.suggestion}")
        return 1

    root = HierarchyBuilder().build(
        top_level,
        top_level_id,
        bottom_level,
        store,
        DateRange(start=start_date, end=end_date),
    )
    if root is None:
        print(f"No {top_level} record {top_level_id!r} found for this selection.")
        return 1

    print(ExporterRegistry.render(root, fmt))
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    sys.exit(main(sys.argv[1:]))
