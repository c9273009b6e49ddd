"""Boundary hardening utilities for Planscope.

Provides user-friendly error formatting and input validation for the
places where outside data enters the system: snapshot files, HTTP
request fields, and wire-format trees. The hierarchy core itself never
raises for data-shape problems; these helpers guard the edges around it.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any

from planscope.hierarchy.filters import parse_date

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# 1. Error Formatting
# ---------------------------------------------------------------------------


@dataclass
class UserFriendlyError:
    """A structured error designed for end-user consumption.

    Attributes:
        message: Clear description for the user.
        suggestion: Actionable guidance.
        component: Originating subsystem (snapshot, builder, codec).
        error_code: Machine-readable identifier (e.g. "SNAP_006").
        technical_detail: Debugging info for logs only -- never shown to users.
    """

    message: str
    suggestion: str
    component: str
    error_code: str
    technical_detail: str = ""

    def to_dict(self) -> dict[str, str]:
        """Serialize for API responses (excludes technical_detail).

        Returns:
            Dictionary safe for sending to end users.
        """
        return {
            "message": self.message,
            "suggestion": self.suggestion,
            "component": self.component,
            "error_code": self.error_code,
        }


class ErrorFormatter:
    """Convert internal exceptions to user-friendly messages.

    All methods return a ``UserFriendlyError`` and never expose internal
    paths, stack traces, or implementation details to the end user.
    """

    def format_snapshot_error(self, error: Exception) -> UserFriendlyError:
        """Format an error raised while loading a record snapshot.

        Args:
            error: The caught exception.

        Returns:
            User-friendly error with actionable suggestion.
        """
        return self._format(error, component="snapshot", code_prefix="SNAP")

    def format_request_error(self, error: Exception) -> UserFriendlyError:
        """Format an error in a report scope request (selection, dates).

        Args:
            error: The caught exception.

        Returns:
            User-friendly error with actionable suggestion.
        """
        return self._format(error, component="builder", code_prefix="SCOPE")

    def format_codec_error(self, error: Exception) -> UserFriendlyError:
        """Format an error decoding a full or compact tree.

        Args:
            error: The caught exception.

        Returns:
            User-friendly error with actionable suggestion.
        """
        return self._format(error, component="codec", code_prefix="CODEC")

    # ------------------------------------------------------------------

    def _format(
        self,
        error: Exception,
        *,
        component: str,
        code_prefix: str,
    ) -> UserFriendlyError:
        """Shared formatting logic."""
        message, suggestion, code_suffix = _classify_error(error)
        logger.debug("%s error %s_%s: %r", component, code_prefix, code_suffix, error)
        return UserFriendlyError(
            message=message,
            suggestion=suggestion,
            component=component,
            error_code=f"{code_prefix}_{code_suffix}",
            technical_detail=repr(error),
        )


def _classify_error(error: Exception) -> tuple[str, str, str]:
    """Map an exception to (message, suggestion, code_suffix).

    Args:
        error: The caught exception.

    Returns:
        Tuple of user message, suggestion text, and error code suffix.
    """
    if isinstance(error, FileNotFoundError):
        return (
            "A required file could not be found.",
            "Check that the snapshot path is correct and the file exists.",
            "001",
        )
    if isinstance(error, PermissionError):
        return (
            "Permission denied when accessing a resource.",
            "Check file permissions and ensure the application has access.",
            "002",
        )
    if isinstance(error, ValidationError):
        return (
            str(error) or "Invalid input was provided.",
            "Correct the highlighted value and try again.",
            "003",
        )
    if isinstance(error, (KeyError, TypeError)):
        return (
            "The data is missing a required field or has the wrong shape.",
            "Regenerate the data from the source tables and try again.",
            "004",
        )
    if isinstance(error, json.JSONDecodeError):
        return (
            "The data contains invalid JSON.",
            "Verify the content is valid JSON.",
            "006",
        )
    if isinstance(error, ValueError):
        return (
            "Invalid input was provided.",
            "Check the input values and try again.",
            "005",
        )
    return (
        "An unexpected error occurred.",
        "If this keeps happening, please report the issue.",
        "999",
    )


# ---------------------------------------------------------------------------
# 2. Input Validation
# ---------------------------------------------------------------------------

# Characters that could be used for path traversal
_TRAVERSAL_PATTERN = re.compile(r"(\.\.[\\/]|[\\/]\.\.)")
# Null bytes in paths
_NULL_BYTE = re.compile(r"\x00")

SNAPSHOT_TABLES = ("workplan_sources", "goals", "objectives", "activities", "tta_sessions")


class ValidationError(ValueError):
    """Raised when input validation fails."""


class InputValidator:
    """Validate inputs at system boundaries.

    All methods raise ``ValidationError`` on failure unless
    documented otherwise.
    """

    def validate_file_path(
        self,
        path: str | Path,
        *,
        must_exist: bool = True,
        allowed_extensions: tuple[str, ...] | None = (".json",),
        base_directory: Path | None = None,
    ) -> Path:
        """Validate a snapshot file path, preventing traversal attacks.

        Args:
            path: Raw path from user input.
            must_exist: Require the file to exist on disk.
            allowed_extensions: Restrict to these suffixes.
            base_directory: Confine resolved path under this directory.

        Returns:
            Resolved, validated Path.

        Raises:
            ValidationError: On any validation failure.
        """
        raw = str(path)
        self._check_traversal(raw)
        resolved = Path(raw).resolve()

        if base_directory is not None:
            base = base_directory.resolve()
            if not _is_subpath(resolved, base):
                raise ValidationError("Path is outside the allowed directory.")

        if allowed_extensions is not None:
            if resolved.suffix.lower() not in {e.lower() for e in allowed_extensions}:
                allowed = ", ".join(allowed_extensions)
                raise ValidationError(f"File type not allowed. Accepted types: {allowed}")

        if must_exist and not resolved.is_file():
            raise ValidationError("File does not exist.")

        return resolved

    def load_snapshot_file(
        self,
        path: str | Path,
        *,
        base_directory: Path | None = None,
    ) -> dict[str, Any]:
        """Read a snapshot JSON file and check its shape.

        Args:
            path: Path to the snapshot file.
            base_directory: Confine the path under this directory.

        Returns:
            The parsed snapshot dictionary.

        Raises:
            ValidationError: On path, encoding, JSON, or shape errors.
        """
        validated_path = self.validate_file_path(path, base_directory=base_directory)
        try:
            with open(validated_path, encoding="utf-8") as fh:
                data = json.load(fh)
        except UnicodeDecodeError as exc:
            raise ValidationError("Snapshot is not valid UTF-8 text.") from exc
        except json.JSONDecodeError as exc:
            raise ValidationError(f"Invalid JSON on line {exc.lineno}.") from exc

        errors = self.validate_snapshot(data)
        if errors:
            raise ValidationError("; ".join(errors))
        return data

    def validate_snapshot(self, data: Any) -> list[str]:
        """Check that a snapshot has the expected tables and records.

        Missing tables are allowed (they load as empty tables); present
        tables must have an id and records with ids.

        Args:
            data: Parsed snapshot.

        Returns:
            List of error strings. Empty list means valid.
        """
        if not isinstance(data, dict):
            return ["Snapshot is not a JSON object."]

        tables = data.get("tables", {})
        if not isinstance(tables, dict):
            return ["'tables' must be an object."]

        errors: list[str] = []
        for name in SNAPSHOT_TABLES:
            table = tables.get(name)
            if table is None:
                continue
            if not isinstance(table, dict) or not table.get("id"):
                errors.append(f"Table '{name}' must be an object with an 'id'.")
                continue
            for idx, record in enumerate(table.get("records", [])):
                if not isinstance(record, dict) or not record.get("id"):
                    errors.append(f"Table '{name}' record {idx + 1}: missing 'id'.")

        fields = data.get("fields", {})
        if fields is not None and not isinstance(fields, dict):
            errors.append("'fields' must be an object.")
        return errors

    def validate_date_range(
        self,
        start: str | None,
        end: str | None,
    ) -> tuple[date | None, date | None]:
        """Parse and check a user-supplied date range.

        Blank values mean an open bound.

        Args:
            start: ISO start date or empty.
            end: ISO end date or empty.

        Returns:
            Tuple of parsed (start, end) dates.

        Raises:
            ValidationError: If a date cannot be parsed or start is after end.
        """
        parsed: list[date | None] = []
        for label, value in (("Start date", start), ("End date", end)):
            if value is None or not str(value).strip():
                parsed.append(None)
                continue
            when = parse_date(str(value))
            if when is None:
                raise ValidationError(f"{label} is not a valid date: {value!r}.")
            parsed.append(when)

        start_date, end_date = parsed
        if start_date and end_date and start_date > end_date:
            raise ValidationError("Start date must not be after end date.")
        return start_date, end_date

    def sanitize_string(
        self,
        value: str,
        *,
        max_length: int = 200,
    ) -> str:
        """Sanitize a user-provided search string.

        Strips control characters and surrounding whitespace, then truncates.

        Args:
            value: Raw user string.
            max_length: Maximum allowed length after sanitization.

        Returns:
            Cleaned string.
        """
        cleaned = _strip_control_chars(value)
        cleaned = cleaned.strip()
        if len(cleaned) > max_length:
            cleaned = cleaned[:max_length]
        return cleaned

    # ------------------------------------------------------------------

    @staticmethod
    def _check_traversal(raw: str) -> None:
        """Reject paths with traversal sequences or null bytes.

        Raises:
            ValidationError: On dangerous patterns.
        """
        if _NULL_BYTE.search(raw):
            raise ValidationError("Path contains null bytes.")
        if _TRAVERSAL_PATTERN.search(raw):
            raise ValidationError("Path traversal is not allowed.")


def _is_subpath(child: Path, parent: Path) -> bool:
    """Return True when *child* is under *parent*."""
    try:
        child.relative_to(parent)
        return True
    except ValueError:
        return False


def _strip_control_chars(text: str) -> str:
    """Remove ASCII control characters except common whitespace."""
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]", "", text)
