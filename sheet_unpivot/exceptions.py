"""
Custom exception hierarchy for sheet-unpivot.

Why a custom hierarchy:
- Callers can catch structural failures (e.g., AmbiguousWideningError vs
  CardinalityMismatchError) without relying on generic ValueError.
- Every structural error carries the offending ``(row, col)`` positions so
  the caller can go straight to that spot in the source sheet.

Per-cell resolution failures are *not* raised by default: they are
collected on a ``ResolutionReport`` and only surface as
``UnresolvedHeaderError`` when the caller asks for strict behaviour.
"""

from __future__ import annotations

from typing import Any


def _format_positions(positions: list[tuple[int, int]], limit: int = 10) -> str:
    shown = ", ".join(f"({r}, {c})" for r, c in positions[:limit])
    if len(positions) > limit:
        shown += f", ... ({len(positions) - limit} more)"
    return shown


class SheetUnpivotError(Exception):
    """Base exception for all sheet-unpivot errors."""


class CellTableError(SheetUnpivotError):
    """Raised when a cell table is malformed.

    This can happen if:
    - Required columns (``row``, ``col``, ``data_type``, ...) are missing.
    - Two cells share the same ``(row, col)`` position.
    - A position is not a positive integer.
    """


class UnresolvedHeaderError(SheetUnpivotError):
    """Raised in strict mode when data cells have no governing header.

    ``unresolved`` holds the ``UnresolvedHeader`` records that were
    collected, one per data cell and field.
    """

    def __init__(self, unresolved: list[Any]):
        self.unresolved = list(unresolved)
        positions = [(u.row, u.col) for u in self.unresolved]
        fields = sorted({u.name for u in self.unresolved})
        super().__init__(
            f"{len(self.unresolved)} data cell(s) have no header for "
            f"field(s) {fields}: {_format_positions(positions)}"
        )


class AmbiguousWideningError(SheetUnpivotError):
    """Raised when two records map to the same output cell in ``spatter()``.

    Silent overwrite would corrupt data, so this is always fatal.
    """

    def __init__(self, key: Any, positions: list[tuple[int, int]], group: tuple = ()):
        self.key = key
        self.positions = list(positions)
        self.group = group
        super().__init__(
            f"Ambiguous widening: records at {_format_positions(self.positions)} "
            f"both map to column {key!r} for row group {group!r}"
        )


class CardinalityMismatchError(SheetUnpivotError):
    """Raised when ``justify()`` cannot pair header cells with corner cells.

    Either the counts differ, or the requested correspondence (by row or
    column) is ambiguous.
    """

    def __init__(self, message: str, headers: int = 0, corners: int = 0,
                 positions: list[tuple[int, int]] | None = None):
        self.headers = headers
        self.corners = corners
        self.positions = list(positions or [])
        if self.positions:
            message = f"{message}: {_format_positions(self.positions)}"
        super().__init__(message)


class TypeMismatchError(SheetUnpivotError):
    """Raised when a value used as a header name or key has an unusable type.

    For example, a ``spatter()`` key that is a boolean, a date, or missing.
    """

    def __init__(self, message: str, positions: list[tuple[int, int]] | None = None):
        self.positions = list(positions or [])
        if self.positions:
            message = f"{message}: {_format_positions(self.positions)}"
        super().__init__(message)


class ConfigValidationError(SheetUnpivotError):
    """Raised when a recipe YAML fails validation beyond its schema.

    This can happen if:
    - The file is empty, or a formats file is not a list.
    - A ``behead_if`` step runs without a format table.
    - ``output.keep_columns`` names a column the result does not have.
    """


class ExportError(SheetUnpivotError):
    """Raised when the exporter fails to write output files.

    For example, permission errors, disk full, or unsupported format.
    """
