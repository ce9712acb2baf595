"""
Directional resolver for sheet-unpivot.

Given a data cell and a set of header cells, decides which header (if any)
governs the data cell in a compass direction.  See ``directions.py`` for
the direction families.

Resolution rules (data cell at ``(r, c)``):

  N    col == c, row < r            nearest row
  S    col == c, row > r            nearest row
  W    row == r, col < c            nearest col
  E    row == r, col > c            nearest col
  NNW  row < r,  col <= c           max row, then max col
  NNE  row < r,  col >= c           max row, then min col
  SSW  row > r,  col <= c           min row, then max col
  SSE  row > r,  col >= c           min row, then min col
  WNW  col < c,  row <= r           max col, then max row
  WSW  col < c,  row >= r           max col, then min row
  ENE  col > c,  row <= r           min col, then max row
  ESE  col > c,  row >= r           min col, then min row
  ABOVE/BELOW/LEFT/RIGHT            strictly in the half-plane, smallest
                                    squared Euclidean distance, ties to
                                    the smaller row then smaller col

Every rule is strict on at least one axis, so a header at the data cell's
own position is never a candidate.  When nothing qualifies the result is
``None`` -- never an error; callers decide what a missing header means.

Why an index:
  Scanning every header for every data cell is O(data x headers).
  ``HeaderIndex`` buckets headers along the constrained axis once and
  answers each lookup with binary search, so ``enhead()`` over a large
  sheet stays close to O(data x log headers).  The index is never mutated
  after construction and can be shared freely across threads.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field

import numpy as np
import pandas as pd

from sheet_unpivot.cells import Cell, iter_cells
from sheet_unpivot.directions import Direction
from sheet_unpivot.exceptions import UnresolvedHeaderError

logger = logging.getLogger(__name__)

# axis 0 = row, axis 1 = col
#   primary:  (axis, before) -- strict constraint; before=True means "less than"
#   secondary: (before)      -- relaxed constraint on the other axis
_COMPOUND_RULES: dict[Direction, tuple[int, bool, bool]] = {
    Direction.NNW: (0, True, True),
    Direction.NNE: (0, True, False),
    Direction.SSW: (0, False, True),
    Direction.SSE: (0, False, False),
    Direction.WNW: (1, True, True),
    Direction.WSW: (1, True, False),
    Direction.ENE: (1, False, True),
    Direction.ESE: (1, False, False),
}

# cardinal: (axis searched, before)
_CARDINAL_RULES: dict[Direction, tuple[int, bool]] = {
    Direction.N: (0, True),
    Direction.S: (0, False),
    Direction.W: (1, True),
    Direction.E: (1, False),
}


@dataclass
class _Bucket:
    keys: list[int] = field(default_factory=list)
    members: list[int] = field(default_factory=list)


def _bucket(keys: Sequence[int], members: Sequence[int]) -> _Bucket:
    order = sorted(range(len(keys)), key=lambda i: (keys[i], members[i]))
    return _Bucket(keys=[keys[i] for i in order], members=[members[i] for i in order])


def _search(bucket: _Bucket, target: int, before: bool, inclusive: bool) -> int | None:
    """Nearest member of *bucket* before/after *target* (position index)."""
    if before:
        i = (bisect_right if inclusive else bisect_left)(bucket.keys, target) - 1
        if i >= 0:
            return bucket.members[i]
        return None
    i = (bisect_left if inclusive else bisect_right)(bucket.keys, target)
    if i < len(bucket.keys):
        return bucket.members[i]
    return None


class HeaderIndex:
    """Pre-sorted index of header positions for one direction.

    ``lookup()`` returns the *position* (0-based, in the order the headers
    were given) of the governing header, or ``None``.
    """

    def __init__(self, rows: Sequence[int], cols: Sequence[int], direction: str | Direction) -> None:
        self.direction = Direction.parse(direction)
        if len(rows) != len(cols):
            raise ValueError("rows and cols must have the same length")
        self._rows = np.asarray(rows, dtype=np.int64)
        self._cols = np.asarray(cols, dtype=np.int64)
        self._size = len(self._rows)
        self._buckets: dict[int, _Bucket] = {}
        self._levels: list[int] = []

        axes = (self._rows.tolist(), self._cols.tolist())
        if self.direction.is_cardinal:
            axis, _before = _CARDINAL_RULES[self.direction]
            self._build(group_by=axes[1 - axis], keys=axes[axis])
        elif self.direction.is_compound:
            axis, _before, _sec = _COMPOUND_RULES[self.direction]
            self._build(group_by=axes[axis], keys=axes[1 - axis])
            self._levels = sorted(self._buckets)

    @classmethod
    def from_cells(cls, headers: pd.DataFrame, direction: str | Direction) -> HeaderIndex:
        """Index the ``row``/``col`` columns of a header cell table."""
        return cls(headers["row"].tolist(), headers["col"].tolist(), direction)

    def __len__(self) -> int:
        return self._size

    def _build(self, group_by: list[int], keys: list[int]) -> None:
        grouped: dict[int, tuple[list[int], list[int]]] = {}
        for position, (group, key) in enumerate(zip(group_by, keys)):
            bucket_keys, members = grouped.setdefault(group, ([], []))
            bucket_keys.append(key)
            members.append(position)
        self._buckets = {g: _bucket(k, m) for g, (k, m) in grouped.items()}

    # -- Lookups ------------------------------------------------------------

    def lookup(self, row: int, col: int) -> int | None:
        if self._size == 0:
            return None
        if self.direction.is_cardinal:
            return self._lookup_cardinal(row, col)
        if self.direction.is_compound:
            return self._lookup_compound(row, col)
        return self._lookup_proximity(row, col)

    def lookup_many(self, rows: Iterable[int], cols: Iterable[int]) -> list[int | None]:
        return [self.lookup(int(r), int(c)) for r, c in zip(rows, cols)]

    def _lookup_cardinal(self, row: int, col: int) -> int | None:
        axis, before = _CARDINAL_RULES[self.direction]
        point = (row, col)
        bucket = self._buckets.get(point[1 - axis])
        if bucket is None:
            return None
        return _search(bucket, point[axis], before=before, inclusive=False)

    def _lookup_compound(self, row: int, col: int) -> int | None:
        axis, before, secondary_before = _COMPOUND_RULES[self.direction]
        point = (row, col)
        primary, secondary = point[axis], point[1 - axis]
        levels = self._levels

        # walk the primary-axis levels outward from the data cell
        if before:
            candidates = range(bisect_left(levels, primary) - 1, -1, -1)
        else:
            candidates = range(bisect_right(levels, primary), len(levels))
        for i in candidates:
            found = _search(
                self._buckets[levels[i]], secondary, before=secondary_before, inclusive=True
            )
            if found is not None:
                return found
        return None

    def _lookup_proximity(self, row: int, col: int) -> int | None:
        rows, cols = self._rows, self._cols
        if self.direction is Direction.ABOVE:
            mask = rows < row
        elif self.direction is Direction.BELOW:
            mask = rows > row
        elif self.direction is Direction.LEFT:
            mask = cols < col
        else:
            mask = cols > col
        idx = np.flatnonzero(mask)
        if idx.size == 0:
            return None
        distance = (rows[idx] - row) ** 2 + (cols[idx] - col) ** 2
        # lexsort: last key is primary
        order = np.lexsort((cols[idx], rows[idx], distance))
        return int(idx[order[0]])


def resolve(
    data_cell: Cell,
    header_cells: Iterable[Cell] | pd.DataFrame,
    direction: str | Direction,
) -> Cell | None:
    """Find the header cell governing *data_cell* in *direction*.

    Args:
        data_cell: The data cell.
        header_cells: Candidate headers, as ``Cell`` objects or a cell table.
        direction: A ``Direction`` or direction name/alias.

    Returns:
        The governing header ``Cell``, or ``None`` if no header qualifies.
    """
    if isinstance(header_cells, pd.DataFrame):
        headers = list(iter_cells(header_cells))
    else:
        headers = list(header_cells)
    index = HeaderIndex([h.row for h in headers], [h.col for h in headers], direction)
    found = index.lookup(data_cell.row, data_cell.col)
    return None if found is None else headers[found]


# ---------------------------------------------------------------------------
# Reporting unresolved cells
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class UnresolvedHeader:
    """A data cell left without a header for one field."""

    row: int
    col: int
    direction: Direction
    name: str


@dataclass
class ResolutionReport:
    """Collects unresolved-header records across pipeline steps.

    Pass one to ``enhead()`` / ``behead()`` to opt into strict reporting;
    call ``raise_for_unresolved()`` to turn the collection into an error.
    """

    unresolved: list[UnresolvedHeader] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.unresolved)

    def record(self, rows: Iterable[int], cols: Iterable[int], direction: Direction, name: str) -> None:
        self.unresolved.extend(
            UnresolvedHeader(int(r), int(c), direction, name) for r, c in zip(rows, cols)
        )

    def by_field(self) -> dict[str, list[tuple[int, int]]]:
        """Unresolved positions grouped by field name."""
        grouped: dict[str, list[tuple[int, int]]] = {}
        for u in self.unresolved:
            grouped.setdefault(u.name, []).append((u.row, u.col))
        return grouped

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(u.row, u.col, u.direction.value, u.name) for u in self.unresolved],
            columns=["row", "col", "direction", "name"],
        )

    def raise_for_unresolved(self) -> None:
        """Raise ``UnresolvedHeaderError`` if anything was collected."""
        if self.unresolved:
            raise UnresolvedHeaderError(self.unresolved)
