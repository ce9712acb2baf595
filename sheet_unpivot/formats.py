"""
Format table for sheet-unpivot.

Cells never embed their formatting.  Each cell carries an opaque
``format_id`` that indexes into a ``FormatTable`` -- an immutable arena of
``Format`` records loaded once from the importer's output.  Many cells share
one format, so this avoids copying large descriptors per cell.

Format attributes are the ones that carry structure in pivot tables:
fill/font colour, bold, italic, borders and indentation.  Anything rarer
goes into ``Format.extra`` and is reachable through ``Format.get()``.

The table also builds *predicates* -- callables from a cell table to a
boolean mask -- which is how callers classify headers by formatting
(see ``behead_if()``).
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from types import MappingProxyType
from typing import Any

import pandas as pd
import yaml
from pydantic import BaseModel, ConfigDict, Field

from sheet_unpivot.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)

CellPredicate = Callable[[pd.DataFrame], pd.Series]


@dataclass(frozen=True)
class Format:
    """Formatting of one or more cells.  Never mutated once loaded."""

    fill_color: str | None = None
    font_color: str | None = None
    bold: bool = False
    italic: bool = False
    border_top: bool = False
    border_bottom: bool = False
    border_left: bool = False
    border_right: bool = False
    indent: int = 0
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def get(self, name: str, default: Any = None) -> Any:
        """Look up a named attribute, falling back to ``extra``."""
        if name != "extra" and name in _FORMAT_FIELDS:
            return getattr(self, name)
        return self.extra.get(name, default)


_FORMAT_FIELDS = frozenset(f.name for f in fields(Format))


class FormatSpec(BaseModel):
    """Validation model for one format entry in a formats YAML file.

    Unknown keys are accepted and kept in ``Format.extra``.
    """

    model_config = ConfigDict(extra="allow")

    fill_color: str | None = None
    font_color: str | None = None
    bold: bool = False
    italic: bool = False
    border_top: bool = False
    border_bottom: bool = False
    border_left: bool = False
    border_right: bool = False
    indent: int = Field(0, ge=0, description="Indentation level")

    def to_format(self) -> Format:
        data = self.model_dump(exclude=set(self.model_extra or {}))
        return Format(**data, extra=MappingProxyType(dict(self.model_extra or {})))


class FormatTable:
    """Immutable arena of formats, indexed by ``format_id`` (0-based)."""

    def __init__(self, formats: Iterable[Format] = ()) -> None:
        self._formats: tuple[Format, ...] = tuple(formats)

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> FormatTable:
        """Build a table from plain dicts, validating each entry."""
        return cls(FormatSpec.model_validate(dict(r)).to_format() for r in records)

    def __getitem__(self, format_id: int) -> Format:
        return self._formats[format_id]

    def __len__(self) -> int:
        return len(self._formats)

    def __iter__(self) -> Iterator[Format]:
        return iter(self._formats)

    def __repr__(self) -> str:
        return f"FormatTable({len(self._formats)} formats)"

    # -- Lookups over a cell table ------------------------------------------

    def attribute(self, cells: pd.DataFrame, name: str, default: Any = None) -> pd.Series:
        """The value of format attribute *name* for every cell.

        Cells with a missing or out-of-range ``format_id`` get *default*.
        """
        lookup = [f.get(name, default) for f in self._formats]

        def _one(format_id: Any) -> Any:
            if pd.isna(format_id) or not 0 <= int(format_id) < len(lookup):
                return default
            return lookup[int(format_id)]

        return cells["format_id"].map(_one).astype(object)

    def mask(self, cells: pd.DataFrame, **attrs: Any) -> pd.Series:
        """Boolean mask of cells whose format matches every ``attr=value``."""
        result = pd.Series(True, index=cells.index)
        for name, expected in attrs.items():
            result &= self.attribute(cells, name).eq(expected)
        return result.astype(bool)

    def predicate(self, **attrs: Any) -> CellPredicate:
        """A reusable predicate for ``behead_if()`` / filtering.

        Example::

            is_bold = formats.predicate(bold=True)
            headers = cells[is_bold(cells)]
        """
        return lambda cells: self.mask(cells, **attrs)


def load_formats(path: str | Path) -> FormatTable:
    """Load a formats YAML file (a list of format mappings).

    Raises:
        FileNotFoundError: If the file does not exist.
        ConfigValidationError: If the file is not a YAML list.
        pydantic.ValidationError: If an entry has invalid attribute values.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Formats file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raw = []
    if not isinstance(raw, list):
        raise ConfigValidationError(
            f"Formats file must contain a list of formats, got {type(raw).__name__}: {path}"
        )
    table = FormatTable.from_records(raw)
    logger.info("Loaded %d formats from %s", len(table), path)
    return table
