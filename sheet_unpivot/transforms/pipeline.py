"""
Recipe pipeline orchestrator for sheet-unpivot.

Runs the steps of a ``RecipeConfig`` in order over a cell table.  Each
step is one of the pure transforms in this sub-package; the pipeline only
threads the current table from one step to the next and collects
unresolved headers on a shared ``ResolutionReport``.

Step dispatch:

- **behead** / **behead_if**: peel one header level (``behead_if`` builds
  its predicate from the recipe's format attributes and the FormatTable).
- **enhead**: split header cells off by row/column number, then enhead.
- **isolate_sentinels**: move marker values to their own column.
- **drop_blank**: drop blank cells.
- **spatter**: widen the table.

Returns a ``PipelineResult`` with the final table and the report.  In a
strict recipe, any unresolved header raises ``UnresolvedHeaderError``
after the last step.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pandas as pd

from sheet_unpivot.config import (
    BeheadIfStep,
    BeheadStep,
    DropBlankStep,
    EnheadStep,
    IsolateSentinelsStep,
    RecipeConfig,
    SpatterStep,
)
from sheet_unpivot.exceptions import ConfigValidationError
from sheet_unpivot.formats import FormatTable
from sheet_unpivot.resolver import ResolutionReport
from sheet_unpivot.transforms.behead import behead, behead_if
from sheet_unpivot.transforms.enhead import blank_mask, enhead
from sheet_unpivot.transforms.reshape import spatter
from sheet_unpivot.transforms.sentinels import isolate_sentinels

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    """Output of the recipe pipeline.

    Attributes:
        table: The final table (tidy cells, or wide if the recipe spatters).
        report: Unresolved headers collected across all steps.
        fields: Names of the header fields attached, in step order.
    """

    table: pd.DataFrame
    report: ResolutionReport = field(default_factory=ResolutionReport)
    fields: list[str] = field(default_factory=list)


class RecipePipeline:
    """Runs a recipe's steps over a cell table.

    The pipeline is **stateless** -- each call to ``run()`` processes a
    fresh cell table independently.
    """

    def __init__(self, recipe: RecipeConfig, formats: FormatTable | None = None) -> None:
        self.recipe = recipe
        self.formats = formats

    def run(self, cells: pd.DataFrame) -> PipelineResult:
        """Run all steps and return the final table.

        Raises:
            ConfigValidationError: If a ``behead_if`` step runs without a
                format table.
            UnresolvedHeaderError: In a strict recipe, if any data cell
                was left without a header.
        """
        report = ResolutionReport()
        fields: list[str] = []
        table = cells
        total = len(self.recipe.steps)

        for i, step in enumerate(self.recipe.steps, start=1):
            logger.info("Step %d/%d: %s (%d rows)", i, total, _describe(step), len(table))
            table = self._apply(step, table, report)
            if isinstance(step, (BeheadStep, BeheadIfStep, EnheadStep)):
                fields.append(step.name)

        if report.unresolved:
            logger.warning(
                "%d unresolved header(s) across fields %s",
                report.count, sorted(report.by_field()),
            )
        if self.recipe.strict:
            report.raise_for_unresolved()

        return PipelineResult(table=table, report=report, fields=fields)

    def _apply(self, step: object, table: pd.DataFrame, report: ResolutionReport) -> pd.DataFrame:
        if isinstance(step, BeheadStep):
            return behead(
                table, step.direction, step.name,
                values=step.values, drop_blank=step.drop_blank, report=report,
            )
        if isinstance(step, BeheadIfStep):
            if self.formats is None:
                raise ConfigValidationError(
                    f"behead_if step '{step.name}' needs source.formats_path to be set"
                )
            return behead_if(
                table, self.formats.predicate(**step.format), step.direction, step.name,
                values=step.values, drop_blank=step.drop_blank, report=report,
            )
        if isinstance(step, EnheadStep):
            is_header = table["row"].isin(step.header_rows) | table["col"].isin(step.header_cols)
            return enhead(
                table[~is_header], table[is_header], step.direction, step.name,
                values=step.values, drop_blank=step.drop_blank, report=report,
            ).reset_index(drop=True)
        if isinstance(step, IsolateSentinelsStep):
            return isolate_sentinels(table, step.value_field, step.sentinels, into=step.into)
        if isinstance(step, DropBlankStep):
            return table[~blank_mask(table)].reset_index(drop=True)
        if isinstance(step, SpatterStep):
            return spatter(
                table, step.key,
                values=step.values, types=step.types, id_columns=step.id_columns,
            )
        raise TypeError(f"Unknown step type: {type(step).__name__}")


def _describe(step: object) -> str:
    op = getattr(step, "op", type(step).__name__)
    direction = getattr(step, "direction", None)
    name = getattr(step, "name", None)
    if direction is not None:
        return f"{op} {direction.value} -> '{name}'"
    return str(op)
