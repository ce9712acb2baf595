"""
Recipe models and YAML I/O for sheet-unpivot.

A *recipe* records how one sheet is unpivoted: where its cell table lives,
the ordered list of steps (behead, enhead, ...) and where the tidy result
goes.  It maps 1:1 to a YAML file such as::

    source:
      cells_path: cells.csv
      formats_path: formats.yaml
    steps:
      - {op: behead, direction: NNW, name: sex}
      - {op: behead, direction: N, name: name}
      - {op: behead, direction: W, name: subject}
    output:
      output_dir: outputs/
      output_format: parquet

Key models:
- RecipeConfig: Top-level recipe (source + steps + output + policy flags).
- SourceConfig: Cell table and optional format table paths.
- Step models: one per operation, discriminated by ``op``.
- OutputConfig: Output directory, format and column selection.

Key functions:
- load_recipe(path) -> RecipeConfig: Load and validate from YAML.
- save_recipe(recipe, path): Serialize to YAML.
- generate_default_recipe(...) -> RecipeConfig: Starter recipe for a sheet
  with a given number of header rows/columns.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, Literal, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from sheet_unpivot.directions import Direction
from sheet_unpivot.exceptions import ConfigValidationError

logger = logging.getLogger(__name__)


class SourceConfig(BaseModel):
    """Input cell table and format table."""

    cells_path: str = Field(..., description="Path to the cell table (CSV or Parquet)")
    formats_path: str | None = Field(
        None, description="Optional formats YAML, indexed by format_id"
    )


class _DirectedStep(BaseModel):
    direction: Direction
    name: str = Field(..., min_length=1, description="Name of the attached column")
    values: str | None = Field(
        None, description="Take header values from this column instead of typed values"
    )
    drop_blank: bool = True

    @field_validator("direction", mode="before")
    @classmethod
    def _parse_direction(cls, value: Any) -> Direction:
        return Direction.parse(value)


class BeheadStep(_DirectedStep):
    op: Literal["behead"]


class BeheadIfStep(_DirectedStep):
    """Behead only cells whose format matches every attribute in ``format``."""

    op: Literal["behead_if"]
    format: dict[str, Any] = Field(..., description="Format attributes to match, e.g. {bold: true}")

    @field_validator("format")
    @classmethod
    def _check_format_not_empty(cls, value: dict[str, Any]) -> dict[str, Any]:
        if not value:
            raise ValueError("behead_if needs at least one format attribute to match")
        return value


class EnheadStep(_DirectedStep):
    """Split off header cells by row/column number and enhead the rest."""

    op: Literal["enhead"]
    header_rows: list[int] = Field(default_factory=list)
    header_cols: list[int] = Field(default_factory=list)

    @model_validator(mode="after")
    def _check_headers_given(self) -> EnheadStep:
        if not self.header_rows and not self.header_cols:
            raise ValueError("enhead step needs header_rows or header_cols")
        return self


class IsolateSentinelsStep(BaseModel):
    op: Literal["isolate_sentinels"]
    value_field: str = "character"
    sentinels: list[Any] = Field(..., min_length=1)
    into: str = "sentinel"


class DropBlankStep(BaseModel):
    """Drop blank cells (usually after all headers are attached)."""

    op: Literal["drop_blank"]


class SpatterStep(BaseModel):
    op: Literal["spatter"]
    key: str
    values: str | None = None
    types: str = "data_type"
    id_columns: list[str] | None = None


Step = Annotated[
    Union[BeheadStep, BeheadIfStep, EnheadStep, IsolateSentinelsStep, DropBlankStep, SpatterStep],
    Field(discriminator="op"),
]


class OutputConfig(BaseModel):
    """Output settings."""

    output_dir: str = Field("outputs/", description="Directory for output files")
    output_format: Literal["csv", "parquet"] = Field("parquet", description="Output format")
    table_name: str = Field("tidy", description="Output file stem")
    keep_columns: list[str] | None = Field(
        None, description="If set, only these columns are written (in this order)"
    )


class RecipeConfig(BaseModel):
    """Top-level recipe for sheet-unpivot.

    ``strict`` turns unresolved headers into an error at the end of the
    run.  ``allow_proximity`` set to ``False`` rejects the best-effort
    ABOVE/BELOW/LEFT/RIGHT directions, for sheets with several header
    regions where nearest-by-distance is known to be wrong.
    """

    source: SourceConfig
    steps: list[Step] = Field(default_factory=list)
    output: OutputConfig = Field(default_factory=OutputConfig)
    strict: bool = False
    allow_proximity: bool = True

    @model_validator(mode="after")
    def _check_proximity_allowed(self) -> RecipeConfig:
        if self.allow_proximity:
            return self
        for i, step in enumerate(self.steps, start=1):
            direction = getattr(step, "direction", None)
            if direction is not None and direction.is_proximity:
                raise ValueError(
                    f"Step {i} ({step.op}) uses proximity direction {direction.value} "
                    "but allow_proximity is false. Use a compound direction or justify()."
                )
        return self


def load_recipe(path: str | Path) -> RecipeConfig:
    """Load and validate a recipe YAML into a RecipeConfig model.

    Raises:
        FileNotFoundError: If the recipe file does not exist.
        ConfigValidationError: If the file is empty.
        pydantic.ValidationError: If the YAML content fails schema validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Recipe file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    if raw is None:
        raise ConfigValidationError(f"Recipe file is empty: {path}")
    logger.info("Loaded recipe from %s", path)
    return RecipeConfig.model_validate(raw)


def save_recipe(recipe: RecipeConfig, path: str | Path) -> None:
    """Serialize a RecipeConfig to YAML with a header comment."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = recipe.model_dump(mode="json", exclude_none=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write("# sheet-unpivot recipe\n")
        f.write("# Steps run top to bottom; edit directions and names to fit the sheet.\n\n")
        yaml.dump(
            data,
            f,
            allow_unicode=True,
            default_flow_style=False,
            sort_keys=False,
        )
    logger.info("Saved recipe to %s", path)


def generate_default_recipe(
    cells_path: str,
    header_rows: int = 1,
    header_cols: int = 1,
    output_dir: str = "outputs/",
    formats_path: str | None = None,
) -> RecipeConfig:
    """Build a starter recipe for a sheet with simple stacked headers.

    Column-header rows are beheaded top-down with ``NNW`` (spanning
    headers written in their left-most cell) except the innermost, which
    uses ``N``.  Row-header columns likewise use ``WNW`` then ``W``.
    Fields are named ``col_header_1``, ``row_header_1``, ... for the user
    to rename.
    """
    steps: list[BeheadStep] = []
    for i in range(1, header_rows + 1):
        direction = Direction.N if i == header_rows else Direction.NNW
        steps.append(BeheadStep(op="behead", direction=direction, name=f"col_header_{i}"))
    for i in range(1, header_cols + 1):
        direction = Direction.W if i == header_cols else Direction.WNW
        steps.append(BeheadStep(op="behead", direction=direction, name=f"row_header_{i}"))

    return RecipeConfig(
        source=SourceConfig(cells_path=cells_path, formats_path=formats_path),
        steps=steps,
        output=OutputConfig(output_dir=output_dir),
    )
