"""
Unit tests for recipe models and YAML I/O (sheet_unpivot.config).
"""

from __future__ import annotations

import pytest
import yaml
from pydantic import ValidationError

from sheet_unpivot.config import (
    BeheadIfStep,
    BeheadStep,
    EnheadStep,
    RecipeConfig,
    SpatterStep,
    generate_default_recipe,
    load_recipe,
    save_recipe,
)
from sheet_unpivot.directions import Direction
from sheet_unpivot.exceptions import ConfigValidationError


def _recipe(**overrides) -> dict:
    raw = {
        "source": {"cells_path": "cells.csv"},
        "steps": [
            {"op": "behead", "direction": "NNW", "name": "sex"},
            {"op": "behead", "direction": "up", "name": "name"},
            {"op": "behead", "direction": "left", "name": "subject"},
        ],
    }
    raw.update(overrides)
    return raw


# ---------------------------------------------------------------------------
# Model validation
# ---------------------------------------------------------------------------

class TestRecipeConfig:
    """Tests for RecipeConfig and the step models."""

    def test_defaults(self):
        recipe = RecipeConfig.model_validate(_recipe())
        assert recipe.strict is False
        assert recipe.allow_proximity is True
        assert recipe.output.output_format == "parquet"
        assert recipe.output.output_dir == "outputs/"

    def test_steps_discriminated_by_op(self):
        recipe = RecipeConfig.model_validate(_recipe())
        assert all(isinstance(s, BeheadStep) for s in recipe.steps)

    def test_direction_aliases(self):
        recipe = RecipeConfig.model_validate(_recipe())
        assert [s.direction for s in recipe.steps] == [Direction.NNW, Direction.N, Direction.W]

    def test_unknown_direction(self):
        raw = _recipe(steps=[{"op": "behead", "direction": "NW", "name": "x"}])
        with pytest.raises(ValidationError, match="Unknown direction"):
            RecipeConfig.model_validate(raw)

    def test_unknown_op(self):
        raw = _recipe(steps=[{"op": "pivot", "key": "x"}])
        with pytest.raises(ValidationError):
            RecipeConfig.model_validate(raw)

    def test_mixed_steps(self):
        raw = _recipe(steps=[
            {"op": "behead_if", "direction": "WNW", "name": "group", "format": {"bold": True}},
            {"op": "enhead", "direction": "N", "name": "year", "header_rows": [1]},
            {"op": "isolate_sentinels", "sentinels": ["..C"]},
            {"op": "drop_blank"},
            {"op": "spatter", "key": "year"},
        ])
        recipe = RecipeConfig.model_validate(raw)
        assert isinstance(recipe.steps[0], BeheadIfStep)
        assert isinstance(recipe.steps[1], EnheadStep)
        assert recipe.steps[2].value_field == "character"
        assert isinstance(recipe.steps[4], SpatterStep)

    def test_enhead_needs_header_positions(self):
        raw = _recipe(steps=[{"op": "enhead", "direction": "N", "name": "year"}])
        with pytest.raises(ValidationError, match="header_rows or header_cols"):
            RecipeConfig.model_validate(raw)

    def test_behead_if_needs_format(self):
        raw = _recipe(steps=[{"op": "behead_if", "direction": "W", "name": "g", "format": {}}])
        with pytest.raises(ValidationError, match="format attribute"):
            RecipeConfig.model_validate(raw)

    def test_empty_sentinels(self):
        raw = _recipe(steps=[{"op": "isolate_sentinels", "sentinels": []}])
        with pytest.raises(ValidationError):
            RecipeConfig.model_validate(raw)

    def test_proximity_allowed_by_default(self):
        raw = _recipe(steps=[{"op": "behead", "direction": "ABOVE", "name": "x"}])
        assert RecipeConfig.model_validate(raw).steps[0].direction is Direction.ABOVE

    def test_proximity_rejected_when_disallowed(self):
        raw = _recipe(
            steps=[{"op": "behead", "direction": "up-ish", "name": "x"}],
            allow_proximity=False,
        )
        with pytest.raises(ValidationError, match="allow_proximity"):
            RecipeConfig.model_validate(raw)

    def test_bad_output_format(self):
        with pytest.raises(ValidationError):
            RecipeConfig.model_validate(_recipe(output={"output_format": "xlsx"}))


# ---------------------------------------------------------------------------
# YAML I/O
# ---------------------------------------------------------------------------

class TestRecipeIO:
    """Tests for load_recipe() / save_recipe()."""

    def test_round_trip(self, tmp_path):
        recipe = RecipeConfig.model_validate(_recipe(strict=True))
        path = tmp_path / "recipe.yaml"
        save_recipe(recipe, path)
        assert load_recipe(path) == recipe

    def test_saved_yaml_is_readable(self, tmp_path):
        path = tmp_path / "nested" / "recipe.yaml"
        save_recipe(RecipeConfig.model_validate(_recipe()), path)
        text = path.read_text(encoding="utf-8")
        assert text.startswith("# sheet-unpivot recipe")
        raw = yaml.safe_load(text)
        assert raw["steps"][1] == {
            "direction": "N", "name": "name", "drop_blank": True, "op": "behead",
        }

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_recipe(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path):
        path = tmp_path / "recipe.yaml"
        path.write_text("")
        with pytest.raises(ConfigValidationError, match="empty"):
            load_recipe(path)


class TestGenerateDefaultRecipe:
    """Tests for generate_default_recipe()."""

    def test_two_header_rows_one_header_col(self):
        recipe = generate_default_recipe("cells.csv", header_rows=2, header_cols=1)
        assert [(s.direction, s.name) for s in recipe.steps] == [
            (Direction.NNW, "col_header_1"),
            (Direction.N, "col_header_2"),
            (Direction.W, "row_header_1"),
        ]

    def test_nested_row_headers(self):
        recipe = generate_default_recipe("cells.csv", header_rows=1, header_cols=2)
        assert [s.direction for s in recipe.steps] == [Direction.N, Direction.WNW, Direction.W]

    def test_source_paths(self):
        recipe = generate_default_recipe("c.parquet", formats_path="f.yaml", output_dir="out/")
        assert recipe.source.cells_path == "c.parquet"
        assert recipe.source.formats_path == "f.yaml"
        assert recipe.output.output_dir == "out/"
