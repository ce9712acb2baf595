"""
Integration tests: recipe YAML + cell table on disk -> tidy output file.

Each test writes its inputs under tmp_path, calls ``sheet_unpivot.run()``
and reads the output back.
"""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest
import yaml

import sheet_unpivot
from sheet_unpivot.config import generate_default_recipe, save_recipe
from sheet_unpivot.exceptions import UnresolvedHeaderError

pytestmark = pytest.mark.integration


def _write_recipe(tmp_path: Path, cells_path: Path, steps: list[dict], **extra) -> Path:
    raw = {
        "source": {"cells_path": str(cells_path)},
        "steps": steps,
        "output": {"output_dir": str(tmp_path / "out")},
    }
    for key, value in extra.items():
        if isinstance(value, dict) and isinstance(raw.get(key), dict):
            raw[key].update(value)
        else:
            raw[key] = value
    path = tmp_path / "recipe.yaml"
    path.write_text(yaml.safe_dump(raw, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture()
def scores_csv(tmp_path, scores_cells) -> Path:
    path = tmp_path / "scores_cells.csv"
    scores_cells.to_csv(path, index=False)
    return path


SCORES_STEPS = [
    {"op": "behead", "direction": "up-left", "name": "sex"},
    {"op": "behead", "direction": "up", "name": "name"},
    {"op": "behead", "direction": "left", "name": "subject"},
]


# ---------------------------------------------------------------------------
# Scores grid
# ---------------------------------------------------------------------------

class TestScoresRecipe:
    """Two header rows and one header column, end to end."""

    def test_parquet_output(self, tmp_path, scores_csv):
        recipe = _write_recipe(tmp_path, scores_csv, SCORES_STEPS)
        result = sheet_unpivot.run(recipe)

        assert len(result.written) == 1
        assert result.written[0].endswith("tidy.parquet")
        back = pd.read_parquet(result.written[0])
        assert len(back) == 8
        matilda = back[back["name"] == "matilda"].sort_values("row")
        assert list(matilda["numeric"]) == [2.0, 5.0]
        assert set(matilda["sex"]) == {"Female"}

    def test_csv_output_with_selected_columns(self, tmp_path, scores_csv):
        recipe = _write_recipe(
            tmp_path, scores_csv, SCORES_STEPS,
            output={
                "output_format": "csv",
                "table_name": "scores",
                "keep_columns": ["sex", "name", "subject", "numeric"],
            },
        )
        result = sheet_unpivot.run(recipe)
        back = pd.read_csv(result.written[0], encoding="utf-8-sig")
        assert list(back.columns) == ["sex", "name", "subject", "numeric"]
        assert back.iloc[-1].tolist() == ["Male", "felicity", "maths", 1.0]

    def test_no_export(self, tmp_path, scores_csv):
        recipe = _write_recipe(tmp_path, scores_csv, SCORES_STEPS)
        result = sheet_unpivot.run(recipe, export=False)
        assert result.written == []
        assert not (tmp_path / "out").exists()

    def test_strict_recipe_fails(self, tmp_path, scores_csv):
        recipe = _write_recipe(tmp_path, scores_csv, SCORES_STEPS, strict=True)
        with pytest.raises(UnresolvedHeaderError):
            sheet_unpivot.run(recipe)

    def test_spatter_to_wide(self, tmp_path, scores_csv):
        steps = SCORES_STEPS + [
            {"op": "spatter", "key": "subject", "id_columns": ["sex", "name"]},
        ]
        recipe = _write_recipe(tmp_path, scores_csv, steps, output={"output_format": "csv"})
        result = sheet_unpivot.run(recipe)
        back = pd.read_csv(result.written[0], encoding="utf-8-sig")
        assert list(back.columns) == ["sex", "name", "history", "maths"]
        assert back.set_index("name").loc["jason", "maths"] == 7.0

    def test_default_recipe(self, tmp_path, scores_csv):
        recipe = generate_default_recipe(
            str(scores_csv), header_rows=2, header_cols=1, output_dir=str(tmp_path / "out"),
        )
        path = tmp_path / "default.yaml"
        save_recipe(recipe, path)
        result = sheet_unpivot.run(path)
        assert set(result.table["col_header_1"]) == {"Female", "Male"}
        assert set(result.table["row_header_1"]) == {"history", "maths"}


# ---------------------------------------------------------------------------
# Formatted headers
# ---------------------------------------------------------------------------

class TestFormattedRecipe:
    """Bold group headers picked out through the formats file."""

    def test_behead_if_with_formats_file(self, tmp_path, grouped_cells):
        cells_path = tmp_path / "grouped.parquet"
        grouped_cells.to_parquet(cells_path, index=False)
        formats_path = tmp_path / "formats.yaml"
        formats_path.write_text(yaml.safe_dump([{"bold": False}, {"bold": True}]), encoding="utf-8")

        steps = [
            {"op": "behead_if", "direction": "WNW", "name": "group", "format": {"bold": True}},
            {"op": "behead", "direction": "W", "name": "item"},
            {"op": "drop_blank"},
        ]
        recipe = _write_recipe(
            tmp_path, cells_path, steps,
            source={"formats_path": str(formats_path)},
            output={"keep_columns": ["group", "item", "numeric"]},
        )
        result = sheet_unpivot.run(recipe)
        back = pd.read_parquet(result.written[0])
        assert back.to_dict("records") == [
            {"group": "Fruit", "item": "apple", "numeric": 1.0},
            {"group": "Fruit", "item": "pear", "numeric": 2.0},
            {"group": "Veg", "item": "leek", "numeric": 3.0},
        ]
