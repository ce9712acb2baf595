"""
Demo script: run one or more sheet-unpivot recipes via the public API.

Usage:
    python scripts/run_recipe.py recipes/scores.yaml
    python scripts/run_recipe.py recipes/*.yaml --strict

Each recipe names its own cell table and output directory.  Pass
--strict to fail when any data cell is left without a header, even if
the recipe itself is lenient.
"""

from __future__ import annotations

import logging
import sys

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    datefmt="%H:%M:%S",
)
log = logging.getLogger("run_recipe")


# ---------------------------------------------------------------------------
# Main
# ---------------------------------------------------------------------------

def main() -> int:
    import sheet_unpivot
    from sheet_unpivot._pipeline import run_recipe

    args = [a for a in sys.argv[1:] if not a.startswith("--")]
    strict = "--strict" in sys.argv
    if not args:
        log.error("usage: run_recipe.py RECIPE.yaml [RECIPE.yaml ...] [--strict]")
        return 2

    for recipe_path in args:
        log.info("=" * 70)
        log.info("Recipe: %s", recipe_path)
        log.info("=" * 70)

        recipe = sheet_unpivot.load_recipe(recipe_path)
        if strict:
            recipe = recipe.model_copy(update={"strict": True})
        result = run_recipe(recipe)

        log.info("  rows        : %s", f"{len(result.table):,}")
        log.info("  columns     : %s", list(result.table.columns))
        log.info("  unresolved  : %d", result.report.count)
        for path in result.written:
            log.info("  wrote       : %s", path)

    log.info("All recipes processed.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
