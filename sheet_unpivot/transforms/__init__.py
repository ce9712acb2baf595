"""
Transforms sub-package for sheet-unpivot.

Each transform is a pure function from cell tables to a new cell table;
inputs are never modified.

- enhead.py: join data cells to one header level by compass direction.
- behead.py: peel the outer header level off a mixed cell table.
- justify.py: move headers to corner positions before resolution.
- reshape.py: spatter (long -> wide) and gather (wide -> extra-tidy).
- sentinels.py: move in-band markers ("..C") to their own column.
- partition.py: split a sheet of several tables by their corner cells.
- pipeline.py: run a YAML recipe's steps in order.
"""

from sheet_unpivot.transforms.behead import behead, behead_if
from sheet_unpivot.transforms.enhead import enhead
from sheet_unpivot.transforms.justify import justify
from sheet_unpivot.transforms.partition import partition
from sheet_unpivot.transforms.reshape import gather, spatter
from sheet_unpivot.transforms.sentinels import isolate_sentinels

__all__ = [
    "behead",
    "behead_if",
    "enhead",
    "gather",
    "isolate_sentinels",
    "justify",
    "partition",
    "spatter",
]
