"""Data models for sparse gene/item matrices.

All matrices are sparse maps keyed by Coordinate. An absent key means "no
value" and is semantically distinct from a stored zero.

Matrix conventions:
- Column 0 of every row holds the gene ID of that row (the row anchor).
- Row 0, when present, holds gene IDs for the columns (the gene index).
- Result matrices are written one step "ahead" of the zero-based incidence
  rows: the pair (r, r') of incidence rows lands at (r + 1, r' + 1).
"""

from enum import Enum
from typing import Callable, NamedTuple, Union

# The gene ID is always in column zero
GENE_ID_COLUMN = 0
# For rectangular matrices the gene ID is also in row zero
GENE_ID_ROW = 0
# Items start right after the gene ID
FIRST_ITEM_COLUMN = 1
MAX_RATING = 100
# Row key of the per-aspect gene index record
ALL_GENES_KEY = "ALL"


class Coordinate(NamedTuple):
    """Zero-based (row, col) position in a sparse matrix."""

    row: int
    col: int


class AspectType(str, Enum):
    """Statistical type of an aspect, selects the similarity policy."""

    CATEGORY = "category"
    COUNT = "count"
    PRESENCE = "presence"


# gene ID at (r, 0), item IDs at (r, 1..k)
IncidenceMatrix = dict[Coordinate, int]
# gene ID list at (r + 1, 0), shared items at (r + 1, r' + 1)
CommonItemsMatrix = dict[Coordinate, list[int]]
# gene ID at column 0 / row 0, raw scores or ratings elsewhere
ScoreMatrix = dict[Coordinate, int]
Matrix = Union[CommonItemsMatrix, ScoreMatrix]
# (matrix, aspect tag, row key) -> None
MatrixSink = Callable[[Matrix, str, str], None]
