"""Encoding rules for the ID-row/ID-column sparse matrix convention.

Every matrix in the pipeline shares the same layout: gene IDs in column 0 of
each row and, for the gene index, in row 0 of each column. Writers of result
matrices shift zero-based incidence rows by one in both axes via
shift_for_accumulation(), exactly once per logical pair.
"""

import polars as pl

from gene_similarity.errors import MalformedRowError
from gene_similarity.similarity.models import (
    GENE_ID_COLUMN,
    GENE_ID_ROW,
    Coordinate,
    IncidenceMatrix,
    Matrix,
    ScoreMatrix,
)

SCORE_SCHEMA = {"row": pl.Int64, "col": pl.Int64, "value": pl.Int64}
ITEMS_SCHEMA = {"row": pl.Int64, "col": pl.Int64, "items": pl.List(pl.Int64)}


def is_gene_row(coord: Coordinate) -> bool:
    """True if the cell is a row anchor (holds the gene ID of its row)."""
    return coord.col == GENE_ID_COLUMN


def is_gene_column(coord: Coordinate) -> bool:
    """True if the cell is in the gene index row (holds the gene ID of its column)."""
    return coord.row == GENE_ID_ROW


def shift_for_accumulation(coord: Coordinate) -> Coordinate:
    """Map a zero-based incidence position to its position in a result matrix."""
    return Coordinate(coord.row + 1, coord.col + 1)


def gene_anchors(matrix: IncidenceMatrix) -> list[tuple[Coordinate, int]]:
    """Return (anchor coordinate, gene ID) for every row anchor, ordered by row."""
    return sorted(
        ((coord, value) for coord, value in matrix.items() if is_gene_row(coord)),
        key=lambda anchor: anchor[0].row,
    )


def row_items(matrix: IncidenceMatrix, row: int) -> list[int]:
    """Return the item values of one incidence row in column order."""
    cells = sorted(
        (coord.col, value)
        for coord, value in matrix.items()
        if coord.row == row and not is_gene_row(coord)
    )
    return [value for _, value in cells]


def gene_index(matrix: IncidenceMatrix) -> ScoreMatrix:
    """
    Build the gene index record of an aspect: gene IDs along row 0.

    The gene of incidence row r sits at (0, r + 1), matching the column it
    occupies in every result matrix.
    """
    return {
        Coordinate(GENE_ID_ROW, coord.row + 1): gene_id
        for coord, gene_id in gene_anchors(matrix)
    }


def validate_incidence(matrix: IncidenceMatrix) -> None:
    """
    Check that every populated row carries its own gene ID in column 0.

    Raises:
        MalformedRowError: If a row has item cells but no gene ID, two rows
            share a gene ID, or a coordinate is negative.
    """
    anchored = set()
    rows = set()
    for coord in matrix:
        if coord.row < 0 or coord.col < 0:
            raise MalformedRowError(coord.row, f"negative coordinate {tuple(coord)}")
        rows.add(coord.row)
        if is_gene_row(coord):
            anchored.add(coord.row)

    # Row keys are gene IDs, so a repeated ID would overwrite stored rows
    seen = {}
    for coord, gene_id in gene_anchors(matrix):
        if gene_id in seen:
            raise MalformedRowError(
                coord.row, f"duplicate gene ID {gene_id} (also in row {seen[gene_id]})"
            )
        seen[gene_id] = coord.row

    missing = rows - anchored
    if missing:
        raise MalformedRowError(min(missing))


def matrix_to_frame(matrix: Matrix) -> pl.DataFrame:
    """
    Convert a sparse matrix to a long-format DataFrame sorted by (row, col).

    List-valued matrices (common items) produce an ``items`` column, integer
    matrices (scores, ratings) a ``value`` column. Empty matrices are treated
    as score matrices.
    """
    coords = sorted(matrix)
    is_items = bool(coords) and isinstance(matrix[coords[0]], list)

    if is_items:
        return pl.DataFrame(
            {
                "row": [c.row for c in coords],
                "col": [c.col for c in coords],
                "items": [list(matrix[c]) for c in coords],
            },
            schema=ITEMS_SCHEMA,
        )

    return pl.DataFrame(
        {
            "row": [c.row for c in coords],
            "col": [c.col for c in coords],
            "value": [matrix[c] for c in coords],
        },
        schema=SCORE_SCHEMA,
    )


def frame_to_matrix(df: pl.DataFrame) -> Matrix:
    """Inverse of matrix_to_frame()."""
    value_column = "items" if "items" in df.columns else "value"
    return {
        Coordinate(record["row"], record["col"]): record[value_column]
        for record in df.select(["row", "col", value_column]).iter_rows(named=True)
    }
