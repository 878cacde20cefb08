"""Row-wise normalisation of raw score matrices into ratings."""

import structlog

from gene_similarity.similarity.codec import is_gene_column, is_gene_row
from gene_similarity.similarity.models import MAX_RATING, Coordinate, ScoreMatrix

logger = structlog.get_logger(__name__)


def normalise(matrix: ScoreMatrix) -> ScoreMatrix:
    """
    Rescale a raw score matrix row-wise to ratings in [0, 100].

    Each score is divided by the diagonal (self versus self) score of its row:

        raw matrix:                  normalised matrix:
          -    gene1 gene2 gene3       -    gene1 gene2 gene3
        gene1    5     2   null      gene1  5/5   2/5   null
        gene2    2     2    1        gene2  2/2   2/2   1/2
        gene3  null    1    3        gene3  null  1/3   3/3

    Gene ID cells (column 0 or row 0) are copied unchanged and are not shifted.
    Cells whose row has no diagonal, or a zero diagonal, are left out: a gene
    without items has no baseline to rate against.

    Args:
        matrix: Raw scores with the diagonal holding each gene's own item count

    Returns:
        New matrix with integer ratings (truncating division)
    """
    norm_mat: ScoreMatrix = {}
    skipped = 0

    for coord, value in matrix.items():
        if is_gene_row(coord) or is_gene_column(coord):
            norm_mat[coord] = value
            continue

        diagonal = matrix.get(Coordinate(coord.row, coord.row))
        if not diagonal:
            skipped += 1
            continue

        norm_mat[coord] = min(MAX_RATING, value * MAX_RATING // diagonal)

    if skipped:
        logger.debug("normalise_skipped_cells", skipped=skipped)

    return norm_mat
