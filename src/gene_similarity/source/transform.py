"""Build sparse incidence matrices from gene/item associations."""

import polars as pl
import structlog

from gene_similarity.errors import SourceDataError
from gene_similarity.persistence import PipelineStore
from gene_similarity.similarity.models import (
    FIRST_ITEM_COLUMN,
    GENE_ID_COLUMN,
    Coordinate,
    IncidenceMatrix,
)
from gene_similarity.source.models import GENE_ITEMS_TABLE_NAME

logger = structlog.get_logger(__name__)


def build_incidence_matrix(df: pl.DataFrame, aspect: str) -> IncidenceMatrix:
    """Build the incidence matrix of one aspect.

    Rows are ordered by gene ID; row r holds the gene ID at (r, 0) and the
    gene's distinct items, ascending, at (r, 1..k). Genes listed only with a
    NULL item get a row with no item cells.

    Args:
        df: DataFrame with gene_id, aspect, item_id columns
        aspect: Aspect name to select

    Returns:
        Sparse incidence matrix
    """
    grouped = (
        df.filter((pl.col("aspect") == aspect) & pl.col("gene_id").is_not_null())
        .group_by("gene_id")
        .agg(pl.col("item_id").drop_nulls().unique().sort().alias("items"))
        .sort("gene_id")
    )

    matrix: IncidenceMatrix = {}
    for row, record in enumerate(grouped.iter_rows(named=True)):
        matrix[Coordinate(row, GENE_ID_COLUMN)] = record["gene_id"]
        for col, item in enumerate(record["items"], start=FIRST_ITEM_COLUMN):
            matrix[Coordinate(row, col)] = item

    logger.info(
        "build_incidence_matrix_complete",
        aspect=aspect,
        gene_count=grouped.height,
        item_cells=len(matrix) - grouped.height,
    )

    return matrix


def load_aspect_matrix(store: PipelineStore, aspect: str) -> IncidenceMatrix:
    """Read one aspect's associations from DuckDB and build its incidence matrix.

    Raises:
        SourceDataError: If the gene_items table has not been loaded
    """
    if not store.has_table(GENE_ITEMS_TABLE_NAME):
        raise SourceDataError(
            f"Table '{GENE_ITEMS_TABLE_NAME}' not found; load gene/item associations first"
        )

    df = store.execute_query(
        f"SELECT gene_id, aspect, item_id FROM {GENE_ITEMS_TABLE_NAME} WHERE aspect = ?",
        params=[aspect]
    )

    if df.height == 0:
        logger.warning("load_aspect_matrix_empty", aspect=aspect)

    return build_incidence_matrix(df, aspect)
