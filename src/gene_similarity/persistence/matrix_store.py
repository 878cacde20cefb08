"""Persist similarity matrices to DuckDB, one row key at a time.

Two tables hold every matrix of every aspect in long format:

- common_items(aspect, row_key, matrix_row, matrix_col, items BIGINT[])
- similarity_ratings(aspect, row_key, matrix_row, matrix_col, value BIGINT)

``row_key`` is the gene ID (as string) a matrix was computed for, or "ALL"
for the gene index of the aspect, which maps rating columns back to genes.
"""

import duckdb
import polars as pl
import structlog

from gene_similarity.persistence.duckdb_store import PipelineStore
from gene_similarity.similarity.codec import frame_to_matrix, matrix_to_frame
from gene_similarity.similarity.models import (
    ALL_GENES_KEY,
    CommonItemsMatrix,
    Matrix,
    ScoreMatrix,
)

logger = structlog.get_logger(__name__)

COMMON_ITEMS_TABLE = "common_items"
RATINGS_TABLE = "similarity_ratings"


def ensure_matrix_tables(store: PipelineStore) -> None:
    """Create the matrix tables if they do not exist yet."""
    store.conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {COMMON_ITEMS_TABLE} (
            aspect VARCHAR NOT NULL,
            row_key VARCHAR NOT NULL,
            matrix_row BIGINT NOT NULL,
            matrix_col BIGINT NOT NULL,
            items BIGINT[]
        )
    """)
    store.conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {RATINGS_TABLE} (
            aspect VARCHAR NOT NULL,
            row_key VARCHAR NOT NULL,
            matrix_row BIGINT NOT NULL,
            matrix_col BIGINT NOT NULL,
            value BIGINT
        )
    """)


def store_matrix(
    store: PipelineStore,
    matrix: Matrix,
    aspect_tag: str,
    row_key: str,
) -> None:
    """
    Persist one matrix under (aspect_tag, row_key).

    List-valued matrices go to common_items, integer matrices to
    similarity_ratings. Rows previously stored under the same key in the
    same table are replaced. Delete and insert run in one transaction, so a
    failed call leaves the earlier rows in place.

    Args:
        store: PipelineStore with open connection
        matrix: Common-items, raw score or rating matrix
        aspect_tag: Aspect identifier
        row_key: Gene ID as string, or "ALL" for the gene index

    Raises:
        duckdb.Error: Propagated unchanged; the caller aborts the aspect.
    """
    ensure_matrix_tables(store)

    df = matrix_to_frame(matrix)
    if "items" in df.columns:
        table, value_column = COMMON_ITEMS_TABLE, "items"
    else:
        table, value_column = RATINGS_TABLE, "value"

    df = df.with_columns(
        pl.lit(aspect_tag).alias("aspect"),
        pl.lit(row_key).alias("row_key"),
    ).select(["aspect", "row_key", "row", "col", value_column])

    store.conn.execute("BEGIN TRANSACTION")
    try:
        store.conn.execute(
            f"DELETE FROM {table} WHERE aspect = ? AND row_key = ?",
            [aspect_tag, row_key]
        )
        store.conn.execute(
            f'INSERT INTO {table} SELECT aspect, row_key, "row", "col", {value_column} FROM df'
        )
        store.conn.execute("COMMIT")
    except duckdb.Error:
        store.conn.execute("ROLLBACK")
        logger.error(
            "store_matrix_failed",
            table=table,
            aspect=aspect_tag,
            row_key=row_key,
        )
        raise

    logger.debug(
        "store_matrix",
        table=table,
        aspect=aspect_tag,
        row_key=row_key,
        cells=df.height,
    )


def _load_matrix(
    store: PipelineStore,
    table: str,
    value_column: str,
    aspect_tag: str,
    row_key: str,
) -> Matrix:
    ensure_matrix_tables(store)
    df = store.execute_query(
        f"""
        SELECT matrix_row AS "row", matrix_col AS "col", {value_column}
        FROM {table}
        WHERE aspect = ? AND row_key = ?
        ORDER BY matrix_row, matrix_col
        """,
        params=[aspect_tag, row_key]
    )
    return frame_to_matrix(df)


def load_rating_matrix(store: PipelineStore, aspect_tag: str, row_key: str) -> ScoreMatrix:
    """Load one stored rating matrix; empty dict if nothing was stored."""
    return _load_matrix(store, RATINGS_TABLE, "value", aspect_tag, row_key)


def load_common_matrix(store: PipelineStore, aspect_tag: str, row_key: str) -> CommonItemsMatrix:
    """Load one stored common-items matrix; empty dict if nothing was stored."""
    return _load_matrix(store, COMMON_ITEMS_TABLE, "items", aspect_tag, row_key)


def load_gene_index(store: PipelineStore, aspect_tag: str) -> ScoreMatrix:
    """Load the "ALL" gene index of an aspect."""
    return load_rating_matrix(store, aspect_tag, ALL_GENES_KEY)


def clear_aspect(store: PipelineStore, aspect_tag: str) -> int:
    """
    Delete every stored matrix of one aspect.

    Returns:
        Number of deleted rows across both tables
    """
    ensure_matrix_tables(store)
    deleted = 0
    for table in (COMMON_ITEMS_TABLE, RATINGS_TABLE):
        deleted += store.conn.execute(
            f"SELECT COUNT(*) FROM {table} WHERE aspect = ?", [aspect_tag]
        ).fetchone()[0]
        store.conn.execute(f"DELETE FROM {table} WHERE aspect = ?", [aspect_tag])

    logger.info("clear_aspect", aspect=aspect_tag, deleted_rows=deleted)
    return deleted


def load_aspect_ratings(store: PipelineStore, aspect_tag: str) -> pl.DataFrame:
    """
    Decode all rating rows of an aspect into gene pairs.

    Rating columns are mapped to genes through the "ALL" gene index.

    Returns:
        DataFrame with columns gene_id, similar_gene_id, rating (all Int64),
        sorted by gene_id then rating descending
    """
    ensure_matrix_tables(store)
    return store.execute_query(
        f"""
        SELECT
            TRY_CAST(r.row_key AS BIGINT) AS gene_id,
            idx.value AS similar_gene_id,
            r.value AS rating
        FROM {RATINGS_TABLE} r
        JOIN {RATINGS_TABLE} idx
          ON idx.aspect = r.aspect
         AND idx.row_key = ?
         AND idx.matrix_row = 0
         AND idx.matrix_col = r.matrix_col
        WHERE r.aspect = ?
          AND r.row_key <> ?
          AND r.matrix_col > 0
        ORDER BY gene_id, rating DESC, similar_gene_id
        """,
        params=[ALL_GENES_KEY, aspect_tag, ALL_GENES_KEY]
    )


def similar_genes(
    store: PipelineStore,
    aspect_tag: str,
    gene_id: int,
    min_rating: int = 0,
    include_self: bool = False,
) -> pl.DataFrame:
    """
    Read one gene's rating row and decode it to similar genes.

    Args:
        store: PipelineStore instance
        aspect_tag: Aspect identifier
        gene_id: Gene whose row is read
        min_rating: Minimum rating to include (0-100)
        include_self: Keep the gene's rating against itself

    Returns:
        DataFrame with columns similar_gene_id, rating; highest rating first
    """
    ensure_matrix_tables(store)
    df = store.execute_query(
        f"""
        SELECT idx.value AS similar_gene_id, r.value AS rating
        FROM {RATINGS_TABLE} r
        JOIN {RATINGS_TABLE} idx
          ON idx.aspect = r.aspect
         AND idx.row_key = ?
         AND idx.matrix_row = 0
         AND idx.matrix_col = r.matrix_col
        WHERE r.aspect = ?
          AND r.row_key = ?
          AND r.matrix_col > 0
          AND r.value >= ?
        ORDER BY rating DESC, similar_gene_id
        """,
        params=[ALL_GENES_KEY, aspect_tag, str(gene_id), min_rating]
    )
    if not include_self:
        df = df.filter(pl.col("similar_gene_id") != gene_id)

    return df
