"""Read gene/item association files and load them to DuckDB with provenance."""

from pathlib import Path

import polars as pl
import structlog

from gene_similarity.errors import SourceDataError
from gene_similarity.persistence import PipelineStore, ProvenanceTracker
from gene_similarity.source.models import GENE_ITEMS_TABLE_NAME, REQUIRED_COLUMNS

logger = structlog.get_logger(__name__)


def read_gene_items(path: Path | str, separator: str = "\t") -> pl.DataFrame:
    """Read a delimited gene/item association file.

    The file needs a header with gene_id, aspect and item_id; extra columns
    are dropped. Empty item_id fields become NULL.

    Args:
        path: Path to TSV/CSV file
        separator: Field separator (default: tab)

    Returns:
        DataFrame with columns gene_id (Int64), aspect (Utf8), item_id (Int64, nullable)

    Raises:
        FileNotFoundError: If the file doesn't exist
        SourceDataError: If columns are missing, IDs are not integers,
            or gene_id/aspect is empty
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Gene/item file not found: {path}")

    logger.info("read_gene_items_start", path=str(path))

    # Read everything as text first so bad IDs can be reported clearly
    raw = pl.read_csv(path, separator=separator, infer_schema_length=0)

    missing = [col for col in REQUIRED_COLUMNS if col not in raw.columns]
    if missing:
        raise SourceDataError(f"{path}: missing required columns: {', '.join(missing)}")

    try:
        df = raw.select(
            pl.col("gene_id").str.strip_chars().cast(pl.Int64, strict=True),
            pl.col("aspect").str.strip_chars(),
            pl.col("item_id").str.strip_chars().cast(pl.Int64, strict=True),
        )
    except pl.exceptions.PolarsError as e:
        raise SourceDataError(f"{path}: gene_id and item_id must be integers ({e})") from e

    null_keys = df.filter(pl.col("gene_id").is_null() | pl.col("aspect").is_null()).height
    if null_keys:
        raise SourceDataError(f"{path}: {null_keys} rows without gene_id or aspect")

    logger.info(
        "read_gene_items_complete",
        row_count=df.height,
        aspects=df["aspect"].n_unique(),
        genes=df["gene_id"].n_unique(),
    )

    return df


def load_gene_items(
    df: pl.DataFrame,
    store: PipelineStore,
    provenance: ProvenanceTracker,
    replace: bool = True,
    description: str = "",
) -> None:
    """Save gene/item associations to DuckDB with provenance.

    Duplicate associations are dropped before saving.

    Args:
        df: DataFrame from read_gene_items()
        store: PipelineStore instance for DuckDB persistence
        provenance: ProvenanceTracker instance for metadata recording
        replace: Replace the gene_items table (True) or append to it (False)
        description: Optional description for checkpoint metadata
    """
    df = df.select(REQUIRED_COLUMNS).unique(maintain_order=True)

    logger.info("load_gene_items_start", row_count=df.height, replace=replace)

    per_aspect = (
        df.group_by("aspect")
        .agg(
            pl.col("gene_id").n_unique().alias("genes"),
            pl.col("item_id").drop_nulls().n_unique().alias("items"),
        )
        .sort("aspect")
    )

    store.save_dataframe(
        df=df,
        table_name=GENE_ITEMS_TABLE_NAME,
        description=description or "Gene to annotation item associations per aspect",
        replace=replace,
    )

    provenance.record_step("load_gene_items", {
        "row_count": df.height,
        "replace": replace,
        "aspects": per_aspect.to_dicts(),
    })

    logger.info(
        "load_gene_items_complete",
        row_count=df.height,
        aspects=per_aspect.to_dicts(),
    )
