"""Dual-format TSV+Parquet writer for similarity ratings with provenance sidecar."""

from datetime import datetime, timezone
from pathlib import Path

import polars as pl
import yaml


def write_rating_output(
    df: pl.DataFrame | pl.LazyFrame,
    output_dir: Path,
    filename_base: str = "similarity",
    metadata: dict | None = None,
) -> dict:
    """
    Write decoded similarity ratings to TSV and Parquet with a YAML sidecar.

    Args:
        df: Polars DataFrame or LazyFrame with columns
            gene_id, similar_gene_id, rating
        output_dir: Directory to write output files (created if doesn't exist)
        filename_base: Base filename without extension
        metadata: Extra entries for the provenance sidecar (aspect, config hash)

    Returns:
        Dictionary with output file paths:
        {
            "tsv": Path to TSV file,
            "parquet": Path to Parquet file,
            "provenance": Path to YAML provenance sidecar
        }

    Notes:
        - Sorted by gene_id ASC, rating DESC, similar_gene_id ASC so repeated
          exports of the same ratings are byte-identical
        - Provenance YAML includes pair/gene counts and the rating histogram
          in steps of ten
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    if isinstance(df, pl.LazyFrame):
        df = df.collect()

    df = df.sort(
        ["gene_id", "rating", "similar_gene_id"],
        descending=[False, True, False],
    )

    tsv_path = output_dir / f"{filename_base}.tsv"
    parquet_path = output_dir / f"{filename_base}.parquet"
    provenance_path = output_dir / f"{filename_base}.provenance.yaml"

    df.write_csv(tsv_path, separator="\t", include_header=True)
    df.write_parquet(parquet_path, compression="snappy", use_pyarrow=True)

    rating_bins = {}
    if df.height > 0:
        binned = (
            df.group_by((pl.col("rating") // 10 * 10).alias("bin"))
            .agg(pl.len().alias("count"))
            .sort("bin")
        )
        rating_bins = {int(row["bin"]): int(row["count"]) for row in binned.to_dicts()}

    provenance = {
        "generated_at": datetime.now(timezone.utc).isoformat(),
        "output_files": [tsv_path.name, parquet_path.name],
        "statistics": {
            "total_pairs": df.height,
            "genes": df["gene_id"].n_unique() if df.height > 0 else 0,
            "rating_histogram": rating_bins,
        },
        "column_names": df.columns,
    }
    if metadata:
        provenance["metadata"] = metadata

    with open(provenance_path, "w") as f:
        yaml.dump(provenance, f, default_flow_style=False, sort_keys=False)

    return {
        "tsv": tsv_path,
        "parquet": parquet_path,
        "provenance": provenance_path,
    }
