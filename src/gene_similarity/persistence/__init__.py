"""Persistence layer for checkpoints, similarity matrices and provenance tracking."""

from gene_similarity.persistence.duckdb_store import PipelineStore
from gene_similarity.persistence.provenance import ProvenanceTracker
from gene_similarity.persistence.matrix_store import (
    clear_aspect,
    load_aspect_ratings,
    load_common_matrix,
    load_gene_index,
    load_rating_matrix,
    similar_genes,
    store_matrix,
)

__all__ = [
    "PipelineStore",
    "ProvenanceTracker",
    "clear_aspect",
    "load_aspect_ratings",
    "load_common_matrix",
    "load_gene_index",
    "load_rating_matrix",
    "similar_genes",
    "store_matrix",
]
