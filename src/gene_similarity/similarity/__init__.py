"""Pairwise gene similarity over sparse gene/item incidence matrices."""

from gene_similarity.similarity.models import (
    ALL_GENES_KEY,
    MAX_RATING,
    AspectType,
    CommonItemsMatrix,
    Coordinate,
    IncidenceMatrix,
    MatrixSink,
    ScoreMatrix,
)
from gene_similarity.similarity.common_items import (
    common_matrix_loop,
    find_common_items,
    find_common_items_presence,
)
from gene_similarity.similarity.scoring import (
    count_common_items_category,
    find_similarity_count,
    find_similarity_presence,
)
from gene_similarity.similarity.normalize import normalise

__all__ = [
    "ALL_GENES_KEY",
    "MAX_RATING",
    "AspectType",
    "CommonItemsMatrix",
    "Coordinate",
    "IncidenceMatrix",
    "MatrixSink",
    "ScoreMatrix",
    "common_matrix_loop",
    "find_common_items",
    "find_common_items_presence",
    "count_common_items_category",
    "find_similarity_count",
    "find_similarity_presence",
    "normalise",
]
