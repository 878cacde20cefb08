"""Source provider: gene/item associations and incidence matrices."""

from gene_similarity.source.models import GeneItemRecord, GENE_ITEMS_TABLE_NAME
from gene_similarity.source.load import read_gene_items, load_gene_items
from gene_similarity.source.transform import build_incidence_matrix, load_aspect_matrix

__all__ = [
    "GeneItemRecord",
    "GENE_ITEMS_TABLE_NAME",
    "read_gene_items",
    "load_gene_items",
    "build_incidence_matrix",
    "load_aspect_matrix",
]
