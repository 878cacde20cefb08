"""Data models for gene/item association records."""

from pydantic import BaseModel

# Table name for DuckDB storage
GENE_ITEMS_TABLE_NAME = "gene_items"

REQUIRED_COLUMNS = ["gene_id", "aspect", "item_id"]


class GeneItemRecord(BaseModel):
    """One gene/item association within an aspect.

    Attributes:
        gene_id: Integer gene identifier (row anchor value in the incidence matrix)
        aspect: Aspect name (e.g. "pathways", "go_terms")
        item_id: Integer annotation item identifier - NULL registers a gene
                 that takes part in the aspect without any item

    NULL item_id is not the same as item 0: the gene gets a row in the
    incidence matrix but no item cells.
    """

    gene_id: int
    aspect: str
    item_id: int | None = None
