"""Pairwise similarity scoring policies for the three aspect types.

- category: number of shared items, normalised by the gene's own item count
- count: ratio of item counts, relative to the outer gene
- presence: maximal rating for genes that agree on having any item at all

The count and presence policies work directly on the incidence matrix and
stream one rating matrix per gene to the sink.
"""

import structlog

from gene_similarity.similarity.codec import (
    gene_anchors,
    gene_index,
    is_gene_column,
    is_gene_row,
    shift_for_accumulation,
    validate_incidence,
)
from gene_similarity.similarity.models import (
    ALL_GENES_KEY,
    FIRST_ITEM_COLUMN,
    GENE_ID_COLUMN,
    MAX_RATING,
    CommonItemsMatrix,
    Coordinate,
    IncidenceMatrix,
    MatrixSink,
    ScoreMatrix,
)

logger = structlog.get_logger(__name__)


def count_common_items_category(common_mat: CommonItemsMatrix) -> ScoreMatrix:
    """
    Turn a common-items matrix into raw scores for the "category" type.

    Gene ID cells carry the ID over; every other cell becomes the number of
    items in its list. The result still needs normalise().
    """
    sim_mat: ScoreMatrix = {}
    for coord, items in common_mat.items():
        if is_gene_row(coord) or is_gene_column(coord):
            sim_mat[coord] = items[0]
        else:
            sim_mat[coord] = len(items)
    return sim_mat


def find_similarity_count(
    incidence: IncidenceMatrix,
    aspect: str,
    sink: MatrixSink,
) -> ScoreMatrix:
    """
    Rate gene pairs by their item counts for the "count" type.

    rating(outer, inner) = min(100, 100 * count(inner) // count(outer))

    The rating is relative to the outer gene, so it is not symmetric. Genes
    without items get no ratings at all, in either direction, which keeps the
    matrices sparse. One rating matrix per gene is stored under the gene ID,
    then the gene index under "ALL".

    Args:
        incidence: Incidence matrix of one aspect
        aspect: Aspect tag attached to every stored matrix
        sink: Callable persisting (matrix, aspect, row_key)

    Returns:
        Gene index matrix: gene IDs at (0, r + 1)
    """
    validate_incidence(incidence)
    anchors = gene_anchors(incidence)

    # Count the items for each gene; the gene ID cell is not an item
    counted_items = {anchor.row: 0 for anchor, _ in anchors}
    for coord in incidence:
        if not is_gene_row(coord):
            counted_items[coord.row] += 1

    logger.info(
        "find_similarity_count_start",
        aspect=aspect,
        gene_count=len(anchors),
        genes_without_items=sum(1 for count in counted_items.values() if count == 0),
    )

    for anchor, gene_id in anchors:
        outer_count = counted_items[anchor.row]
        sim_mat: ScoreMatrix = {Coordinate(anchor.row + 1, GENE_ID_COLUMN): gene_id}

        if outer_count:
            for inner_row, inner_count in counted_items.items():
                if not inner_count:
                    continue
                rating = min(MAX_RATING, MAX_RATING * inner_count // outer_count)
                sim_mat[shift_for_accumulation(Coordinate(anchor.row, inner_row))] = rating

        sink(sim_mat, aspect, str(gene_id))

    all_gene_ids = gene_index(incidence)
    sink(all_gene_ids, aspect, ALL_GENES_KEY)

    logger.info("find_similarity_count_complete", aspect=aspect)

    return all_gene_ids


def find_similarity_presence(
    incidence: IncidenceMatrix,
    aspect: str,
    sink: MatrixSink,
) -> ScoreMatrix:
    """
    Rate gene pairs for the "presence" type.

    A gene is flagged 1 when its first item slot (column 1) is filled, else 0.
    Every pair of genes with the same flag, including a gene with itself, is
    rated 100; pairs with different flags get no entry.

    Returns:
        Gene index matrix: gene IDs at (0, r + 1)
    """
    validate_incidence(incidence)
    anchors = gene_anchors(incidence)

    has_items = {
        anchor.row: int(Coordinate(anchor.row, FIRST_ITEM_COLUMN) in incidence)
        for anchor, _ in anchors
    }

    logger.info(
        "find_similarity_presence_start",
        aspect=aspect,
        gene_count=len(anchors),
        genes_with_items=sum(has_items.values()),
    )

    for anchor, gene_id in anchors:
        flag = has_items[anchor.row]
        sim_mat: ScoreMatrix = {Coordinate(anchor.row + 1, GENE_ID_COLUMN): gene_id}

        for inner_row, inner_flag in has_items.items():
            if inner_flag == flag:
                sim_mat[shift_for_accumulation(Coordinate(anchor.row, inner_row))] = MAX_RATING

        sink(sim_mat, aspect, str(gene_id))

    all_gene_ids = gene_index(incidence)
    sink(all_gene_ids, aspect, ALL_GENES_KEY)

    logger.info("find_similarity_presence_complete", aspect=aspect)

    return all_gene_ids
