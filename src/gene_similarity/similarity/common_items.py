"""Find annotation items that genes have in common, one aspect at a time.

For every gene (row anchor) of an incidence matrix a common-items matrix is
built, persisted through the sink, turned into ratings and discarded before
the next gene, so memory stays bounded by one gene's pairwise row.
"""

from typing import Callable

import structlog

from gene_similarity.similarity.codec import (
    gene_anchors,
    gene_index,
    is_gene_row,
    row_items,
    shift_for_accumulation,
    validate_incidence,
)
from gene_similarity.similarity.models import (
    ALL_GENES_KEY,
    GENE_ID_COLUMN,
    CommonItemsMatrix,
    Coordinate,
    IncidenceMatrix,
    MatrixSink,
    ScoreMatrix,
)
from gene_similarity.similarity.normalize import normalise
from gene_similarity.similarity.scoring import count_common_items_category

logger = structlog.get_logger(__name__)

# (incidence, accumulator, anchor) -> None; mutates only the accumulator
CommonItemsPolicy = Callable[[IncidenceMatrix, CommonItemsMatrix, Coordinate], None]


def find_common_items(
    incidence: IncidenceMatrix,
    accumulator: CommonItemsMatrix,
    anchor: Coordinate,
) -> None:
    """
    Collect the items the anchor gene shares with every gene of the aspect.

    For each row r' holding at least one of the anchor's items, the shared
    items are written at (r + 1, r' + 1) in the anchor row's column order.
    The anchor row matches itself, which puts the gene's own distinct item
    count on the diagonal used later as the normalisation divisor.

    Items are compared as sets per gene: an item listed twice in one row is
    counted once.

    Args:
        incidence: Full incidence matrix of the aspect
        accumulator: Common-items matrix of the current gene (mutated)
        anchor: Row anchor (column 0) coordinate of the current gene
    """
    anchor_items = list(dict.fromkeys(row_items(incidence, anchor.row)))
    if not anchor_items:
        return

    wanted = set(anchor_items)
    shared_by_row: dict[int, set[int]] = {}
    for coord, value in incidence.items():
        if is_gene_row(coord) or value not in wanted:
            continue
        shared_by_row.setdefault(coord.row, set()).add(value)

    for row in sorted(shared_by_row):
        shared = shared_by_row[row]
        target = shift_for_accumulation(Coordinate(anchor.row, row))
        accumulator[target] = [item for item in anchor_items if item in shared]


def find_common_items_presence(
    incidence: IncidenceMatrix,
    accumulator: CommonItemsMatrix,
    anchor: Coordinate,
) -> None:
    """
    Gather the anchor gene's own items into its diagonal bucket.

    Presence aspects only need to know whether a gene has any item, so no
    other gene is inspected here; the pairwise ratings come from
    find_similarity_presence().
    """
    bucket = shift_for_accumulation(Coordinate(anchor.row, anchor.row))
    for item in row_items(incidence, anchor.row):
        accumulator.setdefault(bucket, []).append(item)


def common_matrix_loop(
    incidence: IncidenceMatrix,
    aspect: str,
    sink: MatrixSink,
    policy: CommonItemsPolicy,
    rate: bool = True,
) -> ScoreMatrix:
    """
    Run a common-items policy for every gene and persist the results.

    Per gene (in row order):
    1. Seed the common-items matrix with the gene ID at (r + 1, 0)
    2. Apply the policy
    3. Store the common-items matrix under the gene ID
    4. If ``rate``: count items per cell, normalise and store the ratings

    After the pass the gene index is stored under the row key "ALL".

    Args:
        incidence: Incidence matrix of one aspect
        aspect: Aspect tag attached to every stored matrix
        sink: Callable persisting (matrix, aspect, row_key)
        policy: find_common_items or find_common_items_presence
        rate: Whether to derive and store rating matrices

    Returns:
        Gene index matrix: gene IDs at (0, r + 1)

    Raises:
        MalformedRowError: If the incidence matrix has rows without gene ID.
            Raised before anything is stored.
    """
    validate_incidence(incidence)
    anchors = gene_anchors(incidence)

    logger.info(
        "common_matrix_loop_start",
        aspect=aspect,
        policy=policy.__name__,
        gene_count=len(anchors),
    )

    for anchor, gene_id in anchors:
        common_mat: CommonItemsMatrix = {
            Coordinate(anchor.row + 1, GENE_ID_COLUMN): [gene_id],
        }
        policy(incidence, common_mat, anchor)

        row_key = str(gene_id)
        sink(common_mat, aspect, row_key)

        if rate:
            rating_mat = normalise(count_common_items_category(common_mat))
            sink(rating_mat, aspect, row_key)

    all_gene_ids = gene_index(incidence)
    sink(all_gene_ids, aspect, ALL_GENES_KEY)

    logger.info("common_matrix_loop_complete", aspect=aspect, gene_count=len(anchors))

    return all_gene_ids
