"""Run the similarity pass of one aspect from source to sink.

The statistical type of an aspect selects the policy:

- category: common items per gene pair, counted and normalised
- count: item count ratios straight from the incidence matrix
- presence: has-items buckets, then equal-flag ratings
"""

import structlog

from gene_similarity.config.schema import AspectConfig
from gene_similarity.persistence import (
    PipelineStore,
    ProvenanceTracker,
    clear_aspect,
    store_matrix,
)
from gene_similarity.similarity import (
    AspectType,
    IncidenceMatrix,
    MatrixSink,
    ScoreMatrix,
    common_matrix_loop,
    find_common_items,
    find_common_items_presence,
    find_similarity_count,
    find_similarity_presence,
)
from gene_similarity.source import load_aspect_matrix

logger = structlog.get_logger(__name__)


def aspect_checkpoint_name(aspect_tag: str) -> str:
    """Checkpoint name marking a completed similarity pass."""
    return f"similarity_{aspect_tag}"


def compute_aspect_similarity(
    incidence: IncidenceMatrix,
    aspect_type: AspectType,
    aspect_tag: str,
    sink: MatrixSink,
) -> ScoreMatrix:
    """
    Compute and sink all matrices of one aspect.

    Args:
        incidence: Incidence matrix of the aspect
        aspect_type: Statistical type selecting the policy
        aspect_tag: Aspect identifier attached to stored matrices
        sink: Callable persisting (matrix, aspect_tag, row_key)

    Returns:
        Gene index of the aspect (gene IDs at (0, r + 1))

    Raises:
        MalformedRowError: If the incidence matrix has rows without gene ID
        ValueError: If aspect_type is not a known type
    """
    aspect_type = AspectType(aspect_type)

    if aspect_type is AspectType.CATEGORY:
        return common_matrix_loop(incidence, aspect_tag, sink, find_common_items)

    if aspect_type is AspectType.COUNT:
        return find_similarity_count(incidence, aspect_tag, sink)

    # Presence: store the has-items buckets only; the flag ratings below
    # replace whatever a category rating pass would have stored
    common_matrix_loop(incidence, aspect_tag, sink, find_common_items_presence, rate=False)
    return find_similarity_presence(incidence, aspect_tag, sink)


def run_aspect(
    store: PipelineStore,
    aspect: AspectConfig,
    provenance: ProvenanceTracker,
    force: bool = False,
) -> bool:
    """
    Run the similarity pass of one aspect against the DuckDB store.

    Skips aspects with a completed checkpoint unless ``force`` is set.
    Earlier rows of the aspect are cleared first, so reruns give the same
    stored matrices. The checkpoint is written only after the whole pass
    has been stored; any error aborts the aspect without it.

    Args:
        store: PipelineStore holding gene_items and the matrix tables
        aspect: Aspect configuration
        provenance: ProvenanceTracker for step recording
        force: Recompute even if the aspect checkpoint exists

    Returns:
        True if the aspect was computed, False if skipped
    """
    checkpoint = aspect_checkpoint_name(aspect.tag)

    if store.has_checkpoint(checkpoint) and not force:
        logger.info("run_aspect_skipped", aspect=aspect.tag, checkpoint=checkpoint)
        return False

    logger.info(
        "run_aspect_start",
        aspect=aspect.tag,
        name=aspect.name,
        statistical_type=aspect.statistical_type.value,
    )

    store.delete_checkpoint(checkpoint, drop_table=False)
    clear_aspect(store, aspect.tag)

    incidence = load_aspect_matrix(store, aspect.name)

    stored = 0

    def sink(matrix, aspect_tag, row_key):
        nonlocal stored
        store_matrix(store, matrix, aspect_tag, row_key)
        stored += 1

    gene_index = compute_aspect_similarity(
        incidence, aspect.statistical_type, aspect.tag, sink
    )

    store.record_checkpoint(
        checkpoint,
        row_count=len(gene_index),
        description=f"Similarity ratings for aspect '{aspect.name}' ({aspect.statistical_type.value})",
    )

    provenance.record_step("compute_similarity", {
        "aspect": aspect.tag,
        "name": aspect.name,
        "statistical_type": aspect.statistical_type.value,
        "gene_count": len(gene_index),
        "stored_matrices": stored,
    })

    logger.info(
        "run_aspect_complete",
        aspect=aspect.tag,
        gene_count=len(gene_index),
        stored_matrices=stored,
    )

    return True
