"""Output generation: similarity rating exports."""

from gene_similarity.output.writers import write_rating_output

__all__ = [
    "write_rating_output",
]
