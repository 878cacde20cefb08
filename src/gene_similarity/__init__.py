"""gene-similarity: pairwise gene similarity ratings per annotation aspect."""

__version__ = "0.1.0"
