"""Exceptions raised by the gene similarity pipeline."""


class GeneSimilarityError(Exception):
    """Base class for pipeline errors."""


class MalformedRowError(GeneSimilarityError):
    """An incidence row is missing its column-0 gene ID or has a bad coordinate."""

    def __init__(self, row: int, reason: str = "missing gene ID in column 0"):
        self.row = row
        self.reason = reason
        super().__init__(f"Malformed incidence row {row}: {reason}")


class SourceDataError(GeneSimilarityError):
    """Gene/item association data is missing or cannot be parsed."""
