"""Shared fixtures for gene similarity tests."""

import polars as pl
import pytest

from gene_similarity.similarity.models import Coordinate

PATHWAY_A = 101
PATHWAY_B = 102


def build_incidence(genes: dict[int, list[int]]) -> dict:
    """Incidence matrix with one row per gene in insertion order."""
    matrix = {}
    for row, (gene_id, items) in enumerate(genes.items()):
        matrix[Coordinate(row, 0)] = gene_id
        for col, item in enumerate(items, start=1):
            matrix[Coordinate(row, col)] = item
    return matrix


class RecordingSink:
    """Sink collecting (aspect, row_key, matrix) in call order."""

    def __init__(self):
        self.calls = []

    def __call__(self, matrix, aspect, row_key):
        self.calls.append((aspect, row_key, dict(matrix)))

    def matrices(self, row_key):
        return [matrix for _, key, matrix in self.calls if key == row_key]

    def row_keys(self):
        return [key for _, key, _ in self.calls]


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def category_incidence():
    """Genes {1: [A, B], 2: [A], 3: [B]}."""
    return build_incidence({1: [PATHWAY_A, PATHWAY_B], 2: [PATHWAY_A], 3: [PATHWAY_B]})


@pytest.fixture
def mixed_incidence():
    """Genes {1: [A, B], 2: [A], 3: []}."""
    return build_incidence({1: [PATHWAY_A, PATHWAY_B], 2: [PATHWAY_A], 3: []})


@pytest.fixture
def gene_items_df():
    """Associations for two aspects; gene 3 has no pathway."""
    return pl.DataFrame({
        "gene_id": [1, 1, 2, 3, 1, 2, 2, 3],
        "aspect": ["pathways"] * 4 + ["interactions"] * 4,
        "item_id": [PATHWAY_A, PATHWAY_B, PATHWAY_A, None, 501, 501, 502, 503],
    }, schema={"gene_id": pl.Int64, "aspect": pl.Utf8, "item_id": pl.Int64})


@pytest.fixture
def test_config_path(tmp_path):
    """Minimal config YAML with one aspect of each type."""
    config_path = tmp_path / "test_config.yaml"
    config_path.write_text(f"""
data_dir: {tmp_path / "data"}
duckdb_path: {tmp_path / "test.duckdb"}
aspects:
  - name: pathways
    tag: "1"
    statistical_type: category
  - name: interactions
    tag: "2"
    statistical_type: count
  - name: pathways
    tag: "3"
    statistical_type: presence
output:
  output_dir: {tmp_path / "results"}
  min_rating: 0
""")
    return config_path
