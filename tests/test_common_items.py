"""Unit tests for common item finding and the per-gene loop."""

import pytest

from gene_similarity.errors import MalformedRowError
from gene_similarity.similarity.common_items import (
    common_matrix_loop,
    find_common_items,
    find_common_items_presence,
)
from gene_similarity.similarity.models import ALL_GENES_KEY, Coordinate

from conftest import PATHWAY_A, PATHWAY_B, build_incidence


def test_find_common_items_enumerates_shared_items(category_incidence):
    """Gene 1 shares A with gene 2 and B with gene 3; the diagonal holds its own items."""
    accumulator = {}

    find_common_items(category_incidence, accumulator, Coordinate(0, 0))

    assert accumulator == {
        Coordinate(1, 1): [PATHWAY_A, PATHWAY_B],
        Coordinate(1, 2): [PATHWAY_A],
        Coordinate(1, 3): [PATHWAY_B],
    }


def test_find_common_items_no_entry_without_shared_items(category_incidence):
    """Genes 2 ([A]) and 3 ([B]) share nothing: no cell at all, not an empty list."""
    accumulator = {}

    find_common_items(category_incidence, accumulator, Coordinate(1, 0))

    assert Coordinate(2, 3) not in accumulator
    assert accumulator == {
        Coordinate(2, 1): [PATHWAY_A],
        Coordinate(2, 2): [PATHWAY_A],
    }


def test_find_common_items_gene_without_items(mixed_incidence):
    accumulator = {}

    find_common_items(mixed_incidence, accumulator, Coordinate(2, 0))

    assert accumulator == {}


def test_find_common_items_counts_duplicate_items_once():
    """An item listed twice for a gene is one shared item, not two."""
    incidence = {
        Coordinate(0, 0): 1,
        Coordinate(0, 1): PATHWAY_A,
        Coordinate(0, 2): PATHWAY_A,
        Coordinate(1, 0): 2,
        Coordinate(1, 1): PATHWAY_A,
    }
    accumulator = {}

    find_common_items(incidence, accumulator, Coordinate(0, 0))

    assert accumulator == {
        Coordinate(1, 1): [PATHWAY_A],
        Coordinate(1, 2): [PATHWAY_A],
    }


def test_find_common_items_ignores_gene_id_cells():
    """A gene ID equal to another gene's item value is not a shared item."""
    incidence = build_incidence({7: [5], 8: [7]})
    accumulator = {}

    find_common_items(incidence, accumulator, Coordinate(0, 0))

    assert accumulator == {Coordinate(1, 1): [5]}


def test_find_common_items_keeps_anchor_column_order():
    incidence = build_incidence({1: [30, 10, 20], 2: [20, 30]})
    accumulator = {}

    find_common_items(incidence, accumulator, Coordinate(0, 0))

    assert accumulator[Coordinate(1, 2)] == [30, 20]


def test_find_common_items_presence_single_bucket(category_incidence):
    accumulator = {}

    find_common_items_presence(category_incidence, accumulator, Coordinate(0, 0))

    assert accumulator == {Coordinate(1, 1): [PATHWAY_A, PATHWAY_B]}


def test_find_common_items_presence_gene_without_items(mixed_incidence):
    accumulator = {}

    find_common_items_presence(mixed_incidence, accumulator, Coordinate(2, 0))

    assert accumulator == {}


def test_common_matrix_loop_category_scenario(category_incidence, sink):
    """Category scenario: score(1, 2) = 100 * 1 // 2 = 50."""
    index = common_matrix_loop(category_incidence, "1", sink, find_common_items)

    common_1, rating_1 = sink.matrices("1")
    assert common_1 == {
        Coordinate(1, 0): [1],
        Coordinate(1, 1): [PATHWAY_A, PATHWAY_B],
        Coordinate(1, 2): [PATHWAY_A],
        Coordinate(1, 3): [PATHWAY_B],
    }
    assert rating_1 == {
        Coordinate(1, 0): 1,
        Coordinate(1, 1): 100,
        Coordinate(1, 2): 50,
        Coordinate(1, 3): 50,
    }

    _, rating_2 = sink.matrices("2")
    assert rating_2 == {
        Coordinate(2, 0): 2,
        Coordinate(2, 1): 100,
        Coordinate(2, 2): 100,
    }

    assert index == {Coordinate(0, 1): 1, Coordinate(0, 2): 2, Coordinate(0, 3): 3}


def test_common_matrix_loop_stores_in_gene_order_then_index(category_incidence, sink):
    common_matrix_loop(category_incidence, "1", sink, find_common_items)

    assert sink.row_keys() == ["1", "1", "2", "2", "3", "3", ALL_GENES_KEY]
    assert all(aspect == "1" for aspect, _, _ in sink.calls)


def test_common_matrix_loop_gene_without_items(mixed_incidence, sink):
    """Zero-item gene: only its ID is stored, no self rating."""
    common_matrix_loop(mixed_incidence, "1", sink, find_common_items)

    common_3, rating_3 = sink.matrices("3")
    assert common_3 == {Coordinate(3, 0): [3]}
    assert rating_3 == {Coordinate(3, 0): 3}


def test_common_matrix_loop_without_rating(category_incidence, sink):
    common_matrix_loop(
        category_incidence, "4", sink, find_common_items_presence, rate=False
    )

    assert sink.row_keys() == ["1", "2", "3", ALL_GENES_KEY]
    assert sink.matrices("2") == [{
        Coordinate(2, 0): [2],
        Coordinate(2, 2): [PATHWAY_A],
    }]


def test_common_matrix_loop_malformed_fails_before_storing(category_incidence, sink):
    del category_incidence[Coordinate(2, 0)]

    with pytest.raises(MalformedRowError):
        common_matrix_loop(category_incidence, "1", sink, find_common_items)

    assert sink.calls == []


def test_common_matrix_loop_repeated_gene_fails_before_storing(category_incidence, sink):
    category_incidence[Coordinate(2, 0)] = 1

    with pytest.raises(MalformedRowError, match="duplicate gene ID 1"):
        common_matrix_loop(category_incidence, "1", sink, find_common_items)

    assert sink.calls == []


def test_common_matrix_loop_empty_incidence(sink):
    index = common_matrix_loop({}, "1", sink, find_common_items)

    assert index == {}
    assert sink.calls == [("1", ALL_GENES_KEY, {})]
