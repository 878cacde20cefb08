"""Tests for reading gene/item associations and building incidence matrices."""

import polars as pl
import pytest

from gene_similarity.config.schema import AspectConfig, PipelineConfig
from gene_similarity.errors import SourceDataError
from gene_similarity.persistence import PipelineStore, ProvenanceTracker
from gene_similarity.similarity.models import Coordinate
from gene_similarity.source import (
    GENE_ITEMS_TABLE_NAME,
    GeneItemRecord,
    build_incidence_matrix,
    load_aspect_matrix,
    load_gene_items,
    read_gene_items,
)

from conftest import PATHWAY_A, PATHWAY_B


@pytest.fixture
def associations_tsv(tmp_path):
    path = tmp_path / "gene_items.tsv"
    path.write_text(
        "gene_id\taspect\titem_id\tsource\n"
        "1\tpathways\t101\tkegg\n"
        "1\tpathways\t102\tkegg\n"
        "2\tpathways\t101\treactome\n"
        "3\tpathways\t\t\n"
    )
    return path


@pytest.fixture
def provenance(tmp_path):
    config = PipelineConfig(
        data_dir=tmp_path / "data",
        duckdb_path=tmp_path / "test.duckdb",
        aspects=[AspectConfig(name="pathways", tag="1", statistical_type="category")],
    )
    return ProvenanceTracker("0.1.0", config)


def test_read_gene_items_parses_ids(associations_tsv):
    df = read_gene_items(associations_tsv)

    assert df.columns == ["gene_id", "aspect", "item_id"]
    assert df.schema["gene_id"] == pl.Int64
    assert df.schema["item_id"] == pl.Int64
    assert df["item_id"].to_list() == [PATHWAY_A, PATHWAY_B, PATHWAY_A, None]


def test_read_gene_items_csv_separator(tmp_path):
    path = tmp_path / "gene_items.csv"
    path.write_text("gene_id,aspect,item_id\n5,go_terms,9\n")

    df = read_gene_items(path, separator=",")

    assert df.rows() == [(5, "go_terms", 9)]


def test_read_gene_items_missing_column(tmp_path):
    path = tmp_path / "bad.tsv"
    path.write_text("gene_id\titem_id\n1\t101\n")

    with pytest.raises(SourceDataError, match="aspect"):
        read_gene_items(path)


def test_read_gene_items_non_integer_id(tmp_path):
    path = tmp_path / "bad.tsv"
    path.write_text("gene_id\taspect\titem_id\nMYO7A\tpathways\t101\n")

    with pytest.raises(SourceDataError, match="integers"):
        read_gene_items(path)


def test_read_gene_items_missing_gene_id(tmp_path):
    path = tmp_path / "bad.tsv"
    path.write_text("gene_id\taspect\titem_id\n\tpathways\t101\n")

    with pytest.raises(SourceDataError, match="without gene_id"):
        read_gene_items(path)


def test_read_gene_items_file_not_found(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_gene_items(tmp_path / "missing.tsv")


def test_build_incidence_matrix_orders_genes_and_items():
    records = [
        GeneItemRecord(gene_id=20, aspect="pathways", item_id=PATHWAY_B),
        GeneItemRecord(gene_id=10, aspect="pathways", item_id=PATHWAY_B),
        GeneItemRecord(gene_id=10, aspect="pathways", item_id=PATHWAY_A),
        GeneItemRecord(gene_id=10, aspect="pathways", item_id=PATHWAY_A),
        GeneItemRecord(gene_id=30, aspect="pathways"),
        GeneItemRecord(gene_id=10, aspect="go_terms", item_id=7),
    ]
    df = pl.DataFrame(
        [record.model_dump() for record in records],
        schema={"gene_id": pl.Int64, "aspect": pl.Utf8, "item_id": pl.Int64},
    )

    matrix = build_incidence_matrix(df, "pathways")

    assert matrix == {
        Coordinate(0, 0): 10,
        Coordinate(0, 1): PATHWAY_A,
        Coordinate(0, 2): PATHWAY_B,
        Coordinate(1, 0): 20,
        Coordinate(1, 1): PATHWAY_B,
        Coordinate(2, 0): 30,
    }


def test_build_incidence_matrix_unknown_aspect(gene_items_df):
    assert build_incidence_matrix(gene_items_df, "phenotypes") == {}


def test_load_gene_items_and_aspect_matrix(tmp_path, associations_tsv, provenance):
    df = read_gene_items(associations_tsv)

    with PipelineStore(tmp_path / "test.duckdb") as store:
        load_gene_items(df, store, provenance)

        assert store.has_checkpoint(GENE_ITEMS_TABLE_NAME)
        matrix = load_aspect_matrix(store, "pathways")

    assert matrix[Coordinate(0, 0)] == 1
    assert matrix[Coordinate(1, 1)] == PATHWAY_A
    assert matrix[Coordinate(2, 0)] == 3
    assert Coordinate(2, 1) not in matrix

    step = provenance.get_steps()[-1]
    assert step["step_name"] == "load_gene_items"
    assert step["details"]["aspects"] == [{"aspect": "pathways", "genes": 3, "items": 2}]


def test_load_gene_items_append_drops_nothing_from_earlier_load(tmp_path, associations_tsv, provenance):
    df = read_gene_items(associations_tsv)
    extra = pl.DataFrame(
        {"gene_id": [4], "aspect": ["go_terms"], "item_id": [9]},
        schema={"gene_id": pl.Int64, "aspect": pl.Utf8, "item_id": pl.Int64},
    )

    with PipelineStore(tmp_path / "test.duckdb") as store:
        load_gene_items(df, store, provenance)
        load_gene_items(extra, store, provenance, replace=False)

        assert store.load_dataframe(GENE_ITEMS_TABLE_NAME).height == 5


def test_load_aspect_matrix_without_table(tmp_path):
    with PipelineStore(tmp_path / "test.duckdb") as store:
        with pytest.raises(SourceDataError):
            load_aspect_matrix(store, "pathways")
