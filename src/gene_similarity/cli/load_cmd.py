"""Load command: import gene/item associations into DuckDB."""

import logging
import sys
from pathlib import Path

import click

from gene_similarity.config.loader import load_config
from gene_similarity.persistence import PipelineStore, ProvenanceTracker
from gene_similarity.source import GENE_ITEMS_TABLE_NAME, load_gene_items, read_gene_items

logger = logging.getLogger(__name__)


@click.command('load')
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--separator',
    default='\t',
    show_default='tab',
    help='Field separator of the input file'
)
@click.option(
    '--append',
    is_flag=True,
    help='Append to existing gene_items instead of replacing them'
)
@click.pass_context
def load(ctx, path, separator, append):
    """Load gene/item associations from a delimited file.

    The file needs a header with gene_id, aspect and item_id. Leave item_id
    empty to register a gene that has no items in an aspect.

    Examples:

        gene-similarity load data/gene_items.tsv

        gene-similarity load extra.csv --separator , --append
    """
    config_path = ctx.obj['config_path']

    store = None
    try:
        config = load_config(config_path)
        store = PipelineStore.from_config(config)
        provenance = ProvenanceTracker.from_config(config)

        click.echo(f"Reading {path}...")
        df = read_gene_items(path, separator=separator)

        load_gene_items(df, store, provenance, replace=not append)
        provenance.save_to_store(store)

        aspects = sorted(df['aspect'].unique().to_list())
        click.echo(click.style(
            f"  Loaded {df.height} associations for {df['gene_id'].n_unique()} genes",
            fg='green'
        ))
        click.echo(f"  Aspects: {', '.join(aspects)}")
        if append:
            total = store.load_dataframe(GENE_ITEMS_TABLE_NAME)
            click.echo(
                f"  Table {GENE_ITEMS_TABLE_NAME} now holds {total.height} associations"
                f" for {total['gene_id'].n_unique()} genes"
            )

        configured = {aspect.name for aspect in config.aspects}
        unknown = [name for name in aspects if name not in configured]
        if unknown:
            click.echo(click.style(
                f"  Not configured (will be ignored): {', '.join(unknown)}",
                fg='yellow'
            ))

    except Exception as e:
        click.echo(click.style(f"Error loading associations: {e}", fg='red'), err=True)
        logger.exception("Failed to load gene/item associations")
        sys.exit(1)

    finally:
        if store is not None:
            store.close()
