"""Query commands: look up similar genes and export rating tables."""

import logging
import sys
from pathlib import Path

import click
import polars as pl

from gene_similarity.config.loader import load_config
from gene_similarity.output import write_rating_output
from gene_similarity.persistence import (
    PipelineStore,
    load_aspect_ratings,
    similar_genes,
)
from gene_similarity.pipeline import aspect_checkpoint_name

logger = logging.getLogger(__name__)


def _open_computed_aspect(config, aspect_tag):
    """Return (aspect, store) or exit if the aspect is unknown or not computed."""
    try:
        aspect = config.get_aspect(aspect_tag)
    except KeyError as e:
        click.echo(click.style(f"Error: {e.args[0]}", fg='red'), err=True)
        sys.exit(1)

    store = PipelineStore.from_config(config)
    if not store.has_checkpoint(aspect_checkpoint_name(aspect.tag)):
        store.close()
        click.echo(click.style(
            f"Error: aspect {aspect.tag} has not been computed. Run 'gene-similarity compute' first.",
            fg='red'
        ), err=True)
        sys.exit(1)

    return aspect, store


@click.command('similar')
@click.argument('gene_id', type=int)
@click.option('--aspect', 'aspect_tag', required=True, help='Aspect tag')
@click.option(
    '--min-rating',
    type=click.IntRange(0, 100),
    default=None,
    help='Minimum rating (default: output.min_rating from config)'
)
@click.option('--limit', type=int, default=20, show_default=True, help='Maximum genes to list')
@click.pass_context
def similar(ctx, gene_id, aspect_tag, min_rating, limit):
    """List the genes most similar to GENE_ID within one aspect."""
    config = load_config(ctx.obj['config_path'])
    aspect, store = _open_computed_aspect(config, aspect_tag)

    if min_rating is None:
        min_rating = config.output.min_rating

    try:
        df = similar_genes(store, aspect.tag, gene_id, min_rating=min_rating)
    except Exception as e:
        click.echo(click.style(f"Error querying ratings: {e}", fg='red'), err=True)
        logger.exception("Failed to query similar genes")
        sys.exit(1)
    finally:
        store.close()

    if df.height == 0:
        click.echo(f"No genes rated >= {min_rating} against gene {gene_id} in aspect {aspect.tag}")
        return

    click.echo(click.style(f"Genes similar to {gene_id} ({aspect.name}):", bold=True))
    for row in df.head(limit).iter_rows(named=True):
        click.echo(f"  {row['similar_gene_id']:>12}  {row['rating']:>3}")


@click.command('export')
@click.option('--aspect', 'aspect_tag', required=True, help='Aspect tag')
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Output directory (default: output.output_dir from config)'
)
@click.pass_context
def export(ctx, aspect_tag, output_dir):
    """Export the decoded ratings of one aspect as TSV and Parquet."""
    config = load_config(ctx.obj['config_path'])
    aspect, store = _open_computed_aspect(config, aspect_tag)

    output_dir = output_dir or config.output.output_dir

    try:
        df = load_aspect_ratings(store, aspect.tag).filter(
            pl.col("rating") >= config.output.min_rating
        )
        paths = write_rating_output(
            df,
            output_dir,
            filename_base=f"similarity_{aspect.tag}",
            metadata={
                "aspect": aspect.tag,
                "aspect_name": aspect.name,
                "statistical_type": aspect.statistical_type.value,
                "min_rating": config.output.min_rating,
                "config_hash": config.config_hash(),
            },
        )
    except Exception as e:
        click.echo(click.style(f"Error exporting ratings: {e}", fg='red'), err=True)
        logger.exception("Failed to export ratings")
        sys.exit(1)
    finally:
        store.close()

    click.echo(click.style(f"Exported {df.height} gene pairs", fg='green'))
    for kind, path in paths.items():
        click.echo(f"  {kind}: {path}")
