"""Main CLI entry point for gene-similarity.

Provides command group with global options and subcommands for pipeline operations.
"""

import logging
from pathlib import Path

import click

from gene_similarity import __version__
from gene_similarity.config.loader import load_config
from gene_similarity.persistence import PipelineStore
from gene_similarity.cli.load_cmd import load
from gene_similarity.cli.compute_cmd import compute
from gene_similarity.cli.query_cmd import similar, export


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to pipeline configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """Gene-similarity: pairwise gene similarity ratings per annotation aspect.

    Loads gene/item associations, computes 0-100 similarity ratings for every
    gene pair within one aspect at a time, and stores them row-wise in DuckDB.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display pipeline information and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Gene Similarity v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Aspects:", bold=True))
        for aspect in config.aspects:
            click.echo(
                f"  [{aspect.tag}] {aspect.name} ({aspect.statistical_type.value})"
                + (f" - {aspect.description}" if aspect.description else "")
            )
        click.echo()

        click.echo(click.style("Paths:", bold=True))
        click.echo(f"  Data Directory: {config.data_dir}")
        click.echo(f"  DuckDB Path: {config.duckdb_path}")
        click.echo(f"  Output Directory: {config.output.output_dir}")

        if config.duckdb_path.exists():
            click.echo()
            click.echo(click.style("Checkpoints:", bold=True))
            with PipelineStore.from_config(config) as store:
                checkpoints = store.list_checkpoints()
            if not checkpoints:
                click.echo("  (none)")
            for checkpoint in checkpoints:
                click.echo(
                    f"  {checkpoint['table_name']}: {checkpoint['row_count']} rows"
                    f" ({checkpoint['created_at']})"
                )

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(load)
cli.add_command(compute)
cli.add_command(similar)
cli.add_command(export)


if __name__ == '__main__':
    cli()
