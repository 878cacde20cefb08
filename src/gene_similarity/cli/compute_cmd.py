"""Compute command: run the similarity pass for configured aspects."""

import logging
import sys

import click

from gene_similarity.config.loader import load_config
from gene_similarity.persistence import PipelineStore, ProvenanceTracker
from gene_similarity.pipeline import run_aspect

logger = logging.getLogger(__name__)


@click.command('compute')
@click.option(
    '--aspect',
    'aspect_tags',
    multiple=True,
    help='Aspect tag to compute (repeatable; default: all configured aspects)'
)
@click.option(
    '--force',
    is_flag=True,
    help='Recompute aspects even if their checkpoint exists'
)
@click.pass_context
def compute(ctx, aspect_tags, force):
    """Compute pairwise similarity ratings, one aspect at a time.

    Supports checkpoint-restart: aspects that completed before are skipped
    (use --force to recompute). A failing aspect stops the run; aspects
    completed before it keep their results.

    Examples:

        gene-similarity compute

        gene-similarity compute --aspect 1 --aspect 3 --force
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style("=== Gene Similarity ===", bold=True))
    click.echo()

    store = None
    try:
        config = load_config(config_path)
        store = PipelineStore.from_config(config)
        provenance = ProvenanceTracker.from_config(config)
    except Exception as e:
        click.echo(click.style(f"Error initializing pipeline: {e}", fg='red'), err=True)
        logger.exception("Failed to initialize pipeline")
        if store is not None:
            store.close()
        sys.exit(1)

    try:
        try:
            aspects = (
                [config.get_aspect(tag) for tag in aspect_tags]
                if aspect_tags else config.aspects
            )
        except KeyError as e:
            click.echo(click.style(f"Error: {e.args[0]}", fg='red'), err=True)
            sys.exit(1)

        computed = 0
        for aspect in aspects:
            click.echo(click.style(
                f"Aspect {aspect.tag}: {aspect.name} ({aspect.statistical_type.value})",
                bold=True
            ))
            try:
                ran = run_aspect(store, aspect, provenance, force=force)
            except Exception as e:
                click.echo(click.style(f"  Error computing aspect {aspect.tag}: {e}", fg='red'), err=True)
                logger.exception("Failed to compute aspect %s", aspect.tag)
                provenance.save_to_store(store)
                sys.exit(1)

            if ran:
                computed += 1
                click.echo(click.style("  Ratings stored", fg='green'))
            else:
                click.echo(click.style(
                    "  Checkpoint exists. Skipping (use --force to re-run).",
                    fg='yellow'
                ))
            click.echo()

        provenance.save_to_store(store)

        click.echo(click.style("=== Summary ===", bold=True))
        click.echo(f"Aspects computed: {computed}")
        click.echo(f"Aspects skipped: {len(aspects) - computed}")
        click.echo(f"DuckDB Path: {config.duckdb_path}")

    finally:
        store.close()
