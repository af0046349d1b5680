"""Command-line interface for Inkwell.

Commands:
- build: Build the site into the output directory.
- routes: List every route and the document it comes from.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .config import ConfigError
from .errors import DuplicateRouteError, InkwellError, NotFoundError, RenderError


@click.group()
@click.version_option(version=__version__, prog_name="inkwell")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Inkwell static content pipeline."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.option("--drafts", is_flag=True, help="Include draft content")
@click.option("--workers", type=int, default=None, help="Parse documents on N threads")
@click.option(
    "--output",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Output directory (overrides inkwell.yaml)",
)
def build(drafts: bool, workers: int | None, output: Path | None):
    """Build the site into the output directory."""
    project_root = Path.cwd()
    from .build import build_site

    try:
        result = build_site(
            project_root,
            include_drafts=drafts,
            workers=workers,
            output_dir_override=output,
        )
    except (InkwellError, ConfigError) as exc:
        _report_failure(exc)
        raise SystemExit(1) from None
    for warning in result.warnings:
        click.echo(click.style(f"Warning: {warning}", fg="yellow"), err=True)
    for skipped in result.skipped:
        click.echo(click.style(f"Skipped: {skipped}", fg="yellow"), err=True)
    click.echo(f"Built {len(result.pages)} pages into {result.output_dir}")


@cli.command()
def routes():
    """List every route with its source document."""
    from .config import load_config
    from .pipeline import build_pages

    try:
        result = build_pages(load_config(Path.cwd()))
    except (InkwellError, ConfigError) as exc:
        _report_failure(exc)
        raise SystemExit(1) from None
    width = max((len(page.route) for page in result.pages), default=0)
    for page in result.pages:
        source = f"{page.source}:{page.source_path}" if page.source else page.source_path
        click.echo(f"{page.route.ljust(width)}  {source}")


def _report_failure(exc: Exception) -> None:
    """Print a user-friendly build failure message."""
    click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
    if isinstance(exc, DuplicateRouteError):
        click.echo(click.style(f"  Route: {exc.route}", fg="yellow"), err=True)
        click.echo(click.style(f"  File: {exc.first_path}", fg="yellow"), err=True)
        click.echo(click.style(f"  File: {exc.second_path}", fg="yellow"), err=True)
        click.echo("  Error: two documents map to the same route", err=True)
    elif isinstance(exc, NotFoundError):
        click.echo(click.style(f"  Path: {exc.path}", fg="yellow"), err=True)
        click.echo("  Error: content root does not exist", err=True)
    elif isinstance(exc, RenderError):
        click.echo(click.style(f"  File: {exc.source_path}", fg="yellow"), err=True)
        click.echo(f"  Error: {exc.message}", err=True)
    else:
        click.echo(f"  Error: {exc}", err=True)


def main():
    """Entry point for the CLI application."""
    cli()
