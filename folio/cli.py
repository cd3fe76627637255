"""Command-line interface for Folio.

This module defines the CLI commands using the Click framework.

Commands:
- build: Build the site from a source and a template directory.

Exit codes of ``build``:
- 0: every page was built
- 1: the build failed and no output was written
- 3: best-effort build finished but some documents or pages had errors
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from . import __version__
from .errors import FolioError

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_PARTIAL = 3

_DIR = click.Path(exists=True, file_okay=False, path_type=Path)


@click.group()
@click.version_option(version=__version__, prog_name="folio")
def cli():
    """Folio static site generator."""


@cli.command()
@click.argument("source", type=_DIR)
@click.argument("templates", type=_DIR)
@click.argument("output", type=click.Path(file_okay=False, path_type=Path))
@click.option(
    "--strict/--best-effort",
    default=None,
    help="Abort on the first error, or build what can be built (default).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (defaults to SOURCE/folio.yaml).",
)
@click.option(
    "--clean/--no-clean",
    default=None,
    help="Replace the previous output, or merge into it.",
)
@click.option("--workers", type=click.IntRange(min=1), help="Worker threads.")
@click.option("-v", "--verbose", is_flag=True, help="Log pipeline progress.")
def build(
    source: Path,
    templates: Path,
    output: Path,
    strict: bool | None,
    config_path: Path | None,
    clean: bool | None,
    workers: int | None,
    verbose: bool,
):
    """Build SOURCE with TEMPLATES into OUTPUT."""
    _configure_logging(verbose)
    from .build import build_site

    try:
        result = build_site(
            source,
            templates,
            output,
            strict=strict,
            config_path=config_path,
            clean=clean,
            workers=workers,
        )
    except FolioError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  File: {exc.source_path.as_posix()}", fg="yellow"), err=True)
        click.echo(click.style(f"  Error: {exc.kind}: {exc.message}", fg="white"), err=True)
        raise SystemExit(EXIT_FATAL) from None
    except OSError as exc:
        click.echo(click.style("Build failed:", fg="red", bold=True), err=True)
        click.echo(click.style(f"  Error: {exc}", fg="white"), err=True)
        raise SystemExit(EXIT_FATAL) from None

    report = result.report
    for line in report.count_lines():
        click.echo(line)
    if report.ok:
        click.echo(f"Built site into {result.output_dir}")
        return
    click.echo(
        click.style(f"Built with {len(report.errors)} error(s):", fg="yellow", bold=True),
        err=True,
    )
    for error in report.errors:
        click.echo(f"  {error}", err=True)
    raise SystemExit(EXIT_PARTIAL)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def main():
    """Entry point for the CLI application."""
    cli()
