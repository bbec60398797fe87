"""Click CLI with check and deps subcommands."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from import_cycles import __version__
from import_cycles.models import AnalysisConfig
from import_cycles.pipeline import build_graph, detect_import_cycles
from import_cycles.report import (
    format_dependencies,
    format_ranking,
    format_text,
    rank_cycle_files,
    relative_to,
    to_json,
)

_ENTRY_TYPE = click.Path(exists=True, dir_okay=False, path_type=Path)


def _configure_logging(verbose: int) -> None:
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )


def _path_formatter(relative: bool):
    if relative:
        return relative_to(Path.cwd())
    return str


@click.group()
@click.version_option(version=__version__)
def cli():
    """import-cycles: find runtime import cycles in TypeScript code."""


@cli.command()
@click.argument("entries", nargs=-1, required=True, type=_ENTRY_TYPE)
@click.option("--json", "as_json", is_flag=True, help="Print the report as JSON")
@click.option("--rank", is_flag=True, help="Rank files by how many cycles they are in")
@click.option("--relative/--absolute", default=True, help="Show paths relative to the cwd")
@click.option("--strict", is_flag=True, help="Exit with status 1 when a cycle is found")
@click.option("--workers", "-w", type=click.IntRange(min=1), help="Worker threads")
@click.option("--warn-type-imports", is_flag=True,
              help="Warn about classes imported without `import type` but used only as types")
@click.option("--verbose", "-v", count=True, help="-v for info, -vv for debug logging")
def check(
    entries: tuple[Path, ...],
    as_json: bool,
    rank: bool,
    relative: bool,
    strict: bool,
    workers: int | None,
    warn_type_imports: bool,
    verbose: int,
):
    """Detect import cycles reachable from ENTRIES."""
    _configure_logging(verbose)
    config = AnalysisConfig(
        max_workers=workers or 0,
        warn_class_type_imports=warn_type_imports,
    )
    fmt = _path_formatter(relative)

    result = detect_import_cycles(list(entries), config)

    if as_json:
        click.echo(to_json(result, fmt), nl=False)
    elif not result.reports and not result.failures:
        click.echo(click.style("No import cycles detected.", fg="green"))
    else:
        click.echo(format_text(result, fmt), nl=False)

    if rank and not as_json:
        click.echo(click.style("Files ranked by cycle count:", bold=True))
        click.echo(format_ranking(rank_cycle_files(result.reports), fmt), nl=False)

    if result.failures or (strict and result.has_cycles):
        sys.exit(1)


@cli.command()
@click.argument("entries", nargs=-1, required=True, type=_ENTRY_TYPE)
@click.option("--relative/--absolute", default=True, help="Show paths relative to the cwd")
@click.option("--workers", "-w", type=click.IntRange(min=1), help="Worker threads")
@click.option("--verbose", "-v", count=True, help="-v for info, -vv for debug logging")
def deps(entries: tuple[Path, ...], relative: bool, workers: int | None, verbose: int):
    """Print the runtime dependency map reachable from ENTRIES."""
    _configure_logging(verbose)
    graph = build_graph(list(entries), AnalysisConfig(max_workers=workers or 0))
    output = format_dependencies(graph, _path_formatter(relative))
    click.echo(output or "No dependencies found.", nl=bool(not output))


if __name__ == "__main__":
    cli()
