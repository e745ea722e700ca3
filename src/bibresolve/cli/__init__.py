# ABOUTME: CLI package for bibresolve, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from bibresolve.cli.commands import keywords_cmd, lookup_cmd


def _configure_logging(verbose: bool) -> None:
    """Route log records through Rich on stderr; DEBUG when verbose, WARNING otherwise."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; keep it quiet unless debugging.
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.group()
@click.version_option(package_name="bibresolve")
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """bibresolve - resolve bibliographic metadata from public sources."""
    _configure_logging(verbose)


cli.add_command(lookup_cmd.isbn)
cli.add_command(lookup_cmd.book)
cli.add_command(lookup_cmd.url)
cli.add_command(lookup_cmd.doi)
cli.add_command(lookup_cmd.song)
cli.add_command(keywords_cmd.keywords)
cli.add_command(keywords_cmd.movie)
