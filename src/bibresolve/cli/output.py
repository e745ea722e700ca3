# ABOUTME: Rich and JSON rendering of resolved records and provider attempt traces.
# ABOUTME: Shared by every lookup command so output looks the same everywhere.

import json
from collections.abc import Sequence

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from bibresolve.metadata.types import Attempt, Record, record_to_dict


def print_record_json(record: Record) -> None:
    click.echo(json.dumps(record_to_dict(record), indent=2, ensure_ascii=False))


def print_record(console: Console, record: Record, provider: str) -> None:
    """Show a record's populated fields as a two-column table.

    Values come from remote sources, so they are escaped before Rich sees them.
    """
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold", width=12)
    table.add_column("Value")

    rows = [("Type", record.type), ("Title", record.title)]
    rows.append(("Authors", record.author or "unknown"))
    if record.year is not None:
        rows.append(("Year", str(record.year)))
    if record.publisher:
        rows.append(("Publisher", record.publisher))
    if record.container_title and record.container_title != record.publisher:
        rows.append(("Container", record.container_title))
    if record.isbn:
        rows.append(("ISBN", record.isbn))
    if record.doi:
        rows.append(("DOI", record.doi))
    if record.url:
        rows.append(("URL", record.url))
        rows.append(("Accessed", record.accessed))
    rows.append(("Keywords", ", ".join(record.annotation.keywords)))
    rows.append(("Summary", record.annotation.summary))
    rows.append(("Source", provider))

    for label, value in rows:
        table.add_row(label, escape(value))
    console.print(table)


def print_attempts(console: Console, attempts: Sequence[Attempt]) -> None:
    """Show the provider attempt trace in call order."""
    table = Table(title="Providers tried")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Provider", style="bold", no_wrap=True)
    table.add_column("Result")
    table.add_column("Error", style="dim")

    for index, attempt in enumerate(attempts, start=1):
        result = "[green]ok[/green]" if attempt.success else "[red]failed[/red]"
        table.add_row(str(index), attempt.provider, result, escape(attempt.error))
    console.print(table)
