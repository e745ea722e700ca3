# ABOUTME: The `bibresolve isbn`, `book`, `url`, `doi`, and `song` lookup commands.
# ABOUTME: Each runs one resolution through the provider chain and prints the record.

from collections.abc import Callable

import click
from rich.console import Console
from rich.markup import escape

from bibresolve.cli.options import deadline_option, json_option
from bibresolve.cli.output import print_attempts, print_record, print_record_json
from bibresolve.config import Settings, load_settings
from bibresolve.core.resolver import CancelToken, Resolution, Resolver, build_resolver
from bibresolve.metadata.errors import ConfigurationError, NoProviderError, ResolutionCancelled
from bibresolve.metadata.http import BibHttpClient


def _create_http_client(settings: Settings) -> BibHttpClient:
    """Create the request executor from environment settings."""
    return BibHttpClient(timeout=settings.timeout, user_agent=settings.user_agent)


def _run_lookup(
    resolve: Callable[[Resolver, CancelToken | None], Resolution],
    as_json: bool,
    deadline: float | None,
) -> None:
    """Build a resolver, run one resolution, print it, and exit 1 on failure."""
    console = Console()
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc

    cancel = CancelToken(timeout=deadline) if deadline is not None else None
    with _create_http_client(settings) as http_client:
        resolver = build_resolver(http_client, settings)
        try:
            resolution = resolve(resolver, cancel)
        except (NoProviderError, ResolutionCancelled) as exc:
            error_console = Console(stderr=True) if as_json else console
            error_console.print(f"[red]{escape(str(exc))}[/red]")
            print_attempts(error_console, exc.attempts)
            raise SystemExit(1) from exc

    if as_json:
        print_record_json(resolution.record)
        return
    print_record(console, resolution.record, resolution.provider)
    print_attempts(console, resolution.attempts)


@click.command("isbn")
@click.argument("isbn_value", metavar="ISBN")
@json_option
@deadline_option
def isbn(isbn_value: str, as_json: bool, deadline: float | None) -> None:
    """Look up a book by ISBN (9-digit cores get a check digit)."""
    _run_lookup(
        lambda resolver, cancel: resolver.resolve_by_isbn(isbn_value, cancel=cancel),
        as_json,
        deadline,
    )


@click.command("book")
@click.option("-t", "--title", default="", help="Title to search for.")
@click.option("-a", "--author", default="", help="Author to search for.")
@json_option
@deadline_option
def book(title: str, author: str, as_json: bool, deadline: float | None) -> None:
    """Look up a book by title and/or author."""
    _run_lookup(
        lambda resolver, cancel: resolver.resolve_by_title_author(title, author, cancel=cancel),
        as_json,
        deadline,
    )


@click.command("url")
@click.argument("page_url", metavar="URL")
@json_option
@deadline_option
def url(page_url: str, as_json: bool, deadline: float | None) -> None:
    """Build a record for a web page, PDF, or YouTube video."""
    _run_lookup(
        lambda resolver, cancel: resolver.resolve_by_url(page_url, cancel=cancel),
        as_json,
        deadline,
    )


@click.command("doi")
@click.argument("doi_value", metavar="DOI")
@json_option
@deadline_option
def doi(doi_value: str, as_json: bool, deadline: float | None) -> None:
    """Look up a journal article by DOI (bare, doi: prefixed, or a doi.org link)."""
    _run_lookup(
        lambda resolver, cancel: resolver.resolve_by_doi(doi_value, cancel=cancel),
        as_json,
        deadline,
    )


@click.command("song")
@click.option("-t", "--title", required=True, help="Song title.")
@click.option("-a", "--artist", default="", help="Performing artist.")
@click.option("-d", "--date", default="", help="Release date (YYYY or YYYY-MM-DD).")
@json_option
@deadline_option
def song(title: str, artist: str, date: str, as_json: bool, deadline: float | None) -> None:
    """Look up a song in iTunes, then MusicBrainz."""
    _run_lookup(
        lambda resolver, cancel: resolver.resolve_song(title, artist, date, cancel=cancel),
        as_json,
        deadline,
    )
