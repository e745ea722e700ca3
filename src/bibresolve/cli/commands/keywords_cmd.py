# ABOUTME: The `bibresolve keywords` command and the catalog-first `movie` command.
# ABOUTME: Model calls need OPENAI_API_KEY; the film catalogs need OMDB_API_KEY or TMDB_API_KEY.

import logging

import click
from rich.console import Console
from rich.markup import escape

from bibresolve.cli.options import deadline_option, json_option
from bibresolve.cli.output import print_attempts, print_record, print_record_json
from bibresolve.config import Settings, load_settings
from bibresolve.core.resolver import CancelToken, build_resolver
from bibresolve.metadata.errors import (
    ConfigurationError,
    NoProviderError,
    ProviderError,
    RecordValidationError,
    ResolutionCancelled,
    TextParseError,
)
from bibresolve.metadata.generative import OpenAICompleter, suggest_keywords, synthesize_movie
from bibresolve.metadata.http import BibHttpClient
from bibresolve.metadata.types import Record

logger = logging.getLogger(__name__)


def _create_http_client(timeout: float, user_agent: str) -> BibHttpClient:
    return BibHttpClient(timeout=timeout, user_agent=user_agent)


@click.command("keywords")
@click.option("-t", "--title", required=True, help="Title of the work.")
@click.option("-s", "--summary", default="", help="Summary or abstract of the work.")
def keywords(title: str, summary: str) -> None:
    """Suggest topical keywords for a work."""
    console = Console()
    try:
        settings = load_settings()
        with _create_http_client(settings.timeout, settings.user_agent) as http_client:
            completer = OpenAICompleter.from_settings(http_client, settings)
            suggested = suggest_keywords(completer, title, summary)
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc
    except (ProviderError, TextParseError) as exc:
        console.print(f"[red]Keyword suggestion failed:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc

    for keyword in suggested:
        click.echo(keyword)


@click.command("movie")
@click.option("-t", "--title", required=True, help="Film title.")
@click.option("-d", "--date", default="", help="Release date (YYYY or YYYY-MM-DD).")
@json_option
@deadline_option
def movie(title: str, date: str, as_json: bool, deadline: float | None) -> None:
    """Look up a film in OMDb, then TMDb, falling back to model knowledge."""
    console = Console()
    error_console = Console(stderr=True) if as_json else console
    try:
        settings = load_settings()
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc

    cancel = CancelToken(timeout=deadline) if deadline is not None else None
    with _create_http_client(settings.timeout, settings.user_agent) as http_client:
        try:
            resolution = build_resolver(http_client, settings).resolve_movie(
                title, date, cancel=cancel
            )
        except ResolutionCancelled as exc:
            error_console.print(f"[red]{escape(str(exc))}[/red]")
            print_attempts(error_console, exc.attempts)
            raise SystemExit(1) from exc
        except NoProviderError as exc:
            if not settings.openai_api_key:
                error_console.print(f"[red]{escape(str(exc))}[/red]")
                print_attempts(error_console, exc.attempts)
                raise SystemExit(1) from exc
            logger.info("No film catalog matched %r; asking the model", title)
            record = _synthesize_movie(error_console, http_client, settings, title, date)
            provider = "openai"
        else:
            record, provider = resolution.record, resolution.provider

    if as_json:
        print_record_json(record)
    else:
        print_record(console, record, provider)


def _synthesize_movie(
    console: Console, http_client: BibHttpClient, settings: Settings, title: str, date: str
) -> Record:
    try:
        completer = OpenAICompleter.from_settings(http_client, settings)
        return synthesize_movie(completer, title, date)
    except ConfigurationError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc
    except RecordValidationError as exc:
        console.print(f"[red]Model output did not form a valid record:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc
    except ProviderError as exc:
        console.print(f"[red]Model request failed:[/red] {escape(str(exc))}")
        raise SystemExit(1) from exc
