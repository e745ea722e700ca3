# ABOUTME: Provider-fallback resolution: tries sources in priority order until one yields a record.
# ABOUTME: Records one Attempt per provider tried and aborts in-flight calls on cancellation.

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from bibresolve.config import Settings
from bibresolve.metadata.article import ArticleProvider
from bibresolve.metadata.bnb import BNBProvider
from bibresolve.metadata.cancel import CancelToken, cancel_scope
from bibresolve.metadata.crossref import CrossrefProvider
from bibresolve.metadata.doi import DOIProvider
from bibresolve.metadata.errors import (
    CallCancelled,
    InvalidKeyError,
    NoProviderError,
    ProviderError,
    ResolutionCancelled,
)
from bibresolve.metadata.film import OMDbProvider, TMDbProvider
from bibresolve.metadata.googlebooks import GoogleBooksProvider
from bibresolve.metadata.http import HttpClient
from bibresolve.metadata.loc import LibraryOfCongressProvider
from bibresolve.metadata.oclc import OCLCClassifyProvider
from bibresolve.metadata.openbd import OpenBDProvider
from bibresolve.metadata.openlibrary import OpenLibraryProvider, OpenLibrarySearchProvider
from bibresolve.metadata.provider import Lookup, MetadataProvider
from bibresolve.metadata.song import ITunesProvider, MusicBrainzProvider
from bibresolve.metadata.types import Attempt, Record
from bibresolve.metadata.video import YouTubeProvider, is_video_url

__all__ = ["CancelToken", "Resolution", "Resolver", "build_resolver"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Resolution:
    """A successful resolution: the record, who produced it, and every attempt made."""

    record: Record
    provider: str
    attempts: tuple[Attempt, ...]


def _require_capability(
    providers: Sequence[MetadataProvider], capability: Lookup, role: str
) -> tuple[MetadataProvider, ...]:
    for provider in providers:
        if capability not in provider.capabilities:
            raise ValueError(
                f"{provider.name} cannot serve in the {role} chain: "
                f"it does not support {capability.value} lookups"
            )
    return tuple(providers)


class Resolver:
    """Runs lookups against fixed, ordered provider lists.

    Providers are called one at a time and never retried; the first success
    wins. Every ProviderError becomes a failed Attempt, and anything else
    propagates. Each provider must declare the capability of the chain it
    is placed in.
    """

    def __init__(
        self,
        isbn_providers: Sequence[MetadataProvider],
        title_author_providers: Sequence[MetadataProvider],
        video_provider: MetadataProvider,
        article_provider: MetadataProvider,
        doi_providers: Sequence[MetadataProvider] = (),
        song_providers: Sequence[MetadataProvider] = (),
        movie_providers: Sequence[MetadataProvider] = (),
    ) -> None:
        self._isbn_providers = _require_capability(isbn_providers, Lookup.ISBN, "ISBN")
        self._title_author_providers = _require_capability(
            title_author_providers, Lookup.TITLE_AUTHOR, "title/author"
        )
        self._video_provider, self._article_provider = _require_capability(
            (video_provider, article_provider), Lookup.URL, "URL"
        )
        self._doi_providers = _require_capability(doi_providers, Lookup.DOI, "DOI")
        self._song_providers = _require_capability(song_providers, Lookup.SONG, "song")
        self._movie_providers = _require_capability(movie_providers, Lookup.MOVIE, "movie")

    @property
    def isbn_providers(self) -> tuple[MetadataProvider, ...]:
        return self._isbn_providers

    @property
    def title_author_providers(self) -> tuple[MetadataProvider, ...]:
        return self._title_author_providers

    @property
    def doi_providers(self) -> tuple[MetadataProvider, ...]:
        return self._doi_providers

    @property
    def song_providers(self) -> tuple[MetadataProvider, ...]:
        return self._song_providers

    @property
    def movie_providers(self) -> tuple[MetadataProvider, ...]:
        return self._movie_providers

    def resolve_by_isbn(self, isbn: str, cancel: CancelToken | None = None) -> Resolution:
        """Resolve a book by ISBN.

        Raises:
            NoProviderError: If every ISBN provider fails.
            ResolutionCancelled: If `cancel` fires before a provider succeeds.
        """
        return self._run(
            self._isbn_providers,
            lambda provider: provider.lookup_by_isbn(isbn),
            f"ISBN {isbn.strip()}",
            blank_key=not isbn.strip(),
            cancel=cancel,
        )

    def resolve_by_title_author(
        self, title: str, author: str = "", cancel: CancelToken | None = None
    ) -> Resolution:
        """Resolve a book by title and optional author.

        Raises:
            NoProviderError: If every title/author provider fails.
            ResolutionCancelled: If `cancel` fires before a provider succeeds.
        """
        return self._run(
            self._title_author_providers,
            lambda provider: provider.lookup_by_title_author(title, author),
            "title/author",
            blank_key=not title.strip() and not author.strip(),
            cancel=cancel,
        )

    def resolve_by_url(self, url: str, cancel: CancelToken | None = None) -> Resolution:
        """Resolve a web page: video hosts go to oEmbed, everything else is scraped.

        Raises:
            NoProviderError: If the chosen provider fails.
            ResolutionCancelled: If `cancel` fires before the provider succeeds.
        """
        provider = self._video_provider if is_video_url(url) else self._article_provider
        return self._run(
            (provider,),
            lambda p: p.lookup_by_url(url),
            f"URL {url.strip()}",
            blank_key=not url.strip(),
            cancel=cancel,
        )

    def resolve_by_doi(self, doi: str, cancel: CancelToken | None = None) -> Resolution:
        """Resolve a journal article by DOI."""
        return self._run(
            self._doi_providers,
            lambda provider: provider.lookup_by_doi(doi),
            f"DOI {doi.strip()}",
            blank_key=not doi.strip(),
            cancel=cancel,
        )

    def resolve_song(
        self, title: str, artist: str = "", date: str = "", cancel: CancelToken | None = None
    ) -> Resolution:
        """Resolve a song by title, with optional artist and release date as hints."""
        return self._run(
            self._song_providers,
            lambda provider: provider.lookup_song(title, artist, date),
            f"song {title.strip()!r}",
            blank_key=not title.strip(),
            cancel=cancel,
        )

    def resolve_movie(
        self, title: str, date: str = "", cancel: CancelToken | None = None
    ) -> Resolution:
        """Resolve a film by title, with an optional release date as a hint."""
        return self._run(
            self._movie_providers,
            lambda provider: provider.lookup_movie(title, date),
            f"movie {title.strip()!r}",
            blank_key=not title.strip(),
            cancel=cancel,
        )

    def _run(
        self,
        providers: Sequence[MetadataProvider],
        lookup: Callable[[MetadataProvider], Record],
        description: str,
        *,
        blank_key: bool,
        cancel: CancelToken | None,
    ) -> Resolution:
        attempts: list[Attempt] = []
        with cancel_scope(cancel):
            for provider in providers:
                if cancel is not None and cancel.cancelled:
                    logger.info("Resolution of %s cancelled", description)
                    raise ResolutionCancelled(tuple(attempts))
                try:
                    if blank_key:
                        raise InvalidKeyError(f"{provider.name}: lookup key is empty")
                    record = lookup(provider)
                except CallCancelled as exc:
                    logger.info("Resolution of %s cancelled: %s", description, exc)
                    attempts.append(Attempt(provider=provider.name, success=False, error=str(exc)))
                    raise ResolutionCancelled(tuple(attempts)) from exc
                except ProviderError as exc:
                    logger.warning("%s failed for %s: %s", provider.name, description, exc)
                    attempts.append(Attempt(provider=provider.name, success=False, error=str(exc)))
                    continue

                if cancel is not None and cancel.cancelled:
                    # The answer arrived after the deadline; the caller has given up on it.
                    logger.info("Discarding late %s result for %s", provider.name, description)
                    attempts.append(
                        Attempt(
                            provider=provider.name,
                            success=False,
                            error=f"{provider.name}: result arrived after cancellation",
                        )
                    )
                    raise ResolutionCancelled(tuple(attempts))
                attempts.append(Attempt(provider=provider.name, success=True))
                logger.debug("%s resolved %s", provider.name, description)
                return Resolution(record=record, provider=provider.name, attempts=tuple(attempts))

        if cancel is not None and cancel.cancelled:
            raise ResolutionCancelled(tuple(attempts))
        raise NoProviderError(
            f"no providers returned data for {description} ({len(attempts)} tried)",
            tuple(attempts),
        )


def build_resolver(http_client: HttpClient, settings: Settings | None = None) -> Resolver:
    """Wire the default provider orders around one shared request executor.

    `settings` supplies the film-catalog API keys; without them the film
    providers record a not-configured attempt and send nothing.
    """
    settings = settings or Settings()
    return Resolver(
        isbn_providers=[
            OpenLibraryProvider(http_client),
            CrossrefProvider(http_client),
            OCLCClassifyProvider(http_client),
            BNBProvider(http_client),
            OpenBDProvider(http_client),
            LibraryOfCongressProvider(http_client),
        ],
        title_author_providers=[
            OpenLibrarySearchProvider(http_client),
            GoogleBooksProvider(http_client),
            CrossrefProvider(http_client),
        ],
        video_provider=YouTubeProvider(http_client),
        article_provider=ArticleProvider(http_client),
        doi_providers=[DOIProvider(http_client)],
        song_providers=[ITunesProvider(http_client), MusicBrainzProvider(http_client)],
        movie_providers=[
            OMDbProvider(http_client, settings.omdb_api_key),
            TMDbProvider(http_client, settings.tmdb_api_key),
        ],
    )
