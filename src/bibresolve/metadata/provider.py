# ABOUTME: MetadataProvider protocol and the shared adapter base class.
# ABOUTME: Every data source (Open Library, Crossref, BNB, ...) builds on BaseProvider.

import contextvars
import enum
import json
import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any, Protocol, runtime_checkable

import httpx

from bibresolve.metadata.cancel import current_token
from bibresolve.metadata.errors import (
    CallCancelled,
    DecodeError,
    EmptyResultError,
    InvalidKeyError,
    StatusError,
    UnsupportedLookupError,
)
from bibresolve.metadata.http import HttpClient
from bibresolve.metadata.sanitize import clean_record
from bibresolve.metadata.types import Record, new_id, validate_record

logger = logging.getLogger(__name__)

# Longest error-body snippet carried into a StatusError message.
_BODY_SNIPPET_LIMIT = 4096

# How often a waiting request re-checks its cancel token.
_CANCEL_POLL_SECONDS = 0.02


class Lookup(enum.Enum):
    """The closed set of lookup capabilities a provider can offer."""

    ISBN = "isbn"
    TITLE_AUTHOR = "title_author"
    URL = "url"
    DOI = "doi"
    SONG = "song"
    MOVIE = "movie"


@runtime_checkable
class MetadataProvider(Protocol):
    """Protocol for bibliographic lookup services.

    A provider returns one validated Record per call or raises a
    ProviderError subclass. Capabilities it does not offer raise
    UnsupportedLookupError.
    """

    @property
    def name(self) -> str: ...

    @property
    def capabilities(self) -> frozenset[Lookup]: ...

    def lookup_by_isbn(self, isbn: str) -> Record: ...

    def lookup_by_title_author(self, title: str, author: str = "") -> Record: ...

    def lookup_by_url(self, url: str) -> Record: ...

    def lookup_by_doi(self, doi: str) -> Record: ...

    def lookup_song(self, title: str, artist: str = "", date: str = "") -> Record: ...

    def lookup_movie(self, title: str, date: str = "") -> Record: ...


def as_str(value: Any) -> str:
    """Trimmed string value, or "" for anything that is not a string."""
    return value.strip() if isinstance(value, str) else ""


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def bibliographic_summary(
    title: str, source: str, publisher: str = "", year: int | None = None
) -> str:
    """The templated summary used when a source supplies no description.

    Publisher and year are folded in when the caller passes them.
    """
    if publisher and year is not None:
        return f"Bibliographic record for {title} ({publisher}, {year}) from {source}."
    if publisher:
        return f"Bibliographic record for {title} ({publisher}) from {source}."
    return f"Bibliographic record for {title} from {source}."


class BaseProvider:
    """Shared request, decode, and finishing steps for provider adapters.

    Subclasses set `name`, `source_label`, and `capabilities`, and override
    the lookup methods they support. Each lookup issues its requests through
    the injected HttpClient and never retries.
    """

    name: str = ""
    source_label: str = ""
    capabilities: frozenset[Lookup] = frozenset()

    def __init__(self, http_client: HttpClient) -> None:
        self._http = http_client

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

    def lookup_by_isbn(self, isbn: str) -> Record:
        raise UnsupportedLookupError(f"{self.name}: ISBN lookup not supported")

    def lookup_by_title_author(self, title: str, author: str = "") -> Record:
        raise UnsupportedLookupError(f"{self.name}: title/author lookup not supported")

    def lookup_by_url(self, url: str) -> Record:
        raise UnsupportedLookupError(f"{self.name}: URL lookup not supported")

    def lookup_by_doi(self, doi: str) -> Record:
        raise UnsupportedLookupError(f"{self.name}: DOI lookup not supported")

    def lookup_song(self, title: str, artist: str = "", date: str = "") -> Record:
        raise UnsupportedLookupError(f"{self.name}: song lookup not supported")

    def lookup_movie(self, title: str, date: str = "") -> Record:
        raise UnsupportedLookupError(f"{self.name}: movie lookup not supported")

    # -- request helpers -------------------------------------------------

    def _get(
        self,
        url: str,
        params: dict[str, str] | None = None,
        accept: str = "application/json",
    ) -> httpx.Response:
        request = httpx.Request("GET", url, params=params, headers={"Accept": accept})
        return self._send(request)

    def _post_form(
        self, url: str, form: dict[str, str], accept: str = "application/json"
    ) -> httpx.Response:
        request = httpx.Request("POST", url, data=form, headers={"Accept": accept})
        return self._send(request)

    def _send(self, request: httpx.Request) -> httpx.Response:
        """Execute once; map non-2xx responses to StatusError.

        Raises:
            CallCancelled: If the active cancel token fires before or during
                the exchange.
        """
        response = self._exchange(request)
        if not 200 <= response.status_code < 300:
            snippet = response.text[:_BODY_SNIPPET_LIMIT].strip()
            raise StatusError(self.name, response.status_code, snippet)
        return response

    def _exchange(self, request: httpx.Request) -> httpx.Response:
        """Run the exchange, abandoning it as soon as the active token fires.

        Without a token the executor is called directly. With one, the
        exchange runs on a worker thread that is left to finish on its own
        once the token fires.
        """
        token = current_token()
        if token is None:
            return self._http.execute(request)
        if token.cancelled:
            raise CallCancelled(f"{self.name}: cancelled before {request.method} {request.url}")

        context = contextvars.copy_context()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=f"bibresolve-{self.name}")
        try:
            future = executor.submit(context.run, self._http.execute, request)
            while True:
                done, _ = wait([future], timeout=_CANCEL_POLL_SECONDS)
                if done:
                    return future.result()
                if token.cancelled:
                    logger.debug("Abandoning %s %s: cancelled", request.method, request.url)
                    raise CallCancelled(
                        f"{self.name}: cancelled during {request.method} {request.url}"
                    )
        finally:
            executor.shutdown(wait=False)

    def _decode_json(self, response: httpx.Response) -> Any:
        try:
            return json.loads(response.content)
        except ValueError as exc:
            raise DecodeError(f"{self.name}: invalid JSON: {exc}") from exc

    def _require_key(self, key: str, what: str = "lookup key") -> str:
        key = key.strip()
        if not key:
            raise InvalidKeyError(f"{self.name}: {what} is empty")
        return key

    # -- record finishing ------------------------------------------------

    def _finish(self, record: Record, summary: str = "") -> Record:
        """Apply defaults, sanitize, and validate a freshly mapped record.

        A blank title means the source returned no usable data. When no
        description is supplied the templated summary is used; when no
        keywords were collected the record type becomes the only keyword.

        Raises:
            EmptyResultError: If the title is blank after trimming.
            RecordValidationError: If the record breaks a schema invariant.
        """
        record.title = record.title.strip()
        if not record.title:
            raise EmptyResultError(f"{self.name}: empty title")
        if not record.id.strip():
            record.id = new_id()
        if summary.strip():
            record.annotation.summary = summary.strip()
        if not record.annotation.summary.strip():
            record.annotation.summary = bibliographic_summary(record.title, self.source_label)
        clean_record(record)
        if not record.annotation.keywords:
            record.annotation.keywords = [record.type]
        validate_record(record)
        logger.debug("%s produced record %s (%s)", self.name, record.id, record.title)
        return record
