# ABOUTME: Film metadata providers backed by OMDb and TMDb (both need an API key).
# ABOUTME: Map the best title match to a `movie` Record with directors as authors.

import logging
from datetime import datetime

from bibresolve.metadata.dates import extract_year, iso_date_prefix
from bibresolve.metadata.errors import EmptyResultError, NotConfiguredError, ProviderError
from bibresolve.metadata.http import HttpClient
from bibresolve.metadata.names import authors_from_names, split_author_list
from bibresolve.metadata.provider import BaseProvider, Lookup, as_dict, as_list, as_str
from bibresolve.metadata.types import Record

logger = logging.getLogger(__name__)

_OMDB_URL = "https://www.omdbapi.com/"
_TMDB_API = "https://api.themoviedb.org/3"
_TMDB_SITE = "https://www.themoviedb.org"
_IMDB_TITLE_URL = "https://www.imdb.com/title/"


def _film_record(title: str, date: str, fallback_date: str) -> Record:
    record = Record(id="", type="movie", title=title)
    record.date = date or iso_date_prefix(fallback_date)
    record.year = extract_year(record.date or fallback_date)
    record.annotation.keywords = ["movie"]
    return record


class _KeyedProvider(BaseProvider):
    """A film provider that sends nothing until it has an API key."""

    def __init__(self, http_client: HttpClient, api_key: str = "") -> None:
        super().__init__(http_client)
        self._api_key = api_key.strip()

    def _key(self) -> str:
        if not self._api_key:
            raise NotConfiguredError(f"{self.name}: missing API key")
        return self._api_key


def _omdb_text(value: object) -> str:
    """OMDb writes "N/A" for unknown fields."""
    text = as_str(value)
    return "" if text == "N/A" else text


def _omdb_released(text: str) -> str:
    """Convert OMDb's "25 May 1979" to ISO form, or "" when unparseable."""
    try:
        return datetime.strptime(text, "%d %b %Y").strftime("%Y-%m-%d")
    except ValueError:
        return ""


class OMDbProvider(_KeyedProvider):
    """Movie lookup against the OMDb title endpoint."""

    name = "omdb"
    source_label = "OMDb"
    capabilities = frozenset({Lookup.MOVIE})

    def lookup_movie(self, title: str, date: str = "") -> Record:
        title = self._require_key(title, "title")
        params = {"t": title, "type": "movie", "apikey": self._key()}
        year = extract_year(date)
        if year is not None:
            params["y"] = str(year)
        data = as_dict(self._decode_json(self._get(_OMDB_URL, params=params)))

        if as_str(data.get("Response")).lower() != "true":
            reason = as_str(data.get("Error")) or "no results"
            raise EmptyResultError(f"{self.name}: {reason}")

        record = _film_record(
            title=_omdb_text(data.get("Title")) or title,
            date=_omdb_released(_omdb_text(data.get("Released"))),
            fallback_date=date,
        )
        record.publisher = _omdb_text(data.get("Production"))
        record.authors = authors_from_names(split_author_list(_omdb_text(data.get("Director"))))
        imdb_id = _omdb_text(data.get("imdbID"))
        record.set_url(
            _omdb_text(data.get("Website")) or (_IMDB_TITLE_URL + imdb_id if imdb_id else "")
        )
        plot = _omdb_text(data.get("Plot"))
        return self._finish(record, plot or f"Film: {record.title}.")


class TMDbProvider(_KeyedProvider):
    """Movie lookup against the TMDb search API, with directors from the credits endpoint."""

    name = "tmdb"
    source_label = "TMDb"
    capabilities = frozenset({Lookup.MOVIE})

    def lookup_movie(self, title: str, date: str = "") -> Record:
        title = self._require_key(title, "title")
        params = {"api_key": self._key(), "query": title}
        year = extract_year(date)
        if year is not None:
            params["year"] = str(year)
        data = as_dict(self._decode_json(self._get(f"{_TMDB_API}/search/movie", params=params)))

        results = as_list(data.get("results"))
        if not results:
            raise EmptyResultError(f"{self.name}: no results")
        hit = as_dict(results[0])

        record = _film_record(
            title=as_str(hit.get("title")) or title,
            date=iso_date_prefix(as_str(hit.get("release_date"))),
            fallback_date=date,
        )
        movie_id = hit.get("id")
        if isinstance(movie_id, int) and not isinstance(movie_id, bool) and movie_id > 0:
            record.authors = authors_from_names(self._directors(movie_id))
            record.set_url(f"{_TMDB_SITE}/movie/{movie_id}")
        overview = as_str(hit.get("overview"))
        return self._finish(record, overview or f"Film: {record.title}.")

    def _directors(self, movie_id: int) -> list[str]:
        """Director names from the credits endpoint; failures are logged and ignored."""
        url = f"{_TMDB_API}/movie/{movie_id}/credits"
        try:
            data = as_dict(self._decode_json(self._get(url, params={"api_key": self._key()})))
        except ProviderError as exc:
            logger.debug("Credits lookup failed for TMDb movie %d: %s", movie_id, exc)
            return []
        names = []
        for member in as_list(data.get("crew")):
            member = as_dict(member)
            if as_str(member.get("job")).lower() == "director":
                names.append(as_str(member.get("name")))
        return names
