# ABOUTME: Unit tests for the song (iTunes, MusicBrainz) and film (OMDb, TMDb) providers.
# ABOUTME: Checks query shapes, record mapping, API-key gating, and sparse responses.

import httpx
import pytest

from bibresolve.metadata import Author
from bibresolve.metadata.errors import EmptyResultError, InvalidKeyError, NotConfiguredError
from bibresolve.metadata.film import OMDbProvider, TMDbProvider
from bibresolve.metadata.song import ITunesProvider, MusicBrainzProvider
from tests.fixtures.fake_http import FakeHttpClient, json_response
from tests.fixtures.provider_responses import (
    ITUNES_EMPTY,
    ITUNES_SONG_RESPONSE,
    MUSICBRAINZ_EMPTY,
    MUSICBRAINZ_RECORDING_RESPONSE,
    OMDB_MOVIE_RESPONSE,
    OMDB_NOT_FOUND,
    TMDB_CREDITS_RESPONSE,
    TMDB_EMPTY,
    TMDB_SEARCH_RESPONSE,
)


class TestITunesProvider:
    """Tests for the iTunes Search API adapter."""

    def test_search_parameters(self) -> None:
        client = FakeHttpClient({"itunes.apple.com": json_response(ITUNES_SONG_RESPONSE)})
        ITunesProvider(client).lookup_song("Heroes", "David Bowie")
        params = client.requests[0].url.params
        assert params["term"] == "Heroes David Bowie"
        assert params["entity"] == "song"
        assert params["limit"] == "1"

    def test_maps_track(self) -> None:
        client = FakeHttpClient({"itunes.apple.com": json_response(ITUNES_SONG_RESPONSE)})
        record = ITunesProvider(client).lookup_song("Heroes", "David Bowie")
        assert record.type == "song"
        assert record.title == '"Heroes"'
        assert record.authors == [Author("David Bowie")]
        assert record.container_title == '"Heroes" (2017 Remaster)'
        assert record.date == "1977-09-23"
        assert record.year == 1977
        assert record.url == "https://music.apple.com/us/album/heroes/1?i=2"
        assert record.annotation.summary == 'Song: "Heroes".'
        assert record.annotation.keywords == ["song"]

    def test_date_hint_fills_missing_release_date(self) -> None:
        track = dict(ITUNES_SONG_RESPONSE["results"][0], releaseDate="")
        client = FakeHttpClient({"itunes.apple.com": json_response({"results": [track]})})
        record = ITunesProvider(client).lookup_song("Heroes", date="1977")
        assert record.date == "1977"
        assert record.year == 1977

    def test_no_results(self) -> None:
        client = FakeHttpClient({"itunes.apple.com": json_response(ITUNES_EMPTY)})
        with pytest.raises(EmptyResultError):
            ITunesProvider(client).lookup_song("Nonexistent Song")

    def test_blank_title_sends_nothing(self) -> None:
        client = FakeHttpClient()
        with pytest.raises(InvalidKeyError):
            ITunesProvider(client).lookup_song("  ", "David Bowie")
        assert client.requests == []


class TestMusicBrainzProvider:
    """Tests for the MusicBrainz recording search adapter."""

    def test_lucene_query(self) -> None:
        client = FakeHttpClient({"musicbrainz.org": json_response(MUSICBRAINZ_RECORDING_RESPONSE)})
        MusicBrainzProvider(client).lookup_song("Heroes", "David Bowie")
        params = client.requests[0].url.params
        assert params["query"] == 'recording:Heroes AND artist:"David Bowie"'
        assert params["fmt"] == "json"

    def test_title_only_query(self) -> None:
        client = FakeHttpClient({"musicbrainz.org": json_response(MUSICBRAINZ_RECORDING_RESPONSE)})
        MusicBrainzProvider(client).lookup_song("Space Oddity")
        assert client.requests[0].url.params["query"] == 'recording:"Space Oddity"'

    def test_maps_recording(self) -> None:
        client = FakeHttpClient({"musicbrainz.org": json_response(MUSICBRAINZ_RECORDING_RESPONSE)})
        record = MusicBrainzProvider(client).lookup_song("Heroes", "David Bowie")
        assert record.title == "Heroes"
        assert record.authors == [Author("David Bowie")]
        assert record.container_title == '"Heroes"'
        assert record.publisher == "RCA Victor"
        assert record.date == "1977-10-14"
        assert record.year == 1977
        assert record.url == ""

    def test_no_recordings(self) -> None:
        client = FakeHttpClient({"musicbrainz.org": json_response(MUSICBRAINZ_EMPTY)})
        with pytest.raises(EmptyResultError):
            MusicBrainzProvider(client).lookup_song("Heroes")


class TestOMDbProvider:
    """Tests for the OMDb title adapter."""

    def test_missing_key_sends_nothing(self) -> None:
        client = FakeHttpClient()
        with pytest.raises(NotConfiguredError, match="omdb: missing API key"):
            OMDbProvider(client).lookup_movie("Alien")
        assert client.requests == []

    def test_query_parameters(self) -> None:
        client = FakeHttpClient({"omdbapi.com": json_response(OMDB_MOVIE_RESPONSE)})
        OMDbProvider(client, "secret").lookup_movie("Alien", "1979")
        params = client.requests[0].url.params
        assert params["t"] == "Alien"
        assert params["type"] == "movie"
        assert params["apikey"] == "secret"
        assert params["y"] == "1979"

    def test_year_is_omitted_without_date(self) -> None:
        client = FakeHttpClient({"omdbapi.com": json_response(OMDB_MOVIE_RESPONSE)})
        OMDbProvider(client, "secret").lookup_movie("Alien")
        assert "y" not in client.requests[0].url.params

    def test_maps_movie(self) -> None:
        client = FakeHttpClient({"omdbapi.com": json_response(OMDB_MOVIE_RESPONSE)})
        record = OMDbProvider(client, "secret").lookup_movie("alien")
        assert record.type == "movie"
        assert record.title == "Alien"
        assert record.date == "1979-06-22"
        assert record.year == 1979
        assert record.authors == [Author("Scott", "R.")]
        assert record.publisher == ""
        assert record.url == "https://www.imdb.com/title/tt0078748"
        assert record.annotation.summary.startswith("The crew of a commercial spacecraft")
        assert record.annotation.keywords == ["movie"]

    def test_unknown_release_falls_back_to_hint(self) -> None:
        sparse = dict(OMDB_MOVIE_RESPONSE, Released="N/A", Plot="N/A", imdbID="N/A")
        client = FakeHttpClient({"omdbapi.com": json_response(sparse)})
        record = OMDbProvider(client, "secret").lookup_movie("Alien", "1979-05-25")
        assert record.date == "1979-05-25"
        assert record.url == ""
        assert record.annotation.summary == "Film: Alien."

    def test_not_found(self) -> None:
        client = FakeHttpClient({"omdbapi.com": json_response(OMDB_NOT_FOUND)})
        with pytest.raises(EmptyResultError, match="Movie not found!"):
            OMDbProvider(client, "secret").lookup_movie("Zzzz")


class TestTMDbProvider:
    """Tests for the TMDb search and credits adapter."""

    def _client(self, credits: httpx.Response | None = None) -> FakeHttpClient:
        return FakeHttpClient(
            {
                "search/movie": json_response(TMDB_SEARCH_RESPONSE),
                "/credits": credits or json_response(TMDB_CREDITS_RESPONSE),
            }
        )

    def test_missing_key_sends_nothing(self) -> None:
        client = self._client()
        with pytest.raises(NotConfiguredError):
            TMDbProvider(client, "  ").lookup_movie("Alien")
        assert client.requests == []

    def test_search_then_credits(self) -> None:
        client = self._client()
        TMDbProvider(client, "secret").lookup_movie("Alien", "1979")
        search, credits = client.requests
        assert search.url.params["query"] == "Alien"
        assert search.url.params["year"] == "1979"
        assert search.url.params["api_key"] == "secret"
        assert credits.url.path == "/3/movie/348/credits"

    def test_maps_movie_with_directors(self) -> None:
        record = TMDbProvider(self._client(), "secret").lookup_movie("Alien")
        assert record.title == "Alien"
        assert record.date == "1979-05-25"
        assert record.year == 1979
        assert record.authors == [Author("Scott", "R.")]
        assert record.url == "https://www.themoviedb.org/movie/348"
        assert record.annotation.summary.startswith("During its return to the earth")

    def test_credits_failure_keeps_record(self) -> None:
        client = self._client(credits=httpx.Response(500, text="boom"))
        record = TMDbProvider(client, "secret").lookup_movie("Alien")
        assert record.title == "Alien"
        assert record.authors == []

    def test_no_results(self) -> None:
        client = FakeHttpClient({"search/movie": json_response(TMDB_EMPTY)})
        with pytest.raises(EmptyResultError):
            TMDbProvider(client, "secret").lookup_movie("Zzzz")
        assert len(client.requests) == 1
