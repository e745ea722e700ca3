# ABOUTME: Song metadata providers backed by the iTunes Search API and MusicBrainz.
# ABOUTME: Map the first matching track to a `song` Record with the performer as author.

from bibresolve.metadata.dates import extract_year, iso_date_prefix
from bibresolve.metadata.errors import EmptyResultError
from bibresolve.metadata.provider import BaseProvider, Lookup, as_dict, as_list, as_str
from bibresolve.metadata.types import Author, Record

_ITUNES_SEARCH_URL = "https://itunes.apple.com/search"
_MUSICBRAINZ_RECORDING_URL = "https://musicbrainz.org/ws/2/recording/"


def _lucene_term(text: str) -> str:
    """Quote a multi-word value for a MusicBrainz Lucene query."""
    text = text.strip().replace('"', "")
    return f'"{text}"' if " " in text else text


def _song_record(title: str, performer: str, album: str, date: str, fallback_date: str) -> Record:
    """Build the shared part of a song record.

    The performer is a corporate-style author (family name only). When the
    source has no release date the caller's hint is used.
    """
    record = Record(id="", type="song", title=title)
    if performer:
        record.authors = [Author(family=performer)]
    record.container_title = album
    record.date = date or fallback_date.strip()
    record.year = extract_year(record.date)
    record.annotation.keywords = ["song"]
    return record


class ITunesProvider(BaseProvider):
    """Song lookup against the iTunes Search API."""

    name = "itunes"
    source_label = "iTunes"
    capabilities = frozenset({Lookup.SONG})

    def lookup_song(self, title: str, artist: str = "", date: str = "") -> Record:
        title = self._require_key(title, "title")
        term = f"{title} {artist.strip()}".strip()
        params = {"term": term, "entity": "song", "limit": "1"}
        data = as_dict(self._decode_json(self._get(_ITUNES_SEARCH_URL, params=params)))

        results = as_list(data.get("results"))
        if not results:
            raise EmptyResultError(f"{self.name}: no results")
        track = as_dict(results[0])

        record = _song_record(
            title=as_str(track.get("trackName")) or title,
            performer=as_str(track.get("artistName")),
            album=as_str(track.get("collectionName")),
            date=iso_date_prefix(as_str(track.get("releaseDate"))),
            fallback_date=date,
        )
        record.set_url(as_str(track.get("trackViewUrl")))
        return self._finish(record, f"Song: {record.title}.")


class MusicBrainzProvider(BaseProvider):
    """Song lookup against the MusicBrainz recording search."""

    name = "musicbrainz"
    source_label = "MusicBrainz"
    capabilities = frozenset({Lookup.SONG})

    def lookup_song(self, title: str, artist: str = "", date: str = "") -> Record:
        title = self._require_key(title, "title")
        query = f"recording:{_lucene_term(title)}"
        if artist.strip():
            query += f" AND artist:{_lucene_term(artist)}"
        params = {"query": query, "fmt": "json", "limit": "1"}
        data = as_dict(self._decode_json(self._get(_MUSICBRAINZ_RECORDING_URL, params=params)))

        recordings = as_list(data.get("recordings"))
        if not recordings:
            raise EmptyResultError(f"{self.name}: no results")
        recording = as_dict(recordings[0])

        credits = as_list(recording.get("artist-credit"))
        performer = as_str(as_dict(credits[0]).get("name")) if credits else ""
        releases = as_list(recording.get("releases"))
        release = as_dict(releases[0]) if releases else {}
        labels = as_list(release.get("label-info"))
        label = as_str(as_dict(as_dict(labels[0]).get("label")).get("name")) if labels else ""

        record = _song_record(
            title=as_str(recording.get("title")) or title,
            performer=performer,
            album=as_str(release.get("title")),
            date=as_str(release.get("date")),
            fallback_date=date,
        )
        record.publisher = label
        return self._finish(record, f"Song: {record.title}.")
