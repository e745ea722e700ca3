# ABOUTME: Google Books metadata provider implementation.
# ABOUTME: Looks up volumes by ISBN or intitle/inauthor search and maps volumeInfo to a Record.

from dataclasses import dataclass, field
from typing import Any

from bibresolve.metadata.dates import extract_year
from bibresolve.metadata.errors import EmptyResultError, InvalidKeyError
from bibresolve.metadata.isbn import normalize_isbn
from bibresolve.metadata.names import authors_from_names
from bibresolve.metadata.provider import (
    BaseProvider,
    Lookup,
    as_dict,
    as_list,
    as_str,
    bibliographic_summary,
)
from bibresolve.metadata.types import Record

_VOLUMES_URL = "https://www.googleapis.com/books/v1/volumes"


@dataclass
class VolumeInfo:
    title: str
    authors: list[str] = field(default_factory=list)
    publisher: str = ""
    published_date: str = ""
    description: str = ""
    categories: list[str] = field(default_factory=list)
    info_link: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "VolumeInfo":
        return cls(
            title=as_str(data.get("title")),
            authors=[as_str(a) for a in as_list(data.get("authors")) if as_str(a)],
            publisher=as_str(data.get("publisher")),
            published_date=as_str(data.get("publishedDate")),
            description=as_str(data.get("description")),
            categories=[as_str(c) for c in as_list(data.get("categories")) if as_str(c)],
            info_link=as_str(data.get("infoLink")),
        )


class GoogleBooksProvider(BaseProvider):
    """Metadata provider backed by the Google Books volumes API.

    Used both as a title/author fallback in its own right and as the internal
    fallback of the Open Library ISBN lookup.
    """

    name = "googlebooks"
    source_label = "Google Books"
    capabilities = frozenset({Lookup.ISBN, Lookup.TITLE_AUTHOR})

    def lookup_by_isbn(self, isbn: str) -> Record:
        norm = normalize_isbn(self._require_key(isbn, "ISBN"))
        volume = self._first_volume({"q": f"isbn:{norm}"}, f"no items for {norm}")
        return self._map_volume(volume, isbn=norm)

    def lookup_by_title_author(self, title: str, author: str = "") -> Record:
        terms = []
        if title.strip():
            terms.append(f"intitle:{title.strip()}")
        if author.strip():
            terms.append(f"inauthor:{author.strip()}")
        if not terms:
            raise InvalidKeyError(f"{self.name}: title and author are both empty")
        volume = self._first_volume({"q": "+".join(terms), "maxResults": "1"}, "no results")
        return self._map_volume(volume)

    def _first_volume(self, params: dict[str, str], empty_message: str) -> VolumeInfo:
        data = self._decode_json(self._get(_VOLUMES_URL, params=params))
        items = as_list(as_dict(data).get("items"))
        if not items:
            raise EmptyResultError(f"{self.name}: {empty_message}")
        return VolumeInfo.from_json(as_dict(as_dict(items[0]).get("volumeInfo")))

    def _map_volume(self, volume: VolumeInfo, isbn: str = "") -> Record:
        record = Record(id="", type="book", title=volume.title)
        record.publisher = volume.publisher
        record.isbn = isbn
        record.year = extract_year(volume.published_date)
        record.set_url(volume.info_link)
        record.authors = authors_from_names(volume.authors)
        record.annotation.keywords = [c.lower() for c in volume.categories]
        summary = volume.description
        if not summary and record.title:
            summary = bibliographic_summary(
                record.title, self.source_label, record.publisher, record.year
            )
        return self._finish(record, summary)
