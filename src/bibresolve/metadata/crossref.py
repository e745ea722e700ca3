# ABOUTME: Crossref metadata provider implementation.
# ABOUTME: Queries the Crossref works API by ISBN filter or by title/author for books.

from dataclasses import dataclass, field
from typing import Any

from bibresolve.metadata.dates import year_from_date_parts
from bibresolve.metadata.errors import EmptyResultError, InvalidKeyError
from bibresolve.metadata.isbn import normalize_isbn
from bibresolve.metadata.names import initials
from bibresolve.metadata.provider import (
    BaseProvider,
    Lookup,
    as_dict,
    as_list,
    as_str,
    bibliographic_summary,
)
from bibresolve.metadata.types import Author, Record

_WORKS_URL = "https://api.crossref.org/works"


@dataclass
class CrossrefItem:
    title: str
    authors: list[Author] = field(default_factory=list)
    publisher: str = ""
    year: int | None = None
    doi: str = ""
    url: str = ""

    @classmethod
    def from_json(cls, item: dict[str, Any]) -> "CrossrefItem":
        titles = [as_str(t) for t in as_list(item.get("title")) if as_str(t)]
        authors = []
        for entry in as_list(item.get("author")):
            entry = as_dict(entry)
            family = as_str(entry.get("family"))
            if family:
                authors.append(Author(family=family, given=initials(as_str(entry.get("given")))))
        # Print date is the edition's own; `issued` is the earliest known date.
        year = year_from_date_parts(as_dict(item.get("published-print")).get("date-parts"))
        if year is None:
            year = year_from_date_parts(as_dict(item.get("issued")).get("date-parts"))
        return cls(
            title=titles[0] if titles else "",
            authors=authors,
            publisher=as_str(item.get("publisher")),
            year=year,
            doi=as_str(item.get("DOI")),
            url=as_str(item.get("URL")),
        )


class CrossrefProvider(BaseProvider):
    """Metadata provider backed by the Crossref works API."""

    name = "crossref"
    source_label = "Crossref"
    capabilities = frozenset({Lookup.ISBN, Lookup.TITLE_AUTHOR})

    def lookup_by_isbn(self, isbn: str) -> Record:
        norm = normalize_isbn(self._require_key(isbn, "ISBN"))
        item = self._first_item({"filter": f"isbn:{norm}", "rows": "1"})
        return self._map_item(item, isbn=norm)

    def lookup_by_title_author(self, title: str, author: str = "") -> Record:
        title, author = title.strip(), author.strip()
        if not title and not author:
            raise InvalidKeyError(f"{self.name}: title and author are both empty")
        params = {"rows": "1", "filter": "type:book"}
        if title:
            params["query.title"] = title
        if author:
            params["query.author"] = author
        item = self._first_item(params)
        # Search hits are fuzzy; only the lead author is trusted.
        item.authors = item.authors[:1]
        return self._map_item(item)

    def _first_item(self, params: dict[str, str]) -> CrossrefItem:
        data = self._decode_json(self._get(_WORKS_URL, params=params))
        items = as_list(as_dict(as_dict(data).get("message")).get("items"))
        if not items:
            raise EmptyResultError(f"{self.name}: no results")
        return CrossrefItem.from_json(as_dict(items[0]))

    def _map_item(self, item: CrossrefItem, isbn: str = "") -> Record:
        record = Record(id="", type="book", title=item.title)
        record.authors = item.authors
        record.publisher = item.publisher
        record.year = item.year
        record.doi = item.doi
        record.isbn = isbn
        record.set_url(item.url)
        summary = bibliographic_summary(
            item.title, self.source_label, record.publisher, record.year
        )
        return self._finish(record, summary)
