# ABOUTME: Open Library metadata provider implementation.
# ABOUTME: Looks up books by ISBN (with details/works enrichment) or by title/author search.

import logging

from bibresolve.metadata.dates import extract_year
from bibresolve.metadata.errors import EmptyResultError, InvalidKeyError, ProviderError
from bibresolve.metadata.googlebooks import GoogleBooksProvider
from bibresolve.metadata.http import HttpClient
from bibresolve.metadata.isbn import normalize_isbn
from bibresolve.metadata.names import authors_from_names
from bibresolve.metadata.openlibrary_parser import (
    OLBookData,
    find_bibkey_entry,
    parse_book_data,
    parse_book_details,
    parse_description,
    parse_search_doc,
)
from bibresolve.metadata.provider import BaseProvider, Lookup, as_dict, bibliographic_summary
from bibresolve.metadata.types import Record

logger = logging.getLogger(__name__)

_OL_BASE = "https://openlibrary.org"


class OpenLibraryProvider(BaseProvider):
    """ISBN lookup against the Open Library Books API.

    The `jscmd=data` response supplies the core record. A best-effort
    `jscmd=details` request (and the work record when details carry no
    description) adds the summary and subjects. When Open Library has no entry
    for the ISBN, Google Books is asked instead.
    """

    name = "openlibrary"
    source_label = "OpenLibrary"
    capabilities = frozenset({Lookup.ISBN})

    def __init__(self, http_client: HttpClient) -> None:
        super().__init__(http_client)
        self._fallback = GoogleBooksProvider(http_client)

    def lookup_by_isbn(self, isbn: str) -> Record:
        norm = normalize_isbn(self._require_key(isbn, "ISBN"))
        bibkey = f"ISBN:{norm}"
        params = {"bibkeys": bibkey, "format": "json", "jscmd": "data"}
        data = self._decode_json(self._get(f"{_OL_BASE}/api/books", params=params))

        entry = find_bibkey_entry(data, bibkey)
        if entry is None:
            return self._google_fallback(norm, bibkey)

        book = parse_book_data(entry)
        if not book.title:
            raise EmptyResultError(f"{self.name}: empty title for {bibkey}")
        record = self._map_book(book, norm)
        description = self._enrich(record, bibkey)

        summary = description or bibliographic_summary(
            record.title, self.source_label, record.publisher, record.year
        )
        return self._finish(record, summary)

    def _google_fallback(self, norm: str, bibkey: str) -> Record:
        logger.debug("No Open Library data for %s, trying Google Books", bibkey)
        try:
            return self._fallback.lookup_by_isbn(norm)
        except ProviderError as exc:
            raise EmptyResultError(
                f"{self.name}: no data for {bibkey} (google books fallback: {exc})"
            ) from exc

    def _map_book(self, book: OLBookData, norm: str) -> Record:
        record = Record(id="", type="book", title=book.title)
        record.isbn = norm
        record.publisher = book.publishers[0] if book.publishers else ""
        record.year = extract_year(book.publish_date)
        record.set_url(book.url)
        record.authors = authors_from_names(book.authors)
        record.annotation.keywords = list(book.subjects)
        return record

    def _enrich(self, record: Record, bibkey: str) -> str:
        """Add detail subjects to `record` and return the best description found.

        MUTATES record.annotation.keywords. Failures are logged and ignored.
        """
        params = {"bibkeys": bibkey, "format": "json", "jscmd": "details"}
        try:
            data = self._decode_json(self._get(f"{_OL_BASE}/api/books", params=params))
        except ProviderError as exc:
            logger.debug("Details enrichment failed for %s: %s", bibkey, exc)
            return ""

        entry = find_bibkey_entry(data, bibkey)
        if entry is None:
            return ""
        details = parse_book_details(entry)
        for subject in details.subjects:
            if subject not in record.annotation.keywords:
                record.annotation.keywords.append(subject)

        if details.description or not details.work_key:
            return details.description
        return self._work_description(details.work_key)

    def _work_description(self, work_key: str) -> str:
        try:
            data = self._decode_json(self._get(f"{_OL_BASE}{work_key}.json"))
        except ProviderError as exc:
            logger.debug("Works enrichment failed for %s: %s", work_key, exc)
            return ""
        return parse_description(as_dict(data).get("description"))


class OpenLibrarySearchProvider(BaseProvider):
    """Title/author lookup against the Open Library search endpoint."""

    name = "openlibrary-search"
    source_label = "OpenLibrary"
    capabilities = frozenset({Lookup.TITLE_AUTHOR})

    def lookup_by_title_author(self, title: str, author: str = "") -> Record:
        title, author = title.strip(), author.strip()
        if not title and not author:
            raise InvalidKeyError(f"{self.name}: title and author are both empty")
        params = {"limit": "1"}
        if title:
            params["title"] = title
        if author:
            params["author"] = author

        data = self._decode_json(self._get(f"{_OL_BASE}/search.json", params=params))
        doc = parse_search_doc(data)
        if doc is None:
            raise EmptyResultError(f"{self.name}: no results")

        record = Record(id="", type="book", title=doc.title)
        record.authors = authors_from_names(doc.author_names[:1])
        record.publisher = doc.publishers[0] if doc.publishers else ""
        record.year = extract_year(str(doc.first_publish_year or ""))
        if doc.key:
            record.set_url(f"{_OL_BASE}{doc.key}")
        summary = bibliographic_summary(
            doc.title, self.source_label, record.publisher, record.year
        )
        return self._finish(record, summary)
