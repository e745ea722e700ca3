# ABOUTME: openBD (Japanese books database) metadata provider.
# ABOUTME: Maps the `summary` block of the first array element returned for an ISBN.

from dataclasses import dataclass
from typing import Any

from bibresolve.metadata.dates import extract_year
from bibresolve.metadata.errors import DecodeError, EmptyResultError
from bibresolve.metadata.isbn import normalize_isbn
from bibresolve.metadata.names import authors_from_names
from bibresolve.metadata.provider import BaseProvider, Lookup, as_dict, as_str
from bibresolve.metadata.types import Record

_GET_URL = "https://api.openbd.jp/v1/get"


@dataclass
class OpenBDSummary:
    title: str = ""
    publisher: str = ""
    pubdate: str = ""
    author: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "OpenBDSummary":
        return cls(
            title=as_str(data.get("title")),
            publisher=as_str(data.get("publisher")),
            pubdate=as_str(data.get("pubdate")),
            author=as_str(data.get("author")),
        )


class OpenBDProvider(BaseProvider):
    """ISBN lookup against api.openbd.jp."""

    name = "openbd"
    source_label = "openBD"
    capabilities = frozenset({Lookup.ISBN})

    def lookup_by_isbn(self, isbn: str) -> Record:
        norm = normalize_isbn(self._require_key(isbn, "ISBN"))
        data = self._decode_json(self._get(_GET_URL, params={"isbn": norm}))
        if not isinstance(data, list):
            raise DecodeError(f"{self.name}: expected a JSON array")
        # Unknown ISBNs come back as [null].
        if not data or not isinstance(data[0], dict):
            raise EmptyResultError(f"{self.name}: no data")

        summary = OpenBDSummary.from_json(as_dict(data[0].get("summary")))
        record = Record(id="", type="book", title=summary.title)
        record.publisher = summary.publisher
        record.year = extract_year(summary.pubdate)
        record.isbn = norm
        # The author field is one string, often "Family, Given" or katakana.
        record.authors = authors_from_names([summary.author])
        return self._finish(record)
