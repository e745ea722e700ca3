# ABOUTME: Library of Congress metadata provider.
# ABOUTME: Searches the loc.gov JSON API for an ISBN and maps the first result.

from bibresolve.metadata.dates import extract_year
from bibresolve.metadata.errors import EmptyResultError
from bibresolve.metadata.isbn import normalize_isbn
from bibresolve.metadata.provider import BaseProvider, Lookup, as_dict, as_list, as_str
from bibresolve.metadata.types import Record

_SEARCH_URL = "https://www.loc.gov/search/"


class LibraryOfCongressProvider(BaseProvider):
    """ISBN lookup against the loc.gov search API."""

    name = "loc"
    source_label = "Library of Congress"
    capabilities = frozenset({Lookup.ISBN})

    def lookup_by_isbn(self, isbn: str) -> Record:
        norm = normalize_isbn(self._require_key(isbn, "ISBN"))
        data = self._decode_json(self._get(_SEARCH_URL, params={"fo": "json", "q": f"isbn:{norm}"}))
        results = as_list(as_dict(data).get("results"))
        if not results:
            raise EmptyResultError(f"{self.name}: no results")

        result = as_dict(results[0])
        record = Record(id="", type="book", title=as_str(result.get("title")))
        record.year = extract_year(as_str(result.get("date")))
        record.set_url(as_str(result.get("url")))
        record.isbn = norm
        return self._finish(record)
