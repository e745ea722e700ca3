# ABOUTME: British National Bibliography (BNB) SPARQL metadata provider.
# ABOUTME: Interpolates a validated ISBN into a fixed query and maps the first binding.

import re
from dataclasses import dataclass
from typing import Any

from bibresolve.metadata.dates import extract_year
from bibresolve.metadata.errors import EmptyResultError, InvalidKeyError
from bibresolve.metadata.isbn import normalize_isbn
from bibresolve.metadata.provider import BaseProvider, Lookup, as_dict, as_list, as_str
from bibresolve.metadata.types import Record

_SPARQL_URL = "https://bnb.data.bl.uk/sparql"

# The identifier is spliced into the query text, so only ISBN characters are allowed.
_SAFE_ISBN_RE = re.compile(r"^[0-9Xx]+$")

_QUERY_TEMPLATE = """PREFIX dcterms: <http://purl.org/dc/terms/>
PREFIX bibo: <http://purl.org/ontology/bibo/>
SELECT ?title ?publisherName ?date WHERE {{
  {{
    ?w bibo:isbn ?n .
    FILTER(REPLACE(STR(?n), "-", "") = "{isbn}")
  }} UNION {{
    ?w bibo:isbn13 ?n13 .
    FILTER(REPLACE(STR(?n13), "-", "") = "{isbn}")
  }} UNION {{
    ?w bibo:isbn10 ?n10 .
    FILTER(REPLACE(STR(?n10), "-", "") = "{isbn}")
  }}
  OPTIONAL {{ ?w dcterms:title ?title }}
  OPTIONAL {{
    ?w dcterms:publisher ?pub .
    OPTIONAL {{ ?pub <http://www.w3.org/2000/01/rdf-schema#label> ?publisherName }}
  }}
  OPTIONAL {{ ?w dcterms:issued ?date }}
}}
LIMIT 1"""


@dataclass
class BNBBinding:
    title: str = ""
    publisher: str = ""
    date: str = ""

    @classmethod
    def from_json(cls, binding: dict[str, Any]) -> "BNBBinding":
        def value(key: str) -> str:
            return as_str(as_dict(binding.get(key)).get("value"))

        return cls(title=value("title"), publisher=value("publisherName"), date=value("date"))


def build_query(isbn: str) -> str:
    """Render the SPARQL query for a normalized ISBN.

    Raises:
        ValueError: If the ISBN contains anything other than digits and X.
    """
    if not _SAFE_ISBN_RE.match(isbn):
        raise ValueError(f"refusing to interpolate non-ISBN text: {isbn!r}")
    return _QUERY_TEMPLATE.format(isbn=isbn.upper())


class BNBProvider(BaseProvider):
    """ISBN lookup against the BNB linked-data SPARQL endpoint."""

    name = "bnb"
    source_label = "BNB"
    capabilities = frozenset({Lookup.ISBN})

    def lookup_by_isbn(self, isbn: str) -> Record:
        norm = normalize_isbn(self._require_key(isbn, "ISBN"))
        try:
            query = build_query(norm)
        except ValueError as exc:
            raise InvalidKeyError(f"{self.name}: {exc}") from exc

        response = self._post_form(
            _SPARQL_URL, {"query": query}, accept="application/sparql-results+json"
        )
        data = self._decode_json(response)
        bindings = as_list(as_dict(as_dict(data).get("results")).get("bindings"))
        if not bindings:
            raise EmptyResultError(f"{self.name}: no results")

        binding = BNBBinding.from_json(as_dict(bindings[0]))
        record = Record(id="", type="book", title=binding.title)
        record.publisher = binding.publisher
        record.year = extract_year(binding.date)
        record.isbn = norm
        return self._finish(record)
