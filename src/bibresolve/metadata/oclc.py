# ABOUTME: OCLC Classify metadata provider implementation.
# ABOUTME: Reads the first <work> element of a Classify XML response for an ISBN.

import xml.etree.ElementTree as ET
from dataclasses import dataclass

import httpx

from bibresolve.metadata.dates import extract_year
from bibresolve.metadata.errors import DecodeError, EmptyResultError
from bibresolve.metadata.isbn import normalize_isbn
from bibresolve.metadata.names import authors_from_names
from bibresolve.metadata.provider import BaseProvider, Lookup
from bibresolve.metadata.types import Record

_CLASSIFY_URL = "http://classify.oclc.org/classify2/Classify"


@dataclass
class ClassifyWork:
    title: str
    author: str = ""
    year: str = ""


def _local_name(tag: str) -> str:
    """Strip the "{namespace}" prefix ElementTree puts on qualified tags."""
    return tag.rsplit("}", 1)[-1]


def parse_classify(content: bytes) -> ClassifyWork | None:
    """Parse a Classify response and return its first work, or None if there is none.

    Raises:
        ValueError: If the body is not XML or its root is not <classify>.
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as exc:
        raise ValueError(f"invalid XML: {exc}") from exc
    if _local_name(root.tag) != "classify":
        raise ValueError(f"unexpected root element <{_local_name(root.tag)}>")
    for element in root.iter():
        if _local_name(element.tag) == "work":
            return ClassifyWork(
                title=element.get("title", "").strip(),
                author=element.get("author", "").strip(),
                year=element.get("hyr", "").strip(),
            )
    return None


class OCLCClassifyProvider(BaseProvider):
    """ISBN lookup against the OCLC Classify service."""

    name = "oclc"
    source_label = "OCLC Classify"
    capabilities = frozenset({Lookup.ISBN})

    def lookup_by_isbn(self, isbn: str) -> Record:
        norm = normalize_isbn(self._require_key(isbn, "ISBN"))
        response = self._get(
            _CLASSIFY_URL, params={"isbn": norm, "summary": "true"}, accept="application/xml"
        )
        work = self._decode_work(response)
        if work is None:
            raise EmptyResultError(f"{self.name}: no works")

        record = Record(id="", type="book", title=work.title)
        record.isbn = norm
        record.year = extract_year(work.year)
        # Classify joins contributors with "|"; the first is the primary author.
        primary = work.author.split("|", 1)[0]
        record.authors = authors_from_names([primary])
        return self._finish(record)

    def _decode_work(self, response: httpx.Response) -> ClassifyWork | None:
        try:
            return parse_classify(response.content)
        except ValueError as exc:
            raise DecodeError(f"{self.name}: {exc}") from exc
