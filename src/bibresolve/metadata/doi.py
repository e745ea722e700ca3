# ABOUTME: DOI metadata provider using doi.org content negotiation.
# ABOUTME: Requests CSL-JSON for a DOI and maps it to an `article` Record.

import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from bibresolve.metadata.dates import date_from_parts, year_from_date_parts
from bibresolve.metadata.errors import InvalidKeyError
from bibresolve.metadata.names import initials
from bibresolve.metadata.provider import BaseProvider, Lookup, as_dict, as_list, as_str
from bibresolve.metadata.types import Author, Record

_DOI_BASE = "https://doi.org/"
_CSL_JSON = "application/vnd.citationstyles.csl+json"

_DOI_RE = re.compile(r"10\.\d{4,9}/\S+")
_DOI_PREFIX_RE = re.compile(r"^(?:https?://(?:dx\.)?doi\.org/|doi:\s*)", re.IGNORECASE)


def normalize_doi(raw: str) -> str:
    """Strip a doi.org URL or "doi:" prefix; return "" when no DOI remains."""
    doi = _DOI_PREFIX_RE.sub("", raw.strip())
    return doi if _DOI_RE.fullmatch(doi) else ""


def _csl_text(value: Any) -> str:
    """CSL text fields arrive as a string, a list of strings, or a bare number."""
    if isinstance(value, list):
        value = value[0] if value else ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return as_str(value)


@dataclass
class CSLWork:
    """The parts of a CSL-JSON item that map onto a Record."""

    title: str
    container_title: str = ""
    authors: list[Author] = field(default_factory=list)
    year: int | None = None
    date: str = ""
    volume: str = ""
    issue: str = ""
    pages: str = ""
    doi: str = ""
    publisher: str = ""

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "CSLWork":
        authors = []
        for entry in as_list(data.get("author")):
            entry = as_dict(entry)
            family = as_str(entry.get("family")) or as_str(entry.get("literal"))
            if family:
                authors.append(Author(family=family, given=initials(as_str(entry.get("given")))))
        date_parts = as_dict(data.get("issued")).get("date-parts")
        return cls(
            title=_csl_text(data.get("title")),
            container_title=_csl_text(data.get("container-title")),
            authors=authors,
            year=year_from_date_parts(date_parts),
            date=date_from_parts(date_parts),
            volume=_csl_text(data.get("volume")),
            issue=_csl_text(data.get("issue")),
            pages=_csl_text(data.get("page")),
            doi=_csl_text(data.get("DOI")),
            publisher=_csl_text(data.get("publisher")),
        )


class DOIProvider(BaseProvider):
    """DOI lookup via doi.org CSL-JSON content negotiation.

    The record URL is always the canonical doi.org link, whatever URL the
    registration agency reports.
    """

    name = "doi"
    source_label = "DOI metadata"
    capabilities = frozenset({Lookup.DOI})

    def lookup_by_doi(self, doi: str) -> Record:
        doi = normalize_doi(self._require_key(doi, "DOI"))
        if not doi:
            raise InvalidKeyError(f"{self.name}: not a DOI")

        link = _DOI_BASE + quote(doi, safe="/")
        data = as_dict(self._decode_json(self._get(link, accept=_CSL_JSON)))
        work = CSLWork.from_json(data)

        record = Record(id="", type="article", title=work.title)
        record.authors = work.authors
        record.container_title = work.container_title
        record.journal = work.container_title
        record.year = work.year
        record.date = work.date
        record.volume = work.volume
        record.issue = work.issue
        record.pages = work.pages
        record.doi = work.doi or doi
        record.publisher = work.publisher
        record.set_url(link)
        where = f" in {work.container_title}" if work.container_title else ""
        summary = f"Bibliographic record for {work.title}{where} via DOI metadata."
        return self._finish(record, summary)
