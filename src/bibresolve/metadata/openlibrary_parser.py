# ABOUTME: Parsing functions for Open Library API JSON responses.
# ABOUTME: Converts OL-specific payloads into typed, adapter-local dataclasses.

from dataclasses import dataclass, field
from typing import Any

from bibresolve.metadata.provider import as_dict, as_list, as_str


@dataclass
class OLBookData:
    """One entry of the Books API `jscmd=data` response."""

    title: str
    publish_date: str = ""
    url: str = ""
    authors: list[str] = field(default_factory=list)
    publishers: list[str] = field(default_factory=list)
    subjects: list[str] = field(default_factory=list)


@dataclass
class OLBookDetails:
    """The parts of a `jscmd=details` entry used for enrichment."""

    description: str = ""
    subjects: list[str] = field(default_factory=list)
    work_key: str = ""


@dataclass
class OLSearchDoc:
    """First document of a search.json response."""

    title: str
    author_names: list[str] = field(default_factory=list)
    publishers: list[str] = field(default_factory=list)
    first_publish_year: int | None = None
    key: str = ""


def _names(entries: Any) -> list[str]:
    """Collect `name` values from a list of {name: ...} objects."""
    names = []
    for entry in as_list(entries):
        name = as_str(as_dict(entry).get("name"))
        if name:
            names.append(name)
    return names


def parse_description(value: Any) -> str:
    """Extract a description from either a plain string or {"value": "..."}.

    Open Library uses both shapes depending on how the record was edited.
    """
    if isinstance(value, str):
        return value.strip()
    return as_str(as_dict(value).get("value"))


def parse_subjects(value: Any) -> list[str]:
    """Lowercased, deduplicated subject names from a string, list, or {name} shape."""
    items = value if isinstance(value, list) else [value]
    seen: set[str] = set()
    subjects: list[str] = []
    for item in items:
        name = as_str(item) or as_str(as_dict(item).get("name"))
        name = name.lower()
        if name and name not in seen:
            seen.add(name)
            subjects.append(name)
    return subjects


def find_bibkey_entry(data: Any, bibkey: str) -> dict[str, Any] | None:
    """Return the object keyed by "ISBN:<n>", or None when absent or empty."""
    entry = as_dict(data).get(bibkey)
    if not isinstance(entry, dict) or not entry:
        return None
    return entry


def parse_book_data(entry: dict[str, Any]) -> OLBookData:
    """Parse one `jscmd=data` entry."""
    return OLBookData(
        title=as_str(entry.get("title")),
        publish_date=as_str(entry.get("publish_date")),
        url=as_str(entry.get("url")),
        authors=_names(entry.get("authors")),
        publishers=_names(entry.get("publishers")),
        subjects=[s.lower() for s in _names(entry.get("subjects"))],
    )


def parse_book_details(entry: dict[str, Any]) -> OLBookDetails:
    """Parse the `details` object of a `jscmd=details` entry."""
    details = as_dict(entry.get("details"))
    works = as_list(details.get("works"))
    work_key = as_str(as_dict(works[0]).get("key")) if works else ""
    return OLBookDetails(
        description=parse_description(details.get("description")),
        subjects=parse_subjects(details.get("subjects")) if "subjects" in details else [],
        work_key=work_key,
    )


def parse_search_doc(data: Any) -> OLSearchDoc | None:
    """Parse the first doc of a search.json response, or None when there are no docs."""
    docs = as_list(as_dict(data).get("docs"))
    if not docs:
        return None
    doc = as_dict(docs[0])
    year = doc.get("first_publish_year")
    return OLSearchDoc(
        title=as_str(doc.get("title")),
        author_names=[as_str(n) for n in as_list(doc.get("author_name")) if as_str(n)],
        publishers=[as_str(p) for p in as_list(doc.get("publisher")) if as_str(p)],
        first_publish_year=year if isinstance(year, int) and year > 0 else None,
        key=as_str(doc.get("key")),
    )
