# ABOUTME: Canonical bibliographic record data structures shared by every provider.
# ABOUTME: Record is the interchange format between adapters, the resolver, and persistence.

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any

from bibresolve.metadata.errors import RecordValidationError

RECORD_TYPES = frozenset(
    {
        "book",
        "article",
        "website",
        "video",
        "song",
        "movie",
        "report",
        "dataset",
        "software",
    }
)

MIN_YEAR = 1000


def max_year() -> int:
    """Latest plausible publication year (next year, to allow forthcoming titles)."""
    return date.today().year + 1


def new_id() -> str:
    """Generate a fresh record identifier (canonical UUIDv4 string)."""
    return str(uuid.uuid4())


def today_iso() -> str:
    """Current UTC date as YYYY-MM-DD, used for `accessed`."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


@dataclass
class Author:
    """One author: family name required, given-name initials optional."""

    family: str
    given: str = ""

    def display(self) -> str:
        return f"{self.family}, {self.given}" if self.given else self.family


@dataclass
class Annotation:
    """Free-text summary plus a deduplicated set of lowercase keywords."""

    summary: str = ""
    keywords: list[str] = field(default_factory=list)


@dataclass
class Record:
    """A canonical bibliographic record.

    Constructed fresh by exactly one adapter invocation, sanitized and
    validated once, then handed to the resolver unchanged. Empty strings mean
    "unknown" for the optional text fields; `year` is None when unknown.
    """

    id: str
    type: str
    title: str
    authors: list[Author] = field(default_factory=list)
    year: int | None = None
    date: str = ""
    container_title: str = ""
    publisher: str = ""
    journal: str = ""
    volume: str = ""
    issue: str = ""
    pages: str = ""
    doi: str = ""
    isbn: str = ""
    url: str = ""
    accessed: str = ""
    annotation: Annotation = field(default_factory=Annotation)

    def set_url(self, url: str, accessed: str | None = None) -> None:
        """Set `url` and `accessed` together, or clear both when url is blank."""
        url = url.strip()
        if url:
            self.url = url
            self.accessed = accessed or today_iso()
        else:
            self.url = ""
            self.accessed = ""

    @property
    def author(self) -> str:
        """Convenience property: joined author string for display."""
        return "; ".join(a.display() for a in self.authors)


@dataclass(frozen=True)
class Attempt:
    """Outcome of one provider call during a resolution."""

    provider: str
    success: bool
    error: str = ""


def validate_record(record: Record) -> None:
    """Check the canonical schema invariants.

    Raises:
        RecordValidationError: naming the first violated rule.
    """
    if not record.id.strip():
        raise RecordValidationError("id is required")
    if record.type not in RECORD_TYPES:
        raise RecordValidationError(f"invalid type: {record.type}")
    if not record.title.strip():
        raise RecordValidationError("title is required")
    if not record.annotation.summary.strip():
        raise RecordValidationError("annotation.summary is required")
    if not record.annotation.keywords:
        raise RecordValidationError("annotation.keywords must have at least one keyword")
    if record.url.strip() and not record.accessed.strip():
        raise RecordValidationError("accessed is required when url is present")
    if record.year is not None and not MIN_YEAR <= record.year <= max_year():
        raise RecordValidationError(f"year out of range: {record.year}")
    for author in record.authors:
        if not author.family.strip():
            raise RecordValidationError("author family name is required")


_APA7_FIELDS = (
    "year",
    "date",
    "title",
    "container_title",
    "publisher",
    "journal",
    "volume",
    "issue",
    "pages",
    "doi",
    "isbn",
    "url",
    "accessed",
)


def record_to_dict(record: Record) -> dict[str, Any]:
    """Render a record as the nested mapping handed to the persistence layer.

    Optional fields that are empty are omitted; `title` and `authors` are
    always present.
    """
    apa7: dict[str, Any] = {
        "authors": [
            {"family": a.family, "given": a.given} if a.given else {"family": a.family}
            for a in record.authors
        ]
    }
    for name in _APA7_FIELDS:
        value = getattr(record, name)
        if name == "title" or value not in ("", None):
            apa7[name] = value
    return {
        "id": record.id,
        "type": record.type,
        "apa7": apa7,
        "annotation": {
            "summary": record.annotation.summary,
            "keywords": list(record.annotation.keywords),
        },
    }
