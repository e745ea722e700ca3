# ABOUTME: Conservative cleanup applied to every record before validation.
# ABOUTME: Strips control characters, caps field lengths, and drops non-http(s) URLs.

from urllib.parse import urlsplit, urlunsplit

from bibresolve.metadata.types import Author, Record

_MAX_KEYWORDS = 64
_MAX_KEYWORD_LEN = 64

# Per-field length caps (characters). Fields not listed are uncapped.
_FIELD_LIMITS: dict[str, int] = {
    "id": 64,
    "type": 32,
    "title": 512,
    "container_title": 512,
    "publisher": 512,
    "journal": 512,
    "volume": 64,
    "issue": 64,
    "pages": 64,
    "doi": 128,
    "isbn": 64,
    "accessed": 32,
    "date": 32,
}
_AUTHOR_LIMIT = 256
_SUMMARY_LIMIT = 12000


def clean_string(text: str, limit: int = 0) -> str:
    """Trim and drop ASCII control characters except tab, newline, and CR.

    Truncates to `limit` characters when limit > 0.
    """
    text = text.strip()
    if not text:
        return text
    kept = [ch for ch in text if ch in "\t\n\r" or (ord(ch) >= 0x20 and ord(ch) != 0x7F)]
    if limit > 0:
        kept = kept[:limit]
    return "".join(kept).strip()


def clean_url(raw: str) -> str:
    """Return an absolute http(s) URL with spaces escaped, or "" if unusable."""
    raw = raw.strip()
    if not raw:
        return ""
    try:
        parts = urlsplit(raw)
    except ValueError:
        return ""
    if parts.scheme not in ("http", "https") or not parts.netloc:
        return ""
    return urlunsplit(parts._replace(path=parts.path.replace(" ", "%20")))


def clean_keywords(keywords: list[str]) -> list[str]:
    """Lowercase, trim, and deduplicate keywords, keeping first-seen order."""
    seen: set[str] = set()
    cleaned: list[str] = []
    for keyword in keywords:
        keyword = clean_string(keyword, _MAX_KEYWORD_LEN).lower()
        if not keyword or keyword in seen:
            continue
        seen.add(keyword)
        cleaned.append(keyword)
        if len(cleaned) >= _MAX_KEYWORDS:
            break
    return cleaned


def clean_authors(authors: list[Author]) -> list[Author]:
    cleaned = []
    for author in authors:
        family = clean_string(author.family, _AUTHOR_LIMIT)
        given = clean_string(author.given, _AUTHOR_LIMIT)
        if family or given:
            cleaned.append(Author(family=family, given=given))
    return cleaned


def clean_record(record: Record) -> Record:
    """Sanitize every string field of a record in place and return it.

    The url/accessed pair is kept consistent: if the URL is dropped as
    unusable, `accessed` is cleared with it.
    """
    for name, limit in _FIELD_LIMITS.items():
        setattr(record, name, clean_string(getattr(record, name), limit))
    url = clean_url(record.url)
    if url != record.url:
        record.set_url(url, record.accessed or None)
    record.authors = clean_authors(record.authors)
    record.annotation.summary = clean_string(record.annotation.summary, _SUMMARY_LIMIT)
    record.annotation.keywords = clean_keywords(record.annotation.keywords)
    return record
