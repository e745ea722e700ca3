# ABOUTME: Page metadata extraction from HTML (OpenGraph, meta, JSON-LD) and raw PDF bytes.
# ABOUTME: Produces a PageMetadata field bag that page_to_record maps into an article Record.

import html
import json
import logging
import re
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlsplit

from bs4 import BeautifulSoup

from bibresolve.metadata.dates import extract_year, iso_date_prefix
from bibresolve.metadata.names import authors_from_names, split_author_list
from bibresolve.metadata.types import Record

logger = logging.getLogger(__name__)

_DOI_RE = re.compile(r"10\.\d{4,9}/[-._;()/:A-Za-z0-9]+")
_PDF_DATE_RE = re.compile(r"D:(\d{4})(\d{2})(\d{2})")

# PDF escape sequences that stand for a single character.
_PDF_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", "b": "\b", "f": "\f"}
_OCTAL_RE = re.compile(r"[0-7]{1,3}")
_HEX_RE = re.compile(r"[0-9A-Fa-f]*")

# XMP packets embed Dublin Core as RDF/XML inside the PDF byte stream.
_XMP_TITLE_RE = re.compile(
    r"<dc:title>.*?<rdf:Alt>.*?<rdf:li[^>]*>(.*?)</rdf:li>.*?</dc:title>", re.S | re.I
)
_XMP_CREATORS_RE = re.compile(
    r"<dc:creator>.*?<rdf:Seq>(.*?)</rdf:Seq>.*?</dc:creator>", re.S | re.I
)
_XMP_ITEM_RE = re.compile(r"<rdf:li[^>]*>(.*?)</rdf:li>", re.S | re.I)


@dataclass
class PageMetadata:
    """Fields recovered from one fetched page, before mapping to a Record."""

    url: str
    title: str = ""
    site_name: str = ""
    publisher: str = ""
    authors: list[str] = field(default_factory=list)
    description: str = ""
    date: str = ""
    doi: str = ""
    is_pdf: bool = False


@dataclass
class _LinkedDataArticle:
    headline: str = ""
    name: str = ""
    description: str = ""
    date_published: str = ""
    publisher: str = ""
    authors: list[str] = field(default_factory=list)


def host_of(url: str) -> str:
    """Lowercased host name of a URL without a leading "www."."""
    try:
        host = (urlsplit(url).hostname or "").lower()
    except ValueError:
        return ""
    return host.removeprefix("www.")


def _first(*values: str) -> str:
    for value in values:
        if value and value.strip():
            return value.strip()
    return ""


def _text(value: Any) -> str:
    """Unescaped, trimmed string, or "" for non-strings."""
    return html.unescape(value).strip() if isinstance(value, str) else ""


def _pick_name(value: Any) -> str:
    """Name from either a string or an {"name": ...} object."""
    if isinstance(value, dict):
        return _text(value.get("name"))
    return _text(value)


def _ld_authors(value: Any) -> list[str]:
    items = value if isinstance(value, list) else [value]
    return [name for name in (_pick_name(item) for item in items) if name]


def _is_article_type(value: Any) -> bool:
    if isinstance(value, str):
        return "article" in value.lower()
    if isinstance(value, list):
        return any(_is_article_type(item) for item in value)
    return False


def _find_ld_article(soup: BeautifulSoup) -> _LinkedDataArticle:
    """Return the first article-typed JSON-LD object on the page.

    Each `application/ld+json` block may hold one object or an array; for an
    array the first article-typed element is used. Malformed blocks are skipped.
    """
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        try:
            payload = json.loads(script.string or "")
        except ValueError:
            logger.debug("Skipping malformed JSON-LD block")
            continue
        candidates = payload if isinstance(payload, list) else [payload]
        for obj in candidates:
            if isinstance(obj, dict) and _is_article_type(obj.get("@type")):
                return _LinkedDataArticle(
                    headline=_text(obj.get("headline")),
                    name=_text(obj.get("name")),
                    description=_text(obj.get("description")),
                    date_published=_text(obj.get("datePublished")),
                    publisher=_pick_name(obj.get("publisher")),
                    authors=_ld_authors(obj.get("author")),
                )
    return _LinkedDataArticle()


def _meta_tags(soup: BeautifulSoup) -> tuple[dict[str, str], dict[str, str]]:
    """Collect <meta> content keyed by lowercased `property` and by `name`.

    The first occurrence of a key wins.
    """
    by_property: dict[str, str] = {}
    by_name: dict[str, str] = {}
    for tag in soup.find_all("meta"):
        content = tag.get("content")
        if not isinstance(content, str) or not content.strip():
            continue
        prop = tag.get("property")
        if isinstance(prop, str):
            by_property.setdefault(prop.strip().lower(), content.strip())
        name = tag.get("name")
        if isinstance(name, str):
            by_name.setdefault(name.strip().lower(), content.strip())
    return by_property, by_name


def extract_html(markup: str, url: str) -> PageMetadata:
    """Extract article metadata from an HTML document.

    Title precedence is JSON-LD headline, then og:title, then the JSON-LD
    name, then <title>. Publisher prefers JSON-LD, then og:site_name, then
    the host name; authors prefer JSON-LD, then the meta author tag split on
    commas and " and ".
    """
    soup = BeautifulSoup(markup, "html.parser")
    props, names = _meta_tags(soup)
    ld = _find_ld_article(soup)
    page_title = soup.title.get_text().strip() if soup.title else ""
    host = host_of(url)

    authors = ld.authors
    if not authors and names.get("author"):
        authors = split_author_list(names["author"])

    return PageMetadata(
        url=url,
        title=_first(ld.headline, props.get("og:title", ""), ld.name, page_title),
        site_name=_first(props.get("og:site_name", ""), ld.publisher, host),
        publisher=_first(ld.publisher, props.get("og:site_name", ""), host),
        authors=authors,
        description=_first(
            props.get("og:description", ""), ld.description, names.get("description", "")
        ),
        date=_first(
            ld.date_published,
            props.get("article:published_time", ""),
            names.get("date", ""),
        ),
        doi=_first(names.get("citation_doi", ""), names.get("dc.identifier.doi", "")),
    )


def _read_pdf_string(data: str, start: int) -> str | None:
    """Read a PDF literal string whose "(" is at `start`.

    Balanced nested parentheses are kept; backslash escapes, including
    1-3 digit octal codes and line continuations, are decoded. Returns None
    when the string is unterminated.
    """
    depth = 0
    out: list[str] = []
    i = start
    while i < len(data):
        ch = data[i]
        if ch == "\\" and i + 1 < len(data):
            octal = _OCTAL_RE.match(data, i + 1)
            if octal:
                out.append(chr(int(octal.group(0), 8) & 0xFF))
                i = octal.end()
                continue
            nxt = data[i + 1]
            i += 2
            if nxt == "\r" and data.startswith("\n", i):
                i += 1
            if nxt not in "\r\n":
                out.append(_PDF_ESCAPES.get(nxt, nxt))
            continue
        if ch == "(":
            depth += 1
            if depth > 1:
                out.append(ch)
        elif ch == ")":
            depth -= 1
            if depth == 0:
                return "".join(out)
            out.append(ch)
        else:
            out.append(ch)
        i += 1
    return None


def _read_pdf_hex_string(data: str, start: int) -> str | None:
    """Read a PDF hex string whose "<" is at `start`; an odd final digit is padded with 0."""
    end = data.find(">", start + 1)
    if end < 0:
        return None
    digits = "".join(data[start + 1 : end].split())
    if not _HEX_RE.fullmatch(digits):
        return None
    if len(digits) % 2:
        digits += "0"
    return bytes.fromhex(digits).decode("latin-1")


def _decode_pdf_text(raw: str) -> str:
    """Decode a PDF text string held as one character per byte.

    A UTF-16BE or UTF-8 byte-order mark selects that encoding; anything else
    is treated as PDFDocEncoding, which matches Latin-1 for printable text.
    """
    if raw.startswith("\xfe\xff"):
        return raw[2:].encode("latin-1").decode("utf-16-be", "replace")
    if raw.startswith("\xef\xbb\xbf"):
        return raw[3:].encode("latin-1").decode("utf-8", "replace")
    return raw


def pdf_info_value(data: str, key: str) -> str:
    """Return the first string value (literal or hex) of an info-dictionary key like "/Title"."""
    for match in re.finditer(re.escape(key) + r"(?![A-Za-z0-9])\s*", data):
        pos = match.end()
        if pos >= len(data):
            continue
        value = None
        if data[pos] == "(":
            value = _read_pdf_string(data, pos)
        elif data[pos] == "<" and not data.startswith("<<", pos):
            value = _read_pdf_hex_string(data, pos)
        if value is not None:
            return " ".join(_decode_pdf_text(value).split())
    return ""


def _xmp_title(data: str) -> str:
    match = _XMP_TITLE_RE.search(data)
    return " ".join(html.unescape(match.group(1)).split()) if match else ""


def _xmp_creators(data: str) -> list[str]:
    match = _XMP_CREATORS_RE.search(data)
    if not match:
        return []
    names = (html.unescape(item).strip() for item in _XMP_ITEM_RE.findall(match.group(1)))
    return [name for name in names if name]


def _pdf_date(raw: str) -> str:
    match = _PDF_DATE_RE.search(raw)
    if not match:
        return ""
    return f"{match.group(1)}-{match.group(2)}-{match.group(3)}"


def extract_pdf(content: bytes, url: str) -> PageMetadata:
    """Scan raw PDF bytes for the info dictionary, XMP metadata, and a DOI.

    The title comes from /Title, then the XMP dc:title, then the host name.
    Authors come from the XMP dc:creator list, then /Author.
    """
    data = content.decode("latin-1")
    host = host_of(url)
    raw_date = pdf_info_value(data, "/CreationDate")
    doi_match = _DOI_RE.search(data)
    authors = _xmp_creators(data) or split_author_list(pdf_info_value(data, "/Author"))
    return PageMetadata(
        url=url,
        title=_first(pdf_info_value(data, "/Title"), _xmp_title(data), host),
        site_name=host,
        publisher=host,
        authors=authors,
        date=_pdf_date(raw_date) or raw_date,
        doi=doi_match.group(0).rstrip(".;,") if doi_match else "",
        is_pdf=True,
    )


def _default_summary(page: PageMetadata) -> str:
    if page.is_pdf:
        if page.doi:
            return f"PDF article from {page.site_name} with DOI {page.doi}."
        return f"PDF article: {page.title} (from {page.site_name})."
    return f"Bibliographic record for {page.title} from {page.site_name}."


def page_to_record(page: PageMetadata, accessed: str | None = None) -> Record:
    """Map extracted page metadata to an unvalidated `article` Record.

    The caller assigns the id and runs the shared finishing step.
    """
    record = Record(id="", type="article", title=page.title)
    record.container_title = page.site_name
    record.publisher = page.publisher
    record.authors = authors_from_names(page.authors)
    record.year = extract_year(page.date)
    record.date = iso_date_prefix(page.date)
    record.doi = page.doi
    record.set_url(page.url, accessed)
    record.annotation.summary = page.description or _default_summary(page)
    record.annotation.keywords = ["article"]
    return record
