# ABOUTME: Generic web-article provider: fetches a page URL and extracts HTML or PDF metadata.
# ABOUTME: Used for every URL that is not routed to a dedicated adapter.

import logging

from bibresolve.metadata.errors import InvalidKeyError
from bibresolve.metadata.extract import extract_html, extract_pdf, page_to_record
from bibresolve.metadata.provider import BaseProvider, Lookup
from bibresolve.metadata.sanitize import clean_url
from bibresolve.metadata.types import Record

logger = logging.getLogger(__name__)

# Only the head of very large documents is inspected.
_MAX_BODY_BYTES = 2 << 20

_ACCEPT = "text/html,application/xhtml+xml,application/pdf;q=0.9,*/*;q=0.8"


class ArticleProvider(BaseProvider):
    """URL lookup that scrapes article metadata from the page itself."""

    name = "article"
    source_label = "the web"
    capabilities = frozenset({Lookup.URL})

    def lookup_by_url(self, url: str) -> Record:
        target = clean_url(self._require_key(url, "URL"))
        if not target:
            raise InvalidKeyError(f"{self.name}: not an http(s) URL: {url.strip()}")

        response = self._get(target, accept=_ACCEPT)
        content = response.content[:_MAX_BODY_BYTES]
        content_type = response.headers.get("Content-Type", "").lower()
        if "pdf" in content_type or target.lower().endswith(".pdf"):
            logger.debug("Treating %s as PDF", target)
            page = extract_pdf(content, target)
        else:
            page = extract_html(content.decode(response.encoding or "utf-8", "replace"), target)

        record = page_to_record(page)
        return self._finish(record)
