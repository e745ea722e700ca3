# ABOUTME: Unit tests for CrossrefProvider.
# ABOUTME: Covers ISBN filter queries, book title/author search, date precedence, and empty results.

import pytest

from bibresolve.metadata import Author
from bibresolve.metadata.crossref import CrossrefItem, CrossrefProvider
from bibresolve.metadata.errors import EmptyResultError, InvalidKeyError
from tests.fixtures.fake_http import FakeHttpClient, json_response
from tests.fixtures.provider_responses import (
    CROSSREF_EMPTY,
    CROSSREF_ISBN_RESPONSE,
    CROSSREF_NO_PUBLISHER,
)


class TestCrossrefItem:
    def test_print_date_preferred_over_issued(self) -> None:
        item = CrossrefItem.from_json(CROSSREF_ISBN_RESPONSE["message"]["items"][0])
        assert item.year == 1996

    def test_issued_used_without_print_date(self) -> None:
        item = CrossrefItem.from_json(CROSSREF_NO_PUBLISHER["message"]["items"][0])
        assert item.year == 2003
        assert item.publisher == ""

    def test_authors_without_family_are_skipped(self) -> None:
        item = CrossrefItem.from_json(
            {"title": ["T"], "author": [{"given": "Solo"}, {"family": "Kay", "given": "alan c"}]}
        )
        assert item.authors == [Author("Kay", "A. C.")]


class TestCrossrefProvider:
    """Tests for Crossref lookups."""

    def test_isbn_lookup(self) -> None:
        client = FakeHttpClient({"api.crossref.org": json_response(CROSSREF_ISBN_RESPONSE)})
        record = CrossrefProvider(client).lookup_by_isbn("9780262510875")
        assert record.title == "Structure and Interpretation of Computer Programs"
        assert record.authors == [Author("Abelson", "H."), Author("Sussman", "G. J.")]
        assert record.publisher == "MIT Press"
        assert record.year == 1996
        assert record.doi == "10.7551/mitpress/6515.001.0001"
        assert record.isbn == "9780262510875"
        assert record.accessed
        assert record.annotation.summary == (
            "Bibliographic record for Structure and Interpretation of Computer Programs "
            "(MIT Press, 1996) from Crossref."
        )
        params = client.requests[0].url.params
        assert params["filter"] == "isbn:9780262510875"
        assert params["rows"] == "1"

    def test_title_author_keeps_lead_author(self) -> None:
        client = FakeHttpClient({"api.crossref.org": json_response(CROSSREF_ISBN_RESPONSE)})
        record = CrossrefProvider(client).lookup_by_title_author("SICP", "Abelson")
        assert record.authors == [Author("Abelson", "H.")]
        params = client.requests[0].url.params
        assert params["filter"] == "type:book"
        assert params["query.title"] == "SICP"
        assert params["query.author"] == "Abelson"

    def test_summary_without_publisher(self) -> None:
        client = FakeHttpClient({"api.crossref.org": json_response(CROSSREF_NO_PUBLISHER)})
        record = CrossrefProvider(client).lookup_by_isbn("9780000000002")
        assert record.annotation.summary == (
            "Bibliographic record for Untitled Monograph from Crossref."
        )

    def test_no_items_is_empty_result(self) -> None:
        client = FakeHttpClient({"api.crossref.org": json_response(CROSSREF_EMPTY)})
        with pytest.raises(EmptyResultError):
            CrossrefProvider(client).lookup_by_isbn("9780000000002")

    def test_blank_title_and_author(self) -> None:
        with pytest.raises(InvalidKeyError):
            CrossrefProvider(FakeHttpClient()).lookup_by_title_author("", "  ")
