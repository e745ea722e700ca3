# ABOUTME: Unit tests for Open Library response parsing functions.
# ABOUTME: Validates Books API data/details parsing, description shapes, subjects, and search docs.

from bibresolve.metadata.openlibrary_parser import (
    find_bibkey_entry,
    parse_book_data,
    parse_book_details,
    parse_description,
    parse_search_doc,
    parse_subjects,
)
from tests.fixtures.openlibrary_responses import (
    BIBKEY,
    BOOKS_DATA_RESPONSE,
    BOOKS_DETAILS_NO_DESCRIPTION,
    BOOKS_DETAILS_RESPONSE,
    SEARCH_RESPONSE,
    SEARCH_RESPONSE_EMPTY,
)


class TestParseDescription:
    """Tests for description extraction from both OL shapes."""

    def test_string_description(self) -> None:
        assert parse_description("  A plain description. ") == "A plain description."

    def test_dict_description(self) -> None:
        value = {"type": "/type/text", "value": "A typed description."}
        assert parse_description(value) == "A typed description."

    def test_missing_description(self) -> None:
        assert parse_description(None) == ""
        assert parse_description({"type": "/type/text"}) == ""


class TestParseSubjects:
    def test_mixed_shapes_are_lowercased_and_deduped(self) -> None:
        subjects = parse_subjects(["History", {"name": "Italy"}, "history", 42, {"url": "x"}])
        assert subjects == ["history", "italy"]

    def test_single_string(self) -> None:
        assert parse_subjects("Fiction") == ["fiction"]


class TestFindBibkeyEntry:
    def test_present(self) -> None:
        entry = find_bibkey_entry(BOOKS_DATA_RESPONSE, BIBKEY)
        assert entry is not None
        assert entry["title"] == "The Name of the Rose"

    def test_absent_or_empty(self) -> None:
        assert find_bibkey_entry({}, BIBKEY) is None
        assert find_bibkey_entry({BIBKEY: {}}, BIBKEY) is None
        assert find_bibkey_entry([], BIBKEY) is None


class TestParseBookData:
    """Tests for jscmd=data entries."""

    def test_full_entry(self) -> None:
        book = parse_book_data(BOOKS_DATA_RESPONSE[BIBKEY])
        assert book.title == "The Name of the Rose"
        assert book.authors == ["Umberto Eco"]
        assert book.publishers == ["Harcourt"]
        assert book.publish_date == "September 1994"
        assert book.subjects == ["mystery", "monasteries"]
        assert book.url.startswith("https://openlibrary.org/books/")

    def test_sparse_entry(self) -> None:
        book = parse_book_data({"title": "Only Title", "authors": "not a list"})
        assert book.title == "Only Title"
        assert book.authors == []
        assert book.publishers == []


class TestParseBookDetails:
    def test_details_with_description(self) -> None:
        details = parse_book_details(BOOKS_DETAILS_RESPONSE[BIBKEY])
        assert details.description == "A mystery set in a medieval Italian monastery."
        assert details.subjects == ["historical fiction", "italy", "mystery"]
        assert details.work_key == "/works/OL456W"

    def test_details_without_description(self) -> None:
        details = parse_book_details(BOOKS_DETAILS_NO_DESCRIPTION[BIBKEY])
        assert details.description == ""
        assert details.subjects == []
        assert details.work_key == "/works/OL456W"


class TestParseSearchDoc:
    """Tests for search.json parsing."""

    def test_first_doc(self) -> None:
        doc = parse_search_doc(SEARCH_RESPONSE)
        assert doc is not None
        assert doc.title == "The Name of the Rose"
        assert doc.author_names == ["Umberto Eco", "William Weaver"]
        assert doc.publishers == ["Harcourt", "Vintage"]
        assert doc.first_publish_year == 1980
        assert doc.key == "/works/OL456W"

    def test_no_docs(self) -> None:
        assert parse_search_doc(SEARCH_RESPONSE_EMPTY) is None

    def test_non_integer_year_is_dropped(self) -> None:
        doc = parse_search_doc({"docs": [{"title": "T", "first_publish_year": "1980"}]})
        assert doc is not None
        assert doc.first_publish_year is None
