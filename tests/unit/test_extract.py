# ABOUTME: Unit tests for page metadata extraction from HTML and PDF bytes.
# ABOUTME: Covers JSON-LD/OpenGraph precedence, entity unescaping, PDF strings, and record mapping.

from bibresolve.metadata import Author
from bibresolve.metadata.extract import (
    PageMetadata,
    extract_html,
    extract_pdf,
    host_of,
    page_to_record,
    pdf_info_value,
)
from tests.fixtures.page_samples import (
    ARTICLE_URL,
    HTML_JSON_LD_ARRAY,
    HTML_NO_TITLE,
    HTML_OPENGRAPH_ONLY,
    HTML_TITLE_ONLY,
    HTML_WITH_JSON_LD,
    PDF_BYTES,
    PDF_NO_INFO,
    PDF_URL,
    PDF_UTF16_TITLE,
    PDF_WITH_XMP,
)


class TestHostOf:
    def test_strips_www(self) -> None:
        assert host_of("https://WWW.Example.com/path") == "example.com"

    def test_unparseable(self) -> None:
        assert host_of("not a url") == ""


class TestExtractHtml:
    """Tests for HTML field precedence."""

    def test_json_ld_wins(self) -> None:
        page = extract_html(HTML_WITH_JSON_LD, ARTICLE_URL)
        assert page.title == "Rivers & the Land"
        assert page.site_name == "Example News"
        assert page.publisher == "Example Media Group"
        assert page.authors == ["Jane Quinn Doe", "Smith, Robert"]
        assert page.date == "2024-02-01T08:30:00Z"
        assert page.description == "How rivers shape the land & people."
        assert not page.is_pdf

    def test_opengraph_and_meta_author(self) -> None:
        page = extract_html(HTML_OPENGRAPH_ONLY, ARTICLE_URL)
        assert page.title == "Open Graph Title"
        assert page.site_name == "Graph Site"
        assert page.publisher == "Graph Site"
        assert page.authors == ["Ada Lovelace", "Charles Babbage"]
        assert page.description == "A description from the meta tag."
        assert page.date == ""

    def test_title_tag_and_host_fallbacks(self) -> None:
        page = extract_html(HTML_TITLE_ONLY, ARTICLE_URL)
        assert page.title == "Just A Title"
        assert page.site_name == "example.com"
        assert page.publisher == "example.com"
        assert page.authors == []

    def test_json_ld_array_after_malformed_block(self) -> None:
        """A malformed block is skipped and the article element of an array is used."""
        page = extract_html(HTML_JSON_LD_ARRAY, ARTICLE_URL)
        assert page.title == "Array Headline"
        assert page.authors == ["Grace Hopper"]

    def test_no_title_anywhere(self) -> None:
        page = extract_html(HTML_NO_TITLE, ARTICLE_URL)
        assert page.title == ""
        assert page.description == "nothing else"

    def test_citation_doi(self) -> None:
        markup = '<html><head><meta name="citation_doi" content="10.1000/xyz"></head></html>'
        assert extract_html(markup, ARTICLE_URL).doi == "10.1000/xyz"


class TestPdfScanner:
    """Tests for the minimal PDF info-dictionary scanner."""

    def test_nested_and_escaped_parentheses(self) -> None:
        data = PDF_BYTES.decode("latin-1")
        assert pdf_info_value(data, "/Title") == "Signals (and) Noise: A (Nested) Study"

    def test_missing_key(self) -> None:
        assert pdf_info_value(PDF_NO_INFO.decode("latin-1"), "/Title") == ""

    def test_unterminated_string(self) -> None:
        assert pdf_info_value("/Title (never closed", "/Title") == ""

    def test_escape_sequences(self) -> None:
        assert pdf_info_value(r"/Author (A\\B\tC)", "/Author") == "A\\B C"

    def test_octal_escapes_decode_to_bytes(self) -> None:
        assert pdf_info_value(r"/Title (\050draft\051 v\0612)", "/Title") == "(draft) v12"

    def test_line_continuation_is_dropped(self) -> None:
        assert pdf_info_value("/Title (Long \\\ntitle)", "/Title") == "Long title"

    def test_utf16_title_and_hex_author(self) -> None:
        data = PDF_UTF16_TITLE.decode("latin-1")
        assert pdf_info_value(data, "/Title") == "Caf\u00e9"
        assert pdf_info_value(data, "/Author") == "Joe"

    def test_dictionary_is_not_a_hex_string(self) -> None:
        assert pdf_info_value("/Title << /Foo 1 >> /Title (Real)", "/Title") == "Real"

    def test_extract_pdf(self) -> None:
        page = extract_pdf(PDF_BYTES, PDF_URL)
        assert page.is_pdf
        assert page.title == "Signals (and) Noise: A (Nested) Study"
        assert page.authors == ["Alan Turing", "Claude Shannon"]
        assert page.date == "2019-04-15"
        assert page.doi == "10.1234/abcd.5678"
        assert page.site_name == "papers.example.org"

    def test_xmp_supplies_title_and_authors(self) -> None:
        page = extract_pdf(PDF_WITH_XMP, PDF_URL)
        assert page.title == "Rivers & Deltas"
        assert page.authors == ["Ada Lovelace", "Grace Hopper"]
        assert page.date == "2021-01-02"

    def test_info_title_wins_over_xmp(self) -> None:
        content = PDF_WITH_XMP.replace(b"/Producer (TeX)", b"/Title (Info Title)")
        assert extract_pdf(content, PDF_URL).title == "Info Title"

    def test_extract_pdf_without_info(self) -> None:
        page = extract_pdf(PDF_NO_INFO, PDF_URL)
        assert page.title == "papers.example.org"
        assert page.authors == []
        assert page.doi == ""


class TestPageToRecord:
    """Tests for mapping page metadata to an article record."""

    def test_html_page(self) -> None:
        record = page_to_record(extract_html(HTML_WITH_JSON_LD, ARTICLE_URL), "2024-03-01")
        assert record.type == "article"
        assert record.title == "Rivers & the Land"
        assert record.container_title == "Example News"
        assert record.publisher == "Example Media Group"
        assert record.authors == [Author("Doe", "J. Q."), Author("Smith", "R.")]
        assert record.year == 2024
        assert record.date == "2024-02-01"
        assert record.url == ARTICLE_URL
        assert record.accessed == "2024-03-01"
        assert record.annotation.summary == "How rivers shape the land & people."
        assert record.annotation.keywords == ["article"]

    def test_html_default_summary(self) -> None:
        record = page_to_record(extract_html(HTML_TITLE_ONLY, ARTICLE_URL))
        assert record.annotation.summary == (
            "Bibliographic record for Just A Title from example.com."
        )

    def test_pdf_summary_with_doi(self) -> None:
        record = page_to_record(extract_pdf(PDF_BYTES, PDF_URL))
        assert record.annotation.summary == (
            "PDF article from papers.example.org with DOI 10.1234/abcd.5678."
        )
        assert record.year == 2019

    def test_pdf_summary_without_doi(self) -> None:
        page = PageMetadata(
            url=PDF_URL, title="Report", site_name="papers.example.org", is_pdf=True
        )
        record = page_to_record(page)
        assert record.annotation.summary == "PDF article: Report (from papers.example.org)."
