# ABOUTME: Unit tests for the doi.org CSL-JSON provider and DOI normalization.
# ABOUTME: Checks content negotiation, CSL field mapping, and rejection of non-DOIs.

import httpx
import pytest

from bibresolve.metadata import Author
from bibresolve.metadata.doi import DOIProvider, normalize_doi
from bibresolve.metadata.errors import DecodeError, InvalidKeyError, StatusError
from tests.fixtures.fake_http import FakeHttpClient, json_response
from tests.fixtures.provider_responses import CSL_ARTICLE_RESPONSE, CSL_BARE_RESPONSE

DOI = "10.1038/nature14539"


class TestNormalizeDoi:
    @pytest.mark.parametrize(
        "raw",
        [
            DOI,
            f"  {DOI} ",
            f"https://doi.org/{DOI}",
            f"http://dx.doi.org/{DOI}",
            f"doi:{DOI}",
            f"DOI: {DOI}",
        ],
    )
    def test_prefixes_are_stripped(self, raw: str) -> None:
        assert normalize_doi(raw) == DOI

    @pytest.mark.parametrize("raw", ["", "nature14539", "10.12/short-registrant", "doi:"])
    def test_non_dois_are_rejected(self, raw: str) -> None:
        assert normalize_doi(raw) == ""


class TestDOIProvider:
    """Tests for doi.org content negotiation."""

    def test_requests_csl_json_from_doi_org(self) -> None:
        client = FakeHttpClient({"doi.org": json_response(CSL_ARTICLE_RESPONSE)})
        DOIProvider(client).lookup_by_doi(DOI)
        (request,) = client.requests
        assert str(request.url) == f"https://doi.org/{DOI}"
        assert request.headers["Accept"] == "application/vnd.citationstyles.csl+json"

    def test_maps_journal_article(self) -> None:
        client = FakeHttpClient({"doi.org": json_response(CSL_ARTICLE_RESPONSE)})
        record = DOIProvider(client).lookup_by_doi(f"https://doi.org/{DOI}")
        assert record.type == "article"
        assert record.title == "Deep learning"
        assert record.journal == "Nature"
        assert record.container_title == "Nature"
        assert record.authors == [
            Author("LeCun", "Y."),
            Author("Bengio", "Y."),
            Author("The Deep Learning Consortium"),
        ]
        assert record.year == 2015
        assert record.date == "2015-05-28"
        assert (record.volume, record.issue, record.pages) == ("521", "7553", "436-444")
        assert record.doi == DOI
        assert record.publisher == "Springer Science and Business Media LLC"
        assert record.annotation.summary == (
            "Bibliographic record for Deep learning in Nature via DOI metadata."
        )

    def test_url_is_the_canonical_doi_link(self) -> None:
        client = FakeHttpClient({"doi.org": json_response(CSL_ARTICLE_RESPONSE)})
        record = DOIProvider(client).lookup_by_doi(DOI)
        assert record.url == f"https://doi.org/{DOI}"
        assert record.accessed

    def test_sparse_item(self) -> None:
        client = FakeHttpClient({"doi.org": json_response(CSL_BARE_RESPONSE)})
        record = DOIProvider(client).lookup_by_doi("10.5555/12345678")
        assert record.title == "A Working Paper"
        assert record.year == 2019
        assert record.date == ""
        assert record.doi == "10.5555/12345678"
        assert record.annotation.summary == (
            "Bibliographic record for A Working Paper via DOI metadata."
        )
        assert record.annotation.keywords == ["article"]

    def test_invalid_doi_sends_nothing(self) -> None:
        client = FakeHttpClient()
        with pytest.raises(InvalidKeyError, match="not a DOI"):
            DOIProvider(client).lookup_by_doi("nature14539")
        assert client.requests == []

    def test_unknown_doi_is_status_error(self) -> None:
        client = FakeHttpClient({"doi.org": httpx.Response(404, text="DOI Not Found")})
        with pytest.raises(StatusError) as excinfo:
            DOIProvider(client).lookup_by_doi(DOI)
        assert excinfo.value.status == 404

    def test_html_landing_page_is_decode_error(self) -> None:
        client = FakeHttpClient({"doi.org": httpx.Response(200, text="<html></html>")})
        with pytest.raises(DecodeError):
            DOIProvider(client).lookup_by_doi(DOI)
