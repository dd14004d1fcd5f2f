import json
from datetime import date
from urllib.parse import parse_qs, urlsplit

import pytest
from pydantic import ValidationError

from webharvest.core.errors import HttpFailureError, InvalidInputError, ParseError
from webharvest.core.scraping.fetcher import Failure, Success
from webharvest.extractors.federal_register import (
    BASE_URL,
    DocumentQuery,
    FederalRegisterClient,
    FederalRegisterExtractor,
)


class ApiFetcher:
    """Answers `fetch(spec)` through a handler(path, query) -> (status, body)."""

    def __init__(self, handler, content_type="application/json; charset=utf-8"):
        self.handler = handler
        self.content_type = content_type
        self.urls = []

    def fetch(self, spec, headers=None):
        self.urls.append(spec.url)
        parts = urlsplit(spec.url)
        status, body = self.handler(parts.path, parse_qs(parts.query))
        if status >= 300:
            return Failure(status, body, spec.url)
        return Success(status, self.content_type, json.dumps(body), spec.url)


def _documents_handler(total=25, per_page=10):
    def handler(path, query):
        assert path == "/api/v1/documents.json"
        page = int(query["page"][0])
        start = (page - 1) * per_page
        stop = min(start + per_page, total)
        results = [
            {
                "document_number": f"2015-{i:05d}",
                "title": f"Doc {i}",
                "publication_date": "2015-06-01",
                "pdf_url": f"https://www.govinfo.gov/content/pkg/FR/{i}.pdf",
            }
            for i in range(start, stop)
        ]
        return 200, {"count": total, "total_pages": 3, "results": results}

    return handler


def test_document_query_renders_api_conditions():
    q = DocumentQuery(term="climate", year=2015, doc_types=["rule", " notice "], order="newest", per_page=50)
    assert q.to_params(page=2) == {
        "conditions[term]": "climate",
        "conditions[publication_date][year]": 2015,
        "conditions[type][]": ["RULE", "NOTICE"],
        "order": "newest",
        "per_page": 50,
        "page": 2,
    }


@pytest.mark.parametrize(
    "kwargs", [{"order": "random"}, {"per_page": 0}, {"per_page": 5000}, {"year": 1800}]
)
def test_document_query_validation(kwargs):
    with pytest.raises(ValidationError):
        DocumentQuery(**kwargs)


def test_monthly_facets_are_coerced():
    def handler(path, query):
        assert path == "/api/v1/documents/facets/monthly"
        assert query["conditions[term]"] == ["climate"]
        return 200, [
            {"name": "January 2015", "count": "120"},
            {"name": "February 2015", "count": "95"},
        ]

    client = FederalRegisterClient(fetcher=ApiFetcher(handler))
    df = client.facets("monthly", DocumentQuery(term="climate"))

    assert df["count"].tolist() == [120, 95]
    assert df["name"].tolist() == [date(2015, 1, 1), date(2015, 2, 1)]


def test_agency_facets_accept_keyed_mapping():
    def handler(path, query):
        assert path == "/api/v1/documents/facets/agency"
        return 200, {
            "environmental-protection-agency": {"count": 40, "name": "Environmental Protection Agency"},
            "energy-department": {"count": 12, "name": "Energy Department"},
        }

    df = FederalRegisterClient(fetcher=ApiFetcher(handler)).facets("agency")
    assert list(df.columns) == ["count", "name"]
    assert df["count"].tolist() == [40, 12]


def test_empty_facet_response_is_an_empty_table():
    df = FederalRegisterClient(fetcher=ApiFetcher(lambda path, query: (200, {}))).facets(
        "monthly", DocumentQuery(term="no-such-term")
    )
    assert len(df) == 0


def test_unknown_facet_kind_is_rejected():
    with pytest.raises(InvalidInputError):
        FederalRegisterClient(fetcher=ApiFetcher(lambda p, q: (200, []))).facets("yearly")


def test_documents_drain_all_pages():
    fetcher = ApiFetcher(_documents_handler(total=25))
    df = FederalRegisterClient(fetcher=fetcher).documents(DocumentQuery(term="climate", per_page=10))

    assert len(df) == 25
    assert len(fetcher.urls) == 3
    assert df["publication_date"].iloc[0] == date(2015, 6, 1)
    assert "conditions%5Bterm%5D=climate" in fetcher.urls[0]


def test_pdf_urls_and_field_selection():
    fetcher = ApiFetcher(_documents_handler(total=3))
    client = FederalRegisterClient(fetcher=fetcher)
    urls = client.pdf_urls(DocumentQuery(term="climate", fields=["title"], per_page=10))

    assert urls == [f"https://www.govinfo.gov/content/pkg/FR/{i}.pdf" for i in range(3)]
    query = parse_qs(urlsplit(fetcher.urls[0]).query)
    assert query["fields[]"] == ["title", "pdf_url"]


def test_http_failure_surfaces_status():
    fetcher = ApiFetcher(lambda p, q: (503, "Service Unavailable"))
    with pytest.raises(HttpFailureError) as info:
        FederalRegisterClient(fetcher=fetcher).search(DocumentQuery(term="x"))
    assert info.value.status_code == 503


def test_html_answer_is_parse_error():
    fetcher = ApiFetcher(lambda p, q: (200, []), content_type="text/html")
    with pytest.raises(ParseError):
        FederalRegisterClient(fetcher=fetcher).search(DocumentQuery(term="x"))


def test_extractor_uses_params_and_http_settings():
    fetcher = ApiFetcher(_documents_handler(total=12, per_page=5))
    from webharvest.core.config import HttpSettings

    ext = FederalRegisterExtractor(
        url=BASE_URL,
        params={"term": "climate", "year": 2015},
        http=HttpSettings(page_size=5),
        fetcher=fetcher,
    )
    df = ext.extract()
    assert len(df) == 12
    assert len(fetcher.urls) == 3
    assert len(ext.find_files()) == 12


def test_extractor_rejects_unknown_endpoint():
    ext = FederalRegisterExtractor(params={"endpoint": "agencies"}, fetcher=ApiFetcher(lambda p, q: (200, [])))
    with pytest.raises(ValueError):
        ext.extract()
