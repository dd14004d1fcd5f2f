import json

import pytest

from webharvest.core.config import HttpSettings
from webharvest.core.errors import HttpFailureError
from webharvest.core.scraping.fetcher import Failure, Success
from webharvest.extractors.base_api import RestApiExtractor
from webharvest.extractors.scraping_extractor import LinkCrawlExtractor

SITE = "https://stats.example.org"


class DummyFetcher:
    def __init__(self, pages: dict, content_type="text/html"):
        self.pages = pages
        self.content_type = content_type
        self.urls = []

    def get(self, url, headers=None):
        self.urls.append(url)
        if url not in self.pages:
            return Failure(404, "Not Found", url)
        body = self.pages[url]
        if not isinstance(body, str):
            body = json.dumps(body)
        return Success(200, self.content_type, body, url)

    def fetch(self, spec, headers=None):
        return self.get(spec.url, headers)


ARCHIVE = {
    f"{SITE}/archive": """
        <table>
          <tr><td><a href="/archive/about">About</a></td></tr>
          <tr><td><a href="/archive/2019">2019</a></td></tr>
          <tr><td><a href="/archive/2020">2020</a></td></tr>
          <tr><td><a href="/archive/feedback">Feedback</a></td></tr>
        </table>
    """,
    f"{SITE}/archive/2019": '<a href="files/annual_2019.pdf">PDF</a>',
}


def test_link_crawl_find_files_returns_resolved_targets():
    ext = LinkCrawlExtractor(
        url=f"{SITE}/archive",
        params={"link_selector": "table a"},
        fetcher=DummyFetcher(ARCHIVE),
    )
    assert ext.find_files() == [f"{SITE}/archive/files/annual_2019.pdf"]


def test_link_crawl_extract_reports_each_branch():
    ext = LinkCrawlExtractor(
        url=f"{SITE}/archive",
        params={"link_selector": "table a", "base_for_relative": f"{SITE}/"},
        fetcher=DummyFetcher(ARCHIVE),
    )
    df = ext.extract()

    assert list(df.columns) == ["page_url", "year", "target_url", "error"]
    assert df["year"].tolist() == [2019, 2020]
    assert df["target_url"].tolist() == [f"{SITE}/files/annual_2019.pdf", None]
    assert df["error"].iloc[0] is None
    assert "404" in df["error"].iloc[1]


def test_year_from_url():
    assert LinkCrawlExtractor.year_from_url(f"{SITE}/archive/2019") == 2019
    assert LinkCrawlExtractor.year_from_url(f"{SITE}/archive/12345") is None


def test_rest_api_extractor_paginates_with_params():
    pages = {
        f"{SITE}/api/items?kind=a&per_page=2&page=1": {"count": 3, "results": [{"id": "1"}, {"id": "2"}]},
        f"{SITE}/api/items?kind=a&per_page=2&page=2": {"count": 3, "results": [{"id": "3", "extra": "x"}]},
    }
    fetcher = DummyFetcher(pages, content_type="application/json")
    ext = RestApiExtractor(
        url=SITE,
        params={"segments": ["api", "items"], "query": {"kind": "a"}, "coercions": {"id": "integer"}},
        http=HttpSettings(page_size=2),
        fetcher=fetcher,
    )
    df = ext.extract()

    assert list(df.columns) == ["id", "extra"]
    assert df["id"].tolist() == [1, 2, 3]
    assert df["extra"].isna().tolist() == [True, True, False]
    assert df["extra"].iloc[2] == "x"
    assert ext.find_files() == []


def test_rest_api_extractor_single_page_and_files_column():
    pages = {f"{SITE}/files.json": [{"url": "https://x/a.csv"}, {"url": None}]}
    ext = RestApiExtractor(
        url=f"{SITE}/files.json",
        params={"paginate": False, "results_key": None, "files_column": "url"},
        fetcher=DummyFetcher(pages, content_type="application/json"),
    )
    assert len(ext.extract()) == 2
    assert ext.find_files() == ["https://x/a.csv"]


def test_rest_api_extractor_propagates_http_errors():
    ext = RestApiExtractor(url=f"{SITE}/gone", params={"paginate": False}, fetcher=DummyFetcher({}))
    with pytest.raises(HttpFailureError):
        ext.extract()
