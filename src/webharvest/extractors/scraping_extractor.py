from __future__ import annotations

import re
from typing import List, Optional

import pandas as pd

from webharvest.core.config import HttpSettings
from webharvest.core.interfaces import BaseExtractor
from webharvest.core.scraping.crawler import CrawlResult, PageCrawler
from webharvest.core.scraping.fetcher import Fetcher


class LinkCrawlExtractor(BaseExtractor):
    """Two-level HTML scraping extractor.

    Follows an index page to its child pages (typically one page per year)
    and resolves one downloadable link on each.

    params:
    - link_selector: CSS selector for child links on the index (default "a")
    - link_pattern: regex the child link must end with (default "[0-9]$")
    - target_selector: CSS selector for the target on each child page
    - base_for_relative: base used to absolutize links (default: page URL)
    """

    DEFAULT_LINK_PATTERN = r"[0-9]$"
    DEFAULT_TARGET_SELECTOR = "a[href$='.pdf']"

    def __init__(
        self,
        url: str,
        params: dict | None = None,
        http: HttpSettings | None = None,
        fetcher: Fetcher | None = None,
    ):
        super().__init__(url=url, params=params, http=http)
        fetcher = fetcher or Fetcher(
            timeout=self.http.timeout, user_agent=self.http.user_agent
        )
        self.crawler = PageCrawler(fetcher)

    def crawl(self) -> CrawlResult:
        return self.crawler.crawl(
            self.url,
            link_selector=self.params.get("link_selector", "a"),
            target_selector=self.params.get(
                "target_selector", self.DEFAULT_TARGET_SELECTOR
            ),
            link_pattern=self.params.get("link_pattern", self.DEFAULT_LINK_PATTERN),
            base_for_relative=self.params.get("base_for_relative"),
        )

    def find_files(self) -> List[str]:
        return self.crawl().targets

    @staticmethod
    def year_from_url(url: str) -> Optional[int]:
        # last 4-digit group between 1900 and 2099
        found = re.findall(r"(?<!\d)((?:19|20)\d{2})(?!\d)", url)
        return int(found[-1]) if found else None

    def extract(self) -> pd.DataFrame:
        result = self.crawl()
        rows = [
            {
                "page_url": node.url,
                "year": self.year_from_url(node.url),
                "target_url": node.resolved_target,
                "error": node.error,
            }
            for node in result.branches
        ]
        print(
            f"✅ [Crawler] {len(result.targets)}/{len(rows)} links resolvidos"
            + (" (parcial)" if result.partial else "")
        )
        return pd.DataFrame(rows, columns=["page_url", "year", "target_url", "error"])
