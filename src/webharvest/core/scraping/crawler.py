"""Two-level link crawler: index page -> child pages -> one target per child.

The crawl is modelled as an explicit tree of `CrawlNode` rebuilt on every
call. A branch that fails keeps its slot with `resolved_target=None` and an
`error` message, so partial results are visible to the caller instead of
being dropped.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import List, Optional, Pattern, Sequence, Union

from prefect.logging import get_logger

from webharvest.core.errors import HarvestError, OperationCancelled
from webharvest.core.scraping import links, parser
from webharvest.core.scraping.fetcher import Fetcher
from webharvest.core.scraping.urls import resolve_link
from webharvest.core.scraping.validator import ResponseFormat, ensure_ok

logger = get_logger(__name__)


@dataclass
class CrawlNode:
    url: str
    extracted_links: List[str] = field(default_factory=list)
    resolved_target: Optional[str] = None
    error: Optional[str] = None
    children: List["CrawlNode"] = field(default_factory=list)


@dataclass
class CrawlResult:
    """Outcome of `PageCrawler.crawl`; `partial` flags missing branches."""

    root: CrawlNode

    @property
    def branches(self) -> List[CrawlNode]:
        return self.root.children

    @property
    def targets(self) -> List[str]:
        return [n.resolved_target for n in self.branches if n.resolved_target]

    @property
    def failed_branches(self) -> List[CrawlNode]:
        return [n for n in self.branches if n.resolved_target is None]

    @property
    def partial(self) -> bool:
        return bool(self.failed_branches)


class PageCrawler:
    """Sequential crawler built on a `Fetcher`.

    Usage:
        crawler = PageCrawler(Fetcher())
        result = crawler.crawl(index_url, "table a", "a.download", r"[0-9]$")
    """

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> None:
        self.fetcher = fetcher or Fetcher()
        self.cancel_event = cancel_event

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelled("crawl cancelled between fetches")

    def _fetch_document(self, url: str):
        self._check_cancelled()
        success = ensure_ok(self.fetcher.get(url), ResponseFormat.HTML)
        return parser.parse_html(success.body, url=url)

    def resolve_target(
        self, url: str, selector: str, attr: str = "href"
    ) -> Optional[str]:
        """Fetch `url` and return `attr` of the first `selector` match, or None."""
        document = self._fetch_document(url)
        matches = links.extract(document, selector)
        if not matches:
            return None
        return parser.attribute(matches[0], attr)

    def _resolve_branch(
        self, url: str, selector: str, base_for_relative: Optional[str], attr: str
    ) -> CrawlNode:
        node = CrawlNode(url=url)
        try:
            target = self.resolve_target(url, selector, attr)
        except OperationCancelled:
            raise
        except HarvestError as exc:
            logger.warning("Branch %s failed: %s", url, exc)
            node.error = str(exc)
            return node
        if target is None or not target.strip():
            node.error = f"no usable {attr!r} on {selector!r} match"
            logger.info("Branch %s has no match for %s", url, selector)
            return node
        node.extracted_links = [target]
        node.resolved_target = resolve_link(target, base_for_relative, url)
        return node

    def crawl_level(
        self,
        urls: Sequence[str],
        selector: str,
        base_for_relative: Optional[str] = None,
        attr: str = "href",
    ) -> List[Optional[str]]:
        """Resolve one target per URL, in input order.

        Relative targets are rewritten against `base_for_relative` (or the
        page they were found on). A failing URL yields None and the remaining
        URLs are still processed.
        """
        return [
            self._resolve_branch(u, selector, base_for_relative, attr).resolved_target
            for u in urls
        ]

    def crawl(
        self,
        index_url: str,
        link_selector: str,
        target_selector: str,
        link_pattern: Union[str, Pattern[str], None] = None,
        base_for_relative: Optional[str] = None,
        attr: str = "href",
    ) -> CrawlResult:
        """Crawl the index page, then each matching child page.

        Errors fetching the index page propagate; child failures are recorded
        on their nodes.
        """
        document = self._fetch_document(index_url)
        found = links.extract_links(document, link_selector, attr, link_pattern)
        root = CrawlNode(
            url=index_url,
            extracted_links=[resolve_link(u, base_for_relative, index_url) for u in found],
        )
        logger.info("Index %s yielded %d links", index_url, len(root.extracted_links))

        for child_url in root.extracted_links:
            root.children.append(
                self._resolve_branch(child_url, target_selector, base_for_relative, attr)
            )

        result = CrawlResult(root=root)
        if result.partial:
            logger.warning(
                "Crawl of %s is partial: %d of %d branches unresolved",
                index_url,
                len(result.failed_branches),
                len(result.branches),
            )
        return result
