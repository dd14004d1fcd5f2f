"""Tarefas Prefect que usam os componentes de scraping.

Cada task é uma unidade de trabalho com logs do Prefect. Nenhuma delas
tem retries configurados: uma falha HTTP ou de parse é reportada uma vez e
o flow decide o que fazer.
"""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd
from prefect import get_run_logger, task

from webharvest.core.scraping import links, parser
from webharvest.core.scraping.crawler import PageCrawler
from webharvest.core.scraping.fetcher import Fetcher
from webharvest.core.scraping.normalizer import coercion_from_name
from webharvest.core.scraping.paginator import PageCursor, Paginator
from webharvest.core.scraping.request_builder import build
from webharvest.core.scraping.urls import resolve_link
from webharvest.core.scraping.validator import ResponseFormat, ensure_ok


@task(name="fetch_html", retries=0)
def fetch_html_task(
    url: str, timeout: int = 15, user_agent: Optional[str] = None
) -> str:
    logger = get_run_logger()
    logger.info("Fetching URL: %s", url)
    fetcher = Fetcher(timeout=timeout, user_agent=user_agent)
    success = ensure_ok(fetcher.get(url), ResponseFormat.HTML)
    logger.info("Fetched %s (status=%s)", url, success.status_code)
    return success.body


@task(name="extract_links", retries=0)
def extract_links_task(
    html: str,
    base_url: str,
    selector: str = "a",
    pattern: Optional[str] = None,
    base_for_relative: Optional[str] = None,
) -> List[str]:
    """Links in `html` (fetched from `base_url`), made absolute.

    With `base_for_relative` set, relative links are placed below that prefix
    instead of next to the page.
    """
    logger = get_run_logger()
    document = parser.parse_html(html, url=base_url)
    found = [
        resolve_link(u, base_for_relative, base_url)
        for u in links.extract_links(document, selector, pattern=pattern)
    ]
    logger.info("Extracted %d links from %s", len(found), base_url)
    return found


@task(name="crawl_level", retries=0)
def crawl_level_task(
    urls: List[str],
    selector: str,
    base_for_relative: Optional[str] = None,
    timeout: int = 15,
    user_agent: Optional[str] = None,
) -> List[Optional[str]]:
    logger = get_run_logger()
    fetcher = Fetcher(timeout=timeout, user_agent=user_agent)
    targets = PageCrawler(fetcher).crawl_level(urls, selector, base_for_relative)
    missing = sum(1 for t in targets if t is None)
    if missing:
        logger.warning("%d of %d branches unresolved", missing, len(targets))
    return targets


@task(name="drain_api", retries=0)
def drain_api_task(
    url: str,
    segments: Sequence[str] = (),
    query: Optional[Mapping[str, Any]] = None,
    page_size: int = 20,
    page_param: str = "page",
    size_param: str = "per_page",
    results_key: Optional[str] = "results",
    count_key: Optional[str] = "count",
    coercions: Optional[Mapping[str, str]] = None,
    max_pages: Optional[int] = None,
    timeout: int = 15,
    user_agent: Optional[str] = None,
) -> pd.DataFrame:
    """Pull every page of a JSON endpoint into one table.

    `coercions` maps column names to coercion names ("integer", "date:%Y",
    "month_year", ...) so the task arguments stay plain data.
    """
    logger = get_run_logger()
    fetcher = Fetcher(timeout=timeout, user_agent=user_agent)

    def fetch_page(cursor: PageCursor) -> Any:
        params: Dict[str, Any] = dict(query or {})
        params[size_param] = cursor.page_size
        params[page_param] = cursor.page_number
        spec = build(url, segments, params)
        logger.info("Fetching page %d: %s", cursor.page_number, spec.url)
        success = ensure_ok(fetcher.fetch(spec), ResponseFormat.JSON)
        return parser.parse_json(success.body, url=spec.url)

    paginator = Paginator(
        fetch_page,
        results_key=results_key,
        count_key=count_key,
        coercions={c: coercion_from_name(n) for c, n in (coercions or {}).items()},
        max_pages=max_pages,
    )
    df = paginator.drain(PageCursor(page_size=page_size))
    logger.info("Drained %d rows from %s", len(df), url)
    return df
