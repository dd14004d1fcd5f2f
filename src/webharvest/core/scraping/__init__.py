"""Core harvesting primitives exported for reuse across extractors and flows.

This package contains small building blocks: request building, Fetcher,
response validation, parsing, normalization, link extraction, the
two-level PageCrawler and the Paginator, plus Prefect task wrappers.
"""

from .crawler import CrawlNode, CrawlResult, PageCrawler
from .fetcher import Failure, Fetcher, ResponseOutcome, Success
from .links import attribute, extract, extract_links, filter_by_suffix_pattern
from .normalizer import (
    as_date,
    as_integer,
    coercion_from_name,
    month_year_date,
    normalize,
    records_from_payload,
)
from .paginator import PageCursor, Paginator
from .parser import parse_html, parse_json
from .prefect_tasks import (
    crawl_level_task,
    drain_api_task,
    extract_links_task,
    fetch_html_task,
)
from .request_builder import RequestSpec, build
from .urls import normalize_url, resolve_link, to_absolute
from .validator import ResponseFormat, ValidationResult, ensure_ok, validate

__all__ = [
    "RequestSpec",
    "build",
    "Fetcher",
    "Success",
    "Failure",
    "ResponseOutcome",
    "ResponseFormat",
    "ValidationResult",
    "validate",
    "ensure_ok",
    "parse_json",
    "parse_html",
    "normalize",
    "records_from_payload",
    "as_integer",
    "as_date",
    "month_year_date",
    "coercion_from_name",
    "extract",
    "attribute",
    "extract_links",
    "filter_by_suffix_pattern",
    "normalize_url",
    "to_absolute",
    "resolve_link",
    "CrawlNode",
    "CrawlResult",
    "PageCrawler",
    "PageCursor",
    "Paginator",
    "fetch_html_task",
    "extract_links_task",
    "crawl_level_task",
    "drain_api_task",
]
