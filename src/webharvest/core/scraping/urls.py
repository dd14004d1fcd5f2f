"""URL helpers used when rewriting scraped links.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse


def is_absolute(url: str) -> bool:
    p = urlparse(url)
    return bool(p.scheme and p.netloc)


def normalize_url(url: str, strip_fragment: bool = True) -> str:
    """Trim whitespace and drop the `#fragment`, leaving the rest untouched."""
    p = urlparse(url.strip())
    fragment = "" if strip_fragment else p.fragment
    return urlunparse((p.scheme, p.netloc, p.path, p.params, p.query, fragment))


def to_absolute(link: Optional[str], base: Optional[str]) -> Optional[str]:
    """Rewrite a relative `link` against `base`; absolute links pass through.

    None stays None so callers can keep per-branch positions.
    """
    if link is None:
        return None
    link = link.strip()
    if is_absolute(link) or not base:
        return normalize_url(link)
    return normalize_url(urljoin(base, link))


def as_directory(base: str) -> str:
    """Make `base` end in "/" so joining appends below it instead of replacing its last segment."""
    base = base.strip()
    return base if base.endswith("/") else f"{base}/"


def resolve_link(
    link: Optional[str], base_for_relative: Optional[str], page_url: str
) -> Optional[str]:
    """Absolutize `link` found on `page_url`.

    An explicit `base_for_relative` is a prefix: document-relative links land
    below it. Without one the link resolves against the page it came from.
    """
    if base_for_relative:
        return to_absolute(link, as_directory(base_for_relative))
    return to_absolute(link, page_url)
