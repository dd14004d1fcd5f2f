"""Document parsing helpers: JSON payloads and HTML documents.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from bs4 import BeautifulSoup
from bs4.element import Tag
from soupsieve import SelectorSyntaxError

from webharvest.core.errors import ParseError


def parse_json(text: str, url: Optional[str] = None) -> Any:
    try:
        return json.loads(text)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"body is not valid JSON: {exc}", url=url) from exc


def parse_html(text: str, url: Optional[str] = None) -> BeautifulSoup:
    if not isinstance(text, str):
        raise ParseError(f"HTML body must be text, got {type(text).__name__}", url=url)
    return BeautifulSoup(text, "html.parser")


def select(document: BeautifulSoup | Tag, selector: str) -> List[Tag]:
    """Return the elements matching a CSS `selector`, in document order."""
    try:
        return list(document.select(selector))
    except (SelectorSyntaxError, ValueError) as exc:
        raise ParseError(f"invalid selector {selector!r}: {exc}") from exc


def attribute(element: Tag, name: str) -> Optional[str]:
    value = element.get(name)
    if value is None:
        return None
    # multi-valued attributes (class, rel) come back as lists
    if isinstance(value, list):
        return " ".join(value)
    return str(value)
