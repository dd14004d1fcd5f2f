"""Link extraction from parsed HTML documents.

The selector is handed to BeautifulSoup untouched; this module only turns
the matched elements into strings and filters them.
"""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Pattern, Union

from bs4 import BeautifulSoup
from bs4.element import Tag

from webharvest.core.scraping import parser


def extract(document: BeautifulSoup | Tag, selector: str) -> List[Tag]:
    return parser.select(document, selector)


def attribute(elements: Iterable[Tag], name: str) -> List[Optional[str]]:
    """Read `name` from every element; a missing attribute yields None."""
    return [parser.attribute(el, name) for el in elements]


def _anchor_end(pattern: Union[str, Pattern[str]]) -> Pattern[str]:
    if isinstance(pattern, re.Pattern):
        if pattern.pattern.endswith("$"):
            return pattern
        return re.compile(f"(?:{pattern.pattern})$", pattern.flags)
    if not pattern.endswith("$"):
        pattern = f"(?:{pattern})$"
    return re.compile(pattern)


def filter_by_suffix_pattern(
    strings: Iterable[Optional[str]], pattern: Union[str, Pattern[str]]
) -> List[str]:
    """Keep entries whose trailing text matches `pattern`, in input order.

    `pattern` is anchored at the end if it is not already (compiled patterns
    included), so "[0-9]" and "[0-9]$" both keep only values ending in a
    digit. Values are matched as given; trailing whitespace is not stripped.
    None entries are dropped.
    """
    rx = _anchor_end(pattern)
    return [s for s in strings if s is not None and rx.search(s)]


def extract_links(
    document: BeautifulSoup | Tag,
    selector: str,
    attr: str = "href",
    pattern: Union[str, Pattern[str], None] = None,
) -> List[str]:
    """Extract `attr` from elements matching `selector`, optionally filtered."""
    values = attribute(extract(document, selector), attr)
    if pattern is None:
        return [v for v in values if v is not None]
    return filter_by_suffix_pattern(values, pattern)
