"""Drive repeated fetch/normalize cycles across result pages.

The loop stops when the declared total is reached, when a page comes back
empty, or (if the source never declares a total) when a page is shorter
than the page size. Whichever comes first wins, so a server that misreports
its count cannot keep the loop alive.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterator, Mapping, Optional, Tuple

import pandas as pd
from prefect.logging import get_logger

from webharvest.core.errors import InvalidInputError, OperationCancelled, ParseError
from webharvest.core.scraping.normalizer import (
    Coercion,
    as_integer,
    normalize,
    records_from_payload,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class PageCursor:
    page_number: int = 1
    page_size: int = 20
    total_count: Optional[int] = None
    items_so_far: int = 0
    exhausted: bool = False

    def __post_init__(self) -> None:
        if self.page_number < 1:
            raise InvalidInputError(f"page_number must be >= 1, got {self.page_number}")
        if self.page_size <= 0:
            raise InvalidInputError(f"page_size must be > 0, got {self.page_size}")
        if self.items_so_far < 0:
            raise InvalidInputError("items_so_far must not be negative")


FetchFn = Callable[[PageCursor], Any]


class Paginator:
    """Pull every page of a paginated JSON source into DataFrames.

    `fetch_fn(cursor)` must return the parsed payload for `cursor.page_number`,
    e.g. `{"count": 25, "results": [...]}`.
    """

    def __init__(
        self,
        fetch_fn: FetchFn,
        results_key: Optional[str] = "results",
        count_key: Optional[str] = "count",
        coercions: Optional[Mapping[str, Coercion]] = None,
        cancel_event: Optional[threading.Event] = None,
        max_pages: Optional[int] = None,
    ) -> None:
        self.fetch_fn = fetch_fn
        self.results_key = results_key
        self.count_key = count_key
        self.coercions = coercions
        self.cancel_event = cancel_event
        self.max_pages = max_pages

    def _declared_total(self, payload: Any) -> Optional[int]:
        if self.count_key is None or not isinstance(payload, Mapping):
            return None
        raw = payload.get(self.count_key)
        if raw is None:
            return None
        try:
            return as_integer(raw)
        except (TypeError, ValueError) as exc:
            raise ParseError(f"'{self.count_key}' is not an integer: {raw!r}") from exc

    def next_page(self, cursor: PageCursor) -> Tuple[pd.DataFrame, PageCursor]:
        if cursor.exhausted:
            return pd.DataFrame(), cursor
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise OperationCancelled(f"pagination cancelled before page {cursor.page_number}")

        payload = self.fetch_fn(cursor)
        records = records_from_payload(payload, self.results_key)
        table = normalize(records, self.coercions)

        total = cursor.total_count
        if total is None:
            total = self._declared_total(payload)

        items = cursor.items_so_far + len(table)
        if len(table) == 0:
            exhausted = True
        elif total is not None:
            exhausted = items >= total
        else:
            exhausted = len(table) < cursor.page_size

        logger.debug(
            "Page %d: %d rows (%d/%s)", cursor.page_number, len(table), items, total
        )
        return table, replace(
            cursor,
            page_number=cursor.page_number + 1,
            total_count=total,
            items_so_far=items,
            exhausted=exhausted,
        )

    def iter_pages(self, cursor: Optional[PageCursor] = None) -> Iterator[pd.DataFrame]:
        """Yield one DataFrame per non-empty page, in page order."""
        cursor = cursor or PageCursor()
        pages = 0
        while not cursor.exhausted:
            if self.max_pages is not None and pages >= self.max_pages:
                logger.warning("Stopping after max_pages=%d", self.max_pages)
                return
            table, cursor = self.next_page(cursor)
            pages += 1
            if len(table):
                yield table

    def drain(self, cursor: Optional[PageCursor] = None) -> pd.DataFrame:
        pages = list(self.iter_pages(cursor))
        if not pages:
            return pd.DataFrame()
        return pd.concat(pages, ignore_index=True)
