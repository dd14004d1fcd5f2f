"""HTTP fetcher returning immutable response outcomes.

Provides a small `Fetcher` object exposing `fetch` (for a `RequestSpec`)
and `get` (for a plain URL). No automatic retries are performed: a failed
request is reported once and the caller decides what to do.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

import requests
from requests.adapters import HTTPAdapter

from webharvest.core.errors import HttpFailureError
from webharvest.core.scraping.request_builder import RequestSpec

DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; WebHarvestBot/1.0; +https://example.org/bot)"


@dataclass(frozen=True)
class Success:
    status_code: int
    content_type: str
    body: str
    url: str = ""

    ok = True


@dataclass(frozen=True)
class Failure:
    status_code: int
    reason: str
    url: str = ""

    ok = False


ResponseOutcome = Union[Success, Failure]


class Fetcher:
    """Small HTTP client with sensible defaults for API calls and scraping.

    Usage:
        f = Fetcher(timeout=15)
        outcome = f.fetch(build(base, ["documents.json"], {"per_page": 20}))
    """

    def __init__(
        self,
        timeout: int = 15,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.user_agent = user_agent or DEFAULT_USER_AGENT
        if session is None:
            session = requests.Session()
            adapter = HTTPAdapter(max_retries=0)
            session.mount("https://", adapter)
            session.mount("http://", adapter)
        self.session = session

    def _headers(self, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        base = {"User-Agent": self.user_agent}
        if headers:
            base.update(headers)
        return base

    def get(self, url: str, headers: Optional[Dict[str, str]] = None) -> ResponseOutcome:
        try:
            resp = self.session.get(
                url, headers=self._headers(headers), timeout=self.timeout
            )
        except requests.RequestException as exc:
            raise HttpFailureError(url, None, str(exc)) from exc

        if 200 <= resp.status_code < 300:
            return Success(
                status_code=resp.status_code,
                content_type=resp.headers.get("Content-Type", ""),
                body=resp.text,
                url=url,
            )
        return Failure(
            status_code=resp.status_code, reason=resp.reason or "", url=url
        )

    def fetch(
        self, spec: RequestSpec, headers: Optional[Dict[str, str]] = None
    ) -> ResponseOutcome:
        return self.get(spec.url, headers=headers)
