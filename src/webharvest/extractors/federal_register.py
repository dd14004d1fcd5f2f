"""Client and extractor for the Federal Register public API.

The API needs no authentication. Two endpoint families are used:

- `GET /documents/facets/{daily|weekly|monthly|agency}`: document counts
  grouped by a dimension;
- `GET /documents.json`: paginated search returning `{count, results}`,
  each result carrying a `pdf_url`.
"""

from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

import pandas as pd
from pydantic import BaseModel, Field, field_validator

from webharvest.core.config import HttpSettings
from webharvest.core.errors import InvalidInputError
from webharvest.core.scraping.fetcher import Fetcher
from webharvest.core.scraping.normalizer import (
    as_date,
    as_integer,
    month_year_date,
    normalize,
    records_from_payload,
)
from webharvest.core.scraping.paginator import PageCursor, Paginator
from webharvest.core.scraping.request_builder import build
from webharvest.extractors.base_api import RestApiExtractor, get_json

BASE_URL = "https://www.federalregister.gov/api/v1"
FACET_KINDS = ("daily", "weekly", "monthly", "agency")

DOCUMENT_COERCIONS = {"publication_date": as_date("%Y-%m-%d")}


class DocumentQuery(BaseModel):
    """Search conditions for `/documents.json` (and facet filtering)."""

    term: Optional[str] = None
    year: Optional[int] = Field(default=None, ge=1994, le=2100)
    doc_types: List[str] = Field(default_factory=list)  # RULE, PRORULE, NOTICE, PRESDOCU
    order: str = Field(
        default="relevance",
        pattern="^(relevance|newest|oldest|executive_order_number)$",
    )
    per_page: int = Field(default=20, gt=0, le=1000)
    fields: List[str] = Field(default_factory=list)

    @field_validator("doc_types")
    def doc_types_upper(cls, v):
        return [t.strip().upper() for t in v if t and t.strip()]

    def conditions(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.term:
            params["conditions[term]"] = self.term
        if self.year is not None:
            params["conditions[publication_date][year]"] = self.year
        if self.doc_types:
            params["conditions[type][]"] = list(self.doc_types)
        return params

    def to_params(self, page: Optional[int] = None) -> Dict[str, Any]:
        params = self.conditions()
        if self.fields:
            params["fields[]"] = list(self.fields)
        params["order"] = self.order
        params["per_page"] = self.per_page
        if page is not None:
            params["page"] = page
        return params


class FederalRegisterClient:
    """Thin client over the Federal Register API.

    Usage:
        client = FederalRegisterClient()
        monthly = client.facets("monthly", DocumentQuery(term="climate"))
        pdfs = client.pdf_urls(DocumentQuery(term="climate", year=2015))
    """

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        base_url: str = BASE_URL,
        cancel_event: Optional[threading.Event] = None,
        max_pages: Optional[int] = None,
    ) -> None:
        self.fetcher = fetcher or Fetcher()
        self.base_url = base_url
        self.cancel_event = cancel_event
        self.max_pages = max_pages

    def facets(self, kind: str, query: DocumentQuery | None = None) -> pd.DataFrame:
        if kind not in FACET_KINDS:
            raise InvalidInputError(
                f"facet kind must be one of {', '.join(FACET_KINDS)}, got {kind!r}"
            )
        params = (query or DocumentQuery()).conditions()
        spec = build(self.base_url, ["documents", "facets", kind], params)
        payload = get_json(self.fetcher, spec)

        coercions: Dict[str, Any] = {"count": as_integer}
        if kind == "monthly":
            coercions["name"] = month_year_date(1)
        return normalize(records_from_payload(payload), coercions)

    def search(self, query: DocumentQuery, page: int = 1) -> Any:
        """Fetch one raw page of `/documents.json`."""
        spec = build(self.base_url, ["documents.json"], query.to_params(page=page))
        return get_json(self.fetcher, spec)

    def documents(self, query: DocumentQuery) -> pd.DataFrame:
        paginator = Paginator(
            lambda cursor: self.search(query, page=cursor.page_number),
            coercions=DOCUMENT_COERCIONS,
            cancel_event=self.cancel_event,
            max_pages=self.max_pages,
        )
        return paginator.drain(PageCursor(page_size=query.per_page))

    def pdf_urls(self, query: DocumentQuery) -> List[str]:
        if query.fields and "pdf_url" not in query.fields:
            query = query.model_copy(update={"fields": [*query.fields, "pdf_url"]})
        df = self.documents(query)
        if "pdf_url" not in df.columns:
            return []
        return [u for u in df["pdf_url"].tolist() if isinstance(u, str) and u]


class FederalRegisterExtractor(RestApiExtractor):
    """Extractor over `FederalRegisterClient`.

    params:
    - endpoint: "documents" (default) or "facets"
    - facet: facet kind when endpoint == "facets" (default "monthly")
    - term, year, doc_types, order, fields: see `DocumentQuery`
    """

    def __init__(
        self,
        url: str = BASE_URL,
        params: dict | None = None,
        http: HttpSettings | None = None,
        fetcher: Fetcher | None = None,
    ):
        super().__init__(url=url, params=params, http=http, fetcher=fetcher)
        self.client = FederalRegisterClient(
            fetcher=self.fetcher, base_url=url, max_pages=self.http.max_pages
        )

    @property
    def query(self) -> DocumentQuery:
        fields = {
            k: self.params[k]
            for k in ("term", "year", "doc_types", "order", "fields")
            if k in self.params
        }
        fields.setdefault("per_page", self.http.page_size)
        return DocumentQuery(**fields)

    def extract(self) -> pd.DataFrame:
        endpoint = self.params.get("endpoint", "documents")
        print(f"🌐 [Federal Register] endpoint={endpoint} url={self.url}")
        if endpoint == "facets":
            return self.client.facets(self.params.get("facet", "monthly"), self.query)
        if endpoint == "documents":
            return self.client.documents(self.query)
        raise ValueError(f"❌ Endpoint '{endpoint}' não suportado.")

    def find_files(self) -> list[str]:
        return self.client.pdf_urls(self.query)
