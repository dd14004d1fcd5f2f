from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

import pandas as pd

from webharvest.core.config import HttpSettings
from webharvest.core.interfaces import BaseExtractor
from webharvest.core.scraping.fetcher import Fetcher
from webharvest.core.scraping.normalizer import (
    Coercion,
    coercion_from_name,
    normalize,
    records_from_payload,
)
from webharvest.core.scraping.paginator import PageCursor, Paginator
from webharvest.core.scraping.parser import parse_json
from webharvest.core.scraping.request_builder import RequestSpec, build
from webharvest.core.scraping.validator import ResponseFormat, ensure_ok


def get_json(fetcher: Fetcher, spec: RequestSpec) -> Any:
    """Fetch `spec`, require a 2xx JSON response and return the parsed body."""
    success = ensure_ok(fetcher.fetch(spec), ResponseFormat.JSON)
    return parse_json(success.body, url=spec.url)


class RestApiExtractor(BaseExtractor):
    """
    Extrator Genérico para APIs REST paginadas.

    Params aceitos (todos opcionais):
    - segments: lista de segmentos de caminho somados à URL base
    - query: dict de parâmetros de consulta
    - results_key / count_key: onde ficam os registros e o total na resposta
    - page_param / size_param: nomes dos parâmetros de paginação
    - paginate: False para buscar só uma página
    - coercions: {coluna: "integer" | "date[:fmt]" | "month_year[:dia]"}
    """

    def __init__(
        self,
        url: str,
        params: dict | None = None,
        http: HttpSettings | None = None,
        fetcher: Fetcher | None = None,
    ):
        super().__init__(url=url, params=params, http=http)
        self.fetcher = fetcher or Fetcher(
            timeout=self.http.timeout, user_agent=self.http.user_agent
        )

    @property
    def coercions(self) -> Dict[str, Coercion]:
        spec: Mapping[str, Any] = self.params.get("coercions") or {}
        return {
            col: c if callable(c) else coercion_from_name(c) for col, c in spec.items()
        }

    def request_for(self, cursor: Optional[PageCursor] = None) -> RequestSpec:
        query = dict(self.params.get("query") or {})
        if cursor is not None:
            query[self.params.get("size_param", "per_page")] = cursor.page_size
            query[self.params.get("page_param", "page")] = cursor.page_number
        return build(self.url, self.params.get("segments") or (), query)

    def fetch_page(self, cursor: PageCursor) -> Any:
        return get_json(self.fetcher, self.request_for(cursor))

    def extract(self) -> pd.DataFrame:
        """
        Implementação padrão: GET paginado, JSON -> DataFrame normalizado.
        Erros HTTP/parse são propagados para quem chamou.
        """
        print(f"🌐 [API Extractor] Conectando em: {self.url}")
        results_key = self.params.get("results_key", "results")

        if not self.params.get("paginate", True):
            payload = get_json(self.fetcher, self.request_for())
            df = normalize(records_from_payload(payload, results_key), self.coercions)
        else:
            paginator = Paginator(
                self.fetch_page,
                results_key=results_key,
                count_key=self.params.get("count_key", "count"),
                coercions=self.coercions,
                max_pages=self.http.max_pages,
            )
            df = paginator.drain(PageCursor(page_size=self.http.page_size))

        print(f"✅ [API Extractor] {len(df)} registros obtidos.")
        return df

    def find_files(self) -> list[str]:
        files_column = self.params.get("files_column")
        if not files_column:
            return []
        df = self.extract()
        if files_column not in df.columns:
            return []
        return [u for u in df[files_column].tolist() if isinstance(u, str) and u]
