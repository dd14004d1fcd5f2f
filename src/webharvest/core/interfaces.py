from __future__ import annotations

from abc import ABC, abstractmethod

import pandas as pd

from webharvest.core.config import HttpSettings


class BaseExtractor(ABC):
    """
    Interface (Contrato) que todo Extrator deve seguir.

    Isso garante que o Flow não precise mudar quando surgir uma nova fonte.
    """

    def __init__(self, url: str, params: dict | None = None, http: HttpSettings | None = None):
        self.url = url
        self.params = params or {}
        self.http = http or HttpSettings()

    @abstractmethod
    def extract(self) -> pd.DataFrame:
        """
        Deve executar a lógica de extração e retornar um DataFrame Pandas.
        Se não houver dados, retorna um DataFrame vazio.
        """
        pass

    @abstractmethod
    def find_files(self) -> list[str]:
        """Discover candidate file URLs for this extractor.

        Implementations should return a list of absolute URLs (may be empty).
        Sources without downloadable files return an empty list.
        """
        raise NotImplementedError()
