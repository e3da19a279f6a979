from __future__ import annotations

from typing import Sequence

from recordloader.domain.models import ParamBag, RecordCollection
from recordloader.domain.ports.search import SearchBackendProtocol, SearchServiceProtocol


class SearchBackendRegistry:
    """
    Назначение/ответственность:
        Реестр поисковых backend по имени источника.
    """

    def __init__(self) -> None:
        self._backends: dict[str, SearchBackendProtocol] = {}

    def register(self, backend: SearchBackendProtocol) -> None:
        self._backends[backend.source] = backend

    def get(self, source: str) -> SearchBackendProtocol:
        if source not in self._backends:
            raise ValueError(f"Unsupported search backend: {source}")
        return self._backends[source]


class SearchService(SearchServiceProtocol):
    """
    Назначение/ответственность:
        Маршрутизирует retrieve/retrieve_batch в backend источника.
    Ограничения:
        Ошибки backend не перехватываются.
    """

    def __init__(self, registry: SearchBackendRegistry):
        self.registry = registry

    def retrieve(self, source: str, id: str, params: ParamBag | None = None) -> RecordCollection:
        return self.registry.get(source).retrieve(id, params)

    def retrieve_batch(
        self,
        source: str,
        ids: Sequence[str],
        params: ParamBag | None = None,
    ) -> RecordCollection:
        return self.registry.get(source).retrieve_batch(ids, params)
