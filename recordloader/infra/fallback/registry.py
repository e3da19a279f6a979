from __future__ import annotations

from typing import Mapping

from recordloader.domain.ports.fallback import FallbackLoaderProtocol, FallbackRegistryProtocol


class FallbackLoaderRegistry(FallbackRegistryProtocol):
    """
    Назначение/ответственность:
        Реестр fallback-загрузчиков по источникам, заполняется при старте.
    """

    def __init__(self, loaders: Mapping[str, FallbackLoaderProtocol] | None = None) -> None:
        self._loaders: dict[str, FallbackLoaderProtocol] = dict(loaders or {})

    def register(self, source: str, loader: FallbackLoaderProtocol) -> None:
        self._loaders[source] = loader

    def has(self, source: str) -> bool:
        return source in self._loaders

    def get(self, source: str) -> FallbackLoaderProtocol:
        if source not in self._loaders:
            raise ValueError(f"No fallback loader registered for source: {source}")
        return self._loaders[source]

    def sources(self) -> list[str]:
        return list(self._loaders)
