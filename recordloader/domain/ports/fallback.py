from __future__ import annotations

from typing import Protocol, Sequence

from recordloader.domain.ports.records import RecordDriverProtocol


class FallbackLoaderProtocol(Protocol):
    """
    Назначение/ответственность:
        Прямая загрузка записей мимо поискового индекса (например, из живого API).
    Контракт:
        - load(ids) -> записи в произвольном порядке; отсутствующие id просто не возвращаются.
    """

    def load(self, ids: Sequence[str]) -> Sequence[RecordDriverProtocol]: ...


class FallbackRegistryProtocol(Protocol):
    """
    Назначение:
        Реестр fallback-загрузчиков по имени источника.
    """

    def has(self, source: str) -> bool: ...
    def get(self, source: str) -> FallbackLoaderProtocol: ...


__all__ = ["FallbackLoaderProtocol", "FallbackRegistryProtocol"]
