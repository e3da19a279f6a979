from __future__ import annotations

from typing import Protocol, Sequence

from recordloader.domain.models import ParamBag, RecordCollection


class SearchServiceProtocol(Protocol):
    """
    Назначение/ответственность:
        Порт поискового сервиса, маршрутизирующего запросы по источникам.
    Ограничения:
        Синхронные блокирующие вызовы; таймауты/ретраи - ответственность реализации.
        params=None означает параметры backend по умолчанию.
    """

    def retrieve(self, source: str, id: str, params: ParamBag | None = None) -> RecordCollection:
        """
        Контракт:
            Вход: источник, id записи, параметры backend.
            Выход: RecordCollection (пустая, если запись не найдена).
        Ошибки:
            Ошибки backend пробрасываются как есть.
        """
        ...

    def retrieve_batch(
        self,
        source: str,
        ids: Sequence[str],
        params: ParamBag | None = None,
    ) -> RecordCollection: ...


class SearchBackendProtocol(Protocol):
    """
    Назначение/ответственность:
        Backend одного источника (индекс, внешний API).
    """

    source: str

    def retrieve(self, id: str, params: ParamBag | None = None) -> RecordCollection: ...
    def retrieve_batch(self, ids: Sequence[str], params: ParamBag | None = None) -> RecordCollection: ...


__all__ = ["SearchServiceProtocol", "SearchBackendProtocol"]
