from __future__ import annotations

from typing import Sequence

from recordloader.domain.exceptions import RecordMissingError
from recordloader.domain.ports.fallback import FallbackLoaderProtocol
from recordloader.infra.http.record_api_driver import RecordApiDriver
from recordloader.records.drivers import RecordDriver
from recordloader.records.factory import RecordFactory


class ApiFallbackLoader(FallbackLoaderProtocol):
    """
    Назначение:
        Загрузка записей напрямую из живого API источника, минуя поисковый индекс.
    Контракт:
        - Записи помечаются источником fallback (source), даже если API его не сообщает.
        - 404 от API: ничего не найдено, id остаются пропусками.
    """

    def __init__(self, source: str, driver: RecordApiDriver, factory: RecordFactory):
        self.source = source
        self.driver = driver
        self.factory = factory

    def load(self, ids: Sequence[str]) -> list[RecordDriver]:
        if not ids:
            return []
        try:
            items = self.driver.getRecords(ids)
        except RecordMissingError:
            return []
        return [self.factory.from_raw(self.source, item) for item in items if isinstance(item, dict)]
