from __future__ import annotations

from typing import Sequence

from recordloader.domain.exceptions import RecordMissingError
from recordloader.domain.models import ParamBag, RecordCollection
from recordloader.domain.ports.search import SearchBackendProtocol
from recordloader.infra.http.record_api_driver import RecordApiDriver
from recordloader.records.factory import RecordFactory


class ApiSearchBackend(SearchBackendProtocol):
    """
    Назначение/ответственность:
        Backend источника поверх RecordApiDriver: сырые JSON-записи -> драйверы записей.
    Контракт:
        - 404 (одиночный или пакетный запрос) означает пустую коллекцию, а не ошибку.
        - Прочие ошибки драйвера пробрасываются.
    """

    def __init__(self, source: str, driver: RecordApiDriver, factory: RecordFactory):
        self.source = source
        self.driver = driver
        self.factory = factory

    def retrieve(self, id: str, params: ParamBag | None = None) -> RecordCollection:
        try:
            items = self.driver.getRecord(id, params)
        except RecordMissingError:
            return RecordCollection.empty(self.source)
        return self._collection(items)

    def retrieve_batch(self, ids: Sequence[str], params: ParamBag | None = None) -> RecordCollection:
        try:
            items = self.driver.getRecords(ids, params)
        except RecordMissingError:
            return RecordCollection.empty(self.source)
        return self._collection(items)

    def _collection(self, items: list[dict]) -> RecordCollection:
        records = [self.factory.from_raw(self.source, item) for item in items if isinstance(item, dict)]
        return RecordCollection.of(self.source, records)
