from __future__ import annotations

from typing import Sequence

from recordloader.domain.models import RecordCollection
from recordloader.records.drivers import DefaultRecord, RecordDriver
from recordloader.records.factory import RecordFactory


def make_record(record_id: str = "test", source: str = "Solr", **raw) -> DefaultRecord:
    return DefaultRecord({"id": record_id, **raw}, source)


class FakeSearchService:
    """
    Поисковый сервис для тестов: отдаёт заранее заданные записи по источнику
    и запоминает все вызовы.
    """

    def __init__(self, responses: dict[str, list[RecordDriver]] | None = None, errors: dict | None = None):
        self.responses = responses or {}
        self.errors = errors or {}
        self.calls: list[tuple] = []

    def retrieve(self, source, id, params=None):
        self.calls.append(("retrieve", source, id, params))
        return self._respond(source)

    def retrieve_batch(self, source, ids, params=None):
        self.calls.append(("retrieve_batch", source, list(ids), params))
        return self._respond(source)

    def _respond(self, source):
        if source in self.errors:
            raise self.errors[source]
        return RecordCollection.of(source, self.responses.get(source, []))


class FakeFallbackLoader:
    def __init__(self, records: Sequence[RecordDriver] = (), error: Exception | None = None):
        self.records = list(records)
        self.error = error
        self.calls: list[list[str]] = []

    def load(self, ids):
        self.calls.append(list(ids))
        if self.error is not None:
            raise self.error
        return list(self.records)


class CountingRecordFactory(RecordFactory):
    def __init__(self) -> None:
        super().__init__()
        self.requested: list[str] = []

    def get(self, variant):
        self.requested.append(variant)
        return super().get(variant)
