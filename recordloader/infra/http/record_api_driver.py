from __future__ import annotations

from typing import Any, Mapping, Sequence

from recordloader.infra.http.ils_api_client import ApiError, IlsApiDriver

DEFAULT_RECORD_PATH = "/record"
DEFAULT_BATCH_PATH = "/records"


class RecordApiDriver(IlsApiDriver):
    """
    Назначение/ответственность:
        Драйвер JSON API, отдающего библиографические записи по id.

    Контракт:
        - API.record_path (по умолчанию /record): одна запись, id в параметре "id".
        - API.batch_path (по умолчанию /records): несколько записей, id в повторяющемся "id[]".
        - Ответ: список объектов или объект с ключом records/items/data/result.
    """

    def _api(self) -> Mapping[str, Any]:
        return self.config.get("API") or {}

    @property
    def recordPath(self) -> str:
        return str(self._api().get("record_path") or DEFAULT_RECORD_PATH)

    @property
    def batchPath(self) -> str:
        return str(self._api().get("batch_path") or self._api().get("records_path") or DEFAULT_BATCH_PATH)

    def getRecord(self, id: str, params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        query: dict[str, Any] = dict(params or {})
        query["id"] = id
        return self._extract_items(self.getJson(self.recordPath, query))

    def getRecords(self, ids: Sequence[str], params: Mapping[str, Any] | None = None) -> list[dict[str, Any]]:
        query: dict[str, Any] = dict(params or {})
        query["id[]"] = list(ids)
        return self._extract_items(self.getJson(self.batchPath, query))

    def _extract_items(self, data: Any) -> list[dict[str, Any]]:
        """Пытается вытащить массив записей из разных возможных ключей."""
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in ("records", "items", "data", "result"):
                if key in data and isinstance(data[key], list):
                    return data[key]
            # одиночная запись без обёртки
            if "id" in data:
                return [data]
        raise ApiError("Unexpected response format: no records array", code="INVALID_ITEMS_FORMAT", retryable=False)
