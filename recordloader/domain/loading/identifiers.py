from __future__ import annotations

from typing import Any, Iterable, Mapping

from recordloader.domain.exceptions import InvalidIdentifierError
from recordloader.domain.models import RawRecordRequest, RecordRef

ID_DELIMITER = "|"


def parse_record_ref(raw: RawRecordRequest | RecordRef, default_source: str) -> RecordRef:
    """
    Назначение:
        Приводит входной запрос записи к каноническому RecordRef.

    Входные данные:
        raw:
            - {"source": ..., "id": ...} (source необязателен);
            - "source|id";
            - голый id (источник = default_source);
            - готовый RecordRef (возвращается как есть).
        default_source: str
            Источник по умолчанию.

    Ошибки:
        InvalidIdentifierError - нет поля id, больше одного разделителя,
        пустой id/источник или неподдерживаемый тип.
    """
    if isinstance(raw, RecordRef):
        return raw
    if isinstance(raw, Mapping):
        record_id = raw.get("id")
        if record_id is None:
            raise InvalidIdentifierError("Record request is missing 'id' field", raw)
        source = raw.get("source") or default_source
        return _build_ref(str(source), str(record_id), raw)
    if isinstance(raw, str):
        parts = raw.split(ID_DELIMITER)
        if len(parts) == 1:
            return _build_ref(default_source, raw, raw)
        if len(parts) == 2:
            return _build_ref(parts[0], parts[1], raw)
        raise InvalidIdentifierError(f"Invalid record identifier: {raw}", raw)
    raise InvalidIdentifierError(f"Unsupported record request type: {type(raw).__name__}", raw)


def parse_record_refs(raws: Iterable[RawRecordRequest | RecordRef], default_source: str) -> list[RecordRef]:
    """Разбирает последовательность запросов; первая ошибка прерывает весь разбор."""
    return [parse_record_ref(raw, default_source) for raw in raws]


def _build_ref(source: str, record_id: str, raw: Any) -> RecordRef:
    if not source:
        raise InvalidIdentifierError(f"Empty record source in request: {raw!r}", raw)
    if not record_id:
        raise InvalidIdentifierError(f"Empty record id in request: {raw!r}", raw)
    return RecordRef(source=source, id=record_id)
