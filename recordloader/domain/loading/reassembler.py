from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from recordloader.domain.exceptions import RecordMissingError
from recordloader.domain.loading.fallback import FallbackResolver
from recordloader.domain.models import RecordRef
from recordloader.domain.ports.records import (
    PlaceholderRecordProtocol,
    RecordDriverProtocol,
    RecordFactoryProtocol,
)

MISSING_VARIANT = "Missing"


def record_ref_of(record: RecordDriverProtocol) -> RecordRef:
    """Идентичность записи, как её сообщает сам драйвер."""
    return RecordRef(source=str(record.get_source_identifier()), id=str(record.get_unique_id()))


def iter_collection(collection: Any) -> Iterable[RecordDriverProtocol]:
    if hasattr(collection, "get_records"):
        return collection.get_records()
    return collection


def build_record_index(collections: Iterable[Any]) -> dict[RecordRef, RecordDriverProtocol]:
    """
    Назначение:
        Индекс (source, id) -> запись по всем вернувшимся коллекциям.
    Алгоритм:
        - Сопоставление по идентичности записи, а не по позиции: backend может
          переставлять и пропускать id.
        - При нескольких записях с одной идентичностью остаётся первая.
    """
    index: dict[RecordRef, RecordDriverProtocol] = {}
    for collection in collections:
        for record in iter_collection(collection):
            index.setdefault(record_ref_of(record), record)
    return index


def make_missing_record(record_factory: RecordFactoryProtocol, ref: RecordRef) -> PlaceholderRecordProtocol:
    """
    Назначение:
        Строит заглушку варианта "Missing" с исходными id и источником.
    Ошибки:
        ValueError, если фабрика вернула объект без set_raw_data/set_source_identifier.
    """
    record = record_factory.get(MISSING_VARIANT)
    if not isinstance(record, PlaceholderRecordProtocol):
        raise ValueError(f"Record variant {MISSING_VARIANT!r} cannot be used as a placeholder: {type(record).__name__}")
    record.set_raw_data({"id": ref.id})
    record.set_source_identifier(ref.source)
    return record


def find_gaps(requested: Sequence[RecordRef], index: Mapping[RecordRef, Any]) -> list[RecordRef]:
    """Уникальные ненайденные ссылки в порядке запроса."""
    gaps: list[RecordRef] = []
    seen: set[RecordRef] = set()
    for ref in requested:
        if ref in index or ref in seen:
            continue
        seen.add(ref)
        gaps.append(ref)
    return gaps


def reassemble(
    requested: Sequence[RecordRef],
    results_by_source: Mapping[str, Any],
    tolerate_missing: bool = False,
    record_factory: RecordFactoryProtocol | None = None,
    fallback: FallbackResolver | None = None,
) -> list[Any]:
    """
    Назначение:
        Раскладывает найденные записи по исходным позициям запроса.

    Контракт:
        - Выход той же длины и порядка, что requested; дубли получают один и тот же объект.
        - tolerate_missing=True: пропуски заменяются заглушками "Missing", ошибок нет.
        - tolerate_missing=False: пропуски отдаются fallback (если задан);
          оставшиеся -> RecordMissingError по первому пропуску в порядке запроса.
    """
    index = build_record_index(results_by_source.values())
    gaps = find_gaps(requested, index)
    if not gaps:
        return [index[ref] for ref in requested]

    if tolerate_missing:
        if record_factory is None:
            raise ValueError("record_factory is required to build missing record placeholders")
        for ref in gaps:
            index[ref] = make_missing_record(record_factory, ref)
        return [index[ref] for ref in requested]

    if fallback is not None:
        index.update(fallback.resolve(gaps))
    unresolved = [ref for ref in gaps if ref not in index]
    if unresolved:
        first = unresolved[0]
        raise RecordMissingError.for_record(first.source, first.id)
    return [index[ref] for ref in requested]
