from __future__ import annotations

from typing import Iterable, Mapping

from recordloader.domain.models import BatchGroup, ParamBag, RecordRef


def group_record_refs(
    refs: Iterable[RecordRef],
    params_by_source: Mapping[str, ParamBag] | None = None,
) -> list[BatchGroup]:
    """
    Назначение:
        Группирует ссылки на записи по источнику для пакетной выборки.

    Контракт:
        - Группы идут в порядке первого появления источника.
        - Внутри группы id сохраняют исходный порядок, повторная пара (source, id) отбрасывается.
        - params группы берутся из params_by_source[source], иначе None.
        - Пустой вход -> пустой список. Побочных эффектов нет.
    """
    ids_by_source: dict[str, list[str]] = {}
    seen: set[RecordRef] = set()
    for ref in refs:
        if ref in seen:
            continue
        seen.add(ref)
        ids_by_source.setdefault(ref.source, []).append(ref.id)

    params_by_source = params_by_source or {}
    return [
        BatchGroup(source=source, ids=tuple(ids), params=params_by_source.get(source))
        for source, ids in ids_by_source.items()
    ]
