from __future__ import annotations

import logging
from typing import Sequence

from recordloader.domain.loading.grouping import group_record_refs
from recordloader.domain.models import RecordRef
from recordloader.domain.ports.fallback import FallbackRegistryProtocol
from recordloader.domain.ports.records import RecordDriverProtocol
from recordloader.loggingSetup import getLibraryLogger, logEvent


class FallbackResolver:
    """
    Назначение/ответственность:
        Догружает записи, не найденные основным поиском, через fallback-загрузчики источников.

    Контракт:
        - Источники без зарегистрированного fallback пропускаются (остаются пропусками).
        - На каждый источник - один вызов load(ids) со всеми его пропусками.
        - Ответ сопоставляется по id, порядок ответа не важен.
        - Ошибка одного источника не мешает попытке для остальных; после обхода
          всех источников первая ошибка пробрасывается как есть.
    """

    def __init__(
        self,
        registry: FallbackRegistryProtocol,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
    ):
        self.registry = registry
        self.logger = logger or getLibraryLogger()
        self.run_id = run_id

    def resolve(self, gaps: Sequence[RecordRef]) -> dict[RecordRef, RecordDriverProtocol]:
        resolved: dict[RecordRef, RecordDriverProtocol] = {}
        errors: list[Exception] = []
        for group in group_record_refs(gaps):
            if not self.registry.has(group.source):
                continue
            loader = self.registry.get(group.source)
            logEvent(
                self.logger,
                logging.INFO,
                self.run_id,
                "fallback",
                f"fallback load source={group.source} ids={len(group.ids)}",
            )
            try:
                records = loader.load(list(group.ids))
            except Exception as exc:
                logEvent(
                    self.logger,
                    logging.ERROR,
                    self.run_id,
                    "fallback",
                    f"fallback failed source={group.source}: {exc}",
                )
                errors.append(exc)
                continue

            by_id: dict[str, RecordDriverProtocol] = {}
            for record in records:
                by_id.setdefault(str(record.get_unique_id()), record)
            for record_id in group.ids:
                if record_id in by_id:
                    resolved[RecordRef(source=group.source, id=record_id)] = by_id[record_id]

        if errors:
            raise errors[0]
        return resolved
