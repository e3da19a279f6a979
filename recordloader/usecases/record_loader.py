from __future__ import annotations

import logging
from typing import Any, Mapping, Sequence

from recordloader.domain.exceptions import InvalidIdentifierError
from recordloader.domain.loading.dispatcher import RetrievalDispatcher
from recordloader.domain.loading.fallback import FallbackResolver
from recordloader.domain.loading.grouping import group_record_refs
from recordloader.domain.loading.identifiers import parse_record_refs
from recordloader.domain.loading.reassembler import reassemble
from recordloader.domain.models import BatchGroup, ParamBag, RawRecordRequest, RecordRef
from recordloader.domain.ports.fallback import FallbackRegistryProtocol
from recordloader.domain.ports.records import RecordFactoryProtocol
from recordloader.domain.ports.search import SearchServiceProtocol
from recordloader.loggingSetup import getLibraryLogger, logEvent

DEFAULT_SOURCE = "Solr"


class RecordLoader:
    """
    Назначение/ответственность:
        Публичный API загрузки записей для приложения-каталога:
        одиночная загрузка (load) и пакетная (load_batch) поверх поискового сервиса.

    Взаимодействия:
        - SearchServiceProtocol: один вызов на источник.
        - RecordFactoryProtocol: заглушки "Missing" при tolerate_missing.
        - FallbackRegistryProtocol (опционально): догрузка пропусков.

    Ограничения:
        - Без состояния между вызовами, однопоточный, без ретраев.
        - Ошибки backend и fallback пробрасываются без обёртки.
    """

    def __init__(
        self,
        search_service: SearchServiceProtocol,
        record_factory: RecordFactoryProtocol,
        fallback_registry: FallbackRegistryProtocol | None = None,
        default_source: str = DEFAULT_SOURCE,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
    ):
        self.search_service = search_service
        self.record_factory = record_factory
        self.fallback_registry = fallback_registry
        self.default_source = default_source
        self.logger = logger or getLibraryLogger()
        self.run_id = run_id
        self.dispatcher = RetrievalDispatcher(search_service, logger=self.logger, run_id=run_id)
        self.fallback = (
            FallbackResolver(fallback_registry, logger=self.logger, run_id=run_id)
            if fallback_registry is not None
            else None
        )

    def load(
        self,
        id: str,
        source: str | None = None,
        tolerate_missing: bool = False,
        params: ParamBag | None = None,
    ) -> Any:
        """
        Назначение:
            Загрузка одной записи.

        Контракт:
            - source по умолчанию - default_source.
            - Запись выбирается по идентичности (source, id), как и в load_batch, а не
              по позиции в ответе: если backend вернул запись с другим unique id
              (алиас, прежний id), она не подходит, и id считается ненайденным.
            - Если backend вернул несколько записей с этим id, возвращается первая
              (неоднозначность не считается ошибкой).
            - Ненайденная запись: заглушка при tolerate_missing, иначе fallback,
              иначе RecordMissingError.
        """
        source = source or self.default_source
        if id is None or str(id) == "":
            raise InvalidIdentifierError("Empty record id in request", id)
        ref = RecordRef(source=source, id=str(id))
        group = BatchGroup(source=source, ids=(ref.id,), params=params)
        results = {source: self.dispatcher.dispatch_group(group)}
        return self._reassemble([ref], results, tolerate_missing)[0]

    def load_batch(
        self,
        requests: Sequence[RawRecordRequest],
        tolerate_missing: bool = False,
        params_by_source: Mapping[str, ParamBag] | None = None,
    ) -> list[Any]:
        """
        Назначение:
            Пакетная загрузка разнородных запросов записей.

        Контракт:
            - Результат той же длины и порядка, что requests; дубли (source, id)
              выбираются один раз, но заполняют каждую свою позицию.
            - Ровно один вызов поиска на источник, params_by_source[source]
              передаётся только в вызов этого источника.

        Алгоритм:
            parse -> group -> dispatch -> reassemble (+ fallback/заглушки).
        """
        refs = parse_record_refs(requests, self.default_source)
        if not refs:
            return []
        groups = group_record_refs(refs, params_by_source)
        logEvent(
            self.logger,
            logging.INFO,
            self.run_id,
            "loader",
            f"load_batch requests={len(refs)} sources={[g.source for g in groups]}",
        )
        results = self.dispatcher.dispatch(groups)
        return self._reassemble(refs, results, tolerate_missing)

    def _reassemble(self, refs: list[RecordRef], results: dict, tolerate_missing: bool) -> list[Any]:
        records = reassemble(
            refs,
            results,
            tolerate_missing=tolerate_missing,
            record_factory=self.record_factory,
            fallback=None if tolerate_missing else self.fallback,
        )
        if tolerate_missing:
            missing = sum(1 for r in records if _is_placeholder(r))
            if missing:
                logEvent(
                    self.logger,
                    logging.WARNING,
                    self.run_id,
                    "loader",
                    f"missing records replaced with placeholders: {missing}",
                )
        return records


def _is_placeholder(record: Any) -> bool:
    is_missing = getattr(record, "is_missing", None)
    return bool(is_missing()) if callable(is_missing) else False
