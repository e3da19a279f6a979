from __future__ import annotations

import logging
from typing import Iterable

from recordloader.domain.models import BatchGroup, RecordCollection
from recordloader.domain.ports.search import SearchServiceProtocol
from recordloader.loggingSetup import getLibraryLogger, logEvent


class RetrievalDispatcher:
    """
    Назначение/ответственность:
        Выполняет ровно один вызов поискового сервиса на каждую группу источника.
    Ограничения:
        - Группы обрабатываются последовательно, в порядке группировщика.
        - Ошибки сервиса не перехватываются: сбой одного источника прерывает весь вызов.
    """

    def __init__(
        self,
        search_service: SearchServiceProtocol,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
    ):
        self.search_service = search_service
        self.logger = logger or getLibraryLogger()
        self.run_id = run_id

    def dispatch(self, groups: Iterable[BatchGroup]) -> dict[str, RecordCollection]:
        """
        Контракт:
            Вход: группы (источник уникален в пределах последовательности).
            Выход: source -> коллекция, вернувшаяся от сервиса.
        """
        results: dict[str, RecordCollection] = {}
        for group in groups:
            results[group.source] = self.dispatch_group(group)
        return results

    def dispatch_group(self, group: BatchGroup) -> RecordCollection:
        # Группа из одного id идёт через retrieve, остальные через retrieve_batch.
        if group.is_single:
            logEvent(
                self.logger,
                logging.DEBUG,
                self.run_id,
                "dispatch",
                f"retrieve source={group.source} id={group.ids[0]} params={group.params is not None}",
            )
            return self.search_service.retrieve(group.source, group.ids[0], group.params)
        logEvent(
            self.logger,
            logging.DEBUG,
            self.run_id,
            "dispatch",
            f"retrieve_batch source={group.source} ids={len(group.ids)} params={group.params is not None}",
        )
        return self.search_service.retrieve_batch(group.source, list(group.ids), group.params)
