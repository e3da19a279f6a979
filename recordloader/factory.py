from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from recordloader.config import Settings
from recordloader.domain.exceptions import BadConfigError
from recordloader.infra.fallback.api_loader import ApiFallbackLoader
from recordloader.infra.fallback.registry import FallbackLoaderRegistry
from recordloader.infra.http.record_api_driver import RecordApiDriver
from recordloader.infra.search.api_backend import ApiSearchBackend
from recordloader.infra.search.service import SearchBackendRegistry, SearchService
from recordloader.records.factory import RecordFactory
from recordloader.usecases.record_loader import RecordLoader


class LoaderFactory:
    """
    Назначение/ответственность:
        Сборка RecordLoader и его зависимостей из Settings.

    Взаимодействия:
        На каждый источник из settings.backends - RecordApiDriver + ApiSearchBackend,
        на каждый из settings.fallbacks - RecordApiDriver + ApiFallbackLoader.
    """

    def __init__(
        self,
        settings: Settings,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.settings = settings
        self.logger = logger
        self.run_id = run_id
        self.transport = transport
        self.record_factory = RecordFactory()

    def create_driver(self, source: str, config: Mapping[str, Any]) -> RecordApiDriver:
        """
        Контракт:
            Вход: имя источника и его конфиг вида {"API": {"base_url": ...}}.
            Выход: настроенный RecordApiDriver.
        Ошибки:
            BadConfigError с именем источника, если конфиг неполный.
        """
        try:
            return RecordApiDriver(
                config=config,
                timeoutSeconds=self.settings.timeout_seconds,
                tlsSkipVerify=self.settings.tls_skip_verify,
                caFile=self.settings.ca_file,
                retries=self.settings.retries,
                transport=self.transport,
                logger=self.logger,
                runId=self.run_id,
            )
        except BadConfigError as exc:
            raise BadConfigError(f"{source}: {exc.message}", details={"source": source}) from exc

    def create_search_service(self) -> SearchService:
        registry = SearchBackendRegistry()
        for source, config in self.settings.backends.items():
            driver = self.create_driver(source, config or {})
            registry.register(ApiSearchBackend(source, driver, self.record_factory))
        return SearchService(registry)

    def create_fallback_registry(self) -> FallbackLoaderRegistry:
        registry = FallbackLoaderRegistry()
        for source, config in self.settings.fallbacks.items():
            driver = self.create_driver(source, config or {})
            registry.register(source, ApiFallbackLoader(source, driver, self.record_factory))
        return registry

    def create_record_loader(self) -> RecordLoader:
        fallback_registry = self.create_fallback_registry()
        return RecordLoader(
            search_service=self.create_search_service(),
            record_factory=self.record_factory,
            fallback_registry=fallback_registry if fallback_registry.sources() else None,
            default_source=self.settings.default_source,
            logger=self.logger,
            run_id=self.run_id,
        )
