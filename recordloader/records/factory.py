from __future__ import annotations

from typing import Any

from recordloader.records.drivers import DefaultRecord, MissingRecord, RecordDriver


class RecordFactory:
    """
    Назначение/ответственность:
        Реестр вариантов драйверов записей и их сборка из сырых данных backend.

    Взаимодействия:
        - get("Missing") используется загрузчиком для заглушек.
        - from_raw(source, raw) используется backend/fallback адаптерами.
    """

    def __init__(self) -> None:
        self._variants: dict[str, type[RecordDriver]] = {}
        self.register(DefaultRecord.variant, DefaultRecord)
        self.register(MissingRecord.variant, MissingRecord)

    def register(self, variant: str, driver_class: type[RecordDriver]) -> None:
        self._variants[variant] = driver_class

    def get(self, variant: str) -> RecordDriver:
        """
        Контракт:
            Вход: имя варианта.
            Выход: новый пустой драйвер этого варианта.
        Ошибки:
            ValueError при незарегистрированном варианте.
        """
        if variant not in self._variants:
            raise ValueError(f"Unsupported record variant: {variant}")
        return self._variants[variant]()

    def from_raw(self, source: str, raw: dict[str, Any]) -> RecordDriver:
        record = self.get(DefaultRecord.variant)
        record.set_raw_data(raw)
        record.set_source_identifier(source)
        return record
