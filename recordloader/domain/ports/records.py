from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class RecordDriverProtocol(Protocol):
    """
    Назначение:
        Минимальный контракт библиографической записи для загрузчика.
    Контракт:
        - get_unique_id() -> str
        - get_source_identifier() -> str
        Загрузчик только читает идентичность записи и никогда её не меняет.
    """

    def get_unique_id(self) -> str: ...
    def get_source_identifier(self) -> str: ...


@runtime_checkable
class PlaceholderRecordProtocol(RecordDriverProtocol, Protocol):
    """
    Назначение:
        Запись-заглушка ("Missing"), которую загрузчик заполняет id и источником.
    """

    def set_raw_data(self, data: dict[str, Any]) -> None: ...
    def set_source_identifier(self, source: str) -> None: ...


class RecordFactoryProtocol(Protocol):
    """
    Назначение/ответственность:
        Фабрика драйверов записей по имени варианта.
    Взаимодействия:
        Загрузчик запрашивает вариант "Missing" для заглушек при tolerate_missing.
    """

    def get(self, variant: str) -> Any: ...


__all__ = ["RecordDriverProtocol", "PlaceholderRecordProtocol", "RecordFactoryProtocol"]
