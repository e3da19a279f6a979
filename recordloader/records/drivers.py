from __future__ import annotations

from typing import Any


class RecordDriver:
    """
    Назначение/ответственность:
        Базовый драйвер библиографической записи поверх сырых данных backend.
    Инварианты/гарантии:
        - get_unique_id() берётся из raw["id"] и всегда строка.
        - Источник задаётся фабрикой/backend и возвращается get_source_identifier().
    """

    variant = "Default"

    def __init__(self, raw: dict[str, Any] | None = None, source: str | None = None):
        self._raw: dict[str, Any] = dict(raw or {})
        self._source = source

    def set_raw_data(self, data: dict[str, Any]) -> None:
        self._raw = dict(data or {})

    def get_raw_data(self) -> dict[str, Any]:
        return dict(self._raw)

    def get_unique_id(self) -> str:
        value = self._raw.get("id")
        return "" if value is None else str(value)

    def set_source_identifier(self, source: str) -> None:
        self._source = source

    def get_source_identifier(self) -> str:
        return self._source or ""

    def is_missing(self) -> bool:
        return False

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.get_source_identifier(),
            "id": self.get_unique_id(),
            "variant": self.variant,
            "missing": self.is_missing(),
            "data": self.get_raw_data(),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.get_source_identifier()}:{self.get_unique_id()})"


class DefaultRecord(RecordDriver):
    """Запись общего вида: title/authors из сырых данных, если они есть."""

    def get_title(self) -> str:
        return str(self._raw.get("title") or "")

    def get_authors(self) -> list[str]:
        authors = self._raw.get("authors") or []
        if isinstance(authors, str):
            return [authors]
        return [str(a) for a in authors]


class MissingRecord(RecordDriver):
    """
    Назначение:
        Заглушка для записи, которую не удалось найти (tolerate_missing).
        Отличается от реальной записи через is_missing().
    """

    variant = "Missing"

    def is_missing(self) -> bool:
        return True

    def get_title(self) -> str:
        return ""
