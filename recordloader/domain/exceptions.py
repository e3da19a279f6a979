from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from recordloader.domain.error_codes import ErrorCode


@dataclass
class AppError(Exception):
    """
    Назначение:
        Базовая ошибка загрузчика записей и его драйверов.
    Инварианты/гарантии:
        - str(error) == message (сообщение отдаётся пользователю как есть).
        - code - значение из ErrorCode либо код драйвера.
    """

    category: str
    code: str
    message: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def describe(self) -> str:
        """Строка для логов: категория, код и сообщение."""
        return f"{self.category}/{self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "code": self.code,
            "message": self.message,
            "retryable": self.retryable,
            "details": dict(self.details or {}),
        }


class InvalidIdentifierError(AppError):
    """
    Назначение:
        Структурно некорректный запрос записи (строка/словарь не разбираются в RecordRef).
    Инварианты/гарантии:
        - code = ErrorCode.INVALID_IDENTIFIER.
        - details["raw"] содержит исходное значение (repr).
    """

    def __init__(self, message: str, raw: Any = None):
        super().__init__(
            category="request",
            code=ErrorCode.INVALID_IDENTIFIER.value,
            message=message,
            retryable=False,
            details={"raw": repr(raw)},
        )
        self.raw = raw


class RecordMissingError(AppError):
    """
    Назначение:
        Запрошенная запись не найдена ни основным поиском, ни fallback-загрузчиком.
    Контракт:
        - for_record(source, id) формирует сообщение "Record <source>:<id> does not exist.".
        - ILS-драйвер поднимает эту же ошибку на HTTP 404 с телом ответа в message.
    """

    def __init__(self, message: str, source: str | None = None, record_id: str | None = None):
        details: dict[str, Any] = {}
        if source is not None:
            details["source"] = source
        if record_id is not None:
            details["id"] = record_id
        super().__init__(
            category="record",
            code=ErrorCode.RECORD_MISSING.value,
            message=message,
            retryable=False,
            details=details,
        )
        self.source = source
        self.record_id = record_id

    @classmethod
    def for_record(cls, source: str, record_id: str) -> "RecordMissingError":
        return cls(f"Record {source}:{record_id} does not exist.", source=source, record_id=record_id)


class BadConfigError(AppError):
    """
    Назначение:
        Отсутствует обязательная настройка (например, API.base_url драйвера).
    """

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(
            category="config",
            code=ErrorCode.BAD_CONFIG.value,
            message=message,
            retryable=False,
            details=details or {},
        )


__all__ = ["AppError", "InvalidIdentifierError", "RecordMissingError", "BadConfigError"]
