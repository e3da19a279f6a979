from __future__ import annotations

from typing import Mapping

SENSITIVE_KEYS: tuple[str, ...] = (
    "password",
    "token",
    "authorization",
    "api_key",
    "apikey",
    "secret",
    "x-api-key",
)


def maskSecret(value: str | None) -> str | None:
    """
    Назначение:
        Маскирует секреты для безопасного вывода в stdout/logs.

    Входные данные:
        value: str | None
            Исходное значение (например, API-ключ ILS).

    Выходные данные:
        str | None
            Если value задано - возвращает '***', иначе None.
    """
    if value is None:
        return None
    return "***"


def truncateText(value: str | None, limit: int = 500) -> str | None:
    """
    Назначение:
        Ограничивает длину текста (тела ответов API в сообщениях/логах).
    """
    if value is None:
        return None
    if len(value) <= limit:
        return value
    suffix = "..." if limit > 3 else ""
    head = limit - len(suffix)
    return value[:head] + suffix


def maskSecretsInObject(obj: object, sensitive_keys: tuple[str, ...] = SENSITIVE_KEYS) -> object:
    """
    Назначение:
        Рекурсивно маскирует значения по заданным ключам в структурах dict/list.

    Входные данные:
        obj: object
            Параметры запроса, заголовки, тело ответа.
        sensitive_keys: tuple[str, ...]
            Ключи (без учёта регистра), значения которых следует маскировать.

    Выходные данные:
        object
            Новая структура; исходная не меняется.
    """
    sensitive = {key.lower() for key in sensitive_keys}
    if isinstance(obj, Mapping):
        masked: dict[str, object] = {}
        for k, v in obj.items():
            if str(k).lower() in sensitive:
                masked[k] = maskSecret(str(v) if v is not None else None)
            else:
                masked[k] = maskSecretsInObject(v, sensitive_keys)
        return masked
    if isinstance(obj, (list, tuple)):
        return [maskSecretsInObject(item, sensitive_keys) for item in obj]
    return obj
