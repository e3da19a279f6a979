from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок загрузчика записей и ILS-драйверов.
    """

    INVALID_IDENTIFIER = "INVALID_IDENTIFIER"
    RECORD_MISSING = "RECORD_MISSING"
    BAD_CONFIG = "BAD_CONFIG"
    BAD_REQUEST = "BAD_REQUEST"
    FORBIDDEN = "FORBIDDEN"
    ILS_ERROR = "ILS_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    INVALID_JSON = "INVALID_JSON"
    HTTP_ERROR = "HTTP_ERROR"

    @classmethod
    def from_status(cls, status_code: int | None) -> "ErrorCode":
        """
        Назначение:
            Подбор кода по HTTP-статусу ответа ILS API.
        """
        if status_code == 400:
            return cls.BAD_REQUEST
        if status_code in (401, 403):
            return cls.FORBIDDEN
        if status_code == 404:
            return cls.RECORD_MISSING
        if status_code == 500:
            return cls.ILS_ERROR
        return cls.HTTP_ERROR
