from __future__ import annotations

import logging
import time
from typing import Any, Mapping

import httpx

from recordloader.common.sanitize import maskSecretsInObject, truncateText
from recordloader.domain.error_codes import ErrorCode
from recordloader.domain.exceptions import AppError, BadConfigError, RecordMissingError
from recordloader.loggingSetup import getLibraryLogger, logEvent


class ApiError(AppError):
    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body_snippet: str | None = None,
        retryable: bool = False,
        details: dict | None = None,
        code: str | None = None,
    ):
        """
        Назначение:
            Исключение для ошибок HTTP/API уровня ILS-драйвера.
        Контракт:
            - code: строковый код (BAD_REQUEST, FORBIDDEN, NETWORK_ERROR, INVALID_JSON и т.п.).
            - status_code/body_snippet используются для диагностики.
        """
        super().__init__(
            category="api",
            code=code or (ErrorCode.from_status(status_code).value if status_code else "API_ERROR"),
            message=message,
            retryable=retryable,
            details=details or {},
        )
        self.status_code = status_code
        self.body_snippet = body_snippet


class BadRequestError(ApiError):
    def __init__(self, message: str, body_snippet: str | None = None):
        super().__init__(message, status_code=400, body_snippet=body_snippet, code=ErrorCode.BAD_REQUEST.value)


class ForbiddenError(ApiError):
    def __init__(self, message: str, status_code: int = 403, body_snippet: str | None = None):
        super().__init__(message, status_code=status_code, body_snippet=body_snippet, code=ErrorCode.FORBIDDEN.value)


class IlsError(ApiError):
    def __init__(self, message: str, status_code: int | None = 500):
        super().__init__(message, status_code=status_code, code=ErrorCode.ILS_ERROR.value)


class IlsApiDriver:
    """
    Назначение/ответственность:
        Базовый драйвер для ILS, доступных через HTTP API: сборка запроса,
        отправка, маппинг HTTP-статусов в типизированные ошибки.

    Контракт:
        - config["API"]["base_url"] обязателен (BadConfigError иначе).
        - preRequest() - точка расширения для наследников (заголовки/параметры по умолчанию).
        - 400/401/403/404/500 превращаются в исключения, остальные ответы отдаются как есть.

    Ограничения:
        - Синхронный httpx.Client; ретраи только на сетевых ошибках.
    """

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        timeoutSeconds: float = 120.0,
        tlsSkipVerify: bool = False,
        caFile: str | None = None,
        retries: int = 0,
        retryBackoffSeconds: float = 0.5,
        transport: httpx.BaseTransport | None = None,
        logger: logging.Logger | None = None,
        runId: str | None = None,
    ):
        verify: bool | str = True
        if tlsSkipVerify:
            verify = False
        elif caFile:
            verify = caFile

        self.config: dict[str, Any] = {}
        self.retries = retries
        self.retryBackoffSeconds = retryBackoffSeconds
        self.retry_attempts = 0
        self.logger = logger
        self.runId = runId

        self.client = httpx.Client(timeout=timeoutSeconds, verify=verify, transport=transport)
        if config is not None:
            self.setConfig(config)

    def setConfig(self, config: Mapping[str, Any]) -> None:
        """
        Назначение:
            Сохраняет конфигурацию драйвера.
        Ошибки:
            BadConfigError, если не задан API.base_url.
        """
        api = config.get("API") if isinstance(config, Mapping) else None
        if not isinstance(api, Mapping) or not api.get("base_url"):
            raise BadConfigError("API Driver configured without base url.")
        self.config = {key: value for key, value in config.items()}

    @property
    def baseUrl(self) -> str:
        api = self.config.get("API") or {}
        return str(api.get("base_url") or "").rstrip("/")

    def getRetryAttempts(self) -> int:
        """Возвращает количество выполненных повторных попыток."""
        return self.retry_attempts

    def close(self) -> None:
        self.client.close()

    def preRequest(self, headers: dict[str, str], params: Any) -> tuple[dict[str, str], Any]:
        """Позволяет наследникам добавить заголовки/параметры ко всем запросам."""
        return headers, params

    def debugRequest(self, method: str, path: str, params: Any, headers: Mapping[str, str]) -> None:
        """
        Назначение:
            Пишет отладочную сводку запроса, скрывая секреты.
        Алгоритм:
            - Для GET логируются параметры и заголовки (с маскировкой).
            - Для остальных методов параметры и заголовки не логируются: там тело запроса.
        """
        logParams: Any = {}
        logHeaders: Any = {}
        if method == "GET":
            logParams = maskSecretsInObject(params)
            logHeaders = maskSecretsInObject(dict(headers))
        logEvent(
            self.logger or getLibraryLogger(),
            logging.DEBUG,
            self.runId,
            "api",
            f"{method} request. URL: {path}. Params: {logParams}. Headers: {logHeaders}",
        )

    def makeRequest(
        self,
        method: str = "GET",
        path: str = "/",
        params: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> httpx.Response:
        """
        Контракт (вход/выход):
            Вход: метод, путь API (с ведущим /), параметры, доп. заголовки.
            Выход: httpx.Response для всех статусов, кроме 400/401/403/404/500.
        Ошибки:
            BadConfigError, BadRequestError, ForbiddenError, RecordMissingError,
            IlsError, ApiError(NETWORK_ERROR).
        """
        if not self.baseUrl:
            raise BadConfigError("API Driver configured without base url.")
        method = method.upper()
        reqHeaders, params = self.preRequest(dict(headers or {}), params if params is not None else {})

        if self.logger is not None:
            self.debugRequest(method, path, params, reqHeaders)

        url = self.baseUrl + path
        kwargs: dict[str, Any] = {"headers": reqHeaders}
        if method == "GET":
            kwargs["params"] = params
        elif isinstance(params, str):
            kwargs["content"] = params
        else:
            kwargs["data"] = params

        response = self._send_with_retry(method, url, kwargs)
        return self._check_status(response)

    def getJson(self, path: str, params: Any = None) -> Any:
        """GET JSON, парсит ответ или бросает ApiError(INVALID_JSON)."""
        response = self.makeRequest("GET", path, params)
        try:
            return response.json()
        except ValueError as exc:
            raise ApiError(
                "Invalid JSON response",
                status_code=response.status_code,
                retryable=False,
                code=ErrorCode.INVALID_JSON.value,
            ) from exc

    def _send_with_retry(self, method: str, url: str, kwargs: dict[str, Any]) -> httpx.Response:
        attempt = 0
        while True:
            try:
                return self.client.request(method, url, **kwargs)
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if attempt >= self.retries:
                    raise ApiError(
                        "Network error",
                        status_code=None,
                        retryable=False,
                        code=ErrorCode.NETWORK_ERROR.value,
                    ) from exc
                self.retry_attempts += 1
                self._sleep_backoff(attempt)
                attempt += 1

    def _sleep_backoff(self, attempt: int) -> None:
        """Задержка с экспоненциальным ростом для ретраев."""
        delay = self.retryBackoffSeconds * (2 ** attempt)
        time.sleep(delay)

    def _check_status(self, response: httpx.Response) -> httpx.Response:
        status = response.status_code
        body = truncateText(response.text) if response.text else ""
        if status == 400:
            raise BadRequestError(body, body_snippet=body)
        if status in (401, 403):
            raise ForbiddenError(body, status_code=status, body_snippet=body)
        if status == 404:
            raise RecordMissingError(body)
        if status == 500:
            raise IlsError("500: Internal Server Error")
        return response
