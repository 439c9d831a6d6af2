"""
Единый тип ошибки send pipeline и классификация.

Классификация:
- retryable=True - таймауты, 408/429/5xx, можно повторить запрос
- fatal=True - всё остальное, повторять бессмысленно
"""

import asyncio
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

import httpx

from .constants import ErrorCode, ErrorMessages

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PAYLOAD
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


@dataclass(frozen=True)
class ErrorPayload:
    """
    Структурированная ошибка из тела ответа сервиса.

    Args:
        code: Стабильный код ошибки (например "itemNotFound")
        message: Человекочитаемое сообщение
        throw_site: Диагностический токен места ошибки на сервере
        inner_error: Вложенные детали (request-id, date, ...)
    """
    code: str = ""
    message: str = ""
    throw_site: Optional[str] = None
    inner_error: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def request_id(self) -> Optional[str]:
        """Trace id reported inside the body, if any."""
        value = self.inner_error.get("request-id") or self.inner_error.get("requestId")
        return str(value) if value else None


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# STATUS -> CLASSIFICATION
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

STATUS_CODE_MAP: Mapping[int, ErrorCode] = MappingProxyType({
    400: ErrorCode.INVALID_REQUEST,
    401: ErrorCode.UNAUTHENTICATED,
    403: ErrorCode.ACCESS_DENIED,
    404: ErrorCode.ITEM_NOT_FOUND,
    405: ErrorCode.NOT_ALLOWED,
    406: ErrorCode.NOT_SUPPORTED,
    408: ErrorCode.TIMEOUT,
    409: ErrorCode.NAME_ALREADY_EXISTS,
    410: ErrorCode.ITEM_NOT_FOUND,
    411: ErrorCode.INVALID_REQUEST,
    412: ErrorCode.RESOURCE_MODIFIED,
    413: ErrorCode.INVALID_REQUEST,
    415: ErrorCode.NOT_SUPPORTED,
    416: ErrorCode.INVALID_RANGE,
    422: ErrorCode.INVALID_REQUEST,
    423: ErrorCode.RESOURCE_LOCKED,
    429: ErrorCode.ACTIVITY_LIMIT_REACHED,
    500: ErrorCode.GENERAL_EXCEPTION,
    501: ErrorCode.NOT_SUPPORTED,
    502: ErrorCode.SERVICE_NOT_AVAILABLE,
    503: ErrorCode.SERVICE_NOT_AVAILABLE,
    504: ErrorCode.TIMEOUT,
    507: ErrorCode.QUOTA_LIMIT_REACHED,
    509: ErrorCode.ACTIVITY_LIMIT_REACHED,
})

RETRYABLE_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504, 509})

RETRYABLE_CODES = frozenset({
    ErrorCode.TIMEOUT.value,
    ErrorCode.SERVICE_NOT_AVAILABLE.value,
    ErrorCode.ACTIVITY_LIMIT_REACHED.value,
})


def classify_status(status_code: int) -> ErrorCode:
    """
    Классификация HTTP статуса.

    Args:
        status_code: HTTP статус (>= 400)

    Returns:
        ErrorCode из STATUS_CODE_MAP; для неизвестных 4xx - invalidRequest,
        для всего остального - generalException

    Examples:
        >>> classify_status(404)
        <ErrorCode.ITEM_NOT_FOUND: 'itemNotFound'>
        >>> classify_status(418)
        <ErrorCode.INVALID_REQUEST: 'invalidRequest'>
    """
    code = STATUS_CODE_MAP.get(status_code)
    if code is not None:
        return code
    if 400 <= status_code < 500:
        return ErrorCode.INVALID_REQUEST
    return ErrorCode.GENERAL_EXCEPTION


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SERVICE FAILURE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


class ServiceFailure(Exception):
    """
    Единственный тип ошибки, который выходит из send pipeline.

    Args:
        code: Классификация (ErrorCode или код из тела ответа). Всегда задана.
        message: Сообщение; пустая строка если сервис его не прислал
        inner_exception: Исходное исключение транспорта
        throw_site: Значение заголовка X-ThrowSite
        status_code: HTTP статус ответа (если был ответ)
        request_id: Trace id, присвоенный сервером
        response_headers: Заголовки ответа
        raw_response_body: Сырое тело ответа
        error: Разобранное тело ошибки (None = собрать из code/message/throw_site)
    """

    def __init__(
        self,
        code: Union[ErrorCode, str],
        message: Optional[str] = "",
        *,
        inner_exception: Optional[BaseException] = None,
        throw_site: Optional[str] = None,
        status_code: Optional[int] = None,
        request_id: Optional[str] = None,
        response_headers: Optional[httpx.Headers] = None,
        raw_response_body: Optional[bytes] = None,
        error: Optional[ErrorPayload] = None,
    ):
        code = str(code) if code else ""
        if not code:
            code = ErrorCode.GENERAL_EXCEPTION.value
        self.code = code
        self.message = message or ""
        self.inner_exception = inner_exception
        self.throw_site = throw_site
        self.status_code = status_code
        self.request_id = request_id
        self.response_headers = response_headers if response_headers is not None else httpx.Headers()
        self.raw_response_body = raw_response_body
        self._error = error

        super().__init__(self._format())

        if inner_exception is not None:
            self.__cause__ = inner_exception

    def _format(self) -> str:
        text = f"Code: {self.code}"
        if self.message:
            text += f"\nMessage: {self.message}"
        if self.status_code is not None:
            text += f"\nStatus: {self.status_code}"
        if self.throw_site:
            text += f"\nThrow site: {self.throw_site}"
        if self.request_id:
            text += f"\nRequest id: {self.request_id}"
        return text

    @property
    def error(self) -> ErrorPayload:
        """Payload attached to the failure, or one built from its fields."""
        if self._error is not None:
            return self._error
        return ErrorPayload(code=self.code, message=self.message, throw_site=self.throw_site)

    def is_match(self, code: Union[ErrorCode, str]) -> bool:
        """Case-insensitive comparison of the classification code."""
        if not code:
            raise ValueError("code must be a non-empty string")
        return self.code.lower() == str(code).lower()

    @property
    def retryable(self) -> bool:
        """Может ли повтор запроса завершиться успешно."""
        if self.status_code is not None and self.status_code in RETRYABLE_STATUS_CODES:
            return True
        return self.code in RETRYABLE_CODES

    @property
    def fatal(self) -> bool:
        return not self.retryable

    def __repr__(self) -> str:
        return (
            f"ServiceFailure(code={self.code!r}, message={self.message!r}, "
            f"status_code={self.status_code!r})"
        )


# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━


def classify_transport_exception(exc: Exception) -> ServiceFailure:
    """
    Конвертировать ошибку транспорта в ServiceFailure.

    Отмену со стороны вызывающего кода сюда передавать нельзя - её
    распознаёт pipeline до вызова этой функции.

    Args:
        exc: Исключение из транспорта (httpx или любое другое)

    Returns:
        ServiceFailure с исходным исключением в inner_exception

    Examples:
        >>> failure = classify_transport_exception(httpx.ReadTimeout("slow"))
        >>> failure.is_match(ErrorCode.TIMEOUT)
        True
    """
    if isinstance(exc, (httpx.TimeoutException, TimeoutError, asyncio.TimeoutError)):
        return ServiceFailure(
            ErrorCode.TIMEOUT,
            ErrorMessages.REQUEST_TIMED_OUT,
            inner_exception=exc,
        )

    return ServiceFailure(
        ErrorCode.GENERAL_EXCEPTION,
        ErrorMessages.UNEXPECTED_EXCEPTION_ON_SEND,
        inner_exception=exc,
    )


class ConfigurationError(ValueError):
    """Ошибка конфигурации."""
    pass
