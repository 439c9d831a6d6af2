# src/graph_http/core/http_provider.py
"""
Send pipeline: один логический запрос поверх готового транспорта.

Провайдер сам проходит редиректы (транспорт их не отслеживает), чтобы
сохранить заголовки исходного запроса, включая Authorization, который
auth middleware уже проставил. Все ошибки превращаются в ServiceFailure.
"""

import asyncio
import time
import uuid
from collections.abc import AsyncIterable
from dataclasses import replace
from typing import Optional, Union

import httpx

from ..serializer import JSONSerializer, Serializer
from ..utils.sanitizer import mask_headers, mask_url
from .cancellation import CancellationToken
from .config import ProviderConfig
from .constants import ErrorCode, ErrorMessages, Headers, format_feature_flag
from .exceptions import (
    ErrorPayload,
    ServiceFailure,
    classify_status,
    classify_transport_exception,
)
from .logging import ProviderLogger
from .logging.filters import reset_correlation_id, set_correlation_id
from .transport import CompletionOption, HTTPXTransport, Transport

# Заголовки длины тела: после буферизации httpx выставит Content-Length сам
_FRAMING_HEADERS = frozenset({"content-length", "transfer-encoding"})


class SimpleHTTPProvider:
    """
    HTTP провайдер для сгенерированных запросов SDK.

    Features:
        - Ручная обработка редиректов с лимитом хопов
        - Заголовки исходного запроса переносятся на каждый хоп (кроме Host)
        - Заголовок FeatureFlag ставится один раз и не перезаписывается
        - Отмена вызывающим кодом отличается от таймаута транспорта
        - Ошибочные ответы разбираются в ServiceFailure с кодом, сообщением,
          throw site и request id

    Example:
        >>> async with SimpleHTTPProvider() as provider:
        ...     request = httpx.Request("GET", "https://graph.example.com/v1.0/me")
        ...     response = await provider.send(request)

        >>> # Своя цепочка middleware
        >>> provider = SimpleHTTPProvider(HTTPXTransport(handler=auth_chain))
        >>> try:
        ...     await provider.send(request)
        ... except ServiceFailure as e:
        ...     if e.is_match(ErrorCode.ITEM_NOT_FOUND):
        ...         ...
    """

    def __init__(
        self,
        transport: Optional[Union[Transport, httpx.AsyncClient]] = None,
        serializer: Optional[Serializer] = None,
        *,
        config: Optional[ProviderConfig] = None,
        owns_transport: bool = True,
    ):
        """
        Args:
            transport: Транспорт (цепочка middleware) или httpx.AsyncClient;
                       None = HTTPXTransport из config
            serializer: Разбор тела ошибки; None = JSONSerializer
            config: ProviderConfig
            owns_transport: Закрывать ли транспорт в close()
        """
        self._config = config or ProviderConfig()

        if transport is None:
            transport = HTTPXTransport(config=self._config)
        elif isinstance(transport, httpx.AsyncClient):
            transport = HTTPXTransport(config=self._config, client=transport)
        self._transport: Transport = transport

        self._serializer: Serializer = serializer or JSONSerializer()
        self._owns_transport = owns_transport
        self._disposed = False

        self._logger: Optional[ProviderLogger] = None
        if self._config.logging:
            self._logger = ProviderLogger(config=self._config.logging, name="graph_http.provider")

    async def __aenter__(self) -> "SimpleHTTPProvider":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # ==================== Send ====================

    async def send(
        self,
        request: httpx.Request,
        completion: CompletionOption = CompletionOption.RESPONSE_CONTENT_READ,
        cancellation: Optional[CancellationToken] = None,
    ) -> httpx.Response:
        """
        Отправить запрос, пройти редиректы, вернуть ответ или ServiceFailure.

        Args:
            request: Подготовленный запрос. Не изменяется: на каждый хоп
                     строится копия.
            completion: Читать ли тело ответа целиком до возврата
            cancellation: Сигнал отмены; передаётся транспорту на каждом хопе

        Returns:
            httpx.Response со статусом < 400 (не редирект). response.request -
            запрос, реально отправленный на последнем хопе.

        Raises:
            ServiceFailure: провайдер закрыт, ошибка транспорта, таймаут,
                            битый редирект, слишком много редиректов,
                            ответ со статусом >= 400
            asyncio.CancelledError: вызывающий код взвёл cancellation
        """
        self._ensure_not_disposed()

        correlation_id = request.headers.get(Headers.CLIENT_REQUEST_ID) or str(uuid.uuid4())
        context_token = set_correlation_id(correlation_id)
        start_time = time.monotonic()
        redirects = 0

        try:
            current = await self._prepare_request(request)

            if self._logger:
                self._logger.info(
                    "Request started",
                    method=current.method,
                    url=mask_url(str(current.url)),
                    completion=completion.value,
                    max_redirects=self._config.redirect.max_redirects,
                )

            while True:
                response = await self._send_hop(current, completion, cancellation)

                if not self._config.redirect.is_redirect(response.status_code):
                    break

                location = self._resolve_location(current, response)
                if location is None:
                    await response.aclose()
                    raise ServiceFailure(
                        ErrorCode.GENERAL_EXCEPTION,
                        ErrorMessages.LOCATION_HEADER_NOT_SET_ON_REDIRECT,
                        status_code=response.status_code,
                        response_headers=response.headers,
                    )

                if redirects >= self._config.redirect.max_redirects:
                    await response.aclose()
                    raise ServiceFailure(
                        ErrorCode.TOO_MANY_REDIRECTS,
                        ErrorMessages.TOO_MANY_REDIRECTS_FORMAT.format(self._config.redirect.max_redirects),
                        status_code=response.status_code,
                        response_headers=response.headers,
                    )

                await response.aclose()
                redirects += 1

                if self._logger:
                    self._logger.debug(
                        "Following redirect",
                        status_code=response.status_code,
                        from_url=mask_url(str(current.url)),
                        to_url=mask_url(str(location)),
                        redirect=redirects,
                    )

                current = self._build_redirect_request(current, location)

            if response.status_code >= 400:
                raise await self._build_failure(response)

            if self._logger:
                self._logger.info(
                    "Request completed",
                    method=current.method,
                    url=mask_url(str(current.url)),
                    status_code=response.status_code,
                    redirects=redirects,
                    duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                )

            return response

        except ServiceFailure as failure:
            if self._logger:
                log = self._logger.warning if failure.status_code is not None else self._logger.error
                log(
                    "Request failed",
                    method=request.method,
                    url=mask_url(str(request.url)),
                    error_code=failure.code,
                    error_message=failure.message,
                    status_code=failure.status_code,
                    throw_site=failure.throw_site,
                    request_id=failure.request_id,
                    retryable=failure.retryable,
                    redirects=redirects,
                    duration_ms=round((time.monotonic() - start_time) * 1000, 2),
                )
            raise

        except asyncio.CancelledError:
            if self._logger:
                self._logger.info(
                    "Request cancelled",
                    method=request.method,
                    url=mask_url(str(request.url)),
                    redirects=redirects,
                )
            raise

        finally:
            reset_correlation_id(context_token)

    # ==================== Lifecycle ====================

    async def close(self) -> None:
        """
        Освободить транспорт (если он наш) и логгер.

        Идемпотентно: повторный вызов ничего не делает. Вызовы send()
        после close() падают с ServiceFailure(generalException).
        """
        if self._disposed:
            return
        self._disposed = True

        try:
            if self._owns_transport:
                await self._transport.aclose()
        except Exception as e:
            if self._logger:
                self._logger.warning("Transport close failed", error=str(e), error_type=type(e).__name__)
        finally:
            if self._logger:
                self._logger.close()

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def config(self) -> ProviderConfig:
        return self._config

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    # ==================== Внутренние методы ====================

    def _ensure_not_disposed(self) -> None:
        if self._disposed:
            raise ServiceFailure(ErrorCode.GENERAL_EXCEPTION, ErrorMessages.PROVIDER_DISPOSED)

    async def _send_hop(
        self,
        request: httpx.Request,
        completion: CompletionOption,
        cancellation: Optional[CancellationToken],
    ) -> httpx.Response:
        """Один физический обмен. Отмену пропускает, остальное классифицирует."""
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        self._ensure_not_disposed()

        try:
            return await self._transport.send(request, completion, cancellation)
        except ServiceFailure:
            raise
        except Exception as exc:
            # Транспорт мог упасть чем угодно уже после отмены - это всё равно отмена
            if cancellation is not None and cancellation.is_cancelled:
                raise asyncio.CancelledError("Operation was cancelled by the caller") from exc
            raise classify_transport_exception(exc) from exc

    async def _prepare_request(self, request: httpx.Request) -> httpx.Request:
        """
        Копия запроса вызывающего кода с заголовком FeatureFlag.

        Тело читается целиком, поэтому Transfer-Encoding и Content-Length
        исходного запроса не копируются.
        """
        content = await _read_body(request)

        headers = httpx.Headers([
            (name, value)
            for name, value in request.headers.multi_items()
            if name.lower() not in _FRAMING_HEADERS
        ])
        if Headers.FEATURE_FLAG not in headers:
            headers[Headers.FEATURE_FLAG] = format_feature_flag(self._config.feature_flags)

        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            content=content,
            extensions=dict(request.extensions),
        )

    @staticmethod
    def _resolve_location(request: httpx.Request, response: httpx.Response) -> Optional[httpx.URL]:
        """Location относительно текущего URL; None если заголовка нет или он битый."""
        location = response.headers.get(Headers.LOCATION, "").strip()
        if not location:
            return None

        try:
            url = request.url.join(location)
        except (httpx.InvalidURL, ValueError):
            return None

        if url.scheme not in ("http", "https") or not url.host:
            return None
        return url

    @staticmethod
    def _build_redirect_request(request: httpx.Request, location: httpx.URL) -> httpx.Request:
        """
        Запрос на следующий хоп.

        Все заголовки переносятся как есть. Host и Content-Length httpx
        вычислит заново для нового адреса и буферизованного тела.
        Метод и тело не меняются.
        """
        headers = [
            (name, value)
            for name, value in request.headers.multi_items()
            if name.lower() != Headers.HOST.lower() and name.lower() not in _FRAMING_HEADERS
        ]
        return httpx.Request(
            request.method,
            location,
            headers=headers,
            content=request.content,
            extensions=dict(request.extensions),
        )

    async def _build_failure(self, response: httpx.Response) -> ServiceFailure:
        """ServiceFailure для ответа со статусом >= 400. Ответ закрывается."""
        try:
            body = await response.aread()
        except (httpx.HTTPError, httpx.StreamError) as e:
            if self._logger:
                self._logger.debug("Could not read error body", error=str(e), error_type=type(e).__name__)
            body = b""
        finally:
            await response.aclose()

        payload = self._deserialize_error(body)

        code = payload.code if payload and payload.code else classify_status(response.status_code)
        message = payload.message if payload and payload.message else ""

        throw_site = response.headers.get(Headers.THROW_SITE) or (payload.throw_site if payload else None)
        request_id = (
            response.headers.get(Headers.REQUEST_ID)
            or response.headers.get(Headers.CLIENT_REQUEST_ID)
            or (payload.request_id if payload else None)
        )

        if self._logger:
            self._logger.debug(
                "Error response received",
                status_code=response.status_code,
                headers=mask_headers(response.headers),
                body_size=len(body),
                parsed=payload is not None,
            )

        # Разобранное тело с итоговой классификацией; inner_error сохраняется
        attached = replace(payload, code=str(code), message=message, throw_site=throw_site) if payload else None

        return ServiceFailure(
            code,
            message,
            throw_site=throw_site,
            status_code=response.status_code,
            request_id=request_id,
            response_headers=response.headers,
            raw_response_body=body,
            error=attached,
        )

    def _deserialize_error(self, body: bytes) -> Optional[ErrorPayload]:
        # Тело, которое не удалось разобрать, даёт пустое сообщение, а не новую ошибку
        try:
            return self._serializer.deserialize_error_body(body)
        except Exception as e:
            if self._logger:
                self._logger.debug("Error body could not be deserialized", error=str(e))
            return None


async def _read_body(request: httpx.Request) -> bytes:
    """Буферизовать тело запроса, чтобы его можно было отправить повторно."""
    if isinstance(request.stream, AsyncIterable):
        return await request.aread()
    return request.read()
