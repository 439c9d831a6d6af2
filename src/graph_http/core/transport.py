# src/graph_http/core/transport.py
"""
Транспорт send pipeline на базе httpx.

Транспорт - это уже собранная цепочка middleware (auth, retry, compression),
которую pipeline вызывает одним async вызовом. Автоматическое следование
редиректам всегда выключено: редиректы обрабатывает SimpleHTTPProvider.
"""

from enum import Enum
from typing import Optional, Protocol, runtime_checkable

import httpx

from .cancellation import CancellationToken, run_cancellable
from .config import ProviderConfig


class CompletionOption(str, Enum):
    """Когда вызов считается завершённым."""

    RESPONSE_CONTENT_READ = "content"
    RESPONSE_HEADERS_READ = "headers"


@runtime_checkable
class Transport(Protocol):
    """Contract the send pipeline expects from the middleware chain."""

    async def send(
        self,
        request: httpx.Request,
        completion: CompletionOption,
        cancellation: Optional[CancellationToken],
    ) -> httpx.Response:
        ...

    async def aclose(self) -> None:
        ...


class HTTPXTransport:
    """
    Транспорт поверх httpx.AsyncClient.

    Example:
        >>> transport = HTTPXTransport(config=ProviderConfig.create(timeout=30))
        >>> response = await transport.send(request, CompletionOption.RESPONSE_CONTENT_READ, None)
        >>> await transport.aclose()

        >>> # Цепочка middleware как httpx transport
        >>> transport = HTTPXTransport(handler=AuthTransport(httpx.AsyncHTTPTransport()))
    """

    def __init__(
        self,
        *,
        config: Optional[ProviderConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
        handler: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Args:
            config: ProviderConfig (таймауты, заголовки, лимиты пула)
            client: Готовый httpx.AsyncClient (тогда config для клиента не используется)
            handler: Последнее звено цепочки middleware (httpx.AsyncBaseTransport)
        """
        if client is not None and handler is not None:
            raise ValueError("Pass either client or handler, not both")

        self._config = config or ProviderConfig()
        self._handler = handler
        self._client: Optional[httpx.AsyncClient] = client
        self._closed = False

    def _get_client(self) -> httpx.AsyncClient:
        """Получить или создать httpx клиент."""
        if self._client is None:
            timeout = self._config.timeout
            client_kwargs = {
                "timeout": httpx.Timeout(
                    connect=timeout.connect,
                    read=timeout.read,
                    write=timeout.write if timeout.write is not None else timeout.read,
                    pool=timeout.pool,
                ),
                "limits": httpx.Limits(
                    max_connections=self._config.max_connections,
                    max_keepalive_connections=self._config.max_keepalive_connections,
                ),
                "follow_redirects": False,
            }

            if self._handler is not None:
                client_kwargs["transport"] = self._handler
            else:
                client_kwargs["verify"] = self._config.verify_ssl

            self._client = httpx.AsyncClient(**client_kwargs)
        return self._client

    async def send(
        self,
        request: httpx.Request,
        completion: CompletionOption = CompletionOption.RESPONSE_CONTENT_READ,
        cancellation: Optional[CancellationToken] = None,
    ) -> httpx.Response:
        """
        Отправить один физический запрос.

        Raises:
            RuntimeError: транспорт закрыт
            asyncio.CancelledError: вызывающий код взвёл cancellation
            httpx.HTTPError: ошибки сети и таймауты
        """
        if self._closed:
            raise RuntimeError("Transport is closed")

        # AsyncClient.send не подмешивает заголовки клиента в готовый Request
        for name, value in self._config.headers.items():
            request.headers.setdefault(name, value)

        client = self._get_client()
        stream = completion == CompletionOption.RESPONSE_HEADERS_READ
        return await run_cancellable(
            client.send(request, stream=stream, follow_redirects=False),
            cancellation,
        )

    async def aclose(self) -> None:
        """Закрыть клиент. Повторный вызов ничего не делает."""
        if self._closed:
            return
        self._closed = True
        if self._client is not None:
            await self._client.aclose()

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def __aenter__(self) -> "HTTPXTransport":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()
