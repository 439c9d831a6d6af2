"""Cooperative cancellation signal passed through every hop of a send."""

import asyncio
from typing import Any, Awaitable, Optional, TypeVar

T = TypeVar("T")


class CancellationToken:
    """
    Signal the caller engages to abandon an in-flight send.

    The token is the only way the pipeline can tell "the caller gave up"
    apart from "the transport hit a deadline": both usually surface as
    some cancellation-shaped exception, but only the former engages the token.

    Example:
        >>> token = CancellationToken()
        >>> task = asyncio.create_task(provider.send(request, cancellation=token))
        >>> token.cancel()
        >>> await task  # raises asyncio.CancelledError
    """

    def __init__(self) -> None:
        self._event: Optional[asyncio.Event] = None
        self._cancelled = False

    @classmethod
    def none(cls) -> "CancellationToken":
        """Token that nobody holds a reference to cancel."""
        return cls()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Engage the signal. Idempotent."""
        self._cancelled = True
        if self._event is not None:
            self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._cancelled:
            raise asyncio.CancelledError("Operation was cancelled by the caller")

    async def wait(self) -> None:
        """Block until the token is engaged."""
        # Event is created lazily so the token can be built outside a running loop.
        if self._event is None:
            self._event = asyncio.Event()
            if self._cancelled:
                self._event.set()
        await self._event.wait()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self._cancelled})"


async def run_cancellable(awaitable: Awaitable[T], token: Optional[CancellationToken]) -> T:
    """
    Await `awaitable`, abandoning it if `token` is engaged first.

    Args:
        awaitable: Coroutine to run
        token: Caller's cancellation signal (None = run to completion)

    Returns:
        Result of the awaitable

    Raises:
        asyncio.CancelledError: token was engaged before the awaitable finished
    """
    if token is None:
        return await awaitable

    token.raise_if_cancelled()

    work: "asyncio.Future[Any]" = asyncio.ensure_future(awaitable)
    waiter = asyncio.ensure_future(token.wait())
    try:
        await asyncio.wait({work, waiter}, return_when=asyncio.FIRST_COMPLETED)
    except asyncio.CancelledError:
        work.cancel()
        raise
    finally:
        waiter.cancel()

    if work.done():
        return work.result()

    work.cancel()
    try:
        await work
    except asyncio.CancelledError:
        pass
    raise asyncio.CancelledError("Operation was cancelled by the caller")
