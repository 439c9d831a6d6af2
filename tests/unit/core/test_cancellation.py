"""
Tests for CancellationToken and run_cancellable.
"""

import asyncio

import pytest

from graph_http.core.cancellation import CancellationToken, run_cancellable


class TestCancellationToken:
    """Test CancellationToken state."""

    def test_initial_state(self):
        token = CancellationToken()
        assert not token.is_cancelled
        token.raise_if_cancelled()

    def test_cancel_is_idempotent(self):
        token = CancellationToken()
        token.cancel()
        token.cancel()
        assert token.is_cancelled

    def test_raise_if_cancelled(self):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(asyncio.CancelledError):
            token.raise_if_cancelled()

    def test_none_is_never_engaged(self):
        assert not CancellationToken.none().is_cancelled

    def test_repr(self):
        assert repr(CancellationToken()) == "CancellationToken(cancelled=False)"

    @pytest.mark.asyncio
    async def test_wait_after_cancel_returns(self):
        """Test wait() on an already engaged token does not block."""
        token = CancellationToken()
        token.cancel()
        await asyncio.wait_for(token.wait(), timeout=1)

    @pytest.mark.asyncio
    async def test_wait_wakes_on_cancel(self):
        token = CancellationToken()
        waiter = asyncio.create_task(token.wait())
        await asyncio.sleep(0)
        assert not waiter.done()

        token.cancel()
        await asyncio.wait_for(waiter, timeout=1)


class TestRunCancellable:
    """Test run_cancellable."""

    @pytest.mark.asyncio
    async def test_without_token(self):
        async def work():
            return 42

        assert await run_cancellable(work(), None) == 42

    @pytest.mark.asyncio
    async def test_completes_before_cancel(self):
        async def work():
            return "done"

        assert await run_cancellable(work(), CancellationToken()) == "done"

    @pytest.mark.asyncio
    async def test_work_exception_propagates(self):
        """Test errors from the work are not turned into cancellation."""
        async def work():
            raise ValueError("broken")

        with pytest.raises(ValueError):
            await run_cancellable(work(), CancellationToken())

    @pytest.mark.asyncio
    async def test_pre_cancelled_token(self):
        """Test the work is never started when the token is engaged."""
        started = False

        async def work():
            nonlocal started
            started = True

        token = CancellationToken()
        token.cancel()
        coro = work()
        with pytest.raises(asyncio.CancelledError):
            await run_cancellable(coro, token)
        coro.close()

        assert not started

    @pytest.mark.asyncio
    async def test_cancel_abandons_work(self):
        """Test engaging the token cancels the running work."""
        work_cancelled = asyncio.Event()
        started = asyncio.Event()

        async def work():
            started.set()
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                work_cancelled.set()
                raise

        token = CancellationToken()
        task = asyncio.create_task(run_cancellable(work(), token))
        await started.wait()
        token.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert work_cancelled.is_set()

    @pytest.mark.asyncio
    async def test_outer_cancellation_cancels_work(self):
        """Test cancelling the calling task also stops the work."""
        work_cancelled = asyncio.Event()
        started = asyncio.Event()

        async def work():
            started.set()
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                work_cancelled.set()
                raise

        task = asyncio.create_task(run_cancellable(work(), CancellationToken()))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task
        await asyncio.sleep(0)
        assert work_cancelled.is_set()
