"""
Unit tests for the fan-out helpers.

Tests cover:
- Result ordering of gather_all()
- Cancellation of siblings when one awaitable fails, and waiting for them
- run_blocking() executing off the event loop thread
"""

import asyncio
import threading

import pytest

from core.async_utils import gather_all, run_blocking
from core.exceptions import UpstreamQueryFailure


class TestGatherAll:
    """Tests for gather_all()."""

    @pytest.mark.asyncio
    async def test_results_in_argument_order(self):
        async def value(v, delay):
            await asyncio.sleep(delay)
            return v

        assert await gather_all(value("a", 0.02), value("b", 0), value("c", 0.01)) == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_no_awaitables(self):
        assert await gather_all() == []

    @pytest.mark.asyncio
    async def test_failure_cancels_siblings(self):
        cancelled = asyncio.Event()

        async def slow():
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async def failing():
            await asyncio.sleep(0)
            raise UpstreamQueryFailure("count demands")

        with pytest.raises(UpstreamQueryFailure):
            await gather_all(slow(), failing())

        await asyncio.wait_for(cancelled.wait(), timeout=1)
        assert cancelled.is_set()

    @pytest.mark.asyncio
    async def test_siblings_finish_unwinding_before_failure_propagates(self):
        cleanup_done = []

        async def slow():
            try:
                await asyncio.sleep(10)
            finally:
                await asyncio.sleep(0)
                cleanup_done.append(True)

        async def failing():
            await asyncio.sleep(0)
            raise UpstreamQueryFailure("list demands")

        with pytest.raises(UpstreamQueryFailure):
            await gather_all(slow(), slow(), failing())

        assert cleanup_done == [True, True]


class TestRunBlocking:
    """Tests for run_blocking()."""

    @pytest.mark.asyncio
    async def test_runs_in_worker_thread(self):
        loop_thread = threading.get_ident()
        worker_thread = await run_blocking(threading.get_ident)
        assert worker_thread != loop_thread

    @pytest.mark.asyncio
    async def test_passes_arguments(self):
        def join(*parts, sep):
            return sep.join(parts)

        assert await run_blocking(join, "a", "b", sep="-") == "a-b"
