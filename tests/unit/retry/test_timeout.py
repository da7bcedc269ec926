"""
Unit tests for the client-side timeout race.
"""

import asyncio

import pytest

from chat_relay.retry.exceptions import ClientTimeout
from chat_relay.retry.timeout import run_with_timeout


@pytest.mark.asyncio
async def test_fast_operation_returns_value_unmodified():
    payload = {"choices": [{"message": {"content": "hi"}}]}

    async def operation():
        await asyncio.sleep(0)
        return payload

    result = await run_with_timeout(operation(), timeout_ms=1000)
    assert result is payload


@pytest.mark.asyncio
async def test_slow_operation_raises_client_timeout():
    async def operation():
        await asyncio.sleep(5)
        return "too late"

    with pytest.raises(ClientTimeout) as exc_info:
        await run_with_timeout(operation(), timeout_ms=20)

    assert exc_info.value.timeout_ms == 20
    assert "Client timeout after 20ms" in str(exc_info.value)


@pytest.mark.asyncio
async def test_timed_out_operation_is_cancelled():
    cancelled = asyncio.Event()

    async def operation():
        try:
            await asyncio.sleep(5)
        except asyncio.CancelledError:
            cancelled.set()
            raise

    with pytest.raises(ClientTimeout):
        await run_with_timeout(operation(), timeout_ms=20)

    assert cancelled.is_set()


@pytest.mark.asyncio
async def test_no_pending_tasks_left_on_either_path():
    async def fast():
        return 1

    async def slow():
        await asyncio.sleep(5)

    await run_with_timeout(fast(), timeout_ms=1000)
    with pytest.raises(ClientTimeout):
        await run_with_timeout(slow(), timeout_ms=10)
    await asyncio.sleep(0)

    pending = [t for t in asyncio.all_tasks() if t is not asyncio.current_task()]
    assert pending == []


@pytest.mark.asyncio
async def test_operation_error_propagates_unchanged():
    async def operation():
        raise ValueError("bad payload")

    with pytest.raises(ValueError, match="bad payload"):
        await run_with_timeout(operation(), timeout_ms=1000)
