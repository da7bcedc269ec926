"""
Client-side timeout race.
"""

import asyncio
from typing import Awaitable, TypeVar

from chat_relay.retry.exceptions import ClientTimeout

T = TypeVar("T")


async def run_with_timeout(awaitable: Awaitable[T], timeout_ms: int) -> T:
    """
    Return the awaitable's result, or raise ClientTimeout once `timeout_ms` elapses.

    The underlying task is cancelled on expiry.
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_ms / 1000)
    except asyncio.TimeoutError as e:
        raise ClientTimeout(timeout_ms) from e
