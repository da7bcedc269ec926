"""Unit test fixtures (mocks and stubs)."""

from unittest.mock import AsyncMock

import pytest

from chat_relay.retry.backoff import BackoffPolicy
from chat_relay.retry.invoker import ResilientInvoker
from tests.fixtures import ScriptedLLMClient


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Stand-in for asyncio.sleep that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def fixed_policy() -> BackoffPolicy:
    """Policy with deterministic jitter (rng always returns 0.5)."""
    return BackoffPolicy(max_retries=3, base_delay_ms=400, factor=2, jitter_ms=200, rng=lambda: 0.5)


@pytest.fixture
def fast_invoker(fixed_policy: BackoffPolicy, no_sleep: AsyncMock) -> ResilientInvoker:
    """Invoker that never actually sleeps between retries."""
    return ResilientInvoker(fixed_policy, timeout_ms=5000, sleep=no_sleep)


@pytest.fixture
def scripted_client() -> ScriptedLLMClient:
    """Client echoing every query back, with no scripted failures."""
    return ScriptedLLMClient()
