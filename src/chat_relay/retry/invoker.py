"""
Resilient invoker for upstream completion calls.

Runs a zero-argument coroutine factory under the backoff policy's retry
loop, and the whole loop under a single client-side timeout race. The
timeout wraps the sequence rather than each attempt: a slow
upstream can exhaust it mid-retry, and the caller then sees ClientTimeout
instead of the upstream error.
"""

import asyncio
from typing import Awaitable, Callable, TypeVar

import structlog

from chat_relay.monitoring.metrics import client_timeouts_total, upstream_retries_total
from chat_relay.retry.backoff import BackoffPolicy, ErrorSignal
from chat_relay.retry.exceptions import ClientTimeout
from chat_relay.retry.timeout import run_with_timeout

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class ResilientInvoker:
    """
    Retry + timeout wrapper around a single upstream operation.

    Attributes:
        policy: Backoff policy deciding retry eligibility and delays
        timeout_ms: Budget for the entire retry sequence
    """

    def __init__(
        self,
        policy: BackoffPolicy,
        timeout_ms: int = 20000,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.policy = policy
        self.timeout_ms = timeout_ms
        self._sleep = sleep

    async def invoke(self, operation: Callable[[], Awaitable[T]]) -> T:
        """
        Execute `operation` until it succeeds or fails terminally.

        Returns:
            The raw result of the first successful attempt

        Raises:
            ClientTimeout: The whole sequence exceeded timeout_ms
            Exception: The last attempt's error (non-retriable or budget exhausted)
        """
        try:
            return await run_with_timeout(self._retry_loop(operation), self.timeout_ms)
        except ClientTimeout:
            client_timeouts_total.inc()
            logger.error("Completion call timed out", timeout_ms=self.timeout_ms)
            raise

    async def _retry_loop(self, operation: Callable[[], Awaitable[T]]) -> T:
        attempt = 0
        while True:
            try:
                return await operation()
            except Exception as exc:
                attempt += 1
                signal = ErrorSignal.from_exception(exc)
                decision = self.policy.decide(attempt, signal)
                if not decision.retry:
                    logger.debug(
                        "Giving up on completion call",
                        attempts=attempt,
                        status_code=signal.status_code,
                        code=signal.code,
                        retriable=self.policy.is_retriable(signal),
                    )
                    raise

                upstream_retries_total.labels(cause=signal.cause).inc()
                logger.warning(
                    "Retrying completion call",
                    attempt=attempt,
                    status_code=signal.status_code or "n/a",
                    code=signal.code or "n/a",
                    delay_ms=decision.delay_ms,
                    error=signal.message,
                )
                await self._sleep(decision.delay_ms / 1000)
