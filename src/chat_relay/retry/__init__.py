"""
Retry, timeout and fallback around upstream completion calls.

Layers, innermost first:

1. **BackoffPolicy**: retry eligibility and exponential delay with jitter
2. **run_with_timeout**: client-side deadline race
3. **ResilientInvoker**: retry loop wrapped in one deadline
4. **ModelFallbackOrchestrator**: one fresh invoker run on a fallback model

Usage:
    >>> invoker = ResilientInvoker(BackoffPolicy(max_retries=3), timeout_ms=20000)
    >>> orchestrator = ModelFallbackOrchestrator(client, invoker, selection)
    >>> completion = await orchestrator.complete(messages, 0.5, 592)
"""

from chat_relay.retry.backoff import (
    RETRIABLE_CODES,
    RETRIABLE_STATUSES,
    BackoffPolicy,
    ErrorSignal,
    RetryDecision,
)
from chat_relay.retry.exceptions import ClientTimeout
from chat_relay.retry.fallback import ModelFallbackOrchestrator
from chat_relay.retry.invoker import ResilientInvoker
from chat_relay.retry.timeout import run_with_timeout

__all__ = [
    "RETRIABLE_CODES",
    "RETRIABLE_STATUSES",
    "BackoffPolicy",
    "ClientTimeout",
    "ErrorSignal",
    "ModelFallbackOrchestrator",
    "ResilientInvoker",
    "RetryDecision",
    "run_with_timeout",
]
