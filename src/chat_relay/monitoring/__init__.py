"""
Prometheus metrics for the chat relay.
"""

from chat_relay.monitoring.metrics import (
    chat_requests_total,
    client_timeouts_total,
    llm_latency_seconds,
    llm_tokens_total,
    model_fallbacks_total,
    reply_truncations_total,
    upstream_retries_total,
)

__all__ = [
    "chat_requests_total",
    "client_timeouts_total",
    "llm_latency_seconds",
    "llm_tokens_total",
    "model_fallbacks_total",
    "reply_truncations_total",
    "upstream_retries_total",
]
