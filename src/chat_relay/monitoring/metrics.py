"""Custom Prometheus metrics for the chat relay.

Exposed at /metrics alongside the HTTP metrics of
prometheus-fastapi-instrumentator. Worth alerting on:
- upstream_retries_total (rising rate means the upstream is degraded)
- model_fallbacks_total (primary model unavailable)
- chat_requests_total{status!="success"}
"""

from prometheus_client import Counter, Histogram

# === Request Metrics ===

chat_requests_total = Counter(
    "chat_requests_total",
    "Total /gpt requests by mode and outcome",
    ["mode", "status"],
)
"""
Labels:
- mode: CHAT or PROMPT
- status: success, upstream_error, client_timeout, deadline_exceeded, error
"""

reply_truncations_total = Counter(
    "reply_truncations_total",
    "Replies cut down to the chat transport length ceiling",
)

# === Resilience Metrics ===

upstream_retries_total = Counter(
    "upstream_retries_total",
    "Retry attempts against the completion API by cause",
    ["cause"],
)
"""
Labels:
- cause: HTTP status (e.g. "503") or error code (e.g. "ECONNRESET")
"""

model_fallbacks_total = Counter(
    "model_fallbacks_total",
    "Switches from the primary to the fallback model by outcome",
    ["fallback_model", "success"],
)

client_timeouts_total = Counter(
    "client_timeouts_total",
    "Completion calls abandoned by the client-side timeout race",
)

# === LLM Performance Metrics ===

llm_latency_seconds = Histogram(
    "llm_latency_seconds",
    "Single completion call latency in seconds",
    ["model", "success"],
    buckets=[0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 20.0, 30.0],
)

llm_tokens_total = Counter(
    "llm_tokens_total",
    "Total tokens consumed by model and type",
    ["model", "token_type"],
)
"""
Labels:
- model: Model name reported by the upstream
- token_type: prompt (input tokens), completion (output tokens)

Used for cost estimation.
"""
