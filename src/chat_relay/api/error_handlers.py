"""
FastAPI exception handlers producing plain-text failure responses.

Maps relay exceptions to HTTP status codes:
- Upstream 429/500/502/503/504 -> 503 (caller may try again later)
- Any other upstream or client failure -> 500
- Server response deadline -> 504

The upstream credential is masked out of every body and log line.
"""

from fastapi import Request, status
from fastapi.responses import PlainTextResponse
import structlog

from chat_relay.api.exceptions import ServerDeadlineExceeded
from chat_relay.chat.text_utils import redact_secret
from chat_relay.llm.exceptions import LLMClientError
from chat_relay.retry.exceptions import ClientTimeout

logger = structlog.get_logger(__name__)

UPSTREAM_UNAVAILABLE_STATUSES = frozenset({429, 500, 502, 503, 504})


def _secret(request: Request) -> str | None:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        return None
    return settings.OPENAI_API_KEY.get_secret_value() or None


def failure_body(upstream_status: int | None, http_status: int, detail: str) -> str:
    return (
        f"AI backend temporarily unavailable (status={upstream_status or http_status}). "
        f"Details: {detail}"
    )


def http_status_for(upstream_status: int | None) -> int:
    if upstream_status in UPSTREAM_UNAVAILABLE_STATUSES:
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def llm_client_error_handler(request: Request, exc: LLMClientError) -> PlainTextResponse:
    """
    Handle upstream failures (HTTP error status, transport error, bad body).

    503 for "try again later" statuses, 500 otherwise.
    """
    http_status = http_status_for(exc.status_code)
    detail = redact_secret(exc.message, _secret(request))

    logger.error(
        "Completion call failed",
        error_type=type(exc).__name__,
        upstream_status=exc.status_code,
        code=exc.code,
        detail=detail,
        http_status=http_status,
    )

    return PlainTextResponse(
        failure_body(exc.status_code, http_status, detail),
        status_code=http_status,
    )


async def client_timeout_handler(request: Request, exc: ClientTimeout) -> PlainTextResponse:
    """Handle the client-side completion deadline. Maps to 500."""
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.error("Completion call exceeded client timeout", timeout_ms=exc.timeout_ms)

    return PlainTextResponse(
        failure_body(None, http_status, str(exc)),
        status_code=http_status,
    )


async def server_deadline_handler(request: Request, exc: ServerDeadlineExceeded) -> PlainTextResponse:
    """Handle the request's own response deadline. Maps to 504."""
    logger.error(
        "Request exceeded server deadline",
        method=request.method,
        path=request.url.path,
        deadline_ms=exc.deadline_ms,
    )

    return PlainTextResponse(
        "Gateway Timeout: server took too long to respond.",
        status_code=status.HTTP_504_GATEWAY_TIMEOUT,
    )


async def generic_error_handler(request: Request, exc: Exception) -> PlainTextResponse:
    """Handle unexpected errors. Maps to 500."""
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.exception("Unexpected error", error_type=type(exc).__name__)

    return PlainTextResponse(
        failure_body(None, http_status, f"Unexpected {type(exc).__name__}"),
        status_code=http_status,
    )


# Exception handler mapping for FastAPI app.add_exception_handler()
EXCEPTION_HANDLERS = {
    LLMClientError: llm_client_error_handler,
    ClientTimeout: client_timeout_handler,
    ServerDeadlineExceeded: server_deadline_handler,
    # Only reached by failures raised outside RequestTracingMiddleware
    Exception: generic_error_handler,
}
