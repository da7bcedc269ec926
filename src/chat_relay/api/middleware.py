"""FastAPI middleware for request tracing and logging."""

import time
import uuid
from typing import Callable

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from chat_relay.api.error_handlers import generic_error_handler
from chat_relay.conversation.state import DEFAULT_CONVERSATION_ID

logger = structlog.get_logger(__name__)


class RequestTracingMiddleware(BaseHTTPMiddleware):
    """Tag every request with a request_id and its conversation channel.

    - request_id (UUID4), method, path and channel are bound to the structlog
      context, so retry, fallback and memory logs of one query line up
    - X-Request-ID is set on every response, including unexpected 500s
    - Unexpected errors are answered here with the plain-text failure body
      instead of escaping to the server error middleware
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        request_id = str(uuid.uuid4())
        context = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
        }
        if request.url.path.startswith("/gpt/"):
            context["channel"] = request.query_params.get("channel", DEFAULT_CONVERSATION_ID)
        structlog.contextvars.bind_contextvars(**context)

        start_time = time.perf_counter()
        try:
            try:
                response = await call_next(request)
            except Exception as exc:
                response = await generic_error_handler(request, exc)

            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            structlog.contextvars.clear_contextvars()
