"""
HTTP routes: liveness, health, and the /gpt query endpoint.
"""

import asyncio

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import PlainTextResponse

from chat_relay.api.dependencies import get_chat_service, get_settings
from chat_relay.api.exceptions import ServerDeadlineExceeded
from chat_relay.chat.service import ChatService
from chat_relay.config import Settings
from chat_relay.conversation.state import DEFAULT_CONVERSATION_ID
from chat_relay.llm.exceptions import LLMClientError
from chat_relay.monitoring.metrics import chat_requests_total
from chat_relay.retry.exceptions import ClientTimeout

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.api_route(
    "/",
    methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_class=PlainTextResponse,
    include_in_schema=False,
)
async def root() -> str:
    """Liveness placeholder."""
    return "Yo!"


@router.get("/healthz", response_class=PlainTextResponse, summary="Health check for orchestrators")
async def healthz() -> str:
    return "ok"


def _log_abandoned_outcome(task: asyncio.Task) -> None:
    """Retrieve and log the result of work whose caller already got a 504."""
    if task.cancelled():
        logger.warning("Abandoned chat task was cancelled")
        return
    exc = task.exception()
    if exc is not None:
        logger.warning(
            "Abandoned chat task failed",
            error_type=type(exc).__name__,
            error=str(exc),
        )
    else:
        logger.info("Abandoned chat task finished after deadline")


def _outcome_label(exc: BaseException) -> str:
    if isinstance(exc, ServerDeadlineExceeded):
        return "deadline_exceeded"
    if isinstance(exc, ClientTimeout):
        return "client_timeout"
    if isinstance(exc, LLMClientError):
        return "upstream_error"
    return "error"


@router.get(
    "/gpt/{text:path}",
    response_class=PlainTextResponse,
    summary="Answer a chat query",
    responses={
        200: {"description": "Reply text, at most MAX_REPLY_CHARS characters"},
        500: {"description": "Terminal upstream failure, client timeout or internal error"},
        503: {"description": "Upstream temporarily unavailable (429/5xx)"},
        504: {"description": "Server response deadline exceeded"},
    },
)
async def gpt(
    text: str,
    channel: str = Query(
        DEFAULT_CONVERSATION_ID,
        min_length=1,
        max_length=200,
        description="Conversation key; requests on different channels never share memory",
    ),
    service: ChatService = Depends(get_chat_service),
    settings: Settings = Depends(get_settings),
) -> PlainTextResponse:
    """
    Answer `text` (already URL-decoded) and return the reply as plain text.

    The wait is bounded by SERVER_TIMEOUT_MS. On expiry the reply work keeps
    running in the background (it still updates conversation memory) and
    the caller gets 504.
    """
    mode = settings.GPT_MODE.value
    task = asyncio.ensure_future(service.answer(text, channel))
    try:
        try:
            reply = await asyncio.wait_for(
                asyncio.shield(task), timeout=settings.SERVER_TIMEOUT_MS / 1000
            )
        except asyncio.TimeoutError:
            task.add_done_callback(_log_abandoned_outcome)
            raise ServerDeadlineExceeded(settings.SERVER_TIMEOUT_MS)
    except Exception as exc:
        chat_requests_total.labels(mode=mode, status=_outcome_label(exc)).inc()
        raise

    chat_requests_total.labels(mode=mode, status="success").inc()
    return PlainTextResponse(reply, headers={"Cache-Control": "no-store"})
