"""
OpenAI-compatible chat-completion client.

Communicates with POST {base_url}/chat/completions using an httpx
AsyncClient. Makes a single attempt per call and translates every failure
into an LLMClientError carrying the HTTP status and/or an errno-style code,
so the retry layer can classify it.
"""

import json
import time
from typing import Any, Optional, Sequence

import httpx
import structlog
from pydantic import ValidationError

from chat_relay.chat.text_utils import redact_secret
from chat_relay.llm.base_client import BaseLLMClient
from chat_relay.llm.exceptions import (
    LLMConnectionError,
    LLMResponseError,
    UpstreamError,
)
from chat_relay.models.chat_models import ChatCompletion
from chat_relay.monitoring.metrics import llm_latency_seconds, llm_tokens_total


logger = structlog.get_logger(__name__)

# Most specific classes first: ConnectTimeout is a TimeoutException, not a ConnectError.
TRANSPORT_ERROR_CODES: tuple[tuple[type[httpx.TransportError], str], ...] = (
    (httpx.ConnectTimeout, "CONNECT_TIMEOUT"),
    (httpx.ReadTimeout, "BODY_TIMEOUT"),
    (httpx.WriteTimeout, "ETIMEDOUT"),
    (httpx.PoolTimeout, "ETIMEDOUT"),
    (httpx.TimeoutException, "ETIMEDOUT"),
    (httpx.ConnectError, "ECONNREFUSED"),
    (httpx.ReadError, "ECONNRESET"),
    (httpx.WriteError, "EPIPE"),
    (httpx.RemoteProtocolError, "ECONNRESET"),
)


def transport_error_code(exc: httpx.TransportError) -> str:
    """Map an httpx transport failure to an errno-style code."""
    for exc_class, code in TRANSPORT_ERROR_CODES:
        if isinstance(exc, exc_class):
            return code
    return type(exc).__name__.upper()


def _parse_error_body(response: httpx.Response) -> tuple[str, Optional[str]]:
    """Extract (message, code) from an OpenAI-style error body."""
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        return response.text[:500] or response.reason_phrase, None

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict):
        message = error.get("message") or response.reason_phrase
        code = error.get("code") or error.get("type")
        return str(message), str(code) if code is not None else None
    if isinstance(error, str):
        return error, None
    return response.text[:500] or response.reason_phrase, None


class OpenAIChatClient(BaseLLMClient):
    """
    Chat-completion client for OpenAI and API-compatible servers.

    Features:
    - Connection pooling via a persistent AsyncClient
    - Bearer authentication (the key never appears in logs or errors)
    - Latency and token metrics per model
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        connection_limits: Optional[httpx.Limits] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Upstream credential (may be empty; calls then fail upstream)
            base_url: API root, e.g. https://api.openai.com/v1
            timeout: Transport timeout in seconds for a single attempt
            transport: Optional httpx transport (tests use httpx.MockTransport)
            connection_limits: httpx connection pool limits
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._api_key = api_key
        self._transport = transport

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=20,
                keepalive_expiry=30.0,
            )
        self._connection_limits = connection_limits
        self._client: Optional[httpx.AsyncClient] = None

        logger.info(
            "OpenAI chat client initialized",
            base_url=self.base_url,
            timeout=timeout,
            api_key_present=bool(api_key),
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            headers = {"Content-Type": "application/json"}
            if self._api_key:
                headers["Authorization"] = f"Bearer {self._api_key}"
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=headers,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._transport,
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def complete(
        self,
        model: str,
        messages: Sequence[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> ChatCompletion:
        """
        POST /chat/completions with payload:
        {
            "model": "...",
            "messages": [{"role": "system", "content": "..."}, ...],
            "temperature": 0.5,
            "max_tokens": 592,
            "top_p": 1,
            "frequency_penalty": 0,
            "presence_penalty": 0
        }
        """
        payload: dict[str, Any] = {
            "model": model,
            "messages": list(messages),
            "temperature": temperature,
            "max_tokens": max_tokens,
            "top_p": 1,
            "frequency_penalty": 0,
            "presence_penalty": 0,
        }

        logger.debug(
            "Sending chat completion request",
            model=model,
            messages_count=len(payload["messages"]),
            temperature=temperature,
            max_tokens=max_tokens,
        )

        start_time = time.perf_counter()
        try:
            client = await self._get_client()
            response = await client.post("/chat/completions", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message, code = _parse_error_body(e.response)
            # Upstreams echo a rejected key back in the message
            message = redact_secret(message, self._api_key)
            status_code = e.response.status_code
            llm_latency_seconds.labels(model=model, success="false").observe(
                time.perf_counter() - start_time
            )
            logger.warning(
                "Completion API returned error status",
                model=model,
                status_code=status_code,
                code=code,
                error=message,
            )
            raise UpstreamError(
                f"Upstream error {status_code}: {message}",
                details={"model": model, "status": status_code},
                status_code=status_code,
                code=code,
            ) from e
        except httpx.TransportError as e:
            code = transport_error_code(e)
            error = redact_secret(str(e), self._api_key)
            llm_latency_seconds.labels(model=model, success="false").observe(
                time.perf_counter() - start_time
            )
            logger.warning(
                "Completion API transport error",
                model=model,
                code=code,
                error_type=type(e).__name__,
                error=error,
            )
            raise LLMConnectionError(
                f"Network error ({code}): {error}",
                details={"model": model, "error_type": type(e).__name__},
                code=code,
            ) from e

        latency = time.perf_counter() - start_time

        try:
            completion = ChatCompletion.model_validate(response.json())
        except (json.JSONDecodeError, ValueError, ValidationError) as e:
            parse_error = redact_secret(str(e), self._api_key)
            llm_latency_seconds.labels(model=model, success="false").observe(latency)
            logger.error("Failed to parse completion response", model=model, error=parse_error)
            raise LLMResponseError(
                "Invalid JSON response from completion API",
                details={"model": model, "parse_error": parse_error},
                status_code=response.status_code,
            ) from e

        reported_model = completion.model or model
        llm_latency_seconds.labels(model=reported_model, success="true").observe(latency)
        if completion.usage is not None:
            if completion.usage.prompt_tokens:
                llm_tokens_total.labels(
                    model=reported_model, token_type="prompt"
                ).inc(completion.usage.prompt_tokens)
            if completion.usage.completion_tokens:
                llm_tokens_total.labels(
                    model=reported_model, token_type="completion"
                ).inc(completion.usage.completion_tokens)

        logger.info(
            "Chat completion received",
            model=reported_model,
            latency_ms=int(latency * 1000),
            choices=len(completion.choices),
        )
        return completion

    async def close(self):
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed completion client connection")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(base_url={self.base_url}, timeout={self.timeout}s)"
