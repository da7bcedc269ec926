"""
Model fallback orchestrator.

Tries the primary model through a full ResilientInvoker run. If that fails
for any reason and a distinct fallback model is configured, runs one fresh
invoker sequence against the fallback model. A fallback failure is the
error that propagates.
"""

from typing import Sequence

import structlog

from chat_relay.llm.base_client import BaseLLMClient
from chat_relay.models.chat_models import ChatCompletion, ModelSelection
from chat_relay.monitoring.metrics import model_fallbacks_total
from chat_relay.retry.backoff import ErrorSignal
from chat_relay.retry.invoker import ResilientInvoker

logger = structlog.get_logger(__name__)


class ModelFallbackOrchestrator:
    """
    Primary-then-fallback completion.

    Attributes:
        client: Upstream completion client
        invoker: Retry/timeout wrapper applied to each model independently
        selection: Primary and optional fallback model
    """

    def __init__(
        self,
        client: BaseLLMClient,
        invoker: ResilientInvoker,
        selection: ModelSelection,
    ):
        self.client = client
        self.invoker = invoker
        self.selection = selection

        logger.info(
            "Model fallback orchestrator initialized",
            primary_model=selection.primary,
            fallback_model=selection.fallback,
            retries=invoker.policy.max_retries,
            timeout_ms=invoker.timeout_ms,
        )

    async def _call(
        self,
        model: str,
        messages: Sequence[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> ChatCompletion:
        return await self.invoker.invoke(
            lambda: self.client.complete(
                model=model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        )

    async def complete(
        self,
        messages: Sequence[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> ChatCompletion:
        """
        Complete `messages` with the primary model, falling back once on failure.

        Raises:
            Exception: The primary error when no distinct fallback exists,
                otherwise the fallback's error
        """
        primary = self.selection.primary
        try:
            return await self._call(primary, messages, temperature, max_tokens)
        except Exception as exc:
            signal = ErrorSignal.from_exception(exc)
            logger.error(
                "Primary model failed",
                model=primary,
                status_code=signal.status_code,
                code=signal.code,
                error=signal.message,
                error_type=type(exc).__name__,
            )
            if not self.selection.has_distinct_fallback:
                raise

        fallback = self.selection.fallback
        logger.warning("Falling back to secondary model", model=fallback, primary_model=primary)
        try:
            completion = await self._call(fallback, messages, temperature, max_tokens)
        except Exception:
            model_fallbacks_total.labels(fallback_model=fallback, success="false").inc()
            raise
        model_fallbacks_total.labels(fallback_model=fallback, success="true").inc()
        return completion
