"""
Abstract base client for chat-completion APIs.

Defines the single operation the relay needs from an upstream provider.
Retries, timeouts and model fallback live in chat_relay.retry and wrap
this interface; implementations make exactly one attempt per call.
"""

from abc import ABC, abstractmethod
from typing import Sequence

import structlog

from chat_relay.models.chat_models import ChatCompletion


logger = structlog.get_logger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract base class for completion clients.

    Responsibilities:
    - Send one chat-completion request
    - Parse the response into ChatCompletion
    - Translate transport and HTTP failures into LLMClientError subclasses

    Does NOT handle:
    - Retries or backoff (ResilientInvoker)
    - Model fallback (ModelFallbackOrchestrator)
    - Conversation memory (ConversationStore)
    """

    @abstractmethod
    async def complete(
        self,
        model: str,
        messages: Sequence[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> ChatCompletion:
        """
        Request a chat completion.

        Args:
            model: Model identifier
            messages: Ordered role/content messages
            temperature: Sampling temperature
            max_tokens: Completion token ceiling

        Returns:
            Parsed ChatCompletion

        Raises:
            UpstreamError: HTTP error status from the upstream
            LLMConnectionError: Network failure or transport timeout
            LLMResponseError: Unparseable response body
        """
        pass

    async def close(self):
        """
        Close client connections and cleanup resources.

        Default implementation does nothing.
        """
        logger.debug("Closing LLM client", client_class=self.__class__.__name__)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"
