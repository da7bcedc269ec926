"""
Upstream chat-completion client abstraction and implementation.

Components:
- BaseLLMClient: Abstract single-operation completion client
- OpenAIChatClient: httpx implementation for OpenAI-compatible APIs
- exceptions: Typed failures carrying status and error code
"""

from chat_relay.llm.base_client import BaseLLMClient
from chat_relay.llm.openai_client import OpenAIChatClient
from chat_relay.llm.exceptions import (
    LLMClientError,
    LLMConnectionError,
    LLMResponseError,
    UpstreamError,
)

__all__ = [
    "BaseLLMClient",
    "OpenAIChatClient",
    "LLMClientError",
    "LLMConnectionError",
    "LLMResponseError",
    "UpstreamError",
]
