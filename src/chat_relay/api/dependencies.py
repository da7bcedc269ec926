"""
FastAPI dependency injection for the chat relay.

Long-lived resources (completion client, chat service) are built once in
the application lifespan and stored on app.state; these helpers build and
hand them out.
"""

from fastapi import Request

from chat_relay.chat.service import ChatService
from chat_relay.config import Settings
from chat_relay.conversation.state import ConversationStore
from chat_relay.llm.base_client import BaseLLMClient
from chat_relay.llm.openai_client import OpenAIChatClient
from chat_relay.models.chat_models import ModelSelection
from chat_relay.retry.backoff import BackoffPolicy
from chat_relay.retry.fallback import ModelFallbackOrchestrator
from chat_relay.retry.invoker import ResilientInvoker


def build_llm_client(settings: Settings) -> BaseLLMClient:
    """
    Create the upstream completion client.

    The transport timeout matches the client-side race so a stuck attempt
    never outlives the sequence deadline.
    """
    return OpenAIChatClient(
        api_key=settings.OPENAI_API_KEY.get_secret_value(),
        base_url=settings.OPENAI_BASE_URL,
        timeout=settings.OPENAI_TIMEOUT_MS / 1000,
    )


def build_chat_service(settings: Settings, llm_client: BaseLLMClient) -> ChatService:
    """
    Wire backoff policy, invoker, fallback orchestrator and memory into a ChatService.

    Args:
        settings: Application settings
        llm_client: Upstream completion client

    Returns:
        ChatService instance
    """
    policy = BackoffPolicy(
        max_retries=settings.OPENAI_RETRIES,
        base_delay_ms=settings.BACKOFF_BASE_DELAY_MS,
        factor=settings.BACKOFF_FACTOR,
        jitter_ms=settings.BACKOFF_JITTER_MS,
    )
    invoker = ResilientInvoker(policy, timeout_ms=settings.OPENAI_TIMEOUT_MS)
    selection = ModelSelection(primary=settings.OPENAI_MODEL, fallback=settings.fallback_model)
    orchestrator = ModelFallbackOrchestrator(llm_client, invoker, selection)

    return ChatService(
        orchestrator=orchestrator,
        mode=settings.GPT_MODE,
        conversations=ConversationStore(
            history_limit=settings.HISTORY_LENGTH,
            max_conversations=settings.MAX_CONVERSATIONS,
        ),
        temperature=settings.TEMPERATURE,
        chat_max_tokens=settings.CHAT_MAX_TOKENS,
        prompt_max_tokens=settings.PROMPT_MAX_TOKENS,
        max_reply_chars=settings.MAX_REPLY_CHARS,
    )


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_chat_service(request: Request) -> ChatService:
    return request.app.state.chat_service
