"""
Chat service: one inbound query in, one trimmed reply out.

CHAT mode appends the query to the channel's conversation, sends the whole
window and records the reply. PROMPT mode sends a fixed system message plus
a single user message built from the prefix context, and touches no state.
"""

import time

import structlog

from chat_relay.chat.text_utils import MAX_REPLY_CHARS, build_prompt_message, truncate_reply
from chat_relay.conversation.state import (
    DEFAULT_CONVERSATION_ID,
    DEFAULT_SYSTEM_PROMPT,
    ConversationStore,
)
from chat_relay.models.enums import GptMode, Role
from chat_relay.retry.fallback import ModelFallbackOrchestrator

logger = structlog.get_logger(__name__)


class ChatService:
    """
    Glue between the HTTP route, conversation memory and the fallback orchestrator.

    Attributes:
        orchestrator: Primary/fallback completion with retries
        mode: CHAT (multi-turn) or PROMPT (single-shot)
        conversations: Per-channel memory (CHAT mode)
        prefix_context: Context prepended to each query (PROMPT mode)
    """

    def __init__(
        self,
        orchestrator: ModelFallbackOrchestrator,
        mode: GptMode = GptMode.CHAT,
        conversations: ConversationStore | None = None,
        prefix_context: str = DEFAULT_SYSTEM_PROMPT,
        temperature: float = 0.5,
        chat_max_tokens: int = 592,
        prompt_max_tokens: int = 256,
        max_reply_chars: int = MAX_REPLY_CHARS,
    ):
        self.orchestrator = orchestrator
        self.mode = mode
        self.conversations = conversations if conversations is not None else ConversationStore()
        self.prefix_context = prefix_context
        self.temperature = temperature
        self.chat_max_tokens = chat_max_tokens
        self.prompt_max_tokens = prompt_max_tokens
        self.max_reply_chars = max_reply_chars

    def apply_context(self, context: str) -> None:
        """Install the loaded context file as system prompt (CHAT) or prefix (PROMPT)."""
        if self.mode == GptMode.CHAT:
            self.conversations.set_system_prompt(context)
        else:
            self.prefix_context = context

    async def answer(self, text: str, conversation_id: str = DEFAULT_CONVERSATION_ID) -> str:
        """
        Answer one query.

        Returns:
            Reply text, stripped and truncated to max_reply_chars

        Raises:
            Exception: Whatever the orchestrator surfaced; the API layer maps it
        """
        start_time = time.perf_counter()
        logger.info(
            "Chat query received",
            mode=self.mode.value,
            conversation_id=conversation_id,
            query_length=len(text),
        )

        if self.mode == GptMode.CHAT:
            reply = await self._answer_multi_turn(text, conversation_id)
        else:
            reply = await self._answer_single_shot(text)

        out = truncate_reply(reply, self.max_reply_chars)
        logger.info(
            "Chat reply ready",
            duration_ms=int((time.perf_counter() - start_time) * 1000),
            reply_length=len(out),
        )
        return out

    async def _answer_multi_turn(self, text: str, conversation_id: str) -> str:
        conversation = self.conversations.get(conversation_id)
        async with conversation.lock:
            conversation.append_user(text)
            try:
                completion = await self.orchestrator.complete(
                    messages=conversation.messages(),
                    temperature=self.temperature,
                    max_tokens=self.chat_max_tokens,
                )
            except BaseException:
                conversation.discard_pending_user()
                raise

            reply = completion.first_content().strip()
            conversation.append_assistant(reply)
            logger.debug(
                "Conversation updated",
                conversation_id=conversation_id,
                exchanges=len(conversation),
            )
        return reply

    async def _answer_single_shot(self, text: str) -> str:
        messages = [
            {"role": Role.SYSTEM.value, "content": DEFAULT_SYSTEM_PROMPT},
            {"role": Role.USER.value, "content": build_prompt_message(self.prefix_context, text)},
        ]
        completion = await self.orchestrator.complete(
            messages=messages,
            temperature=self.temperature,
            max_tokens=self.prompt_max_tokens,
        )
        return completion.first_content().strip()
