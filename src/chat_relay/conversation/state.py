"""
Conversation memory for multi-turn mode.

A Conversation is a bounded sliding window of exchanges that always starts
with exactly one system exchange. When a user append pushes the length past
1 + 2 * history_limit, the oldest (user, assistant) pair after the system
exchange is evicted as a unit.

Conversations are keyed by channel in a ConversationStore, and each owns an
asyncio.Lock that callers hold across append-user / upstream call /
append-assistant, so concurrent requests never interleave within one
conversation.
"""

import asyncio
from collections import OrderedDict

import structlog

from chat_relay.models.chat_models import Exchange
from chat_relay.models.enums import Role

logger = structlog.get_logger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful Twitch Chatbot."
DEFAULT_CONVERSATION_ID = "default"


class Conversation:
    """
    Bounded exchange history for one logical conversation.

    Attributes:
        history_limit: Maximum number of (user, assistant) pairs retained
        lock: Serializes a full request cycle against this conversation
    """

    def __init__(self, system_prompt: str = DEFAULT_SYSTEM_PROMPT, history_limit: int = 6):
        if history_limit < 0:
            raise ValueError("history_limit must be >= 0")
        self.history_limit = history_limit
        self.lock = asyncio.Lock()
        self._exchanges: list[Exchange] = [Exchange(role=Role.SYSTEM, content=system_prompt)]

    @property
    def max_length(self) -> int:
        return 1 + 2 * self.history_limit

    @property
    def system_prompt(self) -> str:
        return self._exchanges[0].content

    def __len__(self) -> int:
        return len(self._exchanges)

    def append_user(self, text: str) -> None:
        self._exchanges.append(Exchange(role=Role.USER, content=text))

        pairs = (len(self._exchanges) - 1) // 2
        logger.debug(
            "User exchange appended",
            pairs=pairs,
            history_limit=self.history_limit,
            total_exchanges=len(self._exchanges),
        )
        # Evict whole pairs only; the new user exchange is last and never evicted.
        while len(self._exchanges) > self.max_length and len(self._exchanges) > 2:
            logger.debug("History exceeded, dropping oldest pair")
            del self._exchanges[1:3]

    def append_assistant(self, text: str) -> None:
        self._exchanges.append(Exchange(role=Role.ASSISTANT, content=text))

    def discard_pending_user(self) -> bool:
        """Remove a trailing user exchange left behind by a failed call."""
        if len(self._exchanges) > 1 and self._exchanges[-1].role == Role.USER:
            self._exchanges.pop()
            return True
        return False

    def reset_system_prompt(self, text: str) -> None:
        self._exchanges[0] = Exchange(role=Role.SYSTEM, content=text)

    def snapshot(self) -> tuple[Exchange, ...]:
        return tuple(self._exchanges)

    def messages(self) -> list[dict[str, str]]:
        """Snapshot in upstream message format."""
        return [exchange.to_message() for exchange in self._exchanges]

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(exchanges={len(self._exchanges)}, "
            f"history_limit={self.history_limit})"
        )


class ConversationStore:
    """
    Conversations keyed by channel, bounded to `max_conversations`.

    The least recently used conversation is dropped when the bound is hit,
    unless it is mid-request (its lock is held).
    """

    def __init__(
        self,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
        history_limit: int = 6,
        max_conversations: int = 1000,
    ):
        if max_conversations < 1:
            raise ValueError("max_conversations must be >= 1")
        self.system_prompt = system_prompt
        self.history_limit = history_limit
        self.max_conversations = max_conversations
        self._conversations: OrderedDict[str, Conversation] = OrderedDict()

    def __len__(self) -> int:
        return len(self._conversations)

    def __contains__(self, conversation_id: str) -> bool:
        return conversation_id in self._conversations

    def get(self, conversation_id: str = DEFAULT_CONVERSATION_ID) -> Conversation:
        """Return the conversation for `conversation_id`, creating it on first use."""
        conversation = self._conversations.get(conversation_id)
        if conversation is not None:
            self._conversations.move_to_end(conversation_id)
            return conversation

        conversation = Conversation(self.system_prompt, self.history_limit)
        self._conversations[conversation_id] = conversation
        self._evict_idle(keep=conversation_id)
        return conversation

    def set_system_prompt(self, text: str) -> None:
        """Apply a new system prompt to existing and future conversations."""
        self.system_prompt = text
        for conversation in self._conversations.values():
            conversation.reset_system_prompt(text)

    def _evict_idle(self, keep: str) -> None:
        for conversation_id in list(self._conversations):
            if len(self._conversations) <= self.max_conversations:
                return
            if conversation_id == keep or self._conversations[conversation_id].lock.locked():
                continue
            del self._conversations[conversation_id]
            logger.info("Evicted idle conversation", conversation_id=conversation_id)
