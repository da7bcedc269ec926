"""
Conversation memory and context loading.

- state.py: Conversation (bounded sliding window), ConversationStore (per-channel)
- context_loader.py: startup read of the optional context file
"""

from chat_relay.conversation.context_loader import load_context_file
from chat_relay.conversation.state import (
    DEFAULT_CONVERSATION_ID,
    DEFAULT_SYSTEM_PROMPT,
    Conversation,
    ConversationStore,
)

__all__ = [
    "DEFAULT_CONVERSATION_ID",
    "DEFAULT_SYSTEM_PROMPT",
    "Conversation",
    "ConversationStore",
    "load_context_file",
]
