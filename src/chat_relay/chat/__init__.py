"""
Request handling for chat queries.
"""

from chat_relay.chat.service import ChatService
from chat_relay.chat.text_utils import build_prompt_message, redact_secret, truncate_reply

__all__ = [
    "ChatService",
    "build_prompt_message",
    "redact_secret",
    "truncate_reply",
]
