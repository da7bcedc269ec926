"""
Enumerations for chat relay data models.

All enums are closed taxonomies - no values outside these sets are permitted.
"""

from enum import Enum


class Role(str, Enum):
    """Speaker role of a single exchange, as understood by chat-completion APIs."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class GptMode(str, Enum):
    """
    Operating mode of the relay.

    CHAT resends the bounded conversation history with each call.
    PROMPT answers every query independently using a fixed prefix context.
    """

    CHAT = "CHAT"
    PROMPT = "PROMPT"
