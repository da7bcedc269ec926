"""
Pydantic data models for the chat relay.

Includes:
- Enums (Role, GptMode)
- Conversation models (Exchange)
- Upstream models (ChatCompletion, Choice, ChoiceMessage, Usage)
- ModelSelection (primary/fallback pair)
"""

from chat_relay.models.enums import GptMode, Role
from chat_relay.models.chat_models import (
    ChatCompletion,
    Choice,
    ChoiceMessage,
    Exchange,
    ModelSelection,
    Usage,
)

__all__ = [
    "GptMode",
    "Role",
    "ChatCompletion",
    "Choice",
    "ChoiceMessage",
    "Exchange",
    "ModelSelection",
    "Usage",
]
