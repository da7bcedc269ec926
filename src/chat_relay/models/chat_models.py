"""
Chat data models for the request/response cycle.

Exchange is the unit of conversation memory. ChatCompletion mirrors the
subset of the upstream chat-completion response the relay depends on;
unknown fields are ignored so provider additions never break parsing.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from chat_relay.models.enums import Role


class Exchange(BaseModel):
    """One turn in a dialogue, tagged with its speaker role."""

    model_config = ConfigDict(frozen=True, use_enum_values=True)

    role: Role
    content: str

    def to_message(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


class ModelSelection(BaseModel):
    """Primary and optional fallback model, fixed at process start."""

    model_config = ConfigDict(frozen=True)

    primary: str = Field(..., min_length=1, description="Model tried first")
    fallback: Optional[str] = Field(default=None, description="Model tried once after the primary fails")

    @property
    def has_distinct_fallback(self) -> bool:
        return bool(self.fallback) and self.fallback != self.primary


class ChoiceMessage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    role: Optional[str] = None
    content: Optional[str] = None


class Choice(BaseModel):
    model_config = ConfigDict(extra="ignore")

    index: int = 0
    message: ChoiceMessage = Field(default_factory=ChoiceMessage)
    finish_reason: Optional[str] = None


class Usage(BaseModel):
    model_config = ConfigDict(extra="ignore")

    prompt_tokens: Optional[int] = None
    completion_tokens: Optional[int] = None
    total_tokens: Optional[int] = None


class ChatCompletion(BaseModel):
    """
    Parsed upstream chat-completion response.

    Only `choices[0].message.content` is used by the relay; `model` and
    `usage` feed logs and metrics.
    """

    model_config = ConfigDict(extra="ignore")

    id: Optional[str] = None
    model: Optional[str] = None
    choices: list[Choice] = Field(default_factory=list)
    usage: Optional[Usage] = None

    def first_content(self) -> str:
        """Text of the first choice; missing choices or content yield ""."""
        if not self.choices:
            return ""
        return self.choices[0].message.content or ""
