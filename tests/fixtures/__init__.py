"""
Test doubles for the chat relay.

- make_completion: build a ChatCompletion with a given reply
- ScriptedLLMClient: BaseLLMClient that replays scripted outcomes per model
  and records every call
"""

import asyncio
from typing import Any, Sequence

from chat_relay.llm.base_client import BaseLLMClient
from chat_relay.models.chat_models import ChatCompletion

TEST_API_KEY = "sk-test-secret-0123456789"


def make_completion(content: str | None = "Hello chat!", model: str = "primary-model") -> ChatCompletion:
    """Build a ChatCompletion whose first choice carries `content`."""
    return ChatCompletion.model_validate(
        {
            "id": "chatcmpl-test",
            "model": model,
            "choices": [
                {
                    "index": 0,
                    "message": {"role": "assistant", "content": content},
                    "finish_reason": "stop",
                }
            ],
            "usage": {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        }
    )


class ScriptedLLMClient(BaseLLMClient):
    """
    Completion client replaying scripted outcomes.

    `scripts` maps a model name to a list of outcomes consumed in order; the
    last outcome repeats once the list is down to one item. An outcome is an
    exception instance (raised), a ChatCompletion (returned) or a string
    (returned as the reply content). Models without a script echo the last
    message back as "Reply to: <content>".

    `delay` seconds are slept before every outcome.
    """

    def __init__(self, scripts: dict[str, list[Any]] | None = None, delay: float = 0.0):
        self.scripts = {model: list(outcomes) for model, outcomes in (scripts or {}).items()}
        self.delay = delay
        self.calls: list[dict[str, Any]] = []
        self.closed = False

    def calls_for(self, model: str) -> list[dict[str, Any]]:
        return [call for call in self.calls if call["model"] == model]

    async def complete(
        self,
        model: str,
        messages: Sequence[dict[str, str]],
        temperature: float,
        max_tokens: int,
    ) -> ChatCompletion:
        self.calls.append(
            {
                "model": model,
                "messages": [dict(message) for message in messages],
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        if self.delay:
            await asyncio.sleep(self.delay)

        script = self.scripts.get(model)
        if not script:
            return make_completion(f"Reply to: {messages[-1]['content']}", model=model)

        outcome = script.pop(0) if len(script) > 1 else script[0]
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, ChatCompletion):
            return outcome
        return make_completion(outcome, model=model)

    async def close(self):
        self.closed = True
