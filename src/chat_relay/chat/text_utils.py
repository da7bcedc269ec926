"""
Text processing utilities for replies and error bodies.
"""

import structlog

from chat_relay.monitoring.metrics import reply_truncations_total

logger = structlog.get_logger(__name__)

MAX_REPLY_CHARS = 1000


def truncate_reply(text: str | None, max_chars: int = MAX_REPLY_CHARS) -> str:
    """
    Hard-cut a reply to the chat transport's length ceiling.

    Shorter text is returned unchanged; None becomes "".

    Examples:
        >>> truncate_reply("hello", 3)
        'hel'
        >>> truncate_reply(None)
        ''
    """
    if not text:
        return ""
    if len(text) <= max_chars:
        return text

    logger.info("Cutting reply to chat length limit", original_length=len(text), max_chars=max_chars)
    reply_truncations_total.inc()
    return text[:max_chars]


def build_prompt_message(prefix_context: str, query: str) -> str:
    """Single-shot user message: prefix context, the query, and an answer cue."""
    return f"{prefix_context}\n\nQ: {query}\nA:"


def redact_secret(text: str, secret: str | None) -> str:
    """Replace every occurrence of `secret` in `text` with a mask."""
    if not secret:
        return text
    return text.replace(secret, "***")
