"""
Optional context file loading.

The file supplies the system prompt in CHAT mode and the prefix context in
PROMPT mode. It is read once, awaited, during application startup; a
missing or unreadable file is logged and the built-in default is kept.
"""

import asyncio
from pathlib import Path

import structlog

from chat_relay.conversation.state import DEFAULT_SYSTEM_PROMPT

logger = structlog.get_logger(__name__)


async def load_context_file(path: str | Path, default: str = DEFAULT_SYSTEM_PROMPT) -> str:
    """
    Read `path` as UTF-8 text, falling back to `default`.

    Never raises for a missing or unreadable file.
    """
    context_path = Path(path)
    try:
        text = await asyncio.to_thread(context_path.read_text, encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(
            "Context file not loaded, using default prompt",
            path=str(context_path),
            error_type=type(e).__name__,
            error=str(e),
        )
        return default

    if not text.strip():
        logger.warning("Context file is empty, using default prompt", path=str(context_path))
        return default

    logger.info("Context file loaded", path=str(context_path), length=len(text))
    return text
