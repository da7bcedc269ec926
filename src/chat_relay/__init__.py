"""
Chat relay for chat-platform bot commands.

Accepts a text query over HTTP, forwards it to an OpenAI-compatible
chat-completion API and returns a trimmed plain-text reply.

Architecture: FastAPI facade + retry/timeout/fallback wrapper + bounded
per-channel conversation memory
"""

__version__ = "0.1.0"
