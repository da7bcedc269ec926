"""
Configuration settings for the chat relay.

All settings are loaded from environment variables with sensible defaults.
Use .env file for local development.
"""

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from chat_relay.models.enums import GptMode


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Application ===
    APP_NAME: str = "Chat Relay"
    APP_VERSION: str = "0.1.0"
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
    HOST: str = "0.0.0.0"
    PORT: int = 3000

    # === Upstream completion API ===
    OPENAI_API_KEY: SecretStr = SecretStr("")
    OPENAI_BASE_URL: str = "https://api.openai.com/v1"
    OPENAI_MODEL: str = "primary-model"
    FALLBACK_MODEL: str = "fallback-model"  # empty string disables fallback

    # === Mode & memory ===
    GPT_MODE: GptMode = GptMode.CHAT
    HISTORY_LENGTH: int = 6  # exchange pairs kept in CHAT mode
    MAX_CONVERSATIONS: int = 1000  # distinct channels remembered at once
    CONTEXT_FILE_PATH: str = "file_context.txt"

    # === Generation parameters ===
    TEMPERATURE: float = 0.5
    CHAT_MAX_TOKENS: int = 592
    PROMPT_MAX_TOKENS: int = 256
    MAX_REPLY_CHARS: int = 1000  # chat transport message ceiling

    # === Retry, backoff & timeouts ===
    OPENAI_RETRIES: int = 3
    BACKOFF_BASE_DELAY_MS: int = 400
    BACKOFF_FACTOR: float = 2.0
    BACKOFF_JITTER_MS: int = 200
    OPENAI_TIMEOUT_MS: int = 20000  # covers the whole retry sequence
    SERVER_TIMEOUT_MS: int = 25000  # must exceed OPENAI_TIMEOUT_MS

    # === Monitoring ===
    PROMETHEUS_ENABLED: bool = True

    @field_validator("GPT_MODE", mode="before")
    @classmethod
    def _normalize_mode(cls, value: object) -> object:
        """Anything other than CHAT selects single-shot PROMPT mode."""
        if isinstance(value, GptMode):
            return value
        if str(value).strip().upper() == GptMode.CHAT.value:
            return GptMode.CHAT
        return GptMode.PROMPT

    @property
    def fallback_model(self) -> str | None:
        return self.FALLBACK_MODEL.strip() or None


# Global settings instance
settings = Settings()
