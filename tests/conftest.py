"""Shared test fixtures and configuration for all tests."""

from pathlib import Path

import pytest

from chat_relay.config import Settings
from tests.fixtures import TEST_API_KEY


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Test settings with fast backoff and no context file.

    Override specific settings in individual tests with model_copy:
        settings = test_settings.model_copy(update={"OPENAI_RETRIES": 2})
    """
    return Settings(
        # === Application ===
        APP_NAME="Chat Relay (Test)",
        LOG_LEVEL="DEBUG",
        ENVIRONMENT="development",

        # === Upstream ===
        OPENAI_API_KEY=TEST_API_KEY,
        OPENAI_BASE_URL="http://upstream.test/v1",
        OPENAI_MODEL="primary-model",
        FALLBACK_MODEL="fallback-model",

        # === Mode & memory ===
        GPT_MODE="CHAT",
        HISTORY_LENGTH=6,
        CONTEXT_FILE_PATH=str(tmp_path / "missing_context.txt"),

        # === Retry (millisecond delays keep tests fast) ===
        OPENAI_RETRIES=3,
        BACKOFF_BASE_DELAY_MS=1,
        BACKOFF_FACTOR=2.0,
        BACKOFF_JITTER_MS=0,
        OPENAI_TIMEOUT_MS=5000,
        SERVER_TIMEOUT_MS=10000,

        PROMETHEUS_ENABLED=False,  # Avoid duplicate collector registration across apps
    )
