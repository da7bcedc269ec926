"""
FastAPI application entry point for the chat relay.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from chat_relay.api.dependencies import build_chat_service, build_llm_client
from chat_relay.api.error_handlers import EXCEPTION_HANDLERS
from chat_relay.api.middleware import RequestTracingMiddleware
from chat_relay.api.routes import router
from chat_relay.config import Settings, settings as default_settings
from chat_relay.conversation.context_loader import load_context_file
from chat_relay.conversation.state import DEFAULT_SYSTEM_PROMPT
from chat_relay.llm.base_client import BaseLLMClient
from chat_relay.logging_config import configure_logging

# Configure structured logging before the app is built
configure_logging(
    default_settings.LOG_LEVEL,
    default_settings.ENVIRONMENT,
    secret=default_settings.OPENAI_API_KEY.get_secret_value(),
)
logger = structlog.get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    llm_client: Optional[BaseLLMClient] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Application settings (defaults to the environment-loaded instance)
        llm_client: Completion client to use instead of the OpenAI client;
            an injected client is not closed on shutdown

    Returns:
        Configured FastAPI app
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        client = llm_client or build_llm_client(settings)

        logger.info(
            "Application startup",
            version=settings.APP_VERSION,
            environment=settings.ENVIRONMENT,
            mode=settings.GPT_MODE.value,
            history_length=settings.HISTORY_LENGTH,
            model=settings.OPENAI_MODEL,
            fallback_model=settings.fallback_model,
            retries=settings.OPENAI_RETRIES,
            openai_timeout_ms=settings.OPENAI_TIMEOUT_MS,
            server_timeout_ms=settings.SERVER_TIMEOUT_MS,
            api_key_present=bool(settings.OPENAI_API_KEY.get_secret_value()),
        )
        if settings.SERVER_TIMEOUT_MS <= settings.OPENAI_TIMEOUT_MS:
            logger.warning(
                "Server deadline does not exceed completion timeout",
                openai_timeout_ms=settings.OPENAI_TIMEOUT_MS,
                server_timeout_ms=settings.SERVER_TIMEOUT_MS,
            )

        service = build_chat_service(settings, client)
        context = await load_context_file(settings.CONTEXT_FILE_PATH, default=DEFAULT_SYSTEM_PROMPT)
        service.apply_context(context)

        app.state.settings = settings
        app.state.chat_service = service
        logger.info("Application startup complete")

        yield

        logger.info("Application shutdown")
        if llm_client is None:
            await client.close()
        logger.info("Application shutdown complete")

    app = FastAPI(
        title=settings.APP_NAME,
        description="Relays chat bot queries to a chat-completion API with retries and model fallback",
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # Request tracing middleware (request_id in all logs)
    app.add_middleware(RequestTracingMiddleware)

    for exc_class, handler in EXCEPTION_HANDLERS.items():
        app.add_exception_handler(exc_class, handler)

    app.include_router(router)

    if settings.PROMETHEUS_ENABLED:
        Instrumentator().instrument(app).expose(app, include_in_schema=False)

    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import uvicorn

    uvicorn.run(
        "chat_relay.main:app",
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_config=None,
    )


if __name__ == "__main__":
    run()
