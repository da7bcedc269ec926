"""
FastAPI routes and HTTP plumbing.

- routes.py: /, /healthz, /gpt/{text}
- dependencies.py: builds and injects the chat service
- error_handlers.py: exception -> plain-text response mapping
- middleware.py: request tracing
- exceptions.py: ServerDeadlineExceeded
"""

from chat_relay.api import dependencies, error_handlers
from chat_relay.api.routes import router

__all__ = [
    "router",
    "dependencies",
    "error_handlers",
]
