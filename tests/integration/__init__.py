"""
Integration tests for the chat relay.

Exercise the full FastAPI app (routing, lifespan, exception handlers) with a
scripted completion client in place of the real upstream.
"""
