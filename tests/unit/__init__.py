"""
Unit tests for the chat relay.

Test individual components in isolation:
- Backoff policy, timeout race, resilient invoker, fallback orchestrator
- Conversation memory and context loading
- Upstream client error mapping (httpx MockTransport)
- Chat service and text utilities
"""
