"""
Retry layer exceptions.
"""


class ClientTimeout(Exception):
    """
    Raised when the client-side deadline of a completion call elapses.

    The deadline covers the whole retry sequence, so this replaces whatever
    upstream error the in-flight attempt would eventually have produced.

    Attributes:
        timeout_ms: The budget that elapsed
    """

    def __init__(self, timeout_ms: int) -> None:
        self.timeout_ms = timeout_ms
        self.status_code = None
        self.code = "CLIENT_TIMEOUT"
        super().__init__(f"Client timeout after {timeout_ms}ms")
