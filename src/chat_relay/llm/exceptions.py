"""
Custom exceptions for the upstream completion client.

Every failure of a completion call surfaces as an LLMClientError carrying
an optional HTTP status and an optional errno-style error code. The retry
layer reads those two fields to decide whether an attempt is worth
repeating; the API layer reads them to pick the response status.
"""


class LLMClientError(Exception):
    """
    Base exception for all completion client errors.

    Attributes:
        message: Human-readable description (never contains the credential)
        details: Extra context for logs
        status_code: HTTP status returned by the upstream, if any
        code: Error code string (upstream error code or transport errno name)
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        status_code: int | None = None,
        code: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.status_code = status_code
        self.code = code


class UpstreamError(LLMClientError):
    """
    Raised when the completion API answers with an HTTP error status.

    Whether it is transient (429, 5xx...) or terminal (400, 401, 404...)
    is decided by the backoff policy, not here.
    """
    pass


class LLMConnectionError(LLMClientError):
    """
    Raised when the request never produced an HTTP response.

    `code` names the transport failure (ECONNRESET, CONNECT_TIMEOUT, ...).
    """
    pass


class LLMResponseError(LLMClientError):
    """Raised when the upstream body cannot be parsed as a chat completion."""
    pass
