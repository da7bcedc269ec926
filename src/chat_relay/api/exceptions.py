"""
API layer exceptions.
"""


class ServerDeadlineExceeded(Exception):
    """
    Raised when a request's own response deadline elapses.

    The work behind the request is not cancelled; only the wait is abandoned.

    Attributes:
        deadline_ms: The server response deadline that elapsed
    """

    def __init__(self, deadline_ms: int) -> None:
        self.deadline_ms = deadline_ms
        super().__init__(f"Server response deadline of {deadline_ms}ms exceeded")
