"""
Backoff policy for completion calls.

Pure decision logic: given how many attempts have failed and what the last
failure looked like, decide whether to try again and how long to wait.

    delay_ms = base_delay_ms * factor ** (attempt - 1) + uniform(0, jitter_ms)
"""

import random
from dataclasses import dataclass
from typing import Callable, Optional

RETRIABLE_STATUSES = frozenset({408, 409, 425, 429, 500, 502, 503, 504})

RETRIABLE_CODES = frozenset({
    "ECONNRESET",
    "EPIPE",
    "CONNECT_TIMEOUT",
    "HEADERS_TIMEOUT",
    "BODY_TIMEOUT",
    "ETIMEDOUT",
    "ESOCKETTIMEDOUT",
})


@dataclass(frozen=True)
class ErrorSignal:
    """
    Classification input derived from one failed attempt.

    Attributes:
        status_code: HTTP status from the upstream, if any
        code: Error code string (errno-style or upstream code), if any
        message: Error message for diagnostics
    """

    status_code: Optional[int] = None
    code: Optional[str] = None
    message: str = ""

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorSignal":
        status = getattr(exc, "status_code", None)
        if status is None:
            status = getattr(exc, "status", None)
        code = getattr(exc, "code", None)
        return cls(
            status_code=status if isinstance(status, int) else None,
            code=code if isinstance(code, str) else None,
            message=str(exc),
        )

    @property
    def cause(self) -> str:
        """Short label for metrics: the status if known, else the code."""
        if self.status_code is not None:
            return str(self.status_code)
        return self.code or "unknown"


@dataclass(frozen=True)
class RetryDecision:
    retry: bool
    delay_ms: int = 0


class BackoffPolicy:
    """
    Exponential backoff with additive jitter and a bounded retry budget.

    Total attempts allowed = max_retries + 1.
    """

    def __init__(
        self,
        max_retries: int = 3,
        base_delay_ms: int = 400,
        factor: float = 2.0,
        jitter_ms: int = 200,
        rng: Callable[[], float] = random.random,
    ):
        """
        Args:
            max_retries: Retries allowed after the first attempt
            base_delay_ms: Delay before the first retry (without jitter)
            factor: Multiplier applied per further retry
            jitter_ms: Upper bound of the uniform random delay added on top
            rng: Source of uniform floats in [0, 1)
        """
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.factor = factor
        self.jitter_ms = jitter_ms
        self._rng = rng

    @staticmethod
    def is_retriable(signal: ErrorSignal) -> bool:
        return signal.status_code in RETRIABLE_STATUSES or signal.code in RETRIABLE_CODES

    def base_delay_for(self, attempt: int) -> float:
        """Deterministic part of the delay before retry number `attempt`."""
        return self.base_delay_ms * self.factor ** (attempt - 1)

    def decide(self, attempt: int, signal: ErrorSignal) -> RetryDecision:
        """
        Decide whether to retry after `attempt` failed attempts (1-based).
        """
        if attempt < 1:
            raise ValueError("attempt is 1-based")
        if not self.is_retriable(signal) or attempt > self.max_retries:
            return RetryDecision(retry=False)

        delay = self.base_delay_for(attempt) + self._rng() * self.jitter_ms
        return RetryDecision(retry=True, delay_ms=round(delay))

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(max_retries={self.max_retries}, "
            f"base_delay_ms={self.base_delay_ms}, factor={self.factor}, "
            f"jitter_ms={self.jitter_ms})"
        )
