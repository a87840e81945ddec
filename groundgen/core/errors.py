"""
Application errors for clean API error handling.

Use ServiceUnavailableError when a dependency (the Gemini API key, the upstream
endpoint) is misconfigured so the API can return 503 with a user-facing message.
GenerationError is the single terminal error of the generation client; its
kind says which failure it is.
"""

from enum import Enum
from typing import Any


class ServiceUnavailableError(Exception):
    """Raised when a required service (e.g. the generation API key) is unavailable or misconfigured."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ErrorKind(str, Enum):
    """Terminal outcomes of a generate() call."""

    INVALID_REQUEST = "invalid_request"
    UPSTREAM_REJECTED = "upstream_rejected"
    RETRIES_EXHAUSTED = "retries_exhausted"
    TRANSPORT_FAILURE = "transport_failure"
    EMPTY_GENERATION = "empty_generation"
    CANCELLED = "cancelled"


class GenerationError(Exception):
    """
    Raised by the generation client for every terminal failure.

    status_code and body carry the upstream HTTP detail when there was one;
    cause holds the underlying transport exception for TRANSPORT_FAILURE.
    """

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        *,
        status_code: int | None = None,
        body: Any = None,
        cause: BaseException | None = None,
    ) -> None:
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.body = body
        self.cause = cause
        super().__init__(message)

    def __repr__(self) -> str:
        return f"GenerationError(kind={self.kind.value!r}, status_code={self.status_code!r}, message={self.message!r})"
