"""
Retry policy for upstream HTTP calls: status classification, backoff schedule,
and per-call attempt bookkeeping.

Responsibility: Decide whether an attempt outcome is final and how long to
wait before the next one. No I/O here; the client does the sleeping.
"""

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable

from groundgen.core.config import GENERATION_MAX_ATTEMPTS, RETRY_BASE_DELAY, RETRY_MAX_JITTER

Backoff = Callable[[int], float]


class StatusClass(Enum):
    SUCCESS = "success"
    RETRYABLE = "retryable"
    TERMINAL = "terminal"


def classify_status(status_code: int) -> StatusClass:
    """2xx succeeds; 429 and 5xx are worth retrying; everything else is final."""
    if 200 <= status_code < 300:
        return StatusClass.SUCCESS
    if status_code == 429 or status_code >= 500:
        return StatusClass.RETRYABLE
    return StatusClass.TERMINAL


def exponential_backoff(
    base_delay: float = RETRY_BASE_DELAY,
    max_jitter: float = RETRY_MAX_JITTER,
    rng: random.Random | None = None,
) -> Backoff:
    """
    Return attempt_index -> seconds: base_delay * 2**attempt_index plus
    uniform jitter in [0, max_jitter]. With the defaults the base grows
    1s, 2s, 4s, 8s, 16s over attempts 0-4.
    """
    source = rng or random.Random()

    def delay_for(attempt_index: int) -> float:
        if attempt_index < 0:
            raise ValueError(f"attempt_index must be >= 0, got {attempt_index}")
        return base_delay * (2 ** attempt_index) + source.uniform(0, max_jitter)

    return delay_for


@dataclass(frozen=True)
class RetryState:
    """Attempt bookkeeping for a single call; discarded when the call ends."""

    max_attempts: int
    attempt_index: int = 0

    @property
    def is_last_attempt(self) -> bool:
        return self.attempt_index >= self.max_attempts - 1

    @property
    def attempt_number(self) -> int:
        return self.attempt_index + 1

    def advance(self) -> "RetryState":
        if self.is_last_attempt:
            raise ValueError(f"no attempts left after attempt {self.attempt_number}/{self.max_attempts}")
        return RetryState(max_attempts=self.max_attempts, attempt_index=self.attempt_index + 1)


@dataclass(frozen=True)
class RetryPolicy:
    """Max attempts plus the backoff function; shared by every caller of the client."""

    max_attempts: int = GENERATION_MAX_ATTEMPTS
    backoff: Backoff = field(default_factory=exponential_backoff)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def start(self) -> RetryState:
        return RetryState(max_attempts=self.max_attempts)

    def delay_for(self, state: RetryState) -> float:
        return self.backoff(state.attempt_index)
