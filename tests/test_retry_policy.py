"""
Unit tests for the retry policy: status classification, backoff schedule, attempt bookkeeping.
"""

import random

import pytest

from groundgen.services.retry_policy import (
    RetryPolicy,
    RetryState,
    StatusClass,
    classify_status,
    exponential_backoff,
)


class TestClassifyStatus:
    """Tests for classify_status()."""

    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_2xx_is_success(self, status: int) -> None:
        assert classify_status(status) is StatusClass.SUCCESS

    @pytest.mark.parametrize("status", [429, 500, 502, 503, 504, 599])
    def test_429_and_5xx_are_retryable(self, status: int) -> None:
        assert classify_status(status) is StatusClass.RETRYABLE

    @pytest.mark.parametrize("status", [301, 400, 401, 403, 404, 409, 422])
    def test_other_statuses_are_terminal(self, status: int) -> None:
        assert classify_status(status) is StatusClass.TERMINAL


class TestExponentialBackoff:
    """Tests for exponential_backoff()."""

    def test_base_doubles_each_attempt_with_bounded_jitter(self) -> None:
        backoff = exponential_backoff(1.0, 1.0, rng=random.Random(0))
        for attempt, base in enumerate([1.0, 2.0, 4.0, 8.0, 16.0]):
            delay = backoff(attempt)
            assert base <= delay <= base + 1.0

    def test_zero_jitter_is_exact(self) -> None:
        backoff = exponential_backoff(0.5, 0.0)
        assert [backoff(i) for i in range(3)] == [0.5, 1.0, 2.0]

    def test_same_seed_same_schedule(self) -> None:
        first = exponential_backoff(rng=random.Random(42))
        second = exponential_backoff(rng=random.Random(42))
        assert [first(i) for i in range(5)] == [second(i) for i in range(5)]

    def test_negative_attempt_rejected(self) -> None:
        with pytest.raises(ValueError):
            exponential_backoff()(-1)


class TestRetryState:
    """Tests for RetryState and RetryPolicy bookkeeping."""

    def test_advance_increments_by_one_until_last(self) -> None:
        state = RetryPolicy(max_attempts=5).start()
        seen = [state.attempt_index]
        while not state.is_last_attempt:
            state = state.advance()
            seen.append(state.attempt_index)
        assert seen == [0, 1, 2, 3, 4]

    def test_advance_past_last_attempt_raises(self) -> None:
        state = RetryState(max_attempts=2, attempt_index=1)
        assert state.is_last_attempt
        with pytest.raises(ValueError):
            state.advance()

    def test_single_attempt_policy_starts_on_last_attempt(self) -> None:
        assert RetryPolicy(max_attempts=1).start().is_last_attempt

    def test_policy_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_policy_delay_uses_backoff_function(self) -> None:
        policy = RetryPolicy(max_attempts=3, backoff=lambda attempt: attempt * 10.0)
        assert policy.delay_for(RetryState(max_attempts=3, attempt_index=2)) == 20.0
