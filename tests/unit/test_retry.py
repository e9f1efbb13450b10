"""Tests for submission retry policies."""

import pytest

from statsd_cloudwatch.core.ports import RetryPolicy
from statsd_cloudwatch.core.retry import BackoffRetry, NoRetry


class TestNoRetry:
    """Tests for NoRetry."""

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_implements_retry_policy(self) -> None:
        """Satisfies the RetryPolicy protocol."""
        assert isinstance(NoRetry(), RetryPolicy)

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_never_retries(self) -> None:
        """Every failure is final."""
        assert NoRetry().next_delay(1, RuntimeError("boom")) is None


class TestBackoffRetry:
    """Tests for BackoffRetry."""

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_implements_retry_policy(self) -> None:
        """Satisfies the RetryPolicy protocol."""
        assert isinstance(BackoffRetry(), RetryPolicy)

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_delays_grow_until_attempts_exhausted(self) -> None:
        """Delays grow by the multiplier, then stop once attempts run out."""
        policy = BackoffRetry(max_attempts=4, base_delay=1.0, multiplier=2.0)
        error = RuntimeError("boom")
        delays = [policy.next_delay(attempt, error) for attempt in range(1, 5)]
        assert delays == [1.0, 2.0, 4.0, None]

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_delay_is_capped(self) -> None:
        """No delay exceeds max_delay."""
        policy = BackoffRetry(max_attempts=10, base_delay=1.0, max_delay=3.0)
        assert policy.next_delay(5, RuntimeError()) == 3.0

    @pytest.mark.core
    @pytest.mark.tier(0)
    def test_rejects_zero_attempts(self) -> None:
        """max_attempts below one is rejected."""
        with pytest.raises(ValueError, match="max_attempts"):
            BackoffRetry(max_attempts=0)
