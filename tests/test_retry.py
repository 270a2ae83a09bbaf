"""
Tests for the retry policy.
"""

import pytest
from pydantic import ValidationError

from coin_gateway.upstream.retry import RetryPolicy, RetryStrategy
from coin_gateway.upstream.settings import UpstreamSettings


class TestRetryPolicy:
    """Test cases for RetryPolicy delays and overrides."""

    def test_defaults_match_fixed_two_second_policy(self):
        """Test the default policy: three attempts, two seconds apart."""
        policy = RetryPolicy()
        assert policy.max_attempts == 3
        assert policy.strategy is RetryStrategy.FIXED
        assert [policy.delay_for(n) for n in (1, 2, 3)] == [2.0, 2.0, 2.0]

    @pytest.mark.parametrize(
        "attempt,expected",
        [(1, 0.5), (2, 1.0), (3, 2.0), (4, 4.0), (5, 5.0), (10, 5.0)],
    )
    def test_exponential_delays_are_capped(self, attempt, expected):
        """Test exponential growth up to max_delay."""
        policy = RetryPolicy(
            delay=0.5, strategy=RetryStrategy.EXPONENTIAL, max_delay=5.0
        )
        assert policy.delay_for(attempt) == expected

    def test_jittered_delay_stays_within_exponential_bound(self):
        """Test that jittered delays never exceed the exponential delay."""
        policy = RetryPolicy(delay=1.0, strategy=RetryStrategy.JITTERED)
        for attempt in range(1, 6):
            for _ in range(20):
                assert 0 <= policy.delay_for(attempt) <= 2.0 ** (attempt - 1)

    def test_with_overrides(self):
        """Test per-call overrides leave the original policy untouched."""
        policy = RetryPolicy(strategy=RetryStrategy.EXPONENTIAL)
        overridden = policy.with_overrides(max_attempts=5, delay=0.1)

        assert overridden.max_attempts == 5
        assert overridden.delay == 0.1
        assert overridden.strategy is RetryStrategy.EXPONENTIAL
        assert policy.max_attempts == 3
        assert policy.with_overrides() is policy

    def test_rejects_zero_attempts(self):
        """Test that at least one attempt is required."""
        with pytest.raises(ValidationError):
            RetryPolicy(max_attempts=0)
        with pytest.raises(ValidationError):
            RetryPolicy().with_overrides(max_attempts=0)

    def test_from_settings(self):
        """Test building the policy from upstream settings."""
        settings = UpstreamSettings(
            max_retries=4,
            retry_delay=0.25,
            retry_strategy="jittered",
            retry_max_delay=3.0,
        )
        policy = RetryPolicy.from_settings(settings)

        assert policy.max_attempts == 4
        assert policy.delay == 0.25
        assert policy.strategy is RetryStrategy.JITTERED
        assert policy.max_delay == 3.0
