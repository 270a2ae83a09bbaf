"""
Retry policy for rate-limited upstream requests.
"""

import random
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from .settings import UpstreamSettings


class RetryStrategy(str, Enum):
    """How the delay between attempts evolves."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"
    JITTERED = "jittered"


class RetryPolicy(BaseModel):
    """Bounded retry policy applied to HTTP 429 responses."""

    model_config = ConfigDict(frozen=True)

    max_attempts: Annotated[int, Field(ge=1, description="Total attempts")] = 3
    delay: Annotated[
        float, Field(ge=0, description="Base delay in seconds between attempts")
    ] = 2.0
    strategy: Annotated[
        RetryStrategy, Field(description="Delay strategy")
    ] = RetryStrategy.FIXED
    multiplier: Annotated[
        float, Field(ge=1, description="Growth factor for exponential delays")
    ] = 2.0
    max_delay: Annotated[
        float, Field(ge=0, description="Upper bound for a single delay")
    ] = 30.0

    @classmethod
    def from_settings(cls, settings: UpstreamSettings) -> "RetryPolicy":
        """Build the policy from upstream settings."""
        return cls(
            max_attempts=settings.max_retries,
            delay=settings.retry_delay,
            strategy=RetryStrategy(settings.retry_strategy),
            multiplier=settings.retry_multiplier,
            max_delay=settings.retry_max_delay,
        )

    def with_overrides(
        self, max_attempts: int | None = None, delay: float | None = None
    ) -> "RetryPolicy":
        """Return a copy with per-call overrides applied."""
        update: dict[str, int | float] = {}
        if max_attempts is not None:
            update["max_attempts"] = max_attempts
        if delay is not None:
            update["delay"] = delay
        if not update:
            return self
        return self.model_validate(self.model_dump() | update)

    def delay_for(self, attempt: int) -> float:
        """
        Seconds to wait after a failed attempt.

        Args:
            attempt: 1-based number of the attempt that just failed

        Returns:
            Delay in seconds before the next attempt
        """
        match self.strategy:
            case RetryStrategy.FIXED:
                return self.delay
            case RetryStrategy.EXPONENTIAL:
                return self._exponential(attempt)
            case RetryStrategy.JITTERED:
                return random.uniform(0, self._exponential(attempt))

    def _exponential(self, attempt: int) -> float:
        return min(self.delay * self.multiplier ** (attempt - 1), self.max_delay)
