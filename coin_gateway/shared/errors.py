"""
Error hierarchy for the coin gateway.

Every error carries a stable ``code`` so the API layer can log and report it
without inspecting the concrete class.
"""

from typing import Final

ERROR_GATEWAY: Final[str] = "gateway_error"
ERROR_UPSTREAM: Final[str] = "upstream_error"
ERROR_RATE_LIMITED: Final[str] = "rate_limited"
ERROR_RETRIES_EXHAUSTED: Final[str] = "retries_exhausted"
ERROR_SHAPE_MISMATCH: Final[str] = "shape_mismatch"
ERROR_DEGENERATE_BASELINE: Final[str] = "degenerate_baseline"


class GatewayError(Exception):
    """Base class for every error raised by the gateway core."""

    code: str = ERROR_GATEWAY

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UpstreamError(GatewayError):
    """The upstream provider could not be reached or answered with an error."""

    code = ERROR_UPSTREAM

    def __init__(
        self, message: str, *, url: str | None = None, status: int | None = None
    ) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class RateLimitError(UpstreamError):
    """A single HTTP 429 response from the upstream provider."""

    code = ERROR_RATE_LIMITED


class RetriesExhaustedError(UpstreamError):
    """The upstream kept rate limiting us until every attempt was used."""

    code = ERROR_RETRIES_EXHAUSTED

    def __init__(self, message: str, *, url: str | None = None, attempts: int) -> None:
        super().__init__(message, url=url, status=429)
        self.attempts = attempts


class ShapeMismatchError(GatewayError):
    """An expected field is missing or unusable in a successful response."""

    code = ERROR_SHAPE_MISMATCH

    def __init__(self, field: str, message: str | None = None) -> None:
        super().__init__(message or f"Field '{field}' not found in upstream response")
        self.field = field


class DegenerateBaselineError(GatewayError):
    """A percentage was requested against a zero ATH or ATL price."""

    code = ERROR_DEGENERATE_BASELINE

    def __init__(self, baseline: str) -> None:
        super().__init__(
            f"Cannot compute performance relative to {baseline}: baseline price is 0"
        )
        self.baseline = baseline
