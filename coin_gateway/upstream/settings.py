"""
Upstream provider settings using Pydantic for environment-based configuration.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class UpstreamSettings(BaseSettings):
    """Configuration for the upstream market-data provider and its retry policy."""

    upstream_base_url: str = Field(
        default="https://api.coingecko.com/api/v3",
        description="CoinGecko API base URL",
    )

    upstream_api_key: str | None = Field(
        default=None, description="Optional CoinGecko demo API key"
    )

    request_timeout: float = Field(
        default=10.0, gt=0, description="Timeout in seconds for a single request"
    )

    max_retries: int = Field(
        default=3, ge=1, description="Total attempts for a rate-limited request"
    )

    retry_delay: float = Field(
        default=2.0, ge=0, description="Delay in seconds before retrying after a 429"
    )

    retry_strategy: Literal["fixed", "exponential", "jittered"] = Field(
        default="fixed", description="How the retry delay evolves between attempts"
    )

    retry_multiplier: float = Field(
        default=2.0, ge=1, description="Growth factor for exponential delays"
    )

    retry_max_delay: float = Field(
        default=30.0, ge=0, description="Upper bound in seconds for a single delay"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Create a global instance
upstream_settings = UpstreamSettings()
