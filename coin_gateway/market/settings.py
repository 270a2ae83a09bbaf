"""
Market aggregation settings using Pydantic for environment-based configuration.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MarketSettings(BaseSettings):
    """Configuration for how market views are derived."""

    zero_baseline_policy: Literal["error", "null"] = Field(
        default="error",
        description="What to do when the ATH or ATL price used as a baseline is 0",
    )

    default_chart_days: str = Field(
        default="365", description="Chart range used when no days are requested"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


# Create a global instance
market_settings = MarketSettings()
