"""
Market data models produced by the aggregator.

Upstream prices are kept as the JSON values the provider sent, so an integer
price stays an integer and a missing price stays ``null``.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from ..shared.types import JSONValue

PriceQuote = dict[str, JSONValue]


class CoinPrice(BaseModel):
    """Live price of a coin in every supported quote currency."""

    coin: Annotated[str, Field(description="Upstream asset id")]
    price: Annotated[PriceQuote, Field(description="Price keyed by quote currency")]


class CoinInfo(BaseModel):
    """All-time extremes of a coin, in USD."""

    model_config = ConfigDict(frozen=True)

    name: Annotated[str, Field(description="Coin name")]
    symbol: Annotated[str, Field(description="Ticker symbol")]
    ath: Annotated[JSONValue, Field(description="All-time-high price in USD")]
    ath_date: Annotated[
        str | None, Field(description="When the all-time high was set")
    ]
    atl: Annotated[JSONValue, Field(description="All-time-low price in USD")]
    atl_date: Annotated[str | None, Field(description="When the all-time low was set")]


class PricePoint(BaseModel):
    """A price and the date it was recorded."""

    price: JSONValue
    date: str | None


class Performance(BaseModel):
    """Distance of the current USD price from its all-time extremes."""

    percent_below_ath: Annotated[
        str | None, Field(description="Percent below the all-time high, e.g. '60.87%'")
    ]
    percent_above_atl: Annotated[
        str | None, Field(description="Percent above the all-time low, e.g. '74.19%'")
    ]


class CoinSummary(BaseModel):
    """Extremes joined with the live price and derived performance."""

    name: str
    symbol: str
    current_price: PriceQuote
    ath: PricePoint
    atl: PricePoint
    performance: Performance
