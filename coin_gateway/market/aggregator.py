"""
Aggregation of upstream market data into the gateway's derived views.
"""

import asyncio
import logging
from typing import Any, Final, TypeVar

from pydantic import BaseModel, ValidationError

from ..shared.errors import ShapeMismatchError
from ..shared.types import JSONValue
from ..upstream.client import UpstreamClient
from .models import CoinInfo, CoinPrice, CoinSummary, PricePoint, PriceQuote
from .performance import ZeroBaselinePolicy, compute_performance
from .settings import MarketSettings, market_settings

QUOTE_CURRENCIES: Final[tuple[str, ...]] = ("usd", "php")
CHART_CURRENCY: Final[str] = "usd"

ModelT = TypeVar("ModelT", bound=BaseModel)

logger = logging.getLogger(__name__)


def require(payload: Any, *path: str) -> Any:
    """
    Walk nested mappings and return the value at ``path``.

    Raises:
        ShapeMismatchError: If any key along the path is missing
    """
    value = payload
    for depth, key in enumerate(path, start=1):
        if not isinstance(value, dict) or key not in value:
            raise ShapeMismatchError(".".join(path[:depth]))
        value = value[key]
    return value


def require_number(value: Any, field: str) -> int | float:
    """
    Return ``value`` if it is a JSON number.

    Raises:
        ShapeMismatchError: If the upstream sent anything else, null included
    """
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ShapeMismatchError(
            field, f"Field '{field}' in upstream response is not a number: {value!r}"
        )
    return value


def build(model: type[ModelT], **fields: Any) -> ModelT:
    """
    Build a response model from upstream values.

    Raises:
        ShapeMismatchError: If a value has a type the model cannot hold
    """
    try:
        return model(**fields)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"])
        raise ShapeMismatchError(
            field,
            f"Field '{field}' in upstream response is invalid: {error['msg']}",
        ) from e


class MarketAggregator:
    """Builds price, chart, info and summary views from upstream calls."""

    def __init__(
        self, client: UpstreamClient, settings: MarketSettings | None = None
    ) -> None:
        """Initialize the aggregator."""
        self.client = client
        self.settings = settings or market_settings
        self.zero_baseline_policy = ZeroBaselinePolicy(
            self.settings.zero_baseline_policy
        )

    async def _fetch_quote(self, coin_id: str) -> PriceQuote:
        """Fetch the simple price of a coin and return its quote sub-object."""
        data = await self.client.fetch_json(
            "/simple/price",
            {"ids": coin_id, "vs_currencies": ",".join(QUOTE_CURRENCIES)},
        )
        return require(data, coin_id)

    async def _fetch_coin(self, coin_id: str) -> dict[str, Any]:
        """Fetch the full coin record."""
        return await self.client.fetch_json(f"/coins/{coin_id}")

    async def get_price(self, coin_id: str) -> CoinPrice:
        """Get the live price of a coin in every quote currency."""
        quote = await self._fetch_quote(coin_id)
        return build(CoinPrice, coin=coin_id, price=quote)

    async def get_chart(self, coin_id: str, days: str | None = None) -> JSONValue:
        """
        Get the historical USD market chart of a coin.

        The upstream series is returned untouched.

        Args:
            coin_id: Upstream asset id
            days: Chart range forwarded verbatim; defaults to the configured range
        """
        return await self.client.fetch_json(
            f"/coins/{coin_id}/market_chart",
            {
                "vs_currency": CHART_CURRENCY,
                "days": days or self.settings.default_chart_days,
            },
        )

    async def get_info(self, coin_id: str) -> CoinInfo:
        """Get the name, symbol and USD all-time extremes of a coin."""
        return self._project_info(await self._fetch_coin(coin_id))

    async def get_summary(self, coin_id: str) -> CoinSummary:
        """
        Join coin extremes with the live price and compute performance.

        The coin record and the simple price are fetched concurrently. If
        either call fails the other is cancelled and the first error is
        raised as is.

        Args:
            coin_id: Upstream asset id

        Returns:
            CoinSummary: The joined view with percentages relative to USD
        """
        try:
            async with asyncio.TaskGroup() as tg:
                coin_task = tg.create_task(self._fetch_coin(coin_id))
                quote_task = tg.create_task(self._fetch_quote(coin_id))
        except ExceptionGroup as eg:
            error = eg.exceptions[0]
            logger.error(f"Summary for {coin_id} failed: {error}")
            error.__suppress_context__ = True
            raise error

        info = self._project_info(coin_task.result())
        quote = quote_task.result()
        current_usd = require_number(require(quote, "usd"), f"{coin_id}.usd")

        return build(
            CoinSummary,
            name=info.name,
            symbol=info.symbol,
            current_price=quote,
            ath=build(PricePoint, price=info.ath, date=info.ath_date),
            atl=build(PricePoint, price=info.atl, date=info.atl_date),
            performance=compute_performance(
                current_usd,
                require_number(info.ath, "market_data.ath.usd"),
                require_number(info.atl, "market_data.atl.usd"),
                self.zero_baseline_policy,
            ),
        )

    @staticmethod
    def _project_info(coin: dict[str, Any]) -> CoinInfo:
        """Keep only the fields of a coin record that describe its extremes."""
        return build(
            CoinInfo,
            name=require(coin, "name"),
            symbol=require(coin, "symbol"),
            ath=require(coin, "market_data", "ath", "usd"),
            ath_date=require(coin, "market_data", "ath_date", "usd"),
            atl=require(coin, "market_data", "atl", "usd"),
            atl_date=require(coin, "market_data", "atl_date", "usd"),
        )
