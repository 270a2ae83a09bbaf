"""FastAPI application exposing derived cryptocurrency market data."""

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Annotated, Final

import uvicorn
from fastapi import Depends, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..market.aggregator import MarketAggregator
from ..market.models import CoinInfo, CoinPrice, CoinSummary
from ..market.settings import MarketSettings, market_settings
from ..shared.errors import GatewayError
from ..shared.types import JSONValue
from ..upstream.client import UpstreamClient
from ..upstream.settings import UpstreamSettings, upstream_settings
from .models import ErrorResponse, HealthResponse
from .settings import APISettings, api_settings

ERROR_NOT_FOUND_MESSAGE: Final[str] = "Endpoint not found"

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Create the upstream client and aggregator for the app's lifetime."""
    client = UpstreamClient(app.state.upstream_settings)
    app.state.aggregator = MarketAggregator(client, app.state.market_settings)
    logger.info(
        f"Using upstream {client.base_url} "
        f"(max {client.retry_policy.max_attempts} attempts on rate limiting)"
    )
    try:
        yield
    finally:
        await client.close()


def get_aggregator(request: Request) -> MarketAggregator:
    """
    Dependency function to provide the aggregator.

    Returns:
        MarketAggregator: Aggregator bound to the app's upstream client
    """
    return request.app.state.aggregator


AggregatorDep = Annotated[MarketAggregator, Depends(get_aggregator)]


async def gateway_error_handler(_: Request, exc: Exception) -> JSONResponse:
    """Map core failures to a 500 response carrying the error message.

    Returns:
        JSONResponse: Error response in JSON format
    """
    code = getattr(exc, "code", "internal_error")
    logger.error(f"Request failed ({code}): {exc}", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error=str(exc)).model_dump(),
    )


async def unexpected_error_middleware(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Turn errors no exception handler claimed into the same 500 response.

    Runs inside the CORS middleware so these responses keep their CORS headers.
    """
    try:
        return await call_next(request)
    except Exception as e:
        return await gateway_error_handler(request, e)


async def not_found_handler(_: Request, __: Exception) -> JSONResponse:
    """Handle 404 errors.

    Returns:
        JSONResponse: Error response in JSON format
    """
    return JSONResponse(
        status_code=404,
        content=ErrorResponse(error=ERROR_NOT_FOUND_MESSAGE).model_dump(),
    )


async def root() -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(message="Coin Gateway API is running", status="healthy")


async def get_price(coin_id: str, aggregator: AggregatorDep) -> CoinPrice:
    """Current price of a coin in USD and PHP."""
    return await aggregator.get_price(coin_id)


async def get_market_chart(
    coin_id: str,
    aggregator: AggregatorDep,
    days: Annotated[
        str | None,
        Query(
            description="Number of days of history, forwarded to the upstream",
            examples=["1", "30", "365", "max"],
        ),
    ] = None,
) -> JSONValue:
    """Historical USD market chart of a coin, as returned by the upstream."""
    return await aggregator.get_chart(coin_id, days)


async def get_info(coin_id: str, aggregator: AggregatorDep) -> CoinInfo:
    """Name, symbol and USD all-time high/low of a coin."""
    return await aggregator.get_info(coin_id)


async def get_summary(coin_id: str, aggregator: AggregatorDep) -> CoinSummary:
    """
    Current price, all-time extremes and performance of a coin.

    Performance percentages are computed against the current USD price.
    """
    return await aggregator.get_summary(coin_id)


def create_app(
    settings: APISettings | None = None,
    upstream: UpstreamSettings | None = None,
    market: MarketSettings | None = None,
) -> FastAPI:
    """
    Build the FastAPI application from explicit configuration.

    Args:
        settings: Server settings (CORS policy)
        upstream: Upstream provider and retry settings
        market: Settings for derived market views

    Returns:
        FastAPI: The configured application
    """
    settings = settings or api_settings

    app = FastAPI(
        title="Coin Gateway API",
        description="Spot price, history, extremes and summary of crypto assets",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.upstream_settings = upstream or upstream_settings
    app.state.market_settings = market or market_settings

    # The last middleware added is the outermost one.
    app.add_middleware(BaseHTTPMiddleware, dispatch=unexpected_error_middleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    app.add_exception_handler(GatewayError, gateway_error_handler)
    app.add_exception_handler(404, not_found_handler)

    app.add_api_route("/", root, methods=["GET"], response_model=HealthResponse)
    app.add_api_route(
        "/crypto/{coin_id}/price",
        get_price,
        methods=["GET"],
        response_model=CoinPrice,
        responses={500: {"model": ErrorResponse}},
    )
    app.add_api_route(
        "/crypto/{coin_id}/market_chart",
        get_market_chart,
        methods=["GET"],
        response_model=None,
        responses={500: {"model": ErrorResponse}},
    )
    app.add_api_route(
        "/crypto/{coin_id}/info",
        get_info,
        methods=["GET"],
        response_model=CoinInfo,
        responses={500: {"model": ErrorResponse}},
    )
    app.add_api_route(
        "/crypto/{coin_id}/summary",
        get_summary,
        methods=["GET"],
        response_model=CoinSummary,
        responses={500: {"model": ErrorResponse}},
    )

    return app


app = create_app()


async def main() -> None:
    """Main entry point for the API server."""
    config = uvicorn.Config(
        app,
        host=api_settings.api_host,
        port=api_settings.api_port,
        log_level=api_settings.log_level.lower(),
    )
    server = uvicorn.Server(config)
    logger.info(f"Coin Gateway listening on port {api_settings.api_port}")
    await server.serve()


if __name__ == "__main__":
    import asyncio

    asyncio.run(main())
