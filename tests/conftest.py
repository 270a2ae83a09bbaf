"""
Test configuration for the coin gateway tests.
"""

import sys
from pathlib import Path
from typing import Any

import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp.test_utils import TestServer

# Add project root to path before importing our modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Import our modules after path setup
from coin_gateway.upstream.client import UpstreamClient  # noqa: E402
from coin_gateway.upstream.settings import UpstreamSettings  # noqa: E402


class FakeUpstream:
    """Scriptable stand-in for the CoinGecko API.

    Each path is given a list of (status, body) replies. Replies are consumed in
    order and the last one repeats. A ``str`` body is sent as HTML.
    """

    def __init__(self) -> None:
        self.replies: dict[str, list[tuple[int, Any]]] = {}
        self.requests: list[tuple[str, dict[str, str]]] = []
        self.headers: list[dict[str, str]] = []
        self.base_url = ""

    def script(self, path: str, *replies: tuple[int, Any]) -> None:
        self.replies[path] = list(replies)

    def calls_to(self, path: str) -> int:
        return sum(1 for requested, _ in self.requests if requested == path)

    async def handle(self, request: web.Request) -> web.StreamResponse:
        self.requests.append((request.path, dict(request.query)))
        self.headers.append(dict(request.headers))

        queue = self.replies.get(request.path)
        if not queue:
            return web.json_response({"error": "coin not found"}, status=404)

        status, body = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(body, str):
            return web.Response(status=status, text=body, content_type="text/html")
        return web.json_response(body, status=status)


@pytest_asyncio.fixture
async def fake_upstream():
    """Run a fake upstream HTTP server for the duration of a test."""
    fake = FakeUpstream()
    app = web.Application()
    app.router.add_get("/{tail:.*}", fake.handle)

    server = TestServer(app)
    await server.start_server()
    fake.base_url = str(server.make_url("/"))
    try:
        yield fake
    finally:
        await server.close()


@pytest.fixture
def sleeps():
    """Collect the delays the client waits between attempts."""
    return []


@pytest.fixture
def upstream_settings(fake_upstream):
    """Upstream settings pointing at the fake server."""
    return UpstreamSettings(upstream_base_url=fake_upstream.base_url)


@pytest_asyncio.fixture
async def upstream_client(upstream_settings, sleeps):
    """Upstream client that records retry delays instead of sleeping."""

    async def record_sleep(delay: float) -> None:
        sleeps.append(delay)

    client = UpstreamClient(upstream_settings, sleep=record_sleep)
    try:
        yield client
    finally:
        await client.close()


@pytest.fixture
def coin_payload():
    """A trimmed CoinGecko /coins/{id} record."""
    return {
        "id": "bitcoin",
        "symbol": "btc",
        "name": "Bitcoin",
        "hashing_algorithm": "SHA-256",
        "market_data": {
            "current_price": {"usd": 27000, "php": 1530000},
            "ath": {"usd": 69000, "php": 3500000},
            "ath_date": {
                "usd": "2021-11-10T14:24:11.849Z",
                "php": "2021-11-10T14:24:11.849Z",
            },
            "atl": {"usd": 15500, "php": 6.6},
            "atl_date": {
                "usd": "2022-11-21T00:00:00.000Z",
                "php": "2013-07-05T00:00:00.000Z",
            },
            "market_cap": {"usd": 525000000000},
        },
    }


@pytest.fixture
def price_payload():
    """A CoinGecko /simple/price response for bitcoin."""
    return {"bitcoin": {"usd": 27000, "php": 1530000.5}}


@pytest.fixture
def chart_payload():
    """A CoinGecko /coins/{id}/market_chart response."""
    return {
        "prices": [[1694995200000, 26530.1], [1695081600000, 26760.8]],
        "market_caps": [[1694995200000, 516000000000], [1695081600000, 521000000000]],
        "total_volumes": [[1694995200000, 9100000000], [1695081600000, 10200000000]],
    }
