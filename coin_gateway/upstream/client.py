"""
HTTP client for the CoinGecko REST API with retry on rate limiting.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Final

import aiohttp

from ..shared.errors import RateLimitError, RetriesExhaustedError, UpstreamError
from ..shared.types import JSONValue, QueryParams
from .retry import RetryPolicy
from .settings import UpstreamSettings, upstream_settings

HTTP_TOO_MANY_REQUESTS: Final[int] = 429
API_KEY_HEADER: Final[str] = "x-cg-demo-api-key"

logger = logging.getLogger(__name__)


class UpstreamClient:
    """Async JSON client for the upstream market-data provider."""

    def __init__(
        self,
        settings: UpstreamSettings | None = None,
        retry_policy: RetryPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        """Initialize the upstream client."""
        self.settings = settings or upstream_settings
        self.base_url = self.settings.upstream_base_url.rstrip("/")
        self.retry_policy = retry_policy or RetryPolicy.from_settings(self.settings)
        self._sleep = sleep
        self._session: aiohttp.ClientSession | None = None

    async def __aenter__(self) -> "UpstreamClient":
        await self._get_session()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the pooled HTTP session."""
        if self._session is None or self._session.closed:
            headers = {"Accept": "application/json"}
            if self.settings.upstream_api_key:
                headers[API_KEY_HEADER] = self.settings.upstream_api_key
            self._session = aiohttp.ClientSession(
                headers=headers,
                timeout=aiohttp.ClientTimeout(total=self.settings.request_timeout),
            )
        return self._session

    async def fetch_json(
        self,
        path: str,
        params: QueryParams | None = None,
        *,
        max_retries: int | None = None,
        initial_delay: float | None = None,
    ) -> JSONValue:
        """
        GET a JSON document from the upstream provider.

        Rate-limited responses (HTTP 429) are retried according to the retry
        policy. Every other failure is raised on the first attempt.

        Args:
            path: Path appended to the upstream base URL
            params: Query string parameters
            max_retries: Override for the total number of attempts
            initial_delay: Override for the base delay in seconds

        Returns:
            The parsed JSON body

        Raises:
            RetriesExhaustedError: If every attempt was rate limited
            UpstreamError: On any other network, HTTP or decoding failure
        """
        policy = self.retry_policy.with_overrides(max_retries, initial_delay)
        url = f"{self.base_url}/{path.lstrip('/')}"

        attempt = 1
        while True:
            try:
                return await self._get_json(url, params)
            except RateLimitError as e:
                if attempt >= policy.max_attempts:
                    logger.error(
                        f"Upstream still rate limiting {url} after {attempt} attempts"
                    )
                    raise RetriesExhaustedError(
                        f"{e.message} after {attempt} attempts",
                        url=url,
                        attempts=attempt,
                    ) from e

                delay = policy.delay_for(attempt)
                logger.warning(
                    f"Rate limited by upstream on {url} "
                    f"(attempt {attempt}/{policy.max_attempts}), "
                    f"retrying in {delay:.2f}s"
                )
                await self._sleep(delay)
                attempt += 1

    async def _get_json(self, url: str, params: QueryParams | None) -> JSONValue:
        """Perform a single GET and translate failures into gateway errors."""
        session = await self._get_session()

        try:
            async with session.get(url, params=params) as response:
                if response.status == HTTP_TOO_MANY_REQUESTS:
                    raise RateLimitError(
                        f"Request failed with status code {response.status}",
                        url=url,
                        status=response.status,
                    )
                response.raise_for_status()
                data = await response.json()
        except aiohttp.ContentTypeError as e:
            raise UpstreamError(
                f"Malformed upstream response: {e.message}", url=url, status=e.status
            ) from e
        except aiohttp.ClientResponseError as e:
            raise UpstreamError(
                f"Request failed with status code {e.status}", url=url, status=e.status
            ) from e
        except aiohttp.ClientError as e:
            raise UpstreamError(f"Upstream request failed: {e}", url=url) from e
        except TimeoutError as e:
            raise UpstreamError(
                f"Upstream request timed out after {self.settings.request_timeout}s",
                url=url,
            ) from e
        except ValueError as e:
            raise UpstreamError(f"Malformed upstream response: {e}", url=url) from e

        logger.debug(f"Fetched {url} with params {params}")
        return data

    async def close(self) -> None:
        """Close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None
