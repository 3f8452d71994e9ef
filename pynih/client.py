"""
HTTP transport for the NIH RePORTER project search endpoint
"""

import asyncio
import json
import logging
import os
from typing import Any, Awaitable, Dict, Optional, TypeVar

import httpx
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .config import APIConfig, RetryConfig
from .criteria import SearchCriteria
from .exceptions import ApiError, NIHReporterError, TransportError


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _should_retry(error: BaseException) -> bool:
    """Only ApiErrors classified as retriable are retried"""
    return isinstance(error, ApiError) and error.retriable


class NIHReporterClient:
    """
    Transport for the NIH RePORTER API

    Sends one JSON POST per page and applies a bounded retry policy to
    transient failures (HTTP 5xx and 429). The response body is returned as
    text; decoding it is left to ProjectDecoder.

    Example:
        async with NIHReporterClient() as client:
            text = await client.submit(SearchCriteria(fiscal_years=(2021,)).to_request_body())
    """

    def __init__(
        self,
        search_url: str = APIConfig.SEARCH_URL,
        timeout: float = APIConfig.DEFAULT_TIMEOUT,
        max_attempts: int = RetryConfig.MAX_ATTEMPTS,
        retry_base_delay: float = RetryConfig.BASE_DELAY,
        retry_max_delay: float = RetryConfig.MAX_DELAY,
        debug: bool = False,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the NIH RePORTER client

        Args:
            search_url: Project search endpoint
            timeout: Request timeout in seconds
            max_attempts: Total attempts per request, including the first
            retry_base_delay: Seed of the exponential backoff, in seconds
            retry_max_delay: Upper bound for a single backoff wait, in seconds
            debug: Echo each request (also enabled by the PYNIH_DEBUG environment variable)
            transport: Optional httpx transport, mainly for tests
        """
        self.search_url = search_url
        self.timeout = timeout
        self.max_attempts = max(1, max_attempts)
        self.retry_base_delay = retry_base_delay
        self.retry_max_delay = retry_max_delay
        self.debug = debug or os.getenv(APIConfig.DEBUG_ENV_VAR, '').lower() in ('1', 'true', 'yes')
        self.transport = transport

        self.headers = {
            "Content-Type": "application/json",
            "Accept": "application/json"
        }

        self._session: Optional[httpx.AsyncClient] = None

    async def _get_session(self) -> httpx.AsyncClient:
        """Get or create async session"""
        if self._session is None or self._session.is_closed:
            self._session = httpx.AsyncClient(
                headers=self.headers,
                timeout=self.timeout,
                transport=self.transport
            )
        return self._session

    async def aclose(self):
        """Close async session"""
        if self._session and not self._session.is_closed:
            await self._session.aclose()
        self._session = None

    async def __aenter__(self):
        """Async context manager entry"""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.aclose()

    def run_async(self, coro: Awaitable[T]) -> T:
        """
        Run a coroutine synchronously, closing the session afterwards

        Raises:
            NIHReporterError: If called from inside a running event loop
        """
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            pass
        else:
            raise NIHReporterError("Cannot run async method synchronously from within an async context. Use await instead.")

        async def runner():
            try:
                return await coro
            finally:
                await self.aclose()

        return asyncio.run(runner())

    def _echo_request(self, request_body: Dict[str, Any]):
        payload = json.dumps(request_body)
        logger.debug(f"POST {self.search_url} {payload}")
        if self.debug:
            print(f"[DEBUG] API Request: POST {self.search_url}")
            # Also show curl command for easy testing
            print(f"[DEBUG] curl -X POST -H 'Content-Type: application/json' -d '{payload}' '{self.search_url}'")

    async def _post_once(self, request_body: Dict[str, Any]) -> str:
        """
        Make a single POST request

        Raises:
            ApiError: If the API answers with a non-2xx status
            TransportError: If the request fails or the body cannot be read
        """
        session = await self._get_session()
        self._echo_request(request_body)

        try:
            async with session.stream("POST", self.search_url, json=request_body) as response:
                # Read (or, on failure, drain) the body before classifying
                try:
                    await response.aread()
                except (httpx.RequestError, httpx.StreamError) as e:
                    raise TransportError(f"Failed to read response body: {e}", cause=e) from e

                if not response.is_success:
                    error = ApiError(response.status_code, response.reason_phrase or "HTTP error")
                    logger.debug(f"Request failed with {error.status} (retriable={error.retriable})")
                    raise error

                return response.text
        except httpx.RequestError as e:
            raise TransportError(f"Request failed: {e}", cause=e) from e

    async def submit(self, request_body: Dict[str, Any]) -> str:
        """
        Submit a search request, retrying transient failures

        Args:
            request_body: Wire request body (see SearchCriteria.to_request_body)

        Returns:
            Raw response body text

        Raises:
            ApiError: For a fatal status, or the last retriable one once attempts run out
            TransportError: If the request fails or the body cannot be read
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.retry_base_delay, max=self.retry_max_delay),
            retry=retry_if_exception(_should_retry),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                text = await self._post_once(request_body)
        return text

    async def test_connection(self) -> bool:
        """
        Test API connection

        Returns:
            True if connection successful, False otherwise
        """
        try:
            await self.submit(SearchCriteria(limit=1).to_request_body())
            return True
        except NIHReporterError as e:
            logger.error(f"Connection test failed: {e}")
            return False
