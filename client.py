#!/usr/bin/env python3
"""
Schema Client - HTTP retrieval for the API documentation site.

One httpx client is shared by every collector of a run. Every request goes
through a RetryPolicy: by default one attempt plus exactly one retry with no delay.
"""

import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Optional, TypeVar
from urllib.parse import urljoin

import httpx

from utils.errors import FetchError, ParseError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://developer.riotgames.com/"

T = TypeVar("T")


class RetryPolicy:
    """
    Bounded retry policy.

    Args:
        attempts: Total attempts, including the first one (default: 2)
        backoff: Seconds to wait before retry N, multiplied by N (default: 0)
        sleep: Awaitable sleep function, replaceable in tests
    """

    def __init__(self,
                 attempts: int = 2,
                 backoff: float = 0.0,
                 sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep):
        if attempts < 1:
            raise ValueError("RetryPolicy needs at least one attempt")
        self.attempts = attempts
        self.backoff = backoff
        self.sleep = sleep

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Await ``operation`` until it succeeds or attempts run out."""
        last_error: Optional[FetchError] = None
        for attempt in range(1, self.attempts + 1):
            try:
                return await operation()
            except FetchError as e:
                last_error = e
                if attempt < self.attempts:
                    logger.debug(f"Attempt {attempt}/{self.attempts} failed for {e.url}, retrying")
                    if self.backoff:
                        await self.sleep(self.backoff * attempt)
        assert last_error is not None
        raise last_error


class SchemaClient:
    """
    Async client for the documentation site.
    """

    def __init__(self,
                 base_url: str = DEFAULT_BASE_URL,
                 timeout: float = 30.0,
                 retry: Optional[RetryPolicy] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize the client.

        Args:
            base_url: Site root that relative URLs are joined against
            timeout: Per-request timeout in seconds
            retry: Retry policy (default: two attempts, no delay)
            transport: Optional httpx transport, e.g. httpx.MockTransport
        """
        self.base_url = base_url if base_url.endswith("/") else base_url + "/"
        self.retry = retry or RetryPolicy()
        self.http = httpx.AsyncClient(
            headers={
                "User-Agent": "riotapi-schema (+https://github.com/MingweiSamuel/riotapi-schema)",
                "Accept": "text/html,application/json;q=0.9,*/*;q=0.8",
            },
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

        logger.info(f"Schema client initialized for {self.base_url}")

    def url_for(self, path: str) -> str:
        return urljoin(self.base_url, path)

    async def _get_once(self, url: str) -> str:
        try:
            response = await self.http.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FetchError(url, e) from e
        logger.debug(f"GET {url} -> {response.status_code}")
        return response.text

    async def fetch(self, path: str) -> str:
        """
        Fetch a page body, retrying per the policy.

        Args:
            path: Absolute URL or path relative to base_url

        Returns:
            Response text

        Raises:
            FetchError: when every attempt failed
        """
        url = self.url_for(path)
        return await self.retry.run(lambda: self._get_once(url))

    async def fetch_json(self, path: str) -> Any:
        """Fetch and decode a JSON document."""
        text = await self.fetch(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(f"invalid JSON: {e}", self.url_for(path)) from e

    async def close(self):
        """Close the HTTP client."""
        await self.http.aclose()

