"""Shared async HTTP client with configurable timeout and retry."""

import asyncio
from typing import Any

import httpx

from shared.logging import get_logger

log = get_logger(__name__)


class HttpClient:
    """Thin async wrapper around httpx.AsyncClient.

    One instance per external service keeps timeouts independently
    configurable. ``post_with_retry`` retries transport errors and 5xx
    responses with linear backoff (``backoff * attempt``).
    """

    def __init__(
        self,
        timeout: float = 15.0,
        max_attempts: int = 3,
        backoff_seconds: float = 0.4,
    ) -> None:
        self._client = httpx.AsyncClient(timeout=timeout)
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self._client.post(url, **kwargs)

    async def post_with_retry(self, url: str, **kwargs: Any) -> httpx.Response:
        attempt = 1
        while True:
            try:
                response = await self._client.post(url, **kwargs)
            except httpx.TransportError as e:
                if attempt >= self.max_attempts:
                    raise
                log.warning(
                    "http_post_attempt_failed",
                    url=url,
                    attempt=attempt,
                    error=str(e),
                    error_type=type(e).__name__,
                )
            else:
                if response.status_code < 500 or attempt == self.max_attempts:
                    return response
                log.warning(
                    "http_post_attempt_failed",
                    url=url,
                    attempt=attempt,
                    status_code=response.status_code,
                )
            await asyncio.sleep(self.backoff_seconds * attempt)
            attempt += 1

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.aclose()
