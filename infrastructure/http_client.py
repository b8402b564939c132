"""Async HTTP client used by outbound providers (email delivery)."""

from typing import Any

import httpx


class HttpClient:
    """Async wrapper around httpx.AsyncClient with a per-provider timeout.

    Owned by the app lifespan and closed on shutdown.
    """

    def __init__(self, timeout: float = 5.0) -> None:
        self._client = httpx.AsyncClient(timeout=timeout)

    async def post(self, url: str, **kwargs: Any) -> httpx.Response:
        return await self._client.post(url, **kwargs)

    async def aclose(self) -> None:
        await self._client.aclose()
