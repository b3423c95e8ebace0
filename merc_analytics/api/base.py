"""Shared HTTP plumbing for provider clients."""

import json
import logging
import time
from typing import Any

import httpx
from cachetools import TLRUCache

from .errors import MalformedResponse, UpstreamUnavailable

logger = logging.getLogger(__name__)


def _expires_at(key, value, now):
    _, ttl_seconds = value
    return now + ttl_seconds


class ResponseCache:
    """Time-windowed reuse of upstream JSON bodies, keyed by request signature.

    Purely a performance hint: every entry carries its own TTL, expired
    entries are dropped on the next write and a miss always falls through to
    the network. At most ``maxsize`` bodies are held.
    """

    def __init__(self, enabled: bool = True, maxsize: int = 2048, timer=time.monotonic):
        self.enabled = enabled
        self._entries = TLRUCache(maxsize=maxsize, ttu=_expires_at, timer=timer)

    @staticmethod
    def key(method: str, url: str, params: dict | None, body: Any) -> str:
        return json.dumps([method, url, params or {}, body], sort_keys=True, default=str)

    @property
    def maxsize(self) -> int:
        return self._entries.maxsize

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any | None:
        if not self.enabled:
            return None
        entry = self._entries.get(key)
        return entry[0] if entry is not None else None

    def put(self, key: str, data: Any, ttl_seconds: float):
        if self.enabled and ttl_seconds > 0:
            self._entries[key] = (data, ttl_seconds)

    def clear(self):
        self._entries.clear()


class ProviderClient:
    """Base class for upstream clients.

    Subclasses call ``_get_json``/``_post_json`` which raise
    ``UpstreamUnavailable`` or ``MalformedResponse``; they never return
    partial data.
    """

    PROVIDER = "provider"

    def __init__(
        self,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        cache: ResponseCache | None = None,
        timeout: float = 30.0,
        cache_ttl: float = 0,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache_ttl = cache_ttl
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._cache = cache if cache is not None else ResponseCache(enabled=False)

    async def close(self):
        """Close the HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def _get_json(
        self,
        url: str,
        params: dict | None = None,
        headers: dict | None = None,
        cache_ttl: float = 0,
    ) -> Any:
        return await self._request("GET", url, params=params, headers=headers, cache_ttl=cache_ttl)

    async def _post_json(
        self,
        url: str,
        body: Any,
        headers: dict | None = None,
        cache_ttl: float = 0,
    ) -> Any:
        return await self._request("POST", url, body=body, headers=headers, cache_ttl=cache_ttl)

    async def _request(
        self,
        method: str,
        url: str,
        params: dict | None = None,
        body: Any = None,
        headers: dict | None = None,
        cache_ttl: float = 0,
    ) -> Any:
        cache_key = ResponseCache.key(method, url, params, body)
        cached = self._cache.get(cache_key)
        if cached is not None:
            logger.debug(f"{self.PROVIDER} cache hit: {method} {url}")
            return cached

        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        try:
            response = await self._client.request(
                method,
                url,
                params=params,
                json=body,
                headers=request_headers,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                self.PROVIDER, f"HTTP {e.response.status_code} from {method} {e.request.url.host}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(
                self.PROVIDER, f"{type(e).__name__} on {method} {httpx.URL(url).host}"
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponse(self.PROVIDER, "response body is not JSON") from e

        self._cache.put(cache_key, data, cache_ttl)
        return data
