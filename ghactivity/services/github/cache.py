"""
Cache-aware HTTP executor for GitHub requests.

The aggregator treats the executor as an opaque request -> response function.
This default implementation keeps successful GET responses in an in-memory
TTL cache and marks replayed responses with `X-From-Cache: true`, which is the
only thing the aggregator ever inspects. GraphQL POSTs are never cached:
application errors such as RATE_LIMITED arrive inside 200 responses.

A request carrying the `MAX_BODY_BYTES` extension is streamed, read up to that
many bytes and never cached.

Cache keys include the method, URL, body and a digest of the Authorization
header, so responses fetched with one credential are never replayed for another.
"""

import hashlib
import logging
from collections.abc import Awaitable, Callable

import httpx
from cachetools import TTLCache  # type: ignore[import-untyped]

from ghactivity.services.github.constants import CACHE_HIT_HEADER

logger = logging.getLogger(__name__)

# Opaque transport seam: anything that turns a request into a response
HTTPExecutor = Callable[[httpx.Request], Awaitable[httpx.Response]]

_CACHEABLE_METHODS = frozenset({"GET"})

# Request extension: upper bound on the response body read into memory
MAX_BODY_BYTES = "ghactivity.max_body_bytes"

_DROPPED_HEADERS = ("content-encoding", "content-length", "transfer-encoding")


def _make_cache_key(request: httpx.Request) -> str:
    """Generate a cache key from method, URL, body and credential digest."""
    auth = request.headers.get("Authorization", "")
    auth_digest = hashlib.sha256(auth.encode()).hexdigest()[:16] if auth else "anon"
    key_data = b"|".join(
        [
            request.method.encode(),
            str(request.url).encode(),
            request.headers.get("Accept", "").encode(),
            auth_digest.encode(),
            request.content,
        ]
    )
    return hashlib.md5(key_data).hexdigest()


class CachingExecutor:
    """
    Execute requests through a shared AsyncClient with a TTL response cache.

    Usage:
        executor = CachingExecutor(get_github_client(), ttl=600, maxsize=512)
        response = await executor(client.build_request("GET", url))
    """

    def __init__(self, client: httpx.AsyncClient, ttl: int = 600, maxsize: int = 512):
        self._client = client
        self._cache: TTLCache[str, tuple[int, list[tuple[str, str]], bytes]] = TTLCache(
            maxsize=maxsize, ttl=ttl
        )

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        max_bytes = request.extensions.pop(MAX_BODY_BYTES, None)
        if max_bytes is not None:
            return await self._send_bounded(request, max_bytes)
        if request.method not in _CACHEABLE_METHODS:
            return await self._client.send(request)

        key = _make_cache_key(request)
        cached = self._cache.get(key)
        if cached is not None:
            status_code, headers, content = cached
            logger.debug(f"Cache HIT: {request.method} {request.url.path}")
            return httpx.Response(
                status_code=status_code,
                headers=[*headers, (CACHE_HIT_HEADER, "true")],
                content=content,
                request=request,
            )

        logger.debug(f"Cache MISS: {request.method} {request.url.path}")
        response = await self._client.send(request)
        if response.status_code == 200:
            # Content-Encoding is dropped: httpx has already decoded the body
            headers = [
                (name, value)
                for name, value in response.headers.items()
                if name.lower() not in _DROPPED_HEADERS
            ]
            self._cache[key] = (response.status_code, headers, response.content)
        return response

    async def _send_bounded(self, request: httpx.Request, max_bytes: int) -> httpx.Response:
        """Stream the response and keep at most `max_bytes` of its decoded body."""
        response = await self._client.send(request, stream=True)
        chunks: list[bytes] = []
        size = 0
        try:
            async for chunk in response.aiter_bytes():
                chunk = chunk[: max_bytes - size]
                chunks.append(chunk)
                size += len(chunk)
                if size >= max_bytes:
                    logger.debug(f"Truncated {request.url.path} body at {max_bytes} bytes")
                    break
        finally:
            await response.aclose()

        headers = [
            (name, value)
            for name, value in response.headers.items()
            if name.lower() not in _DROPPED_HEADERS
        ]
        return httpx.Response(
            status_code=response.status_code,
            headers=headers,
            content=b"".join(chunks),
            request=request,
        )

    def clear(self) -> None:
        """Drop every cached response."""
        self._cache.clear()
        logger.debug("Cleared GitHub response cache")

    def get_cache_stats(self) -> dict[str, int]:
        """Get current cache statistics for monitoring."""
        return {"size": len(self._cache), "maxsize": int(self._cache.maxsize)}
