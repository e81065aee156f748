"""
Shared HTTP client for GitHub API operations.

Provides a singleton AsyncClient with connection pooling for all GitHub calls.
Every aggregation in the process reuses the same connections; auth headers are
set per request, never on the client.
"""

import logging

import httpx

from ghactivity.services.github.constants import USER_AGENT

logger = logging.getLogger(__name__)

# Module-level singleton client
_client: httpx.AsyncClient | None = None


def get_github_client(timeout: float = 30.0) -> httpx.AsyncClient:
    """
    Get or create the shared HTTP client for GitHub calls.

    Args:
        timeout: Overall request timeout in seconds, used only when the client is created

    Returns:
        Shared httpx.AsyncClient configured for GitHub
    """
    global _client
    if _client is None or _client.is_closed:
        _client = httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=5.0),
            limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
            headers={"User-Agent": USER_AGENT},
            http2=True,  # Enable HTTP/2 for GitHub API
        )
        logger.debug("Created new GitHub HTTP client with connection pooling")
    return _client


async def close_github_client() -> None:
    """
    Close the shared HTTP client.

    Call on app shutdown for graceful termination.
    """
    global _client
    if _client is not None and not _client.is_closed:
        await _client.aclose()
        _client = None
        logger.debug("Closed GitHub HTTP client")
