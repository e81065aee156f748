"""
GitHub API helper utilities.

Provides rate limit handling, error response processing and payload decoding
shared by the REST and GraphQL operations.
"""

import logging
import re
from typing import TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from ghactivity.services.github.constants import CACHE_HIT_HEADER, WEB_BASE_URL
from ghactivity.services.github.exceptions import DecodeError, ProtocolError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)
T = TypeVar("T")

# 1-39 alphanumerics or single hyphens, no leading hyphen
_LOGIN_PATTERN = re.compile(r"[A-Za-z0-9](?:[A-Za-z0-9]|-(?=[A-Za-z0-9])){0,38}")


class RateLimitInfo:
    """Rate limit information from GitHub API response."""

    def __init__(self, response: httpx.Response) -> None:
        self.remaining = response.headers.get("X-RateLimit-Remaining")
        self.reset = response.headers.get("X-RateLimit-Reset")
        self.retry_after = response.headers.get("Retry-After")

    @property
    def reset_timestamp(self) -> int | None:
        """Get reset timestamp as integer, or None if not available."""
        return int(self.reset) if self.reset else None

    @property
    def is_exhausted(self) -> bool:
        """Check if rate limit is exhausted."""
        return self.remaining is not None and int(self.remaining) == 0


def handle_error_response(response: httpx.Response, subject: str) -> None:
    """
    Raise for any non-2xx GitHub response.

    Args:
        response: The HTTP response from GitHub
        subject: What was being fetched, for error context (e.g. "events for octocat")

    Raises:
        ProtocolError: For authentication, authorization, rate limit or other API errors
    """
    if response.is_success:
        return

    rate_info = RateLimitInfo(response)
    status_code = response.status_code

    if status_code == 401:
        raise ProtocolError("Invalid or expired GitHub token", 401)
    elif status_code == 404:
        raise ProtocolError(f"Not found: {subject}", 404)
    elif status_code == 403:
        if rate_info.is_exhausted:
            raise ProtocolError(
                "GitHub API rate limit exceeded",
                403,
                rate_limit_reset=rate_info.reset_timestamp,
            )
        if rate_info.retry_after:
            raise ProtocolError("GitHub secondary rate limit", 403)
        raise ProtocolError("GitHub API forbidden", 403)
    elif status_code == 422:
        raise ProtocolError(f"GitHub rejected the query for {subject}", 422)
    elif status_code == 429:
        raise ProtocolError(
            "GitHub API rate limit exceeded",
            429,
            rate_limit_reset=rate_info.reset_timestamp,
        )
    elif status_code >= 500:
        raise ProtocolError(f"GitHub server error: {status_code}", status_code)
    raise ProtocolError(f"GitHub API error: {status_code}", status_code)


def decode_model(response: httpx.Response, model: type[M]) -> M:
    """Decode a JSON response body into a pydantic model, mapping failures to DecodeError."""
    try:
        return model.model_validate_json(response.content)
    except ValidationError as e:
        raise DecodeError(f"Unexpected {model.__name__} payload: {e.error_count()} errors") from e


def decode_list(response: httpx.Response, adapter: TypeAdapter[list[T]]) -> list[T]:
    """Decode a JSON array body with a prebuilt TypeAdapter."""
    try:
        return adapter.validate_json(response.content)
    except ValidationError as e:
        raise DecodeError(f"Unexpected list payload: {e.error_count()} errors") from e


def is_cache_hit(response: httpx.Response) -> bool:
    """True when the transport executor served this response from its cache."""
    return response.headers.get(CACHE_HIT_HEADER, "").lower() == "true"


def extract_repo_from_url(url: str) -> str:
    """
    Extract "owner/repo" from a GitHub permalink.

    Example: https://github.com/owner/repo/issues/123#issuecomment-456 -> "owner/repo"

    Returns an empty string for an empty URL, a URL on another host, or a URL
    with fewer than two path segments.
    """
    if not url or not url.startswith(WEB_BASE_URL):
        return ""

    parts = url[len(WEB_BASE_URL) :].split("/")
    if len(parts) >= 2 and parts[0] and parts[1]:
        # Drop fragments/queries that may trail a bare repo URL
        repo = parts[1].split("#", 1)[0].split("?", 1)[0]
        if repo:
            return f"{parts[0]}/{repo}"
    return ""


def is_valid_login(login: str) -> bool:
    """True for a syntactically valid GitHub user or organization login."""
    return bool(login) and _LOGIN_PATTERN.fullmatch(login) is not None
