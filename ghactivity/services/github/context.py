"""
Session context for GitHub activity collection.

A ClientContext bundles everything an aggregation needs from its environment:
the credential, the logger, the cache-aware executor, and the tunable limits.
Build it once per session and pass it into every aggregation call.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

import httpx

from ghactivity.config import Settings
from ghactivity.services.github.cache import MAX_BODY_BYTES, CachingExecutor, HTTPExecutor
from ghactivity.services.github.constants import (
    ACCEPT_JSON,
    API_VERSION,
    COMMENT_MAX_ADDITIONAL_PAGES,
    COMMENT_TARGET,
    DEFAULT_COMMIT_SEARCH_PAGES,
    DEFAULT_EVENTS_MAX_PAGES,
    DEFAULT_PER_PAGE,
    DEFAULT_SEARCH_MAX_PAGES,
    PROFILE_HTML_MAX_BYTES,
    TARGET_DATA_POINTS,
)
from ghactivity.services.github.credentials import auth_headers, is_valid_token
from ghactivity.services.github.exceptions import TransportError
from ghactivity.services.github.helpers import is_cache_hit
from ghactivity.services.github.http_client import get_github_client
from ghactivity.services.github.pagination import BudgetTiers
from ghactivity.services.github.social import extract_social_links

LinkExtractor = Callable[[str], list[str]]


@dataclass
class ClientContext:
    """Per-session configuration passed into every aggregation call."""

    token: str = ""
    executor: HTTPExecutor | None = None
    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("ghactivity"))
    link_extractor: LinkExtractor = extract_social_links

    target_data_points: int = TARGET_DATA_POINTS
    budget_tiers: BudgetTiers = field(default_factory=BudgetTiers)
    comment_target: int = COMMENT_TARGET
    comment_max_additional_pages: int = COMMENT_MAX_ADDITIONAL_PAGES

    per_page: int = DEFAULT_PER_PAGE
    search_max_pages: int = DEFAULT_SEARCH_MAX_PAGES
    events_max_pages: int = DEFAULT_EVENTS_MAX_PAGES
    commit_search_pages: int = DEFAULT_COMMIT_SEARCH_PAGES
    profile_html_max_bytes: int = PROFILE_HTML_MAX_BYTES

    request_timeout: float = 30.0
    aggregation_timeout: float | None = 60.0

    def __post_init__(self) -> None:
        if self.executor is None:
            self.executor = CachingExecutor(get_github_client(self.request_timeout))
        self._auth_headers = auth_headers(self.token)
        if self.token and not self._auth_headers:
            # Never log the value itself
            self.logger.warning("Ignoring GitHub token with unexpected format; continuing unauthenticated")

    @classmethod
    def from_settings(cls, settings: Settings, **overrides: Any) -> "ClientContext":
        """Build a context from application settings; keyword overrides win."""
        values: dict[str, Any] = {
            "token": settings.github_token,
            "target_data_points": settings.target_data_points,
            "budget_tiers": BudgetTiers.from_pairs(
                settings.budget_tiers, floor=settings.budget_floor_pages
            ),
            "comment_target": settings.comment_target,
            "comment_max_additional_pages": settings.comment_max_additional_pages,
            "per_page": settings.rest_per_page,
            "search_max_pages": settings.search_max_pages,
            "events_max_pages": settings.events_max_pages,
            "commit_search_pages": settings.commit_search_pages,
            "profile_html_max_bytes": settings.profile_html_max_bytes,
            "request_timeout": settings.request_timeout,
            "aggregation_timeout": settings.aggregation_timeout,
        }
        if "executor" not in overrides:
            values["executor"] = CachingExecutor(
                get_github_client(settings.request_timeout),
                ttl=settings.cache_ttl_seconds,
                maxsize=settings.cache_max_entries,
            )
        values.update(overrides)
        return cls(**values)

    @property
    def has_valid_token(self) -> bool:
        """True when the token passed validation and will be sent."""
        return bool(self._auth_headers)

    async def send(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, str | int] | None = None,
        json: dict[str, Any] | None = None,
        accept: str = ACCEPT_JSON,
        authenticated: bool = True,
        max_bytes: int | None = None,
    ) -> httpx.Response:
        """
        Build and execute one request through the session executor.

        Args:
            method: HTTP method
            url: Absolute URL
            params: Query parameters
            json: JSON body (GraphQL)
            accept: Accept header value
            authenticated: Attach the Authorization header when a valid token exists
            max_bytes: Read at most this many body bytes; such responses bypass the cache

        Returns:
            The raw response (status is not checked here)

        Raises:
            TransportError: On network failure or timeout
        """
        headers = {"Accept": accept, "X-GitHub-Api-Version": API_VERSION}
        if authenticated:
            headers.update(self._auth_headers)

        extensions: dict[str, Any] = {
            "timeout": httpx.Timeout(self.request_timeout, connect=5.0).as_dict()
        }
        if max_bytes is not None:
            extensions[MAX_BODY_BYTES] = max_bytes

        request = httpx.Request(
            method,
            url,
            params=params,
            json=json,
            headers=headers,
            extensions=extensions,
        )

        assert self.executor is not None
        try:
            response = await self.executor(request)
        except httpx.TimeoutException as e:
            raise TransportError(f"Timed out calling {request.url.path}") from e
        except httpx.TransportError as e:
            raise TransportError(f"Network error calling {request.url.path}: {e}") from e

        self.logger.debug(
            f"{method} {request.url.path} -> {response.status_code}"
            f" (cache={'hit' if is_cache_hit(response) else 'miss'})"
        )
        return response
