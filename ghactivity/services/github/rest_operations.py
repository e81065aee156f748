"""
GitHub REST read operations.

Provides every REST source the aggregator collects:
- User profile, organizations and repositories (fallback tier)
- Pull request and issue search (fallback tier)
- Public events
- Commit search pages
- Gists and starred repositories

Each method raises GitHubAPIError for a failed request; the paged helpers
return partial results with the error attached instead.
"""

import logging
from collections.abc import Callable
from typing import Any

import httpx

from ghactivity.services.github.constants import (
    ACCEPT_COMMIT_SEARCH,
    ACCEPT_STAR_TIMESTAMPS,
    API_BASE_URL,
    MAX_PER_PAGE,
)
from ghactivity.services.github.context import ClientContext
from ghactivity.services.github.fan_out import FanOutResult, fetch_pages_parallel
from ghactivity.services.github.helpers import (
    decode_list,
    decode_model,
    handle_error_response,
)
from ghactivity.services.github.normalizer import (
    issue_from_search,
    organization_from_rest,
    profile_from_rest,
    pull_request_from_search,
    repository_from_rest,
)
from ghactivity.services.github.pagination import OffsetResult, paginate_offset
from ghactivity.services.github.schemas import (
    EVENTS_ADAPTER,
    GISTS_ADAPTER,
    ORGANIZATIONS_ADAPTER,
    REPOSITORIES_ADAPTER,
    STARS_ADAPTER,
    CommitSearchItem,
    CommitSearchPage,
    RestEvent,
    RestGist,
    RestUser,
    SearchIssuesPage,
    StarItem,
)
from ghactivity.services.github.types import Issue, Organization, Profile, PullRequest, Repository

logger = logging.getLogger(__name__)


class RestOperations:
    """
    REST operations bound to one client context.

    Login values are always passed through the URL path or the `q` search
    parameter and are encoded by httpx; they are never spliced into JSON.
    """

    def __init__(self, ctx: ClientContext):
        self.ctx = ctx

    @property
    def _per_page(self) -> int:
        return min(self.ctx.per_page, MAX_PER_PAGE)

    async def _get(
        self,
        path: str,
        subject: str,
        params: dict[str, str | int] | None = None,
        accept: str | None = None,
    ) -> httpx.Response:
        kwargs: dict[str, Any] = {"params": params}
        if accept:
            kwargs["accept"] = accept
        response = await self.ctx.send("GET", f"{API_BASE_URL}{path}", **kwargs)
        handle_error_response(response, subject)
        return response

    # ─────────────────────────────────────────────────────────
    # Profile tier
    # ─────────────────────────────────────────────────────────

    async def get_user(self, login: str) -> Profile:
        """Fetch the public profile of `login`."""
        response = await self._get(f"/users/{login}", f"user {login}")
        return profile_from_rest(decode_model(response, RestUser))

    async def get_organizations(self, login: str) -> list[Organization]:
        """Fetch public organization memberships."""
        response = await self._get(f"/users/{login}/orgs", f"organizations for {login}")
        return [organization_from_rest(o) for o in decode_list(response, ORGANIZATIONS_ADAPTER)]

    async def get_repositories(self, login: str) -> list[Repository]:
        """Fetch up to one page of owned repositories, most recently updated first."""
        response = await self._get(
            f"/users/{login}/repos",
            f"repositories for {login}",
            params={"sort": "updated", "per_page": self._per_page},
        )
        return [repository_from_rest(r) for r in decode_list(response, REPOSITORIES_ADAPTER)]

    async def _search_issues_page(self, query: str, page: int) -> SearchIssuesPage:
        response = await self._get(
            "/search/issues",
            f"search '{query}'",
            params={
                "q": query,
                "sort": "created",
                "order": "desc",
                "per_page": self._per_page,
                "page": page,
            },
        )
        return decode_model(response, SearchIssuesPage)

    async def search_pull_requests(self, login: str) -> OffsetResult[PullRequest]:
        """Search pull requests authored by `login` (newest first)."""

        async def fetch_page(page: int) -> list[PullRequest]:
            result = await self._search_issues_page(f"author:{login} type:pr", page)
            return [pull_request_from_search(item) for item in result.items]

        return await paginate_offset(
            fetch_page,
            per_page=self._per_page,
            max_pages=self.ctx.search_max_pages,
            label="pull requests",
            log=self.ctx.logger,
        )

    async def search_issues(self, login: str) -> OffsetResult[Issue]:
        """Search issues opened by `login` (newest first)."""

        async def fetch_page(page: int) -> list[Issue]:
            result = await self._search_issues_page(f"author:{login} type:issue", page)
            return [issue_from_search(item) for item in result.items]

        return await paginate_offset(
            fetch_page,
            per_page=self._per_page,
            max_pages=self.ctx.search_max_pages,
            label="issues",
            log=self.ctx.logger,
        )

    # ─────────────────────────────────────────────────────────
    # Always-collected sources
    # ─────────────────────────────────────────────────────────

    async def get_events(self, login: str) -> OffsetResult[RestEvent]:
        """Fetch public events; GitHub keeps roughly the last 90 days / 300 events."""

        async def fetch_page(page: int) -> list[RestEvent]:
            response = await self._get(
                f"/users/{login}/events/public",
                f"events for {login}",
                params={"per_page": self._per_page, "page": page},
            )
            return decode_list(response, EVENTS_ADAPTER)

        return await paginate_offset(
            fetch_page,
            per_page=self._per_page,
            max_pages=self.ctx.events_max_pages,
            label="events",
            log=self.ctx.logger,
        )

    async def get_commit_page(self, login: str, page: int) -> list[CommitSearchItem]:
        """Fetch one page of commit search results for `login`."""
        response = await self._get(
            "/search/commits",
            f"commits by {login}",
            params={
                "q": f"author:{login}",
                "sort": "author-date",
                "order": "desc",
                "per_page": self._per_page,
                "page": page,
            },
            accept=ACCEPT_COMMIT_SEARCH,
        )
        return decode_model(response, CommitSearchPage).items

    async def search_commits(
        self,
        login: str,
        on_page: Callable[[int, list[CommitSearchItem]], None] | None = None,
    ) -> FanOutResult[CommitSearchItem]:
        """
        Fetch the configured number of commit search pages in parallel.

        `on_page` sees each finished page in page order, even if the search is
        cancelled before every page has arrived.
        """

        async def fetch_page(page: int) -> list[CommitSearchItem]:
            return await self.get_commit_page(login, page)

        pages = range(1, self.ctx.commit_search_pages + 1)
        return await fetch_pages_parallel(fetch_page, pages, on_page=on_page)

    async def get_gists(self, login: str) -> list[RestGist]:
        """Fetch one page of public gists."""
        response = await self._get(
            f"/users/{login}/gists",
            f"gists for {login}",
            params={"per_page": self._per_page},
        )
        return decode_list(response, GISTS_ADAPTER)

    async def get_starred(self, login: str) -> list[StarItem]:
        """Fetch one page of starred repositories, including when each was starred."""
        response = await self._get(
            f"/users/{login}/starred",
            f"starred repositories for {login}",
            params={"per_page": self._per_page},
            accept=ACCEPT_STAR_TIMESTAMPS,
        )
        return decode_list(response, STARS_ADAPTER)
