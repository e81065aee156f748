"""
Adaptive activity aggregator.

Decides per call which protocol serves the profile, pull requests and issues,
drives the adaptive paginators, merges every source without duplicates and
turns failures into warnings. `fetch_activity` never raises for GitHub errors.

Tiers, each attempted at most once:
1. GraphQL (valid token): profile query, HTML social-link enrichment when the
   bio has no contact hints, activity paginator, comments paginator
2. REST fallback (no valid token, or the profile query failed): user, orgs,
   repositories, PR and issue search
3. Always REST: public events, commit search fan-out, gists, starred repositories
"""

import asyncio
from collections.abc import Iterable, Mapping

from ghactivity.services.github.constants import MAX_STARRED_PROJECTIONS
from ghactivity.services.github.context import ClientContext
from ghactivity.services.github.exceptions import (
    AuthRequiredError,
    GitHubAPIError,
    TransportError,
)
from ghactivity.services.github.graphql_operations import (
    ACTIVITY_STREAMS,
    COMMENT_STREAMS,
    GraphQLOperations,
)
from ghactivity.services.github.helpers import is_valid_login
from ghactivity.services.github.merge import RecordMerger
from ghactivity.services.github.normalizer import (
    comment_record,
    commit_record,
    event_record,
    gist_record,
    issue_record,
    pull_request_record,
    popular_repositories,
    repository_from_rest,
    repository_record,
    star_record,
    to_records,
)
from ghactivity.services.github.pagination import AdaptivePaginator, BudgetTiers
from ghactivity.services.github.rest_operations import RestOperations
from ghactivity.services.github.schemas import CommitSearchItem
from ghactivity.services.github.social import (
    append_to_bio,
    fetch_profile_links,
    needs_enrichment,
)
from ghactivity.services.github.types import (
    ActivityRecord,
    AggregatedActivity,
    Comment,
    Issue,
    Protocol,
    PullRequest,
    Repository,
)


class _Collection:
    """
    Call-scoped mergers whose item lists are shared with the result.

    Because the result holds the very same lists, anything merged before a
    timeout or cancellation is already part of the returned value.
    """

    def __init__(self, result: AggregatedActivity):
        self.result = result
        self.records: RecordMerger[ActivityRecord] = RecordMerger()
        self.pull_requests: RecordMerger[PullRequest] = RecordMerger()
        self.issues: RecordMerger[Issue] = RecordMerger()
        self.comments: RecordMerger[Comment] = RecordMerger()
        result.records = self.records.items
        result.pull_requests = self.pull_requests.items
        result.issues = self.issues.items
        result.comments = self.comments.items

    def add_pull_requests(self, items: Iterable[PullRequest]) -> None:
        items = list(items)
        self.pull_requests.extend(items)
        self.records.extend(to_records(items, pull_request_record))

    def add_issues(self, items: Iterable[Issue]) -> None:
        items = list(items)
        self.issues.extend(items)
        self.records.extend(to_records(items, issue_record))

    def add_comments(self, items: Iterable[Comment]) -> None:
        items = list(items)
        self.comments.extend(items)
        self.records.extend(to_records(items, comment_record))

    def add_repositories(self, repositories: list[Repository]) -> None:
        self.result.repositories = repositories
        self.records.extend(to_records(repositories, repository_record))


class ActivityAggregator:
    """
    Collect timestamped activity for one GitHub account.

    Usage:
        ctx = ClientContext.from_settings(settings)
        activity = await ActivityAggregator(ctx).fetch_activity("octocat")
    """

    def __init__(self, ctx: ClientContext):
        self.ctx = ctx
        self.rest = RestOperations(ctx)
        self.graphql = GraphQLOperations(ctx)

    async def fetch_activity(
        self, subject: str, timeout: float | None = None
    ) -> AggregatedActivity:
        """
        Aggregate activity for `subject`.

        Args:
            subject: GitHub login
            timeout: Overall deadline in seconds; defaults to the context's
                aggregation_timeout. On expiry the partial result is returned
                with a timeout warning.

        Returns:
            AggregatedActivity with deduplicated records, projections and warnings
        """
        result = AggregatedActivity(subject=subject)
        if not is_valid_login(subject):
            result.warn("subject", GitHubAPIError(f"Invalid GitHub username: {subject!r}", 400))
            return result

        deadline = timeout if timeout is not None else self.ctx.aggregation_timeout
        collection = _Collection(result)
        try:
            async with asyncio.timeout(deadline):
                await self._collect(subject, collection)
        except TimeoutError:
            self.ctx.logger.warning(
                f"Aggregation for {subject} timed out after {deadline}s, returning partial data"
            )
            result.warn(
                "aggregation",
                TransportError(f"Aggregation timed out after {deadline}s"),
            )

        if not result.featured_repositories:
            result.featured_repositories = popular_repositories(result.repositories)

        self.ctx.logger.info(
            f"Collected {result.data_points} data points for {subject} via {result.protocol}"
            f" ({len(result.warnings)} warnings)"
        )
        return result

    async def _collect(self, login: str, collection: _Collection) -> None:
        graphql_ok = False
        if self.ctx.has_valid_token:
            try:
                await self._collect_graphql_profile(login, collection)
                graphql_ok = True
            except GitHubAPIError as e:
                self.ctx.logger.warning(
                    f"GraphQL profile query failed for {login}, falling back to REST: {e.message}"
                )
                collection.result.warn("graphql", e)
        else:
            self.ctx.logger.info(f"No valid GitHub token, using REST only for {login}")

        if graphql_ok:
            await self._enrich_profile(login, collection)
            await self._collect_graphql_activity(login, collection)
            await self._collect_graphql_comments(login, collection)
        else:
            await self._collect_rest_profile(login, collection)

        await self._collect_events(login, collection)
        await self._collect_commits(login, collection)
        await self._collect_gists(login, collection)
        await self._collect_starred(login, collection)

    # ─────────────────────────────────────────────────────────
    # GraphQL tier
    # ─────────────────────────────────────────────────────────

    async def _collect_graphql_profile(self, login: str, collection: _Collection) -> None:
        snapshot = await self.graphql.get_user_profile(login)

        result = collection.result
        result.protocol = Protocol.GRAPHQL
        result.profile = snapshot.profile
        result.organizations = snapshot.organizations
        result.starred_repositories = snapshot.starred_repositories
        result.featured_repositories = snapshot.pinned_repositories
        collection.add_repositories(snapshot.repositories)
        collection.add_pull_requests(snapshot.pull_requests)
        collection.add_issues(snapshot.issues)
        collection.records.extend(to_records(snapshot.gists, gist_record))

    async def _enrich_profile(self, login: str, collection: _Collection) -> None:
        profile = collection.result.profile
        if profile is None or not needs_enrichment(profile.bio):
            return
        try:
            links = await fetch_profile_links(self.ctx, login)
        except GitHubAPIError as e:
            collection.result.warn("profile_html", e)
            return
        if links:
            profile.bio = append_to_bio(profile.bio, links)

    async def _collect_graphql_activity(self, login: str, collection: _Collection) -> None:
        async def fetch_page(cursors: Mapping[str, str | None]):
            return await self.graphql.get_activity_page(login, cursors)

        paginator = AdaptivePaginator(
            fetch_page,
            ACTIVITY_STREAMS,
            target=self.ctx.target_data_points,
            tiers=self.ctx.budget_tiers,
            label="pull requests and issues",
            log=self.ctx.logger,
        )
        try:
            async for page in paginator.pages():
                collection.add_pull_requests(r for r in page.records if isinstance(r, PullRequest))
                collection.add_issues(r for r in page.records if isinstance(r, Issue))
        except GitHubAPIError as e:
            collection.result.warn("activity", e)
            return
        if paginator.error is not None:
            collection.result.warn("activity", paginator.error)

    async def _collect_graphql_comments(self, login: str, collection: _Collection) -> None:
        async def fetch_page(cursors: Mapping[str, str | None]):
            return await self.graphql.get_comments_page(login, cursors)

        paginator = AdaptivePaginator(
            fetch_page,
            COMMENT_STREAMS,
            target=self.ctx.comment_target,
            tiers=BudgetTiers.fixed(self.ctx.comment_max_additional_pages),
            label="comments",
            log=self.ctx.logger,
        )
        try:
            async for page in paginator.pages():
                collection.add_comments(page.records)
        except GitHubAPIError as e:
            collection.result.warn("comments", e)
            return
        if paginator.error is not None:
            collection.result.warn("comments", paginator.error)

    # ─────────────────────────────────────────────────────────
    # REST fallback tier
    # ─────────────────────────────────────────────────────────

    async def _collect_rest_profile(self, login: str, collection: _Collection) -> None:
        result = collection.result
        result.protocol = Protocol.REST

        try:
            result.profile = await self.rest.get_user(login)
        except GitHubAPIError as e:
            result.warn("profile", e)

        try:
            result.organizations = await self.rest.get_organizations(login)
        except GitHubAPIError as e:
            result.warn("organizations", e)

        try:
            collection.add_repositories(await self.rest.get_repositories(login))
        except GitHubAPIError as e:
            result.warn("repositories", e)

        pull_requests = await self.rest.search_pull_requests(login)
        collection.add_pull_requests(pull_requests.items)
        if pull_requests.error is not None:
            result.warn("pull_requests", pull_requests.error)

        issues = await self.rest.search_issues(login)
        collection.add_issues(issues.items)
        if issues.error is not None:
            result.warn("issues", issues.error)

        # Comments by author have no REST search equivalent
        result.warn("comments", AuthRequiredError("comments"))

    # ─────────────────────────────────────────────────────────
    # Always-collected REST sources
    # ─────────────────────────────────────────────────────────

    async def _collect_events(self, login: str, collection: _Collection) -> None:
        events = await self.rest.get_events(login)
        collection.records.extend(to_records(events.items, event_record))
        if events.error is not None:
            collection.result.warn("events", events.error)

    async def _collect_commits(self, login: str, collection: _Collection) -> None:
        def merge_page(page: int, items: list[CommitSearchItem]) -> None:
            collection.records.extend(to_records(items, commit_record))

        # Merged page by page, not after the whole search returns
        commits = await self.rest.search_commits(login, on_page=merge_page)
        for page, error in commits.failed_pages.items():
            collection.result.warn(
                "commits", error or TransportError(f"Commit search page {page} did not complete")
            )

    async def _collect_gists(self, login: str, collection: _Collection) -> None:
        try:
            gists = await self.rest.get_gists(login)
        except GitHubAPIError as e:
            collection.result.warn("gists", e)
            return
        collection.records.extend(to_records(gists, gist_record))

    async def _collect_starred(self, login: str, collection: _Collection) -> None:
        try:
            starred = await self.rest.get_starred(login)
        except GitHubAPIError as e:
            collection.result.warn("starred", e)
            return
        collection.records.extend(to_records(starred, star_record))
        if not collection.result.starred_repositories:
            collection.result.starred_repositories = [
                repository_from_rest(item.repo) for item in starred[:MAX_STARRED_PROJECTIONS]
            ]
