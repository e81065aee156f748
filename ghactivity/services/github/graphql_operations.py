"""
GitHub GraphQL read operations.

Three queries back the GraphQL tier:
- USER_PROFILE_QUERY: profile, social accounts, organizations, repositories,
  first page of pull requests and issues, starred repositories and gists
- USER_ACTIVITY_QUERY: pull requests and issues, independently paginated
- USER_COMMENTS_QUERY: issue comments and commit comments, independently paginated

The login and every cursor are bound variables. Sub-streams that have run out
of pages are skipped with `@include(if: $includeX)` so a continuation query
never refetches data the paginator already has.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from ghactivity.services.github.constants import (
    GRAPHQL_PAGE_SIZE,
    GRAPHQL_URL,
    MAX_FEATURED_REPOSITORIES,
    MAX_STARRED_PROJECTIONS,
)
from ghactivity.services.github.context import ClientContext
from ghactivity.services.github.exceptions import (
    AuthRequiredError,
    DecodeError,
    GraphErrorList,
    ProtocolError,
)
from ghactivity.services.github.helpers import decode_model, handle_error_response
from ghactivity.services.github.normalizer import (
    comment_from_commit_comment,
    comment_from_issue_comment,
    issue_from_graph,
    organization_from_graph,
    profile_from_graph,
    pull_request_from_graph,
    repository_from_graph,
)
from ghactivity.services.github.pagination import Page
from ghactivity.services.github.schemas import (
    ActivityData,
    CommentsData,
    Connection,
    GraphGist,
    GraphQLEnvelope,
    UserProfileData,
)
from ghactivity.services.github.types import (
    Comment,
    Issue,
    Organization,
    PageCursor,
    Profile,
    PullRequest,
    Repository,
)

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

# Sub-stream names used as paginator keys
PULL_REQUESTS = "pullRequests"
ISSUES = "issues"
ISSUE_COMMENTS = "issueComments"
COMMIT_COMMENTS = "commitComments"

ACTIVITY_STREAMS = (PULL_REQUESTS, ISSUES)
COMMENT_STREAMS = (ISSUE_COMMENTS, COMMIT_COMMENTS)


USER_PROFILE_QUERY = """
query UserProfile($login: String!, $pageSize: Int!, $starredCount: Int!, $pinnedCount: Int!) {
  user(login: $login) {
    login
    name
    email
    location
    bio
    company
    websiteUrl
    twitterUsername
    createdAt
    updatedAt
    followers { totalCount }
    following { totalCount }
    socialAccounts(first: 10) {
      nodes { provider url displayName }
    }
    organizations(first: 20) {
      nodes { login name location description }
    }
    repositories(first: $pageSize, ownerAffiliations: OWNER, orderBy: {field: CREATED_AT, direction: DESC}) {
      totalCount
      nodes {
        name nameWithOwner url description isFork stargazerCount
        createdAt updatedAt pushedAt
        primaryLanguage { name }
      }
    }
    pullRequests(first: $pageSize, orderBy: {field: CREATED_AT, direction: DESC}) {
      totalCount
      nodes {
        title body number state url createdAt updatedAt
        repository { nameWithOwner }
      }
    }
    issues(first: $pageSize, orderBy: {field: CREATED_AT, direction: DESC}) {
      totalCount
      nodes {
        title body number state url createdAt updatedAt
        repository { nameWithOwner }
      }
    }
    starredRepositories(first: $starredCount, orderBy: {field: STARRED_AT, direction: DESC}) {
      totalCount
      nodes {
        name nameWithOwner url description stargazerCount isFork
        createdAt updatedAt pushedAt
        primaryLanguage { name }
      }
    }
    pinnedItems(first: $pinnedCount, types: [REPOSITORY]) {
      nodes {
        ... on Repository {
          name nameWithOwner url description isFork stargazerCount
          createdAt updatedAt pushedAt
          primaryLanguage { name }
        }
      }
    }
    gists(first: $pageSize, orderBy: {field: CREATED_AT, direction: DESC}) {
      totalCount
      nodes { url description isPublic createdAt updatedAt }
    }
  }
}
"""

USER_ACTIVITY_QUERY = """
query UserActivity(
  $login: String!
  $pageSize: Int!
  $prCursor: String
  $issueCursor: String
  $includePullRequests: Boolean!
  $includeIssues: Boolean!
) {
  user(login: $login) {
    pullRequests(first: $pageSize, after: $prCursor, orderBy: {field: CREATED_AT, direction: DESC})
      @include(if: $includePullRequests) {
      nodes {
        title body number state url createdAt updatedAt
        repository { nameWithOwner }
      }
      pageInfo { hasNextPage endCursor }
    }
    issues(first: $pageSize, after: $issueCursor, orderBy: {field: CREATED_AT, direction: DESC})
      @include(if: $includeIssues) {
      nodes {
        title body number state url createdAt updatedAt
        repository { nameWithOwner }
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""

USER_COMMENTS_QUERY = """
query UserComments(
  $login: String!
  $pageSize: Int!
  $issueCommentCursor: String
  $commitCommentCursor: String
  $includeIssueComments: Boolean!
  $includeCommitComments: Boolean!
) {
  user(login: $login) {
    issueComments(first: $pageSize, after: $issueCommentCursor, orderBy: {field: UPDATED_AT, direction: DESC})
      @include(if: $includeIssueComments) {
      nodes {
        body url createdAt
        repository { nameWithOwner }
      }
      pageInfo { hasNextPage endCursor }
    }
    commitComments(first: $pageSize, after: $commitCommentCursor)
      @include(if: $includeCommitComments) {
      nodes {
        body url createdAt
        commit { url }
      }
      pageInfo { hasNextPage endCursor }
    }
  }
}
"""


@dataclass
class ProfileSnapshot:
    """Everything the profile query returns, already normalized."""

    profile: Profile
    organizations: list[Organization] = field(default_factory=list)
    repositories: list[Repository] = field(default_factory=list)
    starred_repositories: list[Repository] = field(default_factory=list)
    pinned_repositories: list[Repository] = field(default_factory=list)
    pull_requests: list[PullRequest] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    gists: list[GraphGist] = field(default_factory=list)


def _cursor(connection: Connection[Any] | None) -> PageCursor:
    if connection is None or connection.page_info is None:
        return PageCursor(end_cursor=None, has_more=False)
    return PageCursor(
        end_cursor=connection.page_info.end_cursor,
        has_more=connection.page_info.has_next_page,
    )


def _validate(data: dict[str, Any], model: type[M]) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise DecodeError(f"Unexpected {model.__name__} payload: {e.error_count()} errors") from e


class GraphQLOperations:
    """
    GraphQL operations bound to one client context.

    Every operation requires a valid token; without one AuthRequiredError is
    raised before any request is made.
    """

    def __init__(self, ctx: ClientContext):
        self.ctx = ctx

    async def execute_query(
        self, query: str, variables: dict[str, Any], operation: str
    ) -> dict[str, Any]:
        """
        POST one query and return its `data` object.

        Raises:
            AuthRequiredError: No valid token in the context
            TransportError: Network failure or timeout
            ProtocolError: Non-2xx status
            DecodeError: Malformed envelope or missing data
            GraphErrorList: The response carried a non-empty `errors` list
        """
        if not self.ctx.has_valid_token:
            raise AuthRequiredError(f"GraphQL {operation}")

        response = await self.ctx.send(
            "POST", GRAPHQL_URL, json={"query": query, "variables": variables}
        )
        handle_error_response(response, f"GraphQL {operation}")

        envelope = decode_model(response, GraphQLEnvelope)
        if envelope.errors:
            messages = [e.message for e in envelope.errors]
            self.ctx.logger.warning(f"GraphQL {operation} returned {len(messages)} errors")
            raise GraphErrorList(messages)
        if envelope.data is None:
            raise DecodeError(f"GraphQL {operation} returned no data")
        return envelope.data

    async def get_user_profile(self, login: str) -> ProfileSnapshot:
        """Fetch the profile with its first page of every connection."""
        data = await self.execute_query(
            USER_PROFILE_QUERY,
            {
                "login": login,
                "pageSize": GRAPHQL_PAGE_SIZE,
                "starredCount": MAX_STARRED_PROJECTIONS,
                "pinnedCount": MAX_FEATURED_REPOSITORIES,
            },
            "user profile",
        )
        user = _validate(data, UserProfileData).user
        if user is None:
            raise ProtocolError(f"Not found: user {login}", 404)

        return ProfileSnapshot(
            profile=profile_from_graph(user),
            organizations=[organization_from_graph(o) for o in user.organizations.nodes],
            repositories=[repository_from_graph(r) for r in user.repositories.nodes],
            starred_repositories=[
                repository_from_graph(r) for r in user.starred_repositories.nodes
            ],
            pinned_repositories=[repository_from_graph(r) for r in user.pinned_items.nodes],
            pull_requests=[pull_request_from_graph(n) for n in user.pull_requests.nodes],
            issues=[issue_from_graph(n) for n in user.issues.nodes],
            gists=list(user.gists.nodes),
        )

    async def get_activity_page(
        self, login: str, cursors: Mapping[str, str | None]
    ) -> Page[PullRequest | Issue]:
        """
        Fetch one page of pull requests and issues.

        Only the sub-streams present in `cursors` are requested; a None cursor
        means the first page of that sub-stream.
        """
        data = await self.execute_query(
            USER_ACTIVITY_QUERY,
            {
                "login": login,
                "pageSize": GRAPHQL_PAGE_SIZE,
                "prCursor": cursors.get(PULL_REQUESTS),
                "issueCursor": cursors.get(ISSUES),
                "includePullRequests": PULL_REQUESTS in cursors,
                "includeIssues": ISSUES in cursors,
            },
            "activity",
        )
        user = _validate(data, ActivityData).user
        if user is None:
            raise ProtocolError(f"Not found: user {login}", 404)

        page: Page[PullRequest | Issue] = Page(records=[])
        if PULL_REQUESTS in cursors:
            if user.pull_requests is not None:
                page.records.extend(pull_request_from_graph(n) for n in user.pull_requests.nodes)
            page.cursors[PULL_REQUESTS] = _cursor(user.pull_requests)
        if ISSUES in cursors:
            if user.issues is not None:
                page.records.extend(issue_from_graph(n) for n in user.issues.nodes)
            page.cursors[ISSUES] = _cursor(user.issues)
        return page

    async def get_comments_page(
        self, login: str, cursors: Mapping[str, str | None]
    ) -> Page[Comment]:
        """Fetch one page of issue comments (PR comments included) and commit comments."""
        data = await self.execute_query(
            USER_COMMENTS_QUERY,
            {
                "login": login,
                "pageSize": GRAPHQL_PAGE_SIZE,
                "issueCommentCursor": cursors.get(ISSUE_COMMENTS),
                "commitCommentCursor": cursors.get(COMMIT_COMMENTS),
                "includeIssueComments": ISSUE_COMMENTS in cursors,
                "includeCommitComments": COMMIT_COMMENTS in cursors,
            },
            "comments",
        )
        user = _validate(data, CommentsData).user
        if user is None:
            raise ProtocolError(f"Not found: user {login}", 404)

        page: Page[Comment] = Page(records=[])
        if ISSUE_COMMENTS in cursors:
            if user.issue_comments is not None:
                page.records.extend(
                    comment_from_issue_comment(n) for n in user.issue_comments.nodes
                )
            page.cursors[ISSUE_COMMENTS] = _cursor(user.issue_comments)
        if COMMIT_COMMENTS in cursors:
            if user.commit_comments is not None:
                page.records.extend(
                    comment_from_commit_comment(n) for n in user.commit_comments.nodes
                )
            page.cursors[COMMIT_COMMENTS] = _cursor(user.commit_comments)
        return page
