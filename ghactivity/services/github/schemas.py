"""
Decoded response schemas for every GitHub endpoint the aggregator reads.

Each payload is validated once, at the edge, so the normalizer works with
typed fields instead of probing dicts. REST models mirror GitHub's snake_case
JSON; GraphQL models use camelCase aliases.
"""

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel

N = TypeVar("N")


# ─────────────────────────────────────────────────────────────
# REST
# ─────────────────────────────────────────────────────────────


class RestModel(BaseModel):
    """Base for REST payloads; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class EventRepo(RestModel):
    name: str = ""
    url: str = ""


class EventActor(RestModel):
    login: str | None = None


class RestEvent(RestModel):
    """Item of GET /users/{login}/events/public."""

    id: str
    type: str
    created_at: datetime
    repo: EventRepo = Field(default_factory=EventRepo)
    actor: EventActor | None = None


class SearchIssueItem(RestModel):
    """Item of GET /search/issues (PRs and issues share this shape)."""

    title: str = ""
    body: str | None = None
    state: str | None = None
    number: int | None = None
    html_url: str
    created_at: datetime
    updated_at: datetime | None = None


class SearchIssuesPage(RestModel):
    total_count: int = 0
    items: list[SearchIssueItem] = Field(default_factory=list)


class GitActor(RestModel):
    name: str | None = None
    email: str | None = None
    date: datetime | None = None


class CommitDetail(RestModel):
    author: GitActor | None = None
    committer: GitActor | None = None


class RepoRef(RestModel):
    full_name: str = ""


class UserRef(RestModel):
    login: str | None = None


class CommitSearchItem(RestModel):
    """Item of GET /search/commits."""

    html_url: str
    commit: CommitDetail
    repository: RepoRef | None = None
    author: UserRef | None = None


class CommitSearchPage(RestModel):
    total_count: int = 0
    items: list[CommitSearchItem] = Field(default_factory=list)


class RestGist(RestModel):
    """Item of GET /users/{login}/gists."""

    id: str
    html_url: str
    description: str | None = None
    public: bool = True
    created_at: datetime
    updated_at: datetime | None = None


class RestRepository(RestModel):
    """Repository object as embedded in REST payloads."""

    name: str
    full_name: str
    html_url: str = ""
    description: str | None = None
    language: str | None = None
    stargazers_count: int = 0
    fork: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None


class StarItem(RestModel):
    """Item of GET /users/{login}/starred with the star+json media type."""

    starred_at: datetime | None = None
    repo: RestRepository


class RestUser(RestModel):
    """GET /users/{login}."""

    login: str
    name: str | None = None
    email: str | None = None
    location: str | None = None
    bio: str | None = None
    company: str | None = None
    blog: str | None = None
    twitter_username: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0


class RestOrganization(RestModel):
    """Item of GET /users/{login}/orgs."""

    login: str
    description: str | None = None


EVENTS_ADAPTER = TypeAdapter(list[RestEvent])
GISTS_ADAPTER = TypeAdapter(list[RestGist])
STARS_ADAPTER = TypeAdapter(list[StarItem])
REPOSITORIES_ADAPTER = TypeAdapter(list[RestRepository])
ORGANIZATIONS_ADAPTER = TypeAdapter(list[RestOrganization])


# ─────────────────────────────────────────────────────────────
# GraphQL
# ─────────────────────────────────────────────────────────────


class GraphModel(BaseModel):
    """Base for GraphQL payloads: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class GraphQLErrorItem(GraphModel):
    message: str = ""
    type: str | None = None


class GraphQLEnvelope(GraphModel):
    """Top-level GraphQL response; `data` is validated per query afterwards."""

    data: dict[str, Any] | None = None
    errors: list[GraphQLErrorItem] | None = None


class PageInfo(GraphModel):
    has_next_page: bool = False
    end_cursor: str | None = None


class Connection(GraphModel, Generic[N]):
    nodes: list[N] = Field(default_factory=list)
    page_info: PageInfo | None = None
    total_count: int = 0


class TotalCount(GraphModel):
    total_count: int = 0


class OwnerRef(GraphModel):
    login: str = ""


class GraphRepositoryRef(GraphModel):
    name: str | None = None
    name_with_owner: str | None = None
    owner: OwnerRef | None = None

    @property
    def full_name(self) -> str:
        if self.name_with_owner:
            return self.name_with_owner
        if self.owner and self.owner.login and self.name:
            return f"{self.owner.login}/{self.name}"
        return ""


class GraphPullRequest(GraphModel):
    title: str = ""
    body: str | None = None
    number: int | None = None
    state: str | None = None
    url: str
    created_at: datetime
    updated_at: datetime | None = None
    repository: GraphRepositoryRef | None = None


class GraphIssue(GraphPullRequest):
    pass


class LanguageRef(GraphModel):
    name: str | None = None


class GraphRepository(GraphModel):
    name: str
    name_with_owner: str
    url: str = ""
    description: str | None = None
    primary_language: LanguageRef | None = None
    stargazer_count: int = 0
    is_fork: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None


class GraphGist(GraphModel):
    url: str
    description: str | None = None
    is_public: bool = True
    created_at: datetime
    updated_at: datetime | None = None


class GraphSocialAccount(GraphModel):
    provider: str = ""
    url: str
    display_name: str | None = None


class GraphOrganization(GraphModel):
    login: str
    name: str | None = None
    location: str | None = None
    description: str | None = None


class GraphUserProfile(GraphModel):
    login: str
    name: str | None = None
    email: str | None = None
    location: str | None = None
    bio: str | None = None
    company: str | None = None
    website_url: str | None = None
    twitter_username: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    followers: TotalCount = Field(default_factory=TotalCount)
    following: TotalCount = Field(default_factory=TotalCount)
    social_accounts: Connection[GraphSocialAccount] = Field(default_factory=Connection)
    organizations: Connection[GraphOrganization] = Field(default_factory=Connection)
    repositories: Connection[GraphRepository] = Field(default_factory=Connection)
    pull_requests: Connection[GraphPullRequest] = Field(default_factory=Connection)
    issues: Connection[GraphIssue] = Field(default_factory=Connection)
    starred_repositories: Connection[GraphRepository] = Field(default_factory=Connection)
    pinned_items: Connection[GraphRepository] = Field(default_factory=Connection)
    gists: Connection[GraphGist] = Field(default_factory=Connection)


class UserProfileData(GraphModel):
    user: GraphUserProfile | None = None


class ActivityUser(GraphModel):
    # None when the connection was skipped with @include(if: false)
    pull_requests: Connection[GraphPullRequest] | None = None
    issues: Connection[GraphIssue] | None = None


class ActivityData(GraphModel):
    user: ActivityUser | None = None


class CommitRef(GraphModel):
    url: str = ""


class GraphIssueComment(GraphModel):
    body: str | None = None
    url: str
    created_at: datetime
    repository: GraphRepositoryRef | None = None


class GraphCommitComment(GraphModel):
    body: str | None = None
    url: str = ""
    created_at: datetime
    commit: CommitRef | None = None


class CommentsUser(GraphModel):
    issue_comments: Connection[GraphIssueComment] | None = None
    commit_comments: Connection[GraphCommitComment] | None = None


class CommentsData(GraphModel):
    user: CommentsUser | None = None
