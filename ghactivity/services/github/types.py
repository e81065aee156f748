"""Data types for aggregated GitHub activity."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from ghactivity.services.github.exceptions import GitHubAPIError


class SourceKind(StrEnum):
    """Where an activity record came from."""

    COMMIT = "commit"
    PULL_REQUEST = "pull_request"
    ISSUE = "issue"
    COMMENT = "comment"
    GIST = "gist"
    STAR = "star"
    EVENT = "event"
    REPOSITORY = "repository"  # repository creation


class Protocol(StrEnum):
    """Which API surface produced the profile, PRs and issues."""

    GRAPHQL = "graphql"
    REST = "rest"


@dataclass(frozen=True)
class ActivityRecord:
    """One timestamped user action. `url` is the deduplication key."""

    timestamp: datetime
    kind: SourceKind
    url: str
    repository: str = ""  # "owner/repo"
    author: str | None = None
    title: str | None = None


@dataclass(frozen=True)
class PageCursor:
    """Continuation state for one independently paginated sub-stream."""

    end_cursor: str | None = None
    has_more: bool = False


@dataclass
class SocialAccount:
    """Social account linked on a GitHub profile."""

    provider: str
    url: str
    display_name: str | None = None


@dataclass
class Organization:
    """Organization the user belongs to."""

    login: str
    name: str | None = None
    description: str | None = None
    location: str | None = None


@dataclass
class Profile:
    """GitHub user profile."""

    login: str
    name: str | None = None
    email: str | None = None
    location: str | None = None
    bio: str = ""
    company: str | None = None
    blog: str = ""
    twitter_username: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    followers: int = 0
    following: int = 0
    public_repos: int = 0
    social_accounts: list[SocialAccount] = field(default_factory=list)


@dataclass
class Repository:
    """Repository owned or starred by the user."""

    name: str
    full_name: str
    url: str
    description: str | None = None
    language: str | None = None
    stars_count: int = 0
    is_fork: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    pushed_at: datetime | None = None


@dataclass
class PullRequest:
    """Pull request authored by the user."""

    title: str
    url: str
    created_at: datetime
    repository: str = ""  # "owner/repo"
    number: int | None = None
    state: str | None = None
    updated_at: datetime | None = None
    body: str | None = None


@dataclass
class Issue:
    """Issue opened by the user."""

    title: str
    url: str
    created_at: datetime
    repository: str = ""  # "owner/repo"
    number: int | None = None
    state: str | None = None
    updated_at: datetime | None = None
    body: str | None = None


@dataclass
class Comment:
    """Issue, pull request or commit comment written by the user."""

    url: str
    created_at: datetime
    repository: str = ""  # "owner/repo"
    body: str | None = None


@dataclass(frozen=True)
class FetchWarning:
    """A source that returned partial or no data, and why."""

    source: str
    error: GitHubAPIError

    @property
    def message(self) -> str:
        return f"{self.source}: {self.error.message}"


@dataclass
class AggregatedActivity:
    """Everything collected for one subject in one aggregation call."""

    subject: str
    protocol: Protocol = Protocol.REST
    profile: Profile | None = None
    records: list[ActivityRecord] = field(default_factory=list)
    pull_requests: list[PullRequest] = field(default_factory=list)
    issues: list[Issue] = field(default_factory=list)
    comments: list[Comment] = field(default_factory=list)
    repositories: list[Repository] = field(default_factory=list)
    starred_repositories: list[Repository] = field(default_factory=list)
    # Pinned repositories, or the most-starred owned ones when none are pinned
    featured_repositories: list[Repository] = field(default_factory=list)
    organizations: list[Organization] = field(default_factory=list)
    warnings: list[FetchWarning] = field(default_factory=list)

    @property
    def data_points(self) -> int:
        """Number of unique activity records."""
        return len(self.records)

    def warn(self, source: str, error: GitHubAPIError) -> None:
        """Record a partial-data warning for `source`."""
        self.warnings.append(FetchWarning(source=source, error=error))
