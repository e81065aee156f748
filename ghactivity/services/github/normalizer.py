"""
Record normalizer.

Maps decoded REST and GraphQL payloads onto the canonical ActivityRecord and
the Profile/Repository/PullRequest/Issue/Comment projections. Payloads whose
timestamp is a zero value (year < 2000) produce no record.
"""

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import TypeVar

from ghactivity.services.github.constants import (
    API_BASE_URL,
    MAX_FEATURED_REPOSITORIES,
    MIN_VALID_YEAR,
)
from ghactivity.services.github.helpers import extract_repo_from_url
from ghactivity.services.github.schemas import (
    CommitSearchItem,
    GraphCommitComment,
    GraphGist,
    GraphIssue,
    GraphIssueComment,
    GraphOrganization,
    GraphPullRequest,
    GraphRepository,
    GraphUserProfile,
    RestEvent,
    RestGist,
    RestOrganization,
    RestRepository,
    RestUser,
    SearchIssueItem,
    StarItem,
)
from ghactivity.services.github.types import (
    ActivityRecord,
    Comment,
    Issue,
    Organization,
    Profile,
    PullRequest,
    Repository,
    SocialAccount,
    SourceKind,
)

T = TypeVar("T")


def _as_utc(ts: datetime | None) -> datetime | None:
    """Return an aware UTC timestamp, or None for missing/zero values."""
    if ts is None or ts.year < MIN_VALID_YEAR:
        return None
    if ts.tzinfo is None:
        return ts.replace(tzinfo=UTC)
    return ts.astimezone(UTC)


def to_records(
    items: Iterable[T], convert: Callable[[T], ActivityRecord | None]
) -> list[ActivityRecord]:
    """Convert items, dropping those without a usable timestamp."""
    return [record for item in items if (record := convert(item)) is not None]


# ─────────────────────────────────────────────────────────────
# Projections
# ─────────────────────────────────────────────────────────────


def pull_request_from_search(item: SearchIssueItem) -> PullRequest:
    return PullRequest(
        title=item.title,
        url=item.html_url,
        created_at=item.created_at,
        repository=extract_repo_from_url(item.html_url),
        number=item.number,
        state=item.state,
        updated_at=item.updated_at,
        body=item.body,
    )


def issue_from_search(item: SearchIssueItem) -> Issue:
    return Issue(
        title=item.title,
        url=item.html_url,
        created_at=item.created_at,
        repository=extract_repo_from_url(item.html_url),
        number=item.number,
        state=item.state,
        updated_at=item.updated_at,
        body=item.body,
    )


def pull_request_from_graph(node: GraphPullRequest) -> PullRequest:
    repository = node.repository.full_name if node.repository else ""
    return PullRequest(
        title=node.title,
        url=node.url,
        created_at=node.created_at,
        repository=repository or extract_repo_from_url(node.url),
        number=node.number,
        state=node.state,
        updated_at=node.updated_at,
        body=node.body,
    )


def issue_from_graph(node: GraphIssue) -> Issue:
    repository = node.repository.full_name if node.repository else ""
    return Issue(
        title=node.title,
        url=node.url,
        created_at=node.created_at,
        repository=repository or extract_repo_from_url(node.url),
        number=node.number,
        state=node.state,
        updated_at=node.updated_at,
        body=node.body,
    )


def comment_from_issue_comment(node: GraphIssueComment) -> Comment:
    """Issue comments also cover comments on pull requests."""
    repository = node.repository.full_name if node.repository else ""
    return Comment(
        url=node.url,
        created_at=node.created_at,
        repository=repository or extract_repo_from_url(node.url),
        body=node.body,
    )


def comment_from_commit_comment(node: GraphCommitComment) -> Comment:
    # Older payloads only expose the commit URL
    url = node.url or (node.commit.url if node.commit else "")
    return Comment(
        url=url,
        created_at=node.created_at,
        repository=extract_repo_from_url(url),
        body=node.body,
    )


def repository_from_rest(repo: RestRepository) -> Repository:
    return Repository(
        name=repo.name,
        full_name=repo.full_name,
        url=repo.html_url,
        description=repo.description,
        language=repo.language,
        stars_count=repo.stargazers_count,
        is_fork=repo.fork,
        created_at=repo.created_at,
        updated_at=repo.updated_at,
        pushed_at=repo.pushed_at,
    )


def repository_from_graph(repo: GraphRepository) -> Repository:
    return Repository(
        name=repo.name,
        full_name=repo.name_with_owner,
        url=repo.url,
        description=repo.description,
        language=repo.primary_language.name if repo.primary_language else None,
        stars_count=repo.stargazer_count,
        is_fork=repo.is_fork,
        created_at=repo.created_at,
        updated_at=repo.updated_at,
        pushed_at=repo.pushed_at,
    )


def popular_repositories(
    repositories: Iterable[Repository], limit: int = MAX_FEATURED_REPOSITORIES
) -> list[Repository]:
    """Most-starred repositories that are not forks, ties kept in input order."""
    owned = [r for r in repositories if not r.is_fork]
    return sorted(owned, key=lambda r: r.stars_count, reverse=True)[:limit]


def organization_from_rest(org: RestOrganization) -> Organization:
    return Organization(login=org.login, description=org.description)


def organization_from_graph(org: GraphOrganization) -> Organization:
    return Organization(
        login=org.login,
        name=org.name,
        description=org.description,
        location=org.location,
    )


def profile_from_rest(user: RestUser) -> Profile:
    return Profile(
        login=user.login,
        name=user.name,
        email=user.email,
        location=user.location,
        bio=user.bio or "",
        company=user.company,
        blog=user.blog or "",
        twitter_username=user.twitter_username,
        created_at=user.created_at,
        updated_at=user.updated_at,
        followers=user.followers,
        following=user.following,
        public_repos=user.public_repos,
    )


def profile_from_graph(user: GraphUserProfile) -> Profile:
    """
    Build a Profile from the GraphQL user node.

    Social account URLs are appended to the bio ("[PROVIDER] url", provider
    omitted for GENERIC) so downstream link extraction sees them, and the first
    GENERIC account fills an empty blog field.
    """
    profile = Profile(
        login=user.login,
        name=user.name,
        email=user.email,
        location=user.location,
        bio=user.bio or "",
        company=user.company,
        blog=user.website_url or "",
        twitter_username=user.twitter_username,
        created_at=user.created_at,
        updated_at=user.updated_at,
        followers=user.followers.total_count,
        following=user.following.total_count,
        public_repos=user.repositories.total_count,
    )

    for account in user.social_accounts.nodes:
        profile.social_accounts.append(
            SocialAccount(
                provider=account.provider,
                url=account.url,
                display_name=account.display_name,
            )
        )
        entry = account.url
        if account.provider and account.provider != "GENERIC":
            entry = f"[{account.provider}] {account.url}"
        profile.bio = f"{profile.bio} | {entry}" if profile.bio else entry
        if not profile.blog and account.provider == "GENERIC":
            profile.blog = account.url

    return profile


# ─────────────────────────────────────────────────────────────
# Activity records
# ─────────────────────────────────────────────────────────────


def event_record(event: RestEvent) -> ActivityRecord | None:
    timestamp = _as_utc(event.created_at)
    if timestamp is None:
        return None
    return ActivityRecord(
        timestamp=timestamp,
        kind=SourceKind.EVENT,
        # Events have no permalink; the API id is unique
        url=f"{API_BASE_URL}/events/{event.id}",
        repository=event.repo.name,
        author=event.actor.login if event.actor else None,
        title=event.type,
    )


def commit_record(item: CommitSearchItem) -> ActivityRecord | None:
    # Author date is when the work happened; committer date changes on rebase
    author_date = item.commit.author.date if item.commit.author else None
    committer_date = item.commit.committer.date if item.commit.committer else None
    timestamp = _as_utc(author_date or committer_date)
    if timestamp is None:
        return None
    repository = item.repository.full_name if item.repository else ""
    return ActivityRecord(
        timestamp=timestamp,
        kind=SourceKind.COMMIT,
        url=item.html_url,
        repository=repository or extract_repo_from_url(item.html_url),
        author=item.author.login if item.author else None,
    )


def pull_request_record(pr: PullRequest) -> ActivityRecord | None:
    timestamp = _as_utc(pr.created_at)
    if timestamp is None:
        return None
    return ActivityRecord(
        timestamp=timestamp,
        kind=SourceKind.PULL_REQUEST,
        url=pr.url,
        repository=pr.repository,
        title=pr.title,
    )


def issue_record(issue: Issue) -> ActivityRecord | None:
    timestamp = _as_utc(issue.created_at)
    if timestamp is None:
        return None
    return ActivityRecord(
        timestamp=timestamp,
        kind=SourceKind.ISSUE,
        url=issue.url,
        repository=issue.repository,
        title=issue.title,
    )


def comment_record(comment: Comment) -> ActivityRecord | None:
    timestamp = _as_utc(comment.created_at)
    if timestamp is None:
        return None
    preview = (comment.body or "").strip().splitlines()
    return ActivityRecord(
        timestamp=timestamp,
        kind=SourceKind.COMMENT,
        url=comment.url,
        repository=comment.repository,
        title=preview[0][:100] if preview else None,
    )


def gist_record(gist: RestGist | GraphGist) -> ActivityRecord | None:
    timestamp = _as_utc(gist.created_at)
    if timestamp is None:
        return None
    url = gist.html_url if isinstance(gist, RestGist) else gist.url
    title = "created gist"
    if gist.description and len(gist.description) <= 100:
        title = f"created gist: {gist.description}"
    return ActivityRecord(timestamp=timestamp, kind=SourceKind.GIST, url=url, title=title)


def star_record(item: StarItem) -> ActivityRecord | None:
    """Keyed on the stargazers page so starring an own repository keeps both records."""
    timestamp = _as_utc(item.starred_at)
    if timestamp is None:
        return None
    repo_url = item.repo.html_url or f"https://github.com/{item.repo.full_name}"
    return ActivityRecord(
        timestamp=timestamp,
        kind=SourceKind.STAR,
        url=f"{repo_url}/stargazers",
        repository=item.repo.full_name,
        title=f"starred {item.repo.full_name}",
    )


def repository_record(repo: Repository) -> ActivityRecord | None:
    """Repository creation; forks were not created by the user and are skipped."""
    if repo.is_fork:
        return None
    timestamp = _as_utc(repo.created_at)
    if timestamp is None:
        return None
    return ActivityRecord(
        timestamp=timestamp,
        kind=SourceKind.REPOSITORY,
        url=repo.url or f"https://github.com/{repo.full_name}",
        repository=repo.full_name,
        title=repo.description or f"created repository: {repo.name}",
    )
