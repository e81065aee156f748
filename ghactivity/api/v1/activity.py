"""
Activity endpoints.

GET /api/v1/activity/{username} runs one aggregation and returns the
deduplicated records, the profile projections and any partial-data warnings.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict

from ghactivity.api.deps import get_client_context
from ghactivity.services.github import (
    ActivityAggregator,
    AggregatedActivity,
    ClientContext,
    is_valid_login,
)

router = APIRouter(prefix="/activity", tags=["activity"])
logger = logging.getLogger(__name__)


# --- Response Models ---


class _FromAttributes(BaseModel):
    model_config = ConfigDict(from_attributes=True)


class ActivityRecordResponse(_FromAttributes):
    """One timestamped action."""

    timestamp: datetime
    kind: str
    url: str
    repository: str
    author: str | None
    title: str | None


class SocialAccountResponse(_FromAttributes):
    provider: str
    url: str
    display_name: str | None


class ProfileResponse(_FromAttributes):
    """Public profile of the subject."""

    login: str
    name: str | None
    email: str | None
    location: str | None
    bio: str
    company: str | None
    blog: str
    twitter_username: str | None
    created_at: datetime | None
    updated_at: datetime | None
    followers: int
    following: int
    public_repos: int
    social_accounts: list[SocialAccountResponse]


class RepositoryResponse(_FromAttributes):
    name: str
    full_name: str
    url: str
    description: str | None
    language: str | None
    stars_count: int
    is_fork: bool
    created_at: datetime | None
    updated_at: datetime | None
    pushed_at: datetime | None


class OrganizationResponse(_FromAttributes):
    login: str
    name: str | None
    description: str | None
    location: str | None


class IssueResponse(_FromAttributes):
    """Pull request or issue."""

    title: str
    url: str
    created_at: datetime
    repository: str
    number: int | None
    state: str | None
    updated_at: datetime | None


class CommentResponse(_FromAttributes):
    url: str
    created_at: datetime
    repository: str


class WarningResponse(BaseModel):
    """A source that returned partial or no data."""

    source: str
    message: str
    status_code: int | None


class ActivityResponse(BaseModel):
    """Response for an activity aggregation."""

    subject: str
    protocol: str
    data_points: int
    profile: ProfileResponse | None
    records: list[ActivityRecordResponse]
    pull_requests: list[IssueResponse]
    issues: list[IssueResponse]
    comments: list[CommentResponse]
    repositories: list[RepositoryResponse]
    starred_repositories: list[RepositoryResponse]
    featured_repositories: list[RepositoryResponse]
    organizations: list[OrganizationResponse]
    warnings: list[WarningResponse]

    @classmethod
    def from_result(cls, result: AggregatedActivity) -> "ActivityResponse":
        return cls(
            subject=result.subject,
            protocol=result.protocol,
            data_points=result.data_points,
            profile=ProfileResponse.model_validate(result.profile) if result.profile else None,
            records=[ActivityRecordResponse.model_validate(r) for r in result.records],
            pull_requests=[IssueResponse.model_validate(p) for p in result.pull_requests],
            issues=[IssueResponse.model_validate(i) for i in result.issues],
            comments=[CommentResponse.model_validate(c) for c in result.comments],
            repositories=[RepositoryResponse.model_validate(r) for r in result.repositories],
            starred_repositories=[
                RepositoryResponse.model_validate(r) for r in result.starred_repositories
            ],
            featured_repositories=[
                RepositoryResponse.model_validate(r) for r in result.featured_repositories
            ],
            organizations=[OrganizationResponse.model_validate(o) for o in result.organizations],
            warnings=[
                WarningResponse(
                    source=w.source,
                    message=w.error.message,
                    status_code=w.error.status_code,
                )
                for w in result.warnings
            ],
        )


# --- Endpoints ---


@router.get("/{username}", response_model=ActivityResponse)
async def get_activity(
    username: str,
    timeout: float | None = Query(
        None, gt=0, le=300, description="Overall deadline in seconds (defaults to settings)"
    ),
    ctx: ClientContext = Depends(get_client_context),
) -> ActivityResponse:
    """
    Aggregate GitHub activity for `username`.

    Partial failures are reported in `warnings`; the endpoint only errors when
    the username is malformed (400) or the user does not exist and nothing
    could be collected (404).
    """
    if not is_valid_login(username):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid GitHub username",
        )

    result = await ActivityAggregator(ctx).fetch_activity(username, timeout=timeout)

    if result.profile is None and not result.records:
        if any(w.error.status_code == 404 for w in result.warnings):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"GitHub user not found: {username}",
            )

    logger.info(f"Activity for {username}: {result.data_points} data points")
    return ActivityResponse.from_result(result)
