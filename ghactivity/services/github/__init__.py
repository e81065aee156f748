"""
GitHub activity package.

Re-exports the public types and entry points.
Usage: `from ghactivity.services.github import ActivityAggregator, ClientContext`

Module structure:
- aggregator.py: ActivityAggregator, protocol routing and fallback
- pagination.py: Adaptive cursor paginator and offset pagination
- fan_out.py: Parallel page fetcher
- merge.py: Deduplicating merge by provenance URL
- normalizer.py: Payload -> ActivityRecord and projections
- rest_operations.py / graphql_operations.py: Protocol-specific fetches
- social.py: Social-link enrichment from the profile page
- context.py: Per-session ClientContext
- credentials.py: Token validation
- cache.py / http_client.py: Shared client and caching executor
- helpers.py: Rate limit handling and error utilities
- types.py / schemas.py: Canonical types and decoded payloads
- exceptions.py: Error taxonomy
- constants.py: API constants and default budgets
"""

from ghactivity.services.github.aggregator import ActivityAggregator
from ghactivity.services.github.cache import CachingExecutor, HTTPExecutor
from ghactivity.services.github.context import ClientContext
from ghactivity.services.github.credentials import auth_headers, is_valid_token
from ghactivity.services.github.exceptions import (
    AuthRequiredError,
    DecodeError,
    GitHubAPIError,
    GraphErrorList,
    ProtocolError,
    TransportError,
)
from ghactivity.services.github.fan_out import FanOutResult, fetch_pages_parallel
from ghactivity.services.github.helpers import (
    RateLimitInfo,
    extract_repo_from_url,
    handle_error_response,
    is_valid_login,
)
from ghactivity.services.github.http_client import close_github_client, get_github_client
from ghactivity.services.github.merge import RecordMerger, SeenKeySet, merge
from ghactivity.services.github.pagination import (
    AdaptivePaginator,
    BudgetTier,
    BudgetTiers,
    FetchBudget,
    OffsetResult,
    Page,
    PaginatorState,
    paginate_offset,
)
from ghactivity.services.github.social import extract_social_links
from ghactivity.services.github.types import (
    ActivityRecord,
    AggregatedActivity,
    Comment,
    FetchWarning,
    Issue,
    Organization,
    PageCursor,
    Profile,
    Protocol,
    PullRequest,
    Repository,
    SocialAccount,
    SourceKind,
)

__all__ = [
    # Aggregator (main entry point)
    "ActivityAggregator",
    "ClientContext",
    # Pagination
    "AdaptivePaginator",
    "BudgetTier",
    "BudgetTiers",
    "FetchBudget",
    "OffsetResult",
    "Page",
    "PaginatorState",
    "paginate_offset",
    "FanOutResult",
    "fetch_pages_parallel",
    # Merge
    "merge",
    "RecordMerger",
    "SeenKeySet",
    # HTTP client lifecycle and transport
    "close_github_client",
    "get_github_client",
    "CachingExecutor",
    "HTTPExecutor",
    # Utilities
    "auth_headers",
    "is_valid_token",
    "is_valid_login",
    "extract_repo_from_url",
    "extract_social_links",
    "handle_error_response",
    "RateLimitInfo",
    # Exceptions
    "GitHubAPIError",
    "TransportError",
    "ProtocolError",
    "DecodeError",
    "AuthRequiredError",
    "GraphErrorList",
    # Types
    "ActivityRecord",
    "AggregatedActivity",
    "Comment",
    "FetchWarning",
    "Issue",
    "Organization",
    "PageCursor",
    "Profile",
    "Protocol",
    "PullRequest",
    "Repository",
    "SocialAccount",
    "SourceKind",
]
