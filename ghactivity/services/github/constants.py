"""
Constants for GitHub API operations.

Endpoints, media types, page sizes and the default adaptive budget used when
no settings override is supplied.
"""

API_BASE_URL = "https://api.github.com"
GRAPHQL_URL = f"{API_BASE_URL}/graphql"
WEB_BASE_URL = "https://github.com/"
API_VERSION = "2022-11-28"

# Media types
ACCEPT_JSON = "application/vnd.github+json"
ACCEPT_COMMIT_SEARCH = "application/vnd.github.cloak-preview+json"
ACCEPT_STAR_TIMESTAMPS = "application/vnd.github.v3.star+json"
ACCEPT_HTML = "text/html"

USER_AGENT = "ghactivity/0.1"

# Response header set by the caching executor on a cache hit
CACHE_HIT_HEADER = "X-From-Cache"

# REST pagination
DEFAULT_PER_PAGE = 100
MAX_PER_PAGE = 100
DEFAULT_SEARCH_MAX_PAGES = 2
DEFAULT_EVENTS_MAX_PAGES = 3
DEFAULT_COMMIT_SEARCH_PAGES = 2
MAX_PARALLEL_PAGES = 10

# GraphQL connection page size
GRAPHQL_PAGE_SIZE = 100

# Minimum number of records wanted before the aggregator stops paging
TARGET_DATA_POINTS = 160

# (accumulated below, additional pages) - first match wins
DEFAULT_BUDGET_TIERS: tuple[tuple[int, int], ...] = (
    (20, 8),
    (50, 6),
    (100, 4),
)
DEFAULT_BUDGET_FLOOR_PAGES = 3

# Comment pagination uses a fixed budget
COMMENT_TARGET = 200
COMMENT_MAX_ADDITIONAL_PAGES = 2

# Upper bound for the scraped profile page
PROFILE_HTML_MAX_BYTES = 2 * 1024 * 1024

# Timestamps older than this are zero values from the API, not real activity
MIN_VALID_YEAR = 2000

# How many starred repositories are kept as projections (most recent first)
MAX_STARRED_PROJECTIONS = 25

# Pinned repositories shown on a profile; also the size of the popular fallback
MAX_FEATURED_REPOSITORIES = 6
