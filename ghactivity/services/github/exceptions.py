"""Exceptions for GitHub activity collection."""


class GitHubAPIError(Exception):
    """Error from GitHub API."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        rate_limit_reset: int | None = None,
    ):
        self.message = message
        self.status_code = status_code
        self.rate_limit_reset = rate_limit_reset  # Unix timestamp when rate limit resets
        super().__init__(message)


class TransportError(GitHubAPIError):
    """Network failure or timeout before a response was received."""


class ProtocolError(GitHubAPIError):
    """GitHub answered with a non-2xx status."""


class DecodeError(GitHubAPIError):
    """Response body was not valid JSON or did not match the expected schema."""


class AuthRequiredError(GitHubAPIError):
    """Operation strictly needs a GitHub token and none (or no valid one) is present."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"GitHub token required for {operation}", status_code=401)


class GraphErrorList(GitHubAPIError):
    """GraphQL returned application-level errors inside a 2xx response.

    The whole call is treated as failed; `errors` keeps every message GitHub
    reported so callers can log or surface them.
    """

    def __init__(self, errors: list[str]):
        self.errors = errors
        first = errors[0] if errors else "unknown error"
        extra = f" (+{len(errors) - 1} more)" if len(errors) > 1 else ""
        super().__init__(f"GraphQL error: {first}{extra}", status_code=200)
