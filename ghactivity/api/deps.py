"""Shared FastAPI dependencies."""

from ghactivity.config import settings
from ghactivity.services.github import ClientContext

# One context per process: it owns the caching executor over the shared client
_client_context: ClientContext | None = None


def get_client_context() -> ClientContext:
    """Return the process-wide ClientContext, building it from settings on first use."""
    global _client_context
    if _client_context is None:
        _client_context = ClientContext.from_settings(settings)
    return _client_context


def reset_client_context() -> None:
    """Drop the cached context so the next request builds a fresh one."""
    global _client_context
    _client_context = None
