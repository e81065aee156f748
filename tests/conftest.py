"""Root conftest — shared fixtures for ghactivity tests.

Provides:
- A routed fake executor in place of the shared HTTP client
- A ClientContext factory wired to that executor
"""

from __future__ import annotations

import logging

import pytest

from ghactivity.services.github.context import ClientContext
from tests.helpers.github_fakes import TOKEN, FakeExecutor


@pytest.fixture
def fake_executor() -> FakeExecutor:
    """Empty fake executor; tests register routes on it."""
    return FakeExecutor()


@pytest.fixture
def make_context(fake_executor: FakeExecutor):
    """Build a ClientContext over `fake_executor`; keyword overrides win."""

    def _make(token: str = TOKEN, **overrides: object) -> ClientContext:
        values: dict[str, object] = {
            "token": token,
            "executor": fake_executor,
            "logger": logging.getLogger("ghactivity.tests"),
            "aggregation_timeout": 10.0,
        }
        values.update(overrides)
        return ClientContext(**values)  # type: ignore[arg-type]

    return _make


@pytest.fixture
def anyio_backend() -> str:
    """The code under test is asyncio-based; run anyio tests on asyncio only."""
    return "asyncio"
