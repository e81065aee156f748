"""API test fixtures.

Builds on root conftest fixtures (fake_executor, make_context).
The app's ClientContext dependency is overridden so no request leaves the process.
"""

from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient


@pytest.fixture
async def api_client(make_context):
    """HTTP client against the app with an unauthenticated fake-backed context.

    Overrides: get_client_context
    """
    from ghactivity.api.deps import get_client_context
    from ghactivity.main import app

    ctx = make_context(token="")
    app.dependency_overrides[get_client_context] = lambda: ctx

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
