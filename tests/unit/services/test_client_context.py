"""Unit tests for ClientContext — request construction and transport error mapping."""

from __future__ import annotations

import logging

import httpx
import pytest

from ghactivity.config import Settings
from ghactivity.services.github.constants import ACCEPT_JSON, API_VERSION
from ghactivity.services.github.context import ClientContext
from ghactivity.services.github.exceptions import TransportError
from ghactivity.services.github.pagination import BudgetTier
from tests.helpers.github_fakes import TOKEN, FakeExecutor, json_response


class TestSend:
    @pytest.mark.anyio
    async def test_sets_version_accept_and_auth_headers(self, fake_executor, make_context):
        fake_executor.add("GET", "/users/octocat", json_response({}))
        ctx = make_context()

        await ctx.send("GET", "https://api.github.com/users/octocat", params={"per_page": 100})

        request = fake_executor.requests[0]
        assert request.headers["Accept"] == ACCEPT_JSON
        assert request.headers["X-GitHub-Api-Version"] == API_VERSION
        assert request.headers["Authorization"] == f"Bearer {TOKEN}"
        assert request.url.params["per_page"] == "100"

    @pytest.mark.anyio
    async def test_token_with_newline_is_never_sent(self, fake_executor, make_context, caplog):
        fake_executor.add("GET", "/users/octocat", json_response({}))
        bad_token = TOKEN + "\n"

        with caplog.at_level(logging.WARNING):
            ctx = make_context(token=bad_token)
            await ctx.send("GET", "https://api.github.com/users/octocat")

        assert ctx.has_valid_token is False
        assert "Authorization" not in fake_executor.requests[0].headers
        assert bad_token.strip() not in caplog.text

    @pytest.mark.anyio
    async def test_unauthenticated_request_skips_auth_header(self, fake_executor, make_context):
        fake_executor.add("GET", "/octocat", httpx.Response(200, text="<html></html>"))
        ctx = make_context()

        await ctx.send("GET", "https://github.com/octocat", authenticated=False)

        assert "Authorization" not in fake_executor.requests[0].headers

    @pytest.mark.anyio
    async def test_timeout_maps_to_transport_error(self, make_context):
        async def executor(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        ctx = make_context(executor=executor)

        with pytest.raises(TransportError, match="Timed out"):
            await ctx.send("GET", "https://api.github.com/users/octocat")

    @pytest.mark.anyio
    async def test_connection_error_maps_to_transport_error(self, make_context):
        async def executor(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        ctx = make_context(executor=executor)

        with pytest.raises(TransportError, match="Network error"):
            await ctx.send("GET", "https://api.github.com/users/octocat")


class TestFromSettings:
    def test_copies_limits_and_budget(self):
        settings = Settings(
            github_token=TOKEN,
            target_data_points=50,
            budget_tiers=[(10, 5)],
            budget_floor_pages=1,
            search_max_pages=1,
        )

        ctx = ClientContext.from_settings(settings, executor=FakeExecutor())

        assert ctx.has_valid_token is True
        assert ctx.target_data_points == 50
        assert ctx.budget_tiers.tiers == (BudgetTier(10, 5),)
        assert ctx.budget_tiers.floor == 1
        assert ctx.search_max_pages == 1

    def test_overrides_win(self):
        ctx = ClientContext.from_settings(Settings(), executor=FakeExecutor(), per_page=30)
        assert ctx.per_page == 30
