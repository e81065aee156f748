"""Unit tests for GitHub helper utilities — error mapping, decoding, URL parsing."""

from __future__ import annotations

import httpx
import pytest

from ghactivity.services.github.exceptions import DecodeError, ProtocolError
from ghactivity.services.github.helpers import (
    RateLimitInfo,
    decode_list,
    decode_model,
    extract_repo_from_url,
    handle_error_response,
    is_cache_hit,
    is_valid_login,
)
from ghactivity.services.github.schemas import EVENTS_ADAPTER, RestUser
from tests.helpers.github_fakes import json_response


class TestHandleErrorResponse:
    def test_success_returns_none(self):
        assert handle_error_response(json_response({}), "user octocat") is None

    def test_401_invalid_token(self):
        with pytest.raises(ProtocolError, match="Invalid or expired") as exc_info:
            handle_error_response(json_response({}, 401), "user octocat")
        assert exc_info.value.status_code == 401

    def test_404_names_subject(self):
        with pytest.raises(ProtocolError, match="Not found: user octocat"):
            handle_error_response(json_response({}, 404), "user octocat")

    def test_403_rate_limit_keeps_reset(self):
        resp = json_response(
            {}, 403, headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1700000000"}
        )
        with pytest.raises(ProtocolError, match="rate limit exceeded") as exc_info:
            handle_error_response(resp, "events")
        assert exc_info.value.rate_limit_reset == 1700000000

    def test_403_secondary_rate_limit(self):
        resp = json_response({}, 403, headers={"Retry-After": "60"})
        with pytest.raises(ProtocolError, match="secondary rate limit"):
            handle_error_response(resp, "events")

    def test_403_plain_forbidden(self):
        with pytest.raises(ProtocolError, match="forbidden"):
            handle_error_response(json_response({}, 403), "events")

    def test_429(self):
        with pytest.raises(ProtocolError) as exc_info:
            handle_error_response(json_response({}, 429), "events")
        assert exc_info.value.status_code == 429

    def test_5xx(self):
        with pytest.raises(ProtocolError, match="server error: 502"):
            handle_error_response(json_response({}, 502), "events")


class TestRateLimitInfo:
    def test_parses_headers(self):
        info = RateLimitInfo(
            json_response({}, headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "42"})
        )
        assert info.is_exhausted is True
        assert info.reset_timestamp == 42

    def test_missing_headers(self):
        info = RateLimitInfo(json_response({}))
        assert info.is_exhausted is False
        assert info.reset_timestamp is None


class TestDecoding:
    def test_decode_model(self):
        user = decode_model(json_response({"login": "octocat", "followers": 3}), RestUser)
        assert user.login == "octocat"
        assert user.followers == 3

    def test_decode_model_schema_mismatch(self):
        with pytest.raises(DecodeError, match="RestUser"):
            decode_model(json_response({"name": "no login"}), RestUser)

    def test_decode_model_malformed_json(self):
        with pytest.raises(DecodeError):
            decode_model(httpx.Response(200, content=b"{not json"), RestUser)

    def test_decode_list_wrong_shape(self):
        with pytest.raises(DecodeError):
            decode_list(json_response({"message": "object, not list"}), EVENTS_ADAPTER)


class TestExtractRepoFromUrl:
    @pytest.mark.parametrize(
        ("url", "expected"),
        [
            ("https://github.com/acme/widget/pull/42", "acme/widget"),
            ("https://github.com/acme/widget/issues/7#issuecomment-1", "acme/widget"),
            ("https://github.com/acme/widget", "acme/widget"),
            ("https://github.com/acme/widget#readme", "acme/widget"),
            ("https://github.com/acme/widget?tab=readme", "acme/widget"),
            ("", ""),
            ("https://gitlab.com/acme/widget/pull/42", ""),
            ("https://github.com/acme", ""),
            ("https://github.com/", ""),
        ],
    )
    def test_extract(self, url: str, expected: str):
        assert extract_repo_from_url(url) == expected


class TestIsValidLogin:
    @pytest.mark.parametrize("login", ["octocat", "a", "octo-cat", "a" * 39, "x1-2-3"])
    def test_valid(self, login: str):
        assert is_valid_login(login) is True

    @pytest.mark.parametrize(
        "login", ["", "-octocat", "octocat-", "octo--cat", "a" * 40, "octo cat", "../etc", "o/c"]
    )
    def test_invalid(self, login: str):
        assert is_valid_login(login) is False


def test_is_cache_hit():
    assert is_cache_hit(json_response({}, headers={"X-From-Cache": "true"})) is True
    assert is_cache_hit(json_response({})) is False
