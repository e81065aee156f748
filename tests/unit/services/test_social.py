"""Unit tests for social-link enrichment from the profile page."""

from __future__ import annotations

import httpx
import pytest

from ghactivity.services.github.cache import MAX_BODY_BYTES
from ghactivity.services.github.exceptions import ProtocolError
from ghactivity.services.github.social import (
    append_to_bio,
    extract_social_links,
    fetch_profile_links,
    needs_enrichment,
)

PROFILE_HTML = """
<ul class="vcard-details">
  <li><a rel="me" href="https://infosec.exchange/@jamon">@jamon@infosec.exchange</a></li>
  <li><a href="https://twitter.com/octocat">twitter</a></li>
  <li><a href="https://www.linkedin.com/in/octo-cat">linkedin</a></li>
  <li><a href="https://fosstodon.org/@octo">fosstodon</a></li>
  <li><a href="https://twitter.com/octocat">twitter again</a></li>
  <li><a href="https://example.com/about">not social</a></li>
</ul>
"""


class TestExtractSocialLinks:
    def test_finds_known_networks_once_each(self):
        links = extract_social_links(PROFILE_HTML)

        assert links[0] == "https://infosec.exchange/@jamon"
        assert "https://twitter.com/octocat" in links
        assert "https://www.linkedin.com/in/octo-cat" in links
        assert "https://fosstodon.org/@octo" in links
        assert len(links) == len(set(links))
        assert not any("example.com" in link for link in links)

    def test_no_links(self):
        assert extract_social_links("<html><body>nothing here</body></html>") == []


class TestBioHelpers:
    def test_needs_enrichment(self):
        assert needs_enrichment("") is True
        assert needs_enrichment("Rustacean in Berlin") is True
        assert needs_enrichment("ping me @octo") is False
        assert needs_enrichment("see https://octo.dev") is False

    def test_append_to_bio(self):
        assert append_to_bio("", ["https://x.com/a"]) == "https://x.com/a"
        assert append_to_bio("Hi", ["https://x.com/a", "https://x.com/b"]) == (
            "Hi | https://x.com/a | https://x.com/b"
        )

    def test_append_skips_links_already_present(self):
        assert append_to_bio("Hi https://x.com/a", ["https://x.com/a"]) == "Hi https://x.com/a"


class TestFetchProfileLinks:
    @pytest.mark.anyio
    async def test_fetches_unauthenticated_and_extracts(self, fake_executor, make_context):
        fake_executor.add("GET", "/octocat", httpx.Response(200, text=PROFILE_HTML))
        ctx = make_context()

        links = await fetch_profile_links(ctx, "octocat")

        request = fake_executor.requests[0]
        assert str(request.url) == "https://github.com/octocat"
        assert "Authorization" not in request.headers
        assert request.extensions[MAX_BODY_BYTES] == ctx.profile_html_max_bytes
        assert "https://twitter.com/octocat" in links

    @pytest.mark.anyio
    async def test_body_is_bounded(self, fake_executor, make_context):
        html = "x" * 100 + '<a href="https://twitter.com/late">t</a>'
        fake_executor.add("GET", "/octocat", httpx.Response(200, text=html))
        ctx = make_context(profile_html_max_bytes=50)

        assert await fetch_profile_links(ctx, "octocat") == []

    @pytest.mark.anyio
    async def test_uses_injected_extractor(self, fake_executor, make_context):
        fake_executor.add("GET", "/octocat", httpx.Response(200, text="<html/>"))
        ctx = make_context(link_extractor=lambda html: ["https://custom.example/@me"])

        assert await fetch_profile_links(ctx, "octocat") == ["https://custom.example/@me"]

    @pytest.mark.anyio
    async def test_non_200_raises(self, fake_executor, make_context):
        fake_executor.add("GET", "/octocat", httpx.Response(429))
        ctx = make_context()

        with pytest.raises(ProtocolError):
            await fetch_profile_links(ctx, "octocat")
