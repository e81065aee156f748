"""
Social link enrichment from the public profile page.

Used only when the structured profile carries no contact hints: the HTML of
github.com/{login} is scanned for links to known social networks and the
results are appended to the bio. Never replaces structured data.
"""

import re
from typing import TYPE_CHECKING

from ghactivity.services.github.constants import ACCEPT_HTML, WEB_BASE_URL
from ghactivity.services.github.helpers import handle_error_response

if TYPE_CHECKING:
    from ghactivity.services.github.context import ClientContext

# Rendered Mastodon verification links: href="https://host/@user">@user@host
_MASTODON_LINK = re.compile(r'href="(https?://[^"]+/@[^"]+)"[^>]*>@[^@]+@[^<]+')

_SOCIAL_PATTERNS = [
    re.compile(pattern)
    for pattern in (
        r"https?://(?:www\.)?twitter\.com/\w+",
        r"https?://(?:www\.)?x\.com/\w+",
        r"https?://(?:www\.)?linkedin\.com/in/[\w-]+",
        r"https?://(?:www\.)?instagram\.com/[\w.]+",
        r"https?://(?:www\.)?facebook\.com/[\w.]+",
        r"https?://(?:www\.)?youtube\.com/[\w/-]+",
        r"https?://(?:www\.)?twitch\.tv/\w+",
        r"https?://[\w.-]+\.social/@\w+",
        r"https?://mastodon\.[\w.-]+/@\w+",
        r"https?://fosstodon\.org/@\w+",
        r"https?://infosec\.exchange/@\w+",
        r"https?://[\w.-]+\.party/@\w+",
    )
]


def extract_social_links(html: str) -> list[str]:
    """
    Find social network profile URLs in an HTML page.

    Returns unique URLs in order of first appearance, Mastodon verification
    links first.
    """
    found = [m.group(1) for m in _MASTODON_LINK.finditer(html)]
    for pattern in _SOCIAL_PATTERNS:
        found.extend(pattern.findall(html))
    return list(dict.fromkeys(found))


def append_to_bio(bio: str, links: list[str]) -> str:
    """Append links not already mentioned in `bio`, joined with " | "."""
    parts = [bio] if bio else []
    parts.extend(link for link in links if link not in bio)
    return " | ".join(parts)


def needs_enrichment(bio: str) -> bool:
    """A bio without any handle or URL gets the HTML fallback."""
    return "@" not in bio and "http" not in bio


async def fetch_profile_links(ctx: "ClientContext", login: str) -> list[str]:
    """
    Fetch the public profile page and extract social links with the context's extractor.

    At most `ctx.profile_html_max_bytes` of the body are read; the page is
    never cached.

    Raises:
        GitHubAPIError: If the page could not be fetched
    """
    response = await ctx.send(
        "GET",
        f"{WEB_BASE_URL}{login}",
        accept=ACCEPT_HTML,
        authenticated=False,
        max_bytes=ctx.profile_html_max_bytes,
    )
    handle_error_response(response, f"profile page for {login}")

    # Executors that ignore the read bound still get a bounded extraction
    body = response.content[: ctx.profile_html_max_bytes]
    links = ctx.link_extractor(body.decode(response.encoding or "utf-8", errors="replace"))
    ctx.logger.debug(f"Found {len(links)} social links on profile page for {login}")
    return links
