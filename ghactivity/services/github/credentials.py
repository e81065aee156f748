"""
GitHub token validation.

A token only reaches an Authorization header after passing a strict shape
check. Anything else (including values carrying CR/LF or other control
characters) is dropped and the request goes out unauthenticated.
"""

import re

# Personal (ghp_), OAuth (gho_), user-to-server (ghu_), server-to-server (ghs_)
# and refresh (ghr_) tokens.
_PREFIXED_TOKEN = re.compile(r"gh[pousr]_[A-Za-z0-9]{20,255}")
# Fine-grained personal access tokens
_FINE_GRAINED_TOKEN = re.compile(r"github_pat_[A-Za-z0-9_]{20,255}")
# Classic 40-character hex tokens
_CLASSIC_TOKEN = re.compile(r"[0-9a-fA-F]{40}")


def is_valid_token(token: str | None) -> bool:
    """Return True only if `token` matches a known GitHub token shape."""
    if not token:
        return False
    return any(
        pattern.fullmatch(token)
        for pattern in (_PREFIXED_TOKEN, _FINE_GRAINED_TOKEN, _CLASSIC_TOKEN)
    )


def auth_headers(token: str | None) -> dict[str, str]:
    """Authorization header for a valid token, empty dict otherwise."""
    if not is_valid_token(token):
        return {}
    return {"Authorization": f"Bearer {token}"}
