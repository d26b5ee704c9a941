"""Header filtering between the client and the upstream origin."""

from collections.abc import Mapping
from typing import Any

SAFE_REQUEST_HEADERS = (
    "authorization",
    "cookie",
    "accept-language",
    "range",
    "user-agent",
    "referer",
)
# The browser supplies its own user agent and never sends Range for a document
RENDER_REQUEST_HEADERS = ("authorization", "cookie", "accept-language", "referer")
FORWARDED_RESPONSE_HEADERS = (
    "content-type",
    "content-length",
    "accept-ranges",
    "content-range",
    "cache-control",
)


class HeaderSanitizer:
    """Restrict header sets to fixed allow-lists."""

    def sanitize(self, headers: Mapping[str, Any]) -> dict[str, str]:
        """Keep only allow-listed client headers with a non-empty value."""
        return _pick(headers, SAFE_REQUEST_HEADERS)

    def for_render(self, headers: Mapping[str, Any]) -> dict[str, str]:
        """Subset passed to the browsing context as extra HTTP headers."""
        return _pick(headers, RENDER_REQUEST_HEADERS)

    def forward_response(self, headers: Mapping[str, Any]) -> dict[str, str]:
        """Upstream response headers relayed verbatim on streamed responses."""
        return _pick(headers, FORWARDED_RESPONSE_HEADERS)


def _pick(headers: Mapping[str, Any], allowed: tuple[str, ...]) -> dict[str, str]:
    picked: dict[str, str] = {}
    for key, value in headers.items():
        key_lower = str(key).lower()
        if key_lower in allowed and value:
            picked[key_lower] = str(value)
    return picked
