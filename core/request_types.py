"""Shared request and response data types."""

from collections.abc import AsyncIterator, Awaitable, Callable, Mapping
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from urllib.parse import unquote, urlsplit

import httpx

from core.exceptions import InvalidInput

ALLOWED_SCHEMES = {"http", "https"}
FORBIDDEN_HOST_CHARS = re.compile(r"[\s#%/<>?@\[\\\]^|]")
MALFORMED_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


class ContentCategory(str, Enum):
    """What a target URL is believed to serve."""

    HTML = "html"
    JSON = "json"
    VIDEO = "video"
    UNKNOWN = "unknown"


class CacheKind(str, Enum):
    """Payload kinds the result cache accepts."""

    HTML = "html"
    JSON = "json"


CONTENT_TYPES = {
    CacheKind.HTML: "text/html; charset=utf-8",
    CacheKind.JSON: "application/json; charset=utf-8",
}


@dataclass(frozen=True)
class TargetRequest:
    """A validated request for one target URL.

    Attributes:
        url: Absolute http(s) URL to fetch
        client_headers: Headers sent by the client, names lowercased
        range_header: Client ``Range`` header, if any
    """

    url: str
    client_headers: Mapping[str, str] = field(default_factory=dict)
    range_header: str | None = None

    def __post_init__(self) -> None:
        try:
            parts = urlsplit(self.url)
            parts.port  # raises on a non-numeric or out-of-range port
            httpx.URL(self.url)
        except (ValueError, httpx.InvalidURL) as e:
            raise InvalidInput(f"{self.url!r} is not a valid URL: {e}") from e
        if parts.scheme.lower() not in ALLOWED_SCHEMES or not parts.hostname:
            raise InvalidInput(f"{self.url!r} is not an absolute http(s) URL")
        # IPv6 literals were already checked by urlsplit
        if ":" not in parts.hostname and FORBIDDEN_HOST_CHARS.search(parts.hostname):
            raise InvalidInput(f"{self.url!r} has an invalid host")
        headers = {str(k).lower(): str(v) for k, v in self.client_headers.items()}
        object.__setattr__(self, "client_headers", MappingProxyType(headers))

    @classmethod
    def from_query(cls, raw_url: str, headers: Mapping[str, str]) -> "TargetRequest":
        """Build from the ``url`` query value and the inbound headers."""
        if MALFORMED_ESCAPE.search(raw_url):
            raise InvalidInput("URI malformed: '%' must be followed by two hex digits")
        try:
            url = unquote(raw_url, errors="strict").strip()
        except UnicodeDecodeError as e:
            raise InvalidInput(f"URI malformed: {e}") from e
        lowered = {k.lower(): v for k, v in headers.items()}
        return cls(url=url, client_headers=lowered, range_header=lowered.get("range") or None)


@dataclass(frozen=True)
class Probed:
    """Headers returned by a successful HEAD probe (names lowercased)."""

    headers: Mapping[str, str]


@dataclass(frozen=True)
class NoProbe:
    """The probe was refused, failed or skipped."""

    reason: str = "skipped"


ProbeResult = Probed | NoProbe


@dataclass(frozen=True)
class BufferedResponse:
    """A fully materialized response body."""

    content_type: str
    body: str
    from_cache: bool = False


@dataclass(frozen=True)
class StreamedResponse:
    """An upstream byte stream handed to the caller for incremental delivery.

    The caller owns the stream once returned and must await ``close`` when
    done, whether or not ``byte_source`` was exhausted.
    """

    content_type: str | None
    headers: dict[str, str]
    byte_source: AsyncIterator[bytes]
    close: Callable[[], Awaitable[None]]
    status_code: int = 200


ResponseDescriptor = BufferedResponse | StreamedResponse
