"""Shared protocol definitions."""

from typing import Protocol

from core.cache import CacheEntry
from core.request_types import CacheKind, ContentCategory, ProbeResult


class EventLogger(Protocol):
    """Protocol for pipeline event logging (Dashboard)."""

    def log_invalid(self, message: str) -> None: ...
    def log_cache_hit(self, url: str, kind: CacheKind) -> None: ...
    def log_probe(self, url: str, probe: ProbeResult) -> None: ...
    def log_dispatch(self, url: str, category: ContentCategory, strategy: str) -> None: ...
    def log_complete(self, url: str, strategy: str, detail: str = "") -> None: ...
    def log_error(self, url: str, error: BaseException) -> None: ...


class ResultCache(Protocol):
    """Protocol for the HTML/JSON result cache."""

    def get(self, key: str) -> CacheEntry | None: ...
    def put(self, key: str, kind: CacheKind, payload: str) -> CacheEntry: ...
    def list_keys(self) -> list[str]: ...


class PageRenderer(Protocol):
    """Protocol for the headless-browser capability."""

    async def render(self, url: str, headers: dict[str, str]) -> str: ...
