"""Delivery strategies: render, structured fetch and stream passthrough."""

import json
from collections.abc import AsyncIterator

import httpx

from core.cache import cache_key
from core.exceptions import StreamTransferError
from core.headers import HeaderSanitizer
from core.player import build_player_document, find_streaming_link
from core.protocols import EventLogger, PageRenderer, ResultCache
from core.request_types import (
    CONTENT_TYPES,
    BufferedResponse,
    CacheKind,
    StreamedResponse,
    TargetRequest,
)
from core.router import Strategy
from services.upstream import UpstreamClient


class RenderStrategy:
    """Materialize a page through the headless browser and cache it as HTML."""

    name = Strategy.RENDER

    def __init__(self, renderer: PageRenderer, cache: ResultCache, logger: EventLogger) -> None:
        self._renderer = renderer
        self._cache = cache
        self._logger = logger

    async def execute(self, request: TargetRequest, headers: dict[str, str]) -> BufferedResponse:
        html = await self._renderer.render(request.url, headers)
        self._cache.put(cache_key(request.url), CacheKind.HTML, html)
        self._logger.log_complete(request.url, self.name.value, f"{len(html)} chars")
        return BufferedResponse(CONTENT_TYPES[CacheKind.HTML], html)


class StructuredFetchStrategy:
    """Fetch a JSON document; wrap it in a player page if it points at a stream.

    The cache always receives the JSON itself, never the player page.
    """

    name = Strategy.STRUCTURED

    def __init__(self, upstream: UpstreamClient, cache: ResultCache, logger: EventLogger) -> None:
        self._upstream = upstream
        self._cache = cache
        self._logger = logger

    async def execute(self, request: TargetRequest, headers: dict[str, str]) -> BufferedResponse:
        data = await self._upstream.fetch_json(request.url, headers)
        payload = json.dumps(data, ensure_ascii=False, separators=(",", ":"))
        self._cache.put(cache_key(request.url), CacheKind.JSON, payload)

        link = find_streaming_link(data)
        if link:
            self._logger.log_complete(request.url, self.name.value, f"player for {link}")
            return BufferedResponse(CONTENT_TYPES[CacheKind.HTML], build_player_document(link, data))

        self._logger.log_complete(request.url, self.name.value)
        return BufferedResponse(CONTENT_TYPES[CacheKind.JSON], payload)


class StreamStrategy:
    """Relay the upstream body chunk by chunk; never cached."""

    name = Strategy.STREAM

    def __init__(
        self,
        upstream: UpstreamClient,
        logger: EventLogger,
        sanitizer: HeaderSanitizer | None = None,
    ) -> None:
        self._upstream = upstream
        self._logger = logger
        self._sanitizer = sanitizer or HeaderSanitizer()

    async def execute(self, request: TargetRequest, headers: dict[str, str]) -> StreamedResponse:
        upstream_headers = dict(headers)
        if request.range_header:
            upstream_headers["range"] = request.range_header
        # Byte ranges and Content-Length must refer to the bytes we relay
        upstream_headers["accept-encoding"] = "identity"

        response = await self._upstream.open_stream(request.url, upstream_headers)
        forwarded = self._sanitizer.forward_response(response.headers)
        return StreamedResponse(
            content_type=forwarded.get("content-type"),
            headers=forwarded,
            byte_source=self._relay(request.url, response),
            close=response.aclose,
            status_code=response.status_code,
        )

    async def _relay(self, url: str, response: httpx.Response) -> AsyncIterator[bytes]:
        """Yield raw upstream chunks; a broken upstream ends the transfer early."""
        try:
            async for chunk in response.aiter_raw():
                yield chunk
        except httpx.HTTPError as e:
            self._logger.log_error(url, StreamTransferError(f"Stream error: {e}"))
        else:
            self._logger.log_complete(url, self.name.value)
        finally:
            await response.aclose()
