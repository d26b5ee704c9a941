"""HTTP access to upstream origins: HEAD probe, buffered GET, streaming GET."""

from typing import Any

import httpx

from core.config import TimeoutSettings
from core.exceptions import (
    ProbeFailure,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamTimeoutError,
)


class UpstreamClient:
    """Issue upstream requests through one shared httpx client.

    Redirect limits are a property of the httpx client itself
    (``max_redirects``); every request here follows redirects.
    """

    def __init__(self, client: httpx.AsyncClient, timeouts: TimeoutSettings) -> None:
        self._client = client
        self._timeouts = timeouts

    async def probe(self, url: str, headers: dict[str, str]) -> dict[str, str]:
        """HEAD the target and return its response headers (names lowercased)."""
        try:
            response = await self._client.head(
                url,
                headers=headers,
                timeout=self._timeouts.probe,
                follow_redirects=True,
            )
        except httpx.TimeoutException as e:
            raise ProbeFailure(f"HEAD timed out: {e}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise ProbeFailure(f"HEAD failed: {e}") from e
        if not response.is_success:
            raise ProbeFailure(f"HEAD returned {response.status_code}")
        return {key.lower(): value for key, value in response.headers.items()}

    async def fetch_json(self, url: str, headers: dict[str, str]) -> Any:
        """GET the target in one piece and parse it as JSON."""
        try:
            response = await self._client.get(
                url,
                headers=headers,
                timeout=self._timeouts.fetch,
                follow_redirects=True,
            )
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError("Upstream timeout", url=url) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}", url=url) from e

        if not response.is_success:
            raise UpstreamError(
                f"Upstream returned {response.status_code}",
                status_code=response.status_code,
                url=url,
            )
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError(f"Upstream body is not valid JSON: {e}", url=url) from e

    async def open_stream(self, url: str, headers: dict[str, str]) -> httpx.Response:
        """Send a streaming GET and return the response with its body unread.

        The caller must ``aclose()`` the response.
        """
        try:
            req = self._client.build_request(
                "GET",
                url,
                headers=headers,
                timeout=httpx.Timeout(self._timeouts.stream),
            )
            response = await self._client.send(req, stream=True, follow_redirects=True)
        except httpx.TimeoutException as e:
            raise UpstreamTimeoutError("Upstream timeout", url=url) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamConnectionError(f"Upstream connection error: {e}", url=url) from e

        if not response.is_success:
            status = response.status_code
            await response.aclose()
            raise UpstreamError(f"Upstream returned {status}", status_code=status, url=url)
        return response
