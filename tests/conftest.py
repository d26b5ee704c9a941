"""Shared fixtures: fake renderer, recording logger, controllable clock."""

import httpx
import pytest

from core.cache import MemoryResultCache
from core.config import Config, TimeoutSettings
from services.pipeline import PipelineCoordinator
from services.upstream import UpstreamClient


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRenderer:
    """PageRenderer double that counts calls."""

    def __init__(self, html: str = "<html><body>rendered</body></html>", error: Exception | None = None):
        self.html = html
        self.error = error
        self.calls: list[tuple[str, dict[str, str]]] = []

    async def render(self, url: str, headers: dict[str, str]) -> str:
        self.calls.append((url, headers))
        if self.error:
            raise self.error
        return self.html


class RecordingLogger:
    """EventLogger double that keeps every event."""

    def __init__(self):
        self.events: list[tuple] = []

    def log_invalid(self, message):
        self.events.append(("invalid", message))

    def log_cache_hit(self, url, kind):
        self.events.append(("cache_hit", url, kind))

    def log_probe(self, url, probe):
        self.events.append(("probe", url, probe))

    def log_dispatch(self, url, category, strategy):
        self.events.append(("dispatch", url, category, strategy))

    def log_complete(self, url, strategy, detail=""):
        self.events.append(("complete", url, strategy))

    def log_error(self, url, error):
        self.events.append(("error", url, error))

    def of(self, kind: str) -> list[tuple]:
        return [e for e in self.events if e[0] == kind]


class Upstream:
    """Route table for httpx.MockTransport that records every request.

    A route is a Response (copied per request), an exception to raise, or a
    callable building the Response.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], object] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, url: str, response) -> None:
        self.routes[(method, url)] = response

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        result = self.routes.get((request.method, str(request.url)))
        if result is None:
            return httpx.Response(405 if request.method == "HEAD" else 404)
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(request)
        return httpx.Response(result.status_code, headers=result.headers, stream=httpx.ByteStream(result.content))

    def calls(self, method: str | None = None) -> list[httpx.Request]:
        return [r for r in self.requests if method is None or r.method == method]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MemoryResultCache(ttl=300, clock=clock)


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def logger():
    return RecordingLogger()


@pytest.fixture
def upstream():
    return Upstream()


@pytest.fixture
def config():
    config = Config()
    config.limits.rate_limit_enabled = False
    return config


@pytest.fixture
async def http_client(upstream):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(upstream.handler),
        follow_redirects=True,
        max_redirects=5,
    ) as client:
        yield client


@pytest.fixture
def pipeline(cache, renderer, logger, http_client):
    return PipelineCoordinator(
        cache=cache,
        upstream=UpstreamClient(http_client, TimeoutSettings()),
        renderer=renderer,
        logger=logger,
    )


@pytest.fixture
def log_file(tmp_path, monkeypatch):
    path = tmp_path / "logs" / "proxy.log"
    monkeypatch.setattr("ui.log_utils.CLI_LOG_FILE", path)
    return path
