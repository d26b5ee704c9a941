"""FastAPI application factory."""

from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from api.handlers import handle_admin, handle_index, handle_proxy
from core.cache import MemoryResultCache
from core.config import Config
from core.headers import HeaderSanitizer
from core.player import PROXY_PATH
from core.protocols import EventLogger, PageRenderer, ResultCache
from core.router import StrategyDecider
from services.pipeline import PipelineCoordinator
from services.renderer import PlaywrightRenderer
from services.upstream import UpstreamClient
from ui.log_utils import write_cli_log


def create_app(
    config: Config,
    logger: EventLogger,
    *,
    cache: ResultCache | None = None,
    renderer: PageRenderer | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    ``cache``, ``renderer`` and ``transport`` replace the in-memory cache, the
    Playwright renderer and the network transport, mainly for tests.
    """
    result_cache = cache if cache is not None else MemoryResultCache(ttl=config.cache.ttl)
    sanitizer = HeaderSanitizer()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        limits = httpx.Limits(
            max_connections=config.limits.max_connections,
            max_keepalive_connections=config.limits.max_keepalive_connections,
        )
        upstream_client = httpx.AsyncClient(
            timeout=config.timeouts.fetch,
            limits=limits,
            follow_redirects=True,
            max_redirects=config.timeouts.max_redirects,
            transport=transport,
        )
        app.state.pipeline = PipelineCoordinator(
            cache=result_cache,
            upstream=UpstreamClient(upstream_client, config.timeouts),
            renderer=renderer or PlaywrightRenderer(config.render, sanitizer),
            logger=logger,
            sanitizer=sanitizer,
            decider=StrategyDecider(json_url_priority=config.routing.json_url_priority),
        )
        try:
            yield
        finally:
            await upstream_client.aclose()

    app = FastAPI(title="ProxyMagic", version="0.1.0", lifespan=lifespan)
    app.state.cache = result_cache

    limiter = Limiter(
        key_func=get_remote_address,
        default_limits=[f"{config.limits.requests_per_minute}/minute"],
        enabled=config.limits.rate_limit_enabled,
    )
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization", "Range"],
    )

    @app.middleware("http")
    async def powered_by(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Powered-By"] = "ProxyMagic"
        return response

    @app.exception_handler(Exception)
    async def uncaught_error(request: Request, exc: Exception):
        write_cli_log("ERROR", f"UNCAUGHT ERROR: {exc!r}", path=request.url.path)
        return PlainTextResponse("Internal Server Error", status_code=500)

    @app.get("/")
    async def index(request: Request):
        return await handle_index(request)

    @app.get(PROXY_PATH)
    async def proxy(request: Request):
        return await handle_proxy(request, logger)

    @app.get("/admin")
    async def admin(request: Request):
        return await handle_admin(request, config)

    return app
