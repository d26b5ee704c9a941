"""FastAPI route handlers."""

from fastapi import Request, Response
from fastapi.responses import JSONResponse, PlainTextResponse, StreamingResponse
from starlette.background import BackgroundTask

from core.config import Config
from core.exceptions import InvalidInput, PipelineError
from core.protocols import EventLogger
from core.request_types import ResponseDescriptor, StreamedResponse, TargetRequest
from ui.log_utils import read_log_tail


async def handle_proxy(
    request: Request,
    logger: EventLogger,
) -> Response | StreamingResponse:
    """Handle /proxy?url=... through the pipeline."""
    raw_url = request.query_params.get("url")
    if not raw_url:
        logger.log_invalid("Proxy called without url")
        return PlainTextResponse("Missing url query parameter", status_code=400)

    try:
        target = TargetRequest.from_query(raw_url, dict(request.headers))
    except InvalidInput as e:
        logger.log_invalid(f"Invalid URL received: {raw_url}")
        return PlainTextResponse(f"Invalid URL: {e}", status_code=400)

    pipeline = request.app.state.pipeline
    try:
        descriptor = await pipeline.handle(target)
    except PipelineError as e:
        return PlainTextResponse(f"Internal Server Error: {e}", status_code=500)
    return to_response(descriptor)


def to_response(descriptor: ResponseDescriptor) -> Response | StreamingResponse:
    """Turn a pipeline descriptor into a starlette response."""
    if isinstance(descriptor, StreamedResponse):
        return StreamingResponse(
            descriptor.byte_source,
            status_code=descriptor.status_code,
            headers=descriptor.headers,
            background=BackgroundTask(descriptor.close),
        )
    return Response(content=descriptor.body, media_type=descriptor.content_type)


async def handle_admin(request: Request, config: Config) -> JSONResponse:
    """Read-only view of cache keys and the tail of the CLI log."""
    keys = request.app.state.cache.list_keys()
    return JSONResponse(
        {
            "stats": {"totalCached": len(keys), "keys": keys},
            "logs": read_log_tail(config.logging.tail_lines),
        }
    )


async def handle_index(request: Request) -> JSONResponse:
    """Usage hint for the root path."""
    return JSONResponse(
        {
            "service": "ProxyMagic",
            "usage": "/proxy?url=<absolute http(s) URL>",
            "url": request.query_params.get("url"),
        }
    )
