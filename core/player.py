"""Playback page for JSON payloads that point at a media stream."""

import html
import json
from typing import Any
from urllib.parse import quote

PROXY_PATH = "/proxy"

_PLAYER_TEMPLATE = """<!doctype html>
<html>
  <head><meta charset="utf-8"><title>ProxyVideo</title></head>
  <body style="font-family: sans-serif; padding:20px;">
    <h2>Playing stream</h2>
    <p>Source (proxied): {source}</p>
    <video controls autoplay style="width:100%;max-width:1000px;">
      <source src="{proxied}" />
      Your browser does not support the video tag.
    </video>
    <hr />
    <h3>Raw JSON</h3>
    <pre>{raw}</pre>
  </body>
</html>
"""


def find_streaming_link(data: Any) -> str | None:
    """Return the first of data.streamingLink, data.stream, streamingLink that is set."""
    if not isinstance(data, dict):
        return None
    nested = data.get("data")
    if isinstance(nested, dict):
        for field in ("streamingLink", "stream"):
            if nested.get(field):
                return str(nested[field])
    if data.get("streamingLink"):
        return str(data["streamingLink"])
    return None


def proxied_url(link: str) -> str:
    """Same-service URL that re-enters the proxy for ``link``."""
    return f"{PROXY_PATH}?url={quote(link, safe='')}"


def build_player_document(link: str, data: Any) -> str:
    """HTML page with a <video> element sourced through the proxy plus the raw JSON."""
    return _PLAYER_TEMPLATE.format(
        source=html.escape(link),
        proxied=html.escape(proxied_url(link)),
        raw=html.escape(json.dumps(data, indent=2, ensure_ascii=False), quote=False),
    )
