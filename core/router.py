"""Strategy dispatch - decides render vs structured fetch vs stream."""

from dataclasses import dataclass
from enum import Enum

from core.classifier import looks_like_json
from core.request_types import ContentCategory


class Strategy(str, Enum):
    RENDER = "render"
    STRUCTURED = "structured"
    STREAM = "stream"


@dataclass(frozen=True)
class RouteDecision:
    """Dispatch decision for a request."""

    strategy: Strategy
    category: ContentCategory


class StrategyDecider:
    """Pick exactly one delivery strategy per request.

    With ``json_url_priority`` enabled, an ``/api/`` or ``.json`` URL goes to
    the structured fetch even when the probe said VIDEO or nothing useful.
    """

    def __init__(self, json_url_priority: bool = True):
        self.json_url_priority = json_url_priority

    def decide(self, category: ContentCategory, url: str) -> RouteDecision:
        """Return the strategy for an already classified URL."""
        if category is ContentCategory.HTML:
            return RouteDecision(Strategy.RENDER, category)
        if category is ContentCategory.JSON or (
            self.json_url_priority and looks_like_json(url)
        ):
            return RouteDecision(Strategy.STRUCTURED, category)
        return RouteDecision(Strategy.STREAM, category)
