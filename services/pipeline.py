"""Request pipeline: cache lookup, probe, classify, dispatch."""

from core.cache import cache_key
from core.classifier import ContentClassifier
from core.exceptions import PipelineError, ProbeFailure
from core.headers import HeaderSanitizer
from core.protocols import EventLogger, PageRenderer, ResultCache
from core.request_types import (
    CONTENT_TYPES,
    BufferedResponse,
    NoProbe,
    Probed,
    ProbeResult,
    ResponseDescriptor,
    TargetRequest,
)
from core.router import Strategy, StrategyDecider
from services.strategies import RenderStrategy, StreamStrategy, StructuredFetchStrategy
from services.upstream import UpstreamClient


class PipelineCoordinator:
    """Serve one TargetRequest with exactly one strategy.

    Cache hits return without touching the upstream. Strategy failures are
    logged and re-raised as a single PipelineError; nothing is retried.
    """

    def __init__(
        self,
        cache: ResultCache,
        upstream: UpstreamClient,
        renderer: PageRenderer,
        logger: EventLogger,
        sanitizer: HeaderSanitizer | None = None,
        classifier: ContentClassifier | None = None,
        decider: StrategyDecider | None = None,
    ) -> None:
        self._cache = cache
        self._upstream = upstream
        self._logger = logger
        self._sanitizer = sanitizer or HeaderSanitizer()
        self._classifier = classifier or ContentClassifier()
        self._decider = decider or StrategyDecider()
        self._strategies = {
            Strategy.RENDER: RenderStrategy(renderer, cache, logger),
            Strategy.STRUCTURED: StructuredFetchStrategy(upstream, cache, logger),
            Strategy.STREAM: StreamStrategy(upstream, logger, self._sanitizer),
        }

    async def handle(self, request: TargetRequest) -> ResponseDescriptor:
        """Return a response descriptor for ``request``."""
        entry = self._cache.get(cache_key(request.url))
        if entry is not None:
            self._logger.log_cache_hit(request.url, entry.kind)
            return BufferedResponse(CONTENT_TYPES[entry.kind], entry.payload, from_cache=True)

        headers = self._sanitizer.sanitize(request.client_headers)
        probe = await self._probe(request.url, headers)
        category = self._classifier.classify(request.url, probe)
        decision = self._decider.decide(category, request.url)
        self._logger.log_dispatch(request.url, category, decision.strategy.value)

        strategy = self._strategies[decision.strategy]
        try:
            return await strategy.execute(request, headers)
        except Exception as e:
            # CancelledError is a BaseException and still propagates
            self._logger.log_error(request.url, e)
            raise PipelineError(str(e) or type(e).__name__, url=request.url) from e

    async def _probe(self, url: str, headers: dict[str, str]) -> ProbeResult:
        try:
            result: ProbeResult = Probed(await self._upstream.probe(url, headers))
        except ProbeFailure as e:
            result = NoProbe(str(e))
        self._logger.log_probe(url, result)
        return result
