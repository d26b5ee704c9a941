"""Custom exception hierarchy for the adaptive proxy."""


class ProxyError(Exception):
    """Base exception for all proxy errors."""


class ConfigurationError(ProxyError):
    """Raised when configuration is missing or invalid."""


class InvalidInput(ProxyError):
    """Raised when the target URL is missing or not an absolute http(s) URL."""


class ProbeFailure(ProxyError):
    """Raised when the HEAD probe is refused, times out or fails.

    Never fatal: the pipeline falls back to URL-pattern classification.
    """


class RenderError(ProxyError):
    """Raised when the headless browser cannot produce a page.

    Attributes:
        message: Error message
        timeout: True when navigation exceeded its deadline
    """

    def __init__(self, message: str, *, timeout: bool = False) -> None:
        super().__init__(message)
        self.timeout = timeout


class UpstreamError(ProxyError):
    """Raised when the upstream origin returns an error.

    Attributes:
        message: Error message
        status_code: HTTP status code from upstream (optional)
        url: Target URL that failed (optional)
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.url = url


class UpstreamTimeoutError(UpstreamError):
    """Raised when an upstream request times out."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message, status_code=None, url=url)


class UpstreamConnectionError(UpstreamError):
    """Raised when unable to connect to the upstream origin."""

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message, status_code=None, url=url)


class StreamTransferError(ProxyError):
    """An upstream stream broke after delivery started; the transfer is cut short."""


class PipelineError(ProxyError):
    """The single failure surfaced past the pipeline boundary.

    Attributes:
        message: Human-readable description of the underlying cause
        url: Target URL that failed
    """

    def __init__(self, message: str, url: str) -> None:
        super().__init__(message)
        self.url = url
