"""Content classification from probe headers and URL patterns."""

import re
from urllib.parse import urlsplit

from core.request_types import ContentCategory, NoProbe, Probed, ProbeResult

VIDEO_EXTENSIONS = ("mp4", "mkv", "webm", "mov", "avi")

_VIDEO_PATH = re.compile(r"\.(?:" + "|".join(VIDEO_EXTENSIONS) + r")$", re.IGNORECASE)
_JSON_PATH = re.compile(r"\.json$", re.IGNORECASE)
_HTML_PATH = re.compile(r"\.html?$", re.IGNORECASE)
_API_SEGMENT = re.compile(r"/api/", re.IGNORECASE)


def looks_like_video(url: str) -> bool:
    return bool(_VIDEO_PATH.search(_path(url)))


def looks_like_json(url: str) -> bool:
    """True for ``/api/`` paths and ``.json`` files."""
    path = _path(url)
    return bool(_API_SEGMENT.search(path) or _JSON_PATH.search(path))


def looks_like_html(url: str) -> bool:
    """True for ``.html``/``.htm`` files and directory-style paths."""
    path = _path(url)
    return bool(_HTML_PATH.search(path)) or path.endswith("/")


def _path(url: str) -> str:
    return urlsplit(url).path


class ContentClassifier:
    """Assign a ContentCategory without downloading the resource."""

    def classify(self, url: str, probe: ProbeResult) -> ContentCategory:
        """Probe content-type first, URL patterns second, UNKNOWN last."""
        if isinstance(probe, Probed):
            category = self._from_content_type(probe.headers)
            if category is not None:
                return category
        elif not isinstance(probe, NoProbe):
            raise TypeError(f"Unsupported probe result: {probe!r}")
        return self._from_url(url)

    def _from_content_type(self, headers) -> ContentCategory | None:
        content_type = ""
        for key, value in headers.items():
            if key.lower() == "content-type":
                content_type = str(value).lower()
                break
        if "text/html" in content_type:
            return ContentCategory.HTML
        if "application/json" in content_type or "+json" in content_type:
            return ContentCategory.JSON
        if (
            content_type.startswith("video/")
            or "octet-stream" in content_type
            or "mpeg" in content_type
        ):
            return ContentCategory.VIDEO
        return None

    def _from_url(self, url: str) -> ContentCategory:
        if looks_like_video(url):
            return ContentCategory.VIDEO
        if looks_like_json(url):
            return ContentCategory.JSON
        if looks_like_html(url):
            return ContentCategory.HTML
        return ContentCategory.UNKNOWN
