"""Unit tests for core.headers: allow-list filtering."""

from core.headers import RENDER_REQUEST_HEADERS, SAFE_REQUEST_HEADERS, HeaderSanitizer


class TestSanitize:
    def test_keeps_allowed_and_drops_others(self):
        sanitized = HeaderSanitizer().sanitize({"authorization": "x", "x-forwarded-for": "1.2.3.4"})
        assert sanitized == {"authorization": "x"}

    def test_matching_is_case_insensitive(self):
        sanitized = HeaderSanitizer().sanitize({"Cookie": "a=1", "User-Agent": "ua", "RANGE": "bytes=0-"})
        assert sanitized == {"cookie": "a=1", "user-agent": "ua", "range": "bytes=0-"}

    def test_never_contains_keys_outside_allow_list(self):
        headers = {name: "v" for name in SAFE_REQUEST_HEADERS}
        headers.update({"host": "evil", "x-custom-proxy": "true", "accept": "*/*"})
        assert set(HeaderSanitizer().sanitize(headers)) == set(SAFE_REQUEST_HEADERS)

    def test_empty_values_are_dropped(self):
        assert HeaderSanitizer().sanitize({"referer": "", "cookie": None}) == {}

    def test_no_allowed_headers_gives_empty_mapping(self):
        assert HeaderSanitizer().sanitize({}) == {}

    def test_input_is_not_mutated(self):
        headers = {"Authorization": "x", "X-Other": "y"}
        HeaderSanitizer().sanitize(headers)
        assert headers == {"Authorization": "x", "X-Other": "y"}


class TestSubsets:
    def test_render_subset_excludes_range_and_user_agent(self):
        sanitized = HeaderSanitizer().for_render(
            {"authorization": "a", "range": "bytes=0-", "user-agent": "ua", "referer": "r"}
        )
        assert sanitized == {"authorization": "a", "referer": "r"}
        assert set(sanitized) <= set(RENDER_REQUEST_HEADERS)

    def test_forward_response_subset(self):
        forwarded = HeaderSanitizer().forward_response(
            {
                "Content-Type": "video/mp4",
                "Content-Length": "10",
                "Accept-Ranges": "bytes",
                "Content-Range": "bytes 0-9/100",
                "Cache-Control": "max-age=60",
                "Set-Cookie": "session=1",
                "Server": "origin",
            }
        )
        assert forwarded == {
            "content-type": "video/mp4",
            "content-length": "10",
            "accept-ranges": "bytes",
            "content-range": "bytes 0-9/100",
            "cache-control": "max-age=60",
        }
