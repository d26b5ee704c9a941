"""Tests for services.renderer with a fake Playwright driver."""

import asyncio
from unittest.mock import patch

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from core.config import RenderSettings
from core.exceptions import RenderError
from services.renderer import HIDE_WEBDRIVER_SCRIPT, USER_AGENTS, PlaywrightRenderer


class FakePage:
    def __init__(self, goto_error=None, idle_error=None, hang=False):
        self.goto_error = goto_error
        self.idle_error = idle_error
        self.hang = hang
        self.navigating = asyncio.Event()
        self.goto_calls = []
        self.load_states = []

    async def goto(self, url, wait_until, timeout):
        self.goto_calls.append((url, wait_until, timeout))
        self.navigating.set()
        if self.hang:
            await asyncio.sleep(3600)
        if self.goto_error:
            raise self.goto_error

    async def wait_for_load_state(self, state, timeout):
        self.load_states.append((state, timeout))
        if self.idle_error:
            raise self.idle_error

    async def content(self):
        return "<html><body>challenge passed</body></html>"


class FakeContext:
    def __init__(self, page):
        self.page = page
        self.init_scripts = []

    async def add_init_script(self, script):
        self.init_scripts.append(script)

    async def new_page(self):
        return self.page


class FakeBrowser:
    def __init__(self, page):
        self.context = FakeContext(page)
        self.context_kwargs = None
        self.closed = False

    async def new_context(self, **kwargs):
        self.context_kwargs = kwargs
        return self.context

    async def close(self):
        self.closed = True


class FakeChromium:
    def __init__(self, browser, launch_error=None):
        self.browser = browser
        self.launch_error = launch_error
        self.launch_kwargs = None

    async def launch(self, **kwargs):
        self.launch_kwargs = kwargs
        if self.launch_error:
            raise self.launch_error
        return self.browser


class FakePlaywright:
    def __init__(self, chromium):
        self.chromium = chromium

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


@pytest.fixture
def settings():
    return RenderSettings(settle_delay=0)


def driver(page, launch_error=None):
    browser = FakeBrowser(page)
    chromium = FakeChromium(browser, launch_error)
    return browser, chromium, patch("services.renderer.async_playwright", lambda: FakePlaywright(chromium))


class TestPlaywrightRenderer:
    async def test_returns_serialized_dom(self, settings):
        page = FakePage()
        browser, chromium, patched = driver(page)
        with patched:
            html = await PlaywrightRenderer(settings).render(
                "https://example.com/", {"cookie": "a=1", "range": "bytes=0-", "user-agent": "curl"}
            )

        assert html == "<html><body>challenge passed</body></html>"
        assert page.goto_calls == [("https://example.com/", "domcontentloaded", 120000)]
        assert page.load_states == [("networkidle", 20000)]
        assert browser.context_kwargs["extra_http_headers"] == {"cookie": "a=1"}
        assert browser.context_kwargs["user_agent"] in USER_AGENTS
        assert browser.context.init_scripts == [HIDE_WEBDRIVER_SCRIPT]
        assert chromium.launch_kwargs["args"] == ["--no-sandbox", "--disable-setuid-sandbox"]
        assert "executable_path" not in chromium.launch_kwargs
        assert browser.closed

    async def test_executable_path_is_passed(self):
        browser, chromium, patched = driver(FakePage())
        with patched:
            await PlaywrightRenderer(RenderSettings(settle_delay=0, executable_path="/opt/chrome")).render(
                "https://example.com/", {}
            )
        assert chromium.launch_kwargs["executable_path"] == "/opt/chrome"

    async def test_network_idle_timeout_is_ignored(self, settings):
        page = FakePage(idle_error=PlaywrightTimeoutError("Timeout 20000ms exceeded"))
        browser, _, patched = driver(page)
        with patched:
            html = await PlaywrightRenderer(settings).render("https://example.com/", {})
        assert "challenge passed" in html
        assert browser.closed

    async def test_navigation_timeout_raises_and_closes(self, settings):
        page = FakePage(goto_error=PlaywrightTimeoutError("Timeout 120000ms exceeded"))
        browser, _, patched = driver(page)
        with patched, pytest.raises(RenderError) as exc_info:
            await PlaywrightRenderer(settings).render("https://example.com/", {})
        assert exc_info.value.timeout
        assert browser.closed

    async def test_browser_error_raises_and_closes(self, settings):
        page = FakePage(goto_error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
        browser, _, patched = driver(page)
        with patched, pytest.raises(RenderError, match="ERR_NAME_NOT_RESOLVED") as exc_info:
            await PlaywrightRenderer(settings).render("https://nope.invalid/", {})
        assert not exc_info.value.timeout
        assert browser.closed

    async def test_launch_failure_raises(self, settings):
        _, _, patched = driver(FakePage(), launch_error=PlaywrightError("Executable doesn't exist"))
        with patched, pytest.raises(RenderError, match="Executable"):
            await PlaywrightRenderer(settings).render("https://example.com/", {})

    async def test_cancellation_closes_browser(self, settings):
        page = FakePage(hang=True)
        browser, _, patched = driver(page)
        with patched:
            task = asyncio.create_task(PlaywrightRenderer(settings).render("https://example.com/", {}))
            await page.navigating.wait()
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
        assert browser.closed
