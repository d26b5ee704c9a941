"""Headless Chromium rendering for JavaScript-heavy and challenge-protected pages."""

import asyncio
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from playwright.async_api import Browser, Page, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from core.config import RenderSettings
from core.exceptions import RenderError
from core.headers import HeaderSanitizer

USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 13_5) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/16.6 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/125.0.0.0 Safari/537.36",
]

LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

# navigator.webdriver is the first thing bot checks look at
HIDE_WEBDRIVER_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });
"""


class PlaywrightRenderer:
    """Render one URL per call in a freshly launched, isolated browser.

    Nothing is shared between calls: each render launches its own Chromium
    process and context and tears both down before returning, on success,
    failure or cancellation.
    """

    def __init__(self, settings: RenderSettings, sanitizer: HeaderSanitizer | None = None):
        self._settings = settings
        self._sanitizer = sanitizer or HeaderSanitizer()

    async def render(self, url: str, headers: dict[str, str]) -> str:
        """Return the serialized DOM of ``url`` once it has settled."""
        settings = self._settings
        try:
            async with self._page(headers) as page:
                try:
                    await page.goto(
                        url,
                        wait_until="domcontentloaded",
                        timeout=settings.navigation_timeout * 1000,
                    )
                except PlaywrightTimeoutError as e:
                    raise RenderError(
                        f"Navigation timed out after {settings.navigation_timeout:g}s",
                        timeout=True,
                    ) from e

                # Give client-side challenge scripts time to run
                await asyncio.sleep(settings.settle_delay)

                try:
                    await page.wait_for_load_state(
                        "networkidle", timeout=settings.network_idle_timeout * 1000
                    )
                except PlaywrightTimeoutError:
                    pass

                return await page.content()
        except PlaywrightError as e:
            raise RenderError(f"Browser error: {e}") from e

    @asynccontextmanager
    async def _page(self, headers: dict[str, str]) -> AsyncIterator[Page]:
        """Launch a browser, yield a page in a new context, always close the browser."""
        launch_kwargs: dict = {"headless": self._settings.headless, "args": LAUNCH_ARGS}
        if self._settings.executable_path:
            launch_kwargs["executable_path"] = self._settings.executable_path

        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(**launch_kwargs)
            try:
                context = await browser.new_context(
                    user_agent=random.choice(USER_AGENTS),
                    extra_http_headers=self._sanitizer.for_render(headers),
                )
                await context.add_init_script(HIDE_WEBDRIVER_SCRIPT)
                page = await context.new_page()
                yield page
            finally:
                # Shielded so a cancelled request still closes the browser
                await asyncio.shield(_close_browser(browser))


async def _close_browser(browser: Browser) -> None:
    try:
        await browser.close()
    except PlaywrightError:
        pass
