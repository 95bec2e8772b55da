"""
Headless Browser Rendering

Renders JavaScript-heavy product pages with Playwright (Chromium, sync API).
One browser per render call; page, context and browser are closed on every
exit path, including navigation timeouts.

Only suppliers whose pages need rendering import this module, so Playwright
is never loaded for purely static extraction.
"""

import logging
from typing import Callable, Optional

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import sync_playwright

from ..models import ExtractionOptions
from .base_extractor import accept_language, pick_user_agent
from .errors import NetworkFailure

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1920, "height": 1080}

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--window-size=1920,1080",
]

# Masks the most common headless-automation fingerprints
STEALTH_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', {get: () => undefined});
Object.defineProperty(navigator, 'plugins', {get: () => [1, 2, 3, 4, 5]});
Object.defineProperty(navigator, 'languages', {get: () => ['en-US', 'en', 'no']});
window.chrome = {runtime: {}};
"""


class BrowserRenderer:
    """
    Renders a URL and returns the final HTML.

    Usage:
        renderer = BrowserRenderer(options)
        html = renderer.render(url, ready_selector=".product-title")
    """

    def __init__(self, options: Optional[ExtractionOptions] = None,
                 playwright_factory: Callable = sync_playwright, headless: bool = True):
        """
        Args:
            options: Timeouts, locale and user-agent policy
            playwright_factory: Returns a Playwright context manager
                (``sync_playwright`` in production)
            headless: Launch Chromium without a window
        """
        self.options = options or ExtractionOptions()
        self.playwright_factory = playwright_factory
        self.headless = headless

    def render(self, url: str, ready_selector: Optional[str] = None) -> str:
        """
        Navigate to ``url`` and return ``page.content()``.

        Waits for ``ready_selector`` (if given) and then a fixed settle delay.

        Raises:
            NetworkFailure: On driver start-up, launch, navigation or wait
                failures (timeouts included); all browser resources are
                released first
        """
        try:
            with self.playwright_factory() as playwright:
                return self._render_page(playwright, url, ready_selector)
        except PlaywrightError as e:
            # Start-up errors land here too, e.g. the sync API inside a running asyncio loop
            raise NetworkFailure(f"Browser rendering failed: {e}") from e

    def _render_page(self, playwright, url: str, ready_selector: Optional[str]) -> str:
        options = self.options
        browser = None
        context = None
        page = None
        try:
            browser = playwright.chromium.launch(headless=self.headless, args=LAUNCH_ARGS)
            context = browser.new_context(
                user_agent=pick_user_agent(options.user_agent_rotation),
                viewport=VIEWPORT,
                locale=options.locale,
                extra_http_headers={
                    "Accept-Language": accept_language(options.locale),
                    "Upgrade-Insecure-Requests": "1",
                    "Sec-Fetch-Mode": "navigate",
                    "Sec-Fetch-Site": "none",
                    "Sec-Fetch-Dest": "document",
                },
            )
            context.add_init_script(STEALTH_SCRIPT)
            page = context.new_page()

            logger.debug("Rendering %s", url[:80])
            page.goto(url, wait_until="domcontentloaded", timeout=options.navigation_timeout_ms)
            if ready_selector:
                page.wait_for_selector(ready_selector, timeout=options.content_ready_timeout_ms)
            if options.settle_delay_ms > 0:
                page.wait_for_timeout(options.settle_delay_ms)

            return page.content()
        finally:
            for resource in (page, context, browser):
                if resource is None:
                    continue
                try:
                    resource.close()
                except PlaywrightError as e:
                    logger.debug("Ignoring close error: %s", e)
