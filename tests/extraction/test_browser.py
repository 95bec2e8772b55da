"""Tests for src/extraction/browser.py"""

import asyncio

import pytest
from playwright.sync_api import Error as PlaywrightError

from src.extraction.browser import LAUNCH_ARGS, STEALTH_SCRIPT, BrowserRenderer
from src.extraction.errors import NetworkFailure
from src.models import ExtractionOptions

URL = "https://www.alibaba.com/product-detail/Mouse_1600123456789.html"


class TestRender:
    def test_returns_content(self, fake_playwright):
        playwright = fake_playwright(html="<html>rendered</html>")
        html = BrowserRenderer(ExtractionOptions(settle_delay_ms=0), playwright_factory=playwright).render(URL)
        assert html == "<html>rendered</html>"
        assert playwright.launch_kwargs == {"headless": True, "args": LAUNCH_ARGS}
        assert playwright.init_scripts == [STEALTH_SCRIPT]

    def test_settle_delay(self, fake_playwright):
        playwright = fake_playwright(html="<html></html>")
        BrowserRenderer(ExtractionOptions(settle_delay_ms=250), playwright_factory=playwright).render(URL)
        assert ("wait_for_timeout", 250) in playwright.events

    def test_no_ready_selector_no_wait(self, fake_playwright):
        playwright = fake_playwright(html="<html></html>")
        BrowserRenderer(ExtractionOptions(settle_delay_ms=0), playwright_factory=playwright).render(URL)
        assert [event[0] for event in playwright.events] == ["goto"]

    def test_locale_headers(self, fake_playwright):
        playwright = fake_playwright(html="<html></html>")
        BrowserRenderer(ExtractionOptions(locale="nb-NO", settle_delay_ms=0),
                        playwright_factory=playwright).render(URL)
        assert playwright.context_kwargs["locale"] == "nb-NO"
        assert playwright.context_kwargs["extra_http_headers"]["Accept-Language"] == "nb-NO,nb;q=0.9"

    def test_wait_timeout_wrapped(self, fake_playwright):
        playwright = fake_playwright(fail_on="wait")
        renderer = BrowserRenderer(ExtractionOptions(), playwright_factory=playwright)
        with pytest.raises(NetworkFailure, match="Browser rendering failed"):
            renderer.render(URL, ready_selector=".title")
        assert playwright.closed == ["page", "context", "browser"]

    def test_close_errors_ignored(self, fake_playwright):
        playwright = fake_playwright(html="<html>ok</html>")

        def failing_close():
            raise PlaywrightError("Browser has been closed")

        original_launch = playwright.chromium.launch

        def launch(headless=True, args=None):
            browser = original_launch(headless=headless, args=args)
            browser.close = failing_close
            return browser

        playwright.chromium.launch = launch
        html = BrowserRenderer(ExtractionOptions(settle_delay_ms=0), playwright_factory=playwright).render(URL)
        assert html == "<html>ok</html>"
        assert playwright.closed == ["page", "context"]


class TestStartupFailures:
    def test_driver_start_failure_wrapped(self, fake_playwright):
        playwright = fake_playwright(fail_on="start")
        renderer = BrowserRenderer(ExtractionOptions(), playwright_factory=playwright)
        with pytest.raises(NetworkFailure, match="driver failed to start"):
            renderer.render(URL)
        assert playwright.closed == []

    def test_sync_api_inside_event_loop_wrapped(self):
        renderer = BrowserRenderer(ExtractionOptions())

        async def render_in_loop():
            return renderer.render(URL)

        with pytest.raises(NetworkFailure, match="asyncio loop"):
            asyncio.run(render_in_loop())
