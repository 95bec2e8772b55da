"""Shared test fixtures."""

import json

import pytest
import requests
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from src.models import ExtractionOptions

TEMU_URL = (
    "https://www.temu.com/no/tr%C3%A5dl%C3%B8s-mus-svart-og-hvit-g-601099512345678.html"
    "?top_gallery_url=https%3A%2F%2Fimg.kwcdn.com%2Fproduct%2Ffancy%2Fmouse-main.jpg"
)


class FakeResponse:
    """Stand-in for requests.Response."""

    def __init__(self, text: str = "", status_code: int = 200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """
    Stand-in for requests.Session that serves canned pages.

    Unknown URLs get a 404; URLs mapped to an exception instance raise it.
    """

    def __init__(self, pages=None):
        self.pages = dict(pages or {})
        self.calls = []
        self.closed = False

    def get(self, url, headers=None, timeout=None):
        self.calls.append({"url": url, "headers": headers or {}, "timeout": timeout})
        page = self.pages.get(url)
        if isinstance(page, Exception):
            raise page
        if page is None:
            return FakeResponse("Not found", status_code=404)
        if isinstance(page, FakeResponse):
            return page
        if isinstance(page, (dict, list)):
            return FakeResponse(json.dumps(page))
        return FakeResponse(page)

    def close(self):
        self.closed = True


class FakePage:
    def __init__(self, owner):
        self.owner = owner

    def goto(self, url, wait_until=None, timeout=None):
        self.owner.events.append(("goto", url, timeout))
        if self.owner.fail_on == "goto":
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded")

    def wait_for_selector(self, selector, timeout=None):
        self.owner.events.append(("wait_for_selector", selector, timeout))
        if self.owner.fail_on == "wait":
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {selector}")

    def wait_for_timeout(self, ms):
        self.owner.events.append(("wait_for_timeout", ms))

    def content(self):
        if self.owner.fail_on == "content":
            raise PlaywrightError("Target page, context or browser has been closed")
        return self.owner.html

    def close(self):
        self.owner.closed.append("page")


class FakeContext:
    def __init__(self, owner):
        self.owner = owner
        self.init_scripts = []

    def add_init_script(self, script):
        self.init_scripts.append(script)
        self.owner.init_scripts.append(script)

    def new_page(self):
        return FakePage(self.owner)

    def close(self):
        self.owner.closed.append("context")


class FakeBrowser:
    def __init__(self, owner):
        self.owner = owner

    def new_context(self, **kwargs):
        self.owner.context_kwargs = kwargs
        return FakeContext(self.owner)

    def close(self):
        self.owner.closed.append("browser")


class FakeChromium:
    def __init__(self, owner):
        self.owner = owner

    def launch(self, headless=True, args=None):
        self.owner.launch_kwargs = {"headless": headless, "args": args}
        return FakeBrowser(self.owner)


class FakePlaywright:
    """
    Resource-tracking Playwright double.

    ``closed`` lists the resources released, in order; ``fail_on`` makes
    start/goto/wait/content raise like a failed driver, a timeout or a crash.
    """

    def __init__(self, html="", fail_on=None):
        self.html = html
        self.fail_on = fail_on
        self.events = []
        self.closed = []
        self.init_scripts = []
        self.context_kwargs = {}
        self.launch_kwargs = {}
        self.entered = False
        self.exited = False
        self.chromium = FakeChromium(self)

    def __call__(self):
        return self

    def __enter__(self):
        if self.fail_on == "start":
            raise PlaywrightError("Playwright driver failed to start")
        self.entered = True
        return self

    def __exit__(self, exc_type, exc, tb):
        self.exited = True
        return False


@pytest.fixture
def fast_options():
    """Options without any sleeping."""
    return ExtractionOptions(min_delay_ms=0, max_delay_ms=0, settle_delay_ms=0)


@pytest.fixture
def fake_session():
    """Factory for FakeSession with canned pages."""
    return FakeSession


@pytest.fixture
def fake_playwright():
    """Factory for FakePlaywright doubles."""
    return FakePlaywright


@pytest.fixture
def temu_url():
    return TEMU_URL


@pytest.fixture
def jsonld_product_html():
    """Static page with a Product JSON-LD block offering two colors."""
    data = {
        "@context": "https://schema.org",
        "@type": "Product",
        "name": "Wireless Mouse 2.4G",
        "description": "Silent wireless mouse with USB receiver.",
        "sku": "WM-24",
        "image": [
            "https://i.ebayimg.com/images/g/abc/s-l1600.jpg",
            "//i.ebayimg.com/images/g/def/s-l1600.jpg",
        ],
        "offers": [
            {"@type": "Offer", "name": "Black", "price": "12.50", "priceCurrency": "USD",
             "availability": "https://schema.org/InStock", "color": "Black"},
            {"@type": "Offer", "name": "White", "price": "13.00", "priceCurrency": "USD",
             "availability": "https://schema.org/InStock", "color": "White"},
            {"@type": "Offer", "name": "Red", "price": "13.00", "priceCurrency": "USD",
             "availability": "https://schema.org/OutOfStock", "color": "Red"},
        ],
    }
    return f"""
    <html><head>
      <title>Wireless Mouse</title>
      <script type="application/ld+json">{json.dumps(data)}</script>
    </head><body><h1>Wireless Mouse 2.4G</h1></body></html>
    """
