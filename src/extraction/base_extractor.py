"""
Base Extractor

Shared strategy-chain engine for supplier extractors. A subclass declares
its supplier, URL conventions and CSS selectors and lists its strategies;
the base class runs them in order, merges each strategy's fields into the
accumulated draft on gaps only, and hands the result to ResultAssembler.

Strategies fail independently: a network error, timeout or malformed page
only costs the fields that strategy would have contributed.
"""

from __future__ import annotations

import json
import logging
import random
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests
from bs4 import BeautifulSoup

from ..common.constants import USER_AGENTS
from ..models import ExtractionOptions, ExtractionResult, ExtractionTrace, StrategyTrace, SupplierTag
from .draft import ProductDraft
from .errors import ExtractionError, NetworkFailure, ParseFailure, ScrapeFailedError
from .parsers import HTMLContentParser, ScriptDataParser, StructuredDataParser, UrlParameterParser
from .result_assembler import ResultAssembler

logger = logging.getLogger(__name__)

# Failures a single strategy may raise without aborting the chain
RECOVERABLE_ERRORS = (
    ExtractionError,
    requests.RequestException,
    json.JSONDecodeError,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
    IndexError,
)


def pick_user_agent(rotate: bool = True) -> str:
    """Random realistic desktop user agent, or the first one when rotation is off."""
    return random.choice(USER_AGENTS) if rotate else USER_AGENTS[0]


def accept_language(locale: str) -> str:
    """Accept-Language header value for a locale like 'en-US'."""
    primary = locale.split('-')[0]
    if primary and primary != locale:
        return f"{locale},{primary};q=0.9"
    return locale or "en-US,en;q=0.9"


@dataclass(frozen=True)
class SelectorSet:
    """CSS selectors for the DOM strategy of one supplier."""
    title: Tuple[str, ...] = ('h1[itemprop="name"]', 'h1')
    price: Tuple[str, ...] = ()
    currency: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()
    background_images: Tuple[str, ...] = ()
    image_filter: Optional[str] = None
    description: Tuple[str, ...] = ()
    spec_rows: Optional[str] = None
    spec_key: Optional[str] = None
    spec_value: Optional[str] = None
    shipping: Tuple[str, ...] = ()
    variant_options: Tuple[str, ...] = ()


@dataclass
class ExtractionContext:
    """Per-call state shared by the strategies of one scrape_product call."""
    url: str
    draft: ProductDraft = field(default_factory=ProductDraft)
    trace: ExtractionTrace = field(default_factory=ExtractionTrace)
    html: Optional[str] = None
    soup: Optional[BeautifulSoup] = None
    fetch_error: Optional[str] = None


Strategy = Callable[[ExtractionContext], Optional[ProductDraft]]


class BaseExtractor:
    """
    Runs a supplier's strategy chain and assembles the result.

    Subclasses set ``supplier``, ``default_title``, ``product_id_pattern``
    and ``selectors``, and may override ``strategies()``.

    Usage:
        extractor = TemuExtractor(options=ExtractionOptions())
        result = extractor.scrape_product(url)
        if result.success:
            print(result.data.title)
    """

    supplier: SupplierTag = None
    default_title = "Product"
    product_id_pattern: Optional[str] = None
    slug_cut_marker = ""
    selectors = SelectorSet()

    def __init__(self, options: Optional[ExtractionOptions] = None,
                 session: Optional[requests.Session] = None):
        self.options = options or ExtractionOptions()
        self._session = session
        self.structured_parser = StructuredDataParser()
        self.script_parser = ScriptDataParser()
        self.assembler = ResultAssembler(
            supplier=self.supplier,
            default_title=self.default_title,
            options=self.options,
        )

    @property
    def session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
        return self._session

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def scrape_product(self, url: str) -> ExtractionResult:
        """
        Extract one product. Never raises.

        Returns:
            success=True with a complete product (defaults substituted where
            nothing was found), or success=False if the call itself failed
        """
        return self._scrape(url)

    def scrape_html(self, url: str, html: str) -> ExtractionResult:
        """Extract from pre-fetched HTML; the static fetch is skipped."""
        return self._scrape(url, html=html)

    def scrape_price(self, url: str) -> float:
        return self._require(self.scrape_product(url), "price").data.price.amount

    def scrape_images(self, url: str) -> List[str]:
        return self._require(self.scrape_product(url), "images").data.images

    def scrape_description(self, url: str) -> str:
        return self._require(self.scrape_product(url), "description").data.description

    def _require(self, result: ExtractionResult, what: str) -> ExtractionResult:
        if not result.success or result.data is None:
            raise ScrapeFailedError(
                result.error or f"Unable to scrape {self.supplier.value} {what}"
            )
        return result

    # ------------------------------------------------------------------
    # Chain
    # ------------------------------------------------------------------

    def strategies(self) -> Sequence[Tuple[str, Strategy]]:
        """Ordered (name, callable) pairs; each callable returns a fresh draft or None."""
        return (
            ("url_params", self.url_strategy),
            ("static_data", self.static_data_strategy),
            ("dom", self.dom_strategy),
        )

    def _scrape(self, url: str, html: Optional[str] = None) -> ExtractionResult:
        trace = ExtractionTrace(supplier=self.supplier.value)
        try:
            self.validate_url(url)
            ctx = ExtractionContext(url=url, trace=trace)
            if html is not None:
                ctx.html = html
                ctx.soup = self.parse_html(html)

            for name, strategy in self.strategies():
                self._run_strategy(name, strategy, ctx)

            return self.assembler.assemble(url, ctx.draft, trace, raw_html=ctx.html)
        except Exception as e:
            logger.exception("Extraction failed for %s", url)
            return ExtractionResult.failed(str(e), trace=trace)

    def _run_strategy(self, name: str, strategy: Strategy, ctx: ExtractionContext) -> None:
        record = StrategyTrace(name=name)
        started = time.perf_counter()
        try:
            result = strategy(ctx)
            if result is not None:
                record.fields = ctx.draft.merge(result)
        except RECOVERABLE_ERRORS as e:
            record.error = f"{type(e).__name__}: {e}"
            logger.warning("%s strategy failed for %s: %s", name, ctx.url[:80], record.error)
        finally:
            record.duration_ms = round((time.perf_counter() - started) * 1000, 1)
            ctx.trace.strategies.append(record)

        logger.debug("%s: contributed %s (%.1f ms)", name, record.fields or "nothing", record.duration_ms)

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    def validate_url(self, url: str) -> None:
        parsed = urlparse(url) if isinstance(url, str) else None
        if parsed is None or parsed.scheme not in ('http', 'https') or not parsed.netloc:
            raise ValueError(f"Not an absolute http(s) URL: {url!r}")

    def random_delay(self) -> None:
        """Sleep a random time between min_delay_ms and max_delay_ms."""
        low = max(0, self.options.min_delay_ms)
        high = max(low, self.options.max_delay_ms)
        if high > 0:
            time.sleep(random.uniform(low, high) / 1000)

    def request_headers(self) -> dict:
        return {
            "User-Agent": pick_user_agent(self.options.user_agent_rotation),
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": accept_language(self.options.locale),
            "Cache-Control": "no-cache",
        }

    def fetch_html(self, url: str) -> str:
        """
        Fetch a page with a realistic browser profile.

        Raises:
            NetworkFailure: On connection errors, timeouts or HTTP errors
        """
        self.random_delay()
        try:
            response = self.session.get(url, headers=self.request_headers(),
                                        timeout=self.options.request_timeout_s)
            response.raise_for_status()
        except requests.RequestException as e:
            raise NetworkFailure(f"Fetch failed for {url[:80]}: {e}") from e
        return response.text

    def parse_html(self, html: str) -> BeautifulSoup:
        return BeautifulSoup(html, "lxml")

    def _ensure_page(self, ctx: ExtractionContext) -> BeautifulSoup:
        """Fetch and parse the page once per call; a failed fetch is not retried."""
        if ctx.soup is None:
            if ctx.fetch_error:
                raise NetworkFailure(ctx.fetch_error)
            if ctx.html is None:
                try:
                    ctx.html = self.fetch_html(ctx.url)
                except NetworkFailure as e:
                    ctx.fetch_error = str(e)
                    raise
            ctx.soup = self.parse_html(ctx.html)
        return ctx.soup

    # ------------------------------------------------------------------
    # Strategies
    # ------------------------------------------------------------------

    def url_strategy(self, ctx: ExtractionContext) -> ProductDraft:
        """Gallery image, product id, price hint and slug title from the URL."""
        parser = UrlParameterParser(ctx.url)
        draft = ProductDraft()

        draft.add_image(parser.gallery_image())
        if self.product_id_pattern:
            draft.supplier_product_id = parser.match_id(self.product_id_pattern)
        draft.price_hint = parser.price_hint()

        for segment in reversed(parser.path_segments()):
            draft.slug_title = parser.slug_title(segment, cut_marker=self.slug_cut_marker)
            if draft.slug_title:
                break
        return draft

    def static_data_strategy(self, ctx: ExtractionContext) -> ProductDraft:
        """Hydration blobs, JSON-LD and SKU lists from the static page."""
        soup = self._ensure_page(ctx)
        draft = ProductDraft()

        blobs = self.script_parser.parse(soup)
        draft.title = self.script_parser.extract_title(blobs)
        draft.description = self.script_parser.extract_description(blobs)
        draft.price = self.script_parser.extract_price(blobs)
        for image in self.script_parser.extract_images(blobs):
            draft.add_image(image)

        data = self.structured_parser.parse(soup)
        if self.structured_parser.has_data(data):
            structured = ProductDraft(
                title=self.structured_parser.extract_title(data),
                description=self.structured_parser.extract_description(data),
                price=self.structured_parser.extract_price(data),
                currency=self.structured_parser.extract_currency(data),
                availability=self.structured_parser.extract_availability(data),
                images=self.structured_parser.extract_images(data),
            )
            draft.merge(structured)

        # All variant sources inside this strategy are unioned
        draft.variants = (
            self.script_parser.extract_variants(blobs)
            + self.structured_parser.extract_variants(data)
        )
        return draft

    def dom_strategy(self, ctx: ExtractionContext) -> ProductDraft:
        """Supplier CSS selectors over the static page."""
        return self.draft_from_dom(self._ensure_page(ctx), ctx.url)

    def draft_from_dom(self, soup: BeautifulSoup, url: str) -> ProductDraft:
        selectors = self.selectors
        parser = HTMLContentParser(soup, base_url=url)
        draft = ProductDraft()

        draft.title = parser.extract_title(selectors.title)
        if selectors.price:
            draft.price = parser.extract_price(selectors.price)
        if selectors.currency:
            draft.currency = parser.extract_price_text(selectors.currency).upper()[:3]

        for image in parser.extract_images(selectors.images, url_filter=selectors.image_filter):
            draft.add_image(image)
        if selectors.background_images:
            for image in parser.extract_background_images(selectors.background_images,
                                                          url_filter=selectors.image_filter):
                draft.add_image(image)

        if selectors.description:
            draft.description = parser.extract_description(selectors.description)
        if selectors.spec_rows:
            draft.specs = parser.extract_specs(selectors.spec_rows, selectors.spec_key, selectors.spec_value)
        if selectors.shipping:
            draft.shipping_estimate = parser.extract_shipping(selectors.shipping)
        if selectors.variant_options:
            draft.variants = parser.extract_variant_options(selectors.variant_options)

        if not (draft.title or draft.price or draft.images):
            raise ParseFailure("No product selectors matched")
        return draft
