"""
Alibaba Product Extractor

Alibaba detail pages hydrate title and price after load. The static page is
tried first; when title or price is still missing, the page is rendered in
headless Chromium and the same selectors run on the rendered DOM.
"""

import logging
from typing import Callable, Optional

import requests

from ...models import ExtractionOptions, SupplierTag
from ..base_extractor import BaseExtractor, ExtractionContext, SelectorSet
from ..browser import BrowserRenderer
from ..draft import ProductDraft

logger = logging.getLogger(__name__)

TITLE_SELECTOR = ".module-pc-detail-heading .title"


class AlibabaExtractor(BaseExtractor):
    """Extracts product data from alibaba.com / 1688.com detail pages."""

    supplier = SupplierTag.ALIBABA
    default_title = "Alibaba product"
    product_id_pattern = r'_(\d+)\.html'
    content_ready_selector = TITLE_SELECTOR
    selectors = SelectorSet(
        title=(TITLE_SELECTOR, 'h1'),
        price=('.price .price-text', '[class*="price-range"]', '.price'),
        images=('.product-image-gallery img', '[class*="main-image"] img'),
        background_images=('.product-image-gallery [style]',),
        description=('#J-rich-text-description',),
        spec_rows='.do-entry-list li',
        spec_key='.do-entry-item',
        spec_value='.do-entry-value',
        shipping=('.trade-detail-main-wrap .module-pc-ship .text',),
        variant_options=('[class*="sku-item"]', '[class*="sku-info"] [class*="item"]'),
    )

    def __init__(self, options: Optional[ExtractionOptions] = None,
                 session: Optional[requests.Session] = None,
                 playwright_factory: Optional[Callable] = None):
        super().__init__(options=options, session=session)
        if playwright_factory is None:
            self.renderer = BrowserRenderer(self.options)
        else:
            self.renderer = BrowserRenderer(self.options, playwright_factory=playwright_factory)

    def strategies(self):
        return (
            ("url_params", self.url_strategy),
            ("static_data", self.static_data_strategy),
            ("dom", self.dom_strategy),
            ("rendered_dom", self.rendered_strategy),
        )

    def rendered_strategy(self, ctx: ExtractionContext) -> Optional[ProductDraft]:
        """
        Re-run the DOM selectors on the browser-rendered page.

        Skipped (returns None) when title and price are already known.
        """
        if ctx.draft.title and ctx.draft.has_price():
            return None

        html = self.renderer.render(ctx.url, ready_selector=self.content_ready_selector)
        ctx.html = html
        return self.draft_from_dom(self.parse_html(html), ctx.url)
