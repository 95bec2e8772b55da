"""
eBay Product Extractor

eBay item pages are server-rendered: microdata (itemprop) and Open Graph
tags carry title, price and currency, while item specifics live either in
the legacy ``#viTabs_0_is`` table or the newer ``.ux-labels-values`` list.
"""

from bs4 import BeautifulSoup

from ...models import SupplierTag
from ..base_extractor import BaseExtractor, SelectorSet
from ..draft import ProductDraft
from ..parsers import HTMLContentParser


class EbayExtractor(BaseExtractor):
    """Extracts product data from eBay item pages."""

    supplier = SupplierTag.EBAY
    default_title = "eBay product"
    product_id_pattern = r'/itm/(?:[^/]+/)?(\d+)'
    selectors = SelectorSet(
        title=('h1[itemprop="name"]', 'h1.x-item-title__mainTitle', 'h1'),
        price=(
            'span[itemprop="price"]',
            '.x-price-primary span',
            'meta[property="og:price:amount"]',
        ),
        currency=(
            'span[itemprop="priceCurrency"]',
            'meta[itemprop="priceCurrency"]',
            'meta[property="og:price:currency"]',
        ),
        images=('img[itemprop="image"]', '.ux-image-carousel-item img'),
        description=('#desc_div', '#viTabs_0_is'),
        spec_rows='#viTabs_0_is table tr',
        shipping=('.ux-labels-values--shipping .ux-labels-values__values', '#fshippingCost'),
        variant_options=('select.x-msku__select-box option', 'select[id^="msku-sel"] option'),
    )

    def draft_from_dom(self, soup: BeautifulSoup, url: str) -> ProductDraft:
        draft = super().draft_from_dom(soup, url)

        # Item specifics in the current layout
        parser = HTMLContentParser(soup, base_url=url)
        specifics = parser.extract_specs(
            '.ux-labels-values',
            '.ux-labels-values__labels',
            '.ux-labels-values__values',
        )
        for key, value in specifics.items():
            draft.specs.setdefault(key, value)

        og_image = parser.meta_content('og:image')
        if og_image:
            draft.add_image(parser.resolve_url(og_image))
        return draft
