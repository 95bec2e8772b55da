"""
Temu Product Extractor

Temu pages are rendered client-side and usually block plain fetches, so the
URL itself carries most of the reliable data: the gallery image in
``top_gallery_url``, the goods id after ``-g-`` and a readable slug. When a
goods id is known the goods-detail JSON endpoints are tried for the SKU list
before the page itself.
"""

import logging
from typing import Any, Optional

import requests

from ...models import SupplierTag
from ..base_extractor import BaseExtractor, ExtractionContext, SelectorSet
from ..draft import ProductDraft
from ..errors import ParseFailure

logger = logging.getLogger(__name__)

GOODS_API_ENDPOINTS = (
    "https://www.temu.com/api/product/detail?goods_id={goods_id}",
    "https://www.temu.com/no/api/goods/detail?goodsId={goods_id}",
    "https://www.temu.com/api/goods/detail?goodsId={goods_id}&scene=detail",
    "https://www.temu.com/api/goods/getGoodsDetail?goodsId={goods_id}",
)

API_TIMEOUT_S = 15


class TemuExtractor(BaseExtractor):
    """Extracts product data from temu.com product URLs."""

    supplier = SupplierTag.TEMU
    default_title = "Temu Produkt"
    product_id_pattern = r'-g-(\d+)'
    slug_cut_marker = "-g-"
    selectors = SelectorSet(
        title=('h1', '[class*="goods-title"]', '[class*="goodsName"]'),
        price=('[class*="goods-price"] [class*="amount"]', '[data-type="price"]', '[class*="goodsPrice"]'),
        images=('img[src*="kwcdn"]', 'img[data-src*="kwcdn"]'),
        background_images=('[style*="kwcdn"]',),
        image_filter="kwcdn.com",
        description=('[class*="goods-desc"]', '[class*="description"]'),
        variant_options=(
            '[class*="sku-item"]',
            '[class*="variant-item"]',
            '[data-testid*="color"]',
            'button[aria-label*="color"]',
        ),
    )

    def strategies(self):
        return (
            ("url_params", self.url_strategy),
            ("goods_api", self.goods_api_strategy),
            ("static_data", self.static_data_strategy),
            ("dom", self.dom_strategy),
        )

    def goods_api_strategy(self, ctx: ExtractionContext) -> Optional[ProductDraft]:
        """
        SKU list from the goods-detail JSON endpoints.

        Returns:
            Draft with variants (and title/price when present), or None when
            no goods id is known

        Raises:
            ParseFailure: If no endpoint returned a usable SKU list
        """
        goods_id = ctx.draft.supplier_product_id
        if not goods_id:
            return None

        self.random_delay()
        headers = self.request_headers()
        headers.update({
            "Accept": "application/json, text/plain, */*",
            "Referer": "https://www.temu.com/",
            "Origin": "https://www.temu.com",
        })

        for template in GOODS_API_ENDPOINTS:
            endpoint = template.format(goods_id=goods_id)
            try:
                response = self.session.get(endpoint, headers=headers, timeout=API_TIMEOUT_S)
                if response.status_code != 200:
                    logger.debug("Goods API %s returned %d", endpoint, response.status_code)
                    continue
                payload = response.json()
            except (requests.RequestException, ValueError) as e:
                logger.debug("Goods API %s failed: %s", endpoint, e)
                continue

            draft = self._draft_from_payload(payload)
            if draft is not None:
                logger.info("Found %d SKUs from goods API", len(draft.variants))
                return draft

        raise ParseFailure(f"No SKU list in goods API responses for {goods_id}")

    def _draft_from_payload(self, payload: Any) -> Optional[ProductDraft]:
        blobs = [("goods_api", payload)]
        variants = self.script_parser.extract_variants(blobs)
        if not variants:
            return None

        draft = ProductDraft(
            title=self.script_parser.extract_title(blobs),
            description=self.script_parser.extract_description(blobs),
            price=self.script_parser.extract_price(blobs),
            variants=variants,
        )
        for image in self.script_parser.extract_images(blobs):
            draft.add_image(image)
        return draft
