"""
Result Assembler

Turns the merged ProductDraft into the final ExtractedProduct. Resolves the
base price and title fallbacks, runs image collection, variant resolution
and price normalization, and enforces the output invariants:

- title is never empty
- price.amount > 0
- at least one variant

Every synthesized default is recorded in ``trace.defaults_applied``.
"""

import logging
from typing import Optional

from ..models import (
    ExtractedProduct,
    ExtractionOptions,
    ExtractionResult,
    ExtractionTrace,
    Price,
    ProductVariant,
    SupplierTag,
)
from .draft import ProductDraft
from .image_collector import ImageCollector
from .price_normalizer import PriceNormalizer
from .variant_resolver import STANDARD_VARIANT_NAME, VariantResolver

logger = logging.getLogger(__name__)

# URL price hints are USD estimates
PRICE_HINT_CURRENCY = "USD"


class ResultAssembler:
    """Builds the success result for one extraction call."""

    def __init__(
        self,
        supplier: SupplierTag,
        default_title: str,
        options: Optional[ExtractionOptions] = None,
        image_collector: Optional[ImageCollector] = None,
        variant_resolver: Optional[VariantResolver] = None,
        price_normalizer: Optional[PriceNormalizer] = None,
    ):
        self.supplier = supplier
        self.default_title = default_title
        self.options = options or ExtractionOptions()
        self.image_collector = image_collector or ImageCollector()
        self.variant_resolver = variant_resolver or VariantResolver(
            image_collector=self.image_collector,
            single_color_override=self.options.single_variant_color_override,
        )
        self._price_normalizer = price_normalizer

    @property
    def price_normalizer(self) -> PriceNormalizer:
        if self._price_normalizer is None:
            self._price_normalizer = PriceNormalizer()
        return self._price_normalizer

    def resolve_title(self, draft: ProductDraft, trace: ExtractionTrace) -> str:
        if draft.title:
            return draft.title
        if draft.slug_title:
            return draft.slug_title
        trace.defaults_applied.append("title")
        return self.default_title

    def resolve_base_price(self, draft: ProductDraft, trace: ExtractionTrace) -> Price:
        """
        Base price fallback chain.

        draft price -> lowest positive variant price -> URL price hint ->
        options.default_price
        """
        currency = draft.currency or self.options.currency

        if draft.has_price():
            return Price(amount=draft.price, currency=currency)

        variant_prices = [v.price for v in draft.variants if v.price and v.price > 0]
        if variant_prices:
            return Price(amount=min(variant_prices), currency=currency)

        if draft.price_hint and draft.price_hint > 0:
            return Price(amount=draft.price_hint, currency=PRICE_HINT_CURRENCY)

        trace.defaults_applied.append("price")
        return Price(amount=self.options.default_price, currency=self.options.currency)

    def assemble(self, url: str, draft: ProductDraft, trace: ExtractionTrace,
                 raw_html: Optional[str] = None) -> ExtractionResult:
        """
        Assemble the final product.

        Args:
            url: Product URL
            draft: Merged draft from the strategy chain
            trace: Trace of this call (defaults are appended to it)
            raw_html: Optional diagnostic payload

        Returns:
            ExtractionResult with success=True
        """
        title = self.resolve_title(draft, trace)
        price = self.resolve_base_price(draft, trace)

        images = self.image_collector.collect(
            draft.images, variant_images=[v.image for v in draft.variants]
        )

        if not draft.variants:
            trace.defaults_applied.append("variants")
        variants = self.variant_resolver.resolve(
            draft.variants, base_price=price.amount, title=title, url=url, images=images
        )

        if price.amount <= 0:
            trace.defaults_applied.append("price")
            price = Price(amount=self.options.default_price, currency=self.options.currency)
        if not variants:
            variants = [ProductVariant(name=STANDARD_VARIANT_NAME, price=price.amount)]

        pricing = self.price_normalizer.normalize(price.amount, price.currency)
        variants = self.price_normalizer.apply_to_variants(variants, price.currency)

        product = ExtractedProduct(
            supplier=self.supplier,
            url=url,
            title=title,
            price=price,
            description=draft.description,
            images=images,
            specs=dict(draft.specs),
            shipping_estimate=draft.shipping_estimate,
            availability=draft.availability if draft.availability is not None else True,
            variants=variants,
            supplier_product_id=draft.supplier_product_id,
            pricing=pricing,
        )

        logger.debug(
            "Assembled %s product: %d image(s), %d variant(s), defaults=%s",
            self.supplier.value, len(images), len(variants), trace.defaults_applied or "none",
        )
        return ExtractionResult.ok(product, raw_html=raw_html, trace=trace)
