"""
Product extraction for supplier product pages.

Modules:
    supplier_identifier - identify_supplier(url) -> SupplierTag | None
    factory - get_extractor_for_url / scrape_product (lazy supplier imports)
    base_extractor - Strategy-chain engine shared by all suppliers
    suppliers - TemuExtractor, EbayExtractor, AlibabaExtractor
    variant_resolver - Final variant list (normalize, synthesize, images)
    image_collector - Image validation and dedup
    price_normalizer - Storefront price tiers
    result_assembler - Fallbacks, invariants, ExtractionResult
    bulk_extractor - Sequential bulk extraction with resume state
    parsers - URL, hydration-script, JSON-LD and HTML parsers

Importing this package never imports a supplier module, so Playwright is
only loaded when an Alibaba URL is actually extracted.
"""

from .errors import (
    ExtractionError,
    NetworkFailure,
    ParseFailure,
    ScrapeFailedError,
    UnsupportedSupplierError,
)
from .factory import SUPPLIER_EXTRACTORS, get_extractor_for_url, load_extractor_class, scrape_product
from .supplier_identifier import identify_supplier

__all__ = [
    # Routing
    'identify_supplier',
    'get_extractor_for_url',
    'load_extractor_class',
    'scrape_product',
    'SUPPLIER_EXTRACTORS',
    # Errors
    'ExtractionError',
    'NetworkFailure',
    'ParseFailure',
    'ScrapeFailedError',
    'UnsupportedSupplierError',
]
