"""
Extractor Factory

Maps a supplier to its extractor class. Supplier modules are imported on
demand, so resolving a Temu or eBay URL never loads the browser stack that
the Alibaba extractor needs.
"""

from __future__ import annotations

import importlib
import logging
from typing import TYPE_CHECKING

from ..models.product import ExtractionOptions, ExtractionResult, SupplierTag
from .errors import UnsupportedSupplierError
from .supplier_identifier import identify_supplier

if TYPE_CHECKING:
    import requests

    from .base_extractor import BaseExtractor

logger = logging.getLogger(__name__)

# Registry of supplier extractors: tag -> (module path, class name)
SUPPLIER_EXTRACTORS = {
    SupplierTag.ALIBABA: (".suppliers.alibaba", "AlibabaExtractor"),
    SupplierTag.EBAY: (".suppliers.ebay", "EbayExtractor"),
    SupplierTag.TEMU: (".suppliers.temu", "TemuExtractor"),
}


def load_extractor_class(tag: SupplierTag):
    """Import and return the extractor class registered for ``tag``."""
    module_path, class_name = SUPPLIER_EXTRACTORS[tag]
    module = importlib.import_module(module_path, package=__package__)
    return getattr(module, class_name)


def get_extractor_for_url(
    url: str,
    options: ExtractionOptions | None = None,
    session: requests.Session | None = None,
) -> BaseExtractor | None:
    """
    Get an extractor instance for a URL.

    Args:
        url: Product URL
        options: Extraction options (defaults apply when omitted)
        session: Optional shared requests session

    Returns:
        Extractor for the URL's supplier, or None for unsupported suppliers
    """
    tag = identify_supplier(url)
    if tag is None:
        return None

    extractor_class = load_extractor_class(tag)
    logger.debug("Using %s for %s", extractor_class.__name__, url[:80])
    return extractor_class(options=options, session=session)


def scrape_product(url: str, options: ExtractionOptions | None = None) -> ExtractionResult:
    """
    Scrape a product URL with the matching supplier extractor.

    Raises:
        UnsupportedSupplierError: If no supplier matches the URL
    """
    extractor = get_extractor_for_url(url, options=options)
    if extractor is None:
        raise UnsupportedSupplierError(f"Unsupported supplier URL: {url}")
    return extractor.scrape_product(url)
