"""
Supplier Identifier

Classifies a product URL by supplier using plain substring matching.
Imports only the standard library so routing code can use it before any
extractor (or the browser stack) is loaded.
"""

from typing import Optional

from ..models.product import SupplierTag

# Host/substring patterns per supplier, checked in order
SUPPLIER_PATTERNS = (
    (SupplierTag.ALIBABA, ("alibaba.com", "1688.com")),
    (SupplierTag.EBAY, ("ebay.com", "ebay.no", "ebay.co.uk")),
    (SupplierTag.TEMU, ("temu.com", "temu.co.uk", "temu-cdn")),
)


def identify_supplier(url: str) -> Optional[SupplierTag]:
    """
    Identify the supplier of a product URL.

    Args:
        url: Any URL string

    Returns:
        SupplierTag, or None if the URL matches no known supplier
    """
    if not isinstance(url, str):
        return None

    normalized = url.lower()
    for tag, patterns in SUPPLIER_PATTERNS:
        if any(pattern in normalized for pattern in patterns):
            return tag
    return None
