"""
Data models for supplier product extraction.

This module contains pure data classes with no business logic.
"""

from .product import (
    ExtractedProduct,
    ExtractionOptions,
    ExtractionResult,
    ExtractionTrace,
    Price,
    PriceTiers,
    ProductVariant,
    StrategyTrace,
    SupplierTag,
)

__all__ = [
    'ExtractedProduct',
    'ExtractionOptions',
    'ExtractionResult',
    'ExtractionTrace',
    'Price',
    'PriceTiers',
    'ProductVariant',
    'StrategyTrace',
    'SupplierTag',
]
