"""
Supplier Product Extraction Tool

Modules:
    models      - Data models (ExtractedProduct, ProductVariant, ExtractionResult)
    common      - Shared utilities (config loader, logging, text/price helpers)
    extraction  - Supplier identification, extractors and normalization
"""
