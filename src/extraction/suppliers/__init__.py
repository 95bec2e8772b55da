"""
Supplier-specific extractors.

Modules are imported on demand by the extractor factory; importing this
package does not import any of them (the Alibaba module loads Playwright).

    temu - TemuExtractor
    ebay - EbayExtractor
    alibaba - AlibabaExtractor (static page, then headless rendering)
"""
