"""
Extraction error taxonomy.

NetworkFailure and ParseFailure are raised inside a single strategy and
recovered there; the strategy then contributes no fields. Only the
convenience wrappers (scrape_price & co.) and the module-level
scrape_product helper let errors reach the caller.
"""


class ExtractionError(Exception):
    """Base class for extraction errors."""


class NetworkFailure(ExtractionError):
    """Fetch or navigation failed (timeout, connection error, bad status)."""


class ParseFailure(ExtractionError):
    """Expected selector or JSON structure was absent or malformed."""


class UnsupportedSupplierError(ExtractionError):
    """URL does not belong to any recognized supplier."""


class ScrapeFailedError(ExtractionError):
    """Raised by convenience calls when scrape_product reported failure."""
