"""
URL Parameter Parser

Mines a product URL without any network access: gallery image query
parameters, numeric product identifiers, price hints and a readable title
derived from the path slug.
"""

import re
from typing import Optional
from urllib.parse import parse_qs, unquote, urlparse

from ...common.constants import USD_TO_NOK_RATE
from ...common.text_utils import slug_to_title

# Locale prefixes and supplier route names, never part of a product slug
SKIPPED_SEGMENTS = ("no", "itm", "product-detail")

# Price hints embedded in referral URLs are NOK amounts
_PRICE_HINT_PATTERNS = (
    re.compile(r'[_\-](\d+)[\-_]kr', re.IGNORECASE),
    re.compile(r'price[=_](\d+)', re.IGNORECASE),
)


class UrlParameterParser:
    """
    Parses product data out of the URL itself.

    Usage:
        parser = UrlParameterParser(url)
        image = parser.gallery_image()
        title = parser.slug_title(cut_marker='-g-')
    """

    def __init__(self, url: str):
        self.url = url
        self.parsed = urlparse(url)
        self.params = parse_qs(self.parsed.query)

    def query_param(self, name: str) -> str:
        """First value of a query parameter (already percent-decoded once)."""
        values = self.params.get(name)
        return values[0].strip() if values else ""

    def gallery_image(self, param: str = "top_gallery_url") -> Optional[str]:
        """
        Direct image link carried in a query parameter.

        Handles values that were percent-encoded twice.

        Returns:
            Absolute http(s) image URL, or None
        """
        value = self.query_param(param)
        if '%' in value:
            value = unquote(value)
        if value.startswith(('http://', 'https://')):
            return value
        return None

    def path_segments(self, skip: tuple = SKIPPED_SEGMENTS) -> list:
        """Non-empty path segments, minus locale prefixes and supplier route names."""
        return [p for p in self.parsed.path.split('/') if p and p not in skip]

    def last_segment(self) -> str:
        segments = self.path_segments()
        return segments[-1] if segments else ""

    def slug_title(self, segment: str = "", cut_marker: str = "") -> str:
        """
        Readable title from a path segment (last segment by default).

        Returns:
            Title text, or empty string if the slug is too short to be useful
        """
        title = slug_to_title(segment or self.last_segment(), cut_marker=cut_marker)
        return title if len(title) > 3 else ""

    def match_id(self, pattern: str) -> Optional[str]:
        """First group of ``pattern`` searched in the URL path."""
        match = re.search(pattern, self.parsed.path)
        return match.group(1) if match else None

    def price_hint(self) -> Optional[float]:
        """
        Supplier price estimate (USD) from NOK amounts embedded in the URL.

        Returns:
            USD estimate, or None if no plausible amount is present
        """
        for pattern in _PRICE_HINT_PATTERNS:
            match = pattern.search(self.url)
            if match:
                amount = float(match.group(1))
                if 0 < amount < 10000:
                    return round(amount / USD_TO_NOK_RATE, 2)
        return None
