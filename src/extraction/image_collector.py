"""
Image Collector

Merges image candidates from every strategy into the final gallery:
absolute http(s) URLs only, no placeholders or icons, one entry per image
once the query string is ignored, variant images first.
"""

import logging
from typing import Iterable, List, Optional

from ..common.constants import IMAGE_BLACKLIST
from ..common.text_utils import strip_query

logger = logging.getLogger(__name__)


class ImageCollector:
    """
    Validates and deduplicates product image URLs.

    Usage:
        collector = ImageCollector()
        images = collector.collect(page_images, variant_images=[v.image for v in variants])
    """

    def __init__(self, blacklist: Iterable[str] = IMAGE_BLACKLIST):
        self.blacklist = tuple(item.lower() for item in blacklist)

    def normalize(self, url: Optional[str]) -> Optional[str]:
        """
        Normalize one candidate.

        Returns:
            https-prefixed absolute URL, or None if the candidate is unusable
        """
        if not url or not isinstance(url, str):
            return None
        url = url.strip()
        if url.startswith('//'):
            url = 'https:' + url
        if not url.lower().startswith(('http://', 'https://')):
            return None

        lowered = url.lower()
        if any(marker in lowered for marker in self.blacklist):
            return None
        return url

    def collect(self, images: Iterable[Optional[str]],
                variant_images: Iterable[Optional[str]] = ()) -> List[str]:
        """
        Build the final image list.

        Args:
            images: Candidates in discovery order
            variant_images: Images referenced by variants (placed first)

        Returns:
            Unique valid URLs; the first original URL is kept per stripped key
        """
        result = []
        seen = set()
        rejected = 0

        for candidate in list(variant_images) + list(images):
            url = self.normalize(candidate)
            if url is None:
                if candidate:
                    rejected += 1
                continue
            key = strip_query(url)
            if key in seen:
                continue
            seen.add(key)
            result.append(url)

        if rejected:
            logger.debug("Discarded %d invalid or placeholder image(s)", rejected)
        return result
