"""
Structured Data Parser

Extracts product information from JSON-LD structured data (schema.org).
Explicitly structured by the supplier for search engines, so it is the most
trustworthy source when present.

Supported schema types: Product, ProductGroup
"""

import json
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from ...common.text_utils import clean_text, parse_price
from ...models import ProductVariant


class StructuredDataParser:
    """
    Parses JSON-LD structured data from HTML pages.

    JSON-LD is embedded in <script type="application/ld+json"> tags and
    contains schema.org structured data.

    Usage:
        parser = StructuredDataParser()
        data = parser.parse(soup)
        title = parser.extract_title(data)
        variants = parser.extract_variants(data)
    """

    SUPPORTED_TYPES = ['Product', 'ProductGroup']

    def parse(self, soup: BeautifulSoup) -> Dict[str, Any]:
        """
        Extract the first Product/ProductGroup JSON-LD object on the page.

        Handles single objects, top-level arrays and @graph containers.

        Args:
            soup: BeautifulSoup object of the page

        Returns:
            Parsed JSON-LD data as dictionary, or empty dict if not found
        """
        for script in soup.find_all('script', type='application/ld+json'):
            text = script.string or script.get_text()
            if not text:
                continue
            try:
                data = json.loads(text)
            except json.JSONDecodeError:
                continue

            for item in self._iter_nodes(data):
                if self._is_supported(item):
                    return item

        return {}

    def _iter_nodes(self, data: Any):
        if isinstance(data, list):
            for item in data:
                yield from self._iter_nodes(item)
        elif isinstance(data, dict):
            yield data
            if isinstance(data.get('@graph'), list):
                yield from self._iter_nodes(data['@graph'])

    def _is_supported(self, item: Dict[str, Any]) -> bool:
        node_type = item.get('@type')
        if isinstance(node_type, list):
            return any(t in self.SUPPORTED_TYPES for t in node_type)
        return node_type in self.SUPPORTED_TYPES

    def extract_title(self, data: Dict[str, Any]) -> str:
        if not data:
            return ""
        return clean_text(data.get('name'))

    def extract_description(self, data: Dict[str, Any]) -> str:
        if not data:
            return ""
        return clean_text(data.get('description'))

    def extract_sku(self, data: Dict[str, Any]) -> str:
        if not data:
            return ""
        sku = data.get('sku') or data.get('productGroupID')
        return str(sku) if sku else ""

    def extract_images(self, data: Dict[str, Any]) -> List[str]:
        """
        Extract image URLs from structured data.

        Args:
            data: Parsed JSON-LD data

        Returns:
            List of image URLs (strings, ImageObject url/@id and arrays)
        """
        if not data:
            return []
        return self._image_urls(data.get('image'))

    def _image_urls(self, image: Any) -> List[str]:
        items = image if isinstance(image, list) else [image]
        urls = []
        for item in items:
            if isinstance(item, str):
                url = item
            elif isinstance(item, dict):
                url = item.get('url') or item.get('contentUrl') or item.get('@id') or ''
            else:
                url = ''
            if url and url not in urls:
                urls.append(url)
        return urls

    def _offers(self, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        offers = data.get('offers', [])
        if isinstance(offers, dict):
            # AggregateOffer may nest the individual offers
            nested = offers.get('offers')
            if isinstance(nested, list) and nested:
                return [o for o in nested if isinstance(o, dict)]
            return [offers]
        if isinstance(offers, list):
            return [o for o in offers if isinstance(o, dict)]
        return []

    def extract_price(self, data: Dict[str, Any]) -> Optional[float]:
        """
        Extract the lowest positive offer price.

        Args:
            data: Parsed JSON-LD data

        Returns:
            Price as float, or None
        """
        if not data:
            return None

        prices = []
        offers = data.get('offers')
        if isinstance(offers, dict) and offers.get('lowPrice') is not None:
            prices.append(parse_price(str(offers['lowPrice'])))
        for offer in self._offers(data):
            if offer.get('price') is not None:
                prices.append(parse_price(str(offer['price'])))

        positive = [p for p in prices if p is not None and p > 0]
        return min(positive) if positive else None

    def extract_currency(self, data: Dict[str, Any]) -> str:
        if not data:
            return ""
        for offer in self._offers(data):
            currency = offer.get('priceCurrency')
            if currency:
                return str(currency).upper()
        return ""

    def extract_availability(self, data: Dict[str, Any]) -> Optional[bool]:
        """
        Map schema.org availability to a boolean.

        Returns:
            True if any offer is in stock, False if all are out of stock,
            None if availability is not declared
        """
        if not data:
            return None

        states = [self._is_in_stock(o.get('availability', '')) for o in self._offers(data)]
        states = [s for s in states if s is not None]
        if not states:
            return None
        return any(states)

    def _is_in_stock(self, availability: str) -> Optional[bool]:
        if not availability:
            return None
        value = str(availability).rsplit('/', 1)[-1].lower()
        if value in ('instock', 'limitedavailability', 'preorder', 'onlineonly'):
            return True
        if value in ('outofstock', 'soldout', 'discontinued'):
            return False
        return None

    def extract_variants(self, data: Dict[str, Any]) -> List[ProductVariant]:
        """
        Extract variant candidates.

        ProductGroup.hasVariant entries become variants; otherwise an offers
        list with more than one in-stock offer is read as one variant per
        offer.

        Args:
            data: Parsed JSON-LD data

        Returns:
            List of ProductVariant candidates (prices in supplier currency)
        """
        if not data:
            return []

        variants = []
        has_variant = data.get('hasVariant')
        if isinstance(has_variant, list):
            for index, item in enumerate(has_variant):
                if not isinstance(item, dict):
                    continue
                attributes = {
                    key: clean_text(str(item[key]))
                    for key in ('color', 'size', 'material', 'pattern')
                    if item.get(key)
                }
                images = self._image_urls(item.get('image'))
                variants.append(ProductVariant(
                    name=self.extract_title(item) or f"Variant {index + 1}",
                    price=self.extract_price(item) or 0.0,
                    attributes=attributes,
                    image=images[0] if images else None,
                    sku=self.extract_sku(item) or None,
                ))
            return variants

        offers = self._offers(data)
        if len(offers) < 2:
            return []

        for index, offer in enumerate(offers):
            if self._is_in_stock(offer.get('availability', '')) is False:
                continue
            attributes = {
                key: clean_text(str(offer[key]))
                for key in ('color', 'size')
                if offer.get(key)
            }
            images = self._image_urls(offer.get('image'))
            variants.append(ProductVariant(
                name=clean_text(offer.get('name')) or f"Variant {index + 1}",
                price=parse_price(str(offer.get('price', ''))) or 0.0,
                attributes=attributes,
                image=images[0] if images else None,
                sku=str(offer['sku']) if offer.get('sku') else None,
            ))
        return variants

    def has_data(self, data: Dict[str, Any]) -> bool:
        """
        Check if structured data contains useful product information.

        Args:
            data: Parsed JSON-LD data

        Returns:
            True if data has a name, offers, images or variants
        """
        if not data:
            return False

        return bool(
            data.get("name") or
            data.get("offers") or
            data.get("image") or
            data.get("hasVariant")
        )
