"""
Script Data Parser

Extracts product data from JavaScript hydration blobs embedded in the page:

    <script id="__NEXT_DATA__" type="application/json">{...}</script>
    window.__INITIAL_STATE__ = {...};
    window.rawData = {...};
    var productData = {...};
    window.detailData = {...};

Single-page storefronts ship their whole product state this way, including
the SKU list with per-variant price and image, long before the DOM renders.
"""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from bs4 import BeautifulSoup

from ...common.text_utils import clean_text, parse_price
from ...models import ProductVariant

logger = logging.getLogger(__name__)

# Assignment prefixes that precede a JSON object literal
HYDRATION_PATTERNS = (
    ("__NEXT_DATA__", re.compile(r'window\.__NEXT_DATA__\s*=\s*')),
    ("__INITIAL_STATE__", re.compile(r'window\.__INITIAL_STATE__\s*=\s*')),
    ("rawData", re.compile(r'window\.rawData\s*=\s*')),
    ("productData", re.compile(r'var\s+productData\s*=\s*')),
    ("detailData", re.compile(r'window\.detailData\s*=\s*')),
)

TITLE_KEYS = ('goodsName', 'productName', 'title', 'subject', 'name')
DESCRIPTION_KEYS = ('goodsDesc', 'description', 'desc')
PRICE_KEYS = ('salePrice', 'goodsPrice', 'price', 'minPrice', 'minOnSalePrice')
IMAGE_KEYS = ('thumbUrl', 'image', 'imgUrl', 'goodsImg', 'imageUrl', 'thumb', 'img')
GALLERY_KEYS = ('gallery', 'goodsGallery', 'images', 'imgList', 'imageList', 'goodsImgList')
COLOR_SPEC_NAMES = ('color', 'colour', 'farge')


def extract_json_object(text: str, start: int) -> Optional[str]:
    """
    Return the balanced ``{...}`` literal beginning at or after ``start``.

    String literals (and escapes inside them) are skipped so braces in text
    values do not end the object early.
    """
    begin = text.find('{', start)
    if begin == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for index in range(begin, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == '\\':
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return text[begin:index + 1]
    return None


class ScriptDataParser:
    """
    Parses hydration blobs and searches them for product fields.

    Usage:
        parser = ScriptDataParser()
        blobs = parser.parse(soup)
        variants = parser.extract_variants(blobs)
    """

    def __init__(self, max_depth: int = 5):
        self.max_depth = max_depth

    def parse(self, soup: BeautifulSoup) -> List[Tuple[str, Any]]:
        """
        Collect every hydration blob on the page.

        Args:
            soup: BeautifulSoup object of the page

        Returns:
            List of (source name, decoded JSON) tuples in page order
        """
        blobs = []

        next_data = soup.find('script', id='__NEXT_DATA__')
        if next_data is not None:
            decoded = self._loads(next_data.string or next_data.get_text())
            if decoded is not None:
                blobs.append(('__NEXT_DATA__', decoded))

        for script in soup.find_all('script'):
            if script.get('id') == '__NEXT_DATA__':
                continue
            text = script.string or script.get_text()
            if not text or len(text) < 20:
                continue

            for name, pattern in HYDRATION_PATTERNS:
                match = pattern.search(text)
                if not match:
                    continue
                literal = extract_json_object(text, match.end())
                decoded = self._loads(literal)
                if decoded is not None:
                    blobs.append((name, decoded))

        if blobs:
            logger.debug("Hydration blobs found: %s", ', '.join(name for name, _ in blobs))
        return blobs

    def _loads(self, text: Optional[str]) -> Any:
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            logger.debug("Skipping undecodable script blob (%d chars)", len(text))
            return None

    # ------------------------------------------------------------------
    # Recursive search
    # ------------------------------------------------------------------

    def find_sku_lists(self, data: Any, depth: int = 0) -> List[List[Dict[str, Any]]]:
        """
        Find lists stored under keys containing 'sku' or 'variant'.

        Args:
            data: Decoded JSON value
            depth: Current recursion depth (search stops past max_depth)

        Returns:
            Non-empty lists of dicts, outermost first
        """
        found = []
        if depth > self.max_depth:
            return found

        if isinstance(data, dict):
            for key, value in data.items():
                lowered = str(key).lower()
                if ('sku' in lowered or 'variant' in lowered) and isinstance(value, list):
                    items = [item for item in value if isinstance(item, dict)]
                    if items:
                        found.append(items)
                        continue
                found.extend(self.find_sku_lists(value, depth + 1))
        elif isinstance(data, list):
            for item in data:
                found.extend(self.find_sku_lists(item, depth + 1))

        return found

    def find_product_node(self, data: Any, depth: int = 0) -> Optional[Dict[str, Any]]:
        """Outermost dict holding a title key together with a price or gallery key."""
        if depth > self.max_depth:
            return None

        if isinstance(data, dict):
            has_title = any(isinstance(data.get(k), str) and data.get(k) for k in TITLE_KEYS)
            has_detail = any(k in data for k in PRICE_KEYS + GALLERY_KEYS)
            if has_title and has_detail:
                return data
            children = data.values()
        elif isinstance(data, list):
            children = data
        else:
            return None

        for child in children:
            node = self.find_product_node(child, depth + 1)
            if node is not None:
                return node
        return None

    def _product_nodes(self, blobs: List[Tuple[str, Any]]) -> List[Dict[str, Any]]:
        nodes = []
        for _, data in blobs:
            node = self.find_product_node(data)
            if node is not None:
                nodes.append(node)
        return nodes

    # ------------------------------------------------------------------
    # Field extraction
    # ------------------------------------------------------------------

    def extract_title(self, blobs: List[Tuple[str, Any]]) -> str:
        for node in self._product_nodes(blobs):
            for key in TITLE_KEYS:
                title = clean_text(node.get(key)) if isinstance(node.get(key), str) else ""
                if title:
                    return title
        return ""

    def extract_description(self, blobs: List[Tuple[str, Any]]) -> str:
        for node in self._product_nodes(blobs):
            for key in DESCRIPTION_KEYS:
                value = node.get(key)
                if isinstance(value, str) and value.strip():
                    return clean_text(value)
        return ""

    def extract_price(self, blobs: List[Tuple[str, Any]]) -> Optional[float]:
        for node in self._product_nodes(blobs):
            price = self._price_of(node)
            if price:
                return price
        return None

    def extract_images(self, blobs: List[Tuple[str, Any]]) -> List[str]:
        """Gallery image URLs from the product nodes, in gallery order."""
        images = []
        for node in self._product_nodes(blobs):
            for key in GALLERY_KEYS:
                for url in self._image_list(node.get(key)):
                    if url not in images:
                        images.append(url)
        return images

    def extract_variants(self, blobs: List[Tuple[str, Any]]) -> List[ProductVariant]:
        """
        Variant candidates from the first non-empty SKU list.

        Returns:
            ProductVariant list with supplier-currency prices
        """
        for name, data in blobs:
            for sku_list in self.find_sku_lists(data):
                variants = [self.variant_from_sku(sku, i) for i, sku in enumerate(sku_list)]
                if variants:
                    logger.debug("Found %d SKUs in %s", len(variants), name)
                    return variants
        return []

    def variant_from_sku(self, sku: Dict[str, Any], index: int = 0) -> ProductVariant:
        """
        Build a variant candidate from one SKU object.

        A color spec names the variant; otherwise the first spec value does.
        """
        attributes = {}
        name = ""
        specs = sku.get('specList') or sku.get('specs') or []
        for spec in specs if isinstance(specs, list) else []:
            if not isinstance(spec, dict):
                continue
            spec_name = clean_text(spec.get('specName') or spec.get('name') or spec.get('specKey')).lower()
            spec_value = clean_text(spec.get('specValue') or spec.get('value') or spec.get('specVal'))
            if not (spec_name and spec_value):
                continue
            attributes[spec_name] = spec_value
            if spec_name in COLOR_SPEC_NAMES or not name:
                name = spec_value

        if not name:
            for key in ('skuName', 'name', 'title'):
                if isinstance(sku.get(key), str) and sku[key].strip():
                    name = clean_text(sku[key])
                    break

        image = None
        for key in IMAGE_KEYS:
            if isinstance(sku.get(key), str) and sku[key].strip():
                image = sku[key].strip()
                break
        if image is None:
            gallery = self._image_list(sku.get('gallery') or sku.get('images'))
            image = gallery[0] if gallery else None

        sku_id = sku.get('skuId') or sku.get('sku_id') or sku.get('id')
        stock = sku.get('stock', sku.get('quantity'))

        return ProductVariant(
            name=name,
            price=self._price_of(sku) or 0.0,
            attributes=attributes,
            image=image,
            sku=str(sku_id) if sku_id is not None else None,
            stock=int(stock) if isinstance(stock, (int, float)) else None,
        )

    def _price_of(self, node: Dict[str, Any]) -> Optional[float]:
        for key in PRICE_KEYS:
            value = node.get(key)
            if isinstance(value, dict):
                value = value.get('amount', value.get('value'))
            if value is None or isinstance(value, bool):
                continue
            price = parse_price(str(value))
            if price and price > 0:
                return price
        return None

    def _image_list(self, value: Any) -> List[str]:
        urls = []
        for item in value if isinstance(value, list) else []:
            if isinstance(item, dict):
                item = item.get('url') or item.get('imgUrl') or item.get('src')
            if isinstance(item, str) and item.strip():
                urls.append(item.strip())
        return urls
