"""
HTML Content Parser

Extracts product information from HTML elements using CSS selectors:
- Title, price text, description and shipping estimate
- Images from src/data-src/lazy-load attributes and inline background styles
- Spec tables and label/value lists
- Variant option elements (color swatches, bundle buttons)

Selectors are supplied by the supplier extractor; this parser only knows how
to read elements, not where a given supplier puts them.
"""

import re
from typing import Dict, Iterable, List, Optional, Sequence
from urllib.parse import urljoin

from bs4 import BeautifulSoup

from ...common.text_utils import clean_text, parse_price_range
from ...models import ProductVariant

# Attributes that may hold an image URL, most specific first
IMAGE_ATTRIBUTES = (
    'data-zoom-src',
    'data-original',
    'data-lazy-src',
    'data-src',
    'src',
)

BACKGROUND_URL = re.compile(r'background(?:-image)?\s*:[^;]*url\(\s*[\'"]?([^\'")]+)[\'"]?\s*\)', re.IGNORECASE)

# Option element texts that are buttons, not variants
_OPTION_STOPWORDS = ('add to cart', 'buy', 'legg til', 'kjøp', 'select')


class HTMLContentParser:
    """
    Parses product content from HTML elements.

    Usage:
        parser = HTMLContentParser(soup, base_url=url)
        title = parser.extract_title(['h1.product-title'])
        images = parser.extract_images(['.gallery img'])
    """

    DEFAULT_TITLE_SELECTORS = ('h1[itemprop="name"]', 'h1')

    def __init__(self, soup: BeautifulSoup, base_url: str = ""):
        """
        Initialize the HTML parser.

        Args:
            soup: BeautifulSoup object of the page
            base_url: Page URL used to resolve relative links
        """
        self.soup = soup
        self.base_url = base_url

    def resolve_url(self, url: Optional[str]) -> str:
        """Protocol-relative URLs get https:, relative paths join the page URL."""
        if not url:
            return ""
        url = url.strip()
        if url.startswith('//'):
            return 'https:' + url
        if url.startswith(('http://', 'https://', 'data:')):
            return url
        return urljoin(self.base_url, url) if self.base_url else url

    def select_text(self, selectors: Iterable[str]) -> str:
        """Text of the first selector that matches a non-empty element."""
        for selector in selectors:
            element = self.soup.select_one(selector)
            if element:
                text = clean_text(element.get_text(' '))
                if text:
                    return text
        return ""

    def meta_content(self, *names: str) -> str:
        """Content of the first <meta> whose property, name or itemprop matches."""
        for name in names:
            for attr in ('property', 'name', 'itemprop'):
                element = self.soup.find('meta', attrs={attr: name})
                if element and element.get('content'):
                    return clean_text(element['content'])
        return ""

    def extract_title(self, selectors: Sequence[str] = DEFAULT_TITLE_SELECTORS) -> str:
        """
        Extract product title.

        Tries the selectors in priority order, then og:title.

        Returns:
            Product title or empty string
        """
        return self.select_text(selectors) or self.meta_content('og:title')

    def extract_price_text(self, selectors: Iterable[str]) -> str:
        """Raw price text; a ``content`` attribute beats the element text."""
        for selector in selectors:
            element = self.soup.select_one(selector)
            if not element:
                continue
            text = element.get('content') or element.get_text(' ')
            text = clean_text(text)
            if text:
                return text
        return ""

    def extract_price(self, selectors: Iterable[str]) -> Optional[float]:
        """
        Extract price from text; ranges resolve to their minimum.

        Returns:
            Positive price, or None
        """
        price = parse_price_range(self.extract_price_text(selectors))
        return price if price and price > 0 else None

    def extract_description(self, selectors: Iterable[str]) -> str:
        return self.select_text(selectors) or self.meta_content('og:description', 'description')

    def extract_shipping(self, selectors: Iterable[str]) -> Optional[str]:
        return self.select_text(selectors) or None

    def image_url_of(self, element) -> str:
        """First usable URL among the element's image attributes and srcset."""
        for attr in IMAGE_ATTRIBUTES:
            value = element.get(attr)
            if value and not value.startswith('data:'):
                return self.resolve_url(value)
        srcset = element.get('srcset') or element.get('data-srcset')
        if srcset:
            return self.resolve_url(srcset.split(',')[0].split()[0])
        return ""

    def extract_images(self, selectors: Iterable[str], url_filter: Optional[str] = None) -> List[str]:
        """
        Extract image URLs from <img> (or any element with image attributes).

        Args:
            selectors: CSS selectors for image elements
            url_filter: Keep only URLs containing this substring

        Returns:
            Resolved image URLs in document order, without duplicates
        """
        images = []
        for selector in selectors:
            for element in self.soup.select(selector):
                url = self.image_url_of(element)
                if not url or (url_filter and url_filter not in url):
                    continue
                if url not in images:
                    images.append(url)
        return images

    def extract_background_images(self, selectors: Iterable[str] = ('[style]',),
                                  url_filter: Optional[str] = None) -> List[str]:
        """Image URLs from inline ``background-image: url(...)`` styles."""
        images = []
        for selector in selectors:
            for element in self.soup.select(selector):
                for match in BACKGROUND_URL.finditer(element.get('style', '')):
                    url = self.resolve_url(match.group(1))
                    if not url or (url_filter and url_filter not in url):
                        continue
                    if url not in images:
                        images.append(url)
        return images

    def extract_specs(self, row_selector: str, key_selector: Optional[str] = None,
                      value_selector: Optional[str] = None) -> Dict[str, str]:
        """
        Extract key/value specifications.

        Args:
            row_selector: Selector for one spec row (``tr``, ``li``...)
            key_selector: Selector for the key inside the row
                (default: first td/th cell)
            value_selector: Selector for the value inside the row
                (default: second td/th cell)

        Returns:
            Ordered dict of spec name -> value; rows missing either side are skipped
        """
        specs = {}
        for row in self.soup.select(row_selector):
            if key_selector and value_selector:
                key_el = row.select_one(key_selector)
                value_el = row.select_one(value_selector)
            else:
                cells = row.find_all(['td', 'th'])
                key_el = cells[0] if len(cells) > 0 else None
                value_el = cells[1] if len(cells) > 1 else None
            if key_el is None or value_el is None:
                continue

            key = clean_text(key_el.get_text(' ')).rstrip(':').strip()
            value = clean_text(value_el.get_text(' '))
            if key and value and key not in specs:
                specs[key] = value
        return specs

    def extract_variant_options(self, selectors: Iterable[str], max_length: int = 100) -> List[ProductVariant]:
        """
        Read variant option elements (swatches, option buttons).

        The option label comes from the element text, its title or its
        aria-label; images come from a nested <img>.

        Returns:
            Variant candidates without prices, one per distinct label
        """
        variants = []
        seen = set()
        for selector in selectors:
            for element in self.soup.select(selector):
                label = (
                    clean_text(element.get_text(' '))
                    or clean_text(element.get('title'))
                    or clean_text(element.get('aria-label'))
                )
                if not label or len(label) > max_length:
                    continue
                if any(word in label.lower() for word in _OPTION_STOPWORDS):
                    continue
                if label.casefold() in seen:
                    continue
                seen.add(label.casefold())

                img = element if element.name == 'img' else element.find('img')
                image = self.image_url_of(img) if img is not None else ""
                variants.append(ProductVariant(name=label, image=image or None))
        return variants
