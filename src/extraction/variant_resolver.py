"""
Variant Resolver

Turns variant candidates from the strategy chain into the final, never-empty
variant list:

1. Normalize candidates (names, prices, images) and merge duplicates
2. Without candidates, synthesize color variants from title and URL keywords
3. Still nothing: a single "Standard" variant
4. Give every variant an image when the gallery has any
"""

import logging
import re
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

from ..common.config_loader import ColorRule, load_color_rules
from ..common.text_utils import clean_text, decode_url_component
from ..models import ProductVariant
from .image_collector import ImageCollector

logger = logging.getLogger(__name__)

STANDARD_VARIANT_NAME = "Standard"

# Words too generic to match against image URLs
_GENERIC_WORDS = ("variant", "standard", "default")

_NAME_SEPARATORS = re.compile(r"[-_./\s]+")


class VariantResolver:
    """
    Resolves the variant list for one product.

    Usage:
        resolver = VariantResolver(single_color_override=None)
        variants = resolver.resolve(candidates, base_price=9.99,
                                    title=title, url=url, images=images)
    """

    def __init__(
        self,
        color_rules: Optional[Sequence[ColorRule]] = None,
        image_collector: Optional[ImageCollector] = None,
        single_color_override: Optional[str] = None,
    ):
        self._color_rules = tuple(color_rules) if color_rules is not None else None
        self.image_collector = image_collector or ImageCollector()
        self.single_color_override = single_color_override

    @property
    def color_rules(self) -> Tuple[ColorRule, ...]:
        if self._color_rules is None:
            self._color_rules = load_color_rules()
        return self._color_rules

    def resolve(
        self,
        candidates: Sequence[ProductVariant],
        base_price: float,
        title: str = "",
        url: str = "",
        images: Sequence[str] = (),
    ) -> List[ProductVariant]:
        """
        Resolve the final variant list.

        Args:
            candidates: Variants found by the strategies (may be empty)
            base_price: Product price in supplier currency (> 0)
            title: Product title, scanned for color keywords
            url: Product URL, its path is scanned for color keywords
            images: Final product gallery, used for image assignment

        Returns:
            At least one variant
        """
        variants = self.normalize_candidates(candidates, base_price)

        if not variants:
            variants = self.synthesize_from_keywords(f"{title} {self._url_text(url)}", base_price)
            if variants:
                logger.debug("Synthesized %d color variant(s) from keywords", len(variants))

        if not variants:
            variants = [ProductVariant(name=STANDARD_VARIANT_NAME, price=base_price)]

        return self.assign_images(variants, images)

    def normalize_candidates(self, candidates: Sequence[ProductVariant],
                             base_price: float) -> List[ProductVariant]:
        """
        Clean candidates and merge duplicates.

        Blank names become "Variant N", non-positive prices take the base
        price, invalid images are dropped. Variants with the same case-folded
        name and attributes are merged, earlier values winning.
        """
        merged: Dict[tuple, ProductVariant] = {}

        for index, candidate in enumerate(candidates):
            name = clean_text(candidate.name) or f"Variant {index + 1}"
            price = candidate.price if candidate.price and candidate.price > 0 else base_price
            attributes = {
                clean_text(k): clean_text(v)
                for k, v in (candidate.attributes or {}).items()
                if clean_text(k) and clean_text(v)
            }
            variant = replace(
                candidate,
                name=name,
                price=price,
                attributes=attributes,
                image=self.image_collector.normalize(candidate.image),
            )

            key = self._dedup_key(variant)
            existing = merged.get(key)
            if existing is None:
                merged[key] = variant
                continue

            merged[key] = replace(
                existing,
                image=existing.image or variant.image,
                sku=existing.sku or variant.sku,
                stock=existing.stock if existing.stock is not None else variant.stock,
                compare_at_price=existing.compare_at_price or variant.compare_at_price,
            )

        return list(merged.values())

    def _dedup_key(self, variant: ProductVariant) -> tuple:
        attributes = tuple(sorted((k.casefold(), v.casefold()) for k, v in variant.attributes.items()))
        return (variant.name.casefold(), attributes)

    def detect_colors(self, text: str) -> List[str]:
        """
        Canonical colors mentioned in ``text``, ordered by first mention.

        Returns:
            Distinct canonical color names
        """
        if not text:
            return []

        positions: Dict[str, int] = {}
        for rule in self.color_rules:
            match = rule.regex.search(text)
            if match is None:
                continue
            current = positions.get(rule.canonical)
            if current is None or match.start() < current:
                positions[rule.canonical] = match.start()

        return sorted(positions, key=positions.get)

    def synthesize_from_keywords(self, text: str, base_price: float) -> List[ProductVariant]:
        """One variant per detected color, or one override variant."""
        colors = self.detect_colors(text)
        if not colors:
            return []

        if self.single_color_override:
            return [ProductVariant(
                name=self.single_color_override,
                price=base_price,
                attributes={"color": self.single_color_override},
            )]

        return [
            ProductVariant(name=color, price=base_price, attributes={"color": color})
            for color in colors
        ]

    def _url_text(self, url: str) -> str:
        if not url:
            return ""
        path = decode_url_component(urlparse(url).path)
        return path.replace('/', ' ').replace('-', ' ').replace('_', ' ')

    def _keywords(self, variant: ProductVariant) -> Tuple[List[str], List[ColorRule]]:
        """
        Lowercase words naming the variant, plus the color rules of every
        canonical color the variant names (synonyms in all locales).
        """
        label = " ".join([variant.name] + list(variant.attributes.values()))
        words = []
        for word in clean_text(label).lower().replace('-', ' ').split():
            if len(word) >= 3 and word not in _GENERIC_WORDS and word not in words:
                words.append(word)

        canonicals = {rule.canonical for rule in self.color_rules if rule.matches(label)}
        rules = [rule for rule in self.color_rules if rule.canonical in canonicals]
        return words, rules

    def _image_name(self, url: str) -> str:
        """Last path segment of an image URL as space-separated lowercase words."""
        path = decode_url_component(urlparse(url).path).rstrip('/')
        return " ".join(t for t in _NAME_SEPARATORS.split(path.rsplit('/', 1)[-1].lower()) if t)

    def assign_images(self, variants: List[ProductVariant],
                      images: Sequence[str]) -> List[ProductVariant]:
        """
        Fill missing variant images.

        Order of preference: an image whose file name contains one of the
        variant's words (or a synonym of its color) as a whole token, the
        image at the variant's position (cyclic), the first image. Without
        images, variants keep no image.
        """
        if not images:
            return variants

        names = [self._image_name(url) for url in images]

        result = []
        for index, variant in enumerate(variants):
            if variant.image:
                result.append(variant)
                continue

            image = None
            words, rules = self._keywords(variant)
            for url, name in zip(images, names):
                tokens = name.split()
                if any(word in tokens for word in words) or any(rule.matches(name) for rule in rules):
                    image = url
                    break

            if image is None:
                image = images[index % len(images)] if len(images) > 1 else images[0]

            result.append(replace(variant, image=image))
        return result
