"""
Product Draft

Working record filled by the strategy chain. Each strategy writes into its
own fresh draft; the chain then merges it into the accumulated draft so
later strategies only fill gaps and never overwrite populated fields.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from ..models import ProductVariant

# Scalar fields merged on gap (first non-empty value wins)
_SCALAR_FIELDS = (
    "title",
    "description",
    "currency",
    "shipping_estimate",
    "availability",
    "supplier_product_id",
    "slug_title",
)


@dataclass
class ProductDraft:
    """Fields discovered so far for one extraction call."""
    title: str = ""
    description: str = ""
    price: Optional[float] = None
    currency: str = ""
    images: List[str] = field(default_factory=list)
    variants: List[ProductVariant] = field(default_factory=list)
    specs: Dict[str, str] = field(default_factory=dict)
    shipping_estimate: Optional[str] = None
    availability: Optional[bool] = None
    supplier_product_id: Optional[str] = None

    # Low-confidence values; used only when nothing better is found
    slug_title: str = ""
    price_hint: Optional[float] = None

    def add_image(self, url: Optional[str]) -> None:
        if url and url not in self.images:
            self.images.append(url)

    def has_price(self) -> bool:
        return self.price is not None and self.price > 0

    def merge(self, other: "ProductDraft") -> List[str]:
        """
        Fill gaps in this draft from ``other``.

        Returns:
            Names of the fields ``other`` contributed
        """
        contributed = []

        for name in _SCALAR_FIELDS:
            current = getattr(self, name)
            incoming = getattr(other, name)
            if (current is None or current == "") and incoming not in (None, ""):
                setattr(self, name, incoming)
                contributed.append(name)

        if not self.has_price() and other.has_price():
            self.price = other.price
            contributed.append("price")

        if not (self.price_hint and self.price_hint > 0) and other.price_hint and other.price_hint > 0:
            self.price_hint = other.price_hint
            contributed.append("price_hint")

        new_images = [img for img in other.images if img not in self.images]
        if new_images:
            self.images.extend(new_images)
            contributed.append("images")

        if not self.variants and other.variants:
            self.variants = list(other.variants)
            contributed.append("variants")

        new_specs = {k: v for k, v in other.specs.items() if k not in self.specs and v}
        if new_specs:
            self.specs.update(new_specs)
            contributed.append("specs")

        return contributed
