"""
Product data models.

Pure data classes for representing extracted supplier product information.
No business logic - only data structure definitions and serialization.
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


class SupplierTag(Enum):
    """Recognized supplier sources, one per domain pattern."""
    ALIBABA = "alibaba"
    EBAY = "ebay"
    TEMU = "temu"


@dataclass
class Price:
    """Unit price in the supplier's currency."""
    amount: float
    currency: str


@dataclass
class PriceTiers:
    """Storefront price tiers in the target currency."""
    supplier_price: int
    selling_price: int
    compare_at_price: int
    currency: str


@dataclass
class ProductVariant:
    """
    Purchasable sub-option of a product (color, length, bundle...).

    While candidates are being collected ``price`` is the supplier's unit
    price. After assembly ``price``/``compare_at_price``/``supplier_price``
    hold storefront tiers and ``source_price`` keeps the supplier price.
    """
    name: str
    price: float = 0.0
    compare_at_price: Optional[float] = None
    supplier_price: Optional[float] = None
    image: Optional[str] = None
    attributes: Dict[str, str] = field(default_factory=dict)
    sku: Optional[str] = None
    stock: Optional[int] = None
    source_price: Optional[float] = None


@dataclass
class ExtractedProduct:
    """
    Normalized product record handed to the catalog-write collaborator.

    Invariants (enforced by ResultAssembler):
    - title is never empty
    - price.amount > 0
    - images are absolute http(s) URLs, unique once the query string is stripped
    - variants has at least one entry
    """

    # Core fields (required)
    supplier: SupplierTag
    url: str
    title: str
    price: Price
    description: str = ""

    images: List[str] = field(default_factory=list)
    specs: Dict[str, str] = field(default_factory=dict)
    shipping_estimate: Optional[str] = None
    availability: bool = True
    variants: List[ProductVariant] = field(default_factory=list)

    # Catalog helpers
    supplier_product_id: Optional[str] = None
    pricing: Optional[PriceTiers] = None

    def __post_init__(self):
        """Validate required fields after initialization."""
        if not self.title:
            raise ValueError("Product title is required")
        if not self.url:
            raise ValueError("Product URL is required")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["supplier"] = self.supplier.value
        return data


@dataclass
class StrategyTrace:
    """What one strategy of the chain did during a single extraction."""
    name: str
    fields: List[str] = field(default_factory=list)
    duration_ms: float = 0.0
    error: Optional[str] = None


@dataclass
class ExtractionTrace:
    """Per-call record of which strategy contributed which field."""
    supplier: Optional[str] = None
    strategies: List[StrategyTrace] = field(default_factory=list)
    defaults_applied: List[str] = field(default_factory=list)

    def contributed_by(self, field_name: str) -> Optional[str]:
        """Name of the first strategy that populated ``field_name``."""
        for strategy in self.strategies:
            if field_name in strategy.fields:
                return strategy.name
        return None


@dataclass
class ExtractionResult:
    """
    Outcome of one scrape_product call.

    Exactly one of ``data`` (success) or ``error`` (failure) is meaningful.
    ``raw_html`` is an optional diagnostic payload.
    """
    success: bool
    data: Optional[ExtractedProduct] = None
    error: Optional[str] = None
    raw_html: Optional[str] = None
    trace: Optional[ExtractionTrace] = None

    @classmethod
    def ok(cls, data: ExtractedProduct, raw_html: Optional[str] = None,
           trace: Optional[ExtractionTrace] = None) -> "ExtractionResult":
        return cls(success=True, data=data, raw_html=raw_html, trace=trace)

    @classmethod
    def failed(cls, error: str, raw_html: Optional[str] = None,
               trace: Optional[ExtractionTrace] = None) -> "ExtractionResult":
        return cls(success=False, error=error or "Unknown scraper error",
                   raw_html=raw_html, trace=trace)

    def to_dict(self, include_html: bool = False) -> Dict[str, Any]:
        """JSON-compatible representation."""
        result: Dict[str, Any] = {"success": self.success}
        if self.success and self.data is not None:
            result["data"] = self.data.to_dict()
        else:
            result["error"] = self.error
        if include_html and self.raw_html:
            result["raw_html"] = self.raw_html
        if self.trace is not None:
            result["trace"] = asdict(self.trace)
        return result


@dataclass(frozen=True)
class ExtractionOptions:
    """
    Configuration for one extraction call. Immutable, passed by value.

    single_variant_color_override is a storefront policy: when set, any
    color detected by keyword synthesis collapses into a single variant
    with this name.
    """
    locale: str = "en-US"
    currency: str = "USD"
    min_delay_ms: int = 1000
    max_delay_ms: int = 2500
    user_agent_rotation: bool = True
    single_variant_color_override: Optional[str] = None

    request_timeout_s: float = 30.0
    navigation_timeout_ms: int = 120_000
    content_ready_timeout_ms: int = 45_000
    settle_delay_ms: int = 5000
    default_price: float = 9.99

    @classmethod
    def from_config(cls, **overrides) -> "ExtractionOptions":
        """Build options from config/extraction.yaml, then apply overrides."""
        from ..common.config_loader import load_extraction_settings

        settings = load_extraction_settings()
        known = set(cls.__dataclass_fields__)
        values = {k: v for k, v in settings.items() if k in known}
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)
