"""
Price Normalizer

Converts a supplier price into storefront price tiers:

    supplier_price = round(amount * rate)
    selling_price  = round(supplier_price * margin)
    compare_at     = round(selling_price * compare)

Rates, target currency and multipliers come from config/pricing.yaml.
Rounding is half-up, so 104.5 NOK becomes 105 rather than 104.
"""

import logging
from dataclasses import replace
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional, Sequence

from ..common.config_loader import PricingPolicy, load_pricing_policy
from ..models import PriceTiers, ProductVariant

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class PriceNormalizer:
    """
    Applies the pricing policy to base and variant prices.

    Usage:
        normalizer = PriceNormalizer()
        tiers = normalizer.normalize(9.99, "USD")
        # PriceTiers(supplier_price=105, selling_price=210, compare_at_price=273, currency='NOK')
    """

    def __init__(self, policy: Optional[PricingPolicy] = None):
        self.policy = policy or load_pricing_policy()

    def rate(self, currency: str) -> float:
        """Conversion rate for ``currency``; unknown codes use the default rate."""
        if not self.policy.has_rate(currency):
            logger.warning("No rate for currency %r, using default rate %.2f",
                           currency, self.policy.default_rate)
        return self.policy.rate_for(currency)

    def normalize(
        self,
        amount: float,
        currency: str,
        margin_multiplier: Optional[float] = None,
        compare_multiplier: Optional[float] = None,
    ) -> PriceTiers:
        """
        Compute price tiers for one source amount.

        Args:
            amount: Supplier price in ``currency``
            currency: ISO code of the supplier price
            margin_multiplier: Overrides the policy margin
            compare_multiplier: Overrides the policy compare-at multiplier

        Returns:
            PriceTiers in the policy's target currency
        """
        margin = margin_multiplier if margin_multiplier is not None else self.policy.margin_multiplier
        compare = compare_multiplier if compare_multiplier is not None else self.policy.compare_multiplier

        supplier_price = round_half_up(amount * self.rate(currency))
        selling_price = round_half_up(supplier_price * margin)
        compare_at_price = round_half_up(selling_price * compare)

        return PriceTiers(
            supplier_price=supplier_price,
            selling_price=selling_price,
            compare_at_price=compare_at_price,
            currency=self.policy.target_currency,
        )

    def apply_to_variants(self, variants: Sequence[ProductVariant], currency: str) -> List[ProductVariant]:
        """
        Convert variant prices to storefront tiers.

        A variant that carries its own supplier compare-at price gets
        ``round(compare_at * rate * margin)`` instead of the multiplier tier.

        Returns:
            New variants; ``source_price`` keeps the supplier price
        """
        result = []
        for variant in variants:
            tiers = self.normalize(variant.price, currency)
            compare_at = tiers.compare_at_price
            if variant.compare_at_price and variant.compare_at_price > 0:
                compare_at = round_half_up(
                    variant.compare_at_price * self.rate(currency) * self.policy.margin_multiplier
                )

            result.append(replace(
                variant,
                price=tiers.selling_price,
                supplier_price=tiers.supplier_price,
                compare_at_price=compare_at,
                source_price=variant.price,
            ))
        return result


def normalize_price(
    source_amount: float,
    source_currency: str,
    margin_multiplier: Optional[float] = None,
    compare_multiplier: Optional[float] = None,
    policy: Optional[PricingPolicy] = None,
) -> PriceTiers:
    """Module-level shortcut for PriceNormalizer(policy).normalize(...)."""
    return PriceNormalizer(policy).normalize(
        source_amount, source_currency, margin_multiplier, compare_multiplier
    )
