"""Price calculation engine: pure functions.

``calculate_price_breakdown`` is the single authority for what a product
configuration costs: base/discounted unit price, per-variant surcharges,
combo tiers and normalized bulk tiers. No I/O, no side effects; identical
inputs always produce an equal ``PriceBreakdown``.

Coupons and delivery charges are not applied here. They are
folded in at order-total assembly (``storefront.checkout``).

Example::

    breakdown = calculate_price_breakdown(product, state.selections)
    breakdown.final_total
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from pricing.coercion import to_non_negative, to_quantity
from pricing.config import PricingConfig
from pricing.tiers import ComboPricingTier, merge_tiers, select_tier
from pricing.variants import VariantSelection, resolve_total_quantity

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PriceBreakdown:
    """Outcome of one engine run. ``final_total`` is never negative."""

    base_price: float
    variant_total: float
    subtotal: float
    combo_discount: float
    final_total: float
    total_quantity: int
    applied_combo_tier: ComboPricingTier | None = None
    savings: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "basePrice": self.base_price,
            "variantTotal": self.variant_total,
            "subtotal": self.subtotal,
            "comboDiscount": self.combo_discount,
            "finalTotal": self.final_total,
            "totalQuantity": self.total_quantity,
            "appliedComboTier": (
                self.applied_combo_tier.to_dict() if self.applied_combo_tier else None
            ),
            "savings": self.savings,
        }


@dataclass(frozen=True)
class PricingResult:
    """Single-line combo pricing (unit price x quantity, no surcharges)."""

    applied_tier: ComboPricingTier | None
    discount_amount: float
    final_price: float
    savings: float
    unit_price: float
    original_total: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "appliedTier": self.applied_tier.to_dict() if self.applied_tier else None,
            "discountAmount": self.discount_amount,
            "finalPrice": self.final_price,
            "savings": self.savings,
            "unitPrice": self.unit_price,
            "originalTotal": self.original_total,
        }


# ---------------------------------------------------------------------------
# Product accessors
# ---------------------------------------------------------------------------

def _section(product: Any, key: str) -> Mapping[str, Any]:
    value = product.get(key) if isinstance(product, Mapping) else None
    return value if isinstance(value, Mapping) else {}


def _list(product: Any, key: str) -> list[Any]:
    value = product.get(key) if isinstance(product, Mapping) else None
    return list(value) if isinstance(value, (list, tuple)) else []


def resolve_base_price(product: Mapping[str, Any] | None) -> float:
    """``price.discounted`` when positive, else ``price.regular``.

    A discounted price above the regular one is used as-is.
    """
    price = _section(product, "price")
    discounted = to_non_negative(price.get("discounted"))
    if discounted > 0:
        return discounted
    return to_non_negative(price.get("regular"))


def resolve_tiers(
    product: Mapping[str, Any] | None,
    base_price: float,
    config: PricingConfig | None = None,
) -> list[ComboPricingTier]:
    """The product's combo tiers merged with its normalized bulk tiers."""
    config = config or PricingConfig()
    return merge_tiers(
        _list(product, "comboPricing"),
        _list(product, "bulkPricing"),
        base_price,
        config.bundle_price_ratio,
    )


def _clamped_discount(tier: ComboPricingTier | None, quantity: int, ceiling: float) -> float:
    if tier is None:
        return 0.0
    return min(tier.discount_for(quantity), ceiling)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def calculate_price_breakdown(
    product: Mapping[str, Any] | None,
    selected_variants: Sequence[VariantSelection],
    quantity: Any = None,
    config: PricingConfig | None = None,
) -> PriceBreakdown:
    """Compute the authoritative price for a product and its selections.

    1. Variant total: sum of ``item.price * quantity`` over non-base
       selections.
    2. Subtotal: ``base_price * base_quantity + variant_total``.
    3. Tier: highest ``min_quantity`` reached by the order quantity.
    4. Discount: ``discount`` or ``discount * quantity``, capped at subtotal.
    5. Final total: ``max(0, subtotal - discount)``.

    ``quantity`` overrides the order quantity used for the tier lookup; by
    default it is the base variant's quantity. It does not price units on
    its own: the base-price line is always ``base_price * base_quantity``,
    so selections without a base variant contribute only their surcharges.
    Use ``calculate_combo_pricing`` for a plain ``unit_price * quantity``
    line. An order quantity of 0 zeroes every total.
    """
    base_price = resolve_base_price(product)
    if quantity is None:
        total_quantity = resolve_total_quantity(selected_variants)
    else:
        total_quantity = to_quantity(quantity)

    if total_quantity == 0:
        return PriceBreakdown(
            base_price=base_price,
            variant_total=0.0,
            subtotal=0.0,
            combo_discount=0.0,
            final_total=0.0,
            total_quantity=0,
        )

    base_quantity = 0
    variant_total = 0.0
    for selection in selected_variants:
        selection_quantity = to_quantity(selection.quantity)
        if selection.is_base_variant:
            base_quantity = selection_quantity
            continue
        variant_total += to_non_negative(selection.item.price) * selection_quantity

    subtotal = base_price * base_quantity + variant_total

    tier = select_tier(resolve_tiers(product, base_price, config), total_quantity)
    combo_discount = _clamped_discount(tier, total_quantity, subtotal)
    if tier is not None:
        logger.debug(
            "Applied %s tier min_quantity=%d discount=%.2f at quantity %d",
            tier.source, tier.min_quantity, combo_discount, total_quantity,
        )

    return PriceBreakdown(
        base_price=base_price,
        variant_total=variant_total,
        subtotal=subtotal,
        combo_discount=combo_discount,
        final_total=max(0.0, subtotal - combo_discount),
        total_quantity=total_quantity,
        applied_combo_tier=tier,
        savings=combo_discount if combo_discount > 0 else 0.0,
    )


def calculate_combo_pricing(
    quantity: Any,
    unit_price: Any,
    combo_pricing: Sequence[Any] | None = None,
    original_total: Any = None,
) -> PricingResult:
    """Combo discount for ``quantity`` units at ``unit_price``.

    ``original_total`` replaces ``unit_price * quantity`` when the caller
    already knows a surcharge-inclusive subtotal.
    """
    quantity = to_quantity(quantity)
    unit_price = to_non_negative(unit_price)
    if original_total is None:
        total = unit_price * quantity
    else:
        total = to_non_negative(original_total)

    tiers = merge_tiers(combo_pricing, None, unit_price)
    tier = select_tier(tiers, quantity)
    discount = _clamped_discount(tier, quantity, total)
    return PricingResult(
        applied_tier=tier,
        discount_amount=discount,
        final_price=max(0.0, total - discount),
        savings=discount,
        unit_price=unit_price,
        original_total=total,
    )


def price_savings(regular: Any, discounted: Any) -> tuple[float, int]:
    """Savings amount and whole percentage of a discounted price.

    Both are 0 unless ``0 < discounted < regular``.
    """
    regular = to_non_negative(regular)
    discounted = to_non_negative(discounted)
    if not (0 < discounted < regular):
        return 0.0, 0
    savings = regular - discounted
    return savings, math.floor(savings / regular * 100 + 0.5)
