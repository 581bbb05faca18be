"""Checkout assembly.

Folds delivery charge and coupon discount on top of the engine's
``PriceBreakdown`` and builds the body for the remote order-creation
endpoint. Submitting it is the caller's job.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from pricing.coercion import to_non_negative
from pricing.config import DeliveryConfig, StorefrontConfig
from pricing.engine import (
    PriceBreakdown,
    calculate_price_breakdown,
    resolve_base_price,
    resolve_tiers,
)
from pricing.tiers import ComboPricingTier
from pricing.variants import VariantSelection, VariantSelectionState
from storefront.coupons import NO_COUPON, AppliedCoupon, CouponBook
from storefront.errors import EmptyOrderError, InvalidCouponError

logger = logging.getLogger(__name__)

DEFAULT_EMAIL = "no-email@example.com"
DEFAULT_COUNTRY = "Bangladesh"


# ---------------------------------------------------------------------------
# Order totals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrderTotals:
    """Engine total plus delivery, minus coupon. ``total_amount`` >= 0."""

    product_total: float
    delivery_charge: float
    coupon_discount: float
    total_amount: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "productTotal": self.product_total,
            "deliveryCharge": self.delivery_charge,
            "couponDiscount": self.coupon_discount,
            "totalAmount": self.total_amount,
        }


def resolve_delivery_charge(
    product: Mapping[str, Any] | None,
    courier_charge: Optional[str],
    config: DeliveryConfig | None = None,
) -> float:
    """Courier charge for ``product``; 0 when it ships free.

    ``"insideDhaka"`` selects the inside charge, anything else (including
    no choice yet) the outside charge. Per-product charges win over the
    configured defaults.
    """
    config = config or DeliveryConfig()
    if not isinstance(product, Mapping):
        product = {}
    additional = product.get("additionalInfo") or {}
    if isinstance(additional, Mapping) and additional.get("freeShipping"):
        return 0.0

    basic = product.get("basicInfo") or {}
    if not isinstance(basic, Mapping):
        basic = {}
    if courier_charge == config.inside_dhaka_key:
        charge = basic.get("deliveryChargeInsideDhaka")
        fallback = config.inside_dhaka_charge
    else:
        charge = basic.get("deliveryChargeOutsideDhaka")
        fallback = config.outside_dhaka_charge
    return fallback if charge is None else to_non_negative(charge)


def calculate_order_total(
    breakdown: PriceBreakdown,
    delivery_charge: Any = 0,
    coupon_discount: Any = 0,
) -> OrderTotals:
    """``max(0, final_total + delivery - coupon)``."""
    delivery = to_non_negative(delivery_charge)
    discount = to_non_negative(coupon_discount)
    return OrderTotals(
        product_total=breakdown.final_total,
        delivery_charge=delivery,
        coupon_discount=discount,
        total_amount=max(0.0, breakdown.final_total + delivery - discount),
    )


def to_order_variants(selections: Sequence[VariantSelection]) -> dict[str, list[dict[str, Any]]]:
    """Group active selections as ``{group: [{value, price, quantity}]}``."""
    grouped: dict[str, list[dict[str, Any]]] = {}
    for selection in selections:
        if not selection.is_active:
            continue
        grouped.setdefault(selection.group, []).append({
            "value": selection.item.value,
            "price": selection.item.price,
            "quantity": selection.quantity,
        })
    return grouped


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

@dataclass
class CheckoutSession:
    """One shopper's checkout for one product.

    Owns the variant selection state and the applied coupon. Loading a
    different product resets both.

    Usage::

        session = CheckoutSession()
        session.load_product(product)
        session.state.set_quantity(3)
        session.apply_coupon("BestBuy")
        body = session.build_order_payload(billing, courier_charge="insideDhaka")
    """

    config: StorefrontConfig = field(default_factory=StorefrontConfig.default)
    product: Optional[dict[str, Any]] = None
    coupon: AppliedCoupon = NO_COUPON
    state: VariantSelectionState = field(init=False)

    def __post_init__(self):
        self.state = VariantSelectionState(config=self.config.pricing)
        self._coupons = CouponBook(self.config.coupons)
        if self.product is not None:
            self.load_product(self.product)

    # -- Product --

    def load_product(self, product: Mapping[str, Any]) -> None:
        self.product = dict(product)
        self.state.init_variants(self.product.get("variants"), self.product)
        self.coupon = NO_COUPON

    # -- Coupon --

    def apply_coupon(self, code: str) -> AppliedCoupon:
        """Apply ``code``; an invalid code clears any previous coupon."""
        try:
            self.coupon = self._coupons.lookup(code)
        except InvalidCouponError:
            self.coupon = NO_COUPON
            raise
        return self.coupon

    def clear_coupon(self) -> None:
        self.coupon = NO_COUPON

    # -- Totals --

    def breakdown(self) -> PriceBreakdown:
        return calculate_price_breakdown(
            self.product, self.state.selections, config=self.config.pricing
        )

    def pricing_tiers(self) -> list[ComboPricingTier]:
        """Merged combo and bulk tiers of the loaded product."""
        return resolve_tiers(
            self.product, resolve_base_price(self.product), self.config.pricing
        )

    def delivery_charge(self, courier_charge: Optional[str]) -> float:
        return resolve_delivery_charge(self.product, courier_charge, self.config.delivery)

    def totals(self, courier_charge: Optional[str] = None) -> OrderTotals:
        return calculate_order_total(
            self.breakdown(),
            self.delivery_charge(courier_charge),
            self.coupon.discount,
        )

    def current_image(self) -> Optional[dict[str, Any]]:
        """Image of the latest active selection that has one, else the first product image."""
        for selection in reversed(self.state.active_selections):
            image = selection.item.image
            if image and image.get("url"):
                return image
        images = (self.product or {}).get("images") or []
        return images[0] if images else None

    # -- Order payload --

    def build_order_payload(
        self,
        billing: Mapping[str, Any],
        courier_charge: Optional[str] = None,
        item_key: Optional[str] = None,
    ) -> dict[str, Any]:
        """Body for the remote order-creation endpoint.

        ``items[0].price`` is the base unit price, not the discounted line
        total; the backend re-derives line totals from it.
        """
        if not self.product:
            raise EmptyOrderError("No product loaded")
        breakdown = self.breakdown()
        if breakdown.total_quantity == 0:
            raise EmptyOrderError("Quantity must be at least 1")

        product_id = str(self.product.get("_id") or "")
        totals = calculate_order_total(
            breakdown, self.delivery_charge(courier_charge), self.coupon.discount
        )
        image = self.current_image()
        logger.info(
            "Built order payload for product %s: quantity=%d total=%.2f",
            product_id, breakdown.total_quantity, totals.total_amount,
        )
        return {
            "items": [
                {
                    "product": product_id,
                    "image": image.get("url") if image else None,
                    "quantity": breakdown.total_quantity,
                    "price": breakdown.base_price,
                    "itemKey": item_key or f"{product_id}-{int(time.time() * 1000)}",
                    "selectedVariants": to_order_variants(self.state.selections),
                },
            ],
            "totalAmount": totals.total_amount,
            "deliveryCharge": totals.delivery_charge,
            "status": "pending",
            "billingInformation": {
                "name": billing.get("name", ""),
                "phone": billing.get("phone", ""),
                "address": billing.get("address", ""),
                "email": billing.get("email") or DEFAULT_EMAIL,
                "country": DEFAULT_COUNTRY,
                "paymentMethod": billing.get("paymentMethod") or "cod",
                "notes": billing.get("notes") or "",
            },
            "courierCharge": courier_charge,
            "cuponCode": self.coupon.code,
            "discount": self.coupon.discount,
        }
