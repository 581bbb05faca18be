"""Storefront pricing API router.

Thin HTTP surface over the pricing core for display templates:
- Price quote for a product + selections
- Single-line combo pricing
- Coupon validation
- Order-payload assembly (built, not submitted)

Selections are resolved against the product's own variant catalog, so
client-supplied prices are never trusted.
"""

from fastapi import APIRouter

from pricing.engine import calculate_combo_pricing, price_savings
from pricing.tiers import tier_progress
from storefront.checkout import CheckoutSession
from storefront.config import config
from storefront.coupons import CouponBook
from storefront.models.schemas import (
    ComboPricingRequest,
    CouponRequest,
    CouponResponse,
    OrderPayloadRequest,
    QuoteRequest,
)

router = APIRouter()


def _open_session(request: QuoteRequest) -> CheckoutSession:
    """Load the product and replay the requested selections onto its state."""
    session = CheckoutSession(config=config)
    session.load_product(request.product.to_catalog_dict())
    if request.quantity is not None:
        session.state.set_quantity(request.quantity)
    for pick in request.selections:
        session.state.add_variant(pick.group, {"value": pick.value})
        session.state.update_variant_quantity(pick.group, pick.value, pick.quantity)
    return session


# ============================================================================
# Pricing Endpoints
# ============================================================================

@router.post("/quote")
async def quote(request: QuoteRequest):
    """Price breakdown for a product and its selected variants."""
    session = _open_session(request)
    breakdown = session.breakdown()
    progress = tier_progress(
        session.pricing_tiers(), breakdown.total_quantity
    )
    savings, savings_percent = price_savings(
        request.product.price.regular, request.product.price.discounted
    )
    return {
        **breakdown.to_dict(),
        "selectedVariants": [s.to_dict() for s in session.state.active_selections],
        "tierProgress": progress.to_dict(),
        "unitSavings": savings,
        "unitSavingsPercent": savings_percent,
    }


@router.post("/combo-pricing")
async def combo_pricing(request: ComboPricingRequest):
    """Combo discount for a plain quantity x unit price line."""
    result = calculate_combo_pricing(
        request.quantity,
        request.unit_price,
        [tier.to_catalog_dict() for tier in request.combo_pricing],
        request.original_total,
    )
    return result.to_dict()


# ============================================================================
# Checkout Endpoints
# ============================================================================

@router.post("/coupons/validate", response_model=CouponResponse)
async def validate_coupon(request: CouponRequest):
    """Look up a coupon code. Unknown codes are rejected with 400."""
    coupon = CouponBook(config.coupons).lookup(request.code)
    return CouponResponse(code=coupon.code, discount=coupon.discount)


@router.post("/order-payload")
async def order_payload(request: OrderPayloadRequest):
    """Assemble the order-creation body with delivery and coupon applied."""
    session = _open_session(request)
    if request.coupon_code:
        session.apply_coupon(request.coupon_code)
    totals = session.totals(request.courier_charge)
    payload = session.build_order_payload(
        request.billing_information.to_catalog_dict(),
        courier_charge=request.courier_charge,
    )
    return {"order": payload, "totals": totals.to_dict()}
