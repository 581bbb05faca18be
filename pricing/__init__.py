"""
Storefront pricing core.

Two cooperating pieces, consumed by every display template and by checkout:
- VariantSelectionState: which variant options are selected, at what quantity
- calculate_price_breakdown: subtotal, surcharges, combo discount, final total
"""
from pricing.config import (
    CouponConfig,
    DeliveryConfig,
    PricingConfig,
    StorefrontConfig,
)
from pricing.engine import (
    PriceBreakdown,
    PricingResult,
    calculate_combo_pricing,
    calculate_price_breakdown,
    price_savings,
    resolve_base_price,
    resolve_tiers,
)
from pricing.tiers import (
    BulkPricingTier,
    ComboPricingTier,
    DiscountType,
    TierProgress,
    TierStatus,
    merge_tiers,
    normalize_bulk_tier,
    select_tier,
    tier_progress,
)
from pricing.variants import (
    VariantGroup,
    VariantOption,
    VariantSelection,
    VariantSelectionState,
    resolve_total_quantity,
)

__all__ = [
    # Config
    "CouponConfig",
    "DeliveryConfig",
    "PricingConfig",
    "StorefrontConfig",
    # Engine
    "PriceBreakdown",
    "PricingResult",
    "calculate_combo_pricing",
    "calculate_price_breakdown",
    "price_savings",
    "resolve_base_price",
    "resolve_tiers",
    # Tiers
    "BulkPricingTier",
    "ComboPricingTier",
    "DiscountType",
    "TierProgress",
    "TierStatus",
    "merge_tiers",
    "normalize_bulk_tier",
    "select_tier",
    "tier_progress",
    # Variants
    "VariantGroup",
    "VariantOption",
    "VariantSelection",
    "VariantSelectionState",
    "resolve_total_quantity",
]
