"""Dataclass-based storefront configuration.

Pricing knobs, delivery defaults and the coupon table are frozen
dataclasses. Defaults match the live storefront; deployments override a
handful of values from the environment.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Mapping


# ---------------------------------------------------------------------------
# Nested config sections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PricingConfig:
    """Variant store and engine settings."""

    base_variant_group: str = "Quantity"
    base_variant_value: str = "unit"
    base_variant_seed_quantity: int = 1  # 0 or 1
    bundle_price_ratio: float = 1.5  # bulk price >= ratio * unit => bundle total


@dataclass(frozen=True)
class DeliveryConfig:
    """Fallback courier charges when the product does not set its own."""

    inside_dhaka_charge: float = 80.0
    outside_dhaka_charge: float = 150.0
    inside_dhaka_key: str = "insideDhaka"


_DEFAULT_COUPONS = {
    "FreeShippingDhaka": 80.0,
    "FreeShippingBD": 150.0,
    "BestBuy": 50.0,
}


@dataclass(frozen=True)
class CouponConfig:
    """Fixed code -> flat discount table."""

    codes: Mapping[str, float] = field(
        default_factory=lambda: MappingProxyType(dict(_DEFAULT_COUPONS))
    )


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StorefrontConfig:
    """Complete storefront configuration.

    Usage::

        config = StorefrontConfig.default()
        state = VariantSelectionState(config=config.pricing)
    """

    pricing: PricingConfig = field(default_factory=PricingConfig)
    delivery: DeliveryConfig = field(default_factory=DeliveryConfig)
    coupons: CouponConfig = field(default_factory=CouponConfig)

    @classmethod
    def default(cls) -> "StorefrontConfig":
        """Create config with all defaults."""
        return cls()

    @classmethod
    def from_env(cls, prefix: str = "STOREFRONT_") -> "StorefrontConfig":
        """Create config from environment variables.

        Example: STOREFRONT_BASE_VARIANT_SEED_QUANTITY=0
        """
        import os

        pricing = PricingConfig()
        seed = os.getenv(f"{prefix}BASE_VARIANT_SEED_QUANTITY")
        if seed:
            pricing = replace(pricing, base_variant_seed_quantity=int(seed))
        ratio = os.getenv(f"{prefix}BUNDLE_PRICE_RATIO")
        if ratio:
            pricing = replace(pricing, bundle_price_ratio=float(ratio))

        delivery = DeliveryConfig()
        inside = os.getenv(f"{prefix}INSIDE_DHAKA_CHARGE")
        if inside:
            delivery = replace(delivery, inside_dhaka_charge=float(inside))
        outside = os.getenv(f"{prefix}OUTSIDE_DHAKA_CHARGE")
        if outside:
            delivery = replace(delivery, outside_dhaka_charge=float(outside))

        return cls(pricing=pricing, delivery=delivery)
