"""Combo and bulk pricing tiers.

Two representations of "buy more, pay less" live in the catalog:

- ``comboPricing``: ``{minQuantity, discount, discountType}`` rules.
- ``bulkPricing`` (legacy): ``{minQuantity, price}`` rows where ``price`` is
  either a bundle total or a per-unit override.

Bulk rows are normalized into combo tiers and merged with the native ones.
Exactly one tier applies: the one with the highest ``min_quantity`` that the
quantity reaches.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping, Sequence

from pricing.coercion import to_non_negative, to_number, to_quantity


class DiscountType(str, Enum):
    TOTAL = "total"
    PER_PRODUCT = "per_product"

    @classmethod
    def parse(cls, raw: Any) -> "DiscountType":
        """Unknown or missing values mean a one-off total discount."""
        if isinstance(raw, cls):
            return raw
        try:
            return cls(raw)
        except ValueError:
            return cls.TOTAL


# ---------------------------------------------------------------------------
# Tier types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ComboPricingTier:
    """Volume-discount rule activated at ``min_quantity`` units."""

    min_quantity: int
    discount: float
    discount_type: DiscountType = DiscountType.TOTAL
    source: str = "combo"

    @classmethod
    def coerce(cls, raw: "ComboPricingTier | Mapping[str, Any] | None") -> "ComboPricingTier | None":
        """Build a tier from a catalog dict; None if the threshold is < 1."""
        if isinstance(raw, ComboPricingTier):
            return raw
        if not isinstance(raw, Mapping):
            return None
        min_quantity = to_quantity(raw.get("minQuantity"))
        if min_quantity < 1:
            return None
        return cls(
            min_quantity=min_quantity,
            discount=to_non_negative(raw.get("discount")),
            discount_type=DiscountType.parse(raw.get("discountType")),
        )

    def discount_for(self, quantity: int) -> float:
        """Raw (unclamped) discount this tier grants at ``quantity``."""
        if self.discount_type is DiscountType.PER_PRODUCT:
            return self.discount * quantity
        return self.discount

    def to_dict(self) -> dict[str, Any]:
        return {
            "minQuantity": self.min_quantity,
            "discount": self.discount,
            "discountType": self.discount_type.value,
        }


@dataclass(frozen=True)
class BulkPricingTier:
    """Legacy ``{minQuantity, price}`` row."""

    min_quantity: int
    price: float

    @classmethod
    def coerce(cls, raw: "BulkPricingTier | Mapping[str, Any] | None") -> "BulkPricingTier | None":
        if isinstance(raw, BulkPricingTier):
            return raw
        if not isinstance(raw, Mapping):
            return None
        min_quantity = to_quantity(raw.get("minQuantity"))
        if min_quantity < 1:
            return None
        return cls(min_quantity=min_quantity, price=to_number(raw.get("price")))


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

def normalize_bulk_tier(
    tier: BulkPricingTier,
    base_price: float,
    bundle_price_ratio: float = 1.5,
) -> ComboPricingTier | None:
    """Convert a bulk row into an equivalent ``per_product`` combo tier.

    A ``price`` of at least ``bundle_price_ratio * base_price`` is the total
    for the whole bundle, so the per-unit discount is
    ``base_price - price / min_quantity``. A smaller ``price`` is a per-unit
    override with discount ``base_price - price``. Rows that would not lower
    the price are dropped.
    """
    if tier.price >= bundle_price_ratio * base_price:
        per_unit_discount = base_price - tier.price / tier.min_quantity
    else:
        per_unit_discount = base_price - tier.price

    if per_unit_discount <= 0:
        return None
    return ComboPricingTier(
        min_quantity=tier.min_quantity,
        discount=per_unit_discount,
        discount_type=DiscountType.PER_PRODUCT,
        source="bulk",
    )


def merge_tiers(
    combo_pricing: Iterable[Any] | None,
    bulk_pricing: Iterable[Any] | None,
    base_price: float,
    bundle_price_ratio: float = 1.5,
) -> list[ComboPricingTier]:
    """Native combo tiers followed by normalized bulk tiers.

    Malformed entries are skipped. Order matters only for equal thresholds,
    where the earlier tier wins (see ``select_tier``).
    """
    tiers = [
        tier
        for tier in (ComboPricingTier.coerce(raw) for raw in combo_pricing or [])
        if tier is not None
    ]
    for raw in bulk_pricing or []:
        bulk = BulkPricingTier.coerce(raw)
        if bulk is None:
            continue
        normalized = normalize_bulk_tier(bulk, base_price, bundle_price_ratio)
        if normalized is not None:
            tiers.append(normalized)
    return tiers


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def select_tier(tiers: Sequence[ComboPricingTier], quantity: int) -> ComboPricingTier | None:
    """Highest-threshold tier that ``quantity`` qualifies for.

    Tiers are sorted by ``min_quantity`` descending (stable, so ties keep
    input order) and the first with ``min_quantity <= quantity`` wins.
    Quantities below 1 never qualify.
    """
    if quantity < 1:
        return None
    for tier in sorted(tiers, key=lambda t: t.min_quantity, reverse=True):
        if tier.min_quantity <= quantity:
            return tier
    return None


@dataclass
class TierStatus:
    """Display state of one tier at the current quantity."""

    tier: ComboPricingTier
    met: bool
    applied: bool


@dataclass
class TierProgress:
    """All tiers with their status, plus the next one to unlock."""

    tiers: list[TierStatus] = field(default_factory=list)
    applied_tier: ComboPricingTier | None = None
    next_tier: ComboPricingTier | None = None
    units_to_next_tier: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tiers": [
                {**s.tier.to_dict(), "met": s.met, "applied": s.applied}
                for s in self.tiers
            ],
            "appliedTier": self.applied_tier.to_dict() if self.applied_tier else None,
            "nextTier": self.next_tier.to_dict() if self.next_tier else None,
            "unitsToNextTier": self.units_to_next_tier,
        }


def tier_progress(tiers: Sequence[ComboPricingTier], quantity: int) -> TierProgress:
    """Ascending tier list with met/applied flags and the next unmet tier."""
    applied = select_tier(tiers, quantity)
    ordered = sorted(tiers, key=lambda t: t.min_quantity)
    progress = TierProgress(
        tiers=[
            TierStatus(tier=t, met=t.min_quantity <= quantity, applied=t is applied)
            for t in ordered
        ],
        applied_tier=applied,
    )
    for tier in ordered:
        if tier.min_quantity > quantity:
            progress.next_tier = tier
            progress.units_to_next_tier = tier.min_quantity - max(0, quantity)
            break
    return progress
