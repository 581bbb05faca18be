"""Test the price calculation engine."""
import pytest

from pricing.engine import (
    calculate_combo_pricing,
    calculate_price_breakdown,
    price_savings,
    resolve_base_price,
)
from pricing.tiers import DiscountType
from pricing.variants import VariantSelectionState


def _product(regular=500, discounted=None, combo=None, bulk=None, variants=None):
    return {
        "_id": "p1",
        "price": {"regular": regular, "discounted": discounted},
        "variants": variants or [],
        "comboPricing": combo or [],
        "bulkPricing": bulk or [],
    }


def _state(product, quantity=1):
    state = VariantSelectionState()
    state.init_variants(product.get("variants"), product)
    state.set_quantity(quantity)
    return state


def test_single_unit_no_tiers():
    product = _product(regular=500)
    breakdown = calculate_price_breakdown(product, _state(product).selections)
    assert breakdown.base_price == 500
    assert breakdown.subtotal == 500
    assert breakdown.combo_discount == 0
    assert breakdown.final_total == 500
    assert breakdown.applied_combo_tier is None
    assert breakdown.savings == 0


def test_breakdown_is_deterministic():
    product = _product(combo=[{"minQuantity": 2, "discount": 50}])
    selections = _state(product, 3).selections
    first = calculate_price_breakdown(product, selections)
    second = calculate_price_breakdown(product, selections)
    assert first == second


def test_highest_qualifying_tier_wins():
    product = _product(combo=[
        {"minQuantity": 2, "discount": 50, "discountType": "total"},
        {"minQuantity": 4, "discount": 120, "discountType": "total"},
        {"minQuantity": 10, "discount": 400, "discountType": "total"},
    ])
    breakdown = calculate_price_breakdown(product, _state(product, 10).selections)
    assert breakdown.applied_combo_tier.min_quantity == 10
    assert breakdown.combo_discount == 400
    assert breakdown.final_total == breakdown.subtotal - 400


def test_zero_quantity_zeroes_totals():
    product = _product(combo=[{"minQuantity": 1, "discount": 50}])
    breakdown = calculate_price_breakdown(product, _state(product, 0).selections)
    assert breakdown.total_quantity == 0
    assert breakdown.subtotal == 0
    assert breakdown.combo_discount == 0
    assert breakdown.final_total == 0
    assert breakdown.applied_combo_tier is None


def test_per_product_discount_scales_with_quantity():
    product = _product(combo=[
        {"minQuantity": 3, "discount": 50, "discountType": "per_product"},
    ])
    breakdown = calculate_price_breakdown(product, _state(product, 5).selections)
    assert breakdown.applied_combo_tier.discount_type is DiscountType.PER_PRODUCT
    assert breakdown.combo_discount == 250
    assert breakdown.final_total == 2500 - 250


def test_variant_surcharge_is_additive():
    product = _product(variants=[
        {"group": "Color", "items": [{"value": "Red", "price": 75}]},
    ])
    state = _state(product, 2)
    state.add_variant("Color", {"value": "Red"})
    state.update_variant_quantity("Color", "Red", 2)
    breakdown = calculate_price_breakdown(product, state.selections)
    assert breakdown.variant_total == 150
    assert breakdown.subtotal == 1150
    assert breakdown.total_quantity == 2


def test_inactive_variant_adds_nothing():
    product = _product(variants=[
        {"group": "Color", "items": [{"value": "Red", "price": 75}]},
    ])
    state = _state(product, 1)
    state.toggle_variant("Color", {"value": "Red"})
    state.toggle_variant("Color", {"value": "Red"})
    breakdown = calculate_price_breakdown(product, state.selections)
    assert breakdown.variant_total == 0
    assert breakdown.subtotal == 500


def test_bulk_bundle_price_normalizes():
    product = _product(regular=400, bulk=[{"minQuantity": 3, "price": 900}])
    breakdown = calculate_price_breakdown(product, _state(product, 3).selections)
    assert breakdown.applied_combo_tier.source == "bulk"
    assert breakdown.applied_combo_tier.discount == 100
    assert breakdown.combo_discount == 300
    assert breakdown.final_total == 900


def test_discount_is_clamped_to_subtotal():
    product = _product(regular=100, combo=[{"minQuantity": 1, "discount": 10000}])
    breakdown = calculate_price_breakdown(product, _state(product, 1).selections)
    assert breakdown.combo_discount == 100
    assert breakdown.final_total == 0


def test_malformed_input_never_raises():
    product = {
        "price": {"regular": "abc", "discounted": float("nan")},
        "comboPricing": [None, "junk", {"minQuantity": "x", "discount": 5}],
        "bulkPricing": {"not": "a list"},
    }
    breakdown = calculate_price_breakdown(product, _state(product, 2).selections)
    assert breakdown.base_price == 0
    assert breakdown.final_total == 0
    assert breakdown.applied_combo_tier is None


def test_missing_product():
    breakdown = calculate_price_breakdown(None, [])
    assert breakdown.total_quantity == 0
    assert breakdown.final_total == 0


def test_discounted_price_preferred():
    assert resolve_base_price(_product(regular=600, discounted=500)) == 500
    assert resolve_base_price(_product(regular=600, discounted=0)) == 600
    # Used as-is even when above regular
    assert resolve_base_price(_product(regular=100, discounted=150)) == 150


def test_quantity_override():
    product = _product(combo=[{"minQuantity": 4, "discount": 100}])
    breakdown = calculate_price_breakdown(product, _state(product, 2).selections, quantity=4)
    assert breakdown.total_quantity == 4
    assert breakdown.combo_discount == 100


def test_quantity_override_without_base_variant_prices_surcharges_only():
    product = _product(regular=200)
    breakdown = calculate_price_breakdown(product, [], quantity=3)
    assert breakdown.total_quantity == 3
    assert breakdown.subtotal == 0
    assert breakdown.final_total == 0

    # A plain unit x quantity line goes through calculate_combo_pricing
    assert calculate_combo_pricing(3, 200).final_price == 600


def test_breakdown_to_dict():
    product = _product(combo=[{"minQuantity": 2, "discount": 50}])
    data = calculate_price_breakdown(product, _state(product, 2).selections).to_dict()
    assert data["finalTotal"] == 950
    assert data["appliedComboTier"] == {
        "minQuantity": 2, "discount": 50.0, "discountType": "total",
    }


# ---------------------------------------------------------------------------
# Single-line combo pricing
# ---------------------------------------------------------------------------

def test_combo_pricing_picks_tier():
    tiers = [{"minQuantity": 2, "discount": 50}, {"minQuantity": 4, "discount": 120}]
    result = calculate_combo_pricing(4, 100, tiers)
    assert result.applied_tier.min_quantity == 4
    assert result.original_total == 400
    assert result.discount_amount == 120
    assert result.final_price == 280
    assert result.savings == 120


def test_combo_pricing_original_total_override():
    tiers = [{"minQuantity": 2, "discount": 10, "discountType": "per_product"}]
    result = calculate_combo_pricing(2, 100, tiers, original_total=250)
    assert result.original_total == 250
    assert result.discount_amount == 20
    assert result.final_price == 230


def test_combo_pricing_without_tiers():
    result = calculate_combo_pricing(3, 100)
    assert result.applied_tier is None
    assert result.final_price == 300


# ---------------------------------------------------------------------------
# Display savings
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("regular,discounted,expected", [
    (1000, 750, (250, 25)),
    (600, 500, (100, 17)),
    (100, 150, (0.0, 0)),
    (100, None, (0.0, 0)),
    (0, 0, (0.0, 0)),
])
def test_price_savings(regular, discounted, expected):
    assert price_savings(regular, discounted) == expected
