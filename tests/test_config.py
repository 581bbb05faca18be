"""Test storefront configuration, coupons and numeric coercion."""
import dataclasses
from types import MappingProxyType

import pytest

from pricing.coercion import to_non_negative, to_number, to_quantity
from pricing.config import CouponConfig, StorefrontConfig
from storefront.coupons import CouponBook
from storefront.errors import InvalidCouponError


def test_default_config():
    config = StorefrontConfig.default()
    assert config.pricing.base_variant_group == "Quantity"
    assert config.pricing.base_variant_seed_quantity == 1
    assert config.pricing.bundle_price_ratio == 1.5
    assert config.delivery.inside_dhaka_charge == 80
    assert config.delivery.outside_dhaka_charge == 150
    assert config.coupons.codes["BestBuy"] == 50


def test_config_is_frozen():
    config = StorefrontConfig.default()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.pricing.bundle_price_ratio = 2.0


def test_from_env(monkeypatch):
    monkeypatch.setenv("STOREFRONT_BASE_VARIANT_SEED_QUANTITY", "0")
    monkeypatch.setenv("STOREFRONT_BUNDLE_PRICE_RATIO", "2")
    monkeypatch.setenv("STOREFRONT_INSIDE_DHAKA_CHARGE", "60")
    monkeypatch.delenv("STOREFRONT_OUTSIDE_DHAKA_CHARGE", raising=False)
    config = StorefrontConfig.from_env()
    assert config.pricing.base_variant_seed_quantity == 0
    assert config.pricing.bundle_price_ratio == 2.0
    assert config.delivery.inside_dhaka_charge == 60.0
    assert config.delivery.outside_dhaka_charge == 150.0


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------

def test_coupon_lookup():
    coupon = CouponBook().lookup("  FreeShippingDhaka ")
    assert coupon.code == "FreeShippingDhaka"
    assert coupon.discount == 80
    assert coupon.is_applied


def test_coupon_codes_are_case_sensitive():
    book = CouponBook()
    assert not book.is_valid("bestbuy")
    with pytest.raises(InvalidCouponError) as exc:
        book.lookup("bestbuy")
    assert exc.value.status_code == 400
    assert exc.value.details == {"code": "bestbuy"}


def test_empty_coupon_is_invalid():
    with pytest.raises(InvalidCouponError):
        CouponBook().lookup("")


def test_custom_coupon_table():
    book = CouponBook(CouponConfig(codes=MappingProxyType({"EID10": 10.0})))
    assert book.lookup("EID10").discount == 10
    assert not book.is_valid("BestBuy")


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------

@pytest.mark.parametrize("raw,expected", [
    (5, 5.0),
    ("12.5", 12.5),
    (" 3 ", 3.0),
    ("abc", 0.0),
    (None, 0.0),
    (True, 0.0),
    (float("nan"), 0.0),
    (float("inf"), 0.0),
])
def test_to_number(raw, expected):
    assert to_number(raw) == expected


def test_to_non_negative_and_quantity():
    assert to_non_negative(-3) == 0
    assert to_quantity(2.9) == 2
    assert to_quantity(-1) == 0
    assert to_quantity("4") == 4
