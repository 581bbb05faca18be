"""Pydantic schemas for API request/response validation.

Catalog payloads use the backend's camelCase names; fields are snake_case
with camelCase aliases. Numeric catalog fields are lenient: anything that
is not a finite number becomes 0 rather than a validation error, negative
stock clamps to 0, and variant items or groups without a name are dropped.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from pricing.coercion import to_non_negative, to_number, to_quantity
from pricing.tiers import DiscountType


def _optional_quantity(value: Any) -> Optional[int]:
    return None if value is None else to_quantity(value)


def _optional_amount(value: Any) -> Optional[float]:
    return None if value is None else to_non_negative(value)


def _has_text(raw: Any, key: str) -> bool:
    """False for catalog entries whose ``key`` is missing or blank."""
    if not isinstance(raw, dict):
        return True
    value = raw.get(key)
    return value is not None and str(value) != ""


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_catalog_dict(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


# ---------------------------------------------------------------------------
# Product configuration (catalog shape)
# ---------------------------------------------------------------------------

class ImageRef(CamelModel):
    url: Optional[str] = None
    alt: Optional[str] = None


class VariantItem(CamelModel):
    value: str
    price: float = 0.0
    stock: Optional[int] = None
    image: Optional[ImageRef] = None

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @field_validator("stock", mode="before")
    @classmethod
    def coerce_stock(cls, value: Any) -> Optional[int]:
        return _optional_quantity(value)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, value: Any) -> float:
        return to_number(value)


class VariantGroupSchema(CamelModel):
    group: str = Field(..., min_length=1)
    items: list[VariantItem] = Field(default_factory=list)

    @field_validator("items", mode="before")
    @classmethod
    def drop_blank_items(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [item for item in value if _has_text(item, "value")]


class ComboPricingTierSchema(CamelModel):
    min_quantity: int = Field(0, alias="minQuantity")
    discount: float = 0.0
    discount_type: DiscountType = Field(DiscountType.TOTAL, alias="discountType")

    @field_validator("min_quantity", mode="before")
    @classmethod
    def coerce_min_quantity(cls, value: Any) -> int:
        return to_quantity(value)

    @field_validator("discount", mode="before")
    @classmethod
    def coerce_discount(cls, value: Any) -> float:
        return to_number(value)

    @field_validator("discount_type", mode="before")
    @classmethod
    def parse_discount_type(cls, value: Any) -> DiscountType:
        return DiscountType.parse(value)


class BulkPricingTierSchema(CamelModel):
    min_quantity: int = Field(0, alias="minQuantity")
    price: float = 0.0

    @field_validator("min_quantity", mode="before")
    @classmethod
    def coerce_min_quantity(cls, value: Any) -> int:
        return to_quantity(value)

    @field_validator("price", mode="before")
    @classmethod
    def coerce_price(cls, value: Any) -> float:
        return to_number(value)


class ProductPrice(CamelModel):
    regular: float = 0.0
    discounted: Optional[float] = None

    @field_validator("regular", mode="before")
    @classmethod
    def coerce_regular(cls, value: Any) -> float:
        return to_number(value)

    @field_validator("discounted", mode="before")
    @classmethod
    def coerce_discounted(cls, value: Any) -> Optional[float]:
        return None if value is None else to_number(value)


class ProductBasicInfo(CamelModel):
    title: Optional[str] = None
    category: Optional[str] = None
    delivery_charge_inside_dhaka: Optional[float] = Field(None, alias="deliveryChargeInsideDhaka")
    delivery_charge_outside_dhaka: Optional[float] = Field(None, alias="deliveryChargeOutsideDhaka")

    @field_validator("delivery_charge_inside_dhaka", "delivery_charge_outside_dhaka", mode="before")
    @classmethod
    def coerce_delivery_charge(cls, value: Any) -> Optional[float]:
        return _optional_amount(value)


class ProductAdditionalInfo(CamelModel):
    free_shipping: bool = Field(False, alias="freeShipping")


class ProductConfig(CamelModel):
    id: Optional[str] = Field(None, alias="_id")
    basic_info: ProductBasicInfo = Field(default_factory=ProductBasicInfo, alias="basicInfo")
    price: ProductPrice = Field(default_factory=ProductPrice)
    stock_quantity: Optional[int] = Field(None, alias="stockQuantity")
    images: list[ImageRef] = Field(default_factory=list)
    variants: list[VariantGroupSchema] = Field(default_factory=list)
    combo_pricing: list[ComboPricingTierSchema] = Field(default_factory=list, alias="comboPricing")
    bulk_pricing: list[BulkPricingTierSchema] = Field(default_factory=list, alias="bulkPricing")
    additional_info: ProductAdditionalInfo = Field(
        default_factory=ProductAdditionalInfo, alias="additionalInfo"
    )

    @field_validator("stock_quantity", mode="before")
    @classmethod
    def coerce_stock_quantity(cls, value: Any) -> Optional[int]:
        return _optional_quantity(value)

    @field_validator("variants", mode="before")
    @classmethod
    def drop_blank_groups(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [group for group in value if _has_text(group, "group")]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------

class SelectionRequest(CamelModel):
    """A non-base variant pick. Prices come from the product, not the client."""

    group: str = Field(..., min_length=1)
    value: str = Field(..., min_length=1)
    quantity: int = 1

    @field_validator("value", mode="before")
    @classmethod
    def coerce_value(cls, value: Any) -> Any:
        return value if value is None else str(value)


class QuoteRequest(CamelModel):
    product: ProductConfig
    selections: list[SelectionRequest] = Field(default_factory=list)
    quantity: Optional[int] = None


class ComboPricingRequest(CamelModel):
    """Negative or malformed numbers clamp to 0 rather than failing."""

    quantity: int
    unit_price: float = Field(..., alias="unitPrice")
    combo_pricing: list[ComboPricingTierSchema] = Field(default_factory=list, alias="comboPricing")
    original_total: Optional[float] = Field(None, alias="originalTotal")

    @field_validator("quantity", mode="before")
    @classmethod
    def coerce_quantity(cls, value: Any) -> int:
        return to_quantity(value)

    @field_validator("unit_price", mode="before")
    @classmethod
    def coerce_unit_price(cls, value: Any) -> float:
        return to_non_negative(value)

    @field_validator("original_total", mode="before")
    @classmethod
    def coerce_original_total(cls, value: Any) -> Optional[float]:
        return _optional_amount(value)


class CouponRequest(CamelModel):
    code: str


class BillingInformation(CamelModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    email: Optional[str] = None
    payment_method: str = Field("cod", alias="paymentMethod")
    notes: Optional[str] = None


class OrderPayloadRequest(QuoteRequest):
    courier_charge: Optional[str] = Field(None, alias="courierCharge")
    coupon_code: Optional[str] = Field(None, alias="couponCode")
    billing_information: BillingInformation = Field(..., alias="billingInformation")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------

class CouponResponse(CamelModel):
    code: str
    discount: float


class ErrorResponseModel(BaseModel):
    error: str
    details: dict = Field(default_factory=dict)
