"""Checkout-layer errors.

The pricing core never raises; these belong to the checkout assembly on top
of it and carry enough to become a JSON error response.
"""

from typing import Any, Optional


class CheckoutError(Exception):
    """Base for user-visible checkout rejections."""

    status_code: int = 400

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidCouponError(CheckoutError):
    def __init__(self, code: str):
        self.code = code
        super().__init__("Invalid coupon code.", details={"code": code})


class EmptyOrderError(CheckoutError):
    """Raised when an order payload would contain nothing to buy."""

    def __init__(self, reason: str):
        super().__init__(reason, details={"reason": reason})
