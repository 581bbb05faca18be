"""Coupon lookup.

Coupons are a fixed in-memory table of code -> flat discount. Codes are
case-sensitive. The discount is subtracted at order-total assembly, after
the combo discount, never inside the pricing engine.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from pricing.config import CouponConfig
from storefront.errors import InvalidCouponError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AppliedCoupon:
    code: str = ""
    discount: float = 0.0

    @property
    def is_applied(self) -> bool:
        return bool(self.code)

    def to_dict(self) -> dict:
        return {"code": self.code, "discount": self.discount}


NO_COUPON = AppliedCoupon()


class CouponBook:
    """Validates codes against the configured table.

    Usage::

        book = CouponBook()
        coupon = book.lookup("BestBuy")   # AppliedCoupon(code="BestBuy", discount=50.0)
        book.lookup("nope")               # raises InvalidCouponError
    """

    def __init__(self, config: Optional[CouponConfig] = None):
        self._codes = dict((config or CouponConfig()).codes)

    def is_valid(self, code: str) -> bool:
        return bool(code) and self._codes.get(code, 0) > 0

    def lookup(self, code: str) -> AppliedCoupon:
        """Return the coupon for ``code`` or raise InvalidCouponError."""
        code = (code or "").strip()
        if not self.is_valid(code):
            logger.info("Rejected coupon code %r", code)
            raise InvalidCouponError(code)
        return AppliedCoupon(code=code, discount=float(self._codes[code]))
