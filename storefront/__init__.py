"""Storefront checkout layer on top of the pricing core.

- Pydantic schemas for catalog products and API requests
- Coupon lookup and checkout-layer errors
- CheckoutSession: selections, coupon, delivery charge, order payload
- FastAPI router exposing quotes and order-payload assembly
"""
