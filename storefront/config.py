"""Storefront configuration.

Builds the StorefrontConfig once at import, applying STOREFRONT_* overrides
from the environment.
"""

from pricing.config import StorefrontConfig

# Process-wide configuration instance
config = StorefrontConfig.from_env()
