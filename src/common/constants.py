"""
Shared constants for the project.

This module contains application-wide constants that should have a single source of truth.
"""

# Supplier prices are quoted in USD; storefront prices are in NOK.
# Fixed planning rate used for both directions (see config/pricing.yaml).
USD_TO_NOK_RATE = 10.5

# Substituted when no positive supplier price can be discovered (USD)
DEFAULT_PRICE_USD = 9.99

# Realistic desktop browsers, rotated per request when enabled
USER_AGENTS = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/129.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/128.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/127.0.0.0 Safari/537.36",
)

# Substrings that mark an image URL as a placeholder, icon or tracking pixel
IMAGE_BLACKLIST = (
    "placeholder",
    "placehold.co",
    "data:image",
    ".svg",
    "sprite",
    "/icon",
    "logo",
    "blank.gif",
)
