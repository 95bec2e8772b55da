# Common utilities
from .config_loader import (
    ColorRule,
    PricingPolicy,
    env_option_overrides,
    load_color_rules,
    load_config,
    load_extraction_settings,
    load_pricing_policy,
)
from .log_config import setup_logging
from .text_utils import (
    clean_text,
    decode_url_component,
    parse_price,
    parse_price_range,
    slug_to_title,
    strip_query,
)
