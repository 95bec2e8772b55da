"""
Configuration Loader

Loads YAML configuration files for color keyword rules, price
normalization policy and extraction defaults.
"""

import os
import re
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import yaml

from .constants import DEFAULT_PRICE_USD, USD_TO_NOK_RATE

# Locales scanned for color keywords, in priority order
DEFAULT_COLOR_LOCALES = ("no", "en")


@dataclass(frozen=True)
class ColorRule:
    """One keyword -> canonical color mapping."""
    keyword: str
    canonical: str
    locale: str
    regex: "re.Pattern[str]"

    def matches(self, text: str) -> bool:
        return bool(self.regex.search(text))


@dataclass(frozen=True)
class PricingPolicy:
    """Conversion rates and multipliers for storefront prices."""
    target_currency: str = "NOK"
    rates: Tuple[Tuple[str, float], ...] = (("USD", USD_TO_NOK_RATE), ("NOK", 1.0))
    default_rate: float = USD_TO_NOK_RATE
    margin_multiplier: float = 2.0
    compare_multiplier: float = 1.3

    def has_rate(self, currency: str) -> bool:
        return any(code == (currency or "").upper() for code, _ in self.rates)

    def rate_for(self, currency: str) -> float:
        for code, rate in self.rates:
            if code == (currency or "").upper():
                return rate
        return self.default_rate


def _get_config_dir() -> Path:
    """Get the config directory path."""
    # Try relative to this file first
    module_dir = Path(__file__).parent.parent.parent
    config_dir = module_dir / 'config'

    if config_dir.exists():
        return config_dir

    # Try current working directory
    cwd_config = Path.cwd() / 'config'
    if cwd_config.exists():
        return cwd_config

    raise FileNotFoundError(
        f"Config directory not found. Tried: {config_dir}, {cwd_config}"
    )


def load_config(filename: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filename: Name of the config file (e.g., 'pricing.yaml')

    Returns:
        Parsed YAML content as dictionary (empty dict for an empty file)

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    config_path = _get_config_dir() / filename

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def build_color_rules(locales: Dict[str, list], order: Iterable[str] = DEFAULT_COLOR_LOCALES) -> Tuple[ColorRule, ...]:
    """
    Compile raw locale rule lists into ColorRule objects.

    Args:
        locales: Mapping of locale -> list of {pattern, canonical} dicts
        order: Locales to include, in evaluation order

    Returns:
        Tuple of compiled rules (whole-word, case-insensitive)

    Example:
        build_color_rules({'en': [{'pattern': 'black', 'canonical': 'Svart'}]}, ['en'])
    """
    rules = []
    for locale in order:
        for entry in locales.get(locale) or []:
            keyword = str(entry.get("pattern", "")).strip().lower()
            canonical = str(entry.get("canonical", "")).strip()
            if not keyword or not canonical:
                continue
            regex = re.compile(rf"(?<!\w){re.escape(keyword)}(?!\w)", re.IGNORECASE)
            rules.append(ColorRule(keyword=keyword, canonical=canonical, locale=locale, regex=regex))
    return tuple(rules)


@lru_cache(maxsize=None)
def load_color_rules(locales: Tuple[str, ...] = DEFAULT_COLOR_LOCALES) -> Tuple[ColorRule, ...]:
    """
    Load color keyword rules from color_keywords.yaml (read once).

    Returns:
        Ordered tuple of ColorRule, Norwegian first, then English
    """
    config = load_config('color_keywords.yaml')
    return build_color_rules(config.get('locales', {}), locales)


@lru_cache(maxsize=None)
def load_pricing_policy() -> PricingPolicy:
    """
    Load the price normalization policy from pricing.yaml.

    Missing keys fall back to the PricingPolicy defaults.
    """
    config = load_config('pricing.yaml')
    defaults = PricingPolicy()
    rates = config.get('rates') or dict(defaults.rates)
    return PricingPolicy(
        target_currency=config.get('target_currency', defaults.target_currency),
        rates=tuple((str(code).upper(), float(rate)) for code, rate in rates.items()),
        default_rate=float(config.get('default_rate', defaults.default_rate)),
        margin_multiplier=float(config.get('margin_multiplier', defaults.margin_multiplier)),
        compare_multiplier=float(config.get('compare_multiplier', defaults.compare_multiplier)),
    )


def load_extraction_settings() -> Dict[str, Any]:
    """
    Load extraction defaults from extraction.yaml.

    Returns:
        Dictionary of settings; keys mirror ExtractionOptions fields plus
        bulk_delay_s for the bulk driver.
    """
    settings = load_config('extraction.yaml')
    settings.setdefault('default_price', DEFAULT_PRICE_USD)
    return settings


# Environment variables that override extraction.yaml in the CLI tools
ENV_OPTION_OVERRIDES = {
    "EXTRACTION_COLOR_OVERRIDE": ("single_variant_color_override", str),
    "EXTRACTION_MIN_DELAY_MS": ("min_delay_ms", int),
    "EXTRACTION_MAX_DELAY_MS": ("max_delay_ms", int),
}


def env_option_overrides(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """
    Read ExtractionOptions overrides from environment variables.

    Args:
        environ: Mapping to read (defaults to os.environ, after load_dotenv)

    Returns:
        Dictionary of option name -> converted value for the variables set

    Raises:
        ValueError: If a numeric variable is not an integer
    """
    environ = os.environ if environ is None else environ
    overrides = {}
    for variable, (option, convert) in ENV_OPTION_OVERRIDES.items():
        value = (environ.get(variable) or "").strip()
        if value:
            overrides[option] = convert(value)
    return overrides
