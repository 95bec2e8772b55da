"""
Text Utilities

Helper functions for URL decoding, slug titles and price text parsing.
"""

import re
from typing import List, Optional
from urllib.parse import unquote, urlsplit, urlunsplit

# Literal percent-encodings of Norwegian letters that survive a failed decode
_NORWEGIAN_ESCAPES = {
    '%C3%A5': 'å',
    '%C3%A6': 'æ',
    '%C3%B8': 'ø',
    '%C3%85': 'Å',
    '%C3%86': 'Æ',
    '%C3%98': 'Ø',
    '%20': ' ',
}


def decode_url_component(text: str) -> str:
    """
    Percent-decode a URL component, tolerating double encoding.

    Locale characters left encoded (e.g. '%C3%B8') are fixed up and '+' is
    treated as a space.
    """
    if not text:
        return text

    decoded = unquote(text)
    if '%' in decoded:
        decoded = unquote(decoded)

    for escape, char in _NORWEGIAN_ESCAPES.items():
        decoded = re.sub(re.escape(escape), char, decoded, flags=re.IGNORECASE)

    return decoded.replace('+', ' ')


def clean_text(text: Optional[str]) -> str:
    """Collapse whitespace and strip."""
    if not text:
        return ""
    return ' '.join(str(text).split()).strip()


def slug_to_title(slug: str, cut_marker: str = "") -> str:
    """
    Turn a URL path segment into a human-readable title.

    Args:
        slug: Last path segment, possibly percent-encoded
        cut_marker: If present in the decoded slug, keep only the text before it
            (e.g. '-g-' separates title and goods id on Temu)

    Returns:
        Capitalized words without pure numbers, or empty string

    Example:
        slug_to_title('tr%C3%A5dl%C3%B8s-mus-2-pack-g-601099.html', '-g-') -> 'Trådløs Mus Pack'
    """
    if not slug:
        return ""

    decoded = decode_url_component(slug)
    decoded = re.sub(r'\.html?$', '', decoded, flags=re.IGNORECASE)

    if cut_marker and cut_marker in decoded:
        decoded = decoded.split(cut_marker)[0]

    words = [w for w in re.split(r'[-_\s]+', decoded) if w and not w.isdigit()]
    return ' '.join(w[:1].upper() + w[1:] for w in words).strip()


def parse_price(text: Optional[str]) -> Optional[float]:
    """
    Parse a price from free text.

    Strips currency symbols and thousands separators. A comma followed by
    exactly two digits at the end is read as a decimal comma.

    Returns:
        Parsed value, or None if nothing numeric was found
    """
    if text is None:
        return None
    text = str(text).strip()
    if not text:
        return None

    match = re.search(r'\d[\d\s.,]*', text)
    if not match:
        return None
    number = match.group(0).strip().rstrip('.,').replace(' ', '')

    if re.search(r',\d{2}$', number) and '.' not in number[-3:]:
        number = number.replace('.', '').replace(',', '.')
    else:
        number = number.replace(',', '')

    try:
        return float(number)
    except ValueError:
        return None


def parse_price_range(text: Optional[str]) -> Optional[float]:
    """
    Parse a price or price range, returning the lowest value.

    Example:
        parse_price_range('$10.50 - $15.00') -> 10.5
    """
    if not text:
        return None
    parts = re.split(r'\s*[-–—~]\s*|\s+to\s+', str(text))
    prices: List[float] = [p for p in (parse_price(part) for part in parts) if p is not None]
    return min(prices) if prices else None


def strip_query(url: str) -> str:
    """Drop query string and fragment from a URL (dedup key for images)."""
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, '', ''))
