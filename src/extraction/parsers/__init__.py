"""
Specialized parsers for product data extraction.

Each parser handles a specific data source:
- UrlParameterParser: the product URL itself (gallery params, ids, slug)
- ScriptDataParser: JavaScript hydration blobs and SKU lists
- StructuredDataParser: JSON-LD structured data (schema.org)
- HTMLContentParser: HTML element extraction via CSS selectors
"""

from .html_parser import HTMLContentParser
from .script_data import ScriptDataParser
from .structured_data import StructuredDataParser
from .url_params import UrlParameterParser

__all__ = [
    'UrlParameterParser',
    'ScriptDataParser',
    'StructuredDataParser',
    'HTMLContentParser',
]
