#!/usr/bin/env python3
"""
Bulk Product Extraction Script

Extracts products from a list of supplier URLs and writes one JSON line per
URL. Supplier is detected per URL, so one input file may mix suppliers.

Features:
- Progress tracking with resume capability
- Error handling with failed URL tracking
- Fixed delay between products for respectful crawling
- Unsupported URLs recorded as failures

Usage:
    python3 scripts/bulk_extract.py --urls data/urls.txt
    python3 scripts/bulk_extract.py --urls data/urls.txt --limit 100
    python3 scripts/bulk_extract.py --urls urls.txt --output output/products.jsonl --resume
"""

import argparse
import logging
import os
import sys
from collections import Counter
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.common import env_option_overrides, load_extraction_settings, setup_logging
from src.extraction import identify_supplier
from src.extraction.bulk_extractor import BulkExtractor
from src.models import ExtractionOptions

load_dotenv(Path(__file__).parent.parent / ".env")

logger = logging.getLogger(__name__)


def main():
    settings = load_extraction_settings()

    parser = argparse.ArgumentParser(
        description="Bulk extract supplier products (supplier detected per URL)"
    )
    parser.add_argument(
        "--urls", "-u",
        required=True,
        help="Input file with product URLs (one per line)"
    )
    parser.add_argument(
        "--output", "-o",
        default="output/products.jsonl",
        help="Output JSON Lines file (default: output/products.jsonl)"
    )
    parser.add_argument(
        "--output-dir",
        default="output",
        help="Directory for state and failed-URL files (default: output)"
    )
    parser.add_argument(
        "--limit", "-l",
        type=int,
        default=0,
        help="Limit number of products to extract (0 = no limit)"
    )
    parser.add_argument(
        "--delay", "-d",
        type=float,
        default=settings.get("bulk_delay_s", 2.0),
        help="Delay between products in seconds (default: from config/extraction.yaml)"
    )
    parser.add_argument(
        "--resume",
        action="store_true",
        help="Resume from previous extraction state"
    )
    parser.add_argument(
        "--stop-on-error",
        action="store_true",
        help="Stop extraction if any product fails (default: continue on error)"
    )
    parser.add_argument(
        "--save-failed-html",
        action="store_true",
        help="Save HTML of failed pages for debugging"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose (debug) logging"
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress info messages, show only warnings and errors"
    )

    args = parser.parse_args()
    setup_logging(verbose=args.verbose, quiet=args.quiet)

    if not os.path.exists(args.urls):
        print(f"URL file not found: {args.urls}")
        sys.exit(1)

    with open(args.urls, "r", encoding="utf-8") as f:
        urls = [line.strip() for line in f if line.strip() and not line.startswith("#")]

    if not urls:
        logger.error("No URLs found in input file")
        sys.exit(1)

    try:
        options = ExtractionOptions.from_config(**env_option_overrides())
    except ValueError as e:
        logger.error("Invalid environment override: %s", e)
        sys.exit(1)

    os.makedirs(os.path.dirname(args.output) or ".", exist_ok=True)

    suppliers = Counter(
        tag.value if tag else "unsupported" for tag in map(identify_supplier, urls)
    )

    print("=" * 60)
    print("Bulk Product Extraction")
    print("=" * 60)
    print(f"  Input file:       {args.urls}")
    print(f"  Total URLs:       {len(urls)}")
    print(f"  Suppliers:        {', '.join(f'{k}={v}' for k, v in sorted(suppliers.items()))}")
    print(f"  Output:           {args.output}")
    print(f"  Product delay:    {args.delay}s")
    print(f"  Resume mode:      {args.resume}")

    extractor = BulkExtractor(
        output_path=args.output,
        output_dir=args.output_dir,
        delay=args.delay,
        options=options,
        save_failed_html=args.save_failed_html,
    )

    extractor.extract_all(
        urls=urls,
        limit=args.limit,
        resume=args.resume,
        continue_on_error=not args.stop_on_error,
    )

    logger.info("Extraction complete. Output: %s", args.output)


if __name__ == "__main__":
    main()
