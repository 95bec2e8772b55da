#!/usr/bin/env python3
"""
Single Product Extraction

Extracts a single supplier product and prints a per-field report for
human review. Supplier is auto-detected from the URL.

Usage:
    python3 extract_single.py --url "https://www.temu.com/no/tradlos-mus-g-601099512345.html"
    python3 extract_single.py --url https://www.ebay.com/itm/123456789 --verbose
    python3 extract_single.py --url URL --output-json output/product.json
"""

import argparse
import json
import os
import sys

from dotenv import load_dotenv

from src.common import env_option_overrides, setup_logging
from src.extraction import get_extractor_for_url, identify_supplier
from src.models import ExtractionOptions, ExtractionResult


def print_report(result: ExtractionResult) -> None:
    """Print detailed extraction report."""
    product = result.data

    print("\n" + "="*80)
    print("EXTRACTION REPORT")
    print("="*80)

    print(f"\nSupplier: {product.supplier.value}")
    print(f"Product URL: {product.url}")
    print(f"Title: {product.title[:70]}..." if len(product.title) > 70 else f"Title: {product.title}")

    defaults = result.trace.defaults_applied if result.trace else []

    print("\n" + "-"*80)
    print("EXTRACTED DATA")
    print("-"*80)

    print("\nCORE FIELDS:")
    fields = [
        ("Title", product.title, "title"),
        ("Price", f"{product.price.amount:.2f} {product.price.currency}", "price"),
        ("Supplier ID", product.supplier_product_id or "", None),
        ("Shipping", product.shipping_estimate or "", None),
        ("Available", "yes" if product.availability else "no", None),
    ]
    for label, value, field_name in fields:
        if field_name in defaults:
            status = "DEFAULT"
        else:
            status = "OK" if value else "MISSING"
        print(f"  [{status:7}] {label:20} {value or 'MISSING'}")

    if product.pricing:
        tiers = product.pricing
        print(f"\nPRICING ({tiers.currency}):")
        print(f"  Supplier price:   {tiers.supplier_price}")
        print(f"  Selling price:    {tiers.selling_price}")
        print(f"  Compare-at price: {tiers.compare_at_price}")

    desc_len = len(product.description)
    print(f"\nDESCRIPTION: {desc_len} characters")

    print(f"\nSPECS ({len(product.specs)} items):")
    for key, value in product.specs.items():
        print(f"  {key}: {value}")

    print(f"\nIMAGES ({len(product.images)} images):")
    for idx, img in enumerate(product.images, 1):
        print(f"  {idx}. {img}")

    print(f"\nVARIANTS ({len(product.variants)}):")
    for idx, variant in enumerate(product.variants, 1):
        image = variant.image.split('/')[-1] if variant.image else "no image"
        print(f"  {idx}. {variant.name:20} {variant.price} (compare {variant.compare_at_price}) {image}")

    if result.trace:
        print("\n" + "-"*80)
        print("STRATEGIES")
        print("-"*80)
        for strategy in result.trace.strategies:
            contributed = ", ".join(strategy.fields) or "-"
            line = f"  {strategy.name:14} {strategy.duration_ms:8.1f} ms  {contributed}"
            if strategy.error:
                line += f"  [error: {strategy.error}]"
            print(line)
        if defaults:
            print(f"\n  Defaults applied: {', '.join(defaults)}")

    print("\n" + "="*80)


def main():
    parser = argparse.ArgumentParser(
        description="Extract a single supplier product with a field report"
    )
    parser.add_argument(
        "--url",
        required=True,
        help="Product URL"
    )
    parser.add_argument(
        "--output-json",
        help="Output JSON path (default: output/{supplier}/extraction.json)"
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging and show full extracted data"
    )

    args = parser.parse_args()
    setup_logging(verbose=args.verbose)
    load_dotenv()

    supplier = identify_supplier(args.url)
    if supplier is None:
        print(f"\nError: Unsupported supplier URL: {args.url}")
        sys.exit(1)

    print(f"Extracting from: {supplier.value}")
    print(f"URL: {args.url}")

    output_json = args.output_json or f"output/{supplier.value}/extraction.json"

    try:
        options = ExtractionOptions.from_config(**env_option_overrides())
    except ValueError as e:
        print(f"\nError: Invalid environment override: {e}")
        sys.exit(1)

    extractor = get_extractor_for_url(args.url, options=options)
    result = extractor.scrape_product(args.url)

    if not result.success:
        print(f"\nExtraction failed: {result.error}")
        sys.exit(1)

    print_report(result)

    os.makedirs(os.path.dirname(output_json) or ".", exist_ok=True)
    with open(output_json, 'w', encoding='utf-8') as f:
        json.dump(result.to_dict(), f, indent=2, ensure_ascii=False)
    print(f"\nResults saved to: {output_json}")

    if args.verbose:
        print("\n" + "="*80)
        print("FULL EXTRACTED DATA (JSON)")
        print("="*80)
        print(json.dumps(result.data.to_dict(), indent=2, ensure_ascii=False))

    sys.exit(0)


if __name__ == "__main__":
    main()
