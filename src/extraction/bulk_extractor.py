"""
Bulk Product Extractor

Extracts products from a list of supplier URLs, one at a time, and writes
one JSON line per URL.

Features:
- Progress tracking with resume capability
- Error handling with failed URL tracking
- Fixed delay between products for respectful crawling
- Mixed suppliers in one run (extractor chosen per URL)
"""

from __future__ import annotations

import json
import logging
import os
import time
from datetime import datetime

import requests

from ..models import ExtractionOptions, ExtractionResult
from .factory import get_extractor_for_url

logger = logging.getLogger(__name__)


class BulkExtractor:
    """Bulk product extraction with progress tracking and resume capability."""

    def __init__(
        self,
        output_path: str,
        output_dir: str = "output",
        delay: float = 2.0,
        options: ExtractionOptions | None = None,
        save_failed_html: bool = False,
    ):
        """
        Initialize the bulk extractor.

        Args:
            output_path: Path to output JSON Lines file
            output_dir: Directory for state and failed-URL files
            delay: Delay between products in seconds
            options: Extraction options passed to every extractor
            save_failed_html: Whether to save HTML of failed pages
        """
        self.output_path = output_path
        self.output_dir = output_dir
        self.delay = delay
        self.options = options or ExtractionOptions()
        self.save_failed_html = save_failed_html

        # Progress tracking
        self.state_file = os.path.join(output_dir, "extraction_state.json")
        self.failed_file = os.path.join(output_dir, "failed_urls.txt")

        # State
        self.processed_urls: set[str] = set()
        self.failed_urls: list[dict] = []
        self.total_extracted = 0
        self.total_images = 0
        self.total_variants = 0
        self.total_defaulted = 0
        self.start_time = None

        os.makedirs(output_dir, exist_ok=True)

    def load_state(self) -> bool:
        """Load previous extraction state for resume."""
        if not os.path.exists(self.state_file):
            return False
        try:
            with open(self.state_file, "r", encoding="utf-8") as f:
                state = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not load state: %s", e)
            return False

        self.processed_urls = set(state.get("processed_urls", []))
        self.failed_urls = state.get("failed_urls", [])
        self.total_extracted = state.get("total_extracted", 0)
        self.total_images = state.get("total_images", 0)
        self.total_variants = state.get("total_variants", 0)
        self.total_defaulted = state.get("total_defaulted", 0)

        # Older state files lack counters; recount from the output file
        if self.total_extracted == 0 and self.processed_urls:
            logger.info("Recalculating output stats...")
            stats = self.recalculate_output_stats()
            self.total_extracted = stats["products"]
            self.total_images = stats["images"]
            self.total_variants = stats["variants"]

        logger.info("Loaded state: URLs processed=%d, products=%d, failed=%d",
                    len(self.processed_urls), self.total_extracted, len(self.failed_urls))
        return True

    def save_state(self) -> None:
        """Save current extraction state."""
        state = {
            "processed_urls": sorted(self.processed_urls),
            "failed_urls": self.failed_urls,
            "total_extracted": self.total_extracted,
            "total_images": self.total_images,
            "total_variants": self.total_variants,
            "total_defaulted": self.total_defaulted,
            "last_updated": datetime.now().isoformat(),
        }
        with open(self.state_file, "w", encoding="utf-8") as f:
            json.dump(state, f, indent=2, ensure_ascii=False)

    def save_failed_urls(self) -> None:
        """Save failed URLs to a separate file for retry."""
        with open(self.failed_file, "w", encoding="utf-8") as f:
            for failure in self.failed_urls:
                f.write(f"{failure['url']}\t{failure['error']}\n")

    def recalculate_output_stats(self) -> dict:
        """Recount successful products from the existing JSON Lines output."""
        stats = {"products": 0, "images": 0, "variants": 0}
        if not os.path.exists(self.output_path):
            return stats

        with open(self.output_path, "r", encoding="utf-8") as f:
            for line in f:
                try:
                    record = json.loads(line)
                except json.JSONDecodeError:
                    continue
                data = record.get("data")
                if record.get("success") and data:
                    stats["products"] += 1
                    stats["images"] += len(data.get("images", []))
                    stats["variants"] += len(data.get("variants", []))
        return stats

    def extract_one(self, url: str, session: requests.Session | None = None) -> ExtractionResult:
        """
        Extract a single URL with the extractor for its supplier.

        Returns:
            ExtractionResult; unsupported suppliers yield a failed result
        """
        extractor = get_extractor_for_url(url, options=self.options, session=session)
        if extractor is None:
            return ExtractionResult.failed(f"Unsupported supplier URL: {url}")
        return extractor.scrape_product(url)

    def extract_all(
        self,
        urls: list[str],
        limit: int = 0,
        resume: bool = False,
        continue_on_error: bool = True,
        session: requests.Session | None = None,
    ) -> None:
        """
        Extract all products from URL list.

        Args:
            urls: List of product URLs to extract
            limit: Maximum number of products to extract (0 = no limit)
            resume: Whether to resume from previous state
            continue_on_error: Whether to continue if extraction fails
            session: Optional requests session (a shared one is created otherwise)
        """
        self.start_time = datetime.now()

        if resume:
            self.load_state()

        urls_to_process = [u for u in urls if u not in self.processed_urls]
        if limit > 0:
            urls_to_process = urls_to_process[:limit]

        total_urls = len(urls_to_process)
        total_input_urls = len(urls)
        already_processed = len(self.processed_urls)

        logger.info("Extraction Progress: total=%d, remaining=%d", total_input_urls, total_urls)
        if resume and already_processed > 0:
            logger.info("Already processed: %d (%.1f%%)", already_processed, 100*already_processed/total_input_urls)

        write_mode = 'a' if (resume and os.path.exists(self.output_path)) else 'w'

        # Shared session for TCP connection reuse across products
        owns_session = session is None
        session = session or requests.Session()

        try:
            with open(self.output_path, write_mode, encoding='utf-8') as out:
                for i, url in enumerate(urls_to_process, 1):
                    overall_progress = already_processed + i
                    logger.info("[%d/%d] %s...", overall_progress, total_input_urls, url[:60])

                    try:
                        result = self.extract_one(url, session=session)
                    except ImportError as e:
                        # Supplier module dependencies missing (e.g. browser stack)
                        result = ExtractionResult.failed(f"{type(e).__name__}: {e}")

                    record = {"url": url, **result.to_dict()}
                    out.write(json.dumps(record, ensure_ascii=False) + "\n")
                    self.processed_urls.add(url)

                    if result.success:
                        product = result.data
                        self.total_extracted += 1
                        self.total_images += len(product.images)
                        self.total_variants += len(product.variants)
                        if result.trace and result.trace.defaults_applied:
                            self.total_defaulted += 1
                        logger.info("OK: %s... (%d images, %d variants)",
                                    product.title[:50], len(product.images), len(product.variants))
                    else:
                        logger.error("Error: %s", result.error)
                        self.failed_urls.append({
                            "url": url,
                            "error": result.error,
                            "timestamp": datetime.now().isoformat(),
                        })
                        if self.save_failed_html:
                            self._save_failed_html(url, result.raw_html)
                        if not continue_on_error:
                            logger.error("Stopping due to error (use --continue-on-error to ignore)")
                            break

                    # Save state periodically (every 10 products)
                    if i % 10 == 0:
                        self.save_state()
                        out.flush()

                    # Rate limiting
                    if i < total_urls and self.delay > 0:
                        time.sleep(self.delay)
        finally:
            if owns_session:
                session.close()

        self.save_state()
        self.save_failed_urls()
        self._print_summary()

    def _save_failed_html(self, url: str, html: str | None = None) -> None:
        """Save HTML of a failed page for debugging (skipped when no HTML was fetched)."""
        if not html:
            return
        html_dir = os.path.join(self.output_dir, "failed_html")
        os.makedirs(html_dir, exist_ok=True)

        filename = url.rstrip("/").split("/")[-1].split("?")[0][:50] or "page"
        filepath = os.path.join(html_dir, filename + ".html")
        try:
            with open(filepath, "w", encoding="utf-8") as f:
                f.write(html)
        except OSError as e:
            logger.warning("Could not save failed HTML for %s: %s", url, e)

    def _print_summary(self) -> None:
        """Print extraction summary."""
        elapsed = (datetime.now() - self.start_time).total_seconds()

        print("\n" + "=" * 60)
        print("Extraction Summary")
        print("=" * 60)
        print("\n  Progress:")
        print(f"     URLs processed:     {len(self.processed_urls)}")
        print(f"     URLs failed:        {len(self.failed_urls)}")
        print("\n  Products:")
        print(f"     Extracted:          {self.total_extracted}")
        print(f"     With defaults:      {self.total_defaulted}")
        print(f"     Total images:       {self.total_images}")
        avg_images = self.total_images / self.total_extracted if self.total_extracted > 0 else 0
        print(f"     Avg images/product: {avg_images:.2f}")
        print(f"     Total variants:     {self.total_variants}")
        print("\n  Performance:")
        print(f"     Time elapsed:       {elapsed:.1f} seconds")
        print("\n  Output files:")
        print(f"     Results: {self.output_path}")
        if self.failed_urls:
            print(f"     Failed:  {self.failed_file}")
        print("=" * 60)

    def get_stats(self) -> dict:
        """Return extraction statistics."""
        return {
            'total_extracted': self.total_extracted,
            'total_images': self.total_images,
            'total_variants': self.total_variants,
            'total_defaulted': self.total_defaulted,
            'processed_urls': len(self.processed_urls),
            'failed_urls': len(self.failed_urls),
        }
