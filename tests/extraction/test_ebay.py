"""Tests for src/extraction/suppliers/ebay.py"""

import pytest
import requests

from src.extraction.errors import ScrapeFailedError
from src.extraction.suppliers.ebay import EbayExtractor

ITEM_URL = "https://www.ebay.com/itm/Vintage-Camera-Lens/123456789012"

ITEM_PAGE = """
<html><head>
  <meta property="og:title" content="Vintage Camera Lens">
  <meta property="og:image" content="https://i.ebayimg.com/images/g/og/s-l500.jpg">
</head><body>
  <h1 itemprop="name">Vintage Camera Lens 50mm</h1>
  <span itemprop="price" content="149.99">US $149.99</span>
  <span itemprop="priceCurrency" content="USD"></span>
  <img itemprop="image" src="https://i.ebayimg.com/images/g/lens/s-l1600.jpg">
  <img itemprop="image" src="https://i.ebayimg.com/images/g/lens/s-l1600.jpg?set=2">
  <div id="viTabs_0_is"><table>
    <tr><td>Brand</td><td>Canon</td></tr>
    <tr><td>Focal Length</td><td>50mm</td></tr>
  </table></div>
  <div class="ux-labels-values">
    <div class="ux-labels-values__labels">Condition</div>
    <div class="ux-labels-values__values">Used</div>
  </div>
  <div id="desc_div">Clean glass, no fungus.</div>
  <select class="x-msku__select-box">
    <option>- Select -</option>
  </select>
</body></html>
"""


@pytest.fixture
def extractor(fake_session, fast_options):
    return EbayExtractor(options=fast_options, session=fake_session({ITEM_URL: ITEM_PAGE}))


class TestItemPage:
    @pytest.fixture
    def product(self, extractor):
        result = extractor.scrape_product(ITEM_URL)
        assert result.success
        return result.data

    def test_core_fields(self, product):
        assert product.title == "Vintage Camera Lens 50mm"
        assert product.price.amount == 149.99
        assert product.price.currency == "USD"
        assert product.description == "Clean glass, no fungus."
        assert product.supplier_product_id == "123456789012"

    def test_images_deduplicated(self, product):
        assert product.images == [
            "https://i.ebayimg.com/images/g/lens/s-l1600.jpg",
            "https://i.ebayimg.com/images/g/og/s-l500.jpg",
        ]

    def test_specs_from_both_layouts(self, product):
        assert product.specs == {"Brand": "Canon", "Focal Length": "50mm", "Condition": "Used"}

    def test_single_standard_variant(self, product):
        assert len(product.variants) == 1
        variant = product.variants[0]
        assert variant.name == "Standard"
        assert variant.image == product.images[0]
        assert (variant.supplier_price, variant.price, variant.compare_at_price) == (1575, 3150, 4095)

    def test_dom_contributed(self, extractor):
        trace = extractor.scrape_product(ITEM_URL).trace
        assert trace.contributed_by("title") == "dom"
        assert trace.contributed_by("price") == "dom"
        assert trace.contributed_by("slug_title") == "url_params"


class TestJsonLdPage:
    def test_offers_become_variants(self, fake_session, fast_options, jsonld_product_html):
        url = "https://www.ebay.com/itm/987654321"
        extractor = EbayExtractor(options=fast_options, session=fake_session())
        result = extractor.scrape_html(url, jsonld_product_html)

        assert result.success
        product = result.data
        assert product.title == "Wireless Mouse 2.4G"
        assert product.price.amount == 12.5
        assert product.images == [
            "https://i.ebayimg.com/images/g/abc/s-l1600.jpg",
            "https://i.ebayimg.com/images/g/def/s-l1600.jpg",
        ]
        assert [v.name for v in product.variants] == ["Black", "White"]
        assert [v.image for v in product.variants] == product.images
        assert result.trace.contributed_by("variants") == "static_data"

    def test_prefetched_html_skips_network(self, fake_session, fast_options, jsonld_product_html):
        session = fake_session()
        EbayExtractor(options=fast_options, session=session).scrape_html(
            "https://www.ebay.com/itm/987654321", jsonld_product_html
        )
        assert session.calls == []


class TestFailures:
    def test_connection_error_degrades_to_url_data(self, fake_session, fast_options):
        session = fake_session({ITEM_URL: requests.ConnectionError("connection reset")})
        result = EbayExtractor(options=fast_options, session=session).scrape_product(ITEM_URL)

        assert result.success
        assert result.data.title == "Vintage Camera Lens"
        assert result.data.price.amount == 9.99
        assert "price" in result.trace.defaults_applied
        static = [s for s in result.trace.strategies if s.name == "static_data"][0]
        assert "NetworkFailure" in static.error

    def test_invalid_url_is_failed_result(self, extractor):
        result = extractor.scrape_product("ftp://www.ebay.com/itm/1")
        assert not result.success
        assert "http" in result.error
        assert result.data is None

    def test_request_headers(self, fake_session, fast_options):
        session = fake_session({ITEM_URL: ITEM_PAGE})
        EbayExtractor(options=fast_options, session=session).scrape_product(ITEM_URL)
        headers = session.calls[0]["headers"]
        assert headers["User-Agent"].startswith("Mozilla/5.0")
        assert headers["Accept-Language"] == "en-US,en;q=0.9"
        assert session.calls[0]["timeout"] == fast_options.request_timeout_s


class TestConvenienceCalls:
    def test_scrape_price(self, extractor):
        assert extractor.scrape_price(ITEM_URL) == 149.99

    def test_scrape_images(self, extractor):
        assert len(extractor.scrape_images(ITEM_URL)) == 2

    def test_scrape_description(self, extractor):
        assert extractor.scrape_description(ITEM_URL) == "Clean glass, no fungus."

    def test_failure_raises(self, extractor):
        with pytest.raises(ScrapeFailedError):
            extractor.scrape_price("not a url")
