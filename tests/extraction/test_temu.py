"""Tests for src/extraction/suppliers/temu.py"""

import json

import pytest

from src.extraction.suppliers.temu import GOODS_API_ENDPOINTS, TemuExtractor

GOODS_ID = "601099512345678"
GALLERY_IMAGE = "https://img.kwcdn.com/product/fancy/mouse-main.jpg"

HYDRATED = {
    "store": {
        "goods": {
            "goodsName": "Wireless Mouse Silent",
            "minPrice": "4.99",
            "gallery": ["https://img.kwcdn.com/product/fancy/side.jpg"],
        },
        "skuList": [
            {"skuId": 1, "specList": [{"specName": "Color", "specValue": "Black"}],
             "salePrice": "4.99", "thumbUrl": "https://img.kwcdn.com/product/black.jpg"},
            {"skuId": 2, "specList": [{"specName": "Color", "specValue": "White"}],
             "salePrice": "5.49", "thumbUrl": "https://img.kwcdn.com/product/white.jpg"},
        ],
    }
}

API_PAYLOAD = {
    "result": {
        "goodsName": "Wireless Mouse (API)",
        "price": "3.99",
        "skuList": [
            {"skuId": 9, "specList": [{"specName": "Color", "specValue": "Grey"}], "salePrice": "3.99"},
        ],
    }
}


def hydrated_page() -> str:
    return f"<html><head><script>window.rawData = {json.dumps(HYDRATED)};</script></head><body></body></html>"


def make_extractor(session, options):
    return TemuExtractor(options=options, session=session)


class TestUrlOnlyExtraction:
    """Temu blocks plain fetches: everything except the URL returns 404."""

    @pytest.fixture
    def result(self, fake_session, fast_options, temu_url):
        return make_extractor(fake_session(), fast_options).scrape_product(temu_url)

    def test_success_with_defaults(self, result):
        assert result.success
        assert result.trace.defaults_applied == ["price", "variants"]

    def test_gallery_image_round_trip(self, result):
        assert result.data.images == [GALLERY_IMAGE]

    def test_slug_title(self, result):
        assert result.data.title == "Trådløs Mus Svart Og Hvit"
        assert result.trace.contributed_by("slug_title") == "url_params"

    def test_goods_id(self, result):
        assert result.data.supplier_product_id == GOODS_ID

    def test_default_price(self, result):
        assert result.data.price.amount == 9.99
        assert result.data.pricing.selling_price == 210

    def test_color_variants_from_keywords(self, result):
        variants = result.data.variants
        assert [v.name for v in variants] == ["Svart", "Hvit"]
        assert all(v.image == GALLERY_IMAGE for v in variants)
        assert all(v.price == 210 and v.source_price == 9.99 for v in variants)

    def test_failed_strategies_recorded(self, result):
        names = [s.name for s in result.trace.strategies]
        assert names == ["url_params", "goods_api", "static_data", "dom"]
        errors = {s.name: s.error for s in result.trace.strategies}
        assert errors["url_params"] is None
        assert errors["goods_api"].startswith("ParseFailure")
        assert errors["static_data"].startswith("NetworkFailure")
        assert errors["dom"].startswith("NetworkFailure")

    def test_page_fetched_once(self, fake_session, fast_options, temu_url):
        session = fake_session()
        make_extractor(session, fast_options).scrape_product(temu_url)
        page_calls = [c for c in session.calls if c["url"] == temu_url]
        assert len(page_calls) == 1
        assert len(session.calls) == len(GOODS_API_ENDPOINTS) + 1

    def test_idempotent(self, fake_session, fast_options, temu_url):
        extractor = make_extractor(fake_session(), fast_options)
        first = extractor.scrape_product(temu_url)
        second = extractor.scrape_product(temu_url)
        assert first.data.to_dict() == second.data.to_dict()
        assert first.trace.defaults_applied == second.trace.defaults_applied


class TestColorFreeSlug:
    URL = "https://www.temu.com/no/usb-kabel-g-1.html?top_gallery_url=https%3A%2F%2Fimg.example.com%2Fa.jpg"

    @pytest.fixture
    def result(self, fake_session, fast_options):
        return make_extractor(fake_session(), fast_options).scrape_product(self.URL)

    def test_gallery_image_first(self, result):
        assert result.success
        assert result.data.images[0] == "https://img.example.com/a.jpg"

    def test_single_standard_variant(self, result):
        variants = result.data.variants
        assert [v.name for v in variants] == ["Standard"]
        assert variants[0].image == "https://img.example.com/a.jpg"
        assert "variants" in result.trace.defaults_applied


class TestHydratedPage:
    @pytest.fixture
    def result(self, fake_session, fast_options, temu_url):
        session = fake_session({temu_url: hydrated_page()})
        return make_extractor(session, fast_options).scrape_product(temu_url)

    def test_title_from_hydration(self, result):
        assert result.data.title == "Wireless Mouse Silent"
        assert result.trace.contributed_by("title") == "static_data"

    def test_price(self, result):
        assert result.data.price.amount == 4.99
        assert result.trace.defaults_applied == []

    def test_sku_variants(self, result):
        variants = result.data.variants
        assert [v.name for v in variants] == ["Black", "White"]
        assert [v.source_price for v in variants] == [4.99, 5.49]
        assert variants[0].image == "https://img.kwcdn.com/product/black.jpg"

    def test_images_variant_first(self, result):
        assert result.data.images == [
            "https://img.kwcdn.com/product/black.jpg",
            "https://img.kwcdn.com/product/white.jpg",
            GALLERY_IMAGE,
            "https://img.kwcdn.com/product/fancy/side.jpg",
        ]


class TestGoodsApi:
    def test_api_variants_take_precedence(self, fake_session, fast_options, temu_url):
        endpoint = GOODS_API_ENDPOINTS[1].format(goods_id=GOODS_ID)
        session = fake_session({endpoint: API_PAYLOAD, temu_url: hydrated_page()})
        result = make_extractor(session, fast_options).scrape_product(temu_url)

        assert result.trace.contributed_by("variants") == "goods_api"
        assert [v.name for v in result.data.variants] == ["Grey"]
        assert result.data.title == "Wireless Mouse (API)"
        assert result.data.price.amount == 3.99

    def test_stops_at_first_usable_endpoint(self, fake_session, fast_options, temu_url):
        endpoint = GOODS_API_ENDPOINTS[0].format(goods_id=GOODS_ID)
        session = fake_session({endpoint: API_PAYLOAD})
        make_extractor(session, fast_options).scrape_product(temu_url)
        api_calls = [c for c in session.calls if "/api/" in c["url"]]
        assert len(api_calls) == 1
        assert api_calls[0]["headers"]["Accept"].startswith("application/json")

    def test_connection_errors_fall_through(self, fake_session, fast_options, temu_url):
        import requests

        pages = {t.format(goods_id=GOODS_ID): requests.ConnectionError("reset") for t in GOODS_API_ENDPOINTS}
        pages[temu_url] = hydrated_page()
        result = make_extractor(fake_session(pages), fast_options).scrape_product(temu_url)
        assert result.success
        assert result.trace.contributed_by("variants") == "static_data"

    def test_skipped_without_goods_id(self, fake_session, fast_options):
        session = fake_session()
        result = make_extractor(session, fast_options).scrape_product("https://www.temu.com/no/kabel.html")
        goods_api = [s for s in result.trace.strategies if s.name == "goods_api"][0]
        assert goods_api.error is None
        assert goods_api.fields == []
        assert not any("/api/" in c["url"] for c in session.calls)
