"""Tests for src/models/product.py"""

import dataclasses

import pytest

from src.models import (
    ExtractedProduct,
    ExtractionOptions,
    ExtractionResult,
    ExtractionTrace,
    Price,
    ProductVariant,
    StrategyTrace,
    SupplierTag,
)


@pytest.fixture
def minimal_product():
    return ExtractedProduct(
        supplier=SupplierTag.EBAY,
        url="https://www.ebay.com/itm/123456789012",
        title="Vintage Camera Lens",
        price=Price(amount=149.99, currency="USD"),
    )


class TestExtractedProduct:
    def test_default_values(self, minimal_product):
        assert minimal_product.images == []
        assert minimal_product.specs == {}
        assert minimal_product.variants == []
        assert minimal_product.availability is True
        assert minimal_product.shipping_estimate is None
        assert minimal_product.pricing is None

    def test_raises_on_empty_title(self):
        with pytest.raises(ValueError, match="title is required"):
            ExtractedProduct(supplier=SupplierTag.TEMU, url="https://www.temu.com/x",
                             title="", price=Price(1.0, "USD"))

    def test_raises_on_empty_url(self):
        with pytest.raises(ValueError, match="URL is required"):
            ExtractedProduct(supplier=SupplierTag.TEMU, url="", title="X", price=Price(1.0, "USD"))

    def test_to_dict_uses_supplier_value(self, minimal_product):
        minimal_product.variants.append(ProductVariant(name="Standard", price=3150))
        data = minimal_product.to_dict()
        assert data["supplier"] == "ebay"
        assert data["price"] == {"amount": 149.99, "currency": "USD"}
        assert data["variants"][0]["name"] == "Standard"


class TestExtractionTrace:
    def test_contributed_by_first_strategy(self):
        trace = ExtractionTrace(strategies=[
            StrategyTrace(name="url_params", fields=["slug_title"]),
            StrategyTrace(name="static_data", fields=["title", "price"]),
            StrategyTrace(name="dom", fields=["images"]),
        ])
        assert trace.contributed_by("title") == "static_data"
        assert trace.contributed_by("images") == "dom"
        assert trace.contributed_by("variants") is None


class TestExtractionResult:
    def test_ok(self, minimal_product):
        result = ExtractionResult.ok(minimal_product)
        assert result.success
        assert result.error is None
        assert result.to_dict()["data"]["title"] == "Vintage Camera Lens"

    def test_failed_always_has_message(self):
        result = ExtractionResult.failed("")
        assert not result.success
        assert result.data is None
        assert result.error == "Unknown scraper error"

    def test_to_dict_failure_with_trace(self):
        trace = ExtractionTrace(supplier="temu", defaults_applied=["price"])
        data = ExtractionResult.failed("boom", trace=trace).to_dict()
        assert data == {
            "success": False,
            "error": "boom",
            "trace": {"supplier": "temu", "strategies": [], "defaults_applied": ["price"]},
        }

    def test_raw_html_only_on_request(self, minimal_product):
        result = ExtractionResult.ok(minimal_product, raw_html="<html></html>")
        assert "raw_html" not in result.to_dict()
        assert result.to_dict(include_html=True)["raw_html"] == "<html></html>"


class TestExtractionOptions:
    def test_defaults(self):
        options = ExtractionOptions()
        assert options.locale == "en-US"
        assert options.currency == "USD"
        assert options.min_delay_ms == 1000
        assert options.max_delay_ms == 2500
        assert options.user_agent_rotation is True
        assert options.single_variant_color_override is None

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            ExtractionOptions().locale = "nb-NO"

    def test_from_config_with_overrides(self):
        options = ExtractionOptions.from_config(min_delay_ms=0, single_variant_color_override=None)
        assert options.min_delay_ms == 0
        assert options.default_price == 9.99
        assert options.single_variant_color_override is None
