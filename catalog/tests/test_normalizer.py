"""Tests for record normalization and keyword classification."""

import pytest

from catalog.classifier import CategoryClassifier, default_classifier
from catalog.extractor import ExtractedRecord, extract_records
from catalog.models import coerce_in_stock, parse_price
from catalog.normalizer import normalize_enhanced, normalize_product, normalize_record, resolve_name


class TestFieldCoercion:
    """Price, stock and features coercion."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("199.50", 199.5),
            (149, 149.0),
            ("12abc", 12.0),
            ("abc", None),
            ("", None),
            (None, None),
            (True, None),
        ],
    )
    def test_parse_price(self, value, expected):
        assert parse_price(value) == expected

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, True),
            (True, True),
            (False, False),
            (0, False),
            (1, True),
            ("", False),
            ("false", False),
            ("TRUE", True),
        ],
    )
    def test_in_stock_presence_semantics(self, value, expected):
        """Only an absent value defaults to in stock."""
        assert coerce_in_stock(value) is expected


class TestNormalizeProduct:
    """Standard field mapping."""

    def test_basic_mapping(self):
        product = normalize_product(
            {"name": "Astral Gold Pen", "price": "199.50", "features": ["a", "b", "c"], "code": "AG-1"},
            category_override="Pens",
        )

        assert product is not None
        assert product.name == "Astral Gold Pen"
        assert product.price == 199.5
        assert product.features == "a, b, c"
        assert product.category == "Pens"
        assert product.sku == "AG-1"
        assert product.in_stock is True
        assert product.id == 0

    def test_missing_price_is_none(self):
        product = normalize_product({"name": "Pen", "price": None})

        assert product.price is None

    def test_record_without_name_is_skipped(self):
        assert normalize_product({"price": 10, "description": "nameless"}) is None

    def test_name_fallbacks(self):
        assert resolve_name({"product_name": "From product_name"}) == "From product_name"
        assert resolve_name({"title": "From title"}) == "From title"
        assert resolve_name({"name": "", "title": "Title wins over empty name"}) == "Title wins over empty name"

    def test_alternate_field_names(self):
        product = normalize_product(
            {"title": "Cooker", "desc": "A cooker", "image": "http://x/img.png", "sub_category": "Cookers"}
        )

        assert product.description == "A cooker"
        assert product.image_url == "http://x/img.png"
        assert product.subcategory == "Cookers"

    def test_features_string_passes_through(self):
        assert normalize_product({"name": "Pen", "features": "already a string"}).features == "already a string"

    def test_category_defaults_to_uncategorized(self):
        assert normalize_product({"name": "Thing"}).category == "Uncategorized"

    def test_explicit_out_of_stock(self):
        assert normalize_product({"name": "Thing", "in_stock": 0}).in_stock is False


class TestNormalizeEnhanced:
    """Classification and synthesized fields."""

    def test_pen_catalog(self, pen_catalog):
        records = extract_records(pen_catalog)

        product = normalize_enhanced(records[0], "Dyna Metal Pen Catalog")

        assert product.category == "Metal Pen"
        assert product.subcategory == "Astral Series"
        assert product.description == "Premium metal pens"
        assert product.brand == "Shivaya"
        assert product.features == "Metal body, Gel ink"

    def test_series_variant_fields(self, bucket_catalog):
        records = extract_records(bucket_catalog)

        product = normalize_enhanced(records[0], "Saran Enterprises catalog")

        assert product.name == "Super Bucket - 30x30"
        assert product.category == "Plasticware"
        assert product.subcategory == "Water Buckets"
        assert product.series == "Super Bucket"
        assert product.dimensions == "30x30"
        assert product.extra["capacity"] == 10
        assert product.description == "Super Bucket - 30x30 from Super Bucket"

    def test_constructed_name_from_series_and_model(self):
        record = ExtractedRecord(raw={"series": "Classic", "model": "C-10"}, category="Pens")

        product = normalize_enhanced(record, "misc")

        assert product.name == "Classic C-10"

    def test_constructed_name_from_capacity(self):
        record = ExtractedRecord(raw={"capacity_l": 20}, category="Drum")

        product = normalize_enhanced(record, "misc")

        assert product.name == "Drum 20L"

    def test_constructed_name_from_dimensions(self):
        record = ExtractedRecord(raw={"dimensions": "40x60"}, category="Tray")

        product = normalize_enhanced(record, "misc")

        assert product.name == "Tray 40x60"

    def test_constructed_name_from_bare_series(self):
        record = ExtractedRecord(raw={"series": "Classic"}, category="Pens")

        product = normalize_enhanced(record, "misc")

        assert product.name == "Classic"

    def test_nameless_record_without_hints_is_skipped(self):
        assert normalize_enhanced(ExtractedRecord(raw={"price": 5}), "misc") is None

    def test_variants_are_joined(self):
        record = ExtractedRecord(raw={"name": "Pen Set", "variants": [{"x": 1}, "Blue"]}, category="Pens")

        product = normalize_enhanced(record, "misc")

        assert product.extra["variants"] == '{"x": 1}, Blue'

    def test_normalize_record_dispatches_on_mode(self, pen_catalog):
        record = extract_records(pen_catalog)[0]

        standard = normalize_record(record, "standard", "Dyna Metal Pen Catalog")
        enhanced = normalize_record(record, "enhanced", "Dyna Metal Pen Catalog")

        assert standard.category == "Astral Series"
        assert enhanced.category == "Metal Pen"


class TestCategoryClassifier:
    """Keyword and file-name classification."""

    def test_keyword_match(self):
        classifier = default_classifier()

        assert classifier.main_category("Astral Gold Pen", file_name="Dyna Metal Pen Catalog") == "Metal Pen"
        assert classifier.main_category("Pressure Cooker 5L") == "Kitchenware"
        assert classifier.main_category("Shaving Kit") == "Household"
        assert classifier.main_category("Water Bucket 20L") == "Plasticware"

    def test_first_rule_wins(self):
        assert default_classifier().main_category("Pen Stand Basket") == "Metal Pen"

    def test_unmatched_is_other(self):
        assert default_classifier().main_category("Widget") == "Other"

    def test_file_fallback(self):
        classifier = CategoryClassifier(rules=[], file_fallbacks=[(["saran"], "Plasticware")])

        assert classifier.main_category("Widget", file_name="Saran Enterprises catalog") == "Plasticware"
        assert classifier.main_category("Widget", file_name="Unknown") == "Other"

    def test_configured_file_fallback_alone(self):
        classifier = CategoryClassifier(rules=[])

        assert classifier.main_category("Astral Gold Pen", file_name="Dyna Metal Pen Catalog.json") == "Metal Pen"
        assert classifier.main_category("Widget", file_name="Dyna Metal Pen Catalog.json") == "Metal Pen"

    def test_specific_cookware_subcategories_win(self):
        classifier = default_classifier()

        assert classifier.subcategory("Premium Cookware Set") == "Premium Cookware"
        assert classifier.subcategory("Traditional Cookware Kadai") == "Traditional Cookware"
        assert classifier.subcategory("Cookware Set") == "Cookware"

    def test_subcategory_mapping_and_fallback(self):
        classifier = default_classifier()

        assert classifier.subcategory("Deluxe Pressure Cooker") == "Pressure Cookers"
        assert classifier.subcategory("Widget", category_context="Gizmos") == "Gizmos"
        assert classifier.subcategory("Widget", series_context="Mk II") == "Mk II"
        assert classifier.subcategory("Widget") == ""

    def test_default_classifier_returns_fresh_instances(self):
        assert default_classifier() is not default_classifier()
