"""Tests for multi-file catalog merging, sorting and CSV output."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
import requests

from catalog.config import CatalogFile
from catalog.errors import SourceError
from catalog.merger import (
    CatalogMerger,
    discover_catalog_files,
    load_catalog_json,
    sort_products,
    write_csv_outputs,
)
from catalog.models import Product


class TestSortProducts:
    """Ordering by (category, subcategory, name)."""

    def test_sort_order(self):
        products = [
            Product(name="X", category="B"),
            Product(name="Z", category="A"),
            Product(name="Y", category="A"),
        ]

        ordered = sort_products(products)

        assert [(p.category, p.name) for p in ordered] == [("A", "Y"), ("A", "Z"), ("B", "X")]

    def test_sort_is_case_sensitive(self):
        ordered = sort_products([Product(name="apple", category="A"), Product(name="Banana", category="A")])

        assert [p.name for p in ordered] == ["Banana", "apple"], "Uppercase sorts before lowercase"

    def test_subcategory_before_name(self):
        ordered = sort_products(
            [
                Product(name="A", category="C", subcategory="Two"),
                Product(name="B", category="C", subcategory="One"),
            ]
        )

        assert [p.name for p in ordered] == ["B", "A"]


class TestLoadCatalogJson:
    """Reading catalogs from disk and over HTTP."""

    def test_missing_file(self, tmp_path):
        with pytest.raises(SourceError, match="Cannot read"):
            load_catalog_json(CatalogFile("Missing", str(tmp_path / "missing.json")))

    def test_empty_file(self, write_catalog):
        with pytest.raises(SourceError, match="Empty file"):
            load_catalog_json(write_catalog("empty", "   "))

    def test_invalid_json(self, write_catalog):
        with pytest.raises(SourceError, match="Invalid JSON"):
            load_catalog_json(write_catalog("broken", "{not json"))

    def test_url_source(self):
        response = MagicMock()
        response.text = '[{"name": "Remote Pen"}]'
        with patch("catalog.merger.requests.get", return_value=response) as mock_get:
            data = load_catalog_json(CatalogFile("Remote", "https://example.com/pens.json"), timeout=5)

        assert data == [{"name": "Remote Pen"}]
        mock_get.assert_called_once_with("https://example.com/pens.json", timeout=5)

    def test_url_http_error(self):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.HTTPError("404 Client Error")
        with patch("catalog.merger.requests.get", return_value=response):
            with pytest.raises(SourceError, match="HTTP error"):
                load_catalog_json(CatalogFile("Remote", "https://example.com/missing.json"))


class TestCatalogMerger:
    """Merging several files into one id-assigned product list."""

    def test_invalid_file_is_contained(self, write_catalog, pen_catalog):
        files = [
            write_catalog("pens", pen_catalog),
            write_catalog("broken", "{not json"),
            write_catalog("soaps", {"category": "Household", "products": [{"name": "Soap"}]}),
        ]

        result = CatalogMerger(files).merge()

        assert len(result.products) == 4, "Products from the valid files should all be kept"
        assert len(result.errors) == 1
        assert "broken" in result.errors[0]
        assert result.success

    def test_ids_are_unique_and_sequential(self, write_catalog, pen_catalog, bucket_catalog):
        files = [write_catalog("pens", pen_catalog), write_catalog("buckets", bucket_catalog)]

        result = CatalogMerger(files, mode="enhanced").merge()

        assert [p.id for p in result.products] == list(range(1, len(result.products) + 1))

    def test_merge_output_is_sorted(self, write_catalog):
        data = [
            {"category": "B", "products": [{"name": "X"}]},
            {"category": "A", "products": [{"name": "Z"}, {"name": "Y"}]},
        ]

        result = CatalogMerger([write_catalog("letters", data)]).merge()

        assert [(p.id, p.category, p.name) for p in result.products] == [(1, "A", "Y"), (2, "A", "Z"), (3, "B", "X")]

    def test_nameless_records_are_dropped(self, write_catalog):
        result = CatalogMerger([write_catalog("mixed", [{"name": "Kept"}, {"price": 10}])]).merge()

        assert [p.name for p in result.products] == ["Kept"]
        assert result.errors == []

    def test_enhanced_mode_adds_source_ref(self, write_catalog, bucket_catalog):
        result = CatalogMerger([write_catalog("Saran Buckets", bucket_catalog)], mode="enhanced").merge()

        refs = sorted(p.extra["source_ref"] for p in result.products)
        assert refs == ["saran-buckets:1", "saran-buckets:2"]

    def test_file_variant_used_without_mode(self, write_catalog, pen_catalog):
        files = [write_catalog("Dyna Metal Pen Catalog", pen_catalog, variant="enhanced")]

        result = CatalogMerger(files).merge()

        assert {p.category for p in result.products} == {"Metal Pen"}

    def test_duplicate_file_processed_once(self, write_catalog, pen_catalog):
        pens = write_catalog("pens", pen_catalog)

        result = CatalogMerger([pens, pens]).merge()

        assert len(result.files) == 1
        assert len(result.products) == 3

    def test_all_files_failing(self, tmp_path):
        result = CatalogMerger([CatalogFile("Missing", str(tmp_path / "missing.json"))]).merge()

        assert result.products == []
        assert len(result.errors) == 1
        assert not result.success

    def test_summary_counts(self, write_catalog, pen_catalog):
        result = CatalogMerger([write_catalog("Dyna Metal Pen Catalog", pen_catalog)], mode="enhanced").merge()

        summary = result.summary()

        assert summary["total_products"] == 3
        assert summary["categories"] == {"Metal Pen": 3}
        assert summary["subcategories"]["Metal Pen > Astral Series"] == 2


class TestCatalogOutputs:
    """Directory discovery and CSV writing."""

    def test_discover_deduplicates_copies(self, tmp_path):
        first, second = tmp_path / "one", tmp_path / "two"
        first.mkdir()
        second.mkdir()
        for directory in (first, second):
            (directory / "pens.json").write_text('[{"name": "Pen"}]', encoding="utf-8")
        (second / "soaps.json").write_text('[{"name": "Soap"}]', encoding="utf-8")

        files = discover_catalog_files([str(first), str(second), str(tmp_path / "absent")])

        assert sorted(f.name for f in files) == ["pens", "soaps"]
        assert all(f.variant == "enhanced" for f in files)

    def test_write_csv_outputs(self, write_catalog, pen_catalog, tmp_path):
        result = CatalogMerger([write_catalog("pens", pen_catalog)]).merge()
        output_dir = tmp_path / "csv-output"

        written = write_csv_outputs(result, str(output_dir))

        assert {Path(p).name for p in written} == {"pens-categorized.csv", "all-products-categorized.csv"}
        combined = (output_dir / "all-products-categorized.csv").read_text(encoding="utf-8")
        assert combined.startswith('"id","name","category"')
        assert "Astral Gold Pen" in combined
