"""Shared test fixtures for the catalog test suite."""

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from catalog.config import CatalogFile
from catalog.models import Product
from catalog.storage import SQLiteStorage


@pytest.fixture
def write_catalog(tmp_path: Path) -> Callable[[str, Any], CatalogFile]:
    """Write a catalog document to a temp JSON file and return its CatalogFile."""

    def _write(name: str, data: Any, variant: str = "standard") -> CatalogFile:
        path = tmp_path / f"{name}.json"
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return CatalogFile(name=name, path=str(path), variant=variant)

    return _write


@pytest.fixture
def pen_catalog():
    """Category list with nested products, like the metal pen supplier catalog."""
    return [
        {
            "category": "Astral Series",
            "description": "Premium metal pens",
            "products": [
                {"name": "Astral Gold Pen", "price": "199.50", "features": ["Metal body", "Gel ink"]},
                {"name": "Astral Silver Pen", "price": 149},
            ],
        },
        {
            "category": "Vertex Series",
            "products": [
                {"name": "Vertex Black", "in_stock": False},
            ],
        },
    ]


@pytest.fixture
def bucket_catalog():
    """Series with dimension variants, like the plasticware supplier catalog."""
    return [
        {
            "category": "Water Bucket",
            "series": [
                {
                    "name": "Super Bucket",
                    "variants": [
                        {"outer_dimension": "30x30", "inner_dimension": "28x28", "capacity_l": 10},
                        {"outer_dimension": "35x35", "inner_dimension": "33x33", "capacity_l": 16},
                    ],
                }
            ],
        }
    ]


@pytest.fixture
def storage(tmp_path: Path) -> SQLiteStorage:
    return SQLiteStorage(str(tmp_path / "store.db"))


@pytest.fixture
def sample_products():
    return [
        Product(id=1, name="Astral Gold Pen", category="Metal Pen", subcategory="Astral Series", price=199.5),
        Product(id=2, name="Pressure Cooker 3L", category="Kitchenware", subcategory="Pressure Cookers", price=1200),
        Product(id=3, name="Super Bucket - 30x30", category="Plasticware", in_stock=False),
    ]
