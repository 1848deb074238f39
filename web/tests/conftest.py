"""Shared test fixtures for the web test suite."""

import base64
import json
from pathlib import Path

import pytest

from catalog.config import CatalogFile
from catalog.csv_codec import encode_products
from catalog.merger import CatalogMerger
from catalog.models import Product
from catalog.storage import SQLiteStorage
from catalog.store import CategoryStore, ProductStore
from web.app import create_app


@pytest.fixture
def catalog_file(tmp_path: Path) -> CatalogFile:
    """A small supplier catalog used by refresh."""
    data = [
        {"category": "Astral Series", "products": [{"name": "Astral Gold Pen", "price": "199.50"}]},
        {"category": "Water Bucket", "products": [{"name": "Super Bucket 20L", "price": 120}]},
    ]
    path = tmp_path / "catalog.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return CatalogFile(name="Shivaya Catalog", path=str(path), variant="enhanced")


@pytest.fixture
def products():
    return [
        Product(
            id=1,
            name="Astral Gold Pen",
            category="Metal Pen",
            subcategory="Astral Series",
            description="Gold finish metal pen",
            price=199.5,
            series="Astral",
            material="Brass",
        ),
        Product(id=2, name="Pressure Cooker 3L", category="Kitchenware", subcategory="Pressure Cookers", price=1200),
        Product(
            id=3,
            name="Super Bucket - 30x30",
            category="Plasticware",
            in_stock=False,
            dimensions="30x30",
            extra={"capacity": 10},
        ),
    ]


@pytest.fixture
def storage(tmp_path: Path) -> SQLiteStorage:
    return SQLiteStorage(str(tmp_path / "store.db"))


@pytest.fixture
def app(storage, products, catalog_file, monkeypatch):
    """Flask app over a seeded SQLite store with admin auth disabled."""
    monkeypatch.delenv("ADMIN_USER", raising=False)
    monkeypatch.delenv("ADMIN_PASS", raising=False)

    storage.write("shivaya_products_csv", encode_products(products))
    store = ProductStore(storage, merger=CatalogMerger([catalog_file]), fallback_csv_files=[])
    app = create_app(store=store, category_store=CategoryStore(storage))
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    """Create Flask test client."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def admin_auth(monkeypatch):
    """Enable admin auth and return matching request headers."""
    monkeypatch.setenv("ADMIN_USER", "admin")
    monkeypatch.setenv("ADMIN_PASS", "secret")
    token = base64.b64encode(b"admin:secret").decode("ascii")
    return {"Authorization": f"Basic {token}"}
