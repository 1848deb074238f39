"""Supplier catalog normalization, CSV conversion and product storage."""

__version__ = "0.1.0"

# Re-export main components for convenient imports
from catalog.classifier import CategoryClassifier
from catalog.config import DATA_FILES, CatalogFile
from catalog.csv_codec import decode_products, encode_products
from catalog.errors import (
    CatalogError,
    CategoryNotFoundError,
    ProductNotFoundError,
    SourceError,
    StorageError,
    ValidationError,
)
from catalog.extractor import extract_records
from catalog.merger import CatalogMerger, MergeResult
from catalog.models import Category, Product
from catalog.normalizer import normalize_enhanced, normalize_product
from catalog.storage import S3Storage, SQLiteStorage, create_storage
from catalog.store import CategoryStore, ProductStore

__all__ = [
    # Version
    "__version__",
    # Config
    "DATA_FILES",
    "CatalogFile",
    # Models
    "Product",
    "Category",
    # Pipeline
    "extract_records",
    "normalize_product",
    "normalize_enhanced",
    "CategoryClassifier",
    "CatalogMerger",
    "MergeResult",
    "encode_products",
    "decode_products",
    # Persistence
    "SQLiteStorage",
    "S3Storage",
    "create_storage",
    "ProductStore",
    "CategoryStore",
    # Errors
    "CatalogError",
    "SourceError",
    "StorageError",
    "ProductNotFoundError",
    "CategoryNotFoundError",
    "ValidationError",
]
