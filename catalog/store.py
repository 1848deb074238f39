"""In-memory product and category stores backed by a persisted CSV blob.

The store holds the authoritative product list for the storefront. It is
loaded from storage on first use and bootstrapped from pre-computed CSV files
or a fresh catalog merge when storage is empty. Every mutation re-encodes the
full list and overwrites the blob. The in-memory list is replaced only after
the write succeeds.
"""

import threading
from typing import Any, Dict, List, Mapping, Optional, Sequence

from catalog.config import (
    CATEGORIES_STORAGE_KEY,
    DEFAULT_CATEGORIES,
    FALLBACK_CSV_FILES,
    PRODUCTS_STORAGE_KEY,
)
from catalog.csv_codec import (
    decode_categories,
    decode_products,
    encode_categories,
    encode_products,
    read_csv_file,
)
from catalog.errors import (
    CategoryNotFoundError,
    ProductNotFoundError,
    StorageError,
    ValidationError,
)
from catalog.logging_config import CatalogEvent, get_logger, log_catalog_event
from catalog.merger import CatalogMerger
from catalog.models import Category, Product, now_iso
from catalog.storage import StorageBackend

__all__ = ["ProductStore", "CategoryStore"]

logger = get_logger(__name__)


def _next_id(items: Sequence[Any]) -> int:
    return max((item.id for item in items), default=0) + 1


class ProductStore:
    """Authoritative product list with CRUD, search and filtering."""

    def __init__(
        self,
        storage: StorageBackend,
        merger: Optional[CatalogMerger] = None,
        fallback_csv_files: Sequence[str] = tuple(FALLBACK_CSV_FILES),
        key: str = PRODUCTS_STORAGE_KEY,
    ):
        self.storage = storage
        self.merger = merger or CatalogMerger()
        self.fallback_csv_files = list(fallback_csv_files)
        self.key = key
        self.last_error: Optional[str] = None
        self._products: Optional[List[Product]] = None
        self._lock = threading.RLock()

    def reset(self) -> None:
        """Forget the in-memory list so the next access reloads from storage."""
        with self._lock:
            self._products = None
            self.last_error = None

    # ---------- LOADING ----------

    def _load_from_sources(self) -> List[Product]:
        for path in self.fallback_csv_files:
            csv_text = read_csv_file(path)
            if not csv_text:
                continue
            products = decode_products(csv_text)
            if products:
                logger.info("Loaded %d products from %s", len(products), path)
                return products
            logger.warning("Pre-computed CSV %s contains no products", path)

        logger.info("No pre-computed CSV available, converting from JSON catalogs")
        result = self.merger.merge()
        if result.errors:
            logger.warning("Catalog conversion finished with %d error(s)", len(result.errors))
        return result.products

    def _bootstrap(self) -> bool:
        existing = self.storage.read(self.key)
        if existing and existing.strip():
            products = decode_products(existing)
            if products:
                logger.info("Using persisted catalog with %d products", len(products))
                self._products = products
                return True
            logger.warning("Persisted catalog is invalid, refreshing")
            self.storage.delete(self.key)

        products = self._load_from_sources()
        if not products:
            self.last_error = "No product data available"
            logger.error("Failed to load or convert product data")
            self._products = []
            return False

        try:
            self._persist(products)
        except StorageError as e:
            # Serve the loaded catalog from memory; the next successful mutation persists it
            self._products = products
            self.last_error = f"Catalog loaded but not saved: {e}"
            logger.error("Failed to persist bootstrapped catalog: %s", e)
            return True

        logger.info("Product store initialized with %d products", len(products))
        return True

    def _ensure_loaded(self) -> List[Product]:
        if self._products is None:
            with self._lock:
                if self._products is None:
                    self._bootstrap()
        return self._products  # type: ignore[return-value]

    def initialize(self) -> bool:
        """Load the catalog, bootstrapping storage if needed.

        Returns:
            True when a non-empty catalog is available.
        """
        try:
            return bool(self._ensure_loaded())
        except StorageError as e:
            self.last_error = str(e)
            logger.error("Error initializing product store: %s", e)
            return False

    def _persist(self, products: List[Product]) -> None:
        self.storage.write(self.key, encode_products(products))
        self._products = products
        log_catalog_event(
            CatalogEvent.STORE_PERSISTED,
            {"message": f"Persisted {len(products)} products", "key": self.key, "products": len(products)},
        )

    # ---------- READS ----------

    def get_all(self) -> List[Product]:
        """All products; an unreadable store yields an empty list."""
        try:
            return list(self._ensure_loaded())
        except StorageError as e:
            self.last_error = str(e)
            logger.error("Failed to load products, returning empty list: %s", e)
            return []

    def get(self, product_id: int) -> Optional[Product]:
        return next((p for p in self.get_all() if p.id == product_id), None)

    def search(self, query: str) -> List[Product]:
        """Case-insensitive substring match on name, description, category and subcategory."""
        products = self.get_all()
        needle = (query or "").strip().lower()
        if not needle:
            return products
        return [
            p
            for p in products
            if needle in p.name.lower()
            or needle in p.description.lower()
            or needle in p.category.lower()
            or needle in (p.subcategory or "").lower()
        ]

    def filter(
        self,
        products: Optional[List[Product]] = None,
        category: Optional[str] = None,
        subcategory: Optional[str] = None,
        in_stock: Optional[bool] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
    ) -> List[Product]:
        """Narrow ``products`` (default: all) by exact category fields, stock and price range.

        Products without a price are excluded once a price bound is given.
        """
        result = self.get_all() if products is None else products
        if category:
            result = [p for p in result if p.category == category]
        if subcategory:
            result = [p for p in result if p.subcategory == subcategory]
        if in_stock is not None:
            result = [p for p in result if p.in_stock == in_stock]
        if min_price is not None:
            result = [p for p in result if p.price is not None and p.price >= min_price]
        if max_price is not None:
            result = [p for p in result if p.price is not None and p.price <= max_price]
        return result

    def by_category(self, category: str) -> List[Product]:
        return [p for p in self.get_all() if p.category == category]

    def categories(self) -> List[str]:
        return sorted({p.category for p in self.get_all()})

    def last_saved(self) -> Optional[str]:
        try:
            return self.storage.timestamp(self.key)
        except StorageError as e:
            logger.warning("Could not read save timestamp: %s", e)
            return None

    def stats(self) -> Dict[str, Any]:
        products = self.get_all()
        by_category: Dict[str, int] = {}
        for product in products:
            by_category[product.category] = by_category.get(product.category, 0) + 1
        return {
            "total_products": len(products),
            "total_categories": len(by_category),
            "last_updated": self.last_saved(),
            "products_by_category": by_category,
        }

    def export_csv(self) -> str:
        return encode_products(self.get_all())

    # ---------- MUTATIONS ----------

    def create(self, data: Mapping[str, Any]) -> Product:
        """Add a product with id ``max(existing ids) + 1``.

        Raises:
            ValidationError: No product name was given.
            StorageError: The updated catalog could not be persisted.
        """
        with self._lock:
            products = list(self._ensure_loaded())
            now = now_iso()
            row = {k: v for k, v in data.items() if k not in ("id", "created_at", "updated_at")}
            product = Product.from_row({**row, "id": _next_id(products), "created_at": now, "updated_at": now})
            if not product.name.strip():
                raise ValidationError("Product name is required")

            self._persist(products + [product])

        logger.info("Created product with ID %d", product.id)
        return product

    def update(self, product_id: int, changes: Mapping[str, Any]) -> Product:
        """Apply ``changes`` to a product, keeping its id and refreshing ``updated_at``.

        Raises:
            ProductNotFoundError: No product has this id.
        """
        with self._lock:
            products = list(self._ensure_loaded())
            index = next((i for i, p in enumerate(products) if p.id == product_id), None)
            if index is None:
                raise ProductNotFoundError(product_id)

            updated = products[index].replace({**changes, "id": product_id, "updated_at": now_iso()})
            if not updated.name.strip():
                raise ValidationError("Product name is required")

            products[index] = updated
            self._persist(products)

        logger.info("Updated product with ID %d", product_id)
        return updated

    def delete(self, product_id: int) -> None:
        """Remove a product.

        Raises:
            ProductNotFoundError: No product has this id; nothing is changed.
        """
        with self._lock:
            products = self._ensure_loaded()
            remaining = [p for p in products if p.id != product_id]
            if len(remaining) == len(products):
                raise ProductNotFoundError(product_id)

            self._persist(remaining)

        logger.info("Deleted product with ID %d", product_id)

    def import_csv(self, csv_text: str, replace_existing: bool = False) -> int:
        """Bulk import products from CSV; imported rows get fresh ids.

        Returns:
            Number of products imported.
        """
        incoming = decode_products(csv_text)
        if not incoming:
            raise ValidationError("No valid products found in CSV data")

        with self._lock:
            existing = [] if replace_existing else list(self._ensure_loaded())
            start = _next_id(existing)
            now = now_iso()
            imported = [
                product.replace({"id": start + offset, "created_at": product.created_at or now, "updated_at": now})
                for offset, product in enumerate(incoming)
            ]

            self._persist(existing + imported)

        logger.info("Imported %d products", len(imported))
        return len(imported)

    def refresh(self) -> bool:
        """Re-run the catalog merge and overwrite the stored list.

        Returns:
            False (leaving the store untouched) when the merge produced nothing.
        """
        result = self.merger.merge()
        if not result.products:
            self.last_error = "; ".join(result.errors) or "No products found in any catalog files"
            logger.error("Failed to refresh catalog: %s", self.last_error)
            return False

        with self._lock:
            self._persist(result.products)
            self.last_error = None
        logger.info("Catalog refreshed with %d products", len(result.products))
        return True


class CategoryStore:
    """Admin category list persisted as its own CSV blob.

    Seeded with the default categories the first time storage is empty.
    """

    def __init__(self, storage: StorageBackend, key: str = CATEGORIES_STORAGE_KEY):
        self.storage = storage
        self.key = key
        self._categories: Optional[List[Category]] = None

    def _ensure_loaded(self) -> List[Category]:
        if self._categories is None:
            existing = self.storage.read(self.key)
            categories = decode_categories(existing) if existing else []
            if not categories:
                now = now_iso()
                categories = [
                    Category(id=i, created_at=now, updated_at=now, **seed)
                    for i, seed in enumerate(DEFAULT_CATEGORIES, start=1)
                ]
                self._persist(categories)
            self._categories = categories
        return self._categories

    def _persist(self, categories: List[Category]) -> None:
        self.storage.write(self.key, encode_categories(categories))
        self._categories = categories

    def get_all(self) -> List[Category]:
        return list(self._ensure_loaded())

    def get(self, category_id: int) -> Category:
        for category in self._ensure_loaded():
            if category.id == category_id:
                return category
        raise CategoryNotFoundError(category_id)

    def create(self, data: Mapping[str, Any]) -> Category:
        categories = list(self._ensure_loaded())
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValidationError("Category name is required")
        now = now_iso()
        category = Category(
            id=_next_id(categories),
            name=name,
            description=str(data.get("description") or ""),
            icon=str(data.get("icon") or ""),
            created_at=now,
            updated_at=now,
        )
        self._persist(categories + [category])
        return category

    def update(self, category_id: int, changes: Mapping[str, Any]) -> Category:
        categories = list(self._ensure_loaded())
        index = next((i for i, c in enumerate(categories) if c.id == category_id), None)
        if index is None:
            raise CategoryNotFoundError(category_id)

        row = categories[index].to_row()
        row.update({k: v for k, v in changes.items() if k in ("name", "description", "icon")})
        row.update(id=category_id, updated_at=now_iso())
        updated = Category.from_row(row)
        if not updated.name.strip():
            raise ValidationError("Category name is required")

        categories[index] = updated
        self._persist(categories)
        return updated

    def delete(self, category_id: int) -> None:
        categories = self._ensure_loaded()
        remaining = [c for c in categories if c.id != category_id]
        if len(remaining) == len(categories):
            raise CategoryNotFoundError(category_id)
        self._persist(remaining)
