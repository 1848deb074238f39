"""Exception types for the catalog pipeline and product store."""

__all__ = [
    "CatalogError",
    "SourceError",
    "StorageError",
    "ProductNotFoundError",
    "CategoryNotFoundError",
    "ValidationError",
]


class CatalogError(Exception):
    """Base class for catalog errors."""


class SourceError(CatalogError):
    """A catalog source file could not be read or parsed."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class StorageError(CatalogError):
    """The persisted catalog blob could not be read or written."""


class ProductNotFoundError(CatalogError, LookupError):
    def __init__(self, product_id: int):
        super().__init__(f"Product with ID {product_id} not found")
        self.product_id = product_id


class CategoryNotFoundError(CatalogError, LookupError):
    def __init__(self, category_id: int):
        super().__init__(f"Category with ID {category_id} not found")
        self.category_id = category_id


class ValidationError(CatalogError, ValueError):
    """User-supplied data was rejected."""
