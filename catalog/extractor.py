"""Flatten supplier catalog JSON of unknown shape into candidate product records.

Supplier catalogs arrive in a handful of layouts:

- a flat list of products
- a list of categories, each with a ``products`` list
- a list of categories, each with ``subcategories`` holding ``products``
- a list of categories, each with a ``series`` list holding dimension ``variants``
- a single object with a ``products`` list
- a single product object
- an object keyed by category name

The document is classified once up front into a ``DocumentShape`` (and each
list member into an ``ElementShape``); emission then dispatches on those
tags. An unknown shape yields no records.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from catalog.config import UNCATEGORIZED
from catalog.logging_config import get_logger

__all__ = [
    "DocumentShape",
    "ElementShape",
    "ExtractedRecord",
    "classify_document",
    "classify_element",
    "extract_records",
    "looks_like_product",
]

logger = get_logger(__name__)

NAME_KEYS = ("name", "product_name", "title")


class DocumentShape(Enum):
    SEQUENCE = "sequence"
    WRAPPED_PRODUCTS = "wrapped_products"
    SINGLE_PRODUCT = "single_product"
    KEYED_CATEGORIES = "keyed_categories"
    UNKNOWN = "unknown"


class ElementShape(Enum):
    CATEGORY_WITH_PRODUCTS = "category_with_products"
    CATEGORY_WITH_SUBCATEGORIES = "category_with_subcategories"
    CATEGORY_WITH_SERIES = "category_with_series"
    PRODUCT = "product"
    INVALID = "invalid"


@dataclass
class ExtractedRecord:
    """One raw product candidate with the context it was found in.

    ``context`` is the enclosing container (category or series object) with
    its product lists removed; the enhanced normalizer reads series, brand
    and description hints from it.
    """

    raw: Dict[str, Any]
    category: Optional[str] = None
    subcategory: Optional[str] = None
    context: Dict[str, Any] = field(default_factory=dict)


def _is_list(value: Any) -> bool:
    return isinstance(value, list)


def looks_like_product(data: Dict[str, Any]) -> bool:
    return any(data.get(key) for key in NAME_KEYS)


def classify_document(data: Any) -> DocumentShape:
    if isinstance(data, list):
        return DocumentShape.SEQUENCE
    if isinstance(data, dict):
        if _is_list(data.get("products")):
            return DocumentShape.WRAPPED_PRODUCTS
        if looks_like_product(data):
            return DocumentShape.SINGLE_PRODUCT
        return DocumentShape.KEYED_CATEGORIES
    return DocumentShape.UNKNOWN


def classify_element(item: Any) -> ElementShape:
    if not isinstance(item, dict):
        return ElementShape.INVALID
    if _is_list(item.get("products")):
        return ElementShape.CATEGORY_WITH_PRODUCTS
    if _is_list(item.get("subcategories")):
        return ElementShape.CATEGORY_WITH_SUBCATEGORIES
    series = item.get("series")
    if _is_list(series) and any(isinstance(s, dict) and _is_list(s.get("variants")) for s in series):
        return ElementShape.CATEGORY_WITH_SERIES
    return ElementShape.PRODUCT


def _container_label(container: Dict[str, Any], *keys: str, default: Optional[str] = None) -> Optional[str]:
    for key in keys:
        value = container.get(key)
        if isinstance(value, str) and value.strip():
            return value
    return default


def _context_of(container: Dict[str, Any]) -> Dict[str, Any]:
    return {
        k: v
        for k, v in container.items()
        if k not in ("products", "subcategories") and not (k == "series" and _is_list(v))
    }


def _expand_product_group(
    product: Dict[str, Any],
    category: Optional[str],
    subcategory: Optional[str],
    context: Dict[str, Any],
) -> List[ExtractedRecord]:
    """Expand a product group listing plain-string ``variants`` into one record per variant."""
    variants = product.get("variants")
    if _is_list(variants) and variants and all(isinstance(v, str) for v in variants):
        if not looks_like_product(product):
            return [
                ExtractedRecord(
                    raw={
                        "name": variant,
                        "series": product.get("series", ""),
                        "features": product.get("features", ""),
                    },
                    category=category,
                    subcategory=subcategory,
                    context=context,
                )
                for variant in variants
            ]
    return [ExtractedRecord(raw=product, category=category, subcategory=subcategory, context=context)]


def _emit_products(
    products: List[Any],
    category: Optional[str],
    subcategory: Optional[str],
    context: Dict[str, Any],
) -> List[ExtractedRecord]:
    records: List[ExtractedRecord] = []
    for product in products:
        if not isinstance(product, dict):
            logger.debug("Skipping non-object product entry: %r", product)
            continue
        records.extend(_expand_product_group(product, category, subcategory, context))
    return records


# ---------- ELEMENT EMITTERS ----------


def _emit_category_with_products(item: Dict[str, Any]) -> List[ExtractedRecord]:
    category = _container_label(item, "category", "name", default=UNCATEGORIZED)
    return _emit_products(item["products"], category, None, _context_of(item))


def _emit_category_with_subcategories(item: Dict[str, Any]) -> List[ExtractedRecord]:
    category = _container_label(item, "category", "name", default=UNCATEGORIZED)
    records: List[ExtractedRecord] = []
    for sub in item["subcategories"]:
        if not isinstance(sub, dict) or not _is_list(sub.get("products")):
            continue
        subcategory = _container_label(sub, "name", "subcategory", default="")
        context = {**_context_of(item), **_context_of(sub)}
        records.extend(_emit_products(sub["products"], category, subcategory, context))
    return records


def _emit_category_with_series(item: Dict[str, Any]) -> List[ExtractedRecord]:
    category = _container_label(item, "category", "name", default=UNCATEGORIZED)
    context = _context_of(item)
    records: List[ExtractedRecord] = []
    for series in item["series"]:
        if not isinstance(series, dict) or not _is_list(series.get("variants")):
            continue
        series_name = _container_label(series, "name", "series", default="")
        for variant in series["variants"]:
            if not isinstance(variant, dict):
                continue
            outer = variant.get("outer_dimension", "")
            records.append(
                ExtractedRecord(
                    raw={
                        "name": f"{series_name} - {outer}" if outer else series_name,
                        "outer_dimension": outer,
                        "inner_dimension": variant.get("inner_dimension", ""),
                        "capacity_l": variant.get("capacity_l"),
                        "series": series_name,
                    },
                    category=category,
                    context=context,
                )
            )
    return records


def _emit_single(item: Dict[str, Any]) -> List[ExtractedRecord]:
    return _expand_product_group(item, None, None, {})


def _emit_invalid(item: Any) -> List[ExtractedRecord]:
    logger.debug("Skipping non-object catalog element: %r", item)
    return []


_ELEMENT_EMITTERS: Dict[ElementShape, Callable[[Any], List[ExtractedRecord]]] = {
    ElementShape.CATEGORY_WITH_PRODUCTS: _emit_category_with_products,
    ElementShape.CATEGORY_WITH_SUBCATEGORIES: _emit_category_with_subcategories,
    ElementShape.CATEGORY_WITH_SERIES: _emit_category_with_series,
    ElementShape.PRODUCT: _emit_single,
    ElementShape.INVALID: _emit_invalid,
}


# ---------- DOCUMENT EMITTERS ----------


def _emit_sequence(data: List[Any]) -> List[ExtractedRecord]:
    records: List[ExtractedRecord] = []
    for item in data:
        records.extend(_ELEMENT_EMITTERS[classify_element(item)](item))
    return records


def _emit_wrapped(data: Dict[str, Any]) -> List[ExtractedRecord]:
    category = _container_label(data, "category", "name", default=UNCATEGORIZED)
    return _emit_products(data["products"], category, None, _context_of(data))


def _emit_keyed(data: Dict[str, Any]) -> List[ExtractedRecord]:
    records: List[ExtractedRecord] = []
    for key, value in data.items():
        context = {"category": key}
        if _is_list(value):
            records.extend(_emit_products(value, key, None, context))
        elif isinstance(value, dict):
            records.append(ExtractedRecord(raw=value, category=key, context=context))
    return records


def _emit_nothing(data: Any) -> List[ExtractedRecord]:
    return []


_DOCUMENT_EMITTERS: Dict[DocumentShape, Callable[[Any], List[ExtractedRecord]]] = {
    DocumentShape.SEQUENCE: _emit_sequence,
    DocumentShape.WRAPPED_PRODUCTS: _emit_wrapped,
    DocumentShape.SINGLE_PRODUCT: _emit_single,
    DocumentShape.KEYED_CATEGORIES: _emit_keyed,
    DocumentShape.UNKNOWN: _emit_nothing,
}


def extract_records(data: Any, file_name: str = "") -> List[ExtractedRecord]:
    """Walk a parsed catalog document and return its raw product records.

    Args:
        data: Parsed JSON value of any shape.
        file_name: Originating file name, used for logging only.

    Returns:
        Records in document order, each tagged with its inherited
        category/subcategory context.
    """
    shape = classify_document(data)
    records = _DOCUMENT_EMITTERS[shape](data)
    logger.debug("Extracted %d records from %s (shape: %s)", len(records), file_name or "<data>", shape.value)
    return records
