"""Map raw supplier records onto the canonical Product schema."""

from typing import Any, Dict, Optional

from catalog.classifier import CategoryClassifier, default_classifier
from catalog.config import DEFAULT_BRAND, UNCATEGORIZED
from catalog.extractor import ExtractedRecord
from catalog.logging_config import get_logger
from catalog.models import (
    Product,
    coerce_in_stock,
    join_features,
    now_iso,
    parse_price,
    text,
)

__all__ = ["resolve_name", "normalize_product", "normalize_enhanced", "normalize_record"]

logger = get_logger(__name__)


def _first(*values: Any) -> str:
    """First value that is non-empty after conversion to text."""
    for value in values:
        s = text(value).strip()
        if s:
            return text(value)
    return ""


def resolve_name(raw: Dict[str, Any]) -> str:
    return _first(raw.get("name"), raw.get("product_name"), raw.get("title"))


def _construct_name(raw: Dict[str, Any], context: Dict[str, Any], category_context: str) -> str:
    """Build a display name for records that carry none (enhanced path)."""
    series = _first(raw.get("series"))
    context_series = _first(context.get("series"))
    model = _first(raw.get("model"))
    dimensions = _first(raw.get("dimensions"), raw.get("outer_dimension"))
    capacity = _first(raw.get("capacity_l"))

    if series and model:
        return f"{series} {model}"
    if context_series and model:
        return f"{context_series} {model}"
    if dimensions:
        return f"{category_context or 'Product'} {dimensions}"
    if capacity:
        return f"{category_context or 'Container'} {capacity}L"
    return series or context_series


def normalize_product(
    raw: Dict[str, Any],
    category_override: Optional[str] = None,
    subcategory_override: Optional[str] = None,
) -> Optional[Product]:
    """Normalize one raw record (standard path).

    Returns None when the record has no ``name``, ``product_name`` or
    ``title``; such records are filtered out, not defaulted.
    """
    name = resolve_name(raw)
    if not name:
        return None

    now = now_iso()
    return Product(
        id=0,
        name=name,
        category=_first(category_override, raw.get("category")) or UNCATEGORIZED,
        subcategory=_first(subcategory_override, raw.get("subcategory"), raw.get("sub_category")),
        description=_first(raw.get("description"), raw.get("desc")),
        price=parse_price(raw.get("price")),
        image_url=_first(raw.get("image_url"), raw.get("image"), raw.get("img")),
        in_stock=coerce_in_stock(raw.get("in_stock")),
        created_at=_first(raw.get("created_at")) or now,
        updated_at=_first(raw.get("updated_at")) or now,
        brand=_first(raw.get("brand")),
        series=_first(raw.get("series")),
        material=_first(raw.get("material")),
        features=join_features(raw.get("features")),
        specifications=_first(raw.get("specifications")),
        dimensions=_first(raw.get("dimensions")),
        weight=_first(raw.get("weight")),
        color=_first(raw.get("color")),
        model=_first(raw.get("model")),
        sku=_first(raw.get("sku"), raw.get("code")),
    )


def normalize_enhanced(
    record: ExtractedRecord,
    file_name: str,
    classifier: Optional[CategoryClassifier] = None,
) -> Optional[Product]:
    """Normalize one extracted record with classification and synthesized fields.

    Names fall back to ones constructed from series, model, dimensions or
    capacity. The top-level category always comes from the classifier, and
    description, brand and features are filled from the enclosing container
    when the record lacks them.
    """
    classifier = classifier or default_classifier()
    raw, context = record.raw, record.context

    inherited = record.category if record.category and record.category != UNCATEGORIZED else None
    category_context = _first(inherited, context.get("category"), raw.get("category"), context.get("series"))
    series_context = _first(context.get("series"), raw.get("series"))

    name = resolve_name(raw) or _construct_name(raw, context, category_context)
    if not name:
        logger.debug("Skipping record without a resolvable name in %s", file_name)
        return None

    origin = series_context or category_context
    variants = raw.get("variants")
    now = now_iso()
    model = _first(raw.get("model"), raw.get("code"))

    return Product(
        id=0,
        name=name,
        category=classifier.main_category(name, category_context, series_context, file_name),
        subcategory=classifier.subcategory(
            name, _first(record.subcategory, category_context), series_context
        ),
        description=_first(raw.get("description"), context.get("description"))
        or (f"{name} from {origin}" if origin else name),
        price=parse_price(raw.get("price")),
        image_url=_first(raw.get("image_url"), raw.get("image"), raw.get("img")),
        in_stock=coerce_in_stock(raw.get("in_stock")),
        created_at=_first(raw.get("created_at")) or now,
        updated_at=_first(raw.get("updated_at")) or now,
        brand=_first(raw.get("brand"), context.get("brand")) or DEFAULT_BRAND,
        series=series_context,
        material=_first(raw.get("material"), context.get("material")),
        features=join_features(raw.get("features")) or join_features(context.get("features")),
        specifications=_first(raw.get("specifications"), context.get("specifications")),
        dimensions=_first(raw.get("dimensions"), raw.get("outer_dimension"), raw.get("inner_dimension")),
        weight=_first(raw.get("weight")),
        color=_first(raw.get("color")),
        model=model,
        sku=_first(raw.get("sku"), model),
        extra={
            "capacity": raw.get("capacity_l") if raw.get("capacity_l") is not None else raw.get("capacity"),
            "variants": join_features(variants) if variants else "",
        },
    )


def normalize_record(
    record: ExtractedRecord,
    mode: str = "standard",
    file_name: str = "",
    classifier: Optional[CategoryClassifier] = None,
) -> Optional[Product]:
    """Normalize an extracted record using the given conversion mode."""
    if mode == "enhanced":
        return normalize_enhanced(record, file_name, classifier)
    return normalize_product(record.raw, record.category, record.subcategory)
