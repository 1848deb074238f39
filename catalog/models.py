"""Data models for catalog products and admin categories."""

import json
import math
import re
from dataclasses import dataclass, field, fields
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from catalog.config import PRODUCT_FIELDS, UNCATEGORIZED

__all__ = [
    "Product",
    "Category",
    "now_iso",
    "parse_price",
    "coerce_in_stock",
    "coerce_scalar",
    "join_features",
    "text",
]

_LEADING_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")
_INT_LITERAL = re.compile(r"^[+-]?\d+$")
_FLOAT_LITERAL = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")
_FALSE_STRINGS = {"", "false", "0", "no", "n", "off"}


def now_iso() -> str:
    """Current UTC time as an ISO-8601 string with millisecond precision."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_price(value: Any) -> Optional[float]:
    """Parse a price from a number or string.

    Strings are read like ``parseFloat``: the leading numeric part counts and
    anything after it is ignored. Returns None when absent or unparsable.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
        return number if math.isfinite(number) else None
    if isinstance(value, str):
        match = _LEADING_NUMBER.match(value)
        if not match:
            return None
        number = float(match.group(1))
        return number if math.isfinite(number) else None
    return None


def coerce_in_stock(value: Any) -> bool:
    """Coerce an ``in_stock`` value to bool.

    Only an absent value defaults to True. A present value keeps its boolean
    meaning, so ``0``, ``""`` and ``"false"`` are all False.
    """
    if value is None:
        return True
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return not (value == 0 or (isinstance(value, float) and math.isnan(value)))
    if isinstance(value, str):
        return value.strip().lower() not in _FALSE_STRINGS
    return bool(value)


def join_features(value: Any) -> str:
    """Flatten a features list into one comma-separated string."""
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return ", ".join(text(item) for item in value if item is not None)
    return text(value)


def text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def coerce_scalar(value: Any) -> Any:
    """Permissive typing for free-form columns.

    Numeric-looking strings become numbers and "true"/"false" become bools.
    Lists are comma-joined and mappings are stored as JSON text.
    """
    if value is None:
        return ""
    if isinstance(value, (bool, int)):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else ""
    if isinstance(value, (list, tuple)):
        return join_features(value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False)

    s = str(value)
    lowered = s.strip().lower()
    if lowered == "true":
        return True
    if lowered == "false":
        return False
    if _INT_LITERAL.match(s):
        return int(s)
    if _FLOAT_LITERAL.match(s):
        number = float(s)
        return number if math.isfinite(number) else s
    return s


def _to_int(value: Any) -> int:
    if isinstance(value, bool) or value is None:
        return 0
    if isinstance(value, int):
        return value
    number = parse_price(value)
    return int(number) if number is not None else 0


@dataclass
class Product:
    """A normalized catalog product.

    ``id`` is only unique within one merged snapshot; re-running the merge
    reassigns ids. Columns beyond the canonical set (enhanced conversion
    fields such as ``capacity``) live in ``extra``.
    """

    name: str
    id: int = 0
    category: str = UNCATEGORIZED
    subcategory: str = ""
    description: str = ""
    price: Optional[float] = None
    image_url: str = ""
    in_stock: bool = True
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    # Free-form descriptive fields
    brand: str = ""
    series: str = ""
    material: str = ""
    features: str = ""
    specifications: str = ""
    dimensions: str = ""
    weight: str = ""
    color: str = ""
    model: str = ""
    sku: str = ""

    extra: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Empty extras are dropped so a missing column and a blank cell compare equal
        coerced = {
            key: coerce_scalar(value)
            for key, value in self.extra.items()
            if key not in PRODUCT_FIELDS and key != "extra"
        }
        self.extra = {key: value for key, value in coerced.items() if value != ""}

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Product":
        """Build a Product from a flat mapping such as a CSV row or form data.

        Canonical columns are coerced to their declared types; anything else
        goes to ``extra``.
        """
        created = text(row.get("created_at")) or now_iso()
        return cls(
            id=_to_int(row.get("id")),
            name=text(row.get("name")),
            category=text(row.get("category")) or UNCATEGORIZED,
            subcategory=text(row.get("subcategory")),
            description=text(row.get("description")),
            price=parse_price(row.get("price")),
            image_url=text(row.get("image_url")),
            in_stock=coerce_in_stock(row.get("in_stock")),
            created_at=created,
            updated_at=text(row.get("updated_at")) or created,
            brand=text(row.get("brand")),
            series=text(row.get("series")),
            material=text(row.get("material")),
            features=join_features(row.get("features")),
            specifications=text(row.get("specifications")),
            dimensions=text(row.get("dimensions")),
            weight=text(row.get("weight")),
            color=text(row.get("color")),
            model=text(row.get("model")),
            sku=text(row.get("sku")),
            extra={k: v for k, v in row.items() if k not in PRODUCT_FIELDS},
        )

    def to_row(self) -> Dict[str, Any]:
        """Flatten into a dict in canonical column order, extras last."""
        row = {name: getattr(self, name) for name in PRODUCT_FIELDS}
        row.update(self.extra)
        return row

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation used by the web API."""
        return self.to_row()

    def replace(self, changes: Mapping[str, Any]) -> "Product":
        """Return a copy with ``changes`` applied through the same coercions as ``from_row``."""
        row = self.to_row()
        row.update(changes)
        return Product.from_row(row)


@dataclass
class Category:
    """Admin-facing category tag.

    Kept independently of the free-text ``Product.category`` strings.
    """

    id: int
    name: str
    description: str = ""
    icon: str = ""
    created_at: str = field(default_factory=now_iso)
    updated_at: str = field(default_factory=now_iso)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Category":
        created = text(row.get("created_at")) or now_iso()
        return cls(
            id=_to_int(row.get("id")),
            name=text(row.get("name")),
            description=text(row.get("description")),
            icon=text(row.get("icon")),
            created_at=created,
            updated_at=text(row.get("updated_at")) or created,
        )

    def to_row(self) -> Dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
