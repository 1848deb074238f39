"""CSV encoding and decoding for product and category lists.

Encoded CSV always quotes every field, uses a comma delimiter and ``\\n``
line endings, and starts with a header row of canonical field names. Decoding
drops malformed rows with a warning instead of failing the whole parse.
"""

import csv
import io
import os
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

import pandas as pd

from catalog.config import CATEGORY_FIELDS, PRODUCT_FIELDS
from catalog.logging_config import get_logger
from catalog.models import Category, Product, coerce_scalar

__all__ = [
    "encode_products",
    "decode_products",
    "encode_categories",
    "decode_categories",
    "product_fieldnames",
    "write_csv_file",
    "read_csv_file",
]

logger = get_logger(__name__)


def _format_cell(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _encode_rows(fieldnames: Sequence[str], rows: Iterable[Dict[str, Any]]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=",", quotechar='"', quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow(fieldnames)
    for row in rows:
        writer.writerow([_format_cell(row.get(name)) for name in fieldnames])
    return buffer.getvalue()


def product_fieldnames(products: Iterable[Product]) -> List[str]:
    """Canonical columns followed by extra columns in first-seen order."""
    fieldnames = list(PRODUCT_FIELDS)
    for product in products:
        for key in product.extra:
            if key not in fieldnames:
                fieldnames.append(key)
    return fieldnames


def encode_products(products: Sequence[Product]) -> str:
    """Serialize products to CSV text."""
    return _encode_rows(product_fieldnames(products), (p.to_row() for p in products))


def encode_categories(categories: Sequence[Category]) -> str:
    return _encode_rows(CATEGORY_FIELDS, (c.to_row() for c in categories))


def _read_rows(text: str) -> List[Dict[str, Any]]:
    """Parse CSV text into row dicts of raw strings, None for empty cells."""
    if not text or not text.strip():
        return []

    # Overlong rows are dropped here, before pandas can read them as an index column
    records = [r for r in csv.reader(io.StringIO(text.lstrip("\ufeff"))) if any(cell.strip() for cell in r)]
    if not records:
        return []

    header, width = records[0], len(records[0])
    kept: List[List[str]] = []
    dropped: List[List[str]] = []
    for record in records[1:]:
        if len(record) > width:
            dropped.append(record)
            continue
        kept.append(record + [""] * (width - len(record)))

    if dropped:
        logger.warning("Dropped %d malformed CSV row(s)", len(dropped))
        for line in dropped[:5]:
            logger.debug("Malformed CSV row: %r", line)

    df = pd.DataFrame(kept, columns=header, dtype=str)

    rows: List[Dict[str, Any]] = []
    for record in df.to_dict(orient="records"):
        row = {
            str(key): (None if value is None or pd.isna(value) or value == "" else value)
            for key, value in record.items()
            if str(key).strip()
        }
        if all(value is None for value in row.values()):
            continue
        rows.append(row)
    return rows


def decode_products(text: str) -> List[Product]:
    """Parse CSV text into products.

    Canonical columns are coerced to their declared types; extra columns are
    typed permissively (numeric-looking strings become numbers). Rows without
    a name are skipped.
    """
    products: List[Product] = []
    for row in _read_rows(text):
        if not row.get("name"):
            logger.warning("Skipping CSV row without a name (id=%s)", row.get("id"))
            continue
        for key, value in row.items():
            if key not in PRODUCT_FIELDS and value is not None:
                row[key] = coerce_scalar(value)
        products.append(Product.from_row(row))
    return products


def decode_categories(text: str) -> List[Category]:
    return [Category.from_row(row) for row in _read_rows(text) if row.get("name")]


def write_csv_file(path: Union[str, Path], products: Sequence[Product]) -> str:
    """Write products to a UTF-8 CSV file, creating parent directories."""
    path = str(path)
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        f.write(encode_products(products))
    return path


def read_csv_file(path: Union[str, Path]) -> Optional[str]:
    """Read CSV text from disk; None when the file does not exist."""
    if not os.path.exists(path):
        return None
    with open(path, "r", encoding="utf-8") as f:
        return f.read()
