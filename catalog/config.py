"""Configuration and constants for the catalog pipeline."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Tuple

__all__ = [
    "PROJECT_ROOT",
    "CatalogFile",
    "DATA_FILES",
    "CATALOG_DIRS",
    "OUTPUT_DIR",
    "COMBINED_CSV_NAME",
    "FALLBACK_CSV_FILES",
    "REQUEST_TIMEOUT",
    "PRODUCT_FIELDS",
    "ENHANCED_FIELDS",
    "CATEGORY_FIELDS",
    "UNCATEGORIZED",
    "DEFAULT_BRAND",
    "MAIN_CATEGORIES",
    "OTHER_CATEGORY",
    "CATEGORY_RULES",
    "FILE_CATEGORY_FALLBACKS",
    "SUBCATEGORY_MAPPING",
    "DEFAULT_CATEGORIES",
    "STORAGE_BACKEND",
    "STORE_DB_PATH",
    "PRODUCTS_STORAGE_KEY",
    "CATEGORIES_STORAGE_KEY",
    "S3_BUCKET",
    "S3_PREFIX",
    "AWS_REGION",
]

PROJECT_ROOT = Path(__file__).resolve().parent.parent


@dataclass(frozen=True)
class CatalogFile:
    """A known supplier catalog file.

    ``path`` is either a local filesystem path or an http(s) URL.
    ``variant`` selects the extraction path: "standard" or "enhanced".
    """

    name: str
    path: str
    variant: str = "standard"


# =============================================================================
# Catalog sources
# =============================================================================

_CATALOG_DIR = PROJECT_ROOT / "data" / "product-catalog"

DATA_FILES: List[CatalogFile] = [
    CatalogFile("Dyna Metal Pen Catalog", str(_CATALOG_DIR / "Dyna Metal Pen Catalog.json")),
    CatalogFile("HouseHold Products", str(_CATALOG_DIR / "HouseHold Products.json")),
    CatalogFile(
        "OJAS Kitchen World Catalogue",
        str(_CATALOG_DIR / "OJAS Kitchen World Catalogue Products List .json"),
    ),
    CatalogFile("Saran Enterprises Catalog", str(_CATALOG_DIR / "Saran Enterprises catalog.json")),
    CatalogFile("Other Products", str(_CATALOG_DIR / "other.json")),
    CatalogFile("Products 1", str(PROJECT_ROOT / "data" / "products1.json")),
    CatalogFile("Products 2", str(PROJECT_ROOT / "data" / "products2.json")),
]

# Directories scanned by directory discovery (enhanced conversion)
CATALOG_DIRS: List[str] = [
    str(_CATALOG_DIR),
    str(PROJECT_ROOT / "data"),
]

OUTPUT_DIR = os.getenv("CATALOG_OUTPUT_DIR", str(PROJECT_ROOT / "csv-output"))
COMBINED_CSV_NAME = "all-products-categorized.csv"

# Pre-computed CSV files tried in order before re-running the merge on cold start
FALLBACK_CSV_FILES: List[str] = [
    str(Path(OUTPUT_DIR) / "all-products-complete.csv"),
    str(Path(OUTPUT_DIR) / COMBINED_CSV_NAME),
    str(Path(OUTPUT_DIR) / "all-products-converted.csv"),
]

# HTTP timeout for catalogs fetched by URL (seconds)
REQUEST_TIMEOUT = int(os.getenv("CATALOG_REQUEST_TIMEOUT", "15"))


# =============================================================================
# CSV columns
# =============================================================================

PRODUCT_FIELDS: Tuple[str, ...] = (
    "id",
    "name",
    "category",
    "subcategory",
    "description",
    "price",
    "image_url",
    "in_stock",
    "created_at",
    "updated_at",
    "brand",
    "series",
    "material",
    "features",
    "specifications",
    "dimensions",
    "weight",
    "color",
    "model",
    "sku",
)

# Appended after PRODUCT_FIELDS by the enhanced conversion
ENHANCED_FIELDS: Tuple[str, ...] = ("capacity", "variants", "source_ref")

CATEGORY_FIELDS: Tuple[str, ...] = ("id", "name", "description", "icon", "created_at", "updated_at")


# =============================================================================
# Classification tables
# =============================================================================

UNCATEGORIZED = "Uncategorized"
DEFAULT_BRAND = os.getenv("CATALOG_DEFAULT_BRAND", "Shivaya")

MAIN_CATEGORIES: Dict[str, str] = {
    "METAL_PEN": "Metal Pen",
    "KITCHENWARE": "Kitchenware",
    "HOUSEHOLD": "Household",
    "PLASTICWARE": "Plasticware",
    "OTHER": "Other",
}
OTHER_CATEGORY = MAIN_CATEGORIES["OTHER"]

# Ordered: the first category with a matching keyword wins
CATEGORY_RULES: List[Tuple[str, List[str]]] = [
    (
        MAIN_CATEGORIES["METAL_PEN"],
        ["pen", "metal pen", "astral", "vertex", "dyna", "writing", "ballpoint", "gel pen"],
    ),
    (
        MAIN_CATEGORIES["KITCHENWARE"],
        [
            "kitchen", "cookware", "pressure cooker", "gas stove", "dinner set", "masala box",
            "roti box", "lemon set", "jug", "glass cover", "barbeque", "traditional cookware",
            "premium cookware", "tri-ply", "stainless steel", "cooking", "utensil",
        ],
    ),
    (
        MAIN_CATEGORIES["HOUSEHOLD"],
        [
            "household", "bathroom", "toilet", "shaving", "razor", "soap", "dental", "oral care",
            "hotel amenities", "guest", "toiletries", "shower cap", "disposable slipper",
            "naphthalene", "comb", "sewing kit", "shoe shiner", "laundry bag", "urinal screen",
            "deodorizer", "artificial toilet", "toilet seat", "wc band",
        ],
    ),
    (
        MAIN_CATEGORIES["PLASTICWARE"],
        [
            "bucket", "mug", "basket", "rack", "storage", "container", "bin", "dustbin", "drum",
            "crate", "plastic", "tub", "basin", "donga", "bowl", "plate", "tray", "thermoware",
            "fridge bottle", "water bottle", "chair", "bench", "patla",
        ],
    ),
]

# Consulted only when no keyword rule matched; keyed on the source file name
FILE_CATEGORY_FALLBACKS: List[Tuple[List[str], str]] = [
    (["metal pen", "dyna"], MAIN_CATEGORIES["METAL_PEN"]),
    (["kitchen", "ojas"], MAIN_CATEGORIES["KITCHENWARE"]),
    (["household"], MAIN_CATEGORIES["HOUSEHOLD"]),
    (["saran", "plastic"], MAIN_CATEGORIES["PLASTICWARE"]),
]

SUBCATEGORY_MAPPING: List[Tuple[str, str]] = [
    # Metal Pen
    ("astral series", "Astral Series"),
    ("vertex series", "Vertex Series"),
    ("premium series", "Premium Series"),
    ("classic series", "Classic Series"),
    # Kitchenware
    ("pressure cooker", "Pressure Cookers"),
    ("gas stove", "Gas Stoves"),
    ("dinner set", "Dinner Sets"),
    ("premium cookware", "Premium Cookware"),
    ("traditional cookware", "Traditional Cookware"),
    ("cookware", "Cookware"),
    # Household
    ("bathroom set", "Bathroom Accessories"),
    ("shaving kit", "Shaving & Grooming"),
    ("hotel amenities", "Hotel Amenities"),
    ("guest toiletries", "Guest Toiletries"),
    ("dental care", "Dental & Oral Care"),
    # Plasticware
    ("water bucket", "Water Buckets"),
    ("storage container", "Storage Containers"),
    ("industrial crate", "Industrial Crates"),
    ("fridge bottle", "Fridge Bottles"),
    ("dustbin", "Dustbins & Waste Management"),
    ("basket", "Baskets & Racks"),
    ("chair", "Chairs & Furniture"),
]

# Seed data for the admin category list
DEFAULT_CATEGORIES: List[Dict[str, str]] = [
    {"name": "Metal Pen", "description": "Premium metal writing instruments", "icon": "pen"},
    {"name": "Kitchenware", "description": "Cookware, stoves and kitchen sets", "icon": "utensils"},
    {"name": "Household", "description": "Bathroom, hotel amenities and daily care", "icon": "home"},
    {"name": "Plasticware", "description": "Buckets, crates, containers and furniture", "icon": "box"},
    {"name": "Other", "description": "Everything else", "icon": "tag"},
]


# =============================================================================
# Persistence
# =============================================================================

STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sqlite")
STORE_DB_PATH = os.getenv("STORE_DB_PATH", str(PROJECT_ROOT / "data" / "store.db"))
PRODUCTS_STORAGE_KEY = "shivaya_products_csv"
CATEGORIES_STORAGE_KEY = "shivaya_categories_csv"

S3_BUCKET = os.getenv("S3_BUCKET", "product-data")
S3_PREFIX = os.getenv("S3_PREFIX", "")
AWS_REGION = os.getenv("AWS_REGION", "us-east-1")
