"""Merge every known supplier catalog into one normalized product list.

Each file goes through extraction and normalization independently (plus
classification in enhanced mode). A file that cannot be read or parsed is
recorded in the error list and contributes no products; the rest of the
merge continues.
"""

import json
import os
import re
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set, Tuple

import requests

from catalog.classifier import CategoryClassifier, default_classifier
from catalog.config import (
    COMBINED_CSV_NAME,
    DATA_FILES,
    REQUEST_TIMEOUT,
    CatalogFile,
)
from catalog.csv_codec import encode_products, write_csv_file
from catalog.errors import SourceError
from catalog.extractor import extract_records
from catalog.logging_config import CatalogEvent, get_logger, log_catalog_event
from catalog.models import Product
from catalog.normalizer import normalize_record

__all__ = [
    "FileResult",
    "MergeResult",
    "CatalogMerger",
    "load_catalog_json",
    "discover_catalog_files",
    "sort_products",
    "write_csv_outputs",
]

logger = get_logger(__name__)


@dataclass
class FileResult:
    file: CatalogFile
    products: List[Product] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class MergeResult:
    products: List[Product] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    files: List[FileResult] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return bool(self.products)

    def to_csv(self) -> str:
        return encode_products(self.products)

    def summary(self, top_subcategories: int = 20) -> Dict[str, Any]:
        """Product counts per category and for the most common subcategories."""
        categories = Counter(p.category for p in self.products)
        subcategories = Counter(f"{p.category} > {p.subcategory}" for p in self.products)
        return {
            "total_products": len(self.products),
            "categories": dict(categories.most_common()),
            "subcategories": dict(subcategories.most_common(top_subcategories)),
            "errors": list(self.errors),
        }


def _is_url(path: str) -> bool:
    return path.startswith(("http://", "https://"))


def _file_stem(file: CatalogFile) -> str:
    name = file.path.rstrip("/").split("/")[-1]
    return name[:-5] if name.lower().endswith(".json") else name


def _slug(value: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-") or "source"


def load_catalog_json(file: CatalogFile, timeout: int = REQUEST_TIMEOUT) -> Any:
    """Read and parse one catalog file from disk or over HTTP.

    Raises:
        SourceError: The file is missing, unreachable, empty or not valid JSON.
    """
    if _is_url(file.path):
        try:
            response = requests.get(file.path, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise SourceError(file.name, f"HTTP error: {e}") from e
        content = response.text
    else:
        try:
            with open(file.path, "r", encoding="utf-8") as f:
                content = f.read()
        except OSError as e:
            raise SourceError(file.name, f"Cannot read {file.path}: {e}") from e

    if not content.strip():
        raise SourceError(file.name, "Empty file")
    try:
        return json.loads(content)
    except json.JSONDecodeError as e:
        raise SourceError(file.name, f"Invalid JSON: {e}") from e


def discover_catalog_files(dirs: Iterable[str], variant: str = "enhanced") -> List[CatalogFile]:
    """Find ``*.json`` catalogs in the given directories.

    The same file copied into several directories is listed once; identity
    is (file name, size).
    """
    files: List[CatalogFile] = []
    seen: Set[Tuple[str, int]] = set()

    for directory in dirs:
        if not os.path.isdir(directory):
            logger.warning("Directory not found: %s", directory)
            continue
        found = 0
        for path in sorted(Path(directory).glob("*.json")):
            identity = (path.name, path.stat().st_size)
            if identity in seen:
                continue
            seen.add(identity)
            files.append(CatalogFile(name=path.stem, path=str(path), variant=variant))
            found += 1
        logger.info("Found %d unique files in %s", found, directory)

    return files


def sort_products(products: List[Product]) -> List[Product]:
    """Order by (category, subcategory, name); comparison is case-sensitive."""
    return sorted(products, key=lambda p: (p.category or "", p.subcategory or "", p.name or ""))


class CatalogMerger:
    """Runs extraction and normalization over a fixed set of catalog files.

    ``mode`` is the default variant for files that do not set their own;
    "enhanced" adds keyword classification and a ``source_ref`` column
    (``<source-slug>:<local-seq>``) identifying where each product came from.
    """

    def __init__(
        self,
        files: Optional[Sequence[CatalogFile]] = None,
        mode: Optional[str] = None,
        classifier: Optional[CategoryClassifier] = None,
        timeout: int = REQUEST_TIMEOUT,
    ):
        self.files = list(files if files is not None else DATA_FILES)
        self.mode = mode
        self.classifier = classifier or default_classifier()
        self.timeout = timeout

    def _variant(self, file: CatalogFile) -> str:
        return self.mode or file.variant

    def _identity(self, file: CatalogFile) -> Tuple[str, Any]:
        if not _is_url(file.path) and os.path.exists(file.path):
            return (os.path.basename(file.path), os.path.getsize(file.path))
        return (file.path, None)

    def process_file(self, file: CatalogFile) -> FileResult:
        """Extract and normalize a single file, capturing any failure."""
        variant = self._variant(file)
        stem = _file_stem(file)
        try:
            data = load_catalog_json(file, timeout=self.timeout)
            records = extract_records(data, stem)
        except SourceError as e:
            logger.error("Error processing %s: %s", file.name, e)
            return FileResult(file=file, error=str(e))
        except Exception as e:  # contained per file
            logger.exception("Unexpected error extracting %s", file.name)
            return FileResult(file=file, error=f"{file.name}: {e}")

        products: List[Product] = []
        source = _slug(stem)
        for record in records:
            product = normalize_record(record, variant, stem, self.classifier)
            if product is None:
                continue
            if variant == "enhanced":
                product.extra["source_ref"] = f"{source}:{len(products) + 1}"
            products.append(product)

        log_catalog_event(
            CatalogEvent.FILE_PROCESSED,
            {
                "message": f"Extracted {len(products)} products from {file.name}",
                "file": file.name,
                "variant": variant,
                "records": len(records),
                "products": len(products),
            },
        )
        return FileResult(file=file, products=products)

    def merge(self) -> MergeResult:
        """Process every file and return the sorted, id-assigned union."""
        result = MergeResult()
        seen: Set[Tuple[str, Any]] = set()

        for file in self.files:
            identity = self._identity(file)
            if identity in seen:
                logger.info("Skipping duplicate catalog file: %s", file.path)
                continue
            seen.add(identity)

            file_result = self.process_file(file)
            result.files.append(file_result)
            if file_result.error:
                result.errors.append(file_result.error)
                continue
            result.products.extend(file_result.products)

        result.products = sort_products(result.products)
        for index, product in enumerate(result.products, start=1):
            product.id = index

        log_catalog_event(
            CatalogEvent.MERGE_COMPLETED,
            {
                "message": f"Merged {len(result.products)} products from {len(result.files)} files",
                "total_products": len(result.products),
                "files": len(result.files),
                "errors": len(result.errors),
            },
        )
        return result


def write_csv_outputs(
    result: MergeResult,
    output_dir: str,
    individual: bool = True,
    combined_name: str = COMBINED_CSV_NAME,
) -> List[str]:
    """Write the combined CSV and, optionally, one CSV per source file.

    Returns:
        Paths of the files written.
    """
    written: List[str] = []
    if individual:
        for file_result in result.files:
            if not file_result.products:
                continue
            path = os.path.join(output_dir, f"{_file_stem(file_result.file)}-categorized.csv")
            written.append(write_csv_file(path, sort_products(file_result.products)))

    if result.products:
        written.append(write_csv_file(os.path.join(output_dir, combined_name), result.products))
    return written
