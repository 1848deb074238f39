"""Command-line interface for catalog conversion."""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Add parent directory to path to allow imports when run as script
sys.path.insert(0, str(Path(__file__).parent.parent))

__all__ = ["main", "parse_args", "print_summary"]

from catalog.config import CATALOG_DIRS, DATA_FILES, OUTPUT_DIR, CatalogFile
from catalog.logging_config import setup_logging
from catalog.merger import CatalogMerger, MergeResult, discover_catalog_files, write_csv_outputs
from catalog.storage import create_storage
from catalog.store import ProductStore


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Convert supplier JSON catalogs into a normalized product CSV",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Convert the configured catalog files (standard normalization)
  python -m catalog.cli

  # Categorized conversion of every JSON file found in the catalog directories
  python -m catalog.cli --mode enhanced --discover

  # Convert, then load the result into the storefront's product store
  python -m catalog.cli --mode enhanced --load-store

  # Show category breakdown only, write nothing
  python -m catalog.cli --stats --dry-run
        """,
    )
    parser.add_argument(
        "--mode",
        choices=["standard", "enhanced"],
        default=None,
        help="standard: field mapping only; enhanced: keyword categories and synthesized fields "
        "(default: each file's configured variant)",
    )
    parser.add_argument(
        "--files",
        nargs="+",
        help="Catalog JSON files to convert (default: configured catalog files)",
    )
    parser.add_argument(
        "--discover",
        action="store_true",
        help="Scan --dirs for *.json catalogs instead of using the configured list",
    )
    parser.add_argument(
        "--dirs",
        nargs="+",
        default=CATALOG_DIRS,
        help="Directories scanned by --discover",
    )
    parser.add_argument(
        "--output-dir",
        default=OUTPUT_DIR,
        help=f"Directory for CSV output (default: {OUTPUT_DIR})",
    )
    parser.add_argument(
        "--no-individual",
        action="store_true",
        help="Only write the combined CSV, not one CSV per source file",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Convert without writing any CSV files",
    )
    parser.add_argument(
        "--load-store",
        action="store_true",
        help="Replace the product store contents with the converted catalog",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print category and subcategory breakdown",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def _select_files(args: argparse.Namespace) -> List[CatalogFile]:
    if args.files:
        return [CatalogFile(name=Path(p).stem, path=p, variant=args.mode or "standard") for p in args.files]
    if args.discover:
        return discover_catalog_files(args.dirs, variant=args.mode or "enhanced")
    return list(DATA_FILES)


def print_summary(result: MergeResult, show_breakdown: bool = False) -> None:
    summary = result.summary()
    print("\n=== Conversion Complete ===")
    print(f"Total products converted: {summary['total_products']}")
    print(f"Files processed: {len(result.files)}")

    if result.errors:
        print(f"\nErrors ({len(result.errors)}):")
        for error in result.errors:
            print(f"  - {error}")

    if show_breakdown:
        print("\n=== MAIN CATEGORIES ===")
        for category, count in summary["categories"].items():
            print(f"{category}: {count} products")
        print("\n=== TOP SUBCATEGORIES ===")
        for subcategory, count in summary["subcategories"].items():
            print(f"{subcategory}: {count} products")


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(level=logging.DEBUG if args.verbose else logging.INFO)

    files = _select_files(args)
    if not files:
        print("No JSON files found to convert.")
        return 1

    merger = CatalogMerger(files, mode=args.mode)
    result = merger.merge()
    print_summary(result, show_breakdown=args.stats)

    if not result.products:
        print("No products found in any files.")
        return 1

    if not args.dry_run:
        written = write_csv_outputs(result, args.output_dir, individual=not args.no_individual)
        print(f"\nWrote {len(written)} CSV file(s) to {args.output_dir}")

    if args.load_store:
        store = ProductStore(create_storage(), merger=merger)
        store.import_csv(result.to_csv(), replace_existing=True)
        print(f"Loaded {len(result.products)} products into the product store")

    return 0


if __name__ == "__main__":
    sys.exit(main())
