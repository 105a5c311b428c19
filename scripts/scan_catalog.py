"""
Scan the store catalog and print duplicate or missing keys.

Usage:
    python scripts/scan_catalog.py                      # duplicate SKUs
    python scripts/scan_catalog.py --field barcode
    python scripts/scan_catalog.py --missing --search tile
"""

import argparse
import sys
from pathlib import Path

# Add backend to path
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

from exceptions import AppError
from models.variant import KeyField
from services.catalog_service import CatalogService


def print_duplicates(service: CatalogService, field: KeyField, limit: int) -> None:
    report = service.find_duplicates(field)

    print(f"Products scanned: {report.total_products_scanned}")
    print(f"Variants scanned: {report.total_variants_scanned}")
    print(f"Unique {field.value}s:   {report.total_unique_keys}")
    print(f"Missing {field.value}:   {report.variants_missing_key}")
    if report.error:
        print(f"\n{report.error}")
        return

    print(f"\nDUPLICATE {field.value.upper()}S ({len(report.duplicates)} groups):")
    for group in report.duplicates[:limit]:
        print(f"  {group.key!r} x{group.count}")
        for v in group.variants:
            print(f"    - {v.product_title} / {v.variant_title} ({v.variant_id})")


def print_missing(service: CatalogService, field: KeyField, search: str, limit: int) -> None:
    report = service.find_missing(field, search=search or None)

    print(f"Products scanned: {report.total_products_scanned}")
    print(f"Variants scanned: {report.total_variants_scanned}")
    if report.error:
        print(f"\n{report.error}")
        return

    print(f"\nMISSING {field.value.upper()} ({len(report.missing)} variants):")
    for v in report.missing[:limit]:
        print(f"  - {v.product_title} / {v.variant_title} ({v.variant_id})")


def main():
    parser = argparse.ArgumentParser(
        description="Scan every product and report duplicate or missing SKUs / barcodes."
    )
    parser.add_argument(
        "--field",
        choices=[KeyField.SKU.value, KeyField.BARCODE.value],
        default=KeyField.SKU.value,
        help="Key field to check (default: sku)",
    )
    parser.add_argument(
        "--missing",
        action="store_true",
        help="List variants without the field instead of duplicates",
    )
    parser.add_argument(
        "--search",
        default="",
        help="Filter missing variants by product, variant, SKU or barcode",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=50,
        help="Maximum groups / variants to print",
    )
    args = parser.parse_args()

    field = KeyField(args.field)
    try:
        service = CatalogService()
        if args.missing:
            print_missing(service, field, args.search, args.limit)
        else:
            print_duplicates(service, field, args.limit)
    except AppError as e:
        print(f"ERROR [{e.code}]: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
