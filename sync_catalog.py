"""Command-line runner for storefront/supplier catalog sync.

This script decodes the storefront export and the supplier feed, reconciles
them, and writes the combined batch payload as JSON under `output/` by default.
Sending the batch to the storefront is left to the caller.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from catalog_sync.config import SyncSettings, default_settings, load_settings
from catalog_sync.dump import DumpSink, JsonDumpSink, NullDumpSink
from catalog_sync.events import EventRecorder, LoggingEventRecorder, configure_logging
from catalog_sync.models import DataIssue
from catalog_sync.parser import parse_both_catalogs
from catalog_sync.reconcile import reconcile_catalogs

DEFAULT_STORE_PRODUCTS = Path("data/store_products.json")
DEFAULT_SUPPLIER_FEED = Path("data/supplier_feed.xml")
DEFAULT_OUTPUT = Path("output/batch_payload.json")


def _issue_to_dict(issue: DataIssue) -> dict[str, str | None]:
    """Serialize a `DataIssue` into a JSON-friendly dictionary."""

    return {
        "code": issue.code,
        "field": issue.field,
        "message": issue.message,
        "record": issue.record,
    }


def build_report(
    *,
    store_products_path: Path,
    supplier_feed_path: Path,
    settings: SyncSettings,
    recorder: EventRecorder,
    dump_sink: DumpSink,
) -> dict[str, Any]:
    """Decode both catalogs, reconcile them and return the run report."""

    combined = parse_both_catalogs(store_products_path, supplier_feed_path)
    for issue in combined.all_issues():
        recorder.record(logging.DEBUG, "data_issue", **_issue_to_dict(issue))

    result = reconcile_catalogs(
        combined.storefront.products,
        combined.supplier.offers,
        config=settings.transform,
        category_id=settings.category_id,
        recorder=recorder,
        dump_sink=dump_sink,
    )

    return {
        "metadata": {
            "generated_at_utc": datetime.now(timezone.utc).isoformat(),
            "store_products_path": str(store_products_path),
            "supplier_feed_path": str(supplier_feed_path),
            "category_id": settings.category_id,
            "markup": settings.transform.markup,
            "price_range": {
                "min": settings.transform.price_range.min,
                "max": settings.transform.price_range.max,
            },
            "update_precedence": "outdated-item fields override out-of-stock fields for the same id",
        },
        "summary": {
            "store_product_count": combined.storefront.total_records,
            "supplier_offer_count": combined.supplier.total_records,
            "normalized_offer_count": len(result.normalized_offers),
            "new_item_count": len(result.new_items["create"]),
            "outofstock_count": len(result.out_of_stock["update"]),
            "outdated_count": len(result.outdated["update"]),
            "create_count": len(result.batch["create"]),
            "update_count": len(result.batch["update"]),
            "data_issue_count": len(combined.all_issues()),
        },
        "duplicate_skus": result.duplicate_skus,
        "batch": result.batch,
    }


def write_payload(payload: Any, *, output_path: Path) -> None:
    """Write a payload as JSON to disk."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments for a sync run."""

    parser = argparse.ArgumentParser(description="Reconcile a storefront catalog with a supplier feed.")
    parser.add_argument(
        "--store-products",
        type=Path,
        default=DEFAULT_STORE_PRODUCTS,
        help="Path to storefront products JSON export",
    )
    parser.add_argument(
        "--supplier-feed",
        type=Path,
        default=DEFAULT_SUPPLIER_FEED,
        help="Path to supplier YML/XML feed",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to JSON settings file")
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Output batch payload JSON path")
    parser.add_argument("--report", type=Path, default=None, help="Optional path for the full run report JSON")
    parser.add_argument("--no-dump", action="store_true", help="Do not dump intermediate payloads")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Override the configured log level",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for command-line execution."""

    args = _parse_args(argv)
    try:
        settings = load_settings(args.config) if args.config is not None else default_settings()
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    if args.log_level is not None:
        settings = replace(settings, log_level=args.log_level)

    try:
        logger = configure_logging(
            settings.log_level,
            settings.log_file,
            retention_days=settings.log_retention_days,
        )
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    recorder = LoggingEventRecorder(logger)
    dump_sink: DumpSink = NullDumpSink() if args.no_dump else JsonDumpSink(settings.dump_dir, recorder=recorder)

    try:
        report = build_report(
            store_products_path=args.store_products,
            supplier_feed_path=args.supplier_feed,
            settings=settings,
            recorder=recorder,
            dump_sink=dump_sink,
        )
        write_payload(report["batch"], output_path=args.output)
        if args.report is not None:
            write_payload(report, output_path=args.report)
    except (OSError, ValueError) as exc:
        logger.error("sync_failed %s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    summary = report["summary"]
    print(
        f"Wrote batch payload: {args.output} "
        f"(create={summary['create_count']}, update={summary['update_count']})"
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
