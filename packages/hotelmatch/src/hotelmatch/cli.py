"""CLI for hotel mapping: bulk import, review queue, statistics and export."""

import argparse
import json

import pandas as pd
import structlog

from hotelmatch.config import load_config
from hotelmatch.errors import HotelMatchError
from hotelmatch.io import read_table, write_export
from hotelmatch.logging import LOG_FORMATS, configure_logging
from hotelmatch.service import MappingService


def _build_service(args: argparse.Namespace) -> MappingService:
    config = load_config(db_path=args.db)
    structlog.get_logger().info("service_open", db_path=config.db_path)
    return MappingService.from_config(config)


def cmd_import_masters(args: argparse.Namespace) -> None:
    service = _build_service(args)
    rows = read_table(args.file)
    result = service.import_master_records(rows)

    print(f"Imported {len(result.masters)} master hotels from {args.file}")
    _print_errors(result.errors)


def cmd_import_suppliers(args: argparse.Namespace) -> None:
    service = _build_service(args)
    rows = read_table(args.file)
    result = service.import_supplier_batch(rows, supplier_code=args.supplier)

    print(f"Imported {result.imported} supplier hotels ({result.failed} failed)")
    parts = [f"{action}={count}" for action, count in sorted(result.count_by_action().items())]
    if parts:
        print(f"Actions: {', '.join(parts)}")
    _print_matcher_stats(service)
    _print_errors(result.errors)


def _print_errors(errors: list) -> None:
    if not errors:
        return
    print(f"\n=== Errors ({len(errors)}) ===")
    for e in errors:
        label = f" [{e.supplier_hotel_id}]" if e.supplier_hotel_id else ""
        print(f"  row {e.index + 1}{label}: {e.error}")


def _print_matcher_stats(service: MappingService) -> None:
    s = service.matcher.stats
    print("\n--- Statistics ---")
    print(f"Suppliers matched: {s.suppliers}")
    print(f"Comparisons: {s.comparisons}")
    print(f"Below reject floor: {s.below_reject_floor}")
    print(f"No candidates: {s.no_candidates}")


def cmd_reviews(args: argparse.Namespace) -> None:
    service = _build_service(args)
    reviews = service.list_pending_reviews(
        supplier_code=args.supplier,
        country_code=args.country,
        limit=args.limit,
        offset=args.offset,
    )
    if not reviews:
        print("No supplier hotels pending review.")
        return

    rows = [
        {
            "id": r.supplier.id,
            "supplier_code": r.supplier.supplier_code,
            "supplier_hotel_id": r.supplier.supplier_hotel_id,
            "hotel_name": r.supplier.hotel_name,
            "city": r.supplier.city,
            "country": r.supplier.country_code,
            "candidates": r.candidate_count,
        }
        for r in reviews
    ]
    print(f"=== Pending reviews ({len(rows)}) ===")
    print(pd.DataFrame(rows).to_string(index=False))

    if args.show:
        for r in reviews:
            print(f"\n{r.supplier.hotel_name} ({r.supplier.supplier_code}/{r.supplier.supplier_hotel_id})")
            for c in service.get_potential_matches(r.supplier.id):
                print(
                    f"  {c.potential_match.match_score:.4f}  #{c.master.id} {c.master.hotel_name}"
                    f" - {c.master.city or ''}"
                )


def cmd_stats(args: argparse.Namespace) -> None:
    service = _build_service(args)
    stats = service.get_mapping_statistics()

    if args.json:
        print(json.dumps(stats, indent=2))
        return

    print(f"Suppliers: {stats['total_suppliers']}")
    print(f"Active master hotels: {stats['total_master_hotels']}")
    print(f"Pending reviews: {stats['pending_reviews']}")
    if stats["by_status"]:
        print("\n--- By status ---")
        for status, count in sorted(stats["by_status"].items()):
            print(f"  {status}: {count}")
    if stats["by_supplier"]:
        print("\n--- By supplier ---")
        print(pd.DataFrame(stats["by_supplier"]).to_string(index=False))


def cmd_export(args: argparse.Namespace) -> None:
    service = _build_service(args)
    rows = service.export_mappings(supplier_code=args.supplier, status=args.status)
    count = write_export(rows, args.output)
    print(f"Exported {count} mappings -> {args.output}")


def cmd_serve(args: argparse.Namespace) -> None:
    """Run the HTTP API."""
    import uvicorn

    from hotelmatch.server import create_app

    service = _build_service(args)
    structlog.get_logger().info("server_start", host=args.host, port=args.port)
    uvicorn.run(create_app(service), host=args.host, port=args.port, log_level="warning")


def main() -> None:
    # Parent parser with global options (inherited by all subcommands)
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Set logging level (default: INFO)",
    )
    parent_parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        default=None,
        help="Log output format (default: $HOTELMATCH_LOG_FORMAT or console)",
    )
    parent_parser.add_argument(
        "--db",
        default=None,
        help="SQLite database path (default: $HOTELMATCH_DB_PATH or hotelmatch.db)",
    )

    parser = argparse.ArgumentParser(
        description="Hotel supplier-to-master mapping CLI",
        parents=[parent_parser],
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    masters_parser = subparsers.add_parser("import-masters", parents=[parent_parser], help="Import master hotels from CSV/XLSX")
    masters_parser.add_argument("file", help="Path to CSV or XLSX file")
    masters_parser.set_defaults(func=cmd_import_masters)

    suppliers_parser = subparsers.add_parser("import-suppliers", parents=[parent_parser], help="Import and match supplier hotels")
    suppliers_parser.add_argument("file", help="Path to CSV or XLSX file")
    suppliers_parser.add_argument("--supplier", help="Supplier code (overrides a supplier_code column)")
    suppliers_parser.set_defaults(func=cmd_import_suppliers)

    reviews_parser = subparsers.add_parser("reviews", parents=[parent_parser], help="List supplier hotels pending review")
    reviews_parser.add_argument("--supplier", help="Filter by supplier code")
    reviews_parser.add_argument("--country", help="Filter by country code")
    reviews_parser.add_argument("--limit", type=int, default=50, help="Page size (default: 50)")
    reviews_parser.add_argument("--offset", type=int, default=0, help="Page offset")
    reviews_parser.add_argument("--show", action="store_true", help="Display candidates for each hotel")
    reviews_parser.set_defaults(func=cmd_reviews)

    stats_parser = subparsers.add_parser("stats", parents=[parent_parser], help="Show mapping statistics")
    stats_parser.add_argument("--json", action="store_true", help="Print statistics as JSON")
    stats_parser.set_defaults(func=cmd_stats)

    export_parser = subparsers.add_parser("export", parents=[parent_parser], help="Export mappings to CSV/XLSX")
    export_parser.add_argument("--output", default="hotel_mappings.csv", help="Output file path")
    export_parser.add_argument("--supplier", help="Filter by supplier code")
    export_parser.add_argument("--status", help="Filter by mapping status")
    export_parser.set_defaults(func=cmd_export)

    serve_parser = subparsers.add_parser("serve", parents=[parent_parser], help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address (default: 127.0.0.1)")
    serve_parser.add_argument("--port", type=int, default=8765, help="Server port (default: 8765)")
    serve_parser.set_defaults(func=cmd_serve)

    args = parser.parse_args()
    configure_logging(args.log_level, args.log_format)
    try:
        args.func(args)
    except HotelMatchError as e:
        parser.exit(1, f"error: {e}\n")


if __name__ == "__main__":
    main()
