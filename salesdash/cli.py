#!/usr/bin/env python
"""
Command line entry point.

Usage:
    salesdash summary --query "year=2024&provider=DHL"
    salesdash summary --year all --country France --no-boundaries
    salesdash providers
"""

import argparse
import json
import sys
from dataclasses import asdict
from datetime import date, datetime
from enum import Enum
from typing import Any, List, Optional

from salesdash.config import get_settings
from salesdash.config.logging import configure_logging, get_logger
from salesdash.filters import ALL, ALL_YEARS, FilterState
from salesdash.ingestion import DatasetLoadError, load_dataset
from salesdash.session import DashboardSession

logger = get_logger(__name__)


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(_jsonable(k)): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


def _snapshot_payload(session: DashboardSession, include_details: bool) -> dict:
    snapshot = session.snapshot()
    calendar = []
    for day in snapshot.calendar:
        entry = {
            "date": day.date.isoformat(),
            "total_revenue": day.total_revenue,
            "order_count": day.order_count,
            "is_aggregate": day.is_aggregate,
        }
        if include_details:
            entry["detail_records"] = [asdict(r) for r in day.detail_records]
        calendar.append(entry)

    flow = {
        "nodes": [
            {
                "stage": node.stage,
                "name": node.name,
                "orders_total": node.orders_total,
                "shipping_cost_total": node.shipping_cost_total,
                "return_counts": node.return_counts,
                "priority_counts": node.priority_counts,
            }
            for node in snapshot.flow.nodes
        ],
        "edges": [
            {
                "source": edge.source.name,
                "target": edge.target.name,
                "orders_total": edge.orders_total,
                "shipping_cost_total": edge.shipping_cost_total,
                "average_shipping_cost": edge.average_shipping_cost,
                "return_counts": edge.return_counts,
                "priority_counts": edge.priority_counts,
            }
            for edge in snapshot.flow.edges
        ],
    }

    return _jsonable({
        "filters": snapshot.filters.model_dump(),
        "query": session.query_string,
        "yearly": [asdict(agg) for agg in snapshot.yearly],
        "quantities": [asdict(q) for q in snapshot.quantities],
        "calendar": calendar,
        "flow": flow,
    })


def _year_arg(value: str):
    if value == ALL_YEARS:
        return ALL_YEARS
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a year or '{ALL_YEARS}', got {value!r}")


def _filters_from_args(args: argparse.Namespace) -> FilterState:
    filters = FilterState.from_query(args.query or "")
    if args.year is not None:
        filters = filters.with_year(args.year)
    if args.provider is not None:
        filters = filters.with_provider(args.provider or ALL)
    if args.country is not None:
        filters = filters.with_country(args.country or ALL)
    return filters


def cmd_summary(args: argparse.Namespace) -> int:
    dataset = load_dataset(
        sales_path=args.sales,
        boundaries_path=args.boundaries,
        with_boundaries=not args.no_boundaries,
    )
    session = DashboardSession(
        dataset.records,
        filters=_filters_from_args(args),
        boundaries=dataset.boundaries,
    )
    payload = _snapshot_payload(session, include_details=args.details)
    payload["dropped_rows"] = dataset.normalization.dropped_rows
    payload["validation"] = dataset.validation.status.value
    json.dump(payload, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def cmd_providers(args: argparse.Namespace) -> int:
    dataset = load_dataset(sales_path=args.sales, with_boundaries=False)
    session = DashboardSession(dataset.records)
    for provider in session.providers():
        print(provider)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="salesdash", description="Sales dashboard aggregates")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--sales", default=None, help="Sales CSV path (default: DATA_SALES_CSV_PATH)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    summary = subparsers.add_parser("summary", help="Print every aggregate as JSON")
    summary.add_argument("--query", default="", help="Filter query string, e.g. 'year=2024&provider=DHL'")
    summary.add_argument("--year", type=_year_arg, default=None, help="Year or 'all'")
    summary.add_argument("--provider", default=None, help="Shipment provider or 'All'")
    summary.add_argument("--country", default=None, help="Country or 'All'")
    summary.add_argument("--boundaries", default=None, help="Boundaries GeoJSON path")
    summary.add_argument("--no-boundaries", action="store_true", help="Do not load boundaries")
    summary.add_argument("--details", action="store_true", help="Include calendar detail records")
    summary.set_defaults(func=cmd_summary)

    providers = subparsers.add_parser("providers", help="List shipment providers")
    providers.set_defaults(func=cmd_providers)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    logger.debug("Starting", command=args.command, app=get_settings().app_name)

    try:
        return args.func(args)
    except DatasetLoadError as e:
        logger.error("Dataset load failed", path=e.path, reason=e.reason)
        return 1


if __name__ == "__main__":
    sys.exit(main())
