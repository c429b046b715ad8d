"""
Command-line front end for one aggregated travel search.

Usage:
    python -m travel_sourcing --destination Bangkok --kind lodging --date-out 2026-03-01 --date-return 2026-03-04
    travel-sourcing --origin ATH --destination BKK --kind flight --date-out 2026-03-01
    travel-sourcing --destination Lisbon --currency EUR --max-price 150 --mock
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from travel_sourcing.adapters import build_fallback_registry, build_registry_from_settings
from travel_sourcing.config import SourcingSettings
from travel_sourcing.exceptions import ValidationError
from travel_sourcing.observability import setup_logging
from travel_sourcing.service import TravelAggregator


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="travel-sourcing", description="Search travel offers across configured providers"
    )
    parser.add_argument("--destination", required=True, help="City, region or airport code")
    parser.add_argument("--origin", help="Origin for flights and ground transport")
    parser.add_argument(
        "--kind",
        default="all",
        choices=["flight", "lodging", "transport", "experience", "all"],
        help="Offer kind to search (default: all)",
    )
    parser.add_argument("--date-out", help="Outbound / check-in date (YYYY-MM-DD)")
    parser.add_argument("--date-return", help="Return / check-out date (YYYY-MM-DD)")
    parser.add_argument("--party-size", type=int, default=1)
    parser.add_argument("--flexible-dates", action="store_true")
    parser.add_argument("--currency", help="Budget currency, also the currency prices are reported in")
    parser.add_argument("--min-price", type=float)
    parser.add_argument("--max-price", type=float)
    parser.add_argument("--mock", action="store_true", help="Always include the mock provider")
    parser.add_argument("--env-file", type=Path, help="Load environment variables from this .env file")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Overrides LOG_LEVEL",
    )
    return parser


def query_from_args(args: argparse.Namespace) -> dict:
    query = {
        "kind": args.kind,
        "origin": args.origin,
        "destination": args.destination,
        "date_out": args.date_out,
        "date_return": args.date_return,
        "party_size": args.party_size,
        "flexible_dates": args.flexible_dates,
    }
    if args.currency or args.min_price is not None or args.max_price is not None:
        query["budget"] = {
            "currency": args.currency or "USD",
            "min": args.min_price,
            "max": args.max_price,
        }
    return query


async def run(args: argparse.Namespace) -> dict:
    settings = SourcingSettings.from_env()
    if args.mock:
        settings = replace(settings, use_mock_search="true")
    aggregator = TravelAggregator(
        build_registry_from_settings(settings),
        settings=settings,
        fallback_registry=build_fallback_registry(settings),
    )
    results = await aggregator.search(query_from_args(args))
    return results.model_dump(mode="json")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv(dotenv_path=args.env_file, override=False)
    setup_logging(args.log_level)
    try:
        payload = asyncio.run(run(args))
    except ValidationError as e:
        print(json.dumps(e.to_dict(), indent=2), file=sys.stderr)
        return 2
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
