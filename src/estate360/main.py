"""Command-line entry point: serve the API or list stored properties."""

import argparse
import asyncio
import logging
import sys

from estate360.config import Settings
from estate360.db import PropertyRepository
from estate360.filters.ordering import VALID_SORT_OPTIONS, apply_sort
from estate360.filters.price import parse_price
from estate360.logging import configure_logging, get_logger
from estate360.models import PropertyRecord, SearchCriteria
from estate360.utils.formatting import format_area, format_indian_price

logger = get_logger(__name__)


def format_listing(record: PropertyRecord) -> str:
    """Multi-line plain-text summary of a listing."""
    amount = parse_price(record.price)
    price = format_indian_price(amount) if amount is not None else (record.price or "-")
    lines = [
        f"[{record.category.value}] {record.title}",
        f"  Price: {price} | Type: {record.property_type or '-'} | "
        f"Area: {format_area(record.specs, record.property_type)}",
        f"  Location: {record.location or '-'}",
    ]
    if record.bedroom_count is not None:
        lines.append(f"  Bedrooms: {record.bedroom_count} | Bathrooms: {record.specs.bathrooms}")
    if record.featured:
        order = record.featured_order if record.featured_order is not None else "-"
        lines.append(f"  Featured (order {order})")
    lines.append(f"  ID: {record.id}")
    return "\n".join(lines)


async def run_list(
    settings: Settings,
    criteria: SearchCriteria,
    *,
    sort: str | None = None,
    featured: bool = False,
) -> list[PropertyRecord]:
    """Print stored listings matching criteria and return them.

    Args:
        settings: Application settings.
        criteria: Filters to apply.
        sort: Optional ordering (featured or newest).
        featured: Only show featured listings in homepage order.
    """
    repository = PropertyRepository(settings.build_store(), settings.build_upload_manager())
    try:
        if featured:
            records = await repository.get_featured()
        else:
            records = apply_sort(await repository.search(criteria), sort)
    finally:
        await repository.close()

    print(f"\n{'=' * 60}")
    print(f"{len(records)} properties")
    print(f"{'=' * 60}\n")

    for record in records:
        print(format_listing(record))
        print()

    return records


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Estate360 - property listings service")
    parser.add_argument(
        "--serve",
        action="store_true",
        help="Start the web API server",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print stored properties matching the filter flags",
    )
    parser.add_argument("--category", help="buy or lease")
    parser.add_argument("--location", help="Town, district or region name")
    parser.add_argument("--property-type", help="e.g. House, Apartment, Plot")
    parser.add_argument("--bhk", help="Bedroom count to match exactly")
    parser.add_argument("--price-min", help="Minimum price in rupees")
    parser.add_argument("--price-max", help="Maximum price in rupees")
    parser.add_argument(
        "--sort",
        choices=VALID_SORT_OPTIONS,
        default=None,
        help="Order results by featured position or newest first",
    )
    parser.add_argument(
        "--featured",
        action="store_true",
        help="With --list: only featured properties in homepage order",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug-level logging for troubleshooting",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings()
    except Exception as e:
        print(f"Error: Failed to load settings. {e}")
        print("Settings are read from ESTATE360_* environment variables or a .env file.")
        sys.exit(1)

    configure_logging(
        json_output=settings.json_logs,
        level=logging.DEBUG if args.debug or settings.debug else logging.INFO,
    )

    if args.serve:
        import uvicorn

        from estate360.web.app import create_app

        logger.info("starting_estate360", host=settings.web_host, port=settings.web_port)
        app = create_app(settings)
        uvicorn.run(app, host=settings.web_host, port=settings.web_port, log_level="info")
    elif args.list:
        criteria = SearchCriteria.model_validate(
            {
                "category": args.category,
                "location": args.location,
                "property_type": args.property_type,
                "bhk_option": args.bhk,
                "price_min": args.price_min,
                "price_max": args.price_max,
            }
        )
        asyncio.run(run_list(settings, criteria, sort=args.sort, featured=args.featured))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
