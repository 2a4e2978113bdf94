# main.py

"""Entry point for the pebblescan command-line tool."""

import argparse
import asyncio
import logging
import sys

from pebblescan.config.logging_config import setup_logging

logger = logging.getLogger("pebblescan.main")


def _add_output_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-o",
        "--output",
        default=None,
        dest="output_dir",
        help="Custom output directory (default: results/).",
    )


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="pebblescan",
        description="Marketplace listing extraction and sale tracking.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show info-level log messages on stderr.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    scrape = sub.add_parser("scrape", help="Extract one product page.")
    scrape.add_argument("url", help="Product page URL.")
    scrape.add_argument(
        "--dom",
        action="store_true",
        default=False,
        help="Parse into an element tree and run DOM strategies too.",
    )
    _add_output_options(scrape)

    sales = sub.add_parser("sales", help="Collect entries from sale pages.")
    sales.add_argument(
        "urls",
        nargs="*",
        help="Sale page URLs (default: the ACON3D on-sale categories).",
    )
    _add_output_options(sales)

    match = sub.add_parser(
        "match", help="Match tracked items against a sales snapshot."
    )
    match.add_argument("tracked", help="JSON file of tracked items.")
    match.add_argument(
        "--sales",
        default=None,
        help="Sales snapshot JSON (default: latest in results/).",
    )
    match.add_argument(
        "--all",
        action="store_true",
        default=False,
        dest="all_items",
        help="Match every tracked item, not just ACON3D wishlist ones.",
    )
    match.add_argument(
        "--csv",
        action="store_true",
        default=False,
        dest="export_csv",
        help="Also export matches to CSV.",
    )
    _add_output_options(match)

    check = sub.add_parser(
        "check-prices", help="Re-scrape tracked items for price changes."
    )
    check.add_argument("tracked", help="JSON file of tracked items.")
    check.add_argument(
        "--write",
        action="store_true",
        default=False,
        dest="write_back",
        help="Write updated items back to the input file.",
    )
    _add_output_options(check)

    health = sub.add_parser("health", help="Probe the sale pages.")
    health.add_argument("urls", nargs="*", help="Pages to probe.")
    return parser


def _dispatch(args: argparse.Namespace) -> int:
    """Run the selected subcommand and return its exit code."""
    from pebblescan.cli import runner

    if args.command == "scrape":
        return asyncio.run(
            runner.cli_scrape(
                url=args.url,
                dom=args.dom,
                output_format=args.output_format,
                output_dir=args.output_dir,
            )
        )
    if args.command == "sales":
        return asyncio.run(
            runner.cli_sales(
                urls=args.urls,
                output_format=args.output_format,
                output_dir=args.output_dir,
            )
        )
    if args.command == "match":
        return asyncio.run(
            runner.cli_match(
                tracked_path=args.tracked,
                sales_path=args.sales,
                all_items=args.all_items,
                output_format=args.output_format,
                output_dir=args.output_dir,
                export_csv=args.export_csv,
            )
        )
    if args.command == "check-prices":
        return asyncio.run(
            runner.cli_check_prices(
                tracked_path=args.tracked,
                write_back=args.write_back,
                output_format=args.output_format,
                output_dir=args.output_dir,
            )
        )
    return asyncio.run(runner.run_health_check(args.urls))


def main() -> None:
    """Parse arguments, set up logging and run a subcommand."""
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("pebblescan %s starting, log file: %s", args.command, log_file)

    try:
        exit_code = _dispatch(args)
    except Exception:
        logger.critical("Fatal error in %s", args.command, exc_info=True)
        raise
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
