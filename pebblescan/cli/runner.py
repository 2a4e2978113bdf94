# pebblescan/cli/runner.py

"""Headless CLI commands: scrape, sales, match, check-prices, health."""

import json
import logging
import sys
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

from pebblescan.config.settings import Settings
from pebblescan.filters.record_matcher import (
    match_wishlist_to_sales,
    sale_watch_candidates,
)
from pebblescan.models.listing import ExtractedListing
from pebblescan.models.sale_stub import MatchResult, SaleStub
from pebblescan.models.tracked_item import TrackedItem
from pebblescan.services.health_checker import HealthChecker
from pebblescan.services.listing_scraper import ListingScraper
from pebblescan.services.page_fetcher import PageFetcher
from pebblescan.services.price_checker import PriceChecker, PriceCheckReport
from pebblescan.services.sale_aggregator import SaleAggregator
from pebblescan.storage.file_manager import FileManager

logger = logging.getLogger("pebblescan.cli")

# Stderr console for status messages so stdout stays clean for JSON
_err = Console(stderr=True)


def _dump_json(data: Any) -> None:
    json.dump(data, sys.stdout, ensure_ascii=False, indent=2)
    sys.stdout.write("\n")


def _format_price(price: float | None, currency: str) -> str:
    return f"{currency}{price:,.2f}" if price else "N/A"


def _file_manager(output_dir: str | None) -> FileManager:
    return FileManager(Path(output_dir) if output_dir else None)


def _load_tracked(
    file_manager: FileManager, path: str,
) -> list[TrackedItem]:
    """Load tracked items or exit with a readable error."""
    try:
        return file_manager.load_tracked_items(Path(path))
    except (OSError, ValueError) as exc:
        logger.error("Could not load %s: %s", path, exc, exc_info=True)
        _err.print(f"[red]Could not load tracked items from {path}: {exc}[/red]")
        raise SystemExit(1) from exc


def _print_listing(listing: ExtractedListing) -> None:
    table = Table(title="Listing", show_header=False, title_style="bold cyan")
    table.add_column("Field", style="bold")
    table.add_column("Value", overflow="fold")
    table.add_row("Title", listing.title)
    table.add_row("Platform", listing.platform or "—")
    table.add_row("Creator", listing.creator or "—")
    table.add_row("Price", _format_price(listing.price, listing.currency))
    table.add_row(
        "Original",
        _format_price(listing.original_price, listing.currency),
    )
    table.add_row(
        "On sale", "[green]yes[/green]" if listing.is_on_sale else "no"
    )
    table.add_row("Image", listing.thumbnail_url or "—")
    table.add_row("URL", listing.url)
    Console().print(table)


def _print_sales(stubs: list[SaleStub]) -> None:
    table = Table(title="On Sale", show_lines=True, title_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", max_width=60)
    table.add_column("URL", overflow="fold", style="dim")
    for idx, stub in enumerate(stubs, 1):
        table.add_row(str(idx), stub.title[:60], stub.url)
    Console().print(table)


def _print_matches(matches: list[MatchResult]) -> None:
    table = Table(
        title="Wishlist Items On Sale",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("#", style="dim", width=4)
    table.add_column("Tracked", max_width=45)
    table.add_column("Sale entry", max_width=45)
    table.add_column("Match", style="magenta")
    table.add_column("Price", justify="right", style="green")
    for idx, m in enumerate(matches, 1):
        strategy = (
            f"{m.strategy} ({m.score:.2f})"
            if m.strategy == "fuzzy"
            else m.strategy
        )
        table.add_row(
            str(idx),
            m.tracked.title[:45],
            m.stub.title[:45],
            strategy,
            _format_price(m.tracked.current_price, m.tracked.currency),
        )
    Console().print(table)


def _print_report(report: PriceCheckReport) -> None:
    table = Table(title="Price Check", show_lines=True, title_style="bold cyan")
    table.add_column("Title", max_width=50)
    table.add_column("Status", justify="center")
    table.add_column("Old", justify="right")
    table.add_column("New", justify="right", style="green")
    table.add_column("Notes", style="dim")
    styles = {"sale": "green", "updated": "cyan", "error": "red"}
    for d in report.details:
        style = styles.get(d.status, "dim")
        table.add_row(
            d.title[:50],
            f"[{style}]{d.status}[/{style}]",
            f"{d.old_price:,.2f}" if d.old_price is not None else "—",
            f"{d.new_price:,.2f}" if d.new_price is not None else "—",
            d.message,
        )
    Console().print(table)


async def cli_scrape(
    url: str,
    dom: bool,
    output_format: str,
    output_dir: str | None,
) -> int:
    """Extract one product page and return an exit code (0=ok, 1=fail)."""
    _err.print(f"[bold]Scraping:[/bold] {url}")
    async with PageFetcher() as fetcher:
        listing = await ListingScraper(fetcher).scrape(url, dom=dom)

    try:
        path = _file_manager(output_dir).save_listing(listing)
        _err.print(f"[dim]Saved → {path}[/dim]")
    except OSError as exc:
        logger.error("Save failed: %s", exc, exc_info=True)
        _err.print(f"[red]Save failed: {exc}[/red]")

    if output_format == "table":
        _print_listing(listing)
    else:
        _dump_json(listing.to_dict())

    if listing.price is None:
        _err.print("[yellow]No price found on the page.[/yellow]")
        return 1
    return 0


async def cli_sales(
    urls: list[str] | None,
    output_format: str,
    output_dir: str | None,
) -> int:
    """Aggregate sale pages, save a snapshot and print it."""
    pages = urls or Settings.SALE_PAGES
    _err.print(f"[bold]Scanning {len(pages)} sale page(s)...[/bold]")
    async with PageFetcher() as fetcher:
        stubs = await SaleAggregator(fetcher).aggregate(pages)

    if not stubs:
        _err.print("[yellow]No sale entries found.[/yellow]")
        return 1

    _err.print(f"[green]✓ {len(stubs)} unique sale entries[/green]")
    try:
        path = _file_manager(output_dir).save_sales(stubs)
        _err.print(f"[dim]Saved → {path}[/dim]")
    except OSError as exc:
        logger.error("Save failed: %s", exc, exc_info=True)
        _err.print(f"[red]Save failed: {exc}[/red]")

    if output_format == "table":
        _print_sales(stubs)
    else:
        _dump_json([s.to_dict() for s in stubs])
    return 0


async def _sales_for_matching(
    file_manager: FileManager, sales_path: str | None,
) -> list[SaleStub]:
    """Sales from an explicit file, the latest snapshot, or a live scan."""
    path = Path(sales_path) if sales_path else file_manager.latest_sales_file()
    if path is not None:
        try:
            return file_manager.load_sales(path)
        except (OSError, ValueError) as exc:
            logger.error("Could not load %s: %s", path, exc, exc_info=True)
            _err.print(f"[red]Could not load sales from {path}: {exc}[/red]")
            raise SystemExit(1) from exc

    _err.print("[dim]No sales snapshot found, scanning sale pages...[/dim]")
    async with PageFetcher() as fetcher:
        stubs = await SaleAggregator(fetcher).aggregate()
    if stubs:
        file_manager.save_sales(stubs)
    return stubs


async def cli_match(
    tracked_path: str,
    sales_path: str | None,
    all_items: bool,
    output_format: str,
    output_dir: str | None,
    export_csv: bool = False,
) -> int:
    """Match tracked wishlist items against sale entries."""
    file_manager = _file_manager(output_dir)
    tracked = _load_tracked(file_manager, tracked_path)
    if not all_items:
        tracked = sale_watch_candidates(tracked)
    stubs = await _sales_for_matching(file_manager, sales_path)

    if not tracked or not stubs:
        _err.print("[yellow]Nothing to match.[/yellow]")
        return 1

    matches = match_wishlist_to_sales(tracked, stubs)
    _err.print(
        f"[green]✓ {len(matches)} of {len(tracked)} tracked items "
        f"are on sale[/green]"
    )
    if matches:
        path = file_manager.save_matches(matches)
        _err.print(f"[dim]Saved → {path}[/dim]")
        if export_csv:
            csv_path = file_manager.export_matches_csv(matches)
            _err.print(f"[dim]Exported → {csv_path}[/dim]")

    if output_format == "table":
        _print_matches(matches)
    else:
        _dump_json([m.to_dict() for m in matches])
    return 0 if matches else 1


async def cli_check_prices(
    tracked_path: str,
    write_back: bool,
    output_format: str,
    output_dir: str | None,
) -> int:
    """Re-check every tracked price; optionally rewrite the input file."""
    file_manager = _file_manager(output_dir)
    items = _load_tracked(file_manager, tracked_path)
    _err.print(f"[bold]Checking {len(items)} tracked item(s)...[/bold]")

    async with PageFetcher() as fetcher:
        report = await PriceChecker(ListingScraper(fetcher)).check(items)

    _err.print(
        f"[green]✓ {report.checked} checked, {report.updated} updated, "
        f"{report.on_sale} on sale[/green]"
        + (f" [red]{report.errors} errors[/red]" if report.errors else "")
    )
    if write_back and report.updated:
        file_manager.save_tracked_items(items, Path(tracked_path))
        _err.print(f"[dim]Updated {tracked_path}[/dim]")

    if output_format == "table":
        _print_report(report)
    else:
        _dump_json(report.to_dict())
    return 1 if report.checked and report.errors == report.checked else 0


async def run_health_check(urls: list[str] | None = None) -> int:
    """Run a connectivity health check on the sale pages."""
    _err.print("[bold]Running sale page health check...[/bold]")
    checker = HealthChecker(urls or None)
    results = await checker.check_all()

    table = Table(
        title="Sale Page Health Check",
        show_lines=True,
        title_style="bold cyan",
    )
    table.add_column("Page", style="bold")
    table.add_column("Status", justify="center")
    table.add_column("Latency", justify="right")
    table.add_column("Notes", style="dim")

    any_down = False
    for r in results:
        if r.status == "ok":
            status = "[green]✅ OK[/green]"
        elif r.status == "slow":
            status = "[yellow]⚠️  SLOW[/yellow]"
        else:
            status = "[red]❌ DOWN[/red]"
            any_down = True

        latency = f"{r.latency_ms:.0f}ms" if r.latency_ms > 0 else "—"
        table.add_row(r.source_id, status, latency, r.message)

    Console().print(table)
    return 1 if any_down else 0
