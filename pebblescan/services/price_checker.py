# pebblescan/services/price_checker.py

"""Re-scrape tracked items and fold price changes into their history."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pebblescan.config.settings import Settings
from pebblescan.models.price_snapshot import PricePoint
from pebblescan.models.tracked_item import TrackedItem
from pebblescan.services.listing_scraper import ListingScraper

logger = logging.getLogger("pebblescan.services")


@dataclass
class PriceCheckDetail:
    """Outcome for one tracked item."""

    id: str
    title: str
    status: str  # "sale", "updated", "unchanged" or "error"
    message: str
    old_price: float | None = None
    new_price: float | None = None
    discount: int | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "status": self.status,
            "message": self.message,
        }
        if self.old_price is not None:
            data["oldPrice"] = self.old_price
        if self.new_price is not None:
            data["newPrice"] = self.new_price
        if self.discount is not None:
            data["discount"] = self.discount
        return data


@dataclass
class PriceCheckReport:
    """Counters and per-item details for one price-check run."""

    checked: int = 0
    updated: int = 0
    on_sale: int = 0
    errors: int = 0
    details: list[PriceCheckDetail] = field(
        default_factory=lambda: list[PriceCheckDetail]()
    )

    def to_dict(self) -> dict[str, Any]:
        return {
            "checked": self.checked,
            "updated": self.updated,
            "onSale": self.on_sale,
            "errors": self.errors,
            "details": [d.to_dict() for d in self.details],
        }


def apply_price_change(
    item: TrackedItem, new_price: float, now: datetime,
) -> bool:
    """Record *new_price* on *item* if it moved beyond the tolerance.

    Returns True when the item changed.  ``last_price_check`` is
    stamped either way.
    """
    item.last_price_check = now
    old_price = item.current_price
    if old_price is None:
        return False
    if abs(new_price - old_price) <= Settings.PRICE_CHANGE_TOLERANCE:
        return False

    item.price_history.append(
        PricePoint(
            price=new_price,
            currency=item.currency or Settings.DEFAULT_CURRENCY,
            checked_at=now,
        )
    )
    lowest = item.lowest_price or old_price
    item.lowest_price = min(lowest, new_price)
    item.is_on_sale = new_price < old_price
    if not item.original_price and new_price < old_price:
        # First observed drop: the pre-drop price becomes the reference
        item.original_price = old_price
    item.current_price = new_price
    return True


class PriceChecker:
    """Sequentially re-checks tracked items against their live pages."""

    def __init__(
        self,
        scraper: ListingScraper,
        delay: float | None = None,
    ) -> None:
        self.scraper = scraper
        self.delay = Settings.PRICE_CHECK_DELAY if delay is None else delay

    async def _check_one(
        self, item: TrackedItem, report: PriceCheckReport,
    ) -> None:
        old_price = item.current_price
        listing = await self.scraper.scrape(item.url)
        if not listing.price:
            logger.warning("Could not fetch price for '%s'", item.title)
            report.errors += 1
            report.details.append(
                PriceCheckDetail(
                    id=item.id,
                    title=item.title,
                    status="error",
                    message="Could not fetch current price",
                )
            )
            return

        new_price = listing.price
        logger.info(
            "%s: %s%s -> %s%s",
            item.title,
            item.currency,
            old_price,
            item.currency,
            new_price,
        )
        if not apply_price_change(item, new_price, datetime.now()):
            report.details.append(
                PriceCheckDetail(
                    id=item.id,
                    title=item.title,
                    status="unchanged",
                    message="Price unchanged",
                    old_price=old_price,
                )
            )
            return

        report.updated += 1
        if item.is_on_sale and old_price:
            report.on_sale += 1
            discount = round((1 - new_price / old_price) * 100)
            report.details.append(
                PriceCheckDetail(
                    id=item.id,
                    title=item.title,
                    status="sale",
                    message=f"On sale! {discount}% off",
                    old_price=old_price,
                    new_price=new_price,
                    discount=discount,
                )
            )
        else:
            report.details.append(
                PriceCheckDetail(
                    id=item.id,
                    title=item.title,
                    status="updated",
                    message="Price updated",
                    old_price=old_price,
                    new_price=new_price,
                )
            )

    async def check(self, items: list[TrackedItem]) -> PriceCheckReport:
        """Check every item with a URL and a current price, in order.

        Items are updated in place; persisting them is up to the caller.
        """
        report = PriceCheckReport()
        first = True
        for item in items:
            if not item.url or not item.current_price:
                logger.debug("Skipping '%s' (no price to track)", item.title)
                continue
            if not first and self.delay > 0:
                await asyncio.sleep(self.delay)
            first = False

            report.checked += 1
            try:
                await self._check_one(item, report)
            except Exception as exc:
                logger.error(
                    "Error checking '%s': %s", item.title, exc, exc_info=True
                )
                report.errors += 1
                report.details.append(
                    PriceCheckDetail(
                        id=item.id,
                        title=item.title,
                        status="error",
                        message=str(exc) or "Unknown error",
                    )
                )

        logger.info(
            "Price check complete: %d checked, %d updated, %d on sale, "
            "%d errors",
            report.checked,
            report.updated,
            report.on_sale,
            report.errors,
        )
        return report
