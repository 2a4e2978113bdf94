# pebblescan/models/tracked_item.py

"""Wishlist record as handed in by the external record store."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pebblescan.models.listing import ExtractedListing
from pebblescan.models.price_snapshot import PricePoint

logger = logging.getLogger("pebblescan.models")


def _optional_float(value: Any) -> float | None:
    """Coerce a stored number, treating empty values as missing."""
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _optional_datetime(value: Any) -> datetime | None:
    """Parse an ISO timestamp, treating bad or empty values as missing."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value))
    except ValueError:
        return None


@dataclass
class TrackedItem:
    """A user's stored wishlist/purchase entry."""

    url: str
    title: str
    current_price: float | None = None
    currency: str = "$"
    is_on_sale: bool = False
    original_price: float | None = None
    platform: str = ""
    id: str = ""
    status: str = "wishlist"
    lowest_price: float | None = None
    price_history: list[PricePoint] = field(
        default_factory=lambda: list[PricePoint]()
    )
    last_price_check: datetime | None = None

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "TrackedItem":
        """Parse a store record; unknown keys are ignored."""
        history_raw: object = raw.get("priceHistory") or []
        history: list[PricePoint] = []
        if isinstance(history_raw, list):
            for entry in history_raw:
                if not isinstance(entry, dict):
                    continue
                try:
                    history.append(PricePoint.from_dict(entry))
                except (KeyError, TypeError, ValueError):
                    logger.debug("Skipping malformed history entry %r", entry)
        return cls(
            url=str(raw.get("url") or ""),
            title=str(raw.get("title") or ""),
            current_price=_optional_float(raw.get("currentPrice")),
            currency=str(raw.get("currency") or "$"),
            is_on_sale=bool(raw.get("isOnSale", False)),
            original_price=_optional_float(raw.get("originalPrice")),
            platform=str(raw.get("platform") or ""),
            id=str(raw.get("id") or ""),
            status=str(raw.get("status") or "wishlist"),
            lowest_price=_optional_float(raw.get("lowestPrice")),
            price_history=history,
            last_price_check=_optional_datetime(raw.get("lastPriceCheck")),
        )

    @classmethod
    def from_listing(cls, listing: ExtractedListing) -> "TrackedItem":
        """Start tracking a freshly extracted listing."""
        return cls(
            url=listing.url,
            title=listing.title,
            current_price=listing.price,
            currency=listing.currency,
            is_on_sale=listing.is_on_sale,
            original_price=listing.original_price,
            platform=listing.platform,
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to the store record shape."""
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "currentPrice": self.current_price,
            "currency": self.currency,
            "isOnSale": self.is_on_sale,
            "originalPrice": self.original_price,
            "platform": self.platform,
            "status": self.status,
            "lowestPrice": self.lowest_price,
            "priceHistory": [p.to_dict() for p in self.price_history],
            "lastPriceCheck": (
                self.last_price_check.isoformat()
                if self.last_price_check
                else None
            ),
        }
