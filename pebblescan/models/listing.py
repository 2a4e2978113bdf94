# pebblescan/models/listing.py

"""Extracted marketplace listing and sale-detection result."""

from dataclasses import dataclass
from typing import Any

from pebblescan.config.settings import Settings


@dataclass
class SaleInfo:
    """Outcome of sale detection; the empty value means "not on sale"."""

    original_price: float | None = None
    is_on_sale: bool = False


@dataclass
class ExtractedListing:
    """Best-effort metadata for a single marketplace product page.

    Every field except ``url`` and ``title`` may be empty; callers
    treat a sparse listing as "fill in manually", not as an error.
    """

    url: str
    title: str = ""
    thumbnail_url: str = ""
    price: float | None = None
    currency: str = Settings.DEFAULT_CURRENCY
    original_price: float | None = None
    is_on_sale: bool = False
    platform: str = ""
    creator: str = ""

    def apply_sale(self, sale: SaleInfo) -> None:
        """Copy detector output onto the listing, enforcing price order."""
        self.is_on_sale = sale.is_on_sale
        self.original_price = sale.original_price
        if self.original_price is not None and (
            self.price is None or self.original_price <= self.price
        ):
            self.original_price = None
            self.is_on_sale = False

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the JSON record shape used by the dashboard."""
        return {
            "url": self.url,
            "title": self.title,
            "thumbnailUrl": self.thumbnail_url,
            "price": self.price,
            "currency": self.currency,
            "originalPrice": self.original_price,
            "isOnSale": self.is_on_sale,
            "platform": self.platform,
            "creator": self.creator,
        }
