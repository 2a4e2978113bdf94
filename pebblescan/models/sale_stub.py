# pebblescan/models/sale_stub.py

"""Lightweight sale-page entry and wishlist match models."""

from dataclasses import dataclass
from typing import Any

from pebblescan.models.tracked_item import TrackedItem


@dataclass
class SaleStub:
    """A product seen on a sale listing page: no price, URL is the key."""

    title: str
    url: str
    thumbnail_url: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Serialise to the stored sales-snapshot shape."""
        return {
            "title": self.title,
            "url": self.url,
            "thumbnailUrl": self.thumbnail_url,
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "SaleStub":
        """Build a stub from a sales-snapshot record."""
        return cls(
            title=str(raw.get("title") or ""),
            url=str(raw.get("url") or ""),
            thumbnail_url=str(raw.get("thumbnailUrl") or ""),
        )


@dataclass
class MatchResult:
    """One tracked item paired with the sale stub it was linked to."""

    tracked: TrackedItem
    stub: SaleStub
    strategy: str  # "url", "title" or "fuzzy"
    score: float = 1.0

    def to_dict(self) -> dict[str, Any]:
        """Serialise for JSON output."""
        return {
            "asset": self.tracked.to_dict(),
            "saleItem": self.stub.to_dict(),
            "strategy": self.strategy,
            "score": round(self.score, 4),
        }
