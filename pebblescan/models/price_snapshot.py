# pebblescan/models/price_snapshot.py

"""Single price observation appended to a tracked item's history."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class PricePoint:
    """A price seen for a tracked item at one point in time."""

    price: float
    currency: str
    checked_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serialise with an ISO-8601 timestamp."""
        return {
            "price": self.price,
            "currency": self.currency,
            "checkedAt": self.checked_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> "PricePoint":
        """Parse a stored history entry."""
        return cls(
            price=float(raw["price"]),
            currency=str(raw.get("currency") or "$"),
            checked_at=datetime.fromisoformat(str(raw["checkedAt"])),
        )
