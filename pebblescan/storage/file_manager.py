# pebblescan/storage/file_manager.py

"""Saves sale snapshots, matches and listings to disk, and loads inputs."""

import csv
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

from pebblescan.config.settings import Settings
from pebblescan.models.listing import ExtractedListing
from pebblescan.models.sale_stub import MatchResult, SaleStub
from pebblescan.models.tracked_item import TrackedItem

logger = logging.getLogger("pebblescan.storage")


class FileManager:
    """Reads and writes the JSON/CSV files the CLI works with."""

    def __init__(self, results_dir: Path | None = None) -> None:
        self.results_dir: Path = results_dir or Settings.RESULTS_DIR
        self.results_dir.mkdir(parents=True, exist_ok=True)
        logger.debug("FileManager initialised, results_dir=%s", self.results_dir)

    def _timestamped(self, prefix: str, suffix: str) -> Path:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return self.results_dir / f"{prefix}_{timestamp}.{suffix}"

    def _write_json(self, filepath: Path, data: Any) -> None:
        with open(filepath, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)

    def save_sales(self, stubs: list[SaleStub]) -> Path:
        """Save a sales snapshot with its timestamp and count."""
        filepath = self._timestamped("sales", "json")
        self._write_json(
            filepath,
            {
                "lastUpdated": datetime.now().isoformat(),
                "count": len(stubs),
                "items": [s.to_dict() for s in stubs],
            },
        )
        logger.info("Saved %d sale entries to %s", len(stubs), filepath)
        return filepath

    def save_matches(self, matches: list[MatchResult]) -> Path:
        """Save wishlist/sale matches to a timestamped JSON file."""
        filepath = self._timestamped("matches", "json")
        self._write_json(filepath, [m.to_dict() for m in matches])
        logger.info("Saved %d matches to %s", len(matches), filepath)
        return filepath

    def save_listing(self, listing: ExtractedListing) -> Path:
        """Save one extracted listing."""
        filepath = self._timestamped("listing", "json")
        self._write_json(filepath, listing.to_dict())
        logger.info("Saved listing '%s' to %s", listing.title, filepath)
        return filepath

    def save_tracked_items(
        self, items: list[TrackedItem], filepath: Path,
    ) -> Path:
        """Write tracked items back, e.g. after a price check."""
        self._write_json(filepath, [i.to_dict() for i in items])
        logger.info("Wrote %d tracked items to %s", len(items), filepath)
        return filepath

    @staticmethod
    def _read_json(filepath: Path) -> Any:
        with open(filepath, encoding="utf-8") as f:
            return json.load(f)

    def load_tracked_items(self, filepath: Path) -> list[TrackedItem]:
        """Load tracked items from a JSON list (or ``{"items": [...]}``)."""
        data = self._read_json(filepath)
        if isinstance(data, dict):
            data = data.get("items", [])
        if not isinstance(data, list):
            raise ValueError(f"{filepath} does not hold a list of items")
        items = [TrackedItem.from_dict(raw) for raw in data if isinstance(raw, dict)]
        logger.info("Loaded %d tracked items from %s", len(items), filepath)
        return items

    def load_sales(self, filepath: Path) -> list[SaleStub]:
        """Load stubs from a snapshot written by :meth:`save_sales`."""
        data = self._read_json(filepath)
        if isinstance(data, dict):
            data = data.get("items", [])
        if not isinstance(data, list):
            raise ValueError(f"{filepath} does not hold a sales snapshot")
        stubs = [SaleStub.from_dict(raw) for raw in data if isinstance(raw, dict)]
        logger.info("Loaded %d sale entries from %s", len(stubs), filepath)
        return stubs

    def latest_sales_file(self) -> Path | None:
        """Most recent sales snapshot in the results directory."""
        snapshots = sorted(self.results_dir.glob("sales_*.json"))
        return snapshots[-1] if snapshots else None

    def export_matches_csv(self, matches: list[MatchResult]) -> Path:
        """Export matches to a human-readable CSV file."""
        filepath = self._timestamped("export_matches", "csv")
        with open(filepath, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(
                ["Tracked Title", "Sale Title", "Strategy", "Score",
                 "Current Price", "Currency", "Tracked URL", "Sale URL"]
            )
            for m in matches:
                writer.writerow(
                    [
                        m.tracked.title,
                        m.stub.title,
                        m.strategy,
                        f"{m.score:.2f}",
                        m.tracked.current_price,
                        m.tracked.currency,
                        m.tracked.url,
                        m.stub.url,
                    ]
                )
        logger.info("Exported %d matches to %s", len(matches), filepath)
        return filepath
